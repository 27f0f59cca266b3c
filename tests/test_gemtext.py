"""Tests for the gemtext parser."""

from vostok.gemtext import (
    Document,
    Heading,
    Link,
    Preformatted,
    SequenceGenerator,
    Text,
    parse,
    raw,
)


class TestHeadings:
    def test_levels(self):
        """One, two and three hashes give heading levels 1 to 3."""
        doc = parse("# One\n## Two\n### Three")
        assert doc.lines == [Heading(1, "One"), Heading(2, "Two"), Heading(3, "Three")]

    def test_strips_whitespace_after_marker(self):
        """Whitespace between the marker and the text is dropped."""
        assert parse("#    Spaced").lines == [Heading(1, "Spaced")]

    def test_no_space_after_marker(self):
        """A heading does not need a space after the marker."""
        assert parse("##Tight").lines == [Heading(2, "Tight")]

    def test_four_hashes_is_level_three(self):
        """Extra hashes stay in the heading text."""
        assert parse("#### Deep").lines == [Heading(3, "# Deep")]


class TestLinks:
    def test_target_and_label(self):
        """Target is the first token, label the rest."""
        doc = parse("=> gemini://example.org/ Example site")
        assert doc.lines == [Link("gemini://example.org/", "Example site")]

    def test_tab_separated(self):
        """Tabs separate target and label as well as spaces."""
        doc = parse("=> docs/faq.gmi\tIf you'd like to know more")
        assert doc.lines == [Link("docs/faq.gmi", "If you'd like to know more")]

    def test_without_label(self):
        """A missing label is an empty string."""
        assert parse("=>   /about").lines == [Link("/about", "")]

    def test_empty_link(self):
        """A bare marker gives an empty link rather than an error."""
        assert parse("=>").lines == [Link("", "")]

    def test_external(self):
        """Web links are flagged as external."""
        web, gem = parse("=> https://example.com web\n=> /local local").links()
        assert web.is_external
        assert not gem.is_external


class TestText:
    def test_plain_line(self):
        """A line with no markup is a single text line."""
        assert parse("plain").lines == [Text("plain")]

    def test_preserves_empty_lines(self):
        """Empty lines are kept as empty text lines."""
        assert parse("a\n\nb").lines == [Text("a"), Text(""), Text("b")]

    def test_preserves_leading_whitespace(self):
        """Text is kept exactly, including indentation."""
        assert parse("   indented  ").lines == [Text("   indented  ")]

    def test_marker_not_at_start(self):
        """Markers only count at the start of a line."""
        assert parse(" # not a heading").lines == [Text(" # not a heading")]

    def test_crlf_line_endings(self):
        """A carriage return before the newline is not part of the line."""
        assert parse("# Title\r\nbody\r\n").lines == [Heading(1, "Title"), Text("body")]

    def test_empty_input(self):
        """Empty input has no lines."""
        assert parse("").lines == []


class TestPreformatted:
    def test_block(self):
        """Lines between fences are kept verbatim with the alt text."""
        doc = parse("```python\ndef f():\n    # comment\n\n    return 1\n```\nafter")
        assert doc.lines == [
            Preformatted("python", "def f():\n    # comment\n\n    return 1"),
            Text("after"),
        ]

    def test_markup_inside_block_is_not_parsed(self):
        """Headings and links inside a block are literal text."""
        doc = parse("```\n# not a heading\n=> not a link\n```")
        assert doc.lines == [Preformatted("", "# not a heading\n=> not a link")]

    def test_closing_fence_with_trailing_text(self):
        """Any line starting with the fence closes the block."""
        doc = parse("```\ncode\n``` trailing\ntext")
        assert doc.lines == [Preformatted("", "code"), Text("text")]

    def test_unterminated_block_runs_to_end(self):
        """An unterminated block swallows the rest of the input."""
        doc = parse("intro\n```alt\nline 1\nline 2")
        assert doc.lines == [Text("intro"), Preformatted("alt", "line 1\nline 2")]

    def test_empty_block(self):
        """Two fences in a row give an empty block."""
        assert parse("```\n```").lines == [Preformatted("", "")]


class TestDocument:
    def test_example_page(self):
        """A small page parses into heading, blank line and text."""
        doc = parse("# Hello\n\nWorld\n")
        assert doc.lines == [Heading(1, "Hello"), Text(""), Text("World")]
        assert doc.first_heading() == Heading(1, "Hello")

    def test_ids_are_unique_across_documents(self):
        """Every line gets a fresh id, even in separate parses."""
        ids = SequenceGenerator()
        first = parse("a\nb", ids)
        second = parse("c\nd", ids)
        all_ids = [i for i, _ in first] + [i for i, _ in second]
        assert len(set(all_ids)) == 4

    def test_len_and_iter(self):
        """Documents behave as sequences of (id, line) pairs."""
        doc = parse("a\n# b")
        assert len(doc) == 2
        assert [line for _, line in doc] == doc.lines

    def test_empty_document(self):
        """The default document has no lines."""
        assert Document().lines == []
        assert Document().first_heading() is None


class TestRaw:
    def test_single_unprocessed_line(self):
        """Raw wrapping keeps markup characters as text."""
        body = "# not parsed\n=> nor this\n"
        assert raw(body).lines == [Text(body)]

    def test_empty(self):
        """Raw wrapping of an empty string still gives one line."""
        assert raw("").lines == [Text("")]
