"""Gemtext parser producing documents of typed lines."""

import itertools
import threading
from dataclasses import dataclass
from typing import Iterator, Union

PREFORMAT_FENCE = "```"
LINK_MARKER = "=>"
EXTERNAL_SCHEMES = ("http://", "https://")


@dataclass(frozen=True)
class Text:
    text: str


@dataclass(frozen=True)
class Heading:
    level: int
    text: str


@dataclass(frozen=True)
class Link:
    target: str
    label: str

    @property
    def is_external(self) -> bool:
        """Whether the target belongs to the web rather than Gemini."""
        return self.target.startswith(EXTERNAL_SCHEMES)


@dataclass(frozen=True)
class Preformatted:
    alt: str
    text: str


Line = Union[Text, Heading, Link, Preformatted]


class SequenceGenerator:
    """Hands out unique, increasing line ids.

    Ids only give lines a stable identity for rendering. They say nothing
    about the order of lines across documents.
    """

    def __init__(self, start: int = 0):
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            return next(self._counter)


_default_ids = SequenceGenerator()


@dataclass(frozen=True)
class Document:
    """Ordered sequence of (id, line) pairs."""

    entries: tuple[tuple[int, Line], ...] = ()

    def __iter__(self) -> Iterator[tuple[int, Line]]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def lines(self) -> list[Line]:
        """Lines without their ids."""
        return [line for _, line in self.entries]

    def links(self) -> list[Link]:
        """All link lines in document order."""
        return [line for line in self.lines if isinstance(line, Link)]

    def first_heading(self) -> Heading | None:
        for line in self.lines:
            if isinstance(line, Heading):
                return line
        return None


def _parse_link(rest: str) -> Link:
    rest = rest.lstrip()
    parts = rest.split(maxsplit=1)
    if not parts:
        return Link(target="", label="")
    target = parts[0]
    label = parts[1].lstrip() if len(parts) > 1 else ""
    return Link(target=target, label=label)


def _classify(line: str) -> Line:
    """Classify a line outside preformatted blocks; first match wins."""
    if line.startswith("###"):
        return Heading(3, line[3:].lstrip())
    if line.startswith("##"):
        return Heading(2, line[2:].lstrip())
    if line.startswith("#"):
        return Heading(1, line[1:].lstrip())
    if line.startswith(LINK_MARKER):
        return _parse_link(line[len(LINK_MARKER):])
    return Text(line)


def _split_lines(text: str) -> list[str]:
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def parse(text: str, ids: SequenceGenerator | None = None) -> Document:
    """Parse gemtext into a Document. Never fails.

    Lines are split on LF (a trailing CR is dropped). A line starting with
    the fence toggles a preformatted block whose alt text is the rest of the
    opening line; an unterminated block runs to the end of the input.
    """
    ids = ids or _default_ids
    entries: list[tuple[int, Line]] = []

    alt: str | None = None
    block: list[str] = []

    for line in _split_lines(text):
        if alt is not None:
            if line.startswith(PREFORMAT_FENCE):
                entries.append((ids.next(), _close_block(alt, block)))
                alt, block = None, []
            else:
                block.append(line + "\n")
            continue

        if line.startswith(PREFORMAT_FENCE):
            alt = line[len(PREFORMAT_FENCE):]
            continue

        entries.append((ids.next(), _classify(line)))

    if alt is not None:
        entries.append((ids.next(), _close_block(alt, block)))

    return Document(tuple(entries))


def _close_block(alt: str, block: list[str]) -> Preformatted:
    contents = "".join(block)
    if contents.endswith("\n"):
        contents = contents[:-1]
    return Preformatted(alt=alt, text=contents)


def raw(text: str, ids: SequenceGenerator | None = None) -> Document:
    """Wrap text as a single unprocessed text line."""
    ids = ids or _default_ids
    return Document(((ids.next(), Text(text)),))
