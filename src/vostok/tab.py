"""Tab snapshots."""

from dataclasses import dataclass, field

from .gemtext import Document
from .urls import ABOUT_SCHEME, display_url as format_display_url, scheme_of

STATUS_LOCAL = 0


@dataclass
class Tab:
    """One page as shown in a tab.

    A Tab is a value: navigation builds a new one instead of changing an
    existing one. Only display_url is edited in place, by the address bar.
    """

    url: str
    title: str
    document: Document = field(default_factory=Document)
    display_url: str = ""
    status: int = STATUS_LOCAL

    @property
    def is_internal(self) -> bool:
        return scheme_of(self.url) == ABOUT_SCHEME

    def normalized(self) -> "Tab":
        """Copy with display_url derived from the URL."""
        shown = "" if self.is_internal else format_display_url(self.url)
        return Tab(
            url=self.url,
            title=self.title,
            document=self.document,
            display_url=shown,
            status=self.status,
        )
