"""Browser state: tabs, their histories, and the actions a UI can take."""

import logging
from dataclasses import dataclass, field

from .core import RelativeResolutionFailure
from .navigation import Completed, NavigationEngine, NeedsInput, TabSlot
from .tab import Tab
from .urls import normalize_entry, resolve_reference, with_query

logger = logging.getLogger(__name__)


@dataclass
class TabHistory:
    """History of one tab plus its in-flight navigation.

    Invariant: 0 <= cursor < len(entries).
    """

    entries: list[Tab]
    cursor: int = 0
    slot: TabSlot = field(default_factory=TabSlot)
    prompt: NeedsInput | None = None

    def __post_init__(self):
        if not self.entries:
            raise ValueError("TabHistory needs at least one entry")
        if not 0 <= self.cursor < len(self.entries):
            raise ValueError(f"cursor {self.cursor} outside history of {len(self.entries)}")

    @property
    def current(self) -> Tab:
        return self.entries[self.cursor]

    @property
    def is_loading(self) -> bool:
        return self.slot.is_loading

    @property
    def can_go_back(self) -> bool:
        return self.cursor > 0

    @property
    def can_go_forward(self) -> bool:
        return self.cursor + 1 < len(self.entries)

    def back(self) -> bool:
        if not self.can_go_back:
            return False
        self.cursor -= 1
        return True

    def forward(self) -> bool:
        if not self.can_go_forward:
            return False
        self.cursor += 1
        return True

    def push(self, tab: Tab):
        """Make tab the newest entry, dropping any forward history."""
        del self.entries[self.cursor + 1:]
        self.entries.append(tab)
        self.cursor = len(self.entries) - 1


class BrowserState:
    """All open tabs and the navigation actions the UI loop drives."""

    def __init__(self, engine: NavigationEngine):
        self.engine = engine
        self.tabs: list[TabHistory] = [TabHistory([engine.default_tab()])]
        self.active_index = 0

    @property
    def active(self) -> TabHistory:
        return self.tabs[self.active_index]

    def new_tab(self) -> int:
        """Open a new tab on the default page and make it active."""
        self.tabs.append(TabHistory([self.engine.default_tab()]))
        self.active_index = len(self.tabs) - 1
        return self.active_index

    def select(self, index: int):
        if not 0 <= index < len(self.tabs):
            raise IndexError(f"no tab {index}")
        self.active_index = index

    def navigate(self, entry: str) -> bool:
        """Navigate the active tab to address bar input."""
        url = normalize_entry(entry)
        if url is None:
            logger.info("ignoring invalid address %r", entry)
            return False
        self.engine.begin_navigation(self.active.slot, url)
        return True

    def follow(self, target: str) -> bool:
        """Navigate the active tab to a link target relative to its page."""
        try:
            url = resolve_reference(self.active.current.url, target)
        except RelativeResolutionFailure as e:
            logger.info("ignoring link: %s", e)
            return False
        self.engine.begin_navigation(self.active.slot, url)
        return True

    def reload(self):
        self.engine.begin_navigation(self.active.slot, self.active.current.url)

    def back(self) -> bool:
        return self.active.back()

    def forward(self) -> bool:
        return self.active.forward()

    def update(self) -> bool:
        """Poll every tab and apply finished navigations. Never blocks.

        Returns True if any tab changed.
        """
        changed = False
        for history in self.tabs:
            outcome = self.engine.poll(history.slot)
            if outcome is None:
                continue

            changed = True
            if isinstance(outcome, Completed):
                history.push(outcome.tab)
            else:
                history.prompt = outcome
        return changed

    def submit_input(self, text: str) -> bool:
        """Answer the active tab's input prompt by requesting url?input."""
        prompt = self.active.prompt
        if prompt is None:
            return False
        self.active.prompt = None
        self.engine.begin_navigation(self.active.slot, with_query(prompt.url, text))
        return True

    def cancel_input(self):
        self.active.prompt = None
