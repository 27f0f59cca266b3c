"""Navigation engine: turns URLs into tabs off the interactive path."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Union

from .config import settings
from .core import (
    CertRequired,
    Fetcher,
    GeminiError,
    GeminiFetcher,
    InputExpected,
    InvalidStatusClass,
    MalformedResponse,
    PermFail,
    Redirect,
    RelativeResolutionFailure,
    Success,
    TempFail,
    UnimplementedClientCertificate,
    policy_for,
)
from .gemtext import Document, SequenceGenerator, parse, raw
from .tab import STATUS_LOCAL, Tab
from .templates import PageTemplates, render
from .urls import ABOUT_SCHEME, NEW_TAB_URL, display_url, host_of, resolve_reference, scheme_of

logger = logging.getLogger(__name__)

NEW_TAB_TITLE = "New Tab"


@dataclass(frozen=True)
class Completed:
    """Navigation finished with a tab to show."""
    tab: Tab


@dataclass(frozen=True)
class NeedsInput:
    """The server asked for input before it will serve the URL."""
    url: str
    prompt: str
    sensitive: bool = False


NavigationOutcome = Union[Completed, NeedsInput]


@dataclass
class TabSlot:
    """In-flight navigation state for one tab.

    Each navigation bumps the generation. A worker's result is only put in
    the mailbox if its generation is still current, so superseded workers
    run to completion and are then ignored.
    """

    generation: int = 0
    task: asyncio.Task | None = None
    mailbox: NavigationOutcome | None = field(default=None, repr=False)

    @property
    def is_loading(self) -> bool:
        return self.task is not None


class NavigationEngine:
    """Runs one navigation worker per tab slot and reports results by polling."""

    def __init__(
        self,
        fetcher: Fetcher | None = None,
        templates: PageTemplates | None = None,
        ids: SequenceGenerator | None = None,
        max_redirects: int | None = None,
        markup_mimetype: str | None = None,
    ):
        if fetcher is None:
            fetcher = GeminiFetcher(
                timeout=settings.timeout,
                default_port=settings.default_port,
                trust=policy_for(settings.trust_policy),
            )
        self.fetcher = fetcher
        self.templates = templates or PageTemplates()
        self.ids = ids or SequenceGenerator()
        self.max_redirects = max_redirects if max_redirects is not None else settings.max_redirects
        self.markup_mimetype = markup_mimetype or settings.markup_mimetype
        self._workers: set[asyncio.Task] = set()

    def default_tab(self) -> Tab:
        """The new tab page."""
        return Tab(
            url=NEW_TAB_URL,
            title=NEW_TAB_TITLE,
            document=parse(self.templates.new_tab, self.ids),
        )

    def error_tab(self, url: str, status: int, message: str) -> Tab:
        """A page describing a failed navigation, titled by the message."""
        page = render(self.templates.error, status=status, message=message)
        return Tab(
            url=url,
            title=message,
            document=parse(page, self.ids),
            status=status,
        )

    def begin_navigation(self, slot: TabSlot, url: str):
        """Start navigating a slot to url without waiting for the result.

        A navigation already running for the slot is left to finish on its
        own; its result will be discarded.
        """
        slot.generation += 1
        generation = slot.generation
        slot.mailbox = None

        task = asyncio.get_running_loop().create_task(self.navigate(url))
        self._workers.add(task)
        task.add_done_callback(lambda done: self._deliver(slot, generation, done))
        slot.task = task
        logger.debug("navigation %d started for %s", generation, url)

    def _deliver(self, slot: TabSlot, generation: int, task: asyncio.Task):
        self._workers.discard(task)
        current = generation == slot.generation

        if task.cancelled():
            if current:
                slot.task = None
            return

        error = task.exception()
        if not current:
            logger.debug("discarding result of superseded navigation %d", generation)
            return

        if error is not None:
            logger.error("navigation worker failed", exc_info=error)
            slot.task = None
            return

        slot.mailbox = task.result()

    def poll(self, slot: TabSlot) -> NavigationOutcome | None:
        """Take the finished outcome of the slot's navigation, if there is one."""
        outcome = slot.mailbox
        if outcome is None:
            return None

        slot.mailbox = None
        slot.task = None
        if isinstance(outcome, Completed):
            return Completed(outcome.tab.normalized())
        return outcome

    async def wait(self, slot: TabSlot):
        """Wait until the slot's current navigation has delivered or died."""
        while slot.task is not None and slot.mailbox is None:
            await asyncio.wait({slot.task})
            await asyncio.sleep(0)

    async def navigate(self, url: str) -> NavigationOutcome:
        """Follow url through redirects to a tab, or to a request for input."""
        if scheme_of(url) == ABOUT_SCHEME:
            return Completed(self._internal_page(url))

        start = url
        visited = {url}

        for _ in range(self.max_redirects):
            try:
                response = await self.fetcher.fetch(url)
            except GeminiError as e:
                return Completed(self.error_tab(url, STATUS_LOCAL, str(e)))

            content = response.content

            if isinstance(content, Redirect):
                try:
                    target = resolve_reference(url, content.target)
                except RelativeResolutionFailure as e:
                    return Completed(self.error_tab(url, STATUS_LOCAL, str(e)))

                if target in visited:
                    logger.warning("redirect loop at %s", target)
                    break

                logger.info("redirected from %s to %s", url, target)
                visited.add(target)
                url = target
                continue

            if isinstance(content, InputExpected):
                return NeedsInput(url=url, prompt=content.prompt, sensitive=response.is_sensitive_input)

            if isinstance(content, Success):
                return Completed(self._success_tab(url, response.status, content))

            if isinstance(content, (TempFail, PermFail)):
                return Completed(self.error_tab(url, response.status, content.message))

            if isinstance(content, CertRequired):
                error = UnimplementedClientCertificate(
                    f"Client certificates are not supported: {content.message}"
                )
                return Completed(self.error_tab(url, response.status, str(error)))

            raise InvalidStatusClass(response.status)
        else:
            logger.warning("gave up on %s after %d redirects", start, self.max_redirects)

        return Completed(self._placeholder_tab(start))

    def _internal_page(self, url: str) -> Tab:
        host = host_of(url)
        if host == "new":
            return self.default_tab()
        return self.error_tab(url, STATUS_LOCAL, f"Unknown browser page '{host}'")

    def _placeholder_tab(self, url: str) -> Tab:
        return Tab(url=url, title=display_url(url), document=Document())

    def _success_tab(self, url: str, status: int, content: Success) -> Tab:
        if not content.mimetype:
            error = MalformedResponse("Response has no media type")
            return self.error_tab(url, STATUS_LOCAL, str(error))

        base_type = content.mimetype.split(";", 1)[0].strip().lower()
        title = display_url(url)

        if base_type == self.markup_mimetype:
            document = parse(content.body, self.ids)
            heading = document.first_heading()
            if heading is not None and heading.text.lstrip("#").strip():
                title = heading.text.lstrip("#").strip()
        else:
            document = raw(content.body, self.ids)

        return Tab(url=url, title=title, document=document, status=status)
