"""CLI interface using typer."""

import asyncio
import json
import sys
from pathlib import Path

import typer

from .browser import BrowserState
from .config import settings
from .core import (
    AcceptAll,
    GeminiError,
    GeminiFetcher,
    InputExpected,
    Redirect,
    Response,
    Success,
    policy_for,
)
from .gemtext import Document, Heading, Link, Preformatted, parse as parse_gemtext
from .logging_config import configure_logging
from .navigation import NavigationEngine

POLL_INTERVAL = 0.05

app = typer.Typer(
    name="vostok",
    help="Gemini protocol browser",
    no_args_is_help=True,
)


def _make_fetcher(insecure: bool) -> GeminiFetcher:
    return GeminiFetcher(
        timeout=settings.timeout,
        default_port=settings.default_port,
        trust=AcceptAll() if insecure else policy_for(settings.trust_policy),
    )


def _meta(response: Response) -> str:
    content = response.content
    if isinstance(content, Success):
        return content.mimetype
    if isinstance(content, InputExpected):
        return content.prompt
    if isinstance(content, Redirect):
        return content.target
    return content.message


async def _fetch(url: str, insecure: bool = False) -> dict:
    """Fetch a URL and return result as dict."""
    fetcher = _make_fetcher(insecure)
    response = await fetcher.fetch(url)
    body = response.content.body if isinstance(response.content, Success) else ""
    return {
        "url": url,
        "status": response.status,
        "meta": _meta(response),
        "body": body,
    }


def render_document(document: Document) -> tuple[list[str], list[Link]]:
    """Plain text lines for a terminal, and the links numbered in them."""
    lines: list[str] = []
    links: list[Link] = []

    for _, line in document:
        if isinstance(line, Heading):
            lines.append(typer.style(f"{'#' * line.level} {line.text}", bold=True))
        elif isinstance(line, Link):
            links.append(line)
            marker = " (web)" if line.is_external else ""
            lines.append(f"[{len(links)}] {line.label or line.target}{marker}")
        elif isinstance(line, Preformatted):
            lines.extend(line.text.split("\n"))
        else:
            lines.append(line.text)

    return lines, links


def _describe_line(line) -> str:
    if isinstance(line, Heading):
        return f"heading{line.level}: {line.text}"
    if isinstance(line, Link):
        return f"link: {line.target} {line.label}".rstrip()
    if isinstance(line, Preformatted):
        return f"preformatted[{line.alt}]: {line.text!r}"
    return f"text: {line.text}"


@app.command()
def fetch(
    url: str = typer.Argument(..., help="gemini:// URL to fetch"),
    output: str = typer.Option(None, "-o", "--output", help="Output file (JSON)"),
    insecure: bool = typer.Option(False, "--insecure", help="Accept any server certificate"),
    quiet: bool = typer.Option(False, "-q", "--quiet", help="Only output the body"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Log protocol activity"),
):
    """Send a single request and show the raw response."""
    configure_logging("DEBUG" if verbose else settings.log_level)

    try:
        result = asyncio.run(_fetch(url, insecure=insecure))
    except GeminiError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if output:
        with open(output, "w") as f:
            json.dump(result, f, indent=2, ensure_ascii=False)
        typer.echo(f"Saved to {output}")
    elif quiet:
        sys.stdout.write(result["body"])
    else:
        typer.echo(f"URL: {result['url']}")
        typer.echo(f"Status: {result['status']}")
        typer.echo(f"Meta: {result['meta']}")
        typer.echo("---")
        typer.echo(result["body"])


@app.command()
def parse(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Gemtext file"),
):
    """Show the typed lines of a gemtext file."""
    document = parse_gemtext(path.read_text(encoding="utf-8"))
    for line in document.lines:
        typer.echo(_describe_line(line))


async def _settle(state: BrowserState):
    """Poll until the active tab has stopped loading."""
    while True:
        state.update()
        if not state.active.is_loading:
            return
        await asyncio.sleep(POLL_INTERVAL)


def _show(state: BrowserState) -> list[Link]:
    history = state.active
    tab = history.current
    typer.echo(typer.style(f"== {tab.title} ==", fg="cyan"))
    if tab.display_url:
        typer.echo(tab.display_url)
    lines, links = render_document(tab.document)
    for line in lines:
        typer.echo(line)
    return links


async def _ask(state: BrowserState) -> bool:
    prompt = state.active.prompt
    if prompt is None:
        return False
    try:
        answer = await asyncio.to_thread(
            typer.prompt, prompt.prompt, default="", show_default=False, hide_input=prompt.sensitive
        )
    except typer.Abort:
        state.cancel_input()
        return False
    return state.submit_input(answer)


async def _browse(start_url: str | None, engine: NavigationEngine):
    state = BrowserState(engine)
    if start_url:
        state.navigate(start_url)

    await _settle(state)
    while await _ask(state):
        await _settle(state)
    links = _show(state)

    while True:
        try:
            command = (await asyncio.to_thread(input, "> ")).strip()
        except EOFError:
            return

        if command in ("q", "quit"):
            return
        if command == "b":
            if not state.back():
                typer.echo("Nothing to go back to")
                continue
        elif command == "f":
            if not state.forward():
                typer.echo("Nothing to go forward to")
                continue
        elif command == "r":
            state.reload()
        elif command == "t":
            state.new_tab()
        elif command == "tabs":
            for i, history in enumerate(state.tabs):
                marker = "*" if i == state.active_index else " "
                typer.echo(f"{marker} {i}: {history.current.title}")
            continue
        elif command.startswith("tab "):
            try:
                state.select(int(command[4:]))
            except (ValueError, IndexError):
                typer.echo(f"No such tab: {command[4:]}")
                continue
        elif command.isdigit():
            index = int(command) - 1
            if not 0 <= index < len(links):
                typer.echo(f"No link {command}")
                continue
            link = links[index]
            if link.is_external:
                typer.launch(link.target)
                continue
            state.follow(link.target)
        elif command:
            if not state.navigate(command):
                typer.echo(f"Invalid address: {command}")
                continue

        await _settle(state)
        while await _ask(state):
            await _settle(state)
        links = _show(state)


@app.command()
def browse(
    url: str = typer.Argument(None, help="Address to open"),
    insecure: bool = typer.Option(False, "--insecure", help="Accept any server certificate"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Log protocol activity"),
):
    """Browse Geminispace interactively.

    Enter an address, a link number, b/f to go back/forward, r to reload,
    t for a new tab, tabs to list tabs, tab N to switch, q to quit.
    """
    configure_logging("DEBUG" if verbose else settings.log_level)
    engine = NavigationEngine(fetcher=_make_fetcher(insecure))
    asyncio.run(_browse(url, engine))


@app.command()
def version():
    """Show version."""
    from . import __version__

    typer.echo(f"vostok {__version__}")


if __name__ == "__main__":
    app()
