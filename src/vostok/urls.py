"""URL helpers for Gemini and browser-internal pages."""

import urllib.parse
from urllib.parse import quote, urljoin, urlsplit, urlunsplit

from .core.errors import RelativeResolutionFailure
from .core.fetcher import SCHEME

ABOUT_SCHEME = "about"
NEW_TAB_URL = "about://new"


def register_scheme(scheme: str = SCHEME):
    """Teach urllib.parse to resolve relative references for a scheme.

    urljoin only resolves references for schemes listed in its module-level
    registries, so this changes process-wide state. Registering twice is a
    no-op.
    """
    for registry in (urllib.parse.uses_relative, urllib.parse.uses_netloc):
        if scheme not in registry:
            registry.append(scheme)


def scheme_of(url: str) -> str:
    return url.split(":", 1)[0].lower() if ":" in url else ""


def host_of(url: str) -> str:
    """Host part of a URL, empty when there is none or the URL is invalid."""
    try:
        return urlsplit(url).hostname or ""
    except ValueError:
        return ""


def resolve_reference(base: str, reference: str) -> str:
    """Resolve a possibly relative reference against an absolute base URL."""
    try:
        resolved = urljoin(base, reference.strip())
        parts = urlsplit(resolved)
        # port is validated lazily by urlsplit
        parts.port
    except ValueError as e:
        raise RelativeResolutionFailure(f"Cannot resolve '{reference}' against '{base}': {e}") from e

    if not parts.scheme:
        raise RelativeResolutionFailure(f"Cannot resolve '{reference}' against '{base}'")
    return resolved


def normalize_entry(text: str) -> str | None:
    """Turn address bar input into an absolute URL, or None if it is invalid.

    Input without a scheme is taken to be a Gemini address.
    """
    text = text.strip()
    if not text:
        return None
    if "://" not in text:
        text = f"{SCHEME}://{text}"

    try:
        parts = urlsplit(text)
        parts.port
    except ValueError:
        return None

    if not parts.scheme or not parts.netloc:
        return None
    return text


def with_query(url: str, text: str) -> str:
    """Attach user input to a URL as its percent-encoded query."""
    parts = urlsplit(url)
    return urlunsplit(parts._replace(query=quote(text, safe=""), fragment=""))


def display_url(url: str) -> str:
    """User-facing form of a URL: Gemini URLs lose their scheme prefix."""
    prefix = f"{SCHEME}://"
    if url.lower().startswith(prefix):
        return url[len(prefix):]
    return url
