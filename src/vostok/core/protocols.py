"""Protocol definitions and response framing for Gemini requests."""

from dataclasses import dataclass
from typing import Protocol, Union

from .errors import InvalidStatusClass, InvalidStatusLine, MalformedResponse

STATUS_INPUT = 10
STATUS_SENSITIVE_INPUT = 11


@dataclass(frozen=True)
class InputExpected:
    """1x: the server wants a line of user input."""
    prompt: str


@dataclass(frozen=True)
class Success:
    """2x: the body follows, described by a media type."""
    mimetype: str
    body: str


@dataclass(frozen=True)
class Redirect:
    """3x: the resource lives elsewhere."""
    target: str


@dataclass(frozen=True)
class TempFail:
    """4x: temporary failure."""
    message: str


@dataclass(frozen=True)
class PermFail:
    """5x: permanent failure."""
    message: str


@dataclass(frozen=True)
class CertRequired:
    """6x: a client certificate is required."""
    message: str


ResponseContent = Union[InputExpected, Success, Redirect, TempFail, PermFail, CertRequired]

STATUS_CLASSES = {
    1: InputExpected,
    2: Success,
    3: Redirect,
    4: TempFail,
    5: PermFail,
    6: CertRequired,
}


@dataclass(frozen=True)
class RawResponse:
    """Header fields split off a decoded response."""

    status: int
    meta: str
    body: str


@dataclass(frozen=True)
class Response:
    """Gemini response container."""

    status: int
    content: ResponseContent

    @property
    def is_sensitive_input(self) -> bool:
        """Whether the input requested should be masked."""
        return self.status == STATUS_SENSITIVE_INPUT


def parse_response(text: str) -> RawResponse:
    """Split a decoded response into status, meta and body.

    The header is two decimal digits, an optional single space, then the
    meta string up to the first CRLF. Everything after that CRLF is body.
    """
    code = text[:2]
    if len(code) != 2 or not all(c in "0123456789" for c in code):
        raise InvalidStatusLine(f"Invalid status line {text[:32]!r}")

    rest = text[2:]
    if rest.startswith(" "):
        rest = rest[1:]

    end = rest.find("\r\n")
    if end < 0:
        raise MalformedResponse("Response header is not terminated by CRLF")

    return RawResponse(status=int(code), meta=rest[:end], body=rest[end + 2:])


def classify(status: int, meta: str = "", body: str = "") -> Response:
    """Build a Response whose content variant is chosen by status // 10."""
    kind = STATUS_CLASSES.get(status // 10) if 0 <= status <= 99 else None
    if kind is None:
        raise InvalidStatusClass(status)

    if kind is Success:
        content = Success(mimetype=meta, body=body)
    else:
        content = kind(meta)
    return Response(status=status, content=content)


def decode_response(text: str) -> Response:
    """Parse and classify a decoded response."""
    raw = parse_response(text)
    return classify(raw.status, raw.meta, raw.body)


class Fetcher(Protocol):
    """Protocol for Gemini fetchers."""

    async def fetch(self, url: str) -> Response:
        """Fetch a URL and return the response."""
        ...
