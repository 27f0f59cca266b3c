"""Error taxonomy for Gemini requests."""


class GeminiError(Exception):
    """Base class for everything that can go wrong during a request."""


class UnsupportedScheme(GeminiError):
    """The URL is not a gemini URL with a host."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"Unsupported URL '{url}'")


class HostResolutionFailure(GeminiError):
    """The host name could not be resolved."""


class TlsFailure(GeminiError):
    """The TLS handshake failed or the certificate was rejected."""


class IoFailure(GeminiError):
    """Connecting, writing or reading failed."""


class InvalidEncoding(GeminiError):
    """The response is not valid UTF-8."""


class MalformedResponse(GeminiError):
    """The response header does not follow the protocol framing."""


class InvalidStatusLine(MalformedResponse):
    """The response does not start with two decimal digits."""


class InvalidStatusClass(GeminiError):
    """The status code's leading digit names no known response class."""

    def __init__(self, status: int):
        self.status = status
        super().__init__(f"Invalid status code {status:02d}")


class RelativeResolutionFailure(GeminiError):
    """A reference could not be resolved against its base URL."""


class UnimplementedClientCertificate(GeminiError):
    """The server asked for a client certificate, which is not supported."""
