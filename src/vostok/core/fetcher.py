"""Gemini fetcher implementation using asyncio streams and ssl."""

import asyncio
import logging
import socket
import ssl
from urllib.parse import urlsplit

from .errors import (
    HostResolutionFailure,
    InvalidEncoding,
    IoFailure,
    TlsFailure,
    UnsupportedScheme,
)
from .protocols import Response, decode_response
from .trust import CertificateTrustPolicy, PinnedByHost

SCHEME = "gemini"
DEFAULT_PORT = 1965
READ_CHUNK = 65536

logger = logging.getLogger(__name__)


def create_ssl_context() -> ssl.SSLContext:
    """TLS client context that leaves certificate trust to a policy object."""
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    context.minimum_version = ssl.TLSVersion.TLSv1_2
    # Gemini servers use self-signed certificates; trust is decided after the
    # handshake by the CertificateTrustPolicy.
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return context


async def _read_to_eof(reader: asyncio.StreamReader) -> bytes:
    chunks = []
    while True:
        try:
            chunk = await reader.read(READ_CHUNK)
        except ssl.SSLEOFError:
            # peer closed the socket without close_notify
            break
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


def _reason(error: ssl.SSLError) -> str:
    # SSLError only carries a reason when raised by the ssl module itself
    return getattr(error, "reason", None) or str(error)


class GeminiFetcher:
    """Async Gemini fetcher: one fresh TLS connection per request."""

    def __init__(
        self,
        timeout: float = 30.0,
        default_port: int = DEFAULT_PORT,
        trust: CertificateTrustPolicy | None = None,
    ):
        self.timeout = timeout
        self.default_port = default_port
        self.trust = trust if trust is not None else PinnedByHost()
        self._context = create_ssl_context()

    def address(self, url: str) -> tuple[str, int]:
        """Host and port to connect to for a gemini URL."""
        try:
            parts = urlsplit(url)
        except ValueError as e:
            raise UnsupportedScheme(url) from e

        if parts.scheme != SCHEME or not parts.hostname:
            raise UnsupportedScheme(url)

        try:
            port = parts.port or self.default_port
        except ValueError as e:
            raise HostResolutionFailure(f"Invalid port in '{url}'") from e

        try:
            # getaddrinfo raises UnicodeError for empty or over-long labels
            parts.hostname.encode("idna")
        except UnicodeError as e:
            raise HostResolutionFailure(f"Invalid host name '{parts.hostname}'") from e

        return parts.hostname, port

    async def fetch(self, url: str) -> Response:
        """Fetch a URL and return the classified response."""
        host, port = self.address(url)
        logger.debug("requesting %s", url)

        try:
            data = await asyncio.wait_for(
                self._exchange(host, port, f"{url}\r\n".encode("utf-8")),
                self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise IoFailure(f"Request to {host}:{port} timed out") from e

        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidEncoding(f"Response from {host} is not valid UTF-8") from e

        response = decode_response(text)
        logger.debug("%s answered %02d", url, response.status)
        return response

    async def _exchange(self, host: str, port: int, request: bytes) -> bytes:
        """Send one request line and read the whole response."""
        loop = asyncio.get_running_loop()
        try:
            infos = await loop.getaddrinfo(host, port, type=socket.SOCK_STREAM)
        except socket.gaierror as e:
            raise HostResolutionFailure(f"Could not resolve '{host}': {e.strerror}") from e
        except UnicodeError as e:
            raise HostResolutionFailure(f"Invalid host name '{host}'") from e
        address = infos[0][4][0]

        try:
            reader, writer = await asyncio.open_connection(
                address, port, ssl=self._context, server_hostname=host
            )
        except ssl.SSLError as e:
            raise TlsFailure(f"TLS handshake with '{host}' failed: {_reason(e)}") from e
        except OSError as e:
            raise IoFailure(f"Could not connect to {host}:{port}: {e.strerror or e}") from e

        try:
            ssl_object = writer.get_extra_info("ssl_object")
            certificate = ssl_object.getpeercert(binary_form=True) if ssl_object else None
            if not certificate:
                raise TlsFailure(f"'{host}' presented no certificate")
            self.trust.verify(host, certificate)

            writer.write(request)
            await writer.drain()
            return await _read_to_eof(reader)
        except ssl.SSLError as e:
            raise TlsFailure(f"TLS error talking to '{host}': {_reason(e)}") from e
        except OSError as e:
            raise IoFailure(f"Connection to {host}:{port} failed: {e.strerror or e}") from e
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except (ssl.SSLError, OSError) as e:
                logger.debug("Error closing connection to %s: %s", host, e)
