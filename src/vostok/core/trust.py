"""Certificate trust policies for trust-on-first-use TLS."""

import hashlib
import logging
from typing import Protocol

from .errors import TlsFailure

logger = logging.getLogger(__name__)


def fingerprint(certificate: bytes) -> str:
    """SHA-256 fingerprint of a DER certificate as lowercase hex."""
    return hashlib.sha256(certificate).hexdigest()


class CertificateTrustPolicy(Protocol):
    """Decides whether a server certificate is acceptable for a host."""

    def verify(self, host: str, certificate: bytes) -> None:
        """Raise TlsFailure if the certificate must not be trusted."""
        ...


class AcceptAll:
    """Accepts every certificate. Insecure: only for explicit opt-in."""

    def __init__(self):
        self._warned = False

    def verify(self, host: str, certificate: bytes) -> None:
        if not self._warned:
            logger.warning("Certificate verification is disabled, accepting all certificates")
            self._warned = True


class PinnedByHost:
    """Pins the first certificate seen for each host and rejects changes.

    Pins live only as long as the policy object.
    """

    def __init__(self, pins: dict[str, str] | None = None):
        self._pins: dict[str, str] = dict(pins or {})

    def verify(self, host: str, certificate: bytes) -> None:
        seen = fingerprint(certificate)
        pinned = self._pins.get(host)

        if pinned is None:
            logger.info("Pinning certificate %s for %s", seen, host)
            self._pins[host] = seen
            return

        if pinned != seen:
            raise TlsFailure(
                f"Certificate for '{host}' changed: expected {pinned}, got {seen}"
            )

    def pinned(self, host: str) -> str | None:
        """Fingerprint pinned for a host, if any."""
        return self._pins.get(host)

    def forget(self, host: str):
        """Drop the pin for a host so the next certificate is trusted again."""
        self._pins.pop(host, None)


def policy_for(name: str) -> CertificateTrustPolicy:
    """Build a policy from its configuration name."""
    if name == "accept-all":
        return AcceptAll()
    if name == "pinned":
        return PinnedByHost()
    raise ValueError(f"Unknown trust policy '{name}'")
