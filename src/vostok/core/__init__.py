"""Core protocol client components."""

from .errors import (
    GeminiError,
    HostResolutionFailure,
    InvalidEncoding,
    InvalidStatusClass,
    InvalidStatusLine,
    IoFailure,
    MalformedResponse,
    RelativeResolutionFailure,
    TlsFailure,
    UnimplementedClientCertificate,
    UnsupportedScheme,
)
from .fetcher import DEFAULT_PORT, SCHEME, GeminiFetcher
from .protocols import (
    CertRequired,
    Fetcher,
    InputExpected,
    PermFail,
    Redirect,
    Response,
    Success,
    TempFail,
    classify,
    decode_response,
    parse_response,
)
from .trust import AcceptAll, CertificateTrustPolicy, PinnedByHost, policy_for

__all__ = [
    "AcceptAll",
    "CertRequired",
    "CertificateTrustPolicy",
    "DEFAULT_PORT",
    "Fetcher",
    "GeminiError",
    "GeminiFetcher",
    "HostResolutionFailure",
    "InputExpected",
    "InvalidEncoding",
    "InvalidStatusClass",
    "InvalidStatusLine",
    "IoFailure",
    "MalformedResponse",
    "PermFail",
    "PinnedByHost",
    "Redirect",
    "RelativeResolutionFailure",
    "Response",
    "SCHEME",
    "Success",
    "TempFail",
    "TlsFailure",
    "UnimplementedClientCertificate",
    "UnsupportedScheme",
    "classify",
    "decode_response",
    "parse_response",
    "policy_for",
]
