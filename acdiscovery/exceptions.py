# acdiscovery/exceptions.py
"""
Shared exception classes for discovery resolution.

Every failure cause maps to exactly one class:

    InvalidTarget         the name cannot be turned into a request target
    TransportUnreachable  connect / DNS / TLS / timeout / redirect loop
    NotFound              the remote answered 404 or 410
    UnexpectedStatus      the remote answered anything else but 200
    SchemeDowngrade       an https request landed on (or redirected to) plain http

Every class except InvalidTarget can trigger an https -> http fallback.
"""

from __future__ import annotations


class DiscoveryError(Exception):
    """Base class; `url` is the request target (or raw name) that failed."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(f"{message} ({url})" if url else message)
        self.url = url
        self.message = message


class InvalidTarget(DiscoveryError):
    """Raised when a well-formed request target cannot be built from a name."""


class TransportUnreachable(DiscoveryError):
    """Raised by a transport when the remote endpoint could not be reached."""


class NotFound(DiscoveryError):
    """The remote endpoint responded, but the document does not exist there."""

    def __init__(self, url: str, status: int) -> None:
        super().__init__(url, f"discovery document not found (HTTP {status})")
        self.status = status


class UnexpectedStatus(DiscoveryError):
    def __init__(self, url: str, status: int, message: str | None = None) -> None:
        super().__init__(url, message or f"expected a 200 OK got {status}")
        self.status = status


class SchemeDowngrade(DiscoveryError):
    """An https request ended up (or was redirected) on a non-https URL."""

    def __init__(self, url: str, landing_url: str) -> None:
        super().__init__(url, f"https request redirected to insecure {landing_url}")
        self.landing_url = landing_url


__all__ = [
    "DiscoveryError",
    "InvalidTarget",
    "TransportUnreachable",
    "NotFound",
    "UnexpectedStatus",
    "SchemeDowngrade",
]
