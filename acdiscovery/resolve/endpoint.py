from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import BinaryIO
from urllib.parse import urljoin, urlsplit, urlunsplit

from ..exceptions import (
    DiscoveryError,
    InvalidTarget,
    NotFound,
    SchemeDowngrade,
    UnexpectedStatus,
)
from ..fetch.transport import FetchResponse, Transport, default_transport

log = logging.getLogger(__name__)

# Query key that marks a request as a discovery lookup
DISCOVERY_MARKER = "ac-discovery"

SECURE_SCHEME = "https"
INSECURE_SCHEME = "http"

_NOT_FOUND_STATUSES = frozenset({404, 410})


def _has_bad_chars(name: str) -> bool:
    return any(ch.isspace() or ord(ch) < 0x20 or ord(ch) == 0x7F for ch in name)


def build_target(name: str, scheme: str) -> str:
    """
    Turn a resource name (host or host/path) into a discovery request URL.

        build_target("example.com/app", "https")
        -> "https://example.com/app?ac-discovery=1"

    Any query already present on the name is replaced by the discovery marker.
    """
    if scheme not in (SECURE_SCHEME, INSECURE_SCHEME):
        raise ValueError(f"unsupported scheme {scheme!r}")
    if not name:
        raise InvalidTarget(name, "empty name")
    if _has_bad_chars(name):
        raise InvalidTarget(name, "name contains whitespace or control characters")
    if "://" in name:
        raise InvalidTarget(name, "name must not carry a scheme")

    try:
        parts = urlsplit(f"{scheme}://{name}")
        parts.port
    except ValueError as err:
        # unbalanced IPv6 brackets, non-numeric port
        raise InvalidTarget(name, f"malformed name: {err}") from err
    if not parts.hostname:
        raise InvalidTarget(name, "name has no host")

    return urlunsplit(
        (parts.scheme, parts.netloc, parts.path, f"{DISCOVERY_MARKER}=1", parts.fragment)
    )


@dataclass(frozen=True)
class Resolution:
    """
    Non-raising outcome of a resolution.

    Invariant: url == "" exactly when body is None (and then error is set).
    """

    url: str = ""
    body: BinaryIO | None = None
    error: DiscoveryError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Resolver:
    """
    Resolve a name to (url, body) over https, falling back to plain http only
    when the caller passes insecure=True on that very call.

    Flow:
      1) GET https://<name>?ac-discovery=1 → 200: return it, never touch http
      2) otherwise, if insecure is False: raise the https error
      3) otherwise GET http://<name>?ac-discovery=1 → 200: return it
      4) otherwise raise the http error

    Holds no per-call state; safe to share between threads when the
    transport is.
    """

    def __init__(
        self,
        transport: Transport | None = None,
        *,
        host_headers: Mapping[str, Mapping[str, str]] | None = None,
    ) -> None:
        self.transport = transport if transport is not None else default_transport()
        # host (netloc, lowercase) -> extra headers, sent over https only
        self.host_headers = {k.lower(): dict(v) for k, v in (host_headers or {}).items()}

    # ---- core resolve ------------------------------------------------------------------

    def resolve(self, name: str, insecure: bool = False) -> tuple[str, BinaryIO]:
        secure_url = build_target(name, SECURE_SCHEME)
        try:
            return secure_url, self._fetch(secure_url)
        except DiscoveryError as exc:
            if isinstance(exc, InvalidTarget):
                raise
            if not insecure:
                log.debug("https discovery failed for %s, fallback not allowed: %s", name, exc)
                raise
            log.info("https discovery failed for %s (%s); trying http", name, exc)

        insecure_url = build_target(name, INSECURE_SCHEME)
        body = self._fetch(insecure_url)
        log.warning("discovery for %s succeeded over plain http: %s", name, insecure_url)
        return insecure_url, body

    def try_resolve(self, name: str, insecure: bool = False) -> Resolution:
        try:
            url, body = self.resolve(name, insecure)
        except DiscoveryError as exc:
            return Resolution(error=exc)
        return Resolution(url=url, body=body)

    # ----------------------------------------------------------------------------------
    # Internals
    # ----------------------------------------------------------------------------------

    def _headers_for(self, url: str) -> dict[str, str]:
        parts = urlsplit(url)
        if parts.scheme != SECURE_SCHEME:
            return {}
        return dict(self.host_headers.get(parts.netloc.lower(), {}))

    def _fetch(self, url: str) -> BinaryIO:
        log.debug("discovery GET %s", url)
        resp: FetchResponse = self.transport.get(url, headers=self._headers_for(url))

        if _downgraded(url, resp):
            resp.close()
            raise SchemeDowngrade(url, _landing_url(resp))
        if resp.status == 200 and resp.body is not None:
            return resp.body

        # Release the failed attempt before deciding anything else
        resp.close()
        if resp.status == 200:
            raise UnexpectedStatus(url, resp.status, "200 OK without a body")
        if resp.status in _NOT_FOUND_STATUSES:
            raise NotFound(url, resp.status)
        raise UnexpectedStatus(url, resp.status)


def _landing_url(resp: FetchResponse) -> str:
    """Where the response ended up: its URL, or the unfollowed redirect target."""
    if 300 <= resp.status < 400:
        location = {k.lower(): v for k, v in resp.headers.items()}.get("location")
        if location:
            return urljoin(resp.url, location)
    return resp.url


def _downgraded(url: str, resp: FetchResponse) -> bool:
    if urlsplit(url).scheme != SECURE_SCHEME:
        return False
    landing = _landing_url(resp) or url
    return urlsplit(landing).scheme != SECURE_SCHEME


# --- facade -------------------------------------------------------------------


def https_or_http(
    name: str,
    insecure: bool = False,
    *,
    transport: Transport | None = None,
) -> tuple[str, BinaryIO]:
    """
    One-shot convenience wrapper.

    Usage:
        from acdiscovery.resolve import https_or_http
        url, body = https_or_http("example.com/app")
        with body:
            doc = body.read()
    """
    return Resolver(transport).resolve(name, insecure)


__all__ = [
    "DISCOVERY_MARKER",
    "SECURE_SCHEME",
    "INSECURE_SCHEME",
    "build_target",
    "Resolution",
    "Resolver",
    "https_or_http",
]
