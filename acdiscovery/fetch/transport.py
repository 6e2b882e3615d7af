# acdiscovery/fetch/transport.py
from __future__ import annotations

import io
import logging
import threading
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import BinaryIO, Protocol, runtime_checkable

import httpx

from ..config import DiscoveryConfig, load_settings
from ..exceptions import InvalidTarget, TransportUnreachable

log = logging.getLogger(__name__)

# --------------------------------------------------------------------------------------------------
# Results / Protocol
# --------------------------------------------------------------------------------------------------


@dataclass
class FetchResponse:
    status: int
    url: str  # effective URL (after redirects)
    headers: dict[str, str] = field(default_factory=dict)
    # Readable stream at the start of the document; owned (and closed) by the caller
    body: BinaryIO | None = None

    def close(self) -> None:
        if self.body is not None:
            self.body.close()


@runtime_checkable
class Transport(Protocol):
    """
    "Fetch this URL" capability used by the resolver.

    Implementations return a FetchResponse for any HTTP status and raise
    TransportUnreachable when the remote cannot be reached. They never retry.
    """

    def get(self, url: str, *, headers: Mapping[str, str] | None = None) -> FetchResponse: ...


# --------------------------------------------------------------------------------------------------
# httpx-backed transport
# --------------------------------------------------------------------------------------------------


class _ResponseBody(io.RawIOBase):
    """File-like view over a streamed httpx.Response; close() releases the connection."""

    def __init__(self, response: httpx.Response) -> None:
        super().__init__()
        self._response = response
        self._chunks: Iterator[bytes] = response.iter_bytes()
        self._pending = b""

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        while not self._pending:
            try:
                self._pending = next(self._chunks)
            except StopIteration:
                return 0
        n = min(len(buffer), len(self._pending))
        buffer[:n] = self._pending[:n]
        self._pending = self._pending[n:]
        return n

    def close(self) -> None:
        if not self.closed:
            self._response.close()
        super().close()


class HttpxTransport:
    """
    Production transport: one pooled httpx.Client, streamed responses.
    Redirects are followed here (not by httpx) so an https -> http hop can be
    refused.

    Proxy settings are taken from the environment (httpx trust_env). Passing
    verify=False disables TLS certificate checks for this instance only; it
    does not affect whether the resolver may fall back to plain http.
    """

    def __init__(
        self,
        config: DiscoveryConfig | None = None,
        *,
        verify: bool = True,
        client: httpx.Client | None = None,
    ) -> None:
        self.config = config or load_settings()
        self._client = client or httpx.Client(
            headers={"User-Agent": self.config.user_agent},
            timeout=httpx.Timeout(self.config.read_timeout_s, connect=self.config.connect_timeout_s),
            verify=verify,
        )

    def get(self, url: str, *, headers: Mapping[str, str] | None = None) -> FetchResponse:
        """
        GET `url`, following redirects up to the configured cap.

        A redirect from https to a non-https location is never followed: the
        3xx response itself is returned so the caller sees the downgrade.
        """
        try:
            request = self._client.build_request("GET", url, headers=dict(headers or {}))
            response = self._send_following_redirects(request)
        except httpx.TimeoutException as exc:
            raise TransportUnreachable(url, f"timed out: {type(exc).__name__}") from exc
        except httpx.RequestError as exc:
            raise TransportUnreachable(url, f"{type(exc).__name__}: {exc}") from exc
        except (httpx.InvalidURL, UnicodeError) as exc:
            # hosts that fail IDNA encoding ("a..b", "\u2603.test")
            raise InvalidTarget(url, f"{type(exc).__name__}: {exc}") from exc

        log.debug("GET %s -> %s (%s)", url, response.status_code, response.url)
        return FetchResponse(
            status=int(response.status_code),
            url=str(response.url),
            headers=dict(response.headers),
            body=_ResponseBody(response),
        )

    def _send_following_redirects(self, request: httpx.Request) -> httpx.Response:
        redirects = 0
        while True:
            response = self._client.send(request, stream=True, follow_redirects=False)
            if not (self.config.follow_redirects and response.has_redirect_location):
                return response

            nxt = response.next_request
            if nxt is None:
                return response
            if request.url.scheme == "https" and nxt.url.scheme != "https":
                log.debug(
                    "not following %s redirect %s -> %s", response.status_code, request.url, nxt.url
                )
                return response
            if redirects >= self.config.max_redirects:
                response.close()
                raise TransportUnreachable(str(request.url), "too many redirects")

            response.close()
            redirects += 1
            request = nxt

    # ---- context manager ---------------------------------------------------------------------

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HttpxTransport:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


_default_transport: HttpxTransport | None = None
_default_lock = threading.Lock()


def default_transport() -> HttpxTransport:
    global _default_transport
    with _default_lock:
        if _default_transport is None:
            _default_transport = HttpxTransport()
        return _default_transport


# --------------------------------------------------------------------------------------------------
# Test double
# --------------------------------------------------------------------------------------------------


class StubTransport:
    """
    Transport that answers from a plain function instead of the network.

    Every call is recorded in `calls` as (url, headers) so tests can assert
    which targets were (or were never) requested.
    """

    def __init__(self, getter: Callable[[str], FetchResponse]) -> None:
        self._getter = getter
        self._lock = threading.Lock()
        self.calls: list[tuple[str, dict[str, str]]] = []

    def get(self, url: str, *, headers: Mapping[str, str] | None = None) -> FetchResponse:
        with self._lock:
            self.calls.append((url, dict(headers or {})))
        return self._getter(url)

    @property
    def urls(self) -> list[str]:
        with self._lock:
            return [u for u, _ in self.calls]


__all__ = [
    "FetchResponse",
    "Transport",
    "HttpxTransport",
    "StubTransport",
    "default_transport",
]
