# acdiscovery/fetch/__init__.py
"""
Transport layer for discovery requests.

Public entry points:
  - Transport (protocol), FetchResponse
  - HttpxTransport: production transport (httpx, streamed bodies)
  - StubTransport: function-backed double for tests
  - default_transport(): lazily-built shared HttpxTransport
"""

from .transport import (
    FetchResponse,
    HttpxTransport,
    StubTransport,
    Transport,
    default_transport,
)

__all__ = [
    "FetchResponse",
    "HttpxTransport",
    "StubTransport",
    "Transport",
    "default_transport",
]
