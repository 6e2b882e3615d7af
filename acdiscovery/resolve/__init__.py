# acdiscovery/resolve/__init__.py
from __future__ import annotations

from .endpoint import (
    DISCOVERY_MARKER,
    INSECURE_SCHEME,
    SECURE_SCHEME,
    Resolution,
    Resolver,
    build_target,
    https_or_http,
)

"""
Resolve package

  - `endpoint` turns a resource name into a discovery URL plus document body,
    https first, plain http only when the caller allows it.
"""

__all__ = [
    "DISCOVERY_MARKER",
    "SECURE_SCHEME",
    "INSECURE_SCHEME",
    "Resolution",
    "Resolver",
    "build_target",
    "https_or_http",
]
