from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

__version__ = "0.1.0"


def _getenv_int(name: str, default: int) -> int:
    v = os.getenv(name, str(default)).strip()
    try:
        return int(v)
    except ValueError as err:
        raise ValueError(f"Environment variable {name} must be an integer; got {v!r}") from err


def _getenv_float(name: str, default: float) -> float:
    v = os.getenv(name, str(default)).strip()
    try:
        return float(v)
    except ValueError as err:
        raise ValueError(f"Environment variable {name} must be a number; got {v!r}") from err


def _getenv_str(name: str, default: str) -> str:
    return os.getenv(name, default).strip()


def _getenv_bool(name: str, default: bool) -> bool:
    """
    Read a loosely-typed boolean from the environment.

    Treats "1", "true", "yes", "on" (case-insensitive) as True;
    "0", "false", "no", "off", "" as False. If unset, returns default.
    """
    raw = os.getenv(name)
    if raw is None:
        return default
    v = raw.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off", ""}:
        return False
    # Fallback: any other non-empty value -> True
    return True


# Load .env from project root if present
ROOT = Path(__file__).resolve().parents[1]
load_dotenv(ROOT / ".env", override=False)

DEFAULT_USER_AGENT = f"acdiscovery/{__version__}"
# Bounded dial time; the read timeout covers a stalled body
DEFAULT_CONNECT_TIMEOUT_S = 5.0
DEFAULT_READ_TIMEOUT_S = 10.0
DEFAULT_MAX_REDIRECTS = 10
DEFAULT_FOLLOW_REDIRECTS = True


@dataclass(frozen=True)
class DiscoveryConfig:
    user_agent: str = DEFAULT_USER_AGENT
    connect_timeout_s: float = DEFAULT_CONNECT_TIMEOUT_S
    read_timeout_s: float = DEFAULT_READ_TIMEOUT_S
    max_redirects: int = DEFAULT_MAX_REDIRECTS
    follow_redirects: bool = DEFAULT_FOLLOW_REDIRECTS


def load_settings() -> DiscoveryConfig:
    """
    Build a DiscoveryConfig from the DISCOVERY_* environment variables.

    The environment is read on every call (never at import), so a malformed
    value surfaces here as a ValueError naming the variable.

    Note: whether plain-http fallback is allowed is never configuration; it is
    passed by the caller on every resolve call.
    """
    return DiscoveryConfig(
        user_agent=_getenv_str("DISCOVERY_USER_AGENT", DEFAULT_USER_AGENT) or DEFAULT_USER_AGENT,
        connect_timeout_s=_getenv_float("DISCOVERY_CONNECT_TIMEOUT_S", DEFAULT_CONNECT_TIMEOUT_S),
        read_timeout_s=_getenv_float("DISCOVERY_READ_TIMEOUT_S", DEFAULT_READ_TIMEOUT_S),
        max_redirects=_getenv_int("DISCOVERY_MAX_REDIRECTS", DEFAULT_MAX_REDIRECTS),
        follow_redirects=_getenv_bool("DISCOVERY_FOLLOW_REDIRECTS", DEFAULT_FOLLOW_REDIRECTS),
    )


__all__ = [
    "DEFAULT_USER_AGENT",
    "DEFAULT_CONNECT_TIMEOUT_S",
    "DEFAULT_READ_TIMEOUT_S",
    "DEFAULT_MAX_REDIRECTS",
    "DEFAULT_FOLLOW_REDIRECTS",
    "DiscoveryConfig",
    "load_settings",
]
