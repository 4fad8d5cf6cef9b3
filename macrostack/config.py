"""Global configuration for the macro snapshot run.

All tunables can be overridden via environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field


def _env_float(key: str, default: float) -> float:
    """Read an env var as float, returning *default* on parse failure."""
    try:
        return float(os.getenv(key, str(default)))
    except (ValueError, TypeError):
        return default


def _env_int(key: str, default: int) -> int:
    """Read an env var as int, returning *default* on parse failure."""
    try:
        return int(os.getenv(key, str(default)))
    except (ValueError, TypeError):
        return default


def _env_csv(key: str, default: str) -> tuple[str, ...]:
    raw = os.getenv(key, default)
    return tuple(p.strip().upper() for p in raw.split(",") if p.strip())


@dataclass(frozen=True)
class Config:
    """Central configuration – one instance per run.

    Environment variables are read at **instantiation** time (not module
    import time) so callers can set them programmatically before
    creating a ``Config``.  The instance is passed explicitly to every
    adapter; nothing below the entry point reads ``os.environ``.
    """

    # ── Credentials (repr=False to prevent accidental logging) ──
    # Both have public demo values so a run without secrets still
    # produces a (degraded) document.
    fred_api_key: str = field(default_factory=lambda: os.getenv("FRED_API_KEY", "DEMO"), repr=False)
    fmp_api_key: str = field(default_factory=lambda: os.getenv("FMP_API_KEY", "demo"), repr=False)

    # ── HTTP transport ──────────────────────────────────────────
    http_timeout_s: float = field(default_factory=lambda: _env_float("HTTP_TIMEOUT_S", 15.0))
    http_max_attempts: int = field(default_factory=lambda: _env_int("HTTP_MAX_ATTEMPTS", 3))
    http_backoff_step_s: float = field(default_factory=lambda: _env_float("HTTP_BACKOFF_STEP_S", 2.0))

    # Pause between per-symbol Yahoo requests (provider rate limit).
    market_request_delay_s: float = field(default_factory=lambda: _env_float("MARKET_REQUEST_DELAY_S", 0.5))

    # ── Economic calendar ───────────────────────────────────────
    calendar_window_days: int = field(default_factory=lambda: _env_int("CALENDAR_WINDOW_DAYS", 90))
    calendar_max_events: int = field(default_factory=lambda: _env_int("CALENDAR_MAX_EVENTS", 20))
    calendar_fallback_meetings: int = field(default_factory=lambda: _env_int("CALENDAR_FALLBACK_MEETINGS", 8))
    calendar_countries: tuple[str, ...] = field(default_factory=lambda: _env_csv("CALENDAR_COUNTRIES", "US,EU"))
    # IANA zone used for the day/time labels of calendar events.
    calendar_timezone: str = field(default_factory=lambda: os.getenv("CALENDAR_TIMEZONE", "UTC"))

    # ── Snapshot ────────────────────────────────────────────────
    next_meetings_count: int = field(default_factory=lambda: _env_int("NEXT_MEETINGS_COUNT", 3))
    output_path: str = field(default_factory=lambda: os.getenv("MACRO_OUTPUT_PATH", "data/macro-data.json"))
    parallel_sections: bool = field(default_factory=lambda: os.getenv("PARALLEL_SECTIONS", "1") == "1")

    # ── Derived helpers ─────────────────────────────────────────

    @property
    def using_demo_keys(self) -> list[str]:
        """Names of credentials still set to their public demo value."""
        demo: list[str] = []
        if self.fred_api_key == "DEMO":
            demo.append("FRED_API_KEY")
        if self.fmp_api_key == "demo":
            demo.append("FMP_API_KEY")
        return demo
