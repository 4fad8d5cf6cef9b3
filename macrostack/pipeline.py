"""Multi-source pipeline: FRED + Polymarket + FMP + Yahoo → MacroSnapshot → JSON.

``build_snapshot(cfg)`` runs the four section adapters (on a small
thread pool by default; they share no mutable state), turns each
outcome into a :class:`SectionResult` and assembles the root document.
A section that raises or comes back empty is recorded in ``errors`` and
never stops its siblings.

``run_once(cfg)`` additionally writes the document; that write is the
only step allowed to fail the run.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any

import httpx

from ._http import _sanitize_exc, build_client
from .common_types import MacroSnapshot
from .config import Config
from .fallback import SectionResult
from .fomc_schedule import next_meetings
from .ingest_fmp_calendar import CalendarAdapter
from .ingest_fred import FredRateAdapter
from .ingest_polymarket import ProbabilityAdapter
from .ingest_yahoo import MarketIndicatorAdapter
from .snapshot_export import export_snapshot

logger = logging.getLogger(__name__)

# Fixed order of sections in ``errors`` and ``sectionStatus``.
SECTIONS: tuple[str, ...] = ("fedRate", "probabilities", "calendar", "marketIndicators")


def _iso_utc(now: datetime) -> str:
    """``2026-10-19T12:00:00.000Z`` – millisecond UTC timestamp."""
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _guarded(section: str, fetch: Callable[[], SectionResult[Any] | None]) -> SectionResult[Any]:
    """Run one section; any escaping error or missing result becomes ``unavailable``."""
    try:
        result = fetch()
    except Exception as exc:
        logger.error(
            "%s failed: %s: %s", section, type(exc).__name__, _sanitize_exc(exc),
        )
        return SectionResult.unavailable(f"{type(exc).__name__}: {_sanitize_exc(exc)}")
    if result is None or (result.value is None and result.status != "unavailable"):
        return SectionResult.unavailable("no result")
    return result


def _section_fetchers(
    cfg: Config,
    client: httpx.Client,
    now: datetime,
) -> dict[str, Callable[[], SectionResult[Any]]]:
    return {
        "fedRate": FredRateAdapter(cfg, client).fetch,
        "probabilities": ProbabilityAdapter(cfg, client).fetch,
        "calendar": CalendarAdapter(cfg, client, now=now).fetch,
        "marketIndicators": MarketIndicatorAdapter(cfg, client).fetch,
    }


def collect_sections(
    fetchers: dict[str, Callable[[], SectionResult[Any]]],
    parallel: bool = True,
) -> dict[str, SectionResult[Any]]:
    """Run every section fetcher in isolation and return results by name."""
    if not parallel:
        return {name: _guarded(name, fn) for name, fn in fetchers.items()}

    results: dict[str, SectionResult[Any]] = {}
    with ThreadPoolExecutor(max_workers=max(1, len(fetchers))) as executor:
        future_map = {
            name: executor.submit(_guarded, name, fn)
            for name, fn in fetchers.items()
        }
        for name, future in future_map.items():
            results[name] = future.result()
    return results


def assemble_snapshot(
    results: dict[str, SectionResult[Any]],
    now: datetime,
    meetings_count: int,
) -> MacroSnapshot:
    """Merge section results into the root document.

    ``errors`` lists every section that did not succeed on its primary
    source, degraded or unavailable alike; ``sectionStatus`` tells the
    two apart.
    """
    missing = SectionResult.unavailable("not run")
    status: dict[str, dict[str, str]] = {}
    errors: list[str] = []
    for name in SECTIONS:
        res = results.get(name, missing)
        status[name] = {"status": res.status, "reason": res.reason}
        if not res.ok:
            errors.append(name)

    def _value(name: str) -> Any:
        return results.get(name, missing).value

    return MacroSnapshot(
        last_update=_iso_utc(now),
        next_meetings=tuple(next_meetings(meetings_count, now)),
        fed_rate=_value("fedRate"),
        probabilities=_value("probabilities"),
        calendar=_value("calendar"),
        market_indicators=_value("marketIndicators"),
        errors=tuple(errors),
        section_status=status,
    )


def build_snapshot(
    cfg: Config,
    client: httpx.Client | None = None,
    now: datetime | None = None,
) -> MacroSnapshot:
    """Query every provider once and return the assembled snapshot."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        # Naive timestamps are UTC, as in fomc_schedule.
        now = now.replace(tzinfo=timezone.utc)
    own_client = client is None
    http = client if client is not None else build_client(cfg)
    try:
        results = collect_sections(_section_fetchers(cfg, http, now), cfg.parallel_sections)
    finally:
        if own_client:
            http.close()
    return assemble_snapshot(results, now, cfg.next_meetings_count)


def _log_summary(snap: MacroSnapshot, path: str) -> None:
    rate = snap.fed_rate.current.range if snap.fed_rate else "N/A"
    probs = snap.probabilities
    logger.info("Saved to %s", path)
    logger.info("  Policy rate:   %s", rate)
    if probs is not None:
        logger.info(
            "  Probabilities: cut=%d%% hold=%d%% hike=%d%% (%s)",
            probs.cut, probs.hold, probs.hike, probs.source,
        )
    else:
        logger.info("  Probabilities: N/A")
    logger.info("  Calendar:      %d events", len(snap.calendar.events) if snap.calendar else 0)
    logger.info(
        "  Market:        %d indicators",
        len(snap.market_indicators.indicators) if snap.market_indicators else 0,
    )
    if snap.errors:
        logger.warning("  Degraded sections: %s", ", ".join(snap.errors))


def run_once(
    cfg: Config,
    client: httpx.Client | None = None,
    now: datetime | None = None,
) -> MacroSnapshot:
    """Build the snapshot and persist it to ``cfg.output_path``.

    Partial section failures are normal; only a failed write raises
    (:class:`~macrostack.error_taxonomy.SnapshotWriteError`).
    """
    snap = build_snapshot(cfg, client=client, now=now)
    export_snapshot(cfg.output_path, snap)
    _log_summary(snap, cfg.output_path)
    return snap
