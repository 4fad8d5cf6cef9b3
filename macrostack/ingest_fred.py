"""FRED policy-rate adapter.

Polls ``/fred/series/observations`` for ``FEDFUNDS`` (effective federal
funds rate, newest first) and turns it into a :class:`RateSnapshot`.

The Fed announces a 25 bp target band; the band is derived from the
latest observation as ``[midpoint - 0.25, midpoint]``.  The latest move
is classified from the two newest observations with a ±0.10 pp
dead-band.

When FRED is unreachable or returns nothing usable, the last known
decision is served instead, tagged with a source string that marks it
as static.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ._http import fetch_for, safe_json
from .common_types import CurrentRate, LastDecision, RatePoint, RateSnapshot
from .config import Config
from .error_taxonomy import PayloadError
from .fallback import SectionResult, Strategy, run_chain
from .normalize import fmt_fixed, round_half_up, to_float

logger = logging.getLogger(__name__)

FRED_OBSERVATIONS_URL = "https://api.stlouisfed.org/fred/series/observations"
FRED_SERIES_ID = "FEDFUNDS"
FRED_SOURCE = "FRED (Federal Reserve)"

_OBSERVATION_LIMIT = 10
_HISTORY_LEN = 5
_BAND_WIDTH = 0.25
# Moves smaller than this (percentage points) count as a hold.
_DEAD_BAND = 0.10

# ── Last known decision (update after each FOMC meeting) ────────
KNOWN_MIDPOINT = 4.375
KNOWN_HISTORY: tuple[RatePoint, ...] = (
    RatePoint("2025-12-18", 4.375),
    RatePoint("2025-11-06", 4.625),
    RatePoint("2025-09-17", 4.875),
)
KNOWN_SOURCE = "Última decisão FOMC (Dezembro 2025)"


def rate_range(midpoint: float) -> str:
    """Announced target band label, e.g. ``4.375 → "4.13-4.38%"``."""
    return f"{fmt_fixed(midpoint - _BAND_WIDTH, 2)}-{fmt_fixed(midpoint, 2)}%"


def classify_move(history: tuple[RatePoint, ...] | list[RatePoint]) -> LastDecision:
    """Classify the newest move from the two most recent points (newest first)."""
    latest_date = history[0].date if history else None
    if len(history) < 2:
        return LastDecision("hold", 0, latest_date)
    diff = history[0].rate - history[1].rate
    if diff < -_DEAD_BAND:
        return LastDecision("cut", round_half_up(abs(diff) * 100), latest_date)
    if diff > _DEAD_BAND:
        return LastDecision("hike", round_half_up(diff * 100), latest_date)
    return LastDecision("hold", 0, latest_date)


def build_rate_snapshot(history: tuple[RatePoint, ...], source: str) -> RateSnapshot:
    midpoint = history[0].rate
    return RateSnapshot(
        current=CurrentRate(range=rate_range(midpoint), midpoint=midpoint, effective=midpoint),
        last_decision=classify_move(history),
        history=history,
        source=source,
    )


def known_rate_snapshot() -> RateSnapshot:
    """Static last-known-good snapshot used when FRED is unavailable."""
    return build_rate_snapshot(KNOWN_HISTORY, KNOWN_SOURCE)


def parse_observations(payload: Any) -> tuple[RatePoint, ...]:
    """Numeric observations, newest first, capped at the history length.

    FRED marks missing values with ``"."``; those rows are skipped.
    """
    if not isinstance(payload, dict):
        raise PayloadError(
            f"FRED returned {type(payload).__name__} instead of object", source="fred",
        )
    observations = payload.get("observations")
    if not isinstance(observations, list):
        raise PayloadError("FRED payload has no observations list", source="fred")
    points: list[RatePoint] = []
    for obs in observations:
        if not isinstance(obs, dict):
            continue
        value = to_float(obs.get("value"))
        if value is None:
            continue
        points.append(RatePoint(str(obs.get("date") or ""), value))
        if len(points) >= _HISTORY_LEN:
            break
    return tuple(points)


class FredRateAdapter:
    """Policy-rate section: FRED first, last known decision second."""

    section = "fedRate"

    def __init__(self, cfg: Config, client: httpx.Client) -> None:
        self.cfg = cfg
        self.client = client

    def fetch_live(self) -> RateSnapshot | None:
        """GET FEDFUNDS observations, newest first."""
        r = fetch_for(
            self.cfg,
            self.client,
            FRED_OBSERVATIONS_URL,
            params={
                "series_id": FRED_SERIES_ID,
                "api_key": self.cfg.fred_api_key,
                "file_type": "json",
                "limit": _OBSERVATION_LIMIT,
                "sort_order": "desc",
            },
        )
        history = parse_observations(safe_json(r, "fred"))
        if not history:
            return None
        snap = build_rate_snapshot(history, FRED_SOURCE)
        logger.info("FRED rate: %s (%s)", snap.current.range, snap.last_decision.type)
        return snap

    def fetch(self) -> SectionResult[RateSnapshot]:
        return run_chain(
            self.section,
            [
                Strategy("fred", self.fetch_live),
                Strategy("last-known decision", known_rate_snapshot),
            ],
        )
