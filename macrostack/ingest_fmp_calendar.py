"""FMP economic-calendar adapter.

Pulls ``/api/v3/economic_calendar`` for today → today + 90 days and keeps
events from the configured countries that are either rated high/medium
impact or belong to a market-moving release type.  Titles are rewritten
to Portuguese display labels and each event gets a ``history`` strip
(previous / estimate / actual).

If FMP fails or nothing survives the filter, the upcoming FOMC decisions
from :mod:`macrostack.fomc_schedule` are served instead.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import httpx

from ._http import fetch_for, safe_json
from .common_types import CalendarEvent, CalendarSection, HistoryEntry
from .config import Config
from .error_taxonomy import PayloadError
from .fallback import SectionResult, Strategy, run_chain
from .fomc_schedule import meeting_datetime, upcoming
from .ingest_fred import KNOWN_MIDPOINT, rate_range
from .normalize import (
    MONTHS_PT,
    actual_sentiment,
    as_text,
    canonical_country,
    country_label,
    is_market_moving,
    normalize_impact,
    translate_title,
)

logger = logging.getLogger(__name__)

FMP_CALENDAR_URL = "https://financialmodelingprep.com/api/v3/economic_calendar"
FMP_SOURCE = "Financial Modeling Prep"
FOMC_FALLBACK_SOURCE = "Calendário FOMC"

AWAITING_ENTRY = HistoryEntry("Aguardando", "-", "neutral")


def _parse_date(date_str: str) -> datetime | None:
    """Parse an FMP timestamp (``2026-02-20 13:30:00``); naive values are UTC."""
    if not date_str:
        return None
    try:
        dt = datetime.fromisoformat(date_str.strip())
    except (ValueError, TypeError):
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown CALENDAR_TIMEZONE %r – using UTC", name)
        return ZoneInfo("UTC")


def build_history(raw: dict[str, Any]) -> tuple[HistoryEntry, ...]:
    """previous / estimate / actual strip; a single placeholder when all are missing."""
    previous, estimate, actual = raw.get("previous"), raw.get("estimate"), raw.get("actual")
    entries: list[HistoryEntry] = []
    if previous is not None:
        entries.append(HistoryEntry("Anterior", str(previous)))
    if estimate is not None:
        entries.append(HistoryEntry("Esperado", str(estimate)))
    if actual is not None:
        entries.append(HistoryEntry("Atual", str(actual), actual_sentiment(actual, estimate, previous)))
    return tuple(entries) or (AWAITING_ENTRY,)


def is_relevant(raw: dict[str, Any], countries: tuple[str, ...]) -> bool:
    if canonical_country(raw.get("country")) not in countries:
        return False
    impact = as_text(raw.get("impact")).strip().lower()
    return impact in ("high", "medium") or is_market_moving(raw.get("event"))


def normalize_event(raw: dict[str, Any], tz: ZoneInfo) -> CalendarEvent | None:
    """Provider event → :class:`CalendarEvent`; ``None`` if the date is unusable."""
    dt = _parse_date(str(raw.get("date") or ""))
    if dt is None:
        return None
    local = dt.astimezone(tz)
    original = raw.get("event")
    return CalendarEvent(
        date=str(raw.get("date")),
        day=local.day,
        month=MONTHS_PT[local.month - 1],
        year=local.year,
        time=local.strftime("%H:%M"),
        title=translate_title(original),
        original_title=as_text(original),
        country=country_label(raw.get("country")),
        country_code=str(raw.get("country") or ""),
        impact=normalize_impact(raw.get("impact")),  # type: ignore[arg-type]
        previous=raw.get("previous"),
        estimate=raw.get("estimate"),
        actual=raw.get("actual"),
        history=build_history(raw),
    )


def select_events(
    data: Any,
    countries: tuple[str, ...],
    limit: int,
    tz: ZoneInfo,
) -> list[CalendarEvent]:
    """Filter, cap (provider order preserved) and normalise FMP rows."""
    if not isinstance(data, list):
        raise PayloadError(f"FMP returned {type(data).__name__} instead of list", source="fmp")
    # Configured entries may use any alias ("USA", "UK").
    allowed = tuple(dict.fromkeys(canonical_country(c) for c in countries))
    events: list[CalendarEvent] = []
    for raw in data:
        if len(events) >= limit:
            break
        if not isinstance(raw, dict) or not is_relevant(raw, allowed):
            continue
        ev = normalize_event(raw, tz)
        if ev is None:
            logger.debug("Skipping FMP event with unparseable date: %r", raw.get("date"))
            continue
        events.append(ev)
    return events


def fomc_fallback_events(now: datetime, count: int) -> list[CalendarEvent]:
    """Upcoming FOMC decisions rendered as high-impact calendar entries."""
    known_range = rate_range(KNOWN_MIDPOINT)
    events: list[CalendarEvent] = []
    for m in upcoming(now):
        if len(events) >= count:
            break
        d = meeting_datetime(m)
        events.append(CalendarEvent(
            date=m.date,
            day=d.day,
            month=MONTHS_PT[d.month - 1],
            year=d.year,
            time=m.time,
            title="Decisão FOMC",
            original_title="Fed Interest Rate Decision",
            country=country_label("US"),
            country_code="US",
            impact="high",
            previous=None,
            estimate=None,
            actual=None,
            history=(HistoryEntry("Taxa Atual", known_range),),
        ))
    return events


class CalendarAdapter:
    """Calendar section: FMP first, FOMC schedule second."""

    section = "calendar"

    def __init__(self, cfg: Config, client: httpx.Client, now: datetime | None = None) -> None:
        self.cfg = cfg
        self.client = client
        self.now = now or datetime.now(timezone.utc)

    def fetch_fmp(self) -> CalendarSection | None:
        today = self.now.date()
        r = fetch_for(
            self.cfg,
            self.client,
            FMP_CALENDAR_URL,
            params={
                "from": today.isoformat(),
                "to": (today + timedelta(days=self.cfg.calendar_window_days)).isoformat(),
                "apikey": self.cfg.fmp_api_key,
            },
        )
        events = select_events(
            safe_json(r, "fmp"),
            self.cfg.calendar_countries,
            self.cfg.calendar_max_events,
            _zone(self.cfg.calendar_timezone),
        )
        if not events:
            return None
        logger.info("FMP calendar: %d events", len(events))
        return CalendarSection(tuple(events), FMP_SOURCE)

    def fetch_fomc(self) -> CalendarSection | None:
        events = fomc_fallback_events(self.now, self.cfg.calendar_fallback_meetings)
        if not events:
            return None
        return CalendarSection(tuple(events), FOMC_FALLBACK_SOURCE)

    def fetch(self) -> SectionResult[CalendarSection]:
        return run_chain(
            self.section,
            [
                Strategy("fmp", self.fetch_fmp),
                Strategy("fomc schedule", self.fetch_fomc),
            ],
        )
