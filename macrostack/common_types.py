"""Unified value types shared across all macro providers.

Every adapter normalises its raw payload into these records before the
pipeline sees it.  Records are frozen: they are built once per run and
handed read-only to the aggregator.  ``to_dict()`` renders the camelCase
JSON contract consumed by the display layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

DecisionType = Literal["cut", "hold", "hike"]
Impact = Literal["high", "medium", "low"]
Sentiment = Literal["positive", "negative", "neutral"]


# ── Policy rate ─────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class RatePoint:
    date: str
    rate: float

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.date, "rate": self.rate}


@dataclass(frozen=True, slots=True)
class CurrentRate:
    range: str  # "4.13-4.38%" – lower bound is midpoint - 0.25
    midpoint: float
    effective: float

    def to_dict(self) -> dict[str, Any]:
        return {"range": self.range, "midpoint": self.midpoint, "effective": self.effective}


@dataclass(frozen=True, slots=True)
class LastDecision:
    type: DecisionType
    change: int  # basis points, always >= 0
    date: str | None

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "change": self.change, "date": self.date}


@dataclass(frozen=True, slots=True)
class RateSnapshot:
    current: CurrentRate
    last_decision: LastDecision
    history: tuple[RatePoint, ...]  # most recent first
    source: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "current": self.current.to_dict(),
            "lastDecision": self.last_decision.to_dict(),
            "history": [p.to_dict() for p in self.history],
            "source": self.source,
        }


# ── Rate-decision probabilities ─────────────────────────────────


@dataclass(frozen=True, slots=True)
class ProbabilitySet:
    cut: int
    hold: int
    hike: int
    source: str

    def to_dict(self) -> dict[str, Any]:
        return {"cut": self.cut, "hold": self.hold, "hike": self.hike, "source": self.source}


# ── Economic calendar ───────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    label: str  # "Anterior" | "Esperado" | "Atual" | placeholder
    value: str
    sentiment: Sentiment = "neutral"

    def to_dict(self) -> dict[str, Any]:
        return {"label": self.label, "value": self.value, "sentiment": self.sentiment}


@dataclass(frozen=True, slots=True)
class CalendarEvent:
    date: str
    day: int
    month: str
    year: int
    time: str
    title: str
    original_title: str
    country: str
    country_code: str
    impact: Impact
    previous: Any
    estimate: Any
    actual: Any
    history: tuple[HistoryEntry, ...]  # never empty

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "day": self.day,
            "month": self.month,
            "year": self.year,
            "time": self.time,
            "title": self.title,
            "originalTitle": self.original_title,
            "country": self.country,
            "countryCode": self.country_code,
            "impact": self.impact,
            "previous": self.previous,
            "estimate": self.estimate,
            "actual": self.actual,
            "history": [h.to_dict() for h in self.history],
        }


@dataclass(frozen=True, slots=True)
class CalendarSection:
    events: tuple[CalendarEvent, ...]
    source: str

    def to_dict(self) -> dict[str, Any]:
        return {"events": [e.to_dict() for e in self.events], "source": self.source}


# ── Market indicators ───────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class MarketIndicator:
    name: str
    desc: str
    icon: str
    icon_class: str
    value: str  # display string, e.g. "$2650.40" or "4.213%"
    raw_value: float
    change: float  # % vs previous close, 2 decimals
    prev_close: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "desc": self.desc,
            "icon": self.icon,
            "iconClass": self.icon_class,
            "value": self.value,
            "rawValue": self.raw_value,
            "change": self.change,
            "prevClose": self.prev_close,
        }


@dataclass(frozen=True, slots=True)
class MarketSection:
    indicators: tuple[MarketIndicator, ...]
    source: str

    def to_dict(self) -> dict[str, Any]:
        return {"indicators": [i.to_dict() for i in self.indicators], "source": self.source}


# ── Policy meetings ─────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class Meeting:
    date: str  # YYYY-MM-DD, decision day
    label: str
    time: str

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.date, "label": self.label, "time": self.time}


@dataclass(frozen=True, slots=True)
class UpcomingMeeting:
    meeting: Meeting
    days_until: int

    def to_dict(self) -> dict[str, Any]:
        return {**self.meeting.to_dict(), "daysUntil": self.days_until}


# ── Root document ───────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class MacroSnapshot:
    """One run's output.  Terminal once written; the next run replaces it."""

    last_update: str
    next_meetings: tuple[UpcomingMeeting, ...]
    fed_rate: RateSnapshot | None
    probabilities: ProbabilitySet | None
    calendar: CalendarSection | None
    market_indicators: MarketSection | None
    errors: tuple[str, ...] = ()
    section_status: dict[str, dict[str, str]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        def _opt(v: Any) -> Any:
            return v.to_dict() if v is not None else None

        return {
            "lastUpdate": self.last_update,
            "nextMeetings": [m.to_dict() for m in self.next_meetings],
            "fedRate": _opt(self.fed_rate),
            "probabilities": _opt(self.probabilities),
            "calendar": _opt(self.calendar),
            "marketIndicators": _opt(self.market_indicators),
            "errors": list(self.errors),
            "sectionStatus": self.section_status,
        }
