"""Known FOMC decision dates.

Hand-maintained: extend the table when the Fed publishes the next
year's schedule.  Entries MUST stay in ascending date order – lookups
walk the table front to back and never re-sort.
"""

from __future__ import annotations

import math
from collections.abc import Iterator
from datetime import datetime, timezone

from .common_types import Meeting, UpcomingMeeting

FOMC_MEETINGS: tuple[Meeting, ...] = (
    Meeting("2025-01-29", "28-29 Jan 2025", "16:00"),
    Meeting("2025-03-19", "18-19 Mar 2025", "16:00"),
    Meeting("2025-05-07", "6-7 Mai 2025", "16:00"),
    Meeting("2025-06-18", "17-18 Jun 2025", "16:00"),
    Meeting("2025-07-30", "29-30 Jul 2025", "16:00"),
    Meeting("2025-09-17", "16-17 Set 2025", "16:00"),
    Meeting("2025-11-05", "4-5 Nov 2025", "16:00"),
    Meeting("2025-12-17", "16-17 Dez 2025", "16:00"),
    Meeting("2026-01-28", "27-28 Jan 2026", "16:00"),
    Meeting("2026-03-18", "17-18 Mar 2026", "16:00"),
    Meeting("2026-05-06", "5-6 Mai 2026", "16:00"),
    Meeting("2026-06-17", "16-17 Jun 2026", "16:00"),
    Meeting("2026-07-29", "28-29 Jul 2026", "16:00"),
    Meeting("2026-09-16", "15-16 Set 2026", "16:00"),
    Meeting("2026-11-04", "3-4 Nov 2026", "16:00"),
    Meeting("2026-12-16", "15-16 Dez 2026", "16:00"),
    Meeting("2027-01-27", "26-27 Jan 2027", "16:00"),
    Meeting("2027-03-17", "16-17 Mar 2027", "16:00"),
    Meeting("2027-05-05", "4-5 Mai 2027", "16:00"),
    Meeting("2027-06-16", "15-16 Jun 2027", "16:00"),
    Meeting("2027-07-28", "27-28 Jul 2027", "16:00"),
    Meeting("2027-09-22", "21-22 Set 2027", "16:00"),
    Meeting("2027-11-03", "2-3 Nov 2027", "16:00"),
    Meeting("2027-12-15", "14-15 Dez 2027", "16:00"),
)

_DAY_SECONDS = 86400.0


def meeting_datetime(m: Meeting) -> datetime:
    """Decision date as midnight UTC."""
    return datetime.strptime(m.date, "%Y-%m-%d").replace(tzinfo=timezone.utc)


def _utc_now(now: datetime | None) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def upcoming(
    now: datetime | None = None,
    meetings: tuple[Meeting, ...] = FOMC_MEETINGS,
) -> Iterator[Meeting]:
    """Yield meetings strictly after *now*, in table order."""
    ref = _utc_now(now)
    for m in meetings:
        if meeting_datetime(m) > ref:
            yield m


def next_meetings(
    n: int,
    now: datetime | None = None,
    meetings: tuple[Meeting, ...] = FOMC_MEETINGS,
) -> list[UpcomingMeeting]:
    """First *n* meetings after *now* with a ceil-rounded day countdown."""
    ref = _utc_now(now)
    out: list[UpcomingMeeting] = []
    for m in upcoming(ref, meetings):
        if len(out) >= n:
            break
        delta = (meeting_datetime(m) - ref).total_seconds()
        out.append(UpcomingMeeting(m, math.ceil(delta / _DAY_SECONDS)))
    return out
