"""Time-window resolution for ranking periods."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Protocol
from zoneinfo import ZoneInfo

from app.models.ranking import Period, Window

Midnight = Callable[[date], datetime]


class Clock(Protocol):
    def now(self) -> datetime: ...

    def midnight(self, day: date) -> datetime: ...


@dataclass(frozen=True, slots=True)
class SystemClock:
    """Wall clock in the configured zone, or the server's local zone when unset."""

    timezone: str | None = None

    def now(self) -> datetime:
        if self.timezone:
            return datetime.now(tz=ZoneInfo(self.timezone))
        return datetime.now().astimezone()

    def midnight(self, day: date) -> datetime:
        if self.timezone:
            return datetime.combine(day, time.min, tzinfo=ZoneInfo(self.timezone))
        # Naive astimezone() applies the local offset in effect on that day.
        return datetime.combine(day, time.min).astimezone()


def week_start_monday(day: date) -> date:
    return day - timedelta(days=day.weekday())


def resolve_window(period: Period, now: datetime, midnight: Midnight | None = None) -> Window:
    """Window for ``period`` containing ``now``.

    ``midnight`` maps a calendar day to its first instant; it defaults to
    midnight in ``now``'s own tzinfo, which is only right for zones whose
    offset does not change inside the period.
    """
    if now.tzinfo is None:
        raise ValueError("now must be timezone-aware")
    if midnight is None:

        def midnight(day: date) -> datetime:
            return datetime.combine(day, time.min, tzinfo=now.tzinfo)

    today = now.date()
    if period is Period.DAILY:
        start_day = today
        end_day = today + timedelta(days=1)
    elif period is Period.WEEKLY:
        start_day = week_start_monday(today)
        end_day = start_day + timedelta(days=7)
    else:
        raise ValueError(f"Unsupported ranking period: {period}")

    return Window(start=midnight(start_day), end=midnight(end_day))
