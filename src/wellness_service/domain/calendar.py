"""
SIANI Wellness Service - Appointment calendar helpers.

Week and month views over a user's appointments. Weeks run Sunday to
Saturday; appointments are matched to a day by calendar date.
"""
from __future__ import annotations

import calendar as _calendar
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Protocol

from siani_common.exceptions import ValidationError


class CalendarView(str, Enum):
    WEEK = "week"
    MONTH = "month"


class Direction(str, Enum):
    PREV = "prev"
    NEXT = "next"


class HasDatetime(Protocol):
    datetime: datetime


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def days(self) -> list[date]:
        return [self.start + timedelta(days=i) for i in range((self.end - self.start).days + 1)]


@dataclass
class DayCell:
    day: date
    is_today: bool = False
    in_month: bool = True
    appointments: list[Any] = field(default_factory=list)

    @property
    def has_appointment(self) -> bool:
        return bool(self.appointments)


def week_range(anchor: date) -> DateRange:
    """Sunday through Saturday of the week containing ``anchor``."""
    # date.weekday() is Monday=0; shift so Sunday starts the week
    start = anchor - timedelta(days=(anchor.weekday() + 1) % 7)
    return DateRange(start, start + timedelta(days=6))


def month_range(anchor: date) -> DateRange:
    last_day = _calendar.monthrange(anchor.year, anchor.month)[1]
    return DateRange(anchor.replace(day=1), anchor.replace(day=last_day))


def add_months(anchor: date, months: int) -> date:
    """Move by whole calendar months, clamping the day to the target month."""
    index = anchor.year * 12 + anchor.month - 1 + months
    year, month = divmod(index, 12)
    month += 1
    day = min(anchor.day, _calendar.monthrange(year, month)[1])
    return date(year, month, day)


def navigate(anchor: date, view: CalendarView | str, direction: Direction | str) -> date:
    """Move the visible anchor one week or one month back or forward."""
    view = CalendarView(view)
    step = 1 if Direction(direction) is Direction.NEXT else -1
    if view is CalendarView.WEEK:
        return anchor + timedelta(days=7 * step)
    return add_months(anchor, step)


def visible_range(anchor: date, view: CalendarView | str) -> DateRange:
    if CalendarView(view) is CalendarView.WEEK:
        return week_range(anchor)
    return month_range(anchor)


def appointments_for_day(appointments: Iterable[HasDatetime], day: date) -> list[HasDatetime]:
    return [appointment for appointment in appointments if appointment.datetime.date() == day]


def month_grid(anchor: date, appointments: Iterable[HasDatetime] = (), today: date | None = None) -> list[list[DayCell]]:
    """Whole weeks covering the month of ``anchor``, padded with adjacent days."""
    today = today or date.today()
    month = month_range(anchor)
    start = week_range(month.start).start
    end = week_range(month.end).end
    items = list(appointments)
    weeks: list[list[DayCell]] = []
    for offset in range(0, (end - start).days + 1, 7):
        week_start = start + timedelta(days=offset)
        weeks.append([
            _cell(week_start + timedelta(days=i), items, today, month)
            for i in range(7)
        ])
    return weeks


def week_cells(anchor: date, appointments: Iterable[HasDatetime] = (), today: date | None = None) -> list[DayCell]:
    today = today or date.today()
    week = week_range(anchor)
    items = list(appointments)
    return [_cell(day, items, today, None) for day in week.days()]


def format_week_label(anchor: date) -> str:
    week = week_range(anchor)
    return f"{week.start:%b} {week.start.day} - {week.end:%b} {week.end.day}, {week.end.year}"


def format_month_label(anchor: date) -> str:
    return f"{anchor:%B %Y}"


def _cell(day: date, appointments: list[HasDatetime], today: date, month: DateRange | None) -> DayCell:
    return DayCell(
        day=day,
        is_today=day == today,
        in_month=month is None or month.contains(day),
        appointments=appointments_for_day(appointments, day),
    )


@dataclass
class AppointmentDraft:
    """Form state for creating or editing an appointment."""
    title: str = ""
    provider: str = ""
    datetime: datetime | None = None
    notes: str = ""

    def validate(self) -> None:
        missing = [name for name in ("title", "provider") if not getattr(self, name).strip()]
        if self.datetime is None:
            missing.append("datetime")
        if missing:
            raise ValidationError(
                f"Appointment is missing required fields: {', '.join(missing)}",
                field=missing[0],
                constraint="required",
                user_message="Please fill in all required fields.",
            )

    def to_values(self) -> dict[str, Any]:
        self.validate()
        return {
            "title": self.title.strip(),
            "provider": self.provider.strip(),
            "datetime": self.datetime,
            "notes": self.notes or None,
        }
