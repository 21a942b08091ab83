"""
Tests for appointment calendar helpers.
"""
from dataclasses import dataclass
from datetime import date, datetime, timezone

import pytest

from siani_common.exceptions import ValidationError
from wellness_service.domain.calendar import (
    AppointmentDraft,
    CalendarView,
    Direction,
    add_months,
    appointments_for_day,
    format_month_label,
    format_week_label,
    month_grid,
    month_range,
    navigate,
    visible_range,
    week_cells,
    week_range,
)


@dataclass
class FakeAppointment:
    title: str
    datetime: datetime


def at(day: int, month: int = 3, hour: int = 10) -> datetime:
    return datetime(2025, month, day, hour, tzinfo=timezone.utc)


class TestRanges:
    """Week and month ranges."""

    def test_week_starts_on_sunday(self) -> None:
        # 2025-03-12 is a Wednesday
        week = week_range(date(2025, 3, 12))
        assert week.start == date(2025, 3, 9)
        assert week.end == date(2025, 3, 15)
        assert len(week.days()) == 7

    def test_sunday_anchor_is_its_own_week_start(self) -> None:
        assert week_range(date(2025, 3, 9)).start == date(2025, 3, 9)

    def test_month_range(self) -> None:
        month = month_range(date(2024, 2, 17))
        assert month.start == date(2024, 2, 1)
        assert month.end == date(2024, 2, 29)

    def test_visible_range_follows_view(self) -> None:
        anchor = date(2025, 3, 12)
        assert visible_range(anchor, "week") == week_range(anchor)
        assert visible_range(anchor, CalendarView.MONTH) == month_range(anchor)


class TestNavigation:
    """Moving the visible anchor."""

    def test_week_next_moves_seven_days(self) -> None:
        assert navigate(date(2025, 3, 12), CalendarView.WEEK, Direction.NEXT) == date(2025, 3, 19)

    def test_week_prev_moves_seven_days(self) -> None:
        assert navigate(date(2025, 3, 12), "week", "prev") == date(2025, 3, 5)

    def test_week_navigation_crosses_month(self) -> None:
        assert navigate(date(2025, 3, 28), "week", "next") == date(2025, 4, 4)

    def test_month_navigation(self) -> None:
        assert navigate(date(2025, 3, 12), "month", "next") == date(2025, 4, 12)
        assert navigate(date(2025, 1, 12), "month", "prev") == date(2024, 12, 12)

    def test_add_months_clamps_day(self) -> None:
        assert add_months(date(2025, 1, 31), 1) == date(2025, 2, 28)

    def test_unknown_direction_rejected(self) -> None:
        with pytest.raises(ValueError):
            navigate(date(2025, 3, 12), "week", "sideways")


class TestGrids:
    """Day cells with their appointments."""

    def test_appointments_for_day(self) -> None:
        items = [FakeAppointment("a", at(12)), FakeAppointment("b", at(13)), FakeAppointment("c", at(12, hour=15))]
        assert [a.title for a in appointments_for_day(items, date(2025, 3, 12))] == ["a", "c"]

    def test_week_cells(self) -> None:
        items = [FakeAppointment("checkup", at(12))]
        cells = week_cells(date(2025, 3, 12), items, today=date(2025, 3, 10))

        assert [cell.day.day for cell in cells] == [9, 10, 11, 12, 13, 14, 15]
        assert [cell.has_appointment for cell in cells] == [False, False, False, True, False, False, False]
        assert cells[1].is_today
        assert all(cell.in_month for cell in cells)

    def test_month_grid_pads_whole_weeks(self) -> None:
        # March 2025 starts on Saturday and ends on Monday
        weeks = month_grid(date(2025, 3, 1), [], today=date(2025, 3, 1))

        assert len(weeks) == 6
        assert all(len(week) == 7 for week in weeks)
        assert weeks[0][0].day == date(2025, 2, 23)
        assert not weeks[0][0].in_month
        assert weeks[0][6].day == date(2025, 3, 1)
        assert weeks[0][6].is_today
        assert weeks[-1][-1].day == date(2025, 4, 5)

    def test_labels(self) -> None:
        assert format_week_label(date(2025, 3, 12)) == "Mar 9 - Mar 15, 2025"
        assert format_month_label(date(2025, 3, 12)) == "March 2025"


class TestAppointmentDraft:
    """Required fields on the appointment form."""

    def test_missing_fields_rejected(self) -> None:
        draft = AppointmentDraft(title="  ", provider="Dr. Lee")
        with pytest.raises(ValidationError) as exc_info:
            draft.validate()
        assert exc_info.value.field == "title"
        assert exc_info.value.user_message == "Please fill in all required fields."

    def test_to_values_strips_text(self) -> None:
        draft = AppointmentDraft(title=" Checkup ", provider=" Dr. Lee ", datetime=at(12), notes="")
        assert draft.to_values() == {
            "title": "Checkup", "provider": "Dr. Lee", "datetime": at(12), "notes": None,
        }
