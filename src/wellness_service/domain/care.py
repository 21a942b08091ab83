"""
SIANI Wellness Service - Care coordination.

Resources and ratings, the user's care team and messages, appointments with
their calendar views, collaborative care goals and care events. List reads
go through the per-user query cache; every mutation invalidates the views it
touches.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any

import structlog

from siani_common.exceptions import ValidationError
from siani_infrastructure.database.entities import (
    FAMILY_ALERT_SEVERITIES,
    Appointment,
    CareEvent,
    CareTeamMember,
    CollaborativeCareGoal,
    Message,
    Resource,
    ResourceRating,
    SenderType,
)
from ..infrastructure.cache import SHARED_SCOPE, CacheView, QueryCache
from ..infrastructure.repository import WellnessRepository
from .calendar import (
    AppointmentDraft,
    CalendarView,
    DateRange,
    DayCell,
    format_month_label,
    format_week_label,
    month_grid,
    visible_range,
    week_cells,
)

logger = structlog.get_logger(__name__)

MIN_RATING, MAX_RATING = 1, 5


@dataclass
class CalendarPage:
    view: CalendarView
    anchor: date
    label: str
    range: DateRange
    weeks: list[list[DayCell]]


@dataclass
class RatingOutcome:
    rating: ResourceRating
    resource: Resource
    care_team_member: CareTeamMember | None


def validate_progress(progress: Any) -> int:
    if isinstance(progress, bool) or not isinstance(progress, int) or not 0 <= progress <= 100:
        raise ValidationError(
            f"Progress out of range: {progress!r}",
            field="progress",
            value=progress,
            constraint="integer 0..100",
            user_message="Progress must be between 0 and 100",
        )
    return progress


class CareService:
    """Resources, care team, messages, appointments, care goals and care events."""

    def __init__(self, repository: WellnessRepository, cache: QueryCache) -> None:
        self._repository = repository
        self._cache = cache
        self._stats = {"appointments_changed": 0, "ratings": 0, "care_events": 0}
        logger.info("care_service_initialized")

    # --- Resources ---

    async def resources(self, category: str | None = None) -> list[Resource]:
        """The shared catalogue, best rated first."""
        async def load() -> list[Resource]:
            return await self._repository.list(
                Resource,
                filters={"category": category} if category else None,
                order_by=[Resource.average_rating.desc(), Resource.title],
            )

        return await self._cache.get_or_load(SHARED_SCOPE, CacheView.RESOURCES, load, variant=category or "")

    async def rate_resource(self, user_id: str, resource_id: str, rating: int,
                            review: str | None = None) -> RatingOutcome:
        if not MIN_RATING <= rating <= MAX_RATING:
            raise ValidationError(
                f"Rating out of range: {rating}",
                field="rating",
                value=rating,
                constraint="1..5",
                user_message="Rating must be between 1 and 5",
            )
        entry, resource, member = await self._repository.rate_resource(user_id, resource_id, rating, review)
        self._cache.invalidate(SHARED_SCOPE, CacheView.RESOURCES)
        self._cache.invalidate(user_id, CacheView.CARE_TEAM)
        self._stats["ratings"] += 1
        return RatingOutcome(entry, resource, member)

    # --- Care team and messages ---

    async def care_team(self, user_id: str) -> list[CareTeamMember]:
        async def load() -> list[CareTeamMember]:
            return await self._repository.list(
                CareTeamMember, user_id=user_id, order_by=[CareTeamMember.date_added.desc()],
            )

        return await self._cache.get_or_load(user_id, CacheView.CARE_TEAM, load)

    async def add_care_team_member(self, user_id: str, values: dict[str, Any]) -> CareTeamMember:
        member = await self._repository.create(CareTeamMember, user_id=user_id, **values)
        self._cache.invalidate(user_id, CacheView.CARE_TEAM)
        logger.info("care_team_member_added", user_id=user_id, role=member.role)
        return member

    async def messages(self, user_id: str) -> list[Message]:
        async def load() -> list[Message]:
            return await self._repository.list(Message, user_id=user_id, order_by=[Message.timestamp.asc()])

        return await self._cache.get_or_load(user_id, CacheView.MESSAGES, load)

    async def send_message(self, user_id: str, content: str, sender_type: str = SenderType.USER.value,
                           sender_id: str | None = None) -> Message:
        message = await self._repository.create(
            Message,
            user_id=user_id,
            sender_id=sender_id or user_id,
            sender_type=SenderType(sender_type).value,
            content=content,
        )
        self._cache.invalidate(user_id, CacheView.MESSAGES)
        return message

    # --- Appointments ---

    async def appointments(self, user_id: str) -> list[Appointment]:
        """Soonest first."""
        async def load() -> list[Appointment]:
            return await self._repository.list(
                Appointment, user_id=user_id, order_by=[Appointment.datetime.asc()],
            )

        return await self._cache.get_or_load(user_id, CacheView.APPOINTMENTS, load)

    async def create_appointment(self, user_id: str, draft: AppointmentDraft) -> Appointment:
        appointment = await self._repository.create(Appointment, user_id=user_id, **draft.to_values())
        self._appointments_changed(user_id, "created", appointment.id)
        return appointment

    async def update_appointment(self, user_id: str, appointment_id: str, changes: dict[str, Any]) -> Appointment:
        current = await self._repository.get_or_raise(Appointment, appointment_id, user_id=user_id)
        draft = AppointmentDraft(
            title=changes.get("title", current.title),
            provider=changes.get("provider", current.provider),
            datetime=changes.get("datetime", current.datetime),
            notes=changes.get("notes", current.notes) or "",
        )
        appointment = await self._repository.update(
            Appointment, appointment_id, draft.to_values(), user_id=user_id,
        )
        self._appointments_changed(user_id, "updated", appointment_id)
        return appointment

    async def delete_appointment(self, user_id: str, appointment_id: str) -> None:
        await self._repository.delete(Appointment, appointment_id, user_id=user_id)
        self._appointments_changed(user_id, "deleted", appointment_id)

    async def calendar(self, user_id: str, view: CalendarView | str, anchor: date,
                       today: date | None = None) -> CalendarPage:
        view = CalendarView(view)
        today = today or datetime.now(timezone.utc).date()
        appointments = await self.appointments(user_id)
        if view is CalendarView.WEEK:
            weeks = [week_cells(anchor, appointments, today)]
            label = format_week_label(anchor)
        else:
            weeks = month_grid(anchor, appointments, today)
            label = format_month_label(anchor)
        return CalendarPage(view, anchor, label, visible_range(anchor, view), weeks)

    def _appointments_changed(self, user_id: str, action: str, appointment_id: str) -> None:
        self._cache.invalidate(user_id, CacheView.APPOINTMENTS)
        self._stats["appointments_changed"] += 1
        logger.info("appointment_changed", user_id=user_id, action=action, appointment_id=appointment_id)

    # --- Collaborative care goals ---

    async def care_goals(self, user_id: str) -> list[CollaborativeCareGoal]:
        return await self._repository.list(
            CollaborativeCareGoal, user_id=user_id, order_by=[CollaborativeCareGoal.created_at.desc()],
        )

    async def create_care_goal(self, user_id: str, values: dict[str, Any]) -> CollaborativeCareGoal:
        if "progress" in values:
            validate_progress(values["progress"])
        return await self._repository.create(
            CollaborativeCareGoal, user_id=user_id, created_by=user_id, creator_type="user", **values,
        )

    async def update_care_goal_progress(self, user_id: str, goal_id: str, progress: Any) -> CollaborativeCareGoal:
        values: dict[str, Any] = {
            "progress": validate_progress(progress),
            "updated_at": datetime.now(timezone.utc),
        }
        return await self._repository.update(CollaborativeCareGoal, goal_id, values, user_id=user_id)

    # --- Care events ---

    async def care_events(self, user_id: str, severity: str | None = None) -> list[CareEvent]:
        return await self._repository.list(
            CareEvent,
            user_id=user_id,
            filters={"severity": severity} if severity else None,
            order_by=[CareEvent.created_at.desc()],
        )

    async def create_care_event(self, user_id: str, values: dict[str, Any]) -> CareEvent:
        severity = values.get("severity", "low")
        values = {**values, "family_notified": values.get("family_notified", False)
                  or severity in FAMILY_ALERT_SEVERITIES}
        event = await self._repository.create(CareEvent, user_id=user_id, **values)
        self._stats["care_events"] += 1
        if event.family_notified:
            logger.warning("care_event_family_alert", user_id=user_id, severity=severity, event_id=event.id)
        return event

    @property
    def stats(self) -> dict[str, int]:
        return dict(self._stats)
