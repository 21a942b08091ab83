"""
Care coordination endpoints.

Resources, care team, messages, appointments and their calendar,
collaborative care goals and care events.
"""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query, Request, status
import structlog

from ..domain import CareService
from ..domain.calendar import AppointmentDraft
from ..domain.care import CalendarPage
from ..schemas import (
    AppointmentCreate,
    AppointmentResponse,
    AppointmentUpdate,
    CalendarDayResponse,
    CalendarResponse,
    CareEventCreate,
    CareEventResponse,
    CareGoalCreate,
    CareGoalProgressUpdate,
    CareGoalResponse,
    CareTeamMemberCreate,
    CareTeamMemberResponse,
    MessageCreate,
    MessageResponse,
    RatingResultResponse,
    ResourceRatingCreate,
    ResourceRatingResponse,
    ResourceResponse,
    SuccessResponse,
)
from .dependencies import CurrentUser, get_care_service

logger = structlog.get_logger(__name__)
router = APIRouter()

CareServiceDep = Annotated[CareService, Depends(get_care_service)]


def calendar_to_response(page: CalendarPage) -> CalendarResponse:
    return CalendarResponse(
        view=page.view.value,
        anchor=page.anchor,
        label=page.label,
        start=page.range.start,
        end=page.range.end,
        weeks=[[CalendarDayResponse.model_validate(cell) for cell in week] for week in page.weeks],
    )


# --- Resources ---


@router.get("/resources", response_model=list[ResourceResponse], tags=["Resources"])
async def list_resources(
    care_service: CareServiceDep,
    category: str | None = None,
) -> list[ResourceResponse]:
    """Resources ordered by average rating, highest first."""
    resources = await care_service.resources(category)
    return [ResourceResponse.model_validate(resource) for resource in resources]


@router.post("/resources/{resource_id}/rate", response_model=RatingResultResponse,
             status_code=status.HTTP_201_CREATED, tags=["Resources"])
async def rate_resource(
    resource_id: str,
    body: ResourceRatingCreate,
    user_id: CurrentUser,
    care_service: CareServiceDep,
) -> RatingResultResponse:
    outcome = await care_service.rate_resource(user_id, resource_id, body.rating, body.review)
    return RatingResultResponse(
        rating=ResourceRatingResponse.model_validate(outcome.rating),
        resource=ResourceResponse.model_validate(outcome.resource),
        care_team_member=(
            CareTeamMemberResponse.model_validate(outcome.care_team_member)
            if outcome.care_team_member else None
        ),
    )


# --- Care team and messages ---


@router.get("/care-team", response_model=list[CareTeamMemberResponse], tags=["Care Team"])
async def list_care_team(user_id: CurrentUser, care_service: CareServiceDep) -> list[CareTeamMemberResponse]:
    return [CareTeamMemberResponse.model_validate(m) for m in await care_service.care_team(user_id)]


@router.post("/care-team", response_model=CareTeamMemberResponse,
             status_code=status.HTTP_201_CREATED, tags=["Care Team"])
async def add_care_team_member(body: CareTeamMemberCreate, user_id: CurrentUser,
                               care_service: CareServiceDep) -> CareTeamMemberResponse:
    member = await care_service.add_care_team_member(user_id, body.model_dump())
    return CareTeamMemberResponse.model_validate(member)


@router.get("/messages", response_model=list[MessageResponse], tags=["Care Team"])
async def list_messages(user_id: CurrentUser, care_service: CareServiceDep) -> list[MessageResponse]:
    """Messages oldest first."""
    return [MessageResponse.model_validate(m) for m in await care_service.messages(user_id)]


@router.post("/messages", response_model=MessageResponse, status_code=status.HTTP_201_CREATED, tags=["Care Team"])
async def send_message(body: MessageCreate, user_id: CurrentUser, care_service: CareServiceDep) -> MessageResponse:
    message = await care_service.send_message(user_id, body.content, body.sender_type, body.sender_id)
    return MessageResponse.model_validate(message)


# --- Appointments ---


@router.get("/appointments", response_model=list[AppointmentResponse], tags=["Appointments"])
async def list_appointments(user_id: CurrentUser, care_service: CareServiceDep) -> list[AppointmentResponse]:
    return [AppointmentResponse.model_validate(a) for a in await care_service.appointments(user_id)]


@router.get("/appointments/calendar", response_model=CalendarResponse, tags=["Appointments"])
async def appointment_calendar(
    user_id: CurrentUser,
    care_service: CareServiceDep,
    view: Literal["week", "month"] = "week",
    anchor: Annotated[date | None, Query(alias="date")] = None,
) -> CalendarResponse:
    anchor = anchor or datetime.now(timezone.utc).date()
    return calendar_to_response(await care_service.calendar(user_id, view, anchor))


@router.post("/appointments", response_model=AppointmentResponse,
             status_code=status.HTTP_201_CREATED, tags=["Appointments"])
async def create_appointment(
    body: AppointmentCreate,
    request: Request,
    user_id: CurrentUser,
    care_service: CareServiceDep,
) -> AppointmentResponse:
    draft = AppointmentDraft(
        title=body.title,
        provider=body.provider,
        datetime=body.datetime,
        notes=body.notes or "",
    )
    appointment = await care_service.create_appointment(user_id, draft)
    request.app.state.service.increment_stat("appointments_changed")
    return AppointmentResponse.model_validate(appointment)


@router.patch("/appointments/{appointment_id}", response_model=SuccessResponse, tags=["Appointments"])
async def update_appointment(
    appointment_id: str,
    body: AppointmentUpdate,
    request: Request,
    user_id: CurrentUser,
    care_service: CareServiceDep,
) -> SuccessResponse:
    await care_service.update_appointment(user_id, appointment_id, body.model_dump(exclude_unset=True))
    request.app.state.service.increment_stat("appointments_changed")
    return SuccessResponse()


@router.delete("/appointments/{appointment_id}", response_model=SuccessResponse, tags=["Appointments"])
async def delete_appointment(
    appointment_id: str,
    request: Request,
    user_id: CurrentUser,
    care_service: CareServiceDep,
) -> SuccessResponse:
    await care_service.delete_appointment(user_id, appointment_id)
    request.app.state.service.increment_stat("appointments_changed")
    return SuccessResponse()


# --- Collaborative care goals ---


@router.get("/collaborative-care-goals", response_model=list[CareGoalResponse], tags=["Collaborative Care"])
async def list_care_goals(user_id: CurrentUser, care_service: CareServiceDep) -> list[CareGoalResponse]:
    return [CareGoalResponse.model_validate(g) for g in await care_service.care_goals(user_id)]


@router.post("/collaborative-care-goals", response_model=CareGoalResponse,
             status_code=status.HTTP_201_CREATED, tags=["Collaborative Care"])
async def create_care_goal(body: CareGoalCreate, user_id: CurrentUser,
                           care_service: CareServiceDep) -> CareGoalResponse:
    return CareGoalResponse.model_validate(await care_service.create_care_goal(user_id, body.model_dump()))


@router.patch("/collaborative-care-goals/{goal_id}/progress", response_model=CareGoalResponse,
              tags=["Collaborative Care"])
async def update_care_goal_progress(goal_id: str, body: CareGoalProgressUpdate, user_id: CurrentUser,
                                    care_service: CareServiceDep) -> CareGoalResponse:
    goal = await care_service.update_care_goal_progress(user_id, goal_id, body.progress)
    return CareGoalResponse.model_validate(goal)


# --- Care events ---


@router.get("/care-events", response_model=list[CareEventResponse], tags=["Collaborative Care"])
async def list_care_events(
    user_id: CurrentUser,
    care_service: CareServiceDep,
    severity: Literal["low", "medium", "high", "urgent"] | None = None,
) -> list[CareEventResponse]:
    return [CareEventResponse.model_validate(e) for e in await care_service.care_events(user_id, severity)]


@router.post("/care-events", response_model=CareEventResponse,
             status_code=status.HTTP_201_CREATED, tags=["Collaborative Care"])
async def create_care_event(body: CareEventCreate, user_id: CurrentUser,
                            care_service: CareServiceDep) -> CareEventResponse:
    values = body.model_dump(exclude={"metadata"})
    values["event_metadata"] = body.metadata
    return CareEventResponse.model_validate(await care_service.create_care_event(user_id, values))
