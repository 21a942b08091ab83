"""Family involvement endpoints: members and invites, messages, shared insights, goals, notifications."""
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from ..domain import FamilyService
from ..schemas import (
    FamilyCommunicationCreate,
    FamilyCommunicationResponse,
    FamilyGoalCreate,
    FamilyGoalResponse,
    FamilyMemberCreate,
    FamilyMemberResponse,
    FamilyNotificationCreate,
    FamilyNotificationResponse,
    InviteResponseRequest,
    SharedInsightCreate,
    SharedInsightResponse,
    SharedInsightView,
)
from .dependencies import CurrentUser, get_family_service

router = APIRouter(tags=["Family"])

FamilyServiceDep = Annotated[FamilyService, Depends(get_family_service)]


@router.get("/family-members", response_model=list[FamilyMemberResponse])
async def list_family_members(user_id: CurrentUser, family_service: FamilyServiceDep) -> list[FamilyMemberResponse]:
    return [FamilyMemberResponse.model_validate(m) for m in await family_service.members(user_id)]


@router.post("/family-members", response_model=FamilyMemberResponse, status_code=status.HTTP_201_CREATED)
async def invite_family_member(body: FamilyMemberCreate, user_id: CurrentUser,
                               family_service: FamilyServiceDep) -> FamilyMemberResponse:
    """Add a family member with a fresh pending invite code."""
    return FamilyMemberResponse.model_validate(await family_service.add_member(user_id, body.model_dump()))


@router.post("/family-members/invites/{invite_code}/respond", response_model=FamilyMemberResponse)
async def respond_to_invite(invite_code: str, body: InviteResponseRequest,
                            family_service: FamilyServiceDep) -> FamilyMemberResponse:
    return FamilyMemberResponse.model_validate(await family_service.respond_to_invite(invite_code, body.status))


@router.get("/family-communication", response_model=list[FamilyCommunicationResponse])
async def list_family_communication(user_id: CurrentUser,
                                    family_service: FamilyServiceDep) -> list[FamilyCommunicationResponse]:
    return [FamilyCommunicationResponse.model_validate(c) for c in await family_service.communications(user_id)]


@router.post("/family-communication", response_model=FamilyCommunicationResponse,
             status_code=status.HTTP_201_CREATED)
async def send_family_communication(body: FamilyCommunicationCreate, user_id: CurrentUser,
                                    family_service: FamilyServiceDep) -> FamilyCommunicationResponse:
    values = body.model_dump(exclude_none=True)
    return FamilyCommunicationResponse.model_validate(await family_service.send_communication(user_id, values))


@router.get("/shared-wellness-insights", response_model=list[SharedInsightResponse])
async def list_shared_insights(
    user_id: CurrentUser,
    family_service: FamilyServiceDep,
    family_member_id: Annotated[str | None, Query(alias="familyMemberId")] = None,
) -> list[SharedInsightResponse]:
    insights = await family_service.shared_insights(user_id, family_member_id)
    return [SharedInsightResponse.model_validate(i) for i in insights]


@router.post("/shared-wellness-insights", response_model=SharedInsightResponse,
             status_code=status.HTTP_201_CREATED)
async def share_insight(body: SharedInsightCreate, user_id: CurrentUser,
                        family_service: FamilyServiceDep) -> SharedInsightResponse:
    return SharedInsightResponse.model_validate(await family_service.share_insight(user_id, body.model_dump()))


@router.post("/shared-wellness-insights/{insight_id}/view", response_model=SharedInsightResponse)
async def mark_insight_viewed(insight_id: str, body: SharedInsightView, user_id: CurrentUser,
                              family_service: FamilyServiceDep) -> SharedInsightResponse:
    insight = await family_service.mark_insight_viewed(user_id, insight_id, body.viewer_id)
    return SharedInsightResponse.model_validate(insight)


@router.get("/family-goals", response_model=list[FamilyGoalResponse])
async def list_family_goals(user_id: CurrentUser, family_service: FamilyServiceDep) -> list[FamilyGoalResponse]:
    return [FamilyGoalResponse.model_validate(g) for g in await family_service.goals(user_id)]


@router.post("/family-goals", response_model=FamilyGoalResponse, status_code=status.HTTP_201_CREATED)
async def create_family_goal(body: FamilyGoalCreate, user_id: CurrentUser,
                             family_service: FamilyServiceDep) -> FamilyGoalResponse:
    return FamilyGoalResponse.model_validate(await family_service.create_goal(user_id, body.model_dump()))


@router.get("/family-notifications", response_model=list[FamilyNotificationResponse])
async def list_family_notifications(
    user_id: CurrentUser,
    family_service: FamilyServiceDep,
    unread_only: Annotated[bool, Query(alias="unreadOnly")] = False,
) -> list[FamilyNotificationResponse]:
    notifications = await family_service.notifications(user_id, unread_only)
    return [FamilyNotificationResponse.model_validate(n) for n in notifications]


@router.post("/family-notifications", response_model=FamilyNotificationResponse,
             status_code=status.HTTP_201_CREATED)
async def send_family_notification(body: FamilyNotificationCreate, user_id: CurrentUser,
                                   family_service: FamilyServiceDep) -> FamilyNotificationResponse:
    return FamilyNotificationResponse.model_validate(await family_service.notify(user_id, body.model_dump()))


@router.patch("/family-notifications/{notification_id}/read", response_model=FamilyNotificationResponse)
async def mark_notification_read(notification_id: str, user_id: CurrentUser,
                                 family_service: FamilyServiceDep) -> FamilyNotificationResponse:
    notification = await family_service.mark_notification_read(user_id, notification_id)
    return FamilyNotificationResponse.model_validate(notification)
