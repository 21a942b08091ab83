"""Reentry intake responses, partner referrals and the goal-focused intake conversation."""
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from ..domain import GoalIntakeService, IntakeService
from ..domain.goal_intake import TOTAL_STAGES
from ..schemas import (
    IntakeRecordResponse,
    IntakeResponseCreate,
    IntakeResultResponse,
    IntakeStageResponse,
    IntakeStartResponse,
    IntakeTurnRequest,
    IntakeTurnResponse,
    ReferralCreate,
    ReferralResponse,
    ReferralStatusUpdate,
)
from .dependencies import CurrentUser, get_goal_intake_service, get_intake_service

router = APIRouter(tags=["Intake"])

IntakeServiceDep = Annotated[IntakeService, Depends(get_intake_service)]


@router.get("/intake-responses", response_model=list[IntakeRecordResponse])
async def list_intake_responses(user_id: CurrentUser, intake: IntakeServiceDep) -> list[IntakeRecordResponse]:
    return [IntakeRecordResponse.model_validate(r) for r in await intake.responses(user_id)]


@router.post("/intake-responses", response_model=IntakeResultResponse, status_code=status.HTTP_201_CREATED)
async def record_intake_response(body: IntakeResponseCreate, user_id: CurrentUser,
                                 intake: IntakeServiceDep) -> IntakeResultResponse:
    """High severity answers open a pending referral for each tag."""
    response, referrals = await intake.record_response(user_id, body.model_dump())
    return IntakeResultResponse(
        response=IntakeRecordResponse.model_validate(response),
        referrals=[ReferralResponse.model_validate(r) for r in referrals],
    )


@router.get("/referrals", response_model=list[ReferralResponse])
async def list_referrals(
    user_id: CurrentUser,
    intake: IntakeServiceDep,
    referral_status: Annotated[str | None, Query(alias="status")] = None,
) -> list[ReferralResponse]:
    return [ReferralResponse.model_validate(r) for r in await intake.referrals(user_id, referral_status)]


@router.post("/referrals", response_model=ReferralResponse, status_code=status.HTTP_201_CREATED)
async def create_referral(body: ReferralCreate, user_id: CurrentUser, intake: IntakeServiceDep) -> ReferralResponse:
    return ReferralResponse.model_validate(await intake.create_referral(user_id, body.model_dump()))


@router.patch("/referrals/{referral_id}", response_model=ReferralResponse)
async def update_referral(referral_id: str, body: ReferralStatusUpdate, user_id: CurrentUser,
                          intake: IntakeServiceDep) -> ReferralResponse:
    return ReferralResponse.model_validate(await intake.update_referral_status(user_id, referral_id, body.status))


GoalIntakeServiceDep = Annotated[GoalIntakeService, Depends(get_goal_intake_service)]


@router.post("/intake/start", response_model=IntakeStartResponse)
async def start_goal_intake(goal_intake: GoalIntakeServiceDep) -> IntakeStartResponse:
    message, stage = goal_intake.start()
    return IntakeStartResponse(
        message=message,
        total_stages=TOTAL_STAGES,
        stage_info=IntakeStageResponse.model_validate(stage),
    )


@router.post("/intake/process", response_model=IntakeTurnResponse)
async def process_goal_intake(body: IntakeTurnRequest, goal_intake: GoalIntakeServiceDep) -> IntakeTurnResponse:
    """Reply to one answer; ``stageInfo`` describes the stage to continue with."""
    turn = await goal_intake.process(body.user_input, body.current_stage)
    return IntakeTurnResponse(
        stage=turn.stage,
        responses=turn.responses,
        insights=turn.insights,
        next_stage=turn.next_stage,
        completed=turn.completed,
        stage_info=IntakeStageResponse.model_validate(goal_intake.stage_info(turn.next_stage)),
    )


@router.get("/intake/stage/{stage}", response_model=IntakeStageResponse)
async def get_intake_stage(stage: int, goal_intake: GoalIntakeServiceDep) -> IntakeStageResponse:
    return IntakeStageResponse.model_validate(goal_intake.stage_info(stage))
