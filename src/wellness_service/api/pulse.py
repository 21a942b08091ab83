"""Community pulse questions and answers."""
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status

from ..domain import PulseService
from ..domain.pulse import QuestionWithStats
from ..schemas import PulseAnswerCreate, PulseAnswerResponse, PulseQuestionResponse
from .dependencies import CurrentUser, get_pulse_service

router = APIRouter(prefix="/pulse", tags=["Community Pulse"])

PulseServiceDep = Annotated[PulseService, Depends(get_pulse_service)]


def question_to_response(item: QuestionWithStats) -> PulseQuestionResponse:
    return PulseQuestionResponse.model_validate(item.question).model_copy(update={
        "answer_count": item.answer_count,
        "user_has_answered": item.user_has_answered,
        "answer_distribution": item.answer_distribution,
    })


@router.get("/featured", response_model=PulseQuestionResponse | None)
async def featured_question(user_id: CurrentUser, pulse_service: PulseServiceDep) -> PulseQuestionResponse | None:
    item = await pulse_service.featured(user_id)
    return question_to_response(item) if item else None


@router.get("/questions", response_model=list[PulseQuestionResponse])
async def list_questions(user_id: CurrentUser, pulse_service: PulseServiceDep) -> list[PulseQuestionResponse]:
    return [question_to_response(item) for item in await pulse_service.questions(user_id)]


@router.get("/my-answers", response_model=list[PulseAnswerResponse])
async def my_answers(user_id: CurrentUser, pulse_service: PulseServiceDep) -> list[PulseAnswerResponse]:
    return [PulseAnswerResponse.model_validate(a) for a in await pulse_service.my_answers(user_id)]


@router.post("/answer", response_model=PulseAnswerResponse, status_code=status.HTTP_201_CREATED)
async def answer_question(body: PulseAnswerCreate, user_id: CurrentUser,
                          pulse_service: PulseServiceDep) -> PulseAnswerResponse:
    """One answer per user and question; a second attempt is rejected."""
    answer = await pulse_service.answer(user_id, body.question_id, body.selected_option, body.explanation_text)
    return PulseAnswerResponse.model_validate(answer)
