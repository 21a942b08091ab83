"""
SIANI Wellness Service - Community pulse questions.

Short community questions shown on the home base. Each user answers a
question once; answer distributions are revealed only after answering.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

import structlog

from siani_common.exceptions import ValidationError
from siani_infrastructure.database.entities import PulseAnswer, PulseQuestion
from ..infrastructure.repository import WellnessRepository

logger = structlog.get_logger(__name__)

ALREADY_ANSWERED_MESSAGE = "You have already answered this question"


@dataclass
class QuestionWithStats:
    question: PulseQuestion
    answer_count: int = 0
    user_has_answered: bool = False
    answer_distribution: dict[str, int] | None = field(default=None)


class PulseService:
    def __init__(self, repository: WellnessRepository) -> None:
        self._repository = repository
        self._stats = {"answers": 0, "duplicate_answers": 0}
        logger.info("pulse_service_initialized")

    async def featured(self, user_id: str) -> QuestionWithStats | None:
        question = await self._repository.first(
            PulseQuestion,
            filters={"featured": True, "show_in_homebase": True},
            order_by=[PulseQuestion.created_at.desc()],
        )
        if question is None:
            return None
        return await self._with_stats(question, user_id)

    async def questions(self, user_id: str) -> list[QuestionWithStats]:
        """Home base questions, newest first."""
        questions = await self._repository.list(
            PulseQuestion, filters={"show_in_homebase": True}, order_by=[PulseQuestion.created_at.desc()],
        )
        return [await self._with_stats(question, user_id) for question in questions]

    async def my_answers(self, user_id: str) -> list[PulseAnswer]:
        return await self._repository.list(
            PulseAnswer, user_id=user_id, order_by=[PulseAnswer.answered_at.desc()],
        )

    async def answer(self, user_id: str, question_id: str, selected_option: str | None = None,
                     explanation_text: str | None = None) -> PulseAnswer:
        await self._repository.get_or_raise(PulseQuestion, question_id)
        summary = await self._repository.pulse_answer_summary(question_id, user_id)
        if summary["user_has_answered"]:
            self._stats["duplicate_answers"] += 1
            raise ValidationError(
                f"User {user_id} already answered question {question_id}",
                field="questionId",
                value=question_id,
                constraint="one answer per question",
                user_message=ALREADY_ANSWERED_MESSAGE,
            )
        answered_at = datetime.now(timezone.utc)
        answer = await self._repository.create(
            PulseAnswer,
            user_id=user_id,
            question_id=question_id,
            selected_option=selected_option,
            explanation_text=explanation_text,
            answered_at=answered_at,
            user_snapshot={"timestamp": answered_at.isoformat()},
        )
        self._stats["answers"] += 1
        logger.info("pulse_answer_recorded", user_id=user_id, question_id=question_id)
        return answer

    async def _with_stats(self, question: PulseQuestion, user_id: str) -> QuestionWithStats:
        summary = await self._repository.pulse_answer_summary(question.id, user_id)
        answered = summary["user_has_answered"]
        return QuestionWithStats(
            question=question,
            answer_count=summary["answer_count"],
            user_has_answered=answered,
            answer_distribution=summary["distribution"] if answered else None,
        )

    @property
    def stats(self) -> dict[str, int]:
        return dict(self._stats)
