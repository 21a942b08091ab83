"""
SIANI Wellness Service - Intake responses and partner referrals.

High-severity intake answers open a pending referral for every referral tag
they carry, so a community health worker can follow up.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import structlog

from siani_common.exceptions import ValidationError
from siani_infrastructure.database.entities import IntakeResponse, Referral, ReferralStatus
from ..infrastructure.repository import WellnessRepository

logger = structlog.get_logger(__name__)

AUTO_REFERRAL_SEVERITY = "high"


def referral_description(response: IntakeResponse, tag: str) -> str:
    return f"Auto-generated from {response.domain} intake ({response.field}): {tag.replace('_', ' ')}"


class IntakeService:
    def __init__(self, repository: WellnessRepository) -> None:
        self._repository = repository
        self._stats = {"responses": 0, "auto_referrals": 0}
        logger.info("intake_service_initialized")

    async def responses(self, user_id: str) -> list[IntakeResponse]:
        return await self._repository.list(
            IntakeResponse, user_id=user_id, order_by=[IntakeResponse.created_at.desc()],
        )

    async def record_response(self, user_id: str, values: dict[str, Any]) -> tuple[IntakeResponse, list[Referral]]:
        """Store an intake answer and any referrals it triggers."""
        response = await self._repository.create(IntakeResponse, user_id=user_id, **values)
        self._stats["responses"] += 1
        referrals: list[Referral] = []
        if response.severity == AUTO_REFERRAL_SEVERITY:
            for tag in dict.fromkeys(response.referral_tags or []):
                referrals.append(await self._repository.create(
                    Referral,
                    user_id=user_id,
                    referral_type=tag,
                    status=ReferralStatus.PENDING.value,
                    description=referral_description(response, tag),
                    urgency=AUTO_REFERRAL_SEVERITY,
                ))
            self._stats["auto_referrals"] += len(referrals)
            if referrals:
                logger.info("intake_referrals_opened", user_id=user_id, domain=response.domain,
                            count=len(referrals))
        return response, referrals

    async def referrals(self, user_id: str, status: str | None = None) -> list[Referral]:
        return await self._repository.list(
            Referral,
            user_id=user_id,
            filters={"status": status} if status else None,
            order_by=[Referral.created_at.desc()],
        )

    async def create_referral(self, user_id: str, values: dict[str, Any]) -> Referral:
        if values.get("status") == ReferralStatus.SENT.value and not values.get("date_sent"):
            values = {**values, "date_sent": datetime.now(timezone.utc)}
        return await self._repository.create(Referral, user_id=user_id, **values)

    async def update_referral_status(self, user_id: str, referral_id: str, status: str) -> Referral:
        try:
            status = ReferralStatus(status).value
        except ValueError as e:
            raise ValidationError(
                f"Unknown referral status: {status}",
                field="status",
                value=status,
                constraint=", ".join(s.value for s in ReferralStatus),
                user_message="Invalid referral status",
            ) from e
        current = await self._repository.get_or_raise(Referral, referral_id, user_id=user_id)
        values: dict[str, Any] = {"status": status}
        if status == ReferralStatus.SENT.value and current.status != status:
            values["date_sent"] = datetime.now(timezone.utc)
        referral = await self._repository.update(Referral, referral_id, values, user_id=user_id)
        logger.info("referral_status_changed", user_id=user_id, referral_id=referral_id, status=status)
        return referral

    @property
    def stats(self) -> dict[str, int]:
        return dict(self._stats)
