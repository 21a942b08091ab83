"""
Tests for intake responses and referrals.
"""
import pytest

from siani_common.exceptions import EntityNotFoundError, ValidationError
from wellness_service.domain.intake import IntakeService


def intake(severity: str, tags: list[str]) -> dict:
    return {
        "domain": "housing",
        "field": "current_housing",
        "response": "Staying with friends",
        "severity": severity,
        "referral_tags": tags,
    }


class TestIntakeService:
    """Automatic referrals and status changes."""

    @pytest.mark.asyncio
    async def test_high_severity_opens_one_referral_per_tag(self, repository) -> None:
        service = IntakeService(repository)
        response, referrals = await service.record_response(
            "user-1", intake("high", ["housing_assistance", "legal_aid", "housing_assistance"]),
        )

        assert response.domain == "housing"
        assert [r.referral_type for r in referrals] == ["housing_assistance", "legal_aid"]
        assert all(r.status == "pending" and r.urgency == "high" for r in referrals)
        assert referrals[0].description == (
            "Auto-generated from housing intake (current_housing): housing assistance"
        )
        assert service.stats == {"responses": 1, "auto_referrals": 2}

    @pytest.mark.asyncio
    async def test_lower_severity_opens_nothing(self, repository) -> None:
        service = IntakeService(repository)
        _, referrals = await service.record_response("user-1", intake("medium", ["housing_assistance"]))

        assert referrals == []
        assert await service.referrals("user-1") == []
        assert len(await service.responses("user-1")) == 1

    @pytest.mark.asyncio
    async def test_sent_status_stamps_date(self, repository) -> None:
        service = IntakeService(repository)
        referral = await service.create_referral("user-1", {"referral_type": "food_bank"})
        assert referral.date_sent is None

        updated = await service.update_referral_status("user-1", referral.id, "sent")
        assert updated.status == "sent"
        assert updated.date_sent is not None
        assert [r.id for r in await service.referrals("user-1", status="sent")] == [referral.id]
        assert await service.referrals("user-1", status="pending") == []

    @pytest.mark.asyncio
    async def test_created_as_sent_has_date(self, repository) -> None:
        referral = await IntakeService(repository).create_referral(
            "user-1", {"referral_type": "food_bank", "status": "sent"},
        )
        assert referral.date_sent is not None

    @pytest.mark.asyncio
    async def test_unknown_status_rejected(self, repository) -> None:
        service = IntakeService(repository)
        referral = await service.create_referral("user-1", {"referral_type": "food_bank"})

        with pytest.raises(ValidationError):
            await service.update_referral_status("user-1", referral.id, "lost")
        with pytest.raises(EntityNotFoundError):
            await service.update_referral_status("user-1", "missing", "sent")
