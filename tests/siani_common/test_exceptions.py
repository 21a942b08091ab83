"""
Unit tests for the SIANI exception hierarchy.
"""
import pytest
from pydantic import ValidationError as PydanticValidationError

from siani_common.exceptions import (
    GENERIC_USER_MESSAGE,
    BusinessRuleViolationError,
    ConfigurationError,
    DatabaseError,
    DomainError,
    EntityConflictError,
    EntityNotFoundError,
    ErrorCategory,
    ErrorContext,
    ExternalServiceError,
    InfrastructureError,
    LLMServiceError,
    SianiError,
    TextToSpeechUnavailableError,
    ValidationError,
)
from siani_common.logging import bind_request_context, clear_request_context


class TestErrorContext:
    """Tests for ErrorContext."""

    def test_default_values(self) -> None:
        ctx = ErrorContext()

        assert len(ctx.correlation_id) == 36
        assert ctx.service_name == "siani-wellness"
        assert ctx.operation is None
        assert ctx.user_id is None

    def test_correlation_follows_request_id(self) -> None:
        bind_request_context(request_id="req-123")
        try:
            assert ErrorContext().correlation_id == "req-123"
            assert EntityNotFoundError("Goal", "g-1").to_dict()["error"]["correlation_id"] == "req-123"
        finally:
            clear_request_context()
        assert ErrorContext().correlation_id != "req-123"

    def test_immutability(self) -> None:
        ctx = ErrorContext()
        with pytest.raises((PydanticValidationError, TypeError, AttributeError)):
            ctx.operation = "changed"  # type: ignore[misc]


class TestSianiError:
    """Tests for the base error."""

    def test_generic_user_message(self) -> None:
        error = SianiError("boom")

        assert str(error) == "boom"
        assert error.user_message == GENERIC_USER_MESSAGE
        assert error.http_status == 500

    def test_to_dict_hides_internal_message(self) -> None:
        error = SianiError("database password wrong", user_message="Try again later")
        payload = error.to_dict()

        assert payload["error"]["code"] == "SIANI_ERROR"
        assert payload["error"]["message"] == "Try again later"
        assert "password" not in str(payload)

    def test_cause_is_kept(self) -> None:
        cause = RuntimeError("socket closed")
        error = SianiError("failed", cause=cause)

        assert error.cause is cause
        assert "socket closed" not in str(error.to_dict())


class TestDomainErrors:
    """Status codes and details of domain errors."""

    def test_validation_error(self) -> None:
        error = ValidationError("bad rating", field="rating", value=9, constraint="1..5")

        assert isinstance(error, DomainError)
        assert error.http_status == 400
        assert error.category is ErrorCategory.VALIDATION
        assert error.details == {"field": "rating", "constraint": "1..5"}
        assert error.user_message == "Invalid value for rating"
        assert error.value == 9

    def test_validation_error_custom_user_message(self) -> None:
        error = ValidationError("empty", field="transcript", user_message="Transcript is required")
        assert error.to_dict()["error"]["message"] == "Transcript is required"

    def test_entity_not_found(self) -> None:
        error = EntityNotFoundError("Appointment", "apt-1")

        assert error.http_status == 404
        assert error.message == "Appointment with ID 'apt-1' not found"
        assert error.user_message == "The requested appointment was not found"
        assert error.details == {"entity_type": "Appointment", "entity_id": "apt-1"}

    def test_entity_conflict(self) -> None:
        error = EntityConflictError("duplicate", entity_type="PulseAnswer")
        assert error.http_status == 409
        assert error.details["entity_type"] == "PulseAnswer"

    def test_business_rule_violation(self) -> None:
        error = BusinessRuleViolationError("one_answer", "already answered")
        assert error.http_status == 422
        assert error.rule == "one_answer"


class TestInfrastructureErrors:
    """Status codes and payloads of infrastructure errors."""

    def test_database_error(self) -> None:
        error = DatabaseError("connect failed", operation="initialize")

        assert isinstance(error, InfrastructureError)
        assert error.http_status == 503
        assert error.details["db_operation"] == "initialize"

    def test_llm_service_error(self) -> None:
        error = LLMServiceError("openai", "timeout", retryable=True)

        assert isinstance(error, ExternalServiceError)
        assert error.retryable is True
        assert error.service_name == "LLM:openai"
        assert error.details["provider"] == "openai"

    def test_tts_unavailable_payload(self) -> None:
        error = TextToSpeechUnavailableError("no key")
        payload = error.to_dict()

        assert error.http_status == 503
        assert payload["fallback"] == "browser_tts"
        assert payload["error"] == "ElevenLabs service unavailable"
        assert "correlation_id" in payload

    def test_configuration_error(self) -> None:
        error = ConfigurationError("sqlite in production", config_key="DB_URL")

        assert error.http_status == 500
        assert error.config_key == "DB_URL"
        assert error.details == {"config_key": "DB_URL"}
        assert error.to_dict()["error"]["message"] == "Service configuration error"

    def test_llm_error_keeps_false_retryable(self) -> None:
        error = LLMServiceError("openai", "bad request", status_code=400)

        assert error.details == {"provider": "openai", "retryable": False,
                                 "service_name": "LLM:openai", "upstream_status": 400}
        assert error.status_code == 400
