"""
SIANI Exception Hierarchy.

Every error the wellness API raises on purpose derives from ``SianiError``.
An error knows its HTTP status and the message that is safe to show a user,
and it logs itself when raised. Its correlation id is the request id bound
by the request middleware, so a client-visible payload can be matched to the
server logs.
"""
from __future__ import annotations
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from pydantic import BaseModel, Field
import structlog

logger = structlog.get_logger(__name__)

GENERIC_USER_MESSAGE = "An error occurred. Please try again."


class ErrorSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    EXTERNAL_SERVICE = "external_service"
    DATABASE = "database"
    CONFIGURATION = "configuration"
    INTERNAL = "internal"


def current_request_id() -> str:
    """Request id bound for the current request, or a fresh id outside one."""
    return structlog.contextvars.get_contextvars().get("request_id") or str(uuid.uuid4())


class ErrorContext(BaseModel):
    """Where an error happened."""
    correlation_id: str = Field(default_factory=current_request_id)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    service_name: str = Field(default="siani-wellness")
    operation: str | None = None
    user_id: str | None = None
    model_config = {"frozen": True}


def _details(kwargs: dict[str, Any], **extra: Any) -> dict[str, Any]:
    """Pop caller details from ``kwargs`` and add the non-empty ``extra`` values."""
    details = kwargs.pop("details", None) or {}
    details.update({key: value for key, value in extra.items() if value is not None})
    return details


class SianiError(Exception):
    """Base exception for all SIANI errors."""
    error_code: str = "SIANI_ERROR"
    category: ErrorCategory = ErrorCategory.INTERNAL
    severity: ErrorSeverity = ErrorSeverity.MEDIUM
    http_status: int = 500
    default_user_message: str = GENERIC_USER_MESSAGE

    def __init__(self, message: str, *, user_message: str | None = None,
                 context: ErrorContext | None = None, cause: Exception | None = None,
                 details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.user_message = user_message or self.default_user_message
        self.context = context or ErrorContext()
        self.cause = cause
        self.details = details or {}
        self._log()

    def _log(self) -> None:
        event = {
            "error_code": self.error_code,
            "category": self.category.value,
            "severity": self.severity.value,
            "correlation_id": self.context.correlation_id,
            "details": self.details,
        }
        if self.context.operation:
            event["operation"] = self.context.operation
        if self.context.user_id:
            event["user_id"] = self.context.user_id
        if self.cause:
            event["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        log = logger.error if self.severity in (ErrorSeverity.HIGH, ErrorSeverity.CRITICAL) else logger.warning
        log(self.message, **event)

    def to_dict(self) -> dict[str, Any]:
        """Client payload; never includes the internal message."""
        return {"error": {
            "code": self.error_code,
            "message": self.user_message,
            "correlation_id": self.context.correlation_id,
            "timestamp": self.context.timestamp.isoformat(),
        }}


# Domain errors: the request cannot be honoured as sent


class DomainError(SianiError):
    error_code = "DOMAIN_ERROR"
    category = ErrorCategory.BUSINESS_RULE
    http_status = 422


class ValidationError(DomainError):
    error_code = "VALIDATION_ERROR"
    category = ErrorCategory.VALIDATION
    severity = ErrorSeverity.LOW
    http_status = 400

    def __init__(self, message: str, *, field: str | None = None, value: Any = None,
                 constraint: str | None = None, **kwargs: Any) -> None:
        details = _details(kwargs, field=field, constraint=constraint)
        if kwargs.get("user_message") is None:
            kwargs["user_message"] = f"Invalid value for {field}" if field else "Validation failed"
        super().__init__(message, details=details, **kwargs)
        self.field = field
        self.value = value
        self.constraint = constraint


class EntityNotFoundError(DomainError):
    error_code = "ENTITY_NOT_FOUND"
    category = ErrorCategory.NOT_FOUND
    severity = ErrorSeverity.LOW
    http_status = 404

    def __init__(self, entity_type: str, entity_id: str, **kwargs: Any) -> None:
        details = _details(kwargs, entity_type=entity_type, entity_id=entity_id)
        if not kwargs.get("user_message"):
            kwargs["user_message"] = f"The requested {entity_type.lower()} was not found"
        super().__init__(f"{entity_type} with ID '{entity_id}' not found", details=details, **kwargs)
        self.entity_type = entity_type
        self.entity_id = entity_id


class EntityConflictError(DomainError):
    error_code = "ENTITY_CONFLICT"
    category = ErrorCategory.CONFLICT
    http_status = 409
    default_user_message = "A conflict occurred"

    def __init__(self, message: str, *, entity_type: str | None = None,
                 entity_id: str | None = None, **kwargs: Any) -> None:
        details = _details(kwargs, entity_type=entity_type, entity_id=entity_id)
        super().__init__(message, details=details, **kwargs)


class BusinessRuleViolationError(DomainError):
    error_code = "BUSINESS_RULE_VIOLATION"
    default_user_message = "Operation not allowed"

    def __init__(self, rule: str, message: str, **kwargs: Any) -> None:
        super().__init__(message, details=_details(kwargs, rule=rule), **kwargs)
        self.rule = rule


# Infrastructure errors: something the service depends on failed


class InfrastructureError(SianiError):
    error_code = "INFRASTRUCTURE_ERROR"
    category = ErrorCategory.EXTERNAL_SERVICE
    severity = ErrorSeverity.HIGH
    http_status = 503


class DatabaseError(InfrastructureError):
    error_code = "DATABASE_ERROR"
    category = ErrorCategory.DATABASE
    default_user_message = "A database error occurred"

    def __init__(self, message: str, *, operation: str | None = None, **kwargs: Any) -> None:
        super().__init__(message, details=_details(kwargs, db_operation=operation), **kwargs)


class ExternalServiceError(InfrastructureError):
    error_code = "EXTERNAL_SERVICE_ERROR"
    default_user_message = "An external service is temporarily unavailable"

    def __init__(self, service_name: str, message: str, *,
                 status_code: int | None = None, **kwargs: Any) -> None:
        details = _details(kwargs, service_name=service_name, upstream_status=status_code)
        super().__init__(message, details=details, **kwargs)
        self.service_name = service_name
        self.status_code = status_code


class LLMServiceError(ExternalServiceError):
    """The language model could not answer; callers use their fallback text."""
    error_code = "LLM_SERVICE_ERROR"
    severity = ErrorSeverity.MEDIUM

    def __init__(self, provider: str, message: str, *, retryable: bool = False,
                 **kwargs: Any) -> None:
        details = _details(kwargs, provider=provider, retryable=retryable)
        super().__init__(f"LLM:{provider}", message, details=details, **kwargs)
        self.provider = provider
        self.retryable = retryable


class TextToSpeechUnavailableError(ExternalServiceError):
    """Premium speech synthesis failed; clients should speak with the browser voice."""
    error_code = "TTS_UNAVAILABLE"
    severity = ErrorSeverity.MEDIUM
    default_user_message = "Premium voice synthesis failed, please use browser TTS fallback"
    fallback = "browser_tts"

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__("ElevenLabs", message, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        return {"error": "ElevenLabs service unavailable", "fallback": self.fallback,
                "message": self.user_message,
                "correlation_id": self.context.correlation_id}


class ConfigurationError(InfrastructureError):
    """Settings are missing or inconsistent; raised while the service starts."""
    error_code = "CONFIGURATION_ERROR"
    category = ErrorCategory.CONFIGURATION
    severity = ErrorSeverity.CRITICAL
    http_status = 500
    default_user_message = "Service configuration error"

    def __init__(self, message: str, *, config_key: str | None = None, **kwargs: Any) -> None:
        super().__init__(message, details=_details(kwargs, config_key=config_key), **kwargs)
        self.config_key = config_key
