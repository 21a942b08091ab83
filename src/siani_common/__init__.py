"""
SIANI Common Library.

Shared exceptions and logging setup used by the wellness service and its
infrastructure packages.
"""

from .exceptions import (
    BusinessRuleViolationError,
    ConfigurationError,
    DatabaseError,
    DomainError,
    EntityConflictError,
    EntityNotFoundError,
    ErrorCategory,
    ErrorContext,
    ErrorSeverity,
    ExternalServiceError,
    InfrastructureError,
    LLMServiceError,
    SianiError,
    TextToSpeechUnavailableError,
    ValidationError,
)
from .logging import bind_request_context, clear_request_context, configure_logging

__all__ = [
    "BusinessRuleViolationError",
    "ConfigurationError",
    "DatabaseError",
    "DomainError",
    "EntityConflictError",
    "EntityNotFoundError",
    "ErrorCategory",
    "ErrorContext",
    "ErrorSeverity",
    "ExternalServiceError",
    "InfrastructureError",
    "LLMServiceError",
    "SianiError",
    "TextToSpeechUnavailableError",
    "ValidationError",
    "bind_request_context",
    "clear_request_context",
    "configure_logging",
]
