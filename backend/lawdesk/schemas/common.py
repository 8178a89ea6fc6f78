"""
LawDesk Backend — Shared Pydantic Schemas
===========================================

What:  Base model for camelCase wire format, plus the error, message and
       health response models shared by every router.
"""

from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from lawdesk.exceptions import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


class CamelModel(BaseModel):
    """
    Base for API schemas: snake_case in Python, camelCase on the wire.

    Inputs accept either spelling; responses are serialized by alias.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(BaseModel):
    """Short status body returned by delete endpoints."""
    message: str = Field(description="Human-readable status message")


class ErrorResponse(BaseModel):
    """
    What:  The single error format returned by every endpoint.

    Fields:
        error: Machine-readable error code (e.g., "validation_error", "duplicate_title")
        message: Human-readable description for display to users
        details: Optional extra context (e.g., which field failed validation)
        request_id: Correlation ID for tracing this error in server logs

    Example:
        {
            "error": "duplicate_title",
            "message": "A post with this title already exists. Kindly update the title.",
            "details": {"slug": "contract-law-basics-1700000000000"},
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and load balancer probes."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")


def error_details(exc: Any) -> List[Dict[str, Any]]:
    """
    Flatten pydantic errors into [{"field": ..., "cause": ...}] for error bodies.

    Accepts pydantic's ValidationError and FastAPI's RequestValidationError.
    """
    details = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        details.append({"field": ".".join(loc) or None, "cause": err.get("msg")})
    return details


def parse_input(model: Type[ModelT], data: Mapping[str, Any], message: str) -> ModelT:
    """
    Validate raw input against a schema, raising the app's ValidationError.

    Stores call this so a direct (non-HTTP) caller gets the same 400 error
    as a request with a missing form field.
    """
    try:
        return model.model_validate(dict(data))
    except PydanticValidationError as e:
        raise ValidationError(message=message, context={"errors": error_details(e)})
