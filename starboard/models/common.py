from datetime import datetime, timezone
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """
    Base model for API payloads.

    Fields are declared in snake_case and exchanged as camelCase; requests
    may use either spelling.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ErrorDetail(BaseModel):
    message: str = Field(..., description="Human-readable error message")
    code: str = Field(..., description="Machine-readable error code")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the error occurred",
    )


class ErrorResponse(BaseModel):
    """
    Envelope returned for every failed request.
    """

    success: bool = False
    error: ErrorDetail


class ApiResponse(BaseModel, Generic[T]):
    """
    Envelope returned for every successful request.
    """

    success: bool = True
    data: Optional[T] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


def error_body(message: str, code: str) -> dict[str, Any]:
    """JSON-ready error envelope."""
    return ErrorResponse(error=ErrorDetail(message=message, code=code)).model_dump(mode="json")
