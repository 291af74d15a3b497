"""
Exception Handlers - Starboard Evaluation API
starboard/core/handlers.py

Maps domain exceptions and request validation errors to the JSON error
envelope: {"success": false, "error": {"message", "code", "timestamp"}}.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from starboard.core.exceptions import StarboardException, ValidationException
from starboard.models.common import error_body

logger = logging.getLogger(__name__)


FIELD_MESSAGES = {
    "submissionId": {
        "missing": "submissionId is required",
        "string_too_short": "submissionId must not be empty",
        "string_type": "submissionId must be a string",
    },
    "submissionIds": {
        "missing": "submissionIds is required",
        "list_type": "submissionIds must be an array",
        "too_short": "At least one submission ID is required",
    },
    "criteriaScores": {
        "missing": "criteriaScores is required",
        "dict_type": "criteriaScores must be an object",
        "float_parsing": "Each criterion score must be a number",
        "float_type": "Each criterion score must be a number",
    },
    "step1": {
        "missing": "Both step1 and step2 configurations are required",
        "float_parsing": "step1 must be a number",
    },
    "step2": {
        "missing": "Both step1 and step2 configurations are required",
        "float_parsing": "step2 must be a number",
    },
    "criteria": {
        "missing": "Each step must have a criteria array",
        "too_short": "Each step must have at least one criterion",
        "list_type": "criteria must be an array",
    },
    "weight": {
        "greater_than": "Criterion weight must be greater than 0",
    },
    "pinnedFields": {
        "missing": "pinnedFields is required",
        "list_type": "pinnedFields must be an array",
    },
    "slots": {
        "missing": "slots is required",
        "list_type": "slots must be an array",
        "too_short": "At least one slot is required",
    },
    "date": {
        "missing": "Each slot must have date, startTime, and endTime",
        "date_parsing": "Slot date must be a valid date format (YYYY-MM-DD)",
        "date_from_datetime": "Slot date must be a valid date format (YYYY-MM-DD)",
    },
    "startTime": {
        "missing": "Each slot must have date, startTime, and endTime",
        "string_pattern_mismatch": "startTime must use HH:MM format",
    },
    "endTime": {
        "missing": "Each slot must have date, startTime, and endTime",
        "string_pattern_mismatch": "endTime must use HH:MM format",
    },
    "requiredEvaluatorPercentage": {
        "greater_than_equal": "Required evaluator percentage must be between 0 and 100",
        "less_than_equal": "Required evaluator percentage must be between 0 and 100",
    },
}

DEFAULT_MESSAGES = {
    "missing": "Field '{field}' is required",
    "string_too_short": "Field '{field}' is too short",
    "string_too_long": "Field '{field}' is too long",
    "string_pattern_mismatch": "Field '{field}' has invalid format",
    "less_than_equal": "Field '{field}' exceeds maximum allowed value",
    "greater_than_equal": "Field '{field}' is below minimum allowed value",
    "greater_than": "Field '{field}' must be greater than the minimum allowed value",
    "string_type": "Field '{field}' must be a string",
    "date_parsing": "Field '{field}' must be a valid date",
    "float_parsing": "Field '{field}' must be a number",
    "float_type": "Field '{field}' must be a number",
    "bool_parsing": "Field '{field}' must be a boolean",
    "list_type": "Field '{field}' must be an array",
    "dict_type": "Field '{field}' must be an object",
    "model_attributes_type": "Field '{field}' must be an object",
    "enum": "Field '{field}' has an invalid value",
}


def get_validation_message(field: str, error_type: str) -> str:
    if field in FIELD_MESSAGES:
        field_msgs = FIELD_MESSAGES[field]
        for key in field_msgs:
            if key in error_type:
                return field_msgs[key]

    for key, template in DEFAULT_MESSAGES.items():
        if key in error_type:
            return template.format(field=field)

    return f"Invalid value for field '{field}'"


def _error_field(loc) -> str:
    """Innermost named location, skipping list indexes and dict keys of scores."""
    names = [part for part in loc if isinstance(part, str) and part not in ("body", "query", "path", "header")]
    if "criteriaScores" in names:
        return "criteriaScores"
    return names[-1] if names else "body"


async def starboard_exception_handler(request: Request, exc: StarboardException):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        message = "Database error" if exc.error_code == "DATABASE_ERROR" else "Unexpected server error"
    else:
        message = exc.message

    content = error_body(message, exc.error_code)
    if isinstance(exc, ValidationException) and exc.details:
        content["error"]["details"] = exc.details

    return JSONResponse(status_code=exc.status_code, content=content)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()

    if not errors:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body("Request validation failed", "VALIDATION_ERROR"),
        )

    err = errors[0]
    error_type = err.get("type", "")
    loc = err.get("loc", [])

    if "json_invalid" in error_type:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body("Malformed JSON request body", "INVALID_REQUEST"),
        )

    if error_type == "value_error":
        # Raised by model validators; the message is already user-facing
        message = str(err.get("msg", "")).removeprefix("Value error, ")
    else:
        message = get_validation_message(_error_field(loc), error_type)

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(message, "VALIDATION_ERROR"),
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Unexpected server error", "INTERNAL_ERROR"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarboardException, starboard_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
