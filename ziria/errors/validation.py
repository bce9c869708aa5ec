"""Custom validation error handling for FastAPI."""

from logging import getLogger
from typing import cast

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from starlette.status import HTTP_400_BAD_REQUEST

from ziria.configs import file_logger
from ziria.utils.helpers import host

logger = file_logger(getLogger(__name__))


async def validation_exception_handler(
    request: Request,
    exc: Exception,
) -> ORJSONResponse:
    """
    Handle malformed path parameters as client-input failures.

    Args:
        request: The incoming request.
        exc: The RequestValidationError exception.

    Returns:
        ORJSONResponse with a 400 status and the offending fields.
    """
    exec_error = cast(RequestValidationError, exc)

    formatted_errors = [
        {
            "field": ".".join(str(loc) for loc in error.get("loc", [])[1:]),
            "message": error.get("msg", "Invalid value"),
            "type": error.get("type", "validation_error"),
        }
        for error in exec_error.errors()
    ]

    logger.warning(f"Invalid request for ip: {host(request)} for endpoint {request.url.path}")

    return ORJSONResponse(
        status_code=HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid request parameters", "errors": formatted_errors},
    )
