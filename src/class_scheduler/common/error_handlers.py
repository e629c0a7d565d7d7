'''
Application-wide exception handlers.

Request validation failures are answered with 400 and a readable message.
Anything unhandled becomes a generic 500 and is logged with its traceback.
'''
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .logger import log


def _format_error(error: dict) -> str:
    # loc is e.g. ("body", "sessionsPerWeek"); drop the "body"/"query" part
    location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
    message = error.get("msg", "Invalid value")
    return f"{'.'.join(location)}: {message}" if location else message


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    messages = [_format_error(error) for error in exc.errors()]
    log.warning(f"Validation error on {request.method} {request.url.path}: {messages}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "; ".join(messages) or "Invalid request.", "errors": messages}
    )


async def general_exception_handler(request: Request, exc: Exception):
    log.error(f"Unexpected error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error."}
    )
