from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import structlog

from app.core.exceptions import (
    ConfigurationError,
    ConflictError,
    NotFoundError,
    ParseError,
    PriceTrackerError,
    TransportError,
)

logger = structlog.get_logger(__name__)

PROBLEM_MEDIA_TYPE = "application/problem+json"


def problem_response(status: int, title: str, detail: str, **extra) -> JSONResponse:
    body = {
        "type": "about:blank",
        "title": title,
        "status": status,
        "detail": detail,
        **extra,
    }
    return JSONResponse(status_code=status, content=body, media_type=PROBLEM_MEDIA_TYPE)


def _status_for(exc: PriceTrackerError) -> tuple[int, str]:
    if isinstance(exc, NotFoundError):
        return 404, "Not Found"
    if isinstance(exc, ConflictError):
        return 409, "Conflict"
    if isinstance(exc, ConfigurationError):
        return 422, "Source Misconfigured"
    if isinstance(exc, TransportError):
        if exc.timeout:
            return 504, "Upstream Timeout"
        return 502, "Upstream Error"
    if isinstance(exc, ParseError):
        return 502, "Price Not Found"
    return 500, "Internal Server Error"


async def price_tracker_error_handler(request: Request, exc: PriceTrackerError):
    status, title = _status_for(exc)

    extra = {}
    if isinstance(exc, ConflictError) and exc.existing is not None:
        extra["product"] = exc.existing
    if isinstance(exc, TransportError) and exc.status_code is not None:
        extra["upstream_status"] = exc.status_code

    log = logger.warning if status < 500 else logger.error
    log(
        "api.request_failed",
        path=request.url.path,
        status=status,
        error=type(exc).__name__,
        detail=exc.message,
    )
    return problem_response(status, title, exc.message, **extra)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PriceTrackerError, price_tracker_error_handler)
