from datetime import datetime
import logging
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from moderation_api.schemas.moderation import (
    ErrorResponse,
    ModerationRequest,
    RateLimitExceededResponse,
)

router = APIRouter()
logger = logging.getLogger(__name__)

DEFAULT_CLIENT_IP = "127.0.0.1"
INVALID_CONTENT_ERROR = "Invalid or overly long content."
SERVICE_UNAVAILABLE_ERROR = "Moderation service temporarily unavailable."
DETAILS_MAX_LENGTH = 200


def get_client_ip(request: Request) -> str:
    """First value of X-Forwarded-For, or loopback when absent."""
    forwarded = request.headers.get("x-forwarded-for", "")
    first = forwarded.split(",")[0].strip()
    return first or DEFAULT_CLIENT_IP


def format_reset_time(reset_ms: int) -> str:
    """Render an epoch-millisecond timestamp as a local HH:MM:SS string."""
    return datetime.fromtimestamp(reset_ms / 1000).strftime("%H:%M:%S")


def content_length(text: str) -> int:
    """Length in UTF-16 code units; characters outside the BMP count twice."""
    return len(text.encode("utf-16-le", "surrogatepass")) // 2


def service_unavailable(error: Exception, expose_details: bool) -> JSONResponse:
    body = ErrorResponse(error=SERVICE_UNAVAILABLE_ERROR)
    if expose_details:
        body.details = f"{type(error).__name__}: {error}"[:DETAILS_MAX_LENGTH]
    return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))


def invalid_content() -> JSONResponse:
    return JSONResponse(status_code=400, content=ErrorResponse(error=INVALID_CONTENT_ERROR).model_dump(exclude_none=True))


async def read_payload(request: Request):
    try:
        return await request.json()
    except ValueError:
        return None


@router.post("/api/moderate-content")
async def moderate_content(request: Request):
    """
    Rate-limit, validate and classify one piece of user content.
    Non-POST methods are answered with 405 by the router itself.
    """
    settings = request.app.state.settings
    rate_limiter = request.app.state.rate_limiter
    moderator = request.app.state.moderator

    # Admission control
    client_ip = get_client_ip(request)
    try:
        result = await rate_limiter.limit(f"ratelimit_{client_ip}")
    except Exception as e:
        if not settings.RATE_LIMIT_FAIL_OPEN:
            logger.error(f"Rate limiter failure for {client_ip}: {e}", exc_info=True)
            return service_unavailable(e, settings.EXPOSE_ERROR_DETAILS)
        logger.warning(f"Rate limiter failure for {client_ip}, admitting request: {e}")
    else:
        if not result.success:
            logger.info(f"Rate limit exceeded for {client_ip}")
            body = RateLimitExceededResponse(resetAt=format_reset_time(result.reset))
            return JSONResponse(status_code=429, content=body.model_dump())

    # Input validation
    payload = await read_payload(request)
    if not isinstance(payload, dict):
        return invalid_content()
    try:
        req = ModerationRequest.model_validate(payload)
    except ValidationError:
        return invalid_content()
    if content_length(req.user_content) > settings.MAX_CONTENT_LENGTH:
        return invalid_content()

    try:
        verdict = await moderator.moderate(req.user_content)
    except Exception as e:
        logger.error(f"Moderation Failure: {type(e).__name__}: {e}", exc_info=True)
        return service_unavailable(e, settings.EXPOSE_ERROR_DETAILS)

    return JSONResponse(status_code=200, content=verdict)
