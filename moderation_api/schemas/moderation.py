from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr
from typing import Optional


class ModerationRequest(BaseModel):
    user_content: StrictStr = Field(alias="userContent", min_length=1)


class ModerationVerdict(BaseModel):
    # Providers sometimes add fields (e.g. "category"); they are passed through
    model_config = ConfigDict(extra="allow")

    safe: StrictBool
    reason: StrictStr


class RateLimitResult(BaseModel):
    success: bool
    reset: int  # epoch milliseconds at which the current window ends


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None


class RateLimitExceededResponse(BaseModel):
    error: str = "Rate limit exceeded"
    message: str = "To keep this demo free, please wait a moment."
    resetAt: str
