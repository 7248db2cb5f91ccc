"""Error response model."""
from pydantic import BaseModel
from typing import Literal, Optional

ErrorKind = Literal["validation", "eligibility", "transport", "write", "not_found"]


class ErrorResponse(BaseModel):
    """Body returned for every handled visit workflow error."""

    error: ErrorKind
    message: str
    errors: Optional[dict[str, str]] = None
    reason: Optional[str] = None
    retryable: Optional[bool] = None
