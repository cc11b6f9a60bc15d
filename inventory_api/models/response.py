"""Error response envelope."""

from typing import Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Body returned for every failed request.

    Attributes:
        error: Client-safe message
        code: Stable machine-readable error code
        detail: Validation detail (validation errors only)
        correlation_id: Request tracking ID
    """

    error: str
    code: str
    detail: Optional[str] = None
    correlation_id: Optional[str] = None
