"""Common shared schemas used across multiple domains."""

from typing import List, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Body returned for domain errors."""
    detail: str
    reasons: List[str] = Field(default_factory=list)
    request_id: Optional[str] = None
