# careerspage/schemas/event.py

from typing import Any

from pydantic import BaseModel, Field


# Body of POST /api/event
class EventRequest(BaseModel):
    step: str = Field(min_length=1)
    payload: dict[str, Any] = Field(default_factory=dict)


class ErrorBody(BaseModel):
    message: str
    code: int
    details: Any | None = None


# Envelope returned for every step
class EventResponse(BaseModel):
    success: bool
    data: Any | None = None
    message: str | None = None
    error: ErrorBody | None = None
