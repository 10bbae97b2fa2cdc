# careerspage/core/responses.py

from datetime import date, datetime, timezone
from typing import Any

from fastapi.responses import JSONResponse

from careerspage.core.errors import EventError

# Payload keys that never reach the logs verbatim
REDACTED_KEYS = {"password", "confirmPassword", "token", "file"}


def success_response(data: Any = None, message: str = "Success") -> dict[str, Any]:
    """Uniform envelope returned by every handler."""
    response: dict[str, Any] = {"success": True, "message": message}
    if data is not None:
        response["data"] = data
    return response


def error_response(error: EventError) -> JSONResponse:
    """Shapes an EventError into the failure envelope with a mirrored status code."""
    return JSONResponse(
        status_code=error.status_code,
        content={"success": False, "error": error.to_dict()},
    )


def to_iso(value: datetime | date | None) -> str | None:
    """ISO-8601 rendering; naive datetimes coming back from SQLite are UTC."""
    if value is None:
        return None
    if isinstance(value, datetime) and value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def redact_payload(payload: Any) -> Any:
    """Returns a copy of the payload that is safe to log."""
    if isinstance(payload, dict):
        return {
            key: "***" if key in REDACTED_KEYS and value else redact_payload(value)
            for key, value in payload.items()
        }
    if isinstance(payload, list):
        return [redact_payload(item) for item in payload]
    return payload
