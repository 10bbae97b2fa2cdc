# careerspage/api/v1/events.py

from typing import Any

from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy.orm import Session

from careerspage.db.database import get_db
from careerspage.schemas.event import EventRequest, EventResponse
from careerspage.security.dependencies import extract_bearer_token
from careerspage.services.dispatcher import dispatch, normalize_step
from careerspage.services.persistence import HandlerContext
from careerspage.storage.db_binary import DatabaseBlobStorage

# All client traffic goes through these two endpoints
router = APIRouter(prefix="/api", tags=["events"])


def build_context(request: Request, db: Session, token: str | None) -> HandlerContext:
    """Collects the per-request collaborators from app.state and the request."""
    settings = request.app.state.settings
    return HandlerContext(
        db=db,
        settings=settings,
        storage=DatabaseBlobStorage(db, settings.PUBLIC_BASE_URL),
        ai=request.app.state.ai,
        token=token,
    )


@router.post("/event", responses={200: {"model": EventResponse}})
async def handle_event(
    event: EventRequest,  # {step, payload}
    request: Request,
    db: Session = Depends(get_db),  # Per-request session
    authorization: str | None = Header(default=None),
) -> dict[str, Any]:
    """
    Runs one dispatcher step.
    Failures are raised as EventError and shaped by the app's exception handler.
    """
    ctx = build_context(request, db, extract_bearer_token(authorization))
    return await dispatch(normalize_step(event.step), event.payload, ctx)


@router.post("/legacy/event", responses={200: {"model": EventResponse}})
async def handle_legacy_event(
    event: EventRequest,
    request: Request,
    db: Session = Depends(get_db),
    authorization: str | None = Header(default=None),
) -> dict[str, Any]:
    """
    Same dispatcher for older clients: historical step names are translated
    and the token may travel in the payload instead of the header.
    """
    token = extract_bearer_token(authorization) or event.payload.get("token")
    ctx = build_context(request, db, token)
    return await dispatch(normalize_step(event.step, legacy=True), event.payload, ctx)
