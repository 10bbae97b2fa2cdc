# careerspage/services/persistence.py

import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from careerspage.core.config import Settings
from careerspage.core.errors import Conflict, EventError, PermissionDenied, UpstreamError
from careerspage.schemas.user import Identity
from careerspage.services.ai.gateway import TextGateway
from careerspage.storage.db_binary import DatabaseBlobStorage

logger = logging.getLogger(__name__)

PERMISSION_MARKERS = ("row-level security", "permission denied", "insufficient privilege")
PERMISSION_SUGGESTION = (
    "Grant the application's database role write access to this table, "
    "or relax the row-level security policy that blocks it."
)


@dataclass
class HandlerContext:
    """Per-request collaborators handed to every step handler."""
    db: Session
    settings: Settings
    storage: DatabaseBlobStorage
    ai: TextGateway | None = None
    current_user: Identity | None = None
    token: str | None = None


def translate_db_error(error: SQLAlchemyError, action: str) -> EventError:
    """Maps a database exception onto the handler error taxonomy."""
    if isinstance(error, StaleDataError):
        return Conflict(f"Failed to {action}: the record was modified by another request", details=str(error))
    message = str(getattr(error, "orig", None) or error)
    if any(marker in message.lower() for marker in PERMISSION_MARKERS):
        return PermissionDenied(
            f"Database permission error while trying to {action}",
            details=message,
            extra={"suggestion": PERMISSION_SUGGESTION},
        )
    return UpstreamError(f"Failed to {action}", details=message)


def commit_or_raise(db: Session, action: str) -> None:
    """Commits the session; on failure rolls back and raises a translated EventError."""
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.error(f"DB: Integrity error while trying to {action}: {e.orig}")
        raise translate_db_error(e, action)
    except (StaleDataError, SQLAlchemyError) as e:
        db.rollback()
        logger.error(f"DB: Failed to {action}: {e}", exc_info=True)
        raise translate_db_error(e, action)
