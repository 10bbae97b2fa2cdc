# careerspage/security/dependencies.py

import logging
import uuid

from sqlalchemy.orm import Session

from careerspage.core.config import Settings
from careerspage.core.errors import InvalidToken, NoToken
from careerspage.db.models import RevokedToken
from careerspage.schemas.user import Identity
from careerspage.security.auth import decode_token, identity_from_claims

logger = logging.getLogger(__name__)

# Sessions issued by the pre-JWT demo client
LEGACY_TOKEN_PREFIXES = ("mock_token_", "token_")
LEGACY_DEMO_EMAIL = "demo@example.com"


def extract_bearer_token(authorization: str | None) -> str | None:
    """Pulls the token out of an 'Authorization: Bearer <token>' header value."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


def is_token_revoked(db: Session, jti: str | None) -> bool:
    if not jti:
        return False
    return db.get(RevokedToken, jti) is not None


def resolve_identity(token: str | None, db: Session, settings: Settings) -> Identity:
    """
    Turns a bearer token into the caller's identity.

    Raises:
        NoToken: no token was supplied.
        InvalidToken: bad signature, expired, malformed or revoked.
    """
    if not token:
        raise NoToken()

    if settings.ALLOW_LEGACY_TOKENS and token.startswith(LEGACY_TOKEN_PREFIXES):
        logger.warning("AUTH: Legacy demo token accepted, issuing a throwaway identity.")
        return Identity(id=str(uuid.uuid4()), email=LEGACY_DEMO_EMAIL, name="Demo User")

    claims = decode_token(token, settings)
    if is_token_revoked(db, claims.get("jti")):
        logger.info(f"AUTH: Rejected revoked token {claims.get('jti')}.")
        raise InvalidToken("Token has been revoked")

    identity = identity_from_claims(claims)
    logger.debug(f"AUTH: Token decoded for user {identity.id}.")
    return identity
