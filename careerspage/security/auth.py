# careerspage/security/auth.py

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt

from careerspage.core.config import Settings
from careerspage.core.errors import InvalidToken
from careerspage.schemas.user import Identity


def create_access_token(
    identity: Identity, settings: Settings, expires_delta: timedelta | None = None
) -> str:
    """Creates a signed JWT carrying the caller's id, email and name."""
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(hours=settings.ACCESS_TOKEN_EXPIRE_HOURS)

    # 'sub' is the user id; 'jti' lets a single token be revoked on logout
    to_encode = {
        "sub": str(identity.id),
        "id": identity.id,
        "email": identity.email,
        "name": identity.name,
        "jti": uuid.uuid4().hex,
        "exp": expire,
    }

    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.ALGORITHM)


def decode_token(token: str, settings: Settings) -> dict[str, Any]:
    """Verifies a JWT and returns its claims, raising InvalidToken on any failure."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError:
        raise InvalidToken("Token has expired")
    except JWTError:
        raise InvalidToken()

    if not payload.get("id") and not payload.get("sub"):
        raise InvalidToken("Token is missing the user id claim")
    return payload


def identity_from_claims(claims: dict[str, Any]) -> Identity:
    return Identity(
        id=claims.get("id") or claims.get("sub"),
        email=claims.get("email"),
        name=claims.get("name"),
    )
