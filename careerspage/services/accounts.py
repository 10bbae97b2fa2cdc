# careerspage/services/accounts.py

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import func, select

from careerspage.core.errors import Conflict, EventError, NoToken, Unauthorized
from careerspage.core.responses import success_response
from careerspage.db.models import RevokedToken, User
from careerspage.schemas import Identity, LoginRequest, RegisterRequest, TokenRequest, parse_payload
from careerspage.security.auth import create_access_token, decode_token, identity_from_claims
from careerspage.security.dependencies import is_token_revoked
from careerspage.security.passwords import hash_password, verify_password
from careerspage.services.persistence import HandlerContext, commit_or_raise

logger = logging.getLogger(__name__)


def display_name(email: str, metadata: dict[str, Any] | None) -> str:
    name = (metadata or {}).get("name")
    return name or email.split("@")[0]


def identity_for(user: User) -> Identity:
    return Identity(id=user.id, email=user.email, name=user.name or display_name(user.email, None))


def _token_from(payload: dict[str, Any], ctx: HandlerContext) -> str | None:
    return parse_payload(TokenRequest, payload).token or ctx.token


def auth_login(payload: dict[str, Any], ctx: HandlerContext) -> dict[str, Any]:
    """Checks email/password and issues a 24h bearer token."""
    credentials = parse_payload(LoginRequest, payload)
    email = credentials.email.lower()

    user = ctx.db.scalars(select(User).where(func.lower(User.email) == email)).first()
    if not user or not verify_password(credentials.password, user.password_hash):
        logger.info(f"AUTH_LOGIN: Failed login for {email}")
        raise Unauthorized("Incorrect email or password")

    identity = identity_for(user)
    token = create_access_token(identity, ctx.settings)
    logger.info(f"AUTH_LOGIN: {email} logged in")
    return success_response({"user": identity.model_dump(), "token": token}, "Login successful")


def auth_register(payload: dict[str, Any], ctx: HandlerContext) -> dict[str, Any]:
    """Creates an account and logs it straight in."""
    request = parse_payload(RegisterRequest, payload)
    email = request.email.lower()

    if ctx.db.scalars(select(User).where(func.lower(User.email) == email)).first():
        raise Conflict("Email already registered", status_code=400)

    user = User(
        email=email,
        password_hash=hash_password(request.password),
        name=display_name(email, request.metadata),
        metadata_=request.metadata or {},
    )
    ctx.db.add(user)
    commit_or_raise(ctx.db, "register user")
    ctx.db.refresh(user)

    identity = identity_for(user)
    token = create_access_token(identity, ctx.settings)
    logger.info(f"AUTH_REGISTER: Registered {email} as {user.id}")
    return success_response({"user": identity.model_dump(), "token": token}, "Registration successful")


def auth_logout(payload: dict[str, Any], ctx: HandlerContext) -> dict[str, Any]:
    """Revokes the presented token until it would have expired anyway."""
    token = _token_from(payload, ctx)
    if not token:
        return success_response(None, "Logout successful")

    try:
        claims = decode_token(token, ctx.settings)
    except EventError:
        # Already unusable, nothing to revoke
        return success_response(None, "Logout successful")

    jti = claims.get("jti")
    if jti and not is_token_revoked(ctx.db, jti):
        expires_at = datetime.fromtimestamp(claims["exp"], tz=timezone.utc)
        ctx.db.add(RevokedToken(jti=jti, expires_at=expires_at))
        commit_or_raise(ctx.db, "revoke token")
        logger.info(f"AUTH_LOGOUT: Revoked token {jti} for user {claims.get('id')}")
    return success_response(None, "Logout successful")


def auth_verify(payload: dict[str, Any], ctx: HandlerContext) -> dict[str, Any]:
    token = _token_from(payload, ctx)
    if not token:
        raise NoToken()

    claims = decode_token(token, ctx.settings)
    if is_token_revoked(ctx.db, claims.get("jti")):
        raise Unauthorized("Token has been revoked")
    identity = identity_from_claims(claims)
    return success_response({"user": identity.model_dump(), "valid": True}, "Token verified")
