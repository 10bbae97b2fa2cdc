"""Single-endpoint event dispatcher.

Every client request is a ``{step, payload}`` pair. ``STEPS`` maps each step
to its handler and to the identity it needs, so the auth rules live in one
table instead of being re-checked inside every handler.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Union

from starlette.concurrency import run_in_threadpool

from careerspage.core.errors import EventError, GatewayTimeout, InternalError, UnknownStep
from careerspage.core.responses import redact_payload
from careerspage.security.dependencies import resolve_identity
from careerspage.services import accounts, assets, companies, diagnostics, jobs
from careerspage.services.ai import processing
from careerspage.services.persistence import HandlerContext

logger = logging.getLogger(__name__)

# Database handlers are plain functions and run in the threadpool; AI handlers are coroutines
Handler = Callable[[dict[str, Any], HandlerContext], Union[dict[str, Any], Awaitable[dict[str, Any]]]]


class AuthRequirement(str, Enum):
    PUBLIC = "public"
    # Identity resolved when a token is sent; a bad token still fails
    OPTIONAL = "optional"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class StepRoute:
    handler: Handler
    auth: AuthRequirement


PUBLIC = AuthRequirement.PUBLIC
OPTIONAL = AuthRequirement.OPTIONAL
AUTHENTICATED = AuthRequirement.AUTHENTICATED

STEPS: dict[str, StepRoute] = {
    # Companies
    "CREATE_COMPANY": StepRoute(companies.create_company, AUTHENTICATED),
    "GET_COMPANY": StepRoute(companies.get_company, PUBLIC),
    "UPDATE_COMPANY": StepRoute(companies.update_company, AUTHENTICATED),
    "DELETE_COMPANY": StepRoute(companies.delete_company, AUTHENTICATED),
    "GET_USER_COMPANIES": StepRoute(companies.get_user_companies, AUTHENTICATED),
    "CREATE_DEMO_COMPANY": StepRoute(companies.create_demo_company, PUBLIC),
    # Jobs
    "GET_JOBS": StepRoute(jobs.get_jobs, OPTIONAL),
    "ADD_JOB": StepRoute(jobs.add_job, AUTHENTICATED),
    "UPDATE_JOB": StepRoute(jobs.update_job, AUTHENTICATED),
    "DELETE_JOB": StepRoute(jobs.delete_job, AUTHENTICATED),
    # Branding assets
    "UPLOAD_LOGO": StepRoute(assets.upload_logo, AUTHENTICATED),
    "UPLOAD_BANNER": StepRoute(assets.upload_banner, AUTHENTICATED),
    "DELETE_LOGO": StepRoute(assets.delete_logo, AUTHENTICATED),
    "DELETE_BANNER": StepRoute(assets.delete_banner, AUTHENTICATED),
    # Accounts
    "AUTH_LOGIN": StepRoute(accounts.auth_login, PUBLIC),
    "AUTH_REGISTER": StepRoute(accounts.auth_register, PUBLIC),
    "AUTH_LOGOUT": StepRoute(accounts.auth_logout, PUBLIC),
    "AUTH_VERIFY": StepRoute(accounts.auth_verify, PUBLIC),
    # AI enhancement
    "ENHANCE_TEXT": StepRoute(processing.enhance_text, PUBLIC),
    "ENHANCE_TEXT_ARRAY": StepRoute(processing.enhance_text_array, PUBLIC),
    "GENERATE_CONTENT": StepRoute(processing.generate_content, PUBLIC),
    # Diagnostics
    "TEST_CONNECTION": StepRoute(diagnostics.test_connection, PUBLIC),
    "TEST_STORAGE": StepRoute(diagnostics.test_storage, PUBLIC),
}

# Step names sent by older clients, accepted on the legacy endpoint only
LEGACY_STEP_ALIASES = {
    "LOGIN": "AUTH_LOGIN",
    "REGISTER": "AUTH_REGISTER",
    "LOGOUT": "AUTH_LOGOUT",
    "VERIFY": "AUTH_VERIFY",
    "CREATE_JOB": "ADD_JOB",
    "GET_COMPANIES": "GET_USER_COMPANIES",
}


def normalize_step(step: str, legacy: bool = False) -> str:
    normalized = (step or "").strip().upper()
    if legacy:
        normalized = LEGACY_STEP_ALIASES.get(normalized, normalized)
    return normalized


async def dispatch(step: str, payload: dict[str, Any], ctx: HandlerContext) -> dict[str, Any]:
    """
    Routes one event to its handler.

    Identity is resolved according to the step's ``AuthRequirement`` before
    the handler runs and is handed over both as ``ctx.current_user`` and as
    ``payload["currentUser"]``.

    Raises:
        UnknownStep: step is not in the table.
        Unauthorized: the step needs an identity that could not be resolved.
        GatewayTimeout: the handler exceeded REQUEST_TIMEOUT_SECONDS.
        InternalError: the handler failed with an unexpected exception.
    """
    route = STEPS.get(step)
    if route is None:
        raise UnknownStep(f"Unknown step: {step}")

    logger.info(f"EVENT: {step} payload={redact_payload(payload)}")

    if route.auth is AUTHENTICATED or (route.auth is OPTIONAL and ctx.token):
        try:
            ctx.current_user = await run_in_threadpool(resolve_identity, ctx.token, ctx.db, ctx.settings)
        except EventError as e:
            logger.info(f"EVENT: Authentication failed for {step}: {e.message}")
            raise

    payload = dict(payload or {})
    payload.pop("currentUser", None)
    if ctx.current_user is not None:
        payload["currentUser"] = ctx.current_user.model_dump()

    if inspect.iscoroutinefunction(route.handler):
        call = route.handler(payload, ctx)
    else:
        call = run_in_threadpool(route.handler, payload, ctx)

    try:
        return await asyncio.wait_for(call, timeout=ctx.settings.REQUEST_TIMEOUT_SECONDS)
    except asyncio.TimeoutError:
        # A worker thread may still hold the session; get_db closes it afterwards
        logger.error(f"EVENT: {step} timed out after {ctx.settings.REQUEST_TIMEOUT_SECONDS}s")
        raise GatewayTimeout(f"{step} timed out")
    except EventError:
        raise
    except Exception as e:
        ctx.db.rollback()
        logger.error(f"EVENT: Unhandled error in {step}: {e}", exc_info=True)
        raise InternalError(details=str(e))
