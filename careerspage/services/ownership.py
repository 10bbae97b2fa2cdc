"""Ownership Guard: binds a mutating request to the company's recorded creator."""

import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from careerspage.core.errors import CompanyNotFound, Forbidden, InternalError, Unauthorized
from careerspage.db.models import Company
from careerspage.schemas.user import Identity
from careerspage.services import crud_companies

logger = logging.getLogger(__name__)


@dataclass
class OwnershipResult:
    has_access: bool
    company: Company


def owner_keys(identity: Identity, match_email: bool = True) -> list[str]:
    """The values a company's created_by may hold for this caller."""
    keys = []
    if identity.id:
        keys.append(identity.id)
    if match_email and identity.email:
        keys.append(identity.email)
    return keys


def is_owner(company: Company, identity: Identity, match_email: bool = True) -> bool:
    if not company.created_by:
        return False
    return company.created_by in owner_keys(identity, match_email)


def check_company_ownership(
    db: Session, slug: str, identity: Identity, match_email: bool = True
) -> OwnershipResult:
    """
    Fetches the company by slug and compares its created_by against the
    caller's id and email.

    Raises:
        CompanyNotFound: no company has this slug.
        InternalError: the lookup itself failed.
    """
    logger.info(f"OWNERSHIP: Checking ownership of '{slug}' for user {identity.id} / {identity.email}")
    try:
        company = crud_companies.get_company_by_slug(db, slug)
    except SQLAlchemyError as e:
        logger.error(f"OWNERSHIP: Database error looking up '{slug}': {e}", exc_info=True)
        raise InternalError("Failed to verify ownership", details=str(e))

    if company is None:
        logger.info(f"OWNERSHIP: Company not found: {slug}")
        raise CompanyNotFound()

    has_access = is_owner(company, identity, match_email)
    logger.info(f"OWNERSHIP: Access check for '{slug}' (created_by={company.created_by}): {has_access}")
    return OwnershipResult(has_access=has_access, company=company)


def require_company_owner(
    db: Session, slug: str, identity: Identity | None, match_email: bool = True
) -> Company:
    """Returns the company when the caller owns it, otherwise raises Forbidden."""
    if identity is None:
        raise Unauthorized()
    result = check_company_ownership(db, slug, identity, match_email)
    if not result.has_access:
        logger.warning(f"OWNERSHIP: Access denied for {identity.email or identity.id} on '{slug}'")
        raise Forbidden("You don't have permission to edit this company")
    return result.company
