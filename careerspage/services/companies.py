# careerspage/services/companies.py

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from careerspage.core.errors import CompanyNotFound, DuplicateSlug, Unauthorized, UpstreamError, ValidationError
from careerspage.core.responses import success_response
from careerspage.db.models import Company, Job, utcnow
from careerspage.schemas import (
    CompanyCreate, CompanyUpdate, company_to_dict, default_branding,
    default_sections, job_to_dict, parse_payload,
)
from careerspage.services import crud_companies
from careerspage.services.ownership import owner_keys, require_company_owner
from careerspage.services.persistence import HandlerContext, commit_or_raise

logger = logging.getLogger(__name__)

DEFAULT_COMPANY_NAME = "My Company"
DEMO_SLUG = "demo"


def create_company(payload: dict[str, Any], ctx: HandlerContext) -> dict[str, Any]:
    """Creates a company owned by the caller, filling in default branding and sections."""
    user = ctx.current_user
    if user is None:
        raise Unauthorized("Authentication required to create company")

    data = parse_payload(CompanyCreate, payload)
    logger.info(f"CREATE_COMPANY: '{data.slug}' requested by {user.email or user.id}")

    if crud_companies.slug_exists(ctx.db, data.slug):
        logger.info(f"CREATE_COMPANY: Slug already exists: {data.slug}")
        raise DuplicateSlug()

    name = data.name or DEFAULT_COMPANY_NAME
    now = utcnow()
    company = Company(
        name=name,
        slug=data.slug,
        created_by=user.id or user.email,
        branding=data.branding if data.branding is not None else default_branding(),
        sections=data.sections if data.sections is not None else default_sections(name),
        team=[member.model_dump() for member in data.team] if data.team is not None else [],
        published=False,
        created_at=now,
        updated_at=now,
    )
    ctx.db.add(company)
    try:
        commit_or_raise(ctx.db, "create company")
    except UpstreamError as e:
        # Lost a race with another create for the same slug
        if crud_companies.slug_exists(ctx.db, data.slug):
            raise DuplicateSlug() from e
        raise
    ctx.db.refresh(company)

    logger.info(f"CREATE_COMPANY: Created {company.id} ('{company.slug}') owned by {company.created_by}")
    return success_response(company_to_dict(company), "Company created successfully")


def get_company(payload: dict[str, Any], ctx: HandlerContext) -> dict[str, Any]:
    """Public lookup by slug. ``includeJobs`` embeds the active jobs."""
    slug = (payload.get("slug") or "").strip()
    if not slug:
        raise ValidationError("Company slug required")

    try:
        company = crud_companies.get_company_by_slug(ctx.db, slug)
    except SQLAlchemyError as e:
        raise UpstreamError("Database error", details=str(e))
    if company is None:
        raise CompanyNotFound()

    data = company_to_dict(company)
    if payload.get("includeJobs"):
        jobs = ctx.db.scalars(
            select(Job)
            .where(Job.company_id == company.id, Job.is_active.is_(True))
            .order_by(Job.created_at.desc())
        )
        data["jobs"] = [job_to_dict(job) for job in jobs]
    return success_response(data, "Company retrieved")


def update_company(payload: dict[str, Any], ctx: HandlerContext) -> dict[str, Any]:
    """Owner-only partial update: keys absent from the payload are left untouched."""
    data = parse_payload(CompanyUpdate, payload)
    company = require_company_owner(ctx.db, data.slug, ctx.current_user, ctx.settings.OWNER_MATCH_EMAIL)

    changes = data.model_dump(exclude_unset=True, exclude={"slug"})
    logger.info(f"UPDATE_COMPANY: '{data.slug}' fields: {sorted(changes)}")

    if "name" in changes:
        if not changes["name"]:
            raise ValidationError("Company name cannot be empty")
        company.name = changes["name"]
    if "branding" in changes:
        company.branding = changes["branding"] or {}
    if "sections" in changes:
        company.sections = changes["sections"] or []
    if "team" in changes:
        company.team = changes["team"] or []
        logger.info(f"UPDATE_COMPANY: Updating team with {len(company.team)} members")
    if "published" in changes:
        company.published = bool(changes["published"])
        if company.published and "published_at" not in changes and company.published_at is None:
            company.published_at = utcnow()
    if "published_at" in changes:
        company.published_at = changes["published_at"]
    company.updated_at = utcnow()

    commit_or_raise(ctx.db, "update company")
    ctx.db.refresh(company)
    return success_response(company_to_dict(company), "Company updated")


def get_user_companies(payload: dict[str, Any], ctx: HandlerContext) -> dict[str, Any]:
    """Companies created by the caller, matched on id or email."""
    user = ctx.current_user
    if user is None:
        raise Unauthorized()

    keys = owner_keys(user, ctx.settings.OWNER_MATCH_EMAIL)
    if not keys:
        raise ValidationError("User email or ID is required")

    try:
        companies = crud_companies.get_companies_created_by(ctx.db, keys)
    except SQLAlchemyError as e:
        logger.error(f"GET_USER_COMPANIES: Query failed: {e}", exc_info=True)
        raise UpstreamError("Failed to fetch companies", details=str(e))

    logger.info(f"GET_USER_COMPANIES: {len(companies)} companies for {user.email or user.id}")
    return success_response({"companies": [company_to_dict(c) for c in companies]}, "Companies retrieved")


def delete_company(payload: dict[str, Any], ctx: HandlerContext) -> dict[str, Any]:
    """Owner-only delete by id (or slug). Jobs go with the company."""
    company_id = payload.get("id")
    slug = payload.get("slug")
    if not company_id and not slug:
        raise ValidationError("Company id or slug required")

    if company_id and not slug:
        found = crud_companies.get_company_by_id(ctx.db, company_id)
        if found is None:
            raise CompanyNotFound()
        slug = found.slug

    company = require_company_owner(ctx.db, slug, ctx.current_user, ctx.settings.OWNER_MATCH_EMAIL)
    if company_id and company.id != company_id:
        raise ValidationError("Company id and slug refer to different companies")

    deleted_id = company.id
    ctx.db.delete(company)
    commit_or_raise(ctx.db, "delete company")
    logger.info(f"DELETE_COMPANY: Deleted '{slug}'")
    return success_response({"id": deleted_id, "slug": slug}, "Company deleted")


def create_demo_company(payload: dict[str, Any], ctx: HandlerContext) -> dict[str, Any]:
    """Makes sure the ownerless 'demo' company exists."""
    existing = crud_companies.get_company_by_slug(ctx.db, DEMO_SLUG)
    if existing is not None:
        return success_response(company_to_dict(existing), "Demo company already exists")

    name = "Demo Company"
    now = utcnow()
    company = Company(
        name=name,
        slug=DEMO_SLUG,
        created_by=None,
        branding=default_branding(),
        sections=default_sections(name),
        team=[],
        published=True,
        published_at=now,
        created_at=now,
        updated_at=now,
    )
    ctx.db.add(company)
    commit_or_raise(ctx.db, "create demo company")
    ctx.db.refresh(company)
    return success_response(company_to_dict(company), "Demo company created successfully")
