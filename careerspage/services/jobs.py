# careerspage/services/jobs.py

import logging
import math
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from careerspage.core.errors import (
    CompanyNotFound, Forbidden, JobNotFound, Unauthorized, UpstreamError, ValidationError,
)
from careerspage.core.responses import success_response
from careerspage.core.retry import db_read_retry
from careerspage.db.models import Company, Job, utcnow
from careerspage.schemas import JobCreate, JobQuery, JobUpdate, job_to_dict, parse_payload
from careerspage.services import crud_companies
from careerspage.services.ownership import is_owner, require_company_owner
from careerspage.services.persistence import HandlerContext, commit_or_raise

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10


def resolve_company(db: Session, company_id: str | None, company_slug: str | None) -> Company:
    """Finds the target company from a direct id or a slug."""
    if company_id:
        company = crud_companies.get_company_by_id(db, company_id)
        if company is None:
            logger.warning(f"JOBS: Company not found with ID: {company_id}")
            raise CompanyNotFound()
        return company
    if company_slug:
        company = crud_companies.get_company_by_slug(db, company_slug)
        if company is None:
            logger.warning(f"JOBS: Company not found with slug: {company_slug}")
            raise CompanyNotFound()
        return company
    raise ValidationError("Either companyId or companySlug must be provided")


@db_read_retry
def get_job_by_id(db: Session, job_id: str) -> Job | None:
    return db.get(Job, job_id)


def _owned_job(ctx: HandlerContext, job_id: str | None) -> Job:
    """Loads a job and checks the caller owns its company."""
    if not job_id:
        raise ValidationError("Job ID required")
    job = get_job_by_id(ctx.db, job_id)
    if job is None:
        raise JobNotFound()
    require_company_owner(ctx.db, job.company.slug, ctx.current_user, ctx.settings.OWNER_MATCH_EMAIL)
    return job


def paginate(total_items: int, page: int, limit: int) -> dict[str, Any]:
    offset = (page - 1) * limit
    return {
        "currentPage": page,
        "totalItems": total_items,
        "totalPages": math.ceil(total_items / limit),
        "hasNext": offset + limit < total_items,
    }


def get_jobs(payload: dict[str, Any], ctx: HandlerContext) -> dict[str, Any]:
    """
    Lists a company's jobs, newest first.

    Public callers only ever see active jobs. The company owner may pass
    ``includeInactive`` to see everything. Sending ``page`` or ``limit``
    switches to the paginated response shape.
    """
    query = parse_payload(JobQuery, payload)
    company = resolve_company(ctx.db, query.company_id, query.company_slug)

    if query.include_inactive:
        if ctx.current_user is None:
            raise Unauthorized("Authentication required to list inactive jobs")
        if not is_owner(company, ctx.current_user, ctx.settings.OWNER_MATCH_EMAIL):
            raise Forbidden("Only the company owner can list inactive jobs")

    conditions = [Job.company_id == company.id]
    if not query.include_inactive:
        conditions.append(Job.is_active.is_(True))
    if query.location:
        conditions.append(Job.location.ilike(f"%{query.location}%"))
    if query.title:
        conditions.append(Job.title.ilike(f"%{query.title}%"))
    if query.search:
        conditions.append(or_(
            Job.title.ilike(f"%{query.search}%"),
            Job.description.ilike(f"%{query.search}%"),
        ))
    if query.type:
        conditions.append(Job.type == query.type)

    statement = select(Job).where(*conditions).order_by(Job.created_at.desc())
    paginated = query.page is not None or query.limit is not None

    try:
        if paginated:
            page = query.page or DEFAULT_PAGE
            limit = query.limit or DEFAULT_LIMIT
            total = ctx.db.scalar(select(func.count()).select_from(Job).where(*conditions))
            jobs = list(ctx.db.scalars(statement.offset((page - 1) * limit).limit(limit)))
        else:
            jobs = list(ctx.db.scalars(statement))
    except SQLAlchemyError as e:
        logger.error(f"GET_JOBS: Query failed: {e}", exc_info=True)
        raise UpstreamError("Failed to fetch jobs", details=str(e))

    logger.info(f"GET_JOBS: Found {len(jobs)} jobs for company '{company.slug}'")
    data: dict[str, Any] = {"jobs": [job_to_dict(job) for job in jobs]}
    if paginated:
        data["pagination"] = paginate(total or 0, page, limit)
    return success_response(data, "Jobs retrieved")


def add_job(payload: dict[str, Any], ctx: HandlerContext) -> dict[str, Any]:
    """Creates a job for a company the caller owns."""
    data = parse_payload(JobCreate, payload)
    company = resolve_company(ctx.db, data.company_id, data.company_slug)
    require_company_owner(ctx.db, company.slug, ctx.current_user, ctx.settings.OWNER_MATCH_EMAIL)

    now = utcnow()
    fields = data.model_dump(exclude={"company_id", "company_slug"})
    job = Job(company_id=company.id, created_at=now, updated_at=now, **fields)
    ctx.db.add(job)
    commit_or_raise(ctx.db, "create job")
    ctx.db.refresh(job)

    logger.info(f"ADD_JOB: Created job {job.id} '{job.title}' for '{company.slug}'")
    return success_response(job_to_dict(job), "Job created successfully")


def update_job(payload: dict[str, Any], ctx: HandlerContext) -> dict[str, Any]:
    """Partial update of a job owned (through its company) by the caller."""
    data = parse_payload(JobUpdate, payload)
    job = _owned_job(ctx, data.id)

    changes = data.model_dump(exclude_unset=True, exclude={"id"})
    for key, value in changes.items():
        setattr(job, key, value)
    if job.salary_min is not None and job.salary_max is not None and job.salary_min > job.salary_max:
        raise ValidationError("salaryMin must not exceed salaryMax")
    job.updated_at = utcnow()

    logger.info(f"UPDATE_JOB: {job.id} fields: {sorted(changes)}")
    commit_or_raise(ctx.db, "update job")
    ctx.db.refresh(job)
    return success_response(job_to_dict(job), "Job updated successfully")


def delete_job(payload: dict[str, Any], ctx: HandlerContext) -> dict[str, Any]:
    job = _owned_job(ctx, payload.get("id"))
    job_id = job.id
    ctx.db.delete(job)
    commit_or_raise(ctx.db, "delete job")
    logger.info(f"DELETE_JOB: Deleted {job_id}")
    return success_response({"id": job_id}, "Job deleted successfully")
