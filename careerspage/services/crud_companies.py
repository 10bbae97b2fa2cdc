# careerspage/services/crud_companies.py

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from careerspage.core.retry import db_read_retry
from careerspage.db.models import Company


# --- Getters ---

@db_read_retry
def get_company_by_slug(db: Session, slug: str) -> Company | None:
    return db.scalars(select(Company).where(Company.slug == slug)).first()


@db_read_retry
def get_company_by_id(db: Session, company_id: str) -> Company | None:
    return db.get(Company, company_id)


@db_read_retry
def slug_exists(db: Session, slug: str) -> bool:
    return db.scalar(select(Company.id).where(Company.slug == slug)) is not None


# --- List Functions ---

@db_read_retry
def get_companies_created_by(db: Session, owner_keys: list[str]) -> list[Company]:
    """Companies whose created_by equals any of the given owner keys, newest first."""
    if not owner_keys:
        return []
    return list(db.scalars(
        select(Company)
        .where(or_(*(Company.created_by == key for key in owner_keys)))
        .order_by(Company.created_at.desc())
    ))
