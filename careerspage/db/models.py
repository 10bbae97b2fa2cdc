# careerspage/db/models.py

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean, Column, Date, DateTime, ForeignKey, Integer, JSON, LargeBinary,
    String, Text, UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

# Base class for declarative models
Base = declarative_base()


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    name = Column(String, nullable=True)
    metadata_ = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)


class RevokedToken(Base):
    """A logged-out token, kept until its own expiry."""
    __tablename__ = "revoked_tokens"

    jti = Column(String(64), primary_key=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    revoked_at = Column(DateTime(timezone=True), default=utcnow)


class Company(Base):
    __tablename__ = "companies"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    slug = Column(String(120), unique=True, index=True, nullable=False)
    # Creator's user id, or their email for rows created before ids were issued
    created_by = Column(String(255), index=True, nullable=True)
    branding = Column(JSON, nullable=False, default=dict)
    sections = Column(JSON, nullable=False, default=list)
    team = Column(JSON, nullable=False, default=list)
    published = Column(Boolean, nullable=False, default=False)
    published_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    version = Column(Integer, nullable=False)

    jobs = relationship("Job", back_populates="company", cascade="all, delete-orphan")

    __mapper_args__ = {"version_id_col": version}


class Job(Base):
    __tablename__ = "jobs"

    id = Column(String(36), primary_key=True, default=new_id)
    company_id = Column(String(36), ForeignKey("companies.id", ondelete="CASCADE"), index=True, nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False, default="")
    department = Column(String(120), nullable=True)
    location = Column(String(255), nullable=True)
    location_type = Column(String(20), nullable=True)    # Remote, On-site, Hybrid
    type = Column(String(20), nullable=True)             # Full-time, Part-time, Contract, Internship
    experience_level = Column(String(50), nullable=True)
    salary = Column(String(120), nullable=True)
    salary_min = Column(Integer, nullable=True)
    salary_max = Column(Integer, nullable=True)
    currency = Column(String(8), nullable=True)
    requirements = Column(JSON, nullable=False, default=list)
    responsibilities = Column(JSON, nullable=False, default=list)
    skills = Column(JSON, nullable=False, default=list)
    benefits = Column(JSON, nullable=False, default=list)
    perks = Column(JSON, nullable=False, default=list)
    application_url = Column(String(500), nullable=True)
    deadline = Column(Date, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    is_featured = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    version = Column(Integer, nullable=False)

    company = relationship("Company", back_populates="jobs")

    __mapper_args__ = {"version_id_col": version}


class StorageBucket(Base):
    __tablename__ = "storage_buckets"

    name = Column(String(63), primary_key=True)
    public = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)


class StoredObject(Base):
    """
    Blob content stored directly in the database.
    Objects are addressed by (bucket, path) and served read-only through the
    public storage route when their bucket is public.
    """
    __tablename__ = "storage_objects"
    __table_args__ = (UniqueConstraint("bucket", "path", name="uq_storage_objects_bucket_path"),)

    id = Column(Integer, primary_key=True, index=True)
    bucket = Column(String(63), ForeignKey("storage_buckets.name"), nullable=False)
    path = Column(String(1024), nullable=False)

    # --- File Metadata ---
    content_type = Column(String(100), nullable=False)
    size = Column(Integer, nullable=False)

    # --- File Content ---
    content = Column(LargeBinary, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow)
