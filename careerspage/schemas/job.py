# careerspage/schemas/job.py

from datetime import date
from enum import Enum
from typing import Any

from pydantic import ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from careerspage.core.responses import to_iso
from careerspage.schemas.base import CamelModel


class LocationType(str, Enum):
    REMOTE = "Remote"
    ON_SITE = "On-site"
    HYBRID = "Hybrid"


class JobType(str, Enum):
    FULL_TIME = "Full-time"
    PART_TIME = "Part-time"
    CONTRACT = "Contract"
    INTERNSHIP = "Internship"


# Blank values on create fall back to these, keyed by field name
JOB_DEFAULTS: dict[str, Any] = {
    "title": "Untitled Position",
    "description": "",
    "department": "General",
    "location": "Remote",
    "location_type": LocationType.REMOTE.value,
    "type": JobType.FULL_TIME.value,
    "experience_level": "Mid",
    "currency": "USD",
    "is_active": True,
    "is_featured": False,
}

LIST_FIELDS = ("requirements", "responsibilities", "skills", "benefits", "perks")

# Columns that are NOT NULL in the jobs table
REQUIRED_FIELDS = ("title", "description", "is_active", "is_featured") + LIST_FIELDS


def _take(data: dict[str, Any], name: str) -> Any:
    """Pops a field sent either as its camelCase alias or its snake_case name."""
    alias = to_camel(name)
    value = data.pop(alias, None)
    snake_value = data.pop(name, None)
    return value if value not in (None, "") else snake_value


class JobFields(CamelModel):
    model_config = ConfigDict(use_enum_values=True)

    title: str | None = None
    description: str | None = None
    department: str | None = None
    location: str | None = None
    location_type: LocationType | None = None
    type: JobType | None = None
    experience_level: str | None = None
    salary: str | None = None
    salary_min: int | None = Field(default=None, ge=0)
    salary_max: int | None = Field(default=None, ge=0)
    currency: str | None = None
    requirements: list[str] | None = None
    responsibilities: list[str] | None = None
    skills: list[str] | None = None
    benefits: list[str] | None = None
    perks: list[str] | None = None
    application_url: str | None = None
    deadline: date | None = None
    is_active: bool | None = None
    is_featured: bool | None = None

    @field_validator("salary", mode="before")
    @classmethod
    def salary_as_text(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @model_validator(mode="after")
    def salary_range_ordered(self):
        if self.salary_min is not None and self.salary_max is not None and self.salary_min > self.salary_max:
            raise ValueError("salaryMin must not exceed salaryMax")
        return self


class JobCreate(JobFields):
    company_id: str | None = None
    company_slug: str | None = None

    @model_validator(mode="before")
    @classmethod
    def apply_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for name, default in JOB_DEFAULTS.items():
            value = _take(data, name)
            data[name] = default if value in (None, "") else value
        for name in LIST_FIELDS:
            value = _take(data, name)
            data[name] = [] if value is None else value
        return data


class JobUpdate(JobFields):
    id: str

    @model_validator(mode="after")
    def required_fields_not_null(self):
        for name in REQUIRED_FIELDS:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{to_camel(name)} cannot be null")
        return self


class JobQuery(CamelModel):
    company_id: str | None = None
    company_slug: str | None = None
    location: str | None = None
    title: str | None = None
    search: str | None = None
    type: str | None = None
    include_inactive: bool = False
    page: int | None = Field(default=None, ge=1)
    limit: int | None = Field(default=None, ge=1, le=100)


def job_to_dict(job) -> dict[str, Any]:
    """Wire representation of a Job row."""
    return {
        "id": job.id,
        "companyId": job.company_id,
        "title": job.title,
        "description": job.description,
        "department": job.department,
        "location": job.location,
        "locationType": job.location_type,
        "type": job.type,
        "experienceLevel": job.experience_level,
        "salary": job.salary,
        "salaryMin": job.salary_min,
        "salaryMax": job.salary_max,
        "currency": job.currency,
        "requirements": job.requirements or [],
        "responsibilities": job.responsibilities or [],
        "skills": job.skills or [],
        "benefits": job.benefits or [],
        "perks": job.perks or [],
        "applicationUrl": job.application_url,
        "deadline": to_iso(job.deadline),
        "isActive": bool(job.is_active),
        "isFeatured": bool(job.is_featured),
        "createdAt": to_iso(job.created_at),
        "updatedAt": to_iso(job.updated_at),
    }
