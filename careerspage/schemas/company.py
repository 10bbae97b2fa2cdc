# careerspage/schemas/company.py

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from careerspage.core.responses import to_iso
from careerspage.schemas.base import CamelModel

SLUG_PATTERN = r"^[a-z0-9-]+$"


class Section(BaseModel):
    """One block of the public careers page."""
    id: str | None = None
    type: str
    title: str = ""
    content: Any = None
    visible: bool = True
    order: int | None = None

    model_config = ConfigDict(extra="allow")


class TeamMember(BaseModel):
    name: str = ""
    title: str | None = None
    department: str | None = None
    bio: str | None = None
    image: str | None = None
    email: str | None = None
    linkedin: str | None = None
    twitter: str | None = None
    skills: list[str] = Field(default_factory=list)
    order: int | None = None

    model_config = ConfigDict(extra="allow")


def normalize_sections(value: Any) -> list[dict[str, Any]]:
    """
    Accepts sections as an ordered list or as a map keyed by section name and
    returns the list form, sorted by ``order``. Map keys become the section id
    (and type, when the entry has none).
    """
    if value is None:
        return []
    if isinstance(value, dict):
        entries = []
        for key, entry in value.items():
            if entry is None:
                entry = {}
            if not isinstance(entry, dict):
                raise ValueError(f"section '{key}' must be an object")
            entry = dict(entry)
            entry.setdefault("id", key)
            entry.setdefault("type", key)
            entries.append(entry)
    elif isinstance(value, list):
        if not all(isinstance(entry, dict) for entry in value):
            raise ValueError("every section must be an object")
        entries = [dict(entry) for entry in value]
    else:
        raise ValueError("sections must be a list or an object keyed by section name")

    sections = []
    for index, entry in enumerate(entries):
        section = Section.model_validate(entry)
        if section.order is None:
            section.order = index + 1
        if not section.id:
            section.id = section.type or uuid.uuid4().hex
        sections.append(section)
    sections.sort(key=lambda s: s.order)
    return [s.model_dump() for s in sections]


class CompanyCreate(CamelModel):
    name: str | None = None
    slug: str = Field(pattern=SLUG_PATTERN, max_length=120)
    branding: dict[str, Any] | None = None
    sections: list[dict[str, Any]] | None = None
    team: list[TeamMember] | None = None

    @field_validator("slug", mode="before")
    @classmethod
    def strip_slug(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("sections", mode="before")
    @classmethod
    def sections_as_list(cls, value: Any) -> Any:
        return None if value is None else normalize_sections(value)


class CompanyUpdate(CamelModel):
    """Partial update: only the keys the caller sent are written."""
    slug: str
    name: str | None = None
    branding: dict[str, Any] | None = None
    sections: list[dict[str, Any]] | None = None
    team: list[TeamMember] | None = None
    published: bool | None = None
    published_at: datetime | None = None

    @field_validator("sections", mode="before")
    @classmethod
    def sections_as_list(cls, value: Any) -> Any:
        return None if value is None else normalize_sections(value)


def default_branding() -> dict[str, Any]:
    return {
        "primaryColor": "#3b82f6",
        "secondaryColor": "#1f2937",
        "backgroundColor": "#ffffff",
        "textColor": "#374151",
        "logo": None,
        "banner": None,
        "website": None,
        "layout": {
            "containerWidth": "normal",
            "spacing": "normal",
            "borderRadius": "medium",
            "layoutStyle": "modern",
        },
        "typography": {
            "fontFamily": "Inter",
            "fontSize": "medium",
            "fontWeight": "normal",
        },
    }


def default_sections(company_name: str) -> list[dict[str, Any]]:
    return [
        {
            "id": "hero",
            "type": "hero",
            "title": f"Welcome to {company_name}",
            "content": {"subtitle": "Join our amazing team!"},
            "visible": True,
            "order": 1,
        },
        {
            "id": "about",
            "type": "about",
            "title": "About Us",
            "content": {"content": "We are building something amazing."},
            "visible": True,
            "order": 2,
        },
        {
            "id": "jobs",
            "type": "jobs",
            "title": "Open Positions",
            "content": {"showAll": True},
            "visible": True,
            "order": 3,
        },
    ]


def company_to_dict(company) -> dict[str, Any]:
    """Wire representation of a Company row."""
    return {
        "id": company.id,
        "name": company.name,
        "slug": company.slug,
        "created_by": company.created_by,
        "branding": company.branding or {},
        "sections": company.sections or [],
        "team": company.team or [],
        "published": bool(company.published),
        "publishedAt": to_iso(company.published_at),
        "createdAt": to_iso(company.created_at),
        "updatedAt": to_iso(company.updated_at),
    }
