# careerspage/schemas/ai.py

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from careerspage.schemas.base import CamelModel


class TextContentType(str, Enum):
    TITLE = "title"
    SUBTITLE = "subtitle"
    DESCRIPTION = "description"
    CONTENT = "content"
    GENERAL = "general"


class ListContentType(str, Enum):
    VALUES = "values"
    BENEFITS = "benefits"
    LIST = "list"


class GeneratedContentType(str, Enum):
    HERO = "hero"
    ABOUT = "about"
    VALUES = "values"


class EnhanceTextRequest(CamelModel):
    text: str | None = None
    content_type: str = TextContentType.GENERAL.value


class EnhanceListRequest(CamelModel):
    items: list[str] = Field(min_length=1)
    content_type: str = ListContentType.LIST.value

    @field_validator("items", mode="before")
    @classmethod
    def must_be_list(cls, value: Any) -> Any:
        if not isinstance(value, list):
            raise ValueError("Items array is required")
        return value


class GenerateContentRequest(CamelModel):
    content_type: str | None = None
    company_context: dict[str, Any] = Field(default_factory=dict)


# --- Shapes the AI must return for GENERATE_CONTENT ---
class HeroContent(BaseModel):
    title: str
    subtitle: str


class AboutContent(BaseModel):
    title: str
    content: str


class ValuesContent(BaseModel):
    title: str
    items: list[str]


GENERATED_CONTENT_SHAPES: dict[GeneratedContentType, type[BaseModel]] = {
    GeneratedContentType.HERO: HeroContent,
    GeneratedContentType.ABOUT: AboutContent,
    GeneratedContentType.VALUES: ValuesContent,
}
