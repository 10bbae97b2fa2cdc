# careerspage/schemas/__init__.py

from .base import CamelModel, parse_payload
from .event import EventRequest, EventResponse, ErrorBody
from .user import Identity, LoginRequest, RegisterRequest, TokenRequest
from .company import (
    CompanyCreate, CompanyUpdate, Section, TeamMember,
    company_to_dict, default_branding, default_sections, normalize_sections,
)
from .job import JobCreate, JobQuery, JobUpdate, JobType, LocationType, job_to_dict
from .ai import (
    EnhanceListRequest, EnhanceTextRequest, GenerateContentRequest,
    GeneratedContentType, ListContentType, TextContentType, GENERATED_CONTENT_SHAPES,
)
