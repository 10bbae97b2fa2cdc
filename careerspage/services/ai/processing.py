"""AI text enhancement handlers for careers page content.

This module turns ENHANCE_TEXT, ENHANCE_TEXT_ARRAY and GENERATE_CONTENT
events into prompts for the text gateway and cleans up what comes back.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List

from pydantic import ValidationError as PydanticValidationError

from careerspage.core.errors import (
    AIServiceError,
    EmptyAIResponse,
    EmptyText,
    EventError,
    InvalidAIFormat,
    UnsupportedContentType,
)
from careerspage.core.responses import success_response
from careerspage.schemas import (
    GENERATED_CONTENT_SHAPES,
    EnhanceListRequest,
    EnhanceTextRequest,
    GeneratedContentType,
    GenerateContentRequest,
    ListContentType,
    TextContentType,
    parse_payload,
)
from careerspage.services.ai.gateway import (
    CONTENT_PROMPTS,
    LIST_PROMPTS,
    TEXT_PROMPTS,
    build_prompt,
)
from careerspage.services.persistence import HandlerContext

logger = logging.getLogger(__name__)

_WRAPPING_QUOTES = re.compile(r'^["\'`]+|["\'`]+$')
_BOLD_MARKERS = re.compile(r"^\*\*|\*\*$")
_HEADER_MARKER = re.compile(r"^#+\s*")
_LIST_MARKER = re.compile(r"^\s*(?:\d+[.)]|[-*•])\s*")
_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


# --- Response cleanup ---

def clean_enhanced_text(text: str) -> str:
    """Strips wrapping quotes, bold markers and markdown headers from a model reply."""
    cleaned = text.strip()
    previous = None
    while cleaned != previous:
        previous = cleaned
        cleaned = _WRAPPING_QUOTES.sub("", cleaned)
        cleaned = _BOLD_MARKERS.sub("", cleaned)
        cleaned = _HEADER_MARKER.sub("", cleaned)
        cleaned = cleaned.strip()
    return cleaned


def parse_numbered_list(text: str) -> List[str]:
    """Splits a numbered or bulleted reply into its items."""
    items = []
    for line in text.splitlines():
        item = clean_enhanced_text(_LIST_MARKER.sub("", line))
        if item:
            items.append(item)
    return items


def parse_json_response(text: str) -> Any:
    """Parses a JSON reply, tolerating a surrounding markdown code fence.

    Raises:
        InvalidAIFormat: If the reply is not valid JSON.
    """
    stripped = _CODE_FENCE.sub("", text.strip()).strip()
    try:
        return json.loads(stripped)
    except json.JSONDecodeError as e:
        logger.error(f"AI: Failed to parse generated content as JSON: {e}")
        raise InvalidAIFormat(details=str(e))


def _resolve_content_type(requested: str | None, allowed: type, fallback: str) -> str:
    values = {member.value for member in allowed}
    if requested in values:
        return requested
    logger.info(f"AI: Unknown contentType '{requested}', using '{fallback}'")
    return fallback


async def _call_gateway(ctx: HandlerContext, template: str, variables: Dict[str, Any]) -> str:
    """Runs one prompt through the configured gateway.

    Raises:
        AIServiceError: If no gateway is configured or the upstream call fails.
    """
    if ctx.ai is None:
        raise AIServiceError(
            "AI service is not configured",
            details="GOOGLE_API_KEY is not set in environment variables or .env",
        )
    try:
        return await ctx.ai.generate(build_prompt(template), variables)
    except EventError:
        raise
    except Exception as e:
        logger.error(f"AI: Gateway call failed: {e}", exc_info=True)
        raise AIServiceError("Failed to enhance text", details=str(e))


# --- Handlers ---

async def enhance_text(payload: Dict[str, Any], ctx: HandlerContext) -> Dict[str, Any]:
    """Rewrites a single piece of copy.

    Args:
        payload: ``{text, contentType?}``; contentType defaults to "general".
        ctx: Handler context carrying the text gateway.

    Returns:
        Success envelope with ``{originalText, enhancedText, contentType}``.

    Raises:
        EmptyText: If ``text`` is missing or blank. No gateway call is made.
        EmptyAIResponse: If nothing is left after cleanup.
    """
    request = parse_payload(EnhanceTextRequest, payload)
    if not request.text or not request.text.strip():
        raise EmptyText()

    content_type = _resolve_content_type(request.content_type, TextContentType, TextContentType.GENERAL.value)
    logger.info(f"ENHANCE_TEXT: Enhancing {content_type} ({len(request.text)} chars)")

    raw = await _call_gateway(ctx, TEXT_PROMPTS[content_type], {"text": request.text})
    enhanced = clean_enhanced_text(raw or "")
    if not enhanced:
        raise EmptyAIResponse()

    return success_response(
        {"originalText": request.text, "enhancedText": enhanced, "contentType": content_type},
        "Text enhanced successfully",
    )


async def enhance_text_array(payload: Dict[str, Any], ctx: HandlerContext) -> Dict[str, Any]:
    """Rewrites a list of items (values, benefits, ...) in one call.

    If the reply cannot be split into items, the original items are returned.
    """
    request = parse_payload(EnhanceListRequest, payload)
    content_type = _resolve_content_type(request.content_type, ListContentType, ListContentType.LIST.value)

    numbered = "\n".join(f"{index}. {item}" for index, item in enumerate(request.items, start=1))
    raw = await _call_gateway(ctx, LIST_PROMPTS[content_type], {"items": numbered})

    enhanced_items = parse_numbered_list(raw or "")
    if not enhanced_items:
        logger.warning("ENHANCE_TEXT_ARRAY: Could not parse any items from AI reply, returning originals")
        enhanced_items = list(request.items)

    return success_response(
        {"originalItems": request.items, "enhancedItems": enhanced_items, "contentType": content_type},
        "Items enhanced successfully",
    )


async def generate_content(payload: Dict[str, Any], ctx: HandlerContext) -> Dict[str, Any]:
    """Generates a hero, about or values section from the company context."""
    request = parse_payload(GenerateContentRequest, payload)
    try:
        content_type = GeneratedContentType(request.content_type)
    except ValueError:
        raise UnsupportedContentType(f"Unsupported content type: {request.content_type}")

    context = request.company_context
    variables = {
        "name": context.get("name") or "the company",
        "industry": context.get("industry") or "technology",
        "description": context.get("description") or "",
    }
    logger.info(f"GENERATE_CONTENT: Generating {content_type.value} for {variables['name']}")

    raw = await _call_gateway(ctx, CONTENT_PROMPTS[content_type.value], variables)
    parsed = parse_json_response(raw or "")

    shape = GENERATED_CONTENT_SHAPES[content_type]
    try:
        generated = shape.model_validate(parsed).model_dump()
    except PydanticValidationError as e:
        logger.error(f"GENERATE_CONTENT: Reply does not match the {content_type.value} shape: {e}")
        raise InvalidAIFormat(details=str(e))

    return success_response(
        {"contentType": content_type.value, "generatedContent": generated, "companyContext": context},
        "Content generated successfully",
    )
