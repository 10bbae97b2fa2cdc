"""Text-Enhancement Gateway backed by Gemini through LangChain.

Handlers only see ``TextGateway.generate(prompt, variables) -> str``; tests
swap in a fake with the same method.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol

from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import ChatPromptTemplate
from langchain_google_genai import ChatGoogleGenerativeAI

from careerspage.core.config import Settings
from careerspage.core.retry import gateway_retrying

logger = logging.getLogger(__name__)


class AIProcessingError(Exception):
    """Base exception for AI gateway errors."""
    pass


class ConfigurationError(AIProcessingError):
    """Raised when the AI gateway is not configured."""
    pass


class TextGateway(Protocol):
    async def generate(self, prompt: ChatPromptTemplate, variables: dict[str, Any]) -> str:
        ...


class GeminiTextGateway:
    """Runs ``prompt | gemini | StrOutputParser()`` with timeout and bounded retry."""

    def __init__(self, settings: Settings):
        if not settings.GOOGLE_API_KEY:
            raise ConfigurationError("GOOGLE_API_KEY is not set in environment variables or .env")
        self.settings = settings
        self.llm = ChatGoogleGenerativeAI(
            model=settings.GEMINI_MODEL,
            temperature=settings.AI_TEMPERATURE,
            google_api_key=settings.GOOGLE_API_KEY,
        )

    async def generate(self, prompt: ChatPromptTemplate, variables: dict[str, Any]) -> str:
        chain = prompt | self.llm | StrOutputParser()
        retrying = gateway_retrying(
            self.settings.AI_RETRY_ATTEMPTS, retry_on=(asyncio.TimeoutError, ConnectionError)
        )
        async for attempt in retrying:
            with attempt:
                return await asyncio.wait_for(
                    chain.ainvoke(variables), timeout=self.settings.AI_TIMEOUT_SECONDS
                )
        raise AIProcessingError("AI gateway produced no result")


def build_text_gateway(settings: Settings) -> GeminiTextGateway | None:
    """Creates the Gemini gateway, or None when no API key is configured."""
    try:
        return GeminiTextGateway(settings)
    except ConfigurationError as e:
        logger.warning(f"AI: {e}. AI enhancement steps will be unavailable.")
        return None


# --- Prompts ---

TEXT_PROMPTS: dict[str, str] = {
    "title": (
        "Improve this title while keeping its original meaning and context. Make it more engaging, "
        "professional, and compelling. Ensure proper grammar and vocabulary. Only return the enhanced "
        "title, nothing else.\n\nOriginal title: \"{text}\"\n\nEnhanced title:"
    ),
    "subtitle": (
        "Enhance this subtitle to be more engaging and professional while preserving the original message. "
        "Improve grammar, vocabulary, and make it more compelling. Only return the enhanced subtitle, "
        "nothing else.\n\nOriginal subtitle: \"{text}\"\n\nEnhanced subtitle:"
    ),
    "description": (
        "Improve this description while maintaining its original context and meaning. Enhance grammar, "
        "vocabulary, and readability. Make it more professional and engaging without changing the core "
        "message. Only return the enhanced description, nothing else.\n\n"
        "Original description: \"{text}\"\n\nEnhanced description:"
    ),
    "content": (
        "Enhance this content while preserving its original context, meaning, and tone. Improve grammar, "
        "vocabulary, sentence structure, and overall readability. Make it more professional and engaging "
        "without altering the fundamental message or intent. Only return the enhanced content, nothing "
        "else.\n\nOriginal content: \"{text}\"\n\nEnhanced content:"
    ),
    "general": (
        "Improve this text while keeping its original meaning and context intact. Enhance grammar, "
        "vocabulary, and readability. Make it more professional and engaging. Only return the enhanced "
        "text, nothing else.\n\nOriginal text: \"{text}\"\n\nEnhanced text:"
    ),
}

LIST_PROMPTS: dict[str, str] = {
    "values": (
        "Enhance these company values while maintaining their core meaning. Make them more professional, "
        "impactful, and inspiring. Improve grammar and vocabulary. Return only the enhanced values as a "
        "numbered list, one per line.\n\nOriginal values:\n{items}\n\nEnhanced values:"
    ),
    "benefits": (
        "Improve these employee benefits descriptions while keeping their original meaning. Make them more "
        "appealing, professional, and clear. Enhance grammar and vocabulary. Return only the enhanced "
        "benefits as a numbered list, one per line.\n\nOriginal benefits:\n{items}\n\nEnhanced benefits:"
    ),
    "list": (
        "Enhance these list items while preserving their original meaning. Improve grammar, vocabulary, and "
        "make them more professional and engaging. Return only the enhanced items as a numbered list, one "
        "per line.\n\nOriginal items:\n{items}\n\nEnhanced items:"
    ),
}

# Literal braces in the JSON examples are doubled for the template engine
CONTENT_PROMPTS: dict[str, str] = {
    "hero": (
        "Generate an engaging hero section for a careers page for {name}, a {industry} company. "
        "{description}\n\nCreate:\n1. A compelling main title (max 8 words)\n"
        "2. An engaging subtitle (max 15 words)\n\n"
        "Format as JSON: {{\"title\": \"...\", \"subtitle\": \"...\"}}"
    ),
    "about": (
        "Generate an \"About Us\" section for {name}, a {industry} company's careers page. {description}\n\n"
        "Create:\n1. A section title\n"
        "2. A compelling description (2-3 sentences) that would attract potential employees\n\n"
        "Format as JSON: {{\"title\": \"...\", \"content\": \"...\"}}"
    ),
    "values": (
        "Generate 4-6 core company values for {name}, a {industry} company. Make them inspiring, authentic, "
        "and relevant to potential employees.\n\n"
        "Format as JSON: {{\"title\": \"Our Core Values\", \"items\": [\"Value 1\", \"Value 2\", ...]}}"
    ),
}


def build_prompt(template: str) -> ChatPromptTemplate:
    return ChatPromptTemplate.from_messages([("human", template)])
