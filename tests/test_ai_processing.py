import asyncio

import pytest

from careerspage.core.errors import (
    AIServiceError, EmptyAIResponse, EmptyText, InvalidAIFormat, UnsupportedContentType, ValidationError,
)
from careerspage.services.ai.processing import (
    clean_enhanced_text, enhance_text, enhance_text_array, generate_content,
    parse_json_response, parse_numbered_list,
)

from conftest import send


def run(coro):
    return asyncio.run(coro)


@pytest.mark.parametrize("raw, expected", [
    ('"Build the future"', "Build the future"),
    ("**Build the future**", "Build the future"),
    ("## Build the future", "Build the future"),
    ("  `'Build the future'`  ", "Build the future"),
])
def test_clean_enhanced_text(raw, expected):
    assert clean_enhanced_text(raw) == expected


def test_parse_numbered_list():
    reply = "1. Integrity first\n2) Ship often\n\n- Stay curious\n"
    assert parse_numbered_list(reply) == ["Integrity first", "Ship often", "Stay curious"]


def test_parse_json_response_tolerates_code_fences():
    assert parse_json_response('```json\n{"title": "Hi"}\n```') == {"title": "Hi"}
    with pytest.raises(InvalidAIFormat):
        parse_json_response("Sure! Here is your hero section.")


def test_enhance_text(ctx, fake_ai):
    fake_ai.reply = '"A Bold New Title"'
    result = run(enhance_text({"text": "new title", "contentType": "title"}, ctx))

    assert result["data"] == {
        "originalText": "new title",
        "enhancedText": "A Bold New Title",
        "contentType": "title",
    }
    _, variables = fake_ai.calls[0]
    assert variables == {"text": "new title"}


def test_blank_text_never_reaches_gateway(ctx, fake_ai):
    for text in [None, "", "   "]:
        with pytest.raises(EmptyText):
            run(enhance_text({"text": text}, ctx))
    assert fake_ai.calls == []


def test_unknown_text_type_falls_back_to_general(ctx):
    result = run(enhance_text({"text": "hello", "contentType": "poem"}, ctx))
    assert result["data"]["contentType"] == "general"


def test_empty_ai_reply(ctx, fake_ai):
    fake_ai.reply = '""'
    with pytest.raises(EmptyAIResponse):
        run(enhance_text({"text": "hello"}, ctx))


def test_gateway_failure_is_an_ai_service_error(ctx, fake_ai):
    fake_ai.reply = ConnectionError("quota exceeded")
    with pytest.raises(AIServiceError) as excinfo:
        run(enhance_text({"text": "hello"}, ctx))
    assert excinfo.value.details == "quota exceeded"


def test_unconfigured_gateway(ctx):
    ctx.ai = None
    with pytest.raises(AIServiceError, match="not configured"):
        run(enhance_text({"text": "hello"}, ctx))


def test_enhance_text_array(ctx, fake_ai):
    fake_ai.reply = "1. Radical candor\n2. Ownership"
    result = run(enhance_text_array({"items": ["honest", "own it"], "contentType": "values"}, ctx))

    assert result["data"]["enhancedItems"] == ["Radical candor", "Ownership"]
    assert result["data"]["originalItems"] == ["honest", "own it"]
    _, variables = fake_ai.calls[0]
    assert variables["items"] == "1. honest\n2. own it"


def test_enhance_text_array_falls_back_to_originals(ctx, fake_ai):
    fake_ai.reply = "   \n  "
    result = run(enhance_text_array({"items": ["honest", "own it"]}, ctx))
    assert result["data"]["enhancedItems"] == ["honest", "own it"]


@pytest.mark.parametrize("payload", [{}, {"items": []}, {"items": "not a list"}])
def test_enhance_text_array_needs_items(ctx, payload):
    with pytest.raises(ValidationError):
        run(enhance_text_array(payload, ctx))


def test_generate_hero_content(ctx, fake_ai):
    fake_ai.reply = '```json\n{"title": "Build With Us", "subtitle": "Join a team that ships"}\n```'
    context = {"name": "Acme", "industry": "robotics"}
    result = run(generate_content({"contentType": "hero", "companyContext": context}, ctx))

    assert result["data"] == {
        "contentType": "hero",
        "generatedContent": {"title": "Build With Us", "subtitle": "Join a team that ships"},
        "companyContext": context,
    }
    _, variables = fake_ai.calls[0]
    assert variables["name"] == "Acme"


def test_generate_content_checks_shape(ctx, fake_ai):
    fake_ai.reply = '{"title": "Our Core Values"}'
    with pytest.raises(InvalidAIFormat):
        run(generate_content({"contentType": "values"}, ctx))


def test_generate_content_unsupported_type(ctx, fake_ai):
    with pytest.raises(UnsupportedContentType):
        run(generate_content({"contentType": "footer"}, ctx))
    assert fake_ai.calls == []


def test_ai_steps_over_http(client, fake_ai):
    fake_ai.reply = "Sharper copy"
    response = send(client, "ENHANCE_TEXT", {"text": "copy"})
    assert response.status_code == 200
    assert response.json()["data"]["enhancedText"] == "Sharper copy"

    empty = send(client, "ENHANCE_TEXT", {"text": ""})
    assert empty.status_code == 400
    assert empty.json()["error"]["message"] == "Text content is required"
