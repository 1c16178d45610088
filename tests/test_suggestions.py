from __future__ import annotations

import json

import httpx
import pytest

from replydesk.application.use_cases.suggest_replies import FALLBACK_SUGGESTIONS, SuggestRepliesUseCase
from replydesk.errors import SuggestionError
from replydesk.infrastructure.llm.anthropic import (
    AnthropicReplySuggester,
    build_prompt,
    parse_suggestions,
)


def make_suggester(handler, **kwargs) -> AnthropicReplySuggester:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return AnthropicReplySuggester(api_key="test-key", client=client, **kwargs)


def test_generate_posts_prompt_and_cleans_lines() -> None:
    captured = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["request"] = request
        captured["payload"] = json.loads(request.content)
        text = '1. Sounds great!\n\n"Thanks, see you then"\n3) Can we move it?\nOne too many'
        return httpx.Response(200, json={"content": [{"type": "text", "text": text}]})

    suggestions = make_suggester(handler).generate("Lunch on Friday?", "I'm vegetarian")

    assert suggestions == ["Sounds great!", "Thanks, see you then", "Can we move it?"]
    request = captured["request"]
    assert request.url == "https://api.anthropic.com/v1/messages"
    assert request.headers["x-api-key"] == "test-key"
    assert request.headers["anthropic-version"] == "2023-06-01"
    payload = captured["payload"]
    assert payload["model"] == "claude-3-haiku-20240307"
    assert payload["max_tokens"] == 512
    prompt = payload["messages"][0]["content"]
    assert '"Lunch on Friday?"' in prompt
    assert "My personal context: I'm vegetarian" in prompt


def test_http_error_status_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(529, text="overloaded")

    with pytest.raises(SuggestionError):
        make_suggester(handler).generate("Hi")


def test_transport_error_raises() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("no route", request=request)

    with pytest.raises(SuggestionError):
        make_suggester(handler).generate("Hi")


def test_empty_content_gives_no_suggestions() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"content": []})

    assert make_suggester(handler).generate("Hi") == []


def test_missing_api_key_fails_at_generate_without_a_request() -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={"content": []})

    client = httpx.Client(transport=httpx.MockTransport(handler))
    suggester = AnthropicReplySuggester(api_key="", client=client)

    with pytest.raises(SuggestionError):
        suggester.generate("Hi")
    assert calls == []
    assert SuggestRepliesUseCase(suggester).run("Hi") == FALLBACK_SUGGESTIONS


@pytest.mark.parametrize(
    "payload",
    [
        {"content": ["oops"]},
        ["not", "an", "object"],
        {"content": "oops"},
        {"content": [{"type": "text", "text": 42}]},
    ],
)
def test_unexpected_response_shape_falls_back(payload) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=payload)

    suggester = make_suggester(handler)

    with pytest.raises(SuggestionError):
        suggester.generate("Hi")
    assert SuggestRepliesUseCase(suggester).run("Hi") == FALLBACK_SUGGESTIONS


def test_prompt_without_context() -> None:
    prompt = build_prompt("See you soon", None)

    assert "personal context" not in prompt
    assert "3 short, friendly replies" in prompt


def test_parse_suggestions_respects_count() -> None:
    assert parse_suggestions("a\nb\nc\nd", count=2) == ["a", "b"]


class BrokenSuggester:
    def generate(self, body, context=None):
        raise SuggestionError("boom")


class EchoSuggester:
    def __init__(self) -> None:
        self.calls = []

    def generate(self, body, context=None):
        self.calls.append((body, context))
        return ["Ok"]


def test_use_case_falls_back_on_backend_failure() -> None:
    assert SuggestRepliesUseCase(BrokenSuggester()).run("Hello") == FALLBACK_SUGGESTIONS


def test_use_case_passes_context_through() -> None:
    suggester = EchoSuggester()

    assert SuggestRepliesUseCase(suggester).run("Hello", "be brief") == ["Ok"]
    assert suggester.calls == [("Hello", "be brief")]


def test_use_case_requires_body() -> None:
    with pytest.raises(ValueError):
        SuggestRepliesUseCase(EchoSuggester()).run("   ")
