"""Anthropic Messages API client producing short reply suggestions."""

from __future__ import annotations

from typing import Optional

import httpx
from loguru import logger

from replydesk.application.sanitize import sanitize_reply_text
from replydesk.errors import SuggestionError
from replydesk.infrastructure.settings import Settings


def build_prompt(body: str, context: Optional[str] = None, count: int = 3) -> str:
    prompt = f'Here\'s an email I received:\n\n"{body}"\n\n'

    if context and context.strip():
        prompt += f"My personal context: {context.strip()}\n\n"

    prompt += (
        f"Please suggest {count} short, friendly replies.\n"
        "Make each reply concise and direct, no more than 2-3 sentences.\n"
        "DO NOT include any numbering (1., 2., etc.) or quotation marks in your replies.\n"
    )
    if context and context.strip():
        prompt += "Incorporate my personal context in the replies.\n"
    prompt += "Each reply should be on its own line, separated by line breaks."
    return prompt


def parse_suggestions(content: str, count: int = 3) -> list[str]:
    """One suggestion per non-empty line, cleaned, capped at ``count``."""
    suggestions = []
    for line in content.splitlines():
        cleaned = sanitize_reply_text(line)
        if cleaned:
            suggestions.append(cleaned)
    return suggestions[:count]


def _first_text_block(data) -> str:
    if not isinstance(data, dict):
        raise SuggestionError(f"Unexpected Anthropic response type: {type(data).__name__}")
    blocks = data.get("content") or []
    if not isinstance(blocks, list):
        raise SuggestionError("Unexpected Anthropic response: content is not a list")
    if not blocks:
        return ""
    first = blocks[0]
    if not isinstance(first, dict) or not isinstance(first.get("text", ""), str):
        raise SuggestionError("Unexpected Anthropic response: malformed content block")
    return first.get("text", "")


class AnthropicReplySuggester:
    """Reply suggester backed by the Anthropic Messages API."""

    BASE_URL = "https://api.anthropic.com/v1"
    API_VERSION = "2023-06-01"

    def __init__(
        self,
        api_key: str,
        model: str = "claude-3-haiku-20240307",
        max_tokens: int = 512,
        count: int = 3,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ):
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.count = count
        self.timeout = timeout
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "AnthropicReplySuggester":
        api_key = settings.anthropic_api_key.get_secret_value() if settings.anthropic_api_key else ""
        return cls(
            api_key=api_key,
            model=settings.anthropic_model,
            max_tokens=settings.anthropic_max_tokens,
            count=settings.suggestion_count,
        )

    def _post(self, payload: dict) -> httpx.Response:
        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": self.API_VERSION,
            "content-type": "application/json",
        }
        url = f"{self.BASE_URL}/messages"
        if self._client is not None:
            return self._client.post(url, headers=headers, json=payload, timeout=self.timeout)
        with httpx.Client() as client:
            return client.post(url, headers=headers, json=payload, timeout=self.timeout)

    def generate(self, body: str, context: Optional[str] = None) -> list[str]:
        """Ask the model for replies to ``body``. Raises SuggestionError on failure."""
        if not self.api_key:
            raise SuggestionError("ANTHROPIC_API_KEY is not configured")

        payload = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [
                {"role": "user", "content": build_prompt(body, context, self.count)},
            ],
        }

        try:
            response = self._post(payload)
        except httpx.TimeoutException as e:
            raise SuggestionError("Anthropic API timeout") from e
        except httpx.HTTPError as e:
            raise SuggestionError(f"Anthropic API request failed: {e}") from e

        if response.status_code != 200:
            logger.error(f"Anthropic API error {response.status_code}: {response.text[:200]}")
            raise SuggestionError(f"API request failed: {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise SuggestionError("Anthropic API returned invalid JSON") from e

        text = _first_text_block(data)
        suggestions = parse_suggestions(text, self.count)
        logger.info(f"Generated {len(suggestions)} reply suggestions")
        return suggestions
