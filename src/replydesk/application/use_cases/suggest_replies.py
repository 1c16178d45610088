"""Use case for producing reply suggestions for an email body."""

from __future__ import annotations

from typing import Optional

from loguru import logger

from replydesk.application.ports.reply_suggester import ReplySuggester
from replydesk.errors import SuggestionError

FALLBACK_SUGGESTIONS = ["Sorry, I couldn't generate suggestions at this time."]


class SuggestRepliesUseCase:
    def __init__(self, suggester: ReplySuggester) -> None:
        self.suggester = suggester

    def run(self, body: str, context: Optional[str] = None) -> list[str]:
        if not body or not body.strip():
            raise ValueError("Email body is required")

        try:
            return self.suggester.generate(body, context)
        except SuggestionError as e:
            logger.error(f"Error getting suggestions from AI: {e}")
            return list(FALLBACK_SUGGESTIONS)
