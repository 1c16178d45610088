"""Reply suggestion backends."""

from replydesk.infrastructure.llm.anthropic import AnthropicReplySuggester, parse_suggestions

__all__ = [
    "AnthropicReplySuggester",
    "parse_suggestions",
]
