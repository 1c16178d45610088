"""Infrastructure layer - mail protocols, suggestion backend, and configuration."""

from replydesk.infrastructure.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
