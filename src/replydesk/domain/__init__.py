"""Domain entities."""

from replydesk.domain.entities.message import NormalizedMessage
from replydesk.domain.entities.reply import OutboundReply

__all__ = [
    "NormalizedMessage",
    "OutboundReply",
]
