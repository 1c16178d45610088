from __future__ import annotations
from typing import Protocol

from replydesk.domain.entities.reply import OutboundReply


class MailTransport(Protocol):
    def send(self, reply: OutboundReply) -> None:
        """Submit the reply to the relay. Raises SendError on failure."""
        ...
