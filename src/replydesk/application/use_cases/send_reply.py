"""Send a reply and mark the message it answers as read."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from loguru import logger

from replydesk.application.ports.mail_transport import MailTransport
from replydesk.application.ports.message_store import MessageStore
from replydesk.application.sanitize import sanitize_reply_text
from replydesk.domain.entities.reply import OutboundReply


@dataclass(frozen=True)
class SendReplyResult:
    reply: OutboundReply
    # None when there was nothing to mark or marking failed
    marked_seen: Optional[bool] = None


class SendReplyUseCase:
    """
    Flow:
    1. Clean the reply text
    2. Submit through the relay (SendError propagates, nothing else happens)
    3. Mark the original as seen, best effort: failures are logged only
    """

    def __init__(self, transport: MailTransport, store: MessageStore) -> None:
        self.transport = transport
        self.store = store

    def run(self, reply: OutboundReply) -> SendReplyResult:
        cleaned = replace(reply, text=sanitize_reply_text(reply.text))
        self.transport.send(cleaned)

        if not cleaned.in_reply_to:
            return SendReplyResult(reply=cleaned)

        try:
            found = self.store.mark_seen_by_id(cleaned.in_reply_to)
        except Exception as e:
            # Reply is already delivered
            logger.error(f"Error marking email {cleaned.in_reply_to} as read: {e}")
            return SendReplyResult(reply=cleaned, marked_seen=None)

        if not found:
            logger.warning(f"Reply sent but {cleaned.in_reply_to} was not found to mark as read")
        return SendReplyResult(reply=cleaned, marked_seen=found)
