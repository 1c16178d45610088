"""SMTP relay for outbound replies."""

from __future__ import annotations

import smtplib
import ssl
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formatdate, make_msgid, parseaddr

from loguru import logger

from replydesk.domain.entities.reply import OutboundReply
from replydesk.errors import SendError
from replydesk.infrastructure.settings import Settings


@dataclass(frozen=True)
class SmtpTransportConfig:
    host: str
    port: int
    user: str
    password: str
    sender: str
    timeout: float = 30.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "SmtpTransportConfig":
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            user=settings.mail_user,
            password=settings.mail_password.get_secret_value(),
            sender=settings.sender_address,
            timeout=settings.send_timeout_seconds,
        )


class SmtpMailTransport:
    """Submits replies over implicit-TLS SMTP, one connection per message."""

    def __init__(self, cfg: SmtpTransportConfig) -> None:
        self.cfg = cfg

    def build_message(self, reply: OutboundReply) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.cfg.sender
        msg["To"] = reply.to
        msg["Subject"] = reply.subject
        msg["Date"] = formatdate(localtime=True)
        domain = parseaddr(self.cfg.sender)[1].rpartition("@")[2] or None
        msg["Message-ID"] = make_msgid(domain=domain)
        if reply.in_reply_to:
            msg["In-Reply-To"] = reply.in_reply_to
            msg["References"] = reply.in_reply_to
        msg.set_content(reply.text)
        return msg

    def send(self, reply: OutboundReply) -> None:
        """Deliver the reply. Raises SendError if the relay does not take it."""
        try:
            msg = self.build_message(reply)
        except ValueError as e:
            raise SendError(f"Cannot build reply to {reply.to!r}: {e}") from e

        logger.info(f"Sending reply to {reply.to} via {self.cfg.host}:{self.cfg.port}")
        try:
            with smtplib.SMTP_SSL(
                self.cfg.host,
                self.cfg.port,
                timeout=self.cfg.timeout,
                context=ssl.create_default_context(),
            ) as smtp:
                smtp.login(self.cfg.user, self.cfg.password)
                refused = smtp.send_message(msg)
        except smtplib.SMTPException as e:
            raise SendError(f"SMTP relay rejected message to {reply.to}: {e}") from e
        except OSError as e:
            raise SendError(f"Cannot reach SMTP relay {self.cfg.host}:{self.cfg.port}: {e}") from e

        if refused:
            # Relay took the message for the other recipients
            logger.warning(f"SMTP relay refused recipients: {refused}")

        logger.info(f"Reply sent to {reply.to}, message_id={msg['Message-ID']}")
