"""SMTP submission provider."""

from replydesk.infrastructure.email.providers.smtp.transport import SmtpMailTransport, SmtpTransportConfig

__all__ = [
    "SmtpMailTransport",
    "SmtpTransportConfig",
]
