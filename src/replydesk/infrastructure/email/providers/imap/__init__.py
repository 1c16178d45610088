"""IMAP mailbox provider."""

from replydesk.infrastructure.email.providers.imap.auth import ImapCredentials, ImapStoreConfig
from replydesk.infrastructure.email.providers.imap.client import ImapMessageStore
from replydesk.infrastructure.email.providers.imap.mapper import rfc822_to_normalized_message

__all__ = [
    "ImapCredentials",
    "ImapStoreConfig",
    "ImapMessageStore",
    "rfc822_to_normalized_message",
]
