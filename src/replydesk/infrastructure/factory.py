"""Builds the concrete mail and suggestion clients from settings."""

from __future__ import annotations

from replydesk.application.use_cases.build_inbox_snapshot import BuildInboxSnapshotUseCase
from replydesk.application.use_cases.send_reply import SendReplyUseCase
from replydesk.application.use_cases.suggest_replies import SuggestRepliesUseCase
from replydesk.infrastructure.email.providers.imap import ImapMessageStore, ImapStoreConfig
from replydesk.infrastructure.email.providers.smtp import SmtpMailTransport, SmtpTransportConfig
from replydesk.infrastructure.llm import AnthropicReplySuggester
from replydesk.infrastructure.settings import Settings, get_settings


def get_message_store(settings: Settings | None = None) -> ImapMessageStore:
    settings = settings or get_settings()
    return ImapMessageStore(ImapStoreConfig.from_settings(settings))


def get_mail_transport(settings: Settings | None = None) -> SmtpMailTransport:
    settings = settings or get_settings()
    return SmtpMailTransport(SmtpTransportConfig.from_settings(settings))


def get_snapshot_use_case(settings: Settings | None = None) -> BuildInboxSnapshotUseCase:
    settings = settings or get_settings()
    return BuildInboxSnapshotUseCase(
        store=get_message_store(settings),
        default_limit=settings.fetch_limit,
    )


def get_send_reply_use_case(settings: Settings | None = None) -> SendReplyUseCase:
    settings = settings or get_settings()
    return SendReplyUseCase(
        transport=get_mail_transport(settings),
        store=get_message_store(settings),
    )


def get_suggest_replies_use_case(settings: Settings | None = None) -> SuggestRepliesUseCase:
    settings = settings or get_settings()
    return SuggestRepliesUseCase(AnthropicReplySuggester.from_settings(settings))
