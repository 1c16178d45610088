"""Build the ordered, de-duplicated list of unread messages shown in the inbox."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

from loguru import logger

from replydesk.application.ports.message_store import MessageStore
from replydesk.domain.entities.message import NormalizedMessage
from replydesk.infrastructure.email.providers.imap.mapper import rfc822_to_normalized_message

Normalizer = Callable[[bytes, Optional[int]], NormalizedMessage]


def _as_utc(dt: datetime) -> datetime:
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)


def _newest_first_key(msg: NormalizedMessage) -> tuple:
    # Messages with a UID come first, by UID; date breaks ties and orders the rest
    has_hint = msg.sequence_hint is not None
    return (has_hint, msg.sequence_hint if has_hint else 0, _as_utc(msg.received_at))


def order_snapshot(messages: Iterable[NormalizedMessage]) -> list[NormalizedMessage]:
    """Sort newest first, then drop repeated ids keeping the higher UID."""
    ordered = sorted(messages, key=_newest_first_key, reverse=True)

    seen_ids: set[str] = set()
    result: list[NormalizedMessage] = []
    for msg in ordered:
        if msg.id is not None:
            if msg.id in seen_ids:
                logger.warning(f"Dropping duplicate Message-ID {msg.id} (UID {msg.sequence_hint})")
                continue
            seen_ids.add(msg.id)
        result.append(msg)
    return result


class BuildInboxSnapshotUseCase:
    """Unread inbox snapshot.

    Flow:
    1. Open a store session
    2. List unseen UIDs, newest first, capped at limit
    3. Fetch raw bodies (per-message failures are logged and skipped)
    4. Close the session, whatever happened
    5. Normalize, order, de-duplicate

    Connection, auth and store errors propagate; there is no retry here.
    """

    def __init__(
        self,
        store: MessageStore,
        default_limit: int = 10,
        normalize: Normalizer = rfc822_to_normalized_message,
    ) -> None:
        self.store = store
        self.default_limit = default_limit
        self.normalize = normalize

    def run(self, limit: Optional[int] = None) -> list[NormalizedMessage]:
        limit = self.default_limit if limit is None else limit
        if limit < 1:
            raise ValueError(f"limit must be positive, got {limit}")

        with self.store.session() as session:
            refs = self.store.list_unseen(session, limit)
            if not refs:
                logger.info("No unread emails found")
                return []
            fetched = self.store.fetch_bodies(session, refs)

        for failure in fetched.failures:
            logger.warning(f"Skipping UID {failure.ref.uid}: {failure.reason}")

        messages = [self.normalize(raw.rfc822_bytes, raw.uid) for raw in fetched.messages]
        snapshot = order_snapshot(messages)[:limit]
        logger.info(f"Inbox snapshot ready with {len(snapshot)} emails")
        return snapshot
