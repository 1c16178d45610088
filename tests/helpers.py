from __future__ import annotations

import imaplib
from contextlib import contextmanager
from datetime import datetime, timezone
from email.message import EmailMessage
from typing import Iterable

from replydesk.application.ports.message_store import FetchResult, RawMessage, StoreRef
from replydesk.domain.entities.message import NormalizedMessage
from replydesk.infrastructure.email.providers.imap.auth import ImapCredentials, ImapStoreConfig

STORE_CONFIG = ImapStoreConfig(
    host="imap.example.test",
    port=993,
    credentials=ImapCredentials(user="me@example.test", password="app-password"),
    folder="INBOX",
    connect_timeout=5.0,
    fetch_timeout=30.0,
)


def make_rfc822(
    *,
    message_id: str | None = "<msg-1@example.test>",
    sender: str = "Alice <alice@example.test>",
    subject: str = "Hello",
    date: str | None = "Mon, 16 Feb 2026 10:00:00 -0500",
    body: str = "Hi there",
    html: str | None = None,
) -> bytes:
    msg = EmailMessage()
    if message_id is not None:
        msg["Message-ID"] = message_id
    msg["From"] = sender
    msg["To"] = "me@example.test"
    msg["Subject"] = subject
    if date is not None:
        msg["Date"] = date
    if html is not None:
        msg.set_content(html, subtype="html")
    else:
        msg.set_content(body)
    return msg.as_bytes()


def make_message(
    *,
    id: str | None = None,
    uid: int | None = None,
    received_at: datetime | None = None,
    subject: str = "Hello",
) -> NormalizedMessage:
    return NormalizedMessage(
        id=id,
        from_address="Alice <alice@example.test>",
        subject=subject,
        body="Hi there",
        received_at=received_at or datetime(2026, 2, 16, 15, 0, tzinfo=timezone.utc),
        sequence_hint=uid,
    )


class FakeIMAP:
    """Stands in for an imaplib.IMAP4_SSL connection and records every command."""

    def __init__(
        self,
        messages: dict[int, bytes] | None = None,
        *,
        unseen: Iterable[int] | None = None,
        message_ids: dict[int, str] | None = None,
        fetch_errors: Iterable[int] = (),
        fetch_aborts: Iterable[int] = (),
        no_uid_meta: Iterable[int] = (),
        select_status: str = "OK",
        search_status: str = "OK",
        store_status: str = "OK",
    ) -> None:
        self.messages = messages or {}
        self.unseen = set(self.messages if unseen is None else unseen)
        self.message_ids = message_ids or {}
        self.fetch_errors = set(fetch_errors)
        self.fetch_aborts = set(fetch_aborts)
        self.no_uid_meta = set(no_uid_meta)
        self.select_status = select_status
        self.search_status = search_status
        self.store_status = store_status
        self.calls: list[tuple] = []
        self.readonly: bool | None = None
        self.logged_out = False

    def select(self, mailbox: str, readonly: bool = False):
        self.calls.append(("SELECT", mailbox, readonly))
        self.readonly = readonly
        return self.select_status, [str(len(self.messages)).encode()]

    def uid(self, command: str, *args):
        self.calls.append((command, *args))
        if command == "SEARCH":
            return self._search(args)
        if command == "FETCH":
            return self._fetch(int(args[0]))
        if command == "STORE":
            if self.readonly or self.store_status != "OK":
                return "NO", [b"STORE not allowed"]
            for uid in args[0].split(","):
                self.unseen.discard(int(uid))
            return "OK", []
        return "BAD", []

    def _search(self, args):
        if self.search_status != "OK":
            return self.search_status, [b""]
        criteria = [a for a in args if a is not None]
        if criteria == ["UNSEEN"]:
            # Servers answer in ascending UID order
            uids = sorted(self.unseen)
        else:
            wanted = criteria[2].strip('"')
            uids = sorted(uid for uid, mid in self.message_ids.items() if mid == wanted)
        return "OK", [" ".join(str(uid) for uid in uids).encode()]

    def _fetch(self, uid: int):
        if uid in self.fetch_aborts:
            raise imaplib.IMAP4.abort("socket closed")
        if uid in self.fetch_errors:
            raise imaplib.IMAP4.error("FETCH failed")
        if uid not in self.messages:
            return "OK", [None]
        raw = self.messages[uid]
        meta = f"{uid} (BODY[] {{{len(raw)}}}" if uid in self.no_uid_meta else f"{uid} (UID {uid} BODY[] {{{len(raw)}}}"
        return "OK", [(meta.encode(), raw), b")"]

    def logout(self):
        self.logged_out = True
        return "BYE", [b"logging out"]

    def commands(self, name: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == name]


class StubAuthenticator:
    def __init__(self, conn) -> None:
        self.conn = conn
        self.logins = 0

    def login(self):
        self.logins += 1
        return self.conn


class FakeStore:
    """In-memory MessageStore port implementation."""

    def __init__(
        self,
        raws: list[RawMessage] | None = None,
        *,
        failures=None,
        list_error: Exception | None = None,
        mark_seen_result: bool = True,
        mark_seen_error: Exception | None = None,
    ) -> None:
        self.raws = raws or []
        self.failures = failures or []
        self.list_error = list_error
        self.mark_seen_result = mark_seen_result
        self.mark_seen_error = mark_seen_error
        self.opened = 0
        self.closed = 0
        self.marked: list[str] = []
        self.fetched_refs: list[StoreRef] = []

    def connect(self):
        self.opened += 1
        return object()

    def close(self, session) -> None:
        self.closed += 1

    @contextmanager
    def session(self):
        session = self.connect()
        try:
            yield session
        finally:
            self.close(session)

    def list_unseen(self, session, limit: int) -> list[StoreRef]:
        if self.list_error is not None:
            raise self.list_error
        return [raw.ref for raw in self.raws][:limit]

    def fetch_bodies(self, session, refs) -> FetchResult:
        self.fetched_refs = list(refs)
        wanted = {ref.uid for ref in refs}
        return FetchResult(
            messages=[raw for raw in self.raws if raw.ref.uid in wanted],
            failures=list(self.failures),
        )

    def mark_seen(self, session, message_id: str) -> bool:
        self.marked.append(message_id)
        if self.mark_seen_error is not None:
            raise self.mark_seen_error
        return self.mark_seen_result

    def mark_seen_by_id(self, message_id: str) -> bool:
        with self.session() as session:
            return self.mark_seen(session, message_id)


class FakeTransport:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.sent = []

    def send(self, reply) -> None:
        if self.error is not None:
            raise self.error
        self.sent.append(reply)


def raw_message(uid: int, rfc822_bytes: bytes, *, echoed_uid: int | None = -1) -> RawMessage:
    return RawMessage(
        ref=StoreRef(folder="INBOX", uid=uid),
        uid=uid if echoed_uid == -1 else echoed_uid,
        rfc822_bytes=rfc822_bytes,
    )
