from __future__ import annotations
from dataclasses import dataclass
from typing import ContextManager, Optional, Protocol, Sequence


@dataclass(frozen=True)
class StoreRef:
    folder: str
    uid: int


@dataclass(frozen=True)
class RawMessage:
    ref: StoreRef
    # UID echoed by the server in the FETCH response, None if unreadable
    uid: Optional[int]
    rfc822_bytes: bytes


@dataclass(frozen=True)
class FetchFailure:
    ref: StoreRef
    reason: str


@dataclass(frozen=True)
class FetchResult:
    messages: list[RawMessage]
    failures: list[FetchFailure]


class MessageStore(Protocol):
    """Session-based mailbox access. Every session must be closed."""

    def connect(self): ...
    def close(self, session) -> None: ...
    def session(self) -> ContextManager: ...
    def list_unseen(self, session, limit: int) -> list[StoreRef]: ...
    def fetch_bodies(self, session, refs: Sequence[StoreRef]) -> FetchResult: ...
    def mark_seen(self, session, message_id: str) -> bool: ...
    def mark_seen_by_id(self, message_id: str) -> bool: ...
