from __future__ import annotations
import imaplib
import re
import time
from contextlib import contextmanager
from typing import Iterator, Optional, Sequence

from loguru import logger

from replydesk.application.ports.message_store import (
    FetchFailure,
    FetchResult,
    RawMessage,
    StoreRef,
)
from replydesk.errors import MailConnectionError, StoreOperationError
from replydesk.infrastructure.email.providers.imap.auth import ImapAuthenticator, ImapStoreConfig

SEEN_FLAG = "\\Seen"
_UID_IN_META = re.compile(rb"\bUID (\d+)")


def _quote(value: str) -> str:
    """IMAP quoted string for mailbox names and SEARCH arguments."""
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


@contextmanager
def _protocol_errors(action: str) -> Iterator[None]:
    # abort is a subclass of error, so it has to be matched first
    try:
        yield
    except imaplib.IMAP4.abort as e:
        raise MailConnectionError(f"IMAP connection lost during {action}: {e}") from e
    except imaplib.IMAP4.error as e:
        raise StoreOperationError(f"IMAP {action} failed: {e}") from e
    except OSError as e:
        raise MailConnectionError(f"IMAP socket error during {action}: {e}") from e


class ImapMessageStore:
    """Short-lived IMAP sessions against a single folder.

    Listing and fetching run on a read-only (EXAMINE) selection and use
    BODY.PEEK, so they never set \\Seen. Only mark_seen selects read-write.
    """

    def __init__(self, cfg: ImapStoreConfig, authenticator: Optional[ImapAuthenticator] = None) -> None:
        self.cfg = cfg
        self._auth = authenticator or ImapAuthenticator(cfg)

    def connect(self) -> imaplib.IMAP4_SSL:
        return self._auth.login()

    def close(self, session: imaplib.IMAP4) -> None:
        try:
            session.logout()
        except (imaplib.IMAP4.error, OSError) as e:
            logger.debug(f"Ignoring IMAP logout error: {e}")
        else:
            logger.debug(f"IMAP session to {self.cfg.host} closed")

    @contextmanager
    def session(self) -> Iterator[imaplib.IMAP4_SSL]:
        conn = self.connect()
        try:
            yield conn
        finally:
            self.close(conn)

    def _select(self, session: imaplib.IMAP4, readonly: bool) -> None:
        with _protocol_errors("SELECT"):
            typ, _ = session.select(_quote(self.cfg.folder), readonly=readonly)
        if typ != "OK":
            raise StoreOperationError(f"Failed to select folder {self.cfg.folder}")

    def list_unseen(self, session: imaplib.IMAP4, limit: int) -> list[StoreRef]:
        """Newest-first refs to at most ``limit`` unseen messages."""
        if limit < 1:
            return []

        self._select(session, readonly=True)

        with _protocol_errors("UID SEARCH"):
            typ, uids_data = session.uid("SEARCH", None, "UNSEEN")
        if typ != "OK":
            raise StoreOperationError("UID SEARCH UNSEEN failed")

        uids: set[int] = set()
        if uids_data and uids_data[0]:
            uids = {int(x) for x in uids_data[0].split()}

        # Server order is ascending by arrival; newest first before truncating
        latest = sorted(uids, reverse=True)[:limit]
        logger.info(f"Found {len(uids)} unseen emails in {self.cfg.folder}, keeping {len(latest)}")
        return [StoreRef(folder=self.cfg.folder, uid=uid) for uid in latest]

    def fetch_bodies(self, session: imaplib.IMAP4, refs: Sequence[StoreRef]) -> FetchResult:
        """Fetch raw RFC822 bytes for each ref on the folder selected by list_unseen.

        Fetches are serialized on the one connection. A command-level failure
        is recorded against that message only; a dropped connection or the
        batch deadline aborts the whole fetch.
        """
        deadline = time.monotonic() + self.cfg.fetch_timeout
        messages: list[RawMessage] = []
        failures: list[FetchFailure] = []

        for ref in refs:
            if time.monotonic() > deadline:
                raise MailConnectionError(
                    f"Fetching {len(refs)} messages exceeded {self.cfg.fetch_timeout:.0f}s"
                )

            try:
                typ, msg_data = session.uid("FETCH", str(ref.uid), "(UID BODY.PEEK[])")
            except imaplib.IMAP4.abort as e:
                raise MailConnectionError(f"IMAP connection lost fetching UID {ref.uid}: {e}") from e
            except imaplib.IMAP4.error as e:
                logger.warning(f"FETCH failed for UID {ref.uid}: {e}")
                failures.append(FetchFailure(ref=ref, reason=str(e)))
                continue
            except OSError as e:
                raise MailConnectionError(f"IMAP socket error fetching UID {ref.uid}: {e}") from e

            raw = self._raw_from_response(ref, typ, msg_data)
            if raw is None:
                failures.append(FetchFailure(ref=ref, reason=f"no message data (status {typ})"))
                continue
            messages.append(raw)

        logger.info(f"Fetched {len(messages)} of {len(refs)} messages ({len(failures)} failed)")
        return FetchResult(messages=messages, failures=failures)

    @staticmethod
    def _raw_from_response(ref: StoreRef, typ: str, msg_data) -> Optional[RawMessage]:
        if typ != "OK" or not msg_data:
            return None

        for item in msg_data:
            if isinstance(item, tuple) and len(item) >= 2:
                meta, rfc822_bytes = item[0], item[1]
                match = _UID_IN_META.search(meta or b"")
                uid = int(match.group(1)) if match else None
                return RawMessage(ref=ref, uid=uid, rfc822_bytes=rfc822_bytes or b"")
        return None

    def mark_seen(self, session: imaplib.IMAP4, message_id: str) -> bool:
        """Set \\Seen on the message whose Message-ID header matches.

        Returns False when no message in the folder carries that id.
        """
        if not message_id.isascii():
            # SEARCH arguments go out as ASCII; no stored Message-ID can match
            logger.warning(f"Cannot search for non-ASCII Message-ID {message_id!r}")
            return False

        self._select(session, readonly=False)

        with _protocol_errors("UID SEARCH"):
            typ, uids_data = session.uid("SEARCH", None, "HEADER", "Message-ID", _quote(message_id))
        if typ != "OK":
            raise StoreOperationError(f"UID SEARCH for Message-ID {message_id} failed")

        uids = uids_data[0].split() if uids_data and uids_data[0] else []
        if not uids:
            logger.info(f"Could not find email with Message-ID: {message_id}")
            return False

        uid_set = b",".join(uids).decode()
        with _protocol_errors("UID STORE"):
            typ, _ = session.uid("STORE", uid_set, "+FLAGS", f"({SEEN_FLAG})")
        if typ != "OK":
            raise StoreOperationError(f"Failed to flag UID {uid_set} as seen")

        logger.info(f"Marked email {message_id} (UID {uid_set}) as read")
        return True

    def mark_seen_by_id(self, message_id: str) -> bool:
        """mark_seen on a session of its own."""
        with self.session() as session:
            return self.mark_seen(session, message_id)
