from __future__ import annotations
from datetime import datetime, timezone
from email import policy
from email.message import EmailMessage
from email.parser import BytesParser
from typing import Callable, Optional, TypeVar

from bs4 import BeautifulSoup
from loguru import logger

from replydesk.domain.entities.message import NormalizedMessage
from replydesk.errors import ParseError

T = TypeVar("T")


def _header(em: EmailMessage, name: str) -> str:
    try:
        value = em.get(name)
    except Exception as e:
        raise ParseError(f"unreadable {name} header: {e}") from e
    return str(value).strip() if value is not None else ""


def _message_id(em: EmailMessage) -> Optional[str]:
    return _header(em, "Message-ID") or None


def _received_at(em: EmailMessage) -> datetime:
    try:
        value = em.get("Date")
        dt = value.datetime if value is not None else None
    except Exception as e:
        raise ParseError(f"unreadable Date header: {e}") from e
    if dt is None:
        raise ParseError("missing or unparseable Date header")
    # "-0000" zones come back naive
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _part_text(part) -> str:
    try:
        return part.get_content()
    except (LookupError, UnicodeError):
        # Unknown or lying charset
        payload = part.get_payload(decode=True) or b""
        return payload.decode("utf-8", errors="replace")


def _html_to_text(html: str) -> str:
    return BeautifulSoup(html, "html.parser").get_text("\n")


def _body(em: EmailMessage) -> str:
    # Prefer text/plain; fallback to stripped HTML
    try:
        part = em.get_body(preferencelist=("plain",))
        if part is not None:
            return _part_text(part).strip()
        part = em.get_body(preferencelist=("html",))
        if part is not None:
            return _html_to_text(_part_text(part)).strip()
    except Exception as e:
        raise ParseError(f"unreadable body: {e}") from e
    return ""


def _field(extract: Callable[[EmailMessage], T], em: EmailMessage, default: T, name: str, uid: Optional[int]) -> T:
    try:
        return extract(em)
    except ParseError as e:
        logger.warning(f"UID {uid}: using default {name} ({e})")
        return default


def rfc822_to_normalized_message(rfc822_bytes: bytes, uid: Optional[int] = None) -> NormalizedMessage:
    """Normalize one raw message. Never raises: bad fields fall back to defaults."""
    now = datetime.now(timezone.utc)
    try:
        em = BytesParser(policy=policy.default).parsebytes(rfc822_bytes)
    except Exception as e:
        logger.warning(f"UID {uid}: unparseable message, keeping empty record ({e})")
        return NormalizedMessage(
            id=None,
            from_address="",
            subject="",
            body="",
            received_at=now,
            sequence_hint=uid,
        )

    return NormalizedMessage(
        id=_field(_message_id, em, None, "id", uid),
        from_address=_field(lambda m: _header(m, "From"), em, "", "from", uid),
        subject=_field(lambda m: _header(m, "Subject"), em, "", "subject", uid),
        body=_field(_body, em, "", "body", uid),
        received_at=_field(_received_at, em, now, "date", uid),
        sequence_hint=uid,
    )
