from __future__ import annotations
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class OutboundReply:
    to: str
    subject: str
    text: str
    # Message-ID of the message being answered
    in_reply_to: Optional[str] = None
