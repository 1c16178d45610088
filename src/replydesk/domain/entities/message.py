from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional


@dataclass(frozen=True)
class NormalizedMessage:
    # Message-ID header; absent on some messages
    id: Optional[str]
    from_address: str
    subject: str
    body: str
    received_at: datetime
    # IMAP UID; None when the fetch response carried no readable UID
    sequence_hint: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready view using the field names the web client expects."""
        return {
            "id": self.id,
            "from_email": self.from_address,
            "subject": self.subject,
            "body": self.body,
            "received_at": self.received_at.isoformat(),
            "uid": self.sequence_hint,
        }
