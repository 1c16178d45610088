"""Send a single reply from the command line."""

from __future__ import annotations

import argparse

from loguru import logger

from replydesk.domain.entities.reply import OutboundReply
from replydesk.errors import MailError
from replydesk.infrastructure import get_settings
from replydesk.infrastructure.factory import get_send_reply_use_case
from replydesk.infrastructure.logging import configure_logging


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Send a reply and mark the original as read")
    parser.add_argument("--to", required=True, help="Recipient address")
    parser.add_argument("--subject", required=True, help="Subject line")
    parser.add_argument("--text", required=True, help="Reply body")
    parser.add_argument("--in-reply-to", default=None, help="Message-ID of the email being answered")
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings.log_level)

    reply = OutboundReply(
        to=args.to,
        subject=args.subject,
        text=args.text,
        in_reply_to=args.in_reply_to,
    )

    try:
        result = get_send_reply_use_case(settings).run(reply)
    except MailError as e:
        logger.error(f"Failed to send reply: {e}")
        return 1

    print(f"Sent to {result.reply.to}")
    if result.marked_seen is False:
        print(f"Original {reply.in_reply_to} not found; left unread")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
