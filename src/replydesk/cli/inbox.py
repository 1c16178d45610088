"""One-shot unread inbox snapshot printed as JSON."""

from __future__ import annotations

import argparse
import json

from loguru import logger

from replydesk.errors import MailError
from replydesk.infrastructure import get_settings
from replydesk.infrastructure.factory import get_snapshot_use_case
from replydesk.infrastructure.logging import configure_logging


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Print unread emails, newest first")
    parser.add_argument("--limit", type=int, default=None, help="Max emails to show (default: FETCH_LIMIT)")
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings.log_level)

    if args.limit is not None and args.limit < 1:
        parser.error("--limit must be at least 1")

    try:
        snapshot = get_snapshot_use_case(settings).run(args.limit)
    except MailError as e:
        logger.error(f"Failed to fetch emails: {e}")
        return 1

    print(json.dumps([msg.to_dict() for msg in snapshot], indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
