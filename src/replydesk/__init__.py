"""Replydesk - personal webmail assistant: unread inbox, reply suggestions, send."""

__version__ = "0.1.0"
