"""Error taxonomy for the mail pipeline."""

from __future__ import annotations


class MailError(Exception):
    """Base class for every mail pipeline failure."""


class MailConnectionError(MailError, ConnectionError):
    """Network, TLS or timeout failure talking to the store or relay."""


class AuthError(MailError):
    """The mail store rejected the configured credentials."""


class StoreOperationError(MailError):
    """A command on an open store session (select/search/fetch/store) failed."""


class ParseError(MailError):
    """A single message could not be parsed. Never leaves the mapper."""


class SendError(MailError):
    """The outbound relay did not accept the message."""


class SuggestionError(MailError):
    """The reply suggestion backend failed."""
