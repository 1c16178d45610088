from __future__ import annotations
from dataclasses import dataclass
import imaplib

from loguru import logger

from replydesk.errors import AuthError, MailConnectionError
from replydesk.infrastructure.settings import Settings


@dataclass(frozen=True)
class ImapCredentials:
    """
    Represents credentials for a single mailbox.
    """
    user: str
    password: str


@dataclass(frozen=True)
class ImapStoreConfig:
    host: str
    port: int
    credentials: ImapCredentials
    folder: str = "INBOX"
    connect_timeout: float = 30.0
    fetch_timeout: float = 60.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "ImapStoreConfig":
        return cls(
            host=settings.imap_host,
            port=settings.imap_port,
            credentials=ImapCredentials(
                user=settings.mail_user,
                password=settings.mail_password.get_secret_value(),
            ),
            folder=settings.imap_folder,
            connect_timeout=settings.connect_timeout_seconds,
            fetch_timeout=settings.fetch_timeout_seconds,
        )


class ImapAuthenticator:
    """
    Responsible ONLY for establishing an authenticated IMAP connection.
    No folder logic, no fetching, no parsing.
    """

    def __init__(self, cfg: ImapStoreConfig) -> None:
        self.cfg = cfg

    def login(self) -> imaplib.IMAP4_SSL:
        """
        Returns an authenticated IMAP4_SSL connection (implicit TLS, no STARTTLS).
        The connect timeout stays on the socket for every later command.
        """
        try:
            conn = imaplib.IMAP4_SSL(
                host=self.cfg.host,
                port=self.cfg.port,
                timeout=self.cfg.connect_timeout,
            )
        except OSError as e:
            raise MailConnectionError(f"Cannot reach IMAP server {self.cfg.host}:{self.cfg.port}: {e}") from e

        try:
            conn.login(self.cfg.credentials.user, self.cfg.credentials.password)
        except imaplib.IMAP4.abort as e:
            _shutdown_quietly(conn)
            raise MailConnectionError(f"IMAP connection dropped during login: {e}") from e
        except imaplib.IMAP4.error as e:
            _shutdown_quietly(conn)
            raise AuthError(f"IMAP login rejected for {self.cfg.credentials.user}") from e
        except OSError as e:
            _shutdown_quietly(conn)
            raise MailConnectionError(f"IMAP login failed: {e}") from e

        logger.info(f"IMAP session opened to {self.cfg.host} as {self.cfg.credentials.user}")
        return conn


def _shutdown_quietly(conn: imaplib.IMAP4) -> None:
    try:
        conn.shutdown()
    except OSError as e:
        logger.debug(f"Ignoring socket shutdown error: {e}")
