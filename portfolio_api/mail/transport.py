"""
Pooled SMTP mail transport built on aiosmtplib.

The pool keeps at most ``max_connections`` SMTP sessions open. Each session is
reused for up to ``max_messages`` messages, then closed and replaced. When
every slot is busy, ``send`` waits for one to free up instead of failing.
Nothing here retries: a failed send discards its connection and raises
MailTransportError to the caller.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from email.message import EmailMessage
from typing import Callable, List, Optional, Protocol

import aiosmtplib

from portfolio_api.contact.schemas import OutboundMessage
from portfolio_api.core.config import settings
from portfolio_api.core.errors import MailTransportError

logger = logging.getLogger(__name__)


@dataclass
class SendResult:
    """Outcome of one accepted message."""

    recipients: List[str]
    response: str
    rejected: dict = field(default_factory=dict)


class MailTransport(Protocol):
    """Send one message; resolve on completion, raise MailTransportError on failure."""

    async def send(self, message: OutboundMessage) -> SendResult: ...

    async def close(self) -> None: ...


def to_email_message(message: OutboundMessage) -> EmailMessage:
    """Convert an OutboundMessage into an HTML ``EmailMessage``."""
    email_message = EmailMessage()
    email_message["From"] = message.from_address
    email_message["To"] = message.to
    if message.reply_to:
        email_message["Reply-To"] = message.reply_to
    email_message["Subject"] = message.subject
    email_message.set_content(message.html_body, subtype="html")
    return email_message


@dataclass
class _PooledConnection:
    smtp: aiosmtplib.SMTP
    messages_sent: int = 0


class PooledSMTPTransport:
    """SMTP client with a bounded connection pool"""

    def __init__(
        self,
        hostname: str,
        port: int,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: bool = True,
        timeout: float = 30.0,
        max_connections: int = 5,
        max_messages: int = 100,
        smtp_factory: Callable[..., aiosmtplib.SMTP] = aiosmtplib.SMTP,
    ):
        if max_connections < 1 or max_messages < 1:
            raise ValueError("max_connections and max_messages must be positive")

        self.hostname = hostname
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout
        self.max_connections = max_connections
        self.max_messages = max_messages
        self._smtp_factory = smtp_factory

        self._slots = asyncio.Semaphore(max_connections)
        self._idle: List[_PooledConnection] = []
        self._closed = False

        logger.info(
            f"PooledSMTPTransport initialized - Host: {hostname}:{port}, "
            f"max_connections={max_connections}, max_messages={max_messages}"
        )

    @property
    def idle_connections(self) -> int:
        return len(self._idle)

    async def send(self, message: OutboundMessage) -> SendResult:
        """
        Send one message over a pooled connection.

        Waits for a free slot when the pool is exhausted.

        Raises:
            MailTransportError: connection, login or delivery failed, or the
                transport is closed
        """
        if self._closed:
            raise MailTransportError("Mail transport is closed")

        email_message = to_email_message(message)

        async with self._slots:
            connection = await self._acquire()
            try:
                rejected, response = await connection.smtp.send_message(email_message)
            except (aiosmtplib.SMTPException, OSError) as e:
                self._discard(connection)
                raise MailTransportError(
                    f"Failed to send message to {message.to}: {e}"
                ) from e
            except BaseException:
                self._discard(connection)
                raise

            connection.messages_sent += 1
            await self._release(connection)

        return SendResult(recipients=[message.to], response=response, rejected=rejected)

    async def close(self) -> None:
        """Quit every idle connection; busy ones are closed when released."""
        self._closed = True
        idle, self._idle = self._idle, []
        for connection in idle:
            await self._quit(connection)
        logger.info("PooledSMTPTransport closed")

    async def _acquire(self) -> _PooledConnection:
        while self._idle:
            connection = self._idle.pop()
            if connection.smtp.is_connected:
                return connection
            logger.debug("Dropping stale SMTP connection")

        smtp = self._smtp_factory(
            hostname=self.hostname,
            port=self.port,
            username=self.username,
            password=self.password,
            use_tls=self.use_tls,
            start_tls=None if not self.use_tls else False,
            timeout=self.timeout,
        )
        try:
            await smtp.connect()
        except (aiosmtplib.SMTPException, OSError) as e:
            raise MailTransportError(
                f"Could not connect to SMTP server {self.hostname}:{self.port}: {e}"
            ) from e

        logger.debug(f"Opened SMTP connection to {self.hostname}:{self.port}")
        return _PooledConnection(smtp=smtp)

    async def _release(self, connection: _PooledConnection) -> None:
        if self._closed or connection.messages_sent >= self.max_messages:
            await self._quit(connection)
            return
        self._idle.append(connection)

    def _discard(self, connection: _PooledConnection) -> None:
        """Drop a broken connection without the QUIT round trip."""
        try:
            connection.smtp.close()
        except Exception as e:
            logger.debug(f"Ignoring error while closing SMTP connection: {e}")

    async def _quit(self, connection: _PooledConnection) -> None:
        if not connection.smtp.is_connected:
            return
        try:
            await connection.smtp.quit()
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.warning(f"SMTP QUIT failed, closing connection: {e}")
            connection.smtp.close()


def create_mail_transport() -> PooledSMTPTransport:
    """Build the transport from settings."""
    return PooledSMTPTransport(
        hostname=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        username=settings.EMAIL_USER,
        password=settings.EMAIL_PASS,
        use_tls=settings.SMTP_USE_TLS,
        timeout=settings.SMTP_TIMEOUT_SECONDS,
        max_connections=settings.SMTP_MAX_CONNECTIONS,
        max_messages=settings.SMTP_MAX_MESSAGES,
    )
