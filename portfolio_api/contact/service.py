"""
Contact service: turns a validated submission into two emails and relays them.

Delivery is fire-and-forget. ``dispatch`` schedules both sends on the running
event loop and returns immediately; outcomes are only logged (and passed to
the optional completion hook). A successful HTTP response therefore means
"accepted for relay", not "delivered". At most one attempt is made per
message.
"""

import asyncio
import html
import logging
from pathlib import Path
from typing import Callable, List, Optional, Set

from portfolio_api.contact.schemas import ContactSubmission, OutboundMessage
from portfolio_api.core.config import settings
from portfolio_api.mail.transport import MailTransport, SendResult

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"

ACKNOWLEDGEMENT_SUBJECT = "Thank you for contacting me!"
NO_SUBJECT_PLACEHOLDER = "No subject"

NOTIFICATION = "notification"
ACKNOWLEDGEMENT = "acknowledgement"

# (kind, message, result, error) -> None
CompletionHook = Callable[
    [str, OutboundMessage, Optional[SendResult], Optional[BaseException]], None
]


def default_subject(name: str) -> str:
    return f"New message from {name} - Portfolio Contact"


def _load_template(template_name: str) -> str:
    template_path = TEMPLATES_DIR / template_name
    if not template_path.exists():
        raise FileNotFoundError(f"Template {template_name} not found")

    with open(template_path, "r", encoding="utf-8") as f:
        return f.read()


def _render_template(template: str, markup: Optional[dict] = None, **kwargs) -> str:
    """
    Render a template with the given variables.

    Values in kwargs are HTML-escaped. Values in ``markup`` are inserted as-is
    and must already be safe.
    """
    rendered = template
    for key, value in kwargs.items():
        rendered = rendered.replace(f"{{{{{key}}}}}", html.escape(str(value)))
    for key, value in (markup or {}).items():
        rendered = rendered.replace(f"{{{{{key}}}}}", value)
    return rendered


def message_to_html(message: str) -> str:
    """Escape the message and turn newlines into <br> tags."""
    return html.escape(message).replace("\r\n", "\n").replace("\n", "<br>")


class ContactService:
    """Builds and relays contact emails through a mail transport."""

    def __init__(
        self,
        transport: MailTransport,
        sender: Optional[str],
        recipient: Optional[str],
        owner_name: str,
        on_complete: Optional[CompletionHook] = None,
    ):
        self.transport = transport
        self.sender = sender
        self.recipient = recipient
        self.owner_name = owner_name
        self.on_complete = on_complete
        self._pending: Set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        """Number of dispatches still in flight."""
        return len(self._pending)

    def build_notification(self, submission: ContactSubmission) -> OutboundMessage:
        """Owner notification; replies go straight to the submitter."""
        self._require_identities()
        subject = submission.subject or default_subject(submission.name)
        # Header values cannot carry line breaks
        header_subject = " ".join(subject.split())

        html_body = _render_template(
            _load_template("contact_notification.html"),
            markup={"message": message_to_html(submission.message)},
            name=submission.name,
            email=submission.email,
            subject=submission.subject or NO_SUBJECT_PLACEHOLDER,
        )
        return OutboundMessage(
            from_address=self.sender,
            to=self.recipient,
            reply_to=submission.email,
            subject=header_subject,
            html_body=html_body,
        )

    def build_acknowledgement(self, submission: ContactSubmission) -> OutboundMessage:
        self._require_identities()
        html_body = _render_template(
            _load_template("contact_acknowledgement.html"),
            name=submission.name,
            owner_name=self.owner_name,
        )
        return OutboundMessage(
            from_address=self.sender,
            to=submission.email,
            subject=ACKNOWLEDGEMENT_SUBJECT,
            html_body=html_body,
        )

    def dispatch(self, submission: ContactSubmission) -> List[asyncio.Task]:
        """
        Schedule the notification and the acknowledgement, without awaiting them.

        Both messages are built before anything is scheduled, so a build
        failure sends nothing. Must be called from a running event loop.

        Returns:
            The scheduled tasks, for callers that want to observe them.
        """
        messages = [
            (NOTIFICATION, self.build_notification(submission)),
            (ACKNOWLEDGEMENT, self.build_acknowledgement(submission)),
        ]

        tasks = []
        for kind, message in messages:
            task = asyncio.create_task(self._deliver(kind, message))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
            tasks.append(task)

        logger.info(f"Contact emails queued for relay - From: {submission.email}")
        return tasks

    async def aclose(self, grace_seconds: float) -> None:
        """Give in-flight dispatches ``grace_seconds`` to finish, then cancel them."""
        if not self._pending:
            return

        pending = list(self._pending)
        logger.info(f"Waiting for {len(pending)} contact email(s) to finish")
        _, still_running = await asyncio.wait(pending, timeout=grace_seconds)
        for task in still_running:
            task.cancel()
        if still_running:
            logger.warning(f"Cancelled {len(still_running)} undelivered contact email(s)")
            await asyncio.gather(*still_running, return_exceptions=True)

    async def _deliver(self, kind: str, message: OutboundMessage) -> None:
        result = None
        error = None
        try:
            result = await self.transport.send(message)
            logger.info(f"Contact {kind} email sent to {message.to}: {result.response}")
        except asyncio.CancelledError:
            logger.warning(f"Contact {kind} email to {message.to} cancelled")
            raise
        except Exception as e:
            error = e
            logger.error(f"Contact {kind} email to {message.to} failed: {str(e)}")

        self._notify(kind, message, result, error)

    def _notify(self, kind, message, result, error) -> None:
        if self.on_complete is None:
            return
        try:
            self.on_complete(kind, message, result, error)
        except Exception:
            logger.exception("Contact completion hook raised")

    def _require_identities(self) -> None:
        if not self.sender or not self.recipient:
            raise RuntimeError("Mail sender or recipient is not configured")


def create_contact_service(
    transport: MailTransport, on_complete: Optional[CompletionHook] = None
) -> ContactService:
    """Build the service from settings."""
    return ContactService(
        transport=transport,
        sender=settings.EMAIL_USER,
        recipient=settings.CONTACT_EMAIL,
        owner_name=settings.SITE_OWNER_NAME,
        on_complete=on_complete,
    )
