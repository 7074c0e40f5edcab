"""In-app notifications and outbound e-mail dispatch."""

import logging
import uuid
from dataclasses import dataclass
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from banqa.core.exceptions import ValidationError
from banqa.models.notification import Notification
from banqa.worker import audit_log_transaction, send_email_notification

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutboundEmail:
    """An e-mail to queue once the surrounding database transaction commits."""

    to: str
    subject: str
    body: str


class NotificationService:
    """Records notifications in the caller's database transaction."""

    async def notify(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        title: str,
        body: str,
        type: str = "transaction",
        details: dict[str, Any] | None = None,
    ) -> Notification:
        notification = Notification(
            user_id=user_id,
            title=title,
            body=body,
            type=type,
            read=False,
            details=details or {},
        )
        session.add(notification)
        return notification

    async def send_notification(
        self,
        session: AsyncSession,
        user_id: uuid.UUID,
        title: str,
        body: str,
        type: str = "system",
        details: dict[str, Any] | None = None,
    ) -> Notification:
        """Create a notification on behalf of another component.

        Raises:
            ValidationError: If title or body is blank
        """
        if not title.strip() or not body.strip():
            raise ValidationError("Missing required fields: user_id, title, body")
        notification = await self.notify(session, user_id, title, body, type, details)
        await session.flush()
        return notification


def dispatch_emails(emails: list[OutboundEmail]) -> None:
    """Queue e-mails on the worker.

    Delivery is best effort: a broker failure is logged and never undoes
    the already-committed money movement.
    """
    for email in emails:
        try:
            send_email_notification.delay(
                email=email.to,
                subject=email.subject,
                body=email.body,
            )
        except Exception:
            logger.exception("Failed to queue e-mail %r to %s", email.subject, email.to)


def dispatch_audit(transaction_id: str, data: dict[str, Any]) -> None:
    """Queue an audit record for a committed money movement (best effort)."""
    try:
        audit_log_transaction.delay(transaction_id=transaction_id, data=data)
    except Exception:
        logger.exception("Failed to queue audit log for %s", transaction_id)
