# orderdesk/core/notifications.py
"""
Fire-and-forget notifications after an order is created.

Runs as a FastAPI background task once the response is sent. A failure
here is logged and never reaches the order: it is already committed.
"""
import logging
import smtplib

from orderdesk.core import email_client
from orderdesk.core.config import get_settings
from orderdesk.schemas.order import OrderWithItemsRead

logger = logging.getLogger(__name__)


def _format_order(order: OrderWithItemsRead) -> str:
    lines = [
        f"Pedido {order.order_number}",
        f"Cliente: {order.customer_name or order.customer_id}",
        f"Entrega: {order.delivery_due.isoformat()}",
        "",
    ]
    for it in order.items:
        lines.append(
            f"- {it.product_name or it.product_id}: {it.quantity} {it.unit_of_measure}"
        )
    if order.notes:
        lines += ["", f"Observaciones: {order.notes}"]
    return "\n".join(lines)


def notify_order_created(order: OrderWithItemsRead) -> bool:
    """
    Email NOTIFY_EMAILS about a new order.

    Returns True if an email was sent.
    """
    recipients = get_settings().notify_recipients
    if not recipients:
        logger.debug("No NOTIFY_EMAILS configured; skipping notification")
        return False
    if not email_client.is_configured():
        logger.info("SMTP not configured; skipping notification for %s", order.order_number)
        return False

    try:
        email_client.send_email(
            to_emails=recipients,
            subject=f"Nuevo pedido {order.order_number}",
            text_body=_format_order(order),
        )
    except (smtplib.SMTPException, OSError, RuntimeError):
        logger.exception("Failed to send notification for order %s", order.order_number)
        return False

    logger.info("Notification sent for order %s to %d recipient(s)", order.order_number, len(recipients))
    return True
