# bakery/services/notification_service.py
import logging
from datetime import timezone as dt_timezone
from zoneinfo import ZoneInfo

from bakery.core import email_client
from bakery.core.config import get_settings
from bakery.models.order import Order, OrderItem
from bakery.models.user import User
from bakery.reporting.money import format_money, line_amount

logger = logging.getLogger(__name__)


def build_order_email(
    order: Order,
    items: list[OrderItem],
    product_names: dict,
    customer: User,
    currency: str = "R",
    timezone: str = "Africa/Johannesburg",
) -> tuple[str, str]:
    """
    Subject and plain-text body of the new-order email sent to the bakery.
    """
    full_name = " ".join(p for p in (customer.name, customer.surname) if p)
    lines = [
        f"{product_names.get(it.product_id, it.product_id)} x {it.quantity} = "
        f"{format_money(line_amount(it.price, it.quantity), currency)}"
        for it in items
    ]
    order_date = order.order_date
    # Stored timestamps come back naive; they are UTC.
    if order_date.tzinfo is None:
        order_date = order_date.replace(tzinfo=dt_timezone.utc)
    order_date = order_date.astimezone(ZoneInfo(timezone))

    subject = f"New order from {full_name}"
    body = "\n".join(
        [
            f"Customer: {full_name}",
            f"Email: {customer.email}",
            f"Contact: {customer.contact_number or '-'}",
            "",
            "Order details:",
            *lines,
            "",
            f"Total: {format_money(order.total_amount, currency)}",
            f"Pickup location: {order.pickup_location}",
            f"Order date: {order_date.strftime('%Y-%m-%d')}",
            f"Order id: {order.id}",
        ]
    )
    return subject, body


def send_order_notification(
    order: Order,
    items: list[OrderItem],
    product_names: dict,
    customer: User,
) -> bool:
    """
    Email the bakery about a new order.

    Returns False (and logs) when ORDER_NOTIFY_EMAIL is not configured.
    SMTP errors propagate to the caller.
    """
    settings = get_settings()
    if not settings.ORDER_NOTIFY_EMAIL:
        logger.info("ORDER_NOTIFY_EMAIL not set; skipping email for order %s", order.id)
        return False

    subject, body = build_order_email(
        order,
        items,
        product_names,
        customer,
        currency=settings.CURRENCY_SYMBOL,
        timezone=settings.BAKERY_TIMEZONE,
    )
    email_client.send_email(
        to_email=settings.ORDER_NOTIFY_EMAIL,
        subject=subject,
        text_body=body,
        reply_to=customer.email,
    )
    return True
