# bakery/services/report_service.py
import logging
import uuid
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from fastapi import HTTPException, status
from pydantic import ValidationError
from sqlmodel import Session

from bakery.core.config import get_settings
from bakery.models.order import Order
from bakery.models.user import User
from bakery.reporting.aggregator import OrderValidationError, aggregate_orders
from bakery.reporting.exporter import export_filename, export_summary
from bakery.reporting.weeks import week_window
from bakery.repositories.order_repo import OrderRepository
from bakery.repositories.user_repo import UserRepository
from bakery.schemas.report import (
    ReportCustomer,
    ReportLineItem,
    ReportOrder,
    ReportProduct,
    WeeklyReportRead,
)

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; they were stored as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ReportService:
    """
    Weekly order report for the admin dashboard.

    The bakery week is computed in BAKERY_TIMEZONE; order dates are
    stored in UTC, so the window bounds are converted before querying.
    """

    def __init__(self, order_repo: OrderRepository, user_repo: UserRepository):
        self.order_repo = order_repo
        self.user_repo = user_repo

    def _tz(self) -> ZoneInfo:
        return ZoneInfo(get_settings().BAKERY_TIMEZONE)

    def _window(
        self,
        reference: datetime | None,
        offset: int,
    ) -> tuple[datetime, datetime]:
        tz = self._tz()
        if reference is None:
            reference = datetime.now(tz)
        elif reference.tzinfo is None:
            # naive input is bakery-local wall time
            reference = reference.replace(tzinfo=tz)
        else:
            reference = reference.astimezone(tz)
        return week_window(reference, offset)

    def load_report_orders(
        self,
        session: Session,
        start: datetime,
        end: datetime,
    ) -> list[ReportOrder]:
        """
        Orders placed in [start, end) with their customer and line items
        joined, newest first.
        """
        orders: list[Order] = self.order_repo.list_in_range(
            session,
            start.astimezone(timezone.utc),
            end.astimezone(timezone.utc),
        )
        if not orders:
            return []

        rows = self.order_repo.list_items_with_products(session, [o.id for o in orders])
        items_by_order: dict[uuid.UUID, list[ReportLineItem]] = {}
        for item, product in rows:
            items_by_order.setdefault(item.order_id, []).append(
                ReportLineItem(
                    product_id=item.product_id,
                    quantity=item.quantity,
                    price=item.price,
                    product=(
                        ReportProduct(
                            name=product.name,
                            price=product.price,
                            cost_price=product.cost_price,
                        )
                        if product is not None
                        else None
                    ),
                )
            )

        customers: dict[uuid.UUID, User] = self.user_repo.get_many(
            session, {o.user_id for o in orders}
        )

        report_orders: list[ReportOrder] = []
        for order in orders:
            customer = customers.get(order.user_id)
            try:
                report_orders.append(
                    ReportOrder(
                        id=order.id,
                        order_date=_as_utc(order.order_date),
                        pickup_location=order.pickup_location,
                        total_amount=order.total_amount,
                        status=order.status,
                        notes=order.notes,
                        customer=(
                            ReportCustomer(
                                name=customer.name,
                                surname=customer.surname,
                                email=customer.email,
                                contact_number=customer.contact_number,
                            )
                            if customer is not None
                            else None
                        ),
                        items=items_by_order.get(order.id, []),
                    )
                )
            except ValidationError as e:
                raise OrderValidationError(order.id, f"invalid order data ({e.error_count()} errors)") from e
        return report_orders

    def get_weekly_report(
        self,
        session: Session,
        reference: datetime | None = None,
        offset: int = 0,
    ) -> WeeklyReportRead:
        """
        Summary of the bakery week containing `reference` (default: now),
        shifted by `offset` weeks.
        """
        start, end = self._window(reference, offset)
        _, summary = self._summarize(session, start, end)
        return WeeklyReportRead(week_start=start, week_end=end, summary=summary)

    def export_weekly_report(
        self,
        session: Session,
        reference: datetime | None = None,
        offset: int = 0,
    ) -> tuple[str, bytes]:
        """
        Downloadable JSON export of a bakery week.

        Returns:
            (filename, content)
        """
        settings = get_settings()
        start, end = self._window(reference, offset)
        orders, summary = self._summarize(session, start, end)
        content = export_summary(
            summary,
            orders,
            start,
            end,
            currency=settings.CURRENCY_SYMBOL,
            tz=self._tz(),
        )
        return export_filename(start), content

    def _summarize(self, session: Session, start: datetime, end: datetime):
        try:
            orders = self.load_report_orders(session, start, end)
            return orders, aggregate_orders(orders)
        except OrderValidationError as e:
            logger.error("Weekly report failed: %s", e)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail={
                    "message": "Weekly report could not be built",
                    "order_id": str(e.order_id),
                    "reason": e.reason,
                },
            ) from e
