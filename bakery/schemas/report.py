# bakery/schemas/report.py
import uuid
from datetime import datetime

from sqlmodel import SQLModel

from bakery.schemas.order import OrderStatus


class ReportCustomer(SQLModel):
    """
    Customer fields shown next to an order in reports and exports.
    """

    name: str
    surname: str | None = None
    email: str
    contact_number: str | None = None


class ReportProduct(SQLModel):
    """
    Product data joined onto a line item.

    `price` is the live catalogue price; profit always uses the line
    item's own `price` (the price paid).
    """

    name: str
    price: float
    cost_price: float


class ReportLineItem(SQLModel):
    product_id: uuid.UUID
    quantity: int
    price: float
    product: ReportProduct | None = None


class ReportOrder(SQLModel):
    """
    An order joined with its customer and line items, as the weekly
    report consumes it.
    """

    id: uuid.UUID
    order_date: datetime
    pickup_location: str
    total_amount: float
    status: OrderStatus
    notes: str | None = None
    customer: ReportCustomer | None = None
    items: list[ReportLineItem] = []


class ProductRollup(SQLModel):
    quantity: int = 0
    revenue: float = 0.0
    profit: float = 0.0
    cost: float = 0.0


class LocationRollup(SQLModel):
    count: int = 0
    revenue: float = 0.0
    orders: list[ReportOrder] = []


class StatusCounts(SQLModel):
    """
    Exact three-way split of order statuses for the week.
    """

    pending: int = 0
    verified: int = 0
    completed: int = 0


class WeeklySummary(SQLModel):
    """
    Everything the admin needs for one bakery week.

    `pending_orders` counts every order that is not completed (verified
    included); `status_counts` has the exact split.
    """

    total_orders: int = 0
    total_revenue: float = 0.0
    total_profit: float = 0.0
    total_cost: float = 0.0
    completed_orders: int = 0
    pending_orders: int = 0
    status_counts: StatusCounts = StatusCounts()
    product_summary: dict[str, ProductRollup] = {}
    location_summary: dict[str, LocationRollup] = {}
    bread_quantities: dict[str, int] = {}
    location_breakdown: dict[str, dict[str, int]] = {}


class WeeklyReportRead(SQLModel):
    """
    Weekly summary together with the window it covers.
    """

    week_start: datetime
    week_end: datetime
    summary: WeeklySummary
