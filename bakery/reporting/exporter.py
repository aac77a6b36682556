# bakery/reporting/exporter.py
import json
from collections.abc import Sequence
from datetime import datetime, tzinfo
from typing import Any

from bakery.reporting.money import format_money
from bakery.schemas.report import ReportOrder, WeeklySummary

PERIOD_FORMAT = "%a %b %d %Y %H:%M"
ORDER_DATE_FORMAT = "%Y-%m-%d %H:%M"


def _localize(value: datetime, tz: tzinfo | None) -> datetime:
    if tz is None or value.tzinfo is None:
        return value
    return value.astimezone(tz)


def _customer_name(order: ReportOrder) -> str:
    if order.customer is None:
        return ""
    return " ".join(p for p in (order.customer.name, order.customer.surname) if p)


def _items_line(order: ReportOrder) -> str:
    # "Rye x2, Spelt x1"
    return ", ".join(
        f"{item.product.name if item.product else item.product_id} x{item.quantity}"
        for item in order.items
    )


def _order_row(order: ReportOrder, currency: str, tz: tzinfo | None) -> dict[str, Any]:
    customer = order.customer
    return {
        "customer": _customer_name(order),
        "email": customer.email if customer else None,
        "contact": customer.contact_number if customer else None,
        "items": _items_line(order),
        "total": format_money(order.total_amount, currency),
        "location": order.pickup_location,
        "status": order.status.value,
        "date": _localize(order.order_date, tz).strftime(ORDER_DATE_FORMAT),
    }


def _summary_section(summary: WeeklySummary) -> dict[str, Any]:
    data = summary.model_dump(
        mode="json",
        exclude={"location_summary", "bread_quantities", "location_breakdown"},
    )
    # Orders are listed once at the top level of the document.
    data["location_summary"] = {
        location: {"count": rollup.count, "revenue": rollup.revenue}
        for location, rollup in summary.location_summary.items()
    }
    return data


def build_export_document(
    summary: WeeklySummary,
    orders: Sequence[ReportOrder],
    week_start: datetime,
    week_end: datetime,
    currency: str = "R",
    tz: tzinfo | None = None,
) -> dict[str, Any]:
    """
    Reshape a weekly summary and its orders into the downloadable document.

    Shape:
        {
          "period": {"start": ..., "end": ...},
          "summary": {...},
          "breadToOrder": {"Rye": 3},
          "locationBreakdown": {"Centurion": {"Rye": 2}},
          "orders": [{"customer", "email", "contact", "items",
                      "total", "location", "status", "date"}]
        }
    """
    return {
        "period": {
            "start": _localize(week_start, tz).strftime(PERIOD_FORMAT),
            "end": _localize(week_end, tz).strftime(PERIOD_FORMAT),
        },
        "summary": _summary_section(summary),
        "breadToOrder": dict(summary.bread_quantities),
        "locationBreakdown": {
            location: dict(quantities)
            for location, quantities in summary.location_breakdown.items()
        },
        "orders": [_order_row(order, currency, tz) for order in orders],
    }


def export_summary(
    summary: WeeklySummary,
    orders: Sequence[ReportOrder],
    week_start: datetime,
    week_end: datetime,
    currency: str = "R",
    tz: tzinfo | None = None,
) -> bytes:
    """Export document as indented UTF-8 JSON."""
    document = build_export_document(
        summary, orders, week_start, week_end, currency=currency, tz=tz
    )
    return json.dumps(document, indent=2, ensure_ascii=False).encode("utf-8")


def export_filename(week_start: datetime) -> str:
    return f"weekly-summary-{week_start.date().isoformat()}.json"
