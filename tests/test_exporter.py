import json
import uuid
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from bakery.reporting.aggregator import aggregate_orders
from bakery.reporting.exporter import (
    build_export_document,
    export_filename,
    export_summary,
)
from bakery.schemas.order import OrderStatus
from bakery.schemas.report import (
    ReportCustomer,
    ReportLineItem,
    ReportOrder,
    ReportProduct,
)

SAST = ZoneInfo("Africa/Johannesburg")
WEEK_START = datetime(2024, 1, 10, 16, 1, tzinfo=SAST)
WEEK_END = datetime(2024, 1, 17, 16, 1, tzinfo=SAST)


def _orders() -> list[ReportOrder]:
    rye = ReportProduct(name="Rye", price=50, cost_price=30)
    spelt = ReportProduct(name="Spelt", price=65, cost_price=35)
    return [
        ReportOrder(
            id=uuid.uuid4(),
            order_date=datetime(2024, 1, 11, 7, 15, tzinfo=timezone.utc),
            pickup_location="Centurion Golf Estate",
            total_amount=165.0,
            status=OrderStatus.COMPLETED,
            customer=ReportCustomer(
                name="Thandi",
                surname="Mokoena",
                email="thandi@example.com",
                contact_number="082 555 0101",
            ),
            items=[
                ReportLineItem(product_id=uuid.uuid4(), quantity=2, price=50, product=rye),
                ReportLineItem(product_id=uuid.uuid4(), quantity=1, price=65, product=spelt),
            ],
        ),
        ReportOrder(
            id=uuid.uuid4(),
            order_date=datetime(2024, 1, 12, 12, 0, tzinfo=timezone.utc),
            pickup_location="Doxa Deo Midstream",
            total_amount=50.0,
            status=OrderStatus.VERIFIED,
            customer=ReportCustomer(name="Jörg", email="jorg@example.com"),
            items=[ReportLineItem(product_id=uuid.uuid4(), quantity=1, price=50, product=rye)],
        ),
    ]


def test_document_shape():
    orders = _orders()
    summary = aggregate_orders(orders)

    doc = build_export_document(summary, orders, WEEK_START, WEEK_END, currency="R", tz=SAST)

    assert set(doc) == {"period", "summary", "breadToOrder", "locationBreakdown", "orders"}
    assert doc["period"] == {"start": "Wed Jan 10 2024 16:01", "end": "Wed Jan 17 2024 16:01"}
    assert doc["breadToOrder"] == {"Rye": 3, "Spelt": 1}
    assert doc["locationBreakdown"] == {
        "Centurion Golf Estate": {"Rye": 2, "Spelt": 1},
        "Doxa Deo Midstream": {"Rye": 1},
    }


def test_summary_section_drops_nested_orders():
    orders = _orders()
    doc = build_export_document(aggregate_orders(orders), orders, WEEK_START, WEEK_END)

    section = doc["summary"]
    assert section["total_orders"] == 2
    assert section["total_revenue"] == 215.0
    assert section["status_counts"] == {"pending": 0, "verified": 1, "completed": 1}
    assert section["location_summary"] == {
        "Centurion Golf Estate": {"count": 1, "revenue": 165.0},
        "Doxa Deo Midstream": {"count": 1, "revenue": 50.0},
    }
    assert "bread_quantities" not in section


def test_order_rows_are_flattened_and_localized():
    orders = _orders()
    doc = build_export_document(aggregate_orders(orders), orders, WEEK_START, WEEK_END, tz=SAST)

    first, second = doc["orders"]
    assert first == {
        "customer": "Thandi Mokoena",
        "email": "thandi@example.com",
        "contact": "082 555 0101",
        "items": "Rye x2, Spelt x1",
        "total": "R165.00",
        "location": "Centurion Golf Estate",
        "status": "completed",
        # 07:15 UTC is 09:15 in Johannesburg
        "date": "2024-01-11 09:15",
    }
    assert second["customer"] == "Jörg"
    assert second["contact"] is None
    assert second["status"] == "verified"


def test_export_summary_is_indented_utf8_json():
    orders = _orders()
    content = export_summary(aggregate_orders(orders), orders, WEEK_START, WEEK_END, tz=SAST)

    assert isinstance(content, bytes)
    text = content.decode("utf-8")
    assert "Jörg" in text
    assert text.startswith('{\n  "period"')
    assert json.loads(text)["breadToOrder"]["Rye"] == 3


def test_export_of_empty_week():
    doc = build_export_document(aggregate_orders([]), [], WEEK_START, WEEK_END)

    assert doc["orders"] == []
    assert doc["breadToOrder"] == {}
    assert doc["summary"]["total_orders"] == 0


def test_export_filename_uses_week_start_date():
    assert export_filename(WEEK_START) == "weekly-summary-2024-01-10.json"
