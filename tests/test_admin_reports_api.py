import json
from datetime import datetime, timezone

import pytest

WEEKLY = "/api/v1/admin/reports/weekly"
# Friday 12 January 2024, 09:00 bakery time
REFERENCE = {"reference": "2024-01-12T09:00:00"}


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture()
def week_of_orders(make_user, make_product, make_order):
    thandi = make_user()
    sipho = make_user(email="sipho@example.com", name="Sipho", surname=None)
    rye = make_product("Rye", 50.0, cost_price=30.0)
    spelt = make_product("Spelt", 65.0, cost_price=35.0)

    # Johannesburg is UTC+2; the week runs Wed 10 Jan 16:01 to Wed 17 Jan 16:01 local.
    make_order(thandi, [(rye, 2)], utc(2024, 1, 10, 13, 0), "Centurion Golf Estate", "completed")  # last week
    make_order(thandi, [(rye, 2), (spelt, 1)], utc(2024, 1, 11, 8, 0), "Centurion Golf Estate", "completed")
    make_order(sipho, [(rye, 1)], utc(2024, 1, 12, 10, 0), "Doxa Deo Midstream", "verified")
    make_order(sipho, [(spelt, 2)], utc(2024, 1, 17, 14, 0), "Doxa Deo Midstream", "pending")  # 16:00 cutoff
    make_order(thandi, [(spelt, 5)], utc(2024, 1, 17, 14, 2), "Centurion Golf Estate")  # next week
    return rye, spelt


def test_weekly_report(client, admin_headers, week_of_orders):
    resp = client.get(WEEKLY, headers=admin_headers, params=REFERENCE)

    assert resp.status_code == 200
    body = resp.json()
    assert body["week_start"] == "2024-01-10T16:01:00+02:00"
    assert body["week_end"] == "2024-01-17T16:01:00+02:00"

    summary = body["summary"]
    assert summary["total_orders"] == 3
    assert summary["total_revenue"] == pytest.approx(165 + 50 + 130)
    assert summary["total_cost"] == pytest.approx(95 + 30 + 70)
    assert summary["total_profit"] == pytest.approx(345 - 195)
    assert summary["completed_orders"] == 1
    assert summary["pending_orders"] == 2
    assert summary["status_counts"] == {"pending": 1, "verified": 1, "completed": 1}
    assert summary["bread_quantities"] == {"Rye": 3, "Spelt": 3}
    assert summary["location_breakdown"] == {
        "Centurion Golf Estate": {"Rye": 2, "Spelt": 1},
        "Doxa Deo Midstream": {"Rye": 1, "Spelt": 2},
    }
    doxa = summary["location_summary"]["Doxa Deo Midstream"]
    assert doxa["count"] == 2
    assert [o["customer"]["name"] for o in doxa["orders"]] == ["Sipho", "Sipho"]


def test_previous_week_via_offset(client, admin_headers, week_of_orders):
    resp = client.get(WEEKLY, headers=admin_headers, params={**REFERENCE, "offset": -1})

    body = resp.json()
    assert body["week_start"] == "2024-01-03T16:01:00+02:00"
    assert body["summary"]["total_orders"] == 1
    assert body["summary"]["bread_quantities"] == {"Rye": 2}


def test_aware_reference_is_converted_to_bakery_time(client, admin_headers, week_of_orders):
    # 14:30 UTC on Wednesday is 16:30 in Johannesburg: the new week has started.
    resp = client.get(WEEKLY, headers=admin_headers, params={"reference": "2024-01-10T14:30:00Z"})

    assert resp.json()["week_start"] == "2024-01-10T16:01:00+02:00"


def test_empty_week(client, admin_headers):
    resp = client.get(WEEKLY, headers=admin_headers, params=REFERENCE)

    summary = resp.json()["summary"]
    assert summary["total_orders"] == 0
    assert summary["total_revenue"] == 0
    assert summary["product_summary"] == {}


def test_report_requires_admin(client, customer_headers):
    assert client.get(WEEKLY).status_code == 401
    assert client.get(WEEKLY, headers=customer_headers).status_code == 403


def test_order_with_missing_product_fails_the_report(
    client, session, admin_headers, make_user, make_product, make_order
):
    ghost = make_product("Ghost Loaf", 40.0)
    broken = make_order(make_user(), [(ghost, 1)], utc(2024, 1, 11, 8, 0))
    broken_id = broken.id
    session.delete(ghost)
    session.commit()

    resp = client.get(WEEKLY, headers=admin_headers, params=REFERENCE)

    assert resp.status_code == 500
    detail = resp.json()["detail"]
    assert detail["order_id"] == str(broken_id)
    assert "no product data" in detail["reason"]


def test_export(client, admin_headers, week_of_orders):
    resp = client.get(f"{WEEKLY}/export", headers=admin_headers, params=REFERENCE)

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/json"
    assert resp.headers["content-disposition"] == 'attachment; filename="weekly-summary-2024-01-10.json"'

    doc = json.loads(resp.content.decode("utf-8"))
    assert doc["period"] == {"start": "Wed Jan 10 2024 16:01", "end": "Wed Jan 17 2024 16:01"}
    assert doc["breadToOrder"] == {"Rye": 3, "Spelt": 3}
    rows = doc["orders"]
    assert [r["date"] for r in rows] == ["2024-01-17 16:00", "2024-01-12 12:00", "2024-01-11 10:00"]
    assert rows[-1]["customer"] == "Thandi Mokoena"
    assert rows[-1]["items"] in ("Rye x2, Spelt x1", "Spelt x1, Rye x2")
    assert rows[-1]["total"] == "R165.00"
