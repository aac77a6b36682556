import uuid

import pytest

CART = "/api/v1/cart"


@pytest.fixture()
def rye(make_product):
    return make_product("Rye", 50.0, cost_price=30.0)


@pytest.fixture()
def spelt(make_product):
    return make_product("Spelt", 65.0, cost_price=35.0)


def test_guest_has_no_cart(client):
    assert client.get(CART).status_code == 401


def test_empty_cart(client, customer_headers):
    resp = client.get(CART, headers=customer_headers)

    assert resp.status_code == 200
    assert resp.json() == {"items": [], "item_count": 0, "total": 0.0}


def test_adding_same_product_merges_quantities(client, customer_headers, rye, spelt):
    client.post(CART, headers=customer_headers, json={"product_id": str(rye.id), "quantity": 2})
    client.post(CART, headers=customer_headers, json={"product_id": str(spelt.id)})
    resp = client.post(CART, headers=customer_headers, json={"product_id": str(rye.id), "quantity": 1})

    assert resp.status_code == 200
    body = resp.json()
    assert [(i["product_name"], i["quantity"]) for i in body["items"]] == [("Rye", 3), ("Spelt", 1)]
    assert body["item_count"] == 4
    assert body["total"] == pytest.approx(3 * 50 + 65)
    assert body["items"][0]["line_total"] == pytest.approx(150)


def test_snapshot_price_survives_price_change(client, customer_headers, admin_headers, rye):
    client.post(CART, headers=customer_headers, json={"product_id": str(rye.id), "quantity": 2})
    client.patch(f"/api/v1/products/{rye.id}", headers=admin_headers, json={"price": 60.0})

    body = client.get(CART, headers=customer_headers).json()

    assert body["items"][0]["snapshot_price"] == 50.0
    assert body["total"] == pytest.approx(100)


def test_setting_quantity(client, customer_headers, rye):
    client.post(CART, headers=customer_headers, json={"product_id": str(rye.id)})

    resp = client.patch(f"{CART}/{rye.id}", headers=customer_headers, json={"quantity": 5})

    assert resp.json()["items"][0]["quantity"] == 5
    assert resp.json()["item_count"] == 5


def test_setting_quantity_to_zero_removes_line(client, customer_headers, rye, spelt):
    client.post(CART, headers=customer_headers, json={"product_id": str(rye.id)})
    client.post(CART, headers=customer_headers, json={"product_id": str(spelt.id)})

    resp = client.patch(f"{CART}/{rye.id}", headers=customer_headers, json={"quantity": 0})

    assert [i["product_name"] for i in resp.json()["items"]] == ["Spelt"]


def test_negative_quantity_is_rejected(client, customer_headers, rye):
    client.post(CART, headers=customer_headers, json={"product_id": str(rye.id)})

    resp = client.patch(f"{CART}/{rye.id}", headers=customer_headers, json={"quantity": -1})
    assert resp.status_code == 422

    resp = client.post(CART, headers=customer_headers, json={"product_id": str(rye.id), "quantity": 0})
    assert resp.status_code == 422


def test_remove_and_clear(client, customer_headers, rye, spelt):
    client.post(CART, headers=customer_headers, json={"product_id": str(rye.id)})
    client.post(CART, headers=customer_headers, json={"product_id": str(spelt.id)})

    resp = client.delete(f"{CART}/{rye.id}", headers=customer_headers)
    assert [i["product_name"] for i in resp.json()["items"]] == ["Spelt"]

    resp = client.delete(f"{CART}/{rye.id}", headers=customer_headers)
    assert resp.status_code == 404

    resp = client.delete(CART, headers=customer_headers)
    assert resp.json() == {"items": [], "item_count": 0, "total": 0.0}
    assert client.get(CART, headers=customer_headers).json()["items"] == []


def test_unknown_and_inactive_products_are_rejected(client, customer_headers, make_product):
    retired = make_product("Old Loaf", 40.0, is_active=False)

    resp = client.post(CART, headers=customer_headers, json={"product_id": str(uuid.uuid4())})
    assert resp.status_code == 404

    resp = client.post(CART, headers=customer_headers, json={"product_id": str(retired.id)})
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Product is not available"


def test_carts_are_per_user(client, customer_headers, auth_header, rye):
    client.post(CART, headers=customer_headers, json={"product_id": str(rye.id)})

    other = auth_header(uuid.uuid4(), "sipho@example.com")
    assert client.get(CART, headers=other).json()["items"] == []
