from sqlmodel import select

from app.models.order import Order
from app.models.order_item import OrderItem


def checkout_body(*items, **overrides):
    body = {
        "customer_name": "Rose Tyler",
        "customer_email": "rose@example.com",
        "customer_phone": "+1 555 0100",
        "delivery_address": "12 Petal Lane",
        "special_instructions": "Card: Happy birthday!",
        "items": [{"product_id": p.id, "quantity": q} for p, q in items],
    }
    body.update(overrides)
    return body


def test_guest_checkout_uses_catalog_prices(client, session, make_product):
    roses = make_product(name="Red Rose Bouquet", price=45.0)
    lilies = make_product(name="White Lily Vase", price=30.0)

    response = client.post("/checkout/orders", json=checkout_body((roses, 2), (lilies, 1)))

    assert response.status_code == 201
    order = response.json()["order"]
    assert order["status"] == "pending"
    assert order["user_id"] is None
    assert order["total_amount"] == 129.99
    assert order["final_price"] is None
    assert order["notes"] == "Card: Happy birthday!"
    assert {i["product_name"]: i["subtotal"] for i in order["order_items"]} == {
        "Red Rose Bouquet": 90.0,
        "White Lily Vase": 30.0,
    }


def test_signed_in_checkout_links_user(client, make_product, customer, customer_headers):
    roses = make_product()

    response = client.post("/checkout/orders", json=checkout_body((roses, 1)), headers=customer_headers)

    assert response.json()["order"]["user_id"] == customer.id

    orders = client.get("/profile/orders", headers=customer_headers).json()
    assert len(orders) == 1
    assert orders[0]["order_items"][0]["product_name"] == "Red Rose Bouquet"


def test_item_snapshot_survives_product_changes(client, session, make_product, admin_headers):
    roses = make_product(price=45.0)
    order_id = client.post("/checkout/orders", json=checkout_body((roses, 1))).json()["order"]["id"]

    client.put(f"/admin/products/{roses.id}", json={"name": "Renamed", "price": 99}, headers=admin_headers)
    client.delete(f"/admin/products/{roses.id}", headers=admin_headers)

    [item] = session.exec(select(OrderItem).where(OrderItem.order_id == order_id)).all()
    assert item.product_name == "Red Rose Bouquet"
    assert item.product_price == 45.0


def test_unknown_product(client, session):
    response = client.post(
        "/checkout/orders",
        json=checkout_body(items=[{"product_id": "missing", "quantity": 1}]),
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Product missing not found"}
    assert session.exec(select(Order)).all() == []


def test_inactive_product_cannot_be_ordered(client, make_product):
    fern = make_product(name="Retired Fern", is_active=False)

    response = client.post("/checkout/orders", json=checkout_body((fern, 1)))

    assert response.status_code == 400


def test_empty_cart_is_rejected(client):
    response = client.post("/checkout/orders", json=checkout_body())

    assert response.status_code == 400


def test_invalid_email_is_rejected(client, make_product):
    roses = make_product()

    response = client.post("/checkout/orders", json=checkout_body((roses, 1), customer_email="not-an-email"))

    assert response.status_code == 400
    assert "customer_email" in response.json()["error"]
