"""Contract tests for order endpoints."""

from __future__ import annotations

from collections.abc import Callable

from bson import ObjectId
from fastapi.testclient import TestClient
import pytest

API_PREFIX = "/api/v1"
ORDERS_URL = f"{API_PREFIX}/orders"

SHIPPING_ADDRESS = {
    "address": "1 Main St",
    "city": "Berlin",
    "postalCode": "10115",
    "country": "DE",
}


def _order_body(**overrides) -> dict:
    body = {
        "orderItems": [
            {
                "product": str(ObjectId()),
                "name": "Desk Lamp",
                "image": "/uploads/lamp.png",
                "price": 19.5,
                "qty": 2,
            }
        ],
        "shippingAddress": SHIPPING_ADDRESS,
        "paymentMethod": "Stripe",
        "itemsPrice": 39,
        "shippingPrice": 5,
        "taxPrice": 3.9,
        "totalPrice": 47.9,
    }
    body.update(overrides)
    return body


@pytest.fixture
def other_customer(make_user: Callable) -> object:
    return make_user(name="John Roe", email="john@example.com")


def test_place_order(client: TestClient, customer, customer_headers) -> None:
    response = client.post(ORDERS_URL, json=_order_body(), headers=customer_headers)

    assert response.status_code == 201
    order = response.json()["data"]
    assert order["userId"] == str(customer.id)
    assert order["paymentMethod"] == "Stripe"
    assert order["shippingAddress"] == SHIPPING_ADDRESS
    assert order["orderItems"][0]["qty"] == 2
    assert order["isPaid"] is False
    assert order["paidAt"] is None
    assert order["isDelivered"] is False
    assert order["totalPrice"] == 47.9


def test_payment_method_defaults_to_paypal(client: TestClient, customer_headers) -> None:
    body = _order_body()
    del body["paymentMethod"]

    response = client.post(ORDERS_URL, json=body, headers=customer_headers)

    assert response.json()["data"]["paymentMethod"] == "PayPal"


def test_empty_cart_is_rejected(client: TestClient, customer_headers) -> None:
    response = client.post(ORDERS_URL, json=_order_body(orderItems=[]), headers=customer_headers)

    assert response.status_code == 400
    payload = response.json()
    assert payload["code"] == "EMPTY_CART"
    assert payload["message"] == "No order items"


def test_order_validation(client: TestClient, customer_headers) -> None:
    body = _order_body(
        shippingAddress={"address": "1 Main St", "city": " "},
        paymentMethod="Cash",
    )
    body["orderItems"][0]["qty"] = 0

    response = client.post(ORDERS_URL, json=body, headers=customer_headers)

    assert response.status_code == 400
    paths = [error["path"] for error in response.json()["errors"]]
    assert paths == [
        "orderItems.0.qty",
        "shippingAddress.city",
        "shippingAddress.postalCode",
        "shippingAddress.country",
        "paymentMethod",
    ]
    messages = {error["path"]: error["message"] for error in response.json()["errors"]}
    assert messages["shippingAddress.postalCode"] == "Postal code is required."


def test_order_visibility(
    client: TestClient,
    customer_headers,
    other_customer,
    auth_headers,
    admin_headers,
) -> None:
    order_id = client.post(ORDERS_URL, json=_order_body(), headers=customer_headers).json()["data"]["id"]
    url = f"{ORDERS_URL}/{order_id}"

    assert client.get(url, headers=customer_headers).status_code == 200
    assert client.get(url, headers=admin_headers).status_code == 200
    forbidden = client.get(url, headers=auth_headers(other_customer))
    assert forbidden.status_code == 403
    assert forbidden.json()["code"] == "AUTHORIZATION"


def test_list_orders(client: TestClient, customer_headers, other_customer, auth_headers, admin_headers) -> None:
    client.post(ORDERS_URL, json=_order_body(), headers=customer_headers)
    client.post(ORDERS_URL, json=_order_body(), headers=auth_headers(other_customer))

    mine = client.get(f"{ORDERS_URL}/mine", headers=customer_headers)
    everything = client.get(ORDERS_URL, headers=admin_headers)
    as_customer = client.get(ORDERS_URL, headers=customer_headers)

    assert len(mine.json()["data"]) == 1
    assert len(everything.json()["data"]) == 2
    assert as_customer.status_code == 401
    assert as_customer.json()["message"] == "Not authorized as an admin."


def test_mark_paid_and_delivered(client: TestClient, customer_headers, admin_headers) -> None:
    order_id = client.post(ORDERS_URL, json=_order_body(), headers=customer_headers).json()["data"]["id"]

    paid = client.put(f"{ORDERS_URL}/{order_id}/pay", headers=admin_headers)
    delivered = client.put(f"{ORDERS_URL}/{order_id}/deliver", headers=admin_headers)

    assert paid.status_code == 200
    assert paid.json()["data"]["isPaid"] is True
    assert paid.json()["data"]["paidAt"] is not None
    assert delivered.json()["data"]["isDelivered"] is True
    assert delivered.json()["data"]["deliveredAt"] is not None
    assert client.put(f"{ORDERS_URL}/{order_id}/pay", headers=customer_headers).status_code == 401


def test_unknown_order(client: TestClient, admin_headers) -> None:
    assert client.get(f"{ORDERS_URL}/{ObjectId()}", headers=admin_headers).status_code == 404
    assert client.put(f"{ORDERS_URL}/bad-id/pay", headers=admin_headers).json()["errors"] == [
        {"message": "Invalid ObjectId format."}
    ]


def test_order_creation_is_strictly_rate_limited(client: TestClient, customer_headers) -> None:
    remaining = []
    for _ in range(4):
        response = client.post(ORDERS_URL, json=_order_body(orderItems=[]), headers=customer_headers)
        assert response.status_code == 400
        assert response.headers["X-RateLimit-Limit"] == "4"
        remaining.append(response.headers["X-RateLimit-Remaining"])

    response = client.post(ORDERS_URL, json=_order_body(), headers=customer_headers)

    assert remaining == ["3", "2", "1", "0"]
    assert response.status_code == 429
    assert response.json()["code"] == "RATE_LIMIT"
    assert response.json()["message"] == "Rate limit exceeded. Slow down."
    assert response.headers["X-RateLimit-Remaining"] == "0"
    assert response.headers["Retry-After"] == str(response.json()["details"]["retryAfter"])
