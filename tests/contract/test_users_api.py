"""Contract tests for profile and user administration endpoints."""

from __future__ import annotations

from collections.abc import Callable

from bson import ObjectId
from fastapi.testclient import TestClient
import pytest

API_PREFIX = "/api/v1"
PROFILE_URL = f"{API_PREFIX}/users/profile"
ADMIN_USERS_URL = f"{API_PREFIX}/users/admin"
SIGNIN_URL = f"{API_PREFIX}/auth/signin"


@pytest.fixture
def other_customer(make_user: Callable) -> object:
    return make_user(name="John Roe", email="john@example.com")


def test_get_profile(client: TestClient, customer, customer_headers) -> None:
    response = client.get(PROFILE_URL, headers=customer_headers)

    assert response.status_code == 200
    profile = response.json()["data"]
    assert profile["id"] == str(customer.id)
    assert profile["email"] == "jane@example.com"
    assert profile["isAdmin"] is False
    assert "password" not in profile


def test_profile_requires_token(client: TestClient) -> None:
    response = client.get(PROFILE_URL)

    assert response.status_code == 401
    assert response.json()["message"] == "Not authorized. No token."


def test_update_profile(client: TestClient, customer_headers) -> None:
    response = client.patch(
        PROFILE_URL,
        json={"name": "Jane Smith", "email": "", "password": "newsecret", "isAdmin": True},
        headers=customer_headers,
    )

    assert response.status_code == 200
    profile = response.json()["data"]
    assert profile["name"] == "Jane Smith"
    assert profile["email"] == "jane@example.com"
    assert profile["isAdmin"] is False

    signin = client.post(SIGNIN_URL, json={"email": "jane@example.com", "password": "newsecret"})
    assert signin.status_code == 200


def test_update_profile_validates_fields(client: TestClient, customer_headers) -> None:
    response = client.patch(PROFILE_URL, json={"name": "  ", "password": "123"}, headers=customer_headers)

    assert response.status_code == 400
    errors = response.json()["errors"]
    assert [error["path"] for error in errors] == ["name", "password"]
    assert errors[0]["message"] == "Name is required."


def test_update_profile_rejects_taken_email(client: TestClient, customer_headers, other_customer) -> None:
    response = client.patch(PROFILE_URL, json={"email": "John@Example.com"}, headers=customer_headers)

    assert response.status_code == 409
    assert response.json()["code"] == "CONFLICT"


def test_admin_lists_users(client: TestClient, customer, admin, admin_headers) -> None:
    response = client.get(ADMIN_USERS_URL, headers=admin_headers)

    assert response.status_code == 200
    emails = {user["email"] for user in response.json()["data"]}
    assert emails == {"jane@example.com", "admin@example.com"}


def test_user_administration_requires_admin(client: TestClient, customer, customer_headers) -> None:
    listing = client.get(ADMIN_USERS_URL, headers=customer_headers)
    removal = client.delete(f"{ADMIN_USERS_URL}/{customer.id}", headers=customer_headers)

    for response in (listing, removal):
        assert response.status_code == 401
        assert response.json()["message"] == "Not authorized as an admin."


def test_admin_manages_a_user(client: TestClient, customer, admin_headers) -> None:
    url = f"{ADMIN_USERS_URL}/{customer.id}"

    fetched = client.get(url, headers=admin_headers)
    promoted = client.patch(url, json={"isAdmin": True}, headers=admin_headers)
    deleted = client.delete(url, headers=admin_headers)
    missing = client.get(url, headers=admin_headers)

    assert fetched.json()["data"]["name"] == "Jane Doe"
    assert promoted.status_code == 200
    assert promoted.json()["data"]["isAdmin"] is True
    assert deleted.status_code == 200
    assert deleted.json() == {"success": True, "data": None}
    assert missing.status_code == 404
    assert missing.json()["message"] == "User not found"


def test_admin_user_routes_validate_ids(client: TestClient, admin_headers) -> None:
    invalid = client.get(f"{ADMIN_USERS_URL}/not-an-id", headers=admin_headers)
    unknown = client.delete(f"{ADMIN_USERS_URL}/{ObjectId()}", headers=admin_headers)

    assert invalid.status_code == 400
    assert invalid.json()["errors"] == [{"message": "Invalid ObjectId format."}]
    assert unknown.status_code == 404
    assert unknown.json()["code"] == "NOT_FOUND"
