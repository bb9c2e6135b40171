from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from app.api.dependencies import get_subscription_store
from app.main import app
from app.services.subscription_store import SubscriptionStore

BASE = "/api/v1/subscriptions"

PAYLOAD = {
    "service_name": "Yandex Plus",
    "price": 400,
    "user_id": "60601fee-2bf1-4721-ae6f-7636e79a0cba",
    "start_date": "07-2025",
}


def _create(client, **overrides):
    response = client.post(BASE, json={**PAYLOAD, **overrides})
    assert response.status_code == 201, response.text
    return response.json()["id"]


def test_create_and_get(client):
    subscription_id = _create(client)
    response = client.get(f"{BASE}/{subscription_id}")
    assert response.status_code == 200
    assert response.json() == {"id": subscription_id, **PAYLOAD, "end_date": ""}


def test_create_rejects_negative_price(client):
    response = client.post(BASE, json={**PAYLOAD, "price": -5})
    assert response.status_code == 400
    assert "price" in response.json()["detail"]


def test_create_rejects_bad_date(client):
    response = client.post(BASE, json={**PAYLOAD, "start_date": "2025-07"})
    assert response.status_code == 400
    assert "MM-YYYY" in response.json()["detail"]


def test_create_rejects_missing_field(client):
    payload = dict(PAYLOAD)
    payload.pop("user_id")
    assert client.post(BASE, json=payload).status_code == 422


def test_list_empty_then_ordered(client):
    assert client.get(BASE).json() == []
    first = _create(client)
    second = _create(client, service_name="Netflix")
    assert [s["id"] for s in client.get(BASE).json()] == [first, second]


def test_get_unknown_id_is_404(client):
    response = client.get(f"{BASE}/999")
    assert response.status_code == 404
    assert response.json() == {"detail": "not found"}


def test_non_integer_id_is_rejected(client):
    assert client.get(f"{BASE}/abc").status_code == 422


@pytest.mark.parametrize("method", ["put", "patch"])
def test_partial_update(client, method):
    subscription_id = _create(client, end_date="12-2025")
    response = getattr(client, method)(f"{BASE}/{subscription_id}", json={"price": 599, "end_date": ""})
    assert response.status_code == 204
    body = client.get(f"{BASE}/{subscription_id}").json()
    assert body["price"] == 599
    assert body["end_date"] == ""
    assert body["service_name"] == PAYLOAD["service_name"]


def test_update_without_fields_is_400(client):
    subscription_id = _create(client)
    response = client.put(f"{BASE}/{subscription_id}", json={})
    assert response.status_code == 400
    assert response.json()["detail"] == "no fields to update"


def test_update_unknown_id_is_404(client):
    assert client.put(f"{BASE}/999", json={"price": 1}).status_code == 404


def test_delete_then_404(client):
    subscription_id = _create(client)
    assert client.delete(f"{BASE}/{subscription_id}").status_code == 204
    assert client.delete(f"{BASE}/{subscription_id}").status_code == 404
    assert client.get(f"{BASE}/{subscription_id}").status_code == 404


def test_total_with_filters(client):
    _create(client, price=100, start_date="06-2023", end_date="03-2024")
    _create(client, price=200, start_date="01-2025")
    _create(client, price=300, user_id="someone-else", start_date="01-2024")

    assert client.get(f"{BASE}/total").json() == {"total": 600}
    response = client.get(f"{BASE}/total", params={"start_date": "01-2024", "end_date": "12-2024"})
    assert response.json() == {"total": 400}
    response = client.get(f"{BASE}/total", params={"user_id": PAYLOAD["user_id"]})
    assert response.json() == {"total": 300}


def test_total_ignores_blank_user_and_service_filters(client):
    _create(client, price=100)
    response = client.get(f"{BASE}/total", params={"user_id": "", "service_name": ""})
    assert response.json() == {"total": 100}


def test_total_rejects_blank_period_bound(client):
    response = client.get(f"{BASE}/total", params={"start_date": ""})
    assert response.status_code == 400
    assert response.json()["detail"] == "start_date cannot be empty"


def test_unversioned_paths_are_served(client):
    response = client.post("/subscriptions", json=PAYLOAD)
    assert response.status_code == 201
    assert client.get(f"/subscriptions/{response.json()['id']}").status_code == 200


def test_storage_failure_is_sanitized_500(client):
    db = MagicMock()
    db.query.side_effect = OperationalError("SELECT", {}, Exception("password=secret"))
    app.dependency_overrides[get_subscription_store] = lambda: SubscriptionStore(db)
    try:
        response = client.get(BASE)
    finally:
        app.dependency_overrides.pop(get_subscription_store, None)
    assert response.status_code == 500
    assert response.json() == {"detail": "internal storage error"}


def test_create_rejects_price_beyond_column_range(client):
    response = client.post(BASE, json={**PAYLOAD, "price": 2**31})
    assert response.status_code == 400
    assert "price" in response.json()["detail"]
    assert client.get(BASE).json() == []


def test_update_rejects_price_beyond_column_range(client):
    subscription_id = _create(client)
    response = client.put(f"{BASE}/{subscription_id}", json={"price": 2**31})
    assert response.status_code == 400
    assert client.get(f"{BASE}/{subscription_id}").json()["price"] == PAYLOAD["price"]


@pytest.mark.parametrize("price", [True, "400", 4.5])
def test_price_must_be_a_json_integer(client, price):
    assert client.post(BASE, json={**PAYLOAD, "price": price}).status_code == 422
    subscription_id = _create(client)
    assert client.put(f"{BASE}/{subscription_id}", json={"price": price}).status_code == 422
