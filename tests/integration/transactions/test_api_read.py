"""Integration tests for the transaction read endpoints.

Covers:
- GET /api/v1/transactions/ (nested list, filters, newest first).
- GET /api/v1/transactions/{id}/.
- GET /api/v1/transactions/customer/{customer_id}/.
"""

from __future__ import annotations

from datetime import timedelta
from uuid import uuid4

import pytest
from django.utils import timezone

from modules.customers.models import Customer

pytestmark = pytest.mark.integration

URL = "/api/v1/transactions/"


@pytest.fixture()
def create(auth_client):
    def _create(customer, *items):
        response = auth_client.post(
            URL,
            {
                "customer_id": str(customer.id),
                "items": [{"product_id": str(p.id), "quantity": q} for p, q in items],
            },
            format="json",
        )
        assert response.status_code == 201, response.json()
        return response.json()["transaction_id"]

    return _create


class TestRetrieve:
    def test_nested_shape(self, auth_client, create, customer, make_product):
        keyboard = make_product(name="Keyboard", price="10.00", stock=5)
        mouse = make_product(name="Mouse", price="5.00", stock=5)
        txn_id = create(customer, (keyboard, 2), (mouse, 1))

        response = auth_client.get(f"{URL}{txn_id}/")

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == txn_id
        assert body["customer_id"] == str(customer.id)
        assert body["status"] == "pending"
        assert body["total_amount"] == "25.00"
        assert "created_at" in body
        assert [i["product_name"] for i in body["items"]] == ["Keyboard", "Mouse"]
        first = body["items"][0]
        assert first["product_id"] == str(keyboard.id)
        assert first["quantity"] == 2
        assert first["unit_price"] == "10.00"
        assert first["subtotal"] == "20.00"
        assert set(first) == {
            "id",
            "product_id",
            "product_name",
            "quantity",
            "unit_price",
            "subtotal",
        }

    def test_unknown_id(self, auth_client):
        response = auth_client.get(f"{URL}{uuid4()}/")

        assert response.status_code == 404
        assert response.json()["code"] == "not_found"

    def test_malformed_id(self, auth_client):
        response = auth_client.get(f"{URL}not-a-uuid/")
        assert response.status_code == 404


class TestList:
    def test_empty(self, auth_client):
        response = auth_client.get(URL)

        assert response.status_code == 200
        assert response.json() == []

    def test_newest_first(self, auth_client, create, customer, make_product):
        product = make_product(stock=10)
        older = create(customer, (product, 1))
        newer = create(customer, (product, 1))

        response = auth_client.get(URL)

        assert [t["id"] for t in response.json()] == [newer, older]

    def test_filter_by_status(self, auth_client, create, customer, make_product):
        product = make_product(stock=10)
        done = create(customer, (product, 1))
        create(customer, (product, 1))
        auth_client.patch(f"{URL}{done}/", {"status": "completed"}, format="json")

        response = auth_client.get(URL, {"status": "completed"})

        assert [t["id"] for t in response.json()] == [done]

    def test_filter_by_customer(self, auth_client, create, customer, make_product):
        other = Customer.objects.create(name="Bruno Lima", email="bruno@example.com")
        product = make_product(stock=10)
        mine = create(customer, (product, 1))
        create(other, (product, 1))

        response = auth_client.get(URL, {"customer": str(customer.id)})

        assert [t["id"] for t in response.json()] == [mine]

    def test_filter_by_date_range(self, auth_client, create, customer, make_product):
        product = make_product(stock=10)
        create(customer, (product, 1))
        today = timezone.now().date()
        tomorrow = today + timedelta(days=1)

        in_range = auth_client.get(
            URL, {"start_date": today.isoformat(), "end_date": tomorrow.isoformat()}
        )
        out_of_range = auth_client.get(URL, {"start_date": tomorrow.isoformat()})

        assert len(in_range.json()) == 1
        assert out_of_range.json() == []

    @pytest.mark.parametrize(
        "params",
        [{"status": "shipped"}, {"customer": "nope"}, {"start_date": "yesterday"}],
    )
    def test_invalid_filters(self, auth_client, params):
        response = auth_client.get(URL, params)

        assert response.status_code == 400
        assert response.json()["code"] == "invalid_request"
        assert response.json()["errors"][0]["field"] == next(iter(params))


class TestByCustomer:
    def test_lists_only_that_customer(
        self, auth_client, create, customer, make_product
    ):
        other = Customer.objects.create(name="Bruno Lima", email="bruno@example.com")
        product = make_product(stock=10)
        mine = create(customer, (product, 2))
        create(other, (product, 1))

        response = auth_client.get(f"{URL}customer/{customer.id}/")

        assert response.status_code == 200
        body = response.json()
        assert [t["id"] for t in body] == [mine]
        assert body[0]["items"][0]["quantity"] == 2

    def test_customer_without_transactions(self, auth_client):
        response = auth_client.get(f"{URL}customer/{uuid4()}/")

        assert response.status_code == 200
        assert response.json() == []

    def test_requires_authentication(self, api_client, customer):
        response = api_client.get(f"{URL}customer/{customer.id}/")
        assert response.status_code == 401
