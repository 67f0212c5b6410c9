"""Integration tests for POST /api/v1/transactions/.

Covers:
- Successful creation (201) with stock decrement and pending status.
- Error mapping: 400 invalid request, 404 unknown customer/product,
  409 insufficient stock, 503 contention, 500 storage failure.
- Authentication enforcement (401 without credentials).
"""

from __future__ import annotations

from decimal import Decimal
from unittest.mock import patch
from uuid import UUID, uuid4

import pytest
from django.db import DatabaseError, OperationalError

from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.transactions.models import Transaction
from modules.transactions.repositories.django_repository import (
    TransactionDjangoRepository,
)

pytestmark = pytest.mark.integration

URL = "/api/v1/transactions/"


def _payload(customer, *items):
    return {
        "customer_id": str(customer.id),
        "items": [{"product_id": str(p.id), "quantity": q} for p, q in items],
    }


class TestCreateSuccess:
    def test_single_item(self, auth_client, customer, make_product):
        product = make_product(price="10.00", stock=5)

        response = auth_client.post(
            URL, _payload(customer, (product, 3)), format="json"
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Transaction created successfully"
        txn = Transaction.objects.get(id=UUID(body["transaction_id"]))
        assert txn.status == "pending"
        assert txn.total_amount == Decimal("30.00")
        product.refresh_from_db()
        assert product.stock_quantity == 2

    def test_multi_item(self, auth_client, customer, make_product):
        a = make_product(price="10.00", stock=5)
        b = make_product(price="5.00", stock=5)

        response = auth_client.post(
            URL, _payload(customer, (a, 2), (b, 1)), format="json"
        )

        assert response.status_code == 201
        txn = Transaction.objects.get(id=response.json()["transaction_id"])
        assert txn.total_amount == Decimal("25.00")
        assert txn.items.count() == 2

    def test_client_price_is_ignored(self, auth_client, customer, make_product):
        product = make_product(price="10.00", stock=5)
        payload = _payload(customer, (product, 1))
        payload["items"][0]["unit_price"] = "0.01"

        response = auth_client.post(URL, payload, format="json")

        txn = Transaction.objects.get(id=response.json()["transaction_id"])
        assert txn.total_amount == Decimal("10.00")


class TestCreateErrors:
    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"items": []},
            {"customer_id": "x", "items": [{"product_id": "y", "quantity": 1}]},
            [],
        ],
    )
    def test_malformed_request(self, auth_client, payload):
        response = auth_client.post(URL, payload, format="json")

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "invalid_request"
        assert body["detail"] == "Customer ID and transaction items are required."
        assert body["errors"]

    def test_zero_quantity(self, auth_client, customer, make_product):
        product = make_product(stock=5)

        response = auth_client.post(
            URL, _payload(customer, (product, 0)), format="json"
        )

        assert response.status_code == 400
        assert Transaction.objects.count() == 0

    def test_unknown_customer(self, auth_client, make_product):
        product = make_product(stock=5)
        payload = {
            "customer_id": str(uuid4()),
            "items": [{"product_id": str(product.id), "quantity": 1}],
        }

        response = auth_client.post(URL, payload, format="json")

        assert response.status_code == 404
        assert response.json()["code"] == "customer_not_found"

    def test_unknown_product(self, auth_client, customer):
        missing = uuid4()
        payload = {
            "customer_id": str(customer.id),
            "items": [{"product_id": str(missing), "quantity": 1}],
        }

        response = auth_client.post(URL, payload, format="json")

        assert response.status_code == 404
        body = response.json()
        assert body["code"] == "product_not_found"
        assert body["detail"] == f"Product with ID {missing} not found."
        assert body["product_id"] == str(missing)

    def test_insufficient_stock(self, auth_client, customer, make_product):
        product = make_product(stock=2)

        response = auth_client.post(
            URL, _payload(customer, (product, 3)), format="json"
        )

        assert response.status_code == 409
        body = response.json()
        assert body["code"] == "insufficient_stock"
        assert body["requested"] == 3
        assert body["available"] == 2
        product.refresh_from_db()
        assert product.stock_quantity == 2

    def test_contention_is_retryable(self, auth_client, customer, make_product):
        product = make_product(stock=5)

        with patch.object(
            ProductDjangoRepository,
            "get_for_update",
            side_effect=OperationalError("could not obtain lock"),
        ):
            response = auth_client.post(
                URL, _payload(customer, (product, 1)), format="json"
            )

        assert response.status_code == 503
        assert response["Retry-After"] == "1"
        assert response.json()["code"] == "contention"

    def test_storage_failure_is_opaque(self, auth_client, customer, make_product):
        product = make_product(stock=5)

        with patch.object(
            TransactionDjangoRepository,
            "add_items",
            side_effect=DatabaseError("duplicate key value violates constraint"),
        ):
            response = auth_client.post(
                URL, _payload(customer, (product, 1)), format="json"
            )

        assert response.status_code == 500
        body = response.json()
        assert body == {
            "detail": "Error creating transaction.",
            "code": "storage_failure",
        }
        product.refresh_from_db()
        assert product.stock_quantity == 5
        assert Transaction.objects.count() == 0

    def test_requires_authentication(self, api_client, customer, make_product):
        product = make_product(stock=5)

        response = api_client.post(
            URL, _payload(customer, (product, 1)), format="json"
        )

        assert response.status_code == 401
        product.refresh_from_db()
        assert product.stock_quantity == 5
