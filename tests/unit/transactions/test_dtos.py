"""Unit tests for transaction DTOs."""

from __future__ import annotations

from uuid import uuid4

import pytest
from pydantic import ValidationError

from modules.transactions.dtos import CreateTransactionDTO, CreateTransactionItemDTO

pytestmark = pytest.mark.unit


class TestCreateTransactionItemDTO:
    def test_accepts_positive_quantity(self):
        item = CreateTransactionItemDTO(product_id=uuid4(), quantity=3)
        assert item.quantity == 3

    def test_parses_product_id_from_string(self):
        product_id = uuid4()
        item = CreateTransactionItemDTO(product_id=str(product_id), quantity=1)
        assert item.product_id == product_id

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_rejects_non_positive_quantity(self, quantity):
        with pytest.raises(ValidationError, match="Quantity must be at least 1."):
            CreateTransactionItemDTO(product_id=uuid4(), quantity=quantity)

    @pytest.mark.parametrize("quantity", ["2", 2.0, True])
    def test_rejects_non_integer_quantity(self, quantity):
        with pytest.raises(ValidationError):
            CreateTransactionItemDTO(product_id=uuid4(), quantity=quantity)

    def test_rejects_malformed_product_id(self):
        with pytest.raises(ValidationError):
            CreateTransactionItemDTO(product_id="not-a-uuid", quantity=1)

    def test_ignores_client_supplied_price(self):
        item = CreateTransactionItemDTO(
            product_id=uuid4(), quantity=1, unit_price="0.01"
        )
        assert not hasattr(item, "unit_price")

    def test_is_frozen(self):
        item = CreateTransactionItemDTO(product_id=uuid4(), quantity=1)
        with pytest.raises(ValidationError):
            item.quantity = 5


class TestCreateTransactionDTO:
    def test_valid(self):
        dto = CreateTransactionDTO(
            customer_id=uuid4(),
            items=[{"product_id": str(uuid4()), "quantity": 2}],
        )
        assert len(dto.items) == 1

    def test_rejects_empty_items(self):
        with pytest.raises(
            ValidationError, match="Transaction must have at least one item."
        ):
            CreateTransactionDTO(customer_id=uuid4(), items=[])

    def test_requires_customer_id(self):
        with pytest.raises(ValidationError):
            CreateTransactionDTO(items=[{"product_id": str(uuid4()), "quantity": 1}])

    def test_allows_duplicate_products(self):
        product_id = uuid4()
        dto = CreateTransactionDTO(
            customer_id=uuid4(),
            items=[
                {"product_id": product_id, "quantity": 1},
                {"product_id": product_id, "quantity": 2},
            ],
        )
        assert [i.quantity for i in dto.items] == [1, 2]
