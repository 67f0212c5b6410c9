"""Unit tests for order pricing."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID, uuid4

import pytest

from modules.transactions.constants import MAX_TOTAL_AMOUNT
from modules.transactions.exceptions import PricingOverflow, TransactionError
from modules.transactions.pricing import price_line, price_lines

pytestmark = pytest.mark.unit


@dataclass(frozen=True)
class Line:
    product_id: UUID
    quantity: int
    unit_price: Decimal


class TestPriceLine:
    def test_subtotal_is_quantity_times_price(self):
        priced = price_line(Line(uuid4(), 3, Decimal("10.00")))
        assert priced.subtotal == Decimal("30.00")

    def test_quantizes_to_cents(self):
        priced = price_line(Line(uuid4(), 3, Decimal("0.1")))
        assert priced.unit_price == Decimal("0.10")
        assert priced.subtotal == Decimal("0.30")
        assert priced.subtotal.as_tuple().exponent == -2


class TestPriceLines:
    def test_total_is_sum_of_subtotals(self):
        customer_id = uuid4()
        order = price_lines(
            customer_id,
            [
                Line(uuid4(), 2, Decimal("10.00")),
                Line(uuid4(), 1, Decimal("5.50")),
            ],
        )
        assert order.customer_id == customer_id
        assert order.total_amount == Decimal("25.50")
        assert order.total_amount == sum(line.subtotal for line in order.lines)

    def test_keeps_line_order(self):
        ids = [uuid4() for _ in range(3)]
        order = price_lines(uuid4(), [Line(i, 1, Decimal("1.00")) for i in ids])
        assert [line.product_id for line in order.lines] == ids

    def test_exact_decimal_arithmetic(self):
        order = price_lines(
            uuid4(),
            [Line(uuid4(), 1, Decimal("0.10")), Line(uuid4(), 1, Decimal("0.20"))],
        )
        assert order.total_amount == Decimal("0.30")

    def test_total_at_limit_is_accepted(self):
        order = price_lines(uuid4(), [Line(uuid4(), 1, MAX_TOTAL_AMOUNT)])
        assert order.total_amount == MAX_TOTAL_AMOUNT

    def test_overflow_raises(self):
        with pytest.raises(PricingOverflow):
            price_lines(
                uuid4(),
                [
                    Line(uuid4(), 1, MAX_TOTAL_AMOUNT),
                    Line(uuid4(), 1, Decimal("0.01")),
                ],
            )

    def test_overflow_is_not_a_transaction_error(self):
        assert not issubclass(PricingOverflow, TransactionError)
