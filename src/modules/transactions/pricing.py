"""Pricing aggregation for validated orders.

Pure functions: no I/O, no side effects.  Used twice per creation request,
once on the prices observed during validation and once by the ledger on
the prices read under the commit lock.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable, Protocol, Tuple
from uuid import UUID

from modules.transactions.constants import CENT, MAX_TOTAL_AMOUNT
from modules.transactions.exceptions import PricingOverflow


class PriceableLine(Protocol):
    product_id: UUID
    quantity: int
    unit_price: Decimal


@dataclass(frozen=True)
class PricedLine:
    product_id: UUID
    quantity: int
    unit_price: Decimal
    subtotal: Decimal


@dataclass(frozen=True)
class PricedOrder:
    customer_id: UUID
    lines: Tuple[PricedLine, ...]
    total_amount: Decimal


def price_line(line: PriceableLine) -> PricedLine:
    unit_price = Decimal(line.unit_price).quantize(CENT)
    return PricedLine(
        product_id=line.product_id,
        quantity=line.quantity,
        unit_price=unit_price,
        subtotal=(unit_price * line.quantity).quantize(CENT),
    )


def price_lines(customer_id: Any, lines: Iterable[PriceableLine]) -> PricedOrder:
    """Compute per-line subtotals and the order total.

    The total is the exact sum of the subtotals, so a stored transaction
    built from the result always satisfies ``total == Σ qty × price``.

    Raises:
        PricingOverflow: the total exceeds ``MAX_TOTAL_AMOUNT``.
    """
    priced = tuple(price_line(line) for line in lines)
    total = sum((line.subtotal for line in priced), Decimal("0.00"))
    if total > MAX_TOTAL_AMOUNT:
        raise PricingOverflow(
            f"Order total {total} exceeds the maximum storable amount "
            f"{MAX_TOTAL_AMOUNT}."
        )
    return PricedOrder(customer_id=customer_id, lines=priced, total_amount=total)
