"""Order validation for transaction creation.

Two stages:

``parse``    request shape (Pydantic DTOs) -> ``InvalidRequest``.
``validate`` customer and catalog look-ups -> ``CustomerNotFound``,
             ``ProductNotFound`` or ``InsufficientStock``.

Validation only reads.  Stock is decremented exclusively by the ledger,
which re-checks it under lock, so the answer given here is advisory: it
rejects hopeless requests early with a precise error, nothing more.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Tuple
from uuid import UUID

import structlog
from django.conf import settings
from pydantic import ValidationError

from modules.transactions.dtos import CreateTransactionDTO
from modules.transactions.exceptions import (
    CustomerNotFound,
    InsufficientStock,
    InvalidRequest,
    ProductNotFound,
)

if TYPE_CHECKING:
    from modules.customers.repositories.interfaces import ICustomerRepository
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ValidatedLine:
    product_id: UUID
    product_name: str
    quantity: int
    unit_price: Decimal
    available: int


@dataclass(frozen=True)
class ValidatedOrder:
    customer_id: UUID
    lines: Tuple[ValidatedLine, ...]


def _format_errors(exc: ValidationError) -> List[Dict[str, str]]:
    return [
        {
            "field": ".".join(str(part) for part in error["loc"]) or "body",
            "message": error["msg"],
        }
        for error in exc.errors()
    ]


class OrderValidator:
    """Checks a creation request against the customer and product stores."""

    def __init__(
        self,
        customer_repository: ICustomerRepository,
        product_repository: IProductRepository,
    ) -> None:
        self._customer_repo = customer_repository
        self._product_repo = product_repository

    def parse(self, payload: Any) -> CreateTransactionDTO:
        """Turn a raw request body into a ``CreateTransactionDTO``.

        Raises:
            InvalidRequest: missing/malformed fields, empty ``items``,
                non-positive quantities, or too many items.
        """
        if not isinstance(payload, Mapping):
            raise InvalidRequest(
                "Customer ID and transaction items are required.",
                errors=[{"field": "body", "message": "Expected a JSON object."}],
            )
        try:
            dto = CreateTransactionDTO.model_validate(dict(payload))
        except ValidationError as exc:
            raise InvalidRequest(
                "Customer ID and transaction items are required.",
                errors=_format_errors(exc),
            ) from exc

        max_items = settings.TRANSACTION_MAX_ITEMS
        if len(dto.items) > max_items:
            raise InvalidRequest(
                f"A transaction accepts at most {max_items} items.",
                errors=[
                    {"field": "items", "message": f"At most {max_items} items."}
                ],
            )
        return dto

    def validate(self, dto: CreateTransactionDTO) -> ValidatedOrder:
        """Resolve every item against the current catalog state.

        Items are checked in request order and the first failing item
        determines the error.  Repeated products are checked against the
        cumulative quantity requested so far.

        Raises:
            CustomerNotFound: the customer does not exist.
            ProductNotFound: an item references an unknown product.
            InsufficientStock: an item asks for more than is in stock.
        """
        log = logger.bind(customer_id=str(dto.customer_id))

        if not self._customer_repo.exists(str(dto.customer_id)):
            log.info("transaction.rejected", reason="customer_not_found")
            raise CustomerNotFound(dto.customer_id)

        requested: Dict[UUID, int] = defaultdict(int)
        lines = []
        for item in dto.items:
            product = self._product_repo.get_by_id(str(item.product_id))
            if product is None:
                log.info(
                    "transaction.rejected",
                    reason="product_not_found",
                    product_id=str(item.product_id),
                )
                raise ProductNotFound(item.product_id)

            requested[item.product_id] += item.quantity
            if requested[item.product_id] > product.stock_quantity:
                log.info(
                    "transaction.rejected",
                    reason="insufficient_stock",
                    product_id=str(item.product_id),
                    requested=requested[item.product_id],
                    available=product.stock_quantity,
                )
                raise InsufficientStock(
                    item.product_id,
                    requested=requested[item.product_id],
                    available=product.stock_quantity,
                )

            lines.append(
                ValidatedLine(
                    product_id=item.product_id,
                    product_name=product.name,
                    quantity=item.quantity,
                    unit_price=product.price,
                    available=product.stock_quantity,
                )
            )

        return ValidatedOrder(customer_id=dto.customer_id, lines=tuple(lines))
