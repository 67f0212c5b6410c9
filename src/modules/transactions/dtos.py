"""Transaction DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer and the Service layer.
DTOs are immutable (``frozen=True``).

- ``CreateTransactionItemDTO``: input for a single line item.
- ``CreateTransactionDTO``: input for transaction creation (nested items).
- ``TransactionItemOutputDTO``: output for a single line item.
- ``TransactionOutputDTO``: nested output (header + items).
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateTransactionItemDTO(BaseModel):
    """Immutable DTO for a single line item in a creation request.

    ``unit_price`` is never accepted from the caller; the ledger reads it
    from the catalog.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    product_id: UUID
    quantity: int = Field(strict=True)

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be at least 1.")
        return v


class CreateTransactionDTO(BaseModel):
    """Immutable DTO for transaction creation requests.

    Duplicate product IDs are allowed; the validator checks their
    quantities cumulatively.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    customer_id: UUID
    items: List[CreateTransactionItemDTO]

    @field_validator("items")
    @classmethod
    def items_must_not_be_empty(
        cls, v: List[CreateTransactionItemDTO]
    ) -> List[CreateTransactionItemDTO]:
        if not v:
            raise ValueError("Transaction must have at least one item.")
        return v


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class TransactionItemOutputDTO(BaseModel):
    """Immutable DTO for line item API responses."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    product_id: UUID
    product_name: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal


class TransactionOutputDTO(BaseModel):
    """Immutable DTO for transaction API responses."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    customer_id: UUID
    total_amount: Decimal
    status: str
    created_at: datetime
    items: List[TransactionItemOutputDTO]
