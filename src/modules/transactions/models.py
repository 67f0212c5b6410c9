"""Transaction and TransactionItem models.

Rules implemented here:
- Initial status is ``pending``; status is one of pending/completed/cancelled.
- Customer FK uses PROTECT to preserve sales history.
- TransactionItem snapshots the product price at commit time (``unit_price``).
- TransactionItem subtotal is always ``quantity * unit_price`` (set on insert).
- Items are immutable once inserted; only the header status may change.
- Deleting a Transaction removes its items (CASCADE).  Stock is not restored.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel
from modules.transactions.constants import INITIAL_STATUS, TransactionStatus


class Transaction(BaseModel):
    """Sales transaction header.

    ``total_amount`` is written once by the ledger together with the items
    and always equals the sum of the item subtotals.  ``created_at`` is the
    transaction date.
    """

    customer: models.ForeignKey = models.ForeignKey(
        "customers.Customer",
        on_delete=models.PROTECT,
        related_name="transactions",
    )
    status: models.CharField = models.CharField(
        max_length=20,
        choices=TransactionStatus.choices,
        default=INITIAL_STATUS,
    )
    total_amount: models.DecimalField = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )

    class Meta:
        db_table = "transactions"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="transactions_status_idx"),
            models.Index(
                fields=["customer", "-created_at"],
                name="transactions_customer_idx",
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(status__in=TransactionStatus.values),
                name="transactions_status_valid",
            ),
        ]

    def items_total(self) -> Decimal:
        """Sum of the stored item subtotals."""
        return sum((item.subtotal for item in self.items.all()), Decimal("0.00"))

    def __str__(self) -> str:
        return f"Transaction {self.id} ({self.status})"


class TransactionItem(BaseModel):
    """Line item linking a Transaction to a Product.

    ``unit_price`` is a **snapshot** of the product price read under the
    commit lock; it never changes even if the product price does later.
    ``position`` keeps the order in which items were submitted.
    """

    transaction: models.ForeignKey = models.ForeignKey(
        "transactions.Transaction",
        on_delete=models.CASCADE,
        related_name="items",
    )
    product: models.ForeignKey = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="transaction_items",
    )
    position: models.PositiveSmallIntegerField = models.PositiveSmallIntegerField(
        default=0
    )
    quantity: models.PositiveIntegerField = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
    )
    unit_price: models.DecimalField = models.DecimalField(
        max_digits=10,
        decimal_places=2,
    )
    subtotal: models.DecimalField = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        editable=False,
    )

    class Meta:
        db_table = "transaction_items"
        ordering = ["position"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="transaction_items_quantity_positive",
            ),
        ]

    def clean(self) -> None:
        super().clean()
        if self.quantity is not None and self.quantity < 1:
            raise ValidationError({"quantity": "Quantity must be at least 1."})

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self._state.adding:
            raise ValidationError("Transaction items cannot be modified.")
        if self.unit_price is None:
            raise ValidationError({"unit_price": "Unit price is required."})
        self.subtotal = self.quantity * self.unit_price
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.product_id} x{self.quantity} (${self.subtotal})"
