"""Customer model.

Customers are owned by the customer store; the sales ledger only checks
that a customer exists before recording a transaction against it.

- Email must be unique in the system (normalised to lowercase on save).
- Soft delete via ``deleted_at`` (inherited from SoftDeleteModel).  A
  soft-deleted customer can no longer buy, but keeps its transactions.
"""

from __future__ import annotations

from django.db import models

from modules.core.models import SoftDeleteModel


class Customer(SoftDeleteModel):
    """Customer referenced by sales transactions."""

    name = models.CharField(max_length=255)
    email = models.EmailField(max_length=254, unique=True)
    phone = models.CharField(max_length=20, blank=True, default="")

    class Meta:
        db_table = "customers"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["-created_at"], name="customers_created_idx"),
        ]

    def save(self, *args, **kwargs) -> None:
        if self.email:
            self.email = self.email.strip().lower()
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.name} <{self.email}>"
