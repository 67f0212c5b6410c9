"""Transaction domain constants.

Status choices for the transaction lifecycle and the numeric bounds of
stored amounts.
"""

from decimal import Decimal

from django.db import models


class TransactionStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"


# Any status may be set from any other; only the value set is constrained.
ALLOWED_STATUSES: frozenset[str] = frozenset(TransactionStatus.values)

INITIAL_STATUS = TransactionStatus.PENDING

CENT = Decimal("0.01")

# ``Transaction.total_amount`` is DECIMAL(12, 2).
MAX_TOTAL_AMOUNT = Decimal("9999999999.99")
