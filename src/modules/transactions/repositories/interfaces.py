"""Transaction repository interface.

Extends ``IRepository[Transaction]`` with the writes the ledger performs
inside its unit of work (header insert, item inserts) and the flat row
reads the reader groups into nested transactions.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from modules.transactions.models import Transaction, TransactionItem
    from modules.transactions.pricing import PricedLine


class ITransactionRepository(IRepository["Transaction"]):
    """Repository contract for the Transaction aggregate.

    The aggregate includes its TransactionItem children.  Header and item
    inserts are expected to run inside the caller's atomic block.
    """

    @abstractmethod
    def create_header(self, customer_id: Any, total_amount: Decimal) -> Transaction:
        """Insert a ``pending`` transaction header with the given total."""

    @abstractmethod
    def add_items(
        self, transaction: Transaction, lines: Sequence[PricedLine]
    ) -> List[TransactionItem]:
        """Insert the line items of *transaction* in the given order."""

    @abstractmethod
    def get_rows(self, id: str) -> List[Dict[str, Any]]:
        """Flat rows (one per item, header repeated) of one transaction."""

    @abstractmethod
    def list_rows(
        self,
        filters: Optional[Dict[str, Any]] = None,
        queryset: Optional[QuerySet] = None,
    ) -> List[Dict[str, Any]]:
        """Flat rows of the transactions matching *filters*.

        *queryset* narrows the starting set (e.g. one already filtered by a
        FilterSet); all transactions otherwise.
        """

    @abstractmethod
    def update_status(self, id: str, status: str) -> int:
        """Set the status of a transaction; returns the affected row count."""
