"""Read-side projection of stored transactions.

The repository returns flat rows (one per line item, header fields
repeated).  ``group_rows`` folds them into nested transactions, keeping
the first-seen order of both transactions and items.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

from modules.transactions.dtos import TransactionItemOutputDTO, TransactionOutputDTO
from modules.transactions.exceptions import TransactionNotFound

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from modules.transactions.repositories.interfaces import ITransactionRepository


def group_rows(rows: Iterable[Dict[str, Any]]) -> List[TransactionOutputDTO]:
    grouped: Dict[Any, Dict[str, Any]] = {}
    for row in rows:
        header = grouped.get(row["id"])
        if header is None:
            header = grouped[row["id"]] = {
                "id": row["id"],
                "customer_id": row["customer_id"],
                "total_amount": row["total_amount"],
                "status": row["status"],
                "created_at": row["created_at"],
                "items": [],
            }
        # LEFT JOIN: a transaction without items yields one item-less row.
        if row.get("item_id") is None:
            continue
        header["items"].append(
            TransactionItemOutputDTO(
                id=row["item_id"],
                product_id=row["product_id"],
                product_name=row["product_name"],
                quantity=row["quantity"],
                unit_price=row["unit_price"],
                subtotal=row["subtotal"],
            )
        )
    return [TransactionOutputDTO(**header) for header in grouped.values()]


class TransactionReader:
    """Nested views over the transaction store."""

    def __init__(self, transaction_repository: ITransactionRepository) -> None:
        self._repo = transaction_repository

    def get(self, transaction_id: str) -> TransactionOutputDTO:
        """Raises ``TransactionNotFound`` when nothing matches."""
        transactions = group_rows(self._repo.get_rows(transaction_id))
        if not transactions:
            raise TransactionNotFound(transaction_id)
        return transactions[0]

    def list(
        self,
        filters: Optional[Dict[str, Any]] = None,
        queryset: Optional[QuerySet] = None,
    ) -> List[TransactionOutputDTO]:
        return group_rows(self._repo.list_rows(filters, queryset=queryset))

    def list_for_customer(self, customer_id: str) -> List[TransactionOutputDTO]:
        return self.list({"customer_id": customer_id})
