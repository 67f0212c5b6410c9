"""Django ORM implementation of the Transaction repository.

Satisfies ``ITransactionRepository`` using Django's QuerySet API.

Writes (``create_header``/``add_items``) do not open their own atomic
block: they are steps of the ledger's unit of work and must commit or
roll back together with the stock decrements.

Reads return flat rows (one per line item, header fields repeated)
produced by a single LEFT JOIN query, so the reader never triggers N+1
look-ups.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction as db_transaction
from django.db.models import F, QuerySet
from django.utils import timezone

from modules.transactions.constants import INITIAL_STATUS
from modules.transactions.models import Transaction, TransactionItem
from modules.transactions.repositories.interfaces import ITransactionRepository

if TYPE_CHECKING:
    from modules.transactions.pricing import PricedLine

logger = structlog.get_logger(__name__)

ROW_ORDERING = ("-created_at", "-id", "items__position")


class TransactionDjangoRepository(ITransactionRepository):
    """Concrete Transaction repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Ledger writes
    # ------------------------------------------------------------------

    def create_header(self, customer_id: Any, total_amount: Decimal) -> Transaction:
        txn = Transaction(
            customer_id=customer_id,
            total_amount=total_amount,
            status=INITIAL_STATUS,
        )
        txn.save(force_insert=True)
        return txn

    def add_items(
        self, transaction: Transaction, lines: Sequence[PricedLine]
    ) -> List[TransactionItem]:
        items = []
        for position, line in enumerate(lines):
            item = TransactionItem(
                transaction=transaction,
                product_id=line.product_id,
                position=position,
                quantity=line.quantity,
                unit_price=line.unit_price,
            )
            item.save(force_insert=True)
            items.append(item)
        return items

    # ------------------------------------------------------------------
    # Read (flat rows)
    # ------------------------------------------------------------------

    def get_rows(self, id: str) -> List[Dict[str, Any]]:
        """Rows of a single transaction; empty for unknown or invalid IDs."""
        try:
            return self._rows(Transaction.objects.filter(id=id))
        except (ValueError, ValidationError):
            return []

    def queryset(self) -> QuerySet:
        """Unevaluated queryset of all transactions, for FilterSets."""
        return Transaction.objects.all()

    def list_rows(
        self,
        filters: Optional[Dict[str, Any]] = None,
        queryset: Optional[QuerySet] = None,
    ) -> List[Dict[str, Any]]:
        """Rows of the transactions in *queryset* (default: all), newest first.

        Supported filter keys (ORM look-ups):
        - ``status``
        - ``customer_id``
        - ``created_at__date__gte`` / ``created_at__date__lte``

        Invalid look-up values (e.g. malformed UUIDs) yield no rows.
        """
        if queryset is None:
            queryset = self.queryset()
        try:
            if filters:
                queryset = queryset.filter(**filters)
            return self._rows(queryset)
        except (ValueError, ValidationError):
            return []

    @staticmethod
    def _rows(queryset: QuerySet) -> List[Dict[str, Any]]:
        return list(
            queryset.order_by(*ROW_ORDERING).values(
                "id",
                "customer_id",
                "total_amount",
                "status",
                "created_at",
                item_id=F("items__id"),
                product_id=F("items__product_id"),
                product_name=F("items__product__name"),
                quantity=F("items__quantity"),
                unit_price=F("items__unit_price"),
                subtotal=F("items__subtotal"),
            )
        )

    # ------------------------------------------------------------------
    # IRepository contract
    # ------------------------------------------------------------------

    def get_by_id(self, id: str) -> Optional[Transaction]:
        """Retrieve a transaction with its items prefetched.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return (
                Transaction.objects.prefetch_related("items")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Transaction]:
        queryset = Transaction.objects.prefetch_related("items")
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    @db_transaction.atomic
    def save(self, entity: Transaction) -> Transaction:
        """Persist header changes (status only; items are immutable)."""
        entity.save()
        logger.info("transaction.saved", transaction_id=str(entity.id))
        return entity

    @db_transaction.atomic
    def update_status(self, id: str, status: str) -> int:
        try:
            affected = Transaction.objects.filter(id=id).update(
                status=status, updated_at=timezone.now()
            )
        except (ValueError, ValidationError):
            return 0
        logger.info(
            "transaction.status_updated",
            transaction_id=str(id),
            status=status,
            affected=affected,
        )
        return affected

    @db_transaction.atomic
    def delete(self, id: str) -> bool:
        """Hard-delete a transaction and (CASCADE) its items."""
        try:
            deleted, _ = Transaction.objects.filter(id=id).delete()
        except (ValueError, ValidationError):
            return False
        if deleted:
            logger.info("transaction.deleted", transaction_id=str(id))
        return deleted > 0
