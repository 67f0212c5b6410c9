"""Transaction ledger: the commit protocol.

Turns a priced order into a durable ``Transaction`` in one database
transaction (``transaction.atomic``):

1. Bound lock waits for this unit of work.
2. Walk the lines **sorted by product id**, whatever their request order:
   lock the product row, then apply the conditional decrement
   (``UPDATE ... WHERE stock >= quantity``).  A failed decrement aborts the
   whole unit with ``InsufficientStock``.
3. Re-price from the prices read under the lock.
4. Insert the header (``pending``) and the items (request order).
5. Commit.

Any exception inside the atomic block makes Django roll back every step,
so a rejected or failed commit leaves no header, no items and no stock
change behind.  Every commit path must take product locks in the same
ascending order; that is the only deadlock avoidance in place.
"""

from __future__ import annotations

from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING, Dict, Iterator, List
from uuid import UUID

import structlog
from django.conf import settings
from django.db import DatabaseError, OperationalError, connection, transaction

from modules.transactions.exceptions import (
    Contention,
    InsufficientStock,
    ProductNotFound,
    StorageFailure,
)
from modules.transactions.pricing import PricedLine, PricedOrder, price_lines

if TYPE_CHECKING:
    from modules.products.repositories.interfaces import IProductRepository
    from modules.transactions.models import Transaction
    from modules.transactions.repositories.interfaces import ITransactionRepository

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class _CommittedLine:
    product_id: UUID
    quantity: int
    unit_price: Decimal


def lock_order(lines: List[PricedLine]) -> List[int]:
    """Indexes of *lines* in the global product lock order."""
    return sorted(range(len(lines)), key=lambda i: str(lines[i].product_id))


class TransactionLedger:
    """Owns the atomic unit of work for transaction creation."""

    def __init__(
        self,
        transaction_repository: ITransactionRepository,
        product_repository: IProductRepository,
    ) -> None:
        self._transaction_repo = transaction_repository
        self._product_repo = product_repository

    def commit(self, order: PricedOrder) -> Transaction:
        """Persist *order* with its stock decrements, all or nothing.

        Raises:
            InsufficientStock: stock was consumed since validation.
            ProductNotFound: a product disappeared since validation.
            Contention: locks could not be acquired in time (retryable).
            StorageFailure: the database failed; nothing was committed.
        """
        log = logger.bind(
            customer_id=str(order.customer_id), item_count=len(order.lines)
        )
        try:
            with self._session_lock_wait(), transaction.atomic():
                self._bound_lock_wait()
                committed = self._reserve_stock(order, log)
                final = price_lines(order.customer_id, committed)
                txn = self._transaction_repo.create_header(
                    order.customer_id, final.total_amount
                )
                self._transaction_repo.add_items(txn, final.lines)
        except OperationalError as exc:
            log.warning("transaction.commit_contention", error=str(exc))
            raise Contention() from exc
        except DatabaseError as exc:
            log.error("transaction.commit_failed", error=str(exc))
            raise StorageFailure() from exc

        log.info(
            "transaction.committed",
            transaction_id=str(txn.id),
            total_amount=str(final.total_amount),
        )
        return txn

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _reserve_stock(self, order: PricedOrder, log) -> List[_CommittedLine]:
        """Lock and decrement every product; return lines in request order."""
        lines = list(order.lines)
        committed: Dict[int, _CommittedLine] = {}
        reserved: Dict[str, int] = defaultdict(int)

        for index in lock_order(lines):
            line = lines[index]
            product_id = str(line.product_id)

            product = self._product_repo.get_for_update(product_id)
            if product is None:
                raise ProductNotFound(line.product_id)

            if not self._product_repo.decrement_stock(product_id, line.quantity):
                # Figures cover the whole order, as in validation: earlier
                # lines for the same product were already decremented here.
                current = self._product_repo.get_by_id(product_id)
                requested = reserved[product_id] + line.quantity
                available = reserved[product_id] + (
                    current.stock_quantity if current else 0
                )
                log.info(
                    "transaction.rejected",
                    reason="insufficient_stock",
                    stage="commit",
                    product_id=product_id,
                    requested=requested,
                    available=available,
                )
                raise InsufficientStock(
                    line.product_id, requested=requested, available=available
                )

            if product.price != line.unit_price:
                log.warning(
                    "transaction.price_changed",
                    product_id=product_id,
                    validated_price=str(line.unit_price),
                    committed_price=str(product.price),
                )

            reserved[product_id] += line.quantity
            log.info(
                "transaction.stock_reserved",
                product_id=product_id,
                quantity=line.quantity,
                remaining=product.stock_quantity - line.quantity,
            )
            committed[index] = _CommittedLine(
                product_id=line.product_id,
                quantity=line.quantity,
                unit_price=product.price,
            )

        return [committed[i] for i in range(len(lines))]

    def _bound_lock_wait(self) -> None:
        """Limit how long this unit of work may wait for row locks."""
        timeout_ms = int(settings.TRANSACTION_LOCK_TIMEOUT_MS)
        if timeout_ms > 0 and connection.vendor == "postgresql":
            with connection.cursor() as cursor:
                cursor.execute(f"SET LOCAL lock_timeout = {timeout_ms}")

    @contextmanager
    def _session_lock_wait(self) -> Iterator[None]:
        """MySQL has no transaction-scoped lock timeout.

        Set it on the session for the duration of the commit and put the
        previous value back afterwards, so pooled connections keep their
        own setting.
        """
        timeout_ms = int(settings.TRANSACTION_LOCK_TIMEOUT_MS)
        if timeout_ms <= 0 or connection.vendor != "mysql":
            yield
            return

        with connection.cursor() as cursor:
            cursor.execute("SELECT @@SESSION.innodb_lock_wait_timeout")
            (previous,) = cursor.fetchone()
            cursor.execute(
                "SET SESSION innodb_lock_wait_timeout = %s",
                [max(1, timeout_ms // 1000)],
            )
        try:
            yield
        finally:
            with connection.cursor() as cursor:
                cursor.execute(
                    "SET SESSION innodb_lock_wait_timeout = %s", [previous]
                )
