"""Transaction service layer (Use Cases).

Orchestrates transaction creation and the surrounding read, status and
delete operations.

Creation pipeline:
1. ``OrderValidator.parse``    request shape.
2. ``OrderValidator.validate`` customer/products exist, stock suffices.
3. ``price_lines``             totals at the validated price snapshot.
4. ``TransactionLedger.commit`` atomic stock decrement + persistence.

Validation runs outside the unit of work and only reads; the ledger
re-checks stock under lock before anything is written.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Union

import structlog

from modules.transactions.constants import ALLOWED_STATUSES
from modules.transactions.dtos import CreateTransactionDTO
from modules.transactions.exceptions import InvalidRequest, TransactionNotFound
from modules.transactions.ledger import TransactionLedger
from modules.transactions.pricing import price_lines
from modules.transactions.readers import TransactionReader
from modules.transactions.validators import OrderValidator

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from modules.customers.repositories.interfaces import ICustomerRepository
    from modules.products.repositories.interfaces import IProductRepository
    from modules.transactions.dtos import TransactionOutputDTO
    from modules.transactions.models import Transaction
    from modules.transactions.repositories.interfaces import ITransactionRepository

logger = structlog.get_logger(__name__)


class TransactionService:
    """Application service for sales transaction use-cases.

    Receives repositories via constructor injection (DIP).
    """

    def __init__(
        self,
        transaction_repository: ITransactionRepository,
        customer_repository: ICustomerRepository,
        product_repository: IProductRepository,
    ) -> None:
        self._transaction_repo = transaction_repository
        self._validator = OrderValidator(customer_repository, product_repository)
        self._ledger = TransactionLedger(transaction_repository, product_repository)
        self._reader = TransactionReader(transaction_repository)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_transaction(
        self, request: Union[CreateTransactionDTO, Mapping[str, Any]]
    ) -> Transaction:
        """Create a transaction and decrement stock for every item.

        Raises:
            InvalidRequest: malformed request.
            CustomerNotFound: customer does not exist.
            ProductNotFound: a product does not exist.
            InsufficientStock: not enough stock (first failing item).
            Contention: concurrent commits held the locks for too long.
            StorageFailure: persistence failed; nothing was committed.
        """
        if isinstance(request, CreateTransactionDTO):
            dto = request
        else:
            dto = self._validator.parse(request)

        log = logger.bind(customer_id=str(dto.customer_id), item_count=len(dto.items))
        log.info("transaction.creation_started")

        validated = self._validator.validate(dto)
        priced = price_lines(validated.customer_id, validated.lines)
        txn = self._ledger.commit(priced)

        log.info(
            "transaction.created",
            transaction_id=str(txn.id),
            total_amount=str(txn.total_amount),
        )
        return txn

    def update_status(self, transaction_id: str, status: Any) -> TransactionOutputDTO:
        """Set the status of a transaction.

        Items and total are never touched.  Stock is not restored on
        cancellation.

        Raises:
            InvalidRequest: status is not pending/completed/cancelled.
            TransactionNotFound: the transaction does not exist.
        """
        if not isinstance(status, str) or status not in ALLOWED_STATUSES:
            raise InvalidRequest(
                "Invalid status provided.",
                errors=[
                    {
                        "field": "status",
                        "message": "Must be one of: "
                        + ", ".join(sorted(ALLOWED_STATUSES)),
                    }
                ],
            )
        if not self._transaction_repo.update_status(transaction_id, status):
            raise TransactionNotFound(transaction_id)
        return self._reader.get(transaction_id)

    def delete_transaction(self, transaction_id: str) -> None:
        """Remove a transaction and its items.  Stock is not restored.

        Raises:
            TransactionNotFound: the transaction does not exist.
        """
        if not self._transaction_repo.delete(transaction_id):
            raise TransactionNotFound(transaction_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_transaction(self, transaction_id: str) -> TransactionOutputDTO:
        """Raises ``TransactionNotFound`` if the transaction does not exist."""
        return self._reader.get(transaction_id)

    def list_transactions(
        self,
        filters: Optional[Dict[str, Any]] = None,
        queryset: Optional[QuerySet] = None,
    ) -> List[TransactionOutputDTO]:
        """Nested transactions, newest first.

        *filters* are ORM look-ups; *queryset* is a pre-filtered starting
        set such as ``TransactionFilter(...).qs``.
        """
        return self._reader.list(filters, queryset=queryset)

    def list_customer_transactions(
        self, customer_id: str
    ) -> List[TransactionOutputDTO]:
        """Transactions of one customer; empty list when there are none."""
        return self._reader.list_for_customer(customer_id)
