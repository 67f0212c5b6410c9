"""Transaction domain exceptions.

Raised by the Service Layer (validator, ledger, reader) when a request
cannot be honoured.  The API layer (Views) translates them into HTTP
responses using ``code`` and ``context``.

``PricingOverflow`` sits outside ``TransactionError``: it signals a
misconfigured catalog, not something the caller can fix.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class TransactionError(Exception):
    """Base class for classified transaction failures."""

    code = "transaction_error"
    default_message = "Transaction request failed."

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def context(self) -> Dict[str, Any]:
        """Extra fields the caller needs to act on the failure."""
        return {}


class InvalidRequest(TransactionError):
    """The request payload is missing fields or malformed."""

    code = "invalid_request"
    default_message = "Invalid transaction request."

    def __init__(
        self,
        message: Optional[str] = None,
        errors: Optional[List[Dict[str, str]]] = None,
    ) -> None:
        super().__init__(message)
        self.errors = errors or []

    @property
    def context(self) -> Dict[str, Any]:
        return {"errors": self.errors}


class CustomerNotFound(TransactionError):
    """The customer referenced by the request does not exist."""

    code = "customer_not_found"

    def __init__(self, customer_id: Any) -> None:
        self.customer_id = str(customer_id)
        super().__init__(f"Customer {self.customer_id} not found.")

    @property
    def context(self) -> Dict[str, Any]:
        return {"customer_id": self.customer_id}


class ProductNotFound(TransactionError):
    """A product referenced by a line item does not exist."""

    code = "product_not_found"

    def __init__(self, product_id: Any) -> None:
        self.product_id = str(product_id)
        super().__init__(f"Product with ID {self.product_id} not found.")

    @property
    def context(self) -> Dict[str, Any]:
        return {"product_id": self.product_id}


class InsufficientStock(TransactionError):
    """Not enough stock left to cover a line item.

    ``requested`` is the quantity the whole order asks of the product, up to
    and including the failing line; ``available`` is the stock the order
    found before any of its own decrements.
    """

    code = "insufficient_stock"

    def __init__(self, product_id: Any, requested: int, available: int) -> None:
        self.product_id = str(product_id)
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for product {self.product_id}: "
            f"requested {requested}, available {available}."
        )

    @property
    def context(self) -> Dict[str, Any]:
        return {
            "product_id": self.product_id,
            "requested": self.requested,
            "available": self.available,
        }


class Contention(TransactionError):
    """The commit could not acquire its locks in time; retry the request."""

    code = "contention"
    default_message = "Transaction could not be committed due to concurrent updates."


class StorageFailure(TransactionError):
    """The underlying store failed; nothing was committed."""

    code = "storage_failure"
    default_message = "Error creating transaction."


class TransactionNotFound(TransactionError):
    """The requested transaction does not exist."""

    code = "not_found"

    def __init__(self, transaction_id: Any) -> None:
        self.transaction_id = str(transaction_id)
        super().__init__(f"Transaction {self.transaction_id} not found.")

    @property
    def context(self) -> Dict[str, Any]:
        return {"transaction_id": self.transaction_id}


class PricingOverflow(ArithmeticError):
    """An order total does not fit the storable amount range."""
