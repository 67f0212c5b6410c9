"""Product repository interface (Catalog Gateway).

Extends ``IRepository[Product]`` with the two primitives the sales ledger
needs on top of plain reads: a locking read and a conditional decrement.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.products.models import Product


class IProductRepository(IRepository["Product"]):
    """Repository contract for the Product aggregate."""

    @abstractmethod
    def get_by_sku(self, sku: str) -> Optional[Product]:
        """Retrieve a product by SKU."""

    @abstractmethod
    def get_for_update(self, id: str) -> Optional[Product]:
        """Retrieve a product with a row-level lock (SELECT FOR UPDATE).

        Must be called inside an atomic block; the lock is held until
        that block ends.  Returns ``None`` if the product does not exist.
        """

    @abstractmethod
    def decrement_stock(self, id: str, quantity: int) -> bool:
        """Atomically subtract *quantity* from the stock if enough is left.

        Single storage operation: succeeds only when
        ``stock_quantity >= quantity``.  Returns ``True`` on success and
        ``False`` (stock untouched) otherwise.
        """
