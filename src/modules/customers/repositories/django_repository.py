"""Django ORM implementation of the Customer repository.

Satisfies ``ICustomerRepository`` using Django's QuerySet API.
Error handling follows the Null Object pattern: methods return ``None``
(or ``False``) instead of raising; the Service Layer decides how to
translate a missing customer into a domain error.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction

from modules.customers.models import Customer
from modules.customers.repositories.interfaces import ICustomerRepository

logger = structlog.get_logger(__name__)


class CustomerDjangoRepository(ICustomerRepository):
    """Concrete Customer repository backed by Django ORM."""

    def get_by_id(self, id: str) -> Optional[Customer]:
        """Retrieve a live customer by primary key.

        Returns ``None`` for soft-deleted, non-existent or invalid IDs
        (e.g. malformed UUID).
        """
        try:
            return Customer.objects.alive().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def exists(self, id: str) -> bool:
        try:
            return Customer.objects.alive().filter(id=id).exists()
        except (ValueError, ValidationError):
            return False

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Customer]:
        """List live customers with optional Django ORM look-ups.

        Example::

            {"name__icontains": "acme"}
        """
        queryset = Customer.objects.alive()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    @transaction.atomic
    def save(self, entity: Customer) -> Customer:
        """Persist (create or update) a customer."""
        is_new = entity._state.adding
        entity.save()
        logger.info("customer.saved", customer_id=str(entity.id), is_new=is_new)
        return entity

    @transaction.atomic
    def delete(self, id: str) -> bool:
        """Soft-delete a customer by ID.

        Returns ``True`` if the customer was found and soft-deleted,
        ``False`` if no live customer exists with the given ID.
        """
        customer = self.get_by_id(id)
        if not customer:
            return False
        customer.delete()
        logger.info("customer.soft_deleted", customer_id=str(id))
        return True

    def get_by_email(self, email: str) -> Optional[Customer]:
        return Customer.objects.alive().filter(email=email.strip().lower()).first()
