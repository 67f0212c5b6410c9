"""Transaction DRF serializers.

Used to describe the API in the OpenAPI schema (drf-spectacular).  Creation
input is validated by the service layer's Pydantic DTOs; read output comes
from ``TransactionOutputDTO``.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.transactions.constants import TransactionStatus

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class CreateTransactionItemSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)


class CreateTransactionSerializer(serializers.Serializer):
    """Transaction creation request payload."""

    customer_id = serializers.UUIDField()
    items = CreateTransactionItemSerializer(many=True, allow_empty=False)


class UpdateStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=TransactionStatus.choices)


# ---------------------------------------------------------------------------
# Output Serializers
# ---------------------------------------------------------------------------


class TransactionCreatedSerializer(serializers.Serializer):
    transaction_id = serializers.UUIDField()
    message = serializers.CharField()


class TransactionItemSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    product_id = serializers.UUIDField()
    product_name = serializers.CharField()
    quantity = serializers.IntegerField()
    unit_price = serializers.DecimalField(max_digits=10, decimal_places=2)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)


class TransactionSerializer(serializers.Serializer):
    """Nested transaction: header plus its line items."""

    id = serializers.UUIDField()
    customer_id = serializers.UUIDField()
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    status = serializers.ChoiceField(choices=TransactionStatus.choices)
    created_at = serializers.DateTimeField()
    items = TransactionItemSerializer(many=True)


class ErrorSerializer(serializers.Serializer):
    detail = serializers.CharField()
    code = serializers.CharField()
