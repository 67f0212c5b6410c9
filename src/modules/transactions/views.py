"""Transaction API views.

Exposes ``TransactionService`` via HTTP using a DRF ViewSet.
Domain exceptions are caught and translated into HTTP responses;
``PricingOverflow`` and unexpected errors are left to propagate (500).
"""

from __future__ import annotations

from typing import Dict, Type

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.customers.repositories.django_repository import CustomerDjangoRepository
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.transactions.exceptions import (
    Contention,
    CustomerNotFound,
    InsufficientStock,
    InvalidRequest,
    ProductNotFound,
    StorageFailure,
    TransactionError,
    TransactionNotFound,
)
from modules.transactions.filters import TransactionFilter
from modules.transactions.models import Transaction
from modules.transactions.repositories.django_repository import (
    TransactionDjangoRepository,
)
from modules.transactions.serializers import (
    CreateTransactionSerializer,
    ErrorSerializer,
    TransactionCreatedSerializer,
    TransactionSerializer,
    UpdateStatusSerializer,
)
from modules.transactions.services import TransactionService

ERROR_STATUS: Dict[Type[TransactionError], int] = {
    InvalidRequest: status.HTTP_400_BAD_REQUEST,
    CustomerNotFound: status.HTTP_404_NOT_FOUND,
    ProductNotFound: status.HTTP_404_NOT_FOUND,
    TransactionNotFound: status.HTTP_404_NOT_FOUND,
    InsufficientStock: status.HTTP_409_CONFLICT,
    Contention: status.HTTP_503_SERVICE_UNAVAILABLE,
    StorageFailure: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

CONTENTION_RETRY_AFTER_SECONDS = "1"


def error_response(exc: TransactionError) -> Response:
    """Translate a domain error into ``{"detail", "code", ...context}``."""
    http_status = ERROR_STATUS.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    body = {"detail": exc.message, "code": exc.code, **exc.context}
    response = Response(body, status=http_status)
    if isinstance(exc, Contention):
        response["Retry-After"] = CONTENTION_RETRY_AFTER_SECONDS
    return response


class TransactionViewSet(GenericViewSet):
    """ViewSet for sales transactions.

    Reads and writes go through the service layer.  ``TransactionFilter``
    narrows the list endpoint via ``filter_backends``.
    """

    queryset = Transaction.objects.all()
    filterset_class = TransactionFilter
    filter_backends = [DjangoFilterBackend]

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = TransactionService(
            transaction_repository=TransactionDjangoRepository(),
            customer_repository=CustomerDjangoRepository(),
            product_repository=ProductDjangoRepository(),
        )

    def get_queryset(self):
        return TransactionDjangoRepository().queryset()

    def get_throttles(self) -> list[BaseThrottle]:
        """Per-action throttling scopes."""
        throttle_scope: str | None
        if self.action == "create":
            throttle_scope = "transaction_creation"
        elif self.action in {"list", "retrieve", "by_customer"}:
            throttle_scope = "transaction_listing"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    @extend_schema(
        request=CreateTransactionSerializer,
        responses={
            201: TransactionCreatedSerializer,
            400: ErrorSerializer,
            404: ErrorSerializer,
            409: ErrorSerializer,
            503: ErrorSerializer,
        },
    )
    def create(self, request: Request) -> Response:
        """POST /api/v1/transactions/"""
        try:
            txn = self._service.create_transaction(request.data)
        except TransactionError as exc:
            return error_response(exc)

        return Response(
            {
                "transaction_id": str(txn.id),
                "message": "Transaction created successfully",
            },
            status=status.HTTP_201_CREATED,
        )

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    @extend_schema(
        responses={200: TransactionSerializer(many=True), 400: ErrorSerializer},
    )
    def list(self, request: Request) -> Response:
        """GET /api/v1/transactions/

        Optional filters: ``status``, ``customer``, ``start_date``,
        ``end_date`` (see ``TransactionFilter``).
        """
        try:
            queryset = self.filter_queryset(self.get_queryset())
        except ValidationError as exc:
            return error_response(
                InvalidRequest(
                    "Invalid filter parameters.",
                    errors=[
                        {
                            "field": field,
                            "message": " ".join(str(m) for m in messages),
                        }
                        for field, messages in exc.detail.items()
                    ],
                )
            )
        transactions = self._service.list_transactions(queryset=queryset)
        return Response([t.model_dump(mode="json") for t in transactions])

    @extend_schema(responses={200: TransactionSerializer, 404: ErrorSerializer})
    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/transactions/{pk}/"""
        try:
            txn = self._service.get_transaction(str(pk))
        except TransactionError as exc:
            return error_response(exc)
        return Response(txn.model_dump(mode="json"))

    @extend_schema(responses={200: TransactionSerializer(many=True)})
    @action(
        detail=False,
        methods=["get"],
        url_path=r"customer/(?P<customer_id>[^/.]+)",
    )
    def by_customer(self, request: Request, customer_id: str | None = None) -> Response:
        """GET /api/v1/transactions/customer/{customer_id}/

        Always 200: a customer without transactions gets ``[]``.
        """
        transactions = self._service.list_customer_transactions(str(customer_id))
        return Response([t.model_dump(mode="json") for t in transactions])

    # ------------------------------------------------------------------
    # Status Update / Delete
    # ------------------------------------------------------------------

    @extend_schema(
        request=UpdateStatusSerializer,
        responses={
            200: TransactionSerializer,
            400: ErrorSerializer,
            404: ErrorSerializer,
        },
    )
    def partial_update(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/transactions/{pk}/ with ``{"status": ...}``."""
        try:
            status_value = (
                request.data.get("status") if hasattr(request.data, "get") else None
            )
            txn = self._service.update_status(str(pk), status_value)
        except TransactionError as exc:
            return error_response(exc)
        return Response(txn.model_dump(mode="json"))

    @extend_schema(
        responses={
            200: OpenApiResponse(description="Transaction deleted."),
            404: ErrorSerializer,
        }
    )
    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/transactions/{pk}/

        Removes the transaction and its items.  Stock is not restored.
        """
        try:
            self._service.delete_transaction(str(pk))
        except TransactionError as exc:
            return error_response(exc)
        return Response({"message": "Transaction deleted successfully"})
