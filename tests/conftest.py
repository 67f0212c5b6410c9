from decimal import Decimal

import pytest

from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from modules.customers.models import Customer
from modules.products.models import Product


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


@pytest.fixture()
def auth_client():
    """APIClient with a force-authenticated Django user."""
    client = APIClient()
    user = get_user_model().objects.create_user(
        username="cashier", password="testpass123"
    )
    client.force_authenticate(user=user)
    return client


@pytest.fixture()
def customer():
    return Customer.objects.create(name="Ana Souza", email="ana@example.com")


@pytest.fixture()
def make_product():
    """Factory for catalog products: ``make_product("SKU", price, stock)``."""
    counter = {"n": 0}

    def _make(sku=None, price="10.00", stock=10, name=None):
        counter["n"] += 1
        sku = sku or f"SKU-{counter['n']:03d}"
        return Product.objects.create(
            sku=sku,
            name=name or f"Product {sku}",
            price=Decimal(price),
            stock_quantity=stock,
        )

    return _make
