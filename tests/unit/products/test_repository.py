"""Unit tests for ProductDjangoRepository stock handling."""

from __future__ import annotations

from uuid import uuid4

import pytest

from modules.products.repositories.django_repository import ProductDjangoRepository

pytestmark = pytest.mark.unit


@pytest.fixture()
def repo():
    return ProductDjangoRepository()


class TestDecrementStock:
    def test_decrements_when_enough(self, repo, make_product):
        product = make_product(stock=5)

        assert repo.decrement_stock(str(product.id), 3) is True

        product.refresh_from_db()
        assert product.stock_quantity == 2

    def test_exact_stock_reaches_zero(self, repo, make_product):
        product = make_product(stock=3)

        assert repo.decrement_stock(str(product.id), 3) is True

        product.refresh_from_db()
        assert product.stock_quantity == 0

    def test_refuses_to_go_negative(self, repo, make_product):
        product = make_product(stock=2)

        assert repo.decrement_stock(str(product.id), 3) is False

        product.refresh_from_db()
        assert product.stock_quantity == 2

    def test_soft_deleted_product_is_not_decremented(self, repo, make_product):
        product = make_product(stock=5)
        product.delete()

        assert repo.decrement_stock(str(product.id), 1) is False

    def test_unknown_product(self, repo):
        assert repo.decrement_stock(str(uuid4()), 1) is False


class TestLookups:
    def test_get_for_update_returns_live_product(self, repo, make_product):
        product = make_product()
        assert repo.get_for_update(str(product.id)) == product

    def test_get_for_update_missing(self, repo):
        assert repo.get_for_update(str(uuid4())) is None
        assert repo.get_for_update("not-a-uuid") is None

    def test_get_by_id_skips_soft_deleted(self, repo, make_product):
        product = make_product()
        product.delete()
        assert repo.get_by_id(str(product.id)) is None

    def test_get_by_sku_is_case_insensitive(self, repo, make_product):
        product = make_product(sku="kb-01")
        assert product.sku == "KB-01"
        assert repo.get_by_sku(" kb-01 ") == product

    def test_list_in_stock(self, repo, make_product):
        in_stock = make_product(stock=1)
        make_product(stock=0)
        assert repo.list({"stock_quantity__gt": 0}) == [in_stock]

    def test_soft_delete(self, repo, make_product):
        product = make_product()
        assert repo.delete(str(product.id)) is True
        assert repo.delete(str(product.id)) is False
