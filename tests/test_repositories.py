"""Tests for the catalog and cart repositories"""
import uuid
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from app.models.product import ProductOption
from app.repositories.cart_repo import CartRepository
from app.repositories.product_repo import ProductRepository


class TestProductRepository:
    """Catalog queries"""

    def test_list_products(self, db_session, catalog):
        products = ProductRepository().list(db_session)

        assert [p.id for p in products] == [1, 2]

    def test_list_options_for_products(self, db_session, catalog):
        options = ProductRepository().list_options_for_products(db_session, [2])

        assert [o.option for o in options] == ["Small", "Large"]

    def test_list_options_for_no_products(self, db_session, catalog):
        assert ProductRepository().list_options_for_products(db_session, []) == []

    def test_get_option(self, db_session, catalog):
        option = ProductRepository().get_option(db_session, 2, "Large")

        assert option.price == Decimal("14.50")
        assert ProductRepository().get_option(db_session, 2, "Huge") is None

    def test_option_label_is_unique_per_product(self, db_session, catalog):
        """A product cannot carry two options with the same label."""
        db_session.add(
            ProductOption(product_id=2, option="Small", price=Decimal("12.00"), amount_in_stock=1)
        )

        with pytest.raises(IntegrityError):
            db_session.commit()
        db_session.rollback()

    def test_same_label_on_other_product(self, db_session, catalog):
        db_session.add(
            ProductOption(product_id=1, option="Small", price=Decimal("12.00"), amount_in_stock=1)
        )
        db_session.commit()

        assert ProductRepository().get_option(db_session, 1, "Small") is not None


class TestCartRepository:
    """Cart row queries"""

    def test_priced_rows_one_per_line(self, db_session, catalog, user, remote_store):
        remote_store.create(user.id, 2, "Small", 1)
        remote_store.create(user.id, 1, "40M", 2)

        rows = CartRepository().list_priced_for_user(db_session, user.id)

        assert sorted((item.product_id, option.option) for item, _, option in rows) == [
            (1, "40M"),
            (2, "Small"),
        ]

    def test_priced_rows_for_other_user(self, db_session, catalog, user, remote_store):
        remote_store.create(user.id, 2, "Small", 1)

        assert CartRepository().list_priced_for_user(db_session, uuid.uuid4()) == []
