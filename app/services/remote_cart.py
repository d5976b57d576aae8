# app/services/remote_cart.py
from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.core.errors import NotFound, UpstreamUnavailable
from app.models.cart import CartItem
from app.repositories.cart_repo import CartRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.cart import LineItem, LineItemFailure, PricedLineItem

logger = logging.getLogger(__name__)


def _to_line_item(row: CartItem) -> LineItem:
    return LineItem(
        id=str(row.id),
        product_id=row.product_id,
        option_selection=row.option_selection,
        quantity=row.quantity,
    )


class AuthoritativeCartStore:
    """
    Server-owned cart tier, one list of rows per user id.

    Blocking: callers in async code run these methods in the thread
    pool. Database errors surface as UpstreamUnavailable.
    """

    def __init__(
        self,
        cart_repo: CartRepository,
        product_repo: ProductRepository,
        session: Session,
    ):
        self.cart_repo = cart_repo
        self.product_repo = product_repo
        self.session = session

    @contextmanager
    def _guard(self):
        try:
            yield
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Cart store query failed: {e}")
            raise UpstreamUnavailable("Cart store unavailable") from e

    def list(
        self, user_id: uuid.UUID
    ) -> tuple[list[PricedLineItem], list[LineItemFailure]]:
        """
        Return the user's lines priced by the current catalog join.

        Rows whose product or option no longer exists come back as
        failures instead of priced lines.
        """
        with self._guard():
            rows = self.cart_repo.list_priced_for_user(self.session, user_id)

        lines: list[PricedLineItem] = []
        failures: list[LineItemFailure] = []
        for item, product, option in rows:
            line_item = _to_line_item(item)
            if product is None or option is None:
                failures.append(
                    LineItemFailure(
                        line_item=line_item,
                        reason="not_found",
                        detail=f"Product with id#{item.product_id} or option "
                        f"{item.option_selection!r} not found",
                    )
                )
                continue
            lines.append(
                PricedLineItem(
                    **line_item.model_dump(),
                    unit_price=option.price,
                    amount_in_stock=option.amount_in_stock,
                    product_name=product.product_name,
                    brand_name=product.brand_name,
                    image_ref=product.small_image_file1,
                    option_type=product.option_type,
                )
            )
        return lines, failures

    def create(
        self,
        user_id: uuid.UUID,
        product_id: int,
        option_selection: str,
        quantity: int,
    ) -> LineItem:
        """
        Insert a new line. Existing lines for the same option are left as-is.

        Raises:
            NotFound: if the product has no such option.
        """
        with self._guard():
            option = self.product_repo.get_option(self.session, product_id, option_selection)
            if option is None:
                raise NotFound(
                    f"Product with id#{product_id} has no option {option_selection!r}"
                )
            row = self.cart_repo.create(
                self.session,
                CartItem(
                    user_id=user_id,
                    product_id=product_id,
                    option_selection=option_selection,
                    quantity=quantity,
                ),
            )
        return _to_line_item(row)

    def update(self, user_id: uuid.UUID, item_id: uuid.UUID, quantity: int) -> LineItem:
        with self._guard():
            row = self.cart_repo.get_for_user(self.session, user_id, item_id)
            if row is None:
                raise NotFound(f"Line item {item_id} not found in cart")
            row.quantity = quantity
            row = self.cart_repo.update(self.session, row)
        return _to_line_item(row)

    def delete(self, user_id: uuid.UUID, item_id: uuid.UUID) -> None:
        with self._guard():
            row = self.cart_repo.get_for_user(self.session, user_id, item_id)
            if row is not None:
                self.cart_repo.delete(self.session, row)
