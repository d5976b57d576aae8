# app/repositories/cart_repo.py
import uuid

from sqlalchemy import and_
from sqlmodel import Session, select

from app.models.cart import CartItem
from app.models.product import Product, ProductOption


class CartRepository:

    # Get items for a user, oldest first, joined with the current catalog.
    # Product/option are None when the row points at something deleted.
    def list_priced_for_user(
        self, session: Session, user_id: uuid.UUID
    ) -> list[tuple[CartItem, Product | None, ProductOption | None]]:
        stmt = (
            select(CartItem, Product, ProductOption)
            .outerjoin(Product, Product.id == CartItem.product_id)
            .outerjoin(
                ProductOption,
                and_(
                    ProductOption.product_id == CartItem.product_id,
                    ProductOption.option == CartItem.option_selection,
                ),
            )
            .where(CartItem.user_id == user_id)
            .order_by(CartItem.created_at)
        )
        return session.exec(stmt).all()

    def list_for_user(self, session: Session, user_id: uuid.UUID) -> list[CartItem]:
        stmt = (
            select(CartItem)
            .where(CartItem.user_id == user_id)
            .order_by(CartItem.created_at)
        )
        return session.exec(stmt).all()

    def get_for_user(
        self, session: Session, user_id: uuid.UUID, item_id: uuid.UUID
    ) -> CartItem | None:
        stmt = select(CartItem).where(
            CartItem.id == item_id, CartItem.user_id == user_id
        )
        return session.exec(stmt).first()

    # CRUD
    def create(self, session: Session, item: CartItem) -> CartItem:
        session.add(item)
        session.commit()
        session.refresh(item)
        return item

    def update(self, session: Session, item: CartItem) -> CartItem:
        session.add(item)
        session.commit()
        session.refresh(item)
        return item

    def delete(self, session: Session, item: CartItem) -> None:
        session.delete(item)
        session.commit()

    def clear_user_cart(self, session: Session, user_id: uuid.UUID) -> None:
        for row in self.list_for_user(session, user_id):
            session.delete(row)
        session.commit()
