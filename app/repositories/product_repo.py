# app/repositories/product_repo.py
from __future__ import annotations

from sqlmodel import Session, select

from app.models.product import Product, ProductOption


class ProductRepository:
    """
    Data access layer for Product & ProductOption.

    - Pure DB operations (queries).
    - No FastAPI, no business logic.
    """

    # ----- Products -----

    def get_by_id(self, session: Session, product_id: int) -> Product | None:
        return session.get(Product, product_id)

    def list(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Product]:
        stmt = select(Product).order_by(Product.id).offset(skip).limit(limit)
        return session.exec(stmt).all()

    # ----- Product options -----

    def list_options_for_product(
        self,
        session: Session,
        product_id: int,
    ) -> list[ProductOption]:
        stmt = (
            select(ProductOption)
            .where(ProductOption.product_id == product_id)
            .order_by(ProductOption.id)
        )
        return session.exec(stmt).all()

    def list_options_for_products(
        self,
        session: Session,
        product_ids: list[int],
    ) -> list[ProductOption]:
        if not product_ids:
            return []
        stmt = (
            select(ProductOption)
            .where(ProductOption.product_id.in_(product_ids))
            .order_by(ProductOption.id)
        )
        return session.exec(stmt).all()

    def get_option(
        self,
        session: Session,
        product_id: int,
        option: str,
    ) -> ProductOption | None:
        stmt = select(ProductOption).where(
            ProductOption.product_id == product_id,
            ProductOption.option == option,
        )
        return session.exec(stmt).first()
