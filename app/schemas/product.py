# app/schemas/product.py
from decimal import Decimal

from sqlmodel import SQLModel


class ProductOptionRead(SQLModel):
    """
    One purchasable option of a product.
    """

    option: str
    price: Decimal
    amount_in_stock: int


class ProductRead(SQLModel):
    """
    Product representation for clients, with its full option list.

    This is also the catalog contract the cart resolver consumes:
    one call returns the product plus every option.
    """

    id: int
    product_name: str
    brand_name: str
    category_name: str
    description: str | None = None
    option_type: str
    image_ref: str | None = None
    options: list[ProductOptionRead] = []


class ProductSnapshot(SQLModel):
    """
    Current price/stock/display data for one (product, option) pair.
    """

    product_id: int
    option: str
    unit_price: Decimal
    amount_in_stock: int
    product_name: str
    brand_name: str
    image_ref: str | None = None
    option_type: str
