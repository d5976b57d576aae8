# app/models/product.py
from decimal import Decimal

from sqlmodel import SQLModel, Field, UniqueConstraint


class Product(SQLModel, table=True):
    """
    Catalog entry.

    Pricing and stock live on ProductOption: a product is only
    purchasable through one of its options ("Small", "70M", "Default").
    """

    __tablename__ = "products"

    id: int | None = Field(
        default=None,
        primary_key=True,
    )

    product_name: str = Field(
        max_length=255,
        index=True,
        description="Display name of the product",
    )

    brand_name: str = Field(
        max_length=100,
        index=True,
    )

    category_name: str = Field(
        max_length=100,
        index=True,
    )

    description: str | None = None

    option_type: str = Field(
        default="Option",
        max_length=50,
        description='Label for the option set, e.g. "Size" or "Length"',
    )

    small_image_file1: str | None = Field(
        default=None,
        description="Thumbnail image file used in cart listings",
    )


class ProductOption(SQLModel, table=True):
    """
    Purchasable variant of a product.

    `option` is unique within a product's option set; cart line items
    refer to it by this label.
    """

    __tablename__ = "product_options"
    __table_args__ = (
        UniqueConstraint("product_id", "option", name="uq_product_option"),
    )

    id: int | None = Field(
        default=None,
        primary_key=True,
    )

    product_id: int = Field(
        foreign_key="products.id",
        index=True,
    )

    option: str = Field(
        max_length=50,
        description="Option label, unique per product",
    )

    price: Decimal = Field(
        max_digits=10,
        decimal_places=2,
        ge=0,
    )

    amount_in_stock: int = Field(
        default=0,
        ge=0,
    )
