# app/schemas/cart.py
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, computed_field
from sqlmodel import SQLModel, Field

from app.schemas.product import ProductSnapshot

# item_count reported before any load has completed
UNLOADED_ITEM_COUNT = -1


class LineItem(SQLModel):
    """
    One (product, option, quantity) entry in either cart tier.
    """

    id: str
    product_id: int
    option_selection: str
    quantity: int = Field(ge=1)


class LineItemCreate(SQLModel):
    """
    Payload for adding to cart.

    Quantity is range-checked by the cart session so both tiers
    reject it the same way.
    """

    product_id: int
    option_selection: str = Field(min_length=1, max_length=50)
    quantity: int = 1


class QuantityUpdate(SQLModel):
    """
    Payload for changing the quantity of a line item.
    """

    quantity: int


class PricedLineItem(LineItem):
    """
    Line item enriched with the catalog state at read time. Never persisted.
    """

    unit_price: Decimal
    amount_in_stock: int
    product_name: str
    brand_name: str
    image_ref: str | None = None
    option_type: str

    @classmethod
    def from_snapshot(cls, item: LineItem, snapshot: ProductSnapshot) -> "PricedLineItem":
        return cls(
            id=item.id,
            product_id=item.product_id,
            option_selection=item.option_selection,
            quantity=item.quantity,
            unit_price=snapshot.unit_price,
            amount_in_stock=snapshot.amount_in_stock,
            product_name=snapshot.product_name,
            brand_name=snapshot.brand_name,
            image_ref=snapshot.image_ref,
            option_type=snapshot.option_type,
        )


class LineItemFailure(SQLModel):
    """
    A line item that could not be priced during a read.
    """

    line_item: LineItem
    reason: Literal["not_found", "unavailable"]
    detail: str


class CartView(BaseModel):
    """
    Priced cart contents plus derived totals.

    item_count and sub_total are always computed from line_items.
    Lines that failed to resolve are listed in failed_items and do not
    count toward the totals; is_partial flags that case.
    """

    line_items: list[PricedLineItem] = []
    failed_items: list[LineItemFailure] = []
    loaded: bool = True

    @computed_field
    @property
    def item_count(self) -> int:
        if not self.loaded:
            return UNLOADED_ITEM_COUNT
        return sum(line.quantity for line in self.line_items)

    @computed_field
    @property
    def sub_total(self) -> Decimal:
        return sum(
            (line.quantity * line.unit_price for line in self.line_items),
            Decimal("0"),
        )

    @computed_field
    @property
    def is_partial(self) -> bool:
        return bool(self.failed_items)

    @classmethod
    def unloaded(cls) -> "CartView":
        return cls(loaded=False)


class CartState(BaseModel):
    """
    Full cart response: the view plus its load status.

    has_error marks a store-level failure, which is never reported as
    an empty cart.
    """

    data: CartView
    is_loading: bool = False
    has_error: bool = False


class MigrationReport(BaseModel):
    """
    Outcome of draining the guest cart into the user's cart at login.
    """

    migrated: list[LineItem] = []
    failed: list[LineItemFailure] = []
