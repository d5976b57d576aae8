# app/routers/cart.py
from fastapi import APIRouter, Depends, Request, Response, status
from sqlmodel import Session

from app.core.auth import get_cart_owner, require_auth
from app.core.config import get_settings
from app.database import engine, get_session
from app.models.user import User
from app.repositories.cart_repo import CartRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.cart import (
    CartState,
    LineItem,
    LineItemCreate,
    MigrationReport,
    QuantityUpdate,
)
from app.services.cart_service import CartSession
from app.services.local_cart import CookieBlobStore, LocalCartStore
from app.services.pricing import CatalogReader, PricingSnapshotResolver
from app.services.product_service import ProductService
from app.services.remote_cart import AuthoritativeCartStore

router = APIRouter(prefix="/cart", tags=["Cart"])

settings = get_settings()

cart_repo = CartRepository()
product_repo = ProductRepository()
resolver = PricingSnapshotResolver(
    CatalogReader(ProductService(product_repo), lambda: Session(engine))
)


def get_resolver() -> PricingSnapshotResolver:
    return resolver


async def get_cart_session(
    request: Request,
    response: Response,
    session: Session = Depends(get_session),
    current_user: User | None = Depends(get_cart_owner),
    pricing: PricingSnapshotResolver = Depends(get_resolver),
) -> CartSession:
    """
    Build the cart for this request.

    Authenticated visitors get their guest cart migrated here, before
    the route body reads or writes anything.
    """
    cart = CartSession(
        local=LocalCartStore(
            CookieBlobStore(request, response, settings.GUEST_CART_MAX_AGE),
            key=settings.GUEST_CART_COOKIE,
        ),
        remote=AuthoritativeCartStore(cart_repo, product_repo, session),
        resolver=pricing,
    )
    if current_user is not None:
        await cart.authenticate(current_user.id)
    return cart


@router.get("", response_model=CartState)
async def get_my_cart(
    response: Response,
    cart: CartSession = Depends(get_cart_session),
):
    """
    Get the visitor's cart with current prices and totals.

    - Guests: priced from the guest cart cookie.
    - Customers: priced from the stored cart.
    - `data.is_partial` is set when some lines could not be priced.
    - 503 with `has_error=true` when the cart could not be loaded.
    """
    state = await cart.load()
    if state.has_error:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return state


@router.post("", response_model=LineItem, status_code=status.HTTP_201_CREATED)
async def add_to_cart(
    payload: LineItemCreate,
    cart: CartSession = Depends(get_cart_session),
):
    """
    Add a product option to the cart.

    Always creates a new line item, even if the same option is
    already in the cart. Returns the new line item.
    """
    return await cart.add_item(
        payload.product_id, payload.option_selection, payload.quantity
    )


@router.patch("/{line_item_id}", response_model=LineItem)
async def update_cart_item(
    line_item_id: str,
    payload: QuantityUpdate,
    cart: CartSession = Depends(get_cart_session),
):
    """
    Change the quantity of a line item.

    Quantity must be >= 1; use DELETE to remove a line.
    """
    return await cart.change_quantity(line_item_id, payload.quantity)


@router.delete("/{line_item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_cart_item(
    line_item_id: str,
    cart: CartSession = Depends(get_cart_session),
):
    """
    Remove a line item. Removing an unknown line item is not an error.
    """
    await cart.delete_item(line_item_id)


@router.post("/sync", response_model=MigrationReport)
async def sync_guest_cart(
    current_user: User = Depends(require_auth),
    cart: CartSession = Depends(get_cart_session),
):
    """
    Report the guest cart migration for a freshly authenticated visitor.

    The migration itself runs while the cart is built for any
    authenticated request; calling this again is safe.
    """
    return cart.last_migration
