# app/services/pricing.py
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session
from starlette.concurrency import run_in_threadpool

from app.core.errors import NotFound, UpstreamUnavailable
from app.schemas.product import ProductRead, ProductSnapshot
from app.services.product_service import ProductService


class CatalogReader:
    """
    Blocking catalog lookups for the cart resolver.

    Each call opens its own Session so several lookups can run in
    parallel worker threads.
    """

    def __init__(self, service: ProductService, session_factory: Callable[[], Session]):
        self.service = service
        self.session_factory = session_factory

    def get_product(self, product_id: int) -> ProductRead:
        try:
            with self.session_factory() as session:
                return self.service.get_product(session, product_id)
        except SQLAlchemyError as e:
            raise UpstreamUnavailable(f"Catalog unavailable: {e}") from e


def select_option(product: ProductRead, option_selection: str) -> ProductSnapshot:
    """
    Pick the option whose label equals `option_selection`.

    Raises:
        NotFound: if no option of the product matches.
    """
    found = next((o for o in product.options if o.option == option_selection), None)
    if found is None:
        raise NotFound(
            f"Product with id#{product.id} has no option {option_selection!r}"
        )
    return ProductSnapshot(
        product_id=product.id,
        option=found.option,
        unit_price=found.price,
        amount_in_stock=found.amount_in_stock,
        product_name=product.product_name,
        brand_name=product.brand_name,
        image_ref=product.image_ref,
        option_type=product.option_type,
    )


class PricingSnapshotResolver:
    """Resolve (product id, option label) to the current price and stock."""

    def __init__(self, catalog: CatalogReader):
        self.catalog = catalog

    async def resolve(self, product_id: int, option_selection: str) -> ProductSnapshot:
        product = await run_in_threadpool(self.catalog.get_product, product_id)
        return select_option(product, option_selection)
