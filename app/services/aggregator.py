# app/services/aggregator.py
import asyncio
import logging

from app.core.errors import CartError, NotFound
from app.schemas.cart import CartView, LineItem, LineItemFailure, PricedLineItem
from app.services.pricing import PricingSnapshotResolver

logger = logging.getLogger(__name__)


def failure_for(item: LineItem, exc: CartError) -> LineItemFailure:
    """Describe why a line item could not be priced or written."""
    reason = "not_found" if isinstance(exc, NotFound) else "unavailable"
    return LineItemFailure(line_item=item, reason=reason, detail=exc.detail)


class CartAggregator:
    """
    Price a list of line items and fold them into a CartView.

    Every line resolves concurrently; a failed line is reported in
    `failed_items` and left out of the totals without affecting its
    siblings.
    """

    def __init__(self, resolver: PricingSnapshotResolver):
        self.resolver = resolver

    async def _price(self, item: LineItem) -> PricedLineItem:
        snapshot = await self.resolver.resolve(item.product_id, item.option_selection)
        return PricedLineItem.from_snapshot(item, snapshot)

    async def aggregate(self, items: list[LineItem]) -> CartView:
        if not items:
            return CartView()

        results = await asyncio.gather(
            *(self._price(item) for item in items),
            return_exceptions=True,
        )

        lines: list[PricedLineItem] = []
        failures: list[LineItemFailure] = []
        for item, result in zip(items, results):
            if isinstance(result, CartError):
                logger.warning(f"Could not price line item {item.id}: {result.detail}")
                failures.append(failure_for(item, result))
            elif isinstance(result, BaseException):
                raise result
            else:
                lines.append(result)

        return CartView(line_items=lines, failed_items=failures)
