# app/services/cart_service.py
import logging
import uuid
from enum import Enum

from starlette.concurrency import run_in_threadpool

from app.core.errors import CartError, InvalidArgument, UpstreamUnavailable
from app.schemas.cart import (
    CartState,
    CartView,
    LineItem,
    MigrationReport,
)
from app.services.aggregator import CartAggregator, failure_for
from app.services.local_cart import LocalCartStore
from app.services.pricing import PricingSnapshotResolver
from app.services.remote_cart import AuthoritativeCartStore

logger = logging.getLogger(__name__)


class CartPhase(str, Enum):
    ANONYMOUS = "anonymous"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


def _parse_line_item_id(line_item_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(str(line_item_id))
    except ValueError:
        raise InvalidArgument(f"Malformed line item id: {line_item_id!r}")


def _check_quantity(quantity: int) -> None:
    if quantity < 1:
        raise InvalidArgument("quantity must be a positive integer")


class LocalTier:
    """Anonymous visitors: device storage, priced by the aggregator."""

    def __init__(
        self,
        store: LocalCartStore,
        aggregator: CartAggregator,
        resolver: PricingSnapshotResolver,
    ):
        self.store = store
        self.aggregator = aggregator
        self.resolver = resolver

    async def view(self) -> CartView:
        return await self.aggregator.aggregate(self.store.read())

    async def add(self, product_id: int, option_selection: str, quantity: int) -> LineItem:
        # NotFound for an unknown product/option before anything is stored
        await self.resolver.resolve(product_id, option_selection)
        return self.store.add(product_id, option_selection, quantity)

    async def change_quantity(self, item_id: uuid.UUID, quantity: int) -> LineItem:
        return self.store.change_quantity(str(item_id), quantity)

    async def delete(self, item_id: uuid.UUID) -> None:
        self.store.delete(str(item_id))


class AuthoritativeTier:
    """Authenticated users: server rows, priced by the store's own join."""

    def __init__(self, store: AuthoritativeCartStore, user_id: uuid.UUID):
        self.store = store
        self.user_id = user_id

    async def view(self) -> CartView:
        lines, failures = await run_in_threadpool(self.store.list, self.user_id)
        return CartView(line_items=lines, failed_items=failures)

    async def add(self, product_id: int, option_selection: str, quantity: int) -> LineItem:
        return await run_in_threadpool(
            self.store.create, self.user_id, product_id, option_selection, quantity
        )

    async def change_quantity(self, item_id: uuid.UUID, quantity: int) -> LineItem:
        return await run_in_threadpool(self.store.update, self.user_id, item_id, quantity)

    async def delete(self, item_id: uuid.UUID) -> None:
        await run_in_threadpool(self.store.delete, self.user_id, item_id)


class CartSession:
    """
    Cart for one visitor session, reconciling the two tiers.

    Phases:
      - ANONYMOUS: reads/writes go to the device (LocalCartStore).
      - AUTHENTICATING: the guest cart is being drained into the
        user's cart; no other operation is served.
      - AUTHENTICATED: reads/writes go to AuthoritativeCartStore.

    `_tier()` is the only place that decides which tier is active.
    """

    def __init__(
        self,
        local: LocalCartStore,
        remote: AuthoritativeCartStore,
        resolver: PricingSnapshotResolver,
        aggregator: CartAggregator | None = None,
    ):
        self.local = local
        self.remote = remote
        self.phase = CartPhase.ANONYMOUS
        self.user_id: uuid.UUID | None = None
        self.view = CartView.unloaded()
        self.last_migration: MigrationReport | None = None
        self._local_tier = LocalTier(local, aggregator or CartAggregator(resolver), resolver)
        self._remote_tier: AuthoritativeTier | None = None

    def _tier(self) -> LocalTier | AuthoritativeTier:
        if self.phase is CartPhase.ANONYMOUS:
            return self._local_tier
        if self.phase is CartPhase.AUTHENTICATED:
            return self._remote_tier
        raise RuntimeError("Cart migration in progress")

    # ---- authentication / migration ----

    async def authenticate(self, user_id: uuid.UUID) -> MigrationReport:
        """
        Move the guest cart into the user's cart and switch tiers.

        One create per guest line; nothing already migrated is rolled
        back. A line stays on the device only when its write failed
        and could succeed later, i.e. the store was unavailable. A line
        whose product or option is gone can never be written, so it is
        dropped rather than retried on every request. Both kinds are
        reported.

        Calling this again for the same user re-drains whatever is
        still on the device; duplicate lines are allowed.
        """
        if self.phase is CartPhase.AUTHENTICATING:
            raise RuntimeError("Cart migration already in progress")
        if self.phase is CartPhase.AUTHENTICATED and user_id != self.user_id:
            raise InvalidArgument("Cart session already belongs to another user")

        self.phase = CartPhase.AUTHENTICATING
        self.user_id = user_id
        report = MigrationReport()
        kept: list[LineItem] = []

        try:
            pending = self.local.read()
            for item in pending:
                try:
                    created = await run_in_threadpool(
                        self.remote.create,
                        user_id,
                        item.product_id,
                        item.option_selection,
                        item.quantity,
                    )
                except CartError as e:
                    logger.warning(f"Guest line {item.id} not migrated for user {user_id}: {e.detail}")
                    report.failed.append(failure_for(item, e))
                    if isinstance(e, UpstreamUnavailable):
                        kept.append(item)
                    continue
                report.migrated.append(created)

            if kept:
                self.local.write(kept)
            elif pending:
                self.local.clear()
        finally:
            self._remote_tier = AuthoritativeTier(self.remote, user_id)
            self.phase = CartPhase.AUTHENTICATED

        if pending:
            logger.info(
                f"Migrated {len(report.migrated)}/{len(pending)} guest cart lines "
                f"for user {user_id}"
            )
        self.last_migration = report
        return report

    # ---- reads ----

    async def load(self) -> CartState:
        """
        Load the active tier.

        item_count is reset to the unloaded sentinel before fetching.
        A store failure yields has_error=True, never an empty cart.
        """
        self.view = CartView.unloaded()
        try:
            self.view = await self._tier().view()
        except UpstreamUnavailable as e:
            logger.error(f"Cart load failed ({self.phase.value}): {e.detail}")
            return CartState(data=self.view, has_error=True)
        return CartState(data=self.view)

    # ---- mutators ----

    async def add_item(
        self, product_id: int, option_selection: str, quantity: int
    ) -> LineItem:
        """Add a new line item to the active tier (never merged)."""
        _check_quantity(quantity)
        return await self._tier().add(product_id, option_selection, quantity)

    async def change_quantity(self, line_item_id: str, quantity: int) -> LineItem:
        """
        Overwrite the quantity of a line item.

        Raises:
            InvalidArgument: quantity < 1 or malformed id.
            NotFound: no such line item in the active tier.
        """
        item_id = _parse_line_item_id(line_item_id)
        _check_quantity(quantity)
        return await self._tier().change_quantity(item_id, quantity)

    async def delete_item(self, line_item_id: str) -> None:
        """Remove a line item; absent ids are a no-op."""
        item_id = _parse_line_item_id(line_item_id)
        await self._tier().delete(item_id)
