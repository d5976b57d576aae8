# app/services/local_cart.py
"""
Guest cart stored on the visitor's device.

The cart is a JSON list of line items kept under one well-known key
(`guestCart` by default). Every helper reads the whole list, applies
its change, and writes the whole list back.
"""
import base64
import binascii
import logging
import uuid
from typing import Protocol

from fastapi import Request, Response
from pydantic import TypeAdapter, ValidationError

from app.core.errors import InvalidArgument, NotFound
from app.schemas.cart import LineItem

logger = logging.getLogger(__name__)

_line_items = TypeAdapter(list[LineItem])

# Browsers drop a cookie whose name plus value exceeds this.
MAX_COOKIE_BYTES = 4096


class BlobStore(Protocol):
    """String-keyed durable blob storage scoped to one device."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class CookieBlobStore:
    """
    BlobStore backed by the visitor's cookies.

    Reads come from the incoming request; writes are queued on the
    outgoing response. Values written during this request shadow the
    request cookies so later reads see them.
    """

    def __init__(self, request: Request, response: Response, max_age: int):
        self.request = request
        self.response = response
        self.max_age = max_age
        self._pending: dict[str, str | None] = {}

    def get(self, key: str) -> str | None:
        if key in self._pending:
            return self._pending[key]
        raw = self.request.cookies.get(key)
        if raw is None:
            return None
        try:
            return base64.urlsafe_b64decode(raw.encode()).decode()
        except (binascii.Error, UnicodeDecodeError):
            # Left undecoded; LocalCartStore treats it as corrupted.
            return raw

    def set(self, key: str, value: str) -> None:
        """
        Queue the value as a cookie.

        Raises:
            InvalidArgument: if the encoded cookie is over the size
                browsers keep. Nothing is queued in that case.
        """
        encoded = base64.urlsafe_b64encode(value.encode()).decode()
        if len(key) + len(encoded) > MAX_COOKIE_BYTES:
            raise InvalidArgument("Guest cart is full, sign in to add more items")
        self._pending[key] = value
        self.response.set_cookie(
            key,
            encoded,
            max_age=self.max_age,
            httponly=True,
            samesite="lax",
        )

    def delete(self, key: str) -> None:
        self._pending[key] = None
        self.response.delete_cookie(key, httponly=True, samesite="lax")


class LocalCartStore:
    """Anonymous cart tier: an ordered list of line items in a BlobStore."""

    def __init__(self, blobs: BlobStore, key: str = "guestCart"):
        self.blobs = blobs
        self.key = key

    def read(self) -> list[LineItem]:
        """Return the stored line items; a missing cart is an empty list."""
        raw = self.blobs.get(self.key)
        if not raw:
            return []
        try:
            return _line_items.validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Corrupted guest cart under {self.key!r}, clearing it: {e}")
            self.clear()
            return []

    def write(self, items: list[LineItem]) -> None:
        self.blobs.set(self.key, _line_items.dump_json(items).decode())

    def clear(self) -> None:
        self.blobs.delete(self.key)

    # ---- mutation helpers ----

    def add(self, product_id: int, option_selection: str, quantity: int) -> LineItem:
        """Append a new line item, even if the same product+option is present."""
        items = self.read()
        item = LineItem(
            id=str(uuid.uuid4()),
            product_id=product_id,
            option_selection=option_selection,
            quantity=quantity,
        )
        items.append(item)
        self.write(items)
        return item

    def change_quantity(self, item_id: str, quantity: int) -> LineItem:
        items = self.read()
        found = next((i for i in items if i.id == item_id), None)
        if found is None:
            raise NotFound(f"Line item {item_id} not found in cart")
        found.quantity = quantity
        self.write(items)
        return found

    def delete(self, item_id: str) -> None:
        items = self.read()
        remaining = [i for i in items if i.id != item_id]
        if len(remaining) != len(items):
            self.write(remaining)
