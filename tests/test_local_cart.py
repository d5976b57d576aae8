"""Tests for the guest cart store"""
import base64
import json
from unittest.mock import Mock

import pytest
from starlette.responses import Response

from app.core.errors import InvalidArgument, NotFound
from app.services.local_cart import MAX_COOKIE_BYTES, CookieBlobStore, LocalCartStore


class TestLocalCartStore:
    """Tests for LocalCartStore."""

    def test_missing_cart_reads_empty(self, local_store):
        """First visit: nothing stored is an empty cart, not an error."""
        assert local_store.read() == []

    def test_add_appends_in_order(self, local_store, blobs):
        """Items are stored in the order they were added."""
        first = local_store.add(1, "40M", 1)
        second = local_store.add(2, "Small", 3)

        items = local_store.read()
        assert [i.id for i in items] == [first.id, second.id]
        assert json.loads(blobs.data["guestCart"])[1]["quantity"] == 3

    def test_add_same_option_creates_separate_line(self, local_store):
        """Adding an option already in the cart does not merge lines."""
        first = local_store.add(2, "Small", 1)
        second = local_store.add(2, "Small", 2)

        items = local_store.read()
        assert len(items) == 2
        assert first.id != second.id
        assert [i.quantity for i in items] == [1, 2]

    def test_change_quantity(self, local_store):
        """Quantity is overwritten in place."""
        item = local_store.add(2, "Small", 1)

        updated = local_store.change_quantity(item.id, 4)

        assert updated.quantity == 4
        assert local_store.read()[0].quantity == 4

    def test_change_quantity_unknown_item(self, local_store):
        """Unknown line item raises NotFound."""
        local_store.add(2, "Small", 1)

        with pytest.raises(NotFound):
            local_store.change_quantity("missing", 2)

    def test_delete(self, local_store):
        """Deleting removes only the matching line."""
        keep = local_store.add(1, "40M", 1)
        drop = local_store.add(2, "Small", 1)

        local_store.delete(drop.id)

        assert [i.id for i in local_store.read()] == [keep.id]

    def test_delete_unknown_item_is_noop(self, local_store, blobs):
        """Deleting an absent line leaves the cart untouched."""
        local_store.add(1, "40M", 1)
        before = blobs.data["guestCart"]

        local_store.delete("missing")

        assert blobs.data["guestCart"] == before

    def test_corrupted_cart_is_cleared(self, blobs):
        """Undecodable data reads as empty and is removed."""
        blobs.data["guestCart"] = "{not json"
        store = LocalCartStore(blobs)

        assert store.read() == []
        assert "guestCart" not in blobs.data

    def test_invalid_line_item_is_cleared(self, blobs):
        """A stored zero quantity violates the line item invariant."""
        blobs.data["guestCart"] = json.dumps(
            [{"id": "a", "product_id": 1, "option_selection": "40M", "quantity": 0}]
        )
        store = LocalCartStore(blobs)

        assert store.read() == []

    def test_clear(self, local_store, blobs):
        local_store.add(1, "40M", 1)
        local_store.clear()

        assert local_store.read() == []
        assert "guestCart" not in blobs.data


class TestCookieBlobStore:
    """Tests for the cookie-backed blob store."""

    def _request(self, cookies: dict):
        request = Mock()
        request.cookies = cookies
        return request

    def test_reads_encoded_cookie(self):
        """Cookie values are base64url-encoded JSON."""
        raw = base64.urlsafe_b64encode(b'[{"a": 1}]').decode()
        store = CookieBlobStore(self._request({"guestCart": raw}), Response(), 60)

        assert store.get("guestCart") == '[{"a": 1}]'

    def test_missing_cookie(self):
        store = CookieBlobStore(self._request({}), Response(), 60)

        assert store.get("guestCart") is None

    def test_write_is_visible_in_same_request(self):
        """Later reads see writes queued on the response."""
        response = Response()
        store = CookieBlobStore(self._request({}), response, 60)

        store.set("guestCart", "[]")

        assert store.get("guestCart") == "[]"
        assert "guestCart=" in response.headers["set-cookie"]

    def test_delete_shadows_request_cookie(self):
        raw = base64.urlsafe_b64encode(b"[]").decode()
        response = Response()
        store = CookieBlobStore(self._request({"guestCart": raw}), response, 60)

        store.delete("guestCart")

        assert store.get("guestCart") is None
        assert "Max-Age=0" in response.headers["set-cookie"]

    def test_undecodable_cookie_is_treated_as_corrupted(self):
        """LocalCartStore clears a cookie that is not valid base64."""
        response = Response()
        blobs = CookieBlobStore(self._request({"guestCart": "abc"}), response, 60)

        assert LocalCartStore(blobs).read() == []
        assert blobs.get("guestCart") is None

    def test_oversized_write_is_rejected(self):
        """A cookie browsers would drop is refused before anything is queued."""
        response = Response()
        store = CookieBlobStore(self._request({}), response, 60)

        with pytest.raises(InvalidArgument):
            store.set("guestCart", "x" * MAX_COOKIE_BYTES)

        assert store.get("guestCart") is None
        assert "set-cookie" not in response.headers

    def test_full_cart_keeps_existing_lines(self):
        """Adding past the cookie limit fails and leaves the stored cart as it was."""
        blobs = CookieBlobStore(self._request({}), Response(), 60)
        local = LocalCartStore(blobs)

        added = 0
        with pytest.raises(InvalidArgument):
            for _ in range(100):
                local.add(2, "Small", 1)
                added += 1

        assert 0 < added < 100
        assert len(local.read()) == added
