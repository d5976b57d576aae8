"""Pytest configuration and fixtures"""
import os
import tempfile
import uuid
from decimal import Decimal

import pytest
from jose import jwt

# Set test environment variables before the app reads its settings
os.environ.setdefault(
    "DATABASE_URL",
    f"sqlite:///{tempfile.mkdtemp(prefix='storefront-')}/test.db",
)
os.environ.setdefault("JWT_SECRET", "test_jwt_secret")

from sqlmodel import Session, SQLModel  # noqa: E402

from app.core.errors import NotFound  # noqa: E402
from app.database import engine  # noqa: E402
from app.models.cart import CartItem  # noqa: E402, F401
from app.models.product import Product, ProductOption  # noqa: E402
from app.models.user import User  # noqa: E402
from app.repositories.cart_repo import CartRepository  # noqa: E402
from app.repositories.product_repo import ProductRepository  # noqa: E402
from app.schemas.product import ProductSnapshot  # noqa: E402
from app.services.local_cart import LocalCartStore  # noqa: E402
from app.services.remote_cart import AuthoritativeCartStore  # noqa: E402


class MemoryBlobStore:
    """Dict-backed stand-in for the visitor's device storage."""

    def __init__(self, data: dict | None = None):
        self.data = dict(data or {})

    def get(self, key):
        return self.data.get(key)

    def set(self, key, value):
        self.data[key] = value

    def delete(self, key):
        self.data.pop(key, None)


class FakeResolver:
    """Resolver answering from a {(product_id, option): snapshot} table."""

    def __init__(self, snapshots: dict):
        self.snapshots = snapshots
        self.calls = []

    async def resolve(self, product_id, option_selection):
        self.calls.append((product_id, option_selection))
        try:
            return self.snapshots[(product_id, option_selection)]
        except KeyError:
            raise NotFound(f"Product with id#{product_id} not found")


def make_snapshot(product_id, option, price, stock=5, name="Test product"):
    return ProductSnapshot(
        product_id=product_id,
        option=option,
        unit_price=Decimal(price),
        amount_in_stock=stock,
        product_name=name,
        brand_name="Sterling",
        image_ref="rope1-1.webp",
        option_type="Length",
    )


def make_token(user_id: uuid.UUID, email: str = "climber@example.com") -> str:
    return jwt.encode(
        {"sub": str(user_id), "email": email},
        os.environ["JWT_SECRET"],
        algorithm="HS256",
    )


@pytest.fixture
def db_engine():
    """Fresh schema for each test."""
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def db_session(db_engine):
    with Session(db_engine) as session:
        yield session


@pytest.fixture
def catalog(db_session):
    """
    Two products:
      - 1: rope with 40M / 60M / 70M
      - 2: chalk bag with Small / Large
    """
    rope = Product(
        id=1,
        product_name="VR9 9.8 mm Dry-Core Rope",
        brand_name="Sterling",
        category_name="ropes",
        option_type="Length",
        small_image_file1="rope1-1.webp",
    )
    bag = Product(
        id=2,
        product_name="Chalk Bag",
        brand_name="Black Diamond",
        category_name="accessories",
        option_type="Size",
        small_image_file1="bag1-1.webp",
    )
    db_session.add(rope)
    db_session.add(bag)
    db_session.add_all(
        [
            ProductOption(product_id=1, option="40M", price=Decimal("119.95"), amount_in_stock=5),
            ProductOption(product_id=1, option="60M", price=Decimal("184.95"), amount_in_stock=5),
            ProductOption(product_id=1, option="70M", price=Decimal("219.95"), amount_in_stock=2),
            ProductOption(product_id=2, option="Small", price=Decimal("10.00"), amount_in_stock=5),
            ProductOption(product_id=2, option="Large", price=Decimal("14.50"), amount_in_stock=0),
        ]
    )
    db_session.commit()
    return {"rope": 1, "bag": 2}


@pytest.fixture
def user(db_session):
    row = User(id=uuid.uuid4(), email="climber@example.com", name="climber")
    db_session.add(row)
    db_session.commit()
    db_session.refresh(row)
    return row


@pytest.fixture
def blobs():
    return MemoryBlobStore()


@pytest.fixture
def local_store(blobs):
    return LocalCartStore(blobs)


@pytest.fixture
def remote_store(db_session):
    return AuthoritativeCartStore(CartRepository(), ProductRepository(), db_session)


@pytest.fixture
def fake_resolver():
    return FakeResolver(
        {
            (1, "40M"): make_snapshot(1, "40M", "119.95"),
            (1, "70M"): make_snapshot(1, "70M", "219.95", stock=2),
            (2, "Small"): make_snapshot(2, "Small", "10.00"),
            (2, "Large"): make_snapshot(2, "Large", "14.50", stock=0),
        }
    )
