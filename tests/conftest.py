"""Pytest fixtures for storefront tests."""

import os
import tempfile
from decimal import Decimal

# Must be set before any application module is imported
_DB_DIR = tempfile.mkdtemp(prefix="storefront-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR}/test.db"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine

from main import app
from services.auth_service.schemas import UserCreate
from services.auth_service.service import AuthService
from services.cart_service.schemas import CartItemCreate
from services.cart_service.service import CartService
from services.order_service.schemas import Address, OrderCreate
from services.product_service.models import Product
from services.product_service.repository import ProductRepository
from shared.config.database import AsyncSessionLocal, Base
from shared.security import create_access_token

ADDRESS = {
    "street": "123 Main Street",
    "city": "Springfield",
    "state": "IL",
    "zip_code": "62701",
    "country": "US",
}


_sync_engine = create_engine(f"sqlite:///{_DB_DIR}/test.db")


@pytest.fixture(autouse=True)
def fresh_db():
    """Give every test an empty schema."""
    Base.metadata.drop_all(_sync_engine)
    Base.metadata.create_all(_sync_engine)
    yield


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


class Seeder:
    """Creates users, products and carts through the services, one session per call."""

    def __init__(self):
        self._emails = 0

    async def user(self, role: str = "user") -> int:
        self._emails += 1
        async with AsyncSessionLocal() as db:
            user = await AuthService.register(
                db,
                UserCreate(
                    email=f"{role}{self._emails}@example.com",
                    password="Secret@12345",
                    first_name="Test",
                    last_name="User",
                ),
                role=role,
            )
            return user.id

    async def product(self, name: str = "Widget", price: str = "50.00", stock: int = 10) -> int:
        async with AsyncSessionLocal() as db:
            product = await ProductRepository.create_product(
                db, Product(name=name, price=Decimal(price), stock=stock)
            )
            return product.id

    async def add_to_cart(self, user_id: int, product_id: int, quantity: int = 1) -> None:
        async with AsyncSessionLocal() as db:
            await CartService.add_item(db, user_id, CartItemCreate(product_id=product_id, quantity=quantity))

    async def stock(self, product_id: int) -> int:
        async with AsyncSessionLocal() as db:
            product = await ProductRepository.get_product_by_id(db, product_id)
            return product.stock

    async def cart_size(self, user_id: int) -> int:
        async with AsyncSessionLocal() as db:
            return len(await CartService.get_cart_lines(db, user_id))

    async def set_price(self, product_id: int, price: str) -> None:
        async with AsyncSessionLocal() as db:
            product = await ProductRepository.get_product_by_id(db, product_id)
            product.price = Decimal(price)
            await db.commit()


@pytest.fixture
def seeder():
    return Seeder()


@pytest.fixture
def order_request():
    return OrderCreate(
        shipping_address=Address(**ADDRESS),
        billing_address=Address(**ADDRESS),
        payment_method="credit_card",
        notes="Leave at the door",
    )


@pytest.fixture
def headers_for():
    """Build a bearer header for an existing user id."""
    def _headers(user_id: int, role: str = "user") -> dict:
        token = create_access_token({"sub": str(user_id), "role": role})
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def register(client):
    """Register a user over the API and return its id."""
    counter = {"n": 0}

    def _register(first_name: str = "Test") -> int:
        counter["n"] += 1
        response = client.post(
            "/api/v1/auth/register",
            json={
                "email": f"{first_name.lower()}{counter['n']}@example.com",
                "password": "Secret@12345",
                "first_name": first_name,
                "last_name": "User",
            },
        )
        assert response.status_code == 201, response.text
        return response.json()["id"]
    return _register


@pytest.fixture
def checkout_payload():
    return {
        "shipping_address": ADDRESS,
        "billing_address": ADDRESS,
        "payment_method": "credit_card",
    }
