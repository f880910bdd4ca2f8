"""
Pytest configuration and fixtures for the marketplace backend.
"""
import os
from decimal import Decimal

import pytest

# Set test environment variables before importing the app
os.environ["ENV"] = "test"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"
# Use in-memory SQLite for tests (one shared connection, see build_engine)
os.environ["DATABASE_URL"] = "sqlite://"

from fastapi.testclient import TestClient
from sqlmodel import SQLModel, Session

from marketplace import models  # noqa: F401
from marketplace.database import engine
from marketplace.main import app
from marketplace.models import Product, Seller, User
from marketplace.schemas.checkout_schemas import CartLine, PlaceOrderRequest, ShippingAddress
from marketplace.utils.token import create_access_token


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests of pure helpers")
    config.addinivalue_line("markers", "integration: tests that go through the database or the HTTP app")


@pytest.fixture(autouse=True)
def database():
    """Fresh schema for every test."""
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    app.state.rate_limiter.clear()
    yield
    app.state.rate_limiter.clear()


@pytest.fixture
def session(database):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client():
    with TestClient(app) as client:
        yield client


def _add(session, obj):
    session.add(obj)
    session.commit()
    session.refresh(obj)
    return obj


@pytest.fixture
def admin_user(session):
    return _add(session, User(name="Admin", email="admin@market.test", role="admin"))


@pytest.fixture
def customer_user(session):
    return _add(session, User(name="Jane Customer", email="jane@example.com"))


@pytest.fixture
def make_seller(session):
    """Create an active seller (with its user account) and return the Seller."""
    counter = {"n": 0}

    def _make(shop_name=None, status="active", bank=True):
        counter["n"] += 1
        n = counter["n"]
        user = _add(session, User(name=f"Seller {n}", email=f"seller{n}@market.test", role="seller"))
        seller = Seller(
            user_id=user.id,
            shop_name=shop_name or f"Shop {n}",
            email=user.email,
            status=status,
        )
        if bank:
            seller.bank_name = "First Bank"
            seller.account_number = f"00012345{n}"
            seller.account_holder_name = f"Seller {n}"
        return _add(session, seller)

    return _make


@pytest.fixture
def seller_a(make_seller):
    return make_seller("Alpha Goods")


@pytest.fixture
def seller_b(make_seller):
    return make_seller("Beta Crafts")


@pytest.fixture
def make_product(session):
    def _make(seller, name="Widget", price="10.00", stock=10):
        return _add(
            session,
            Product(seller_id=seller.id, name=name, price=Decimal(price), stock_quantity=stock),
        )

    return _make


@pytest.fixture
def order_request():
    """Build a PlaceOrderRequest from (product, quantity) pairs."""

    def _build(lines, email="jane@example.com", total=None, request_id=None):
        items = [
            CartLine(
                product_id=product.id,
                seller_id=product.seller_id,
                quantity=quantity,
                unit_price=product.price,
                product_name=product.name,
                product_image=product.image,
            )
            for product, quantity in lines
        ]
        subtotal = sum((i.unit_price * i.quantity for i in items), Decimal("0"))
        return PlaceOrderRequest(
            customer_name="Jane Customer",
            customer_email=email,
            shipping_address=ShippingAddress(
                street="1 Main St", city="Springfield", state="IL", zipcode="62701", country="US"
            ),
            items=items,
            total_amount=subtotal if total is None else Decimal(total),
            request_id=request_id,
        )

    return _build


def auth_headers(user):
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(admin_user):
    return auth_headers(admin_user)


@pytest.fixture
def customer_headers(customer_user):
    return auth_headers(customer_user)


@pytest.fixture
def headers_for():
    return auth_headers


SELLER_PATH = ["processing", "packed", "shipped", "delivered"]


@pytest.fixture
def advance_to(session):
    """Walk a seller order along the seller path up to `target`."""
    from marketplace.constants.order_status import ActorRole
    from marketplace.models import SellerOrder
    from marketplace.services.fulfillment_service import advance_seller_order

    def _advance(seller_order_id, target="delivered"):
        seller_order = session.get(SellerOrder, seller_order_id)
        # resume after the current status; "pending" is not on the path
        start = SELLER_PATH.index(seller_order.status) + 1 if seller_order.status in SELLER_PATH else 0
        for status in SELLER_PATH[start: SELLER_PATH.index(target) + 1]:
            seller_order = advance_seller_order(
                session,
                seller_order_id,
                status,
                role=ActorRole.seller,
                seller_id=seller_order.seller_id,
            )
        return seller_order

    return _advance


@pytest.fixture
def delivered_order(session, make_product, order_request, advance_to):
    """Place a single-line order for `seller` worth `amount` and deliver it."""
    from marketplace.services.order_service import place_order

    def _make(seller, amount, status="delivered"):
        product = make_product(seller, name=f"Item {amount}", price=amount)
        order = place_order(session, order_request([(product, 1)]))
        seller_order = order.seller_orders[0]
        if status != "pending":
            advance_to(seller_order.id, status)
        return seller_order

    return _make
