import os

# Configure before any storefront module reads settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("REDIS_URL", None)
os.environ.pop("SHIPROCKET_WEBHOOK_TOKEN", None)
os.environ.pop("RAZORPAY_WEBHOOK_SECRET", None)
os.environ.update({
    "JWT_SECRET": "test-jwt-secret",
    "RAZORPAY_KEY_ID": "rzp_test_key",
    "RAZORPAY_KEY_SECRET": "rzp_test_secret",
    "SHIPROCKET_EMAIL": "ops@example.com",
    "SHIPROCKET_PASSWORD": "shiprocket-pass",
    "SHIPROCKET_PICKUP_NAME": "Watch House",
    "SHIPROCKET_PICKUP_EMAIL": "ops@example.com",
    "SHIPROCKET_PICKUP_PHONE": "9876543210",
    "SHIPROCKET_PICKUP_STREET": "12 MG Road",
    "SHIPROCKET_PICKUP_CITY": "Bengaluru",
    "SHIPROCKET_PICKUP_STATE": "Karnataka",
    "SHIPROCKET_PICKUP_PINCODE": "560001",
    "SHIPROCKET_PICKUP_LOCATION": "Primary",
})

import httpx
import pytest
from fastapi.testclient import TestClient

from storefront.main import app
from storefront.auth_local import create_access_token
from storefront.core_settings import get_settings
from storefront.domain.models import Base, Collection, Order, OrderItem, Product
from storefront.infrastructure.cache import reset_cache
from storefront.infrastructure.db import SessionLocal, engine
from storefront.infrastructure.razorpay import RazorpayClient
from storefront.infrastructure.shiprocket import ShiprocketClient
from storefront.api.deps import get_razorpay_client, get_shiprocket_client


class FakeVendor:
    """httpx MockTransport handler: canned responses by method and path suffix, every request recorded."""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, method, path, status_code=200, json=None):
        self.routes[(method, path)] = (status_code, json if json is not None else {})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for (method, path), (status_code, body) in self.routes.items():
            if request.method == method and request.url.path.endswith(path):
                return httpx.Response(status_code, json=body)
        return httpx.Response(404, json={"message": f"No route for {request.method} {request.url.path}"})

    def calls(self, path):
        return [r for r in self.requests if r.url.path.endswith(path)]


@pytest.fixture(autouse=True)
def fresh_database():
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    reset_cache()
    yield
    app.dependency_overrides.clear()
    reset_cache()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def razorpay(settings):
    vendor = FakeVendor()
    app.dependency_overrides[get_razorpay_client] = lambda: RazorpayClient(settings, transport=httpx.MockTransport(vendor))
    return vendor


@pytest.fixture
def shiprocket(settings):
    vendor = FakeVendor()
    vendor.add("POST", "/auth/login", json={"token": "sr-token"})
    app.dependency_overrides[get_shiprocket_client] = lambda: ShiprocketClient(settings, transport=httpx.MockTransport(vendor))
    return vendor


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {create_access_token('admin@example.com', 'admin')}"}


@pytest.fixture
def user_headers():
    return {"Authorization": f"Bearer {create_access_token('asha@example.com', 'user')}"}


def make_collection(db, **overrides):
    data = {
        "title": "Dress Watches",
        "slug": "dress-watches",
        "description": "Slim watches for formal wear",
        "image": "https://cdn.example.com/dress.jpg",
        "meta": {},
    }
    data.update(overrides)
    collection = Collection(**data)
    db.add(collection)
    db.commit()
    db.refresh(collection)
    return collection


def make_product(db, collection, **overrides):
    data = {
        "title": "Classic Steel 40mm",
        "slug": "classic-steel-40mm",
        "sku": "CS-40",
        "price": 129900,
        "currency": "INR",
        "collection_id": collection.id,
        "images": ["https://cdn.example.com/cs40.jpg"],
        "description": "Steel case, sapphire crystal",
        "specs": {"case": "40mm"},
        "stock": 5,
        "featured": False,
        "is_published": True,
    }
    data.update(overrides)
    product = Product(**data)
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


def make_order(db, items=(), **overrides):
    data = {
        "order_number": f"TEST-{db.query(Order).count() + 1:05d}",
        "amount": sum(i["price"] * i["qty"] for i in items) or 129900,
        "currency": "INR",
        "status": "paid",
        "customer_name": "Asha Rani Verma",
        "customer_email": "asha@example.com",
        "customer_phone": "9876543210",
        "address_street": "4 Park Street",
        "address_city": "Kolkata",
        "address_state": "West Bengal",
        "address_zip_code": "700016",
        "address_country": "India",
        "razorpay_order_id": "order_test_1",
    }
    data.update(overrides)
    order = Order(**data, items=[OrderItem(**item) for item in items])
    db.add(order)
    db.commit()
    db.refresh(order)
    return order


def reload(db, obj):
    """Re-read ``obj`` after the app committed through another session."""
    db.expire_all()
    return db.get(type(obj), obj.id)
