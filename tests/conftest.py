"""Shared fixtures: a throwaway SQLite database, a fake Stripe gateway and signed-in clients"""

import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("LOG_FILE", "")

import hashlib
import hmac
import json
import time
import uuid
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy import select

from storefront.api.v1.payments.stripe_client import StripeGateway
from storefront.core.cache import RedisCache
from storefront.core.database import Database
from storefront.core.exceptions import PaymentGatewayException
from storefront.core.security import ClerkTokenVerifier
from storefront.main import create_app
from storefront.middleware.rate_limit import limiter
from storefront.models import Category, Order, Product
from storefront.services.storage import StorageService

JWT_SECRET = "test-jwt-secret"
WEBHOOK_SECRET = "whsec_test_secret"
CUSTOMER_ID = "user_customer_1"
OTHER_CUSTOMER_ID = "user_customer_2"
ADMIN_ID = "user_admin_1"

limiter.enabled = False

class FakeGateway(StripeGateway):
    """Stripe gateway with the network calls replaced; signature checks stay real"""

    def __init__(self):
        super().__init__(secret_key="sk_test_fake", webhook_secret=WEBHOOK_SECRET)
        self.sessions = {}
        self.created_for = []

    async def create_checkout_session(self, order, return_url):
        session_id = f"cs_test_{len(self.sessions) + 1}"
        self.sessions[session_id] = {
            "id": session_id,
            "status": "open",
            "payment_status": "unpaid",
            "metadata": {"order_id": str(order.id)},
            "return_url": return_url,
        }
        self.created_for.append(order.id)
        return {"id": session_id, "client_secret": f"{session_id}_secret"}

    async def retrieve_session(self, session_id):
        if session_id not in self.sessions:
            raise PaymentGatewayException("No such checkout session")
        session = self.sessions[session_id]
        return {key: session[key] for key in ("id", "status", "payment_status", "metadata")}

    def complete(self, session_id, payment_status="paid"):
        self.sessions[session_id]["status"] = "complete"
        self.sessions[session_id]["payment_status"] = payment_status

    def expire(self, session_id):
        self.sessions[session_id]["status"] = "expired"

class FakeClerk:
    def __init__(self):
        self.users = {}

    def add_user(self, user_id, **fields):
        self.users[user_id] = {
            "id": user_id,
            "first_name": fields.get("first_name", "Ada"),
            "last_name": fields.get("last_name", "Lovelace"),
            "email": fields.get("email", f"{user_id}@example.com"),
            "image_url": fields.get("image_url"),
            "role": fields.get("role"),
        }

    async def get_user(self, user_id):
        return self.users.get(user_id)

def make_token(user_id: str, role: str = None) -> str:
    claims = {"sub": user_id, "sid": f"sess_{user_id}", "exp": int(time.time()) + 3600}
    if role:
        claims["metadata"] = {"role": role}
    return jwt.encode(claims, JWT_SECRET, algorithm="HS256")

def sign_payload(payload: bytes, secret: str = WEBHOOK_SECRET) -> str:
    """Build a Stripe-Signature header for the payload"""
    timestamp = int(time.time())
    signed = f"{timestamp}.{payload.decode('utf-8')}".encode("utf-8")
    signature = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signature}"

def checkout_event(event_type: str, session_id: str, order_id=None, payment_status: str = "paid") -> bytes:
    metadata = {"order_id": str(order_id)} if order_id else {}
    return json.dumps({
        "id": f"evt_{uuid.uuid4().hex}",
        "object": "event",
        "type": event_type,
        "data": {
            "object": {
                "id": session_id,
                "object": "checkout.session",
                "payment_status": payment_status,
                "metadata": metadata,
            }
        },
    }).encode("utf-8")

ADDRESS = {"line1": "12 Harbour Road", "line2": "Flat 3", "city": "Colombo", "phone": "+94 77 123 4567"}

def order_payload(*lines, payment_method="COD"):
    return {
        "items": [
            {"product_id": str(product.id), "quantity": quantity, **variant}
            for product, quantity, variant in lines
        ],
        "shipping_address": ADDRESS,
        "payment_method": payment_method,
    }

async def place_card_order(client, product, quantity=2):
    response = await client.post(
        "/api/v1/orders",
        json=order_payload((product, quantity, {}), payment_method="CREDIT_CARD")
    )
    assert response.status_code == 201
    return response.json()["id"]

async def start_checkout(client, order_id):
    response = await client.post("/api/v1/payments/checkout-session", json={"order_id": order_id})
    assert response.status_code == 200, response.text
    return response.json()["session_id"]

async def load_order(database, order_id):
    async with database.session() as db:
        result = await db.execute(select(Order).where(Order.id == uuid.UUID(str(order_id))))
        return result.scalar_one()

@pytest.fixture
async def database(tmp_path):
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'storefront-test.db'}")
    await db.create_all()
    yield db
    await db.dispose()

@pytest.fixture
def gateway():
    return FakeGateway()

@pytest.fixture
def clerk():
    fake = FakeClerk()
    fake.add_user(CUSTOMER_ID)
    fake.add_user(ADMIN_ID, first_name="Grace", last_name="Hopper", role="admin")
    return fake

@pytest.fixture
def app(database, gateway, clerk):
    application = create_app()
    application.state.db = database
    # Never connected, so it serves from the in-memory fallback
    application.state.cache = RedisCache("redis://localhost:6379/15")
    application.state.token_verifier = ClerkTokenVerifier(key=JWT_SECRET, algorithm="HS256")
    application.state.payment_gateway = gateway
    application.state.clerk = clerk
    application.state.storage = StorageService(
        cloud_name="demo-cloud",
        api_key="1234567890",
        api_secret="cloudinary-secret",
        base_folder="mebius-test"
    )
    return application

def _client(app, token=None):
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test", headers=headers)

@pytest.fixture
async def anon_client(app):
    async with _client(app) as client:
        yield client

@pytest.fixture
async def client(app):
    async with _client(app, make_token(CUSTOMER_ID)) as client:
        yield client

@pytest.fixture
async def other_client(app):
    async with _client(app, make_token(OTHER_CUSTOMER_ID)) as client:
        yield client

@pytest.fixture
async def admin_client(app):
    async with _client(app, make_token(ADMIN_ID, role="admin")) as client:
        yield client

@pytest.fixture
async def category(database):
    async with database.session() as db:
        shirts = Category(name="Shirts", description="Tops and shirts")
        db.add(shirts)
    return shirts

@pytest.fixture
def make_product(database, category):
    async def _make(**overrides) -> Product:
        data = {
            "name": "Linen Shirt",
            "description": "Breathable summer shirt",
            "image": "https://res.cloudinary.com/demo/linen.jpg",
            "category_id": category.id,
            "sizes": ["S", "M", "L"],
            "colors": ["White", "Sand"],
            "price": Decimal("40.00"),
            "discount": Decimal("0"),
            "stock": 10,
        }
        data.update(overrides)
        async with database.session() as db:
            product = Product(**data)
            db.add(product)
        return product
    return _make

@pytest.fixture
def read_product(database):
    async def _read(product_id) -> Product:
        async with database.session() as db:
            return await db.get(Product, product_id)
    return _read
