import hashlib
import hmac
import itertools
import json
import os
import time
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any, Dict, Generator, List

import pytest
from fastapi.testclient import TestClient
from postgrest.exceptions import APIError

# Pas de Redis pendant les tests: le lifespan désactive le rate limiting
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

from storefront.asgi import app as fastapi_app
from storefront.products import repository as products_repository

WEBHOOK_SECRET = "whsec_test_secret"
ADMIN_TOKEN = "admin-test-token"

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)


class _FakeQuery:
    """Sous-ensemble de l'API table() de supabase-py utilisé par les repositories."""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.op = "select"
        self.payload: Any = None
        self.on_conflict = None
        self.filters: List[tuple] = []
        self.max_rows = None

    def select(self, *cols):
        self.op = "select"
        return self

    def insert(self, payload):
        self.op, self.payload = "insert", payload
        return self

    def upsert(self, payload, on_conflict=None):
        self.op, self.payload, self.on_conflict = "upsert", payload, on_conflict
        return self

    def update(self, payload):
        self.op, self.payload = "update", payload
        return self

    def eq(self, col, value):
        self.filters.append((col, value))
        return self

    def limit(self, n):
        self.max_rows = n
        return self

    def _match(self, row):
        return all(row.get(c) == v for c, v in self.filters)

    def execute(self):
        if self.table_name in self.db.failing_tables:
            raise RuntimeError(f"table {self.table_name} indisponible")
        rows = self.db.tables.setdefault(self.table_name, [])
        if self.op == "insert":
            return SimpleNamespace(data=[self.db._insert(self.table_name, dict(self.payload))])
        if self.op == "upsert":
            key = self.on_conflict
            for row in rows:
                if key and row.get(key) == self.payload.get(key):
                    row.update(self.payload)
                    return SimpleNamespace(data=[dict(row)])
            return SimpleNamespace(data=[self.db._insert(self.table_name, dict(self.payload))])
        if self.op == "update":
            updated = []
            for row in rows:
                if self._match(row):
                    row.update(self.payload)
                    updated.append(dict(row))
            return SimpleNamespace(data=updated)
        found = [dict(r) for r in rows if self._match(r)]
        if self.max_rows is not None:
            found = found[: self.max_rows]
        return SimpleNamespace(data=found)


class FakeSupabase:
    """Base en mémoire: contraintes uniques orders.checkout_session_id et customers.email."""

    UNIQUE = {"orders": "checkout_session_id", "customers": "email"}

    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.failing_tables = set()
        self._ids = itertools.count(1)

    def table(self, name: str) -> _FakeQuery:
        return _FakeQuery(self, name)

    def _insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        rows = self.tables.setdefault(table, [])
        key = self.UNIQUE.get(table)
        if key and any(r.get(key) == row.get(key) for r in rows):
            raise APIError({
                "code": "23505",
                "message": f'duplicate key value violates unique constraint "{table}_{key}_key"',
                "details": None,
                "hint": None,
            })
        row.setdefault("id", next(self._ids))
        row.setdefault("created_at", datetime.now(timezone.utc).isoformat())
        rows.append(row)
        return dict(row)


@pytest.fixture(scope="session")
def app():
    return fastapi_app

@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c

# Mock base de données pour tous les tests
@pytest.fixture(autouse=True)
def fake_db(monkeypatch) -> FakeSupabase:
    db = FakeSupabase()
    monkeypatch.setattr("storefront.infra.supabase_client.get_supabase", lambda: db)
    monkeypatch.setattr("storefront.infra.supabase_client.get_service_supabase", lambda: db)
    return db

# Secrets factices; pas de clé Resend => aucun appel réseau réel
@pytest.fixture(autouse=True)
def _test_settings(monkeypatch):
    monkeypatch.setattr("storefront.config.STRIPE_WEBHOOK_SECRET", WEBHOOK_SECRET)
    monkeypatch.setattr("storefront.config.STRIPE_SECRET_KEY", "sk_test_dummy")
    monkeypatch.setattr("storefront.config.RESEND_API_KEY", "")
    monkeypatch.setattr("storefront.config.ADMIN_API_TOKEN", "")
    products_repository.clear_product_cache()
    yield
    products_repository.clear_product_cache()

@pytest.fixture
def admin_token(monkeypatch) -> str:
    monkeypatch.setattr("storefront.config.ADMIN_API_TOKEN", ADMIN_TOKEN)
    return ADMIN_TOKEN

@pytest.fixture
def sent_emails(monkeypatch) -> List[Dict[str, Any]]:
    """Capture les emails au lieu de les envoyer."""
    sent: List[Dict[str, Any]] = []

    def _fake_send(to, subject, html, api_key=None):
        sent.append({"to": to, "subject": subject, "html": html})
        return {"id": f"email_{len(sent)}"}

    monkeypatch.setattr("storefront.notifications.email.send_email", _fake_send)
    return sent


def sign_payload(payload: str, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    """En-tête Stripe-Signature valide: t=<ts>,v1=HMAC-SHA256(secret, "<ts>.<payload>")."""
    ts = int(time.time()) if timestamp is None else timestamp
    signature = hmac.new(secret.encode("utf-8"), f"{ts}.{payload}".encode("utf-8"), hashlib.sha256).hexdigest()
    return f"t={ts},v1={signature}"


def make_cart_items() -> List[Dict[str, Any]]:
    return [{
        "productId": "prod_safeheat",
        "productName": "SafeHeat Propane Heater",
        "quantity": 2,
        "price": 179.99,
    }]


def make_completed_event(
    session_id: str = "cs_test_abcdefgh12345678",
    email: str = "jane@example.com",
    amount_total: int = 35998,
    cart_items: Any = None,
    event_id: str = "evt_test_1",
) -> Dict[str, Any]:
    items = make_cart_items() if cart_items is None else cart_items
    metadata = {"cartItems": json.dumps(items)} if items else {}
    return {
        "id": event_id,
        "type": "checkout.session.completed",
        "data": {
            "object": {
                "id": session_id,
                "object": "checkout.session",
                "amount_total": amount_total,
                "currency": "usd",
                "customer_details": {
                    "email": email,
                    "name": "Jane Doe",
                    "phone": "+15555550100",
                    "address": {
                        "line1": "1 Main St",
                        "line2": None,
                        "city": "Austin",
                        "state": "TX",
                        "postal_code": "78701",
                        "country": "US",
                    },
                },
                "metadata": metadata,
            }
        },
    }
