import uuid
from datetime import datetime
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from server import app
from store_ratings.db.session import get_db

VALID_PASSWORD = "Abcdef1!"
SPRINGFIELD = "742 Evergreen Terrace, Springfield"


def _matches(doc, query):
    return all(doc.get(k) == v for k, v in query.items())


class FakeCursor:
    def __init__(self, docs):
        self._docs = docs

    def limit(self, n):
        self._docs = self._docs[:n]
        return self

    async def to_list(self, length=None):
        docs = self._docs if length is None else self._docs[:length]
        return [dict(d) for d in docs]


class FakeCollection:
    """In-memory stand-in for a Motor collection; equality queries only."""

    def __init__(self):
        self.docs = []

    async def find_one(self, query):
        for doc in self.docs:
            if _matches(doc, query):
                return dict(doc)
        return None

    def find(self, query=None):
        return FakeCursor([d for d in self.docs if _matches(d, query or {})])

    async def insert_one(self, doc):
        doc.setdefault("_id", str(uuid.uuid4()))
        self.docs.append(dict(doc))
        return SimpleNamespace(inserted_id=doc["_id"])

    async def update_one(self, query, update):
        for doc in self.docs:
            if _matches(doc, query):
                doc.update(update.get("$set", {}))
                return SimpleNamespace(matched_count=1, modified_count=1)
        return SimpleNamespace(matched_count=0, modified_count=0)

    async def delete_many(self, query):
        before = len(self.docs)
        self.docs = [d for d in self.docs if not _matches(d, query)]
        return SimpleNamespace(deleted_count=before - len(self.docs))

    async def count_documents(self, query):
        return len([d for d in self.docs if _matches(d, query)])


class FakeDatabase:
    def __init__(self):
        self._collections = {}

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)
        return self._collections.setdefault(name, FakeCollection())

    def __getitem__(self, name):
        return getattr(self, name)


@pytest.fixture
def db():
    return FakeDatabase()


@pytest.fixture
def client(db):
    app.dependency_overrides[get_db] = lambda: db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


def unavailable(*args, **kwargs):
    """Drop-in for a collection method whose call fails, e.g. ``find``."""
    raise RuntimeError("database unavailable")


async def unavailable_async(*args, **kwargs):
    raise RuntimeError("database unavailable")


@pytest.fixture
def register(client, db):
    """Register through the API, then set the role directly on the profile."""
    def _register(email, role="user", name=None, address=SPRINGFIELD, password=VALID_PASSWORD):
        res = client.post("/api/auth/register", json={
            "name": name or f"{email.split('@')[0].title()} With A Long Enough Name",
            "email": email,
            "address": address,
            "password": password,
        })
        assert res.status_code == 201, res.text
        body = res.json()
        if role != "user":
            for doc in db.users.docs:
                if doc["id"] == body["user"]["id"]:
                    doc["role"] = role
        return SimpleNamespace(
            id=body["user"]["id"],
            email=email,
            token=body["access_token"],
            headers=auth_headers(body["access_token"]),
        )
    return _register


@pytest.fixture
def make_store(db):
    """Insert a store document directly."""
    def _make_store(name, address=SPRINGFIELD, owner_id="owner-1", email="shop@example.com"):
        store = {
            "id": str(uuid.uuid4()),
            "name": name,
            "email": email,
            "address": address,
            "owner_id": owner_id,
            "created_at": datetime.utcnow(),
        }
        db.stores.docs.append(store)
        return store
    return _make_store
