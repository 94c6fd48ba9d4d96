import copy
from collections import defaultdict

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from pymongo.errors import PyMongoError
from pymongo.results import DeleteResult, InsertOneResult, UpdateResult

from bistro.core.config import get_settings
from bistro.core.security import TokenService, get_token_service
from bistro.database import DocumentStore, get_store
from bistro.main import app
from bistro.services.payment import MockPaymentService, get_payment_service

TEST_SECRET = "test-secret"


def matches(document, query):
    for key, condition in query.items():
        if isinstance(condition, dict) and "$in" in condition:
            if document.get(key) not in condition["$in"]:
                return False
        elif document.get(key) != condition:
            return False
    return True


class FakeCursor:

    def __init__(self, documents):
        self._documents = documents

    async def to_list(self, length=None):
        return self._documents if length is None else self._documents[:length]


class FakeCollection:
    """In-memory stand-in for the subset of the motor collection API we use."""

    def __init__(self):
        self.docs = []
        self.fail_on = set()

    def _check(self, operation):
        if operation in self.fail_on:
            raise PyMongoError(f"simulated {operation} failure")

    def find(self, query=None, projection=None):
        self._check("find")
        return FakeCursor([copy.deepcopy(d) for d in self.docs if matches(d, query or {})])

    async def find_one(self, query=None):
        self._check("find_one")
        for document in self.docs:
            if matches(document, query or {}):
                return copy.deepcopy(document)
        return None

    async def insert_one(self, document, session=None):
        self._check("insert_one")
        document.setdefault("_id", ObjectId())
        self.docs.append(copy.deepcopy(document))
        return InsertOneResult(document["_id"], acknowledged=True)

    async def delete_one(self, query, session=None):
        self._check("delete_one")
        for document in self.docs:
            if matches(document, query):
                self.docs.remove(document)
                return DeleteResult({"n": 1}, acknowledged=True)
        return DeleteResult({"n": 0}, acknowledged=True)

    async def delete_many(self, query, session=None):
        self._check("delete_many")
        kept = [d for d in self.docs if not matches(d, query)]
        removed = len(self.docs) - len(kept)
        self.docs = kept
        return DeleteResult({"n": removed}, acknowledged=True)

    async def update_one(self, query, update, session=None):
        self._check("update_one")
        for document in self.docs:
            if matches(document, query):
                changes = update.get("$set", {})
                modified = any(document.get(k) != v for k, v in changes.items())
                document.update(changes)
                return UpdateResult({"n": 1, "nModified": int(modified)}, acknowledged=True)
        return UpdateResult({"n": 0, "nModified": 0}, acknowledged=True)

    async def estimated_document_count(self):
        self._check("estimated_document_count")
        return len(self.docs)


class FakeDatabase(defaultdict):

    def __init__(self):
        super().__init__(FakeCollection)


@pytest.fixture
def store():
    return DocumentStore(FakeDatabase(), settings=get_settings())


@pytest.fixture
def tokens():
    return TokenService(TEST_SECRET, expires_minutes=60)


@pytest.fixture
def payment_service():
    return MockPaymentService()


@pytest.fixture
def client(store, tokens, payment_service):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_token_service] = lambda: tokens
    app.dependency_overrides[get_payment_service] = lambda: payment_service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(tokens):
    def build(email):
        return {"Authorization": f"Bearer {tokens.issue({'email': email})}"}
    return build


@pytest.fixture
def admin_email(store):
    store.users.docs.append({"_id": ObjectId(), "email": "admin@bistro.com", "name": "Admin", "role": "admin"})
    return "admin@bistro.com"


@pytest.fixture
def customer_email(store):
    store.users.docs.append({"_id": ObjectId(), "email": "guest@bistro.com", "name": "Guest"})
    return "guest@bistro.com"
