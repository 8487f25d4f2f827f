"""Shared fixtures: an in-memory Firestore double and a wired test client."""

import copy
import operator
import uuid

import pytest
from google.api_core.exceptions import AlreadyExists, NotFound
from google.cloud import firestore
from starlette.testclient import TestClient

from fitlogr.main import create_app
from fitlogr.shell import auth
from fitlogr.shell.firestore_client import FitLogFirestoreClient


_OPERATORS = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


class FakeSnapshot:
    def __init__(self, reference, data):
        self.reference = reference
        self.id = reference.id
        self._data = copy.deepcopy(data)

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return copy.deepcopy(self._data)


class FakeDocumentReference:
    def __init__(self, db, path):
        self._db = db
        self.path = path
        self.id = path.rsplit("/", 1)[-1]

    def get(self, transaction=None):
        return FakeSnapshot(self, self._db.docs.get(self.path))

    def create(self, data):
        if self.path in self._db.docs:
            raise AlreadyExists(f"Document already exists: {self.path}")
        self._db.docs[self.path] = copy.deepcopy(data)

    def set(self, data, merge=False):
        if merge and self.path in self._db.docs:
            self._db.docs[self.path].update(copy.deepcopy(data))
        else:
            self._db.docs[self.path] = copy.deepcopy(data)

    def update(self, data):
        if self.path not in self._db.docs:
            raise NotFound(f"No document to update: {self.path}")
        self._db.docs[self.path].update(copy.deepcopy(data))

    def delete(self):
        self._db.docs.pop(self.path, None)

    def collection(self, name):
        return FakeCollection(self._db, f"{self.path}/{name}")


class FakeQuery:
    def __init__(self, db, path, filters=(), orders=(), limit=None):
        self._db = db
        self._path = path
        self._filters = tuple(filters)
        self._orders = tuple(orders)
        self._limit = limit

    def _copy(self, **changes):
        state = {
            "filters": self._filters,
            "orders": self._orders,
            "limit": self._limit,
            **changes,
        }
        return FakeQuery(self._db, self._path, **state)

    def where(self, field, op, value):
        return self._copy(filters=self._filters + ((field, _OPERATORS[op], value),))

    def order_by(self, field, direction=firestore.Query.ASCENDING):
        return self._copy(orders=self._orders + ((field, direction),))

    def limit(self, count):
        return self._copy(limit=count)

    def stream(self, transaction=None):
        prefix = self._path + "/"
        matched = []
        for path, data in sorted(self._db.docs.items()):
            if not path.startswith(prefix) or "/" in path[len(prefix):]:
                continue
            if all(field in data and op(data[field], value) for field, op, value in self._filters):
                matched.append(FakeDocumentReference(self._db, path).get())

        for field, direction in reversed(self._orders):
            matched.sort(
                key=lambda snap: snap.to_dict().get(field),
                reverse=direction == firestore.Query.DESCENDING,
            )
        if self._limit is not None:
            matched = matched[: self._limit]
        return iter(matched)

    def get(self, transaction=None):
        return list(self.stream(transaction=transaction))


class FakeCollection(FakeQuery):
    def __init__(self, db, path):
        super().__init__(db, path)

    def document(self, document_id=None):
        return FakeDocumentReference(self._db, f"{self._path}/{document_id or uuid.uuid4().hex}")


class FakeTransaction:
    """Applies writes immediately; transaction bodies run once, inline."""

    def get_all(self, references):
        for reference in references:
            yield reference.get(transaction=self)

    def set(self, reference, data, merge=False):
        reference.set(data, merge=merge)

    def create(self, reference, data):
        reference.create(data)

    def update(self, reference, data):
        reference.update(data)

    def delete(self, reference):
        reference.delete()


class FakeFirestore:
    """Just enough of ``firestore.Client`` for the stores under test."""

    def __init__(self):
        self.docs: dict[str, dict] = {}

    def collection(self, name):
        return FakeCollection(self, name)

    def transaction(self):
        return FakeTransaction()

    def get_all(self, references):
        for reference in references:
            yield reference.get()

    def paths(self, prefix: str) -> list[str]:
        """Stored document paths under a collection path."""
        return sorted(p for p in self.docs if p.startswith(prefix + "/"))


@pytest.fixture(autouse=True)
def inline_transactions(monkeypatch):
    """Run transaction bodies directly against the fake transaction."""
    monkeypatch.setattr(firestore, "transactional", lambda fn: fn)


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    monkeypatch.setattr(auth, "BCRYPT_ROUNDS", 4)


@pytest.fixture
def fake_firestore():
    return FakeFirestore()


@pytest.fixture
def db(fake_firestore):
    return FitLogFirestoreClient(client=fake_firestore)


@pytest.fixture
def client(db):
    """Test client wired to the in-memory store."""
    return TestClient(create_app(db))


@pytest.fixture
def registered_user(client):
    """Register a user through the API and return their credentials."""
    payload = {
        "username": "alice",
        "password": "correct-horse",
        "dob": "1990-01-01",
        "height": 170,
        "weight": 65,
        "gender": "Female",
        "goal": "Maintenance",
    }
    response = client.post("/register", json=payload)
    assert response.status_code == 201
    return payload
