import os

# Must be set before the app modules build their engine and settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SEED_ON_STARTUP"] = "false"
os.environ["LLM_API_KEY"] = ""

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from app import models  # noqa: F401
from app.database import Base, SessionLocal, engine
from app.main import app
from app.schemas.airline import Airline
from app.schemas.feature import Feature
from app.schemas.implementation import Implementation
from app.services.data_loader import (
    SAMPLE_AIRLINES,
    SAMPLE_FEATURES,
    SAMPLE_IMPLEMENTATIONS,
    DataLoader,
)
from app.services.errors import DatabaseError


class InMemoryStore:
    """DomainStore over plain lists; tables named in `fail_on` raise on read"""

    def __init__(self, airlines, features, implementations, fail_on=()):
        self.airlines = airlines
        self.features = features
        self.implementations = implementations
        self.fail_on = set(fail_on)
        self.reads = []

    def _read(self, table, rows):
        self.reads.append(table)
        if table in self.fail_on:
            raise DatabaseError(f"{table} table unavailable")
        return list(rows)

    def get_all_airlines(self):
        return self._read("airlines", self.airlines)

    def get_all_features(self):
        return self._read("features", self.features)

    def get_all_implementations(self):
        return self._read("implementations", self.implementations)


def make_sample_store(fail_on=()):
    """
    The sample data set with the ids a fresh database would assign:
    airlines 1-5 and features 1-9 in insertion order, implementations 1-25.
    """
    airlines = [Airline(id=i, **data) for i, data in enumerate(SAMPLE_AIRLINES, start=1)]
    features = [Feature(id=i, **data) for i, data in enumerate(SAMPLE_FEATURES, start=1)]
    airline_ids = {a.name: a.id for a in airlines}
    feature_ids = {f.name: f.id for f in features}

    implementations = [
        Implementation(
            id=i,
            airline_id=airline_ids[airline_name],
            feature_id=feature_ids[feature_name],
            value=value,
            notes=notes,
        )
        for i, (airline_name, feature_name, value, notes) in enumerate(
            SAMPLE_IMPLEMENTATIONS, start=1
        )
    ]

    return InMemoryStore(
        sorted(airlines, key=lambda a: a.name),
        sorted(features, key=lambda f: (f.category.value, f.name)),
        implementations,
        fail_on=fail_on,
    )


class FakeCompletions:
    def __init__(self, reply, error):
        self.reply = reply
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        if self.reply is None:
            return SimpleNamespace(choices=[])
        return SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=self.reply))]
        )


class FakeLLMClient:
    """Mimics the `client.chat.completions.create` surface of the openai SDK"""

    def __init__(self, reply="AI connection successful", error=None):
        self.completions = FakeCompletions(reply, error)
        self.chat = SimpleNamespace(completions=self.completions)


@pytest.fixture
def store():
    return make_sample_store()


@pytest.fixture
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seeded_db(db):
    DataLoader(db).seed_sample_data()
    return db


@pytest.fixture
def client(db):
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_store():
    return make_sample_store


@pytest.fixture
def llm_factory():
    return FakeLLMClient
