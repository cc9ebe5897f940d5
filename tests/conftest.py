"""Shared fixtures."""

import pytest

from case_content.data import SEED_ORDER, STATIC_CASES
from case_content.infrastructure.persistence import CaseRepository, InMemoryDocumentStore


@pytest.fixture
def memory_store():
    return InMemoryDocumentStore()


@pytest.fixture
def repository(memory_store):
    return CaseRepository(memory_store, STATIC_CASES, SEED_ORDER)


@pytest.fixture
def client(monkeypatch, repository):
    """TestClient over the app with an in-memory catalog."""
    from fastapi.testclient import TestClient

    from case_content.api.routes import cases as cases_routes
    from case_content.config import settings
    from case_content.main import app

    monkeypatch.setattr(settings, "storage_type", "inmemory")
    monkeypatch.setattr(cases_routes, "_case_repository", repository)

    with TestClient(app) as test_client:
        yield test_client


class FailingStore(InMemoryDocumentStore):
    """Store whose reads always fail."""

    async def fetch_all(self, collection):
        raise ConnectionError("store unreachable")


@pytest.fixture
def failing_store():
    return FailingStore()
