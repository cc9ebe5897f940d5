"""Unit tests for document stores."""

import pytest

from case_content.core.normalizer import to_canonical, to_document
from case_content.data import SEED_ORDER, STATIC_CASES
from case_content.infrastructure.database import DatabaseClient
from case_content.infrastructure.persistence import (
    CaseRepository,
    InMemoryDocumentStore,
    LoadMode,
    RepositoryException,
    SQLDocumentStore,
)


async def _sql_store(tmp_path, create_tables=True):
    client = DatabaseClient(f"sqlite+aiosqlite:///{tmp_path / 'documents.db'}")
    if create_tables:
        await client.create_tables()
    return client, SQLDocumentStore(client.async_session_maker)


@pytest.mark.unit
class TestInMemoryDocumentStore:

    @pytest.mark.asyncio
    async def test_documents_are_copied(self):
        store = InMemoryDocumentStore()
        document = {"title": "A", "hints": ["x"]}

        await store.upsert("cases", "a", document)
        document["hints"].append("y")
        fetched = await store.fetch_all("cases")
        fetched[0]["title"] = "changed"

        assert await store.fetch_all("cases") == [{"id": "a", "title": "A", "hints": ["x"]}]

    @pytest.mark.asyncio
    async def test_collections_are_separate(self):
        store = InMemoryDocumentStore({"users": [{"id": "u1", "completedCases": []}]})

        assert await store.fetch_all("cases") == []
        assert len(await store.fetch_all("users")) == 1

    @pytest.mark.asyncio
    async def test_delete(self):
        store = InMemoryDocumentStore({"cases": [{"id": "a"}, {"id": "b"}]})

        assert await store.delete("cases", "a") is True
        assert await store.delete("cases", "a") is False
        assert [doc["id"] for doc in await store.fetch_all("cases")] == ["b"]


@pytest.mark.unit
class TestSQLDocumentStore:

    @pytest.mark.asyncio
    async def test_upsert_is_idempotent(self, tmp_path):
        client, store = await _sql_store(tmp_path)
        try:
            await store.upsert("cases", "a", {"title": "First"})
            await store.upsert("cases", "a", {"title": "Second"})
            await store.upsert("users", "u1", {"completedCases": ["a"], "totalPoints": 10})

            cases = await store.fetch_all("cases")
            users = await store.fetch_all("users")
        finally:
            await client.close()

        assert cases == [{"id": "a", "title": "Second"}]
        assert users[0]["completedCases"] == ["a"]

    @pytest.mark.asyncio
    async def test_delete(self, tmp_path):
        client, store = await _sql_store(tmp_path)
        try:
            await store.upsert("cases", "a", {"title": "A"})

            assert await store.delete("cases", "a") is True
            assert await store.delete("cases", "a") is False
            assert await store.fetch_all("cases") == []
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_canonical_document_survives_storage(self, tmp_path):
        case = to_canonical(STATIC_CASES[0]).case
        client, store = await _sql_store(tmp_path)
        try:
            await store.upsert("cases", case.id, to_document(case))
            [stored] = await store.fetch_all("cases")
        finally:
            await client.close()

        assert to_canonical(stored).case == case

    @pytest.mark.asyncio
    async def test_missing_table_raises_repository_exception(self, tmp_path):
        client, store = await _sql_store(tmp_path, create_tables=False)
        try:
            with pytest.raises(RepositoryException):
                await store.fetch_all("cases")
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_repository_seeds_sql_store(self, tmp_path):
        client, store = await _sql_store(tmp_path)
        try:
            repository = CaseRepository(store, STATIC_CASES, SEED_ORDER)
            first = await repository.load()
            second = await repository.load()
        finally:
            await client.close()

        assert first.mode == LoadMode.SEED_THEN_REMOTE
        assert second.mode == LoadMode.REMOTE
        assert [c.id for c in second.cases] == list(SEED_ORDER)

    @pytest.mark.asyncio
    async def test_repository_falls_back_without_table(self, tmp_path):
        client, store = await _sql_store(tmp_path, create_tables=False)
        try:
            snapshot = await CaseRepository(store, STATIC_CASES, SEED_ORDER).load()
        finally:
            await client.close()

        assert snapshot.mode == LoadMode.STATIC_FALLBACK
