"""Document store backing the case catalog.

The catalog needs very little from its store: read a whole collection, upsert
one document by id and delete one document by id. Two implementations:

- InMemoryDocumentStore: development and tests
- SQLDocumentStore: SQLite / PostgreSQL through async SQLAlchemy, one JSON
  document per row of the ``documents`` table
"""

import copy
import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List

from sqlalchemy import DateTime, bindparam, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

logger = logging.getLogger(__name__)


# ============================================================
# Store Interface
# ============================================================

class DocumentStore(ABC):
    """
    Abstract interface for a collection-oriented document store.

    Implementations:
    - SQLDocumentStore: Production database
    - InMemoryDocumentStore: Testing and development
    """

    @abstractmethod
    async def fetch_all(self, collection: str) -> List[Dict[str, Any]]:
        """
        Read every document of a collection.

        Args:
            collection: Collection name

        Returns:
            Documents, each carrying its ``id``

        Raises:
            RepositoryException: If the read fails
        """
        pass

    @abstractmethod
    async def upsert(self, collection: str, doc_id: str, document: Dict[str, Any]) -> None:
        """
        Create or replace a document.

        Args:
            collection: Collection name
            doc_id: Document identifier
            document: JSON-compatible document body

        Raises:
            RepositoryException: If the write fails
        """
        pass

    @abstractmethod
    async def delete(self, collection: str, doc_id: str) -> bool:
        """
        Delete a document.

        Returns:
            True if deleted, False if not found

        Raises:
            RepositoryException: If the delete fails
        """
        pass


# ============================================================
# In-Memory Implementation (for Testing)
# ============================================================

class InMemoryDocumentStore(DocumentStore):
    """
    In-memory document store for testing and development.

    Documents are deep-copied on the way in and out, not persistent across
    restarts.
    """

    def __init__(self, collections: Dict[str, List[Dict[str, Any]]] = None):
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        for name, documents in (collections or {}).items():
            for document in documents:
                self._collections.setdefault(name, {})[document["id"]] = copy.deepcopy(document)

    async def fetch_all(self, collection: str) -> List[Dict[str, Any]]:
        return [copy.deepcopy(doc) for doc in self._collections.get(collection, {}).values()]

    async def upsert(self, collection: str, doc_id: str, document: Dict[str, Any]) -> None:
        stored = copy.deepcopy(document)
        stored["id"] = doc_id
        self._collections.setdefault(collection, {})[doc_id] = stored

    async def delete(self, collection: str, doc_id: str) -> bool:
        documents = self._collections.get(collection, {})
        if doc_id in documents:
            del documents[doc_id]
            return True
        return False


# ============================================================
# SQL Implementation
# ============================================================

class SQLDocumentStore(DocumentStore):
    """
    SQL document store on async SQLAlchemy.

    Each operation runs in its own session; upsert uses
    INSERT ... ON CONFLICT DO UPDATE, which SQLite and PostgreSQL share.
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        """
        Initialize store with a session factory.

        Args:
            session_maker: Factory from DatabaseClient
        """
        self.session_maker = session_maker

    async def fetch_all(self, collection: str) -> List[Dict[str, Any]]:
        query = text(
            "SELECT doc_id, body FROM documents WHERE collection = :collection ORDER BY doc_id"
        )
        try:
            async with self.session_maker() as session:
                result = await session.execute(query, {"collection": collection})
                rows = result.fetchall()
        except SQLAlchemyError as e:
            raise RepositoryException(f"Failed to read collection {collection}: {e}") from e

        documents = []
        for row in rows:
            document = json.loads(row.body) if row.body else {}
            document.setdefault("id", row.doc_id)
            documents.append(document)
        return documents

    async def upsert(self, collection: str, doc_id: str, document: Dict[str, Any]) -> None:
        query = text("""
            INSERT INTO documents (collection, doc_id, body, updated_at)
            VALUES (:collection, :doc_id, :body, :updated_at)
            ON CONFLICT (collection, doc_id) DO UPDATE SET
                body = EXCLUDED.body,
                updated_at = EXCLUDED.updated_at
        """).bindparams(bindparam("updated_at", type_=DateTime(timezone=True)))

        params = {
            "collection": collection,
            "doc_id": doc_id,
            "body": json.dumps({**document, "id": doc_id}),
            "updated_at": datetime.now(timezone.utc),
        }
        try:
            async with self.session_maker() as session:
                await session.execute(query, params)
                await session.commit()
        except SQLAlchemyError as e:
            raise RepositoryException(f"Failed to save {collection}/{doc_id}: {e}") from e

    async def delete(self, collection: str, doc_id: str) -> bool:
        query = text("DELETE FROM documents WHERE collection = :collection AND doc_id = :doc_id")
        try:
            async with self.session_maker() as session:
                result = await session.execute(query, {"collection": collection, "doc_id": doc_id})
                await session.commit()
        except SQLAlchemyError as e:
            raise RepositoryException(f"Failed to delete {collection}/{doc_id}: {e}") from e

        return result.rowcount > 0


# ============================================================
# Repository Exception
# ============================================================

class RepositoryException(Exception):
    """Base exception for repository errors."""
    pass
