"""Case persistence layer - Repository Pattern implementation."""

from case_content.infrastructure.persistence.document_store import (
    DocumentStore,
    InMemoryDocumentStore,
    RepositoryException,
    SQLDocumentStore,
)
from case_content.infrastructure.persistence.case_repository import (
    CaseRepository,
    CatalogSnapshot,
    LoadMode,
    compute_case_stats,
)

__all__ = [
    "CaseRepository",
    "CatalogSnapshot",
    "DocumentStore",
    "InMemoryDocumentStore",
    "LoadMode",
    "RepositoryException",
    "SQLDocumentStore",
    "compute_case_stats",
]
