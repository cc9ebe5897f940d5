"""Case repository: the catalog's owned state and its synchronization protocol.

``load`` drives the catalog through one of three outcomes:

    fetch cases ──> empty? ──yes──> seed from the static dataset ──> re-fetch
        │                                                              │
        └──────────────no──────────────┬───────────────────────────────┘
                                       v
                     normalize, sort by displayOrder, enrich stats
                                       │
    any failure above ──> static fallback (bundled dataset, notice attached)

Consumers read immutable ``CatalogSnapshot`` objects and may subscribe to be
told when a new one is published.
"""

import logging
import math
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field

from case_content.core import ordering
from case_content.core.normalizer import to_canonical, to_document
from case_content.infrastructure.persistence.document_store import DocumentStore
from case_content.models.case import Case, utc_now

logger = logging.getLogger(__name__)

FALLBACK_NOTICE = "The case store is unavailable; showing the bundled case catalog."


class LoadMode(str, Enum):
    """How the current snapshot was obtained."""

    NOT_LOADED = "not_loaded"
    REMOTE = "remote"
    SEED_THEN_REMOTE = "seed_then_remote"
    STATIC_FALLBACK = "static_fallback"


class CatalogSnapshot(BaseModel):
    """Immutable view of the catalog, ordered by display order."""

    model_config = ConfigDict(frozen=True)

    cases: Tuple[Case, ...] = ()
    mode: LoadMode = LoadMode.NOT_LOADED
    notice: Optional[str] = None
    loaded_at: Optional[datetime] = None
    applied_defaults: Dict[str, List[str]] = Field(default_factory=dict)

    def get(self, case_id: str) -> Optional[Case]:
        for case in self.cases:
            if case.id == case_id:
                return case
        return None


Listener = Callable[[CatalogSnapshot], None]


def compute_case_stats(case_id: str, users: Iterable[Mapping[str, Any]]) -> Tuple[int, int]:
    """Completion count and rounded average ``totalPoints`` of users who finished a case.

    Users without a usable ``totalPoints`` count as 0. No matches gives (0, 0).
    """
    completions = 0
    points_sum = 0.0
    for user in users:
        completed = user.get("completedCases") or []
        if not isinstance(completed, (list, tuple)) or case_id not in completed:
            continue
        completions += 1
        points = user.get("totalPoints")
        if isinstance(points, (int, float)) and not isinstance(points, bool):
            try:
                points = float(points)
            except OverflowError:
                continue
            if math.isfinite(points):
                points_sum += points

    if completions == 0:
        return 0, 0
    return completions, max(0, round(points_sum / completions))


class CaseRepository:
    """
    Owner of the case catalog.

    Persistence is single-editor, last-write-wins; every write goes through
    ``DocumentStore.upsert`` keyed by case id.
    """

    def __init__(
        self,
        store: DocumentStore,
        static_cases: Sequence[Mapping[str, Any]],
        seed_order: Sequence[str],
        cases_collection: str = "cases",
        users_collection: str = "users",
    ):
        """
        Initialize repository.

        Args:
            store: Remote document store
            static_cases: Bundled dataset in legacy document shape
            seed_order: Case ids in the order they are seeded
            cases_collection: Collection holding case documents
            users_collection: Collection holding user records
        """
        self.store = store
        self.static_cases = list(static_cases)
        self.seed_order = list(seed_order)
        self.cases_collection = cases_collection
        self.users_collection = users_collection

        self._snapshot = CatalogSnapshot()
        self._listeners: List[Listener] = []

    # ========================================================================
    # Snapshot and subscriptions
    # ========================================================================

    @property
    def snapshot(self) -> CatalogSnapshot:
        return self._snapshot

    @property
    def mode(self) -> LoadMode:
        return self._snapshot.mode

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for new snapshots; returns the unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, snapshot: CatalogSnapshot) -> CatalogSnapshot:
        self._snapshot = snapshot
        for listener in list(self._listeners):
            listener(snapshot)
        return snapshot

    def _publish_cases(self, cases: Iterable[Case]) -> CatalogSnapshot:
        ordered = sorted(cases, key=lambda case: case.display_order)
        return self._publish(self._snapshot.model_copy(update={"cases": tuple(ordered)}))

    # ========================================================================
    # Load
    # ========================================================================

    async def load(self) -> CatalogSnapshot:
        """
        Load the catalog from the store, seeding it when empty.

        Never raises: any failure while fetching, seeding, normalizing or
        enriching publishes the static fallback catalog instead.

        Returns:
            The published snapshot
        """
        try:
            mode = LoadMode.REMOTE
            documents = await self.store.fetch_all(self.cases_collection)
            if not documents:
                logger.info(f"Collection '{self.cases_collection}' is empty, seeding from static dataset")
                await self.seed(force=True)
                documents = await self.store.fetch_all(self.cases_collection)
                mode = LoadMode.SEED_THEN_REMOTE

            cases, applied = self._normalize(documents)
            cases = await self.enrich(cases)
        except Exception as e:
            logger.error(f"Failed to load cases from store, using static fallback: {e}")
            return self._publish(self._static_snapshot())

        logger.info(f"Loaded {len(cases)} cases (mode={mode.value})")
        return self._publish(
            CatalogSnapshot(
                cases=tuple(cases),
                mode=mode,
                loaded_at=utc_now(),
                applied_defaults=applied,
            )
        )

    def _normalize(self, documents: Sequence[Mapping[str, Any]]) -> Tuple[List[Case], Dict[str, List[str]]]:
        cases = []
        applied: Dict[str, List[str]] = {}
        for position, document in enumerate(documents):
            result = to_canonical(document, position)
            if result.applied_defaults:
                logger.warning(
                    f"Case {result.case.id} repaired with defaults: {', '.join(result.applied_defaults)}"
                )
                applied[result.case.id] = result.applied_defaults
            cases.append(result.case)

        cases.sort(key=lambda case: case.display_order)
        return ordering.reindex(cases, field="display_order"), applied

    async def enrich(self, cases: Sequence[Case]) -> List[Case]:
        """Attach completion statistics from a single scan of the users collection."""
        users = await self.store.fetch_all(self.users_collection)
        enriched = []
        for case in cases:
            completions, average_score = compute_case_stats(case.id, users)
            enriched.append(
                case.model_copy(update={"completions": completions, "average_score": average_score})
            )
        return enriched

    def _static_snapshot(self) -> CatalogSnapshot:
        now = utc_now()
        cases = []
        for position, raw in enumerate(self.static_cases):
            case = to_canonical(raw, position).case
            cases.append(
                case.model_copy(
                    update={
                        "display_order": position + 1,
                        "is_active": True,
                        "completions": 0,
                        "average_score": 0,
                        "created_at": now,
                        "updated_at": now,
                    }
                )
            )
        return CatalogSnapshot(
            cases=tuple(cases),
            mode=LoadMode.STATIC_FALLBACK,
            notice=FALLBACK_NOTICE,
            loaded_at=now,
        )

    # ========================================================================
    # Seeding
    # ========================================================================

    async def seed(self, force: bool = False) -> int:
        """
        Upsert the static dataset in seed order.

        Ids in the seed order that the dataset lacks are skipped. Upserting by
        id makes repeated seeding converge on the same documents.

        Args:
            force: Seed even if the collection already holds documents

        Returns:
            Number of cases written
        """
        if not force and await self.store.fetch_all(self.cases_collection):
            return 0

        by_id = {raw.get("id"): raw for raw in self.static_cases}
        now = utc_now()
        written = 0
        for case_id in self.seed_order:
            raw = by_id.get(case_id)
            if raw is None:
                logger.warning(f"Seed id {case_id} not found in static dataset, skipping")
                continue

            case = to_canonical(raw, written).case.model_copy(
                update={
                    "display_order": written + 1,
                    "is_active": True,
                    "completions": 0,
                    "average_score": 0,
                    "created_at": now,
                    "updated_at": now,
                }
            )
            await self.store.upsert(self.cases_collection, case.id, to_document(case))
            written += 1

        logger.info(f"Seeded {written} cases into '{self.cases_collection}'")
        return written

    async def refresh_from_dataset(self) -> CatalogSnapshot:
        """Re-seed from the static dataset, reload and persist the resulting order."""
        await self.seed(force=True)
        snapshot = await self.load()
        if snapshot.mode != LoadMode.STATIC_FALLBACK:
            await self.save_catalog(snapshot.cases)
        return self._snapshot

    # ========================================================================
    # Writes
    # ========================================================================

    async def save_case(self, case: Case) -> Case:
        """
        Persist one case and publish it into the snapshot.

        Raises:
            RepositoryException: If the store write fails
        """
        await self.store.upsert(self.cases_collection, case.id, to_document(case))
        others = [existing for existing in self._snapshot.cases if existing.id != case.id]
        self._publish_cases([*others, case])
        logger.info(f"Saved case {case.id}")
        return case

    async def save_catalog(self, cases: Sequence[Case]) -> List[Case]:
        """
        Persist every case of the catalog and publish it wholesale.

        Raises:
            RepositoryException: If a store write fails
        """
        for case in cases:
            await self.store.upsert(self.cases_collection, case.id, to_document(case))
        self._publish_cases(cases)
        logger.info(f"Saved catalog of {len(cases)} cases")
        return list(self._snapshot.cases)

    async def delete_case(self, case_id: str) -> bool:
        """
        Remove a case document and drop it from the snapshot.

        Survivors are not renumbered here; callers reindex and save the catalog.

        Raises:
            RepositoryException: If the store delete fails
        """
        deleted = await self.store.delete(self.cases_collection, case_id)
        remaining = [case for case in self._snapshot.cases if case.id != case_id]
        if len(remaining) != len(self._snapshot.cases):
            self._publish_cases(remaining)
            deleted = True
        if deleted:
            logger.info(f"Deleted case {case_id}")
        return deleted
