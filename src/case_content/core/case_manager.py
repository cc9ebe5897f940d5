"""Case catalog business logic - Repository Pattern."""

import logging
from typing import Awaitable, Callable, List, Optional, Union

from case_content.core import ordering
from case_content.core.case_editor import CaseEditor, SaveResult
from case_content.core.normalizer import to_canonical
from case_content.core.ordering import Direction
from case_content.infrastructure.persistence import CaseRepository, CatalogSnapshot, LoadMode
from case_content.models.case import Case, new_case_id, utc_now
from case_content.models.requests import (
    CaseCreateRequest,
    CaseSummary,
    CaseUpdateRequest,
    CatalogExport,
    CatalogStats,
)

logger = logging.getLogger(__name__)

# Asked before a destructive action; only True lets it proceed.
Confirmation = Callable[[str], Awaitable[bool]]


class CaseManager:
    """Business logic for catalog operations.

    This class implements the service layer using the Repository pattern.
    Edits go through a CaseEditor so every write is validated first; the
    repository owns persistence and the published snapshot.
    """

    def __init__(self, repository: CaseRepository, confirm: Optional[Confirmation] = None):
        """Initialize case manager with repository.

        Args:
            repository: CaseRepository owning the catalog
            confirm: Default confirmation collaborator for deletes
        """
        self.repository = repository
        self.confirm = confirm

    async def ensure_loaded(self) -> CatalogSnapshot:
        """Load the catalog on first use."""
        if self.repository.mode == LoadMode.NOT_LOADED:
            return await self.repository.load()
        return self.repository.snapshot

    async def list_cases(
        self,
        search: Optional[str] = None,
        difficulty: Optional[str] = None,
    ) -> List[Case]:
        """List cases in display order.

        Args:
            search: Case-insensitive substring of title or description
            difficulty: Difficulty name, case-insensitive

        Returns:
            Matching cases
        """
        snapshot = await self.ensure_loaded()
        cases = list(snapshot.cases)

        if search:
            query = search.lower()
            cases = [c for c in cases if query in c.title.lower() or query in c.description.lower()]

        if difficulty:
            wanted = difficulty.lower()
            cases = [c for c in cases if c.difficulty.value.lower() == wanted]

        return cases

    async def get_case(self, case_id: str) -> Optional[Case]:
        """Get a case by ID.

        Returns:
            Case if found, None otherwise
        """
        snapshot = await self.ensure_loaded()
        return snapshot.get(case_id)

    async def create_case(self, request: CaseCreateRequest) -> SaveResult:
        """Create a case at the end of the catalog.

        Args:
            request: Case creation request

        Returns:
            SaveResult; nothing is persisted when it is rejected
        """
        snapshot = await self.ensure_loaded()
        next_order = max((case.display_order for case in snapshot.cases), default=0) + 1

        raw = request.model_dump(by_alias=True, exclude_none=True)
        now = utc_now()
        raw.update(
            {
                "id": new_case_id(),
                "displayOrder": next_order,
                "completions": 0,
                "averageScore": 0,
                "createdAt": now,
                "updatedAt": now,
            }
        )
        case = to_canonical(raw).case

        editor = CaseEditor(case)
        editor.is_new = True
        return await self.commit_editor(editor)

    async def update_case(self, case_id: str, request: CaseUpdateRequest) -> Optional[SaveResult]:
        """Update case details.

        Returns:
            SaveResult, or None if the case does not exist
        """
        editor = await self.open_editor(case_id)
        if editor is None:
            return None

        editor.update_details(request.model_dump(exclude_none=True))
        return await self.commit_editor(editor)

    async def open_editor(self, case_id: str) -> Optional[CaseEditor]:
        """Editor over a copy of the case, or None if it does not exist."""
        case = await self.get_case(case_id)
        if case is None:
            return None
        return CaseEditor(case)

    async def commit_editor(self, editor: CaseEditor) -> SaveResult:
        """Validate the editor's case and persist it when valid."""
        created = editor.is_new
        result = editor.save()
        if not result.ok:
            logger.info(f"Case {editor.case.id} rejected: {result.rejection.rule}")
            return result

        await self.repository.save_case(result.case)
        logger.info(f"{'Created' if created else 'Updated'} case {result.case.id}")
        return result

    async def delete_case(self, case_id: str, confirm: Optional[Confirmation] = None) -> Optional[bool]:
        """Delete a case after explicit confirmation.

        Survivors are renumbered and the catalog is saved.

        Args:
            case_id: Case identifier
            confirm: Confirmation collaborator; defaults to the manager's

        Returns:
            True if deleted, False if not confirmed, None if not found
        """
        case = await self.get_case(case_id)
        if case is None:
            return None

        confirm = confirm or self.confirm
        prompt = f"Delete case '{case.title}'? This cannot be undone."
        if confirm is None or not await confirm(prompt):
            logger.info(f"Delete of case {case_id} not confirmed")
            return False

        await self.repository.delete_case(case_id)
        survivors = ordering.reindex(self.repository.snapshot.cases, field="display_order")
        await self.repository.save_catalog(survivors)

        logger.info(f"Deleted case {case_id}, {len(survivors)} cases remain")
        return True

    async def toggle_case_status(self, case_id: str) -> Optional[Case]:
        """Flip ``is_active``; None if the case does not exist."""
        case = await self.get_case(case_id)
        if case is None:
            return None

        updated = case.model_copy(update={"is_active": not case.is_active, "updated_at": utc_now()})
        await self.repository.save_case(updated)

        logger.info(f"Case {case_id} is now {'active' if updated.is_active else 'inactive'}")
        return updated

    async def move_case(self, case_id: str, direction: Union[Direction, str]) -> Optional[List[Case]]:
        """Move a case one position in the catalog.

        Moving the first case up or the last case down changes nothing.

        Returns:
            The catalog in its new order, or None if the case does not exist
        """
        snapshot = await self.ensure_loaded()
        if snapshot.get(case_id) is None:
            return None

        cases = list(snapshot.cases)
        moved = ordering.move(cases, case_id, direction, field="display_order")
        if [c.id for c in moved] == [c.id for c in cases]:
            return cases

        return await self.repository.save_catalog(moved)

    async def export_catalog(self) -> CatalogExport:
        """Summary of every case for download."""
        snapshot = await self.ensure_loaded()
        return CatalogExport(
            export_date=utc_now(),
            total_cases=len(snapshot.cases),
            cases=[CaseSummary.from_case(case) for case in snapshot.cases],
        )

    async def catalog_stats(self) -> CatalogStats:
        """Totals for the catalog dashboard.

        ``average_score`` is the rounded mean of the per-case averages; an
        empty catalog reports 0.
        """
        snapshot = await self.ensure_loaded()
        cases = snapshot.cases
        if not cases:
            return CatalogStats()

        return CatalogStats(
            total_cases=len(cases),
            active_cases=sum(1 for case in cases if case.is_active),
            total_completions=sum(case.completions for case in cases),
            average_score=round(sum(case.average_score for case in cases) / len(cases)),
        )

    async def reload(self) -> CatalogSnapshot:
        return await self.repository.load()

    async def refresh_from_dataset(self) -> CatalogSnapshot:
        logger.info("Refreshing catalog from static dataset")
        return await self.repository.refresh_from_dataset()
