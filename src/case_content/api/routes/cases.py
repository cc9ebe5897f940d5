"""Case catalog API routes."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import ValidationError

from case_content.config import settings
from case_content.core.case_editor import CaseEditor
from case_content.core.case_manager import CaseManager
from case_content.data import SEED_ORDER, STATIC_CASES
from case_content.infrastructure.database import db_client
from case_content.infrastructure.persistence import (
    CaseRepository,
    DocumentStore,
    InMemoryDocumentStore,
    SQLDocumentStore,
)
from case_content.models import (
    Case,
    CaseCreateRequest,
    CaseListResponse,
    CaseUpdateRequest,
    CatalogExport,
    CatalogStats,
    CinematicSlide,
    Mission,
    MissionRequest,
    MoveRequest,
    SlideRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/cases", tags=["cases"])


# Global singleton repository (owns the catalog across requests)
_case_repository: Optional[CaseRepository] = None


def build_document_store() -> DocumentStore:
    """Document store selected by STORAGE_TYPE.

    - sql (default): SQLDocumentStore on the configured database
    - inmemory: InMemoryDocumentStore for dev/testing
    """
    if settings.uses_sql:
        return SQLDocumentStore(db_client.async_session_maker)
    return InMemoryDocumentStore()


async def get_case_repository() -> CaseRepository:
    """Dependency to get the case repository singleton."""
    global _case_repository
    if _case_repository is None:
        _case_repository = CaseRepository(
            build_document_store(),
            STATIC_CASES,
            SEED_ORDER,
            cases_collection=settings.cases_collection,
            users_collection=settings.users_collection,
        )
    return _case_repository


async def get_case_manager(
    repository: CaseRepository = Depends(get_case_repository),
) -> CaseManager:
    """Dependency to get case manager with repository."""
    return CaseManager(repository)


# =============================================================================
# Helpers
# =============================================================================

def _case_not_found(case_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Case {case_id} not found",
    )


def _rejected(rule: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail={"rule": rule, "message": message},
    )


async def _open_editor(case_manager: CaseManager, case_id: str) -> CaseEditor:
    editor = await case_manager.open_editor(case_id)
    if editor is None:
        raise _case_not_found(case_id)
    return editor


async def _commit(case_manager: CaseManager, editor: CaseEditor) -> Case:
    result = await case_manager.commit_editor(editor)
    if not result.ok:
        raise _rejected(result.rejection.rule, result.rejection.message)
    return result.case


def _fields(request) -> dict:
    return request.model_dump(exclude_unset=True)


# =============================================================================
# Catalog Endpoints
# =============================================================================

@router.get(
    "",
    response_model=CaseListResponse,
    summary="List cases",
    description="""
Returns the catalog in display order.

**Query Parameters**:
- `search`: case-insensitive match on title or description
- `difficulty`: Beginner / Intermediate / Advanced

**Response Example**:
```json
{
  "cases": [{"id": "case-vanishing-blogger", "title": "Detective Tutorial Case", "displayOrder": 1}],
  "total": 1,
  "mode": "remote",
  "notice": null
}
```

`mode` is `static_fallback` when the store could not be read; `notice`
then carries a message for the operator.
    """,
    responses={
        200: {"description": "Catalog returned successfully"},
    }
)
async def list_cases(
    search: Optional[str] = Query(None, description="Search title and description"),
    difficulty: Optional[str] = Query(None, description="Filter by difficulty"),
    case_manager: CaseManager = Depends(get_case_manager),
):
    """List cases with optional filters."""
    cases = await case_manager.list_cases(search=search, difficulty=difficulty)
    snapshot = case_manager.repository.snapshot

    return CaseListResponse(
        cases=cases,
        total=len(cases),
        mode=snapshot.mode.value,
        notice=snapshot.notice,
    )


@router.post(
    "",
    response_model=Case,
    status_code=status.HTTP_201_CREATED,
    summary="Create new case",
    description="""
Creates a case at the end of the catalog (`displayOrder` = max + 1).

Slides and missions may use either the legacy fields (`dialogue`,
`brokenHtml`, `aiHints`) or the `content` form; both are normalized.

**Validation** (first failing rule is returned with 422):
1. `title_required`
2. `description_required`
3. `missions_required` (detective cases only)
4. `invariant`
    """,
    responses={
        201: {"description": "Case created successfully"},
        422: {"description": "Case rejected by validation"},
        500: {"description": "Internal server error - store write failed"}
    }
)
async def create_case(
    request: CaseCreateRequest,
    case_manager: CaseManager = Depends(get_case_manager),
):
    """Create a new case."""
    result = await case_manager.create_case(request)
    if not result.ok:
        raise _rejected(result.rejection.rule, result.rejection.message)
    return result.case


@router.get(
    "/export",
    response_model=CatalogExport,
    summary="Export catalog",
    description="""
Summary of every case, suitable for download.

**Response Example**:
```json
{
  "exportDate": "2025-11-19T10:30:00Z",
  "totalCases": 5,
  "cases": [{"id": "case-2", "title": "The Missing Navigation Mystery", "difficulty": "Beginner",
             "isActive": true, "completions": 0, "averageScore": 0,
             "createdAt": "...", "updatedAt": "..."}]
}
```
    """,
)
async def export_catalog(case_manager: CaseManager = Depends(get_case_manager)):
    """Export the catalog."""
    return await case_manager.export_catalog()


@router.get(
    "/stats",
    response_model=CatalogStats,
    summary="Catalog totals",
    description="""
Case count, active case count, summed completions and the mean of the
per-case average scores. An empty catalog reports zeros.

**Response Example**:
```json
{"totalCases": 5, "activeCases": 4, "totalCompletions": 12, "averageScore": 840}
```
    """,
)
async def catalog_stats(case_manager: CaseManager = Depends(get_case_manager)):
    """Catalog dashboard totals."""
    return await case_manager.catalog_stats()


@router.post(
    "/reload",
    response_model=CaseListResponse,
    summary="Reload catalog from store",
)
async def reload_catalog(case_manager: CaseManager = Depends(get_case_manager)):
    """Reload the catalog, falling back to the bundled dataset on failure."""
    snapshot = await case_manager.reload()
    return CaseListResponse(
        cases=list(snapshot.cases),
        total=len(snapshot.cases),
        mode=snapshot.mode.value,
        notice=snapshot.notice,
    )


@router.post(
    "/refresh",
    response_model=CaseListResponse,
    summary="Refresh catalog from bundled dataset",
    description="""
Re-seeds the store from the bundled dataset (upsert by id) and reloads.
Cases created through the API are kept; bundled cases are overwritten.
    """,
)
async def refresh_catalog(case_manager: CaseManager = Depends(get_case_manager)):
    """Force a re-seed and reload."""
    snapshot = await case_manager.refresh_from_dataset()
    return CaseListResponse(
        cases=list(snapshot.cases),
        total=len(snapshot.cases),
        mode=snapshot.mode.value,
        notice=snapshot.notice,
    )


@router.get(
    "/{case_id}",
    response_model=Case,
    summary="Get case by ID",
    responses={
        200: {"description": "Case found and returned successfully"},
        404: {"description": "Case not found"},
    }
)
async def get_case(
    case_id: str,
    case_manager: CaseManager = Depends(get_case_manager),
):
    """Get a case by ID."""
    case = await case_manager.get_case(case_id)

    if not case:
        raise _case_not_found(case_id)

    return case


@router.put(
    "/{case_id}",
    response_model=Case,
    summary="Update case details",
    description="""
Updates case-level fields. All fields are optional; only provided fields
change. Missions and slides have their own endpoints.

**Request Example**:
```json
{"title": "The Broken Portfolio", "difficulty": "Intermediate", "isComingSoon": false}
```
    """,
    responses={
        200: {"description": "Case updated successfully"},
        404: {"description": "Case not found"},
        422: {"description": "Case rejected by validation"},
    }
)
async def update_case(
    case_id: str,
    request: CaseUpdateRequest,
    case_manager: CaseManager = Depends(get_case_manager),
):
    """Update a case."""
    result = await case_manager.update_case(case_id, request)

    if result is None:
        raise _case_not_found(case_id)
    if not result.ok:
        raise _rejected(result.rejection.rule, result.rejection.message)

    return result.case


@router.delete(
    "/{case_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete case permanently",
    description="""
Permanently deletes a case and renumbers the remaining cases.

**WARNING**: This operation is irreversible and must be confirmed with
`?confirm=true`; without it nothing is deleted and 409 is returned.
    """,
    responses={
        204: {"description": "Case deleted successfully (no content returned)"},
        404: {"description": "Case not found"},
        409: {"description": "Deletion not confirmed"},
    }
)
async def delete_case(
    case_id: str,
    confirm: bool = Query(False, description="Confirm the permanent deletion"),
    case_manager: CaseManager = Depends(get_case_manager),
):
    """Delete a case."""

    async def confirm_from_query(prompt: str) -> bool:
        return confirm

    deleted = await case_manager.delete_case(case_id, confirm=confirm_from_query)

    if deleted is None:
        raise _case_not_found(case_id)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Deleting case {case_id} requires confirm=true",
        )

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{case_id}/toggle",
    response_model=Case,
    summary="Toggle case active flag",
)
async def toggle_case_status(
    case_id: str,
    case_manager: CaseManager = Depends(get_case_manager),
):
    """Activate or deactivate a case."""
    case = await case_manager.toggle_case_status(case_id)

    if not case:
        raise _case_not_found(case_id)

    return case


@router.post(
    "/{case_id}/move",
    response_model=List[Case],
    summary="Move case up or down the catalog",
)
async def move_case(
    case_id: str,
    request: MoveRequest,
    case_manager: CaseManager = Depends(get_case_manager),
):
    """Swap a case with its neighbour; the catalog is returned in its new order."""
    cases = await case_manager.move_case(case_id, request.direction)

    if cases is None:
        raise _case_not_found(case_id)

    return cases


# =============================================================================
# Mission Endpoints
# =============================================================================

@router.post(
    "/{case_id}/missions",
    response_model=Mission,
    status_code=status.HTTP_201_CREATED,
    summary="Add mission",
    description="""
Appends a mission with defaults (250 points, one empty hint) and applies the
given fields.

**Request Example**:
```json
{"title": "Fix nav", "content": {"brokenHtml": "<div>", "targetHtml": "<nav>"}}
```
    """,
)
async def add_mission(
    case_id: str,
    request: MissionRequest,
    case_manager: CaseManager = Depends(get_case_manager),
):
    """Add a mission to a case."""
    editor = await _open_editor(case_manager, case_id)
    try:
        mission = editor.add_mission(**_fields(request))
    except ValidationError as e:
        raise _rejected("invalid_mission", str(e))

    await _commit(case_manager, editor)
    return mission


@router.patch(
    "/{case_id}/missions/{mission_id}",
    response_model=Mission,
    summary="Update mission",
)
async def update_mission(
    case_id: str,
    mission_id: str,
    request: MissionRequest,
    case_manager: CaseManager = Depends(get_case_manager),
):
    """Patch a mission; content keys are merged, not replaced."""
    editor = await _open_editor(case_manager, case_id)
    try:
        mission = editor.update_mission(mission_id, _fields(request))
    except ValidationError as e:
        raise _rejected("invalid_mission", str(e))

    if mission is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Mission {mission_id} not found")

    await _commit(case_manager, editor)
    return mission


@router.delete(
    "/{case_id}/missions/{mission_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete mission",
)
async def delete_mission(
    case_id: str,
    mission_id: str,
    case_manager: CaseManager = Depends(get_case_manager),
):
    """Delete a mission and renumber the rest."""
    editor = await _open_editor(case_manager, case_id)
    if not editor.delete_mission(mission_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Mission {mission_id} not found")

    await _commit(case_manager, editor)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{case_id}/missions/{mission_id}/move",
    response_model=List[Mission],
    summary="Move mission up or down",
)
async def move_mission(
    case_id: str,
    mission_id: str,
    request: MoveRequest,
    case_manager: CaseManager = Depends(get_case_manager),
):
    """Swap a mission with its neighbour."""
    editor = await _open_editor(case_manager, case_id)
    editor.move_mission(mission_id, request.direction)

    case = await _commit(case_manager, editor)
    return case.rich_body.missions


# =============================================================================
# Cinematic Slide Endpoints
# =============================================================================

@router.post(
    "/{case_id}/slides",
    response_model=CinematicSlide,
    status_code=status.HTTP_201_CREATED,
    summary="Add cinematic slide",
)
async def add_slide(
    case_id: str,
    request: SlideRequest,
    case_manager: CaseManager = Depends(get_case_manager),
):
    """Add a story slide to a case."""
    editor = await _open_editor(case_manager, case_id)
    try:
        slide = editor.add_slide(**_fields(request))
    except ValidationError as e:
        raise _rejected("invalid_slide", str(e))

    await _commit(case_manager, editor)
    return slide


@router.patch(
    "/{case_id}/slides/{slide_id}",
    response_model=CinematicSlide,
    summary="Update cinematic slide",
)
async def update_slide(
    case_id: str,
    slide_id: str,
    request: SlideRequest,
    case_manager: CaseManager = Depends(get_case_manager),
):
    """Patch a slide; content keys are merged, not replaced."""
    editor = await _open_editor(case_manager, case_id)
    try:
        slide = editor.update_slide(slide_id, _fields(request))
    except ValidationError as e:
        raise _rejected("invalid_slide", str(e))

    if slide is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Slide {slide_id} not found")

    await _commit(case_manager, editor)
    return slide


@router.delete(
    "/{case_id}/slides/{slide_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete cinematic slide",
)
async def delete_slide(
    case_id: str,
    slide_id: str,
    case_manager: CaseManager = Depends(get_case_manager),
):
    """Delete a slide and renumber the rest."""
    editor = await _open_editor(case_manager, case_id)
    if not editor.delete_slide(slide_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Slide {slide_id} not found")

    await _commit(case_manager, editor)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{case_id}/slides/{slide_id}/move",
    response_model=List[CinematicSlide],
    summary="Move cinematic slide up or down",
)
async def move_slide(
    case_id: str,
    slide_id: str,
    request: MoveRequest,
    case_manager: CaseManager = Depends(get_case_manager),
):
    """Swap a slide with its neighbour."""
    editor = await _open_editor(case_manager, case_id)
    editor.move_slide(slide_id, request.direction)

    case = await _commit(case_manager, editor)
    return case.rich_body.cinematic_slides
