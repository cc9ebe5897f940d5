"""API request and response models."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from case_content.core.ordering import Direction
from case_content.models.case import Case, Difficulty, MissionType, SlideType


class ApiModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CaseCreateRequest(ApiModel):
    """Request to create a new case.

    Slides and missions are accepted in either document shape and normalized.
    """

    title: str = Field(..., max_length=200)
    description: str = ""
    difficulty: Difficulty = Difficulty.BEGINNER
    duration: Optional[str] = None
    clue_points: Optional[int] = Field(None, ge=0)
    is_detective_mission: bool = False
    is_coming_soon: bool = False
    is_active: bool = True
    story: str = ""
    objective: str = ""
    final_resolution: str = ""

    initial_html: str = ""
    initial_css: str = ""
    target_html: str = ""
    target_css: str = ""
    hints: List[str] = Field(default_factory=lambda: [""])

    cinematic_slides: List[Dict[str, Any]] = Field(default_factory=list)
    missions: List[Dict[str, Any]] = Field(default_factory=list)


class CaseUpdateRequest(ApiModel):
    """Request to update case details."""

    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    duration: Optional[str] = None
    clue_points: Optional[int] = Field(None, ge=0)
    is_detective_mission: Optional[bool] = None
    is_coming_soon: Optional[bool] = None
    is_active: Optional[bool] = None
    story: Optional[str] = None
    objective: Optional[str] = None
    final_resolution: Optional[str] = None

    initial_html: Optional[str] = None
    initial_css: Optional[str] = None
    target_html: Optional[str] = None
    target_css: Optional[str] = None
    hints: Optional[List[str]] = None


class MissionRequest(ApiModel):
    """Mission fields to add or patch; ``content`` is merged key by key."""

    title: Optional[str] = None
    description: Optional[str] = None
    type: Optional[MissionType] = None
    content: Optional[Dict[str, Any]] = None


class SlideRequest(ApiModel):
    """Slide fields to add or patch; ``content`` is merged key by key."""

    type: Optional[SlideType] = None
    content: Optional[Dict[str, Any]] = None


class MoveRequest(BaseModel):
    """Request to move an item one position."""

    direction: Direction


class CaseListResponse(ApiModel):
    """Response containing the catalog."""

    cases: List[Case]
    total: int
    mode: str
    notice: Optional[str] = None


class CaseSummary(ApiModel):
    """One case as it appears in a catalog export."""

    id: str
    title: str
    description: str
    difficulty: Difficulty
    is_active: bool
    completions: int
    average_score: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_case(cls, case: Case) -> "CaseSummary":
        """Convert Case model to export summary."""
        return cls(
            id=case.id,
            title=case.title,
            description=case.description,
            difficulty=case.difficulty,
            is_active=case.is_active,
            completions=case.completions,
            average_score=case.average_score,
            created_at=case.created_at,
            updated_at=case.updated_at,
        )


class CatalogExport(ApiModel):
    """Catalog export document."""

    export_date: datetime
    total_cases: int
    cases: List[CaseSummary]


class CatalogStats(ApiModel):
    """Dashboard totals over the whole catalog, active or not."""

    total_cases: int = 0
    active_cases: int = 0
    total_completions: int = 0
    average_score: int = 0


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str
    version: str
    database: str
    catalog_mode: str
