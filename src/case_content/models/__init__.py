"""Models package."""

from .case import (
    Case,
    CaseShape,
    CinematicSlide,
    Difficulty,
    HintStep,
    LegacyBody,
    Mission,
    MissionType,
    RichBody,
    SlideType,
)
from .requests import (
    CaseCreateRequest,
    CaseListResponse,
    CaseSummary,
    CaseUpdateRequest,
    CatalogExport,
    CatalogStats,
    HealthResponse,
    MissionRequest,
    MoveRequest,
    SlideRequest,
)

__all__ = [
    "Case",
    "CaseShape",
    "CinematicSlide",
    "Difficulty",
    "HintStep",
    "LegacyBody",
    "Mission",
    "MissionType",
    "RichBody",
    "SlideType",
    "CaseCreateRequest",
    "CaseListResponse",
    "CaseSummary",
    "CaseUpdateRequest",
    "CatalogExport",
    "CatalogStats",
    "HealthResponse",
    "MissionRequest",
    "MoveRequest",
    "SlideRequest",
]
