"""Case content data models.

Canonical representation of a learning case for the content service.

Key Models:
- Case: Root catalog entity carrying both a legacy body and a rich body
- LegacyBody: Flat single-challenge payload (initial/target HTML and CSS, hints)
- RichBody: Detective mission payload (cinematic slides and missions)
- CinematicSlide: One narrative beat shown before or between missions
- Mission: One coding challenge or story step with hints and a clue
- HintStep: Conditional hint awarded with points

Documents exchanged with the store and the HTTP API use camelCase aliases
(``displayOrder``, ``cluePoints``); Python code uses the snake_case names.
All models are frozen: changes are made with ``model_copy(update=...)``.
"""

from collections import Counter
from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Optional, Sequence, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


DEFAULT_MISSION_POINTS = 250
DEFAULT_CLUE_POINTS = 1000
DEFAULT_SLIDE_DURATION_MS = 5000
DEFAULT_DURATION = "15-20 minutes"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================
# Enumerations
# ============================================================

class Difficulty(str, Enum):
    """Case difficulty levels."""

    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class SlideType(str, Enum):
    """Cinematic slide kinds."""

    STORY = "story"
    CHARACTER = "character"
    LOCATION = "location"
    EVIDENCE = "evidence"
    CHOICE = "choice"


class MissionType(str, Enum):
    """Mission kinds."""

    CODE_FIX = "code-fix"
    INVESTIGATION = "investigation"
    ANALYSIS = "analysis"
    EVIDENCE = "evidence"
    STORY = "story"


class CaseShape(str, Enum):
    """Which body the editing surface presents for a case."""

    LEGACY = "legacy"
    RICH = "rich"


class ContentModel(BaseModel):
    """Base model for store documents (camelCase aliases, immutable)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# ============================================================
# Slides
# ============================================================

class SlideChoice(ContentModel):
    text: str = ""
    next_slide: Optional[str] = None


class SlideContent(ContentModel):
    """Slide payload.

    ``text``/``dialogue``, ``speaker``/``character``,
    ``background_image``/``background`` and ``character_image``/``image`` are
    alias pairs kept mirrored so readers expecting either name succeed.
    """

    text: str = ""
    title: str = ""
    dialogue: str = ""
    speaker: str = ""
    character: str = ""
    location: str = ""
    background: str = ""
    background_image: str = ""
    character_image: str = ""
    image: str = ""
    sound_effect: str = ""
    auto_advance: bool = False
    duration: int = Field(default=DEFAULT_SLIDE_DURATION_MS, ge=0, description="Milliseconds")
    choices: List[SlideChoice] = Field(default_factory=list)


class CinematicSlide(ContentModel):
    id: str
    type: SlideType = SlideType.STORY
    order: int = Field(default=1, ge=1)
    content: SlideContent = Field(default_factory=SlideContent)


# ============================================================
# Missions
# ============================================================

class HintStep(ContentModel):
    """Hint revealed when ``condition`` is met, awarding ``points``."""

    id: str
    condition: str = ""
    hint: str = ""
    points: int = Field(default=0, ge=0)


class MissionChoice(ContentModel):
    text: str = ""
    correct: bool = False
    explanation: str = ""


class MissionContent(ContentModel):
    """Mission payload.

    ``initial_code``/``broken_html``, ``initial_css``/``broken_css``,
    ``target_code``/``target_html`` and ``hints``/``ai_hints`` are alias pairs
    kept mirrored.
    """

    initial_code: str = ""
    broken_html: str = ""
    initial_css: str = ""
    broken_css: str = ""
    target_code: str = ""
    target_html: str = ""
    target_css: str = ""
    objective: str = ""
    success_conditions: List[str] = Field(default_factory=list)
    choices: List[MissionChoice] = Field(default_factory=list)
    hints: List[str] = Field(default_factory=lambda: [""])
    ai_hints: List[str] = Field(default_factory=lambda: [""])
    hint_steps: List[HintStep] = Field(default_factory=list)
    clues: List[str] = Field(default_factory=list)
    evidence: List[str] = Field(default_factory=list)
    story_text: str = ""
    points: int = Field(default=DEFAULT_MISSION_POINTS, ge=0)
    clue_revealed: str = ""
    clue_unlock_condition: str = ""


class Mission(ContentModel):
    id: str
    title: str = ""
    description: str = ""
    type: MissionType = MissionType.CODE_FIX
    order: int = Field(default=1, ge=1)
    content: MissionContent = Field(default_factory=MissionContent)


# ============================================================
# Case
# ============================================================

class LegacyBody(ContentModel):
    """Flat single-challenge body read by older clients."""

    initial_html: str = ""
    initial_css: str = ""
    target_html: str = ""
    target_css: str = ""
    hints: List[str] = Field(default_factory=lambda: [""])


class RichBody(ContentModel):
    """Nested detective mission body."""

    cinematic_slides: List[CinematicSlide] = Field(default_factory=list)
    missions: List[Mission] = Field(default_factory=list)


def new_case_id() -> str:
    return f"case-{uuid4().hex[:12]}"


class Case(ContentModel):
    """Case domain model."""

    id: str = Field(default_factory=new_case_id)
    title: str = ""
    description: str = ""
    difficulty: Difficulty = Difficulty.BEGINNER
    duration: str = DEFAULT_DURATION
    clue_points: int = Field(default=DEFAULT_CLUE_POINTS, ge=0)
    is_detective_mission: bool = False
    is_coming_soon: bool = False

    story: str = ""
    objective: str = ""
    final_resolution: str = ""

    display_order: int = Field(default=1, ge=1)
    is_active: bool = True
    completions: int = Field(default=0, ge=0)
    average_score: int = Field(default=0, ge=0)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    legacy_body: LegacyBody = Field(default_factory=LegacyBody)
    rich_body: RichBody = Field(default_factory=RichBody)

    @property
    def shape(self) -> CaseShape:
        return CaseShape.RICH if self.is_detective_mission else CaseShape.LEGACY

    @property
    def missions(self) -> List[Mission]:
        return self.rich_body.missions

    @property
    def cinematic_slides(self) -> List[CinematicSlide]:
        return self.rich_body.cinematic_slides


# ============================================================
# Constructors
# ============================================================

def new_mission(order: int = 1, **fields: Any) -> Mission:
    """Create a mission with editor defaults (250 points, one empty hint)."""
    fields.setdefault("id", f"mission-{uuid4().hex[:12]}")
    return Mission(order=order, **fields)


def new_slide(order: int = 1, **fields: Any) -> CinematicSlide:
    """Create a story slide with editor defaults (no auto-advance, 5s)."""
    fields.setdefault("id", f"slide-{uuid4().hex[:12]}")
    return CinematicSlide(order=order, **fields)


def new_case(display_order: int = 1, **fields: Any) -> Case:
    """Create an empty case appended at ``display_order``."""
    return Case(display_order=display_order, **fields)


# ============================================================
# Validation
# ============================================================

def order_violations(items: Sequence[Any], label: str, field: str = "order") -> List[str]:
    """Check that ``items`` have unique ids and contiguous 1-based orders."""
    violations = []

    duplicates = sorted(i for i, n in Counter(item.id for item in items).items() if n > 1)
    for item_id in duplicates:
        violations.append(f"{label}: duplicate id '{item_id}'")

    orders = sorted(getattr(item, field) for item in items)
    if orders != list(range(1, len(items) + 1)):
        violations.append(f"{label}: {field} values {orders} are not contiguous from 1")

    return violations


def validate(entity: Union["Case", Mission, CinematicSlide, HintStep]) -> List[str]:
    """Return the invariants violated by ``entity`` (empty when valid).

    Models built with ``model_copy`` skip field validation, so the numeric
    bounds are checked again here alongside the ordering invariants.
    """
    if isinstance(entity, Case):
        return _validate_case(entity)
    if isinstance(entity, Mission):
        return _validate_mission(entity)
    if isinstance(entity, CinematicSlide):
        return _validate_slide(entity)
    if isinstance(entity, HintStep):
        return _validate_hint_step(entity)
    raise TypeError(f"Cannot validate {type(entity).__name__}")


def validate_catalog(cases: Sequence[Case]) -> List[str]:
    """Ordering invariants of a catalog (unique ids, contiguous display order)."""
    return order_violations(cases, "cases", field="display_order")


def _validate_hint_step(step: HintStep) -> List[str]:
    if step.points < 0:
        return [f"hint step '{step.id}': points must be >= 0"]
    return []


def _validate_slide(slide: CinematicSlide) -> List[str]:
    violations = []
    if slide.order < 1:
        violations.append(f"slide '{slide.id}': order must be >= 1")
    if slide.content.duration < 0:
        violations.append(f"slide '{slide.id}': duration must be >= 0")
    return violations


def _validate_mission(mission: Mission) -> List[str]:
    violations = []
    if mission.order < 1:
        violations.append(f"mission '{mission.id}': order must be >= 1")
    if mission.content.points < 0:
        violations.append(f"mission '{mission.id}': points must be >= 0")
    step_ids = Counter(step.id for step in mission.content.hint_steps)
    for step_id in sorted(i for i, n in step_ids.items() if n > 1):
        violations.append(f"mission '{mission.id}': duplicate hint step id '{step_id}'")
    for step in mission.content.hint_steps:
        violations.extend(_validate_hint_step(step))
    return violations


def _validate_case(case: Case) -> List[str]:
    violations = []

    if case.clue_points < 0:
        violations.append("cluePoints must be >= 0")
    if case.display_order < 1:
        violations.append("displayOrder must be >= 1")
    if case.completions < 0 or case.average_score < 0:
        violations.append("completions and averageScore must be >= 0")

    violations.extend(order_violations(case.rich_body.missions, "missions"))
    violations.extend(order_violations(case.rich_body.cinematic_slides, "slides"))

    for mission in case.rich_body.missions:
        violations.extend(_validate_mission(mission))
    for slide in case.rich_body.cinematic_slides:
        violations.extend(_validate_slide(slide))

    return violations
