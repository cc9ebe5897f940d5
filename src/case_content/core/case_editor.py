"""In-memory editing surface for a single case.

The editor works on a private copy of a case. Mission and slide operations go
through the ordering engine so orders stay contiguous, and patches are merged
the way the authoring UI sends them: top-level keys replace, ``content`` keys
are merged into the existing content. Nothing is persisted here; ``save``
validates and hands back the canonical case plus its legacy projection.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, TypeVar, Union

from pydantic import BaseModel

from case_content.core import ordering
from case_content.core.normalizer import (
    MISSION_ALIAS_GROUPS,
    SLIDE_ALIAS_GROUPS,
    field_name,
    sync_aliases,
    to_legacy,
)
from case_content.core.ordering import Direction
from case_content.models.case import (
    Case,
    CinematicSlide,
    LegacyBody,
    Mission,
    new_case,
    new_mission,
    new_slide,
    utc_now,
    validate,
)

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

# Case-level fields the editor may patch; identity, statistics and the
# rich body (edited through mission/slide operations) are excluded.
EDITABLE_CASE_FIELDS = frozenset(
    {
        "title",
        "description",
        "difficulty",
        "duration",
        "clue_points",
        "is_detective_mission",
        "is_coming_soon",
        "story",
        "objective",
        "final_resolution",
        "is_active",
    }
)
LEGACY_BODY_FIELDS = frozenset(LegacyBody.model_fields)

# Position and identity are owned by the editor.
PROTECTED_ITEM_FIELDS = frozenset({"id", "order"})


class ValidationRejection(BaseModel):
    """First rule that blocked a save."""

    rule: str
    message: str


class SaveResult(BaseModel):
    """Outcome of ``CaseEditor.save``."""

    ok: bool
    case: Optional[Case] = None
    legacy: Optional[Dict[str, Any]] = None
    rejection: Optional[ValidationRejection] = None


def _snake_keys(patch: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    return {field_name(key): value for key, value in (patch or {}).items()}


def merge_patch(item: T, patch: Mapping[str, Any], alias_groups: Sequence[Tuple[str, ...]]) -> T:
    """Apply an editor patch to a mission or slide.

    Raises:
        pydantic.ValidationError: If the merged item is invalid
    """
    patch = _snake_keys(patch)
    content_patch = _snake_keys(patch.pop("content", None))
    for key in PROTECTED_ITEM_FIELDS:
        patch.pop(key, None)

    content = item.content.model_dump()
    content.update(content_patch)
    content = sync_aliases(content, content_patch.keys(), alias_groups)

    data = item.model_dump()
    data.update(patch)
    data["content"] = content
    return type(item).model_validate(data)


class CaseEditor:
    """Mutation surface used by the authoring UI for one case.

    Example:
        editor = CaseEditor(case)
        mission = editor.add_mission(title="Fix nav")
        editor.update_mission(mission.id, {"content": {"brokenHtml": "<div>"}})
        result = editor.save()
    """

    def __init__(self, case: Optional[Case] = None):
        """Initialize the editor.

        Args:
            case: Case to edit; a blank case is created when omitted
        """
        self.is_new = case is None
        self._case = (case if case is not None else new_case()).model_copy(deep=True)

    @property
    def case(self) -> Case:
        return self._case

    @property
    def missions(self) -> List[Mission]:
        return list(self._case.rich_body.missions)

    @property
    def slides(self) -> List[CinematicSlide]:
        return list(self._case.rich_body.cinematic_slides)

    def _set_missions(self, missions: List[Mission]) -> None:
        body = self._case.rich_body.model_copy(update={"missions": missions})
        self._case = self._case.model_copy(update={"rich_body": body})

    def _set_slides(self, slides: List[CinematicSlide]) -> None:
        body = self._case.rich_body.model_copy(update={"cinematic_slides": slides})
        self._case = self._case.model_copy(update={"rich_body": body})

    # =========================================================================
    # Case details
    # =========================================================================

    def update_details(self, patch: Mapping[str, Any]) -> Case:
        """Patch case-level fields.

        Flat legacy keys (``initialHtml``, ``hints``, ...) and a nested
        ``legacyBody`` are merged into the legacy body. Unknown or protected
        keys are ignored.
        """
        patch = _snake_keys(patch)
        legacy_patch = _snake_keys(patch.pop("legacy_body", None))
        legacy_patch.update({k: v for k, v in patch.items() if k in LEGACY_BODY_FIELDS})

        data = self._case.model_dump()
        data.update({k: v for k, v in patch.items() if k in EDITABLE_CASE_FIELDS})
        data["legacy_body"].update(legacy_patch)

        self._case = Case.model_validate(data)
        return self._case

    # =========================================================================
    # Missions
    # =========================================================================

    def add_mission(self, **fields: Any) -> Mission:
        """Append a mission with defaults, optionally patched with ``fields``."""
        mission = new_mission()
        if fields:
            mission = merge_patch(mission, fields, MISSION_ALIAS_GROUPS)
        missions = ordering.append(self._case.rich_body.missions, mission)
        self._set_missions(missions)
        return missions[-1]

    def update_mission(self, mission_id: str, patch: Mapping[str, Any]) -> Optional[Mission]:
        """Shallow-merge ``patch`` into a mission; None if the id is unknown."""
        missions = self.missions
        index = ordering.index_of(missions, mission_id)
        if index == -1:
            return None
        missions[index] = merge_patch(missions[index], patch, MISSION_ALIAS_GROUPS)
        self._set_missions(missions)
        return missions[index]

    def delete_mission(self, mission_id: str) -> bool:
        missions = self._case.rich_body.missions
        if ordering.index_of(missions, mission_id) == -1:
            return False
        self._set_missions(ordering.remove(missions, mission_id))
        return True

    def move_mission(self, mission_id: str, direction: Union[Direction, str]) -> List[Mission]:
        self._set_missions(ordering.move(self._case.rich_body.missions, mission_id, direction))
        return self.missions

    # =========================================================================
    # Cinematic slides
    # =========================================================================

    def add_slide(self, **fields: Any) -> CinematicSlide:
        """Append a story slide with defaults, optionally patched with ``fields``."""
        slide = new_slide()
        if fields:
            slide = merge_patch(slide, fields, SLIDE_ALIAS_GROUPS)
        slides = ordering.append(self._case.rich_body.cinematic_slides, slide)
        self._set_slides(slides)
        return slides[-1]

    def update_slide(self, slide_id: str, patch: Mapping[str, Any]) -> Optional[CinematicSlide]:
        slides = self.slides
        index = ordering.index_of(slides, slide_id)
        if index == -1:
            return None
        slides[index] = merge_patch(slides[index], patch, SLIDE_ALIAS_GROUPS)
        self._set_slides(slides)
        return slides[index]

    def delete_slide(self, slide_id: str) -> bool:
        slides = self._case.rich_body.cinematic_slides
        if ordering.index_of(slides, slide_id) == -1:
            return False
        self._set_slides(ordering.remove(slides, slide_id))
        return True

    def move_slide(self, slide_id: str, direction: Union[Direction, str]) -> List[CinematicSlide]:
        self._set_slides(ordering.move(self._case.rich_body.cinematic_slides, slide_id, direction))
        return self.slides

    # =========================================================================
    # Save
    # =========================================================================

    def _reject(self, rule: str, message: str) -> SaveResult:
        logger.info(f"Save of case {self._case.id} rejected: {rule}")
        return SaveResult(ok=False, rejection=ValidationRejection(rule=rule, message=message))

    def save(self) -> SaveResult:
        """Validate the working copy and produce the documents to persist.

        Rules are checked in order and only the first failure is reported:
        title, description, at least one mission for detective cases, then
        the entity invariants.
        """
        case = self._case

        if not case.title.strip():
            return self._reject("title_required", "Please enter a case title")
        if not case.description.strip():
            return self._reject("description_required", "Please enter a case description")
        if case.is_detective_mission and not case.rich_body.missions:
            return self._reject("missions_required", "Detective cases need at least one mission")

        violations = validate(case)
        if violations:
            return self._reject("invariant", violations[0])

        self._case = case.model_copy(update={"updated_at": utc_now()})
        self.is_new = False
        return SaveResult(ok=True, case=self._case, legacy=to_legacy(self._case))
