"""Schema normalization between store documents and the canonical Case.

Two document generations share the ``cases`` collection:

- Legacy: flat challenge fields (``initialHtml``, ``hints``) and, for detective
  cases, slides with ``dialogue``/``speaker`` and missions with
  ``brokenHtml``/``aiHints`` at mission level.
- Rich: slides and missions with a ``content`` object (``text``,
  ``initialCode``, ``hints``), as written by the editor.

``to_canonical`` accepts either (or anything in between) and never rejects a
document; every substituted default is reported back. ``to_legacy`` projects a
canonical case onto the legacy shape and drops rich-only fields.
``to_document`` is what this service writes: the legacy projection plus the
full canonical dump under ``canonical``.
"""

import logging
import math
import time
from collections.abc import Mapping
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Sequence, Tuple, Type

from pydantic import ValidationError
from pydantic.alias_generators import to_snake

from case_content.models.case import (
    DEFAULT_CLUE_POINTS,
    DEFAULT_DURATION,
    DEFAULT_MISSION_POINTS,
    DEFAULT_SLIDE_DURATION_MS,
    Case,
    CinematicSlide,
    Difficulty,
    HintStep,
    LegacyBody,
    Mission,
    MissionChoice,
    MissionContent,
    MissionType,
    RichBody,
    SlideChoice,
    SlideContent,
    SlideType,
    utc_now,
)

logger = logging.getLogger(__name__)

CANONICAL_KEY = "canonical"

# Epoch values above this are read as milliseconds (1e11 s is year 5138)
MILLISECOND_EPOCH_THRESHOLD = 1e11

# Alias groups: first member is the canonical name, the rest mirror it.
SLIDE_ALIAS_GROUPS: Tuple[Tuple[str, ...], ...] = (
    ("text", "dialogue"),
    ("speaker", "character"),
    ("background_image", "background"),
    ("character_image", "image"),
)
MISSION_ALIAS_GROUPS: Tuple[Tuple[str, ...], ...] = (
    ("initial_code", "broken_html"),
    ("initial_css", "broken_css"),
    ("target_code", "target_html"),
    ("hints", "ai_hints"),
)


class NormalizationResult(NamedTuple):
    """Canonical case plus the dotted paths of every default applied."""

    case: Case
    applied_defaults: List[str]


# ============================================================
# Field lookup helpers
# ============================================================

def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}


def _lookup(source: Mapping, key: str) -> Any:
    """Read ``key`` by its camelCase or snake_case spelling."""
    if key in source:
        return source[key]
    snake = to_snake(key)
    if snake in source:
        return source[snake]
    return None


def _first(sources: Sequence[Mapping], *keys: str) -> Any:
    """First non-empty value; keys are tried in priority order across sources."""
    for key in keys:
        for source in sources:
            value = _lookup(source, key)
            if not _is_empty(value):
                return value
    return None


def _mapping(value: Any) -> Mapping:
    return value if isinstance(value, Mapping) else {}


def _text(sources: Sequence[Mapping], *keys: str) -> str:
    value = _first(sources, *keys)
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _text_list(value: Any) -> List[str]:
    if isinstance(value, str):
        return [value]
    if not isinstance(value, (list, tuple)):
        return []
    return [item if isinstance(item, str) else str(item) for item in value if item is not None]


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, str)):
        try:
            parsed = float(value)
        except (ValueError, OverflowError):
            return None
        return parsed if math.isfinite(parsed) else None
    return None


def _non_negative(
    sources: Sequence[Mapping],
    key: str,
    default: int,
    path: str,
    applied: List[str],
    report_missing: bool = True,
) -> int:
    raw = _first(sources, key)
    value = _number(raw)
    if value is None or value < 0:
        if raw is not None or report_missing:
            applied.append(path)
        return default
    return int(value)


def _flag(sources: Sequence[Mapping], key: str, default: bool = False) -> bool:
    for source in sources:
        value = _lookup(source, key)
        if value is not None:
            return bool(value)
    return default


def _enum(enum_cls: Type[Enum], value: Any, default: Enum, path: str, applied: List[str]) -> Enum:
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        for member in enum_cls:
            if member.value.lower() == lowered or member.name.lower() == lowered:
                return member
    applied.append(path)
    return default


def _timestamp(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        seconds = _number(value)
        if seconds is None:
            return None
        # Browser clients write epoch milliseconds
        if abs(seconds) > MILLISECOND_EPOCH_THRESHOLD:
            seconds /= 1000
        try:
            parsed = datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (ValueError, OverflowError, OSError):
            return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def _sorted_by_order(items: Iterable[Any]) -> List[Mapping]:
    """Mappings from ``items`` ordered by their ``order`` value, stable."""
    entries = [_mapping(item) for item in items]

    def sort_key(pair):
        index, entry = pair
        order = _number(entry.get("order"))
        return (order if order is not None else math.inf, index)

    return [entry for _, entry in sorted(enumerate(entries), key=sort_key)]


def _stamp() -> int:
    return int(time.time() * 1000)


def sync_aliases(
    content: Dict[str, Any],
    changed_keys: Iterable[str],
    groups: Sequence[Tuple[str, ...]],
) -> Dict[str, Any]:
    """Copy the changed member of each alias group onto its siblings.

    When no member of a group changed, the canonical (first) member wins.
    """
    changed = set(changed_keys)
    synced = dict(content)
    for group in groups:
        touched = [name for name in group if name in changed]
        source = touched[0] if touched else group[0]
        value = synced.get(source)
        for name in group:
            synced[name] = list(value) if isinstance(value, list) else value
    return synced


# ============================================================
# Loose document -> canonical
# ============================================================

def _canonical_slide(raw: Mapping, index: int, stamp: int, applied: List[str]) -> CinematicSlide:
    path = f"cinematicSlides[{index}]"
    content = _mapping(raw.get("content"))
    sources = (content, raw)

    slide_id = _text((raw,), "id")
    if not slide_id:
        slide_id = f"slide-{stamp}-{index}"
        applied.append(f"{path}.id")

    text = _text(sources, "text", "dialogue")
    speaker = _text(sources, "speaker", "character")
    background = _text(sources, "backgroundImage", "background")
    character_image = _text(sources, "characterImage", "image")

    # Legacy slides have no type; they were always spoken by a character.
    default_type = SlideType.CHARACTER if speaker else SlideType.STORY
    slide_type = _enum(SlideType, raw.get("type"), default_type, f"{path}.type", applied)

    duration = _non_negative(
        sources, "duration", DEFAULT_SLIDE_DURATION_MS, f"{path}.duration", applied,
        report_missing=False,
    )
    choices = [
        SlideChoice(
            text=_text((_mapping(choice),), "text"),
            next_slide=_text((_mapping(choice),), "nextSlide") or None,
        )
        for choice in (_first(sources, "choices") or [])
        if isinstance(choice, Mapping)
    ]

    return CinematicSlide(
        id=slide_id,
        type=slide_type,
        order=index + 1,
        content=SlideContent(
            text=text,
            dialogue=text,
            title=_text(sources, "title"),
            speaker=speaker,
            character=speaker,
            location=_text(sources, "location"),
            background=background,
            background_image=background,
            character_image=character_image,
            image=character_image,
            sound_effect=_text(sources, "soundEffect"),
            auto_advance=_flag(sources, "autoAdvance"),
            duration=duration,
            choices=choices,
        ),
    )


def _canonical_hint_step(raw: Mapping, path: str, index: int, stamp: int, applied: List[str]) -> HintStep:
    step_id = _text((raw,), "id")
    if not step_id:
        step_id = f"hint-{stamp}-{index}"
        applied.append(f"{path}.id")
    return HintStep(
        id=step_id,
        condition=_text((raw,), "condition"),
        hint=_text((raw,), "hint"),
        points=_non_negative((raw,), "points", 0, f"{path}.points", applied, report_missing=False),
    )


def _canonical_mission(raw: Mapping, index: int, stamp: int, applied: List[str]) -> Mission:
    path = f"missions[{index}]"
    content = _mapping(raw.get("content"))
    sources = (content, raw)

    mission_id = _text((raw,), "id")
    if not mission_id:
        mission_id = f"mission-{stamp}-{index}"
        applied.append(f"{path}.id")

    initial_code = _text(sources, "initialCode", "brokenHtml")
    initial_css = _text(sources, "initialCss", "brokenCss")
    target_code = _text(sources, "targetCode", "targetHtml")
    hints = _text_list(_first(sources, "hints", "aiHints")) or [""]

    raw_steps = _first(sources, "hintSteps", "hintsSteps") or []
    hint_steps = [
        _canonical_hint_step(step, f"{path}.hintSteps[{i}]", i, stamp, applied)
        for i, step in enumerate(raw_steps)
        if isinstance(step, Mapping)
    ]
    choices = [
        MissionChoice(
            text=_text((choice,), "text"),
            correct=_flag((choice,), "correct"),
            explanation=_text((choice,), "explanation"),
        )
        for choice in (_first(sources, "choices") or [])
        if isinstance(choice, Mapping)
    ]

    return Mission(
        id=mission_id,
        title=_text((raw,), "title"),
        description=_text((raw,), "description"),
        type=_enum(MissionType, raw.get("type"), MissionType.CODE_FIX, f"{path}.type", applied),
        order=index + 1,
        content=MissionContent(
            initial_code=initial_code,
            broken_html=initial_code,
            initial_css=initial_css,
            broken_css=initial_css,
            target_code=target_code,
            target_html=target_code,
            target_css=_text(sources, "targetCss"),
            objective=_text(sources, "objective"),
            success_conditions=_text_list(_first(sources, "successConditions")),
            choices=choices,
            hints=hints,
            ai_hints=list(hints),
            hint_steps=hint_steps,
            clues=_text_list(_first(sources, "clues")),
            evidence=_text_list(_first(sources, "evidence")),
            story_text=_text(sources, "storyText"),
            points=_non_negative(
                sources, "points", DEFAULT_MISSION_POINTS, f"{path}.points", applied,
                report_missing=False,
            ),
            clue_revealed=_text(sources, "clueRevealed"),
            clue_unlock_condition=_text(sources, "clueUnlockCondition"),
        ),
    )


def _from_embedded(raw: Mapping, embedded: Mapping) -> Optional[Case]:
    try:
        return Case.model_validate(embedded)
    except ValidationError as e:
        logger.warning(f"Embedded canonical form of case {raw.get('id')!r} is invalid, re-normalizing: {e}")
        return None


def to_canonical(raw: Any, position: Optional[int] = None) -> NormalizationResult:
    """Normalize any case document into a fully populated canonical Case.

    Args:
        raw: Store document, static literal or request payload
        position: 0-based catalog position used when ``displayOrder`` is missing

    Returns:
        NormalizationResult with the case and the applied default paths
    """
    applied: List[str] = []
    if not isinstance(raw, Mapping):
        applied.append("document")
        raw = {}

    embedded = raw.get(CANONICAL_KEY)
    if isinstance(embedded, Mapping):
        case = _from_embedded(raw, embedded)
        if case is not None:
            return NormalizationResult(case, applied)
        applied.append(CANONICAL_KEY)

    stamp = _stamp()
    now = utc_now()

    legacy_sources = (_mapping(_lookup(raw, "legacyBody")), raw)
    rich = _mapping(_lookup(raw, "richBody"))
    rich_sources = (rich, raw)

    case_id = _text((raw,), "id")
    if not case_id:
        case_id = f"case-{stamp}"
        applied.append("id")

    title = _text((raw,), "title")
    if not title:
        applied.append("title")
    description = _text((raw,), "description")
    if not description:
        applied.append("description")

    duration = _text((raw,), "duration")
    if not duration:
        duration = DEFAULT_DURATION
        applied.append("duration")

    default_order = position + 1 if position is not None else 1
    display_order = _non_negative((raw,), "displayOrder", default_order, "displayOrder", applied)
    if display_order < 1:
        display_order = default_order
        applied.append("displayOrder")

    timestamps = {}
    for key in ("createdAt", "updatedAt"):
        value = _timestamp(_lookup(raw, key))
        if value is None:
            value = now
            applied.append(key)
        timestamps[key] = value

    slides = [
        _canonical_slide(slide, index, stamp, applied)
        for index, slide in enumerate(_sorted_by_order(_first(rich_sources, "cinematicSlides") or []))
    ]
    missions = [
        _canonical_mission(mission, index, stamp, applied)
        for index, mission in enumerate(_sorted_by_order(_first(rich_sources, "missions") or []))
    ]

    case = Case(
        id=case_id,
        title=title,
        description=description,
        difficulty=_enum(Difficulty, raw.get("difficulty"), Difficulty.BEGINNER, "difficulty", applied),
        duration=duration,
        clue_points=_non_negative((raw,), "cluePoints", DEFAULT_CLUE_POINTS, "cluePoints", applied),
        is_detective_mission=_flag((raw,), "isDetectiveMission"),
        is_coming_soon=_flag((raw,), "isComingSoon"),
        story=_text((raw,), "story"),
        objective=_text((raw,), "objective"),
        final_resolution=_text((raw,), "finalResolution"),
        display_order=display_order,
        is_active=_flag((raw,), "isActive", default=True),
        completions=_non_negative((raw,), "completions", 0, "completions", applied, report_missing=False),
        average_score=_non_negative((raw,), "averageScore", 0, "averageScore", applied, report_missing=False),
        created_at=timestamps["createdAt"],
        updated_at=timestamps["updatedAt"],
        legacy_body=LegacyBody(
            initial_html=_text(legacy_sources, "initialHtml"),
            initial_css=_text(legacy_sources, "initialCss"),
            target_html=_text(legacy_sources, "targetHtml"),
            target_css=_text(legacy_sources, "targetCss"),
            hints=_text_list(_first(legacy_sources, "hints")) or [""],
        ),
        rich_body=RichBody(cinematic_slides=slides, missions=missions),
    )
    return NormalizationResult(case, applied)


# ============================================================
# Canonical -> legacy / storage document
# ============================================================

def _legacy_slide(slide: CinematicSlide) -> Dict[str, Any]:
    content = slide.content
    return {
        "id": slide.id,
        "title": content.title,
        "dialogue": content.text or content.dialogue,
        "speaker": content.speaker or content.character,
        "background": content.background or content.background_image,
        "characterImage": content.character_image or content.image,
        "soundEffect": content.sound_effect,
    }


def _legacy_mission(mission: Mission) -> Dict[str, Any]:
    content = mission.content
    return {
        "id": mission.id,
        "title": mission.title,
        "description": mission.description,
        "objective": content.objective,
        "brokenHtml": content.broken_html or content.initial_code,
        "brokenCss": content.broken_css or content.initial_css,
        "targetHtml": content.target_html or content.target_code,
        "targetCss": content.target_css,
        "successConditions": list(content.success_conditions),
        "clueRevealed": content.clue_revealed,
        "aiHints": list(content.ai_hints or content.hints or [""]),
    }


def to_legacy(case: Case) -> Dict[str, Any]:
    """Project a canonical case onto the legacy document shape.

    Lossy: slide and mission types, choices, hint steps, points, auto-advance
    and clue unlock conditions have no legacy field and are dropped.
    """
    legacy = case.legacy_body
    return {
        "id": case.id,
        "title": case.title,
        "description": case.description,
        "story": case.story,
        "objective": case.objective,
        "difficulty": case.difficulty.value,
        "duration": case.duration,
        "cluePoints": case.clue_points,
        "isDetectiveMission": case.is_detective_mission,
        "isComingSoon": case.is_coming_soon,
        "finalResolution": case.final_resolution,
        "initialHtml": legacy.initial_html,
        "initialCss": legacy.initial_css,
        "targetHtml": legacy.target_html,
        "targetCss": legacy.target_css,
        "hints": list(legacy.hints),
        "cinematicSlides": [_legacy_slide(slide) for slide in case.rich_body.cinematic_slides],
        "missions": [_legacy_mission(mission) for mission in case.rich_body.missions],
    }


def to_document(case: Case) -> Dict[str, Any]:
    """Storage document: legacy projection, catalog fields and the canonical dump."""
    document = to_legacy(case)
    document.update(
        {
            "displayOrder": case.display_order,
            "isActive": case.is_active,
            "completions": case.completions,
            "averageScore": case.average_score,
            "createdAt": case.created_at.isoformat(),
            "updatedAt": case.updated_at.isoformat(),
            CANONICAL_KEY: case.model_dump(mode="json", by_alias=True),
        }
    )
    return document


def field_name(key: str) -> str:
    """Python field name for a camelCase or snake_case document key."""
    return to_snake(key)
