"""Unit tests for schema normalization."""

from datetime import datetime, timezone

import pytest

from case_content.core.normalizer import (
    CANONICAL_KEY,
    MISSION_ALIAS_GROUPS,
    sync_aliases,
    to_canonical,
    to_document,
    to_legacy,
)
from case_content.data import STATIC_CASES
from case_content.models.case import Difficulty, MissionType, SlideType


def _detective(**overrides):
    raw = {
        "id": "case-nav",
        "title": "Missing Navigation",
        "description": "Find the nav",
        "isDetectiveMission": True,
        "missions": [{"title": "Fix nav", "content": {"brokenHtml": "<div>", "targetHtml": "<nav>"}}],
    }
    raw.update(overrides)
    return raw


@pytest.mark.unit
class TestMissionNormalization:

    def test_legacy_names_under_content(self):
        result = to_canonical(_detective())
        mission = result.case.missions[0]

        assert mission.title == "Fix nav"
        assert mission.content.initial_code == "<div>"
        assert mission.content.broken_html == "<div>"
        assert mission.content.target_code == "<nav>"
        assert mission.content.target_html == "<nav>"
        assert mission.order == 1
        assert mission.type == MissionType.CODE_FIX
        assert mission.id.startswith("mission-")
        assert "missions[0].id" in result.applied_defaults

    def test_mission_level_legacy_fields(self):
        raw = _detective(missions=[{
            "id": "clue-1",
            "brokenHtml": "<center>",
            "brokenCss": "p {}",
            "aiHints": ["Remove center"],
            "hintsSteps": [{"id": "h1", "condition": "c", "hint": "h", "points": 5}],
        }])

        content = to_canonical(raw).case.missions[0].content

        assert content.initial_code == "<center>"
        assert content.initial_css == "p {}"
        assert content.hints == ["Remove center"]
        assert content.ai_hints == ["Remove center"]
        assert content.hint_steps[0].points == 5
        assert content.points == 250

    def test_newer_name_wins(self):
        raw = _detective(missions=[{
            "id": "m",
            "content": {"initialCode": "<new>", "brokenHtml": "<old>", "hints": ["new"], "aiHints": ["old"]},
        }])

        content = to_canonical(raw).case.missions[0].content

        assert content.initial_code == content.broken_html == "<new>"
        assert content.hints == content.ai_hints == ["new"]

    def test_missions_sorted_by_order_and_renumbered(self):
        raw = _detective(missions=[{"id": "b", "order": 5}, {"id": "a", "order": 2}])

        missions = to_canonical(raw).case.missions

        assert [m.id for m in missions] == ["a", "b"]
        assert [m.order for m in missions] == [1, 2]

    def test_invalid_points_replaced(self):
        raw = _detective(missions=[{"id": "m", "content": {"points": float("nan")}}])

        result = to_canonical(raw)

        assert result.case.missions[0].content.points == 250
        assert "missions[0].points" in result.applied_defaults


@pytest.mark.unit
class TestSlideNormalization:

    def test_legacy_dialogue_and_speaker(self):
        raw = _detective(cinematicSlides=[{
            "id": "intro-1",
            "dialogue": "We have a missing person.",
            "speaker": "Police Chief",
            "background": "police-station",
            "characterImage": "chief.png",
        }])

        slide = to_canonical(raw).case.cinematic_slides[0]

        assert slide.type == SlideType.CHARACTER
        assert slide.content.text == slide.content.dialogue == "We have a missing person."
        assert slide.content.speaker == slide.content.character == "Police Chief"
        assert slide.content.background_image == "police-station"
        assert slide.content.image == "chief.png"
        assert slide.content.duration == 5000
        assert slide.content.auto_advance is False

    def test_rich_slide_content(self):
        raw = _detective(cinematicSlides=[{
            "id": "s1",
            "type": "location",
            "content": {"text": "The harbor.", "autoAdvance": True, "duration": 3000},
        }])

        slide = to_canonical(raw).case.cinematic_slides[0]

        assert slide.type == SlideType.LOCATION
        assert slide.content.dialogue == "The harbor."
        assert slide.content.auto_advance is True
        assert slide.content.duration == 3000


@pytest.mark.unit
class TestCaseDefaults:

    def test_empty_document_is_repaired(self):
        result = to_canonical({})

        case = result.case
        assert case.id.startswith("case-")
        assert case.clue_points == 1000
        assert case.difficulty == Difficulty.BEGINNER
        assert case.legacy_body.hints == [""]
        for path in ("id", "title", "description", "duration", "cluePoints", "difficulty"):
            assert path in result.applied_defaults

    def test_non_mapping_input(self):
        result = to_canonical(None)
        assert "document" in result.applied_defaults

    def test_display_order_from_position(self):
        assert to_canonical({"id": "x"}, position=3).case.display_order == 4

    def test_negative_clue_points(self):
        result = to_canonical({"id": "x", "cluePoints": -10})

        assert result.case.clue_points == 1000
        assert "cluePoints" in result.applied_defaults

    def test_difficulty_is_case_insensitive(self):
        assert to_canonical({"difficulty": "intermediate"}).case.difficulty == Difficulty.INTERMEDIATE

    def test_timestamps_parsed(self):
        case = to_canonical({"createdAt": "2024-03-01T10:00:00Z"}).case
        assert case.created_at == datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)

    def test_millisecond_epoch_timestamps(self):
        result = to_canonical({"id": "x", "createdAt": 1700000000000, "updatedAt": 1700000000})

        assert result.case.created_at == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)
        assert result.case.updated_at == result.case.created_at
        assert "createdAt" not in result.applied_defaults

    def test_out_of_range_timestamp_is_repaired(self):
        result = to_canonical({"id": "x", "createdAt": 10 ** 400, "updatedAt": 1e20 * 1000})

        assert result.case.created_at.tzinfo is not None
        assert "createdAt" in result.applied_defaults
        assert "updatedAt" in result.applied_defaults

    def test_oversized_number_is_repaired(self):
        result = to_canonical({"id": "x", "cluePoints": 10 ** 400})

        assert result.case.clue_points == 1000
        assert "cluePoints" in result.applied_defaults

    def test_static_dataset_normalizes(self):
        for position, raw in enumerate(STATIC_CASES):
            case = to_canonical(raw, position).case
            assert case.id == raw["id"]
            assert case.title


@pytest.mark.unit
class TestProjection:

    def test_legacy_round_trip_keeps_core_fields(self):
        original = to_canonical(STATIC_CASES[0]).case

        again = to_canonical(to_legacy(to_canonical(to_legacy(original)).case)).case

        assert again.id == original.id
        assert again.title == original.title
        assert [s.content.text for s in again.cinematic_slides] == [
            s.content.text for s in original.cinematic_slides
        ]
        for before, after in zip(original.missions, again.missions):
            assert after.id == before.id
            assert after.content.initial_code == before.content.initial_code
            assert after.content.target_code == before.content.target_code
            assert after.content.target_css == before.content.target_css

    def test_legacy_projection_drops_rich_only_fields(self):
        case = to_canonical(_detective(missions=[{
            "id": "m",
            "type": "story",
            "content": {"points": 10, "clueUnlockCondition": "x", "choices": [{"text": "A", "correct": True}]},
        }])).case

        legacy_mission = to_legacy(case)["missions"][0]
        restored = to_canonical(to_legacy(case)).case.missions[0]

        assert "clueUnlockCondition" not in legacy_mission
        assert "choices" not in legacy_mission
        assert restored.type == MissionType.CODE_FIX
        assert restored.content.points == 250

    def test_document_keeps_canonical_form(self):
        case = to_canonical(_detective(missions=[{
            "id": "m",
            "type": "story",
            "content": {"points": 10, "clueUnlockCondition": "x"},
        }])).case

        document = to_document(case)
        restored = to_canonical(document)

        assert document["missions"][0]["brokenHtml"] == ""
        assert CANONICAL_KEY in document
        assert restored.applied_defaults == []
        assert restored.case == case

    def test_invalid_embedded_form_falls_back(self):
        document = to_document(to_canonical(_detective()).case)
        document[CANONICAL_KEY] = {"displayOrder": "not a number"}

        result = to_canonical(document)

        assert CANONICAL_KEY in result.applied_defaults
        assert result.case.id == "case-nav"


@pytest.mark.unit
class TestSyncAliases:

    def test_changed_member_wins(self):
        content = {"initial_code": "<a>", "broken_html": "<b>", "hints": ["x"], "ai_hints": ["x"]}

        synced = sync_aliases(content, ["broken_html"], MISSION_ALIAS_GROUPS)

        assert synced["initial_code"] == synced["broken_html"] == "<b>"

    def test_canonical_member_wins_when_unchanged(self):
        content = {"initial_code": "<a>", "broken_html": "<b>", "hints": ["x"], "ai_hints": ["y"]}

        synced = sync_aliases(content, [], MISSION_ALIAS_GROUPS)

        assert synced["broken_html"] == "<a>"
        assert synced["ai_hints"] == ["x"]
