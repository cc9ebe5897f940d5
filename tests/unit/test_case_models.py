"""Unit tests for case entity models and invariants."""

import pytest
from pydantic import ValidationError

from case_content.models.case import (
    Case,
    CaseShape,
    HintStep,
    MissionContent,
    RichBody,
    new_case,
    new_mission,
    new_slide,
    validate,
    validate_catalog,
)


@pytest.mark.unit
class TestConstructors:
    """Constructors apply the editor defaults"""

    def test_new_mission_defaults(self):
        mission = new_mission(order=2)

        assert mission.id.startswith("mission-")
        assert mission.order == 2
        assert mission.content.points == 250
        assert mission.content.hints == [""]
        assert mission.content.ai_hints == [""]

    def test_new_slide_defaults(self):
        slide = new_slide()

        assert slide.id.startswith("slide-")
        assert slide.order == 1
        assert slide.content.auto_advance is False
        assert slide.content.duration == 5000

    def test_new_case_defaults(self):
        case = new_case(display_order=4, title="Last Frame")

        assert case.id.startswith("case-")
        assert case.display_order == 4
        assert case.clue_points == 1000
        assert case.legacy_body.hints == [""]
        assert case.is_active is True
        assert case.completions == 0

    def test_ids_are_unique(self):
        assert new_mission().id != new_mission().id


@pytest.mark.unit
class TestCaseModel:
    """Serialization and derived properties"""

    def test_dump_uses_camel_case_aliases(self):
        data = new_case(title="T").model_dump(by_alias=True)

        assert "displayOrder" in data
        assert "cluePoints" in data
        assert "isDetectiveMission" in data
        assert "cinematicSlides" in data["richBody"]

    def test_accepts_camel_and_snake_names(self):
        by_alias = Case.model_validate({"id": "c", "cluePoints": 5})
        by_name = Case.model_validate({"id": "c", "clue_points": 5})

        assert by_alias.clue_points == by_name.clue_points == 5

    def test_shape_follows_detective_flag(self):
        assert new_case(is_detective_mission=True).shape == CaseShape.RICH
        assert new_case().shape == CaseShape.LEGACY

    def test_models_are_frozen(self):
        case = new_case()
        with pytest.raises(ValidationError):
            case.title = "changed"

    def test_negative_points_rejected(self):
        with pytest.raises(ValidationError):
            MissionContent(points=-1)
        with pytest.raises(ValidationError):
            HintStep(id="h", points=-5)


@pytest.mark.unit
class TestValidate:
    """validate() reports violated invariants"""

    def test_valid_case_has_no_violations(self):
        case = new_case(
            title="T",
            rich_body=RichBody(missions=[new_mission(order=1), new_mission(order=2)]),
        )
        assert validate(case) == []

    def test_gap_in_mission_order(self):
        case = new_case(rich_body=RichBody(missions=[new_mission(order=1), new_mission(order=3)]))

        violations = validate(case)

        assert len(violations) == 1
        assert violations[0].startswith("missions:")

    def test_duplicate_slide_ids(self):
        case = new_case(
            rich_body=RichBody(
                cinematic_slides=[new_slide(order=1, id="s"), new_slide(order=2, id="s")]
            )
        )
        assert "slides: duplicate id 's'" in validate(case)

    def test_duplicate_hint_step_ids(self):
        mission = new_mission(
            content=MissionContent(hint_steps=[HintStep(id="h1"), HintStep(id="h1")])
        )
        assert validate(mission) == [f"mission '{mission.id}': duplicate hint step id 'h1'"]

    def test_bounds_rechecked_after_model_copy(self):
        # model_copy skips field validation
        mission = new_mission()
        broken = mission.model_copy(update={"content": mission.content.model_copy(update={"points": -1})})

        assert validate(broken) == [f"mission '{mission.id}': points must be >= 0"]

    def test_unknown_entity_type(self):
        with pytest.raises(TypeError):
            validate({"id": "x"})

    def test_catalog_display_order(self):
        ok = [new_case(display_order=1), new_case(display_order=2)]
        clashing = [new_case(display_order=1), new_case(display_order=1)]

        assert validate_catalog(ok) == []
        assert len(validate_catalog(clashing)) == 1
