"""Unit tests for the case editor."""

import pytest
from pydantic import ValidationError

from case_content.core.case_editor import CaseEditor
from case_content.core.normalizer import to_canonical
from case_content.data import STATIC_CASES
from case_content.models.case import Difficulty, new_case


@pytest.fixture
def tutorial_case():
    return to_canonical(STATIC_CASES[0]).case


@pytest.mark.unit
class TestMissionEditing:

    def test_add_mission_appends_with_defaults(self, tutorial_case):
        editor = CaseEditor(tutorial_case)

        mission = editor.add_mission(title="Clue 4")

        assert mission.order == 4
        assert mission.title == "Clue 4"
        assert mission.content.points == 250
        assert [m.order for m in editor.missions] == [1, 2, 3, 4]

    def test_editor_works_on_a_copy(self, tutorial_case):
        editor = CaseEditor(tutorial_case)
        editor.add_mission()

        assert len(tutorial_case.missions) == 3

    def test_update_merges_content(self, tutorial_case):
        editor = CaseEditor(tutorial_case)
        before = editor.missions[0]

        updated = editor.update_mission("clue-1", {"title": "Renamed", "content": {"targetCss": "p {}"}})

        assert updated.title == "Renamed"
        assert updated.content.target_css == "p {}"
        assert updated.content.initial_code == before.content.initial_code
        assert updated.content.hint_steps == before.content.hint_steps

    def test_update_syncs_alias_pair(self, tutorial_case):
        editor = CaseEditor(tutorial_case)

        updated = editor.update_mission("clue-1", {"content": {"brokenHtml": "<p>new</p>"}})

        assert updated.content.initial_code == "<p>new</p>"
        assert updated.content.broken_html == "<p>new</p>"

    def test_update_ignores_id_and_order(self, tutorial_case):
        editor = CaseEditor(tutorial_case)

        updated = editor.update_mission("clue-2", {"id": "hijack", "order": 9})

        assert updated.id == "clue-2"
        assert updated.order == 2

    def test_update_unknown_mission(self, tutorial_case):
        assert CaseEditor(tutorial_case).update_mission("nope", {"title": "x"}) is None

    def test_update_with_invalid_value(self, tutorial_case):
        editor = CaseEditor(tutorial_case)
        with pytest.raises(ValidationError):
            editor.update_mission("clue-1", {"content": {"points": -3}})

    def test_delete_mission_reindexes(self, tutorial_case):
        editor = CaseEditor(tutorial_case)

        assert editor.delete_mission("clue-2") is True
        assert [m.id for m in editor.missions] == ["clue-1", "clue-3"]
        assert [m.order for m in editor.missions] == [1, 2]
        assert editor.delete_mission("clue-2") is False

    def test_move_edges_are_noops(self, tutorial_case):
        editor = CaseEditor(tutorial_case)

        editor.move_mission("clue-1", "up")
        editor.move_mission("clue-3", "down")

        assert [m.id for m in editor.missions] == ["clue-1", "clue-2", "clue-3"]

    def test_move_mission_down(self, tutorial_case):
        editor = CaseEditor(tutorial_case)

        missions = editor.move_mission("clue-1", "down")

        assert [m.id for m in missions] == ["clue-2", "clue-1", "clue-3"]
        assert [m.order for m in missions] == [1, 2, 3]


@pytest.mark.unit
class TestSlideEditing:

    def test_add_update_move_delete(self, tutorial_case):
        editor = CaseEditor(tutorial_case)

        slide = editor.add_slide(content={"text": "Epilogue"})
        assert slide.order == 4
        assert slide.content.dialogue == "Epilogue"

        updated = editor.update_slide(slide.id, {"content": {"dialogue": "Epilogue, revised"}})
        assert updated.content.text == "Epilogue, revised"

        editor.move_slide(slide.id, "up")
        assert [s.id for s in editor.slides] == ["intro-1", "intro-2", slide.id, "intro-3"]

        assert editor.delete_slide("intro-1") is True
        assert [s.order for s in editor.slides] == [1, 2, 3]


@pytest.mark.unit
class TestDetails:

    def test_update_details(self, tutorial_case):
        editor = CaseEditor(tutorial_case)

        case = editor.update_details({
            "title": "Tutorial",
            "difficulty": "Advanced",
            "initialHtml": "<h1>",
            "displayOrder": 42,
            "id": "other",
        })

        assert case.title == "Tutorial"
        assert case.difficulty == Difficulty.ADVANCED
        assert case.legacy_body.initial_html == "<h1>"
        assert case.display_order == tutorial_case.display_order
        assert case.id == tutorial_case.id

    def test_new_editor_starts_blank(self):
        editor = CaseEditor()

        assert editor.is_new is True
        assert editor.case.title == ""


@pytest.mark.unit
class TestSave:

    def test_title_checked_first(self):
        editor = CaseEditor(new_case(is_detective_mission=True))

        result = editor.save()

        assert result.ok is False
        assert result.rejection.rule == "title_required"
        assert result.rejection.message == "Please enter a case title"

    def test_description_required(self):
        result = CaseEditor(new_case(title="T")).save()
        assert result.rejection.rule == "description_required"

    def test_detective_case_needs_a_mission(self):
        editor = CaseEditor(new_case(title="T", description="D", is_detective_mission=True))

        assert editor.save().rejection.rule == "missions_required"

        editor.add_mission(title="First")
        assert editor.save().ok is True

    def test_plain_case_without_missions_saves(self):
        assert CaseEditor(new_case(title="T", description="D")).save().ok is True

    def test_blank_title_rejected(self):
        result = CaseEditor(new_case(title="   ", description="D")).save()
        assert result.rejection.rule == "title_required"

    def test_invariant_violation(self, tutorial_case):
        broken = tutorial_case.model_copy(update={"clue_points": -1})

        result = CaseEditor(broken).save()

        assert result.rejection.rule == "invariant"
        assert "cluePoints" in result.rejection.message

    def test_success_returns_legacy_projection(self, tutorial_case):
        editor = CaseEditor(tutorial_case)

        result = editor.save()

        assert result.ok is True
        assert result.rejection is None
        assert result.case.updated_at >= tutorial_case.updated_at
        assert result.legacy["missions"][0]["brokenHtml"] == tutorial_case.missions[0].content.initial_code
        assert editor.is_new is False
