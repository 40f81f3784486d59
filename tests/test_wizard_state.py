"""
Unit Tests for the Wizard State Store

Tests for wizard_state.WizardSession and WizardStore.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from config import TOTAL_STEPS
from wizard_state import WizardSession, WizardStore


class TestWizardSession:
    """Tests for the session model defaults."""

    def test_new_session_starts_empty_on_step_one(self):
        session = WizardSession()

        assert session.current_step == 1
        assert session.face_image_ref is None
        assert session.video_title == ""
        assert session.selected_style_id is None
        assert session.generated_thumbnail_ref is None

    def test_sessions_get_distinct_ids(self):
        assert WizardSession().id != WizardSession().id

    def test_step_outside_range_is_rejected(self):
        with pytest.raises(PydanticValidationError):
            WizardSession(current_step=TOTAL_STEPS + 1)

    def test_round_trips_through_json(self):
        session = WizardSession(video_title="My Video", current_step=3)

        restored = WizardSession.model_validate_json(session.model_dump_json())

        assert restored == session


class TestSetField:
    """Tests for WizardStore.set_field"""

    def test_updates_text_field(self):
        store = WizardStore()

        store.set_field("video_title", "How I Built a Rocket")

        assert store.session.video_title == "How I Built a Rocket"

    def test_text_field_none_becomes_empty_string(self):
        store = WizardStore()
        store.set_field("thumbnail_text", "BOOM")

        store.set_field("thumbnail_text", None)

        assert store.session.thumbnail_text == ""

    def test_empty_reference_becomes_none(self):
        store = WizardStore()
        store.set_field("face_image_ref", "https://cdn.test/me.jpg")

        store.set_field("face_image_ref", "")

        assert store.session.face_image_ref is None

    def test_unknown_field_raises_key_error(self):
        store = WizardStore()

        with pytest.raises(KeyError):
            store.set_field("current_step", 5)

    def test_last_write_wins(self):
        store = WizardStore()

        store.set_fields({"video_title": "first"})
        store.set_fields({"video_title": "second"})

        assert store.session.video_title == "second"

    def test_style_is_kept_when_no_catalog_fetched(self):
        store = WizardStore()

        store.set_field("selected_style_id", "anything")

        assert store.session.selected_style_id == "anything"

    def test_unknown_style_falls_back_to_first_catalog_entry(self):
        store = WizardStore(catalog_ids=["sunset", "neon-glow"])

        store.set_field("selected_style_id", "retro")

        assert store.session.selected_style_id == "sunset"

    def test_known_style_is_kept(self):
        store = WizardStore(catalog_ids=["sunset", "neon-glow"])

        store.set_field("selected_style_id", "neon-glow")

        assert store.session.selected_style_id == "neon-glow"

    def test_clearing_style_is_allowed(self):
        store = WizardStore(catalog_ids=["sunset"])
        store.set_field("selected_style_id", "sunset")

        store.set_field("selected_style_id", None)

        assert store.session.selected_style_id is None


class TestApplyForm:
    """Tests for WizardStore.apply_form"""

    def test_applies_text_and_style(self):
        store = WizardStore(catalog_ids=["sunset", "neon-glow"])

        store.apply_form({"video_title": "Title", "selected_style_id": "neon-glow"})

        assert store.session.video_title == "Title"
        assert store.session.selected_style_id == "neon-glow"

    @pytest.mark.parametrize("field,value", [
        ("generated_thumbnail_ref", "https://evil.test/x.png"),
        ("generated_description", "fake"),
        ("face_image_ref", "javascript:alert(1)"),
    ])
    def test_rejects_fields_outside_the_form(self, field, value):
        store = WizardStore()

        with pytest.raises(KeyError):
            store.apply_form({"video_title": "Title", field: value})

        assert store.session.video_title == ""
        assert getattr(store.session, field) is None


class TestGoToStep:
    """Tests for WizardStore.go_to_step"""

    @pytest.mark.parametrize("requested,expected", [(0, 1), (-3, 1), (3, 3), (99, TOTAL_STEPS)])
    def test_clamps_to_valid_range(self, requested, expected):
        store = WizardStore()

        store.go_to_step(requested)

        assert store.current_step == expected


class TestApplyCatalog:
    """Tests for WizardStore.apply_catalog"""

    def test_unset_selection_takes_first_entry(self):
        store = WizardStore()

        selected = store.apply_catalog(["sunset", "neon-glow"])

        assert selected == "sunset"

    def test_vanished_selection_falls_back_to_first_remaining(self):
        store = WizardStore()
        store.apply_catalog(["sunset", "neon-glow"])
        store.set_field("selected_style_id", "neon-glow")

        selected = store.apply_catalog(["retro", "sunset"])

        assert selected == "retro"

    def test_empty_catalog_clears_selection(self):
        store = WizardStore()
        store.apply_catalog(["sunset"])

        selected = store.apply_catalog([])

        assert selected is None
        assert store.catalog_ids == []


class TestReset:
    """Tests for WizardStore.reset"""

    def test_restores_initial_state_keeping_id(self):
        store = WizardStore(catalog_ids=["sunset"])
        session_id = store.session.id
        flow_id = store.session.flow_id
        store.set_fields({"video_title": "x", "face_image_ref": "https://cdn.test/me.jpg"})
        store.go_to_step(4)

        store.reset()

        assert store.session.id == session_id
        assert store.session.flow_id != flow_id
        assert store.current_step == 1
        assert store.session.video_title == ""
        assert store.session.face_image_ref is None
        assert store.catalog_ids is None
