# -*- coding: utf-8 -*-
"""
Unit Tests for SettingsModel.
"""

import json

import pytest

from locforge_enums import MissingTextBehavior
from locforge_exceptions import ValidationError
from models.settings_model import SettingsModel


class TestSettingsModel:
    """Tests for SettingsModel."""

    def test_singleton(self, settings_model):
        assert SettingsModel.instance() is settings_model

    def test_defaults(self, settings_model):
        assert settings_model.general_threshold == 0.85
        assert settings_model.case_insensitive_threshold == 0.95
        assert settings_model.punctuation_threshold == 0.90
        assert settings_model.missing_text_behavior == MissingTextBehavior.RETURN_NATIVE_LANGUAGE
        assert settings_model.default_language == "English"
        assert settings_model.current_language == "English"

    def test_set_threshold_persists(self, settings_model, isolated_settings):
        settings_model.general_threshold = 0.8

        data = json.loads(isolated_settings.read_text(encoding="utf-8"))
        assert data[SettingsModel.KEY_GENERAL_THRESHOLD] == 0.8

    @pytest.mark.parametrize("value", [0.2, 1.5, True, "0.9"])
    def test_invalid_threshold_rejected(self, settings_model, value):
        with pytest.raises(ValidationError):
            settings_model.punctuation_threshold = value
        assert settings_model.punctuation_threshold == 0.90

    def test_missing_text_behavior(self, settings_model):
        settings_model.missing_text_behavior = "return_missing_message"
        assert settings_model.missing_text_behavior == MissingTextBehavior.RETURN_MISSING_MESSAGE

        with pytest.raises(ValidationError):
            settings_model.missing_text_behavior = "shout"

    def test_registry_path_default(self, settings_model, tmp_path):
        assert settings_model.registry_path == str(tmp_path / "DB" / "registry.db")

    def test_empty_default_language_rejected(self, settings_model):
        with pytest.raises(ValidationError):
            settings_model.default_language = ""
        assert settings_model.default_language == "English"

    def test_change_notification(self, settings_model):
        """Observers receive the new value."""
        seen = []
        settings_model.subscribe(SettingsModel.KEY_CURRENT_LANGUAGE, seen.append)

        settings_model.current_language = "French"
        settings_model.current_language = "French"

        assert seen == ["French"]

        settings_model.unsubscribe(SettingsModel.KEY_CURRENT_LANGUAGE, seen.append)
        settings_model.current_language = "English"
        assert seen == ["French"]


class TestSettingsLoading:
    """Tests for loading settings from disk."""

    def test_load_existing(self, isolated_settings):
        isolated_settings.write_text(json.dumps({
            SettingsModel.KEY_GENERAL_THRESHOLD: 0.7,
            SettingsModel.KEY_CURRENT_LANGUAGE: "French",
        }), encoding="utf-8")

        settings = SettingsModel.instance()
        assert settings.general_threshold == 0.7
        assert settings.current_language == "French"

    def test_invalid_values_reset_to_defaults(self, isolated_settings):
        isolated_settings.write_text(json.dumps({
            SettingsModel.KEY_GENERAL_THRESHOLD: 3,
            SettingsModel.KEY_MISSING_TEXT_BEHAVIOR: "explode",
            SettingsModel.KEY_CURRENT_LANGUAGE: "",
            SettingsModel.KEY_REGISTRY_PATH: 42,
        }), encoding="utf-8")

        settings = SettingsModel.instance()
        assert settings.general_threshold == 0.85
        assert settings.missing_text_behavior == MissingTextBehavior.RETURN_NATIVE_LANGUAGE
        assert settings.current_language == "English"
        assert settings.registry_path.endswith("registry.db")

    def test_unknown_language_kept(self, isolated_settings):
        """Support is decided by the catalog at restore time, not on load."""
        isolated_settings.write_text(json.dumps({
            SettingsModel.KEY_CURRENT_LANGUAGE: "Klingon",
        }), encoding="utf-8")

        assert SettingsModel.instance().current_language == "Klingon"

    def test_corrupted_file_uses_defaults(self, isolated_settings):
        isolated_settings.write_text("{broken", encoding="utf-8")
        assert SettingsModel.instance().general_threshold == 0.85
