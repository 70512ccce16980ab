# -*- coding: utf-8 -*-
"""
Unit Tests for the key resolver.
"""

import pytest

from locforge_enums import MissingTextBehavior
from core.key_resolver import KeyResolver, LanguageSnapshot, strip_disambiguation
from core.language_data import TranslationCatalog


@pytest.fixture
def start_catalog():
    return TranslationCatalog("English", ["English", "French"],
                              ["Start the Game", "Options", "Close|verb"])


@pytest.fixture
def start_resolver(registry, start_catalog):
    registry.set_status(["Start Game", "Start the Game"], "Start the Game")
    return KeyResolver(registry, start_catalog)


class TestStripDisambiguation:
    """Tests for strip_disambiguation."""

    def test_strips_suffix(self):
        assert strip_disambiguation("Close|verb") == "Close"

    def test_no_delimiter(self):
        assert strip_disambiguation("Close") == "Close"

    @pytest.mark.parametrize("text", ["|verb", "Close|", "|"])
    def test_edge_delimiters_kept(self, text):
        assert strip_disambiguation(text) == text


class TestTranslateDefaultLanguage:
    """Lookups in the default language."""

    def test_grouped_key_resolves_to_canonical(self, start_resolver):
        assert start_resolver.translate("Start Game", "English") == "Start the Game"

    def test_disambiguation_suffix_stripped(self, start_resolver):
        assert start_resolver.translate("Close|verb") == "Close"

    def test_default_language_ignores_policy(self, start_resolver):
        start_resolver.missing_text_behavior = MissingTextBehavior.RETURN_BLANK
        assert start_resolver.translate("Options") == "Options"

    @pytest.mark.parametrize("text", ["", "   ", None])
    def test_blank_input_returned_unchanged(self, start_resolver, text):
        assert start_resolver.translate(text) == text


class TestTranslateLoadedLanguage:
    """Lookups against an active translation table."""

    def test_translation_found(self, start_resolver, start_catalog):
        table = start_catalog.build_table("French", ["Commencer la partie", "Options", "Fermer"])
        start_resolver.activate("French", table)

        assert start_resolver.translate("Start Game") == "Commencer la partie"
        assert start_resolver.translate("Close|verb") == "Fermer"

    def test_missing_message_policy(self, start_resolver, start_catalog):
        """Grouped key with no translation under the missing-message policy."""
        table = start_catalog.build_table("French", ["", "Options", "Fermer"])
        start_resolver.activate("French", table)
        start_resolver.missing_text_behavior = MissingTextBehavior.RETURN_MISSING_MESSAGE

        assert start_resolver.translate("Start Game", "French") == "MISSING: Start the Game"

    def test_missing_native_policy(self, start_resolver, start_catalog):
        start_resolver.activate("French", start_catalog.build_table("French", ["", "", ""]))
        assert start_resolver.translate("Close|verb") == "Close"

    def test_missing_blank_policy(self, start_resolver, start_catalog):
        start_resolver.activate("French", start_catalog.build_table("French", ["", "", ""]))
        start_resolver.missing_text_behavior = "return_blank"
        assert start_resolver.translate("Start Game") == ""

    def test_key_outside_catalog_uses_policy(self, start_resolver, start_catalog):
        start_resolver.activate("French", start_catalog.build_table("French", ["a", "b", "c"]))
        start_resolver.missing_text_behavior = MissingTextBehavior.RETURN_MISSING_MESSAGE
        assert start_resolver.translate("Quit") == "MISSING: Quit"

    def test_unloaded_language_passes_default_text(self, start_resolver):
        """A language without a table degrades to default-language text."""
        start_resolver.activate("French", None)
        start_resolver.missing_text_behavior = MissingTextBehavior.RETURN_MISSING_MESSAGE
        assert not start_resolver.snapshot.is_loaded
        assert start_resolver.translate("Start Game") == "Start the Game"

    def test_explicit_language_not_active(self, start_resolver, start_catalog):
        start_resolver.activate("French", start_catalog.build_table("French", ["x", "y", "z"]))
        assert start_resolver.translate("Options", "German") == "Options"
        assert start_resolver.translate("Options", "English") == "Options"

    def test_reset_to_default(self, start_resolver, start_catalog):
        start_resolver.activate("French", start_catalog.build_table("French", ["x", "y", "z"]))
        start_resolver.reset_to_default()
        assert start_resolver.current_language == "English"
        assert start_resolver.translate("Options") == "Options"

    def test_from_settings_uses_missing_text_policy(self, registry, start_catalog, settings_model):
        settings_model.missing_text_behavior = MissingTextBehavior.RETURN_MISSING_MESSAGE
        resolver = KeyResolver.from_settings(registry, start_catalog, settings_model)

        assert resolver.missing_text_behavior == MissingTextBehavior.RETURN_MISSING_MESSAGE
        assert resolver.default_language == "English"

    def test_snapshot_replaced_not_mutated(self, start_resolver, start_catalog):
        before = start_resolver.snapshot
        start_resolver.activate("French", start_catalog.build_table("French", ["x", "y", "z"]))
        assert before == LanguageSnapshot("English", None)
        assert start_resolver.snapshot is not before


class TestSmartAndFormat:
    """Tests for translate_smart and format."""

    def test_translate_smart_keeps_placeholders_out_of_lookup(self, registry):
        catalog = TranslationCatalog("English", ["English", "French"], ["You have ###PH0###"])
        resolver = KeyResolver(registry, catalog)
        resolver.activate("French", catalog.build_table("French", ["Vous avez ###PH0###"]))

        text = resolver.translate_smart("You have {count:plural:an item|{} items}", {"count": 3})
        assert text == "Vous avez 3 items"

    def test_translate_smart_without_args(self, start_resolver):
        assert start_resolver.translate_smart("Hello {name}") == "Hello {name}"

    def test_format_translates_template_and_args(self, start_resolver):
        assert start_resolver.format("{0} / {1}", "Start Game", 3) == "Start the Game / 3"
