# -*- coding: utf-8 -*-
"""
LocForge Key Resolver

Runtime lookup of display text for the active language:
- canonicalization through the CanonicalRegistry
- disambiguation suffix ("Close|verb") hidden from display
- per-language TranslationTable lookup
- missing-translation policy

The active language and its table are held in one immutable snapshot that
is swapped wholesale, so translate() never sees a half-switched state.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

import locforge_config as config
from locforge_enums import MissingTextBehavior
from locforge_logger import get_logger
from core.canonical_registry import CanonicalRegistry
from core.language_data import TranslationCatalog, TranslationTable
from core.smart_string import extract_placeholders, format_smart, restore_placeholders

logger = get_logger("core.key_resolver")


def strip_disambiguation(text: str) -> str:
    """
    "Close|verb" -> "Close". A delimiter in first or last position is not a
    disambiguation tag and the text is returned unchanged.
    """
    index = text.find(config.DISAMBIGUATION_DELIMITER)
    if 0 < index < len(text) - 1:
        return text[:index]
    return text


@dataclass(frozen=True)
class LanguageSnapshot:
    language: str
    # None while the language is loading or after its load failed
    table: Optional[TranslationTable] = None

    @property
    def is_loaded(self) -> bool:
        return self.table is not None


class KeyResolver:
    """Resolves source text to display text for the current language."""

    def __init__(self, registry: CanonicalRegistry, catalog: TranslationCatalog,
                 default_language: Optional[str] = None,
                 missing_text_behavior: MissingTextBehavior = config.DEFAULT_MISSING_TEXT_BEHAVIOR):
        self.registry = registry
        self.catalog = catalog
        self.default_language = default_language or catalog.default_language
        self.missing_text_behavior = missing_text_behavior
        self._snapshot = LanguageSnapshot(self.default_language)

    @classmethod
    def from_settings(cls, registry: CanonicalRegistry, catalog: TranslationCatalog, settings) -> 'KeyResolver':
        """Resolver using the missing-text policy from a SettingsModel."""
        return cls(registry, catalog, missing_text_behavior=settings.missing_text_behavior)

    @property
    def missing_text_behavior(self) -> MissingTextBehavior:
        return self._missing_text_behavior

    @missing_text_behavior.setter
    def missing_text_behavior(self, value):
        self._missing_text_behavior = MissingTextBehavior(value)

    @property
    def snapshot(self) -> LanguageSnapshot:
        return self._snapshot

    @property
    def current_language(self) -> str:
        return self._snapshot.language

    def activate(self, language: str, table: Optional[TranslationTable] = None):
        """Swap in a new language snapshot; table None means not loaded (default-language text)."""
        if table is not None and table.language != language:
            logger.warning(f"Table for '{table.language}' activated as '{language}'")
        self._snapshot = LanguageSnapshot(language, table)
        logger.debug(f"Resolver language: {language} (loaded={table is not None})")

    def reset_to_default(self):
        self.activate(self.default_language)

    # =========================================================================
    # LOOKUP
    # =========================================================================

    def _missing(self, canonical: str) -> str:
        behavior = self._missing_text_behavior
        if behavior == MissingTextBehavior.RETURN_BLANK:
            return ""
        if behavior == MissingTextBehavior.RETURN_MISSING_MESSAGE:
            return config.MISSING_MESSAGE_PREFIX + strip_disambiguation(canonical)
        return strip_disambiguation(canonical)

    def translate(self, original_text: str, language: Optional[str] = None) -> str:
        """
        Display text for original_text.

        Args:
            original_text: Source text as written by content authors
            language: Language to resolve for; defaults to the current one.
                      Only the default language and the loaded language are available,
                      any other language gets default-language text.
        """
        if not original_text or not original_text.strip():
            return original_text

        canonical = self.registry.get_canonical(original_text)
        snapshot = self._snapshot
        language = snapshot.language if language is None else language

        if language == self.default_language:
            return strip_disambiguation(canonical)

        if snapshot.language != language or snapshot.table is None:
            return strip_disambiguation(canonical)

        translated = snapshot.table.get(canonical)
        if translated:
            return translated

        return self._missing(canonical)

    def translate_smart(self, smart_text: str, args: Optional[Mapping[str, Any]] = None,
                        language: Optional[str] = None) -> str:
        """Translate with {placeholders} kept out of the lookup key, then fill them from args."""
        if not smart_text:
            return smart_text

        tokenized, placeholders = extract_placeholders(smart_text)
        translated = self.translate(tokenized, language)
        restored = restore_placeholders(translated, placeholders)

        if args:
            return format_smart(restored, args)
        return restored

    def format(self, format_string: str, *args) -> str:
        """Translate a str.format template and any string arguments."""
        translated_format = self.translate(format_string)
        translated_args = [self.translate(a) if isinstance(a, str) else a for a in args]
        return translated_format.format(*translated_args)

    def __repr__(self) -> str:
        return f"KeyResolver(language={self.current_language!r}, loaded={self._snapshot.is_loaded})"
