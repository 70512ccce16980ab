# -*- coding: utf-8 -*-
"""
LocForge Translation Catalog

The catalog holds the ordered list of canonical keys shared by every
language. Each non-default language ships a LanguageData file whose
"allText" list is aligned positionally with that key list.
"""

import json
import re
from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Optional

import locforge_config as config
from locforge_exceptions import CatalogError, LanguageLoadError
from locforge_logger import get_logger

logger = get_logger("core.language_data")

_INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*()\x00-\x1f]')


class TranslationTable:
    """
    Immutable translations for one language, keyed by canonical key.

    Built from two aligned lists; index i of texts translates index i of keys.
    """

    def __init__(self, language: str, keys: List[str], texts: List[str]):
        if len(keys) != len(texts):
            raise CatalogError(
                f"Translation table for '{language}' has {len(texts)} entries but the catalog has {len(keys)} keys"
            )
        self.language = language
        self._entries = MappingProxyType(dict(zip(keys, texts)))

    def get(self, key: str) -> Optional[str]:
        return self._entries.get(key)

    def __contains__(self, key):
        return key in self._entries

    def __len__(self):
        return len(self._entries)

    def __repr__(self) -> str:
        return f"TranslationTable(language={self.language!r}, entries={len(self)})"


class TranslationCatalog:
    """Key list, key contexts and the language setup of a project."""

    def __init__(self, default_language: str = config.DEFAULT_LANGUAGE,
                 supported_languages: Optional[List[str]] = None,
                 all_keys: Optional[List[str]] = None,
                 key_contexts: Optional[Dict[str, str]] = None):
        self.default_language = default_language
        self.supported_languages = list(supported_languages or [default_language])
        if default_language not in self.supported_languages:
            self.supported_languages.insert(0, default_language)
        self.all_keys: List[str] = []
        self._key_set = set()
        self.key_contexts: Dict[str, str] = dict(key_contexts or {})

        for key in all_keys or []:
            self.add_key(key)

    # =========================================================================
    # KEYS
    # =========================================================================

    def add_key(self, key: str, context: Optional[str] = None) -> bool:
        """Append a key if it is new. Returns True when it was added."""
        if not key or not key.strip() or key in self._key_set:
            return False
        self.all_keys.append(key)
        self._key_set.add(key)
        if context:
            self.key_contexts[key] = context
        return True

    def get_context(self, key: str) -> Optional[str]:
        return self.key_contexts.get(key)

    def __contains__(self, key):
        return key in self._key_set

    def __len__(self):
        return len(self.all_keys)

    # =========================================================================
    # LANGUAGES
    # =========================================================================

    def is_supported(self, language: str) -> bool:
        return language in self.supported_languages

    def non_default_languages(self) -> List[str]:
        return [lang for lang in self.supported_languages if lang != self.default_language]

    def build_table(self, language: str, texts: List[str]) -> TranslationTable:
        return TranslationTable(language, self.all_keys, texts)

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    def to_dict(self) -> dict:
        return {
            "defaultLanguage": self.default_language,
            "supportedLanguages": list(self.supported_languages),
            "allKeys": list(self.all_keys),
            "keyContexts": dict(self.key_contexts),
        }

    @classmethod
    def from_dict(cls, data: dict, default_language: Optional[str] = None) -> 'TranslationCatalog':
        """default_language is used when the data does not name one."""
        if not isinstance(data, dict):
            raise CatalogError("Catalog data must be a JSON object")
        return cls(
            default_language=data.get("defaultLanguage") or default_language or config.DEFAULT_LANGUAGE,
            supported_languages=data.get("supportedLanguages"),
            all_keys=data.get("allKeys", []),
            key_contexts=data.get("keyContexts", {}),
        )

    @classmethod
    def load(cls, path, default_language: Optional[str] = None) -> 'TranslationCatalog':
        path = Path(path)
        try:
            with path.open('r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise CatalogError(f"Invalid JSON in catalog: {e}", file_path=str(path)) from e
        except OSError as e:
            raise CatalogError(f"Cannot read catalog: {e}", file_path=str(path)) from e

        catalog = cls.from_dict(data, default_language)
        logger.debug(f"Catalog loaded: {len(catalog)} keys, languages={catalog.supported_languages}")
        return catalog

    def save(self, path):
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open('w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=4, ensure_ascii=False)
        logger.info(f"Catalog saved: {path}")


def sanitize_language_name(language: str) -> str:
    return _INVALID_FILENAME_CHARS.sub("", language.replace(" ", "_"))


def language_file_path(directory, language: str) -> Path:
    return Path(directory) / config.LANGUAGE_FILE_TEMPLATE.format(name=sanitize_language_name(language))


def load_language_file(path, catalog: TranslationCatalog, language: Optional[str] = None) -> TranslationTable:
    """
    Read a LanguageData file: {"language": "French", "allText": [...]}.

    Raises:
        LanguageLoadError: if the file is missing, unreadable or not aligned with the catalog
    """
    path = Path(path)
    if not path.is_file():
        raise LanguageLoadError("Language data file not found", language=language, file_path=str(path))

    try:
        with path.open('r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise LanguageLoadError(f"Invalid JSON: {e}", language=language, file_path=str(path)) from e
    except OSError as e:
        raise LanguageLoadError(f"Cannot read file: {e}", language=language, file_path=str(path)) from e

    if not isinstance(data, dict) or not isinstance(data.get("allText"), list):
        raise LanguageLoadError("Language data must contain an 'allText' list", language=language, file_path=str(path))

    language = language or data.get("language")
    try:
        table = catalog.build_table(language, data["allText"])
    except CatalogError as e:
        raise LanguageLoadError(e.message, language=language, file_path=str(path)) from e

    logger.debug(f"Loaded {len(table)} translations for '{language}'")
    return table


def save_language_file(path, language: str, texts: List[str]):
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open('w', encoding='utf-8') as f:
        json.dump({"language": language, "allText": list(texts)}, f, indent=4, ensure_ascii=False)
