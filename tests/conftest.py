# -*- coding: utf-8 -*-
"""
LocForge Test Fixtures

Shared fixtures for all tests.
"""

import pytest
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


# =============================================================================
# SETTINGS FIXTURES
# =============================================================================

@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point the settings singleton and registry path at temp files for every test."""
    import locforge_config as config
    from models.settings_model import SettingsModel

    monkeypatch.setattr(config, "SETTINGS_FILE_PATH", tmp_path / "settings.json")
    monkeypatch.setattr(config, "REGISTRY_DB_PATH", tmp_path / "DB" / "registry.db")
    SettingsModel.reset_instance()
    yield tmp_path / "settings.json"
    SettingsModel.reset_instance()


@pytest.fixture
def settings_model(isolated_settings):
    """Fresh SettingsModel instance for testing."""
    from models.settings_model import SettingsModel
    return SettingsModel.instance()


# =============================================================================
# CORE FIXTURES
# =============================================================================

@pytest.fixture
def registry():
    """Empty in-memory canonical registry."""
    from core.canonical_registry import CanonicalRegistry
    reg = CanonicalRegistry()
    yield reg
    reg.close()


@pytest.fixture
def sample_keys() -> list:
    """Catalog keys, including two disambiguated variants of 'Close'."""
    return [
        "Start Game",
        "start game",
        "Options",
        "Close|verb",
        "Close|noun",
        "Quit",
    ]


@pytest.fixture
def sample_catalog(sample_keys):
    """Catalog with English as default and two translated languages."""
    from core.language_data import TranslationCatalog
    return TranslationCatalog(
        default_language="English",
        supported_languages=["English", "French", "German"],
        all_keys=sample_keys,
        key_contexts={"Close|verb": "Button that closes a window"},
    )


@pytest.fixture
def french_texts() -> list:
    """French texts aligned with sample_keys; 'Quit' left untranslated."""
    return ["Commencer", "commencer", "Options", "Fermer", "Clôture", ""]


@pytest.fixture
def languages_dir(tmp_path, french_texts):
    """Directory with LanguageData files for French and German."""
    from core.language_data import save_language_file, language_file_path

    directory = tmp_path / "Languages"
    save_language_file(language_file_path(directory, "French"), "French", french_texts)
    save_language_file(language_file_path(directory, "German"), "German",
                       ["Spiel starten", "spiel starten", "Optionen", "Schließen", "Abschluss", "Beenden"])
    return directory


@pytest.fixture
def resolver(registry, sample_catalog):
    """KeyResolver over the sample catalog with the default language active."""
    from core.key_resolver import KeyResolver
    return KeyResolver(registry, sample_catalog)
