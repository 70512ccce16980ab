# -*- coding: utf-8 -*-
"""
LocForge Settings Model

Abstracts process-wide settings with:
- Type-safe access to settings
- Change notifications (observer callbacks)
- Validation and defaults
"""

from typing import Optional, Dict, Any, List, Callable
from pathlib import Path
import json

from locforge_logger import get_logger
from locforge_enums import MissingTextBehavior
from locforge_exceptions import ValidationError
import locforge_config as config

logger = get_logger("models.settings")


class SettingsModel:
    """
    Singleton model for toolkit settings.

    Provides:
    - Type-safe property access
    - Change notifications (Observer pattern)
    - Persistence (load at startup, save on change)
    - Validation
    """

    _instance: Optional['SettingsModel'] = None
    _initialized: bool = False

    # Setting keys
    KEY_GENERAL_THRESHOLD = "similarity_general_threshold"
    KEY_CASE_THRESHOLD = "similarity_case_insensitive_threshold"
    KEY_PUNCTUATION_THRESHOLD = "similarity_punctuation_threshold"
    KEY_MISSING_TEXT_BEHAVIOR = "missing_text_behavior"
    KEY_DEFAULT_LANGUAGE = "default_language"
    KEY_CURRENT_LANGUAGE = "current_language"
    KEY_REGISTRY_PATH = "registry_db_path"

    THRESHOLD_KEYS = (KEY_GENERAL_THRESHOLD, KEY_CASE_THRESHOLD, KEY_PUNCTUATION_THRESHOLD)

    def __new__(cls, settings_file: Optional[Path] = None) -> 'SettingsModel':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, settings_file: Optional[Path] = None):
        if SettingsModel._initialized:
            return

        self._settings_file = Path(settings_file) if settings_file else config.SETTINGS_FILE_PATH
        self._settings: Dict[str, Any] = {}
        self._observers: Dict[str, List[Callable]] = {}
        self._load()

        SettingsModel._initialized = True
        logger.debug("SettingsModel initialized")

    # =============================================================================
    # SINGLETON ACCESS
    # =============================================================================

    @classmethod
    def instance(cls, settings_file: Optional[Path] = None) -> 'SettingsModel':
        """Get the singleton instance."""
        if cls._instance is None or not cls._initialized:
            cls._instance = SettingsModel(settings_file)
        return cls._instance

    @classmethod
    def reset_instance(cls):
        """Reset singleton (for testing)."""
        cls._instance = None
        cls._initialized = False

    # =============================================================================
    # PERSISTENCE
    # =============================================================================

    @property
    def settings_file(self) -> Path:
        return self._settings_file

    def _get_defaults(self) -> Dict[str, Any]:
        """Get default settings."""
        return {
            self.KEY_GENERAL_THRESHOLD: config.DEFAULT_GENERAL_THRESHOLD,
            self.KEY_CASE_THRESHOLD: config.DEFAULT_CASE_INSENSITIVE_THRESHOLD,
            self.KEY_PUNCTUATION_THRESHOLD: config.DEFAULT_PUNCTUATION_THRESHOLD,
            self.KEY_MISSING_TEXT_BEHAVIOR: config.DEFAULT_MISSING_TEXT_BEHAVIOR.value,
            self.KEY_DEFAULT_LANGUAGE: config.DEFAULT_LANGUAGE,
            self.KEY_CURRENT_LANGUAGE: config.DEFAULT_LANGUAGE,
            self.KEY_REGISTRY_PATH: str(config.REGISTRY_DB_PATH),
        }

    def _load(self):
        """Load settings from file."""
        self._settings = self._get_defaults()
        settings_file = self._settings_file

        if not settings_file.is_file():
            logger.info(f"Settings file not found ({settings_file}), using defaults")
            return

        try:
            with settings_file.open('r', encoding='utf-8') as f:
                loaded = json.load(f)

            if isinstance(loaded, dict):
                self._settings.update(loaded)
                self._validate_all()
                logger.debug("Settings loaded successfully")
            else:
                logger.warning("Settings file format invalid, using defaults")

        except json.JSONDecodeError:
            logger.error(f"Settings file corrupted ({settings_file}), using defaults")
        except OSError as e:
            logger.error(f"Error loading settings: {e}")

    def save(self) -> bool:
        """Save settings to file."""
        settings_file = self._settings_file

        try:
            settings_file.parent.mkdir(parents=True, exist_ok=True)

            with settings_file.open('w', encoding='utf-8') as f:
                json.dump(self._settings, f, indent=4, ensure_ascii=False)

            logger.info("Settings saved successfully")
            return True

        except OSError as e:
            logger.error(f"Failed to save settings: {e}")
            return False

    @staticmethod
    def _is_valid_threshold(value) -> bool:
        return (isinstance(value, (int, float)) and not isinstance(value, bool)
                and config.MIN_THRESHOLD <= value <= config.MAX_THRESHOLD)

    def _validate_all(self):
        """Validate all settings, resetting invalid entries to defaults."""
        defaults = self._get_defaults()

        for key in self.THRESHOLD_KEYS:
            if not self._is_valid_threshold(self._settings.get(key)):
                logger.warning(f"Invalid '{key}' value ({self._settings.get(key)}), using default")
                self._settings[key] = defaults[key]

        try:
            MissingTextBehavior(self._settings.get(self.KEY_MISSING_TEXT_BEHAVIOR))
        except ValueError:
            logger.warning(f"Invalid '{self.KEY_MISSING_TEXT_BEHAVIOR}' value, using default")
            self._settings[self.KEY_MISSING_TEXT_BEHAVIOR] = defaults[self.KEY_MISSING_TEXT_BEHAVIOR]

        for key in (self.KEY_DEFAULT_LANGUAGE, self.KEY_CURRENT_LANGUAGE, self.KEY_REGISTRY_PATH):
            value = self._settings.get(key)
            if not isinstance(value, str) or not value:
                self._settings[key] = defaults[key]

    # =============================================================================
    # OBSERVER PATTERN
    # =============================================================================

    def subscribe(self, key: str, callback: Callable[[Any], None]):
        """
        Subscribe to changes on a specific setting.

        Args:
            key: Setting key to watch
            callback: Function called with new value when setting changes
        """
        if key not in self._observers:
            self._observers[key] = []
        self._observers[key].append(callback)

    def unsubscribe(self, key: str, callback: Callable):
        """Unsubscribe from setting changes."""
        if key in self._observers and callback in self._observers[key]:
            self._observers[key].remove(callback)

    def _notify(self, key: str, value: Any):
        """Notify observers of a setting change."""
        for callback in self._observers.get(key, []):
            try:
                callback(value)
            except Exception as e:
                logger.error(f"Error in settings observer for '{key}': {e}")

    # =============================================================================
    # GENERIC ACCESS
    # =============================================================================

    def get(self, key: str, default: Any = None) -> Any:
        """Get a setting value."""
        return self._settings.get(key, default)

    def set(self, key: str, value: Any, save: bool = False):
        """
        Set a setting value.

        Args:
            key: Setting key
            value: New value
            save: If True, immediately persist to disk
        """
        old_value = self._settings.get(key)
        if old_value != value:
            self._settings[key] = value
            self._notify(key, value)

            if save:
                self.save()

    # =============================================================================
    # SIMILARITY THRESHOLDS
    # =============================================================================

    def _set_threshold(self, key: str, value: float):
        if not self._is_valid_threshold(value):
            raise ValidationError(
                f"Threshold must be between {config.MIN_THRESHOLD} and {config.MAX_THRESHOLD}",
                field=key, value=value,
            )
        self.set(key, float(value), save=True)

    @property
    def general_threshold(self) -> float:
        return self._settings.get(self.KEY_GENERAL_THRESHOLD, config.DEFAULT_GENERAL_THRESHOLD)

    @general_threshold.setter
    def general_threshold(self, value: float):
        self._set_threshold(self.KEY_GENERAL_THRESHOLD, value)

    @property
    def case_insensitive_threshold(self) -> float:
        return self._settings.get(self.KEY_CASE_THRESHOLD, config.DEFAULT_CASE_INSENSITIVE_THRESHOLD)

    @case_insensitive_threshold.setter
    def case_insensitive_threshold(self, value: float):
        self._set_threshold(self.KEY_CASE_THRESHOLD, value)

    @property
    def punctuation_threshold(self) -> float:
        return self._settings.get(self.KEY_PUNCTUATION_THRESHOLD, config.DEFAULT_PUNCTUATION_THRESHOLD)

    @punctuation_threshold.setter
    def punctuation_threshold(self, value: float):
        self._set_threshold(self.KEY_PUNCTUATION_THRESHOLD, value)

    # =============================================================================
    # RESOLUTION
    # =============================================================================

    @property
    def missing_text_behavior(self) -> MissingTextBehavior:
        return MissingTextBehavior(self._settings.get(self.KEY_MISSING_TEXT_BEHAVIOR,
                                                      config.DEFAULT_MISSING_TEXT_BEHAVIOR.value))

    @missing_text_behavior.setter
    def missing_text_behavior(self, value):
        try:
            behavior = MissingTextBehavior(value)
        except ValueError as e:
            raise ValidationError(f"Invalid missing text behavior: {value}",
                                  field=self.KEY_MISSING_TEXT_BEHAVIOR, value=value) from e
        self.set(self.KEY_MISSING_TEXT_BEHAVIOR, behavior.value, save=True)

    @property
    def default_language(self) -> str:
        return self._settings.get(self.KEY_DEFAULT_LANGUAGE, config.DEFAULT_LANGUAGE)

    @default_language.setter
    def default_language(self, value: str):
        if not value:
            raise ValidationError("Default language cannot be empty", field=self.KEY_DEFAULT_LANGUAGE, value=value)
        self.set(self.KEY_DEFAULT_LANGUAGE, value, save=True)

    @property
    def current_language(self) -> str:
        return self._settings.get(self.KEY_CURRENT_LANGUAGE, self.default_language)

    @current_language.setter
    def current_language(self, value: str):
        self.set(self.KEY_CURRENT_LANGUAGE, value, save=True)

    @property
    def registry_path(self) -> str:
        return self._settings.get(self.KEY_REGISTRY_PATH, str(config.REGISTRY_DB_PATH))

    def __repr__(self) -> str:
        return f"SettingsModel(file={self._settings_file})"
