from pathlib import Path

from locforge_enums import MissingTextBehavior

VERSION = "0.4.0"

SETTINGS_DIR = Path.home() / ".locforge"
SETTINGS_FILE_PATH = SETTINGS_DIR / "settings.json"
DB_DIR = SETTINGS_DIR / "DB"
REGISTRY_DB_PATH = DB_DIR / "registry.db"
LANGUAGES_DIR = SETTINGS_DIR / "Languages"

# Similarity thresholds (fraction of the longer string that must match)
DEFAULT_GENERAL_THRESHOLD = 0.85
DEFAULT_CASE_INSENSITIVE_THRESHOLD = 0.95
DEFAULT_PUNCTUATION_THRESHOLD = 0.90
MIN_THRESHOLD = 0.5
MAX_THRESHOLD = 1.0

# Score reported for texts identical except for punctuation
PUNCTUATION_ONLY_SCORE = 0.95

COMMON_PUNCTUATION = frozenset(".!?,;:-()[]{}")

# group_key is members sorted and joined with this; members may not contain it
GROUP_KEY_DELIMITER = "|"
# "Close|verb" -> displayed as "Close"
DISAMBIGUATION_DELIMITER = "|"

DEFAULT_LANGUAGE = "English"
DEFAULT_MISSING_TEXT_BEHAVIOR = MissingTextBehavior.RETURN_NATIVE_LANGUAGE
MISSING_MESSAGE_PREFIX = "MISSING: "

LANGUAGE_FILE_TEMPLATE = "LanguageData_{name}.json"

__all__ = [
    "VERSION", "SETTINGS_DIR", "SETTINGS_FILE_PATH", "DB_DIR", "REGISTRY_DB_PATH", "LANGUAGES_DIR",
    "DEFAULT_GENERAL_THRESHOLD", "DEFAULT_CASE_INSENSITIVE_THRESHOLD",
    "DEFAULT_PUNCTUATION_THRESHOLD", "MIN_THRESHOLD", "MAX_THRESHOLD",
    "PUNCTUATION_ONLY_SCORE", "COMMON_PUNCTUATION",
    "GROUP_KEY_DELIMITER", "DISAMBIGUATION_DELIMITER",
    "DEFAULT_LANGUAGE",
    "DEFAULT_MISSING_TEXT_BEHAVIOR", "MISSING_MESSAGE_PREFIX",
    "LANGUAGE_FILE_TEMPLATE",
]

# Import logger at the end to avoid circular imports
from locforge_logger import get_logger
_logger = get_logger("config")
_logger.debug("locforge_config.py loaded")
