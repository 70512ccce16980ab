"""
LocForge Enum Definitions

Type-safe enums for resolution policy and similarity outcomes.
"""

from enum import Enum


class MissingTextBehavior(str, Enum):
    """What translate() returns when a key has no translation."""
    RETURN_NATIVE_LANGUAGE = 'return_native_language'
    RETURN_BLANK = 'return_blank'
    RETURN_MISSING_MESSAGE = 'return_missing_message'


class SimilarityReason(str, Enum):
    """Why two texts were classified as similar"""
    CASE_ONLY = 'case_only'
    PUNCTUATION_ONLY = 'punctuation_only'
    MAINLY_CASE = 'mainly_case'
    MAINLY_PUNCTUATION = 'mainly_punctuation'
    GENERAL = 'general'
    NONE = 'none'
