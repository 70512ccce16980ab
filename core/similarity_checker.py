"""
Surface-form similarity classification for translation keys.

Two keys count as similar when they differ only by case, only by
punctuation, or when their edit-distance similarity clears one of three
configurable thresholds.
"""

from dataclasses import dataclass
from itertools import combinations
from typing import Iterable, List, Optional, Tuple

import locforge_config as config
from locforge_enums import SimilarityReason
from locforge_exceptions import ValidationError
from locforge_logger import get_logger
from core.text_distance import levenshtein_similarity

logger = get_logger("core.similarity")


@dataclass(frozen=True)
class SimilarityThresholds:
    general: float = config.DEFAULT_GENERAL_THRESHOLD
    case_insensitive: float = config.DEFAULT_CASE_INSENSITIVE_THRESHOLD
    punctuation: float = config.DEFAULT_PUNCTUATION_THRESHOLD

    def validate(self) -> 'SimilarityThresholds':
        for name in ("general", "case_insensitive", "punctuation"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or not (config.MIN_THRESHOLD <= value <= config.MAX_THRESHOLD):
                raise ValidationError(
                    f"Threshold '{name}' must be between {config.MIN_THRESHOLD} and {config.MAX_THRESHOLD}",
                    field=name, value=value,
                )
        return self

    @classmethod
    def from_settings(cls, settings) -> 'SimilarityThresholds':
        """Build thresholds from a SettingsModel."""
        return cls(
            general=settings.general_threshold,
            case_insensitive=settings.case_insensitive_threshold,
            punctuation=settings.punctuation_threshold,
        ).validate()


@dataclass(frozen=True)
class SimilarityResult:
    is_similar: bool
    reason: SimilarityReason
    score: float
    message: str = ""

    def __bool__(self):
        return self.is_similar


NOT_SIMILAR = SimilarityResult(False, SimilarityReason.NONE, 0.0, "")


def remove_punctuation(text: str) -> str:
    """Drop the common punctuation set and trim surrounding whitespace."""
    return "".join(c for c in text if c not in config.COMMON_PUNCTUATION).strip()


def _percent(score: float) -> str:
    # Halves round up: 0.625 -> "63%"
    return f"{int(score * 100 + 0.5)}%"


def compare_texts(text1: str, text2: str, thresholds: Optional[SimilarityThresholds] = None) -> SimilarityResult:
    """
    Classify a pair of texts. Rules are checked in order and the first match wins:

    1. equal ignoring case
    2. equal ignoring case once punctuation is removed
    3. close enough for the case threshold, and lower-casing raises the score
    4. close enough for the punctuation threshold, and stripping raises the score
    5. close enough for the general threshold
    """
    thresholds = thresholds or SimilarityThresholds()

    if text1.lower() == text2.lower():
        return SimilarityResult(True, SimilarityReason.CASE_ONLY, 1.0,
                                "Texts are identical except for letter case")

    text1_no_punct = remove_punctuation(text1)
    text2_no_punct = remove_punctuation(text2)
    if text1_no_punct.lower() == text2_no_punct.lower():
        return SimilarityResult(True, SimilarityReason.PUNCTUATION_ONLY, config.PUNCTUATION_ONLY_SCORE,
                                "Texts are identical except for punctuation")

    score = levenshtein_similarity(text1, text2)

    if score >= thresholds.case_insensitive:
        lowered = levenshtein_similarity(text1.lower(), text2.lower())
        if lowered > score:
            return SimilarityResult(True, SimilarityReason.MAINLY_CASE, lowered,
                                    f"Texts are {_percent(lowered)} similar (mainly case differences)")

    if score >= thresholds.punctuation:
        stripped = levenshtein_similarity(text1_no_punct, text2_no_punct)
        if stripped > score:
            return SimilarityResult(True, SimilarityReason.MAINLY_PUNCTUATION, stripped,
                                    f"Texts are {_percent(stripped)} similar (mainly punctuation differences)")

    if score >= thresholds.general:
        return SimilarityResult(True, SimilarityReason.GENERAL, score,
                                f"Texts are {_percent(score)} similar")

    return NOT_SIMILAR


def _usable(texts: Iterable[str]) -> List[str]:
    return [t for t in texts if t and t.strip()]


def check_for_similar_texts(texts: Iterable[str], source_info: Optional[str] = None,
                            thresholds: Optional[SimilarityThresholds] = None) -> List[Tuple[str, str, SimilarityResult]]:
    """
    Compare every unordered pair once and log a warning for each potential duplicate.

    Returns:
        List of (text1, text2, result) for the similar pairs
    """
    text_list = list(dict.fromkeys(_usable(texts)))
    location = f" in {source_info}" if source_info else ""
    found = []

    for text1, text2 in combinations(text_list, 2):
        result = compare_texts(text1, text2, thresholds)
        if result.is_similar:
            logger.warning(
                f"Potential duplicate translation keys found{location}: "
                f"1: \"{text1}\" 2: \"{text2}\" Reason: {result.message}"
            )
            found.append((text1, text2, result))

    return found


def check_new_text_similarity(new_text: str, existing_texts: Iterable[str], source_info: Optional[str] = None,
                              thresholds: Optional[SimilarityThresholds] = None) -> List[Tuple[str, SimilarityResult]]:
    """
    Check a newly submitted key against the existing ones.

    Returns:
        List of (existing_text, result) for every similar existing key; empty if none
    """
    if not new_text or not new_text.strip():
        return []

    location = f" in {source_info}" if source_info else ""
    matches = []
    for existing in _usable(existing_texts):
        result = compare_texts(new_text, existing, thresholds)
        if result.is_similar:
            logger.warning(
                f"New translation key is similar to existing key{location}: "
                f"New: \"{new_text}\" Existing: \"{existing}\" Reason: {result.message}"
            )
            matches.append((existing, result))
    return matches
