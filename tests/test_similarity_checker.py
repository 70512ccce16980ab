# -*- coding: utf-8 -*-
"""
Unit Tests for the similarity classifier.
"""

import logging

import pytest

from locforge_enums import SimilarityReason
from locforge_exceptions import ValidationError
from core.similarity_checker import (
    SimilarityThresholds, check_for_similar_texts, check_new_text_similarity,
    compare_texts, remove_punctuation,
)


@pytest.fixture
def caplog_locforge(caplog):
    """caplog that also sees the non-propagating locforge logger."""
    root = logging.getLogger("locforge")
    root.addHandler(caplog.handler)
    caplog.set_level(logging.DEBUG, logger="locforge")
    yield caplog
    root.removeHandler(caplog.handler)


class TestRemovePunctuation:
    """Tests for remove_punctuation."""

    def test_strips_punctuation_set_and_trims(self):
        assert remove_punctuation("  (Close.) ") == "Close"
        assert remove_punctuation("Save & Quit!") == "Save & Quit"

    def test_keeps_other_characters(self):
        assert remove_punctuation("It's") == "It's"


class TestCompareTexts:
    """Tests for the rule order of compare_texts."""

    def test_case_only(self):
        result = compare_texts("Close", "close")
        assert result.is_similar
        assert result.reason == SimilarityReason.CASE_ONLY
        assert result.score == 1.0
        assert "letter case" in result.message

    def test_identical_counts_as_case_only(self):
        assert compare_texts("Quit", "Quit").reason == SimilarityReason.CASE_ONLY

    def test_punctuation_only(self):
        result = compare_texts("Close", "Close.")
        assert result.is_similar
        assert result.reason == SimilarityReason.PUNCTUATION_ONLY
        assert result.score == 0.95

    def test_punctuation_and_case(self):
        """Punctuation rule compares the stripped texts ignoring case."""
        result = compare_texts("Are you sure?", "are you sure")
        assert result.reason == SimilarityReason.PUNCTUATION_ONLY

    def test_mainly_case(self):
        """One case difference and one real edit in a long string."""
        a = "Press any key to continue your long adventure"
        b = "press any key to continue your long adventures"
        result = compare_texts(a, b)
        assert result.is_similar
        assert result.reason == SimilarityReason.MAINLY_CASE
        assert result.score == pytest.approx(1 - 1 / len(b))
        assert "mainly case" in result.message

    def test_mainly_punctuation(self):
        a = "Welcome back, traveller! Rest a while by the fire."
        b = "Welcome back traveller. Rest a while by the fires"
        result = compare_texts(a, b)
        assert result.is_similar
        assert result.reason == SimilarityReason.MAINLY_PUNCTUATION
        assert "mainly punctuation" in result.message

    def test_general(self):
        result = compare_texts("Start the Game", "Start the Games")
        assert result.is_similar
        assert result.reason == SimilarityReason.GENERAL
        assert result.score == pytest.approx(1 - 1 / 15)

    def test_percent_rounds_half_up(self):
        """3 edits over 8 characters is 62.5%, reported as 63%."""
        result = compare_texts("abcdefgh", "abcdexyz", SimilarityThresholds(general=0.5))
        assert result.score == 0.625
        assert result.message == "Texts are 63% similar"

    def test_not_similar(self):
        result = compare_texts("kitten", "sitting")
        assert not result
        assert result.reason == SimilarityReason.NONE
        assert result.score == 0.0

    def test_symmetric_classification(self):
        a, b = "Start the Game", "Start the Games"
        assert compare_texts(a, b).score == compare_texts(b, a).score

    def test_custom_thresholds(self):
        """A looser general threshold admits kitten/sitting."""
        loose = SimilarityThresholds(general=0.5)
        result = compare_texts("kitten", "sitting", loose)
        assert result.reason == SimilarityReason.GENERAL


class TestSimilarityThresholds:
    """Tests for threshold validation."""

    def test_defaults_valid(self):
        assert SimilarityThresholds().validate().general == 0.85

    @pytest.mark.parametrize("value", [0.49, 1.01, "high"])
    def test_out_of_range_rejected(self, value):
        with pytest.raises(ValidationError):
            SimilarityThresholds(general=value).validate()

    def test_from_settings(self, settings_model):
        settings_model.general_threshold = 0.7
        thresholds = SimilarityThresholds.from_settings(settings_model)
        assert thresholds.general == 0.7
        assert thresholds.case_insensitive == 0.95


class TestBatchChecks:
    """Tests for check_for_similar_texts and check_new_text_similarity."""

    def test_pairs_found_and_logged(self, caplog_locforge):
        found = check_for_similar_texts(["Close", "close", "Quit", ""], source_info="menu.json")
        assert [(a, b) for a, b, _ in found] == [("Close", "close")]
        assert "Potential duplicate translation keys found in menu.json" in caplog_locforge.text

    def test_duplicates_compared_once(self):
        found = check_for_similar_texts(["Close", "Close", "close"])
        assert len(found) == 1

    def test_new_text_matches(self):
        matches = check_new_text_similarity("Options.", ["Options", "Quit"])
        assert len(matches) == 1
        existing, result = matches[0]
        assert existing == "Options"
        assert result.reason == SimilarityReason.PUNCTUATION_ONLY

    def test_new_text_blank(self):
        assert check_new_text_similarity("   ", ["Options"]) == []
