"""
Tests for wake phrase matching

These tests verify the fuzzy matching engine including:
- Text normalization
- Levenshtein distance
- Keyword overlap with stop words
- Tiered verdict classification
"""

import pytest

from wakeritual.matching import (
    DEFAULT_STOP_WORDS,
    MatchClassifier,
    MatchVerdict,
    classify,
    extract_keywords,
    keyword_overlap,
    levenshtein,
    normalize,
)


PHRASE = "every movement is awareness"


class TestNormalizer:
    """Tests for text normalization."""

    def test_folds_case_and_collapses_whitespace(self):
        assert normalize("  Every   Movement\tIS \n awareness  ") == PHRASE

    def test_empty_input(self):
        assert normalize("") == ""
        assert normalize("   ") == ""
        assert normalize(None) == ""

    def test_casefold(self):
        assert normalize("STRASSE") == normalize("Straße")


class TestLevenshtein:
    """Tests for edit distance."""

    def test_known_distances(self):
        assert levenshtein("kitten", "sitting") == 3
        assert levenshtein("flaw", "lawn") == 2
        assert levenshtein("", "abc") == 3
        assert levenshtein("abc", "") == 3

    def test_identity(self):
        assert levenshtein(PHRASE, PHRASE) == 0
        assert levenshtein("", "") == 0

    def test_symmetric(self):
        pairs = [("kitten", "sitting"), ("abc", "yabd"), ("a b c", "x y z")]
        for a, b in pairs:
            assert levenshtein(a, b) == levenshtein(b, a)

    def test_triangle_inequality(self):
        words = ["awareness", "awake", "wakeful", "", "movement"]
        for a in words:
            for b in words:
                for c in words:
                    assert levenshtein(a, c) <= levenshtein(a, b) + levenshtein(b, c)


class TestKeywordOverlap:
    """Tests for keyword extraction and overlap."""

    def test_default_stop_words_fixture(self):
        # Articles, prepositions, copulas and pronouns are configuration, not content
        for word in ("a", "an", "the", "of", "in", "is", "are", "was", "i", "we"):
            assert word in DEFAULT_STOP_WORDS
        assert "movement" not in DEFAULT_STOP_WORDS

    def test_extract_keywords_strips_stop_words(self):
        assert extract_keywords("The cat is on the mat") == {"cat", "mat"}

    def test_extract_keywords_custom_stop_words(self):
        assert extract_keywords("the cat sat", stop_words={"cat"}) == {"the", "sat"}

    def test_overlap_ratio_against_target(self):
        # target keywords: every, movement, awareness
        assert keyword_overlap("awareness in every breath", PHRASE) == pytest.approx(2 / 3)
        assert keyword_overlap("nothing shared", PHRASE) == 0.0

    def test_target_of_only_stop_words(self):
        assert keyword_overlap("banana", "it is the") == 1.0
        assert keyword_overlap("", "it is the") == 0.0
        assert keyword_overlap("   ", "it is the") == 0.0


class TestMatchClassifier:
    """Tests for verdict classification."""

    def test_identical_strings_are_exact(self):
        for text in [PHRASE, "a", "Hello World", "x y z", "it is the"]:
            assert classify(text, text) == MatchVerdict.EXACT

    def test_normalization_differences_are_exact(self):
        assert classify("  EVERY movement   is Awareness ", PHRASE) == MatchVerdict.EXACT

    def test_empty_input_is_wrong(self):
        assert classify("", PHRASE) == MatchVerdict.WRONG
        assert classify("   ", "abc") == MatchVerdict.WRONG

    def test_empty_input_against_blank_target_is_exact(self):
        assert classify("", "   ") == MatchVerdict.EXACT

    def test_single_substitution_is_close(self):
        targets = [PHRASE, "abcde", "open the door slowly"]
        for target in targets:
            mutated = ("x" if target[1] != "x" else "y").join([target[:1], target[2:]])
            assert classify(mutated, target) in (MatchVerdict.EXACT, MatchVerdict.CLOSE)

    def test_close_threshold_is_inclusive(self):
        # distance 1 over target length 5 is exactly 0.20
        assert classify("abcdx", "abcde") == MatchVerdict.CLOSE

    def test_close_threshold_relative_to_target_length(self):
        # distance 2 over target length 10
        assert classify("abcdefghijkl", "abcdefghij") == MatchVerdict.CLOSE
        # distance 1 over target length 4 exceeds the threshold
        assert classify("abcx", "abcd") == MatchVerdict.WRONG

    def test_reworded_phrase_is_partial(self):
        assert classify("awareness in every breath", PHRASE) == MatchVerdict.PARTIAL

    def test_no_overlap_and_far_is_wrong(self):
        assert classify("quiet river stone", PHRASE) == MatchVerdict.WRONG
        assert classify("x y z", "d e f") == MatchVerdict.WRONG

    def test_custom_thresholds(self):
        strict = MatchClassifier(close_threshold=0.0, partial_threshold=1.0)
        assert strict.classify("every movemant is awareness", PHRASE) == MatchVerdict.WRONG
        assert strict.classify(PHRASE, PHRASE) == MatchVerdict.EXACT

    def test_custom_stop_words_change_partial(self):
        classifier = MatchClassifier(stop_words={"every", "is"})
        # keywords become movement, awareness; only awareness is shared
        assert classifier.classify("awareness in every breath", PHRASE) == MatchVerdict.PARTIAL
        assert classifier.classify("every breath in light", PHRASE) == MatchVerdict.WRONG

    def test_verdict_is_recalled(self):
        assert MatchVerdict.EXACT.is_recalled
        assert MatchVerdict.CLOSE.is_recalled
        assert not MatchVerdict.PARTIAL.is_recalled
        assert not MatchVerdict.WRONG.is_recalled
