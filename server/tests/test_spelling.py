"""
Tests for spelling suggestions.
"""

from refactor_engine.spelling import get_spelling_suggestion, levenshtein_with_max


class TestLevenshtein:
    """Weighted edit distance."""

    def test_identical(self):
        assert levenshtein_with_max("value", "value", 2.9) == 0

    def test_insert_and_delete_cost_one(self):
        assert levenshtein_with_max("valu", "value", 2.9) == 1
        assert levenshtein_with_max("values", "value", 2.9) == 1

    def test_case_change_is_nearly_free(self):
        assert abs(levenshtein_with_max("Log", "log", 1.9) - 0.1) < 1e-9

    def test_exceeding_maximum_returns_none(self):
        assert levenshtein_with_max("abcdef", "uvwxyz", 2.9) is None


class TestSuggestion:
    """Candidate selection."""

    def test_closest_candidate(self):
        assert get_spelling_suggestion("valeu", ["other", "value", "valid"]) == "value"

    def test_no_candidate_close_enough(self):
        assert get_spelling_suggestion("zzqqzzqq", ["console", "window"]) is None

    def test_exact_match_is_not_a_suggestion(self):
        assert get_spelling_suggestion("value", ["value"]) is None

    def test_short_names_need_case_only_difference(self):
        assert get_spelling_suggestion("ab", ["ac"]) is None
        assert get_spelling_suggestion("AB", ["ab"]) == "ab"

    def test_case_only_difference_wins(self):
        assert get_spelling_suggestion("Log", ["lot", "log"]) == "log"

    def test_length_difference_limit(self):
        assert get_spelling_suggestion("val", ["value"]) is None

    def test_get_name(self):
        candidates = [("x", "label"), ("y", "lable")]
        assert get_spelling_suggestion("labl", candidates, lambda c: c[1]) == ("x", "label")
