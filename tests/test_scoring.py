"""
Tests for token comparison and the similarity score.
"""

from pipelines.identity_resolution.features import (
    FULL,
    PARTIAL,
    compare_tokens,
    credit_token,
)
from pipelines.identity_resolution.scoring import calculate_similarity, first_token_bonus, token_score


class TestTokenComparison:
    """Test single-token outcomes."""

    def test_identical_is_full(self):
        assert compare_tokens("smith", "smith") == FULL

    def test_containment_is_partial(self):
        assert compare_tokens("ana", "anabel") == PARTIAL
        assert compare_tokens("anabel", "ana") == PARTIAL

    def test_close_spelling_is_partial(self):
        # 1 edit over 8 characters
        assert compare_tokens("quinonez", "quinones") == PARTIAL

    def test_short_tokens_skip_edit_distance(self):
        assert compare_tokens("jo", "ja") is None

    def test_unrelated_is_none(self):
        assert compare_tokens("maria", "perez") is None

    def test_edit_similarity_must_exceed_threshold(self):
        # 1 edit over 4 characters is 0.75
        assert compare_tokens("abcd", "abce") is None

    def test_identical_token_anywhere_wins(self):
        """A later exact token beats an earlier partial one."""
        assert credit_token("ana", ["anabel", "ana"]) == FULL
        assert credit_token("ana", ["anabel"]) == PARTIAL
        assert credit_token("xyz", ["anabel"]) is None


class TestCalculateSimilarity:
    """Test the 0-100 score."""

    def test_same_name_scores_100(self):
        assert calculate_similarity("John Smith", "JOHN SMITH") == 100

    def test_reflexive_for_non_empty(self):
        for name in ["JOHN SMITH", "Rafael Quiñones", "de la Rosa, Carmelo"]:
            assert calculate_similarity(name, name) == 100

    def test_surname_first_with_comma(self):
        """Both tokens match fully plus the surname-first bonus."""
        score = calculate_similarity("Smith, John", "JOHN SMITH")
        assert score >= 90
        assert score == 95

    def test_contained_name(self):
        assert calculate_similarity("Joel Sanchez", "JOEL SANCHEZ RIVERA") == 90

    def test_misspelled_surname(self):
        # one full token, one partial, no bonus: 40 + 25
        assert calculate_similarity("Quinonez Rafael", "RAFAEL QUIÑONES") == 65

    def test_accent_insensitive(self):
        assert calculate_similarity("Quinones Rafael", "RAFAEL QUIÑONES") == 95

    def test_directional(self):
        """The surname bonus depends on which side leads with the longer token."""
        forward = calculate_similarity("Perez Ana", "ANA MARIA PEREZ")
        backward = calculate_similarity("ANA MARIA PEREZ", "Perez Ana")
        assert forward == 68
        assert backward == 53

    def test_clamped_to_100(self):
        assert calculate_similarity("Juan M Melendez", "JUAN MELENDEZ M") == 100

    def test_no_overlap(self):
        assert calculate_similarity("Xavier Q", "JOHN SMITH") == 0

    def test_punctuation_only_name_matches_itself(self):
        assert calculate_similarity("!!!", "!!!") == 100
        assert calculate_similarity("--", "...") == 100

    def test_empty_name_is_contained_in_any_other(self):
        assert calculate_similarity("-", "JOHN SMITH") == 90
        assert calculate_similarity("", "JOHN SMITH") == 90
        assert calculate_similarity("John", "") == 90

    def test_returns_int_in_range(self):
        score = calculate_similarity("Perez Ana", "ANA MARIA PEREZ")
        assert isinstance(score, int)
        assert 0 <= score <= 100

    def test_deterministic(self):
        scores = {calculate_similarity("Doe, Jane", "JANE DOE") for _ in range(5)}
        assert len(scores) == 1


class TestScoreParts:
    """Test the weighted parts of the score."""

    def test_token_score_uses_longer_side_as_denominator(self):
        assert token_score(["ana"], ["ana", "perez"]) == 40.0

    def test_token_score_empty(self):
        assert token_score([], []) == 0.0

    def test_first_token_bonus(self):
        assert first_token_bonus(["juan", "x"], ["juan", "y"]) == 20
        assert first_token_bonus(["perez", "ana"], ["ana", "perez"]) == 15
        # surname bonus needs more than three characters
        assert first_token_bonus(["ana", "perez"], ["perez", "ana"]) == 0
