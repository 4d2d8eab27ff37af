"""Tests for the lexicons and lexicon scorer."""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from src.classifier.lexicons import (
    CONTENT_LEXICON,
    DEFAULT_LEXICONS,
    PAIN_LEXICON,
    TRENDING_LEXICON,
    build_lexicons,
)
from src.classifier.scorer import (
    compute_lexicon_matches,
    compute_lexicon_scores,
    lexicon_score,
    match_keywords,
)


class TestLexicons:
    """Tests for the default lexicons."""

    def test_weight_tiers(self):
        assert PAIN_LEXICON["problem"] == 3
        assert PAIN_LEXICON["stuck"] == 2
        assert PAIN_LEXICON["fix this"] == 1
        assert TRENDING_LEXICON["game changer"] == 3
        assert TRENDING_LEXICON["just dropped"] == 2
        assert TRENDING_LEXICON["cutting edge"] == 1
        assert CONTENT_LEXICON["step by step"] == 3
        assert CONTENT_LEXICON["best way"] == 2
        assert CONTENT_LEXICON["pro tip"] == 1

    def test_lexicon_sizes(self):
        assert len(PAIN_LEXICON) == 32
        assert len(TRENDING_LEXICON) == 23
        assert len(CONTENT_LEXICON) == 23

    def test_default_lexicons_are_read_only(self):
        with pytest.raises(TypeError):
            DEFAULT_LEXICONS["pain"]["new keyword"] = 3
        with pytest.raises(TypeError):
            DEFAULT_LEXICONS["other"] = {}

    def test_build_lexicons_adds_and_overrides(self):
        lexicons = build_lexicons({"pain": {"Refund": 2, "slow": 3}})

        assert lexicons["pain"]["refund"] == 2
        assert lexicons["pain"]["slow"] == 3
        # Defaults untouched
        assert DEFAULT_LEXICONS["pain"]["slow"] == 2
        assert "refund" not in DEFAULT_LEXICONS["pain"]

    def test_build_lexicons_rejects_unknown_category(self):
        with pytest.raises(ValueError):
            build_lexicons({"memes": {"lol": 1}})

    @pytest.mark.parametrize("weight", [0, -1, 1.5, "3", True])
    def test_build_lexicons_rejects_bad_weights(self, weight):
        with pytest.raises(ValueError):
            build_lexicons({"content": {"walkthrough": weight}})


class TestLexiconScorer:
    """Tests for compute_lexicon_scores and helpers."""

    def test_pain_example(self):
        scores = compute_lexicon_scores("I hate how broken this login flow is, such a problem")
        # hate(3) + broken(3) + problem(3)
        assert scores == {"pain": 9, "trending": 0, "content": 0}

    def test_mixed_example(self):
        scores = compute_lexicon_scores("How to fix a broken API integration step by step guide")
        assert scores["pain"] == 3
        assert scores["content"] == 9
        assert scores["trending"] == 0

    def test_case_insensitive(self):
        assert compute_lexicon_scores("EVERYTHING IS BROKEN")["pain"] == 3

    def test_repeats_count_once(self):
        assert compute_lexicon_scores("bug bug bug")["pain"] == 3

    def test_substring_match(self):
        # "bug" is found inside "debugging"
        assert compute_lexicon_scores("debugging session")["pain"] == 3

    def test_multiword_phrase(self):
        scores = compute_lexicon_scores("this is a total game changer")
        assert scores["trending"] == 3

    @pytest.mark.parametrize("content", ["", None])
    def test_empty_content(self, content):
        assert compute_lexicon_scores(content) == {"pain": 0, "trending": 0, "content": 0}

    def test_adding_keyword_never_decreases_score(self):
        base = "my sync is broken"
        before = compute_lexicon_scores(base)
        after = compute_lexicon_scores(base + " and everything is slow, any tips?")

        for category in before:
            assert after[category] >= before[category]
        assert after["pain"] > before["pain"]
        assert after["content"] > before["content"]

    def test_custom_lexicons(self):
        lexicons = build_lexicons({"pain": {"refund": 2}})
        assert compute_lexicon_scores("I want a refund", lexicons)["pain"] == 2
        assert compute_lexicon_scores("I want a refund")["pain"] == 0

    def test_match_keywords_in_lexicon_order(self):
        matches = match_keywords("problem with a bug, so frustrated", PAIN_LEXICON)
        assert matches == ("problem", "frustrated", "bug")

    def test_lexicon_score_sums_weights(self):
        assert lexicon_score("slow and expensive", PAIN_LEXICON) == 4

    def test_compute_lexicon_matches(self):
        matches = compute_lexicon_matches("Viral tutorial about a glitch")
        assert matches["pain"] == ("glitch",)
        assert matches["trending"] == ("viral",)
        assert matches["content"] == ("tutorial",)
