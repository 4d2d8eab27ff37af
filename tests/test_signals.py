"""Tests for secondary ranking signals."""

import math
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from src.classifier.signals import (
    augment_scores,
    compute_signals,
    count_emotional_words,
    engagement_bonus,
)
from src.config import ClassifierConfig
from src.models import Post


ZERO = {"pain": 0, "trending": 0, "content": 0}


def make_post(content="", platform="youtube", engagement=0):
    return Post(id="p1", content=content, platform=platform, engagement=engagement)


class TestEngagementBonus:
    """Tests for the log-damped engagement bonus."""

    def test_zero_engagement(self):
        assert engagement_bonus(0) == 0.0

    def test_log_damped(self):
        assert engagement_bonus(99) == pytest.approx(math.log(100) / 8)
        assert engagement_bonus(99, damping=4.0) == pytest.approx(math.log(100) / 4)

    def test_monotonic(self):
        values = [engagement_bonus(e) for e in (0, 1, 10, 100, 10_000)]
        assert values == sorted(values)

    def test_outlier_is_damped(self):
        """A 1000x more popular post gets a bonus of less than 1 point."""
        assert engagement_bonus(100_000) - engagement_bonus(100) < 1.0


class TestComputeSignals:
    """Tests for compute_signals."""

    def test_punctuation(self):
        signals = compute_signals(make_post("Is this good? Really?!"), ClassifierConfig())

        assert signals.question == pytest.approx(1.6)
        assert signals.exclamation == pytest.approx(0.3)

    def test_emotional_words_count_once(self):
        assert count_emotional_words("i love love love it and hate the ui") == 2

        signals = compute_signals(make_post("I LOVE it, I hate it"), ClassifierConfig())
        assert signals.emotional == pytest.approx(0.8)

    def test_platform_bonus(self):
        config = ClassifierConfig()
        assert compute_signals(make_post(platform="reddit"), config).platform == pytest.approx(0.2)
        assert compute_signals(make_post(platform="x"), config).platform == pytest.approx(0.1)
        assert compute_signals(make_post(platform="youtube"), config).platform == 0.0
        assert compute_signals(make_post(platform="myspace"), config).platform == 0.0

    def test_custom_constants(self):
        config = ClassifierConfig(question_bonus=2.0, platform_bonuses={"youtube": 1.5})
        signals = compute_signals(make_post("why?"), config)

        assert signals.question == pytest.approx(2.0)
        assert signals.platform == pytest.approx(1.5)


class TestAugmentScores:
    """Tests for augment_scores."""

    def test_bonuses_target_categories(self):
        post = make_post("I love it?", platform="reddit")
        final = augment_scores(post, ZERO, ClassifierConfig())

        # platform 0.2 everywhere, love -> pain, "?" -> content
        assert final["pain"] == pytest.approx(0.6)
        assert final["trending"] == pytest.approx(0.2)
        assert final["content"] == pytest.approx(1.0)

    def test_exclamation_goes_to_trending(self):
        final = augment_scores(make_post("wow!!"), ZERO, ClassifierConfig())

        assert final["trending"] == pytest.approx(0.6)
        assert final["pain"] == 0.0
        assert final["content"] == 0.0

    def test_emotional_categories_configurable(self):
        config = ClassifierConfig(emotional_categories=["pain", "content"])
        final = augment_scores(make_post("so excited"), ZERO, config)

        assert final["pain"] == pytest.approx(0.4)
        assert final["content"] == pytest.approx(0.4)
        assert final["trending"] == 0.0

    def test_engagement_added_to_all_categories(self):
        final = augment_scores(make_post(engagement=99), ZERO, ClassifierConfig())
        expected = math.log(100) / 8

        for category in ("pain", "trending", "content"):
            assert final[category] == pytest.approx(expected)

    @pytest.mark.parametrize("content,engagement,platform", [
        ("", 0, "youtube"),
        ("terrible!!! why??", 500, "reddit"),
        ("viral tutorial", 3, "x"),
    ])
    def test_final_never_below_raw(self, content, engagement, platform):
        raw = {"pain": 3, "trending": 2, "content": 1}
        final = augment_scores(make_post(content, platform, engagement), raw, ClassifierConfig())

        for category, score in raw.items():
            assert final[category] >= score
