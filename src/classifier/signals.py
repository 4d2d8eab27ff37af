"""Secondary ranking signals.

Adds non-lexical signals on top of raw lexicon scores:

- engagement: ln(engagement + 1) / damping, all categories
- question marks: content only
- exclamation marks: trending only
- emotional words: pain by default
- platform: small fixed bonus, all categories

Every bonus is non-negative, so a final score is never below its raw score.
"""

import math
from dataclasses import dataclass
from typing import Mapping

from src.classifier.lexicons import EMOTIONAL_WORDS
from src.config import ClassifierConfig
from src.models import CATEGORIES, CONTENT, TRENDING, Post


@dataclass(frozen=True)
class SignalBreakdown:
    """Bonus components for a single post."""
    engagement: float
    question: float
    exclamation: float
    emotional: float
    platform: float


def engagement_bonus(engagement: int, damping: float = 8.0) -> float:
    """Log-damped engagement bonus."""
    return math.log(max(0, engagement) + 1) / damping


def count_emotional_words(text: str, words: tuple[str, ...] = EMOTIONAL_WORDS) -> int:
    """Count distinct emotional words present in lowercased text."""
    return sum(1 for word in words if word in text)


def compute_signals(post: Post, config: ClassifierConfig | None = None) -> SignalBreakdown:
    """Compute the bonus components for a post.

    Args:
        post: Post to inspect.
        config: Classifier configuration with bonus constants.

    Returns:
        SignalBreakdown with each bonus.
    """
    if config is None:
        config = ClassifierConfig()

    text = (post.content or "").lower()

    return SignalBreakdown(
        engagement=engagement_bonus(post.engagement, config.engagement_damping),
        question=text.count("?") * config.question_bonus,
        exclamation=text.count("!") * config.exclamation_bonus,
        emotional=count_emotional_words(text) * config.emotional_bonus,
        platform=config.platform_bonuses.get(post.platform, 0.0),
    )


def augment_scores(
    post: Post,
    raw_scores: Mapping[str, int],
    config: ClassifierConfig | None = None,
) -> dict[str, float]:
    """Add secondary signals to raw lexicon scores.

    Args:
        post: Post being scored.
        raw_scores: Category -> raw lexicon score.
        config: Classifier configuration.

    Returns:
        Category -> final score.
    """
    if config is None:
        config = ClassifierConfig()

    signals = compute_signals(post, config)
    emotional_targets = set(config.emotional_categories)

    final = {}
    for category in CATEGORIES:
        score = raw_scores.get(category, 0) + signals.engagement + signals.platform
        if category == CONTENT:
            score += signals.question
        if category == TRENDING:
            score += signals.exclamation
        if category in emotional_targets:
            score += signals.emotional
        final[category] = score

    return final
