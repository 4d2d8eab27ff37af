"""Classifier module for InsightSnap.

Scores posts against weighted keyword lexicons and secondary signals,
then allocates them into three disjoint category lists.
"""

from src.classifier.lexicons import (
    CONTENT_LEXICON,
    DEFAULT_LEXICONS,
    EMOTIONAL_WORDS,
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

from src.classifier.signals import (
    SignalBreakdown,
    augment_scores,
    compute_signals,
    engagement_bonus,
)

from src.classifier.allocator import (
    allocate,
    backfill,
    provisional_top_k,
    rank_by_engagement,
    rank_for_category,
    resolve_overlaps,
)

from src.classifier.engine import (
    classify_posts,
    classify_scored,
    normalize_posts,
    score_post,
    score_posts,
)

__all__ = [
    # Lexicons
    "CONTENT_LEXICON",
    "DEFAULT_LEXICONS",
    "EMOTIONAL_WORDS",
    "PAIN_LEXICON",
    "TRENDING_LEXICON",
    "build_lexicons",
    # Scoring
    "compute_lexicon_matches",
    "compute_lexicon_scores",
    "lexicon_score",
    "match_keywords",
    # Signals
    "SignalBreakdown",
    "augment_scores",
    "compute_signals",
    "engagement_bonus",
    # Allocation
    "allocate",
    "backfill",
    "provisional_top_k",
    "rank_by_engagement",
    "rank_for_category",
    "resolve_overlaps",
    # Pipeline
    "classify_posts",
    "classify_scored",
    "normalize_posts",
    "score_post",
    "score_posts",
]
