"""Classifier pipeline: Post[] -> ScoredPost[] -> ClassificationResult.

Each stage is a pure function returning new collections. Nothing is shared
between calls, so the classifier is safe to run concurrently for
independent requests.
"""

import logging
from dataclasses import asdict
from typing import Any, Mapping, Sequence

from src.classifier.allocator import allocate
from src.classifier.lexicons import DEFAULT_LEXICONS, Lexicons, build_lexicons
from src.classifier.scorer import compute_lexicon_matches
from src.classifier.signals import augment_scores
from src.config import ClassifierConfig, get_config
from src.models import CATEGORIES, ClassificationResult, Post, ScoredPost

logger = logging.getLogger(__name__)


def normalize_posts(posts: Sequence[Post | Mapping[str, Any]]) -> list[Post]:
    """Coerce raw records to Posts and drop repeated IDs.

    Args:
        posts: Posts or loosely-typed post records.

    Returns:
        Posts in input order, first occurrence of each ID kept.

    Raises:
        TypeError: If posts is not a sequence.
    """
    if posts is None or isinstance(posts, (str, bytes, Mapping)):
        raise TypeError(f"posts must be a sequence of posts, got {type(posts).__name__}")

    normalized = []
    seen = set()
    for index, item in enumerate(posts):
        # Dataclass fields are not type-checked, so Post objects are coerced too
        record = asdict(item) if isinstance(item, Post) else item
        post = Post.from_dict(record, index)
        if post.id in seen:
            logger.warning(f"[Classifier] Duplicate post ID '{post.id}' at position {index}, skipping")
            continue
        seen.add(post.id)
        normalized.append(post)

    return normalized


def resolve_lexicons(config: ClassifierConfig) -> Lexicons:
    """Build lexicons from config overrides, or use the defaults."""
    if not config.lexicons:
        return DEFAULT_LEXICONS
    return build_lexicons(config.lexicons)


def score_post(
    post: Post,
    position: int = 0,
    config: ClassifierConfig | None = None,
    lexicons: Lexicons = DEFAULT_LEXICONS,
) -> ScoredPost:
    """Score a single post in all three categories."""
    if config is None:
        config = ClassifierConfig()

    matches = compute_lexicon_matches(post.content, lexicons)
    raw_scores = {
        category: sum(lexicons[category][kw] for kw in matches[category])
        for category in CATEGORIES
    }

    return ScoredPost(
        post=post,
        position=position,
        raw_scores=raw_scores,
        final_scores=augment_scores(post, raw_scores, config),
        matches=matches,
    )


def score_posts(
    posts: Sequence[Post | Mapping[str, Any]],
    config: ClassifierConfig | None = None,
    lexicons: Lexicons | None = None,
) -> list[ScoredPost]:
    """Score every post in a batch.

    Args:
        posts: Posts or post records.
        config: Classifier configuration (defaults to global config).
        lexicons: Lexicons to score against (defaults to config lexicons).

    Returns:
        ScoredPost list in input order, duplicates removed.
    """
    if config is None:
        config = get_config().classifier
    if lexicons is None:
        lexicons = resolve_lexicons(config)

    return [
        score_post(post, position, config, lexicons)
        for position, post in enumerate(normalize_posts(posts))
    ]


def classify_posts(
    posts: Sequence[Post | Mapping[str, Any]],
    query: str = "",
    *,
    limit: int | None = None,
    config: ClassifierConfig | None = None,
    lexicons: Lexicons | None = None,
) -> ClassificationResult:
    """Classify posts into Pain Points, Trending Ideas and Content Ideas.

    Args:
        posts: Posts or post records from the fetch layer.
        query: The user's search query (logging only).
        limit: Per-category cap (defaults to config.per_category_limit).
        config: Classifier configuration (defaults to global config).
        lexicons: Lexicons to score against.

    Returns:
        ClassificationResult with three disjoint lists.
    """
    if config is None:
        config = get_config().classifier
    if limit is None:
        limit = config.per_category_limit

    scored = score_posts(posts, config, lexicons)
    return classify_scored(scored, query, limit=limit)


def classify_scored(
    scored: Sequence[ScoredPost],
    query: str = "",
    *,
    limit: int = 3,
) -> ClassificationResult:
    """Allocate already-scored posts into the three category lists.

    Lets callers that also report the scores avoid scoring twice.
    """
    if not scored:
        logger.info(f"[Classifier] No posts to classify for query '{query}'")
        return ClassificationResult()

    if logger.isEnabledFor(logging.DEBUG):
        top = sorted(scored, key=lambda s: -max(s.final_scores.values()))[:5]
        for item in top:
            scores = ", ".join(f"{c}={item.final_scores[c]:.2f}" for c in CATEGORIES)
            logger.debug(f"[Classifier]   {item.post.id}: {scores} (engagement={item.post.engagement})")

    allocation = allocate(scored, limit)

    result = ClassificationResult(
        pain_points=tuple(s.post for s in allocation["pain"]),
        trending_ideas=tuple(s.post for s in allocation["trending"]),
        content_ideas=tuple(s.post for s in allocation["content"]),
    )

    logger.info(
        f"[Classifier] Classified {len(scored)} posts for '{query}': "
        f"{len(result.pain_points)} pain, {len(result.trending_ideas)} trending, "
        f"{len(result.content_ideas)} content"
    )

    return result
