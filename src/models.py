"""Post and result data structures for InsightSnap.

Posts arrive from the fetch layer as loosely-typed records. They are
coerced once into frozen dataclasses so scoring can never mutate them.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Mapping

logger = logging.getLogger(__name__)

PLATFORMS = ("reddit", "x", "youtube")

# Upper bound for search queries; config may lower it
MAX_QUERY_LENGTH = 500

PAIN = "pain"
TRENDING = "trending"
CONTENT = "content"

# Fixed category order, used for tie-breaking and backfill
CATEGORIES = (PAIN, TRENDING, CONTENT)

CATEGORY_NAMES = {
    PAIN: "Pain Points",
    TRENDING: "Trending Ideas",
    CONTENT: "Content Ideas",
}

# Serialised output field per category
CATEGORY_FIELDS = {
    PAIN: "painPoints",
    TRENDING: "trendingIdeas",
    CONTENT: "contentIdeas",
}


def _coerce_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def _coerce_engagement(value: Any) -> int:
    """Coerce engagement to a non-negative int, defaulting to 0."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return 0
    if not isinstance(value, (int, float)):
        return 0
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    return max(0, int(value))


@dataclass(frozen=True)
class Post:
    """A social post as returned by the fetch layer."""
    id: str
    content: str
    platform: str
    source: str = ""
    engagement: int = 0
    timestamp: str = ""
    url: str | None = None
    author: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], index: int = 0) -> "Post":
        """Build a Post from a loosely-typed record.

        Missing or malformed fields fall back to safe defaults instead of
        raising, so one bad record cannot abort a batch.

        Args:
            data: Post record.
            index: Position in the batch, used for a missing ID.

        Returns:
            New Post instance.
        """
        if not isinstance(data, Mapping):
            logger.warning(f"[Posts] Record {index} is not a mapping, using empty post")
            data = {}

        post_id = _coerce_text(data.get("id")).strip() or f"post-{index}"
        content = data.get("content")
        url = data.get("url")
        author = data.get("author")

        return cls(
            id=post_id,
            content=content if isinstance(content, str) else "",
            platform=_coerce_text(data.get("platform")).strip().lower(),
            source=_coerce_text(data.get("source")),
            engagement=_coerce_engagement(data.get("engagement")),
            timestamp=_coerce_text(data.get("timestamp")),
            url=_coerce_text(url) if url else None,
            author=_coerce_text(author) if author else None,
        )

    def to_dict(self) -> dict:
        """Convert to the wire format used by the API and CLI."""
        data = {
            "id": self.id,
            "content": self.content,
            "platform": self.platform,
            "source": self.source,
            "engagement": self.engagement,
            "timestamp": self.timestamp,
        }
        if self.url:
            data["url"] = self.url
        if self.author:
            data["author"] = self.author
        return data


@dataclass(frozen=True)
class ScoredPost:
    """A post with its per-category scores.

    Raw scores come from the lexicons alone; final scores include the
    engagement, punctuation, emotion and platform signals.
    """
    post: Post
    position: int
    raw_scores: dict[str, int]
    final_scores: dict[str, float]
    matches: dict[str, tuple[str, ...]] = field(default_factory=dict)

    @property
    def pain_score(self) -> float:
        return self.final_scores[PAIN]

    @property
    def trending_score(self) -> float:
        return self.final_scores[TRENDING]

    @property
    def content_score(self) -> float:
        return self.final_scores[CONTENT]

    @property
    def best_category(self) -> str:
        """Category with the highest final score, earlier categories win ties."""
        best = CATEGORIES[0]
        for category in CATEGORIES[1:]:
            if self.final_scores[category] > self.final_scores[best]:
                best = category
        return best


@dataclass(frozen=True)
class ClassificationResult:
    """Three disjoint, capped result lists."""
    pain_points: tuple[Post, ...] = ()
    trending_ideas: tuple[Post, ...] = ()
    content_ideas: tuple[Post, ...] = ()

    def get(self, category: str) -> tuple[Post, ...]:
        """Get the result list for a category."""
        return {
            PAIN: self.pain_points,
            TRENDING: self.trending_ideas,
            CONTENT: self.content_ideas,
        }[category]

    @property
    def total(self) -> int:
        return len(self.pain_points) + len(self.trending_ideas) + len(self.content_ideas)

    def is_empty(self) -> bool:
        return self.total == 0

    def to_dict(self) -> dict[str, list[dict]]:
        return {
            CATEGORY_FIELDS[category]: [p.to_dict() for p in self.get(category)]
            for category in CATEGORIES
        }
