"""Post sources for InsightSnap.

A post source returns already-fetched posts for a query. The platform
search APIs themselves live outside this project; the sources here serve
posts from memory or from JSON exports of those APIs.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Mapping, Sequence

from src.models import Post

logger = logging.getLogger(__name__)


class SourceError(Exception):
    """Raised when a post source cannot provide posts."""
    pass


def _metric(metrics: Mapping[str, Any], key: str) -> int:
    value = metrics.get(key, 0)
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 0


def compute_engagement(platform: str, metrics: Mapping[str, Any]) -> int:
    """Collapse platform-specific interaction counts into one engagement value.

    - reddit: score + num_comments
    - x: likes + retweets + replies + quotes
    - youtube: likes + 2 * comments + views // 100

    Args:
        platform: Platform name.
        metrics: Raw interaction counts from the platform API.

    Returns:
        Non-negative engagement value.
    """
    if platform == "reddit":
        return _metric(metrics, "score") + _metric(metrics, "num_comments")
    if platform == "x":
        return (
            _metric(metrics, "like_count")
            + _metric(metrics, "retweet_count")
            + _metric(metrics, "reply_count")
            + _metric(metrics, "quote_count")
        )
    if platform == "youtube":
        return (
            _metric(metrics, "likeCount")
            + _metric(metrics, "commentCount") * 2
            + _metric(metrics, "viewCount") // 100
        )
    return 0


def post_from_record(record: Mapping[str, Any], index: int = 0, platform: str | None = None) -> Post:
    """Build a Post from an exported record.

    Records may carry a raw `metrics` mapping instead of `engagement`.

    Args:
        record: Exported post record.
        index: Position in the export.
        platform: Platform to assume when the record has none.

    Returns:
        Post instance.
    """
    if not isinstance(record, Mapping):
        return Post.from_dict(record, index)

    data = dict(record)
    if platform and not data.get("platform"):
        data["platform"] = platform

    metrics = data.get("metrics")
    if "engagement" not in data and isinstance(metrics, Mapping):
        data["engagement"] = compute_engagement(str(data.get("platform", "")).lower(), metrics)

    return Post.from_dict(data, index)


class PostSource(ABC):
    """Interface for anything that returns posts for a search query."""

    name: str = "source"
    platform: str = ""

    @abstractmethod
    def fetch(
        self,
        query: str,
        *,
        time_filter: str = "week",
        language: str = "en",
    ) -> list[Post]:
        """Return posts for a query.

        Raises:
            SourceError: If posts cannot be provided.
        """


class StaticPostSource(PostSource):
    """Serves a fixed list of posts, regardless of the query."""

    def __init__(self, platform: str, posts: Sequence[Post | Mapping[str, Any]], name: str | None = None):
        self.platform = platform
        self.name = name or f"static:{platform}"
        self._posts = [
            p if isinstance(p, Post) else post_from_record(p, i, platform)
            for i, p in enumerate(posts)
        ]

    def fetch(self, query: str, *, time_filter: str = "week", language: str = "en") -> list[Post]:
        return list(self._posts)


class JsonFilePostSource(PostSource):
    """Serves posts from a JSON file holding an array of post records.

    The file is read on every fetch so exports can be refreshed without
    restarting the server.
    """

    def __init__(self, path: str | Path, platform: str = ""):
        self.path = Path(path)
        self.platform = platform
        self.name = f"file:{self.path.name}"

    def load(self) -> list[Post]:
        """Load all posts from the file.

        Raises:
            SourceError: If the file is missing or not a JSON array.
        """
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            raise SourceError(f"Posts file not found: {self.path}")
        except json.JSONDecodeError as e:
            raise SourceError(f"Invalid JSON in {self.path}: {e}")

        if isinstance(data, Mapping) and isinstance(data.get("posts"), list):
            data = data["posts"]

        if not isinstance(data, list):
            raise SourceError(f"Expected a JSON array of posts in {self.path}")

        posts = [post_from_record(record, i, self.platform or None) for i, record in enumerate(data)]

        if self.platform:
            posts = [p for p in posts if p.platform == self.platform]

        logger.debug(f"[Sources] Loaded {len(posts)} posts from {self.path}")
        return posts

    def fetch(self, query: str, *, time_filter: str = "week", language: str = "en") -> list[Post]:
        return self.load()


def sources_from_config(sources: Mapping[str, str]) -> dict[str, PostSource]:
    """Create file-backed sources from a platform -> path mapping."""
    return {
        platform: JsonFilePostSource(path, platform=platform)
        for platform, path in sources.items()
    }
