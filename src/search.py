"""Search orchestration for InsightSnap.

Validates a search request, fetches posts from each selected platform in
parallel, and classifies the combined posts once. One platform failing
does not fail the search.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal, Mapping, Optional, get_args

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator

from src.classifier import classify_posts
from src.classifier.engine import resolve_lexicons
from src.config import Config, get_config
from src.models import MAX_QUERY_LENGTH, PLATFORMS, ClassificationResult, Post
from src.sources import PostSource, sources_from_config

logger = logging.getLogger(__name__)

Platform = Literal["reddit", "x", "youtube"]
TimeFilter = Literal["hour", "day", "week", "month", "year", "all"]

TIME_FILTERS = get_args(TimeFilter)

FIELD_MESSAGES = {
    "query": "Search query is required",
    "platforms": f"Platform must be one of: {', '.join(PLATFORMS)}",
    "language": "Language must be a 2-character code (e.g., en, es, fr)",
    "timeFilter": f"Time filter must be one of: {', '.join(TIME_FILTERS)}",
    "limit": "Limit must be a positive integer",
}


class SearchError(Exception):
    """Base exception for search errors."""
    pass


class SearchValidationError(SearchError):
    """Raised when a search request is invalid."""

    def __init__(self, details: list[dict[str, str]]):
        self.details = details
        message = "; ".join(f"{d['field']}: {d['message']}" for d in details)
        super().__init__(f"Invalid search request: {message}")


def validation_details(errors: list[Mapping[str, Any]]) -> list[dict[str, str]]:
    """Flatten pydantic errors into one {field, message} entry per field.

    Args:
        errors: `ValidationError.errors()` or `RequestValidationError.errors()`.

    Returns:
        Field errors in the order pydantic reported them.
    """
    details: dict[str, str] = {}
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        field_name = loc[0] if loc else "body"
        if field_name in details:
            continue

        if error["type"] == "string_too_long":
            message = f"Search query must be less than {error['ctx']['max_length']} characters"
        elif error["type"] == "value_error":
            message = error["msg"].removeprefix("Value error, ")
        elif field_name == "platforms" and error["type"] == "too_short":
            message = "At least one platform must be selected"
        else:
            message = FIELD_MESSAGES.get(field_name, error["msg"])
        details[field_name] = message

    return [{"field": f, "message": m} for f, m in details.items()]


class SearchRequest(BaseModel):
    """A validated search request.

    Accepts `timeFilter` or `time_filter`. Platform names and the language
    code are lowercased and repeated platforms are dropped.
    """
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    query: str = Field(min_length=1, max_length=MAX_QUERY_LENGTH)
    platforms: list[Platform] = Field(default_factory=lambda: list(PLATFORMS), min_length=1)
    language: str = Field(default="en", pattern=r"^[A-Za-z]{2}$")
    time_filter: TimeFilter = Field(default="week", alias="timeFilter")
    limit: Optional[int] = Field(default=None, ge=1, strict=True)

    @field_validator("query")
    @classmethod
    def check_configured_length(cls, value: str, info: ValidationInfo) -> str:
        max_length = (info.context or {}).get("max_query_length", MAX_QUERY_LENGTH)
        if len(value) > max_length:
            raise ValueError(f"Search query must be less than {max_length} characters")
        return value

    @field_validator("platforms", mode="before")
    @classmethod
    def lowercase_platforms(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return [p.strip().lower() if isinstance(p, str) else p for p in value]
        return value

    @field_validator("platforms")
    @classmethod
    def drop_repeated_platforms(cls, value: list[str]) -> list[str]:
        # Keep first occurrence of each platform
        return list(dict.fromkeys(value))

    @field_validator("language")
    @classmethod
    def lowercase_language(cls, value: str) -> str:
        return value.lower()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], config: Config | None = None) -> "SearchRequest":
        """Validate raw input, filling unset fields from the search config.

        Raises:
            SearchValidationError: With one entry per invalid field.
        """
        if config is None:
            config = get_config()

        values: dict[str, Any] = {
            "platforms": list(config.search.platforms),
            "language": config.search.language,
            "timeFilter": config.search.time_filter,
        }
        for key, value in data.items():
            if value is not None and key not in ("timeFilter", "time_filter"):
                values[key] = value

        time_filter = data.get("timeFilter") or data.get("time_filter")
        if time_filter is not None:
            values["timeFilter"] = time_filter

        try:
            return cls.model_validate(
                values,
                context={"max_query_length": config.search.max_query_length},
            )
        except ValidationError as e:
            raise SearchValidationError(validation_details(e.errors())) from e


@dataclass
class PlatformResult:
    """Result of fetching from a single platform."""
    platform: str
    posts: list[Post] = field(default_factory=list)
    success: bool = True
    error: str | None = None
    duration_ms: float = 0.0


@dataclass
class SearchResponse:
    """Classified results plus search metadata."""
    request: SearchRequest
    results: ClassificationResult
    platform_results: list[PlatformResult]
    total_posts: int
    duration_ms: float
    timestamp: str

    @property
    def errors(self) -> list[str]:
        return [f"{r.platform}: {r.error}" for r in self.platform_results if r.error]

    def to_dict(self) -> dict:
        metadata = {
            "query": self.request.query,
            "platforms": self.request.platforms,
            "totalPosts": self.total_posts,
            "durationMs": round(self.duration_ms),
            "timestamp": self.timestamp,
        }
        if self.errors:
            metadata["errors"] = self.errors
        if self.total_posts == 0:
            metadata["noResultsMessage"] = build_no_results_message(self.request)

        return {
            "success": True,
            "data": self.results.to_dict(),
            "metadata": metadata,
        }


def build_no_results_message(request: SearchRequest) -> dict:
    """Build the user-facing message shown when a search finds nothing."""
    return {
        "title": "No results found",
        "message": f"We couldn't find any posts about \"{request.query}\".",
        "reasons": [
            "The topic may be too specific or too new",
            f"There may be little discussion in the selected time range ({request.time_filter})",
            "The selected platforms may not cover this topic",
        ],
        "suggestions": [
            "Try broader or related keywords",
            "Select a longer time range",
            "Include more platforms in your search",
        ],
        "tip": "Short, common phrases usually return the most discussion.",
    }


class SearchService:
    """Fetches posts from platform sources and classifies them.

    Usage:
        service = SearchService({"reddit": JsonFilePostSource("reddit.json")})
        response = service.search(SearchRequest.from_dict({"query": "notion"}))
    """

    def __init__(
        self,
        sources: Mapping[str, PostSource] | None = None,
        config: Config | None = None,
    ):
        self.config = config or get_config()
        if sources is None:
            sources = sources_from_config(self.config.search.sources)
        self.sources = dict(sources)
        self.lexicons = resolve_lexicons(self.config.classifier)

    def _fetch_platform(self, platform: str, request: SearchRequest) -> PlatformResult:
        """Fetch from one platform with error isolation."""
        source = self.sources.get(platform)
        if source is None:
            return PlatformResult(
                platform=platform,
                success=False,
                error="No source configured for this platform",
            )

        start = time.perf_counter()
        try:
            posts = source.fetch(
                request.query,
                time_filter=request.time_filter,
                language=request.language,
            )
            duration_ms = (time.perf_counter() - start) * 1000
            logger.info(f"[Search] {platform}: {len(posts)} posts ({duration_ms:.0f}ms)")
            return PlatformResult(platform=platform, posts=list(posts), duration_ms=duration_ms)
        except Exception as e:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.exception(f"[Search] {platform} failed")
            return PlatformResult(
                platform=platform,
                success=False,
                error=f"{type(e).__name__}: {e}",
                duration_ms=duration_ms,
            )

    def fetch_all(self, request: SearchRequest) -> list[PlatformResult]:
        """Fetch all selected platforms concurrently, within the timeout."""
        timeout = self.config.search.timeout_seconds
        executor = ThreadPoolExecutor(max_workers=max(1, len(request.platforms)))
        try:
            futures = {
                platform: executor.submit(self._fetch_platform, platform, request)
                for platform in request.platforms
            }
            wait(futures.values(), timeout=timeout)

            results = []
            for platform, future in futures.items():
                if future.done():
                    results.append(future.result())
                else:
                    future.cancel()
                    logger.warning(f"[Search] {platform} timed out after {timeout}s")
                    results.append(PlatformResult(
                        platform=platform,
                        success=False,
                        error=f"Search timeout after {timeout}s",
                    ))
            return results
        finally:
            # Don't block on sources that are still running
            executor.shutdown(wait=False)

    def search(self, request: SearchRequest) -> SearchResponse:
        """Run a search and classify the results.

        Args:
            request: Validated search request.

        Returns:
            SearchResponse with classified posts and metadata.
        """
        logger.info(f"[Search] Search request: '{request.query}' on platforms: {', '.join(request.platforms)}")
        start = time.perf_counter()

        platform_results = self.fetch_all(request)

        all_posts: list[Post] = []
        for result in platform_results:
            all_posts.extend(result.posts)

        results = classify_posts(
            all_posts,
            request.query,
            limit=request.limit,
            config=self.config.classifier,
            lexicons=self.lexicons,
        )

        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(f"[Search] Search completed: {len(all_posts)} total posts in {duration_ms:.0f}ms")

        return SearchResponse(
            request=request,
            results=results,
            platform_results=platform_results,
            total_posts=len(all_posts),
            duration_ms=duration_ms,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
