"""FastAPI JSON API for InsightSnap.

Exposes the classifier and the search orchestration to the frontend.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from src.classifier import classify_scored, score_posts
from src.classifier.engine import resolve_lexicons
from src.config import get_config
from src.models import CATEGORIES, CATEGORY_FIELDS, CATEGORY_NAMES, PLATFORMS
from src.search import SearchRequest, SearchService, SearchValidationError, validation_details

logger = logging.getLogger(__name__)


app = FastAPI(
    title="InsightSnap",
    description="Turn social posts into pain points, trending ideas and content ideas",
    version="0.1.0",
)


# ============================================================================
# Request models
# ============================================================================

class ClassifyRequest(BaseModel):
    """Body of POST /api/classify.

    Posts are kept as raw dicts; malformed fields are coerced by the
    classifier rather than rejected here.
    """
    posts: list[Any] = Field(default_factory=list)
    query: str = ""
    limit: Optional[int] = Field(default=None, ge=1)
    explain: bool = False


# ============================================================================
# Search service
# ============================================================================

_search_service: SearchService | None = None


def get_search_service() -> SearchService:
    """Get the shared search service (created on first use)."""
    global _search_service
    if _search_service is None:
        _search_service = SearchService()
    return _search_service


def set_search_service(service: SearchService | None) -> None:
    """Replace the shared search service (None resets to config)."""
    global _search_service
    _search_service = service


def _validation_response(details: list[dict[str, str]]) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "error": "Validation Error",
            "message": "Invalid request data",
            "details": details,
        },
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return _validation_response(validation_details(exc.errors()))


@app.exception_handler(SearchValidationError)
async def search_validation_handler(request: Request, exc: SearchValidationError):
    return _validation_response(exc.details)


# ============================================================================
# Routes
# ============================================================================

@app.post("/api/classify")
def api_classify(body: ClassifyRequest):
    """Classify already-fetched posts into the three categories."""
    config = get_config().classifier
    lexicons = resolve_lexicons(config)
    limit = body.limit or config.per_category_limit

    scored = score_posts(body.posts, config, lexicons)
    result = classify_scored(scored, body.query, limit=limit)

    response = {
        "success": True,
        "data": result.to_dict(),
        "metadata": {
            "query": body.query,
            "totalPosts": len(scored),
            "limit": limit,
        },
    }

    if body.explain:
        response["scores"] = [
            {
                "id": s.post.id,
                "raw": s.raw_scores,
                "final": {c: round(v, 4) for c, v in s.final_scores.items()},
                "matches": {c: list(m) for c, m in s.matches.items()},
            }
            for s in scored
        ]

    return response


@app.post("/api/search")
def api_search(body: SearchRequest):
    """Search the configured platform sources and classify the results."""
    service = get_search_service()
    # Fields left out of the body fall back to the search config
    request = SearchRequest.from_dict(body.model_dump(by_alias=True, exclude_unset=True), service.config)
    response = service.search(request)
    return response.to_dict()


@app.get("/api/search/health")
async def api_search_health():
    """Health check for the search service."""
    service = get_search_service()
    return {
        "status": "OK",
        "service": "search",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "availablePlatforms": list(PLATFORMS),
        "configuredPlatforms": sorted(service.sources),
    }


@app.get("/api/lexicons")
async def api_lexicons():
    """List the keyword lexicons in use."""
    lexicons = resolve_lexicons(get_config().classifier)
    return {
        CATEGORY_FIELDS[category]: {
            "name": CATEGORY_NAMES[category],
            "keywords": dict(lexicons[category]),
        }
        for category in CATEGORIES
    }


@app.get("/api/config")
async def api_config():
    """Show the classifier settings (no secrets are held in config)."""
    clf = get_config().classifier
    return {
        "perCategoryLimit": clf.per_category_limit,
        "engagementDamping": clf.engagement_damping,
        "questionBonus": clf.question_bonus,
        "exclamationBonus": clf.exclamation_bonus,
        "emotionalBonus": clf.emotional_bonus,
        "emotionalCategories": clf.emotional_categories,
        "platformBonuses": clf.platform_bonuses,
    }


# ============================================================================
# Run the app
# ============================================================================

def run_server(host: str = "127.0.0.1", port: int = 8000, reload: bool = False):
    """Run the web server."""
    import uvicorn

    from src.config import setup_logging
    setup_logging()

    uvicorn.run(
        "src.ui.web:app",
        host=host,
        port=port,
        reload=reload,
    )


if __name__ == "__main__":
    run_server()
