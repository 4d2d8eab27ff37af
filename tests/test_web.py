"""Tests for the HTTP API."""

import inspect
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from fastapi.testclient import TestClient

from src.config import Config
from src.search import SearchService
from src.sources import StaticPostSource
from src.ui.web import api_classify, api_search, app, set_search_service


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def search_service():
    """Install a search service backed by in-memory posts."""
    service = SearchService(
        {
            "reddit": StaticPostSource("reddit", [
                {"id": "r1", "content": "Export is broken, so frustrated", "engagement": 50},
                {"id": "r2", "content": "Best way to learn SQL?", "engagement": 30},
            ]),
        },
        Config(),
    )
    set_search_service(service)
    yield service
    set_search_service(None)


@pytest.fixture
def posts():
    return [
        {"id": f"p{i}", "content": "", "platform": "reddit", "engagement": 100 - i * 10}
        for i in range(10)
    ]


class TestClassifyEndpoint:
    """Tests for POST /api/classify."""

    def test_classify(self, client, posts):
        response = client.post("/api/classify", json={"posts": posts, "query": "notion"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert [p["id"] for p in body["data"]["painPoints"]] == ["p0", "p1", "p2"]
        assert [p["id"] for p in body["data"]["trendingIdeas"]] == ["p3", "p4", "p5"]
        assert [p["id"] for p in body["data"]["contentIdeas"]] == ["p6", "p7", "p8"]
        assert body["metadata"] == {"query": "notion", "totalPosts": 10, "limit": 3}
        assert "scores" not in body

    def test_classify_empty(self, client):
        response = client.post("/api/classify", json={"posts": []})

        assert response.status_code == 200
        assert response.json()["data"] == {"painPoints": [], "trendingIdeas": [], "contentIdeas": []}

    def test_classify_malformed_posts(self, client):
        response = client.post("/api/classify", json={"posts": [{"content": 5}, "junk", {"engagement": "x"}]})

        assert response.status_code == 200

    def test_classify_limit(self, client, posts):
        response = client.post("/api/classify", json={"posts": posts, "limit": 1})
        data = response.json()["data"]

        assert all(len(items) == 1 for items in data.values())

    def test_classify_invalid_limit(self, client, posts):
        response = client.post("/api/classify", json={"posts": posts, "limit": 0})

        assert response.status_code == 400
        assert response.json()["details"] == [
            {"field": "limit", "message": "Limit must be a positive integer"},
        ]

    def test_classify_counts_unique_posts(self, client, posts):
        response = client.post("/api/classify", json={"posts": posts + posts[:2]})

        assert response.json()["metadata"]["totalPosts"] == 10

    def test_classify_malformed_post_fields(self, client):
        response = client.post("/api/classify", json={"posts": [
            {"id": "a", "content": None, "engagement": None, "platform": "x"},
            {"id": "b", "content": "viral", "engagement": "12", "platform": "x"},
        ]})

        assert response.status_code == 200
        assert [p["id"] for p in response.json()["data"]["trendingIdeas"]] == ["b"]

    def test_classify_explain(self, client):
        response = client.post("/api/classify", json={
            "posts": [{"id": "a", "content": "viral tutorial", "platform": "x"}],
            "explain": True,
        })
        scores = response.json()["scores"]

        assert scores[0]["id"] == "a"
        assert scores[0]["raw"] == {"pain": 0, "trending": 3, "content": 3}
        assert scores[0]["matches"]["content"] == ["tutorial"]


class TestSearchEndpoint:
    """Tests for POST /api/search."""

    def test_search(self, client, search_service):
        response = client.post("/api/search", json={"query": "notion", "platforms": ["reddit", "x"]})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["metadata"]["totalPosts"] == 2
        assert body["metadata"]["errors"] == ["x: No source configured for this platform"]
        assert [p["id"] for p in body["data"]["painPoints"]] == ["r1"]
        assert [p["id"] for p in body["data"]["contentIdeas"]] == ["r2"]

    def test_search_validation_error(self, client, search_service):
        response = client.post("/api/search", json={"query": "", "timeFilter": "decade"})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Validation Error"
        assert body["message"] == "Invalid request data"
        assert [d["field"] for d in body["details"]] == ["query", "timeFilter"]

    def test_search_defaults_from_config(self, client, search_service):
        search_service.config.search.platforms = ["reddit"]

        response = client.post("/api/search", json={"query": "notion"})
        metadata = response.json()["metadata"]

        assert metadata["platforms"] == ["reddit"]
        assert "errors" not in metadata

    def test_search_query_too_long(self, client, search_service):
        response = client.post("/api/search", json={"query": "a" * 501, "platforms": ["Reddit"]})

        assert response.status_code == 400
        assert response.json()["details"] == [
            {"field": "query", "message": "Search query must be less than 500 characters"},
        ]

    def test_search_configured_query_length(self, client, search_service):
        search_service.config.search.max_query_length = 5

        response = client.post("/api/search", json={"query": "notion app"})

        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "query"

    def test_search_no_results(self, client, search_service):
        response = client.post("/api/search", json={"query": "notion", "platforms": ["youtube"]})
        metadata = response.json()["metadata"]

        assert metadata["totalPosts"] == 0
        assert metadata["noResultsMessage"]["title"] == "No results found"

    def test_search_health(self, client, search_service):
        response = client.get("/api/search/health")
        body = response.json()

        assert response.status_code == 200
        assert body["status"] == "OK"
        assert body["service"] == "search"
        assert body["availablePlatforms"] == ["reddit", "x", "youtube"]
        assert body["configuredPlatforms"] == ["reddit"]


def test_lexicons_endpoint(client):
    body = client.get("/api/lexicons").json()

    assert set(body) == {"painPoints", "trendingIdeas", "contentIdeas"}
    assert body["painPoints"]["name"] == "Pain Points"
    assert body["painPoints"]["keywords"]["problem"] == 3
    assert body["contentIdeas"]["keywords"]["pro tip"] == 1


def test_config_endpoint(client):
    body = client.get("/api/config").json()

    assert body["perCategoryLimit"] >= 1
    assert set(body["platformBonuses"]) == {"reddit", "x", "youtube"}


def test_blocking_routes_run_in_threadpool():
    """Classify and search block, so they are plain functions."""
    assert not inspect.iscoroutinefunction(api_classify)
    assert not inspect.iscoroutinefunction(api_search)
