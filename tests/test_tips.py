"""
tests/test_tips.py — Training Tips Proxy Tests
===============================================

Firecrawl is replaced by ``httpx.MockTransport``.
"""

from __future__ import annotations

import asyncio
import json
from datetime import UTC, date, datetime

import httpx
import pytest

from corgiquest.errors import UpstreamServiceError
from corgiquest.services.tips_service import (
    DEFAULT_TRAINING_URL,
    cache_training_tips,
    fetch_training_tip,
    get_cached_training_tips,
    get_training_url,
    parse_training_tip,
)

SAMPLE_MARKDOWN = """# Teaching Your Dog Impulse Control

Impulse control is the ability to wait for what you want. Dogs who learn it are calmer at home and on walks.

Tips:

- Start with short waits before meals
- Reward calm behaviour at doors
* Practice "leave it" with low-value treats
- Gradually add distractions
"""


def _run(coro):
    return asyncio.run(coro)


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestTrainingUrl:
    def test_known_topic(self):
        assert get_training_url("Impulse-Control").endswith("/training/impulse-control/")

    def test_unknown_topic_falls_back(self):
        assert get_training_url("agility") == DEFAULT_TRAINING_URL


class TestParse:
    def test_extracts_title_description_points(self):
        now = datetime(2025, 3, 12, tzinfo=UTC)
        tip = parse_training_tip({"data": {"markdown": SAMPLE_MARKDOWN}}, "impulse-control", now=now)

        assert tip["title"] == "Teaching Your Dog Impulse Control"
        assert tip["description"].startswith("Impulse control is the ability")
        assert tip["key_points"] == [
            "Start with short waits before meals",
            "Reward calm behaviour at doors",
            'Practice "leave it" with low-value treats',
        ]
        assert tip["source"] == "AKC"
        assert tip["topic"] == "impulse-control"
        assert tip["fetched_at"] == now.isoformat()

    def test_top_level_markdown_accepted(self):
        tip = parse_training_tip({"markdown": SAMPLE_MARKDOWN}, "x")
        assert tip["title"] == "Teaching Your Dog Impulse Control"

    def test_empty_page_uses_fallbacks(self):
        tip = parse_training_tip({}, "obedience")
        assert tip["title"] == "Dog Training: obedience"
        assert tip["description"] == "..."
        assert tip["key_points"] == []

    def test_description_is_capped(self):
        long_para = "word " * 300
        tip = parse_training_tip({"markdown": f"# T\n\n{long_para}"}, "x")
        assert len(tip["description"]) == 500


class TestFetch:
    def test_success(self, monkeypatch):
        monkeypatch.setenv("FIRECRAWL_API_KEY", "fc-test")
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"success": True, "data": {"markdown": SAMPLE_MARKDOWN}})

        tip = _run(fetch_training_tip("socialization", client=_client(handler)))

        assert tip["title"] == "Teaching Your Dog Impulse Control"
        assert seen["auth"] == "Bearer fc-test"
        assert seen["body"]["url"].endswith("/training/socialization/")
        assert seen["body"]["formats"] == ["markdown"]

    def test_missing_key(self, monkeypatch):
        monkeypatch.delenv("FIRECRAWL_API_KEY", raising=False)
        with pytest.raises(UpstreamServiceError) as exc_info:
            _run(fetch_training_tip("obedience"))
        assert exc_info.value.status == 500

    def test_upstream_status_is_propagated(self, monkeypatch):
        monkeypatch.setenv("FIRECRAWL_API_KEY", "fc-test")

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(429, text="slow down")

        with pytest.raises(UpstreamServiceError) as exc_info:
            _run(fetch_training_tip("obedience", client=_client(handler)))
        assert exc_info.value.status == 429
        assert exc_info.value.to_dict() == {
            "error": "Failed to fetch from Firecrawl", "status": 429, "details": "slow down",
        }

    def test_unreachable_is_502(self, monkeypatch):
        monkeypatch.setenv("FIRECRAWL_API_KEY", "fc-test")

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("no route", request=request)

        with pytest.raises(UpstreamServiceError) as exc_info:
            _run(fetch_training_tip("obedience", client=_client(handler)))
        assert exc_info.value.status == 502


class TestTipCache:
    def test_upsert_and_read(self, db_engine, household):
        day = date(2025, 3, 12)
        assert get_cached_training_tips(db_engine, household["dog_id"], day) is None

        assert cache_training_tips(db_engine, household["dog_id"], [{"title": "a"}], day)["updated"] is False
        assert cache_training_tips(db_engine, household["dog_id"], [{"title": "b"}], day)["updated"] is True

        cached = get_cached_training_tips(db_engine, household["dog_id"], day)
        assert cached["tips"] == [{"title": "b"}]
