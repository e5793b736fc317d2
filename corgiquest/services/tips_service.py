"""
corgiquest.services.tips_service — Training Tips Proxy
=======================================================

Scrapes an AKC training page through the Firecrawl API and boils the
markdown down to a title, a short description and up to three key
points.  Parsed tips can be cached per (dog, day).
"""

from __future__ import annotations

import json
import logging
import os
import re
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

import httpx
from sqlalchemy import select

from corgiquest.constants import as_utc, today_utc, utcnow
from corgiquest.database.engine import get_session
from corgiquest.database.models import TrainingTipCache
from corgiquest.errors import UpstreamServiceError

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)

FIRECRAWL_SCRAPE_URL = "https://api.firecrawl.dev/v1/scrape"
TIP_CACHE_CONTROL = "s-maxage=3600, stale-while-revalidate=86400"
DEFAULT_TOPIC = "dog training"

DEFAULT_TRAINING_URL = "https://www.akc.org/expert-advice/training/"
TOPIC_URLS: dict[str, str] = {
    "basic-training": "https://www.akc.org/expert-advice/training/basic-training/",
    "socialization": "https://www.akc.org/expert-advice/training/socialization/",
    "impulse-control": "https://www.akc.org/expert-advice/training/impulse-control/",
    "puppy-training": "https://www.akc.org/expert-advice/training/puppy-training/",
    "obedience": "https://www.akc.org/expert-advice/training/obedience/",
}

MAX_DESCRIPTION = 500
MAX_KEY_POINTS = 3
MIN_PARAGRAPH = 50

_HEADING_RE = re.compile(r"^#+\s+(.+)$", re.MULTILINE)
_BULLET_RE = re.compile(r"^[-*]\s+")


def get_training_url(topic: str) -> str:
    return TOPIC_URLS.get(topic.lower(), DEFAULT_TRAINING_URL)


def parse_training_tip(data: dict[str, Any], topic: str, now: datetime | None = None) -> dict[str, Any]:
    """Turn a Firecrawl scrape response into a tip card."""
    markdown = data.get("markdown") or (data.get("data") or {}).get("markdown") or ""

    heading = _HEADING_RE.search(markdown)
    title = heading.group(1).strip() if heading else f"Dog Training: {topic}"

    paragraphs = [p for p in markdown.split("\n\n") if len(p.strip()) > MIN_PARAGRAPH]
    description = ""
    if paragraphs:
        description = _HEADING_RE.sub("", paragraphs[0], count=1).strip()
    if not description:
        description = markdown[:200] + "..."

    key_points = [
        _BULLET_RE.sub("", line.strip()).strip()
        for line in markdown.split("\n")
        if line.strip().startswith(("-", "*"))
    ][:MAX_KEY_POINTS]

    return {
        "title": title,
        "description": description[:MAX_DESCRIPTION],
        "key_points": key_points,
        "source": "AKC",
        "topic": topic,
        "fetched_at": (now or utcnow()).isoformat(),
    }


async def fetch_training_tip(
    topic: str = DEFAULT_TOPIC,
    client: httpx.AsyncClient | None = None,
    api_url: str = FIRECRAWL_SCRAPE_URL,
) -> dict[str, Any]:
    """Scrape the page for *topic* and return the parsed tip.

    Raises
    ------
    UpstreamServiceError
        500 when ``FIRECRAWL_API_KEY`` is unset, the upstream status when
        Firecrawl answers non-2xx, 502 when it cannot be reached.
    """
    api_key = os.getenv("FIRECRAWL_API_KEY", "").strip()
    if not api_key:
        raise UpstreamServiceError(500, "FIRECRAWL_API_KEY not configured")

    target_url = get_training_url(topic)
    request = {
        "url": target_url,
        "formats": ["markdown"],
        "onlyMainContent": True,
    }
    headers = {"Authorization": f"Bearer {api_key}"}

    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=30)
    try:
        resp = await client.post(api_url, json=request, headers=headers)
    except httpx.HTTPError as exc:
        logger.error("Firecrawl request failed for %s: %s", target_url, exc)
        raise UpstreamServiceError(502, "Failed to fetch from Firecrawl", str(exc)) from exc
    finally:
        if owns_client:
            await client.aclose()

    if not resp.is_success:
        logger.error("Firecrawl returned %d for %s", resp.status_code, target_url)
        raise UpstreamServiceError(resp.status_code, "Failed to fetch from Firecrawl", resp.text)

    return parse_training_tip(resp.json(), topic)


# ---------------------------------------------------------------------------
# Per-day cache
# ---------------------------------------------------------------------------
def cache_training_tips(
    engine: Engine, dog_id: int, tips: Any, today: date | None = None
) -> dict[str, Any]:
    day = today or today_utc()
    payload = json.dumps(tips)
    with get_session(engine) as session:
        row = session.scalar(
            select(TrainingTipCache).where(
                TrainingTipCache.dog_id == dog_id, TrainingTipCache.day == day
            )
        )
        if row is not None:
            row.tips = payload
            row.created_at = utcnow()
            return {"success": True, "updated": True}
        session.add(TrainingTipCache(dog_id=dog_id, day=day, tips=payload))
    return {"success": True, "updated": False}


def get_cached_training_tips(
    engine: Engine, dog_id: int, today: date | None = None
) -> dict[str, Any] | None:
    day = today or today_utc()
    with get_session(engine) as session:
        row = session.scalar(
            select(TrainingTipCache).where(
                TrainingTipCache.dog_id == dog_id, TrainingTipCache.day == day
            )
        )
        if row is None:
            return None
        raw, created_at = row.tips, as_utc(row.created_at)

    try:
        tips = json.loads(raw)
    except json.JSONDecodeError:
        logger.error("Unparseable cached tips for dog %d on %s.", dog_id, day)
        return None
    return {"tips": tips, "created_at": created_at.isoformat() if created_at else None}
