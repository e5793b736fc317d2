"""
corgiquest.api.routes.recommendations — AI recommendation cache endpoints
==========================================================================
"""

from __future__ import annotations

from datetime import date
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from corgiquest.api.deps import get_config, get_engine
from corgiquest.config import CorgiQuestConfig
from corgiquest.services import recommendation_service

router = APIRouter(prefix="/dogs/{dog_id}/recommendations", tags=["recommendations"])


class CacheRecommendationsRequest(BaseModel):
    recommendations: Any


@router.get("")
def get_cached(
    dog_id: int,
    day: date | None = Query(None, alias="date"),
    engine=Depends(get_engine),
):
    """Cached payload for today (or ``?date=`` e.g. a week's end date)."""
    return recommendation_service.get_cached_recommendations(engine, dog_id, day)


@router.post("/generate")
async def generate(
    dog_id: int,
    engine=Depends(get_engine),
    cfg: CorgiQuestConfig = Depends(get_config),
):
    return await recommendation_service.generate_recommendations(
        engine, dog_id, model=cfg.recommendation_model
    )


@router.put("")
def cache(dog_id: int, body: CacheRecommendationsRequest, engine=Depends(get_engine)):
    return recommendation_service.cache_recommendations(engine, dog_id, body.recommendations)


@router.delete("")
def invalidate(dog_id: int, engine=Depends(get_engine)):
    return recommendation_service.invalidate_recommendation_cache(engine, dog_id)
