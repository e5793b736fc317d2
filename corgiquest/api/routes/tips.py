"""
corgiquest.api.routes.tips — Training tip proxy and cache endpoints
====================================================================
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query, Response
from pydantic import BaseModel

from corgiquest.api.deps import get_config, get_engine
from corgiquest.config import CorgiQuestConfig
from corgiquest.services import tips_service

router = APIRouter(tags=["tips"])


class CacheTipsRequest(BaseModel):
    tips: Any


@router.get("/tips")
async def get_tip(
    response: Response,
    topic: str = Query(tips_service.DEFAULT_TOPIC),
    cfg: CorgiQuestConfig = Depends(get_config),
):
    """Scrape and summarise a training page.  CDN-cacheable for an hour."""
    tip = await tips_service.fetch_training_tip(topic, api_url=cfg.tips_api_url)
    response.headers["Cache-Control"] = tips_service.TIP_CACHE_CONTROL
    return tip


@router.get("/dogs/{dog_id}/tips")
def get_cached_tips(dog_id: int, engine=Depends(get_engine)):
    return tips_service.get_cached_training_tips(engine, dog_id)


@router.put("/dogs/{dog_id}/tips")
def cache_tips(dog_id: int, body: CacheTipsRequest, engine=Depends(get_engine)):
    return tips_service.cache_training_tips(engine, dog_id, body.tips)
