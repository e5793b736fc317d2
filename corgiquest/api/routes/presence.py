"""
corgiquest.api.routes.presence — Household presence endpoints
==============================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from corgiquest.api.deps import get_engine
from corgiquest.services import presence_service

router = APIRouter(tags=["presence"])


class PresenceUpdate(BaseModel):
    location: str = Field(max_length=100)


@router.put("/presence/{user_id}")
def update_presence(user_id: int, body: PresenceUpdate, engine=Depends(get_engine)):
    return presence_service.update_presence(engine, user_id, body.location)


@router.delete("/presence/{user_id}")
def clear_presence(user_id: int, engine=Depends(get_engine)):
    return presence_service.clear_presence(engine, user_id)


@router.get("/households/{household_id}/presence")
def partner_presence(
    household_id: int,
    current_user_id: int = Query(...),
    engine=Depends(get_engine),
):
    return presence_service.get_partner_presence(engine, household_id, current_user_id)
