"""
corgiquest.api.routes.items — Cosmetic item endpoints
======================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from corgiquest.api.deps import get_engine
from corgiquest.services import item_service

router = APIRouter(prefix="/dogs/{dog_id}/items", tags=["items"])


class EquipRequest(BaseModel):
    item_id: int
    image_url: str


@router.get("")
def list_items(dog_id: int, engine=Depends(get_engine)):
    return item_service.list_items(engine, dog_id)


@router.get("/unlocked")
def unlocked_items(dog_id: int, engine=Depends(get_engine)):
    return item_service.get_unlocked_items(engine, dog_id)


@router.get("/equipped")
def equipped_item(dog_id: int, engine=Depends(get_engine)):
    return item_service.get_equipped_item(engine, dog_id)


@router.post("/equip")
def equip(dog_id: int, body: EquipRequest, engine=Depends(get_engine)):
    return item_service.equip_item(engine, dog_id, body.item_id, body.image_url)


@router.post("/unequip")
def unequip(dog_id: int, engine=Depends(get_engine)):
    return item_service.unequip_item(engine, dog_id)


@router.post("/{item_id}/seen")
def mark_seen(dog_id: int, item_id: int, engine=Depends(get_engine)):
    return item_service.mark_item_seen(engine, dog_id, item_id)
