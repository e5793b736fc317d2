"""
corgiquest.services.item_service — Cosmetic Items
==================================================

Items unlock when the dog's overall level reaches ``unlock_level``.  A dog
wears at most one item; equipping replaces whatever was worn before and
clears the item's "New!" marker.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, select

from corgiquest.constants import utcnow
from corgiquest.database.engine import get_session
from corgiquest.database.models import CosmeticItem, Dog, EquippedItem, NewlyUnlockedItem
from corgiquest.errors import NotFoundError

if TYPE_CHECKING:
    from sqlalchemy import Engine
    from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


def item_to_dict(item: CosmeticItem) -> dict[str, Any]:
    return {
        "id": item.id,
        "name": item.name,
        "description": item.description,
        "unlock_level": item.unlock_level,
        "item_type": item.item_type,
        "icon": item.icon,
        "ai_prompt": item.ai_prompt,
    }


def _clear_new_marker(session: Session, dog_id: int, item_id: int) -> bool:
    result = session.execute(
        delete(NewlyUnlockedItem).where(
            NewlyUnlockedItem.dog_id == dog_id, NewlyUnlockedItem.item_id == item_id
        )
    )
    return bool(result.rowcount)


def list_items(engine: Engine, dog_id: int) -> list[dict[str, Any]]:
    """Every item with ``is_unlocked`` / ``is_new`` flags, by unlock level."""
    with get_session(engine) as session:
        dog = session.get(Dog, dog_id)
        if dog is None:
            return []
        items = session.scalars(
            select(CosmeticItem).order_by(CosmeticItem.unlock_level, CosmeticItem.id)
        ).all()
        new_ids = set(session.scalars(
            select(NewlyUnlockedItem.item_id).where(NewlyUnlockedItem.dog_id == dog_id)
        ))
        result = []
        for item in items:
            body = item_to_dict(item)
            body["is_unlocked"] = dog.overall_level >= item.unlock_level
            body["is_new"] = item.id in new_ids
            result.append(body)
        return result


def get_unlocked_items(engine: Engine, dog_id: int) -> list[dict[str, Any]]:
    return [item for item in list_items(engine, dog_id) if item["is_unlocked"]]


def get_equipped_item(engine: Engine, dog_id: int) -> dict[str, Any] | None:
    with get_session(engine) as session:
        equipped = session.scalar(select(EquippedItem).where(EquippedItem.dog_id == dog_id))
        if equipped is None:
            return None
        return {
            "id": equipped.id,
            "dog_id": equipped.dog_id,
            "item_id": equipped.item_id,
            "generated_image_url": equipped.generated_image_url,
            "item": item_to_dict(equipped.item),
        }


def equip_item(engine: Engine, dog_id: int, item_id: int, image_url: str) -> dict[str, Any]:
    """Wear *item_id*, replacing any item already worn.

    Raises
    ------
    NotFoundError
        If the item does not exist.
    """
    with get_session(engine) as session:
        item = session.get(CosmeticItem, item_id)
        if item is None:
            raise NotFoundError(f"Item {item_id} not found")

        equipped = session.scalar(select(EquippedItem).where(EquippedItem.dog_id == dog_id))
        if equipped is None:
            equipped = EquippedItem(dog_id=dog_id, item_id=item_id, generated_image_url=image_url)
            session.add(equipped)
        else:
            equipped.item_id = item_id
            equipped.generated_image_url = image_url
            equipped.equipped_at = utcnow()
        _clear_new_marker(session, dog_id, item_id)
        session.flush()

        logger.info("Dog %d equipped %r.", dog_id, item.name)
        return {
            "success": True,
            "equipped_item_id": equipped.id,
            "item_name": item.name,
            "image_url": image_url,
        }


def unequip_item(engine: Engine, dog_id: int) -> dict[str, Any]:
    with get_session(engine) as session:
        result = session.execute(delete(EquippedItem).where(EquippedItem.dog_id == dog_id))
    return {"success": True, "unequipped": bool(result.rowcount)}


def mark_item_seen(engine: Engine, dog_id: int, item_id: int) -> dict[str, Any]:
    with get_session(engine) as session:
        removed = _clear_new_marker(session, dog_id, item_id)
    return {"success": True, "removed": removed}
