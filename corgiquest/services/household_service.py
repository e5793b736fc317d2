"""
corgiquest.services.household_service — Households, Partners & Their Dog
=========================================================================

Lookups behind the character-selection screen: who lives in a household
and which dog they train.  Clients read ``user_id`` from here before they
log activities, moods or presence.

"First" lookups order by primary key and return ``None`` when nothing
exists yet; lookups by id raise :class:`~corgiquest.errors.NotFoundError`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import select

from corgiquest.database.engine import get_session
from corgiquest.database.models import Dog, Household, User
from corgiquest.errors import NotFoundError
from corgiquest.services.dog_service import dog_to_dict

if TYPE_CHECKING:
    from sqlalchemy import Engine


def user_to_dict(user: User) -> dict[str, Any]:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "household_id": user.household_id,
        "avatar_url": user.avatar_url,
        "title": user.title,
    }


def get_user(engine: Engine, user_id: int) -> dict[str, Any]:
    with get_session(engine) as session:
        user = session.get(User, user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return user_to_dict(user)


def get_household_users(engine: Engine, household_id: int) -> list[dict[str, Any]]:
    """Every partner in the household, oldest account first."""
    with get_session(engine) as session:
        users = session.scalars(
            select(User).where(User.household_id == household_id).order_by(User.id)
        ).all()
        return [user_to_dict(u) for u in users]


def get_first_user(engine: Engine, household_id: int) -> dict[str, Any] | None:
    with get_session(engine) as session:
        user = session.scalar(
            select(User).where(User.household_id == household_id).order_by(User.id).limit(1)
        )
        return user_to_dict(user) if user else None


def get_first_household_users(engine: Engine) -> list[dict[str, Any]]:
    """Partners of the first household, or ``[]`` when there is none."""
    with get_session(engine) as session:
        household_id = session.scalar(select(Household.id).order_by(Household.id).limit(1))
    if household_id is None:
        return []
    return get_household_users(engine, household_id)


def get_household_dogs(engine: Engine, household_id: int) -> list[dict[str, Any]]:
    with get_session(engine) as session:
        dogs = session.scalars(
            select(Dog).where(Dog.household_id == household_id).order_by(Dog.id)
        ).all()
        return [dog_to_dict(d) for d in dogs]


def get_first_dog(engine: Engine) -> dict[str, Any] | None:
    with get_session(engine) as session:
        dog = session.scalar(select(Dog).order_by(Dog.id).limit(1))
        return dog_to_dict(dog) if dog else None
