"""
corgiquest.api.routes.households — Household, user and first-dog lookups
=========================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from corgiquest.api.deps import get_engine
from corgiquest.services import household_service

router = APIRouter(tags=["households"])


# The literal "first" paths are declared before their ``{id}`` siblings
@router.get("/households/first/users")
def first_household_users(engine=Depends(get_engine)):
    """Partners of the first household, for character selection."""
    return household_service.get_first_household_users(engine)


@router.get("/households/{household_id}/users")
def household_users(household_id: int, engine=Depends(get_engine)):
    return household_service.get_household_users(engine, household_id)


@router.get("/households/{household_id}/users/first")
def first_user(household_id: int, engine=Depends(get_engine)):
    return household_service.get_first_user(engine, household_id)


@router.get("/households/{household_id}/dogs")
def household_dogs(household_id: int, engine=Depends(get_engine)):
    return household_service.get_household_dogs(engine, household_id)


@router.get("/dogs/first")
def first_dog(engine=Depends(get_engine)):
    return household_service.get_first_dog(engine)


@router.get("/users/{user_id}")
def get_user(user_id: int, engine=Depends(get_engine)):
    return household_service.get_user(engine, user_id)
