"""
corgiquest.api.routes.waitlist — Waitlist and update-email endpoints
=====================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from corgiquest.api.deps import get_engine
from corgiquest.services import waitlist_service

router = APIRouter(tags=["waitlist"])


class JoinWaitlistRequest(BaseModel):
    email: str
    referred_by_code: str | None = None


class SubscribeRequest(BaseModel):
    email: str
    source: str | None = None


@router.post("/waitlist")
def join_waitlist(body: JoinWaitlistRequest, engine=Depends(get_engine)):
    return waitlist_service.join_waitlist(engine, body.email, body.referred_by_code)


@router.post("/updates/subscribe")
def subscribe(body: SubscribeRequest, engine=Depends(get_engine)):
    return waitlist_service.subscribe_to_updates(engine, body.email, body.source)


@router.get("/updates/count")
def subscriber_count(engine=Depends(get_engine)):
    return waitlist_service.get_subscriber_count(engine)
