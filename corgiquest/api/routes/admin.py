"""
corgiquest.api.routes.admin — Admin endpoints (JWT‑protected)
==============================================================
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from corgiquest.api.deps import get_current_admin, get_engine
from corgiquest.database.engine import run_db
from corgiquest.database.seed import seed_demo_data
from corgiquest.services.daily_reset_service import reset_daily_goals
from corgiquest.services.waitlist_service import list_subscribers

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/daily-reset")
async def run_daily_reset(
    admin: dict = Depends(get_current_admin),
    engine=Depends(get_engine),
):
    """Run the midnight rollover now.  Safe to repeat on the same day."""
    logger.info("Daily reset triggered by %s", admin.get("sub"))
    return await run_db(reset_daily_goals, engine)


@router.post("/seed", status_code=201)
async def seed(
    admin: dict = Depends(get_current_admin),
    engine=Depends(get_engine),
):
    logger.info("Demo seed triggered by %s", admin.get("sub"))
    return await run_db(seed_demo_data, engine)


@router.get("/subscribers")
def subscribers(
    admin: dict = Depends(get_current_admin),
    engine=Depends(get_engine),
):
    return list_subscribers(engine)
