"""
corgiquest.api.routes.payments — Checkout endpoint
===================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from corgiquest.api.deps import get_config
from corgiquest.config import CorgiQuestConfig
from corgiquest.services import payment_service

router = APIRouter(prefix="/payments", tags=["payments"])


class CheckoutRequest(BaseModel):
    amount: int
    customer_id: str
    success_url: str


@router.post("/checkout")
async def checkout(body: CheckoutRequest, cfg: CorgiQuestConfig = Depends(get_config)):
    return await payment_service.create_checkout(
        body.amount,
        body.customer_id,
        body.success_url,
        mode=cfg.payment_mode,
        api_url=cfg.payment_api_url,
    )
