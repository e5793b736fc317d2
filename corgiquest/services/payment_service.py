"""
corgiquest.services.payment_service — Checkout Sessions
========================================================

``sandbox`` mode fabricates a session id and never leaves the process;
``live`` mode posts to the configured checkout API.
"""

from __future__ import annotations

import logging
import os
import secrets
from typing import Any

import httpx

from corgiquest.config import PAYMENT_MODES
from corgiquest.errors import UpstreamServiceError

logger = logging.getLogger(__name__)


async def create_checkout(
    amount: int,
    customer_id: str,
    success_url: str,
    mode: str = "sandbox",
    api_url: str = "https://api.useautumn.com/v1/checkout",
    client: httpx.AsyncClient | None = None,
) -> dict[str, Any]:
    """Open a checkout session for *amount* (smallest currency unit).

    Raises
    ------
    ValueError
        If *amount* is not positive or *mode* is unknown.
    UpstreamServiceError
        If the live API is unconfigured, unreachable or rejects the call.
    """
    if amount <= 0:
        raise ValueError("amount must be positive")
    if mode not in PAYMENT_MODES:
        raise ValueError(f"Unknown payment mode: {mode}")

    if mode == "sandbox":
        session_id = f"sandbox_{secrets.token_hex(8)}"
        logger.info("Sandbox checkout %s for customer %s (%d).", session_id, customer_id, amount)
        return {"url": None, "mode": "sandbox", "session_id": session_id}

    api_key = os.getenv("PAYMENT_API_KEY", "").strip()
    if not api_key:
        raise UpstreamServiceError(500, "PAYMENT_API_KEY not configured")

    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=15)
    try:
        resp = await client.post(
            api_url,
            json={
                "customer_id": customer_id,
                "amount": amount,
                "success_url": success_url,
            },
            headers={"Authorization": f"Bearer {api_key}"},
        )
    except httpx.HTTPError as exc:
        logger.error("Checkout request failed: %s", exc)
        raise UpstreamServiceError(502, "Checkout service unreachable", str(exc)) from exc
    finally:
        if owns_client:
            await client.aclose()

    if not resp.is_success:
        logger.error("Checkout API returned %d", resp.status_code)
        raise UpstreamServiceError(resp.status_code, "Checkout creation failed", resp.text)

    body = resp.json()
    return {
        "url": body.get("url"),
        "mode": "live",
        "session_id": body.get("session_id") or body.get("id"),
    }
