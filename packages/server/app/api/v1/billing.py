"""
Billing endpoints.

POST /api/v1/stripe/checkout       - Start a Stripe Checkout for an owned workspace
POST /api/v1/stripe/webhook        - Stripe event receiver (signature-verified)
GET  /api/v1/stripe/subscription   - A workspace's subscription
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import check_access, get_current_user
from app.core.database import get_session
from app.models.user import User
from app.services import billing as billing_service
from nebula_shared.schemas.billing import (
    CheckoutRequest,
    CheckoutResponse,
    SubscriptionRead,
    SubscriptionResponse,
    WebhookAck,
)

router = APIRouter()


@router.post("/checkout", response_model=CheckoutResponse)
async def create_checkout(
    body: CheckoutRequest,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    url = await billing_service.create_checkout_session(session, user, body)
    return CheckoutResponse(url=url)


@router.post("/webhook", response_model=WebhookAck)
async def stripe_webhook(request: Request, session: AsyncSession = Depends(get_session)):
    """Handle Stripe webhook events for subscription updates."""
    payload = await request.body()
    event = billing_service.construct_event(payload, request.headers.get("Stripe-Signature"))
    await billing_service.handle_event(session, event)
    return WebhookAck(received=True)


@router.get("/subscription", response_model=SubscriptionResponse)
async def get_subscription(
    workspace_id: uuid.UUID = Query(..., alias="workspaceId"),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    await check_access(session, user.id, workspace_id)
    row = await billing_service.get_subscription(session, workspace_id)
    return SubscriptionResponse(
        subscription=SubscriptionRead.model_validate(row) if row else None
    )
