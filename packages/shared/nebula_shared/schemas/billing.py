"""
Billing schemas: Stripe checkout and the per-workspace subscription.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from .common import APIModel, SubscriptionPlan, SubscriptionStatus


class CheckoutRequest(APIModel):
    price_id: str = Field(min_length=1, description="Price ID required")
    workspace_id: Optional[UUID] = None


class CheckoutResponse(APIModel):
    url: str


class SubscriptionRead(APIModel):
    id: UUID
    workspace_id: UUID
    stripe_customer_id: Optional[str] = None
    stripe_subscription_id: Optional[str] = None
    stripe_price_id: Optional[str] = None
    plan: SubscriptionPlan
    status: SubscriptionStatus
    stripe_current_period_end: Optional[datetime] = None


class SubscriptionResponse(APIModel):
    subscription: Optional[SubscriptionRead] = None


class WebhookAck(APIModel):
    received: bool = True
