"""Billing subscription model: one row per workspace, kept in sync by Stripe webhooks."""

from datetime import datetime
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class Subscription(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "subscriptions"

    workspace_id: uuid.UUID = Field(foreign_key="workspaces.id", unique=True, nullable=False)
    stripe_customer_id: Optional[str] = Field(default=None, index=True)
    stripe_subscription_id: Optional[str] = Field(default=None, unique=True)
    stripe_price_id: Optional[str] = None
    plan: str = Field(nullable=False, default="FREE")  # FREE | PRO
    status: str = Field(nullable=False, default="ACTIVE")  # ACTIVE | PAST_DUE | CANCELED
    stripe_current_period_end: Optional[datetime] = Field(
        default=None, sa_type=sa.DateTime(timezone=True)
    )
