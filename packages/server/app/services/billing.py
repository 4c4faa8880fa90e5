"""
Billing service: Stripe Checkout and webhook-driven subscription sync.

Each workspace has at most one Subscription row. Checkout stamps the
workspace id into the session metadata; the webhook reads it back to know
which row to upsert.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

import stripe
import structlog
from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select
from starlette.concurrency import run_in_threadpool

from app.core.auth import check_role
from app.core.config import get_settings
from app.models.subscription import Subscription
from app.models.user import User
from app.models.workspace import Workspace
from app.models.workspace_member import WorkspaceMember
from nebula_shared.schemas.billing import CheckoutRequest
from nebula_shared.schemas.common import Role, SubscriptionPlan, SubscriptionStatus

log = structlog.get_logger()
settings = get_settings()

stripe.api_key = settings.stripe_secret_key

STATUS_BY_STRIPE = {
    "active": SubscriptionStatus.ACTIVE,
    "trialing": SubscriptionStatus.ACTIVE,
    "past_due": SubscriptionStatus.PAST_DUE,
    "unpaid": SubscriptionStatus.PAST_DUE,
    "incomplete": SubscriptionStatus.PAST_DUE,
    "canceled": SubscriptionStatus.CANCELED,
    "incomplete_expired": SubscriptionStatus.CANCELED,
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _get(obj: Any, key: str, default: Any = None) -> Any:
    """Item access that works for StripeObjects and plain dicts alike."""
    if obj is None:
        return default
    try:
        value = obj[key]
    except (KeyError, TypeError, IndexError):
        return default
    return default if value is None else value


def _first_item(subscription: Any) -> Any:
    items = _get(_get(subscription, "items"), "data", [])
    return items[0] if items else None


def _price_id(subscription: Any) -> Optional[str]:
    return _get(_get(_first_item(subscription), "price"), "id")


def _period_end(subscription: Any) -> Optional[datetime]:
    # newer API versions moved the period onto the subscription item
    ts = _get(subscription, "current_period_end") or _get(_first_item(subscription), "current_period_end")
    if not ts:
        return None
    return datetime.fromtimestamp(int(ts), tz=timezone.utc)


def plan_for_price(price_id: Optional[str]) -> SubscriptionPlan:
    if price_id and price_id == settings.stripe_hobby_price_id:
        return SubscriptionPlan.FREE
    return SubscriptionPlan.PRO


async def _subscription_by_stripe_id(
    session: AsyncSession, stripe_subscription_id: str
) -> Optional[Subscription]:
    result = await session.execute(
        select(Subscription).where(Subscription.stripe_subscription_id == stripe_subscription_id)
    )
    return result.scalar_one_or_none()


async def _retrieve_subscription(subscription_id: str) -> Any:
    return await run_in_threadpool(stripe.Subscription.retrieve, subscription_id)


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------

async def _owned_workspace_id(
    session: AsyncSession, user: User, workspace_id: Optional[uuid.UUID]
) -> uuid.UUID:
    if workspace_id is not None:
        await check_role(
            session,
            user.id,
            workspace_id,
            [Role.OWNER],
            detail="Only workspace owners can manage billing",
        )
        return workspace_id

    result = await session.execute(
        select(WorkspaceMember)
        .where(WorkspaceMember.user_id == user.id, WorkspaceMember.role == Role.OWNER.value)
        .order_by(WorkspaceMember.joined_at)
        .limit(1)
    )
    membership = result.scalar_one_or_none()
    if not membership:
        raise HTTPException(status_code=400, detail="No workspace found where you are an owner")
    return membership.workspace_id


async def create_checkout_session(
    session: AsyncSession, user: User, req: CheckoutRequest
) -> str:
    """Open a Stripe Checkout session for a workspace the caller owns. Returns its URL."""
    workspace_id = await _owned_workspace_id(session, user, req.workspace_id)

    params: dict[str, Any] = {
        "success_url": f"{settings.app_url}/settings/billing?success=true",
        "cancel_url": f"{settings.app_url}/settings/billing?canceled=true",
        "payment_method_types": ["card"],
        "mode": "subscription",
        "billing_address_collection": "auto",
        "line_items": [{"price": req.price_id, "quantity": 1}],
        "metadata": {"userId": str(user.id), "workspaceId": str(workspace_id)},
    }
    existing = await get_subscription(session, workspace_id)
    if existing and existing.stripe_customer_id:
        params["customer"] = existing.stripe_customer_id
    else:
        params["customer_email"] = user.email

    try:
        checkout = await run_in_threadpool(stripe.checkout.Session.create, **params)
    except stripe.StripeError as exc:
        log.warning("stripe.checkout_failed", workspace_id=str(workspace_id), error=str(exc))
        raise HTTPException(status_code=400, detail=f"Stripe error: {exc.user_message or exc}")

    log.info("stripe.checkout_created", workspace_id=str(workspace_id), price_id=req.price_id)
    return checkout.url


async def get_subscription(
    session: AsyncSession, workspace_id: uuid.UUID
) -> Optional[Subscription]:
    result = await session.execute(
        select(Subscription).where(Subscription.workspace_id == workspace_id)
    )
    return result.scalar_one_or_none()


# ---------------------------------------------------------------------------
# Webhook
# ---------------------------------------------------------------------------

def construct_event(payload: bytes, sig_header: Optional[str]) -> Any:
    """Verify the Stripe signature and parse the event, else 400."""
    try:
        return stripe.Webhook.construct_event(
            payload=payload,
            sig_header=sig_header or "",
            secret=settings.stripe_webhook_secret,
        )
    except (ValueError, stripe.SignatureVerificationError) as exc:
        log.warning("stripe.webhook_rejected", error=str(exc))
        raise HTTPException(status_code=400, detail=f"Webhook Error: {exc}")


async def _on_checkout_completed(session: AsyncSession, checkout: Any) -> None:
    workspace_id = _get(_get(checkout, "metadata"), "workspaceId")
    subscription_id = _get(checkout, "subscription")
    if not workspace_id or not subscription_id:
        log.warning("stripe.checkout_incomplete", checkout_id=_get(checkout, "id"))
        return

    try:
        workspace_uuid = uuid.UUID(str(workspace_id))
    except ValueError:
        log.warning(
            "stripe.checkout_bad_metadata",
            checkout_id=_get(checkout, "id"),
            workspace_id=str(workspace_id),
        )
        return
    if await session.get(Workspace, workspace_uuid) is None:
        log.warning("stripe.checkout_unknown_workspace", workspace_id=str(workspace_uuid))
        return

    stripe_sub = await _retrieve_subscription(subscription_id)
    row = await get_subscription(session, workspace_uuid)
    if row is None:
        row = Subscription(workspace_id=workspace_uuid)

    price_id = _price_id(stripe_sub)
    row.stripe_subscription_id = _get(stripe_sub, "id", subscription_id)
    row.stripe_customer_id = _get(stripe_sub, "customer") or _get(checkout, "customer")
    row.stripe_price_id = price_id
    row.stripe_current_period_end = _period_end(stripe_sub)
    row.plan = plan_for_price(price_id).value
    row.status = SubscriptionStatus.ACTIVE.value
    session.add(row)
    await session.flush()
    log.info("stripe.subscription_activated", workspace_id=str(workspace_uuid), plan=row.plan)


def _invoice_subscription_id(invoice: Any) -> Optional[str]:
    return _get(invoice, "subscription") or _get(
        _get(_get(invoice, "parent"), "subscription_details"), "subscription"
    )


async def _on_invoice_paid(session: AsyncSession, invoice: Any) -> None:
    subscription_id = _invoice_subscription_id(invoice)
    if not subscription_id:
        return
    row = await _subscription_by_stripe_id(session, subscription_id)
    if row is None:
        log.warning("stripe.subscription_unknown", subscription_id=subscription_id)
        return

    stripe_sub = await _retrieve_subscription(subscription_id)
    row.stripe_price_id = _price_id(stripe_sub) or row.stripe_price_id
    row.stripe_current_period_end = _period_end(stripe_sub) or row.stripe_current_period_end
    row.plan = plan_for_price(row.stripe_price_id).value
    row.status = SubscriptionStatus.ACTIVE.value
    session.add(row)
    await session.flush()
    log.info("stripe.subscription_renewed", subscription_id=subscription_id)


async def _on_subscription_updated(session: AsyncSession, stripe_sub: Any) -> None:
    row = await _subscription_by_stripe_id(session, _get(stripe_sub, "id", ""))
    if row is None:
        return
    status = STATUS_BY_STRIPE.get(_get(stripe_sub, "status"))
    if status is not None:
        row.status = status.value
    row.stripe_price_id = _price_id(stripe_sub) or row.stripe_price_id
    row.stripe_current_period_end = _period_end(stripe_sub) or row.stripe_current_period_end
    row.plan = plan_for_price(row.stripe_price_id).value
    session.add(row)
    await session.flush()
    log.info("stripe.subscription_updated", subscription_id=row.stripe_subscription_id, status=row.status)


async def _on_subscription_deleted(session: AsyncSession, stripe_sub: Any) -> None:
    row = await _subscription_by_stripe_id(session, _get(stripe_sub, "id", ""))
    if row is None:
        return
    row.status = SubscriptionStatus.CANCELED.value
    session.add(row)
    await session.flush()
    log.info("stripe.subscription_canceled", subscription_id=row.stripe_subscription_id)


EVENT_HANDLERS = {
    "checkout.session.completed": _on_checkout_completed,
    "invoice.payment_succeeded": _on_invoice_paid,
    "customer.subscription.updated": _on_subscription_updated,
    "customer.subscription.deleted": _on_subscription_deleted,
}


async def handle_event(session: AsyncSession, event: Any) -> None:
    event_type = _get(event, "type")
    log.info("stripe.webhook_received", event_type=event_type, event_id=_get(event, "id"))
    handler = EVENT_HANDLERS.get(event_type)
    if handler is None:
        return
    await handler(session, _get(_get(event, "data"), "object"))
