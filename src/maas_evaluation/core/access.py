"""Subscription entitlements: who may see which tiers, and how many per day.

These are soft usage limits, not a security boundary. Every decision fails
closed: unknown tiers, unknown plans or missing data mean "no".
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Union

from .models import (
    UNLIMITED,
    DailyLimitDecision,
    PlanStatus,
    SubscriptionPlan,
    Tier,
    TierAccess,
)

logger = logging.getLogger(__name__)

TierLike = Union[Tier, str, None]

FREE_PLAN_ID = "free"

PLANS: dict[str, SubscriptionPlan] = {
    "free": SubscriptionPlan(
        id="free",
        name="Free",
        price=0,
        daily_view_limit=30,
        tier_access=TierAccess.OWN_OR_BELOW,
        features=[
            "Browse profiles at your tier or below",
            "30 profiles per day",
            "Basic profile details",
        ],
    ),
    "basic": SubscriptionPlan(
        id="basic",
        name="Basic",
        price=1900,
        original_price=3800,
        daily_view_limit=UNLIMITED,
        tier_access=TierAccess.ALL,
        features=[
            "Browse every tier",
            "Unlimited profile views",
            "Detailed profile information",
            "Instagram handle",
        ],
    ),
    "premium": SubscriptionPlan(
        id="premium",
        name="Premium",
        price=3900,
        original_price=7800,
        daily_view_limit=UNLIMITED,
        tier_access=TierAccess.ALL,
        status=PlanStatus.COMING_SOON,
        features=[
            "Everything in Basic",
            "Priority placement",
            "Premium badge",
            "Advanced filters",
        ],
    ),
}

# Tiers at most this many ranks apart are suggested to each other.
MATCH_RANK_DISTANCE = 2


def get_plan(plan_id: Optional[str]) -> Optional[SubscriptionPlan]:
    if not plan_id:
        return None
    return PLANS.get(plan_id.strip().lower())


def resolve_plan(
    plan_id: Optional[str],
    expires_at: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> SubscriptionPlan:
    """Effective plan for a subscription record.

    Unknown plans and expired subscriptions fall back to the free plan.
    """
    plan = get_plan(plan_id)
    if plan is None:
        return PLANS[FREE_PLAN_ID]
    if expires_at is not None and expires_at < (now or datetime.utcnow()):
        logger.debug("Subscription to %s expired at %s", plan.id, expires_at)
        return PLANS[FREE_PLAN_ID]
    return plan


def can_access_tier(viewer_tier: TierLike, target_tier: TierLike, plan: Optional[SubscriptionPlan]) -> bool:
    """Whether a viewer of ``viewer_tier`` may open a ``target_tier`` profile."""
    viewer = Tier.lookup(viewer_tier)
    target = Tier.lookup(target_tier)
    if viewer is None or target is None or not isinstance(plan, SubscriptionPlan):
        return False
    if plan.tier_access == TierAccess.ALL:
        return True
    if plan.tier_access == TierAccess.OWN_OR_BELOW:
        return target.rank <= viewer.rank
    return False


def check_daily_limit(view_count: int, plan: Optional[SubscriptionPlan]) -> DailyLimitDecision:
    """Whether another profile view fits in today's quota, and how many remain."""
    if not isinstance(plan, SubscriptionPlan):
        return DailyLimitDecision(allowed=False, remaining=0)
    if plan.unlimited:
        return DailyLimitDecision(allowed=True, remaining=UNLIMITED)
    try:
        count = max(0, int(view_count))
    except (TypeError, ValueError, OverflowError):
        return DailyLimitDecision(allowed=False, remaining=0)
    limit = plan.daily_view_limit
    return DailyLimitDecision(allowed=count < limit, remaining=max(0, limit - count))


def visible_tiers(viewer_tier: TierLike, plan: Optional[SubscriptionPlan]) -> list[Tier]:
    """All tiers the viewer may browse, best first."""
    return [t for t in reversed(list(Tier)) if can_access_tier(viewer_tier, t, plan)]


def can_match(tier_a: TierLike, tier_b: TierLike) -> bool:
    a, b = Tier.lookup(tier_a), Tier.lookup(tier_b)
    if a is None or b is None:
        return False
    return abs(a.rank - b.rank) <= MATCH_RANK_DISTANCE
