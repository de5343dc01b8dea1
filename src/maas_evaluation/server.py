"""MaaS Evaluation MCP Server.

FastMCP server exposing questionnaire evaluation, percentile and grade
lookups, weight-table administration and tier-gated profile viewing.
Run: maas-evaluation-mcp
"""

from __future__ import annotations

import hmac
import logging
import math
import os
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, AsyncIterator, Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from .core.access import PLANS, check_daily_limit, can_access_tier, resolve_plan, visible_tiers
from .core.errors import ConfigurationError, EvaluationError, ValidationError
from .core.evaluation import evaluate
from .core.grades import GRADE_BANDS, grade_for_percentile
from .core.models import Gender, Tier
from .core.percentile import distribution_curve, percentile_result
from .core.questions import FEMALE_QUESTIONS, MALE_QUESTIONS, get_questions
from .core.weights import parse_weight_config, weight_config_from_tables
from .db import close_db, init_db
from .scheduler import MaintenanceScheduler
from .store import (
    activate_weight_config,
    get_active_weights,
    get_evaluation_history,
    get_latest_tier,
    get_view_count,
    increment_view_count,
    list_weight_tables,
    save_evaluation,
)

logger = logging.getLogger(__name__)

READ_ONLY = ToolAnnotations(readOnlyHint=True, destructiveHint=False, idempotentHint=True, openWorldHint=False)
WRITES = ToolAnnotations(readOnlyHint=False, destructiveHint=False, idempotentHint=False, openWorldHint=False)

scheduler = MaintenanceScheduler()


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncIterator[None]:
    """Initialize database, seed weights on first run, start the maintenance loop."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    await init_db()
    await scheduler.start()
    try:
        yield
    finally:
        await scheduler.stop()
        await close_db()


mcp = FastMCP(
    "MaaS Evaluation",
    instructions="Evaluate marriage-market questionnaires: weighted category scores, population percentile, tier grade, and tier-gated profile browsing with daily quotas.",
    lifespan=lifespan,
)


def _parse_gender(gender: str) -> Gender:
    try:
        return Gender(str(gender).strip().lower())
    except ValueError:
        raise ValidationError(f"Unknown gender {gender!r}; expected 'male' or 'female'", field="gender")


def _parse_datetime(value: str) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"Invalid ISO timestamp {value!r}", field="expires_at")


# ─── Tool 1: Questions ───────────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def maas_questions(gender: str) -> dict:
    """The ordered questionnaire for one gender.

    Args:
        gender: 'male' or 'female'.
    """
    try:
        g = _parse_gender(gender)
    except EvaluationError as exc:
        return exc.to_dict()
    questions = get_questions(g)
    return {
        "gender": g.value,
        "questions": [q.model_dump(mode="json") for q in questions],
        "count": len(questions),
    }


# ─── Tool 2: Evaluate ────────────────────────────────────────────────────────


@mcp.tool(annotations=WRITES)
async def maas_evaluate(
    gender: str,
    answers: list[dict],
    evaluator_age: Optional[int] = None,
    user_key: str = "",
) -> dict:
    """Score a questionnaire, rank it against the population and assign a tier.

    Args:
        gender: 'male' or 'female'.
        answers: Ordered list of {"question_id": ..., "value": ...}. Later
                 answers to the same question replace earlier ones.
        evaluator_age: Age of the person evaluating (female tables weigh
                       categories differently for evaluators under 35).
        user_key: When given, the result is stored under this key.
    """
    try:
        g = _parse_gender(gender)
        table = await get_active_weights(g)
        result = evaluate(g, answers, table, evaluator_age=evaluator_age)
    except EvaluationError as exc:
        logger.info("Evaluation rejected: %s", exc.message)
        return exc.to_dict()

    snapshot_id = await save_evaluation(user_key, result) if user_key else None

    payload = result.model_dump(mode="json")
    payload["snapshot_id"] = snapshot_id
    payload["summary"] = (
        f"Score {result.breakdown.aggregate:.1f}/100 puts you in the top {result.percentile.percentile:.1f}% "
        f"as {result.grade.title} ({result.grade.code})."
    )
    return payload


# ─── Tool 3: Percentile ──────────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def maas_percentile(score: float) -> dict:
    """Population percentile and tier for a score on the 0-10 scale.

    Args:
        score: Normalized score (aggregate / 10). Expected within 0-10.
    """
    if not math.isfinite(score):
        return ValidationError("Score must be a finite number", field="score").to_dict()
    result = percentile_result(score)
    grade = grade_for_percentile(result.percentile)
    return {
        "percentile": result.model_dump(mode="json"),
        "grade": grade.model_dump(mode="json"),
        "summary": f"A score of {score:g} is in the top {result.percentile:.1f}%: {grade.title} ({grade.code}).",
    }


# ─── Tool 4: Grade bands ─────────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def maas_grades(percentile: Optional[float] = None) -> dict:
    """Tier bands, or the band a given percentile falls into.

    Args:
        percentile: Upper-tail percentage (lower is better). Omit to list all bands.
    """
    payload: dict[str, Any] = {"bands": [b.model_dump(mode="json") for b in GRADE_BANDS]}
    if percentile is not None:
        payload["grade"] = grade_for_percentile(percentile).model_dump(mode="json")
    return payload


# ─── Tool 5: Distribution ────────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def maas_distribution() -> dict:
    """Density curve of the reference score distribution, N(5, 1.5) on 0-10."""
    return {"title": "Score Distribution", "mean": 5.0, "std_dev": 1.5, "points": distribution_curve()}


# ─── Tool 6: Weights (Stateful) ──────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def maas_weights() -> dict:
    """The active weight configuration and every stored table version."""
    active = []
    for g in Gender:
        try:
            active.append(await get_active_weights(g))
        except EvaluationError as exc:
            logger.warning("No active weights for %s", g.value)
            return exc.to_dict()
    return {
        "active": weight_config_from_tables(active),
        "tables": await list_weight_tables(),
    }


@mcp.tool(annotations=WRITES)
async def maas_update_weights(config: dict, admin_token: str) -> dict:
    """Replace the active weight configuration for both genders at once.

    Args:
        config: {"name", "description", "male": {...}, "female": {...}} where
                each gender has "categories" (item points summing to 100 per
                category) and "combinations" (category shares summing to 1).
        admin_token: Must match MAAS_ADMIN_TOKEN.
    """
    expected = os.environ.get("MAAS_ADMIN_TOKEN", "")
    if not expected or not hmac.compare_digest(expected, admin_token or ""):
        logger.warning("Rejected weight update with invalid admin token")
        return {"error": "Not authorized to update weights", "code": "unauthorized"}

    try:
        tables = parse_weight_config(config, MALE_QUESTIONS + FEMALE_QUESTIONS)
    except ConfigurationError as exc:
        return exc.to_dict()

    activated = await activate_weight_config(tables.values())
    return {"success": True, "activated": activated}


# ─── Tool 7: Plans ───────────────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def maas_plans() -> dict:
    """Subscription plans and what each one unlocks."""
    return {"plans": [p.model_dump(mode="json") for p in PLANS.values()]}


# ─── Tool 8: View Profile (Stateful) ─────────────────────────────────────────


@mcp.tool(annotations=WRITES)
async def maas_view_profile(
    user_key: str,
    target_tier: str,
    plan_id: str = "free",
    viewer_tier: str = "",
    expires_at: str = "",
) -> dict:
    """Check whether a user may open a profile of ``target_tier`` and count the view.

    Args:
        user_key: The viewing user.
        target_tier: Tier of the profile being opened (e.g. 'Diamond').
        plan_id: The viewer's subscription plan ('free', 'basic', 'premium').
        viewer_tier: The viewer's tier. Defaults to their latest stored evaluation.
        expires_at: ISO timestamp when the subscription ends, if any.
    """
    try:
        plan = resolve_plan(plan_id, _parse_datetime(expires_at))
    except EvaluationError as exc:
        return exc.to_dict()

    tier = viewer_tier or await get_latest_tier(user_key) or ""
    viewer = Tier.lookup(tier)
    tier_allowed = can_access_tier(tier, target_tier, plan)
    count = await get_view_count(user_key)
    quota = check_daily_limit(count, plan)

    allowed = tier_allowed and quota.allowed
    remaining = quota.remaining
    if allowed:
        count = await increment_view_count(user_key)
        remaining = check_daily_limit(count, plan).remaining

    if not tier_allowed:
        reason = "tier_locked"
    elif not quota.allowed:
        reason = "daily_limit_reached"
    else:
        reason = None

    return {
        "allowed": allowed,
        "reason": reason,
        "plan": plan.id,
        "viewer_tier": viewer.value if viewer else None,
        "visible_tiers": [t.value for t in visible_tiers(tier, plan)],
        "views_today": count,
        "remaining": remaining,
    }


@mcp.tool(annotations=READ_ONLY)
async def maas_view_quota(user_key: str, plan_id: str = "free", expires_at: str = "") -> dict:
    """Today's profile-view usage for a user, without counting a view.

    Args:
        user_key: The viewing user.
        plan_id: The viewer's subscription plan.
        expires_at: ISO timestamp when the subscription ends, if any.
    """
    try:
        plan = resolve_plan(plan_id, _parse_datetime(expires_at))
    except EvaluationError as exc:
        return exc.to_dict()
    count = await get_view_count(user_key)
    quota = check_daily_limit(count, plan)
    return {"plan": plan.id, "views_today": count, **quota.model_dump()}


# ─── Tool 9: History (Stateful) ──────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def maas_evaluation_history(user_key: str, limit: int = 10) -> dict:
    """Stored evaluations for a user, newest first.

    Args:
        user_key: The user whose evaluations to list.
        limit: Maximum number of snapshots. Default 10.
    """
    history = await get_evaluation_history(user_key, limit=limit)
    return {
        "user_key": user_key,
        "evaluations": history,
        "count": len(history),
        "latest_tier": history[0]["tier"] if history else None,
    }


def main():
    """Entry point for the CLI command."""
    mcp.run()


if __name__ == "__main__":
    main()
