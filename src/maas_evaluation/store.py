"""Persistence for weight tables, evaluations and daily view counters.

Weight-table activation runs in a single transaction that first deactivates
the current table for the gender, so readers only ever see the old or the
new table. View counters are best-effort: concurrent views by one user may
overshoot the soft daily cap slightly.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from .core.errors import NotFoundError
from .core.models import EvaluationResult, Gender, WeightTable
from .core.weights import default_weight_tables
from .db import get_session_factory
from .sqlmodels import DailyViewCount, EvaluationSnapshot, MaintenanceMeta, WeightTableRow

logger = logging.getLogger(__name__)


def _row_to_table(row: WeightTableRow) -> WeightTable:
    return WeightTable.model_validate({
        "name": row.name,
        "gender": row.gender,
        "description": row.description or "",
        "categories": row.categories,
        "combinations": row.combinations,
    })


# ─── Weight tables ───────────────────────────────────────────────────────────


async def get_active_weights(gender: Gender) -> WeightTable:
    """Snapshot of the active table for ``gender``. Raises NotFoundError if none."""
    gender = Gender(gender)
    session_factory = get_session_factory()
    async with session_factory() as session:
        result = await session.execute(
            select(WeightTableRow).where(
                WeightTableRow.gender == gender.value,
                WeightTableRow.is_active.is_(True),
            )
        )
        row = result.scalar_one_or_none()
    if row is None:
        raise NotFoundError(f"No active weight table for {gender.value}", field="gender")
    return _row_to_table(row)


async def activate_weight_config(tables: Iterable[WeightTable]) -> list[str]:
    """Store and activate tables in one transaction, replacing the active ones.

    Tables must already be validated. Returns the activated "name/gender" keys.
    """
    tables = list(tables)
    now = datetime.utcnow()
    activated = []

    session_factory = get_session_factory()
    async with session_factory() as session:
        async with session.begin():
            for table in tables:
                gender = Gender(table.gender).value
                await session.execute(
                    update(WeightTableRow)
                    .where(WeightTableRow.gender == gender, WeightTableRow.is_active.is_(True))
                    .values(is_active=False)
                )

                categories = {cat: {"points": dict(w.points)} for cat, w in table.categories.items()}
                combinations = {p: dict(s) for p, s in table.combinations.items()}

                result = await session.execute(
                    select(WeightTableRow).where(
                        WeightTableRow.name == table.name,
                        WeightTableRow.gender == gender,
                    )
                )
                row = result.scalar_one_or_none()
                if row is None:
                    row = WeightTableRow(name=table.name, gender=gender, created_at=now)
                    session.add(row)
                row.categories = categories
                row.combinations = combinations
                row.description = table.description
                row.is_active = True
                row.activated_at = now
                # Flush per table so the deactivation above is ordered before
                # the next gender's statements.
                await session.flush()
                activated.append(f"{table.name}/{gender}")

    logger.info("Activated weight tables: %s", ", ".join(activated))
    return activated


async def activate_weights(table: WeightTable) -> None:
    await activate_weight_config([table])


async def list_weight_tables() -> list[dict]:
    session_factory = get_session_factory()
    async with session_factory() as session:
        result = await session.execute(
            select(WeightTableRow).order_by(WeightTableRow.gender, WeightTableRow.created_at)
        )
        rows = result.scalars().all()

    return [
        {
            "name": r.name,
            "gender": r.gender,
            "is_active": r.is_active,
            "description": r.description,
            "created_at": r.created_at.isoformat(),
            "activated_at": r.activated_at.isoformat() if r.activated_at else None,
        }
        for r in rows
    ]


async def needs_seed() -> bool:
    """True when some gender has no active weight table."""
    session_factory = get_session_factory()
    async with session_factory() as session:
        result = await session.execute(
            select(WeightTableRow.gender).where(WeightTableRow.is_active.is_(True))
        )
        active = set(result.scalars().all())
    return any(g.value not in active for g in Gender)


async def seed_default_weights() -> list[str]:
    """Activate the reference weights and record when it happened."""
    activated = await activate_weight_config(default_weight_tables().values())
    await _set_meta("weights_seeded", datetime.utcnow().isoformat())
    return activated


# ─── Evaluations ─────────────────────────────────────────────────────────────


async def save_evaluation(user_key: str, result: EvaluationResult) -> int:
    """Persist an evaluation for ``user_key``. Returns the snapshot id."""
    breakdown = result.breakdown
    snapshot = EvaluationSnapshot(
        user_key=user_key,
        gender=Gender(breakdown.gender).value,
        aggregate=breakdown.aggregate,
        category_scores=breakdown.category_totals(),
        percentile=result.percentile.percentile,
        tier=result.grade.tier.value,
        grade_code=result.grade.code,
        weight_table=breakdown.weight_table,
        combination=breakdown.combination,
        computed_at=result.computed_at,
    )
    session_factory = get_session_factory()
    async with session_factory() as session:
        session.add(snapshot)
        await session.commit()
    return snapshot.id


async def get_evaluation_history(user_key: str, limit: int = 10) -> list[dict]:
    session_factory = get_session_factory()
    async with session_factory() as session:
        result = await session.execute(
            select(EvaluationSnapshot)
            .where(EvaluationSnapshot.user_key == user_key)
            .order_by(EvaluationSnapshot.computed_at.desc(), EvaluationSnapshot.id.desc())
            .limit(limit)
        )
        rows = result.scalars().all()

    return [
        {
            "id": r.id,
            "gender": r.gender,
            "aggregate": r.aggregate,
            "category_scores": r.category_scores,
            "percentile": r.percentile,
            "tier": r.tier,
            "grade": r.grade_code,
            "weight_table": r.weight_table,
            "combination": r.combination,
            "computed_at": r.computed_at.isoformat(),
        }
        for r in rows
    ]


async def get_latest_tier(user_key: str) -> Optional[str]:
    history = await get_evaluation_history(user_key, limit=1)
    return history[0]["tier"] if history else None


# ─── Daily view counters ─────────────────────────────────────────────────────


def current_day() -> date:
    """The UTC calendar day. Quotas roll over at midnight UTC, like every stored timestamp."""
    return datetime.utcnow().date()


async def get_view_count(user_key: str, day: Optional[date] = None) -> int:
    day = day or current_day()
    session_factory = get_session_factory()
    async with session_factory() as session:
        result = await session.execute(
            select(DailyViewCount.count).where(
                DailyViewCount.user_key == user_key,
                DailyViewCount.day == day,
            )
        )
        count = result.scalar_one_or_none()
    return count or 0


async def increment_view_count(user_key: str, day: Optional[date] = None) -> int:
    """Add one view for ``user_key`` on ``day`` and return the new count."""
    day = day or current_day()
    stmt = sqlite_insert(DailyViewCount).values(user_key=user_key, day=day, count=1)
    stmt = stmt.on_conflict_do_update(
        index_elements=["user_key", "day"],
        set_={"count": DailyViewCount.count + 1},
    )
    session_factory = get_session_factory()
    async with session_factory() as session:
        await session.execute(stmt)
        await session.commit()
    return await get_view_count(user_key, day)


async def prune_view_counts(retention_days: int, today: Optional[date] = None) -> int:
    """Delete counters older than ``retention_days``. Returns rows removed."""
    cutoff = (today or current_day()) - timedelta(days=retention_days)
    session_factory = get_session_factory()
    async with session_factory() as session:
        result = await session.execute(delete(DailyViewCount).where(DailyViewCount.day < cutoff))
        await session.commit()
    removed = result.rowcount or 0
    await _set_meta("last_prune", datetime.utcnow().isoformat())
    if removed:
        logger.info("Pruned %d view counters older than %s", removed, cutoff)
    return removed


async def _set_meta(key: str, value: str) -> None:
    session_factory = get_session_factory()
    async with session_factory() as session:
        result = await session.execute(select(MaintenanceMeta).where(MaintenanceMeta.key == key))
        row = result.scalar_one_or_none()
        if row:
            row.value = value
            row.updated_at = datetime.utcnow()
        else:
            session.add(MaintenanceMeta(key=key, value=value, updated_at=datetime.utcnow()))
        await session.commit()
