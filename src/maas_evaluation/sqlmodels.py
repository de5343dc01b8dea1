"""SQLAlchemy models for local SQLite storage.

Stores the versioned weight tables, evaluation snapshots computed on a
user's behalf, and per-day profile-view counters. The scoring core never
touches these; the store hands it plain pydantic records.
"""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import JSON, Boolean, Date, DateTime, Float, Index, Integer, String, Text, UniqueConstraint, text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class WeightTableRow(Base):
    """One gender's weight table. At most one row per gender is active."""

    __tablename__ = "weight_tables"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    gender: Mapped[str] = mapped_column(String(10), nullable=False)
    categories: Mapped[dict] = mapped_column(JSON, nullable=False)
    combinations: Mapped[dict] = mapped_column(JSON, nullable=False)
    description: Mapped[str] = mapped_column(Text, default="")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    activated_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    __table_args__ = (
        UniqueConstraint("name", "gender", name="uq_weight_tables_name_gender"),
        Index(
            "uq_weight_tables_active_gender",
            "gender",
            unique=True,
            sqlite_where=text("is_active = 1"),
        ),
    )


class EvaluationSnapshot(Base):
    """A computed evaluation stored for a user."""

    __tablename__ = "evaluation_snapshots"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_key: Mapped[str] = mapped_column(String(200), nullable=False)
    gender: Mapped[str] = mapped_column(String(10), nullable=False)
    aggregate: Mapped[float] = mapped_column(Float, nullable=False)
    category_scores: Mapped[dict] = mapped_column(JSON, nullable=False)
    percentile: Mapped[float] = mapped_column(Float, nullable=False)
    tier: Mapped[str] = mapped_column(String(20), nullable=False)
    grade_code: Mapped[str] = mapped_column(String(4), nullable=False)
    weight_table: Mapped[str] = mapped_column(String(100), nullable=False)
    combination: Mapped[str] = mapped_column(String(50), nullable=False, default="default")
    computed_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        Index("ix_evaluation_user_computed", "user_key", "computed_at"),
    )


class DailyViewCount(Base):
    """Profile views one user made on one day."""

    __tablename__ = "daily_view_counts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_key: Mapped[str] = mapped_column(String(200), nullable=False)
    day: Mapped[date] = mapped_column(Date, nullable=False)
    count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("user_key", "day", name="uq_daily_view_user_day"),
        Index("ix_daily_view_day", "day"),
    )


class MaintenanceMeta(Base):
    """Track when seeding and pruning last happened."""

    __tablename__ = "maintenance_meta"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    key: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
