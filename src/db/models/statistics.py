"""
Practice Statistics Models.

SQLAlchemy models for per-learner item statistics:
- Attempt counters per (profile, game, item)
- Applied schema migrations

success_rate is derived at read time and deliberately has no column.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Integer, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class ItemStatisticRecord(Base):
    """Attempt counters for one item of one game for one learner profile."""

    __tablename__ = "item_statistics"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    profile_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    game_id: Mapped[str] = mapped_column(Text, nullable=False)
    symbol: Mapped[str] = mapped_column(Text, nullable=False)
    variant: Mapped[str] = mapped_column(Text, nullable=False)

    total_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    correct_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    incorrect_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_attempt_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        UniqueConstraint("profile_id", "game_id", "symbol", "variant", name="uq_profile_game_item"),
        CheckConstraint(
            "correct_count + incorrect_count = total_attempts",
            name="ck_item_statistics_counts",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<ItemStatisticRecord profile={self.profile_id} game={self.game_id} "
            f"item={self.symbol}-{self.variant} attempts={self.total_attempts}>"
        )


class SchemaVersion(Base):
    """One row per applied schema migration."""

    __tablename__ = "schema_version"

    version: Mapped[int] = mapped_column(Integer, primary_key=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    applied_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=func.now())
