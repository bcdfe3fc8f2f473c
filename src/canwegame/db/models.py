"""SQLAlchemy ORM models — single source of truth for the database schema.

Learn: Declarative ORM mapping with SQLAlchemy 2.0 style (Mapped[] + mapped_column).
Each class = one table. Alembic migrations mirror what is declared here.

Key concepts:
- The uniqueness rules live in the database (unique indexes, composite
  primary key), not just in service code. Two requests racing past a
  service-level check still cannot both insert.
- A friendship is stored once, as (low_id, high_id) with low_id < high_id.
  The CHECK constraint rejects any row written in the other order.
- Schedules belong to a user and go away with it (ON DELETE CASCADE).
  Friendships do not: the RESTRICT foreign keys make deleting a user with
  friends fail until the friendships are removed.
"""

from datetime import datetime, time, timezone
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    Time,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """A registered account.

    Username matching is exact and case-sensitive ("alice" != "Alice").
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(
        String(32), unique=True, index=True, nullable=False
    )
    email: Mapped[str] = mapped_column(
        String(320), unique=True, index=True, nullable=False
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )

    # Relationships
    schedules: Mapped[list["Schedule"]] = relationship(
        back_populates="user", passive_deletes=True
    )


class Schedule(Base):
    """A recurring availability window: which days, from when to when.

    Learn: username is a copy of the owner's username taken when the
    schedule was created or last updated. It is for display only and is
    not kept in sync if the owner renames themselves later.
    """

    __tablename__ = "schedules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    username: Mapped[str] = mapped_column(String(32), nullable=False)
    game_title: Mapped[str] = mapped_column(String(200), nullable=False)
    days_of_week: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    is_weekly: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )

    # Relationships
    user: Mapped["User"] = relationship(back_populates="schedules")


class Friendship(Base):
    """A symmetric friendship between two users, stored in canonical order.

    The pair itself is the primary key, so (1, 2) can exist only once and
    (2, 1) can never be written at all.
    """

    __tablename__ = "friendships"
    __table_args__ = (
        CheckConstraint("low_id < high_id", name="ck_friendships_canonical_order"),
    )

    low_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="RESTRICT"), primary_key=True
    )
    high_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="RESTRICT"),
        primary_key=True,
        index=True,
    )
    established_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
