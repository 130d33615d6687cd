from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, UniqueConstraint
from sqlmodel import Field, SQLModel

from superdate.core.clock import utc_now


def canonical_pair(a_id: str, b_id: str) -> tuple[str, str]:
    """Order two principal ids as (low, high) by string comparison."""
    return (a_id, b_id) if a_id < b_id else (b_id, a_id)


class Match(SQLModel, table=True):
    __tablename__ = "match"
    __table_args__ = (
        UniqueConstraint("low_id", "high_id", name="uq_match_low_high"),
        CheckConstraint("low_id < high_id", name="ck_match_low_lt_high"),
    )

    id: int | None = Field(default=None, primary_key=True)
    low_id: str = Field(foreign_key="user.id", nullable=False, index=True)
    high_id: str = Field(foreign_key="user.id", nullable=False, index=True)
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_type=DateTime(timezone=True),
        nullable=False,
    )

    def other(self, user_id: str) -> str:
        return self.high_id if self.low_id == user_id else self.low_id


class MatchOut(SQLModel):
    id: int
    low_id: str
    high_id: str
    created_at: datetime


class MatchListItem(SQLModel):
    id: int
    other_user_id: str
    created_at: datetime
