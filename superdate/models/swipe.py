from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlalchemy import CheckConstraint, Column, DateTime, UniqueConstraint
from sqlalchemy.types import Enum as SAEnum
from sqlmodel import Field, SQLModel

from superdate.core.clock import utc_now


class SwipeAction(str, Enum):
    like = "like"
    pass_ = "pass"


class Swipe(SQLModel, table=True):
    __tablename__ = "swipe"
    __table_args__ = (
        UniqueConstraint("swiper_id", "target_id", name="uq_swipe_swiper_target"),
        CheckConstraint("swiper_id <> target_id", name="ck_swipe_not_self"),
    )

    id: int | None = Field(default=None, primary_key=True)
    swiper_id: str = Field(foreign_key="user.id", index=True, nullable=False)
    target_id: str = Field(foreign_key="user.id", index=True, nullable=False)
    action: SwipeAction = Field(
        sa_column=Column(
            SAEnum(
                SwipeAction,
                name="swipeaction",
                values_callable=lambda members: [m.value for m in members],
            ),
            nullable=False,
        ),
    )
    recorded_at: datetime = Field(
        default_factory=utc_now,
        sa_type=DateTime(timezone=True),
        nullable=False,
    )


class SwipeOut(SQLModel):
    swiper_id: str
    target_id: str
    action: SwipeAction
    recorded_at: datetime
