from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import field_validator
from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from superdate.core.clock import utc_now


class ProfileBase(SQLModel):
    first_name: str | None = None
    last_name: str | None = None
    birth_date: date | None = None
    country: str | None = None
    city: str | None = None
    gender: str | None = None
    religion: str | None = None
    hobbies: str | None = None
    bio: str | None = None


class Profile(ProfileBase, table=True):
    __tablename__ = "profile"

    id: int | None = Field(default=None, primary_key=True)
    user_id: str = Field(foreign_key="user.id", unique=True, index=True)
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_type=DateTime(timezone=True),
        nullable=False,
    )
    updated_at: datetime | None = Field(default=None, sa_type=DateTime(timezone=True))


class ProfileIn(ProfileBase):
    @field_validator("*", mode="before")
    @classmethod
    def blank_as_null(cls, value: Any) -> Any:
        # Empty form fields are stored as null, not "".
        if isinstance(value, str) and value == "":
            return None
        return value


class ProfileOut(ProfileBase):
    id: int
    user_id: str
    created_at: datetime
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class CandidateOut(ProfileBase):
    profile_id: int
    user_id: str
    age: int | None = None
    created_at: datetime
