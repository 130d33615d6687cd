from datetime import datetime
from uuid import uuid4

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from superdate.core.clock import utc_now


def new_principal_id() -> str:
    return str(uuid4())


class User(SQLModel, table=True):
    __tablename__ = "user"
    __table_args__ = (sa.UniqueConstraint("phone", name="uq_user_phone"),)

    id: str = Field(default_factory=new_principal_id, primary_key=True, max_length=36)
    phone: str = Field(index=True, max_length=32)
    email: str | None = Field(default=None, max_length=320)
    pin_hash: str
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_type=sa.DateTime(timezone=True),
        nullable=False,
    )
