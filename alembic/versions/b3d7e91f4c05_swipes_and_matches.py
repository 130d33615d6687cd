"""swipes and matches

Revision ID: b3d7e91f4c05
Revises: 6a1f0c2d9e34
Create Date: 2026-09-04 16:40:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "b3d7e91f4c05"
down_revision: Union[str, Sequence[str], None] = "6a1f0c2d9e34"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "swipe",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("swiper_id", sa.String(), nullable=False),
        sa.Column("target_id", sa.String(), nullable=False),
        sa.Column(
            "action",
            sa.Enum("like", "pass", name="swipeaction"),
            nullable=False,
        ),
        sa.Column("recorded_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("swiper_id <> target_id", name="ck_swipe_not_self"),
        sa.ForeignKeyConstraint(["swiper_id"], ["user.id"]),
        sa.ForeignKeyConstraint(["target_id"], ["user.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "swiper_id",
            "target_id",
            name="uq_swipe_swiper_target",
        ),
    )
    op.create_index("ix_swipe_swiper_id", "swipe", ["swiper_id"], unique=False)
    op.create_index("ix_swipe_target_id", "swipe", ["target_id"], unique=False)

    op.create_table(
        "match",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("low_id", sa.String(), nullable=False),
        sa.Column("high_id", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("low_id < high_id", name="ck_match_low_lt_high"),
        sa.ForeignKeyConstraint(["low_id"], ["user.id"]),
        sa.ForeignKeyConstraint(["high_id"], ["user.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("low_id", "high_id", name="uq_match_low_high"),
    )
    op.create_index("ix_match_low_id", "match", ["low_id"], unique=False)
    op.create_index("ix_match_high_id", "match", ["high_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_match_high_id", table_name="match")
    op.drop_index("ix_match_low_id", table_name="match")
    op.drop_table("match")
    op.drop_index("ix_swipe_target_id", table_name="swipe")
    op.drop_index("ix_swipe_swiper_id", table_name="swipe")
    op.drop_table("swipe")

    bind = op.get_bind()
    action_enum = sa.Enum("like", "pass", name="swipeaction")
    action_enum.drop(bind, checkfirst=True)
