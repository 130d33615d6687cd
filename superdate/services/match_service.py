from __future__ import annotations

from typing import cast

from sqlalchemy import desc, func, or_
from sqlalchemy.sql.schema import Table
from sqlmodel import Session, select

from superdate.models.match import Match, MatchListItem


def list_matches_for_user(
    session: Session,
    user_id: str,
    *,
    limit: int,
    offset: int,
) -> tuple[list[MatchListItem], int]:
    match_table = cast(Table, Match.__table__)  # type: ignore[attr-defined]
    involves_user = or_(
        match_table.c.low_id == user_id,
        match_table.c.high_id == user_id,
    )

    count_statement = select(func.count()).select_from(match_table).where(involves_user)
    total_count = int(session.exec(count_statement).one())

    statement = (
        select(Match)
        .where(involves_user)
        .order_by(desc(match_table.c.created_at), desc(match_table.c.id))
        .offset(offset)
        .limit(limit)
    )
    items = [
        MatchListItem(
            id=cast(int, match.id),
            other_user_id=match.other(user_id),
            created_at=match.created_at,
        )
        for match in session.exec(statement).all()
    ]
    return items, total_count
