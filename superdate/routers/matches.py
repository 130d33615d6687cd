from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response
from sqlmodel import Session

from superdate.core.db import get_session
from superdate.models.match import MatchListItem
from superdate.models.user import User
from superdate.routers.me import get_current_user
from superdate.services.match_service import list_matches_for_user

router = APIRouter(prefix="/matches", tags=["matches"])

SessionDep = Annotated[Session, Depends(get_session)]
CurrentUserDep = Annotated[User, Depends(get_current_user)]


@router.get("", response_model=list[MatchListItem])
def list_my_matches(
    current: CurrentUserDep,
    session: SessionDep,
    response: Response,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> list[MatchListItem]:
    items, total_count = list_matches_for_user(
        session=session,
        user_id=current.id,
        limit=limit,
        offset=offset,
    )
    response.headers["X-Total-Count"] = str(total_count)
    return items
