from __future__ import annotations

from typing import Annotated, cast

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.engine import Engine
from sqlmodel import Session

from superdate.core.db import get_session
from superdate.core.errors import InvalidRequest, SwipeError, TargetNotFound
from superdate.models.match import MatchOut
from superdate.models.swipe import SwipeOut
from superdate.models.user import User
from superdate.routers.me import get_current_user
from superdate.schemas.swipe import SwipeRequest, SwipeResultOut
from superdate.services.swipe_service import record_swipe
from superdate.services.swipe_store import SqlUnitOfWork

router = APIRouter(prefix="/swipe", tags=["swipe"])

SessionDep = Annotated[Session, Depends(get_session)]
CurrentUserDep = Annotated[User, Depends(get_current_user)]


def get_unit_of_work(session: SessionDep) -> SqlUnitOfWork:
    return SqlUnitOfWork(cast(Engine, session.get_bind()))


UnitOfWorkDep = Annotated[SqlUnitOfWork, Depends(get_unit_of_work)]


@router.post("", response_model=SwipeResultOut)
def swipe(
    payload: SwipeRequest,
    current: CurrentUserDep,
    uow: UnitOfWorkDep,
) -> SwipeResultOut:
    """Like or pass on another user; a reciprocal like creates the match."""
    try:
        result = record_swipe(
            actor=current.id,
            target=payload.target_user_id,
            action=payload.action,
            uow=uow,
        )
    except InvalidRequest as err:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=err.code,
        ) from err
    except TargetNotFound as err:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="target user not found",
        ) from err
    except SwipeError as err:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="swipe not recorded, retry",
        ) from err

    return SwipeResultOut(
        swipe=SwipeOut.model_validate(result.swipe, from_attributes=True),
        is_mutual=result.is_mutual,
        match=(
            MatchOut.model_validate(result.match, from_attributes=True)
            if result.match is not None
            else None
        ),
        match_created=result.match_created,
    )
