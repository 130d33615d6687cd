from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlmodel import Session

from superdate.core.config import settings
from superdate.core.db import get_session
from superdate.models.profile import CandidateOut
from superdate.models.user import User
from superdate.routers.me import get_current_user
from superdate.services.discovery_service import discover_profiles, search_profiles

router = APIRouter(tags=["discovery"])

SessionDep = Annotated[Session, Depends(get_session)]
CurrentUserDep = Annotated[User, Depends(get_current_user)]


@router.get("/discovery", response_model=list[CandidateOut])
def discovery_feed(
    current: CurrentUserDep,
    session: SessionDep,
    response: Response,
) -> list[CandidateOut]:
    profiles = discover_profiles(
        session,
        current.id,
        limit=settings.discovery_limit,
    )
    response.headers["X-Total-Count"] = str(len(profiles))
    return profiles


@router.get("/search", response_model=list[CandidateOut])
def search(
    current: CurrentUserDep,
    session: SessionDep,
    response: Response,
    gender: str | None = None,
    religion: str | None = None,
    city: str | None = None,
    min_age: Annotated[int | None, Query(alias="minAge", ge=0, le=150)] = None,
    max_age: Annotated[int | None, Query(alias="maxAge", ge=0, le=150)] = None,
) -> list[CandidateOut]:
    if min_age is not None and max_age is not None and min_age > max_age:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="minAge must not exceed maxAge",
        )

    profiles = search_profiles(
        session,
        current.id,
        gender=gender,
        religion=religion,
        city=city,
        min_age=min_age,
        max_age=max_age,
        limit=settings.search_limit,
    )
    response.headers["X-Total-Count"] = str(len(profiles))
    return profiles
