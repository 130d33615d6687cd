from __future__ import annotations

from typing import Annotated

import jwt
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session, SQLModel

from superdate.core.db import get_session
from superdate.core.security import decode_token
from superdate.models.profile import ProfileIn, ProfileOut
from superdate.models.user import User
from superdate.schemas.auth import UserRead
from superdate.services.profile_service import get_profile, upsert_profile

router = APIRouter(prefix="/me", tags=["me"])
bearer = HTTPBearer()

SessionDep = Annotated[Session, Depends(get_session)]
CredentialsDep = Annotated[HTTPAuthorizationCredentials, Depends(bearer)]


def get_current_user(creds: CredentialsDep, session: SessionDep) -> User:
    try:
        payload = decode_token(creds.credentials)
    except jwt.PyJWTError as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        ) from err

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        )

    user = session.get(User, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return user


CurrentUserDep = Annotated[User, Depends(get_current_user)]


class MeOut(SQLModel):
    user: UserRead
    profile: ProfileOut | None = None


@router.get("", response_model=MeOut)
def read_me(current: CurrentUserDep, session: SessionDep) -> MeOut:
    profile = get_profile(session, current.id)
    return MeOut(
        user=UserRead.model_validate(current, from_attributes=True),
        profile=(
            ProfileOut.model_validate(profile, from_attributes=True)
            if profile is not None
            else None
        ),
    )


@router.put("/profile", response_model=ProfileOut)
def put_profile(
    payload: ProfileIn,
    current: CurrentUserDep,
    session: SessionDep,
) -> ProfileOut:
    profile = upsert_profile(session, current.id, payload)
    return ProfileOut.model_validate(profile, from_attributes=True)
