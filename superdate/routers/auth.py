import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session, select

from superdate.core.db import get_session
from superdate.core.security import (
    create_access_token,
    hash_pin,
    verify_and_upgrade_pin,
)
from superdate.models.user import User
from superdate.schemas.auth import (
    LoginRequest,
    RegisterRequest,
    RegisterResponse,
    TokenResponse,
)

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)

SessionDep = Annotated[Session, Depends(get_session)]


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
)
def register(payload: RegisterRequest, session: SessionDep) -> RegisterResponse:
    statement = select(User).where(User.phone == payload.phone)
    exists = session.exec(statement).first()
    if exists:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User already exists",
        )

    user = User(phone=payload.phone, pin_hash=hash_pin(payload.pin))
    session.add(user)
    session.commit()
    session.refresh(user)
    logger.info("registered user %s", user.id)
    return RegisterResponse(user_id=user.id)


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, session: SessionDep) -> TokenResponse:
    statement = select(User).where(User.phone == payload.phone)
    user = session.exec(statement).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    ok, upgraded_hash = verify_and_upgrade_pin(payload.pin, user.pin_hash)
    if not ok:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )
    if upgraded_hash:
        user.pin_hash = upgraded_hash
        session.add(user)
        session.commit()
        logger.info("rehashed legacy PIN for user %s", user.id)
    return TokenResponse(access_token=create_access_token(user.id))
