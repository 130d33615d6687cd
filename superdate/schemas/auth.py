from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class RegisterRequest(BaseModel):
    phone: str = Field(min_length=5, max_length=32)
    pin: str = Field(min_length=4, max_length=64)


class LoginRequest(BaseModel):
    phone: str = Field(min_length=1, max_length=32)
    pin: str = Field(min_length=1, max_length=64)


class RegisterResponse(BaseModel):
    message: str = "User registered successfully"
    user_id: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: Literal["bearer"] = "bearer"


class UserRead(BaseModel):
    id: str
    phone: str
    email: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
