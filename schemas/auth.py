# app/schemas/auth.py
from pydantic import BaseModel, EmailStr, Field
from typing import List, Optional
from datetime import datetime
from enum import Enum


class SignInStep(str, Enum):
    REQUESTING_USER_CREDENTIAL = "requesting_user_credential"
    FINALIZING_CREDENTIAL = "finalizing_credential"
    SIGNING = "signing"
    FINALIZING_SESSION = "finalizing_session"
    RETRIEVING_USER = "retrieving_user"


class IdentityRegister(BaseModel):
    principal: Optional[str] = Field(None, min_length=3, max_length=100)
    display_name: str = Field(..., min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    credential: str = Field(..., min_length=8, max_length=72)


class SignInRequest(BaseModel):
    principal: str
    credential: str


class AuthUser(BaseModel):
    principal: str
    display_name: str
    email: Optional[str] = None
    created_at: datetime
    last_sign_in_at: Optional[datetime] = None
    is_admin: bool = False


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class SignInResult(BaseModel):
    token: Token
    user: AuthUser
    steps: List[SignInStep]


class MessageResponse(BaseModel):
    message: str
