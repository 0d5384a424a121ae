# app/api/v1/endpoints/auth.py
from fastapi import APIRouter, Depends, Request
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db
from core.exceptions import AuthenticationError
from core.permissions import get_current_identity, oauth2_scheme
from schemas.auth import AuthUser, IdentityRegister, MessageResponse, SignInRequest, SignInResult, Token
from services.auth_service import AuthService

router = APIRouter()


def get_auth_service(request: Request, db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db, getattr(request.app.state, "auth_events", None))


@router.post("/register", response_model=AuthUser, status_code=201)
async def register(data: IdentityRegister, service: AuthService = Depends(get_auth_service)):
    """Register a new identity"""
    return await service.register_identity(data)


@router.post("/sign-in", response_model=SignInResult)
async def sign_in(data: SignInRequest, service: AuthService = Depends(get_auth_service)):
    """Run the sign-in wizard and return a bearer token"""
    return await service.sign_in(data.principal, data.credential)


@router.post("/token", response_model=Token)
async def token(
        form: OAuth2PasswordRequestForm = Depends(),
        service: AuthService = Depends(get_auth_service)
):
    """OAuth2 password flow for the interactive docs"""
    result = await service.sign_in(form.username, form.password)
    return result.token


@router.post("/sign-out", response_model=MessageResponse)
async def sign_out(
        token: str = Depends(oauth2_scheme),
        service: AuthService = Depends(get_auth_service)
):
    """Revoke the current token"""
    if not token:
        raise AuthenticationError("Not authenticated")
    await service.sign_out(token)
    return MessageResponse(message="Signed out")


@router.get("/me", response_model=AuthUser)
async def me(
        principal: str = Depends(get_current_identity),
        service: AuthService = Depends(get_auth_service)
):
    """Current signed-in user"""
    return await service.get_user(principal)
