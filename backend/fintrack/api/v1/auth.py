from __future__ import annotations
"""Authentication routes - register, login, logout, me."""
from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Response, status
from pydantic import EmailStr, Field

from fintrack.api.deps import CurrentActor, Database
from fintrack.api.schemas import CamelModel, MessageResponse
from fintrack.core.config import settings
from fintrack.core.errors import NotFound, PermissionDenied
from fintrack.core.security import create_access_token
from fintrack.models.user import User
from fintrack.services.users import UserService


router = APIRouter(prefix="/auth", tags=["auth"])


# Schemas
class RegisterRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=6)
    name: str = ""


class LoginRequest(CamelModel):
    email: EmailStr
    password: str


class ChangePasswordRequest(CamelModel):
    current_password: str
    new_password: str = Field(min_length=6)


class MeResponse(CamelModel):
    id: int
    email: str
    name: str
    role: str
    is_active: bool
    access_token: Optional[str] = None


def _issue_session(response: Response, user: User) -> str:
    """Sign a session token and set it as an HTTP-only cookie."""
    expires = timedelta(minutes=settings.jwt_expire_minutes)
    token = create_access_token(data={"sub": str(user.id)}, expires_delta=expires)
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=int(expires.total_seconds()),
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )
    return token


def _me(user: User, token: Optional[str] = None) -> MeResponse:
    return MeResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        role=user.app_user.role,
        is_active=user.app_user.is_active,
        access_token=token,
    )


@router.post("/register", response_model=MeResponse, status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest, response: Response, db: Database):
    """Self sign-up. The first user of an empty system becomes admin."""
    if not settings.allow_registration:
        raise PermissionDenied("Registration is disabled")

    service = UserService(db)
    user = await service.register(request.email, request.name, request.password)
    user = await service.get_user(user.id)
    token = _issue_session(response, user)
    return _me(user, token)


@router.post("/login", response_model=MeResponse)
async def login(request: LoginRequest, response: Response, db: Database):
    """Login and receive the session cookie."""
    service = UserService(db)
    user = await service.authenticate(request.email, request.password)
    user = await service.get_user(user.id)
    token = _issue_session(response, user)
    return _me(user, token)


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response):
    response.delete_cookie(settings.session_cookie_name)
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=MeResponse)
async def get_me(actor: CurrentActor, db: Database):
    """Get the current user and role."""
    user = await UserService(db).get_user(actor.user_id)
    if not user:
        raise NotFound("User not found")
    return _me(user)


@router.post("/change-password", response_model=MessageResponse)
async def change_password(request: ChangePasswordRequest, actor: CurrentActor, db: Database):
    await UserService(db).change_password(actor.user_id, request.current_password, request.new_password)
    return MessageResponse(message="Password updated")
