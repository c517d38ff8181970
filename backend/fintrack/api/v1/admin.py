"""Admin API Routes - User and role management."""
from __future__ import annotations

from typing import List, Literal, Optional

from fastapi import APIRouter, Response, status
from pydantic import EmailStr, Field

from fintrack.api.deps import CurrentActor, Database
from fintrack.api.schemas import CamelModel
from fintrack.models.user import AppUser
from fintrack.services.users import UserService

router = APIRouter(prefix="/admin", tags=["admin"])

RoleName = Literal["admin", "hr", "manager", "data_entry"]


# ============== Request / Response Models ==============

class AdminUserCreate(CamelModel):
    email: EmailStr
    name: str = ""
    role: RoleName = "data_entry"
    password: Optional[str] = Field(default=None, min_length=6)


class RoleUpdate(CamelModel):
    role: RoleName


class AdminUserResponse(CamelModel):
    """Admin user response."""
    id: int
    user_id: int
    email: str
    name: str
    role: str
    is_active: bool
    generated_password: Optional[str] = None


def _to_response(app_user: AppUser, generated_password: Optional[str] = None) -> AdminUserResponse:
    return AdminUserResponse(
        id=app_user.id,
        user_id=app_user.user_id,
        email=app_user.user.email,
        name=app_user.user.name,
        role=app_user.role,
        is_active=app_user.is_active,
        generated_password=generated_password,
    )


# ============== Endpoints ==============

@router.get("/users", response_model=List[AdminUserResponse])
async def list_users(actor: CurrentActor, db: Database):
    """List all users with their roles."""
    return [_to_response(app_user) for app_user in await UserService(db).list_users(actor)]


@router.post("/users", response_model=AdminUserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(data: AdminUserCreate, actor: CurrentActor, db: Database):
    """
    Create a login with a role.
    When no password is given one is generated and returned once.
    """
    app_user, generated = await UserService(db).create_user(
        actor, data.email, data.name, data.role, data.password
    )
    return _to_response(app_user, generated)


@router.patch("/users/{app_user_id}/role", response_model=AdminUserResponse)
async def update_user_role(app_user_id: int, data: RoleUpdate, actor: CurrentActor, db: Database):
    return _to_response(await UserService(db).update_role(actor, app_user_id, data.role))


@router.delete("/users/{app_user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(app_user_id: int, actor: CurrentActor, db: Database):
    await UserService(db).delete_user(actor, app_user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
