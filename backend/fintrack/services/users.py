from __future__ import annotations
"""Login identities, application roles and the per-request Actor."""
import secrets
from datetime import datetime, timezone
from typing import List, Optional, Tuple
import logging

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from fintrack.core.errors import (
    AuthenticationRequired,
    NotFound,
    PermissionDenied,
    ValidationFailed,
)
from fintrack.core.permissions import Action, Actor, Role
from fintrack.core.security import get_password_hash, verify_password
from fintrack.models.user import AppUser, User
from fintrack.services.audit import AuditService

logger = logging.getLogger(__name__)


class UserService:
    """
    Manages users and their roles.
    The first AppUser in an empty system is created as admin.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    # ==================== IDENTITY ====================

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(
            select(User)
            .options(selectinload(User.app_user))
            .where(func.lower(User.email) == email.lower())
        )
        return result.scalar_one_or_none()

    async def get_user(self, user_id: int) -> Optional[User]:
        result = await self.db.execute(
            select(User)
            .options(selectinload(User.app_user))
            .where(User.id == user_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def register(self, email: str, name: str, password: str) -> User:
        if await self.get_by_email(email):
            raise ValidationFailed("Email already registered")
        user = await self._create_identity(email, name, password)
        await self.ensure_app_user(user)
        await self.db.commit()
        return user

    async def authenticate(self, email: str, password: str) -> User:
        user = await self.get_by_email(email)
        if not user or not verify_password(password, user.hashed_password):
            raise AuthenticationRequired("Incorrect email or password")

        app_user = await self.ensure_app_user(user)
        if not app_user.is_active:
            raise PermissionDenied("Account is deactivated")

        user.last_login_at = datetime.now(timezone.utc)
        await self.db.commit()
        return user

    async def change_password(self, user_id: int, current_password: str, new_password: str) -> None:
        user = await self.get_user(user_id)
        if not user:
            raise NotFound("User not found")
        if not verify_password(current_password, user.hashed_password):
            raise ValidationFailed("Current password is incorrect")
        user.hashed_password = get_password_hash(new_password)
        await self.db.commit()

    async def _create_identity(self, email: str, name: str, password: str) -> User:
        user = User(email=email.lower(), name=name, hashed_password=get_password_hash(password))
        self.db.add(user)
        await self.db.flush()
        return user

    # ==================== ROLES ====================

    async def ensure_app_user(self, user: User, role: Optional[Role] = None) -> AppUser:
        """Return the user's AppUser, creating it if missing."""
        result = await self.db.execute(select(AppUser).where(AppUser.user_id == user.id))
        app_user = result.scalar_one_or_none()
        if app_user:
            return app_user

        existing = await self.db.scalar(select(func.count()).select_from(AppUser))
        if not existing:
            role = Role.ADMIN
            logger.info(f"First user {user.email} promoted to admin")

        app_user = AppUser(user_id=user.id, role=(role or Role.DATA_ENTRY).value)
        self.db.add(app_user)
        await self.db.flush()
        return app_user

    async def get_actor(self, user_id: int) -> Actor:
        """Resolve the request Actor for an authenticated user id."""
        user = await self.get_user(user_id)
        if not user:
            raise AuthenticationRequired("User not found")

        app_user = user.app_user
        if app_user is None:
            app_user = await self.ensure_app_user(user)
            await self.db.commit()
        if not app_user.is_active:
            raise PermissionDenied("Account is deactivated")

        return Actor(user_id=user.id, email=user.email, role=Role(app_user.role))

    # ==================== ADMIN ====================

    async def list_users(self, actor: Actor) -> List[AppUser]:
        actor.require(Action.USER_MANAGE)
        result = await self.db.execute(
            select(AppUser).options(selectinload(AppUser.user)).order_by(AppUser.id)
        )
        return list(result.scalars().all())

    async def get_app_user(self, app_user_id: int) -> AppUser:
        result = await self.db.execute(
            select(AppUser)
            .options(selectinload(AppUser.user))
            .where(AppUser.id == app_user_id)
            .execution_options(populate_existing=True)
        )
        app_user = result.scalar_one_or_none()
        if not app_user:
            raise NotFound("User not found")
        return app_user

    async def create_user(
        self,
        actor: Actor,
        email: str,
        name: str,
        role: Role,
        password: Optional[str] = None
    ) -> Tuple[AppUser, Optional[str]]:
        """
        Create a login with a role.
        Returns the AppUser and the generated password when none was given.
        """
        actor.require(Action.USER_MANAGE)
        if await self.get_by_email(email):
            raise ValidationFailed("Email already registered")

        generated = None
        if not password:
            generated = secrets.token_urlsafe(12)
            password = generated

        user = await self._create_identity(email, name, password)
        app_user = await self.ensure_app_user(user, role=Role(role))
        self.audit.record(actor, "create", "app_user", app_user.id, {"role": app_user.role})
        await self.db.commit()
        return await self.get_app_user(app_user.id), generated

    async def update_role(self, actor: Actor, app_user_id: int, role: Role) -> AppUser:
        actor.require(Action.USER_MANAGE)
        app_user = await self.get_app_user(app_user_id)
        role = Role(role)

        if app_user.role == Role.ADMIN.value and role != Role.ADMIN:
            await self._ensure_other_admin(app_user)

        previous = app_user.role
        app_user.role = role.value
        self.audit.record(actor, "update_role", "app_user", app_user.id, {"from": previous, "to": role.value})
        await self.db.commit()
        logger.info(f"User {app_user.user_id} role changed {previous} -> {role.value} by {actor.user_id}")
        return await self.get_app_user(app_user.id)

    async def delete_user(self, actor: Actor, app_user_id: int) -> None:
        """Remove the login and its role. Transactions keep the creator id."""
        actor.require(Action.USER_MANAGE)
        app_user = await self.get_app_user(app_user_id)
        if app_user.user_id == actor.user_id:
            raise ValidationFailed("You cannot delete your own account")
        if app_user.role == Role.ADMIN.value:
            await self._ensure_other_admin(app_user)

        self.audit.record(actor, "delete", "app_user", app_user.id, {"email": app_user.user.email})
        await self.db.execute(delete(AppUser).where(AppUser.id == app_user.id))
        await self.db.execute(delete(User).where(User.id == app_user.user_id))
        await self.db.commit()

    async def _ensure_other_admin(self, app_user: AppUser) -> None:
        others = await self.db.scalar(
            select(func.count()).select_from(AppUser).where(
                AppUser.role == Role.ADMIN.value,
                AppUser.is_active.is_(True),
                AppUser.id != app_user.id,
            )
        )
        if not others:
            raise ValidationFailed("At least one active admin is required")
