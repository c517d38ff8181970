from __future__ import annotations
"""Category management."""
from typing import Any, Dict, List
import logging

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from fintrack.core.errors import NotFound, ValidationFailed
from fintrack.core.permissions import Action, Actor
from fintrack.models.category import Category
from fintrack.models.transaction import Transaction

logger = logging.getLogger(__name__)


class CategoryService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_categories(self) -> List[Category]:
        result = await self.db.execute(select(Category).order_by(Category.name))
        return list(result.scalars().all())

    async def get(self, category_id: int) -> Category:
        category = await self.db.get(Category, category_id)
        if not category:
            raise NotFound("Category not found")
        return category

    async def create(self, actor: Actor, data: Dict[str, Any]) -> Category:
        actor.require(Action.CATEGORY_MANAGE)
        category = Category(**data)
        self.db.add(category)
        await self.db.commit()
        await self.db.refresh(category)
        return category

    async def update(self, actor: Actor, category_id: int, changes: Dict[str, Any]) -> Category:
        actor.require(Action.CATEGORY_MANAGE)
        category = await self.get(category_id)

        if category.is_system:
            if changes.get("is_enabled") is False:
                raise ValidationFailed("System categories cannot be disabled")
            if changes.get("is_system") is False:
                raise ValidationFailed("System flag cannot be removed")

        for field, value in changes.items():
            setattr(category, field, value)
        await self.db.commit()
        await self.db.refresh(category)
        return category

    async def delete(self, actor: Actor, category_id: int) -> None:
        actor.require(Action.CATEGORY_MANAGE)
        category = await self.get(category_id)
        if category.is_system:
            raise ValidationFailed("System categories cannot be deleted")

        in_use = await self.db.scalar(
            select(exists().where(Transaction.category_id == category_id))
        )
        if in_use:
            raise ValidationFailed("Category is used by transactions; disable it instead")

        await self.db.delete(category)
        await self.db.commit()
        logger.info(f"Category {category_id} deleted by user {actor.user_id}")
