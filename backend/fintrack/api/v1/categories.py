from __future__ import annotations
"""Category routes."""
from typing import List, Optional

from fastapi import APIRouter, Response, status

from fintrack.api.deps import CurrentActor, Database
from fintrack.api.schemas import CamelModel
from fintrack.services.categories import CategoryService


router = APIRouter(prefix="/categories", tags=["categories"])


class CategoryCreate(CamelModel):
    name: str
    is_enabled: bool = True
    is_system: bool = False


class CategoryUpdate(CamelModel):
    name: Optional[str] = None
    is_enabled: Optional[bool] = None
    is_system: Optional[bool] = None


class CategoryResponse(CamelModel):
    id: int
    name: str
    is_enabled: bool
    is_system: bool


@router.get("", response_model=List[CategoryResponse])
async def list_categories(actor: CurrentActor, db: Database):
    return await CategoryService(db).list_categories()


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(data: CategoryCreate, actor: CurrentActor, db: Database):
    return await CategoryService(db).create(actor, data.model_dump())


@router.put("/{category_id}", response_model=CategoryResponse)
async def update_category(category_id: int, data: CategoryUpdate, actor: CurrentActor, db: Database):
    return await CategoryService(db).update(actor, category_id, data.model_dump(exclude_unset=True, exclude_none=True))


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(category_id: int, actor: CurrentActor, db: Database):
    await CategoryService(db).delete(actor, category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
