from __future__ import annotations
"""Client routes."""
from typing import List, Optional

from fastapi import APIRouter, status
from pydantic import EmailStr

from fintrack.api.deps import CurrentActor, Database
from fintrack.api.schemas import CamelModel
from fintrack.services.clients import ClientService


router = APIRouter(prefix="/clients", tags=["clients"])


class ClientCreate(CamelModel):
    name: str
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    is_active: bool = True


class ClientUpdate(CamelModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    is_active: Optional[bool] = None


class ClientResponse(CamelModel):
    id: int
    name: str
    email: Optional[str]
    phone: Optional[str]
    address: Optional[str]
    is_active: bool


@router.get("", response_model=List[ClientResponse])
async def list_clients(actor: CurrentActor, db: Database):
    return await ClientService(db).list_clients()


@router.post("", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
async def create_client(data: ClientCreate, actor: CurrentActor, db: Database):
    return await ClientService(db).create(actor, data.model_dump())


@router.put("/{client_id}", response_model=ClientResponse)
async def update_client(client_id: int, data: ClientUpdate, actor: CurrentActor, db: Database):
    changes = data.model_dump(exclude_unset=True)
    if changes.get("name") is None:
        changes.pop("name", None)
    if changes.get("is_active") is None:
        changes.pop("is_active", None)
    return await ClientService(db).update(actor, client_id, changes)
