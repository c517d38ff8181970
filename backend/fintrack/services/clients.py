from __future__ import annotations
"""Client management."""
from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fintrack.core.errors import NotFound
from fintrack.core.permissions import Action, Actor
from fintrack.models.client import Client


class ClientService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_clients(self) -> List[Client]:
        result = await self.db.execute(select(Client).order_by(Client.name))
        return list(result.scalars().all())

    async def create(self, actor: Actor, data: Dict[str, Any]) -> Client:
        actor.require(Action.CLIENT_CREATE)
        client = Client(**data)
        self.db.add(client)
        await self.db.commit()
        await self.db.refresh(client)
        return client

    async def update(self, actor: Actor, client_id: int, changes: Dict[str, Any]) -> Client:
        actor.require(Action.CLIENT_UPDATE)
        client = await self.db.get(Client, client_id)
        if not client:
            raise NotFound("Client not found")
        for field, value in changes.items():
            setattr(client, field, value)
        await self.db.commit()
        await self.db.refresh(client)
        return client
