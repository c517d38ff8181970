from __future__ import annotations
"""Audit trail writer."""
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from fintrack.core.permissions import Actor
from fintrack.models.audit_log import AuditLog


class AuditService:
    """Adds audit rows to the caller's session. The caller commits."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def record(
        self,
        actor: Actor,
        action: str,
        entity_type: str,
        entity_id: int,
        details: Optional[Dict[str, Any]] = None
    ) -> AuditLog:
        entry = AuditLog(
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            user_id=actor.user_id,
            details=details,
        )
        self.db.add(entry)
        return entry
