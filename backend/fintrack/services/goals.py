from __future__ import annotations
"""Goals and their progress against approved transactions."""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fintrack.core.errors import ValidationFailed
from fintrack.core.permissions import Action, Actor
from fintrack.models.goal import Goal, GoalType
from fintrack.models.transaction import TransactionType
from fintrack.services.dashboard import DashboardService


@dataclass
class GoalProgress:
    goal: Goal
    actual_amount: Decimal

    @property
    def progress(self) -> float:
        target = Decimal(self.goal.target_amount)
        if target <= 0:
            return 0.0
        return round(float(self.actual_amount / target * 100), 1)


class GoalService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.dashboard = DashboardService(db)

    async def list_goals(self) -> List[GoalProgress]:
        result = await self.db.execute(select(Goal).order_by(Goal.start_date.desc(), Goal.id))
        progress = []
        for goal in result.scalars().all():
            tx_type = TransactionType.INCOME if goal.type == GoalType.REVENUE.value else TransactionType.EXPENSE
            actual = await self.dashboard.actual_for_period(tx_type, goal.start_date, goal.end_date)
            progress.append(GoalProgress(goal=goal, actual_amount=actual))
        return progress

    async def create(self, actor: Actor, data: Dict[str, Any]) -> Goal:
        actor.require(Action.GOAL_CREATE)
        if data["end_date"] < data["start_date"]:
            raise ValidationFailed("endDate cannot be before startDate")
        goal = Goal(**data)
        self.db.add(goal)
        await self.db.commit()
        await self.db.refresh(goal)
        return goal
