from __future__ import annotations
"""Goal routes - targets with progress from approved transactions."""
import datetime as dt
from decimal import Decimal
from typing import List, Literal, Optional

from fastapi import APIRouter, status
from pydantic import Field

from fintrack.api.deps import CurrentActor, Database
from fintrack.api.schemas import CamelModel, Money
from fintrack.services.goals import GoalProgress, GoalService


router = APIRouter(prefix="/goals", tags=["goals"])


class GoalCreate(CamelModel):
    type: Literal["revenue", "expense"]
    target_amount: Decimal = Field(gt=0)
    period: Literal["monthly", "quarterly"]
    start_date: dt.date
    end_date: dt.date


class GoalResponse(CamelModel):
    id: int
    type: str
    target_amount: Money
    period: str
    start_date: dt.date
    end_date: dt.date
    created_at: Optional[dt.datetime] = None
    actual_amount: Money = Decimal("0")
    progress: float = 0.0


def _to_response(item: GoalProgress) -> GoalResponse:
    goal = item.goal
    return GoalResponse(
        id=goal.id,
        type=goal.type,
        target_amount=goal.target_amount,
        period=goal.period,
        start_date=goal.start_date,
        end_date=goal.end_date,
        created_at=goal.created_at,
        actual_amount=item.actual_amount,
        progress=item.progress,
    )


@router.get("", response_model=List[GoalResponse])
async def list_goals(actor: CurrentActor, db: Database):
    return [_to_response(item) for item in await GoalService(db).list_goals()]


@router.post("", response_model=GoalResponse, status_code=status.HTTP_201_CREATED)
async def create_goal(data: GoalCreate, actor: CurrentActor, db: Database):
    goal = await GoalService(db).create(actor, data.model_dump())
    return _to_response(GoalProgress(goal=goal, actual_amount=Decimal("0")))
