from __future__ import annotations
"""Dashboard and report routes."""
from typing import List, Optional

from fastapi import APIRouter

from fintrack.api.deps import CurrentActor, Database
from fintrack.api.schemas import CamelModel, Money
from fintrack.services.dashboard import DashboardService


router = APIRouter(tags=["dashboard"])


class ExpenseLine(CamelModel):
    category: str
    amount: Money


class RevenueLine(CamelModel):
    service: str
    amount: Money


class DashboardStatsResponse(CamelModel):
    month: str
    total_available_funds: Money
    current_month_profit_loss: Money
    monthly_income: Money
    monthly_expense: Money
    od_limit_used: Money
    od_limit_remaining: Money
    top_expenses: List[ExpenseLine]
    revenue_by_service: List[RevenueLine]


class CategoryReportLine(CamelModel):
    category_id: Optional[int]
    category: str
    income: Money
    expense: Money
    net: Money


class CategoryReportResponse(CamelModel):
    month: str
    categories: List[CategoryReportLine]
    total_income: Money
    total_expense: Money
    net: Money


@router.get("/dashboard/stats", response_model=DashboardStatsResponse)
async def get_dashboard_stats(actor: CurrentActor, db: Database, month: Optional[str] = None):
    """Month summary over approved transactions (defaults to the current month)."""
    return await DashboardService(db).get_stats(month)


@router.get("/reports/categories", response_model=CategoryReportResponse)
async def get_category_report(actor: CurrentActor, db: Database, month: Optional[str] = None):
    report = await DashboardService(db).category_report(month)
    return CategoryReportResponse(
        month=report["month"],
        categories=[
            CategoryReportLine(
                category_id=line.category_id,
                category=line.category,
                income=line.income,
                expense=line.expense,
                net=line.net,
            )
            for line in report["categories"]
        ],
        total_income=report["total_income"],
        total_expense=report["total_expense"],
        net=report["net"],
    )
