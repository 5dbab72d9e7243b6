"""Goals router: listing, monthly expenses per goal and percentage rebalancing."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from psycopg import AsyncConnection
from pydantic import BaseModel

from .auth import get_current_user_id
from .database import get_db_connection
from .expenses import ExpenseResponse, expense_out
from .services.expenses_service import list_goal_expenses
from .services.goals_service import list_goals, update_goal_percentages
from .services.month_dates import utc_today

router = APIRouter(prefix="/goals", tags=["goals"])


class GoalResponse(BaseModel):
    id: int
    name: str
    percentage: int


class GoalPercentageUpdate(BaseModel):
    id: int
    # Range is enforced by the service so the error names the offending goal.
    percentage: int


@router.get("", response_model=list[GoalResponse])
async def list_goals_endpoint(
    user_id: UUID = Depends(get_current_user_id),
    connection: AsyncConnection = Depends(get_db_connection),
) -> list[GoalResponse]:
    rows = await list_goals(connection, user_id)
    return [GoalResponse(**row) for row in rows]


@router.get("/{goal_id}/expenses", response_model=list[ExpenseResponse])
async def goal_expenses_endpoint(
    goal_id: int,
    year: int | None = Query(default=None, ge=1),
    month: int | None = Query(default=None, ge=1, le=12),
    user_id: UUID = Depends(get_current_user_id),
    connection: AsyncConnection = Depends(get_db_connection),
) -> list[ExpenseResponse]:
    """Expenses of one goal for `year`/`month`, defaulting to the current month."""
    today = utc_today()

    try:
        rows = await list_goal_expenses(
            connection,
            user_id,
            goal_id,
            year or today.year,
            month or today.month,
        )
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    return [expense_out(row) for row in rows]


@router.post("", response_model=list[GoalResponse])
async def update_goals_endpoint(
    payload: list[GoalPercentageUpdate],
    user_id: UUID = Depends(get_current_user_id),
    connection: AsyncConnection = Depends(get_db_connection),
) -> list[GoalResponse]:
    """
    Rebalance every goal's percentage at once.

    Request example:
    [
      {"id": 1, "percentage": 40},
      {"id": 2, "percentage": 20},
      {"id": 3, "percentage": 5},
      {"id": 4, "percentage": 5},
      {"id": 5, "percentage": 25},
      {"id": 6, "percentage": 5}
    ]
    """
    try:
        rows = await update_goal_percentages(
            connection,
            user_id,
            [item.model_dump() for item in payload],
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    return [GoalResponse(**row) for row in rows]
