from datetime import date
from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from psycopg import AsyncConnection
from pydantic import BaseModel, field_serializer

from .auth import get_current_user_id
from .database import get_db_connection
from .services.money import quantize_money, quantize_percent
from .services.month_dates import utc_today
from .services.summary_service import Summary, get_summary

router = APIRouter(prefix="/expenses", tags=["summary"])


class SummaryGoalOut(BaseModel):
    name: str
    spent: Decimal
    must_spend: Decimal
    used: Decimal
    total: Decimal

    @field_serializer("spent", "must_spend")
    def serialize_money(self, value: Decimal) -> str:
        return str(quantize_money(value))

    @field_serializer("used", "total")
    def serialize_percent(self, value: Decimal) -> str:
        return str(quantize_percent(value))


class SummaryResponse(BaseModel):
    goals: list[SummaryGoalOut]
    spent: Decimal
    must_spend: Decimal
    used: Decimal

    @field_serializer("spent", "must_spend")
    def serialize_money(self, value: Decimal) -> str:
        return str(quantize_money(value))

    @field_serializer("used")
    def serialize_percent(self, value: Decimal) -> str:
        return str(quantize_percent(value))


def to_response(summary: Summary) -> SummaryResponse:
    return SummaryResponse(
        goals=[
            SummaryGoalOut(
                name=goal.name,
                spent=goal.spent_amount,
                must_spend=goal.must_spend_amount,
                used=goal.used_percent,
                total=goal.total_percent,
            )
            for goal in summary.goals
        ],
        spent=summary.total_spent,
        must_spend=summary.total_must_spend,
        used=summary.total_used_percent,
    )


@router.get("/summary", response_model=SummaryResponse)
async def get_summary_endpoint(
    on_date: date | None = Query(default=None, alias="date"),
    user_id: UUID = Depends(get_current_user_id),
    connection: AsyncConnection = Depends(get_db_connection),
) -> SummaryResponse:
    """
    Budget consumption per goal for the month containing `date` (default: today).

    Past overspend that has not yet been worked off is included in `spent`.

    Response example:
    {
      "goals": [
        {"name": "Pleasures", "spent": "531.04", "must_spend": "500.00", "used": "106.2080", "total": "5.3104"}
      ],
      "spent": "531.04",
      "must_spend": "9468.96",
      "used": "5.3104"
    }
    """
    try:
        summary = await get_summary(connection, user_id, on_date or utc_today())
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    return to_response(summary)
