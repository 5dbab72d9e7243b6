from decimal import Decimal
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from psycopg import AsyncConnection
from pydantic import BaseModel, Field, field_serializer

from .auth import get_current_user_id
from .database import get_db_connection
from .services.money import cents_to_amount
from .services.salary_service import get_salary, update_salary

router = APIRouter(prefix="/salary", tags=["salary"])


class SalaryResponse(BaseModel):
    amount: Decimal

    @field_serializer("amount")
    def serialize_amount(self, value: Decimal) -> str:
        return str(value)


class SalaryUpdateRequest(BaseModel):
    amount: Decimal = Field(ge=Decimal("0"), max_digits=14, decimal_places=2)


@router.get("", response_model=SalaryResponse)
async def get_salary_endpoint(
    user_id: UUID = Depends(get_current_user_id),
    connection: AsyncConnection = Depends(get_db_connection),
) -> SalaryResponse:
    try:
        row = await get_salary(connection, user_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    return SalaryResponse(amount=cents_to_amount(row["amount_cents"]))


@router.patch("", response_model=SalaryResponse)
async def update_salary_endpoint(
    payload: SalaryUpdateRequest,
    user_id: UUID = Depends(get_current_user_id),
    connection: AsyncConnection = Depends(get_db_connection),
) -> SalaryResponse:
    """Replace the salary; goal limits follow on the next summary."""
    try:
        row = await update_salary(connection, user_id, payload.amount)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    return SalaryResponse(amount=cents_to_amount(row["amount_cents"]))
