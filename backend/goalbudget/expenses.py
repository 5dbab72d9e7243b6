import datetime as dt
from decimal import Decimal
from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from psycopg import AsyncConnection
from pydantic import BaseModel, Field, field_serializer, model_validator

from .auth import get_current_user_id
from .database import get_db_connection
from .services.expenses_service import (
    change_expense_goal,
    create_expenses,
    delete_expense,
    find_matching_names,
    update_expense,
)
from .services.money import cents_to_amount

router = APIRouter(prefix="/expenses", tags=["expenses"])

Value = Annotated[Decimal, Field(ge=Decimal("1"), max_digits=12, decimal_places=2)]


class ExpenseCreate(BaseModel):
    name: str = Field(min_length=2, max_length=160)
    value: Value
    date: dt.date
    goal_id: int = Field(gt=0)
    installments: int = Field(default=1, ge=1, le=120)


class ExpenseUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=2, max_length=160)
    value: Value | None = None
    date: dt.date | None = None
    goal_id: int | None = Field(default=None, gt=0)

    @model_validator(mode="after")
    def check_not_empty(self) -> "ExpenseUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided")

        return self


class ExpenseGoalUpdate(BaseModel):
    goal_id: int = Field(gt=0)


class ExpenseResponse(BaseModel):
    id: int
    name: str
    value: Decimal
    date: dt.date
    goal_id: int

    @field_serializer("value")
    def serialize_value(self, value: Decimal) -> str:
        return str(value)


def expense_out(row: dict[str, Any]) -> ExpenseResponse:
    return ExpenseResponse(
        id=row["id"],
        name=row["name"],
        value=cents_to_amount(row["value_cents"]),
        date=row["date"],
        goal_id=row["goal_id"],
    )


@router.post("", response_model=list[ExpenseResponse], status_code=201)
async def create_expense_endpoint(
    payload: ExpenseCreate,
    user_id: UUID = Depends(get_current_user_id),
    connection: AsyncConnection = Depends(get_db_connection),
) -> list[ExpenseResponse]:
    """
    Create one expense, or one per month when `installments` > 1.

    Request example:
    {
      "name": "Headphones",
      "value": "150.00",
      "date": "2026-02-15",
      "goal_id": 3,
      "installments": 3
    }
    """
    try:
        rows = await create_expenses(connection, user_id, payload.model_dump())
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    return [expense_out(row) for row in rows]


@router.get("/matching-names", response_model=list[str])
async def matching_names_endpoint(
    query: str = Query(default=""),
    user_id: UUID = Depends(get_current_user_id),
    connection: AsyncConnection = Depends(get_db_connection),
) -> list[str]:
    try:
        return await find_matching_names(connection, user_id, query)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.patch("/{expense_id}", response_model=ExpenseResponse)
async def update_expense_endpoint(
    expense_id: int,
    payload: ExpenseUpdate,
    user_id: UUID = Depends(get_current_user_id),
    connection: AsyncConnection = Depends(get_db_connection),
) -> ExpenseResponse:
    try:
        row = await update_expense(connection, user_id, expense_id, payload.model_dump(exclude_unset=True))
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    return expense_out(row)


@router.patch("/{expense_id}/update-goal", response_model=ExpenseResponse)
async def update_expense_goal_endpoint(
    expense_id: int,
    payload: ExpenseGoalUpdate,
    user_id: UUID = Depends(get_current_user_id),
    connection: AsyncConnection = Depends(get_db_connection),
) -> ExpenseResponse:
    try:
        row = await change_expense_goal(connection, user_id, expense_id, payload.goal_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    return expense_out(row)


@router.delete("/{expense_id}", status_code=204)
async def delete_expense_endpoint(
    expense_id: int,
    user_id: UUID = Depends(get_current_user_id),
    connection: AsyncConnection = Depends(get_db_connection),
) -> Response:
    try:
        await delete_expense(connection, user_id, expense_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    return Response(status_code=204)
