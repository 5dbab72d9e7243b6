"""Service layer for expenses and the monthly spend aggregates behind summaries."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any
from uuid import UUID

from .carry_over import MonthlySpend
from .goals_service import get_goal
from .money import amount_to_cents
from .month_dates import add_months_clamped, month_start_end_exclusive, shift_months

if TYPE_CHECKING:
    from psycopg import AsyncConnection
else:
    AsyncConnection = Any

MIN_EXPENSE_VALUE = Decimal("1.00")
EXPENSE_COLUMNS = "id, name, value_cents, date, goal_id, created_at, updated_at"


def _clean_name(name: str) -> str:
    cleaned = str(name or "").strip()
    if len(cleaned) < 2:
        raise ValueError("name must have at least 2 characters")
    return cleaned


def _validate_value(value: Decimal) -> int:
    if value < MIN_EXPENSE_VALUE:
        raise ValueError("value must be greater than or equal to 1")
    return amount_to_cents(value)


def build_installments(name: str, value_cents: int, first_date: date, installments: int) -> list[dict[str, Any]]:
    """
    Split one purchase into monthly expenses.

    Each installment keeps the full value; names get an "(i/N)" suffix and
    dates move one month at a time, clamped to shorter months.
    """
    if installments <= 1:
        return [{"name": name, "value_cents": value_cents, "date": first_date}]

    return [
        {
            "name": f"{name} ({index + 1}/{installments})",
            "value_cents": value_cents,
            "date": add_months_clamped(first_date, index),
        }
        for index in range(installments)
    ]


async def create_expenses(
    connection: AsyncConnection,
    user_id: UUID,
    data: dict[str, Any],
) -> list[dict[str, Any]]:
    """Create one expense, or one per installment, for a goal owned by the user."""
    name = _clean_name(data["name"])
    value_cents = _validate_value(Decimal(str(data["value"])))
    goal = await get_goal(connection, user_id, data["goal_id"])

    items = build_installments(name, value_cents, data["date"], int(data.get("installments") or 1))

    created: list[dict[str, Any]] = []
    async with connection.transaction():
        async with connection.cursor() as cursor:
            for item in items:
                await cursor.execute(
                    f"""
                    INSERT INTO expenses (user_id, goal_id, name, value_cents, date)
                    VALUES (%s, %s, %s, %s, %s)
                    RETURNING {EXPENSE_COLUMNS}
                    """,
                    (user_id, goal["id"], item["name"], item["value_cents"], item["date"]),
                )
                created.append(await cursor.fetchone())

    return created


async def get_expense(connection: AsyncConnection, user_id: UUID, expense_id: int) -> dict[str, Any]:
    async with connection.cursor() as cursor:
        await cursor.execute(
            f"""
            SELECT {EXPENSE_COLUMNS}
            FROM expenses
            WHERE id = %s
              AND user_id = %s
            """,
            (expense_id, user_id),
        )
        row = await cursor.fetchone()

    if row is None:
        raise LookupError("expense not found")

    return row


async def update_expense(
    connection: AsyncConnection,
    user_id: UUID,
    expense_id: int,
    patch: dict[str, Any],
) -> dict[str, Any]:
    """Partially update one expense. Unset fields keep their stored value."""
    current = await get_expense(connection, user_id, expense_id)

    name = _clean_name(patch["name"]) if patch.get("name") is not None else current["name"]
    value_cents = (
        _validate_value(Decimal(str(patch["value"])))
        if patch.get("value") is not None
        else current["value_cents"]
    )
    expense_date = patch.get("date") or current["date"]

    goal_id = current["goal_id"]
    if patch.get("goal_id") is not None:
        goal_id = (await get_goal(connection, user_id, patch["goal_id"]))["id"]

    async with connection.cursor() as cursor:
        await cursor.execute(
            f"""
            UPDATE expenses
            SET name = %s, value_cents = %s, date = %s, goal_id = %s, updated_at = NOW()
            WHERE id = %s
              AND user_id = %s
            RETURNING {EXPENSE_COLUMNS}
            """,
            (name, value_cents, expense_date, goal_id, expense_id, user_id),
        )
        row = await cursor.fetchone()

    if row is None:
        raise LookupError("expense not found")

    return row


async def change_expense_goal(
    connection: AsyncConnection,
    user_id: UUID,
    expense_id: int,
    goal_id: int,
) -> dict[str, Any]:
    return await update_expense(connection, user_id, expense_id, {"goal_id": goal_id})


async def delete_expense(connection: AsyncConnection, user_id: UUID, expense_id: int) -> None:
    async with connection.cursor() as cursor:
        await cursor.execute(
            "DELETE FROM expenses WHERE id = %s AND user_id = %s RETURNING id",
            (expense_id, user_id),
        )
        row = await cursor.fetchone()

    if row is None:
        raise LookupError("expense not found")


async def list_goal_expenses(
    connection: AsyncConnection,
    user_id: UUID,
    goal_id: int,
    year: int,
    month: int,
) -> list[dict[str, Any]]:
    """Expenses of one goal within one calendar month, newest first."""
    goal = await get_goal(connection, user_id, goal_id)
    period_start, period_end_exclusive = month_start_end_exclusive(year, month)

    async with connection.cursor() as cursor:
        await cursor.execute(
            f"""
            SELECT {EXPENSE_COLUMNS}
            FROM expenses
            WHERE user_id = %s
              AND goal_id = %s
              AND date >= %s
              AND date < %s
            ORDER BY date DESC, created_at DESC
            """,
            (user_id, goal["id"], period_start, period_end_exclusive),
        )
        return await cursor.fetchall()


async def find_matching_names(connection: AsyncConnection, user_id: UUID, query: str) -> list[str]:
    """Distinct expense names containing `query`, ignoring case and accents."""
    query = query.strip()
    if len(query) < 2:
        raise ValueError("query must be present and have at least 2 characters")

    async with connection.cursor() as cursor:
        await cursor.execute(
            """
            SELECT DISTINCT name
            FROM expenses
            WHERE user_id = %s
              AND unaccent(name) ILIKE unaccent(%s)
            ORDER BY name ASC
            """,
            (user_id, f"%{query}%"),
        )
        rows = await cursor.fetchall()

    return [row["name"] for row in rows]


async def get_monthly_spend_aggregates(
    connection: AsyncConnection,
    user_id: UUID,
    upto_month: date,
) -> list[MonthlySpend]:
    """One row per (goal, month) with spend, from the first expense through `upto_month`."""
    async with connection.cursor() as cursor:
        await cursor.execute(
            """
            SELECT
                e.goal_id,
                date_trunc('month', e.date)::date AS month_start,
                COALESCE(SUM(e.value_cents), 0)::bigint AS spent_cents
            FROM expenses e
            JOIN goals g ON g.id = e.goal_id
            WHERE e.user_id = %s
              AND g.user_id = %s
              AND e.date < %s
            GROUP BY e.goal_id, month_start
            ORDER BY month_start ASC, e.goal_id ASC
            """,
            (user_id, user_id, shift_months(upto_month, 1)),
        )
        rows = await cursor.fetchall()

    return [
        MonthlySpend(
            goal_id=row["goal_id"],
            month_start=row["month_start"],
            spent_cents=int(row["spent_cents"] or 0),
        )
        for row in rows
    ]
