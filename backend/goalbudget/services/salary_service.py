"""Service layer for the per-user salary record."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any
from uuid import UUID

from .money import amount_to_cents

if TYPE_CHECKING:
    from psycopg import AsyncConnection
else:
    AsyncConnection = Any


async def get_salary(connection: AsyncConnection, user_id: UUID) -> dict[str, Any]:
    async with connection.cursor() as cursor:
        await cursor.execute(
            "SELECT user_id, amount_cents FROM salaries WHERE user_id = %s",
            (user_id,),
        )
        row = await cursor.fetchone()

    if row is None:
        raise LookupError("salary not found")

    return row


async def create_salary(connection: AsyncConnection, user_id: UUID, amount: Decimal) -> dict[str, Any]:
    if amount < Decimal("0"):
        raise ValueError("amount must be >= 0")

    async with connection.cursor() as cursor:
        await cursor.execute(
            """
            INSERT INTO salaries (user_id, amount_cents)
            VALUES (%s, %s)
            RETURNING user_id, amount_cents
            """,
            (user_id, amount_to_cents(amount)),
        )
        return await cursor.fetchone()


async def update_salary(connection: AsyncConnection, user_id: UUID, amount: Decimal) -> dict[str, Any]:
    """Replace the salary amount in place."""
    if amount < Decimal("0"):
        raise ValueError("amount must be >= 0")

    async with connection.cursor() as cursor:
        await cursor.execute(
            """
            UPDATE salaries
            SET amount_cents = %s
            WHERE user_id = %s
            RETURNING user_id, amount_cents
            """,
            (amount_to_cents(amount), user_id),
        )
        row = await cursor.fetchone()

    if row is None:
        raise LookupError("salary not found")

    return row
