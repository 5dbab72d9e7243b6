"""Service layer for budget goals and their salary percentages."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any
from uuid import UUID

if TYPE_CHECKING:
    from psycopg import AsyncConnection
else:
    AsyncConnection = Any

logger = logging.getLogger(__name__)

# Split applied at signup. Insertion order is the order goals are created in.
DEFAULT_GOAL_PERCENTAGES: dict[str, int] = {
    "Fixed costs": 40,
    "Comfort": 20,
    "Goals": 5,
    "Pleasures": 5,
    "Financial investments": 25,
    "Knowledge": 5,
}


def validate_percentage_update(
    existing_goal_ids: Sequence[int],
    updates: Sequence[dict[str, int]],
) -> dict[int, int]:
    """
    Validate a full rebalance and return goal_id -> new percentage.

    Rules:
    - at least as many entries as default goals
    - every percentage within 0..100
    - each goal id appears once
    - every existing goal is present, and no other id is
    - the stored percentages sum to exactly 100
    """
    if len(updates) < len(DEFAULT_GOAL_PERCENTAGES):
        raise ValueError("one or more goals are missing")

    by_id: dict[int, int] = {}
    for item in updates:
        percentage = item["percentage"]
        if percentage < 0 or percentage > 100:
            raise ValueError(
                f"invalid percentage for goal id {item['id']}, it must be between 0 and 100"
            )
        if item["id"] in by_id:
            raise ValueError(f"duplicate entry for goal id {item['id']}")
        by_id[item["id"]] = percentage

    resolved: dict[int, int] = {}
    for goal_id in existing_goal_ids:
        if goal_id not in by_id:
            raise ValueError(f"missing goal with id {goal_id}")
        resolved[goal_id] = by_id.pop(goal_id)

    if by_id:
        raise ValueError(f"unknown goal with id {min(by_id)}")

    if sum(resolved.values()) != 100:
        raise ValueError("the sum of all percentages must be equal to 100")

    return resolved


async def list_goals(connection: AsyncConnection, user_id: UUID) -> list[dict[str, Any]]:
    """List the user's goals ordered by id, which keeps summaries stable."""
    async with connection.cursor() as cursor:
        await cursor.execute(
            """
            SELECT id, name, percentage
            FROM goals
            WHERE user_id = %s
            ORDER BY id ASC
            """,
            (user_id,),
        )
        return await cursor.fetchall()


async def get_goal(connection: AsyncConnection, user_id: UUID, goal_id: int) -> dict[str, Any]:
    async with connection.cursor() as cursor:
        await cursor.execute(
            """
            SELECT id, name, percentage
            FROM goals
            WHERE id = %s
              AND user_id = %s
            """,
            (goal_id, user_id),
        )
        row = await cursor.fetchone()

    if row is None:
        raise LookupError("goal not found")

    return row


async def create_default_goals(connection: AsyncConnection, user_id: UUID) -> list[dict[str, Any]]:
    async with connection.cursor() as cursor:
        await cursor.executemany(
            "INSERT INTO goals (user_id, name, percentage) VALUES (%s, %s, %s)",
            [(user_id, name, percentage) for name, percentage in DEFAULT_GOAL_PERCENTAGES.items()],
        )

    return await list_goals(connection, user_id)


async def update_goal_percentages(
    connection: AsyncConnection,
    user_id: UUID,
    updates: Sequence[dict[str, int]],
) -> list[dict[str, Any]]:
    """Rebalance all goals at once; the sum-to-100 rule is checked before any write."""
    goals = await list_goals(connection, user_id)
    resolved = validate_percentage_update([row["id"] for row in goals], updates)

    async with connection.transaction():
        async with connection.cursor() as cursor:
            await cursor.executemany(
                "UPDATE goals SET percentage = %s WHERE id = %s AND user_id = %s",
                [(percentage, goal_id, user_id) for goal_id, percentage in resolved.items()],
            )

    logger.info("Rebalanced %d goals for user=%s", len(resolved), user_id)
    return await list_goals(connection, user_id)
