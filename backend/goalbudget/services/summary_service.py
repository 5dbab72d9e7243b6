"""Monthly budget summary: per-goal consumption with carried-over overspend."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any
from uuid import UUID

from .carry_over import effective_spent_by_goal
from .expenses_service import get_monthly_spend_aggregates
from .goals_service import list_goals
from .money import HUNDRED, ZERO, budget_limit_cents, cents_to_amount
from .month_dates import month_start_of
from .salary_service import get_salary

if TYPE_CHECKING:
    from psycopg import AsyncConnection
else:
    AsyncConnection = Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BudgetGoal:
    goal_id: int
    name: str
    percentage: int


@dataclass(frozen=True)
class SummaryGoal:
    name: str
    spent_amount: Decimal
    must_spend_amount: Decimal
    used_percent: Decimal
    total_percent: Decimal


@dataclass(frozen=True)
class Summary:
    goals: list[SummaryGoal] = field(default_factory=list)
    total_spent: Decimal = Decimal("0.00")
    total_must_spend: Decimal = Decimal("0.00")
    total_used_percent: Decimal = ZERO


def used_percent(effective_cents: int, must_spend_cents: int) -> Decimal:
    """100 when exactly on budget, below when under, above when over."""
    if must_spend_cents == 0:
        return ZERO

    delta = Decimal(effective_cents - must_spend_cents)
    return HUNDRED + (delta * HUNDRED / Decimal(must_spend_cents))


def total_percent(effective_cents: int, salary_cents: int) -> Decimal:
    """Share of the whole salary consumed by one goal."""
    if salary_cents == 0:
        return ZERO

    return Decimal(effective_cents) * HUNDRED / Decimal(salary_cents)


def build_summary(
    goals: Sequence[BudgetGoal],
    salary_cents: int,
    effective_cents: Mapping[int, int],
) -> Summary:
    """
    Combine effective spend, goal percentages and salary into a Summary.

    Goals are reported in the given order. `total_must_spend` is rewritten on
    every iteration as salary minus the running spent total, so only its final
    value is reported; additions commute, so that value does not depend on
    goal order. With no goals it stays at zero.
    """
    salary_amount = cents_to_amount(salary_cents)

    items: list[SummaryGoal] = []
    total_spent = Decimal("0.00")
    total_must_spend = Decimal("0.00")
    total_used = ZERO

    for goal in goals:
        spent_cents = effective_cents.get(goal.goal_id, 0)
        must_spend_cents = budget_limit_cents(salary_cents, goal.percentage)
        spent_amount = cents_to_amount(spent_cents)
        goal_total = total_percent(spent_cents, salary_cents)

        items.append(
            SummaryGoal(
                name=goal.name,
                spent_amount=spent_amount,
                must_spend_amount=cents_to_amount(must_spend_cents),
                used_percent=used_percent(spent_cents, must_spend_cents),
                total_percent=goal_total,
            )
        )

        total_spent += spent_amount
        total_must_spend = salary_amount - total_spent
        total_used += goal_total

    return Summary(
        goals=items,
        total_spent=total_spent,
        total_must_spend=total_must_spend,
        total_used_percent=total_used,
    )


async def get_summary(
    connection: AsyncConnection,
    user_id: UUID,
    on_date: date,
) -> Summary:
    """Fetch salary, goals and monthly aggregates, then build the summary for `on_date`'s month."""
    requested_month = month_start_of(on_date)

    try:
        salary = await get_salary(connection, user_id)
    except LookupError:
        logger.warning("No salary for user=%s, summary not computed", user_id)
        raise
    salary_cents = salary["amount_cents"]

    goal_rows = await list_goals(connection, user_id)
    goals = [
        BudgetGoal(goal_id=row["id"], name=row["name"], percentage=row["percentage"])
        for row in goal_rows
    ]

    spends = await get_monthly_spend_aggregates(connection, user_id, requested_month)

    effective = effective_spent_by_goal(
        requested_month,
        spends,
        {goal.goal_id: goal.percentage for goal in goals},
        salary_cents,
    )
    logger.debug(
        "Summary for user=%s month=%s: %d goals, %d spend rows",
        user_id,
        requested_month,
        len(goals),
        len(spends),
    )

    return build_summary(goals, salary_cents, effective)
