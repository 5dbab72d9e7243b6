"""Carry-over of past overspend into the requested month's effective spend.

Rules for one goal, looking at every month up to the requested one:

- a past month that stayed within its limit contributes nothing; unspent
  allowance is dropped, never banked for later months;
- a month over its limit contributes what is left of its spend after one
  full limit is worked off per elapsed month, floored at zero;
- the requested month itself always counts in full.

With a zero limit nothing is ever worked off, so any spend keeps counting.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date

from .money import budget_limit_cents
from .month_dates import month_start_of, months_between


@dataclass(frozen=True)
class MonthlySpend:
    goal_id: int
    month_start: date
    spent_cents: int


def carried_spend_cents(spend: MonthlySpend, requested_month: date, limit_cents: int) -> int:
    """Contribution of one month's spend to the requested month."""
    spent = spend.spent_cents
    if spent <= 0:
        return 0

    month_diff = months_between(spend.month_start, requested_month)
    if month_diff < 0:
        return 0

    if spent <= limit_cents and month_diff > 0:
        return 0

    if spent > limit_cents:
        return max(0, spent - month_diff * limit_cents)

    return spent


def effective_spent_cents(
    requested_month: date,
    spends: Iterable[MonthlySpend],
    limit_cents: int,
) -> int:
    """Sum carried contributions of one goal's monthly spends. Order does not matter."""
    requested_month = month_start_of(requested_month)
    return sum(
        (carried_spend_cents(spend, requested_month, limit_cents) for spend in spends),
        0,
    )


def effective_spent_by_goal(
    requested_month: date,
    spends: Iterable[MonthlySpend],
    percentages: Mapping[int, int],
    salary_cents: int,
) -> dict[int, int]:
    """Effective spend per goal id. Goals without rows get 0; rows of unknown goals are ignored."""
    by_goal: dict[int, list[MonthlySpend]] = {goal_id: [] for goal_id in percentages}
    for spend in spends:
        if spend.goal_id in by_goal:
            by_goal[spend.goal_id].append(spend)

    return {
        goal_id: effective_spent_cents(
            requested_month,
            goal_spends,
            budget_limit_cents(salary_cents, percentages[goal_id]),
        )
        for goal_id, goal_spends in by_goal.items()
    }
