from datetime import date
from decimal import Decimal

from goalbudget.services.carry_over import MonthlySpend, effective_spent_by_goal
from goalbudget.services.summary_service import (
    BudgetGoal,
    build_summary,
    total_percent,
    used_percent,
)

SALARY_CENTS = 10_000 * 100

GOALS = [
    BudgetGoal(goal_id=1, name="Comfort", percentage=20),
    BudgetGoal(goal_id=2, name="Fixed costs", percentage=40),
    BudgetGoal(goal_id=3, name="Goals", percentage=5),
    BudgetGoal(goal_id=4, name="Pleasures", percentage=5),
    BudgetGoal(goal_id=5, name="Financial investments", percentage=25),
    BudgetGoal(goal_id=6, name="Knowledge", percentage=5),
]

FEB = date(2026, 2, 1)
MAR = date(2026, 3, 1)
APR = date(2026, 4, 1)

SPENDS = [
    MonthlySpend(1, FEB, 12574),
    MonthlySpend(4, FEB, 50000),
    MonthlySpend(1, MAR, 5050 + 12549),
    MonthlySpend(2, MAR, 40000 + 10000),
    MonthlySpend(4, MAR, 19089 + 34015),
    MonthlySpend(6, MAR, 90099),
    MonthlySpend(4, APR, 1000),
    MonthlySpend(5, APR, 70025),
]


def _summary_for(month: date):
    visible = [spend for spend in SPENDS if spend.month_start <= month]
    effective = effective_spent_by_goal(
        month,
        visible,
        {goal.goal_id: goal.percentage for goal in GOALS},
        SALARY_CENTS,
    )
    return build_summary(GOALS, SALARY_CENTS, effective)


def _by_name(summary):
    return {goal.name: goal for goal in summary.goals}


def test_two_months_back_everything_is_zero() -> None:
    summary = _summary_for(date(2026, 1, 1))

    for goal in summary.goals:
        assert goal.spent_amount == Decimal("0.00")
        assert goal.used_percent == 0
        assert goal.total_percent == 0

    assert summary.total_spent == Decimal("0.00")
    assert summary.total_must_spend == Decimal("10000.00")
    assert summary.total_used_percent == 0


def test_previous_month_reports_its_own_spend() -> None:
    summary = _summary_for(FEB)
    goals = _by_name(summary)

    assert goals["Comfort"].spent_amount == Decimal("125.74")
    assert goals["Comfort"].must_spend_amount == Decimal("2000.00")
    assert goals["Comfort"].used_percent == Decimal("6.287")
    assert goals["Comfort"].total_percent == Decimal("1.2574")
    assert goals["Pleasures"].spent_amount == Decimal("500.00")
    assert goals["Pleasures"].used_percent == Decimal("100")
    assert goals["Pleasures"].total_percent == Decimal("5")

    assert summary.total_spent == Decimal("625.74")
    assert summary.total_must_spend == Decimal("9374.26")
    assert summary.total_used_percent == Decimal("6.2574")


def test_current_month_drops_absorbed_history() -> None:
    summary = _summary_for(MAR)
    goals = _by_name(summary)

    assert goals["Comfort"].spent_amount == Decimal("175.99")
    assert goals["Comfort"].used_percent == Decimal("8.7995")
    assert goals["Comfort"].total_percent == Decimal("1.7599")
    assert goals["Fixed costs"].spent_amount == Decimal("500.00")
    assert goals["Fixed costs"].used_percent == Decimal("12.5")
    assert goals["Fixed costs"].total_percent == Decimal("5")
    # February's 500.00 sat exactly on the limit, so nothing carries.
    assert goals["Pleasures"].spent_amount == Decimal("531.04")
    assert goals["Pleasures"].used_percent == Decimal("106.208")
    assert goals["Pleasures"].total_percent == Decimal("5.3104")
    assert goals["Knowledge"].spent_amount == Decimal("900.99")
    assert goals["Knowledge"].used_percent == Decimal("180.198")

    assert summary.total_spent == Decimal("2108.02")
    assert summary.total_must_spend == Decimal("7891.98")
    assert summary.total_used_percent == Decimal("21.0802")


def test_next_month_carries_unpaid_overspend() -> None:
    summary = _summary_for(APR)
    goals = _by_name(summary)

    assert goals["Comfort"].spent_amount == Decimal("0.00")
    assert goals["Fixed costs"].spent_amount == Decimal("0.00")
    # 31.04 left over from March plus 10.00 spent in April.
    assert goals["Pleasures"].spent_amount == Decimal("41.04")
    assert goals["Pleasures"].used_percent == Decimal("8.208")
    assert goals["Pleasures"].total_percent == Decimal("0.4104")
    assert goals["Knowledge"].spent_amount == Decimal("400.99")
    assert goals["Knowledge"].used_percent == Decimal("80.198")
    assert goals["Financial investments"].spent_amount == Decimal("700.25")
    assert goals["Financial investments"].used_percent == Decimal("28.01")

    assert summary.total_spent == Decimal("1142.28")
    assert summary.total_must_spend == Decimal("8857.72")
    assert summary.total_used_percent == Decimal("11.4228")


def test_goals_keep_given_order() -> None:
    summary = _summary_for(MAR)
    assert [goal.name for goal in summary.goals] == [goal.name for goal in GOALS]


def test_summary_is_idempotent() -> None:
    assert _summary_for(MAR) == _summary_for(MAR)


def test_must_spend_sums_to_salary_when_percentages_sum_to_100() -> None:
    summary = build_summary(GOALS, SALARY_CENTS, {})
    assert sum((goal.must_spend_amount for goal in summary.goals), Decimal("0.00")) == Decimal("10000.00")


def test_must_spend_divides_salary_before_applying_percentage() -> None:
    # 1234.56 -> 1234 whole units -> 33% is 407.22, not 407.40.
    summary = build_summary([BudgetGoal(1, "Comfort", 33)], 123456, {1: 0})
    assert summary.goals[0].must_spend_amount == Decimal("407.22")


def test_total_must_spend_is_salary_minus_total_spent_in_any_order() -> None:
    effective = {1: 17599, 2: 50000, 4: 53104}
    forward = build_summary(GOALS, SALARY_CENTS, effective)
    backward = build_summary(list(reversed(GOALS)), SALARY_CENTS, effective)

    assert forward.total_must_spend == Decimal("10000.00") - forward.total_spent
    assert forward.total_must_spend == backward.total_must_spend


def test_no_goals_leaves_totals_at_zero() -> None:
    summary = build_summary([], SALARY_CENTS, {})

    assert summary.goals == []
    assert summary.total_spent == Decimal("0.00")
    assert summary.total_must_spend == Decimal("0.00")


def test_zero_salary_and_zero_percentage_are_defined_as_zero() -> None:
    assert used_percent(5000, 0) == 0
    assert total_percent(5000, 0) == 0

    summary = build_summary([BudgetGoal(1, "Goals", 0)], 0, {1: 5000})
    goal = summary.goals[0]
    assert goal.spent_amount == Decimal("50.00")
    assert goal.must_spend_amount == Decimal("0.00")
    assert goal.used_percent == 0
    assert goal.total_percent == 0
