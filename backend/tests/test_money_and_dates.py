from datetime import date
from decimal import Decimal

from goalbudget.services.money import (
    amount_to_cents,
    budget_limit_cents,
    cents_to_amount,
    quantize_percent,
)
from goalbudget.services.month_dates import (
    add_months_clamped,
    month_start_end_exclusive,
    month_start_of,
    months_between,
    shift_months,
)


def test_amount_cents_conversions_are_exact() -> None:
    assert amount_to_cents(Decimal("69.99")) == 6999
    assert amount_to_cents(Decimal("125.74")) == 12574
    assert amount_to_cents(Decimal("10")) == 1000
    assert cents_to_amount(12574) == Decimal("125.74")
    assert str(cents_to_amount(50000)) == "500.00"


def test_budget_limit_truncates_salary_to_whole_units_first() -> None:
    assert budget_limit_cents(1_000_000, 20) == 200_000
    assert budget_limit_cents(123_456, 33) == 40_722
    assert budget_limit_cents(99, 100) == 0
    assert budget_limit_cents(1_000_000, 0) == 0


def test_percent_quantization_is_half_up() -> None:
    assert str(quantize_percent(Decimal("106.208"))) == "106.2080"
    assert str(quantize_percent(Decimal("33.33335"))) == "33.3334"


def test_months_between_ignores_day_and_crosses_years() -> None:
    assert months_between(date(2025, 12, 31), date(2026, 1, 1)) == 1
    assert months_between(date(2026, 3, 1), date(2026, 3, 31)) == 0
    assert months_between(date(2024, 3, 1), date(2026, 3, 1)) == 24


def test_month_helpers() -> None:
    assert month_start_of(date(2026, 3, 17)) == date(2026, 3, 1)
    assert shift_months(date(2026, 12, 1), 1) == date(2027, 1, 1)
    assert shift_months(date(2026, 1, 1), -1) == date(2025, 12, 1)
    assert month_start_end_exclusive(2024, 2) == (date(2024, 2, 1), date(2024, 3, 1))


def test_add_months_clamped_handles_leap_years() -> None:
    assert add_months_clamped(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months_clamped(date(2025, 1, 31), 1) == date(2025, 2, 28)
    assert add_months_clamped(date(2025, 11, 30), 3) == date(2026, 2, 28)
