"""
Aggregation helpers over plain objects; no database involved.
"""
from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest

from expense_tracker.services import analytics

FOOD = SimpleNamespace(id=1, name="Food", color="#FF6B6B")
TRAVEL = SimpleNamespace(id=2, name="Travel", color="#FEE440")


def expense(amount, currency="USD", day=date(2024, 5, 10), category=None):
    return SimpleNamespace(
        amount=Decimal(str(amount)),
        currency=currency,
        date=day,
        category=category,
        category_id=category.id if category else None,
    )


def test_by_category_converts_and_ranks():
    rows = analytics.totals_by_category(
        [expense(10, category=FOOD), expense(92.98, "EUR", category=TRAVEL), expense(5)],
        "USD",
    )
    assert [r["category"] for r in rows] == ["Travel", "Food", "Uncategorized"]
    assert rows[0]["total"] == pytest.approx(100)
    assert rows[0]["count"] == 1
    assert sum(r["percentage"] for r in rows) == pytest.approx(100, abs=0.02)
    assert rows[2]["category_id"] is None


def test_by_category_empty():
    assert analytics.totals_by_category([], "EUR") == []


def test_by_date_sums_per_day_in_order():
    rows = analytics.totals_by_date(
        [expense(1, day=date(2024, 5, 2)), expense(2, day=date(2024, 5, 1)), expense(3, day=date(2024, 5, 2))],
        "USD",
    )
    assert rows == [
        {"date": "2024-05-01", "total": 2.0, "currency": "USD"},
        {"date": "2024-05-02", "total": 4.0, "currency": "USD"},
    ]


def test_monthly_has_twelve_rows():
    rows = analytics.monthly_totals(
        [expense(10, day=date(2024, 1, 5)), expense(20, day=date(2024, 1, 20)),
         expense(1, "JPY", day=date(2024, 3, 1)), expense(99, day=date(2023, 12, 31))],
        2024,
        "JPY",
    )
    assert len(rows) == 12
    assert rows[0]["month"] == "2024-01"
    assert rows[0]["total"] == pytest.approx(30 * 160.93, rel=1e-6)
    assert rows[2]["total"] == 1.0
    assert rows[11]["total"] == 0.0


def test_month_bounds_december():
    assert analytics.month_bounds(date(2024, 12, 9)) == (date(2024, 12, 1), date(2024, 12, 31))
    assert analytics.month_bounds(date(2024, 2, 29)) == (date(2024, 2, 1), date(2024, 2, 29))


class TestBudgetStatus:
    def _budget(self, amount=100, currency="USD", category=None):
        return SimpleNamespace(
            id=7, amount=Decimal(str(amount)), currency=currency, period="monthly",
            category=category, category_id=category.id if category else None,
        )

    def test_counts_only_matching_category_in_current_month(self):
        today = date(2024, 5, 20)
        status = analytics.budget_status(
            self._budget(100, category=FOOD),
            [expense(30, category=FOOD), expense(50, category=TRAVEL),
             expense(40, category=FOOD, day=date(2024, 4, 30))],
            today=today,
        )
        assert status["spent"] == 30.0
        assert status["remaining"] == 70.0
        assert status["percentage"] == 30.0
        assert status["category"] == "Food"
        assert status["is_over_budget"] is False

    def test_budget_without_category_counts_everything(self):
        status = analytics.budget_status(
            self._budget(50), [expense(30, category=FOOD), expense(30)], today=date(2024, 5, 1)
        )
        assert status["spent"] == 60.0
        assert status["remaining"] == -10.0
        assert status["is_over_budget"] is True

    def test_spending_converted_into_budget_currency(self):
        status = analytics.budget_status(
            self._budget(100, currency="EUR"), [expense(100, "USD")], today=date(2024, 5, 31)
        )
        assert status["spent"] == pytest.approx(92.98)
        assert status["currency"] == "EUR"
