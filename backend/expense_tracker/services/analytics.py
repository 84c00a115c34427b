# expense_tracker/services/analytics.py
"""Aggregations over a user's expenses.

Pure functions: callers load the rows, these only convert and sum. Every
amount is converted into ``target_currency`` before summing, so expenses in
mixed currencies add up correctly.
"""
from collections import OrderedDict
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from expense_tracker.services.currency import convert

UNCATEGORIZED = {"id": None, "name": "Uncategorized", "color": "#999999"}


def _converted(expense, target_currency: str) -> float:
    return convert(float(expense.amount), expense.currency, target_currency)


def totals_by_category(expenses: Iterable[Any], target_currency: str) -> List[Dict[str, Any]]:
    """Per-category totals, largest first, with each category's share of the whole."""
    groups: Dict[Optional[int], Dict[str, Any]] = {}
    for e in expenses:
        cat = e.category
        key = cat.id if cat is not None else None
        if key not in groups:
            meta = {"id": cat.id, "name": cat.name, "color": cat.color} if cat is not None else dict(UNCATEGORIZED)
            groups[key] = {**meta, "total": 0.0, "count": 0}
        groups[key]["total"] += _converted(e, target_currency)
        groups[key]["count"] += 1

    grand_total = sum(g["total"] for g in groups.values())
    rows = []
    for g in groups.values():
        rows.append({
            "category_id": g["id"],
            "category": g["name"],
            "color": g["color"],
            "total": round(g["total"], 2),
            "count": g["count"],
            "percentage": round(g["total"] / grand_total * 100, 2) if grand_total else 0.0,
            "currency": target_currency,
        })
    rows.sort(key=lambda r: r["total"], reverse=True)
    return rows


def totals_by_date(expenses: Iterable[Any], target_currency: str) -> List[Dict[str, Any]]:
    totals: Dict[date, float] = {}
    for e in expenses:
        totals[e.date] = totals.get(e.date, 0.0) + _converted(e, target_currency)
    return [
        {"date": d.isoformat(), "total": round(totals[d], 2), "currency": target_currency}
        for d in sorted(totals)
    ]


def monthly_totals(expenses: Iterable[Any], year: int, target_currency: str) -> List[Dict[str, Any]]:
    """Twelve rows, one per month of ``year``; months without expenses are zero."""
    months: "OrderedDict[int, float]" = OrderedDict((m, 0.0) for m in range(1, 13))
    for e in expenses:
        if e.date.year != year:
            continue
        months[e.date.month] += _converted(e, target_currency)
    return [
        {"month": f"{year:04d}-{m:02d}", "total": round(total, 2), "currency": target_currency}
        for m, total in months.items()
    ]


def month_bounds(today: date):
    """First and last day of the month containing ``today``."""
    start = today.replace(day=1)
    if start.month == 12:
        next_month = start.replace(year=start.year + 1, month=1)
    else:
        next_month = start.replace(month=start.month + 1)
    return start, date.fromordinal(next_month.toordinal() - 1)


def budget_status(budget, expenses: Iterable[Any], today: Optional[date] = None) -> Dict[str, Any]:
    """Spending against ``budget`` for the current month, in the budget's currency.

    A budget without a category counts every expense.
    """
    start, end = month_bounds(today or date.today())
    spent = 0.0
    for e in expenses:
        if not (start <= e.date <= end):
            continue
        if budget.category_id is not None and e.category_id != budget.category_id:
            continue
        spent += _converted(e, budget.currency)

    amount = float(budget.amount)
    category = budget.category
    return {
        "budget_id": budget.id,
        "category_id": budget.category_id,
        "category": category.name if category is not None else None,
        "color": category.color if category is not None else None,
        "period": budget.period,
        "currency": budget.currency,
        "amount": round(amount, 2),
        "spent": round(spent, 2),
        "remaining": round(amount - spent, 2),
        "percentage": round(spent / amount * 100, 2) if amount else 0.0,
        "is_over_budget": spent > amount,
    }
