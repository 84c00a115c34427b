# expense_tracker.api.v1 package - exports the router modules so the app factory
# can do "from expense_tracker.api.v1 import expenses, categories, ...".
from . import (
    analytics,
    budgets,
    categories,
    currencies,
    expenses,
    health,
    receipts,
    settings,
)

__all__ = [
    "analytics",
    "budgets",
    "categories",
    "currencies",
    "expenses",
    "health",
    "receipts",
    "settings",
]
