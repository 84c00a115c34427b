# expense_tracker/services/defaults.py
# Seed data: default categories, default preferences, colours for new categories.
from typing import Dict, List, Union

DEFAULT_CATEGORIES: List[Dict[str, str]] = [
    {"name": "Food & Dining", "color": "#FF6B6B"},
    {"name": "Transportation", "color": "#4ECDC4"},
    {"name": "Shopping", "color": "#45B7D1"},
    {"name": "Entertainment", "color": "#96CEB4"},
    {"name": "Health", "color": "#D4A5A5"},
    {"name": "Utilities", "color": "#9B5DE5"},
    {"name": "Housing", "color": "#F15BB5"},
    {"name": "Travel", "color": "#FEE440"},
    {"name": "Education", "color": "#00BBF9"},
    {"name": "Other", "color": "#98C1D9"},
]

DEFAULT_SETTINGS: Dict[str, Union[str, bool]] = {
    "currency": "USD",
    "language": "English",
    "theme": "#10b981",
    "auto_save": True,
    "email_notifications": True,
    "budget_alerts": True,
    "weekly_summary": True,
    "dark_mode": False,
}

# colours handed to categories created from a receipt suggestion
CATEGORY_PALETTE = [
    "#FF5733",
    "#33FF57",
    "#3357FF",
    "#FF33F5",
    "#F5FF33",
    "#33FFF5",
    "#FF3333",
    "#33FF33",
    "#3333FF",
    "#FF33FF",
    "#FFFF33",
    "#33FFFF",
]


def palette_color(index: int) -> str:
    """Pick a palette colour; cycles through the list."""
    return CATEGORY_PALETTE[index % len(CATEGORY_PALETTE)]
