# expense_tracker/services/currency.py
"""Fixed exchange-rate table and conversion through the USD pivot.

Rates are "units of currency per 1 USD"; changing them is a code change.
``convert`` never raises for an unknown code: that side is treated as USD and
a warning is logged, so analytics over mixed data always produce a number.
"""
import logging
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

BASE_CURRENCY = "USD"

EXCHANGE_RATES: Dict[str, float] = {
    "USD": 1.0,
    "EUR": 0.9298,
    "GBP": 0.8587,
    "JPY": 160.93,
    "CAD": 1.8585,
    "AUD": 2.0483,
    "CHF": 0.9052,
    "CNY": 7.2478,
    "INR": 83.5025,
    "MXN": 17.0861,
    "BRL": 5.1725,
}

CURRENCIES: Dict[str, Dict[str, str]] = {
    "USD": {"name": "US Dollar", "symbol": "$", "locale": "en-US"},
    "EUR": {"name": "Euro", "symbol": "€", "locale": "de-DE"},
    "GBP": {"name": "British Pound", "symbol": "£", "locale": "en-GB"},
    "JPY": {"name": "Japanese Yen", "symbol": "¥", "locale": "ja-JP"},
    "CAD": {"name": "Canadian Dollar", "symbol": "$", "locale": "en-CA"},
    "AUD": {"name": "Australian Dollar", "symbol": "$", "locale": "en-AU"},
    "CHF": {"name": "Swiss Franc", "symbol": "Fr", "locale": "de-CH"},
    "CNY": {"name": "Chinese Yuan", "symbol": "¥", "locale": "zh-CN"},
    "INR": {"name": "Indian Rupee", "symbol": "₹", "locale": "en-IN"},
    "MXN": {"name": "Mexican Peso", "symbol": "$", "locale": "es-MX"},
    "BRL": {"name": "Brazilian Real", "symbol": "R$", "locale": "pt-BR"},
}

# currencies conventionally shown without minor units
_ZERO_DECIMAL = {"JPY"}


def _clean(code: Optional[str]) -> str:
    return (code or "").strip().upper()


def is_supported(code: Optional[str]) -> bool:
    return _clean(code) in EXCHANGE_RATES


def normalize_currency(code: Optional[str]) -> Optional[str]:
    """Upper-cased code if supported, else None."""
    cleaned = _clean(code)
    return cleaned if cleaned in EXCHANGE_RATES else None


def supported_codes() -> List[str]:
    return list(EXCHANGE_RATES.keys())


def _rate_for(code: str, role: str) -> float:
    rate = EXCHANGE_RATES.get(code)
    if rate is None:
        logger.warning(
            "unsupported %s currency %r; treating it as %s", role, code, BASE_CURRENCY
        )
        return EXCHANGE_RATES[BASE_CURRENCY]
    return rate


def convert(amount: float, from_currency: str, to_currency: str) -> float:
    """Convert ``amount`` from one currency to another via USD.

    Same code on both sides (case-insensitive) returns ``amount`` untouched.
    """
    source = _clean(from_currency)
    target = _clean(to_currency)
    if source == target:
        return amount

    source_rate = _rate_for(source, "source")
    target_rate = _rate_for(target, "target")
    return amount / source_rate * target_rate


def currency_options() -> List[Dict[str, str]]:
    """Select-box options, e.g. ``{"value": "EUR", "label": "EUR - Euro"}``."""
    return [
        {"value": code, "label": f"{code} - {meta['name']}"}
        for code, meta in CURRENCIES.items()
    ]


def format_currency(amount: float, code: str = BASE_CURRENCY) -> str:
    code = normalize_currency(code) or BASE_CURRENCY
    symbol = CURRENCIES[code]["symbol"]
    decimals = 0 if code in _ZERO_DECIMAL else 2
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.{decimals}f}"
