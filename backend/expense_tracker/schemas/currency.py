# expense_tracker/schemas/currency.py
from typing import Annotated, Dict, List

from pydantic import AfterValidator, BaseModel

from expense_tracker.services.currency import normalize_currency, supported_codes


def _supported_currency(value: str) -> str:
    code = normalize_currency(value)
    if code is None:
        raise ValueError(f"unsupported currency {value!r}; expected one of {', '.join(supported_codes())}")
    return code


# upper-cased, must be in the rate table
CurrencyCode = Annotated[str, AfterValidator(_supported_currency)]


class CurrencyOption(BaseModel):
    value: str
    label: str


class CurrencyList(BaseModel):
    base: str
    currencies: List[CurrencyOption]
    rates: Dict[str, float]


class ConversionOut(BaseModel):
    amount: float
    from_currency: str
    to_currency: str
    converted: float
    formatted: str
