# expense_tracker/api/v1/currencies.py
from fastapi import APIRouter, Depends, Query

from expense_tracker.api.v1.deps import get_current_user
from expense_tracker.db import models
from expense_tracker.schemas.currency import ConversionOut, CurrencyCode, CurrencyList
from expense_tracker.services import currency

router = APIRouter(tags=["currencies"])


@router.get("", response_model=CurrencyList)
def list_currencies(current_user: models.User = Depends(get_current_user)):
    return {
        "base": currency.BASE_CURRENCY,
        "currencies": currency.currency_options(),
        "rates": currency.EXCHANGE_RATES,
    }


@router.get("/convert", response_model=ConversionOut)
def convert_amount(
    amount: float = Query(...),
    from_currency: CurrencyCode = Query(...),
    to_currency: CurrencyCode = Query(...),
    current_user: models.User = Depends(get_current_user),
):
    converted = currency.convert(amount, from_currency, to_currency)
    return {
        "amount": amount,
        "from_currency": from_currency,
        "to_currency": to_currency,
        "converted": round(converted, 2),
        "formatted": currency.format_currency(converted, to_currency),
    }
