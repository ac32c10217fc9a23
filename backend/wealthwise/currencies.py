"""Supported currency metadata and display formatting."""

from decimal import Decimal, ROUND_HALF_UP

from fastapi import APIRouter
from pydantic import BaseModel

router = APIRouter(prefix="/currencies", tags=["currencies"])


class Currency(BaseModel):
    code: str
    name: str
    symbol: str


SUPPORTED_CURRENCIES: list[Currency] = [
    Currency(code="USD", name="US Dollar", symbol="$"),
    Currency(code="EUR", name="Euro", symbol="€"),
    Currency(code="GBP", name="British Pound", symbol="£"),
    Currency(code="JPY", name="Japanese Yen", symbol="¥"),
    Currency(code="CAD", name="Canadian Dollar", symbol="C$"),
    Currency(code="AUD", name="Australian Dollar", symbol="A$"),
    Currency(code="CHF", name="Swiss Franc", symbol="₣"),
    Currency(code="CNY", name="Chinese Yuan", symbol="¥"),
    Currency(code="INR", name="Indian Rupee", symbol="₹"),
    Currency(code="BRL", name="Brazilian Real", symbol="R$"),
    Currency(code="KRW", name="South Korean Won", symbol="₩"),
    Currency(code="SGD", name="Singapore Dollar", symbol="S$"),
    Currency(code="HKD", name="Hong Kong Dollar", symbol="HK$"),
    Currency(code="SEK", name="Swedish Krona", symbol="kr"),
    Currency(code="NOK", name="Norwegian Krone", symbol="kr"),
    # African currencies
    Currency(code="NGN", name="Nigerian Naira", symbol="₦"),
    Currency(code="ZAR", name="South African Rand", symbol="R"),
    Currency(code="EGP", name="Egyptian Pound", symbol="£"),
    Currency(code="KES", name="Kenyan Shilling", symbol="KSh"),
    Currency(code="GHS", name="Ghanaian Cedi", symbol="₵"),
    Currency(code="UGX", name="Ugandan Shilling", symbol="USh"),
    Currency(code="TZS", name="Tanzanian Shilling", symbol="TSh"),
    Currency(code="ETB", name="Ethiopian Birr", symbol="Br"),
    Currency(code="MAD", name="Moroccan Dirham", symbol="DH"),
    Currency(code="TND", name="Tunisian Dinar", symbol="DT"),
    Currency(code="BWP", name="Botswana Pula", symbol="P"),
    Currency(code="ZMW", name="Zambian Kwacha", symbol="ZK"),
    Currency(code="MWK", name="Malawian Kwacha", symbol="MK"),
    Currency(code="RWF", name="Rwandan Franc", symbol="RF"),
    Currency(code="XOF", name="West African CFA Franc", symbol="CFA"),
]

_BY_CODE = {currency.code: currency for currency in SUPPORTED_CURRENCIES}


def get_currency_symbol(currency_code: str) -> str:
    """Symbol for a known code; unknown codes are shown as-is."""
    currency = _BY_CODE.get(currency_code)
    return currency.symbol if currency else currency_code


def format_currency(amount: Decimal | int | float, currency_code: str) -> str:
    """
    '-' + symbol + en-US grouped amount with 0-2 fraction digits.

    format_currency(-15.5, "USD") -> '-$15.5'
    format_currency(1234, "JPY") -> '¥1,234'
    """
    value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    rounded = abs(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    formatted = f"{rounded:,.2f}"
    if "." in formatted:
        formatted = formatted.rstrip("0").rstrip(".")

    sign = "-" if value < 0 else ""
    return f"{sign}{get_currency_symbol(currency_code)}{formatted}"


@router.get("", response_model=list[Currency])
def list_currencies() -> list[Currency]:
    return SUPPORTED_CURRENCIES
