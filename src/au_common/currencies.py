"""Static ISO 4217 currency reference data.

Items store a currency code; everything else (symbol, display name) is looked
up here. The table is read-only at runtime.
"""

from dataclasses import dataclass

from src.au_common.errors import UnknownCurrencyError


@dataclass(frozen=True)
class Currency:
    code: str
    name: str
    symbol: str


_CURRENCIES: tuple[Currency, ...] = (
    Currency("USD", "US Dollar", "$"),
    Currency("EUR", "Euro", "€"),
    Currency("GBP", "British Pound", "£"),
    Currency("JPY", "Japanese Yen", "¥"),
    Currency("CHF", "Swiss Franc", "CHF"),
    Currency("CAD", "Canadian Dollar", "C$"),
    Currency("AUD", "Australian Dollar", "A$"),
    Currency("NZD", "New Zealand Dollar", "NZ$"),
    Currency("CNY", "Chinese Yuan", "¥"),
    Currency("HKD", "Hong Kong Dollar", "HK$"),
    Currency("SGD", "Singapore Dollar", "S$"),
    Currency("SEK", "Swedish Krona", "kr"),
    Currency("NOK", "Norwegian Krone", "kr"),
    Currency("DKK", "Danish Krone", "kr"),
    Currency("KRW", "South Korean Won", "₩"),
    Currency("INR", "Indian Rupee", "₹"),
    Currency("BRL", "Brazilian Real", "R$"),
    Currency("ZAR", "South African Rand", "R"),
    Currency("MXN", "Mexican Peso", "$"),
    Currency("PLN", "Polish Zloty", "zł"),
    Currency("CZK", "Czech Koruna", "Kč"),
    Currency("HUF", "Hungarian Forint", "Ft"),
    Currency("TRY", "Turkish Lira", "₺"),
    Currency("ILS", "Israeli Shekel", "₪"),
    Currency("TWD", "Taiwan Dollar", "NT$"),
    Currency("THB", "Thai Baht", "฿"),
)

CURRENCIES: dict[str, Currency] = {c.code: c for c in _CURRENCIES}

DEFAULT_CURRENCY = "USD"


def list_currencies() -> list[Currency]:
    """All currencies, sorted by code."""
    return sorted(CURRENCIES.values(), key=lambda c: c.code)


def get_currency(code: str) -> Currency:
    """Look up a currency by ISO code (case-insensitive)."""
    currency = CURRENCIES.get(code.upper())
    if currency is None:
        raise UnknownCurrencyError(code)
    return currency


def currency_symbol(code: str) -> str:
    """Symbol for display; falls back to the code itself for unknown values."""
    currency = CURRENCIES.get(code.upper())
    return currency.symbol if currency else code
