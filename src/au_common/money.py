"""Integer arithmetic utilities for bid amounts.

All prices, increments and bids use int in minor currency units (e.g. cents).
No float, no Decimal.
"""

from src.au_common.currencies import currency_symbol

# Amounts are stored as BIGINT
MAX_AMOUNT = 2**63 - 1


def format_amount(amount: int, currency_code: str) -> str:
    """Format minor units for display: (11000, 'USD') -> '$110.00'."""
    symbol = currency_symbol(currency_code)
    sign = "-" if amount < 0 else ""
    abs_amount = abs(amount)
    return f"{sign}{symbol}{abs_amount // 100:,}.{abs_amount % 100:02d}"
