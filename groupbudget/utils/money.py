"""
Unified money formatting for budget views.

Usage:
    from groupbudget.utils.money import format_money, format_compact

    format_money(15000, "ARS")      -> "15,000 ARS"
    format_money(1200.5, "USD", 2)  -> "1,200.50 USD"
    format_compact(1_500_000)       -> "$1.5M"
"""
from decimal import Decimal


def format_money(amount, currency: str = "USD", decimals: int = 0) -> str:
    """
    Format an amount with thousands separators and a currency code suffix.

    Args:
        amount: number (int / float / Decimal / str)
        currency: ISO currency code (USD, ARS, MXN ...)
        decimals: digits after the decimal point

    Returns:
        "15,000 ARS" / "1,200 USD"
    """
    if isinstance(amount, str):
        amount = Decimal(amount)
    fmt = f"{{:,.{decimals}f}}"
    return f"{fmt.format(amount)} {currency}"


def format_compact(amount: float) -> str:
    """Short dashboard label: $1.2M, $1.5k, $950."""
    if abs(amount) >= 1_000_000:
        return f"${amount / 1_000_000:.1f}M"
    if abs(amount) >= 1_000:
        return f"${amount / 1_000:.1f}k"
    return f"${amount:.0f}"
