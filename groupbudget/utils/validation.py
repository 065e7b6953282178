"""
Validation utilities for numeric cell input
"""
import math
import re


_THOUSANDS_COMMA = re.compile(r"^[+-]?[1-9]\d{0,2}(,\d{3})+$")


def normalize_decimal_input(value: str) -> str:
    """
    Normalize an amount typed into a cell to dot-decimal notation

    - both separators present: the last one is the decimal point, the other groups thousands
    - only commas in 3-digit groups: thousands separators ("1,500" is 1500)
    - a single other comma: decimal comma ("100,50" is 100.5)

    Example:
        >>> normalize_decimal_input(" 100,50 ")
        "100.50"
        >>> normalize_decimal_input("1,500")
        "1500"
        >>> normalize_decimal_input("1.500,25")
        "1500.25"
    """
    value = value.strip().replace(" ", "")
    if "," in value and "." in value:
        if value.rfind(",") > value.rfind("."):
            return value.replace(".", "").replace(",", ".")
        return value.replace(",", "")
    if _THOUSANDS_COMMA.match(value):
        return value.replace(",", "")
    return value.replace(",", ".")


def parse_amount(value) -> float:
    """
    Coerce edit-as-you-type input to a float.

    Non-numeric, empty, None and non-finite input all become 0.0; this never raises.

    Example:
        >>> parse_amount("1500.5")
        1500.5
        >>> parse_amount("1,500")
        1500.0
        >>> parse_amount("2,5")
        2.5
        >>> parse_amount("")
        0.0
        >>> parse_amount("abc")
        0.0
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(normalize_decimal_input(str(value)))
        except ValueError:
            return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def validate_month(month: int) -> int:
    """
    Check a 1-based month index

    Raises:
        ValueError: if month is outside 1..12
    """
    if isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month!r}")
    return month


def validate_currency_code(code: str) -> str:
    """
    Currency codes are three upper-case letters (USD, ARS, MXN)

    Raises:
        ValueError: if the code is malformed
    """
    if not isinstance(code, str) or len(code) != 3 or not code.isalpha() or not code.isupper():
        raise ValueError(f"Invalid currency code: {code!r}")
    return code
