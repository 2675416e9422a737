"""
Display formatting for amounts and dates.

Amounts use Indonesian grouping ("Rp 1.500.000", "Rp 1.234,50").
Dates are day/month/year without padding, the way the books have
always been written. Month names are fixed English strings so output
does not depend on the process locale.
"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def format_rupiah(
    amount: Union[Decimal, int, float, str],
    decimal_places: Optional[int] = None,
) -> str:
    """
    Format an amount as Rupiah, e.g. 'Rp 1.500.000'.

    Whole amounts are shown without decimals unless decimal_places is given;
    fractional amounts get two.
    """
    value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    if decimal_places is None:
        decimal_places = 0 if value == value.to_integral_value() else 2

    quantized = abs(value).quantize(Decimal(1).scaleb(-decimal_places), ROUND_HALF_UP)
    text = f"{quantized:,.{decimal_places}f}"
    # 1,234,567.89 -> 1.234.567,89
    text = text.replace(",", "_").replace(".", ",").replace("_", ".")
    sign = "-" if value < 0 and quantized != 0 else ""
    return f"Rp {sign}{text}"


def format_date(d: date) -> str:
    """'15/3/2024'."""
    return f"{d.day}/{d.month}/{d.year}"


def format_long_date(d: date) -> str:
    """'19 October 2026', used on signatures."""
    return f"{d.day} {MONTH_NAMES[d.month - 1]} {d.year}"


def month_label(year: int, month: int) -> str:
    """'March 2024'."""
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
    return f"{MONTH_NAMES[month - 1]} {year}"


def month_key(year: int, month: int) -> str:
    """'2024-03'."""
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")
    return f"{year:04d}-{month:02d}"
