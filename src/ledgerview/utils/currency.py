from typing import Optional


def format_currency(cents: Optional[int | float | str]) -> str:
    """Render an amount in cents as a US-dollar display string ("$1,234.56").

    None is treated as zero, numeric strings (as some drivers return for
    SUM aggregates) are accepted.
    """
    value = float(cents or 0) / 100
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"
