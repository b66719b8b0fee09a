"""Number and CSV cell formatting for the reports."""

from typing import Any


def format_number_comma_decimal(num: Any, decimals: int = 2) -> str:
    """Format ``num`` with a comma decimal separator: ``0.75 -> '0,75'``."""
    if isinstance(num, bool) or not isinstance(num, (int, float)) or num != num:
        return ""
    return f"{num:.{decimals}f}".replace(".", ",")


def escape_csv_value(value: Any, separator: str = ";") -> str:
    """Quote a single cell the way ``csv.writer`` does with QUOTE_MINIMAL."""
    if value is None:
        return ""
    text = str(value)
    if separator in text or '"' in text or "\n" in text or "\r" in text:
        return '"' + text.replace('"', '""') + '"'
    return text
