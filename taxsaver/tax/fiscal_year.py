"""Indian fiscal-year helpers.

A fiscal year runs 1 April to 31 March and is written ``"YYYY-YY"``,
e.g. ``"2024-25"`` for 1 April 2024 to 31 March 2025.
"""

import re
from datetime import date
from typing import Optional

from taxsaver.errors import ErrorCode, ValidationError
from taxsaver.tax.config import FISCAL_YEAR_START_MONTH

_FY_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")


def parse_fiscal_year(fiscal_year: str) -> int:
    """Return the starting calendar year of a ``"YYYY-YY"`` string."""
    match = _FY_PATTERN.match(fiscal_year or "")
    if not match:
        raise ValidationError(
            f"Fiscal year must look like 'YYYY-YY', got {fiscal_year!r}",
            ErrorCode.INVALID_FISCAL_YEAR,
            field="fiscal_year",
        )
    start = int(match.group(1))
    if int(match.group(2)) != (start + 1) % 100:
        raise ValidationError(
            f"Fiscal year {fiscal_year!r} does not span consecutive years",
            ErrorCode.INVALID_FISCAL_YEAR,
            field="fiscal_year",
        )
    return start


def format_fiscal_year(start_year: int) -> str:
    return f"{start_year}-{str(start_year + 1)[-2:]}"


def fiscal_year_for(day: date) -> str:
    """Fiscal year containing ``day``."""
    if day.month >= FISCAL_YEAR_START_MONTH:
        return format_fiscal_year(day.year)
    return format_fiscal_year(day.year - 1)


def current_fiscal_year(today: Optional[date] = None) -> str:
    return fiscal_year_for(today or date.today())


def next_fiscal_year(fiscal_year: str) -> str:
    return format_fiscal_year(parse_fiscal_year(fiscal_year) + 1)


def fiscal_year_bounds(fiscal_year: str) -> tuple[date, date]:
    """First and last day (inclusive) of the fiscal year."""
    start = parse_fiscal_year(fiscal_year)
    return date(start, FISCAL_YEAR_START_MONTH, 1), date(start + 1, 3, 31)


def fiscal_year_end(fiscal_year: str) -> date:
    """31 March closing the fiscal year; the harvesting deadline."""
    return fiscal_year_bounds(fiscal_year)[1]


def years_between(from_fiscal_year: str, to_fiscal_year: str) -> int:
    return parse_fiscal_year(to_fiscal_year) - parse_fiscal_year(from_fiscal_year)
