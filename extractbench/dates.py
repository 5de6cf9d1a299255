"""Recognize date-like values and decide calendar-date equivalence.

Supported shapes:
- ISO: 2025-01-15, 2025/01/15, 2025.01.15
- US numeric: 01/15/2025, 1-15-2025, 01/15/25
- Month abbreviation: JAN-15-2025, Jan/15/25
- Long form: January 15, 2025; Jan. 15 2025; 15 January 2025
- Month and year: January 2025, Jan 2025, 2025-01
- Year only: 2025

Day-first numeric dates (15/01/2025) are never interpreted: they are
indistinguishable from US dates, so a numeric date whose month is out
of range simply fails to parse.
"""

from __future__ import annotations

import datetime
import re
from dataclasses import dataclass
from typing import Callable, Literal

from extractbench.config import EvaluationConfig

MONTHS: dict[str, int] = {
    "jan": 1, "january": 1,
    "feb": 2, "february": 2,
    "mar": 3, "march": 3,
    "apr": 4, "april": 4,
    "may": 5,
    "jun": 6, "june": 6,
    "jul": 7, "july": 7,
    "aug": 8, "august": 8,
    "sep": 9, "sept": 9, "september": 9,
    "oct": 10, "october": 10,
    "nov": 11, "november": 11,
    "dec": 12, "december": 12,
}  # fmt: skip

Granularity = Literal["day", "month", "year"]


@dataclass(frozen=True)
class ParsedDate:
    """A calendar date at day, month or year granularity."""

    year: int
    month: int | None = None
    day: int | None = None

    @property
    def granularity(self) -> Granularity:
        if self.day is not None:
            return "day"
        if self.month is not None:
            return "month"
        return "year"

    def isoformat(self) -> str:
        if self.day is not None:
            return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"
        if self.month is not None:
            return f"{self.year:04d}-{self.month:02d}"
        return f"{self.year:04d}"


_Parser = Callable[["re.Match[str]", EvaluationConfig], "ParsedDate | None"]


def _expand_year(raw: str, config: EvaluationConfig) -> int:
    year = int(raw)
    if len(raw) == 2:
        return 2000 + year if year < config.two_digit_year_pivot else 1900 + year
    return year


def _month_number(name: str) -> int | None:
    return MONTHS.get(name.lower().rstrip("."))


def _day_date(year: int, month: int | None, day: int) -> ParsedDate | None:
    if month is None:
        return None
    try:
        datetime.date(year, month, day)
    except ValueError:
        return None
    return ParsedDate(year=year, month=month, day=day)


def _month_date(year: int, month: int | None) -> ParsedDate | None:
    if month is None or not 1 <= month <= 12:
        return None
    return ParsedDate(year=year, month=month)


_DATE_PATTERNS: list[tuple[re.Pattern[str], _Parser]] = [
    # YYYY-MM-DD (ISO, unambiguous)
    (
        re.compile(r"^(\d{4})[-/.](\d{1,2})[-/.](\d{1,2})$"),
        lambda m, c: _day_date(int(m[1]), int(m[2]), int(m[3])),
    ),
    # MM/DD/YYYY and MM/DD/YY (US month-first only)
    (
        re.compile(r"^(\d{1,2})[-/](\d{1,2})[-/](\d{4}|\d{2})$"),
        lambda m, c: _day_date(_expand_year(m[3], c), int(m[1]), int(m[2])),
    ),
    # MON-DD-YYYY and MON-DD-YY
    (
        re.compile(r"^([a-z]{3,4})[-/](\d{1,2})[-/](\d{4}|\d{2})$", re.IGNORECASE),
        lambda m, c: _day_date(_expand_year(m[3], c), _month_number(m[1]), int(m[2])),
    ),
    # Month D, YYYY
    (
        re.compile(r"^([a-z]+\.?)\s+(\d{1,2}),?\s+(\d{4})$", re.IGNORECASE),
        lambda m, c: _day_date(int(m[3]), _month_number(m[1]), int(m[2])),
    ),
    # D Month YYYY
    (
        re.compile(r"^(\d{1,2})\s+([a-z]+\.?),?\s+(\d{4})$", re.IGNORECASE),
        lambda m, c: _day_date(int(m[3]), _month_number(m[2]), int(m[1])),
    ),
    # Month YYYY
    (
        re.compile(r"^([a-z]+\.?),?\s+(\d{4})$", re.IGNORECASE),
        lambda m, c: _month_date(int(m[2]), _month_number(m[1])),
    ),
    # YYYY-MM
    (
        re.compile(r"^(\d{4})[-/](\d{1,2})$"),
        lambda m, c: _month_date(int(m[1]), int(m[2])),
    ),
    # YYYY
    (
        re.compile(r"^([12]\d{3})$"),
        lambda m, c: ParsedDate(year=int(m[1])),
    ),
]

# Patterns whose first alphabetic group must be a real month name for the
# value to count as date-like at all.
_NAMED_MONTH_GROUP: dict[int, int] = {2: 1, 3: 1, 4: 2, 5: 1}


def is_date_like(value: str | None) -> bool:
    """Return True if value has the shape of a supported date format.

    Numeric shapes count even when out of range ("15/01/2025" is
    date-like but does not parse); month-name shapes only count when the
    name is a real month, so "Acme 2025" is not date-like.
    """
    if not value:
        return False
    text = str(value).strip()
    for index, (pattern, _) in enumerate(_DATE_PATTERNS):
        match = pattern.match(text)
        if not match:
            continue
        group = _NAMED_MONTH_GROUP.get(index)
        if group is None or _month_number(match[group]) is not None:
            return True
    return False


def parse_date(value: str | None, config: EvaluationConfig | None = None) -> ParsedDate | None:
    """Parse a date-like value.

    Args:
        value: Raw value
        config: Evaluation configuration (two-digit year pivot)

    Returns:
        ParsedDate, or None if the value is not a valid supported date
    """
    if not value:
        return None
    if config is None:
        config = EvaluationConfig()

    text = str(value).strip()
    for pattern, parse in _DATE_PATTERNS:
        match = pattern.match(text)
        if match:
            parsed = parse(match, config)
            if parsed is not None:
                return parsed
    return None


def compare_dates(a: str | None, b: str | None, config: EvaluationConfig | None = None) -> bool:
    """Return True if both values denote the same calendar date.

    Both values must parse, at the same granularity, with every
    component equal. "2025" never equals "2025-01-15".
    """
    first = parse_date(a, config)
    second = parse_date(b, config)
    if first is None or second is None:
        return False
    return first == second
