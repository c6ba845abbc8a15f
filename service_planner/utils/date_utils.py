"""Month key (YYYY-MM) validation and arithmetic"""

import re
from datetime import date, datetime
from typing import List, Optional, Union

from dateutil.relativedelta import relativedelta

from service_planner.domain.exceptions import InvalidArgumentError

MONTH_KEY_PATTERN = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")

StartInput = Union[date, datetime, str, None]


def is_valid_month_key(value: object) -> bool:
    """True for strings shaped like 2025-01"""
    return isinstance(value, str) and MONTH_KEY_PATTERN.match(value) is not None


def require_month_key(value: object) -> str:
    if not is_valid_month_key(value):
        raise InvalidArgumentError(f"Invalid month: {value!r}")
    return value  # type: ignore[return-value]


def parse_month_key(month: str) -> date:
    """First day of the month named by a key"""
    match = MONTH_KEY_PATTERN.match(month) if isinstance(month, str) else None
    if match is None:
        raise InvalidArgumentError(f"Invalid month: {month!r}")
    return date(int(match.group(1)), int(match.group(2)), 1)


def to_month_key(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}"


def months_in_period(start: str, end: str) -> int:
    """Number of months from start to end (inclusive)"""
    start_date = parse_month_key(start)
    end_date = parse_month_key(end)
    delta = relativedelta(end_date, start_date)
    return delta.years * 12 + delta.months + 1


def offset_months(start: str, offset: int) -> str:
    """Month key `offset` months after start (negative offsets go back)"""
    return to_month_key(parse_month_key(start) + relativedelta(months=offset))


def generate_month_range(start: str, end: str) -> List[str]:
    """Generate list of month keys from start to end (inclusive)"""
    return [offset_months(start, i) for i in range(months_in_period(start, end))]


def current_month(today: Optional[date] = None) -> str:
    return to_month_key(today or date.today())


def normalize_start_month(start: StartInput = None) -> str:
    """
    Coerce a plan start into a month key.

    Accepts None (current month), a date/datetime, a YYYY-MM key or an
    ISO date/datetime string.
    """
    if start is None:
        return current_month()
    if isinstance(start, (date, datetime)):
        return to_month_key(start)
    if isinstance(start, str):
        if is_valid_month_key(start):
            return start
        try:
            return to_month_key(datetime.fromisoformat(start))
        except ValueError as e:
            raise InvalidArgumentError(f"Invalid start date: {start!r}") from e
    raise InvalidArgumentError(f"Invalid start date: {start!r}")
