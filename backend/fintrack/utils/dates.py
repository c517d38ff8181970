"""Month range helpers."""
from datetime import date
from typing import Optional, Tuple

from fintrack.core.errors import ValidationFailed


def month_bounds(month: Optional[str] = None, today: Optional[date] = None) -> Tuple[date, date]:
    """
    Return [start, end) for a "YYYY-MM" month.
    Defaults to the month containing `today`.
    """
    if month:
        try:
            year_str, month_str = month.split("-")
            start = date(int(year_str), int(month_str), 1)
        except ValueError:
            raise ValidationFailed("month must be in YYYY-MM format")
    else:
        start = (today or date.today()).replace(day=1)

    if start.month == 12:
        end = date(start.year + 1, 1, 1)
    else:
        end = date(start.year, start.month + 1, 1)
    return start, end
