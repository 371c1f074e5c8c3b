import calendar
from datetime import date, datetime
from typing import Optional, Tuple, Union

MONTH_FORMAT = "%Y-%m"
DATE_FORMAT = "%Y-%m-%d"


def current_month() -> str:
    return date.today().strftime(MONTH_FORMAT)


def month_key(d: date) -> str:
    return d.strftime(MONTH_FORMAT)


def parse_date(value: Union[str, date, None]) -> Optional[date]:
    """Parse 'YYYY-MM-DD' (or a full ISO timestamp) into a date, None on failure."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    for fmt in (DATE_FORMAT, "%Y/%m/%d"):
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(value).date()
    except ValueError:
        return None


def parse_month(month: str) -> Optional[date]:
    """Return the first day of a 'YYYY-MM' month, None if the key is malformed."""
    if not month or not isinstance(month, str):
        return None
    try:
        return datetime.strptime(month, MONTH_FORMAT).date()
    except ValueError:
        return None


def month_range(month: str) -> Tuple[date, date]:
    """(first_day, last_day) of a 'YYYY-MM' month, both inclusive."""
    start = parse_month(month)
    if start is None:
        raise ValueError(f"Invalid month: {month}")
    last_day = calendar.monthrange(start.year, start.month)[1]
    return start, start.replace(day=last_day)


def prev_month(month: str) -> str:
    d = parse_month(month)
    if d is None:
        raise ValueError(f"Invalid month: {month}")
    if d.month == 1:
        return month_key(d.replace(year=d.year - 1, month=12))
    return month_key(d.replace(month=d.month - 1))


def recent_months(month: str, count: int) -> Tuple[str, ...]:
    """The `count` month keys ending with `month`, oldest first."""
    keys = [month]
    for _ in range(max(0, count - 1)):
        keys.append(prev_month(keys[-1]))
    return tuple(reversed(keys))
