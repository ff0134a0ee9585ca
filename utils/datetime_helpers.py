"""
Date helpers for the agenda: timezone-aware "today", stable day keys and
the fixed 6-week month grid used by the availability calendar.

A day key is the YYYY-MM-DD string built from the local calendar
components of a date, so two values on the same day with different times
always share one key.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from flask import current_app, has_app_context

GRID_CELLS = 42  # 6 rows x 7 columns

MONTH_NAMES = [
    'enero', 'febrero', 'marzo', 'abril', 'mayo', 'junio',
    'julio', 'agosto', 'septiembre', 'octubre', 'noviembre', 'diciembre'
]

DAY_LABELS = ['Dom', 'Lun', 'Mar', 'Mié', 'Jue', 'Vie', 'Sáb']


@dataclass(frozen=True)
class MonthCell:
    date: date
    key: str
    in_current_month: bool


def get_timezone() -> ZoneInfo:
    """Get the configured timezone."""
    tz_name = 'America/Guatemala'
    if has_app_context():
        tz_name = current_app.config.get('TIMEZONE', tz_name)
    return ZoneInfo(tz_name)


def get_today() -> date:
    """Get today's date in the configured timezone."""
    return get_now().date()


def get_now() -> datetime:
    """Get current datetime in the configured timezone."""
    return datetime.now(get_timezone())


def to_date_key(value) -> str | None:
    """
    Format a date as its YYYY-MM-DD day key.

    Accepts date, datetime (its own calendar components are used, never a
    UTC conversion) or an ISO-8601 string. Returns None for invalid input.
    """
    if isinstance(value, datetime):
        value = value.date()
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            value = datetime.fromisoformat(text.replace('Z', '+00:00')).date()
        except ValueError:
            return None
    if not isinstance(value, date):
        return None
    return f'{value.year:04d}-{value.month:02d}-{value.day:02d}'


def from_date_key(key) -> date | None:
    """
    Parse a YYYY-MM-DD day key.

    Returns None instead of raising for malformed keys, zero or missing
    components and impossible dates.
    """
    if not key or not isinstance(key, str):
        return None
    parts = key.strip().split('-')
    if len(parts) != 3:
        return None
    try:
        year, month, day = (int(part) for part in parts)
    except ValueError:
        return None
    if not year or not month or not day:
        return None
    try:
        return date(year, month, day)
    except ValueError:
        return None


def build_month_grid(reference=None) -> list:
    """
    Build the 42-cell calendar grid for the month of `reference`.

    The grid starts on the Sunday on or before the 1st of the month, so the
    layout is always six full weeks whatever the month length.

    Returns:
        List of MonthCell
    """
    if isinstance(reference, datetime):
        reference = reference.date()
    if not isinstance(reference, date):
        reference = get_today()

    first_day = reference.replace(day=1)
    # date.weekday(): Monday=0 ... Sunday=6; offset back to Sunday
    start_offset = (first_day.weekday() + 1) % 7
    start = first_day - timedelta(days=start_offset)

    cells = []
    for index in range(GRID_CELLS):
        current = start + timedelta(days=index)
        cells.append(MonthCell(
            date=current,
            key=to_date_key(current),
            in_current_month=current.month == reference.month
        ))
    return cells


def date_range_keys(start_key: str, end_key: str) -> list:
    """
    Inclusive list of day keys between two keys.

    Walks forward or backward depending on which bound is earlier, starting
    at start_key. Returns [] if either key is invalid.
    """
    start = from_date_key(start_key)
    end = from_date_key(end_key)
    if start is None or end is None:
        return []

    step = timedelta(days=1 if start <= end else -1)
    keys = []
    cursor = start
    while (step.days > 0 and cursor <= end) or (step.days < 0 and cursor >= end):
        keys.append(to_date_key(cursor))
        cursor += step
    return keys


def is_key_between(key: str, bound_a: str, bound_b: str) -> bool:
    """True if key falls in the inclusive range spanned by two keys."""
    current = from_date_key(key)
    a = from_date_key(bound_a)
    b = from_date_key(bound_b)
    if current is None or a is None or b is None:
        return False
    return min(a, b) <= current <= max(a, b)


def shift_month(reference: date, delta: int) -> date:
    """Move to the first day of the month `delta` months away."""
    month_index = reference.year * 12 + (reference.month - 1) + delta
    return date(month_index // 12, month_index % 12 + 1, 1)


def format_human_date(key: str) -> str:
    """Spanish long form of a day key: '2024-07-10' -> '10 de julio de 2024'."""
    value = from_date_key(key)
    if value is None:
        return ''
    return f'{value.day} de {MONTH_NAMES[value.month - 1]} de {value.year}'
