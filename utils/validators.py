"""
Input validation helper functions.
Provides validation for dates, times and identifiers received by the API.
"""

import re
from datetime import datetime

DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')
TIME_PATTERN = re.compile(r'^(\d{1,2}):(\d{1,2})(?::\d{1,2}(?:\.\d+)?)?$')


def validate_date_format(date_str: str) -> bool:
    """
    Validate date is in YYYY-MM-DD format and is a real calendar day.

    Args:
        date_str: Date string to validate

    Returns:
        True if valid format
    """
    if not isinstance(date_str, str) or not DATE_PATTERN.match(date_str):
        return False
    try:
        datetime.strptime(date_str, '%Y-%m-%d')
        return True
    except ValueError:
        return False


def validate_time_format(time_str: str) -> bool:
    """
    Validate a 24h time of day (H:MM, HH:MM or HH:MM:SS).

    Args:
        time_str: Time string to validate

    Returns:
        True if the string names a valid time of day
    """
    if not isinstance(time_str, str):
        return False
    match = TIME_PATTERN.match(time_str.strip())
    if not match:
        return False
    hours, minutes = int(match.group(1)), int(match.group(2))
    return 0 <= hours <= 23 and 0 <= minutes <= 59


def normalize_time(value, fallback: str = '08:00') -> str:
    """
    Normalize a time of day to zero-padded HH:MM.

    '9:5' -> '09:05', '17:00:00' -> '17:00'; empty or invalid values
    return the fallback.
    """
    if value is None or value == '':
        return fallback
    text = str(value).strip()
    if not validate_time_format(text):
        return fallback
    hours, minutes = text.split(':')[:2]
    return f'{int(hours):02d}:{int(minutes):02d}'


def parse_numeric(value) -> int | None:
    """
    Parse a positive integer identifier.

    Accepts ints and numeric strings; returns None for anything else
    (including 0, negatives, booleans and fractional numbers).
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    if isinstance(value, str):
        value = value.strip()
        if not re.match(r'^\d+$', value):
            return None
        value = int(value)
    if isinstance(value, int) and value > 0:
        return value
    return None


def validate_date_string(value, field_name: str = 'fecha', required: bool = True) -> tuple:
    """
    Validate a YYYY-MM-DD request field.

    Returns:
        Tuple of (is_valid, cleaned_value, error_message)
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        if required:
            return False, None, f'El campo {field_name} es requerido (YYYY-MM-DD).'
        return True, None, ''
    cleaned = value.strip() if isinstance(value, str) else value
    if not validate_date_format(cleaned):
        return False, None, f'El campo {field_name} debe ser una fecha válida (YYYY-MM-DD).'
    return True, cleaned, ''


def validate_integer_list(values, field_name: str, allow_empty: bool = False) -> tuple:
    """
    Validate a list of positive integer ids.

    Invalid entries are dropped (matching how the admin UI sends selections);
    the list itself must be a list, and non-empty unless allow_empty.

    Returns:
        Tuple of (is_valid, cleaned_list, error_message)
    """
    if not isinstance(values, list):
        return False, None, f'El campo {field_name} debe ser una lista.'
    cleaned = []
    for value in values:
        number = parse_numeric(value)
        if number is not None and number not in cleaned:
            cleaned.append(number)
    if not cleaned and not allow_empty:
        return False, None, f'El campo {field_name} no contiene identificadores válidos.'
    return True, cleaned, ''


def sanitize_input(text: str, max_length: int = None) -> str:
    """
    Sanitize text input by trimming and limiting length.

    Args:
        text: Text to sanitize
        max_length: Maximum length (optional)

    Returns:
        Sanitized text
    """
    if not text:
        return ''

    sanitized = str(text).strip()

    if max_length and len(sanitized) > max_length:
        sanitized = sanitized[:max_length]

    return sanitized
