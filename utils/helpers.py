"""
Miscellaneous utility helper functions.
Provides text normalization and formatting used across the application.
"""

import re
import unicodedata


def normalize_text(text) -> str:
    """
    Normalize text for case- and accent-insensitive comparison.
    Removes accents, lowercases and collapses whitespace.

    Examples:
        'En Edición' -> 'en edicion'
        '  ENTREGADA ' -> 'entregada'
    """
    if text is None:
        return ''
    # Decompose unicode characters (é -> e + combining accent)
    normalized = unicodedata.normalize('NFD', str(text))
    # Remove combining diacritical marks (accents)
    without_accents = ''.join(c for c in normalized if unicodedata.category(c) != 'Mn')
    return re.sub(r'\s+', ' ', without_accents).strip().lower()


def slugify_key(value) -> str:
    """
    Build a catalog key from a label or numeric id.

    Examples:
        'Con anticipo' -> 'con-anticipo'
        2 -> '2'
    """
    if isinstance(value, bool):
        return ''
    if isinstance(value, (int, float)):
        return str(value)
    text = normalize_text(value)
    text = re.sub(r'[^a-z0-9\s-]', '', text)
    return re.sub(r'\s+', '-', text)


def format_money(amount) -> str:
    """Format an amount in quetzales: 1500 -> 'Q1,500.00'."""
    try:
        return f'Q{float(amount):,.2f}'
    except (TypeError, ValueError):
        return 'Q0.00'
