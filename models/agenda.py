"""
Photographer agenda data access.

One agenda row per (photographer, day). Every write goes through an upsert
keyed on that pair, so replaying a save never creates duplicate rows.
"""

from flask import current_app, has_app_context

from database import get_db
from models.user import is_photographer
from utils.errors import ValidationError
from utils.datetime_helpers import to_date_key
from utils.messages import get_message
from utils.validators import normalize_time, validate_date_format, validate_time_format

DEFAULT_START = '08:00'
DEFAULT_END = '17:00'


def _default_window() -> tuple:
    config = current_app.config if has_app_context() else {}
    return (
        config.get('AGENDA_DEFAULT_START', DEFAULT_START),
        config.get('AGENDA_DEFAULT_END', DEFAULT_END),
    )


def normalize_slot_row(row) -> dict:
    """
    Convert an agenda row into the API shape.

    Times are zero-padded HH:MM, the date is a day key and disponible is a
    real boolean.
    """
    data = dict(row)
    return {
        'id': data['id'],
        'idfotografo': data.get('idfotografo'),
        'fecha': to_date_key(data['fecha']) or data['fecha'],
        'horainicio': normalize_time(data.get('horainicio'), DEFAULT_START),
        'horafin': normalize_time(data.get('horafin'), DEFAULT_END),
        'disponible': bool(data.get('disponible')),
    }


def get_agenda(photographer_id: int = None) -> list:
    """
    Get agenda slots ordered by date.

    Args:
        photographer_id: Limit to one photographer; None returns every
            photographer's slots

    Returns:
        List of normalized slot dicts
    """
    db = get_db()
    cursor = db.cursor()

    if photographer_id is None:
        cursor.execute('''
            SELECT id, idfotografo, fecha, horainicio, horafin, disponible
            FROM agenda
            ORDER BY idfotografo, fecha
        ''')
    else:
        cursor.execute('''
            SELECT id, idfotografo, fecha, horainicio, horafin, disponible
            FROM agenda
            WHERE idfotografo = ?
            ORDER BY fecha ASC, horainicio ASC
        ''', (photographer_id,))

    return [normalize_slot_row(row) for row in cursor.fetchall()]


def get_slot(photographer_id: int, fecha: str) -> dict:
    """Get one photographer's slot for a day, or None."""
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        SELECT id, idfotografo, fecha, horainicio, horafin, disponible
        FROM agenda
        WHERE idfotografo = ? AND fecha = ?
    ''', (photographer_id, fecha))
    row = cursor.fetchone()
    return normalize_slot_row(row) if row else None


def prepare_agenda_entries(registros: list) -> list:
    """
    Validate and normalize agenda records received from a client.

    Each record needs a valid fecha. Missing or invalid times fall back to
    the default window, disponible defaults to True. Records repeating a
    date collapse to the last one.

    Raises:
        ValidationError: If there are no records or a date is invalid

    Returns:
        List of {fecha, horainicio, horafin, disponible}
    """
    if not registros:
        raise ValidationError(get_message('agenda_no_records'))

    default_start, default_end = _default_window()
    by_date = {}

    for registro in registros:
        if not isinstance(registro, dict):
            raise ValidationError(get_message('agenda_invalid_date'))
        fecha = registro.get('fecha')
        fecha = fecha.strip() if isinstance(fecha, str) else fecha
        if not validate_date_format(fecha):
            raise ValidationError(get_message('agenda_invalid_date'))

        inicio = registro.get('horainicio')
        fin = registro.get('horafin')
        by_date[fecha] = {
            'fecha': fecha,
            'horainicio': normalize_time(inicio, default_start) if validate_time_format(inicio) else default_start,
            'horafin': normalize_time(fin, default_end) if validate_time_format(fin) else default_end,
            'disponible': registro.get('disponible') is not False,
        }

    return list(by_date.values())


def upsert_agenda_entries(photographer_id: int, entries: list) -> list:
    """
    Insert or update agenda rows keyed on (photographer, fecha).

    Args:
        photographer_id: Photographer (usuario.id)
        entries: Output of prepare_agenda_entries

    Returns:
        The persisted rows for the given dates, ordered by date

    Raises:
        ValidationError: If photographer_id is not an active photographer
    """
    db = get_db()
    cursor = db.cursor()

    if not is_photographer(photographer_id, cursor):
        raise ValidationError(get_message('agenda_invalid_photographer'))

    try:
        for entry in entries:
            cursor.execute('''
                INSERT INTO agenda (idfotografo, fecha, horainicio, horafin, disponible)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT (idfotografo, fecha) DO UPDATE SET
                    horainicio = excluded.horainicio,
                    horafin = excluded.horafin,
                    disponible = excluded.disponible,
                    updated_at = CURRENT_TIMESTAMP
            ''', (photographer_id, entry['fecha'], entry['horainicio'],
                  entry['horafin'], 1 if entry['disponible'] else 0))
        db.commit()
    except Exception:
        db.rollback()
        raise

    fechas = [entry['fecha'] for entry in entries]
    placeholders = ','.join('?' * len(fechas))
    cursor.execute(f'''
        SELECT id, idfotografo, fecha, horainicio, horafin, disponible
        FROM agenda
        WHERE idfotografo = ? AND fecha IN ({placeholders})
        ORDER BY fecha
    ''', [photographer_id, *fechas])
    return [normalize_slot_row(row) for row in cursor.fetchall()]


def consume_slot(cursor, photographer_id: int, fecha: str, hora: str) -> int:
    """
    Reserve a photographer's day for a booking.

    Upserts the (photographer, fecha) slot as unavailable with
    start = end = hora. Runs on the caller's cursor without committing so it
    joins the caller's transaction.

    Returns:
        The slot id
    """
    cursor.execute('''
        INSERT INTO agenda (idfotografo, fecha, horainicio, horafin, disponible)
        VALUES (?, ?, ?, ?, 0)
        ON CONFLICT (idfotografo, fecha) DO UPDATE SET
            horainicio = excluded.horainicio,
            horafin = excluded.horafin,
            disponible = 0,
            updated_at = CURRENT_TIMESTAMP
    ''', (photographer_id, fecha, hora, hora))
    cursor.execute('SELECT id FROM agenda WHERE idfotografo = ? AND fecha = ?',
                   (photographer_id, fecha))
    return cursor.fetchone()['id']
