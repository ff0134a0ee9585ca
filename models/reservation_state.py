"""
Reservation state management functions.
Handles single booking edits (reschedule + status change), bulk status
changes and the status history.
"""

from flask import current_app

from database import get_db
from models.activity_state import (
    get_activity_states, effective_state, resolve_state, is_delivered, is_reserved
)
from models.agenda import consume_slot
from models.payment_state import (
    DEPOSIT_KEY, PENDING_KEY, get_payment_states, find_payment_state, resolve_booking_payment_state
)
from models.reservation import get_reservation_by_id, get_reservation_detail
from models.user import is_photographer
from utils.errors import ConflictError, NotFoundError, ValidationError
from utils.messages import get_message
from utils.validators import normalize_time, validate_date_format, validate_time_format


# =============================================================================
# SINGLE UPDATE
# =============================================================================

def _validate_schedule(fecha, hora, photographer_id) -> tuple:
    """Check fecha/hora; both are required when a photographer is given."""
    fecha = fecha.strip() if isinstance(fecha, str) else fecha
    hora = hora.strip() if isinstance(hora, str) else hora

    if fecha or photographer_id is not None:
        if not validate_date_format(fecha):
            raise ValidationError(get_message('invalid_date'))
    if hora or photographer_id is not None:
        if not validate_time_format(hora) or len(hora.split(':')) != 2:
            raise ValidationError(get_message('invalid_time'))
        hora = normalize_time(hora)

    return fecha or None, hora or None


def update_reservation(reservation_id: int, fecha: str = None, hora: str = None,
                       photographer_id: int = None, status_name=None,
                       changed_by: str = 'system') -> dict:
    """
    Reschedule a booking and/or change its lifecycle status.

    Steps:
    1. Validate fecha (YYYY-MM-DD) and hora (H:MM / HH:MM)
    2. Fetch the booking (NotFoundError)
    3. Reject delivered bookings (ConflictError)
    4. Resolve the requested status by name or id (ValidationError)
    5. With a photographer: reserve the (photographer, fecha) slot,
       start = end = hora, unavailable
    6. Update slot reference and status in one transaction, record history,
       move a pending payment to deposit when the booking becomes Reservada
    7. Return the re-fetched joined booking

    Args:
        reservation_id: Booking ID
        fecha: New day key
        hora: New time of day
        photographer_id: Photographer whose slot is taken
        status_name: Lifecycle status name (or id)
        changed_by: Username making the change

    Returns:
        Joined booking DTO
    """
    if status_name in (None, '') and photographer_id is None:
        raise ValidationError(get_message('no_changes'))

    fecha, hora = _validate_schedule(fecha, hora, photographer_id)

    db = get_db()
    cursor = db.cursor()

    reservation = get_reservation_by_id(reservation_id, cursor)
    if not reservation:
        raise NotFoundError(get_message('reservation_not_found'))

    states = get_activity_states()
    current_state = effective_state(reservation['idestado_actividad'], states)
    if is_delivered(current_state):
        raise ConflictError(get_message('reservation_delivered'))

    new_state = current_state
    if status_name not in (None, ''):
        new_state = resolve_state(status_name, states)
        if not new_state:
            raise ValidationError(get_message('invalid_state'))

    if photographer_id is not None:
        if not is_photographer(photographer_id, cursor):
            raise ValidationError(get_message('agenda_invalid_photographer'))

    try:
        agenda_id = reservation['idagenda']
        if photographer_id is not None:
            agenda_id = consume_slot(cursor, photographer_id, fecha, hora)

        cursor.execute('''
            UPDATE actividad
            SET idagenda = ?,
                idestado_actividad = ?,
                updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
        ''', (agenda_id, new_state['id'], reservation_id))

        state_changed = new_state['id'] != reservation['idestado_actividad']
        if state_changed or agenda_id != reservation['idagenda']:
            cursor.execute('''
                INSERT INTO actividad_historial
                (idactividad, idestado_anterior, idestado_nuevo, idagenda, cambiado_por)
                VALUES (?, ?, ?, ?, ?)
            ''', (reservation_id, reservation['idestado_actividad'], new_state['id'],
                  agenda_id, changed_by))

        if state_changed and is_reserved(new_state):
            _apply_deposit_on_reserve(cursor, reservation)

        db.commit()
    except Exception:
        db.rollback()
        raise

    current_app.logger.info(
        'Reserva %s actualizada por %s: estado %s, agenda %s',
        reservation_id, changed_by, new_state['nombre_estado'], agenda_id
    )

    return get_reservation_detail(reservation_id)


def _apply_deposit_on_reserve(cursor, reservation: dict) -> None:
    """A booking entering Reservada with nothing paid moves to 'Con anticipo'."""
    payment_states = get_payment_states()
    current = resolve_booking_payment_state(reservation, payment_states)
    if current['key'] != PENDING_KEY:
        return
    deposit = find_payment_state(DEPOSIT_KEY, payment_states)
    if not deposit:
        return
    cursor.execute('''
        UPDATE actividad
        SET idestado_pago = ?,
            estado_pago_texto = ?
        WHERE id = ?
    ''', (deposit['id'], deposit['label'], reservation['id']))


# =============================================================================
# BULK UPDATE
# =============================================================================

def bulk_update_reservation_state(reservation_ids: list, status_name,
                                  changed_by: str = 'system') -> tuple:
    """
    Overwrite the status of several bookings at once.

    The status is resolved once before any write. Unknown ids and delivered
    bookings are left untouched and excluded from the count.

    Args:
        reservation_ids: Booking IDs
        status_name: Lifecycle status name (or id)
        changed_by: Username making the change

    Returns:
        Tuple (updated_count, status_id)
    """
    if not reservation_ids or status_name in (None, ''):
        raise ValidationError(get_message('bulk_selection_required'))

    states = get_activity_states()
    new_state = resolve_state(status_name, states)
    if not new_state:
        raise ValidationError(get_message('unknown_state'))

    delivered_ids = [s['id'] for s in states if is_delivered(s)]

    db = get_db()
    cursor = db.cursor()

    placeholders = ','.join('?' * len(reservation_ids))
    cursor.execute(f'''
        SELECT id, idestado_actividad, idagenda
        FROM actividad
        WHERE id IN ({placeholders})
    ''', list(reservation_ids))
    eligible = [
        dict(row) for row in cursor.fetchall()
        if row['idestado_actividad'] not in delivered_ids
    ]

    if not eligible:
        return 0, new_state['id']

    try:
        eligible_ids = [row['id'] for row in eligible]
        id_placeholders = ','.join('?' * len(eligible_ids))
        cursor.execute(f'''
            UPDATE actividad
            SET idestado_actividad = ?,
                updated_at = CURRENT_TIMESTAMP
            WHERE id IN ({id_placeholders})
        ''', [new_state['id'], *eligible_ids])

        for row in eligible:
            if row['idestado_actividad'] == new_state['id']:
                continue
            cursor.execute('''
                INSERT INTO actividad_historial
                (idactividad, idestado_anterior, idestado_nuevo, idagenda, cambiado_por, notas)
                VALUES (?, ?, ?, ?, ?, ?)
            ''', (row['id'], row['idestado_actividad'], new_state['id'],
                  row['idagenda'], changed_by, 'Actualización masiva'))

        db.commit()
    except Exception:
        db.rollback()
        raise

    current_app.logger.info(
        'Estado %s aplicado a %s reservas por %s',
        new_state['nombre_estado'], len(eligible), changed_by
    )

    return len(eligible), new_state['id']


# =============================================================================
# HISTORY
# =============================================================================

def get_status_history(reservation_id: int) -> list:
    """
    Get status history for a booking.

    Args:
        reservation_id: Booking ID

    Returns:
        List of history entries, newest first
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        SELECT h.id, h.idactividad, h.idagenda, h.cambiado_por, h.notas,
               strftime('%Y-%m-%d %H:%M:%S', h.created_at) AS created_at,
               ea.nombre_estado AS estado_anterior,
               en.nombre_estado AS estado_nuevo
        FROM actividad_historial h
        LEFT JOIN estado_actividad ea ON h.idestado_anterior = ea.id
        LEFT JOIN estado_actividad en ON h.idestado_nuevo = en.id
        WHERE h.idactividad = ?
        ORDER BY h.created_at DESC, h.id DESC
    ''', (reservation_id,))
    return [dict(row) for row in cursor.fetchall()]
