"""
Booking (actividad) data access.

Joined bookings are normalized here, at the data-access boundary: to-one
relations (estado, agenda, paquete, usuario, estado_pago) are always a dict
or None, never a list, and to-many relations (pagos) are always a list.
"""

from database import get_db
from models.activity_state import get_activity_states, effective_state
from models.payment_state import get_payment_states, resolve_booking_payment_state, summarize_payments
from utils.datetime_helpers import to_date_key
from utils.validators import normalize_time

_JOINED_SELECT = '''
    SELECT a.id, a.idusuario, a.idagenda, a.idpaquete, a.idestado_actividad,
           a.idestado_pago, a.estado_pago_texto, a.nombre_actividad, a.ubicacion,
           ag.fecha AS agenda_fecha, ag.horainicio AS agenda_horainicio,
           ag.horafin AS agenda_horafin, ag.idfotografo AS agenda_idfotografo,
           ag.disponible AS agenda_disponible,
           f.username AS fotografo_username,
           p.nombre_paquete AS paquete_nombre, p.precio AS paquete_precio,
           u.username AS usuario_username,
           ep.nombre_estado AS estado_pago_nombre
    FROM actividad a
    LEFT JOIN agenda ag ON a.idagenda = ag.id
    LEFT JOIN usuario f ON ag.idfotografo = f.id
    LEFT JOIN paquete p ON a.idpaquete = p.id
    LEFT JOIN usuario u ON a.idusuario = u.id
    LEFT JOIN estado_pago ep ON a.idestado_pago = ep.id
'''


def _row_to_reservation(row, activity_states: list, payment_states: list) -> dict:
    """Build the joined booking DTO from a _JOINED_SELECT row."""
    data = dict(row)
    state = effective_state(data['idestado_actividad'], activity_states)

    agenda = None
    if data['idagenda'] is not None and data['agenda_fecha'] is not None:
        agenda = {
            'id': data['idagenda'],
            'fecha': to_date_key(data['agenda_fecha']) or data['agenda_fecha'],
            'horainicio': normalize_time(data['agenda_horainicio'], None),
            'horafin': normalize_time(data['agenda_horafin'], None),
            'idfotografo': data['agenda_idfotografo'],
            'fotografo': data['fotografo_username'],
            'disponible': bool(data['agenda_disponible']),
        }

    paquete = None
    if data['idpaquete'] is not None and data['paquete_nombre'] is not None:
        paquete = {
            'id': data['idpaquete'],
            'nombre_paquete': data['paquete_nombre'],
            'precio': data['paquete_precio'],
        }

    usuario = None
    if data['idusuario'] is not None and data['usuario_username'] is not None:
        usuario = {'id': data['idusuario'], 'username': data['usuario_username']}

    estado_pago = None
    if data['idestado_pago'] is not None and data['estado_pago_nombre'] is not None:
        estado_pago = {'id': data['idestado_pago'], 'nombre_estado': data['estado_pago_nombre']}

    reservation = {
        'id': data['id'],
        'idusuario': data['idusuario'],
        'idagenda': data['idagenda'],
        'idpaquete': data['idpaquete'],
        'idestado_actividad': data['idestado_actividad'],
        'idestado_pago': data['idestado_pago'],
        'estado_pago_texto': data['estado_pago_texto'],
        'nombre_actividad': data['nombre_actividad'],
        'ubicacion': data['ubicacion'],
        'estado': {'id': state.get('id'), 'nombre_estado': state.get('nombre_estado')},
        'agenda': agenda,
        'paquete': paquete,
        'usuario': usuario,
        'estado_pago': estado_pago,
    }
    resolved = resolve_booking_payment_state(reservation, payment_states)
    reservation['pago_estado'] = {'id': resolved['id'], 'key': resolved['key'], 'label': resolved['label']}
    return reservation


def get_reservation_by_id(reservation_id: int, cursor=None) -> dict:
    """
    Get the raw booking row.

    Args:
        reservation_id: Booking ID
        cursor: Optional cursor (to read inside the caller's transaction)

    Returns:
        Booking dict or None if not found
    """
    if cursor is None:
        cursor = get_db().cursor()
    cursor.execute('''
        SELECT id, idusuario, idagenda, idpaquete, idestado_actividad,
               idestado_pago, estado_pago_texto
        FROM actividad
        WHERE id = ?
    ''', (reservation_id,))
    row = cursor.fetchone()
    return dict(row) if row else None


def get_reservation_detail(reservation_id: int) -> dict:
    """
    Get the fully joined booking (state, slot, package, customer, payment state).

    Returns:
        Booking DTO or None if not found
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute(_JOINED_SELECT + ' WHERE a.id = ?', (reservation_id,))
    row = cursor.fetchone()
    if not row:
        return None
    return _row_to_reservation(row, get_activity_states(), get_payment_states())


def get_reservations(state_id: int = None, photographer_id: int = None, fecha: str = None) -> list:
    """
    Admin booking list with optional filters.

    Args:
        state_id: Lifecycle state id
        photographer_id: Photographer of the booked slot
        fecha: Day key of the booked slot

    Returns:
        List of booking DTOs, most recent slot first
    """
    db = get_db()
    cursor = db.cursor()

    query = _JOINED_SELECT + ' WHERE 1 = 1'
    params = []

    if state_id is not None:
        query += ' AND a.idestado_actividad = ?'
        params.append(state_id)
    if photographer_id is not None:
        query += ' AND ag.idfotografo = ?'
        params.append(photographer_id)
    if fecha:
        query += ' AND ag.fecha = ?'
        params.append(fecha)

    query += ' ORDER BY (ag.fecha IS NULL), ag.fecha DESC, ag.horainicio DESC, a.id DESC'

    cursor.execute(query, params)
    activity_states = get_activity_states()
    payment_states = get_payment_states()
    return [_row_to_reservation(row, activity_states, payment_states) for row in cursor.fetchall()]


def get_payments_for(reservation_ids: list) -> dict:
    """
    Get payments grouped by booking.

    Returns:
        {reservation_id: [payment dicts ordered by date]}
    """
    grouped = {rid: [] for rid in reservation_ids}
    if not reservation_ids:
        return grouped

    db = get_db()
    cursor = db.cursor()
    placeholders = ','.join('?' * len(reservation_ids))
    cursor.execute(f'''
        SELECT id, idactividad, monto, fecha_pago, metodo_pago, tipo_pago, idestado_pago
        FROM pago
        WHERE idactividad IN ({placeholders})
        ORDER BY fecha_pago, id
    ''', reservation_ids)
    for row in cursor.fetchall():
        grouped.setdefault(row['idactividad'], []).append(dict(row))
    return grouped


def get_reservations_by_customer(customer_id: int) -> list:
    """
    A customer's bookings with slot, package, payment state and payments.

    Ordered by slot date and start time descending; bookings without a slot
    come last.

    Returns:
        List of booking DTOs with 'pagos' and 'resumen_pago'
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute(_JOINED_SELECT + '''
        WHERE a.idusuario = ?
        ORDER BY (ag.fecha IS NULL), ag.fecha DESC, ag.horainicio DESC, a.id DESC
    ''', (customer_id,))
    rows = cursor.fetchall()

    activity_states = get_activity_states()
    payment_states = get_payment_states()
    reservations = [_row_to_reservation(row, activity_states, payment_states) for row in rows]
    payments = get_payments_for([r['id'] for r in reservations])

    for reservation in reservations:
        pagos = payments.get(reservation['id'], [])
        price = reservation['paquete']['precio'] if reservation['paquete'] else 0
        summary = summarize_payments(pagos, price, payment_states)
        reservation['pagos'] = pagos
        reservation['resumen_pago'] = {
            'total': summary['total'],
            'porcentaje': summary['progress']['percentage'],
            'restante': summary['progress']['remaining'],
            'estado': summary['overall_state']['label'],
        }

    return reservations
