"""
Payment (pago) data access.
"""

from database import get_db
from models.payment_state import get_payment_states, resolve_payment_state
from utils.datetime_helpers import format_human_date
from utils.helpers import format_money


def get_payment_receipt(payment_id: int) -> dict:
    """
    Get the receipt of a payment: the payment row plus its booking,
    customer and package, with the amount and date formatted for printing.

    Returns:
        Receipt dict or None if the payment does not exist
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        SELECT pg.id, pg.idactividad, pg.monto, pg.fecha_pago, pg.metodo_pago,
               pg.tipo_pago, pg.idestado_pago,
               a.nombre_actividad, a.idusuario,
               u.username AS cliente, u.correo AS cliente_correo,
               p.nombre_paquete, p.precio
        FROM pago pg
        JOIN actividad a ON pg.idactividad = a.id
        LEFT JOIN usuario u ON a.idusuario = u.id
        LEFT JOIN paquete p ON a.idpaquete = p.id
        WHERE pg.id = ?
    ''', (payment_id,))
    row = cursor.fetchone()
    if not row:
        return None

    receipt = dict(row)
    state = resolve_payment_state(receipt['idestado_pago'], get_payment_states())
    receipt['estado_pago'] = state['label']
    receipt['monto_texto'] = format_money(receipt['monto'])
    receipt['fecha_pago_texto'] = format_human_date(receipt['fecha_pago'])
    return receipt


def create_payment(reservation_id: int, monto: float, fecha_pago: str,
                   metodo_pago: str = None, tipo_pago: str = None,
                   payment_state_id: int = None) -> int:
    """
    Register a payment for a booking.

    Returns:
        New payment ID
    """
    db = get_db()
    cursor = db.cursor()
    try:
        cursor.execute('''
            INSERT INTO pago (idactividad, monto, fecha_pago, metodo_pago, tipo_pago, idestado_pago)
            VALUES (?, ?, ?, ?, ?, ?)
        ''', (reservation_id, monto, fecha_pago, metodo_pago, tipo_pago, payment_state_id))
        db.commit()
    except Exception:
        db.rollback()
        raise
    return cursor.lastrowid
