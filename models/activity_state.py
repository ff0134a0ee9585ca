"""
Booking lifecycle state catalog (estado_actividad).

Provides lookups by id and by normalized name (case- and accent-insensitive)
so 'reservada', 'RESERVADA' and 'Reservada' all resolve to the same row.
"""

from database import get_db
from utils.helpers import normalize_text

DEFAULT_STATE_NAME = 'Pendiente'
RESERVED_STATE = 'reservada'
DELIVERED_STATE = 'entregada'


def get_activity_states() -> list:
    """
    Get all lifecycle states.

    Returns:
        List of state dicts ordered by orden
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        SELECT id, nombre_estado, orden
        FROM estado_actividad
        ORDER BY orden, id
    ''')
    return [dict(row) for row in cursor.fetchall()]


def get_state_by_id(state_id: int) -> dict:
    """
    Get state by ID.

    Returns:
        State dictionary or None
    """
    if state_id is None:
        return None
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT id, nombre_estado, orden FROM estado_actividad WHERE id = ?', (state_id,))
    row = cursor.fetchone()
    return dict(row) if row else None


def resolve_state(name_or_id, states: list = None) -> dict:
    """
    Resolve a lifecycle state by normalized name or by id.

    Args:
        name_or_id: 'En edición', 'en edicion', 4 or '4'
        states: Optional preloaded catalog (avoids a query)

    Returns:
        State dictionary or None if unresolvable
    """
    if name_or_id is None or isinstance(name_or_id, bool):
        return None

    catalog = states if states is not None else get_activity_states()

    if isinstance(name_or_id, int) or (isinstance(name_or_id, str) and name_or_id.strip().isdigit()):
        wanted_id = int(name_or_id)
        return next((s for s in catalog if s['id'] == wanted_id), None)

    wanted = normalize_text(name_or_id)
    if not wanted:
        return None
    return next((s for s in catalog if normalize_text(s['nombre_estado']) == wanted), None)


def get_default_state(states: list = None) -> dict:
    """
    State assigned to bookings with no lifecycle status: the first by orden.
    """
    catalog = states if states is not None else get_activity_states()
    if not catalog:
        return {'id': None, 'nombre_estado': DEFAULT_STATE_NAME, 'orden': 0}
    return catalog[0]


def effective_state(state_id, states: list = None) -> dict:
    """Resolve a booking's stored state id, defaulting to the first state."""
    catalog = states if states is not None else get_activity_states()
    state = resolve_state(state_id, catalog) if state_id is not None else None
    return state or get_default_state(catalog)


def is_delivered(state) -> bool:
    """True for the terminal 'Entregada' state (dict or name)."""
    if not state:
        return False
    name = state.get('nombre_estado') if isinstance(state, dict) else state
    return normalize_text(name) == DELIVERED_STATE


def is_reserved(state) -> bool:
    """True for the 'Reservada' state (dict or name)."""
    if not state:
        return False
    name = state.get('nombre_estado') if isinstance(state, dict) else state
    return normalize_text(name) == RESERVED_STATE


def get_allowed_transitions(state_name: str, states: list = None) -> list:
    """
    Suggested next states for UI hints.

    Any state may move to any other one, except the terminal delivered
    state which accepts none.

    Returns:
        List of state names in catalog order
    """
    if is_delivered(state_name):
        return []
    catalog = states if states is not None else get_activity_states()
    current = normalize_text(state_name)
    return [s['nombre_estado'] for s in catalog if normalize_text(s['nombre_estado']) != current]
