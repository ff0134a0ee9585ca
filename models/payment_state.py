"""
Payment state classification.

A booking's payment state is derived, not authoritative: it is resolved from
a catalog id, a catalog entry, or free text against a small fixed catalog
(pending, with deposit, paid). Payment progress is computed from the sum of
registered payments against the package price.
"""

from database import get_db
from utils.helpers import slugify_key

PENDING_KEY = 'pendiente'
DEPOSIT_KEY = 'con-anticipo'
PAID_KEY = 'pagado'

DEFAULT_PAYMENT_STATES = [
    {'id': 1, 'key': PENDING_KEY, 'label': 'Pendiente'},
    {'id': 2, 'key': DEPOSIT_KEY, 'label': 'Con anticipo'},
    {'id': 3, 'key': PAID_KEY, 'label': 'Pagado'},
]


def normalize_key(value) -> str:
    """Catalog key of a label: 'Con Anticipo' -> 'con-anticipo'."""
    return slugify_key(value)


def _to_entry(state: dict) -> dict:
    label = state.get('label') or state.get('nombre_estado') or ''
    return {
        'id': state.get('id'),
        'key': normalize_key(state.get('key')) or normalize_key(state.get('nombre_estado')) or normalize_key(label) or None,
        'label': label,
    }


def map_states(states: list = None) -> dict:
    """
    Index a payment state catalog by id and by normalized key.

    Args:
        states: Catalog rows ({id, nombre_estado} or {id, key, label});
            the default catalog is used when empty

    Returns:
        {'list': [...], 'by_id': {...}, 'by_key': {...}}
    """
    source = states if states else DEFAULT_PAYMENT_STATES
    entries = []
    by_id = {}
    by_key = {}

    for state in source:
        if not state:
            continue
        entry = _to_entry(state)
        entries.append(entry)
        if entry['id'] is not None:
            by_id[int(entry['id'])] = entry
        if entry['key']:
            by_key[entry['key']] = entry
        label_key = normalize_key(entry['label'])
        if label_key and label_key not in by_key:
            by_key[label_key] = entry

    return {'list': entries, 'by_id': by_id, 'by_key': by_key}


def resolve_payment_state(state, states: list = None) -> dict:
    """
    Resolve a payment state from an id, a catalog entry or free text.

    Lookup order: entry id, entry nombre_estado, entry key, numeric id,
    normalized text. Unresolvable values fall back to the first catalog
    entry (pending).

    Returns:
        Entry dict {id, key, label}
    """
    mapped = map_states(states)
    by_id, by_key = mapped['by_id'], mapped['by_key']

    if isinstance(state, dict):
        if state.get('id') is not None:
            try:
                found = by_id.get(int(state['id']))
            except (TypeError, ValueError):
                found = None
            if found:
                return found
        for field in ('nombre_estado', 'key', 'label'):
            if state.get(field):
                found = by_key.get(normalize_key(state[field]))
                if found:
                    return found

    if isinstance(state, int) and not isinstance(state, bool) and state in by_id:
        return by_id[state]

    if isinstance(state, str) and state.strip().isdigit() and int(state) in by_id:
        return by_id[int(state)]

    if isinstance(state, str):
        found = by_key.get(normalize_key(state))
        if found:
            return found

    return mapped['list'][0] if mapped['list'] else dict(DEFAULT_PAYMENT_STATES[0])


def find_payment_state(key: str, states: list = None) -> dict:
    """Catalog entry for one of PENDING_KEY / DEPOSIT_KEY / PAID_KEY, or None."""
    return map_states(states)['by_key'].get(key)


def calculate_payment_progress(total, price) -> dict:
    """
    Payment progress of a booking.

    percentage = min(100, round(total / price * 100)); a missing or
    non-positive price reports 0%.

    Returns:
        {'percentage': int, 'remaining': float, 'covered': float}
    """
    try:
        paid = float(total or 0)
    except (TypeError, ValueError):
        paid = 0.0
    try:
        amount = float(price or 0)
    except (TypeError, ValueError):
        amount = 0.0

    if amount <= 0:
        return {'percentage': 0, 'remaining': 0, 'covered': paid}

    # int(x + 0.5) rounds halves up for non-negative values, unlike round()
    percentage = min(100, int(paid / amount * 100 + 0.5))
    return {
        'percentage': percentage,
        'remaining': max(0.0, amount - paid),
        'covered': paid,
    }


def summarize_payments(payments: list, price, states: list = None) -> dict:
    """
    Summarize a booking's payments.

    Overall state: nothing paid -> pending; fully covered -> paid;
    anything in between -> with deposit.
    """
    payments = payments if isinstance(payments, list) else []
    total = 0.0
    for payment in payments:
        try:
            total += float((payment or {}).get('monto') or 0)
        except (TypeError, ValueError):
            continue

    progress = calculate_payment_progress(total, price)

    if total <= 0:
        key = PENDING_KEY
    elif progress['percentage'] >= 100:
        key = PAID_KEY
    else:
        key = DEPOSIT_KEY

    overall = find_payment_state(key, states) or resolve_payment_state(None, states)

    return {
        'total': total,
        'progress': progress,
        'overall_state': overall,
        'payments': payments,
    }


def resolve_booking_payment_state(booking: dict, states: list = None) -> dict:
    """
    Canonical payment state of a booking.

    The catalog reference (idestado_pago / joined estado_pago) wins over the
    free-text column; the free text only applies when no catalog reference
    is stored.
    """
    joined = booking.get('estado_pago')
    if isinstance(joined, dict) and joined.get('id') is not None:
        return resolve_payment_state(joined, states)
    if booking.get('idestado_pago') is not None:
        return resolve_payment_state(booking['idestado_pago'], states)
    if booking.get('estado_pago_texto'):
        return resolve_payment_state(booking['estado_pago_texto'], states)
    return resolve_payment_state(None, states)


def get_payment_states() -> list:
    """
    Load the payment state catalog.

    Returns:
        Catalog entries {id, key, label}; defaults when the table is empty
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('SELECT id, nombre_estado FROM estado_pago ORDER BY id')
    rows = [dict(row) for row in cursor.fetchall()]
    return map_states(rows)['list']
