"""
Package gallery (galeria_paquete) data access.
"""

from database import get_db
from utils.validators import sanitize_input

# Request field -> column
GALLERY_FIELD_MAP = {
    'url': 'url_imagen',
    'nombre': 'titulo',
    'descripcion': 'descripcion',
}

# Fields ignored when blank; descripcion may be cleared
REQUIRED_GALLERY_FIELDS = ('url', 'nombre')


def get_gallery_item(item_id: int) -> dict:
    """Get a gallery item by ID, or None."""
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        SELECT id, idpaquete, titulo, descripcion, url_imagen
        FROM galeria_paquete
        WHERE id = ?
    ''', (item_id,))
    row = cursor.fetchone()
    return dict(row) if row else None


def build_gallery_updates(payload: dict) -> dict:
    """
    Map request fields to column updates.

    Blank url or nombre values are skipped, a blank descripcion clears the
    column. An empty dict means there is nothing to change.
    """
    updates = {}
    for field, column in GALLERY_FIELD_MAP.items():
        if field not in payload:
            continue
        value = payload[field]
        value = sanitize_input(value) if isinstance(value, str) else value
        if field in REQUIRED_GALLERY_FIELDS:
            if value:
                updates[column] = value
        else:
            updates[column] = value or None
    return updates


def gallery_item_to_api(item: dict) -> dict:
    """Shape a gallery row as {id, nombre, descripcion, url}."""
    return {
        'id': item['id'],
        'nombre': item.get('titulo') or '',
        'descripcion': item.get('descripcion') or '',
        'url': item.get('url_imagen'),
    }


def update_gallery_item(item_id: int, updates: dict) -> dict:
    """
    Update a gallery item.

    Args:
        item_id: Gallery item ID
        updates: Column -> value (output of build_gallery_updates)

    Returns:
        Updated item or None if it does not exist
    """
    db = get_db()
    cursor = db.cursor()

    set_clauses = [f'{column} = ?' for column in updates]
    params = list(updates.values()) + [item_id]

    try:
        cursor.execute(f'''
            UPDATE galeria_paquete
            SET {', '.join(set_clauses)}
            WHERE id = ?
        ''', params)
        db.commit()
    except Exception:
        db.rollback()
        raise

    if cursor.rowcount == 0:
        return None
    return get_gallery_item(item_id)


def delete_gallery_item(item_id: int) -> bool:
    """
    Delete a gallery item.

    Returns:
        True if a row was deleted
    """
    db = get_db()
    cursor = db.cursor()
    try:
        cursor.execute('DELETE FROM galeria_paquete WHERE id = ?', (item_id,))
        db.commit()
    except Exception:
        db.rollback()
        raise
    return cursor.rowcount > 0
