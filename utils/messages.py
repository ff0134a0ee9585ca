"""
Centralized Spanish UI messages.
All user-facing text in Spanish for consistency.
"""

MESSAGES = {
    # Success messages
    'agenda_updated': '✅ Agenda actualizada correctamente',
    'reservation_updated': '✅ Reserva actualizada',
    'reservations_bulk_updated': '✅ Estado actualizado para {count} reservas.',
    'gallery_updated': '✅ Galería actualizada',
    'gallery_deleted': '🗑️ Galería eliminada',

    # Agenda errors
    'agenda_no_records': 'No se enviaron registros para actualizar.',
    'agenda_invalid_date': 'Cada registro debe incluir una fecha válida.',
    'agenda_invalid_photographer': 'Debe proporcionar un fotógrafo válido.',
    'agenda_save_failed': 'No se pudo actualizar la agenda.',
    'agenda_load_failed': 'No se pudo obtener la agenda.',
    'agenda_no_pending': 'No hay cambios pendientes para guardar.',
    'agenda_save_in_progress': 'Ya hay un guardado de agenda en curso.',

    # Reservation errors
    'invalid_request': 'Solicitud inválida.',
    'invalid_date': 'Selecciona una fecha válida (YYYY-MM-DD).',
    'invalid_time': 'Selecciona una hora válida (HH:MM).',
    'reservation_not_found': 'Reserva no encontrada.',
    'reservation_delivered': 'Las reservas entregadas no pueden modificarse.',
    'invalid_state': 'El estado seleccionado no es válido.',
    'unknown_state': 'El estado indicado no existe.',
    'no_changes': 'No hay cambios para aplicar.',
    'bulk_selection_required': 'Debe seleccionar reservas y un estado válido.',
    'reservation_update_failed': 'No se pudo actualizar la reserva.',
    'invalid_customer': 'Cliente inválido.',
    'reservations_load_failed': 'No se pudieron obtener las reservas.',

    # Gallery / payment errors
    'invalid_gallery': 'Galería inválida.',
    'gallery_no_changes': 'No hay cambios para aplicar',
    'gallery_not_found': 'No se pudo actualizar la galería',
    'payment_not_found': 'Pago no encontrado.',

    # Generic
    'unauthorized': 'Debe iniciar sesión para continuar',
    'permission_denied': 'No tiene permisos para esta acción',
    'not_found': 'Recurso no encontrado.',
    'method_not_allowed': 'Método no permitido.',
    'server_error': 'Error interno del servidor',
}


def get_message(key: str, **kwargs) -> str:
    """
    Get message with optional formatting.

    Args:
        key: Message key
        **kwargs: Format parameters

    Returns:
        Formatted message or key if not found
    """
    message = MESSAGES.get(key, key)
    if kwargs:
        return message.format(**kwargs)
    return message
