"""
Photographer agenda API routes.
"""

import sqlite3

from flask import current_app, request
from flask_login import login_required, current_user

from models.agenda import get_agenda, prepare_agenda_entries, upsert_agenda_entries
from utils.api_response import api_success, api_error, api_exception
from utils.decorators import role_required
from utils.errors import StudioError
from utils.messages import get_message
from utils.validators import parse_numeric


def _extract_registros(payload) -> list:
    """Accept {registros: [...]} or a single {fecha, ...} record."""
    if not isinstance(payload, dict):
        return []
    registros = payload.get('registros')
    if isinstance(registros, list):
        return registros
    if payload.get('fecha') is not None:
        return [payload]
    return []


def _owns_agenda(photographer_id: int) -> bool:
    """Photographers may only edit their own agenda; admins edit any."""
    if current_app.config.get('LOGIN_DISABLED'):
        return True
    return current_user.is_admin or current_user.id == photographer_id


def register_routes(bp):
    """Register agenda API routes on the blueprint."""

    @bp.route('/agenda/<photographer_id>', methods=['PATCH'])
    @login_required
    @role_required('admin', 'fotografo')
    def update_agenda(photographer_id):
        """
        Upsert availability for one photographer.

        Request body:
            {"registros": [{"fecha": "2024-07-10", "horainicio": "08:00",
                            "horafin": "17:00", "disponible": false}]}
            or a single {"fecha": ..., ...} record

        Response JSON:
            {"success": true, "upserted": 1, "items": [...], "message": "..."}
        """
        photographer = parse_numeric(photographer_id)
        if photographer is None:
            return api_error(get_message('agenda_invalid_photographer'), 400)
        if not _owns_agenda(photographer):
            return api_error(get_message('permission_denied'), 403)

        try:
            entries = prepare_agenda_entries(_extract_registros(request.get_json(silent=True)))
            items = upsert_agenda_entries(photographer, entries)

            current_app.logger.info(
                'Agenda del fotógrafo %s actualizada: %s registros', photographer, len(entries)
            )
            return api_success(
                upserted=len(entries),
                items=items,
                message=get_message('agenda_updated')
            )

        except StudioError as e:
            return api_exception(e)
        except sqlite3.Error as e:
            current_app.logger.error(f'Error updating agenda {photographer}: {e}', exc_info=True)
            return api_error(get_message('agenda_save_failed'), 500)

    @bp.route('/agenda', methods=['GET'])
    @login_required
    def list_agenda():
        """
        Get agenda slots ordered by date.

        Query params:
            photographerId (alias fotografoId): Photographer ID; when absent
                every photographer's slots are returned

        Response JSON:
            {"success": true, "items": [{id, idfotografo, fecha, horainicio,
                                         horafin, disponible}]}
        """
        raw_id = request.args.get('photographerId', request.args.get('fotografoId'))
        photographer = None
        if raw_id not in (None, ''):
            photographer = parse_numeric(raw_id)
            if photographer is None:
                return api_error(get_message('agenda_invalid_photographer'), 400)

        try:
            return api_success(items=get_agenda(photographer))

        except sqlite3.Error as e:
            current_app.logger.error(f'Error fetching agenda: {e}', exc_info=True)
            return api_error(get_message('agenda_load_failed'), 500)
