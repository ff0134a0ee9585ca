"""
Booking API routes: single edit, bulk status change, customer listing,
admin listing and status history.
"""

import sqlite3

from flask import current_app, request
from flask_login import login_required, current_user

from models.activity_state import get_state_by_id
from models.reservation import get_reservations, get_reservations_by_customer
from models.reservation_state import (
    update_reservation, bulk_update_reservation_state, get_status_history
)
from utils.api_response import api_success, api_error, api_exception
from utils.decorators import role_required
from utils.errors import StudioError
from utils.messages import get_message
from utils.validators import parse_numeric, validate_date_string, validate_integer_list


def _changed_by() -> str:
    return getattr(current_user, 'username', None) or 'system'


def register_routes(bp):
    """Register booking API routes on the blueprint."""

    @bp.route('/reservas/actualizar-multiples', methods=['PATCH'])
    @login_required
    @role_required('admin')
    def bulk_update_reservations():
        """
        Overwrite the status of several bookings.

        Request body:
            {"reservas": [1, 2, 3], "nuevo_estado": "Entregada"}

        Response JSON:
            {"success": true, "updated": 2, "estadoId": 7,
             "estado": {"id": 7, "nombre_estado": "Entregada", "orden": 7},
             "message": "..."}
        """
        data = request.get_json(silent=True) or {}
        nuevo_estado = data.get('nuevo_estado')

        is_valid, ids, _ = validate_integer_list(data.get('reservas'), 'reservas')
        if not is_valid or nuevo_estado in (None, ''):
            return api_error(get_message('bulk_selection_required'), 400)

        try:
            updated, state_id = bulk_update_reservation_state(ids, nuevo_estado, _changed_by())
            return api_success(
                updated=updated,
                estadoId=state_id,
                estado=get_state_by_id(state_id),
                message=get_message('reservations_bulk_updated', count=updated)
            )

        except StudioError as e:
            return api_exception(e)
        except sqlite3.Error as e:
            current_app.logger.error(f'Error in bulk state update: {e}', exc_info=True)
            return api_error(get_message('reservation_update_failed'), 500)

    @bp.route('/reservas/<reservation_id>', methods=['PATCH'])
    @login_required
    @role_required('admin')
    def patch_reservation(reservation_id):
        """
        Reschedule a booking and/or change its status.

        Request body:
            {"fecha": "2024-07-10", "hora": "09:00", "idfotografo": 7,
             "estado": "Reservada"}

        Response JSON:
            {"success": true, "item": {...joined booking...}, "message": "..."}
        """
        booking_id = parse_numeric(reservation_id)
        if booking_id is None:
            return api_error(get_message('invalid_request'), 400)

        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return api_error(get_message('invalid_request'), 400)

        photographer = None
        if data.get('idfotografo') not in (None, ''):
            photographer = parse_numeric(data.get('idfotografo'))
            if photographer is None:
                return api_error(get_message('agenda_invalid_photographer'), 400)

        try:
            item = update_reservation(
                booking_id,
                fecha=data.get('fecha'),
                hora=data.get('hora'),
                photographer_id=photographer,
                status_name=data.get('estado'),
                changed_by=_changed_by()
            )
            return api_success(item=item, message=get_message('reservation_updated'))

        except StudioError as e:
            return api_exception(e)
        except sqlite3.Error as e:
            current_app.logger.error(f'Error updating reservation {booking_id}: {e}', exc_info=True)
            return api_error(get_message('reservation_update_failed'), 500)

    @bp.route('/reservas/<int:reservation_id>/historial', methods=['GET'])
    @login_required
    @role_required('admin')
    def reservation_history(reservation_id):
        """Status history of a booking, newest first."""
        try:
            return api_success(items=get_status_history(reservation_id))

        except sqlite3.Error as e:
            current_app.logger.error(f'Error fetching history {reservation_id}: {e}', exc_info=True)
            return api_error(get_message('server_error'), 500)

    @bp.route('/reservas', methods=['GET'])
    @login_required
    @role_required('admin')
    def list_reservations():
        """
        Admin booking list.

        Query params:
            estadoId: Lifecycle state ID
            fotografoId: Photographer of the booked slot
            fecha: Day of the booked slot (YYYY-MM-DD)
        """
        state_id = request.args.get('estadoId')
        photographer = request.args.get('fotografoId')
        is_valid, fecha, error = validate_date_string(request.args.get('fecha'), required=False)
        if not is_valid:
            return api_error(error, 400)

        try:
            items = get_reservations(
                state_id=parse_numeric(state_id) if state_id else None,
                photographer_id=parse_numeric(photographer) if photographer else None,
                fecha=fecha
            )
            return api_success(items=items)

        except sqlite3.Error as e:
            current_app.logger.error(f'Error fetching reservations: {e}', exc_info=True)
            return api_error(get_message('reservations_load_failed'), 500)

    @bp.route('/mis-reservas', methods=['GET'])
    @login_required
    def customer_reservations():
        """
        A customer's bookings with slot, package and payments.

        Query params:
            clienteId: Customer ID (customers may only read their own)

        Response JSON:
            {"success": true, "items": [...]}
        """
        customer_id = parse_numeric(request.args.get('clienteId'))
        if customer_id is None:
            return api_error(get_message('invalid_customer'), 400)

        if not current_app.config.get('LOGIN_DISABLED'):
            if not current_user.is_admin and current_user.id != customer_id:
                return api_error(get_message('permission_denied'), 403)

        try:
            return api_success(items=get_reservations_by_customer(customer_id))

        except sqlite3.Error as e:
            current_app.logger.error(f'Error fetching reservations for {customer_id}: {e}', exc_info=True)
            return api_error(get_message('reservations_load_failed'), 500)
