"""
Payment API routes.
"""

import sqlite3

from flask import current_app
from flask_login import login_required, current_user

from models.payment import get_payment_receipt
from utils.api_response import api_success, api_error
from utils.messages import get_message


def register_routes(bp):
    """Register payment API routes on the blueprint."""

    @bp.route('/pagos/<int:payment_id>/comprobante', methods=['GET'])
    @login_required
    def payment_receipt(payment_id):
        """Receipt of a payment (admins, or the customer who owns the booking)."""
        try:
            receipt = get_payment_receipt(payment_id)
        except sqlite3.Error as e:
            current_app.logger.error(f'Error fetching payment {payment_id}: {e}', exc_info=True)
            return api_error(get_message('server_error'), 500)

        if not receipt:
            return api_error(get_message('payment_not_found'), 404)

        if not current_app.config.get('LOGIN_DISABLED'):
            if not current_user.is_admin and current_user.id != receipt['idusuario']:
                return api_error(get_message('permission_denied'), 403)

        return api_success(item=receipt)
