"""
General API routes: health check and the lifecycle state catalog.
"""

import sqlite3

from flask import current_app, jsonify
from flask_login import login_required

from models.activity_state import get_activity_states, get_allowed_transitions
from models.user import get_photographers
from utils.api_response import api_success, api_error
from utils.messages import get_message


def register_routes(bp):
    """Register general API routes on the blueprint."""

    @bp.route('/health')
    def health_check():
        """
        Health check endpoint (no authentication required).

        Returns:
            JSON with status and version
        """
        return jsonify({
            'status': 'ok',
            'version': current_app.config.get('APP_VERSION', '1.0.0'),
            'app': current_app.config.get('APP_NAME', 'FotoEstudio')
        })

    @bp.route('/estados', methods=['GET'])
    @login_required
    def list_states():
        """
        Get the lifecycle state catalog with the states each one may move to.

        Response JSON:
        {
            "success": true,
            "items": [
                {"id": 1, "nombre_estado": "Pendiente", "orden": 1,
                 "transiciones": ["Reservada", ...]},
                ...
            ]
        }
        """
        try:
            states = get_activity_states()
            items = [
                {**state, 'transiciones': get_allowed_transitions(state['nombre_estado'], states)}
                for state in states
            ]
            return api_success(items=items)

        except sqlite3.Error as e:
            current_app.logger.error(f'Error fetching states: {e}', exc_info=True)
            return api_error(get_message('server_error'), 500)

    @bp.route('/fotografos', methods=['GET'])
    @login_required
    def list_photographers():
        """List photographers for the agenda editor's selector."""
        try:
            return api_success(items=get_photographers())

        except sqlite3.Error as e:
            current_app.logger.error(f'Error fetching photographers: {e}', exc_info=True)
            return api_error(get_message('server_error'), 500)
