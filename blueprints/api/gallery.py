"""
Package gallery API routes.
"""

import sqlite3

from flask import current_app, request
from flask_login import login_required

from models.gallery import build_gallery_updates, delete_gallery_item, gallery_item_to_api, update_gallery_item
from utils.api_response import api_success, api_error
from utils.decorators import role_required
from utils.messages import get_message
from utils.validators import parse_numeric


def register_routes(bp):
    """Register gallery API routes on the blueprint."""

    @bp.route('/galeria/<item_id>', methods=['PATCH'])
    @login_required
    @role_required('admin')
    def patch_gallery(item_id):
        """
        Update a gallery item.

        Request body (any subset):
            {"url": "...", "nombre": "...", "descripcion": "..."}
        """
        gallery_id = parse_numeric(item_id)
        if gallery_id is None:
            return api_error(get_message('invalid_gallery'), 400)

        updates = build_gallery_updates(request.get_json(silent=True) or {})
        if not updates:
            return api_error(get_message('gallery_no_changes'), 400)

        try:
            item = update_gallery_item(gallery_id, updates)
            if not item:
                return api_error(get_message('gallery_not_found'), 404)
            return api_success(item=gallery_item_to_api(item), message=get_message('gallery_updated'))

        except sqlite3.Error as e:
            current_app.logger.error(f'Error updating gallery {gallery_id}: {e}', exc_info=True)
            return api_error(get_message('gallery_not_found'), 500)

    @bp.route('/galeria/<item_id>', methods=['DELETE'])
    @login_required
    @role_required('admin')
    def remove_gallery(item_id):
        """Delete a gallery item."""
        gallery_id = parse_numeric(item_id)
        if gallery_id is None:
            return api_error(get_message('invalid_gallery'), 400)

        try:
            if not delete_gallery_item(gallery_id):
                return api_error(get_message('not_found'), 404)
            return api_success(message=get_message('gallery_deleted'))

        except sqlite3.Error as e:
            current_app.logger.error(f'Error deleting gallery {gallery_id}: {e}', exc_info=True)
            return api_error(get_message('server_error'), 500)
