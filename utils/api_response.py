"""
Standardized API response helpers.

Provides consistent JSON response format across all API endpoints:

    Success:  {"success": true, "message": "...", ...extra fields}
    Error:    {"success": false, "message": "Spanish error message"}

Usage:
    from utils.api_response import api_success, api_error

    return api_success(items=rows, message='Agenda actualizada')
    return api_error('Reserva no encontrada.', status=404)
"""

from flask import jsonify
from typing import Any

from utils.errors import StudioError


def api_success(
    data: dict | None = None,
    message: str | None = None,
    status: int = 200,
    **extra_fields: Any
) -> tuple:
    """
    Build a standardized success JSON response.

    Args:
        data: Optional dict to include as 'data' key.
        message: Optional success message (Spanish).
        status: HTTP status code (default 200).
        **extra_fields: Top-level fields of the endpoint contract
            (items, item, upserted, updated, ...).

    Returns:
        Tuple of (Response, status_code)
    """
    response = {'success': True}

    if data is not None:
        response['data'] = data

    if extra_fields:
        response.update(extra_fields)

    if message:
        response['message'] = message

    return jsonify(response), status


def api_error(message: str, status: int = 400, **extra_fields: Any) -> tuple:
    """
    Build a standardized error JSON response.

    Args:
        message: Error message (Spanish).
        status: HTTP status code (default 400).
        **extra_fields: Additional top-level fields.

    Returns:
        Tuple of (Response, status_code)
    """
    response = {'success': False, 'message': message}

    if extra_fields:
        response.update(extra_fields)

    return jsonify(response), status


def api_exception(error: StudioError) -> tuple:
    """Render a domain error with the status it carries."""
    return jsonify(error.to_dict()), error.status
