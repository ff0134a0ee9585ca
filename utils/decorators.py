"""
Route decorators for authentication and authorization.
Provides role-based access control for API routes.
"""

from functools import wraps
from flask import current_app
from flask_login import login_required, current_user

from utils.api_response import api_error
from utils.messages import get_message


def role_required(*role_names: str):
    """
    Decorator to require one of the given roles for a route.

    Usage:
        @bp.route('/reservas/<int:reservation_id>', methods=['PATCH'])
        @login_required
        @role_required('admin')
        def update_reservation(reservation_id):
            ...

    Args:
        role_names: Accepted role names (e.g., 'admin', 'fotografo')

    Returns:
        Decorator function
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            # Same switch Flask-Login uses to disable login_required
            if current_app.config.get('LOGIN_DISABLED'):
                return func(*args, **kwargs)

            role = getattr(current_user, 'role_name', None)
            if role not in role_names:
                return api_error(get_message('permission_denied'), 403)

            return func(*args, **kwargs)
        return wrapper
    return decorator


# Re-export login_required for convenience
__all__ = ['login_required', 'role_required']
