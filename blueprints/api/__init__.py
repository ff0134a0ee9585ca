"""
API blueprint package.
Split into smaller modules by resource; each module registers its routes
on the shared blueprint.
"""

from flask import Blueprint

# Create the API blueprint
api_bp = Blueprint('api', __name__)

# Import and register routes from submodules
from blueprints.api import routes
from blueprints.api import agenda
from blueprints.api import reservations
from blueprints.api import gallery
from blueprints.api import payments

# Register all route functions on the blueprint
routes.register_routes(api_bp)
agenda.register_routes(api_bp)
reservations.register_routes(api_bp)
gallery.register_routes(api_bp)
payments.register_routes(api_bp)
