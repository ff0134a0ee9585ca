"""
FotoEstudio - Photo studio agenda and reservations back-office
Flask application factory and initialization
"""

import os
import sqlite3
import click
import logging
from flask import Flask, g, request
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Import configuration
from config import config

# Import extensions
from extensions import login_manager, csrf

# Import database functions
from database import close_db, init_db


def create_app(config_name=None):
    """
    Application factory for Flask app.

    Args:
        config_name: Configuration name ('development', 'production', 'test')

    Returns:
        Flask application instance
    """
    # Determine config
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    # Create Flask app
    app = Flask(__name__)

    # Load configuration
    app.config.from_object(config[config_name])

    # Initialize extensions
    initialize_extensions(app)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Register CLI commands
    register_cli_commands(app)

    # Register teardown handlers
    register_teardown_handlers(app)

    # Configure logging
    configure_logging(app)

    return app


def initialize_extensions(app):
    """Initialize Flask extensions."""
    # Initialize Flask-Login
    login_manager.init_app(app)
    # Initialize CSRF Protection
    csrf.init_app(app)


def register_blueprints(app):
    """Register Flask blueprints."""
    from blueprints.api import api_bp

    # JSON API consumed by the agenda editor client (session cookie, no form posts)
    csrf.exempt(api_bp)
    app.register_blueprint(api_bp, url_prefix='/api')

    @app.route('/')
    def index():
        """Service banner."""
        from utils.api_response import api_success

        return api_success(
            app=app.config.get('APP_NAME', 'FotoEstudio'),
            version=app.config.get('APP_VERSION', '1.0.0')
        )


def register_error_handlers(app):
    """Register error handlers (JSON for every route; the app has no HTML views)."""
    from utils.api_response import api_error, api_exception
    from utils.errors import StudioError
    from utils.messages import get_message

    @app.errorhandler(StudioError)
    def studio_error(error):
        """Domain errors that escaped a route."""
        return api_exception(error)

    @app.errorhandler(sqlite3.Error)
    def database_error(error):
        """Database failures that escaped a route."""
        db = g.get('db')
        if db:
            db.rollback()
        app.logger.error(f'Database error on {request.path}: {error}', exc_info=True)
        return api_error(get_message('server_error'), 500)

    @app.errorhandler(404)
    def not_found_error(error):
        """Handle 404 errors."""
        return api_error(get_message('not_found'), 404)

    @app.errorhandler(405)
    def method_not_allowed_error(error):
        """Handle 405 errors."""
        return api_error(get_message('method_not_allowed'), 405)

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 errors."""
        # Rollback database on error
        db = g.get('db')
        if db:
            db.rollback()
        return api_error(get_message('server_error'), 500)

    @app.errorhandler(403)
    def forbidden_error(error):
        """Handle 403 errors."""
        return api_error(get_message('permission_denied'), 403)


def register_cli_commands(app):
    """Register Flask CLI commands."""

    @app.cli.command('init-db')
    def init_db_command():
        """Initialize database with schema and seed data."""
        click.echo('Initializing database...')
        with app.app_context():
            init_db()
        click.echo('Database initialized successfully!')

    @app.cli.command('create-user')
    @click.argument('username')
    @click.argument('correo')
    @click.option('--rol', default='cliente', show_default=True,
                  type=click.Choice(['admin', 'fotografo', 'cliente']),
                  help='Role of the new user')
    @click.option('--telefono', default=None, help='Phone number')
    def create_user_command(username, correo, rol, telefono):
        """Create a new user."""
        from models.user import create_user

        with app.app_context():
            try:
                user_id = create_user(username, correo=correo, role_name=rol, telefono=telefono)
                click.echo(f'User created successfully! ID: {user_id}')
            except ValueError as e:
                click.echo(f'Error creating user: {str(e)}', err=True)

    @app.cli.command('show-agenda')
    @click.argument('photographer_id', type=int)
    @click.option('--month', default=None, help='First month to show (YYYY-MM), defaults to today')
    @click.option('--months', default=1, type=click.IntRange(1, 12), help='Number of consecutive months')
    def show_agenda_command(photographer_id, month, months):
        """Print a photographer's 6-week availability grid, one per month."""
        from models.agenda import get_agenda
        from utils.datetime_helpers import (
            DAY_LABELS, MONTH_NAMES, build_month_grid, from_date_key, get_today, shift_month
        )

        with app.app_context():
            reference = from_date_key(f'{month}-01') if month else get_today()
            if reference is None:
                raise click.BadParameter('Use YYYY-MM', param_hint='--month')

            slots = {slot['fecha']: slot for slot in get_agenda(photographer_id)}

            for offset in range(months):
                current = shift_month(reference, offset)
                click.echo(f'{MONTH_NAMES[current.month - 1].capitalize()} {current.year}')
                click.echo(' '.join(f'{label:>4}' for label in DAY_LABELS))

                cells = build_month_grid(current)
                for week in range(0, len(cells), 7):
                    row = []
                    for cell in cells[week:week + 7]:
                        slot = slots.get(cell.key)
                        mark = ' ' if slot is None else ('+' if slot['disponible'] else 'x')
                        day = f'{cell.date.day:>2}' if cell.in_current_month else '  '
                        row.append(f'{day}{mark:>2}')
                    click.echo(' '.join(row))
                click.echo('')

            click.echo('+ disponible   x no disponible')


def register_teardown_handlers(app):
    """Register teardown handlers."""

    @app.teardown_appcontext
    def teardown_db(error):
        """Close database connection at end of request."""
        close_db(error)


def configure_logging(app):
    """Configure application logging."""
    if not app.debug and not app.testing:
        # Production logging
        if not os.path.exists('logs'):
            os.mkdir('logs')

        file_handler = logging.FileHandler('logs/fotoestudio.log')
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)

        app.logger.setLevel(logging.INFO)
        app.logger.info('FotoEstudio startup')
    else:
        # Development logging
        app.logger.setLevel(logging.DEBUG)


# Create application instance for development server
if __name__ == '__main__':
    app = create_app()
    # host='0.0.0.0' allows access from other devices on the network
    app.run(host='0.0.0.0', debug=True)
