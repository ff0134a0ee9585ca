"""
Pytest configuration and fixtures.
Every test gets its own SQLite file, initialized with schema and seed data.
"""

import os
import tempfile

import httpx
import pytest

# Set test database path BEFORE importing app
TEST_DB_PATH = os.path.join(tempfile.gettempdir(), 'fotoestudio_test.db')
os.environ['DATABASE_PATH'] = TEST_DB_PATH

PHOTOGRAPHER_ID = 7
OTHER_PHOTOGRAPHER_ID = 8
CUSTOMER_ID = 20
OTHER_CUSTOMER_ID = 21


@pytest.fixture
def app(tmp_path):
    """Create test application with an isolated database."""
    from app import create_app
    from database import init_db

    app = create_app('test')
    app.config['TESTING'] = True
    app.config['WTF_CSRF_ENABLED'] = False
    app.config['DATABASE_PATH'] = str(tmp_path / 'fotoestudio_test.db')

    with app.app_context():
        init_db()

    yield app


@pytest.fixture
def studio_data(app):
    """
    Photographer 7, customers 20/21 and a few bookings.

    Booking 42 has no slot yet; bookings 1 and 2 are pending; booking 3 is
    already delivered.
    """
    from database import get_db

    with app.app_context():
        db = get_db()
        cursor = db.cursor()

        roles = {row['nombre']: row['id'] for row in cursor.execute('SELECT id, nombre FROM rol')}
        states = {
            row['nombre_estado']: row['id']
            for row in cursor.execute('SELECT id, nombre_estado FROM estado_actividad')
        }
        package_id = cursor.execute(
            "SELECT id FROM paquete WHERE nombre_paquete = 'Sesión Básica'"
        ).fetchone()['id']

        cursor.executemany('''
            INSERT INTO usuario (id, username, correo, idrol, activo) VALUES (?, ?, ?, ?, 1)
        ''', [
            (PHOTOGRAPHER_ID, 'fotografo1', 'foto1@fotoestudio.local', roles['fotografo']),
            (OTHER_PHOTOGRAPHER_ID, 'fotografa2', 'fotografa2@fotoestudio.local', roles['fotografo']),
            (CUSTOMER_ID, 'cliente1', 'cliente1@correo.com', roles['cliente']),
            (OTHER_CUSTOMER_ID, 'cliente2', 'cliente2@correo.com', roles['cliente']),
        ])

        cursor.executemany('''
            INSERT INTO actividad (id, idusuario, idpaquete, idestado_actividad, idestado_pago,
                                   nombre_actividad)
            VALUES (?, ?, ?, ?, ?, ?)
        ''', [
            (1, CUSTOMER_ID, package_id, states['Pendiente'], 1, 'Sesión de graduación'),
            (2, CUSTOMER_ID, package_id, None, None, 'Sesión familiar'),
            (3, OTHER_CUSTOMER_ID, package_id, states['Entregada'], 3, 'Sesión entregada'),
            (42, CUSTOMER_ID, package_id, states['Pendiente'], 1, 'Sesión de estudio'),
        ])
        db.commit()

    return {
        'photographer_id': PHOTOGRAPHER_ID,
        'other_photographer_id': OTHER_PHOTOGRAPHER_ID,
        'customer_id': CUSTOMER_ID,
        'other_customer_id': OTHER_CUSTOMER_ID,
        'package_id': package_id,
        'states': states,
    }


@pytest.fixture
def client(app):
    """Create test client (anonymous)."""
    return app.test_client()


def _login(app, user_id):
    client = app.test_client()
    with client.session_transaction() as sess:
        sess['_user_id'] = str(user_id)
        sess['_fresh'] = True
    return client


@pytest.fixture
def admin_client(app):
    """Test client logged in as the seeded admin."""
    from database import get_db

    with app.app_context():
        admin_id = get_db().execute("SELECT id FROM usuario WHERE username = 'admin'").fetchone()['id']
    return _login(app, admin_id)


@pytest.fixture
def photographer_client(app, studio_data):
    """Test client logged in as photographer 7."""
    return _login(app, studio_data['photographer_id'])


@pytest.fixture
def customer_client(app, studio_data):
    """Test client logged in as customer 20."""
    return _login(app, studio_data['customer_id'])


@pytest.fixture
def api_http(app):
    """httpx client talking to the app in-process (no login, as a trusted service)."""
    app.config['LOGIN_DISABLED'] = True
    http = httpx.Client(transport=httpx.WSGITransport(app=app), base_url='http://testserver')
    yield http
    http.close()
