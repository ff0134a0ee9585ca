"""
User model and data access functions.
Admins, photographers and customers share the usuario table; the role
decides what each one may do through the API.
"""

from database import get_db

PHOTOGRAPHER_ROLE_NAMES = ('fotografo', 'fotógrafo')


class User:
    """
    User class for Flask-Login integration.
    Wraps database row dictionary with required Flask-Login properties.
    """

    def __init__(self, user_dict):
        """
        Initialize User from database row.

        Args:
            user_dict: Dictionary with user data from database
        """
        self.id = user_dict['id']
        self.username = user_dict['username']
        self.correo = user_dict.get('correo')
        self.role_id = user_dict.get('idrol')
        self.role_name = user_dict.get('role_name')
        self.active = user_dict.get('activo', 1)

    @property
    def is_authenticated(self):
        """Required by Flask-Login."""
        return True

    @property
    def is_active(self):
        """Required by Flask-Login."""
        return self.active == 1

    @property
    def is_anonymous(self):
        """Required by Flask-Login."""
        return False

    @property
    def is_admin(self) -> bool:
        return self.role_name == 'admin'

    def get_id(self):
        """Required by Flask-Login. Returns user ID as unicode string."""
        return str(self.id)


def get_user_by_id(user_id: int) -> dict:
    """
    Get user by ID.

    Args:
        user_id: User ID

    Returns:
        User dict or None if not found
    """
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        SELECT u.id, u.username, u.correo, u.telefono, u.idrol, u.activo,
               r.nombre as role_name
        FROM usuario u
        LEFT JOIN rol r ON u.idrol = r.id
        WHERE u.id = ?
    ''', (user_id,))
    row = cursor.fetchone()
    return dict(row) if row else None


def get_user_by_username(username: str) -> dict:
    """Get user by username, or None."""
    db = get_db()
    cursor = db.cursor()
    cursor.execute('''
        SELECT u.id, u.username, u.correo, u.telefono, u.idrol, u.activo,
               r.nombre as role_name
        FROM usuario u
        LEFT JOIN rol r ON u.idrol = r.id
        WHERE u.username = ?
    ''', (username,))
    row = cursor.fetchone()
    return dict(row) if row else None


def create_user(username: str, correo: str = None, role_name: str = 'cliente',
                telefono: str = None) -> int:
    """
    Create a user with the given role.

    Raises:
        ValueError: If the role does not exist or the username is taken

    Returns:
        New user ID
    """
    db = get_db()
    cursor = db.cursor()

    cursor.execute('SELECT id FROM rol WHERE nombre = ?', (role_name,))
    role = cursor.fetchone()
    if not role:
        raise ValueError(f'Rol desconocido: {role_name}')

    if get_user_by_username(username):
        raise ValueError(f'El usuario {username} ya existe')

    cursor.execute('''
        INSERT INTO usuario (username, correo, telefono, idrol, activo)
        VALUES (?, ?, ?, ?, 1)
    ''', (username, correo, telefono, role['id']))
    db.commit()
    return cursor.lastrowid


def get_photographers() -> list:
    """
    Get all users with the photographer role, ordered by username.

    Returns:
        List of user dicts
    """
    db = get_db()
    cursor = db.cursor()
    placeholders = ','.join('?' * len(PHOTOGRAPHER_ROLE_NAMES))
    cursor.execute(f'''
        SELECT u.id, u.username, u.correo, u.telefono
        FROM usuario u
        JOIN rol r ON u.idrol = r.id
        WHERE lower(r.nombre) IN ({placeholders})
        ORDER BY u.username
    ''', PHOTOGRAPHER_ROLE_NAMES)
    return [dict(row) for row in cursor.fetchall()]


def is_photographer(user_id: int, cursor=None) -> bool:
    """
    Check that a user exists, is active and holds the photographer role.

    Args:
        user_id: usuario.id
        cursor: Optional cursor to run inside the caller's transaction
    """
    if cursor is None:
        cursor = get_db().cursor()
    placeholders = ','.join('?' * len(PHOTOGRAPHER_ROLE_NAMES))
    cursor.execute(f'''
        SELECT 1
        FROM usuario u
        JOIN rol r ON u.idrol = r.id
        WHERE u.id = ? AND u.activo = 1 AND lower(r.nombre) IN ({placeholders})
    ''', (user_id, *PHOTOGRAPHER_ROLE_NAMES))
    return cursor.fetchone() is not None
