"""
Database seed data.
Initial data population for fresh database installations.
"""


# Lifecycle of a photo session, in display order
ACTIVITY_STATES = [
    'Pendiente',
    'Reservada',
    'En progreso',
    'En edición',
    'Impresión',
    'Lista',
    'Entregada',
]

PAYMENT_STATES = [
    'Pendiente',
    'Con anticipo',
    'Pagado',
]


def seed_database(db):
    """Insert initial seed data."""

    # 1. Roles
    roles_data = [
        ('admin', 'Administración del estudio'),
        ('fotografo', 'Fotógrafo con agenda propia'),
        ('cliente', 'Cliente que reserva sesiones'),
    ]

    for nombre, descripcion in roles_data:
        db.execute('''
            INSERT INTO rol (nombre, descripcion)
            VALUES (?, ?)
        ''', (nombre, descripcion))

    admin_role_id = db.execute("SELECT id FROM rol WHERE nombre = 'admin'").fetchone()[0]

    # 2. Default administrator
    db.execute('''
        INSERT INTO usuario (username, correo, idrol, activo)
        VALUES (?, ?, ?, 1)
    ''', ('admin', 'admin@fotoestudio.local', admin_role_id))

    # 3. Booking lifecycle catalog (orden drives the default state)
    for orden, nombre in enumerate(ACTIVITY_STATES, start=1):
        db.execute('''
            INSERT INTO estado_actividad (nombre_estado, orden)
            VALUES (?, ?)
        ''', (nombre, orden))

    # 4. Payment state catalog (ids 1..3 match DEFAULT_PAYMENT_STATES)
    for nombre in PAYMENT_STATES:
        db.execute('INSERT INTO estado_pago (nombre_estado) VALUES (?)', (nombre,))

    # 5. Starter packages
    packages = [
        ('Sesión Básica', 'Una hora de sesión y 10 fotos editadas', 500.0),
        ('Sesión Familiar', 'Dos horas de sesión y 25 fotos editadas', 900.0),
        ('Boda Completa', 'Cobertura de evento y álbum impreso', 6500.0),
    ]

    for nombre, descripcion, precio in packages:
        db.execute('''
            INSERT INTO paquete (nombre_paquete, descripcion, precio)
            VALUES (?, ?, ?)
        ''', (nombre, descripcion, precio))
