"""
Database schema definitions.
Table creation, indexes, and structure management.
"""


def drop_tables(db):
    """Drop all existing tables."""
    # Disable foreign key constraints before dropping
    db.execute('PRAGMA foreign_keys = OFF')

    tables = [
        'actividad_historial',
        'pago',
        'actividad',
        'agenda',
        'galeria_paquete',
        'paquete',
        'estado_pago',
        'estado_actividad',
        'usuario',
        'rol'
    ]

    for table in tables:
        db.execute(f'DROP TABLE IF EXISTS {table}')

    # Re-enable foreign key constraints
    db.execute('PRAGMA foreign_keys = ON')


def create_tables(db):
    """Create all database tables."""

    # 1. Users & roles (admins, photographers and customers share one table)
    db.execute('''
        CREATE TABLE rol (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            nombre TEXT UNIQUE NOT NULL,
            descripcion TEXT
        )
    ''')

    db.execute('''
        CREATE TABLE usuario (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            username TEXT UNIQUE NOT NULL,
            correo TEXT UNIQUE,
            telefono TEXT,
            idrol INTEGER REFERENCES rol(id),
            activo INTEGER DEFAULT 1,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    # 2. Catalogs
    db.execute('''
        CREATE TABLE estado_actividad (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            nombre_estado TEXT UNIQUE NOT NULL,
            orden INTEGER NOT NULL DEFAULT 0
        )
    ''')

    db.execute('''
        CREATE TABLE estado_pago (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            nombre_estado TEXT UNIQUE NOT NULL
        )
    ''')

    db.execute('''
        CREATE TABLE paquete (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            nombre_paquete TEXT NOT NULL,
            descripcion TEXT,
            precio REAL NOT NULL DEFAULT 0,
            activo INTEGER DEFAULT 1
        )
    ''')

    db.execute('''
        CREATE TABLE galeria_paquete (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            idpaquete INTEGER REFERENCES paquete(id) ON DELETE CASCADE,
            titulo TEXT,
            descripcion TEXT,
            url_imagen TEXT NOT NULL
        )
    ''')

    # 3. Photographer agenda: one slot per photographer and day
    db.execute('''
        CREATE TABLE agenda (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            idfotografo INTEGER NOT NULL REFERENCES usuario(id),
            fecha TEXT NOT NULL,
            horainicio TEXT NOT NULL DEFAULT '08:00',
            horafin TEXT NOT NULL DEFAULT '17:00',
            disponible INTEGER NOT NULL DEFAULT 1,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            UNIQUE (idfotografo, fecha)
        )
    ''')

    # 4. Bookings (activities) and payments
    db.execute('''
        CREATE TABLE actividad (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            idusuario INTEGER REFERENCES usuario(id),
            idagenda INTEGER REFERENCES agenda(id) ON DELETE SET NULL,
            idpaquete INTEGER REFERENCES paquete(id),
            idestado_actividad INTEGER REFERENCES estado_actividad(id),
            idestado_pago INTEGER REFERENCES estado_pago(id),
            estado_pago_texto TEXT,
            nombre_actividad TEXT,
            ubicacion TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    db.execute('''
        CREATE TABLE pago (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            idactividad INTEGER NOT NULL REFERENCES actividad(id) ON DELETE CASCADE,
            monto REAL NOT NULL DEFAULT 0,
            fecha_pago TEXT,
            metodo_pago TEXT,
            tipo_pago TEXT,
            idestado_pago INTEGER REFERENCES estado_pago(id)
        )
    ''')

    db.execute('''
        CREATE TABLE actividad_historial (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            idactividad INTEGER NOT NULL REFERENCES actividad(id) ON DELETE CASCADE,
            idestado_anterior INTEGER REFERENCES estado_actividad(id),
            idestado_nuevo INTEGER REFERENCES estado_actividad(id),
            idagenda INTEGER,
            cambiado_por TEXT,
            notas TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')


def create_indexes(db):
    """Create performance indexes."""

    # Agenda indexes (the UNIQUE constraint already covers (idfotografo, fecha))
    db.execute('CREATE INDEX idx_agenda_fecha ON agenda(fecha)')

    # Booking indexes
    db.execute('CREATE INDEX idx_actividad_usuario ON actividad(idusuario)')
    db.execute('CREATE INDEX idx_actividad_agenda ON actividad(idagenda)')
    db.execute('CREATE INDEX idx_actividad_estado ON actividad(idestado_actividad)')

    # Payment indexes
    db.execute('CREATE INDEX idx_pago_actividad ON pago(idactividad)')

    # History indexes
    db.execute('CREATE INDEX idx_historial_actividad ON actividad_historial(idactividad, created_at)')
