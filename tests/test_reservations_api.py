"""
Tests for the booking API routes.
"""

import pytest

SCENARIO_B = {'fecha': '2024-07-10', 'hora': '09:00', 'idfotografo': 7, 'estado': 'Reservada'}


def _query(app, sql, params=()):
    from database import get_db

    with app.app_context():
        return [dict(row) for row in get_db().execute(sql, params).fetchall()]


@pytest.fixture
def scheduled_bookings(app, studio_data):
    """Booking 1 on 2024-07-10 09:00 and booking 42 on 2024-08-01 10:00; booking 2 has no slot."""
    from database import get_db
    from models.payment import create_payment

    with app.app_context():
        db = get_db()
        cursor = db.cursor()
        cursor.execute('''
            INSERT INTO agenda (idfotografo, fecha, horainicio, horafin, disponible)
            VALUES (7, '2024-07-10', '09:00', '09:00', 0)
        ''')
        cursor.execute('UPDATE actividad SET idagenda = ? WHERE id = 1', (cursor.lastrowid,))
        cursor.execute('''
            INSERT INTO agenda (idfotografo, fecha, horainicio, horafin, disponible)
            VALUES (7, '2024-08-01', '10:00', '10:00', 0)
        ''')
        cursor.execute('UPDATE actividad SET idagenda = ? WHERE id = 42', (cursor.lastrowid,))
        db.commit()

        create_payment(1, 250, '2024-06-15', 'efectivo', 'anticipo', 2)

    return studio_data


class TestPatchReservation:
    """PATCH /api/reservas/<id>"""

    def test_scenario_reschedule_and_reserve(self, app, admin_client, studio_data):
        response = admin_client.patch('/api/reservas/42', json=SCENARIO_B)

        assert response.status_code == 200
        data = response.get_json()
        assert data['success'] is True
        assert data['message'] == '✅ Reserva actualizada'

        item = data['item']
        assert item['id'] == 42
        assert item['estado']['nombre_estado'] == 'Reservada'
        assert item['agenda']['fecha'] == '2024-07-10'
        assert item['agenda']['horainicio'] == '09:00'
        assert item['agenda']['disponible'] is False
        assert item['paquete']['nombre_paquete'] == 'Sesión Básica'
        assert item['usuario']['username'] == 'cliente1'

        rows = _query(app, 'SELECT id, disponible FROM agenda WHERE idfotografo = 7 AND fecha = ?',
                      ('2024-07-10',))
        assert len(rows) == 1
        assert rows[0]['disponible'] == 0
        assert item['agenda']['id'] == rows[0]['id']

        booking = _query(app, 'SELECT idagenda, idestado_actividad FROM actividad WHERE id = 42')[0]
        assert booking['idagenda'] == rows[0]['id']
        assert booking['idestado_actividad'] == studio_data['states']['Reservada']

    def test_existing_available_slot_is_taken(self, app, admin_client, studio_data):
        saved = admin_client.patch('/api/agenda/7', json={'fecha': '2024-07-10'}).get_json()
        slot_id = saved['items'][0]['id']

        item = admin_client.patch('/api/reservas/42', json=SCENARIO_B).get_json()['item']

        assert item['agenda']['id'] == slot_id
        rows = _query(app, 'SELECT disponible, horainicio, horafin FROM agenda WHERE idfotografo = 7')
        assert rows == [{'disponible': 0, 'horainicio': '09:00', 'horafin': '09:00'}]

    def test_unpadded_time_is_normalized(self, admin_client, studio_data):
        body = dict(SCENARIO_B, hora='9:00')
        item = admin_client.patch('/api/reservas/42', json=body).get_json()['item']
        assert item['agenda']['horainicio'] == '09:00'

    def test_status_name_is_accent_insensitive(self, admin_client, studio_data):
        response = admin_client.patch('/api/reservas/42', json={'estado': 'en edicion'})

        assert response.status_code == 200
        item = response.get_json()['item']
        assert item['estado']['nombre_estado'] == 'En edición'
        assert item['agenda'] is None

    def test_invalid_date(self, app, admin_client, studio_data):
        response = admin_client.patch('/api/reservas/42', json=dict(SCENARIO_B, fecha='10/07/2024'))

        assert response.status_code == 400
        assert response.get_json()['message'] == 'Selecciona una fecha válida (YYYY-MM-DD).'
        assert _query(app, 'SELECT COUNT(*) AS n FROM agenda')[0]['n'] == 0

    def test_invalid_time(self, admin_client, studio_data):
        response = admin_client.patch('/api/reservas/42', json=dict(SCENARIO_B, hora='25:00'))

        assert response.status_code == 400
        assert response.get_json()['message'] == 'Selecciona una hora válida (HH:MM).'

    def test_not_found(self, admin_client, studio_data):
        response = admin_client.patch('/api/reservas/999', json=SCENARIO_B)

        assert response.status_code == 404
        assert response.get_json() == {'success': False, 'message': 'Reserva no encontrada.'}

    def test_invalid_state(self, app, admin_client, studio_data):
        response = admin_client.patch('/api/reservas/42', json=dict(SCENARIO_B, estado='Cancelada'))

        assert response.status_code == 400
        assert response.get_json()['message'] == 'El estado seleccionado no es válido.'
        assert _query(app, 'SELECT COUNT(*) AS n FROM agenda')[0]['n'] == 0

    def test_delivered_booking_is_locked(self, app, admin_client, studio_data):
        response = admin_client.patch('/api/reservas/3', json=dict(SCENARIO_B, estado='Lista'))

        assert response.status_code == 409
        assert response.get_json()['message'] == 'Las reservas entregadas no pueden modificarse.'
        booking = _query(app, 'SELECT idagenda, idestado_actividad FROM actividad WHERE id = 3')[0]
        assert booking == {'idagenda': None, 'idestado_actividad': studio_data['states']['Entregada']}

    def test_no_changes(self, admin_client, studio_data):
        response = admin_client.patch('/api/reservas/42', json={})

        assert response.status_code == 400
        assert response.get_json()['message'] == 'No hay cambios para aplicar.'

    def test_invalid_photographer(self, admin_client, studio_data):
        response = admin_client.patch('/api/reservas/42', json=dict(SCENARIO_B, idfotografo='x'))
        assert response.status_code == 400

    def test_customer_is_not_a_photographer(self, app, admin_client, studio_data):
        response = admin_client.patch('/api/reservas/42', json=dict(SCENARIO_B, idfotografo=20))

        assert response.status_code == 400
        assert response.get_json()['message'] == 'Debe proporcionar un fotógrafo válido.'
        assert _query(app, 'SELECT COUNT(*) AS n FROM agenda')[0]['n'] == 0
        booking = _query(app, 'SELECT idagenda, idestado_actividad FROM actividad WHERE id = 42')[0]
        assert booking == {'idagenda': None, 'idestado_actividad': studio_data['states']['Pendiente']}

    def test_customer_forbidden(self, customer_client):
        response = customer_client.patch('/api/reservas/42', json=SCENARIO_B)
        assert response.status_code == 403

    def test_history_endpoint(self, admin_client, studio_data):
        admin_client.patch('/api/reservas/42', json=SCENARIO_B)

        items = admin_client.get('/api/reservas/42/historial').get_json()['items']

        assert len(items) == 1
        assert items[0]['estado_anterior'] == 'Pendiente'
        assert items[0]['estado_nuevo'] == 'Reservada'
        assert items[0]['cambiado_por'] == 'admin'


class TestBulkUpdate:
    """PATCH /api/reservas/actualizar-multiples"""

    def test_scenario_missing_id_is_skipped(self, app, admin_client, studio_data):
        response = admin_client.patch('/api/reservas/actualizar-multiples', json={
            'reservas': [1, 2, 999], 'nuevo_estado': 'Entregada'
        })

        assert response.status_code == 200
        data = response.get_json()
        entregada = studio_data['states']['Entregada']
        assert data['success'] is True
        assert data['updated'] == 2
        assert data['estadoId'] == entregada
        assert data['estado']['nombre_estado'] == 'Entregada'
        assert data['message'] == '✅ Estado actualizado para 2 reservas.'

        rows = _query(app, 'SELECT id, idestado_actividad FROM actividad WHERE id IN (1, 2, 42) ORDER BY id')
        assert [row['idestado_actividad'] for row in rows] == [
            entregada, entregada, studio_data['states']['Pendiente']
        ]

    def test_delivered_excluded(self, admin_client, studio_data):
        data = admin_client.patch('/api/reservas/actualizar-multiples', json={
            'reservas': [1, 3], 'nuevo_estado': 'lista'
        }).get_json()

        assert data['updated'] == 1

    def test_unknown_state(self, admin_client, studio_data):
        response = admin_client.patch('/api/reservas/actualizar-multiples', json={
            'reservas': [1], 'nuevo_estado': 'Archivada'
        })

        assert response.status_code == 400
        assert response.get_json()['message'] == 'El estado indicado no existe.'

    @pytest.mark.parametrize('body', [
        {'reservas': [], 'nuevo_estado': 'Lista'},
        {'reservas': [1, 2]},
        {'nuevo_estado': 'Lista'},
        {},
    ])
    def test_selection_required(self, admin_client, studio_data, body):
        response = admin_client.patch('/api/reservas/actualizar-multiples', json=body)

        assert response.status_code == 400
        assert response.get_json()['message'] == 'Debe seleccionar reservas y un estado válido.'

    def test_customer_forbidden(self, customer_client):
        response = customer_client.patch('/api/reservas/actualizar-multiples', json={
            'reservas': [1], 'nuevo_estado': 'Lista'
        })
        assert response.status_code == 403


class TestCustomerReservations:
    """GET /api/mis-reservas"""

    def test_ordered_by_slot_descending_unscheduled_last(self, customer_client, scheduled_bookings):
        response = customer_client.get('/api/mis-reservas?clienteId=20')

        assert response.status_code == 200
        items = response.get_json()['items']
        assert [item['id'] for item in items] == [42, 1, 2]

    def test_relations_are_scalar(self, customer_client, scheduled_bookings):
        items = customer_client.get('/api/mis-reservas?clienteId=20').get_json()['items']
        by_id = {item['id']: item for item in items}

        assert isinstance(by_id[1]['agenda'], dict)
        assert isinstance(by_id[1]['paquete'], dict)
        assert by_id[2]['agenda'] is None
        assert by_id[2]['estado']['nombre_estado'] == 'Pendiente'
        assert by_id[2]['estado_pago'] is None

    def test_payments_and_summary(self, customer_client, scheduled_bookings):
        items = customer_client.get('/api/mis-reservas?clienteId=20').get_json()['items']
        booking = next(item for item in items if item['id'] == 1)

        assert len(booking['pagos']) == 1
        assert booking['pagos'][0]['monto'] == 250
        assert booking['resumen_pago']['porcentaje'] == 50
        assert booking['resumen_pago']['estado'] == 'Con anticipo'

        unpaid = next(item for item in items if item['id'] == 2)
        assert unpaid['pagos'] == []
        assert unpaid['resumen_pago']['estado'] == 'Pendiente'

    def test_missing_customer(self, customer_client):
        response = customer_client.get('/api/mis-reservas')

        assert response.status_code == 400
        assert response.get_json()['message'] == 'Cliente inválido.'

    def test_customer_cannot_read_others(self, customer_client):
        response = customer_client.get('/api/mis-reservas?clienteId=21')
        assert response.status_code == 403

    def test_admin_reads_any_customer(self, admin_client, studio_data):
        items = admin_client.get('/api/mis-reservas?clienteId=21').get_json()['items']
        assert [item['id'] for item in items] == [3]


class TestAdminList:
    """GET /api/reservas"""

    def test_filter_by_photographer(self, admin_client, scheduled_bookings):
        items = admin_client.get('/api/reservas?fotografoId=7').get_json()['items']
        assert [item['id'] for item in items] == [42, 1]

    def test_filter_by_day_and_state(self, admin_client, scheduled_bookings):
        pendiente = scheduled_bookings['states']['Pendiente']

        by_day = admin_client.get('/api/reservas?fecha=2024-07-10').get_json()['items']
        by_state = admin_client.get(f'/api/reservas?estadoId={pendiente}').get_json()['items']

        assert [item['id'] for item in by_day] == [1]
        assert sorted(item['id'] for item in by_state) == [1, 42]

    def test_invalid_day(self, admin_client):
        response = admin_client.get('/api/reservas?fecha=julio')
        assert response.status_code == 400
        assert response.get_json()['message'] == 'El campo fecha debe ser una fecha válida (YYYY-MM-DD).'

    def test_state_catalog(self, admin_client):
        items = admin_client.get('/api/estados').get_json()['items']

        assert items[0]['nombre_estado'] == 'Pendiente'
        assert items[-1]['transiciones'] == []
