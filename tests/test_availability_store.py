"""
Tests for the client-side availability store.
"""

import pytest

from agenda_editor import AgendaApiClient, AvailabilityStore, PaintSession, PendingChange, Slot
from utils.errors import BackendError, CommitError, ConflictError, NoPendingChangesError, ValidationError


class FakeAgendaClient:
    """In-memory stand-in for AgendaApiClient."""

    def __init__(self, rows=None, failures=None):
        self.rows = list(rows or [])
        self.failures = dict(failures or {})
        self.calls = []
        self.next_id = 100
        self.on_save = None

    def fetch_all_slots(self):
        return [dict(row) for row in self.rows]

    def save_slots(self, photographer_id, registros):
        self.calls.append((photographer_id, registros))
        if self.on_save:
            self.on_save(photographer_id)
        if photographer_id in self.failures:
            raise self.failures[photographer_id]
        items = []
        for registro in registros:
            self.next_id += 1
            items.append({'id': self.next_id, 'idfotografo': photographer_id, **registro})
        return {'success': True, 'upserted': len(registros), 'items': items}


ROWS = [
    {'id': 1, 'idfotografo': 7, 'fecha': '2024-07-10', 'horainicio': '9:00:00', 'horafin': '13:00', 'disponible': 1},
    {'id': 2, 'idfotografo': 7, 'fecha': '2024-07-11', 'horainicio': None, 'horafin': None, 'disponible': 0},
    {'id': 3, 'idfotografo': 8, 'fecha': '2024-07-10', 'horainicio': '08:00', 'horafin': '17:00', 'disponible': 1},
]


@pytest.fixture
def fake_client():
    return FakeAgendaClient(ROWS)


@pytest.fixture
def store(fake_client):
    store = AvailabilityStore(fake_client)
    store.load()
    return store


class TestLoad:

    def test_groups_by_photographer_and_day(self, store):
        assert store.photographers() == [7, 8]
        assert store.slot(7, '2024-07-10') == Slot(1, True, '09:00', '13:00')
        assert store.slot(7, '2024-07-11') == Slot(2, False, '08:00', '17:00')

    def test_baseline_equals_working_and_no_pending(self, store):
        assert store.baseline_for(7) == store.working_for(7)
        assert store.pending_count() == 0

    def test_returns_photographer_slice(self, fake_client):
        result = AvailabilityStore(fake_client).load(7)
        assert sorted(result) == ['2024-07-10', '2024-07-11']

    def test_reload_discards_pending(self, store):
        store.stage(7, ['2024-07-12'], True)
        store.load()
        assert store.pending_count() == 0
        assert store.slot(7, '2024-07-12') is None

    def test_load_failure_keeps_state(self, store, fake_client):
        store.stage(7, ['2024-07-12'], True)

        def broken():
            raise BackendError('sin conexión')

        fake_client.fetch_all_slots = broken
        with pytest.raises(BackendError):
            store.load()
        assert store.pending_count(7) == 1


class TestStage:

    def test_new_day_gets_default_window(self, store):
        store.stage(7, ['2024-07-12'], True)

        assert store.slot(7, '2024-07-12') == Slot(None, True, '08:00', '17:00')
        assert store.pending_for(7) == {'2024-07-12': PendingChange(True, '08:00', '17:00')}

    def test_keeps_time_window(self, store):
        store.stage(7, ['2024-07-10'], False)
        assert store.pending_for(7)['2024-07-10'] == PendingChange(False, '09:00', '13:00')

    def test_range_sets_every_key_and_nothing_else(self, store):
        keys = ['2024-07-01', '2024-07-02', '2024-07-03']
        store.stage(8, keys, False)

        working = store.working_for(8)
        assert all(working[key].available is False for key in keys)
        assert working['2024-07-10'].available is True
        assert store.pending_count(7) == 0

    def test_converging_back_to_baseline_clears_diff(self, store):
        store.stage(7, ['2024-07-10'], False)
        assert store.pending_count(7) == 1

        store.stage(7, ['2024-07-10'], True)
        assert store.pending_count(7) == 0
        assert store.pending_for(7) == {}

    def test_day_without_baseline_stays_in_diff(self, store):
        store.stage(7, ['2024-07-12'], True)
        store.stage(7, ['2024-07-12'], False)
        assert store.pending_for(7) == {'2024-07-12': PendingChange(False, '08:00', '17:00')}

    def test_staging_twice_is_idempotent(self, store):
        keys = ['2024-07-12', '2024-07-13']
        store.stage(7, keys, True)
        first = store.snapshot
        store.stage(7, keys, True)

        assert store.snapshot is first
        assert store.pending_for(7) == dict(first.pending[7])

    def test_observers_notified_once_per_batch(self, store):
        calls = []
        store.subscribe(calls.append)

        store.stage(7, ['2024-07-12', '2024-07-13', '2024-07-14'], True)
        assert len(calls) == 1

        store.stage(7, ['2024-07-12'], True)
        assert len(calls) == 1

    def test_unsubscribe(self, store):
        calls = []
        unsubscribe = store.subscribe(calls.append)
        unsubscribe()

        store.stage(7, ['2024-07-12'], True)
        assert calls == []

    def test_previous_snapshot_is_untouched(self, store):
        before = store.snapshot
        store.stage(7, ['2024-07-10'], False)

        assert before.working[7]['2024-07-10'].available is True
        assert before.pending == {}
        assert store.snapshot.version == before.version + 1

    def test_invalid_key(self, store):
        with pytest.raises(ValidationError):
            store.stage(7, ['2024-07-12', 'mañana'], True)
        assert store.pending_count() == 0


class TestCommit:

    def test_nothing_pending(self, store):
        with pytest.raises(NoPendingChangesError):
            store.commit()

    def test_one_request_per_photographer(self, store, fake_client):
        store.stage(7, ['2024-07-13', '2024-07-12'], True)
        store.stage(8, ['2024-07-10'], False)

        outcome = store.commit()

        assert [pid for pid, _ in fake_client.calls] == [7, 8]
        assert fake_client.calls[0][1] == [
            {'fecha': '2024-07-12', 'horainicio': '08:00', 'horafin': '17:00', 'disponible': True},
            {'fecha': '2024-07-13', 'horainicio': '08:00', 'horafin': '17:00', 'disponible': True},
        ]
        assert outcome.saved == {7: 2, 8: 1}

    def test_success_moves_baseline(self, store):
        store.stage(7, ['2024-07-12'], True)
        store.commit()

        assert store.pending_count() == 0
        assert store.baseline_for(7) == store.working_for(7)
        assert store.slot(7, '2024-07-12').slot_id is not None

    def test_commit_single_photographer(self, store, fake_client):
        store.stage(7, ['2024-07-12'], True)
        store.stage(8, ['2024-07-12'], True)

        store.commit(8)

        assert [pid for pid, _ in fake_client.calls] == [8]
        assert store.pending_count(7) == 1
        assert store.pending_count(8) == 0

    def test_partial_failure(self, store, fake_client):
        fake_client.failures[8] = BackendError('timeout')
        store.stage(7, ['2024-07-12'], True)
        store.stage(8, ['2024-07-12'], True)

        with pytest.raises(CommitError) as excinfo:
            store.commit()

        error = excinfo.value
        assert set(error.failures) == {8}
        assert error.saved == {7: 1}
        assert error.retryable is True
        assert store.pending_count(7) == 0
        assert store.pending_for(8) == {'2024-07-12': PendingChange(True, '08:00', '17:00')}
        assert store.slot(8, '2024-07-12').available is True
        assert store.is_saving is False

    def test_validation_failure_is_not_retryable(self, store, fake_client):
        fake_client.failures[7] = ValidationError('Cada registro debe incluir una fecha válida.')
        store.stage(7, ['2024-07-12'], True)

        with pytest.raises(CommitError) as excinfo:
            store.commit()

        assert excinfo.value.retryable is False
        assert excinfo.value.status == 400

    def test_retry_after_failure(self, store, fake_client):
        fake_client.failures[7] = BackendError('timeout')
        store.stage(7, ['2024-07-12'], True)
        with pytest.raises(CommitError):
            store.commit()

        del fake_client.failures[7]
        store.commit()

        assert store.pending_count() == 0
        assert len(fake_client.calls) == 2
        assert fake_client.calls[0][1] == fake_client.calls[1][1]

    def test_concurrent_commit_is_rejected(self, store, fake_client):
        errors = []

        def commit_again(photographer_id):
            try:
                store.commit()
            except ConflictError as e:
                errors.append(e)

        fake_client.on_save = commit_again
        store.stage(7, ['2024-07-12'], True)
        store.commit()

        assert len(errors) == 1
        assert errors[0].status == 409

    def test_reload_during_save_is_rejected(self, store, fake_client):
        errors = []

        def reload(photographer_id):
            try:
                store.load()
            except ConflictError as e:
                errors.append(e)

        fake_client.on_save = reload
        store.stage(7, ['2024-07-12'], True)
        store.commit()

        assert len(errors) == 1
        assert store.pending_count() == 0
        assert store.slot(7, '2024-07-12').slot_id is not None

    def test_edit_made_during_save_stays_pending(self, store, fake_client):
        fake_client.on_save = lambda pid: store.stage(7, ['2024-07-10'], True)
        store.stage(7, ['2024-07-10'], False)

        store.commit()

        assert store.baseline_for(7)['2024-07-10'].available is False
        assert store.slot(7, '2024-07-10').available is True
        assert store.pending_for(7) == {'2024-07-10': PendingChange(True, '09:00', '13:00')}


class TestEndToEnd:
    """Store + paint session + HTTP client against the real API."""

    def test_paint_commit_reload(self, api_http, studio_data):
        client = AgendaApiClient(http=api_http)
        client.save_slots(7, [
            {'fecha': '2024-06-01'}, {'fecha': '2024-06-02'}, {'fecha': '2024-06-03'},
        ])

        store = AvailabilityStore(client)
        store.load()
        paint = PaintSession(store, 7)
        paint.pointer_down('2024-06-01')
        paint.pointer_enter('2024-06-02')
        paint.pointer_enter('2024-06-03')
        paint.pointer_up()

        assert store.pending_count(7) == 3
        store.commit()

        slots = store.load(7)
        assert sorted(slots) == ['2024-06-01', '2024-06-02', '2024-06-03']
        assert all(slot.available is False for slot in slots.values())

        rows = client.fetch_slots(7)
        assert len(rows) == 3
        assert all(row['disponible'] is False for row in rows)

    def test_retried_commit_does_not_duplicate(self, api_http, studio_data):
        client = AgendaApiClient(http=api_http)
        registros = [{'fecha': '2024-06-01', 'disponible': False}]

        client.save_slots(7, registros)
        client.save_slots(7, registros)

        assert len(client.fetch_slots(7)) == 1

    def test_server_validation_error(self, api_http, studio_data):
        client = AgendaApiClient(http=api_http)
        with pytest.raises(ValidationError) as excinfo:
            client.save_slots(7, [{'fecha': 'bogus'}])
        assert excinfo.value.message == 'Cada registro debe incluir una fecha válida.'

    def test_unknown_photographer_is_not_retryable(self, api_http, studio_data):
        store = AvailabilityStore(AgendaApiClient(http=api_http))
        store.load()
        store.stage(9999, ['2024-06-01'], False)

        with pytest.raises(CommitError) as excinfo:
            store.commit(9999)

        error = excinfo.value
        assert error.retryable is False
        assert error.status == 400
        assert isinstance(error.failures[9999], ValidationError)
        assert store.pending_count(9999) == 1
