"""
Availability store for the agenda editor.

Keeps three views of every photographer's calendar:

    baseline  last state known to be persisted on the server
    working   what the admin currently sees (baseline + local edits)
    pending   the diff still to be sent, keyed by day

Every edit builds a new AgendaSnapshot; nested mappings are copied on write
and never mutated, so a snapshot handed to an observer stays valid.
"""

import logging
from dataclasses import dataclass, field, replace

from utils.datetime_helpers import to_date_key
from utils.errors import CommitError, ConflictError, NoPendingChangesError, StudioError, ValidationError
from utils.messages import get_message
from utils.validators import normalize_time

logger = logging.getLogger(__name__)

DEFAULT_START = '08:00'
DEFAULT_END = '17:00'


@dataclass(frozen=True)
class Slot:
    slot_id: int | None
    available: bool
    start: str
    end: str


@dataclass(frozen=True)
class PendingChange:
    available: bool
    start: str
    end: str


@dataclass(frozen=True)
class AgendaSnapshot:
    baseline: dict = field(default_factory=dict)
    working: dict = field(default_factory=dict)
    pending: dict = field(default_factory=dict)
    version: int = 0


@dataclass(frozen=True)
class CommitOutcome:
    saved: dict
    version: int


class AvailabilityStore:
    """
    Client-side state for the availability calendar.

    Meant for a single UI thread. The saving flag rejects a reload or a
    second commit triggered from an observer while a save is running.

    Args:
        client: AgendaApiClient (or anything with fetch_all_slots/save_slots)
        default_start: Start time given to days without a slot
        default_end: End time given to days without a slot
    """

    def __init__(self, client, default_start: str = DEFAULT_START, default_end: str = DEFAULT_END):
        self._client = client
        self._default_start = default_start
        self._default_end = default_end
        self._snapshot = AgendaSnapshot()
        self._saving = False
        self._observers = []

    # -------- OBSERVERS --------

    def subscribe(self, callback):
        """
        Register callback(snapshot), called after every change.

        Returns:
            A function that removes the callback
        """
        self._observers.append(callback)

        def unsubscribe():
            if callback in self._observers:
                self._observers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self._snapshot
        for callback in list(self._observers):
            callback(snapshot)

    # -------- QUERIES --------

    @property
    def snapshot(self) -> AgendaSnapshot:
        return self._snapshot

    @property
    def is_saving(self) -> bool:
        return self._saving

    def working_for(self, photographer_id: int) -> dict:
        return dict(self._snapshot.working.get(photographer_id, {}))

    def baseline_for(self, photographer_id: int) -> dict:
        return dict(self._snapshot.baseline.get(photographer_id, {}))

    def pending_for(self, photographer_id: int) -> dict:
        return dict(self._snapshot.pending.get(photographer_id, {}))

    def pending_count(self, photographer_id: int = None) -> int:
        pending = self._snapshot.pending
        if photographer_id is not None:
            return len(pending.get(photographer_id, {}))
        return sum(len(changes) for changes in pending.values())

    def slot(self, photographer_id: int, key: str) -> Slot | None:
        return self._snapshot.working.get(photographer_id, {}).get(key)

    def photographers(self) -> list:
        snapshot = self._snapshot
        return sorted(set(snapshot.working) | set(snapshot.baseline))

    # -------- LOAD --------

    def _group_rows(self, rows: list) -> dict:
        grouped = {}
        for row in rows:
            key = to_date_key(row.get('fecha'))
            photographer_id = row.get('idfotografo')
            if key is None or photographer_id is None:
                continue
            grouped.setdefault(photographer_id, {})[key] = Slot(
                slot_id=row.get('id'),
                available=bool(row.get('disponible')),
                start=normalize_time(row.get('horainicio'), self._default_start),
                end=normalize_time(row.get('horafin'), self._default_end),
            )
        return grouped

    def load(self, photographer_id: int = None) -> dict:
        """
        Fetch every photographer's slots and reset local state.

        Baseline and working become the server state; the pending diff is
        cleared.

        Returns:
            {day_key: Slot} for photographer_id, or
            {photographer_id: {day_key: Slot}} when it is None
        """
        if self._saving:
            raise ConflictError(get_message('agenda_save_in_progress'))

        grouped = self._group_rows(self._client.fetch_all_slots())

        self._snapshot = AgendaSnapshot(
            baseline=grouped,
            working=grouped,
            pending={},
            version=self._snapshot.version + 1,
        )
        self._notify()

        logger.debug('Agenda cargada: %s fotógrafos', len(grouped))
        if photographer_id is not None:
            return dict(grouped.get(photographer_id, {}))
        return grouped

    # -------- STAGE --------

    def stage(self, photographer_id: int, keys, available: bool) -> AgendaSnapshot:
        """
        Set availability for a batch of days.

        Days keep their time window (new days get the default one). A day
        whose value converges back to the baseline leaves the pending diff.
        Observers are notified once, after the whole batch; a batch that
        changes nothing does not notify.

        Raises:
            ValidationError: If any key is not a valid day
        """
        normalized = []
        for key in keys:
            day_key = to_date_key(key)
            if day_key is None:
                raise ValidationError(get_message('agenda_invalid_date'))
            normalized.append(day_key)

        available = bool(available)

        snapshot = self._snapshot
        baseline = snapshot.baseline.get(photographer_id, {})
        working = dict(snapshot.working.get(photographer_id, {}))
        pending = dict(snapshot.pending.get(photographer_id, {}))
        changed = False

        for key in normalized:
            current = working.get(key)
            start = current.start if current else self._default_start
            end = current.end if current else self._default_end
            if current is not None and current.available == available:
                continue

            working[key] = Slot(
                slot_id=current.slot_id if current else None,
                available=available,
                start=start,
                end=end,
            )
            changed = True

            base = baseline.get(key)
            if base is not None and (base.available, base.start, base.end) == (available, start, end):
                pending.pop(key, None)
            else:
                pending[key] = PendingChange(available=available, start=start, end=end)

        if not changed:
            return snapshot

        all_pending = {**snapshot.pending, photographer_id: pending}
        if not pending:
            del all_pending[photographer_id]

        self._snapshot = AgendaSnapshot(
            baseline=snapshot.baseline,
            working={**snapshot.working, photographer_id: working},
            pending=all_pending,
            version=snapshot.version + 1,
        )

        self._notify()
        return self._snapshot

    # -------- COMMIT --------

    def commit(self, photographer_id: int = None) -> CommitOutcome:
        """
        Persist pending changes, one request per photographer.

        Photographers are saved independently: a failure for one does not
        undo or block another. Saved photographers get their baseline moved
        to what was sent; failed ones keep working state and diff intact.

        Raises:
            ConflictError: A commit is already running
            NoPendingChangesError: Nothing to save
            CommitError: One or more photographers failed
        """
        if self._saving:
            raise ConflictError(get_message('agenda_save_in_progress'))

        pending = self._snapshot.pending
        if photographer_id is not None:
            targets = [photographer_id] if pending.get(photographer_id) else []
        else:
            targets = sorted(pid for pid, changes in pending.items() if changes)
        if not targets:
            raise NoPendingChangesError(get_message('agenda_no_pending'))

        batches = {pid: dict(pending[pid]) for pid in targets}
        self._saving = True

        self._notify()

        saved = {}
        failures = {}
        try:
            for pid, sent in batches.items():
                registros = [
                    {
                        'fecha': key,
                        'horainicio': change.start,
                        'horafin': change.end,
                        'disponible': change.available,
                    }
                    for key, change in sorted(sent.items())
                ]
                try:
                    body = self._client.save_slots(pid, registros)
                except StudioError as e:
                    logger.warning('Agenda del fotógrafo %s no guardada: %s', pid, e.message)
                    failures[pid] = e
                    continue

                self._apply_saved(pid, sent, body.get('items') or [])
                saved[pid] = body.get('upserted', len(registros))
        finally:
            self._saving = False
            self._notify()

        if failures:
            raise CommitError(failures, saved)

        logger.info('Agenda guardada para %s fotógrafos', len(saved))
        return CommitOutcome(saved=saved, version=self._snapshot.version)

    def _apply_saved(self, photographer_id: int, sent: dict, items: list) -> None:
        """Move sent changes into the baseline; edits staged meanwhile stay pending."""
        persisted_ids = {}
        for item in items:
            key = to_date_key(item.get('fecha'))
            if key is not None:
                persisted_ids[key] = item.get('id')

        snapshot = self._snapshot
        baseline = dict(snapshot.baseline.get(photographer_id, {}))
        working = dict(snapshot.working.get(photographer_id, {}))
        pending = dict(snapshot.pending.get(photographer_id, {}))

        for key, change in sent.items():
            previous = baseline.get(key)
            slot_id = persisted_ids.get(key) or (previous.slot_id if previous else None)
            baseline[key] = Slot(slot_id, change.available, change.start, change.end)

            current = working.get(key)
            if current is None:
                pending.pop(key, None)
                continue
            if current.slot_id != slot_id:
                current = replace(current, slot_id=slot_id)
                working[key] = current

            # The diff is recomputed against the new baseline
            if (current.available, current.start, current.end) == (change.available, change.start, change.end):
                pending.pop(key, None)
            else:
                pending[key] = PendingChange(current.available, current.start, current.end)

        all_pending = {**snapshot.pending, photographer_id: pending}
        if not pending:
            del all_pending[photographer_id]

        self._snapshot = AgendaSnapshot(
            baseline={**snapshot.baseline, photographer_id: baseline},
            working={**snapshot.working, photographer_id: working},
            pending=all_pending,
            version=snapshot.version + 1,
        )
