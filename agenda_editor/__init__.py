"""
Availability editor: local calendar state, paint gestures and the HTTP
client that saves them through the API.
"""

from agenda_editor.client import AgendaApiClient
from agenda_editor.paint import PaintSession, PaintState
from agenda_editor.store import AgendaSnapshot, AvailabilityStore, CommitOutcome, PendingChange, Slot

__all__ = [
    'AgendaApiClient',
    'AgendaSnapshot',
    'AvailabilityStore',
    'CommitOutcome',
    'PaintSession',
    'PaintState',
    'PendingChange',
    'Slot',
]
