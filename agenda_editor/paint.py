"""
Click-and-drag painting over the month grid.

Pressing on a day flips it and fixes the value for the whole gesture;
dragging over other days applies that same value to every day between the
anchor and the pointer. Releasing or leaving the grid ends the gesture.
Nothing is sent to the server here, edits only reach the store's diff.
"""

from enum import Enum

from utils.datetime_helpers import date_range_keys, is_key_between, to_date_key


class PaintState(Enum):
    IDLE = 'idle'
    DRAGGING = 'dragging'


class PaintSession:
    """Pointer gesture state for one photographer's calendar."""

    def __init__(self, store, photographer_id: int):
        self.store = store
        self.photographer_id = photographer_id
        self.state = PaintState.IDLE
        self.anchor_key = None
        self.hover_key = None
        self.target_value = None
        self.selected_day = None

    @property
    def is_dragging(self) -> bool:
        return self.state is PaintState.DRAGGING

    def pointer_down(self, key) -> None:
        """Start a gesture: the value painted is the opposite of the anchor's."""
        day_key = to_date_key(key)
        if day_key is None:
            return

        current = self.store.slot(self.photographer_id, day_key)
        self.target_value = not (current.available if current else False)
        self.state = PaintState.DRAGGING
        self.anchor_key = day_key
        self.hover_key = day_key
        self.selected_day = day_key

        self.store.stage(self.photographer_id, [day_key], self.target_value)

    def pointer_enter(self, key) -> None:
        """Extend the gesture to `key`; ignored while idle."""
        if not self.is_dragging:
            return
        day_key = to_date_key(key)
        if day_key is None:
            return

        self.hover_key = day_key
        self.store.stage(
            self.photographer_id,
            date_range_keys(self.anchor_key, day_key),
            self.target_value,
        )

    def _end(self) -> None:
        self.state = PaintState.IDLE
        self.anchor_key = None
        self.hover_key = None
        self.target_value = None

    def pointer_up(self) -> None:
        self._end()

    def pointer_cancel(self) -> None:
        self._end()

    def pointer_leave(self) -> None:
        self._end()

    def in_drag_range(self, key) -> bool:
        """Whether a day is highlighted as part of the current gesture."""
        if not self.is_dragging:
            return False
        return is_key_between(to_date_key(key), self.anchor_key, self.hover_key)

    def select_day(self, key) -> None:
        """Single click: toggle one day."""
        self.pointer_down(key)
        self.pointer_up()
