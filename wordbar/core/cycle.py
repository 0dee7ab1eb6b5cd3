"""
Word cycling for WordBar.

Forward navigation takes two steps: the first Advance reveals the
translation of the current word, the second moves to the next word with the
translation hidden again. Retreat always moves back one word and never
reveals anything.
"""
import enum
import logging

from wordbar.constants import DISPLAY_SEPARATOR


class Signal(enum.Enum):
    """Navigation request coming from the menu or the global shortcut."""
    ADVANCE = "advance"
    RETREAT = "retreat"


class CycleController:
    """Collapsed/Revealed state machine over a WordStore."""

    def __init__(self, store):
        self.store = store
        self._revealed = False

    @property
    def revealed(self) -> bool:
        return self._revealed

    @property
    def current_index(self) -> int:
        return self.store.current_index

    def _move_to(self, index: int):
        self.store.current_index = index
        self._revealed = False

    def advance(self):
        """Reveal the current translation, or move on if it is already shown."""
        count = len(self.store)
        if count == 0:
            return
        if not self._revealed:
            self._revealed = True
        else:
            self._move_to((self.store.current_index + 1) % count)

    def retreat(self):
        """Go back one word with the translation hidden."""
        count = len(self.store)
        if count == 0:
            return
        self._move_to((self.store.current_index - 1 + count) % count)

    def handle(self, signal: Signal) -> str:
        """Apply a navigation signal and return the new display text."""
        if signal is Signal.ADVANCE:
            self.advance()
        elif signal is Signal.RETREAT:
            self.retreat()
        else:
            raise ValueError(f"Unknown signal: {signal!r}")
        logging.debug(f"{signal.value}: index={self.current_index} revealed={self._revealed}")
        return self.display_text

    @property
    def display_text(self) -> str:
        """Term alone, or 'term | translation' once revealed."""
        if len(self.store) == 0:
            return ""
        entry = self.store.current
        if self._revealed:
            return f"{entry.term}{DISPLAY_SEPARATOR}{entry.translation}"
        return entry.term
