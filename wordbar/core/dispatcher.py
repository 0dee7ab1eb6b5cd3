"""
Signal dispatcher for WordBar.

Menu clicks arrive on the tray thread and hotkeys on the keyboard hook
thread. Both only enqueue; a single consumer thread owns the word position
and reveal state.
"""
import queue
import logging
import threading
from typing import Callable, Optional

from wordbar.core.cycle import CycleController, Signal

_STOP = object()


class SignalDispatcher(threading.Thread):
    """Single-consumer queue feeding the CycleController."""

    def __init__(self, controller: CycleController, on_display: Optional[Callable[[str], None]] = None):
        super().__init__(daemon=True, name="SignalDispatcher")
        self.controller = controller
        self.on_display = on_display
        self._queue = queue.Queue()
        self._stopped = False

    def submit(self, signal: Signal):
        """Queue a signal for processing. Never blocks."""
        if self._stopped:
            logging.debug(f"Dispatcher stopped, dropping {signal.value}")
            return
        self._queue.put(signal)

    def run(self):
        logging.info("Signal dispatcher started")
        while True:
            item = self._queue.get()
            if item is _STOP:
                break
            self._process(item)
        logging.info("Signal dispatcher stopped")

    def _process(self, signal: Signal):
        try:
            text = self.controller.handle(signal)
        except Exception as e:
            logging.error(f"Failed to apply {signal!r}: {e}", exc_info=True)
            return

        if self.on_display:
            try:
                self.on_display(text)
            except Exception as e:
                logging.error(f"Display update failed: {e}")

    def stop(self, timeout: float = 2.0):
        """Process already queued signals, then stop the thread."""
        if self._stopped:
            return
        self._stopped = True
        self._queue.put(_STOP)
        if self.is_alive():
            self.join(timeout=timeout)
