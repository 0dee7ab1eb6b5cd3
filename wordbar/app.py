"""
Main Application for WordBar.
"""
import logging
import threading
from typing import Optional

from wordbar.config import Config
from wordbar.constants import VERSION
from wordbar.core.cycle import CycleController, Signal
from wordbar.core.dispatcher import SignalDispatcher
from wordbar.core.hotkey import HotkeyGateway, HotkeyMatcher, HotkeyError, ListenerHandle, PermissionGate
from wordbar.core.words import WordStore
from wordbar.ui.tray import TrayManager


class WordBarApp:
    """Main application class. Owns every collaborator for the process lifetime."""

    def __init__(self, config: Optional[Config] = None, permission_gate: Optional[PermissionGate] = None):
        # Initialize configuration
        self.config = config or Config()

        # Word state
        self.store = WordStore.from_config(self.config)
        self.controller = CycleController(self.store)

        # Tray manager
        self.tray_manager = TrayManager()
        self.tray_manager.configure_callbacks(
            on_advance=lambda: self.dispatcher.submit(Signal.ADVANCE),
            on_retreat=lambda: self.dispatcher.submit(Signal.RETREAT),
            on_quit=self.quit_app
        )

        # Services
        self.dispatcher = SignalDispatcher(self.controller, self.tray_manager.update_display)
        self.hotkey_gateway = HotkeyGateway(permission_gate or PermissionGate(), self.tray_manager)
        self.listener: Optional[ListenerHandle] = None

        self._shutdown_lock = threading.Lock()
        self._shut_down = False

    def _start_hotkeys(self):
        """Install the global shortcut hook. Failure leaves the menu usable."""
        try:
            matcher = HotkeyMatcher.from_config(self.config)
        except HotkeyError as e:
            logging.error(f"Invalid hotkey configuration, global shortcuts disabled: {e}")
            return

        self.listener = self.hotkey_gateway.install(matcher, self.dispatcher.submit)
        if self.listener:
            for action, hotkey in self.config.get_hotkeys().items():
                logging.info(f"Hotkey: {hotkey} -> {action}")

    def _on_tray_ready(self, icon):
        """Runs once the tray icon exists (pystray setup hook)."""
        icon.visible = True
        self.dispatcher.start()
        self.tray_manager.update_display(self.controller.display_text)
        self._start_hotkeys()

    def quit_app(self):
        """Quit the application with proper cleanup. Runs once."""
        with self._shutdown_lock:
            if self._shut_down:
                return
            self._shut_down = True

        logging.info("Quitting application...")

        self.hotkey_gateway.uninstall(self.listener)
        self.listener = None

        self.dispatcher.stop()

        try:
            self.store.persist_index(self.config)
        except OSError as e:
            logging.error(f"Failed to save word position: {e}")

        self.tray_manager.stop()
        logging.info("Application shutdown complete")

    def run(self):
        """Run the application. Blocks until Quit."""
        logging.info(f"WordBar v{VERSION}: {len(self.store)} words, starting at #{self.store.current_index}")

        icon = self.tray_manager.create()
        try:
            logging.info("Starting tray loop")
            icon.run(setup=self._on_tray_ready)
        except KeyboardInterrupt:
            logging.info("Keyboard interrupt received")
        finally:
            self.quit_app()
