"""
Global hotkey handling for WordBar.

Uses a low-level keyboard hook instead of registered hotkeys so the held
modifiers can be compared exactly: a combo only fires when its modifiers,
and no others, are down. A matched combo is swallowed so other applications
don't act on it too (where the platform allows suppression).
"""
import os
import sys
import ctypes
import ctypes.util
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, Optional, Tuple

import keyboard

from wordbar.constants import AUTHORIZATION_NOTICE, APP_NAME
from wordbar.core.cycle import Signal


class HotkeyError(ValueError):
    """Raised for a hotkey combo that can't be used."""


# Canonical modifier -> accepted spellings in hotkey strings
MODIFIER_ALIASES = {
    'ctrl': ('ctrl', 'control'),
    'alt': ('alt', 'option', 'opt'),
    'shift': ('shift',),
    'cmd': ('cmd', 'command', 'win', 'windows', 'super'),
}
MOD_MAP = {alias: canonical for canonical, aliases in MODIFIER_ALIASES.items() for alias in aliases}

# Canonical modifier -> names the keyboard library knows it by
KEYBOARD_MODIFIER_NAMES = {
    'ctrl': ('ctrl',),
    'alt': ('alt',),
    'shift': ('shift',),
    'cmd': ('windows', 'command'),
}

# Seconds to wait for the listener thread to fail before trusting it
LISTENER_STARTUP_GRACE = 0.2


@dataclass(frozen=True)
class KeyEvent:
    """A key press together with the modifiers held at that moment."""
    key: str
    modifiers: FrozenSet[str] = field(default_factory=frozenset)


def parse_hotkey(combo: str) -> Tuple[FrozenSet[str], str]:
    """Parse a hotkey string like 'ctrl+alt+right' into (modifiers, key).

    Raises:
        HotkeyError: if the combo has no modifier, no main key, or two main keys
    """
    if not combo or not isinstance(combo, str):
        raise HotkeyError(f"Empty hotkey: {combo!r}")

    parts = combo.lower().replace(' ', '').split('+')
    modifiers = set()
    key = None
    for part in parts:
        if not part:
            raise HotkeyError(f"Malformed hotkey: {combo}")
        if part in MOD_MAP:
            modifiers.add(MOD_MAP[part])
        elif key is None:
            key = part
        else:
            raise HotkeyError(f"Hotkey '{combo}' has more than one main key")

    if key is None:
        raise HotkeyError(f"No main key found in hotkey: {combo}")
    if not modifiers:
        raise HotkeyError(f"Hotkey '{combo}' needs at least one modifier")
    return frozenset(modifiers), key


class HotkeyMatcher:
    """Maps key events to navigation signals.

    A binding matches only when the held modifier set equals the binding's
    modifier set; extra modifiers disqualify the event.
    """

    def __init__(self, bindings: Dict[Signal, str]):
        self._bindings = {}
        for signal, combo in bindings.items():
            parsed = parse_hotkey(combo)
            for other, existing in self._bindings.items():
                if existing == parsed:
                    raise HotkeyError(f"Hotkey '{combo}' is already used for {other.value}")
            self._bindings[signal] = parsed

    @classmethod
    def from_config(cls, config) -> 'HotkeyMatcher':
        hotkeys = config.get_hotkeys()
        return cls({
            Signal.ADVANCE: hotkeys['advance'],
            Signal.RETREAT: hotkeys['retreat'],
        })

    def __call__(self, event: KeyEvent) -> Optional[Signal]:
        key = event.key.lower()
        held = frozenset(event.modifiers)
        for signal, (modifiers, bound_key) in self._bindings.items():
            if key == bound_key and held == modifiers:
                return signal
        return None


class PermissionGate:
    """Answers whether this process may observe global keyboard input.

    Never prompts the user.
    """

    def check_authorization(self) -> bool:
        if sys.platform == 'darwin':
            # The keyboard library's event tap refuses to run unless root
            return os.geteuid() == 0 and self._is_accessibility_trusted()
        if sys.platform.startswith('linux'):
            # The keyboard library reads /dev/input directly
            return os.geteuid() == 0
        return True

    @staticmethod
    def _is_accessibility_trusted() -> bool:
        path = ctypes.util.find_library('ApplicationServices')
        if not path:
            logging.warning("ApplicationServices not found, assuming no accessibility access")
            return False
        try:
            services = ctypes.cdll.LoadLibrary(path)
            services.AXIsProcessTrusted.restype = ctypes.c_bool
            return bool(services.AXIsProcessTrusted())
        except (OSError, AttributeError) as e:
            logging.error(f"Accessibility check failed: {e}")
            return False


class ListenerHandle:
    """An installed keyboard hook. Released at most once."""

    def __init__(self, remove: Callable):
        self._remove = remove
        self.active = True

    def release(self):
        if not self.active:
            return
        self.active = False
        keyboard.unhook(self._remove)


class HotkeyGateway:
    """Installs and removes the system-wide keyboard hook."""

    def __init__(self, permission_gate: PermissionGate, notifier):
        """Initialize the gateway.

        Args:
            permission_gate: Object with check_authorization() -> bool
            notifier: Object with notify(message, title) used for the one-time notice
        """
        self.permission_gate = permission_gate
        self.notifier = notifier
        self._notice_shown = False

    def check_authorization(self) -> bool:
        try:
            authorized = bool(self.permission_gate.check_authorization())
        except Exception as e:
            logging.error(f"Permission check failed: {e}")
            authorized = False
        logging.info(f"Keyboard monitoring authorized: {authorized}")
        return authorized

    def install(self, matcher: Callable[[KeyEvent], Optional[Signal]],
                on_match: Callable[[Signal], None]) -> Optional[ListenerHandle]:
        """Hook global key presses and forward matches.

        Args:
            matcher: Maps a KeyEvent to a Signal or None
            on_match: Called with each matched Signal

        Returns:
            The listener handle, or None if global shortcuts are unavailable
        """
        if not self.check_authorization():
            self._show_notice()
            return None

        # Keys whose press was swallowed; their release is swallowed too
        swallowed = set()

        def on_key(event) -> bool:
            """Blocking hook: returning False keeps the key from other apps."""
            if not event.name:
                return True
            name = event.name.lower()
            if event.event_type != keyboard.KEY_DOWN:
                if name in swallowed:
                    swallowed.discard(name)
                    return False
                return True
            signal = matcher(KeyEvent(name, held_modifiers()))
            if signal is None:
                return True
            logging.info(f"Hotkey triggered: {signal.value}")
            swallowed.add(name)
            on_match(signal)
            return False

        try:
            remove = keyboard.hook(on_key, suppress=True)
        except Exception as e:
            # ImportError when not root on Linux, OSError from the platform hook
            logging.error(f"Failed to install keyboard hook: {e}")
            return None

        if not listener_running():
            # The platform listener fails inside its own thread, after hook() returned
            logging.error("Keyboard listener stopped right after starting, global shortcuts disabled")
            try:
                keyboard.unhook(remove)
            except (KeyError, ValueError) as e:
                logging.debug(f"Keyboard hook already removed: {e}")
            self._show_notice()
            return None

        logging.info("Global keyboard hook installed")
        return ListenerHandle(remove)

    def uninstall(self, handle: Optional[ListenerHandle]):
        """Remove a hook installed by install(). Safe to call repeatedly."""
        if handle is None or not handle.active:
            return
        try:
            handle.release()
            logging.info("Global keyboard hook removed")
        except (KeyError, ValueError) as e:
            logging.warning(f"Keyboard hook was already gone: {e}")

    def _show_notice(self):
        if self._notice_shown:
            return
        self._notice_shown = True
        logging.warning("Global shortcuts unavailable, menu navigation only")
        try:
            self.notifier.notify(AUTHORIZATION_NOTICE, APP_NAME)
        except Exception as e:
            logging.error(f"Failed to show notice: {e}")


def listener_running(grace: float = LISTENER_STARTUP_GRACE) -> bool:
    """Whether the keyboard library's listening thread survived startup."""
    listener = getattr(keyboard, '_listener', None)
    thread = getattr(listener, 'listening_thread', None)
    if thread is None:
        # Nothing exposed to check against
        return True
    thread.join(timeout=grace)
    return bool(thread.is_alive())


def held_modifiers() -> FrozenSet[str]:
    """Canonical names of the modifiers currently down."""
    held = set()
    for canonical, names in KEYBOARD_MODIFIER_NAMES.items():
        for name in names:
            try:
                if keyboard.is_pressed(name):
                    held.add(canonical)
                    break
            except ValueError:
                # Name not mapped on this platform
                continue
    return frozenset(held)
