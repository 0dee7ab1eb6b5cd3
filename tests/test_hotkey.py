"""
Unit tests for wordbar/core/hotkey.py - matching, authorization and hook lifecycle.
"""
import pytest
from types import SimpleNamespace
from unittest.mock import patch, MagicMock

from wordbar.constants import DEFAULT_HOTKEYS
from wordbar.core.cycle import Signal
from wordbar.core.hotkey import (
    HotkeyError, HotkeyGateway, HotkeyMatcher, KeyEvent, ListenerHandle, PermissionGate,
    held_modifiers, listener_running, parse_hotkey,
)


@pytest.fixture
def matcher():
    return HotkeyMatcher({
        Signal.ADVANCE: 'ctrl+alt+right',
        Signal.RETREAT: 'ctrl+alt+left',
    })


@pytest.fixture
def mock_keyboard():
    with patch('wordbar.core.hotkey.keyboard') as kb:
        kb.KEY_DOWN = 'down'
        kb.hook.return_value = MagicMock(name='remove')
        kb.is_pressed.return_value = False
        kb._listener.listening_thread.is_alive.return_value = True
        yield kb


def gate(authorized):
    permission_gate = MagicMock()
    permission_gate.check_authorization.return_value = authorized
    return permission_gate


def key(event_type, name):
    return SimpleNamespace(event_type=event_type, name=name)


def installed_callback(mock_keyboard, matcher, on_match, notifier):
    HotkeyGateway(gate(True), notifier).install(matcher, on_match)
    return mock_keyboard.hook.call_args[0][0]


class TestParseHotkey:
    """Tests for hotkey string parsing."""

    def test_parse_with_aliases(self):
        """Test that modifier aliases map to canonical names."""
        assert parse_hotkey('Control + Option + Right') == (frozenset({'ctrl', 'alt'}), 'right')
        assert parse_hotkey('cmd+shift+n') == (frozenset({'cmd', 'shift'}), 'n')
        assert parse_hotkey('win+a') == (frozenset({'cmd'}), 'a')

    @pytest.mark.parametrize("combo", ['', 'right', 'ctrl+alt', 'ctrl+a+b', 'ctrl++a', None, 42])
    def test_invalid_combos(self, combo):
        """Test that unusable combos raise HotkeyError."""
        with pytest.raises(HotkeyError):
            parse_hotkey(combo)


class TestMatcher:
    """Tests for exact modifier matching."""

    def test_advance_match(self, matcher):
        """Test that the forward combo yields Advance."""
        assert matcher(KeyEvent('right', frozenset({'ctrl', 'alt'}))) is Signal.ADVANCE

    def test_retreat_match(self, matcher):
        """Test that the backward combo yields Retreat."""
        assert matcher(KeyEvent('left', frozenset({'alt', 'ctrl'}))) is Signal.RETREAT

    def test_key_name_case_insensitive(self, matcher):
        """Test that key names match regardless of case."""
        assert matcher(KeyEvent('Right', frozenset({'ctrl', 'alt'}))) is Signal.ADVANCE

    def test_extra_modifier_rejected(self, matcher):
        """Test that an extra held modifier disqualifies the event."""
        assert matcher(KeyEvent('right', frozenset({'ctrl', 'alt', 'shift'}))) is None
        assert matcher(KeyEvent('left', frozenset({'ctrl', 'alt', 'cmd'}))) is None

    def test_partial_modifiers_rejected(self, matcher):
        """Test that missing modifiers disqualify the event."""
        assert matcher(KeyEvent('right', frozenset({'ctrl'}))) is None
        assert matcher(KeyEvent('right', frozenset())) is None

    def test_other_key_rejected(self, matcher):
        """Test that the right modifiers with another key don't match."""
        assert matcher(KeyEvent('up', frozenset({'ctrl', 'alt'}))) is None

    def test_duplicate_bindings_rejected(self):
        """Test that both actions can't share one combo."""
        with pytest.raises(HotkeyError):
            HotkeyMatcher({Signal.ADVANCE: 'ctrl+alt+n', Signal.RETREAT: 'alt+ctrl+n'})

    def test_from_config(self, config):
        """Test building the matcher from configured hotkeys."""
        config.set('hotkeys', {'advance': 'ctrl+shift+n'})
        matcher = HotkeyMatcher.from_config(config)

        assert matcher(KeyEvent('n', frozenset({'ctrl', 'shift'}))) is Signal.ADVANCE
        assert matcher(KeyEvent('left', frozenset({'ctrl', 'alt'}))) is Signal.RETREAT

    def test_default_hotkeys_parse(self):
        """Test that the shipped defaults are valid combos."""
        matcher = HotkeyMatcher({
            Signal.ADVANCE: DEFAULT_HOTKEYS['advance'],
            Signal.RETREAT: DEFAULT_HOTKEYS['retreat'],
        })
        assert matcher(KeyEvent('right', frozenset({'ctrl', 'alt'}))) is Signal.ADVANCE


class TestPermissionGate:
    """Tests for the platform authorization query."""

    def test_windows_always_allowed(self):
        """Test that Windows needs no extra permission."""
        with patch('wordbar.core.hotkey.sys.platform', 'win32'):
            assert PermissionGate().check_authorization() is True

    def test_linux_requires_root(self):
        """Test that Linux requires an effective uid of 0."""
        with patch('wordbar.core.hotkey.sys.platform', 'linux'):
            with patch('wordbar.core.hotkey.os.geteuid', create=True, return_value=1000):
                assert PermissionGate().check_authorization() is False
            with patch('wordbar.core.hotkey.os.geteuid', create=True, return_value=0):
                assert PermissionGate().check_authorization() is True

    def test_macos_accessibility_without_root_denied(self):
        """Test that Accessibility access alone isn't enough on macOS."""
        with patch('wordbar.core.hotkey.sys.platform', 'darwin'):
            with patch('wordbar.core.hotkey.os.geteuid', create=True, return_value=501):
                with patch.object(PermissionGate, '_is_accessibility_trusted', return_value=True):
                    assert PermissionGate().check_authorization() is False

    def test_macos_root_and_accessibility_allowed(self):
        """Test that root with Accessibility access is authorized on macOS."""
        with patch('wordbar.core.hotkey.sys.platform', 'darwin'):
            with patch('wordbar.core.hotkey.os.geteuid', create=True, return_value=0):
                with patch.object(PermissionGate, '_is_accessibility_trusted', return_value=True):
                    assert PermissionGate().check_authorization() is True

    def test_macos_root_without_accessibility_denied(self):
        """Test that root alone isn't enough on macOS."""
        with patch('wordbar.core.hotkey.sys.platform', 'darwin'):
            with patch('wordbar.core.hotkey.os.geteuid', create=True, return_value=0):
                with patch.object(PermissionGate, '_is_accessibility_trusted', return_value=False):
                    assert PermissionGate().check_authorization() is False

    def test_macos_without_application_services(self):
        """Test that a missing ApplicationServices library means untrusted."""
        with patch('wordbar.core.hotkey.ctypes.util.find_library', return_value=None):
            assert PermissionGate._is_accessibility_trusted() is False


class TestInstall:
    """Tests for installing the keyboard hook."""

    def test_unauthorized_shows_notice_once(self, mock_keyboard, mock_notifier):
        """Test that denial shows one notice and installs nothing."""
        gateway = HotkeyGateway(gate(False), mock_notifier)

        assert gateway.install(MagicMock(), MagicMock()) is None
        assert gateway.install(MagicMock(), MagicMock()) is None

        mock_keyboard.hook.assert_not_called()
        mock_notifier.notify.assert_called_once()

    def test_permission_error_counts_as_denied(self, mock_keyboard, mock_notifier):
        """Test that a failing permission query is treated as denial."""
        permission_gate = MagicMock()
        permission_gate.check_authorization.side_effect = OSError("boom")
        gateway = HotkeyGateway(permission_gate, mock_notifier)

        assert gateway.install(MagicMock(), MagicMock()) is None
        mock_keyboard.hook.assert_not_called()

    def test_authorized_installs_suppressing_hook(self, mock_keyboard, mock_notifier):
        """Test that authorization installs a blocking hook and returns a handle."""
        gateway = HotkeyGateway(gate(True), mock_notifier)

        handle = gateway.install(MagicMock(), MagicMock())

        assert isinstance(handle, ListenerHandle)
        assert handle.active
        mock_keyboard.hook.assert_called_once()
        assert mock_keyboard.hook.call_args[1] == {'suppress': True}
        mock_notifier.notify.assert_not_called()

    def test_install_failure_is_degraded(self, mock_keyboard, mock_notifier):
        """Test that an exception from hook() yields no handle."""
        mock_keyboard.hook.side_effect = ImportError("You must be root to use this library on linux.")
        gateway = HotkeyGateway(gate(True), mock_notifier)

        assert gateway.install(MagicMock(), MagicMock()) is None

    def test_dead_listener_thread_takes_notice_path(self, mock_keyboard, mock_notifier):
        """Test that a listener dying after hook() returned is reported, not trusted."""
        mock_keyboard._listener.listening_thread.is_alive.return_value = False
        gateway = HotkeyGateway(gate(True), mock_notifier)

        assert gateway.install(MagicMock(), MagicMock()) is None

        mock_keyboard.unhook.assert_called_once_with(mock_keyboard.hook.return_value)
        mock_notifier.notify.assert_called_once()

    def test_listener_thread_killed_by_platform_error(self, mock_keyboard, mock_notifier):
        """Test with a real thread that fails the way the macOS backend does without root."""
        import threading

        def listen():
            raise OSError("Error 13 - Must be run as administrator")

        with patch('threading.excepthook'):
            thread = threading.Thread(target=listen, daemon=True)
            thread.start()
            thread.join()
        mock_keyboard._listener.listening_thread = thread
        gateway = HotkeyGateway(gate(True), mock_notifier)

        assert gateway.install(MagicMock(), MagicMock()) is None
        mock_notifier.notify.assert_called_once()


class TestHookCallback:
    """Tests for what the installed hook does with key events."""

    def test_matching_key_down_is_forwarded_and_swallowed(self, mock_keyboard, mock_notifier, matcher):
        """Test that a matched press reaches on_match and is kept from other apps."""
        on_match = MagicMock()
        on_key = installed_callback(mock_keyboard, matcher, on_match, mock_notifier)
        mock_keyboard.is_pressed.side_effect = lambda name: name in ('ctrl', 'alt')

        assert on_key(key('down', 'right')) is False
        assert on_key(key('up', 'right')) is False

        on_match.assert_called_once_with(Signal.ADVANCE)

    def test_unmatched_keys_pass_through(self, mock_keyboard, mock_notifier, matcher):
        """Test that ordinary typing is not suppressed."""
        on_match = MagicMock()
        on_key = installed_callback(mock_keyboard, matcher, on_match, mock_notifier)

        assert on_key(key('down', 'a')) is True
        assert on_key(key('up', 'a')) is True
        assert on_key(key('up', 'right')) is True

        on_match.assert_not_called()

    def test_extra_modifier_not_forwarded(self, mock_keyboard, mock_notifier, matcher):
        """Test that the combo plus Shift is neither forwarded nor swallowed."""
        on_match = MagicMock()
        on_key = installed_callback(mock_keyboard, matcher, on_match, mock_notifier)
        mock_keyboard.is_pressed.side_effect = lambda name: name in ('ctrl', 'alt', 'shift')

        assert on_key(key('down', 'right')) is True

        on_match.assert_not_called()

    def test_nameless_events_pass_through(self, mock_keyboard, mock_notifier, matcher):
        """Test that events without a key name are left alone."""
        on_key = installed_callback(mock_keyboard, matcher, MagicMock(), mock_notifier)

        assert on_key(key('down', None)) is True


class TestUninstall:
    """Tests for removing the keyboard hook."""

    def test_uninstall_twice_is_safe(self, mock_keyboard, mock_notifier):
        """Test that a second uninstall is a no-op."""
        gateway = HotkeyGateway(gate(True), mock_notifier)
        handle = gateway.install(MagicMock(), MagicMock())

        gateway.uninstall(handle)
        gateway.uninstall(handle)

        mock_keyboard.unhook.assert_called_once_with(mock_keyboard.hook.return_value)
        assert not handle.active

    def test_uninstall_none(self, mock_keyboard, mock_notifier):
        """Test that uninstalling the Unavailable result does nothing."""
        HotkeyGateway(gate(True), mock_notifier).uninstall(None)

        mock_keyboard.unhook.assert_not_called()

    def test_uninstall_tolerates_missing_hook(self, mock_keyboard, mock_notifier):
        """Test that a hook already gone from the library doesn't raise."""
        mock_keyboard.unhook.side_effect = KeyError("gone")
        gateway = HotkeyGateway(gate(True), mock_notifier)
        handle = gateway.install(MagicMock(), MagicMock())

        gateway.uninstall(handle)
        gateway.uninstall(handle)

        assert mock_keyboard.unhook.call_count == 1


class TestListenerState:
    """Tests for reading listener and modifier state from the keyboard library."""

    def test_listener_without_thread_is_trusted(self, mock_keyboard):
        """Test that a backend exposing no thread is assumed running."""
        mock_keyboard._listener = SimpleNamespace()

        assert listener_running(grace=0) is True

    def test_unknown_modifier_names_are_skipped(self, mock_keyboard):
        """Test that names unmapped on this platform don't break the lookup."""
        def is_pressed(name):
            if name == 'windows':
                raise ValueError("unknown key")
            return name in ('shift', 'command')
        mock_keyboard.is_pressed.side_effect = is_pressed

        assert held_modifiers() == frozenset({'shift', 'cmd'})
