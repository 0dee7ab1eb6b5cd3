"""
Core modules for WordBar.
"""
from wordbar.core.words import WordEntry, WordStore
from wordbar.core.cycle import CycleController, Signal
from wordbar.core.hotkey import HotkeyGateway, HotkeyMatcher, HotkeyError, KeyEvent, PermissionGate
from wordbar.core.dispatcher import SignalDispatcher

__all__ = [
    'WordEntry', 'WordStore', 'CycleController', 'Signal',
    'HotkeyGateway', 'HotkeyMatcher', 'HotkeyError', 'KeyEvent', 'PermissionGate',
    'SignalDispatcher',
]
