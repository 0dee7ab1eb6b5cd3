"""
UI components for WordBar.
"""
from wordbar.ui.tray import TrayManager

__all__ = ['TrayManager']
