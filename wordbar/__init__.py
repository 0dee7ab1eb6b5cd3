"""
WordBar - vocabulary flashcards in the system tray.
"""
from wordbar.constants import VERSION

__version__ = VERSION
