"""
Constants and configuration values for WordBar.
"""

# ============== VERSION ==============
VERSION = "1.0.0"
APP_NAME = "WordBar"

# ============== NETWORK ==============
LOCK_PORT = 47824  # Port for single instance lock

# ============== WORDS ==============
# Used when the word file is missing, malformed or empty
DEFAULT_WORDS = [
    ("vacant", "空的"),
]
WORDS_FILE_NAME = "words.json"
LAST_INDEX_KEY = "last_index"

# Separator between term and translation in the revealed display
DISPLAY_SEPARATOR = " | "

# ============== HOTKEYS ==============
DEFAULT_HOTKEYS = {
    "advance": "ctrl+alt+right",
    "retreat": "ctrl+alt+left",
}

# ============== TRAY ==============
ICON_HEIGHT = 64
ICON_PADDING = 8
ICON_BACKGROUND = "#0d6efd"
ICON_FOREGROUND = "white"

AUTHORIZATION_NOTICE = (
    "Global shortcuts are disabled: WordBar is not allowed to monitor the keyboard.\n"
    "Use the tray menu, or grant input monitoring / accessibility access and restart."
)
