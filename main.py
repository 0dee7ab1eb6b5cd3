#!/usr/bin/env python3
"""
WordBar - Main Entry Point

Shows a vocabulary word in the system tray. Click "Next word" (or press the
global shortcut) once to reveal the translation and again to move on.
"""
import sys
import logging

from wordbar.utils.logging_setup import setup_logging
from wordbar.utils.single_instance import is_already_running


def main():
    """Main entry point for WordBar."""
    # Setup logging first
    setup_logging()

    # Check single instance
    already_running, lock_socket = is_already_running()
    if already_running:
        logging.warning("WordBar is already running, check the system tray")
        return 0

    try:
        from wordbar.app import WordBarApp
        app = WordBarApp()
        app.run()
        return 0
    except Exception as e:
        logging.critical(f"Failed to start application: {e}", exc_info=True)
        return 1
    finally:
        if lock_socket:
            lock_socket.close()


if __name__ == "__main__":
    sys.exit(main())
