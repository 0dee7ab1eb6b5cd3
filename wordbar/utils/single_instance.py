"""
Single instance lock for WordBar.
Prevents two tray icons fighting over the same saved position.
"""
import socket
from typing import Tuple, Optional

from wordbar.constants import LOCK_PORT


def is_already_running(port: int = LOCK_PORT) -> Tuple[bool, Optional[socket.socket]]:
    """Check if another instance is already running using socket lock."""
    lock_socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        lock_socket.bind(('127.0.0.1', port))
        lock_socket.listen(1)
        return False, lock_socket
    except socket.error:
        lock_socket.close()
        return True, None
