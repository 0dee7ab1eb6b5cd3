"""
Utility modules for WordBar.
"""
from wordbar.utils.logging_setup import setup_logging
from wordbar.utils.single_instance import is_already_running

__all__ = ['setup_logging', 'is_already_running']
