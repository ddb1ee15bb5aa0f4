"""
Logging configuration for the package.

All modules log through children of the ``neurolab`` logger, which writes to
stderr. Only warnings are shown unless a lower level is requested.
"""

import logging
import sys

__all__ = ['get_log', 'log_level_error', 'log_level_warn',
           'log_level_info', 'log_level_debug']

console = logging.StreamHandler(sys.stderr)
formatter = logging.Formatter('%(name)-22s: %(levelname)-8s %(message)s')
console.setFormatter(formatter)

_root = logging.getLogger('neurolab')
_root.addHandler(console)
_root.setLevel(logging.WARNING)

get_log = logging.getLogger


def log_level_error():
    """Shows log messages only of level ERROR or higher."""
    _root.setLevel(logging.ERROR)


def log_level_warn():
    """Shows log messages only of level WARNING or higher."""
    _root.setLevel(logging.WARNING)


def log_level_info():
    """Shows log messages of level INFO or higher."""
    _root.setLevel(logging.INFO)


def log_level_debug():
    """Shows all log messages."""
    _root.setLevel(logging.DEBUG)
