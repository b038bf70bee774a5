"""
Core module for baoclone.

This module provides the single source of truth for:
- Result objects (results.py)
- Unified detect/dump/restore/show workflows (actions.py)

The CLI calls into this module rather than implementing its own logic.
"""

from .results import CloneResult
from .actions import (
    read_radio,
    detect,
    dump,
    restore,
    open_session,
    configure,
)

__all__ = [
    # Results
    "CloneResult",
    # Actions
    "read_radio",
    "detect",
    "dump",
    "restore",
    "open_session",
    "configure",
]
