"""
Centralized global singletons for the TBS package.

Motivation
==========
Several classes (Model, solvers, property extractors) accept an optional
logger and fall back to a shared one. This module is the single place
where that shared logger is created, exactly once per Python process.

Provided Singletons
-------------------
- Global logger        : via `get_logger()` (returns the flog.Logger instance)

Usage Pattern
-------------
    from TBS.tbs_globals import get_logger

    log = get_logger()
    log.say("Constructing model...", lvl=1)

Design Notes
------------
The device pool used by accelerated solvers is intentionally NOT a global:
it is created by the caller and passed to the solver that needs it.

!IMPORTANT: Do NOT perform side effects at module import other than creating
!lightweight sentinels; the logger is created on first access.
"""

from __future__ import annotations
from typing import Any
import threading

_LOCK               = threading.Lock()

# Internal storage for singletons
_LOGGER: Any        = None

def get_logger(**kwargs):
    """
    Return the process-global logger instance.

    Parameters
    ----------
    **kwargs : dict
        Optional keyword arguments forwarded to `get_global_logger` the first
        time the logger is created.
    """
    global _LOGGER
    if _LOGGER is not None:
        return _LOGGER
    with _LOCK:
        if _LOGGER is None:
            from TBS.common.flog import get_global_logger
            _LOGGER = get_global_logger(**kwargs)
    return _LOGGER

# ----------------------------------------------------------------

__all__ = [
    "get_logger",
]

# ----------------------------------------------------------------
#! End of TBS global singletons
