"""
TBS Solver Module
=================

Solvers turn a constructed Model into eigenvalues and eigenvectors.

Entry Points
------------
- :class:`Diagonalizer`: full exact diagonalization (scipy / numpy / jax eigh).
- :class:`DevicePool`: explicit pool of accelerator devices for ``jax-eigh``.

Flow
----
::

    Model.construct()
        |
        v
    Diagonalizer.set_model() -> run()
        |
        v
    DiagonalizerExtractor (properties)

Submodules
----------
- ``solver``: Abstract base class and the solver state machine.
- ``diagonalizer``: Dense Hermitian eigensolver.
- ``device_pool``: Thread-safe device allocation.

Invariants
----------
- Results are only readable in the ``SOLVED`` state and are read-only arrays.
- A failed ``run()`` leaves the solver in the ``BOUND`` state.
"""

import importlib
from typing import TYPE_CHECKING, Any

# ---------------------------------------------------------------------------
# Lazy Import Configuration
# ---------------------------------------------------------------------------

_LAZY_IMPORTS = {
    "Solver": (".solver", "Solver"),
    "SolverState": (".solver", "SolverState"),
    "Diagonalizer": (".diagonalizer", "Diagonalizer"),
    "DiagonalizationMethods": (".diagonalizer", "DiagonalizationMethods"),
    "DevicePool": (".device_pool", "DevicePool"),
}

if TYPE_CHECKING:
    from .solver import Solver, SolverState
    from .diagonalizer import Diagonalizer, DiagonalizationMethods
    from .device_pool import DevicePool


def __getattr__(name: str) -> Any:
    """Lazily import submodules and classes."""
    if name in _LAZY_IMPORTS:
        module_path, attr_name = _LAZY_IMPORTS[name]
        module = importlib.import_module(module_path, package=__name__)
        if attr_name:
            return getattr(module, attr_name)
        return module

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__():
    return sorted(list(globals().keys()) + list(_LAZY_IMPORTS.keys()))


__all__ = list(_LAZY_IMPORTS.keys())

# A short, user-facing description used by TBS.list_modules()
MODULE_DESCRIPTION = "Exact-diagonalization solver, its state machine and the device pool."
