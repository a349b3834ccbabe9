"""
Error taxonomy of the TBS package.

Every error raised by the library derives from :class:`TBSError` and, in
addition, from the built-in exception that best describes it, so callers
may catch either ``TBSError`` or e.g. ``ValueError``.

All of these are raised at the point of detection and are not retried
anywhere in the package. Messages are prefixed with the component and the
operation that failed, e.g.::

    IndexTree.get_offset(): Index {0, 3} not found.

--------------------------------------------------
File        : TBS/common/errors.py
Description : Exceptions used by TBS.
--------------------------------------------------
"""

from typing import Optional

# ------------------------------------------------------------------------------------------------
#! Base
# ------------------------------------------------------------------------------------------------

class TBSError(Exception):
    """
    Base class for all TBS errors.

    Parameters
    ----------
    message : str
        Description of the problem.
    where : str, optional
        ``Component.operation()`` that detected the problem. Prepended to the message.
    hint : str, optional
        Suggestion on how to fix the problem. Appended to the message.
    """

    def __init__(self, message: str, where: Optional[str] = None, hint: Optional[str] = None):
        self.where      = where
        self.hint       = hint
        full            = f"{where}: {message}" if where else message
        if hint:
            full        = f"{full} {hint}"
        super().__init__(full)

# ------------------------------------------------------------------------------------------------
#! Concrete errors
# ------------------------------------------------------------------------------------------------

class InvalidArgumentError(TBSError, ValueError):
    """Malformed Index or argument (wrong arity, negative sub-index, non-finite amplitude...)."""

class FrozenStateError(TBSError, RuntimeError):
    """Mutation attempted after ``construct()``."""

class NotConstructedError(TBSError, RuntimeError):
    """An unconstructed Model or AmplitudeSet was used where a frozen basis is required."""

class InvalidStateError(TBSError, RuntimeError):
    """A method was called out of state-machine order."""

class NotFoundError(TBSError, LookupError):
    """Lookup of an Index or offset that does not exist."""

class InvalidPatternError(TBSError, ValueError):
    """Pattern structure incompatible with the requested property."""

class OutOfRangeError(TBSError, IndexError):
    """State number or offset outside ``[0, basis_size)``."""

class SolverError(TBSError, RuntimeError):
    """Numerical failure of the eigensolver."""

# ------------------------------------------------------------------------------------------------

__all__ = [
    "TBSError",
    "InvalidArgumentError",
    "FrozenStateError",
    "NotConstructedError",
    "InvalidStateError",
    "NotFoundError",
    "InvalidPatternError",
    "OutOfRangeError",
    "SolverError",
]

# ------------------------------------------------------------------------------------------------
#! EOF
# ------------------------------------------------------------------------------------------------
