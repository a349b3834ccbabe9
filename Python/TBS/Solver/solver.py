"""
Base class of all solvers.

A solver is bound to a constructed :class:`~TBS.Algebra.model.Model` and
moves through the states::

    CREATED --set_model--> BOUND --run--> SOLVED
                             ^               |
                             +--set_model----+

``set_model`` is accepted in every state and discards previous results.

--------------------------------------------------
File        : TBS/Solver/solver.py
Description : Solver state machine and shared helpers.
--------------------------------------------------
"""

from    __future__  import annotations

from    abc         import ABC, abstractmethod
from    enum        import Enum
from    typing      import TYPE_CHECKING, Optional, Union

from    TBS.common.errors import InvalidStateError, NotConstructedError

if TYPE_CHECKING:
    from TBS.Algebra.model  import Model
    from TBS.common.flog    import Logger

# ----------------------------------------------------------------------------------------

class SolverState(Enum):
    CREATED = 'created'
    BOUND   = 'bound'
    SOLVED  = 'solved'

    def __str__(self) -> str:       return self.value
    def __repr__(self) -> str:      return self.value

# ----------------------------------------------------------------------------------------

class Solver(ABC):
    """
    Abstract solver.

    Subclasses implement :meth:`_solve`, which computes and stores the
    results; :meth:`run` handles the state bookkeeping around it.
    """

    def __init__(self, logger: Optional['Logger'] = None):
        self._logger                    = self._check_logger(logger)
        self._model : Optional['Model'] = None
        self._state                     = SolverState.CREATED

    # ------------------------------------------------------------------

    @staticmethod
    def _check_logger(logger: Optional['Logger']) -> 'Logger':
        ''' Check and return the logger instance '''
        if logger is None:
            from TBS.tbs_globals import get_logger
            return get_logger()
        return logger

    def _log(self, msg: str, log: Union[int, str] = 'info', lvl: int = 0, color: str = "white"):
        """Log a message prefixed with the solver class."""
        msg = self._logger.colorize(f"[{self.__class__.__name__}] {msg}", color)
        self._logger.say(msg, log=log, lvl=lvl)

    # ------------------------------------------------------------------

    @property
    def state(self) -> SolverState:
        return self._state

    @property
    def model(self) -> 'Model':
        if self._model is None:
            raise InvalidStateError("No model has been set.", where=f"{self.__class__.__name__}.model",
                                    hint="Call set_model() first.")
        return self._model

    def get_model(self) -> 'Model':
        return self.model

    def set_model(self, model: 'Model') -> None:
        """
        Bind a constructed model and discard previous results.

        Raises
        ------
        NotConstructedError
            If ``model.construct()`` has not been called.
        """
        if not model.is_constructed:
            raise NotConstructedError("The model has not been constructed.",
                                    where=f"{self.__class__.__name__}.set_model()",
                                    hint="Call model.construct() before binding it to a solver.")
        self._model = model
        self._reset()
        self._state = SolverState.BOUND

    def _require_solved(self, where: str) -> None:
        if self._state is not SolverState.SOLVED:
            raise InvalidStateError(f"The solver is in state '{self._state}'.",
                                    where=f"{self.__class__.__name__}.{where}",
                                    hint="Call run() first.")

    def run(self) -> None:
        """
        Solve the bound model. Re-running overwrites previous results.

        Raises
        ------
        InvalidStateError
            If no model is bound.
        """
        if self._state is SolverState.CREATED:
            raise InvalidStateError("No model has been set.", where=f"{self.__class__.__name__}.run()",
                                    hint="Call set_model() first.")
        self._state = SolverState.BOUND
        self._solve()
        self._state = SolverState.SOLVED

    @abstractmethod
    def _solve(self) -> None:
        ''' Compute and store the results for the bound model '''

    def _reset(self) -> None:
        ''' Drop stored results '''

# ----------------------------------------------------------------------------------------
#! EOF
# ----------------------------------------------------------------------------------------
