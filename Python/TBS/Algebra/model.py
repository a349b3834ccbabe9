r"""
Tight-binding model.

A :class:`Model` is the user-facing description of a single-particle
Hamiltonian

.. math::

    H = \sum a \, c^\dagger_{to} c_{from}

together with the thermodynamic parameters (temperature, chemical
potential and particle statistics) that the property extractors use to
occupy its eigenstates.

Example
-------
    >>> model = Model(chemical_potential=-1.0)
    >>> for x in range(4):
    ...     model.add(1.0, [x], [x])
    ...     if x + 1 < 4:
    ...         model.add_and_hermitian_conjugate(-1.0, [x + 1], [x])
    >>> model.construct()
    >>> model.get_basis_size()
    4

--------------------------------------------------
File        : TBS/Algebra/model.py
Description : Model = AmplitudeSet + thermodynamic parameters.
--------------------------------------------------
"""

from    __future__  import annotations

import  math
import  numbers
from    typing      import TYPE_CHECKING, Iterator, Optional, Tuple, Union

from    TBS.Algebra.index                   import Index
from    TBS.Algebra.index_tree              import IndexTree
from    TBS.Algebra.amplitude_set           import AmplitudeSet
from    TBS.Algebra.model_config            import ModelConfig
from    TBS.Algebra.Properties.statistics   import Statistics, occupation
from    TBS.common.errors                   import InvalidArgumentError

if TYPE_CHECKING:
    import  numpy as np
    from    TBS.common.flog import Logger

####################################################################################################

def _as_real(value, where: str) -> float:
    ''' Convert a real number to float, rejecting bools, strings and complex values '''
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidArgumentError(f"Expected a real number, got '{value!r}'.", where=where)
    return float(value)

####################################################################################################

class Model:
    """
    Hamiltonian in hopping-amplitude form plus thermodynamic parameters.

    Parameters
    ----------
    temperature : float
        Temperature in energy units (``k_B = 1``). Must be non-negative.
    chemical_potential : float
        Chemical potential :math:`\\mu`.
    statistics : Statistics or str
        ``'fermi-dirac'`` (default) or ``'bose-einstein'``.
    amplitude_tolerance : float
        Amplitudes with ``|a| <= amplitude_tolerance`` are skipped when the
        Hamiltonian matrix is assembled. ``0`` keeps every term.
    name : str, optional
        Label used in log messages.
    logger : Logger, optional
        Defaults to the process-global logger.
    """

    def __init__(self,
                temperature         : float                     = 0.0,
                chemical_potential  : float                     = 0.0,
                statistics          : Union[str, Statistics]    = Statistics.FERMI_DIRAC,
                amplitude_tolerance : float                     = 1e-10,
                name                : Optional[str]             = None,
                logger              : Optional['Logger']        = None):
        self._logger                = self._check_logger(logger)
        self._amplitudes            = AmplitudeSet()
        self._name                  = name
        self._temperature           = 0.0
        self._chemical_potential    = 0.0
        self._statistics            = Statistics.from_value(statistics)
        self.temperature            = temperature
        self.chemical_potential     = chemical_potential

        amplitude_tolerance = _as_real(amplitude_tolerance, "Model()")
        if not math.isfinite(amplitude_tolerance) or amplitude_tolerance < 0:
            raise InvalidArgumentError(f"Invalid amplitude tolerance {amplitude_tolerance}.", where="Model()",
                                    hint="Use a non-negative number; 0 disables the cut.")
        self._amplitude_tolerance   = float(amplitude_tolerance)

    @classmethod
    def from_config(cls, config: ModelConfig, logger: Optional['Logger'] = None) -> 'Model':
        """Create an empty model from a :class:`ModelConfig`."""
        return cls(**config.to_kwargs(), logger=logger)

    # ------------------------------------------------------------------
    #! Logging
    # ------------------------------------------------------------------

    @staticmethod
    def _check_logger(logger: Optional['Logger']) -> 'Logger':
        ''' Check and return the logger instance '''
        if logger is None:
            from TBS.tbs_globals import get_logger
            return get_logger()
        return logger

    def _log(self, msg: str, log: Union[int, str] = 'info', lvl: int = 0, color: str = "white"):
        """Log a message prefixed with the model name."""
        prefix  = f"{self.__class__.__name__}:{self._name}" if self._name else self.__class__.__name__
        msg     = self._logger.colorize(f"[{prefix}] {msg}", color)
        self._logger.say(msg, log=log, lvl=lvl)

    # ------------------------------------------------------------------
    #! Thermodynamic parameters
    # ------------------------------------------------------------------

    @property
    def temperature(self) -> float:
        return self._temperature

    @temperature.setter
    def temperature(self, value: float):
        value = _as_real(value, "Model.temperature")
        if not math.isfinite(value) or value < 0:
            raise InvalidArgumentError(f"Invalid temperature {value}.", where="Model.temperature",
                                    hint="The temperature must be finite and non-negative.")
        self._temperature = value

    @property
    def chemical_potential(self) -> float:
        return self._chemical_potential

    @chemical_potential.setter
    def chemical_potential(self, value: float):
        value = _as_real(value, "Model.chemical_potential")
        if not math.isfinite(value):
            raise InvalidArgumentError(f"Invalid chemical potential {value}.", where="Model.chemical_potential")
        self._chemical_potential = value

    @property
    def statistics(self) -> Statistics:
        return self._statistics

    @statistics.setter
    def statistics(self, value: Union[str, Statistics]):
        self._statistics = Statistics.from_value(value)

    @property
    def amplitude_tolerance(self) -> float:
        return self._amplitude_tolerance

    @property
    def name(self) -> Optional[str]:
        return self._name

    def occupation(self, energies) -> 'np.ndarray':
        """Occupation of the given single-particle energies at the model's T and mu."""
        return occupation(energies, self._temperature, self._chemical_potential, self._statistics)

    # ------------------------------------------------------------------
    #! Hamiltonian
    # ------------------------------------------------------------------

    def add(self, amplitude, to_index=None, from_index=None) -> None:
        """Add ``amplitude * c^dagger_to c_from`` (see :meth:`AmplitudeSet.add`)."""
        self._amplitudes.add(amplitude, to_index, from_index)

    def add_and_hermitian_conjugate(self, amplitude, to_index=None, from_index=None) -> None:
        """Add a term and its Hermitian conjugate (see :meth:`AmplitudeSet.add_and_hermitian_conjugate`)."""
        self._amplitudes.add_and_hermitian_conjugate(amplitude, to_index, from_index)

    def construct(self) -> None:
        """
        Freeze the model and build its basis. Calling it again does nothing.
        """
        if self._amplitudes.is_constructed:
            self._log("construct() called on an already constructed model, ignoring.", log='debug', lvl=1)
            return
        self._amplitudes.construct()
        self._log(f"Constructed basis of size {self.get_basis_size()} from {len(self._amplitudes)} terms.",
                log='debug', lvl=1)

    @property
    def is_constructed(self) -> bool:
        return self._amplitudes.is_constructed

    @property
    def amplitude_set(self) -> AmplitudeSet:
        return self._amplitudes

    @property
    def index_tree(self) -> IndexTree:
        return self._amplitudes.index_tree

    def get_basis_size(self) -> int:
        return self._amplitudes.get_basis_size()

    def get_offset(self, index) -> int:
        return self._amplitudes.get_offset(index)

    def get_physical_index(self, offset: int) -> Index:
        return self._amplitudes.get_physical_index(offset)

    def get_amplitudes(self):
        return self._amplitudes.get_amplitudes()

    def __iter__(self) -> Iterator[Tuple[complex, Index, Index]]:
        return (tuple(term) for term in self._amplitudes)

    def __len__(self) -> int:
        return len(self._amplitudes)

    def __repr__(self) -> str:
        return (f"Model(name={self._name!r}, T={self._temperature}, mu={self._chemical_potential}, "
                f"statistics={self._statistics}, {self._amplitudes!r})")

# --------------------------------------------------------------------------------------------------
#! EOF
# --------------------------------------------------------------------------------------------------
