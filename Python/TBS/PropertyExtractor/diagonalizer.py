r"""
Property extraction from a solved :class:`~TBS.Solver.diagonalizer.Diagonalizer`.

All occupation-weighted quantities use the distribution
:math:`f(E_n)` of the bound model (its statistics, temperature and
chemical potential, :math:`k_B = 1`).

Example
-------
    >>> extractor = DiagonalizerExtractor(solver, ExtractorConfig(lower_bound=-5, upper_bound=5, resolution=500))
    >>> dos       = extractor.calculate_dos()
    >>> density   = extractor.calculate_density([[IDX.ALL, IDX.SUM_ALL]])
    >>> mag       = extractor.calculate_magnetization([[0, IDX.SPIN]])
    >>> G         = extractor.calculate_greens_function([[[0, 0], [IDX.ALL, 0]]])

--------------------------------------------------
File        : TBS/PropertyExtractor/diagonalizer.py
Description : Eigenvalues, DOS, density, magnetization, LDOS, SP-LDOS, Green's functions, wave functions, entropy.
--------------------------------------------------
"""

from    __future__  import annotations

from    typing      import TYPE_CHECKING, Optional, Sequence, Union

import  numpy as np

from    TBS.Algebra.index                   import IDX, Index
from    TBS.Algebra.index_tree              import IndexTree
from    TBS.Algebra.Properties              import property_jit
from    TBS.Algebra.Properties.property     import (
        DOS, LDOS, Density, EigenValues, GreensFunction, GreensFunctionType,
        Magnetization, SpinPolarizedLDOS, WaveFunctions,
)
from    TBS.Algebra.Properties.statistics   import entropy
from    TBS.PropertyExtractor.extractor     import PropertyExtractor
from    TBS.PropertyExtractor.extractor_config import ExtractorConfig
from    TBS.PropertyExtractor.callbacks     import (
        DensityCallback, GreensFunctionCallback, LDOSCallback, MagnetizationCallback,
        SpinPolarizedLDOSCallback, WaveFunctionsCallback,
)
from    TBS.common.errors                   import OutOfRangeError

if TYPE_CHECKING:
    from TBS.Solver.diagonalizer    import Diagonalizer
    from TBS.Algebra.model          import Model
    from TBS.common.flog            import Logger

####################################################################################################

class DiagonalizerExtractor(PropertyExtractor):
    """
    Extracts properties from the eigenstates of a :class:`Diagonalizer`.

    The solver has to be in the ``SOLVED`` state whenever a property is
    computed (``InvalidStateError`` otherwise). Re-running the solver is
    picked up by the next call.

    Parameters
    ----------
    solver : Diagonalizer
        The solver to read eigenvalues and eigenvectors from.
    config : ExtractorConfig, optional
        Energy window, broadening and threading.
    logger : Logger, optional
        Defaults to the solver's logger.
    """

    def __init__(self, solver: 'Diagonalizer', config: Optional[ExtractorConfig] = None,
                logger: Optional['Logger'] = None):
        super().__init__(config=config, logger=logger if logger is not None else solver._logger)
        self._solver = solver

    # ------------------------------------------------------------------
    #! Solver access
    # ------------------------------------------------------------------

    @property
    def solver(self) -> 'Diagonalizer':
        return self._solver

    @property
    def model(self) -> 'Model':
        return self._solver.model

    @property
    def index_tree(self) -> IndexTree:
        return self._solver.model.index_tree

    @property
    def num_states(self) -> int:
        return self._solver.get_eigen_values().size

    def get_amplitudes(self, index) -> np.ndarray:
        r""" :math:`\psi_n(index)` for all states n (a row of the eigenvector matrix). """
        return self._solver.get_eigen_vectors()[self._solver.model.get_offset(index), :]

    def _occupation(self) -> np.ndarray:
        return self.model.occupation(self._solver.get_eigen_values())

    def _spectral_kernel(self) -> np.ndarray:
        cfg = self._config
        return property_jit.spectral_kernel(self._solver.get_eigen_values(), cfg.lower_bound, cfg.upper_bound,
                                            cfg.resolution, cfg.broadening.code, cfg.broadening_width)

    def _greens_kernel(self, kind: GreensFunctionType) -> np.ndarray:
        cfg = self._config
        return property_jit.greens_kernel(self._solver.get_eigen_values(), cfg.lower_bound, cfg.upper_bound,
                                        cfg.resolution, kind.code, cfg.energy_infinitesimal)

    # ------------------------------------------------------------------
    #! Spectrum
    # ------------------------------------------------------------------

    def get_eigen_values(self) -> EigenValues:
        return EigenValues(self._solver.get_eigen_values())

    def get_eigen_value(self, n: int) -> float:
        return self._solver.get_eigen_value(n)

    def get_amplitude(self, n: int, index) -> complex:
        return self._solver.get_amplitude(n, index)

    def calculate_dos(self) -> DOS:
        """
        Density of states on the energy grid.

        Without broadening every eigenvalue adds ``1/dE`` to its nearest
        grid point (eigenvalues outside the window are dropped), so the DOS
        integrates to the number of states inside the window.
        """
        cfg = self._config
        dos = self._spectral_kernel().sum(axis=1)
        self._log(f"DOS on [{cfg.lower_bound}, {cfg.upper_bound}] with {cfg.resolution} points.", log='debug', lvl=1)
        return DOS(dos, cfg.lower_bound, cfg.upper_bound, cfg.resolution)

    # ------------------------------------------------------------------
    #! Index-resolved properties
    # ------------------------------------------------------------------

    def _run(self, callback, patterns, ranges):
        ''' Pattern-list or ranges-format walk; returns (buffer, descriptor, grid_shape) '''
        if ranges is None:
            buffer, descriptor = self.calculate(callback, patterns)
            return buffer, descriptor, None
        return self.calculate_ranges(callback, patterns, ranges)

    def calculate_density(self, patterns, ranges: Optional[Sequence[int]] = None) -> Density:
        r"""
        :math:`n_i = \sum_n |\psi_n(i)|^2 f(E_n)` for every key of ``patterns``.

        Parameters
        ----------
        patterns : Index or sequence
            One pattern or a list of them; a single pattern when ``ranges`` is given.
        ranges : sequence of int, optional
            Extent of every sub-index. The result then covers the full grid of
            the ``IDX.ALL`` positions, see :meth:`Density.to_grid`.

        Example
        -------
            >>> n = extractor.calculate_density([IDX.ALL, IDX.ALL, IDX.SUM_ALL], ranges=[size_x, size_y, 2])
            >>> n.to_grid().shape
            (size_x, size_y)
        """
        buffer, descriptor, grid = self._run(DensityCallback(self._occupation()), patterns, ranges)
        return Density(buffer, descriptor, grid)

    def calculate_magnetization(self, patterns, ranges: Optional[Sequence[int]] = None) -> Magnetization:
        r"""
        Spin matrix :math:`m_{ss'} = \sum_n \psi^*_n(s) \psi_n(s') f(E_n)`.
        Every pattern must contain exactly one ``IDX.SPIN``; ``ranges`` as in :meth:`calculate_density`.
        """
        buffer, descriptor, grid = self._run(MagnetizationCallback(self._occupation()), patterns, ranges)
        return Magnetization(buffer, descriptor, grid)

    def calculate_ldos(self, patterns, ranges: Optional[Sequence[int]] = None) -> LDOS:
        cfg                         = self._config
        buffer, descriptor, grid    = self._run(LDOSCallback(self._spectral_kernel()), patterns, ranges)
        return LDOS(buffer, cfg.lower_bound, cfg.upper_bound, cfg.resolution, descriptor, grid)

    def calculate_spin_polarized_ldos(self, patterns, ranges: Optional[Sequence[int]] = None) -> SpinPolarizedLDOS:
        """Energy-resolved spin matrix; every pattern must contain exactly one ``IDX.SPIN``."""
        cfg                         = self._config
        buffer, descriptor, grid    = self._run(SpinPolarizedLDOSCallback(self._spectral_kernel()), patterns, ranges)
        return SpinPolarizedLDOS(buffer, cfg.lower_bound, cfg.upper_bound, cfg.resolution, descriptor, grid)

    def calculate_greens_function(self, patterns,
                                kind: Union[str, GreensFunctionType] = GreensFunctionType.RETARDED) -> GreensFunction:
        r"""
        Single-particle Green's function on the energy grid.

        Parameters
        ----------
        patterns : sequence
            A compound pattern ``[[to...], [from...]]`` or a list of compound patterns.
        kind : GreensFunctionType or str
            ``'retarded'`` :math:`1/(x + i\delta)`, ``'advanced'`` :math:`1/(x - i\delta)`,
            ``'principal'`` :math:`x/(x^2 + \delta^2)` or ``'nonprincipal'``
            :math:`-i\delta/(x^2 + \delta^2)`, with :math:`x = E - E_n` and
            :math:`\delta` the energy infinitesimal.
        """
        kind = GreensFunctionType.from_value(kind)
        if isinstance(patterns, (list, tuple)) and self._is_compound_pattern(patterns):
            patterns = [patterns]
        cfg                 = self._config
        buffer, descriptor  = self.calculate(GreensFunctionCallback(self._greens_kernel(kind)), patterns)
        return GreensFunction(buffer, cfg.lower_bound, cfg.upper_bound, cfg.resolution, descriptor, kind)

    @staticmethod
    def _is_compound_pattern(patterns) -> bool:
        ''' [[to...], [from...]] with flat blocks is one compound pattern '''
        return len(patterns) == 2 and all(
            not isinstance(block, Index) and isinstance(block, (list, tuple)) and
            all(isinstance(s, (IDX, int, np.integer)) for s in block)
            for block in patterns)

    def calculate_wave_functions(self, patterns, states: Union[IDX, Sequence[int]] = IDX.ALL) -> WaveFunctions:
        """
        Eigenvector amplitudes on the indices of ``patterns``.

        Parameters
        ----------
        states : IDX.ALL or sequence of int
            States to extract; all by default.
        """
        num_states = self.num_states
        if states is IDX.ALL:
            states = list(range(num_states))
        else:
            states = [int(n) for n in states]
            for n in states:
                if not 0 <= n < num_states:
                    raise OutOfRangeError(f"State {n} outside [0, {num_states}).",
                                        where="DiagonalizerExtractor.calculate_wave_functions()")
        buffer, descriptor = self.calculate(WaveFunctionsCallback(states), patterns)
        return WaveFunctions(buffer, descriptor, states)

    # ------------------------------------------------------------------
    #! Scalars
    # ------------------------------------------------------------------

    def calculate_expectation_value(self, to_index, from_index) -> complex:
        r"""
        :math:`\langle c^\dagger_{to} c_{from} \rangle = \sum_n \psi^*_n(to) \psi_n(from) f(E_n)`.
        """
        psi_to      = self.get_amplitudes(to_index)
        psi_from    = self.get_amplitudes(from_index)
        return complex(np.sum(np.conj(psi_to) * psi_from * self._occupation()))

    def calculate_entropy(self) -> float:
        """Entropy of the occupied single-particle spectrum (``k_B = 1``)."""
        model = self.model
        return entropy(self._solver.get_eigen_values(), model.temperature, model.chemical_potential,
                    model.statistics)

# --------------------------------------------------------------------------------------------------
#! EOF
# --------------------------------------------------------------------------------------------------
