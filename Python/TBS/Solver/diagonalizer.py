r"""
Exact diagonalization of tight-binding models.

The :class:`Diagonalizer` assembles the dense Hamiltonian matrix

.. math::

    H_{ij} = \sum_{(a,\, to,\, from):\ offset(to)=i,\ offset(from)=j} a

of a constructed :class:`~TBS.Algebra.model.Model` and computes its full
spectrum with a Hermitian eigensolver. Column ``n`` of the eigenvector
matrix belongs to the n-th smallest eigenvalue.

Available methods (:class:`DiagonalizationMethods`):

- ``scipy-eigh`` : :func:`scipy.linalg.eigh` (default)
- ``numpy-eigh`` : :func:`numpy.linalg.eigh`
- ``jax-eigh``   : :func:`jax.numpy.linalg.eigh`; with a
  :class:`~TBS.Solver.device_pool.DevicePool` the computation runs on an
  allocated device

Example
-------
    >>> solver = Diagonalizer()
    >>> solver.set_model(model)
    >>> solver.run()
    >>> solver.get_eigen_values()

----------------------------------------
File        : TBS/Solver/diagonalizer.py
Description : Dense Hermitian eigensolver for models.
----------------------------------------
"""

import  time
from    enum    import Enum
from    typing  import TYPE_CHECKING, Optional, Union

import  numpy as np
import  scipy.linalg
import  scipy.sparse

from    TBS.Solver.solver       import Solver
from    TBS.Solver.device_pool  import DevicePool
from    TBS.common.errors       import InvalidArgumentError, OutOfRangeError, SolverError

if TYPE_CHECKING:
    from TBS.Algebra.index  import Index
    from TBS.common.flog    import Logger

# ----------------------------------------------------------------------------------------
#! Methods
# ----------------------------------------------------------------------------------------

class DiagonalizationMethods(Enum):
    SCIPY_EIGH      = 'scipy-eigh'
    NUMPY_EIGH      = 'numpy-eigh'
    JAX_EIGH        = 'jax-eigh'

    def __str__(self) -> str:       return self.value
    def __repr__(self) -> str:      return self.value

    @classmethod
    def from_value(cls, value: Union[str, 'DiagonalizationMethods']) -> 'DiagonalizationMethods':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError as e:
            raise InvalidArgumentError(f"Unknown diagonalization method '{value}'.", where="Diagonalizer()",
                                    hint=f"Available: {[str(m) for m in cls]}.") from e

_HERMITICITY_TOL = 1e-10

# ----------------------------------------------------------------------------------------
#! Diagonalizer
# ----------------------------------------------------------------------------------------

class Diagonalizer(Solver):
    """
    Full exact diagonalization.

    Parameters
    ----------
    method : str or DiagonalizationMethods
        Eigensolver backend, ``'scipy-eigh'`` by default.
    device_pool : DevicePool, optional
        Devices used by ``'jax-eigh'``. Ignored by the other methods.
    logger : Logger, optional
        Defaults to the process-global logger.
    """

    def __init__(self,
                method      : Union[str, DiagonalizationMethods]    = DiagonalizationMethods.SCIPY_EIGH,
                device_pool : Optional[DevicePool]                  = None,
                logger      : Optional['Logger']                    = None):
        super().__init__(logger=logger)
        self._method                                = DiagonalizationMethods.from_value(method)
        self._device_pool                           = device_pool
        self._hamiltonian   : Optional[np.ndarray]  = None
        self._eig_val       : Optional[np.ndarray]  = None
        self._eig_vec       : Optional[np.ndarray]  = None

    @property
    def method(self) -> DiagonalizationMethods:
        return self._method

    @property
    def device_pool(self) -> Optional[DevicePool]:
        return self._device_pool

    def _reset(self) -> None:
        self._hamiltonian   = None
        self._eig_val       = None
        self._eig_vec       = None

    # ------------------------------------------------------------------------------------
    #! Assembly
    # ------------------------------------------------------------------------------------

    def build_hamiltonian(self) -> np.ndarray:
        """
        Dense Hamiltonian matrix of the bound model.

        Terms with ``|a| <= model.amplitude_tolerance`` are skipped (a zero
        tolerance keeps every term). Repeated ``(to, from)`` pairs are summed.
        """
        model               = self.model
        n                   = model.get_basis_size()
        if n == 0:
            return np.zeros((0, 0), dtype=np.complex128)
        rows, cols, values  = model.amplitude_set.tabulate()

        tol = model.amplitude_tolerance
        if tol > 0:
            keep    = np.abs(values) > tol
            skipped = int(values.size - np.count_nonzero(keep))
            if skipped:
                self._log(f"Skipping {skipped} amplitudes with |a| <= {tol:.1e}.", log='debug', lvl=2)
            rows, cols, values = rows[keep], cols[keep], values[keep]

        H = scipy.sparse.coo_matrix((values, (rows, cols)), shape=(n, n), dtype=np.complex128).toarray()

        if not np.allclose(H, H.conj().T, rtol=0.0, atol=_HERMITICITY_TOL):
            self._log("The Hamiltonian is not Hermitian; eigh uses only its lower triangle.",
                    log='warning', lvl=1, color='yellow')
        return H

    # ------------------------------------------------------------------------------------
    #! Solve
    # ------------------------------------------------------------------------------------

    def _solve(self) -> None:
        self._reset()
        t0  = time.perf_counter()
        H   = self.build_hamiltonian()
        n   = H.shape[0]
        self._log(f"Assembled {n}x{n} Hamiltonian in {time.perf_counter() - t0:.3e} s.", log='debug', lvl=1)

        t0 = time.perf_counter()
        if n == 0:
            eig_val, eig_vec = np.zeros(0, dtype=np.float64), np.zeros((0, 0), dtype=np.complex128)
        else:
            eig_val, eig_vec = self._eigh(H)
        self._log(f"Diagonalized with {self._method} in {time.perf_counter() - t0:.3e} s.", log='debug', lvl=1)

        self._hamiltonian   = self._freeze(H)
        self._eig_val       = self._freeze(np.asarray(eig_val, dtype=np.float64))
        self._eig_vec       = self._freeze(np.asarray(eig_vec, dtype=np.complex128))

    @staticmethod
    def _freeze(array: np.ndarray) -> np.ndarray:
        array = np.ascontiguousarray(array)
        array.flags.writeable = False
        return array

    def _eigh(self, H: np.ndarray):
        try:
            if self._method is DiagonalizationMethods.SCIPY_EIGH:
                return scipy.linalg.eigh(H)
            if self._method is DiagonalizationMethods.NUMPY_EIGH:
                return np.linalg.eigh(H)
            return self._jax_eigh(H)
        except (np.linalg.LinAlgError, ValueError) as e:
            raise SolverError(f"Eigensolver '{self._method}' failed: {e}", where="Diagonalizer.run()") from e

    def _jax_eigh(self, H: np.ndarray):
        try:
            import jax
            import jax.numpy as jnp
        except ImportError as e:
            raise SolverError("Method 'jax-eigh' requires jax.", where="Diagonalizer.run()",
                            hint="Install the 'jax' extra or choose another method.") from e

        jax.config.update("jax_enable_x64", True)
        if self._device_pool is None:
            w, v = jnp.linalg.eigh(jnp.asarray(H))
            return np.asarray(w), np.asarray(v)

        with self._device_pool.device() as n:
            devices = jax.devices()
            device  = devices[n % len(devices)]
            self._log(f"Running on device {n} ({device}).", log='debug', lvl=2)
            w, v    = jnp.linalg.eigh(jax.device_put(H, device))
            return np.asarray(w), np.asarray(v)

    # ------------------------------------------------------------------------------------
    #! Results
    # ------------------------------------------------------------------------------------

    @property
    def basis_size(self) -> int:
        self._require_solved("basis_size")
        return self._eig_val.size

    def _check_state_number(self, n: int, where: str) -> int:
        size = self._eig_val.size
        if isinstance(n, bool) or not isinstance(n, (int, np.integer)) or not 0 <= n < size:
            raise OutOfRangeError(f"State {n} outside [0, {size}).", where=f"Diagonalizer.{where}")
        return int(n)

    def get_hamiltonian(self) -> np.ndarray:
        self._require_solved("get_hamiltonian()")
        return self._hamiltonian

    def get_eigen_values(self) -> np.ndarray:
        """Eigenvalues in ascending order (read-only array)."""
        self._require_solved("get_eigen_values()")
        return self._eig_val

    def get_eigen_value(self, n: int) -> float:
        self._require_solved("get_eigen_value()")
        return float(self._eig_val[self._check_state_number(n, "get_eigen_value()")])

    def get_eigen_vectors(self) -> np.ndarray:
        """Eigenvectors as columns (read-only array)."""
        self._require_solved("get_eigen_vectors()")
        return self._eig_vec

    def get_eigen_vector(self, n: int) -> np.ndarray:
        self._require_solved("get_eigen_vector()")
        return self._eig_vec[:, self._check_state_number(n, "get_eigen_vector()")]

    def get_amplitude(self, n: int, index: 'Index') -> complex:
        """
        Amplitude of the n-th eigenstate on a basis index, ``psi_n(index)``.

        Raises
        ------
        OutOfRangeError
            For an invalid state number.
        NotFoundError
            If ``index`` is not part of the basis.
        """
        self._require_solved("get_amplitude()")
        n = self._check_state_number(n, "get_amplitude()")
        return complex(self._eig_vec[self._model.get_offset(index), n])

    def __repr__(self) -> str:
        return f"Diagonalizer(method={self._method}, state={self._state})"

# ----------------------------------------------------------------------------------------
#! EOF
# ----------------------------------------------------------------------------------------
