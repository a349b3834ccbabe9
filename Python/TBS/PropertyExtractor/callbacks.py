r"""
Per-index accumulators used by the generic extraction walk.

An :class:`ExtractionCallback` is called as

    callback(extractor, buffer, index, offset)

with a concrete basis index (compound ``{to}, {from}`` for two-block
callbacks; an ``IDX.SPIN`` position is left for the callback to enumerate)
and adds its contribution to ``buffer[offset : offset + block_size]``.
Callbacks hold every array they need that does not depend on the index
(occupations, spectral kernels), so concurrent calls only read shared data.

Amplitudes come from ``extractor.get_amplitudes(index)``, the vector
:math:`\psi_n(index)` over all eigenstates ``n``.

--------------------------------------------------
File        : TBS/PropertyExtractor/callbacks.py
Description : Density, magnetization, LDOS, SP-LDOS, Green's function and wave-function callbacks.
--------------------------------------------------
"""

from    abc     import ABC, abstractmethod
from    typing  import Sequence, Tuple

import  numpy as np

from    TBS.Algebra.index   import IDX, Index

####################################################################################################

class ExtractionCallback(ABC):
    """
    Per-match numeric accumulator.

    Attributes
    ----------
    block_shape : tuple
        Shape of the result block of one key.
    dtype : numpy dtype
        Type of the buffer.
    num_blocks : int
        Number of blocks every pattern must have (2 for ``{to}, {from}``).
    spin_markers : int
        Required number of ``IDX.SPIN`` in every pattern.
    """

    block_shape : Tuple[int, ...]   = ()
    dtype                           = np.float64
    num_blocks  : int               = 1
    spin_markers: int               = 0

    @property
    def block_size(self) -> int:
        return int(np.prod(self.block_shape, dtype=np.int64))

    @abstractmethod
    def __call__(self, extractor, buffer: np.ndarray, index: Index, offset: int) -> None:
        ''' Add the contribution of ``index`` to the block at ``offset`` '''

####################################################################################################
#! Helpers
####################################################################################################

def _spin_amplitudes(extractor, index: Index) -> np.ndarray:
    """
    Amplitudes for spin 0 and 1 at the ``IDX.SPIN`` position of ``index``,
    shape ``(2, num_states)``. A spin state outside the basis has zero amplitude.
    """
    position    = index.positions(IDX.SPIN)[0]
    tree        = extractor.index_tree
    out         = np.zeros((2, extractor.num_states), dtype=np.complex128)
    for s in (0, 1):
        concrete = index.with_values([position], [s])
        if concrete in tree:
            out[s] = extractor.get_amplitudes(concrete)
    return out

def _spin_matrix_weights(psi: np.ndarray) -> np.ndarray:
    ''' w[n, 2*s + s'] = conj(psi[s, n]) * psi[s', n] '''
    return (np.conj(psi)[:, None, :] * psi[None, :, :]).reshape(4, -1).T

####################################################################################################
#! Occupation-weighted callbacks
####################################################################################################

class DensityCallback(ExtractionCallback):
    r''' :math:`\sum_n |\psi_n(i)|^2 f(E_n)` '''

    def __init__(self, occupation: np.ndarray):
        self._occupation = np.asarray(occupation, dtype=np.float64)

    def __call__(self, extractor, buffer, index, offset):
        psi             = extractor.get_amplitudes(index)
        buffer[offset] += float(np.dot(np.abs(psi) ** 2, self._occupation))

class MagnetizationCallback(ExtractionCallback):
    r''' :math:`m_{ss'} = \sum_n \psi^*_n(s) \psi_n(s') f(E_n)`, stored row major '''

    block_shape     = (2, 2)
    dtype           = np.complex128
    spin_markers    = 1

    def __init__(self, occupation: np.ndarray):
        self._occupation = np.asarray(occupation, dtype=np.float64)

    def __call__(self, extractor, buffer, index, offset):
        weights                     = _spin_matrix_weights(_spin_amplitudes(extractor, index))
        buffer[offset:offset + 4]  += self._occupation @ weights

####################################################################################################
#! Energy-resolved callbacks
####################################################################################################

class LDOSCallback(ExtractionCallback):
    r''' :math:`\rho_i(E_k) = \sum_n K_{kn} |\psi_n(i)|^2` with the spectral kernel K '''

    def __init__(self, kernel: np.ndarray):
        self._kernel        = kernel
        self.block_shape    = (kernel.shape[0],)

    def __call__(self, extractor, buffer, index, offset):
        psi                                     = extractor.get_amplitudes(index)
        buffer[offset:offset + self.block_size] += self._kernel @ (np.abs(psi) ** 2)

class SpinPolarizedLDOSCallback(ExtractionCallback):
    ''' Energy-resolved spin matrix, block shape (resolution, 2, 2) '''

    dtype           = np.complex128
    spin_markers    = 1

    def __init__(self, kernel: np.ndarray):
        self._kernel        = kernel
        self.block_shape    = (kernel.shape[0], 2, 2)

    def __call__(self, extractor, buffer, index, offset):
        weights                                 = _spin_matrix_weights(_spin_amplitudes(extractor, index))
        buffer[offset:offset + self.block_size] += (self._kernel @ weights).reshape(-1)

class GreensFunctionCallback(ExtractionCallback):
    r''' :math:`G_{to,from}(E_k) = \sum_n \psi_n(to) \psi^*_n(from) K(E_k - E_n)` '''

    dtype           = np.complex128
    num_blocks      = 2

    def __init__(self, kernel: np.ndarray):
        self._kernel        = kernel
        self.block_shape    = (kernel.shape[0],)

    def __call__(self, extractor, buffer, index, offset):
        to_index, from_index                    = index.split()
        weights                                 = extractor.get_amplitudes(to_index) * \
                                                np.conj(extractor.get_amplitudes(from_index))
        buffer[offset:offset + self.block_size] += self._kernel @ weights

####################################################################################################
#! Wave functions
####################################################################################################

class WaveFunctionsCallback(ExtractionCallback):
    ''' Amplitudes of the selected states '''

    dtype = np.complex128

    def __init__(self, states: Sequence[int]):
        self._states        = np.asarray(states, dtype=np.int64)
        self.block_shape    = (len(self._states),)

    def __call__(self, extractor, buffer, index, offset):
        psi                                     = extractor.get_amplitudes(index)
        buffer[offset:offset + self.block_size] += psi[self._states]

# --------------------------------------------------------------------------------------------------

__all__ = [
    'ExtractionCallback',
    'DensityCallback',
    'MagnetizationCallback',
    'LDOSCallback',
    'SpinPolarizedLDOSCallback',
    'GreensFunctionCallback',
    'WaveFunctionsCallback',
]
