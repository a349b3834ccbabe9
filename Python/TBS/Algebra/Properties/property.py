r"""
Property containers.

Every extraction returns one of the containers below. A container owns a
flat numpy buffer and an :class:`IndexDescriptor` that maps each output
key (an :class:`~TBS.Algebra.index.Index`, possibly containing the
``IDX.SUM_ALL`` or ``IDX.SPIN`` markers) to its block in the buffer:

    block(key) = data[offset(key) * block_size : (offset(key) + 1) * block_size]

reshaped to ``block_shape``. Containers are independent of the extractor
that produced them.

Example
-------
    >>> density = extractor.calculate_density([[IDX.ALL, IDX.SUM_ALL]])
    >>> density([3, IDX.SUM_ALL])                # density on site 3, spins summed
    >>> density.to_array()                       # (num_keys,) array
    >>> ldos = extractor.calculate_ldos([[0, 0]])
    >>> ldos.energies, ldos([0, 0])              # grid and spectrum

--------------------------------------------------
File        : TBS/Algebra/Properties/property.py
Description : Data containers returned by property extractors.
--------------------------------------------------
"""

from    __future__  import annotations

from    enum        import Enum, unique
from    typing      import Iterator, List, Optional, Sequence, Tuple

import  numpy as np

from    TBS.Algebra.index                       import Index, as_index
from    TBS.Algebra.index_tree                  import IndexTree
from    TBS.Algebra.Properties                  import property_jit as _jit
from    TBS.common.errors                       import InvalidArgumentError, InvalidStateError, NotFoundError, OutOfRangeError

####################################################################################################
#! Enumerations
####################################################################################################

@unique
class Broadening(Enum):
    '''
    Line shape used to place eigenvalues on the energy grid.
    '''
    NONE        = 'none'
    GAUSSIAN    = 'gaussian'
    LORENTZIAN  = 'lorentzian'

    def __str__(self) -> str:
        return self.value

    @property
    def code(self) -> int:
        return _BROADENING_CODES[self]

    @classmethod
    def from_value(cls, value) -> 'Broadening':
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.NONE
        try:
            return cls(str(value).lower())
        except ValueError as e:
            raise InvalidArgumentError(f"Unknown broadening '{value}'.", where="Broadening",
                                    hint=f"Available: {[str(b) for b in cls]}.") from e

_BROADENING_CODES = {
    Broadening.NONE         : _jit.BROADENING_NONE,
    Broadening.GAUSSIAN     : _jit.BROADENING_GAUSSIAN,
    Broadening.LORENTZIAN   : _jit.BROADENING_LORENTZIAN,
}

@unique
class GreensFunctionType(Enum):
    '''
    Kinds of single-particle Green's functions.
    '''
    RETARDED        = 'retarded'
    ADVANCED        = 'advanced'
    PRINCIPAL       = 'principal'
    NONPRINCIPAL    = 'nonprincipal'

    def __str__(self) -> str:
        return self.value

    @property
    def code(self) -> int:
        return _GREENS_CODES[self]

    @classmethod
    def from_value(cls, value) -> 'GreensFunctionType':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError as e:
            raise InvalidArgumentError(f"Unknown Green's function type '{value}'.", where="GreensFunctionType",
                                    hint=f"Available: {[str(g) for g in cls]}.") from e

_GREENS_CODES = {
    GreensFunctionType.RETARDED     : _jit.GREENS_RETARDED,
    GreensFunctionType.ADVANCED     : _jit.GREENS_ADVANCED,
    GreensFunctionType.PRINCIPAL    : _jit.GREENS_PRINCIPAL,
    GreensFunctionType.NONPRINCIPAL : _jit.GREENS_NONPRINCIPAL,
}

####################################################################################################
#! Index descriptor
####################################################################################################

class IndexDescriptor:
    """
    Maps output keys to block numbers ``0..K-1`` (ascending key order).

    Parameters
    ----------
    keys : IndexTree or iterable of Index
        Output keys; markers are allowed. Offsets are generated here.
    """

    def __init__(self, keys):
        if isinstance(keys, IndexTree):
            tree = keys
        else:
            tree = IndexTree(allow_markers=True)
            for key in keys:
                tree.insert(key)
        tree.generate_offsets()
        self._tree = tree

    @property
    def index_tree(self) -> IndexTree:
        return self._tree

    @property
    def size(self) -> int:
        return self._tree.size

    def __len__(self) -> int:
        return self._tree.size

    def keys(self) -> List[Index]:
        return list(self._tree)

    def __contains__(self, key) -> bool:
        return key in self._tree

    def get_offset(self, key) -> int:
        """Block number of ``key`` (``NotFoundError`` if the property does not contain it)."""
        try:
            return self._tree.get_offset(key)
        except NotFoundError as e:
            raise NotFoundError(f"The property contains no data for {as_index(key)}.",
                                where="IndexDescriptor.get_offset()") from e

    def __repr__(self) -> str:
        return f"IndexDescriptor(size={self.size})"

####################################################################################################
#! Base containers
####################################################################################################

class AbstractProperty:
    """
    Flat data buffer split into equally shaped blocks.

    Parameters
    ----------
    data : np.ndarray
        Flat buffer of length ``num_blocks * prod(block_shape)``.
    block_shape : tuple
        Shape of one block (``()`` for scalars).
    descriptor : IndexDescriptor, optional
        Key-to-block map. ``None`` for properties without an index (a single block).
    grid_shape : tuple, optional
        Set for properties extracted in the ranges format: the keys then form a
        dense grid over the ``IDX.ALL`` positions and :meth:`to_grid` exposes it.
    """

    def __init__(self, data: np.ndarray, block_shape: Tuple[int, ...] = (), descriptor: Optional[IndexDescriptor] = None,
                grid_shape: Optional[Tuple[int, ...]] = None):
        self._block_shape   = tuple(int(d) for d in block_shape)
        self._block_size    = int(np.prod(self._block_shape, dtype=np.int64))
        self._descriptor    = descriptor
        self._grid_shape    = None if grid_shape is None else tuple(int(d) for d in grid_shape)
        self._data          = np.ascontiguousarray(data).reshape(-1)
        expected            = self.num_blocks * self._block_size
        if self._data.size != expected:
            raise InvalidArgumentError(f"Buffer of size {self._data.size}, expected {expected}.",
                                    where=f"{self.__class__.__name__}()")
        if self._grid_shape is not None and int(np.prod(self._grid_shape, dtype=np.int64)) != self.num_blocks:
            raise InvalidArgumentError(f"Grid {self._grid_shape} does not match {self.num_blocks} blocks.",
                                    where=f"{self.__class__.__name__}()")

    # ------------------------------------------------------------------

    @property
    def data(self) -> np.ndarray:
        ''' Flat data buffer '''
        return self._data

    @property
    def block_shape(self) -> Tuple[int, ...]:
        return self._block_shape

    @property
    def block_size(self) -> int:
        return self._block_size

    @property
    def descriptor(self) -> Optional[IndexDescriptor]:
        return self._descriptor

    @property
    def num_blocks(self) -> int:
        return 1 if self._descriptor is None else self._descriptor.size

    @property
    def is_empty(self) -> bool:
        return self._data.size == 0

    @property
    def dtype(self):
        return self._data.dtype

    def keys(self) -> List[Index]:
        return [] if self._descriptor is None else self._descriptor.keys()

    def __contains__(self, key) -> bool:
        return self._descriptor is not None and key in self._descriptor

    def __len__(self) -> int:
        return self.num_blocks

    # ------------------------------------------------------------------

    def _block(self, n: int):
        block = self._data[n * self._block_size : (n + 1) * self._block_size]
        if not self._block_shape:
            return block[0]
        return block.reshape(self._block_shape)

    def get(self, key):
        """Block of ``key`` (a scalar for scalar properties, a view otherwise)."""
        if self._descriptor is None:
            raise NotFoundError("The property has no index.", where=f"{self.__class__.__name__}.get()")
        return self._block(self._descriptor.get_offset(key))

    def __call__(self, key):
        return self.get(key)

    def items(self) -> Iterator[Tuple[Index, object]]:
        for n, key in enumerate(self.keys()):
            yield key, self._block(n)

    def to_array(self) -> np.ndarray:
        """Data with shape ``(num_blocks, *block_shape)`` (no copy)."""
        return self._data.reshape((self.num_blocks,) + self._block_shape)

    @property
    def grid_shape(self) -> Optional[Tuple[int, ...]]:
        return self._grid_shape

    def to_grid(self) -> np.ndarray:
        """Data with shape ``(*grid_shape, *block_shape)`` for properties extracted over ranges."""
        if self._grid_shape is None:
            raise InvalidStateError("The property was not extracted over ranges.",
                                    where=f"{self.__class__.__name__}.to_grid()", hint="Use to_array() instead.")
        return self._data.reshape(self._grid_shape + self._block_shape)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(blocks={self.num_blocks}, block_shape={self._block_shape})"

class EnergyResolvedProperty(AbstractProperty):
    """
    Property whose blocks start with an energy axis on a uniform grid
    ``E_k = lower_bound + k * dE`` for ``k = 0..resolution-1``.
    """

    def __init__(self, data: np.ndarray, lower_bound: float, upper_bound: float, resolution: int,
                inner_shape: Tuple[int, ...] = (), descriptor: Optional[IndexDescriptor] = None,
                grid_shape: Optional[Tuple[int, ...]] = None):
        self._lower_bound   = float(lower_bound)
        self._upper_bound   = float(upper_bound)
        self._resolution    = int(resolution)
        super().__init__(data, (self._resolution,) + tuple(inner_shape), descriptor, grid_shape)

    @property
    def lower_bound(self) -> float:
        return self._lower_bound

    @property
    def upper_bound(self) -> float:
        return self._upper_bound

    @property
    def resolution(self) -> int:
        return self._resolution

    @property
    def dE(self) -> float:
        return (self._upper_bound - self._lower_bound) / (self._resolution - 1)

    @property
    def energies(self) -> np.ndarray:
        return np.linspace(self._lower_bound, self._upper_bound, self._resolution)

####################################################################################################
#! Concrete properties
####################################################################################################

class EigenValues(AbstractProperty):
    ''' Eigenvalues in ascending order '''

    def __init__(self, values: np.ndarray):
        values = np.asarray(values, dtype=np.float64)
        super().__init__(values, (values.size,))

    @property
    def size(self) -> int:
        return self._data.size

    def __len__(self) -> int:
        return self._data.size

    def __getitem__(self, n: int) -> float:
        if not -self.size <= n < self.size:
            raise OutOfRangeError(f"Eigenvalue {n} outside [0, {self.size}).", where="EigenValues[]")
        return float(self._data[n])

    def __iter__(self):
        return iter(self._data)

class DOS(EnergyResolvedProperty):
    ''' Density of states on the energy grid '''

    def __init__(self, data: np.ndarray, lower_bound: float, upper_bound: float, resolution: int):
        super().__init__(data, lower_bound, upper_bound, resolution)

    def __getitem__(self, k: int) -> float:
        return float(self._data[k])

    def __len__(self) -> int:
        return self._resolution

class Density(AbstractProperty):
    ''' Occupation-weighted density, one scalar per key '''

    def __init__(self, data: np.ndarray, descriptor: IndexDescriptor, grid_shape=None):
        super().__init__(data, (), descriptor, grid_shape)

class Magnetization(AbstractProperty):
    ''' 2x2 spin matrix per key; m[s, s'] = sum_n conj(psi_n(s)) psi_n(s') f(E_n) '''

    def __init__(self, data: np.ndarray, descriptor: IndexDescriptor, grid_shape=None):
        super().__init__(data, (2, 2), descriptor, grid_shape)

class LDOS(EnergyResolvedProperty):
    ''' Local density of states, one spectrum per key '''

    def __init__(self, data: np.ndarray, lower_bound: float, upper_bound: float, resolution: int,
                descriptor: IndexDescriptor, grid_shape=None):
        super().__init__(data, lower_bound, upper_bound, resolution, (), descriptor, grid_shape)

class SpinPolarizedLDOS(EnergyResolvedProperty):
    ''' Energy-resolved 2x2 spin matrix per key '''

    def __init__(self, data: np.ndarray, lower_bound: float, upper_bound: float, resolution: int,
                descriptor: IndexDescriptor, grid_shape=None):
        super().__init__(data, lower_bound, upper_bound, resolution, (2, 2), descriptor, grid_shape)

class GreensFunction(EnergyResolvedProperty):
    """
    Green's function G_{to, from}(E), one spectrum per compound key ``{to}, {from}``.
    """

    def __init__(self, data: np.ndarray, lower_bound: float, upper_bound: float, resolution: int,
                descriptor: IndexDescriptor, kind: GreensFunctionType = GreensFunctionType.RETARDED):
        super().__init__(data, lower_bound, upper_bound, resolution, (), descriptor)
        self._kind = GreensFunctionType.from_value(kind)

    @property
    def type(self) -> GreensFunctionType:
        return self._kind

    def get(self, key, from_index=None):
        """``G(to, from)``: pass a compound key or the two blocks separately."""
        if from_index is not None:
            key = Index.compound(as_index(key), as_index(from_index))
        return super().get(key)

    def __call__(self, key, from_index=None):
        return self.get(key, from_index)

class WaveFunctions(AbstractProperty):
    """
    Eigenvector amplitudes ``psi_n(index)`` for a selection of states.
    The block of a key holds the amplitudes of :attr:`states` in order.
    """

    def __init__(self, data: np.ndarray, descriptor: IndexDescriptor, states: Sequence[int]):
        self._states        = [int(n) for n in states]
        self._state_offset  = {n: k for k, n in enumerate(self._states)}
        super().__init__(data, (len(self._states),), descriptor)

    @property
    def states(self) -> List[int]:
        return list(self._states)

    def get(self, key, state: Optional[int] = None):
        block = super().get(key)
        if state is None:
            return block
        if state not in self._state_offset:
            raise NotFoundError(f"State {state} was not extracted.", where="WaveFunctions.get()",
                                hint=f"Available states: {self._states}.")
        return block[self._state_offset[state]]

    def __call__(self, key, state: Optional[int] = None):
        return self.get(key, state)

####################################################################################################

__all__ = [
    'Broadening',
    'GreensFunctionType',
    'IndexDescriptor',
    'AbstractProperty',
    'EnergyResolvedProperty',
    'EigenValues',
    'DOS',
    'Density',
    'Magnetization',
    'LDOS',
    'SpinPolarizedLDOS',
    'GreensFunction',
    'WaveFunctions',
]

# --------------------------------------------------------------------------------------------------
#! EOF
# --------------------------------------------------------------------------------------------------
