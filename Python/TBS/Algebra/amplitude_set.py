r"""
Hopping amplitudes and the set of them that defines a Hamiltonian.

A Hamiltonian is written as

.. math::

    H = \sum_{\alpha} a_\alpha \, c^\dagger_{to(\alpha)} c_{from(\alpha)},

where every term is a :class:`HoppingAmplitude` ``(a, to, from)``. The
:class:`AmplitudeSet` collects such terms, sums terms with identical
``(to, from)`` and, on :meth:`AmplitudeSet.construct`, freezes into an
:class:`~TBS.Algebra.index_tree.IndexTree` basis.

Example
-------
    >>> amplitudes = AmplitudeSet()
    >>> amplitudes.add_and_hermitian_conjugate(-1.0, [1], [0])
    >>> amplitudes.add(0.5, [0], [0])
    >>> amplitudes.construct()
    >>> amplitudes.get_basis_size()
    2

--------------------------------------------------
File        : TBS/Algebra/amplitude_set.py
Description : HoppingAmplitude and AmplitudeSet.
--------------------------------------------------
"""

from    __future__  import annotations

import  cmath
import  numbers
import  numpy as np
from    dataclasses import dataclass
from    typing      import Dict, Iterator, List, Optional, Tuple, Union

from    TBS.Algebra.index       import Index, as_index
from    TBS.Algebra.index_tree  import IndexTree
from    TBS.common.errors       import FrozenStateError, InvalidArgumentError, NotConstructedError

####################################################################################################

@dataclass(frozen=True)
class HoppingAmplitude:
    """
    Single term ``amplitude * c^dagger_to c_from``.

    Unpacks as ``amplitude, to_index, from_index = term``.
    """

    amplitude   : complex
    to_index    : Index
    from_index  : Index

    def hermitian_conjugate(self) -> 'HoppingAmplitude':
        return HoppingAmplitude(self.amplitude.conjugate(), self.from_index, self.to_index)

    @property
    def is_diagonal(self) -> bool:
        return self.to_index == self.from_index

    def __iter__(self):
        return iter((self.amplitude, self.to_index, self.from_index))

    def __str__(self) -> str:
        return f"HoppingAmplitude({self.amplitude}, to={self.to_index}, from={self.from_index})"

####################################################################################################

AmplitudeLike = Union[HoppingAmplitude, complex, float, int]

class AmplitudeSet:
    """
    Sparse collection of hopping amplitudes.

    The set is mutable until :meth:`construct` is called. Afterwards it is
    read-only and exposes the basis through :attr:`index_tree`.

    Amplitudes are stored exactly as added; small amplitudes are not
    dropped here (consumers decide what is negligible).
    """

    def __init__(self):
        self._terms         : Dict[Tuple[Index, Index], complex]    = {}
        self._tree          : Optional[IndexTree]                   = None
        self._constructed   : bool                                  = False

    # ------------------------------------------------------------------
    #! Adding terms
    # ------------------------------------------------------------------

    @staticmethod
    def _as_term(amplitude: AmplitudeLike, to_index, from_index, where: str) -> HoppingAmplitude:
        if isinstance(amplitude, HoppingAmplitude):
            if to_index is not None or from_index is not None:
                raise InvalidArgumentError("Pass either a HoppingAmplitude or (amplitude, to, from).", where=where)
            amplitude, to_index, from_index = amplitude

        if isinstance(amplitude, bool) or not isinstance(amplitude, numbers.Number):
            raise InvalidArgumentError(f"Amplitude '{amplitude!r}' is not a number.", where=where)
        amplitude = complex(amplitude)
        if not cmath.isfinite(amplitude):
            raise InvalidArgumentError(f"Amplitude '{amplitude}' is not finite.", where=where)

        if to_index is None or from_index is None:
            raise InvalidArgumentError("Both the 'to' and the 'from' Index are required.", where=where)
        to_index, from_index = as_index(to_index), as_index(from_index)
        for index in (to_index, from_index):
            if len(index) == 0 or index.is_compound or not index.is_concrete:
                raise InvalidArgumentError(f"{index} is not a valid basis Index.", where=where,
                                        hint="Basis indices must be non-empty single-block concrete indices.")
        return HoppingAmplitude(amplitude, to_index, from_index)

    def _check_mutable(self, where: str) -> None:
        if self._constructed:
            raise FrozenStateError("The AmplitudeSet has already been constructed.", where=where)

    def _accumulate(self, term: HoppingAmplitude) -> None:
        key                 = (term.to_index, term.from_index)
        self._terms[key]    = self._terms.get(key, 0j) + term.amplitude

    def add(self, amplitude: AmplitudeLike, to_index=None, from_index=None) -> None:
        """
        Add ``amplitude * c^dagger_to c_from``. Terms with the same ``(to, from)`` are summed.

        Parameters
        ----------
        amplitude : complex or HoppingAmplitude
            The coefficient, or a complete term (then ``to``/``from`` are omitted).
        to_index, from_index : Index or sequence of int
            Concrete, single-block basis indices.

        Raises
        ------
        FrozenStateError
            After :meth:`construct`.
        InvalidArgumentError
            For malformed indices or non-finite amplitudes.
        """
        self._check_mutable("AmplitudeSet.add()")
        self._accumulate(self._as_term(amplitude, to_index, from_index, "AmplitudeSet.add()"))

    def add_and_hermitian_conjugate(self, amplitude: AmplitudeLike, to_index=None, from_index=None) -> None:
        """
        Add a term together with its Hermitian conjugate ``(conj(a), from, to)``.
        Diagonal terms (``to == from``) are added once; they are expected to be real.
        """
        where = "AmplitudeSet.add_and_hermitian_conjugate()"
        self._check_mutable(where)
        term = self._as_term(amplitude, to_index, from_index, where)
        self._accumulate(term)
        if not term.is_diagonal:
            self._accumulate(term.hermitian_conjugate())

    # ------------------------------------------------------------------
    #! Construction
    # ------------------------------------------------------------------

    def construct(self) -> None:
        """Build the basis from all indices in the set and freeze it. Idempotent."""
        if self._constructed:
            return
        tree = IndexTree()
        for to_index, from_index in self._terms:
            tree.insert(to_index)
            tree.insert(from_index)
        tree.generate_offsets()
        self._tree          = tree
        self._constructed   = True

    @property
    def is_constructed(self) -> bool:
        return self._constructed

    @property
    def index_tree(self) -> IndexTree:
        self._require_constructed("AmplitudeSet.index_tree")
        return self._tree

    def _require_constructed(self, where: str) -> None:
        if not self._constructed:
            raise NotConstructedError("The AmplitudeSet has not been constructed.", where=where,
                                    hint="Call construct() first.")

    def get_basis_size(self) -> int:
        self._require_constructed("AmplitudeSet.get_basis_size()")
        return self._tree.size

    def get_offset(self, index) -> int:
        self._require_constructed("AmplitudeSet.get_offset()")
        return self._tree.get_offset(index)

    def get_physical_index(self, offset: int) -> Index:
        self._require_constructed("AmplitudeSet.get_physical_index()")
        return self._tree.get_physical_index(offset)

    # ------------------------------------------------------------------
    #! Access
    # ------------------------------------------------------------------

    def get_amplitudes(self) -> List[HoppingAmplitude]:
        """Terms in order of first insertion, with accumulated amplitudes."""
        return [HoppingAmplitude(a, to_index, from_index) for (to_index, from_index), a in self._terms.items()]

    def __iter__(self) -> Iterator[HoppingAmplitude]:
        return iter(self.get_amplitudes())

    def __len__(self) -> int:
        return len(self._terms)

    def tabulate(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Return the terms as arrays ``(rows, cols, values)`` of basis offsets,
        i.e. ``H[rows[k], cols[k]] += values[k]``.
        """
        self._require_constructed("AmplitudeSet.tabulate()")
        n       = len(self._terms)
        rows    = np.empty(n, dtype=np.int64)
        cols    = np.empty(n, dtype=np.int64)
        values  = np.empty(n, dtype=np.complex128)
        for k, ((to_index, from_index), a) in enumerate(self._terms.items()):
            rows[k]     = self._tree.get_offset(to_index)
            cols[k]     = self._tree.get_offset(from_index)
            values[k]   = a
        return rows, cols, values

    def __repr__(self) -> str:
        state = f"basis_size={self._tree.size}" if self._constructed else "mutable"
        return f"AmplitudeSet(terms={len(self._terms)}, {state})"

# --------------------------------------------------------------------------------------------------
#! EOF
# --------------------------------------------------------------------------------------------------
