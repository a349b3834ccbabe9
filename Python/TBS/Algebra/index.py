r"""
Physical indices.

An :class:`Index` is an immutable, ordered sequence of sub-indices that
labels one degree of freedom, e.g. ``Index([x, y, spin])``, or a pattern
over many of them. Sub-indices are either concrete non-negative integers
or one of the explicit markers of :class:`IDX`:

    - ``IDX.ALL``       : wildcard, matches any value; replaced by the concrete value in results
    - ``IDX.SUM_ALL``   : summation, matches any value; matches are accumulated into one slot
    - ``IDX.SPIN``      : marks the spin sub-index of spin-resolved properties
    - ``IDX.SEPARATOR`` : splits a compound index into independent blocks

Compound indices are written as nested sequences::

    >>> Index([[0, 1], [2, IDX.ALL]])
    Index({0, 1}, {2, *})

Ordering is lexicographic; markers order before every concrete value, so
sorting concrete indices gives the canonical basis order of an
:class:`~TBS.Algebra.index_tree.IndexTree`.

--------------------------------------------------
File        : TBS/Algebra/index.py
Description : Index and sub-index markers.
--------------------------------------------------
"""

from    __future__  import annotations

import  numbers
from    enum        import Enum, unique
from    functools   import total_ordering
from    typing      import Iterable, List, Sequence, Tuple, Union

from    TBS.common.errors import InvalidArgumentError

####################################################################################################

@unique
class IDX(Enum):
    '''
    Markers that may appear in place of a concrete sub-index.
    The values only define the ordering relative to concrete sub-indices.
    '''
    SEPARATOR   = -4
    SPIN        = -3
    SUM_ALL     = -2
    ALL         = -1

    def __str__(self) -> str:       return _MARKER_SYMBOLS[self]
    def __repr__(self) -> str:      return f"IDX.{self.name}"

_MARKER_SYMBOLS = {
    IDX.SEPARATOR   : '|',
    IDX.SPIN        : 'SPIN',
    IDX.SUM_ALL     : 'SUM',
    IDX.ALL         : '*',
}

# markers that match any single concrete sub-index
WILDCARDS       = frozenset((IDX.ALL, IDX.SUM_ALL, IDX.SPIN))

Subindex        = Union[int, IDX]

####################################################################################################

def _check_subindex(value) -> Subindex:
    if isinstance(value, IDX):
        return value
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidArgumentError(f"Invalid sub-index '{value!r}'.", where="Index()",
                                hint="Sub-indices must be non-negative integers or IDX markers.")
    value = int(value)
    if value < 0:
        raise InvalidArgumentError(f"Negative sub-index '{value}'.", where="Index()",
                                hint="Use the IDX markers instead of negative integers.")
    return value

def _is_block(value) -> bool:
    return isinstance(value, (Index, list, tuple))

####################################################################################################

@total_ordering
class Index:
    """
    Immutable sequence of sub-indices.

    Parameters
    ----------
    subindices : iterable
        Integers and IDX markers, or an iterable of such iterables to build
        a compound index.

    Raises
    ------
    InvalidArgumentError
        For negative or non-integer sub-indices, empty blocks of a compound
        index, or a mix of blocks and plain sub-indices.
    """

    __slots__ = ('_subindices', '_hash')

    def __init__(self, subindices: Iterable = ()):
        if isinstance(subindices, Index):
            self._subindices    = subindices._subindices
            self._hash          = subindices._hash
            return

        try:
            items = list(subindices)
        except TypeError as e:
            raise InvalidArgumentError(f"Expected a sequence of sub-indices, got '{subindices!r}'.",
                                    where="Index()") from e
        if items and all(_is_block(item) for item in items):
            flat = []
            for n, block in enumerate(items):
                if n > 0:
                    flat.append(IDX.SEPARATOR)
                block = list(block)
                if not block:
                    raise InvalidArgumentError("Empty block in compound index.", where="Index()")
                flat.extend(block)
            items = flat
        elif any(_is_block(item) for item in items):
            raise InvalidArgumentError(f"Mixed blocks and sub-indices in '{items!r}'.", where="Index()",
                                    hint="Wrap every block of a compound index in a sequence.")

        checked = tuple(_check_subindex(item) for item in items)
        if checked and (checked[0] is IDX.SEPARATOR or checked[-1] is IDX.SEPARATOR):
            raise InvalidArgumentError("Compound index with an empty block.", where="Index()")
        for a, b in zip(checked, checked[1:]):
            if a is IDX.SEPARATOR and b is IDX.SEPARATOR:
                raise InvalidArgumentError("Compound index with an empty block.", where="Index()")

        self._subindices    = checked
        self._hash          = hash(checked)

    @classmethod
    def compound(cls, *blocks: Iterable) -> 'Index':
        """Build a compound index from its blocks, e.g. ``Index.compound(to, from_)``."""
        return cls([list(block) for block in blocks])

    # ------------------------------------------------------------------
    #! Sequence protocol
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._subindices)

    def __iter__(self):
        return iter(self._subindices)

    def __getitem__(self, item):
        if isinstance(item, slice):
            return Index(self._subindices[item])
        return self._subindices[item]

    @property
    def subindices(self) -> Tuple[Subindex, ...]:
        return self._subindices

    # ------------------------------------------------------------------
    #! Comparison
    # ------------------------------------------------------------------

    @property
    def sort_key(self) -> Tuple[int, ...]:
        ''' Key realizing the lexicographic order (markers before concrete values) '''
        return tuple(s.value if isinstance(s, IDX) else s for s in self._subindices)

    def __hash__(self) -> int:
        return self._hash

    def __eq__(self, other) -> bool:
        if not isinstance(other, Index):
            return NotImplemented
        return self._subindices == other._subindices

    def __lt__(self, other) -> bool:
        if not isinstance(other, Index):
            return NotImplemented
        return self.sort_key < other.sort_key

    # ------------------------------------------------------------------
    #! Structure
    # ------------------------------------------------------------------

    @property
    def is_compound(self) -> bool:
        return IDX.SEPARATOR in self._subindices

    @property
    def num_blocks(self) -> int:
        if not self._subindices:
            return 0
        return self._subindices.count(IDX.SEPARATOR) + 1

    def split(self) -> List['Index']:
        """Return the blocks of a compound index (a single-element list otherwise)."""
        blocks, current = [], []
        for s in self._subindices:
            if s is IDX.SEPARATOR:
                blocks.append(Index(current))
                current = []
            else:
                current.append(s)
        if current:
            blocks.append(Index(current))
        return blocks

    @property
    def is_concrete(self) -> bool:
        ''' True if the index contains no wildcard-like markers '''
        return not any(s in WILDCARDS for s in self._subindices)

    def has_marker(self, marker: IDX) -> bool:
        return marker in self._subindices

    def positions(self, marker: IDX) -> List[int]:
        """Positions at which ``marker`` appears."""
        return [n for n, s in enumerate(self._subindices) if s is marker]

    def with_values(self, positions: Sequence[int], values: Sequence[Subindex]) -> 'Index':
        """Return a copy with ``positions[k]`` set to ``values[k]``."""
        if len(positions) != len(values):
            raise InvalidArgumentError(f"Got {len(positions)} positions but {len(values)} values.",
                                    where="Index.with_values()")
        items = list(self._subindices)
        for p, v in zip(positions, values):
            items[p] = v
        return Index(items)

    def matches(self, other: 'Index') -> bool:
        """
        Check whether the concrete ``other`` is described by this pattern.
        Wildcard-like markers match any concrete sub-index, everything else must be equal.
        """
        other = as_index(other)
        if len(other) != len(self):
            return False
        for p, s in zip(self._subindices, other._subindices):
            if p in WILDCARDS:
                if isinstance(s, IDX):
                    return False
            elif p != s:
                return False
        return True

    # ------------------------------------------------------------------

    def __str__(self) -> str:
        return ", ".join("{" + ", ".join(str(s) for s in block) + "}" for block in self.split()) or "{}"

    def __repr__(self) -> str:
        return f"Index({self})"

####################################################################################################

def as_index(value: Union[Index, Iterable]) -> Index:
    """Return ``value`` as an :class:`Index` (no copy if it already is one)."""
    return value if isinstance(value, Index) else Index(value)

# --------------------------------------------------------------------------------------------------
#! EOF
# --------------------------------------------------------------------------------------------------
