r"""
Index tree: the basis of a model.

The :class:`IndexTree` is a trie keyed by sub-indices. Every concrete
:class:`~TBS.Algebra.index.Index` inserted into it becomes a valid leaf and
receives a dense linear offset ``0..N-1`` when :meth:`IndexTree.generate_offsets`
is called. The offsets follow a depth-first traversal in ascending
sub-index order, which is the lexicographic order of the inserted indices.

Beyond exact lookup the tree answers pattern queries:

    >>> tree = IndexTree()
    >>> for x in range(3):
    ...     for s in range(2):
    ...         tree.insert([x, s])
    >>> tree.generate_offsets()
    6
    >>> list(tree.get_index_list([IDX.ALL, 1]))
    [Index({0, 1}), Index({1, 1}), Index({2, 1})]
    >>> list(tree.get_index_list([IDX.SUM_ALL, 1], keep=(IDX.SUM_ALL,)))
    [Index({SUM, 1})]
    >>> tree.get_subindices_matching(Index([IDX.SUM_ALL, 1]))
    [(0,), (1,), (2,)]

Nodes live in an arena (parallel lists addressed by node number); children
are stored as ``{sort value -> node}`` together with a sorted list of the
sort values.

--------------------------------------------------
File        : TBS/Algebra/index_tree.py
Description : Trie-based basis with exact and pattern lookup.
--------------------------------------------------
"""

from    __future__  import annotations

from    bisect      import insort
from    typing      import Dict, Iterable, Iterator, List, Optional, Tuple

from    TBS.Algebra.index   import IDX, WILDCARDS, Index, Subindex, as_index
from    TBS.common.errors   import InvalidArgumentError, InvalidStateError, NotFoundError, OutOfRangeError

_ROOT           = 0

def _key(s: Subindex) -> int:
    return s.value if isinstance(s, IDX) else s

def _subindex(k: int) -> Subindex:
    return IDX(k) if k < 0 else k

####################################################################################################

class IndexList:
    """
    Restartable, lazy sequence of the indices of a tree matching a pattern.

    Every iteration walks the tree again in ascending sub-index order, so
    repeated iterations over an unchanged tree give identical sequences.
    """

    def __init__(self, tree: 'IndexTree', pattern: Index, keep: frozenset):
        self._tree      = tree
        self._pattern   = pattern
        self._keep      = keep

    @property
    def pattern(self) -> Index:
        return self._pattern

    def __iter__(self) -> Iterator[Index]:
        return self._tree._match(self._pattern, self._keep)

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __bool__(self) -> bool:
        return next(iter(self), None) is not None

    def to_list(self) -> List[Index]:
        return list(self)

    def __repr__(self) -> str:
        return f"IndexList(pattern={self._pattern})"

####################################################################################################

class IndexTree:
    """
    Trie over sub-indices assigning each inserted concrete index a linear offset.

    Inserting after :meth:`generate_offsets` invalidates the offsets until
    they are generated again.

    Parameters
    ----------
    indices : iterable, optional
        Indices inserted on creation.
    allow_markers : bool
        Store ``IDX.SUM_ALL`` / ``IDX.SPIN`` / ``IDX.ALL`` as ordinary keys.
        Used for the key trees of property containers; such trees are
        looked up exactly and wildcards of a pattern never match a marker.
    """

    def __init__(self, indices: Optional[Iterable] = None, allow_markers: bool = False):
        self._allow_markers                     = allow_markers
        self._children  : List[Dict[int, int]]  = []
        self._keys      : List[List[int]]       = []
        self._leaf      : List[bool]            = []
        self._offset    : List[int]             = []
        self._leaves    : List[Index]           = []
        self._num_leaves                        = 0
        self._generated                         = False
        self._new_node()

        if indices is not None:
            for index in indices:
                self.insert(index)

    def _new_node(self) -> int:
        self._children.append({})
        self._keys.append([])
        self._leaf.append(False)
        self._offset.append(-1)
        return len(self._children) - 1

    # ------------------------------------------------------------------
    #! Construction
    # ------------------------------------------------------------------

    def insert(self, index) -> None:
        """
        Insert a concrete index. Inserting an index twice is a no-op.

        Raises
        ------
        InvalidArgumentError
            If the index is empty or contains wildcard-like markers.
        """
        index = as_index(index)
        if len(index) == 0:
            raise InvalidArgumentError("Cannot insert an empty Index.", where="IndexTree.insert()")
        if not index.is_concrete and not self._allow_markers:
            raise InvalidArgumentError(f"Cannot insert the pattern {index}.", where="IndexTree.insert()",
                                    hint="Only concrete indices can be part of a basis.")

        node = _ROOT
        for s in index:
            k       = _key(s)
            child   = self._children[node].get(k)
            if child is None:
                child                   = self._new_node()
                self._children[node][k] = child
                insort(self._keys[node], k)
            node = child

        if not self._leaf[node]:
            self._leaf[node]    = True
            self._num_leaves   += 1
            self._generated     = False

    def _dfs(self) -> Iterator[Tuple[int, Tuple[Subindex, ...]]]:
        ''' Preorder traversal over valid leaves in ascending order '''
        stack = [(_ROOT, ())]
        while stack:
            node, prefix = stack.pop()
            if self._leaf[node]:
                yield node, prefix
            for k in reversed(self._keys[node]):
                stack.append((self._children[node][k], prefix + (_subindex(k),)))

    def generate_offsets(self) -> int:
        """
        Assign the offsets ``0..N-1`` to all valid leaves.

        Returns
        -------
        int
            The number of leaves N (the basis size).
        """
        self._leaves = []
        for node, prefix in self._dfs():
            self._offset[node] = len(self._leaves)
            self._leaves.append(Index(prefix))
        self._generated = True
        return len(self._leaves)

    # ------------------------------------------------------------------
    #! Exact lookup
    # ------------------------------------------------------------------

    @property
    def size(self) -> int:
        return self._num_leaves

    @property
    def offsets_generated(self) -> bool:
        return self._generated

    def __len__(self) -> int:
        return self._num_leaves

    def __iter__(self) -> Iterator[Index]:
        if self._generated:
            return iter(self._leaves)
        return (Index(prefix) for _, prefix in self._dfs())

    def _find(self, index: Index) -> Optional[int]:
        node = _ROOT
        for s in index:
            if s in WILDCARDS and not self._allow_markers:
                return None
            node = self._children[node].get(_key(s))
            if node is None:
                return None
        return node

    def __contains__(self, index) -> bool:
        try:
            index = as_index(index)
        except InvalidArgumentError:
            return False
        node = self._find(index)
        return node is not None and self._leaf[node]

    def _require_offsets(self, where: str) -> None:
        if not self._generated:
            raise InvalidStateError("Offsets have not been generated.", where=where,
                                    hint="Call generate_offsets() after the last insert().")

    def get_offset(self, index) -> int:
        """
        Linear offset of a concrete index.

        Raises
        ------
        NotFoundError
            If the index is not a valid leaf of the tree.
        InvalidStateError
            If the offsets are not up to date.
        """
        self._require_offsets("IndexTree.get_offset()")
        index   = as_index(index)
        node    = self._find(index)
        if node is None or not self._leaf[node]:
            raise NotFoundError(f"Index {index} not found.", where="IndexTree.get_offset()")
        return self._offset[node]

    def get_physical_index(self, offset: int) -> Index:
        """Inverse of :meth:`get_offset`."""
        self._require_offsets("IndexTree.get_physical_index()")
        if not 0 <= offset < len(self._leaves):
            raise OutOfRangeError(f"Offset {offset} outside [0, {len(self._leaves)}).",
                                where="IndexTree.get_physical_index()")
        return self._leaves[offset]

    def closest_match(self, index) -> Index:
        """
        Return the longest prefix of ``index`` that is a valid leaf.

        Raises
        ------
        NotFoundError
            If no prefix of ``index`` is stored in the tree.
        """
        index   = as_index(index)
        node    = _ROOT
        depth   = -1
        for n, s in enumerate(index):
            if s in WILDCARDS:
                break
            node = self._children[node].get(_key(s))
            if node is None:
                break
            if self._leaf[node]:
                depth = n + 1
        if depth < 0:
            raise NotFoundError(f"No stored prefix of {index}.", where="IndexTree.closest_match()")
        return index[:depth]

    # ------------------------------------------------------------------
    #! Pattern lookup
    # ------------------------------------------------------------------

    def get_index_list(self, pattern, keep: Iterable[IDX] = ()) -> IndexList:
        """
        Indices matching ``pattern``.

        Parameters
        ----------
        pattern : Index or sequence
            Concrete sub-indices must match exactly, ``IDX.ALL``,
            ``IDX.SUM_ALL`` and ``IDX.SPIN`` match any sub-index present at
            that level and ``IDX.SEPARATOR`` matches a separator edge.
        keep : iterable of IDX
            Markers that are retained in the produced indices instead of the
            concrete value. Indices that then coincide are produced once.

        Returns
        -------
        IndexList
            Restartable sequence in ascending order. Empty if nothing matches.
        """
        return IndexList(self, as_index(pattern), frozenset(keep))

    def _match(self, pattern: Index, keep: frozenset) -> Iterator[Index]:
        subs    = pattern.subindices
        depth   = len(subs)
        seen    = set() if any(s in keep for s in subs) else None

        def walk(node: int, n: int, prefix: tuple):
            if n == depth:
                if self._leaf[node]:
                    yield prefix
                return
            s = subs[n]
            if s in WILDCARDS:
                out = s if s in keep else None
                for k in self._keys[node]:
                    if k < 0:
                        continue
                    yield from walk(self._children[node][k], n + 1, prefix + ((k if out is None else out),))
            else:
                child = self._children[node].get(_key(s))
                if child is not None:
                    yield from walk(child, n + 1, prefix + (s,))

        for found in walk(_ROOT, 0, ()):
            if seen is not None:
                if found in seen:
                    continue
                seen.add(found)
            yield Index(found)

    def get_subindices_matching(self, index, marker: IDX = IDX.SUM_ALL) -> List[Tuple[int, ...]]:
        """
        Concrete values found at the ``marker`` positions of ``index``.

        All other concrete sub-indices of ``index`` are held fixed, other
        markers are traversed as wildcards. Used to drive summations.

        Returns
        -------
        list of tuple
            Sorted value tuples, one entry per marker position. ``[()]`` if
            ``index`` has no such marker but matches, ``[]`` if nothing matches.
        """
        index       = as_index(index)
        positions   = index.positions(marker)
        pattern     = index.with_values(positions, [IDX.ALL] * len(positions))
        keep        = WILDCARDS - {IDX.ALL}
        values      = {tuple(m[p] for p in positions) for m in self._match(pattern, keep)}
        return sorted(values)

    def __repr__(self) -> str:
        return f"IndexTree(size={self.size}, generated={self._generated})"

# --------------------------------------------------------------------------------------------------
#! EOF
# --------------------------------------------------------------------------------------------------
