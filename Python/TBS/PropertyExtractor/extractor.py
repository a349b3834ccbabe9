r"""
Generic property extraction.

A :class:`PropertyExtractor` evaluates an
:class:`~TBS.PropertyExtractor.callbacks.ExtractionCallback` for every
basis index described by a list of patterns and stores the results in a
flat buffer:

1. every pattern is expanded against the basis into output keys
   (``IDX.ALL`` is replaced by the concrete values, ``IDX.SUM_ALL`` and
   ``IDX.SPIN`` are kept),
2. the keys are collected in an output :class:`~TBS.Algebra.index_tree.IndexTree`
   whose offsets, times the block size, locate the blocks in the buffer,
3. for each key the callback is called once, or, if the key contains
   ``IDX.SUM_ALL``, once for every concrete index it sums over; all these
   calls accumulate into the same block.

Compound patterns (``{to}, {from}``) are expanded block by block and the
keys are the products of the per-block expansions.

In the ranges format (:meth:`PropertyExtractor.calculate_ranges`) a single
pattern comes with the extent of every sub-index. ``IDX.ALL`` then runs
over the full range instead of the basis, which gives a dense grid of
keys, and ``IDX.SUM_ALL`` sums over the range, skipping indices outside
the basis.

--------------------------------------------------
File        : TBS/PropertyExtractor/extractor.py
Description : Pattern walk shared by all extractors.
--------------------------------------------------
"""

from    __future__  import annotations

import  itertools
import  numbers
from    concurrent.futures  import ThreadPoolExecutor
from    typing              import TYPE_CHECKING, Callable, Iterable, Iterator, List, Optional, Tuple, Union

import  numpy as np

from    TBS.Algebra.index                   import IDX, Index, as_index
from    TBS.Algebra.index_tree              import IndexTree
from    TBS.Algebra.Properties.property     import Broadening, IndexDescriptor
from    TBS.PropertyExtractor.extractor_config import ExtractorConfig
from    TBS.common.errors                   import InvalidArgumentError, InvalidPatternError

if TYPE_CHECKING:
    from TBS.PropertyExtractor.callbacks    import ExtractionCallback
    from TBS.common.flog                    import Logger

_KEEP = (IDX.SUM_ALL, IDX.SPIN)

####################################################################################################

def _is_single_pattern(patterns) -> bool:
    if isinstance(patterns, Index):
        return True
    return all(isinstance(p, (IDX, numbers.Integral)) for p in patterns)

class PropertyExtractor:
    """
    Base class of extractors: configuration plus the generic pattern walk.

    Parameters
    ----------
    config : ExtractorConfig, optional
        Energy window, broadening and threading. Defaults to ``ExtractorConfig()``.
    logger : Logger, optional
        Defaults to the process-global logger.
    """

    def __init__(self, config: Optional[ExtractorConfig] = None, logger: Optional['Logger'] = None):
        self._logger = self._check_logger(logger)
        self._config = (config if config is not None else ExtractorConfig()).validate()

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
        msg = self._logger.colorize(f"[{self.__class__.__name__}] {msg}", color)
        self._logger.say(msg, log=log, lvl=lvl)

    # ------------------------------------------------------------------
    #! Configuration
    # ------------------------------------------------------------------

    @property
    def config(self) -> ExtractorConfig:
        return self._config

    def configure(self, **updates) -> None:
        """Replace selected fields of the configuration (validated)."""
        self._config = self._config.with_override(**updates).validate()

    def set_energy_window(self, lower_bound: float, upper_bound: float, resolution: int) -> None:
        self.configure(lower_bound=lower_bound, upper_bound=upper_bound, resolution=resolution)

    def set_energy_infinitesimal(self, energy_infinitesimal: float) -> None:
        self.configure(energy_infinitesimal=energy_infinitesimal)

    def set_broadening(self, broadening: Union[str, Broadening], width: Optional[float] = None) -> None:
        if width is None:
            self.configure(broadening=broadening)
        else:
            self.configure(broadening=broadening, broadening_width=width)

    def set_threadnum(self, threadnum: int) -> None:
        self.configure(threadnum=threadnum)

    @property
    def lower_bound(self) -> float:
        return self._config.lower_bound

    @property
    def upper_bound(self) -> float:
        return self._config.upper_bound

    @property
    def resolution(self) -> int:
        return self._config.resolution

    @property
    def energies(self) -> np.ndarray:
        ''' Energy grid of energy-resolved properties '''
        return np.linspace(self._config.lower_bound, self._config.upper_bound, self._config.resolution)

    # ------------------------------------------------------------------
    #! Basis access (provided by concrete extractors)
    # ------------------------------------------------------------------

    @property
    def index_tree(self) -> IndexTree:
        ''' Basis the patterns are matched against '''
        raise NotImplementedError

    # ------------------------------------------------------------------
    #! Generic walk
    # ------------------------------------------------------------------

    @staticmethod
    def coerce_patterns(patterns, num_blocks: int, spin_markers: Optional[int] = 0,
                        where: str = "PropertyExtractor.calculate()") -> List[Index]:
        """
        Turn the user input into a list of patterns and check their shape.

        A single Index, or a flat sequence of sub-indices, is one pattern;
        any other sequence is a list of patterns. An empty sequence gives
        no patterns.

        Raises
        ------
        InvalidPatternError
            If a pattern has the wrong number of blocks or, when
            ``spin_markers`` is not None, the wrong number of ``IDX.SPIN``.
        """
        try:
            if not isinstance(patterns, Index) and len(patterns) == 0:
                result = []
            elif _is_single_pattern(patterns):
                result = [as_index(patterns)]
            else:
                result = [as_index(p) for p in patterns]
        except (InvalidArgumentError, TypeError) as e:
            raise InvalidPatternError(f"Malformed patterns {patterns!r}.", where=where) from e

        for pattern in result:
            if pattern.num_blocks != num_blocks:
                raise InvalidPatternError(f"Pattern {pattern} has {pattern.num_blocks} blocks, expected {num_blocks}.",
                                        where=where, hint="Separate the blocks of a compound pattern, e.g. [[to], [from]].")
            if spin_markers is not None and len(pattern.positions(IDX.SPIN)) != spin_markers:
                raise InvalidPatternError(f"Pattern {pattern} must contain exactly {spin_markers} IDX.SPIN.",
                                        where=where)
        return result

    def generate_keys(self, patterns: Iterable[Index]) -> IndexTree:
        """
        Output keys of the patterns, gathered in an IndexTree (overlaps appear once).
        """
        tree = self.index_tree
        keys = IndexTree(allow_markers=True)
        for pattern in patterns:
            expanded = [tree.get_index_list(block, keep=_KEEP).to_list() for block in pattern.split()]
            for blocks in itertools.product(*expanded):
                keys.insert(blocks[0] if len(blocks) == 1 else Index.compound(*blocks))
        return keys

    def _concrete_indices(self, key: Index) -> Iterable[Index]:
        ''' Indices a key sums over (the key itself without summation markers) '''
        if not key.has_marker(IDX.SUM_ALL):
            return (key,)

        tree        = self.index_tree
        per_block   = []
        for block in key.split():
            positions = block.positions(IDX.SUM_ALL)
            per_block.append([block.with_values(positions, values)
                            for values in tree.get_subindices_matching(block, IDX.SUM_ALL)])
        return (blocks[0] if len(blocks) == 1 else Index.compound(*blocks)
                for blocks in itertools.product(*per_block))

    def _evaluate(self, callback: 'ExtractionCallback', buffer: np.ndarray, key: Index, offset: int,
                expand: Callable[[Index], Iterable[Index]]) -> None:
        for index in expand(key):
            callback(self, buffer, index, offset)

    def _accumulate(self, callback: 'ExtractionCallback', descriptor: IndexDescriptor,
                    expand: Callable[[Index], Iterable[Index]]) -> np.ndarray:
        ''' Fill one block per key of ``descriptor``, optionally on a thread pool '''
        block_size  = callback.block_size
        buffer      = np.zeros(descriptor.size * block_size, dtype=callback.dtype)
        jobs        = [(key, n * block_size) for n, key in enumerate(descriptor.keys())]

        threads     = min(self._config.threadnum, len(jobs))
        self._log(f"{callback.__class__.__name__}: {len(jobs)} keys on {max(threads, 1)} thread(s).",
                log='debug', lvl=1)
        if threads > 1:
            with ThreadPoolExecutor(max_workers=threads) as pool:
                futures = [pool.submit(self._evaluate, callback, buffer, key, offset, expand)
                        for key, offset in jobs]
                for future in futures:
                    future.result()
        else:
            for key, offset in jobs:
                self._evaluate(callback, buffer, key, offset, expand)
        return buffer

    def calculate(self, callback: 'ExtractionCallback', patterns) -> Tuple[np.ndarray, IndexDescriptor]:
        """
        Run the callback over all indices described by ``patterns``.

        Parameters
        ----------
        callback : ExtractionCallback
            Per-index accumulator; defines block shape, dtype and pattern arity.
        patterns : Index or sequence
            One pattern or a list of them.

        Returns
        -------
        (np.ndarray, IndexDescriptor)
            The flat buffer and the key-to-block map. A pattern matching
            nothing contributes no key.
        """
        patterns    = self.coerce_patterns(patterns, callback.num_blocks, callback.spin_markers,
                                        where=f"{self.__class__.__name__}.calculate()")
        descriptor  = IndexDescriptor(self.generate_keys(patterns))
        return self._accumulate(callback, descriptor, self._concrete_indices), descriptor

    # ------------------------------------------------------------------
    #! Ranges format
    # ------------------------------------------------------------------

    @staticmethod
    def coerce_ranges(pattern, ranges, spin_markers: Optional[int] = 0,
                    where: str = "PropertyExtractor.calculate_ranges()") -> Tuple[Index, Tuple]:
        """
        Check a single pattern and its ranges.

        ``ranges`` has one entry per sub-index of ``pattern``; entries at
        ``IDX.ALL`` and ``IDX.SUM_ALL`` positions must be positive integers,
        the others are ignored.

        Raises
        ------
        InvalidPatternError
            For a compound or malformed pattern, a wrong number of ranges or
            of ``IDX.SPIN`` markers.
        InvalidArgumentError
            For a non-positive or non-integer range at a looped position.
        """
        try:
            pattern = as_index(pattern)
            ranges  = tuple(ranges)
        except (InvalidArgumentError, TypeError) as e:
            raise InvalidPatternError(f"Malformed pattern {pattern!r} or ranges {ranges!r}.", where=where) from e

        if pattern.num_blocks != 1:
            raise InvalidPatternError(f"Pattern {pattern} must have a single block.", where=where)
        if len(ranges) != len(pattern):
            raise InvalidPatternError(f"Got {len(ranges)} ranges for the {len(pattern)} sub-indices of {pattern}.",
                                    where=where, hint="Give one range per sub-index.")
        if spin_markers is not None and len(pattern.positions(IDX.SPIN)) != spin_markers:
            raise InvalidPatternError(f"Pattern {pattern} must contain exactly {spin_markers} IDX.SPIN.", where=where)
        for s, r in zip(pattern, ranges):
            if s in (IDX.ALL, IDX.SUM_ALL) and (isinstance(r, bool) or not isinstance(r, numbers.Integral) or r < 1):
                raise InvalidArgumentError(f"Invalid range {r!r} at a {s!r} position.", where=where,
                                        hint="Ranges of looped sub-indices must be positive integers.")
        return pattern, ranges

    @staticmethod
    def generate_range_keys(pattern: Index, ranges) -> Tuple[IndexDescriptor, Tuple[int, ...]]:
        """
        Dense output keys of a ranges-format pattern and the grid they form.

        Every ``IDX.ALL`` position runs over ``range(ranges[i])``, so the keys
        are in row-major order over these positions.
        """
        positions   = pattern.positions(IDX.ALL)
        grid_shape  = tuple(int(ranges[p]) for p in positions)
        keys        = IndexTree(allow_markers=True)
        for values in itertools.product(*(range(n) for n in grid_shape)):
            keys.insert(pattern.with_values(positions, values))
        return IndexDescriptor(keys), grid_shape

    def _in_basis(self, index: Index) -> bool:
        ''' True if the index, or one of its spin states, belongs to the basis '''
        tree        = self.index_tree
        positions   = index.positions(IDX.SPIN)
        if not positions:
            return index in tree
        return any(index.with_values(positions, [s] * len(positions)) in tree for s in (0, 1))

    def _range_indices(self, key: Index, ranges) -> Iterator[Index]:
        positions = key.positions(IDX.SUM_ALL)
        for values in itertools.product(*(range(int(ranges[p])) for p in positions)):
            index = key.with_values(positions, values)
            if self._in_basis(index):
                yield index

    def calculate_ranges(self, callback: 'ExtractionCallback', pattern,
                        ranges) -> Tuple[np.ndarray, IndexDescriptor, Tuple[int, ...]]:
        """
        Run the callback over a dense grid of indices.

        Parameters
        ----------
        callback : ExtractionCallback
            Single-block accumulator.
        pattern : Index or sequence
            One pattern, e.g. ``[IDX.ALL, IDX.ALL, IDX.SUM_ALL]``.
        ranges : sequence of int
            Extent of every sub-index, e.g. ``[size_x, size_y, 2]``.

        Returns
        -------
        (np.ndarray, IndexDescriptor, tuple)
            The flat buffer, the key-to-block map and the grid shape (the
            ranges of the ``IDX.ALL`` positions). Grid points outside the
            basis give zero blocks; summed indices outside the basis are skipped.
        """
        where = f"{self.__class__.__name__}.calculate_ranges()"
        if callback.num_blocks != 1:
            raise InvalidPatternError("The ranges format supports single-block properties only.", where=where)
        pattern, ranges         = self.coerce_ranges(pattern, ranges, callback.spin_markers, where=where)
        descriptor, grid_shape  = self.generate_range_keys(pattern, ranges)
        buffer                  = self._accumulate(callback, descriptor, lambda key: self._range_indices(key, ranges))
        return buffer, descriptor, grid_shape

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._config})"

# --------------------------------------------------------------------------------------------------
#! EOF
# --------------------------------------------------------------------------------------------------
