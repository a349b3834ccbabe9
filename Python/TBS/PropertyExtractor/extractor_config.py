"""
Declarative configuration of property extractors.

:class:`ExtractorConfig` collects the energy window, the infinitesimal
used by Green's functions, the line broadening of energy-resolved
properties and the number of worker threads.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Any, Dict, Union

from TBS.Algebra.Properties.property import Broadening
from TBS.common.errors import InvalidArgumentError


@dataclass(frozen=True)
class ExtractorConfig:
    """
    Parameters shared by all extraction calls of one extractor.

    The energy grid has ``resolution`` points from ``lower_bound`` to
    ``upper_bound`` (both included).
    """

    lower_bound: float = -1.0
    upper_bound: float = 1.0
    resolution: int = 1000
    energy_infinitesimal: float = 1e-3
    broadening: Union[str, Broadening] = Broadening.NONE
    broadening_width: float = 1e-2
    threadnum: int = 1

    def with_override(self, **updates: Any) -> "ExtractorConfig":
        """
        Return a new config instance with selected fields replaced.
        """
        return replace(self, **updates)

    def validate(self) -> "ExtractorConfig":
        """
        Check the values and return the config with ``broadening`` as an enum.
        """
        where = "ExtractorConfig.validate()"
        if not (math.isfinite(self.lower_bound) and math.isfinite(self.upper_bound)) \
                or self.lower_bound >= self.upper_bound:
            raise InvalidArgumentError(f"Invalid energy window [{self.lower_bound}, {self.upper_bound}].",
                                    where=where, hint="Require finite bounds with lower < upper.")
        if isinstance(self.resolution, bool) or not isinstance(self.resolution, int) or self.resolution < 2:
            raise InvalidArgumentError(f"Invalid resolution {self.resolution!r}.", where=where,
                                    hint="The energy grid needs at least 2 points.")
        if not math.isfinite(self.energy_infinitesimal) or self.energy_infinitesimal <= 0:
            raise InvalidArgumentError(f"Invalid energy infinitesimal {self.energy_infinitesimal}.", where=where)
        broadening = Broadening.from_value(self.broadening)
        if broadening is not Broadening.NONE and \
                (not math.isfinite(self.broadening_width) or self.broadening_width <= 0):
            raise InvalidArgumentError(f"Invalid broadening width {self.broadening_width}.", where=where)
        if isinstance(self.threadnum, bool) or not isinstance(self.threadnum, int) or self.threadnum < 1:
            raise InvalidArgumentError(f"Invalid number of threads {self.threadnum!r}.", where=where)
        return replace(self, broadening=broadening)

    def to_kwargs(self) -> Dict[str, Any]:
        """
        Materialise the configuration as a kwargs dictionary.
        """
        return {
            "lower_bound": self.lower_bound,
            "upper_bound": self.upper_bound,
            "resolution": self.resolution,
            "energy_infinitesimal": self.energy_infinitesimal,
            "broadening": Broadening.from_value(self.broadening),
            "broadening_width": self.broadening_width,
            "threadnum": self.threadnum,
        }
