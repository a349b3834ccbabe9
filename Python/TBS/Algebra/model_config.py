"""
Declarative configuration helpers for constructing models.

The :class:`ModelConfig` dataclass packages the scalar parameters of a
:class:`~TBS.Algebra.model.Model` so that scripts and tests can keep a
re-usable blueprint and derive variants with small overrides (e.g. a
temperature sweep).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Union

from TBS.Algebra.Properties.statistics import Statistics


@dataclass(frozen=True)
class ModelConfig:
    """
    Declarative description of a model's thermodynamic parameters.

    The hopping terms themselves are not part of the config; they are
    added to the model after creation.
    """

    temperature: float = 0.0
    chemical_potential: float = 0.0
    statistics: Union[str, Statistics] = Statistics.FERMI_DIRAC
    amplitude_tolerance: float = 1e-10
    name: Optional[str] = None
    extra_kwargs: Dict[str, Any] = field(default_factory=dict)

    def with_override(self, **updates: Any) -> "ModelConfig":
        """
        Return a new config instance with selected fields replaced.
        """
        return replace(self, **updates)

    def to_kwargs(self) -> Dict[str, Any]:
        """
        Materialise the configuration as a kwargs dictionary suitable for
        passing to :class:`~TBS.Algebra.model.Model`.
        """
        kwargs: Dict[str, Any] = {
            "temperature": self.temperature,
            "chemical_potential": self.chemical_potential,
            "statistics": Statistics.from_value(self.statistics),
            "amplitude_tolerance": self.amplitude_tolerance,
            "name": self.name,
        }
        for key, value in self.extra_kwargs.items():
            if key not in kwargs or kwargs[key] is None:
                kwargs[key] = value
        return kwargs
