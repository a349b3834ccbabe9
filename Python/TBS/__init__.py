"""
TBS package initialization
==========================

Tight-Binding Solver (TBS): describe lattice Hamiltonians as sparse sets of
hopping amplitudes over physical indices, diagonalize them exactly and
extract observables by pattern-matching over the indices.

Usage
-----
    from TBS import Model, Diagonalizer, DiagonalizerExtractor, IDX

    model = Model(chemical_potential=0.0)
    for x in range(10):
        for s in range(2):
            if x + 1 < 10:
                model.add_and_hermitian_conjugate(-1.0, [x + 1, s], [x, s])
    model.construct()

    solver = Diagonalizer()
    solver.set_model(model)
    solver.run()

    extractor = DiagonalizerExtractor(solver)
    density   = extractor.calculate_density([[IDX.ALL, IDX.SUM_ALL]])

----------------------------------------------------------
Description     : Tight-binding model construction, exact diagonalization and property extraction.
----------------------------------------------------------
"""

__version__         = "0.1.0"
__description__     = "Tight-Binding Solver: models, exact diagonalization and property extraction"

__all__ = [
    # Discovery utilities
    "list_modules",
    "describe_module",
    # Model description
    "IDX",
    "Index",
    "IndexTree",
    "HoppingAmplitude",
    "AmplitudeSet",
    "Model",
    "ModelConfig",
    "Statistics",
    # Solvers
    "Diagonalizer",
    "DiagonalizationMethods",
    "SolverState",
    "DevicePool",
    # Properties
    "DiagonalizerExtractor",
    "ExtractorConfig",
    "Broadening",
    "GreensFunctionType",
    # Global accessor re-exports
    "get_logger",
    # Meta
    "__version__",
    "__description__",
]

####################################################################################################

import importlib
from typing import Any, Dict

from .tbs_globals import get_logger
from .registry import list_modules, describe_module

# ----------------------------------------------------------------------------
# Lazy access to subpackages and common classes (keeps `import TBS` light)
# ----------------------------------------------------------------------------

_SUBMODULES: Dict[str, str] = {
    'Algebra'           : 'TBS.Algebra',
    'Solver'            : 'TBS.Solver',
    'PropertyExtractor' : 'TBS.PropertyExtractor',
    'common'            : 'TBS.common',
}

_API_EXPORTS: Dict[str, str] = {
    'IDX'                   : 'TBS.Algebra.index',
    'Index'                 : 'TBS.Algebra.index',
    'IndexTree'             : 'TBS.Algebra.index_tree',
    'HoppingAmplitude'      : 'TBS.Algebra.amplitude_set',
    'AmplitudeSet'          : 'TBS.Algebra.amplitude_set',
    'Model'                 : 'TBS.Algebra.model',
    'ModelConfig'           : 'TBS.Algebra.model_config',
    'Statistics'            : 'TBS.Algebra.Properties.statistics',
    'Diagonalizer'          : 'TBS.Solver.diagonalizer',
    'DiagonalizationMethods': 'TBS.Solver.diagonalizer',
    'SolverState'           : 'TBS.Solver.solver',
    'DevicePool'            : 'TBS.Solver.device_pool',
    'DiagonalizerExtractor' : 'TBS.PropertyExtractor.diagonalizer',
    'ExtractorConfig'       : 'TBS.PropertyExtractor.extractor_config',
    'Broadening'            : 'TBS.Algebra.Properties.property',
    'GreensFunctionType'    : 'TBS.Algebra.Properties.property',
}

def __getattr__(name: str) -> Any:  # PEP 562
    if name in _SUBMODULES:
        return importlib.import_module(_SUBMODULES[name])
    if name in _API_EXPORTS:
        mod = importlib.import_module(_API_EXPORTS[name])
        return getattr(mod, name)
    raise AttributeError(f"module 'TBS' has no attribute {name!r}")

# -------------------------------------------------------------------------------------------------
#! End of TBS package initialization
# -------------------------------------------------------------------------------------------------
