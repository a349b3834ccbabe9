"""
TBS Algebra Module
==================

Description of tight-binding models.

Modules:
--------
- index         : Index and the IDX sub-index markers
- index_tree    : IndexTree, the basis of a model, with pattern lookup
- amplitude_set : HoppingAmplitude and AmplitudeSet
- model         : Model (AmplitudeSet + temperature, chemical potential, statistics)
- model_config  : Declarative ModelConfig
- Properties    : Property containers and occupation statistics

File    : TBS/Algebra/__init__.py
"""

# A short, user-facing description used by TBS.list_modules()
MODULE_DESCRIPTION = "Model description: indices, index trees, hopping amplitudes and models."

from .index import IDX, Index
from .index_tree import IndexTree, IndexList
from .amplitude_set import AmplitudeSet, HoppingAmplitude
from .model_config import ModelConfig
from .model import Model
from .Properties.statistics import Statistics

__all__ = [
    'IDX',
    'Index',
    'IndexTree',
    'IndexList',
    'AmplitudeSet',
    'HoppingAmplitude',
    'Model',
    'ModelConfig',
    'Statistics',
]

# ----------------------------------------------------------------------------
#! EOF
# ----------------------------------------------------------------------------
