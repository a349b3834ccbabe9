"""
TBS PropertyExtractor Module
============================

Extraction of physical properties from solved models.

Entry Points
------------
- :class:`DiagonalizerExtractor`: properties of a solved Diagonalizer.
- :class:`PropertyExtractor`: the generic pattern walk shared by extractors.
- :class:`ExtractorConfig`: energy window, broadening and threading.

Submodules
----------
- ``extractor``: Pattern expansion, output keys and the accumulation loop.
- ``callbacks``: Per-index accumulators (density, magnetization, LDOS, ...).
- ``diagonalizer``: The Diagonalizer extractor.
- ``extractor_config``: Declarative configuration.
"""

import importlib
from typing import TYPE_CHECKING, Any

_LAZY_IMPORTS = {
    "PropertyExtractor": (".extractor", "PropertyExtractor"),
    "DiagonalizerExtractor": (".diagonalizer", "DiagonalizerExtractor"),
    "ExtractorConfig": (".extractor_config", "ExtractorConfig"),
    "ExtractionCallback": (".callbacks", "ExtractionCallback"),
}

if TYPE_CHECKING:
    from .extractor import PropertyExtractor
    from .diagonalizer import DiagonalizerExtractor
    from .extractor_config import ExtractorConfig
    from .callbacks import ExtractionCallback


def __getattr__(name: str) -> Any:
    """Lazily import submodules and classes."""
    if name in _LAZY_IMPORTS:
        module_path, attr_name = _LAZY_IMPORTS[name]
        module = importlib.import_module(module_path, package=__name__)
        return getattr(module, attr_name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__():
    return sorted(list(globals().keys()) + list(_LAZY_IMPORTS.keys()))


__all__ = list(_LAZY_IMPORTS.keys())

# A short, user-facing description used by TBS.list_modules()
MODULE_DESCRIPTION = "Property extraction: DOS, density, magnetization, LDOS, Green's functions and more."
