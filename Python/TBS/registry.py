"""
Module discovery for TBS.

Lists the subpackages of TBS together with a one-line description taken
from their ``MODULE_DESCRIPTION`` (or, failing that, the first line of the
module docstring).

    import TBS
    for m in TBS.list_modules():
        print(m['name'], '-', m['description'])

    print(TBS.describe_module('PropertyExtractor'))
"""

from __future__ import annotations

import importlib
from dataclasses import asdict, dataclass
from typing import Dict, List, Optional


@dataclass
class ModuleInfo:
    name: str  # short name, e.g. "Algebra.Properties"
    path: str  # dotted path, e.g. "TBS.Algebra.Properties"
    description: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


_TOP_LEVEL: Dict[str, str] = {
    "Algebra": "TBS.Algebra",
    "Solver": "TBS.Solver",
    "PropertyExtractor": "TBS.PropertyExtractor",
    "common": "TBS.common",
}

_COMMON_SUBMODULES: Dict[str, str] = {
    "Algebra.Properties": "TBS.Algebra.Properties",
}

_DEF_FALLBACK = "No description available."

# ----------------------------------------------------------------------------


def _first_line(s: Optional[str]) -> str:
    for line in (s or "").splitlines():
        line = line.strip()
        if line:
            return line
    return _DEF_FALLBACK


def _desc_from_module(mod) -> str:
    desc = getattr(mod, "MODULE_DESCRIPTION", None)
    if isinstance(desc, str) and desc.strip():
        return desc.strip()
    return _first_line(getattr(mod, "__doc__", None))


def _import(path: str):
    try:
        return importlib.import_module(path)
    except ModuleNotFoundError:
        return None


# ----------------------------------------------------------------------------


def list_modules(include_submodules: bool = True) -> List[Dict[str, str]]:
    """Return a list of dicts with name, path, and description of TBS modules."""
    entries = dict(_TOP_LEVEL)
    if include_submodules:
        entries.update(_COMMON_SUBMODULES)
    items = []
    for name, path in entries.items():
        mod = _import(path)
        items.append(ModuleInfo(name=name, path=path,
                                description=_desc_from_module(mod) if mod is not None else _DEF_FALLBACK))
    items.sort(key=lambda x: x.name)
    return [mi.to_dict() for mi in items]


def describe_module(name_or_path: str) -> str:
    """Short description for a curated name (e.g. "Solver") or a dotted path."""
    path = {**_TOP_LEVEL, **_COMMON_SUBMODULES}.get(name_or_path, name_or_path)
    if not path.startswith("TBS"):
        path = "TBS." + path
    mod = _import(path)
    return _desc_from_module(mod) if mod is not None else _DEF_FALLBACK


# ----------------------------------------------------------------------------
#! EOF
# ----------------------------------------------------------------------------
