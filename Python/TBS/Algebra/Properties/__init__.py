"""
Properties Module
=================

Containers for extracted physical properties and the single-particle
statistics used to occupy eigenstates.

Modules:
--------
- property      : EigenValues, DOS, Density, Magnetization, LDOS, SpinPolarizedLDOS, GreensFunction, WaveFunctions
- statistics    : Fermi-Dirac / Bose-Einstein occupations and entropies
- property_jit  : numba kernels for energy-resolved properties

File    : TBS/Algebra/Properties/__init__.py
"""

# A short, user-facing description used by TBS.list_modules()
MODULE_DESCRIPTION  = "Physical properties: containers, occupation statistics and spectral kernels."
__all__             = ['property', 'statistics', 'property_jit']

# ----------------------------------------------------------------------------
#! EOF
# ----------------------------------------------------------------------------
