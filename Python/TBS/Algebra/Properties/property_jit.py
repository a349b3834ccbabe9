"""
file        : TBS/Algebra/Properties/property_jit.py
description : JIT kernels for energy-resolved properties.

Both kernels tabulate a matrix ``K[k, n]`` over the energy grid
``E_k = lower + k * dE`` (``dE = (upper - lower) / (resolution - 1)``) and
the eigenvalues ``E_n``. An energy-resolved property is then a single
matrix-vector product ``K @ w`` with the per-state weights ``w_n``.
"""

import numpy as np
import numba

#! broadening codes (see Properties.property.Broadening)
BROADENING_NONE         = 0
BROADENING_GAUSSIAN     = 1
BROADENING_LORENTZIAN   = 2

#! Green's function codes (see Properties.property.GreensFunctionType)
GREENS_RETARDED         = 0
GREENS_ADVANCED         = 1
GREENS_PRINCIPAL        = 2
GREENS_NONPRINCIPAL     = 3

####################################################################################################

@numba.njit(cache=True)
def spectral_kernel(energies, lower, upper, resolution, mode, width):
    """
    Real spectral weights of unit-weight states on the energy grid.

    Args:
        energies (np.ndarray):
            Eigenvalues E_n.
        lower, upper (float):
            Energy window, both ends are grid points.
        resolution (int):
            Number of grid points (>= 2).
        mode (int):
            BROADENING_NONE bins every eigenvalue to the nearest grid point
            with weight 1/dE, eigenvalues outside the window are dropped.
            BROADENING_GAUSSIAN / BROADENING_LORENTZIAN spread it with the
            normalized line shape of the given width.
        width (float):
            Standard deviation (Gaussian) or half width (Lorentzian).

    Returns:
        np.ndarray:
            Matrix of shape (resolution, len(energies)).
    """
    n_states    = energies.shape[0]
    out         = np.zeros((resolution, n_states), dtype=np.float64)
    dE          = (upper - lower) / (resolution - 1)

    if mode == BROADENING_NONE:
        for n in range(n_states):
            k = int(np.floor((energies[n] - lower) / dE + 0.5))
            if k >= 0 and k < resolution:
                out[k, n] = 1.0 / dE
        return out

    if mode == BROADENING_GAUSSIAN:
        norm = 1.0 / (np.sqrt(2.0 * np.pi) * width)
        for n in range(n_states):
            for k in range(resolution):
                x           = (lower + k * dE - energies[n]) / width
                out[k, n]   = norm * np.exp(-0.5 * x * x)
        return out

    norm = width / np.pi
    for n in range(n_states):
        for k in range(resolution):
            x           = lower + k * dE - energies[n]
            out[k, n]   = norm / (x * x + width * width)
    return out

@numba.njit(cache=True)
def greens_kernel(energies, lower, upper, resolution, kind, delta):
    """
    Complex Green's function kernel K(E_k - E_n) with x = E_k - E_n:

        retarded    : 1 / (x + i delta)
        advanced    : 1 / (x - i delta)
        principal   : x / (x^2 + delta^2)
        nonprincipal: -i delta / (x^2 + delta^2)

    Returns:
        np.ndarray:
            Complex matrix of shape (resolution, len(energies)).
    """
    n_states    = energies.shape[0]
    out         = np.zeros((resolution, n_states), dtype=np.complex128)
    dE          = (upper - lower) / (resolution - 1)
    for n in range(n_states):
        for k in range(resolution):
            x = lower + k * dE - energies[n]
            if kind == GREENS_RETARDED:
                out[k, n] = 1.0 / (x + 1j * delta)
            elif kind == GREENS_ADVANCED:
                out[k, n] = 1.0 / (x - 1j * delta)
            elif kind == GREENS_PRINCIPAL:
                out[k, n] = x / (x * x + delta * delta)
            else:
                out[k, n] = -1j * delta / (x * x + delta * delta)
    return out

# --------------------------------------------------------------------------------------------------
#! EOF
# --------------------------------------------------------------------------------------------------
