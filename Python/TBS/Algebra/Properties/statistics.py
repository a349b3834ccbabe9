r"""
Particle statistics for non-interacting (single-particle) spectra.

All quantities use units where :math:`k_B = 1`, so the temperature is an
energy. For a spectrum :math:`\{\varepsilon_n\}`:

- Fermi-Dirac    : :math:`f(\varepsilon) = 1 / (e^{(\varepsilon - \mu)/T} + 1)`
- Bose-Einstein  : :math:`n(\varepsilon) = 1 / (e^{(\varepsilon - \mu)/T} - 1)`

At :math:`T = 0` the Fermi-Dirac distribution is the step function
:math:`\Theta(\mu - \varepsilon)` with value 1/2 exactly at the chemical
potential. The Bose-Einstein distribution is defined only for :math:`T > 0`
and :math:`\varepsilon > \mu`.

--------------------------------------------------
File        : TBS/Algebra/Properties/statistics.py
Description : Occupation numbers and entropy.
--------------------------------------------------
"""

from    enum    import Enum, unique
from    typing  import Union

import  numpy as np

from    TBS.common.errors import InvalidArgumentError

Array = Union[np.ndarray, float]

# =============================================================================

@unique
class Statistics(Enum):
    '''
    Particle statistics of a model.
    '''
    FERMI_DIRAC     = 'fermi-dirac'
    BOSE_EINSTEIN   = 'bose-einstein'

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_value(cls, value: Union[str, 'Statistics']) -> 'Statistics':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError as e:
            raise InvalidArgumentError(f"Unknown statistics '{value}'.", where="Statistics",
                                    hint=f"Available: {[str(s) for s in cls]}.") from e

# =============================================================================
#! Occupations
# =============================================================================

def fermi_occupation(epsilon: Array, temperature: float, mu: float = 0.0) -> np.ndarray:
    r"""
    Fermi-Dirac occupation :math:`f(\varepsilon)`.

    Parameters
    ----------
    epsilon : array-like
        Single-particle energies.
    temperature : float
        Temperature (:math:`T \geq 0`).
    mu : float, optional
        Chemical potential (default: 0).

    Returns
    -------
    np.ndarray
        Occupation numbers in ``[0, 1]``.
    """
    epsilon = np.asarray(epsilon, dtype=np.float64)
    if temperature < 0:
        raise InvalidArgumentError(f"Negative temperature {temperature}.", where="fermi_occupation()")
    if temperature == 0:
        return np.where(epsilon < mu, 1.0, np.where(epsilon > mu, 0.0, 0.5))

    # Prevent overflow in exp
    x = np.clip((epsilon - mu) / temperature, -500, 500)
    return 1.0 / (np.exp(x) + 1.0)

def bose_occupation(epsilon: Array, temperature: float, mu: float = 0.0) -> np.ndarray:
    r"""
    Bose-Einstein occupation :math:`n(\varepsilon)`.

    Raises
    ------
    InvalidArgumentError
        If :math:`T \leq 0` or any :math:`\varepsilon \leq \mu`.
    """
    epsilon = np.asarray(epsilon, dtype=np.float64)
    if temperature <= 0:
        raise InvalidArgumentError(f"Bose-Einstein statistics requires T > 0, got {temperature}.",
                                where="bose_occupation()")
    if np.any(epsilon <= mu):
        raise InvalidArgumentError(f"Bose-Einstein statistics requires every energy above mu={mu}.",
                                where="bose_occupation()")

    x = np.clip((epsilon - mu) / temperature, None, 500)
    return 1.0 / np.expm1(x)

def occupation(epsilon: Array, temperature: float, mu: float = 0.0,
            statistics: Statistics = Statistics.FERMI_DIRAC) -> np.ndarray:
    ''' Occupation for the given statistics '''
    if Statistics.from_value(statistics) is Statistics.FERMI_DIRAC:
        return fermi_occupation(epsilon, temperature, mu)
    return bose_occupation(epsilon, temperature, mu)

# =============================================================================
#! Entropy
# =============================================================================

def fermi_entropy(epsilon: Array, temperature: float, mu: float = 0.0) -> float:
    r"""
    :math:`S = -\sum_n [f_n \ln f_n + (1 - f_n) \ln(1 - f_n)]`, with :math:`0 \ln 0 = 0`.
    """
    f = fermi_occupation(epsilon, temperature, mu)
    return float(-np.sum(_xlogx(f) + _xlogx(1.0 - f)))

def bose_entropy(epsilon: Array, temperature: float, mu: float = 0.0) -> float:
    r"""
    :math:`S = \sum_n [(1 + n_n) \ln(1 + n_n) - n_n \ln n_n]`.
    """
    n = bose_occupation(epsilon, temperature, mu)
    return float(np.sum(_xlogx(1.0 + n) - _xlogx(n)))

def entropy(epsilon: Array, temperature: float, mu: float = 0.0,
            statistics: Statistics = Statistics.FERMI_DIRAC) -> float:
    if Statistics.from_value(statistics) is Statistics.FERMI_DIRAC:
        return fermi_entropy(epsilon, temperature, mu)
    return bose_entropy(epsilon, temperature, mu)

def _xlogx(x: np.ndarray) -> np.ndarray:
    x   = np.asarray(x, dtype=np.float64)
    out = np.zeros_like(x)
    pos = x > 0
    out[pos] = x[pos] * np.log(x[pos])
    return out

# =============================================================================
# Exports
# =============================================================================

__all__ = [
    'Statistics',
    'fermi_occupation',
    'bose_occupation',
    'occupation',
    'fermi_entropy',
    'bose_entropy',
    'entropy',
]
