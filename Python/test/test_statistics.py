"""
Tests for the occupation statistics and entropies.

File        : test/test_statistics.py
"""

import numpy as np
import pytest

from TBS.Algebra.Properties.statistics import (
    Statistics,
    bose_entropy,
    bose_occupation,
    entropy,
    fermi_entropy,
    fermi_occupation,
    occupation,
)
from TBS.common.errors import InvalidArgumentError


def test_fermi_zero_temperature_step():
    f = fermi_occupation([-1.0, 0.0, 1.0], temperature=0.0, mu=0.0)
    np.testing.assert_allclose(f, [1.0, 0.5, 0.0])


def test_fermi_finite_temperature():
    eps = np.linspace(-2, 2, 9)
    f = fermi_occupation(eps, temperature=0.5, mu=0.3)
    np.testing.assert_allclose(f, 1.0 / (np.exp((eps - 0.3) / 0.5) + 1.0))
    np.testing.assert_allclose(f + fermi_occupation(0.6 - eps, temperature=0.5, mu=0.3), 1.0)


def test_fermi_no_overflow():
    f = fermi_occupation([-1e6, 1e6], temperature=1e-3)
    np.testing.assert_allclose(f, [1.0, 0.0], atol=1e-12)


def test_fermi_negative_temperature():
    with pytest.raises(InvalidArgumentError):
        fermi_occupation([0.0], temperature=-1.0)


def test_bose_occupation():
    eps = np.array([0.5, 1.0, 2.0])
    n = bose_occupation(eps, temperature=1.0, mu=0.0)
    np.testing.assert_allclose(n, 1.0 / (np.exp(eps) - 1.0))


@pytest.mark.parametrize("eps, temperature, mu", [
    ([1.0], 0.0, 0.0),
    ([0.0], 1.0, 0.0),
    ([-1.0, 1.0], 1.0, 0.0),
])
def test_bose_invalid(eps, temperature, mu):
    with pytest.raises(InvalidArgumentError):
        bose_occupation(eps, temperature, mu)


def test_occupation_dispatch():
    eps = [0.5, 1.5]
    np.testing.assert_allclose(occupation(eps, 1.0, 0.0, "fermi-dirac"), fermi_occupation(eps, 1.0))
    np.testing.assert_allclose(occupation(eps, 1.0, 0.0, Statistics.BOSE_EINSTEIN), bose_occupation(eps, 1.0))


def test_fermi_entropy():
    # fully occupied or empty states carry no entropy, the half filled one ln 2
    assert fermi_entropy([-1.0, 1.0], temperature=0.0) == pytest.approx(0.0)
    assert fermi_entropy([0.0], temperature=0.0) == pytest.approx(np.log(2.0))
    assert fermi_entropy([0.0, 0.0], temperature=3.0) == pytest.approx(2 * np.log(2.0))


def test_bose_entropy():
    eps = np.array([1.0])
    n = 1.0 / (np.e - 1.0)
    expected = (1 + n) * np.log(1 + n) - n * np.log(n)
    assert bose_entropy(eps, temperature=1.0) == pytest.approx(expected)
    assert entropy(eps, 1.0, 0.0, "bose-einstein") == pytest.approx(expected)


def test_statistics_from_value():
    assert Statistics.from_value("Fermi-Dirac") is Statistics.FERMI_DIRAC
    assert str(Statistics.BOSE_EINSTEIN) == "bose-einstein"
    with pytest.raises(InvalidArgumentError):
        Statistics.from_value("classical")


# ----------------------------------------------------------------------------------------------------
#! End of test_statistics.py
# ----------------------------------------------------------------------------------------------------
