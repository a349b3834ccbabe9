"""
Tests for Model and ModelConfig.

File        : test/test_model.py
"""

import logging

import numpy as np
import pytest

from TBS.Algebra.index import Index
from TBS.Algebra.model import Model
from TBS.Algebra.model_config import ModelConfig
from TBS.Algebra.Properties.statistics import Statistics
from TBS.common.errors import FrozenStateError, InvalidArgumentError, NotConstructedError
from TBS.common.flog import Logger

# ----------------------------------


def chain(n=4, t=1.0, mu=0.0):
    model = Model()
    for x in range(n):
        model.add(-mu, [x], [x])
        if x + 1 < n:
            model.add_and_hermitian_conjugate(-t, [x + 1], [x])
    return model


# ----------------------------------


def test_model_defaults():
    model = Model()
    assert model.temperature == 0.0
    assert model.chemical_potential == 0.0
    assert model.statistics is Statistics.FERMI_DIRAC
    assert model.amplitude_tolerance == 1e-10
    assert not model.is_constructed


def test_model_delegates_to_amplitude_set():
    model = chain(4)
    assert len(model) == 4 + 2 * 3
    model.construct()
    assert model.is_constructed
    assert model.get_basis_size() == 4
    assert model.get_offset([3]) == 3
    assert model.get_physical_index(2) == Index([2])
    assert model.index_tree.size == 4
    triples = list(model)
    assert all(len(t) == 3 for t in triples)
    assert triples[0] == (0j, Index([0]), Index([0]))


def test_model_construct_idempotent_and_frozen():
    model = chain(3)
    model.construct()
    model.construct()
    assert model.get_basis_size() == 3
    with pytest.raises(FrozenStateError):
        model.add(1.0, [0], [0])


def test_model_queries_before_construct():
    model = chain(2)
    with pytest.raises(NotConstructedError):
        model.get_basis_size()
    with pytest.raises(NotConstructedError):
        model.get_offset([0])


def test_model_parameter_setters():
    model = Model()
    model.temperature = 0.5
    model.chemical_potential = -1.0
    model.statistics = "bose-einstein"
    assert model.temperature == 0.5
    assert model.chemical_potential == -1.0
    assert model.statistics is Statistics.BOSE_EINSTEIN
    with pytest.raises(InvalidArgumentError):
        model.temperature = -1.0
    with pytest.raises(InvalidArgumentError):
        model.chemical_potential = float("nan")
    with pytest.raises(InvalidArgumentError):
        model.statistics = "boltzmann"


@pytest.mark.parametrize("field, value", [
    ("temperature", "warm"),
    ("temperature", 1j),
    ("chemical_potential", None),
    ("chemical_potential", True),
])
def test_model_rejects_non_numeric_parameters(field, value):
    model = Model()
    with pytest.raises(InvalidArgumentError, match=f"Model.{field}"):
        setattr(model, field, value)
    with pytest.raises(InvalidArgumentError, match="Model()"):
        Model(amplitude_tolerance="small")
    model.temperature = np.float64(0.25)
    assert model.temperature == 0.25


@pytest.mark.parametrize("tol", [-1.0, float("inf")])
def test_model_rejects_bad_tolerance(tol):
    with pytest.raises(InvalidArgumentError):
        Model(amplitude_tolerance=tol)


def test_model_occupation():
    model = Model(temperature=0.0, chemical_potential=0.0)
    np.testing.assert_allclose(model.occupation([-1.0, 0.0, 1.0]), [1.0, 0.5, 0.0])


def test_model_from_config():
    config = ModelConfig(temperature=0.1, chemical_potential=0.2, statistics="fermi-dirac", name="chain")
    model = Model.from_config(config)
    assert model.temperature == 0.1
    assert model.chemical_potential == 0.2
    assert model.name == "chain"

    warm = config.with_override(temperature=2.0)
    assert warm.temperature == 2.0
    assert config.temperature == 0.1
    assert warm.to_kwargs()["statistics"] is Statistics.FERMI_DIRAC


def test_model_logs_construction(caplog):
    logger = Logger(name="tbs_test_model", level="debug")
    logger.logger.propagate = True
    model = Model(name="m", logger=logger)
    model.add(1.0, [0], [0])
    with caplog.at_level(logging.DEBUG, logger="tbs_test_model"):
        model.construct()
    assert any("basis of size 1" in rec.getMessage() for rec in caplog.records)


# ----------------------------------------------------------------------------------------------------
#! End of test_model.py
# ----------------------------------------------------------------------------------------------------
