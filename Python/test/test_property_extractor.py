"""
Tests for the DiagonalizerExtractor and the generic pattern walk.

Checks analytic values on small chains: sum rules of the (local) density
of states, half filling, spin matrices, Green's function identities and
pattern handling.

File        : test/test_property_extractor.py
"""

import numpy as np
import pytest

from TBS.Algebra.index import IDX, Index
from TBS.Algebra.model import Model
from TBS.Algebra.Properties.property import Broadening, GreensFunctionType
from TBS.Algebra.Properties.statistics import fermi_entropy
from TBS.PropertyExtractor.callbacks import ExtractionCallback
from TBS.PropertyExtractor.diagonalizer import DiagonalizerExtractor
from TBS.PropertyExtractor.extractor_config import ExtractorConfig
from TBS.Solver.diagonalizer import Diagonalizer
from TBS.common.errors import (
    InvalidArgumentError,
    InvalidPatternError,
    InvalidStateError,
    NotFoundError,
    OutOfRangeError,
)

# ----------------------------------
#! Helpers
# ----------------------------------

WINDOW = dict(lower_bound=-3.0, upper_bound=3.0, resolution=601)


def chain(n, t=1.0, **kwargs):
    model = Model(**kwargs)
    for x in range(n - 1):
        model.add_and_hermitian_conjugate(-t, [x + 1], [x])
    model.construct()
    return model


def spin_chain(n, t=1.0, h=0.0, b=0.0, **kwargs):
    ''' Chain with a Zeeman field h along z and a local spin flip b '''
    model = Model(**kwargs)
    for x in range(n):
        model.add(-h, [x, 0], [x, 0])
        model.add(h, [x, 1], [x, 1])
        if b != 0.0:
            model.add_and_hermitian_conjugate(b, [x, 1], [x, 0])
        if x + 1 < n:
            for s in (0, 1):
                model.add_and_hermitian_conjugate(-t, [x + 1, s], [x, s])
    model.construct()
    return model


def extractor_for(model, **config):
    solver = Diagonalizer()
    solver.set_model(model)
    solver.run()
    return DiagonalizerExtractor(solver, ExtractorConfig(**{**WINDOW, **config}))


# ----------------------------------
#! Spectrum
# ----------------------------------


def test_eigen_values_container():
    extractor = extractor_for(chain(2))
    ev = extractor.get_eigen_values()
    assert len(ev) == 2
    assert ev[0] == pytest.approx(-1.0)
    assert ev[-1] == pytest.approx(1.0)
    assert extractor.get_eigen_value(1) == pytest.approx(1.0)
    with pytest.raises(OutOfRangeError):
        ev[2]


def test_dos_histogram_counts_states():
    extractor = extractor_for(chain(6))
    dos = extractor.calculate_dos()
    assert dos.resolution == 601
    np.testing.assert_allclose(dos.energies, np.linspace(-3, 3, 601))
    assert dos.data.sum() * dos.dE == pytest.approx(6.0)


def test_dos_drops_states_outside_window():
    extractor = extractor_for(chain(2), lower_bound=0.1, upper_bound=3.0, resolution=100)
    dos = extractor.calculate_dos()
    assert dos.data.sum() * dos.dE == pytest.approx(1.0)
    # the state at E = +1 lands on its nearest grid point
    k = int(np.argmax(dos.data))
    assert abs(dos.energies[k] - 1.0) <= dos.dE / 2


@pytest.mark.parametrize("broadening", ["gaussian", Broadening.LORENTZIAN])
def test_broadened_dos(broadening):
    extractor = extractor_for(chain(4), lower_bound=-60.0, upper_bound=60.0, resolution=24001,
                              broadening=broadening, broadening_width=0.1)
    dos = extractor.calculate_dos()
    tol = 1e-6 if Broadening.from_value(broadening) is Broadening.GAUSSIAN else 1e-2
    assert dos.data.sum() * dos.dE == pytest.approx(4.0, rel=tol)
    assert np.all(dos.data >= 0)
    # every grid point within a few widths of the spectrum carries weight
    eigen_values = extractor.get_eigen_values().data
    near = np.abs(dos.energies[:, None] - eigen_values[None, :]).min(axis=1) < 0.3
    assert np.all(dos.data[near] > 0)


# ----------------------------------
#! Density
# ----------------------------------


def test_density_half_filled_chain():
    extractor = extractor_for(chain(4))
    density = extractor.calculate_density([IDX.ALL])
    assert density.keys() == [Index([x]) for x in range(4)]
    np.testing.assert_allclose(density.to_array(), 0.5, atol=1e-12)
    assert density([2]) == pytest.approx(0.5)


def test_density_sum_all():
    extractor = extractor_for(spin_chain(4))
    per_site = extractor.calculate_density([[IDX.ALL, IDX.SUM_ALL]])
    assert per_site.keys() == [Index([x, IDX.SUM_ALL]) for x in range(4)]
    np.testing.assert_allclose(per_site.to_array(), 1.0, atol=1e-12)

    total = extractor.calculate_density([[IDX.SUM_ALL, IDX.SUM_ALL]])
    assert len(total) == 1
    assert total([IDX.SUM_ALL, IDX.SUM_ALL]) == pytest.approx(4.0)


def test_density_overlapping_patterns_appear_once():
    extractor = extractor_for(chain(3))
    density = extractor.calculate_density([[0], [IDX.ALL]])
    assert len(density) == 3


def test_density_empty_and_unmatched_patterns():
    extractor = extractor_for(chain(3))
    empty = extractor.calculate_density([])
    assert empty.is_empty
    assert empty.keys() == []
    assert empty.descriptor is not None and empty.descriptor.size == 0

    unmatched = extractor.calculate_density([[7]])
    assert unmatched.is_empty
    with pytest.raises(NotFoundError):
        unmatched([7])


def test_density_follows_temperature():
    extractor = extractor_for(chain(2, temperature=0.5, chemical_potential=0.2))
    f = 1.0 / (np.exp((np.array([-1.0, 1.0]) - 0.2) / 0.5) + 1.0)
    density = extractor.calculate_density([IDX.ALL])
    np.testing.assert_allclose(density.to_array(), 0.5 * f.sum())


# ----------------------------------
#! Spin-resolved properties
# ----------------------------------


def test_magnetization_zeeman_site():
    extractor = extractor_for(spin_chain(1, h=1.0))
    mag = extractor.calculate_magnetization([[0, IDX.SPIN]])
    np.testing.assert_allclose(mag([0, IDX.SPIN]), [[1.0, 0.0], [0.0, 0.0]], atol=1e-12)


def test_magnetization_spin_flip_site():
    extractor = extractor_for(spin_chain(1, b=0.8))
    m = extractor.calculate_magnetization([[0, IDX.SPIN]])([0, IDX.SPIN])
    np.testing.assert_allclose(m, 0.5 * np.array([[1.0, -1.0], [-1.0, 1.0]]), atol=1e-12)


def test_magnetization_missing_spin_state_is_zero():
    model = Model()
    model.add(-1.0, [0, 0], [0, 0])
    model.construct()
    extractor = extractor_for(model)
    m = extractor.calculate_magnetization([[0, IDX.SPIN]])([0, IDX.SPIN])
    np.testing.assert_allclose(m, [[1.0, 0.0], [0.0, 0.0]])


def test_magnetization_summed_over_sites():
    extractor = extractor_for(spin_chain(3, h=0.4, b=0.1))
    mag = extractor.calculate_magnetization([[IDX.SUM_ALL, IDX.SPIN]])
    m = mag([IDX.SUM_ALL, IDX.SPIN])
    assert np.trace(m).real == pytest.approx(3.0)
    np.testing.assert_allclose(m, m.conj().T, atol=1e-12)


@pytest.mark.parametrize("pattern", [[[0, 0]], [[0, IDX.ALL]], [[IDX.SPIN, IDX.SPIN]]])
def test_magnetization_requires_one_spin_marker(pattern):
    extractor = extractor_for(spin_chain(2))
    with pytest.raises(InvalidPatternError):
        extractor.calculate_magnetization(pattern)


def test_spin_polarized_ldos_completeness():
    extractor = extractor_for(spin_chain(3, h=0.3, b=0.2))
    sp = extractor.calculate_spin_polarized_ldos([[IDX.ALL, IDX.SPIN]])
    assert sp.block_shape == (601, 2, 2)
    for x in range(3):
        block = sp([x, IDX.SPIN])
        np.testing.assert_allclose(block.sum(axis=0) * sp.dE, np.eye(2), atol=1e-10)


def test_density_rejects_spin_marker():
    extractor = extractor_for(spin_chain(2))
    with pytest.raises(InvalidPatternError):
        extractor.calculate_density([[0, IDX.SPIN]])


# ----------------------------------
#! LDOS
# ----------------------------------


def test_ldos_sum_rule_and_total():
    extractor = extractor_for(chain(5))
    ldos = extractor.calculate_ldos([IDX.ALL])
    dos = extractor.calculate_dos()
    assert ldos.to_array().shape == (5, 601)
    for x in range(5):
        assert ldos([x]).sum() * ldos.dE == pytest.approx(1.0)
    np.testing.assert_allclose(ldos.to_array().sum(axis=0), dos.data, atol=1e-9)


def test_ldos_sum_all_equals_site_sum():
    extractor = extractor_for(chain(4))
    summed = extractor.calculate_ldos([[IDX.SUM_ALL]])
    sites = extractor.calculate_ldos([[IDX.ALL]])
    np.testing.assert_allclose(summed([IDX.SUM_ALL]), sites.to_array().sum(axis=0), atol=1e-9)


# ----------------------------------
#! Green's functions
# ----------------------------------


def test_greens_function_two_site():
    t, delta = 1.0, 0.05
    extractor = extractor_for(chain(2, t=t), energy_infinitesimal=delta)
    G = extractor.calculate_greens_function([[0], [IDX.ALL]])
    assert G.type is GreensFunctionType.RETARDED
    assert len(G) == 2

    E = G.energies
    expected_00 = 0.5 / (E + t + 1j * delta) + 0.5 / (E - t + 1j * delta)
    expected_01 = 0.5 / (E + t + 1j * delta) - 0.5 / (E - t + 1j * delta)
    np.testing.assert_allclose(G([0], [0]), expected_00, atol=1e-10)
    np.testing.assert_allclose(G([[0], [1]]), expected_01, atol=1e-10)


def test_greens_function_kinds():
    extractor = extractor_for(chain(3), energy_infinitesimal=0.02)
    patterns = [[[IDX.ALL], [IDX.ALL]]]
    ret = extractor.calculate_greens_function(patterns, "retarded")
    adv = extractor.calculate_greens_function(patterns, GreensFunctionType.ADVANCED)
    pri = extractor.calculate_greens_function(patterns, "principal")
    non = extractor.calculate_greens_function(patterns, "nonprincipal")

    for i in range(3):
        for j in range(3):
            np.testing.assert_allclose(adv([i], [j]), np.conj(ret([j], [i])), atol=1e-10)
            np.testing.assert_allclose(pri([i], [j]) + non([i], [j]), ret([i], [j]), atol=1e-10)


def test_greens_function_diagonal_spectral_weight():
    extractor = extractor_for(chain(4), energy_infinitesimal=0.05)
    G = extractor.calculate_greens_function([[1], [1]])
    assert np.all(G([1], [1]).imag < 0)


def test_greens_function_requires_compound_pattern():
    extractor = extractor_for(chain(2))
    with pytest.raises(InvalidPatternError):
        extractor.calculate_greens_function([0])
    with pytest.raises(InvalidArgumentError):
        extractor.calculate_greens_function([[0], [1]], kind="causal")


# ----------------------------------
#! Wave functions
# ----------------------------------


def test_wave_functions_all_states():
    extractor = extractor_for(chain(3))
    wf = extractor.calculate_wave_functions([IDX.ALL])
    assert wf.states == [0, 1, 2]
    for x in range(3):
        for n in range(3):
            assert wf([x], state=n) == pytest.approx(extractor.get_amplitude(n, [x]))


def test_wave_functions_selected_states():
    extractor = extractor_for(chain(3))
    wf = extractor.calculate_wave_functions([[1]], states=[2, 0])
    assert wf([1]).shape == (2,)
    assert wf([1], state=2) == pytest.approx(extractor.get_amplitude(2, [1]))
    with pytest.raises(NotFoundError):
        wf([1], state=1)


@pytest.mark.parametrize("states", [[3], [-1]])
def test_wave_functions_invalid_states(states):
    extractor = extractor_for(chain(3))
    with pytest.raises(OutOfRangeError):
        extractor.calculate_wave_functions([[0]], states=states)


# ----------------------------------
#! Scalars
# ----------------------------------


def test_expectation_value_two_site():
    extractor = extractor_for(chain(2))
    # ground state (1, 1)/sqrt(2) of the hopping -t
    assert extractor.calculate_expectation_value([0], [1]) == pytest.approx(0.5)
    assert extractor.calculate_expectation_value([0], [0]) == pytest.approx(0.5)
    with pytest.raises(NotFoundError):
        extractor.calculate_expectation_value([0], [4])


def test_entropy():
    assert extractor_for(chain(2)).calculate_entropy() == pytest.approx(0.0)
    warm = extractor_for(chain(4, temperature=0.7))
    expected = fermi_entropy(warm.solver.get_eigen_values(), 0.7, 0.0)
    assert warm.calculate_entropy() == pytest.approx(expected)


# ----------------------------------
#! Generic walk
# ----------------------------------


class CountingCallback(ExtractionCallback):
    ''' Counts the concrete indices that reach each block '''

    def __call__(self, extractor, buffer, index, offset):
        assert index.is_concrete
        buffer[offset] += 1.0


def test_generic_walk_expands_summations():
    extractor = extractor_for(spin_chain(3))
    buffer, descriptor = extractor.calculate(CountingCallback(), [[IDX.SUM_ALL, IDX.ALL], [0, IDX.SUM_ALL]])
    assert descriptor.size == 3
    assert buffer[descriptor.get_offset([IDX.SUM_ALL, 0])] == 3.0
    assert buffer[descriptor.get_offset([0, IDX.SUM_ALL])] == 2.0


def test_threaded_extraction_matches_serial():
    serial = extractor_for(spin_chain(5, h=0.2, b=0.3))
    threaded = extractor_for(spin_chain(5, h=0.2, b=0.3), threadnum=4)
    np.testing.assert_allclose(threaded.calculate_density([[IDX.ALL, IDX.ALL]]).data,
                               serial.calculate_density([[IDX.ALL, IDX.ALL]]).data)
    np.testing.assert_allclose(threaded.calculate_ldos([[IDX.ALL, IDX.SUM_ALL]]).data,
                               serial.calculate_ldos([[IDX.ALL, IDX.SUM_ALL]]).data)


def test_wrong_pattern_arity():
    extractor = extractor_for(chain(2))
    with pytest.raises(InvalidPatternError):
        extractor.calculate_density([[[0], [1]]])
    with pytest.raises(InvalidPatternError):
        extractor.calculate_density([["a"]])


def test_requires_solved_solver():
    solver = Diagonalizer()
    solver.set_model(chain(2))
    extractor = DiagonalizerExtractor(solver)
    with pytest.raises(InvalidStateError):
        extractor.calculate_dos()
    with pytest.raises(InvalidStateError):
        extractor.calculate_density([IDX.ALL])
    solver.run()
    assert extractor.calculate_density([IDX.ALL]).to_array().sum() == pytest.approx(1.0)


# ----------------------------------
#! Ranges format
# ----------------------------------


def square_lattice(nx, ny, t=1.0, h=0.3, b=0.2):
    ''' Spinful square lattice {x, y, s} with a Zeeman field and a local spin flip '''
    model = Model(temperature=0.1)
    for x in range(nx):
        for y in range(ny):
            model.add(-h, [x, y, 0], [x, y, 0])
            model.add(h, [x, y, 1], [x, y, 1])
            model.add_and_hermitian_conjugate(b, [x, y, 1], [x, y, 0])
            for s in (0, 1):
                if x + 1 < nx:
                    model.add_and_hermitian_conjugate(-t, [x + 1, y, s], [x, y, s])
                if y + 1 < ny:
                    model.add_and_hermitian_conjugate(-t, [x, y + 1, s], [x, y, s])
    model.construct()
    return model


@pytest.fixture(scope="module")
def lattice_extractor():
    return extractor_for(square_lattice(3, 4), lower_bound=-5.0, upper_bound=5.0, resolution=201)


def test_density_ranges_match_patterns(lattice_extractor):
    grid = lattice_extractor.calculate_density([IDX.ALL, IDX.ALL, IDX.SUM_ALL], ranges=[3, 4, 2])
    listed = lattice_extractor.calculate_density([[IDX.ALL, IDX.ALL, IDX.SUM_ALL]])
    assert grid.grid_shape == (3, 4)
    assert grid.keys() == listed.keys()
    dense = grid.to_grid()
    assert dense.shape == (3, 4)
    for x in range(3):
        for y in range(4):
            assert dense[x, y] == pytest.approx(listed([x, y, IDX.SUM_ALL]))


def test_ldos_ranges_match_patterns(lattice_extractor):
    grid = lattice_extractor.calculate_ldos([IDX.ALL, IDX.ALL, 0], ranges=[3, 4, 1])
    listed = lattice_extractor.calculate_ldos([[IDX.ALL, IDX.ALL, 0]])
    dense = grid.to_grid()
    assert dense.shape == (3, 4, 201)
    for x in range(3):
        for y in range(4):
            np.testing.assert_allclose(dense[x, y], listed([x, y, 0]), atol=1e-12)


def test_spin_resolved_ranges_match_patterns(lattice_extractor):
    mag = lattice_extractor.calculate_magnetization([IDX.ALL, IDX.ALL, IDX.SPIN], ranges=[3, 4, 2])
    listed = lattice_extractor.calculate_magnetization([[IDX.ALL, IDX.ALL, IDX.SPIN]])
    assert mag.to_grid().shape == (3, 4, 2, 2)
    np.testing.assert_allclose(mag.to_grid()[2, 1], listed([2, 1, IDX.SPIN]), atol=1e-12)

    sp = lattice_extractor.calculate_spin_polarized_ldos([IDX.ALL, 1, IDX.SPIN], ranges=[3, 1, 2])
    sp_listed = lattice_extractor.calculate_spin_polarized_ldos([[IDX.ALL, 1, IDX.SPIN]])
    assert sp.to_grid().shape == (3, 201, 2, 2)
    for x in range(3):
        np.testing.assert_allclose(sp.to_grid()[x], sp_listed([x, 1, IDX.SPIN]), atol=1e-12)


def test_ranges_cover_the_grid_not_the_basis(lattice_extractor):
    density = lattice_extractor.calculate_density([IDX.ALL, IDX.ALL, IDX.SUM_ALL], ranges=[4, 4, 2])
    inside = lattice_extractor.calculate_density([IDX.ALL, IDX.ALL, IDX.SUM_ALL], ranges=[3, 4, 2])
    dense = density.to_grid()
    assert dense.shape == (4, 4)
    np.testing.assert_allclose(dense[3], 0.0)
    np.testing.assert_allclose(dense[:3], inside.to_grid())

    # summation runs over the given range only
    partial = lattice_extractor.calculate_density([IDX.SUM_ALL, 0, 0], ranges=[2, 1, 1])
    sites = lattice_extractor.calculate_density([[IDX.ALL, 0, 0]])
    assert partial.grid_shape == ()
    assert partial.to_grid() == pytest.approx(sites([0, 0, 0]) + sites([1, 0, 0]))


@pytest.mark.parametrize("pattern, ranges, error", [
    ([IDX.ALL, IDX.ALL, IDX.SUM_ALL], [3, 4], InvalidPatternError),
    ([[0, 0, 0], [1, 0, 0]], [1, 1, 1], InvalidPatternError),
    ([IDX.ALL, IDX.ALL, IDX.SUM_ALL], [3, 0, 2], InvalidArgumentError),
    ([IDX.ALL, IDX.ALL, IDX.SUM_ALL], [3, 4.5, 2], InvalidArgumentError),
])
def test_invalid_ranges(lattice_extractor, pattern, ranges, error):
    with pytest.raises(error):
        lattice_extractor.calculate_density(pattern, ranges=ranges)


def test_ranges_spin_marker_and_grid_access(lattice_extractor):
    with pytest.raises(InvalidPatternError):
        lattice_extractor.calculate_magnetization([IDX.ALL, IDX.ALL, 0], ranges=[3, 4, 1])
    with pytest.raises(InvalidStateError):
        lattice_extractor.calculate_density([[IDX.ALL, IDX.ALL, 0]]).to_grid()


# ----------------------------------
#! Configuration
# ----------------------------------


@pytest.mark.parametrize("updates", [
    dict(lower_bound=1.0, upper_bound=-1.0),
    dict(upper_bound=float("inf")),
    dict(resolution=1),
    dict(resolution=10.5),
    dict(energy_infinitesimal=0.0),
    dict(broadening="gaussian", broadening_width=0.0),
    dict(broadening="voigt"),
    dict(threadnum=0),
])
def test_invalid_config(updates):
    with pytest.raises(InvalidArgumentError):
        ExtractorConfig(**updates).validate()


def test_extractor_setters():
    extractor = extractor_for(chain(2))
    original = extractor.config
    extractor.set_energy_window(-2.0, 2.0, 5)
    np.testing.assert_allclose(extractor.energies, [-2.0, -1.0, 0.0, 1.0, 2.0])
    assert original.resolution == 601

    extractor.set_broadening("lorentzian", 0.3)
    assert extractor.config.broadening is Broadening.LORENTZIAN
    assert extractor.config.broadening_width == 0.3
    extractor.set_energy_infinitesimal(1e-2)
    extractor.set_threadnum(2)
    assert extractor.config.to_kwargs()["threadnum"] == 2

    with pytest.raises(InvalidArgumentError):
        extractor.set_energy_window(1.0, 0.0, 10)
    assert extractor.resolution == 5


# ----------------------------------------------------------------------------------------------------
#! End of test_property_extractor.py
# ----------------------------------------------------------------------------------------------------
