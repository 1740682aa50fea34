import math

import pytest

from phasemap.phasespace import (
    chain_diagram,
    phase_space_random_dim,
    pi_factor,
    s_hat_min,
)
from phasemap.topology import LineType, Topology


def test_chain_diagram_masses():
    diagram = chain_diagram([0.5, 0.7, 1.0, 2.0, 3.0])
    assert diagram.incoming_masses == [0.5, 0.7]
    assert diagram.outgoing_masses == [1.0, 2.0, 3.0]


@pytest.mark.parametrize("n_out", [2, 3, 4, 6])
def test_chain_diagram_structure(n_out):
    diagram = chain_diagram([0.0] * (n_out + 2))
    assert len(diagram.vertices) == n_out
    assert len(diagram.propagators) == n_out - 1
    assert diagram.incoming_vertices == [0, n_out - 1]
    assert diagram.outgoing_vertices == list(range(n_out))
    assert all(len(ends) == 2 for ends in diagram.propagator_vertices)


def test_chain_diagram_first_vertex():
    diagram = chain_diagram([0.0] * 5)
    first = diagram.vertices[0]
    assert [line.type for line in first] == [
        LineType.INCOMING,
        LineType.PROPAGATOR,
        LineType.OUTGOING,
    ]


@pytest.mark.parametrize("n_out", [2, 3, 5])
def test_chain_diagram_topology_is_t_channel(n_out):
    topology = Topology(chain_diagram([0.0] * (n_out + 2)))
    assert topology.t_propagator_count() == n_out - 1
    assert len(topology.decays) == n_out + 1
    assert sorted(topology.outgoing_indices) == list(range(1, n_out + 1))


def test_chain_diagram_too_few_masses():
    with pytest.raises(ValueError):
        chain_diagram([0.0, 0.0, 1.0])


def test_random_dim_two_to_two_leptonic():
    assert phase_space_random_dim(2, True) == 2


@pytest.mark.parametrize("n_out", [2, 3, 5, 8])
def test_random_dim_hadronic_adds_two(n_out):
    assert phase_space_random_dim(n_out, False) - phase_space_random_dim(n_out, True) == 2


@pytest.mark.parametrize("n_out", [2, 3, 5])
def test_random_dim_grows_by_three(n_out):
    assert phase_space_random_dim(n_out + 1, False) - phase_space_random_dim(n_out, False) == 3


def test_random_dim_rejects_single_particle():
    with pytest.raises(ValueError):
        phase_space_random_dim(1, True)


def test_pi_factor_one_particle():
    assert pi_factor(1) == pytest.approx(2 * math.pi)


@pytest.mark.parametrize("n_out", [2, 3, 4])
def test_pi_factor_ratio(n_out):
    assert pi_factor(n_out + 1) / pi_factor(n_out) == pytest.approx((2 * math.pi) ** -3)


def test_s_hat_min_from_cut():
    assert s_hat_min([1.0, 2.0], 10.0) == pytest.approx(10.0**2)


def test_s_hat_min_from_masses():
    masses = [1.0, 2.0, 0.5]
    assert s_hat_min(masses, 0.0) == pytest.approx(sum(masses) ** 2)


def test_s_hat_min_is_at_least_both_bounds():
    value = s_hat_min([3.0, 4.0], 5.0)
    assert value >= (3.0 + 4.0) ** 2
    assert value >= 5.0**2