import pytest

from phasemap.channel_weights import PropagatorChannelWeights
from phasemap.topology import Diagram, LineRef, Propagator, Topology


def refs(*texts):
    return [LineRef.parse(t) for t in texts]


def chain_topology(n_out, masses=None):
    vertices = [refs("i0", "p0", "o0")]
    for i in range(1, n_out - 1):
        vertices.append(refs(f"p{i - 1}", f"p{i}", f"o{i}"))
    vertices.append(refs("i1", f"p{n_out - 2}", f"o{n_out - 1}"))
    masses = masses or [0.0] * (n_out - 1)
    propagators = [Propagator(m, 0.1 * (i + 1)) for i, m in enumerate(masses)]
    return Topology(Diagram([0.0, 0.0], [0.0] * n_out, propagators, vertices))


def s_channel_topology():
    return Topology(
        Diagram(
            [0.0, 0.0],
            [0.0, 0.0],
            [Propagator(91.19, 2.5)],
            [refs("i0", "i1", "p0"), refs("p0", "o0", "o1")],
        )
    )


def channel_factors(weights, channel):
    return [
        weights.momentum_factors[i]
        for i in weights.invariant_indices[channel]
        if i >= 0
    ]


def test_single_channel():
    topology = chain_topology(3, [30.0, 40.0])
    weights = PropagatorChannelWeights([topology], [[[0, 1, 2, 3, 4]]], [[0]])
    terms = topology.propagator_momentum_terms()
    assert weights.channel_count() == 1
    assert weights.particle_count == 5
    assert weights.momentum_factors == [tuple(f) for f, _, _ in terms]
    assert weights.masses == [[m for _, m, _ in terms]]
    assert weights.widths == [[w for _, _, w in terms]]


def test_identical_channels_share_invariants():
    topology = chain_topology(3)
    identity = [0, 1, 2, 3, 4]
    weights = PropagatorChannelWeights([topology], [[identity, identity]], [[0, 1]])
    assert weights.channel_count() == 2
    assert len(weights.momentum_factors) == len(topology.propagator_momentum_terms())
    assert weights.invariant_indices[0] == weights.invariant_indices[1]


def test_permuted_channel_factors():
    topology = chain_topology(3)
    perm = [0, 1, 4, 3, 2]
    weights = PropagatorChannelWeights(
        [topology], [[[0, 1, 2, 3, 4], perm]], [[0, 1]]
    )
    terms = topology.propagator_momentum_terms()
    expected = [tuple(f[i] for i in perm) for f, _, _ in terms]
    assert channel_factors(weights, 1) == expected
    assert channel_factors(weights, 0) == [tuple(f) for f, _, _ in terms]
    assert len(set(weights.momentum_factors)) == len(weights.momentum_factors)


def test_channel_indices_place_channels():
    topology = chain_topology(3)
    perm = [0, 1, 4, 3, 2]
    weights = PropagatorChannelWeights(
        [topology], [[[0, 1, 2, 3, 4], perm]], [[1, 0]]
    )
    terms = topology.propagator_momentum_terms()
    assert channel_factors(weights, 0) == [tuple(f[i] for i in perm) for f, _, _ in terms]
    assert channel_factors(weights, 1) == [tuple(f) for f, _, _ in terms]


def test_padding_for_shorter_channels():
    long_topology = chain_topology(3, [30.0, 40.0])
    short_topology = s_channel_topology()
    weights = PropagatorChannelWeights(
        [long_topology, short_topology],
        [[[0, 1, 2, 3, 4]], [[0, 1, 2, 3]]],
        [[0], [1]],
    )
    assert weights.channel_count() == 2
    assert all(len(row) == 2 for row in weights.invariant_indices)
    assert weights.invariant_indices[1][1] == -1
    assert weights.masses[1] == [91.19, 0.0]
    assert weights.widths[1] == [2.5, 0.0]
    assert -1 not in weights.invariant_indices[0]


def test_channel_index_out_of_range():
    topology = chain_topology(3)
    with pytest.raises(IndexError):
        PropagatorChannelWeights([topology], [[[0, 1, 2, 3, 4]]], [[1]])


def test_no_topologies():
    with pytest.raises(ValueError):
        PropagatorChannelWeights([], [], [])