"""Channel weights built from the propagators of each integration channel."""

from __future__ import annotations

from typing import Sequence


class PropagatorChannelWeights:
    """Propagator tables for weighting channels by their propagator denominators.

    Every channel is a topology with one of its permutations of the external
    particles. The distinct propagator momenta over all channels are kept in
    ``momentum_factors``; ``invariant_indices[channel]`` points into it, and
    ``masses`` and ``widths`` hold the matching propagator parameters. All
    channels are padded to the largest propagator count, with index -1 and
    mass and width 0.
    """

    def __init__(
        self,
        topologies: Sequence,
        permutations: Sequence[Sequence[Sequence[int]]],
        channel_indices: Sequence[Sequence[int]],
    ):
        topologies = list(topologies)
        permutations = [[list(perm) for perm in perms] for perms in permutations]
        if not topologies:
            raise ValueError("at least one topology is required")
        self.particle_count = len(topologies[0].outgoing_masses) + 2

        channel_count = sum(len(perms) for perms in permutations)
        self.invariant_indices: list = [[] for _ in range(channel_count)]
        self.masses: list = [[] for _ in range(channel_count)]
        self.widths: list = [[] for _ in range(channel_count)]
        self.momentum_factors: list = []

        found: dict = {}
        max_propagator_count = 0
        for topology, chan_perms, indices in zip(topologies, permutations, channel_indices):
            terms = topology.propagator_momentum_terms()
            max_propagator_count = max(max_propagator_count, len(terms))
            for perm, index in zip(chan_perms, indices):
                if not 0 <= index < channel_count:
                    raise IndexError(f"channel index {index} out of range")
                for factors, mass, width in terms:
                    if any(i < 0 for i in perm):
                        raise IndexError("permutation indices must not be negative")
                    permuted = tuple(factors[i] for i in perm)
                    inv_index = found.get(permuted)
                    if inv_index is None:
                        inv_index = len(self.momentum_factors)
                        self.momentum_factors.append(permuted)
                        found[permuted] = inv_index
                    self.masses[index].append(mass)
                    self.widths[index].append(width)
                    self.invariant_indices[index].append(inv_index)

        for masses, widths, invariants in zip(
            self.masses, self.widths, self.invariant_indices
        ):
            missing = max_propagator_count - len(invariants)
            masses.extend([0.0] * missing)
            widths.extend([0.0] * missing)
            invariants.extend([-1] * missing)

    def channel_count(self) -> int:
        """Number of channels, one per permutation of every topology."""
        return len(self.invariant_indices)