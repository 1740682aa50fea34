"""Building blocks of the phase-space mapping: default diagrams and dimensions."""

from __future__ import annotations

import math
from typing import Sequence

from .topology import Diagram, LineRef, LineType, Propagator


def chain_diagram(external_masses: Sequence[float]) -> Diagram:
    """A t-channel chain diagram for the given masses, incoming masses first.

    Outgoing particle ``i`` is emitted from vertex ``i``. Consecutive
    vertices are joined by massless propagators, and the two incoming
    particles attach to the first and the last vertex.
    """
    masses = [float(m) for m in external_masses]
    if len(masses) < 4:
        raise ValueError("The number of masses must be at least 4")
    n_out = len(masses) - 2

    def ref(line_type: LineType, index: int) -> LineRef:
        return LineRef(line_type, index)

    vertices = [
        [ref(LineType.INCOMING, 0), ref(LineType.PROPAGATOR, 0), ref(LineType.OUTGOING, 0)]
    ]
    vertices.extend(
        [
            ref(LineType.PROPAGATOR, i - 1),
            ref(LineType.PROPAGATOR, i),
            ref(LineType.OUTGOING, i),
        ]
        for i in range(1, n_out - 1)
    )
    vertices.append(
        [
            ref(LineType.INCOMING, 1),
            ref(LineType.PROPAGATOR, n_out - 2),
            ref(LineType.OUTGOING, n_out - 1),
        ]
    )
    return Diagram(
        masses[:2],
        masses[2:],
        [Propagator() for _ in range(n_out - 1)],
        vertices,
    )


def phase_space_random_dim(outgoing_count: int, leptonic: bool) -> int:
    """Number of random numbers needed to sample one phase-space point.

    Hadronic collisions need two more for the momentum fractions.
    """
    outgoing_count = int(outgoing_count)
    if outgoing_count < 2:
        raise ValueError("at least two outgoing particles are required")
    return 3 * outgoing_count - (4 if leptonic else 2)


def pi_factor(outgoing_count: int) -> float:
    """The factor (2 pi)^(4 - 3 n) of the n-particle phase-space measure."""
    return math.pow(2 * math.pi, 4 - 3 * int(outgoing_count))


def s_hat_min(outgoing_masses: Sequence[float], sqrt_s_min: float) -> float:
    """Lower bound on the partonic s from the final-state masses and a sqrt(s) cut."""
    total_mass = math.fsum(float(m) for m in outgoing_masses)
    sqrt_s_min = float(sqrt_s_min)
    return max(total_mass * total_mass, sqrt_s_min * sqrt_s_min)