"""Feynman-diagram topologies and the decay trees used for phase-space sampling.

A :class:`Diagram` is given as a list of vertices, each a list of references
to incoming lines, outgoing lines and propagators. A :class:`Topology`
splits it into a t-channel part, which connects the two incoming particles,
and s-channel decay trees hanging off it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

_INDEX_RE = re.compile(r"\s*\+?(\d+)")


class LineType(Enum):
    INCOMING = "i"
    OUTGOING = "o"
    PROPAGATOR = "p"


@dataclass(frozen=True)
class LineRef:
    """Reference to a line of a diagram, written as e.g. ``i0``, ``o2`` or ``p1``."""

    type: LineType
    index: int

    def __post_init__(self):
        if self.index < 0:
            raise ValueError("Invalid line index")

    @classmethod
    def parse(cls, text):
        """Parse a line reference from its text form."""
        if len(text) < 2:
            raise ValueError("Invalid line index")
        try:
            line_type = LineType(text[0])
        except ValueError:
            raise ValueError("Invalid line type") from None
        match = _INDEX_RE.match(text, 1)
        if match is None:
            raise ValueError("Invalid line index")
        return cls(line_type, int(match.group(1)))

    def __str__(self):
        return f"{self.type.value}{self.index}"


@dataclass(frozen=True)
class Propagator:
    """An internal line with its mass, width and integration priority."""

    mass: float = 0.0
    width: float = 0.0
    integration_order: int = 0


class Diagram:
    """A tree-level diagram with two incoming and at least two outgoing particles."""

    def __init__(
        self,
        incoming_masses: Sequence[float],
        outgoing_masses: Sequence[float],
        propagators: Sequence[Propagator],
        vertices: Sequence[Sequence[LineRef]],
    ):
        self.incoming_masses = list(incoming_masses)
        self.outgoing_masses = list(outgoing_masses)
        self.propagators = list(propagators)
        self.vertices = [list(vertex) for vertex in vertices]
        if len(self.incoming_masses) != 2:
            raise ValueError("Diagram must have two incoming particles")
        if len(self.outgoing_masses) < 2:
            raise ValueError("Diagram must have at least two outgoing particles")

        self.incoming_vertices = [-1, -1]
        self.outgoing_vertices = [-1] * len(self.outgoing_masses)
        self.propagator_vertices: list = [[] for _ in self.propagators]
        for index, vertex in enumerate(self.vertices):
            for line in vertex:
                if line.type is LineType.INCOMING:
                    self.incoming_vertices[line.index] = index
                elif line.type is LineType.OUTGOING:
                    self.outgoing_vertices[line.index] = index
                else:
                    self.propagator_vertices[line.index].append(index)

    def other_vertex(self, propagator_index: int, vertex_index: int) -> int:
        """The vertex at the other end of a propagator."""
        ends = self.propagator_vertices[propagator_index]
        return ends[1] if ends[0] == vertex_index else ends[0]


@dataclass
class Decay:
    """A node of a decay tree: a propagator or an outgoing particle."""

    index: int
    parent_index: int
    child_indices: list = field(default_factory=list)
    mass: float = 0.0
    width: float = 0.0


@dataclass
class _TSearch:
    visited: list
    t_vertices: list = field(default_factory=list)
    lines_after_t: list = field(default_factory=list)
    integration_order: list = field(default_factory=list)
    masses: list = field(default_factory=list)
    widths: list = field(default_factory=list)


def _find_t_vertices(
    diagram: Diagram, search: _TSearch, current_index: int, source_propagator: int
) -> bool:
    if search.visited[current_index]:
        raise ValueError("Diagram must not have loops")
    search.visited[current_index] = True

    is_t_vertex = False
    t_integ_order = 0
    out_lines = []
    for line in diagram.vertices[current_index]:
        if line.type is LineType.INCOMING:
            if line.index == 0:
                is_t_vertex = True
        elif line.type is LineType.OUTGOING:
            out_lines.append(line)
        elif line.index != source_propagator:
            next_vertex = diagram.other_vertex(line.index, current_index)
            if _find_t_vertices(diagram, search, next_vertex, line.index):
                is_t_vertex = True
                propagator = diagram.propagators[line.index]
                t_integ_order = propagator.integration_order
                search.masses.append(propagator.mass)
                search.widths.append(propagator.width)
            else:
                out_lines.append(line)

    if is_t_vertex:
        search.lines_after_t.extend(out_lines)
        search.t_vertices.extend([current_index] * len(out_lines))
        search.integration_order.extend([t_integ_order] * len(out_lines))
    return is_t_vertex


def _build_decays(
    diagram: Diagram,
    decays: list,
    decay_indices: list,
    integration_order: list,
    outgoing_indices: list,
    vertex_index: int,
    line: LineRef,
    parent_index: int,
) -> None:
    decay_index = len(decays)
    if line.type is LineType.OUTGOING:
        decays.append(
            Decay(decay_index, parent_index, [], diagram.outgoing_masses[line.index], 0.0)
        )
        outgoing_indices[line.index] = decay_index
    elif line.type is LineType.PROPAGATOR:
        propagator = diagram.propagators[line.index]
        decays.append(
            Decay(decay_index, parent_index, [], propagator.mass, propagator.width)
        )
        decay_indices.append(decay_index)
        integration_order.append(propagator.integration_order)

        next_vertex = diagram.other_vertex(line.index, vertex_index)
        for child_line in diagram.vertices[next_vertex]:
            if child_line == line:
                continue
            decays[decay_index].child_indices.append(len(decays))
            _build_decays(
                diagram,
                decays,
                decay_indices,
                integration_order,
                outgoing_indices,
                next_vertex,
                child_line,
                decay_index,
            )
    else:
        raise ValueError("an incoming line cannot be part of a decay tree")


class Topology:
    """The t-channel part and the s-channel decay trees of a diagram.

    ``decays[0]`` is the root: the s-channel propagator of a pure s-channel
    diagram, or a placeholder whose children are the lines leaving the
    t-channel part.
    """

    def __init__(self, diagram: Diagram):
        self.incoming_masses = list(diagram.incoming_masses)
        self.outgoing_masses = list(diagram.outgoing_masses)
        self.outgoing_indices = [0] * len(self.outgoing_masses)
        self.decays: list = []
        self.t_integration_order: list = []
        self.decay_integration_order: list = []

        start_vertex = diagram.incoming_vertices[1]
        if start_vertex < 0:
            raise ValueError("Diagram has no vertex for the second incoming particle")
        search = _TSearch(visited=[False] * len(diagram.vertices))
        _find_t_vertices(diagram, search, start_vertex, -1)
        if not search.lines_after_t:
            raise ValueError("Diagram does not connect the incoming particles")
        self.t_propagator_masses = search.masses
        self.t_propagator_widths = search.widths

        # sort by integration order and propagator mass, keeping the order possible
        order = search.integration_order
        masses = search.masses
        choose_low = False
        index_low, index_high = 0, len(order) - 1
        while index_low != index_high:
            order_low, order_high = order[index_low], order[index_high - 1]
            mass_low, mass_high = masses[index_low], masses[index_high - 1]
            if order_low != order_high:
                choose_low = order_low < order_high
            elif mass_low != mass_high:
                choose_low = mass_low < mass_high
            if choose_low:
                self.t_integration_order.append(index_low)
                index_low += 1
            else:
                self.t_integration_order.append(index_high - 1)
                index_high -= 1

        decay_indices: list = []
        decay_order: list = []
        if len(search.lines_after_t) == 1:
            _build_decays(
                diagram,
                self.decays,
                decay_indices,
                decay_order,
                self.outgoing_indices,
                search.t_vertices[0],
                search.lines_after_t[0],
                0,
            )
        else:
            self.decays.append(Decay(0, 0, [], 0.0, 0.0))
            for t_vertex, line in zip(search.t_vertices, search.lines_after_t):
                self.decays[0].child_indices.append(len(self.decays))
                _build_decays(
                    diagram,
                    self.decays,
                    decay_indices,
                    decay_order,
                    self.outgoing_indices,
                    t_vertex,
                    line,
                    0,
                )

        perm = sorted(reversed(range(len(decay_order))), key=lambda i: decay_order[i])
        self.decay_integration_order = [decay_indices[i] for i in perm]

    def t_propagator_count(self) -> int:
        """Number of propagators in the t-channel part."""
        return len(self.t_propagator_masses)

    def propagator_momentum_terms(self) -> list:
        """Each propagator as ``(factors, mass, width)``.

        ``factors`` has one entry per external particle (incoming first); the
        propagator momentum is the sum of the external momenta weighted by them.
        """
        terms = []
        decay_externals: list = [[] for _ in self.decays]
        n_ext = len(self.outgoing_masses) + 2
        for ext_index, index in enumerate(self.outgoing_indices, start=2):
            decay_externals[index].append(ext_index)

        for decay in reversed(self.decays):
            if decay.index == 0:
                if not self.t_integration_order:
                    factors = [0] * n_ext
                    factors[0] = 1
                    factors[1] = 1
                    terms.append((factors, decay.mass, decay.width))
            elif decay.child_indices:
                externals = decay_externals[decay.index]
                for child in decay.child_indices:
                    externals.extend(decay_externals[child])
                factors = [0] * n_ext
                for ext_index in externals:
                    factors[ext_index] = 1
                terms.append((factors, decay.mass, decay.width))

        if self.t_integration_order:
            child_indices = self.decays[0].child_indices
            left_count = right_count = 0
            for child in child_indices:
                count = len(decay_externals[child])
                if left_count == 0:
                    left_count = count
                else:
                    right_count += count
            for child_count, (child, mass, width) in enumerate(
                zip(child_indices[1:], self.t_propagator_masses, self.t_propagator_widths),
                start=1,
            ):
                count = len(decay_externals[child])
                factors = [0] * n_ext
                if left_count <= right_count:
                    factors[0] = 1
                    subtracted = child_indices[:child_count]
                else:
                    factors[1] = 1
                    subtracted = child_indices[child_count:]
                for sub_child in subtracted:
                    for ext_index in decay_externals[sub_child]:
                        factors[ext_index] = -1
                terms.append((factors, mass, width))
                left_count += count
                right_count -= count
        return terms


def t_sample_sides(integration_order):
    """For each t-channel step, whether it is sampled from the high side.

    Every step must take the lowest or highest index not yet used.
    """
    sides = []
    next_low, next_high = 0, len(integration_order) - 1
    for index in integration_order:
        if index == next_high:
            sides.append(True)
            next_high -= 1
        elif index == next_low:
            sides.append(False)
            next_low += 1
        else:
            raise ValueError("Invalid integration order")
    return sides