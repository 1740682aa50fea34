# phasemap

Building blocks for setting up collider phase-space sampling, written on top
of NumPy. The cut functions work on whole batches at once: the leading array
axes are the batch, the next axis lists the particles (the two incoming ones
first), and four-momenta are stored as `(E, px, py, pz)`.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `phasemap.cut_kernels`: batched cut weights that return 1 where an event
  passes and 0 where it fails. They are `cut_pt`, `cut_eta`, `cut_dr`,
  `cut_m_inv`, `cut_sqrt_s` and `cut_unphysical`. The last one zeroes events
  with NaNs or momentum fractions outside [0, 1]. The module also has the
  pseudorapidity helper `eta`, which returns 99 for a vanishing
  three-momentum. Cut limits and pair indices refer to the outgoing particles
  only.
- `phasemap.cuts`: `Cuts` applies a list of `CutItem` entries to the outgoing
  particles. Each entry names a `CutObservable` (`PT`, `ETA`, `DR`, `MASS`,
  `SQRT_S`), a `LimitType` (`MIN`, `MAX`), a value and a set of particle ids.
  `Cuts` offers the following:
  - the per-particle limits `pt_min()`, `eta_max()` and the general
    `limits(...)`;
  - the largest lower bound on the partonic energy, `sqrt_s_min()`;
  - the limit tables for the kernels, `parameters()`, returned as a
    `CutParameters`;
  - the combined weight for a batch, `evaluate(sqrt_s, momenta)`.

  Ready-made id groups are `Cuts.JET_PIDS`, `Cuts.BOTTOM_PIDS`,
  `Cuts.LEPTON_PIDS`, `Cuts.MISSING_PIDS` and `Cuts.PHOTON_PIDS`.
- `phasemap.topology`: diagrams and their sampling structure.
  - `Diagram` describes a diagram as vertices made of `LineRef` entries. A
    `LineRef` can be parsed from text such as `i0`, `o2` or `p1`, and
    `Propagator` gives the mass, width and integration order of a line.
  - `Topology` splits a diagram into its t-channel part and the s-channel
    `Decay` trees. It also works out the t-channel and decay integration
    orders, and gives each propagator as external-momentum factors together
    with its mass and width (`propagator_momentum_terms()`).
  - `t_sample_sides` checks a t-channel integration order and says from which
    side each step is sampled.
- `phasemap.channel_weights`: `PropagatorChannelWeights` builds the propagator
  tables for channel weighting from topologies and their permutations. These
  are the distinct momentum factors, plus per-channel invariant indices,
  masses and widths padded to a common length.
- `phasemap.phasespace`:
  - `chain_diagram(masses)` builds a t-channel chain diagram from the external
    masses.
  - `phase_space_random_dim` gives the number of random numbers per point.
  - `pi_factor` gives the (2π)^(4−3n) measure factor.
  - `s_hat_min` gives the lower bound on the partonic s.
- `phasemap.pdf`: grid tables for interpolation.
  - `PdfGrid` reads LHAPDF `lhagrid1`-style grids (`parse`, `load`) and
    builds the padded `logx_table()` and `logq2_table()` and the bicubic
    `coefficients()`. `pid_indices` looks up particle ids in the grid.
  - `AlphaSGrid` reads the `AlphaS_Qs` / `AlphaS_Vals` lists of an info file
    and builds the padded log Q² nodes and the cubic Hermite coefficients.

## Examples

```python
import numpy as np
from phasemap.cuts import Cuts, CutItem, CutObservable, LimitType

cuts = Cuts(
    pids=[21, 21],
    cut_data=[CutItem(CutObservable.PT, LimitType.MIN, 20.0, Cuts.JET_PIDS)],
)
print(cuts.pt_min())          # [20.0, 20.0]

momenta = np.zeros((1, 4, 4))  # one event: two incoming, two outgoing
momenta[0, 2] = [50.0, 30.0, 0.0, 10.0]
momenta[0, 3] = [50.0, -30.0, 0.0, -10.0]
print(cuts.evaluate(np.array([100.0]), momenta))  # [1.]
```

```python
from phasemap.phasespace import chain_diagram
from phasemap.topology import Topology

topology = Topology(chain_diagram([0.0, 0.0, 0.0, 0.0, 0.0]))
print(topology.t_propagator_count())
for factors, mass, width in topology.propagator_momentum_terms():
    print(factors, mass, width)
```

```python
from phasemap.pdf import PdfGrid

grid = PdfGrid.load("pdf_grid_0000.dat")
coeffs = grid.coefficients()
print(coeffs.shape == grid.coefficients_shape())
```

## What this package does not do

Everything here prepares data. The package computes cut weights, topology
information and interpolation tables, but it does not do the sampling
itself:

- It does not turn random numbers into momenta.
- It does not sample invariant masses.
- It does not evaluate PDFs or alpha_s at a given point. `PdfGrid` and
  `AlphaSGrid` only produce the coefficient tables.
- It does not run an adaptive (VEGAS or neural) optimisation.
- It has no command-line program.