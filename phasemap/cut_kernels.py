"""Batched cut kernels acting on arrays of four-momenta.

Momenta arrays have shape ``(..., n_particles, 4)`` with components
``(E, px, py, pz)``. The first two particles are the incoming ones; cut
limits and particle indices refer to the outgoing particles only.
"""

from __future__ import annotations

import numpy as np

EPS = 1e-12
ETA_UNDEFINED = 99.0


def _limits(min_max) -> np.ndarray:
    return np.asarray(min_max, dtype=float).reshape(-1, 2)


def _phi(p: np.ndarray) -> np.ndarray:
    return np.arctan2(p[..., 2], p[..., 1])


def eta(p):
    """Pseudorapidity of momenta ``p``; 99 for vanishing three-momentum."""
    p = np.asarray(p, dtype=float)
    px, py, pz = p[..., 1], p[..., 2], p[..., 3]
    p_mag = np.sqrt(px * px + py * py + pz * pz)
    with np.errstate(divide="ignore", invalid="ignore"):
        value = 0.5 * np.log((p_mag + pz) / (p_mag - pz))
    return np.where(p_mag < EPS, ETA_UNDEFINED, value)


def cut_unphysical(w_in, p, x1, x2):
    """Zero the weight of events with NaNs or momentum fractions outside [0, 1]."""
    w = np.asarray(w_in, dtype=float)
    p = np.asarray(p, dtype=float)
    x1 = np.asarray(x1, dtype=float)
    x2 = np.asarray(x2, dtype=float)
    w = np.where(np.isnan(w), 0.0, w)
    w = np.where(np.isnan(p).any(axis=(-2, -1)), 0.0, w)
    bad_x = (
        (x1 < 0.0) | (x1 > 1.0) | np.isnan(x1)
        | (x2 < 0.0) | (x2 > 1.0) | np.isnan(x2)
    )
    return np.where(bad_x, 0.0, w)


def cut_pt(p, min_max):
    """Weight 1 where every outgoing transverse momentum is within its limits."""
    p = np.asarray(p, dtype=float)
    limits = _limits(min_max)
    n = len(limits)
    outgoing = p[..., 2:2 + n, :]
    pt2 = outgoing[..., 1] ** 2 + outgoing[..., 2] ** 2
    lo, hi = limits[:, 0], limits[:, 1]
    fail = (pt2 < lo * lo) | (pt2 > hi * hi)
    return np.where(fail.any(axis=-1), 0.0, 1.0)


def cut_eta(p, min_max):
    """Weight 1 where every outgoing |eta| is within its limits."""
    p = np.asarray(p, dtype=float)
    limits = _limits(min_max)
    n = len(limits)
    abs_eta = np.abs(eta(p[..., 2:2 + n, :]))
    fail = (abs_eta < limits[:, 0]) | (abs_eta > limits[:, 1])
    return np.where(fail.any(axis=-1), 0.0, 1.0)


def cut_dr(p, indices, min_max):
    """Weight 1 where the Delta-R of every listed particle pair is within limits."""
    p = np.asarray(p, dtype=float)
    pairs = np.asarray(indices, dtype=np.int64).reshape(-1, 2)
    limits = _limits(min_max)
    p1 = p[..., pairs[:, 0] + 2, :]
    p2 = p[..., pairs[:, 1] + 2, :]
    delta_eta = eta(p1) - eta(p2)
    delta_phi = _phi(p1) - _phi(p2)
    delta_phi = np.where(delta_phi >= np.pi, delta_phi - 2 * np.pi, delta_phi)
    delta_phi = np.where(delta_phi < -np.pi, delta_phi + 2 * np.pi, delta_phi)
    dr2 = delta_eta * delta_eta + delta_phi * delta_phi
    lo, hi = limits[:, 0], limits[:, 1]
    fail = (dr2 < lo * lo) | (dr2 > hi * hi)
    return np.where(fail.any(axis=-1), 0.0, 1.0)


def cut_m_inv(p, indices, min_max):
    """Weight 1 where the invariant mass of every listed particle group is within limits."""
    p = np.asarray(p, dtype=float)
    groups = np.asarray(indices, dtype=np.int64)
    if groups.ndim == 1:
        groups = groups.reshape(-1, 2)
    limits = _limits(min_max)
    total = p[..., groups + 2, :].sum(axis=-2)
    m2 = total[..., 0] ** 2 - total[..., 1] ** 2 - total[..., 2] ** 2 - total[..., 3] ** 2
    m_inv = np.sqrt(np.where(m2 < 0.0, 0.0, m2))
    fail = (m_inv < limits[:, 0]) | (m_inv > limits[:, 1])
    return np.where(fail.any(axis=-1), 0.0, 1.0)


def cut_sqrt_s(sqrt_s, min_max):
    """Weight 1 where the partonic centre-of-mass energy is within limits."""
    sqrt_s = np.asarray(sqrt_s, dtype=float)
    lo, hi = np.asarray(min_max, dtype=float).reshape(2)
    return np.where((sqrt_s < lo) | (sqrt_s > hi), 0.0, 1.0)