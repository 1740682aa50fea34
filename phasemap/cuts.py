"""Phase-space cuts on outgoing particles, selected by particle id."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from itertools import combinations
from typing import Optional, Sequence

import numpy as np

from . import cut_kernels

INF = math.inf


class CutObservable(Enum):
    PT = "pt"
    ETA = "eta"
    DR = "dr"
    MASS = "mass"
    SQRT_S = "sqrt_s"


class LimitType(Enum):
    MIN = "min"
    MAX = "max"


@dataclass(frozen=True)
class CutItem:
    """A single cut: an observable bounded from below or above for some pids."""

    observable: CutObservable
    limit_type: LimitType
    value: float
    pids: tuple = ()

    def __post_init__(self):
        object.__setattr__(self, "pids", tuple(self.pids))


@dataclass
class CutParameters:
    """Limit tables for the cut kernels; ``None`` where no cut applies."""

    pt: Optional[np.ndarray] = None
    eta: Optional[np.ndarray] = None
    dr_indices: Optional[np.ndarray] = None
    dr_limits: Optional[np.ndarray] = None
    mass_indices: Optional[np.ndarray] = None
    mass_limits: Optional[np.ndarray] = None
    sqrt_s: Optional[np.ndarray] = None


def _tighten(bounds: tuple, limit_type: LimitType, value: float) -> tuple:
    lo, hi = bounds
    if limit_type is LimitType.MIN:
        return (max(lo, value), hi)
    return (lo, min(hi, value))


@dataclass
class Cuts:
    """Cuts applied to the outgoing particles with the given pids."""

    pids: Sequence[int]
    cut_data: Sequence[CutItem] = field(default_factory=tuple)

    JET_PIDS = (1, 2, 3, 4, -1, -2, -3, -4, 21)
    BOTTOM_PIDS = (-5, 5)
    LEPTON_PIDS = (11, 13, 15, -11, -13, -15)
    MISSING_PIDS = (12, 14, 16, -12, -14, -16)
    PHOTON_PIDS = (22,)

    def __post_init__(self):
        self.pids = tuple(self.pids)
        self.cut_data = tuple(self.cut_data)

    def sqrt_s_min(self) -> float:
        """Largest lower bound on the partonic centre-of-mass energy."""
        return max(
            (
                cut.value
                for cut in self.cut_data
                if cut.observable is CutObservable.SQRT_S
                and cut.limit_type is LimitType.MIN
            ),
            default=0.0,
        ) if any(
            cut.observable is CutObservable.SQRT_S and cut.limit_type is LimitType.MIN
            and cut.value > 0.0
            for cut in self.cut_data
        ) else 0.0

    def eta_max(self) -> list:
        """Per-particle upper bound on |eta|."""
        return self.limits(CutObservable.ETA, LimitType.MAX, INF)

    def pt_min(self) -> list:
        """Per-particle lower bound on the transverse momentum."""
        return self.limits(CutObservable.PT, LimitType.MIN, 0.0)

    def limits(self, observable, limit_type, default_value) -> list:
        """Tightest per-particle limit of one kind, or ``default_value``."""
        result = [default_value] * len(self.pids)
        for cut in self.cut_data:
            if cut.observable is not observable or cut.limit_type is not limit_type:
                continue
            for i, pid in enumerate(self.pids):
                if pid not in cut.pids:
                    continue
                if limit_type is LimitType.MAX and result[i] > cut.value:
                    result[i] = cut.value
                elif limit_type is LimitType.MIN and result[i] < cut.value:
                    result[i] = cut.value
        return result

    def _single(self, cut: CutItem, rows: list) -> bool:
        hit = False
        for i, pid in enumerate(self.pids):
            if pid in cut.pids:
                rows[i] = _tighten(rows[i], cut.limit_type, cut.value)
                hit = True
        return hit

    def _pairs(self, cut: CutItem, indices: list, limits: list) -> bool:
        hit = False
        for i, j in combinations(range(len(self.pids)), 2):
            if self.pids[i] in cut.pids and self.pids[j] in cut.pids:
                indices.append((i, j))
                if cut.limit_type is LimitType.MIN:
                    limits.append((cut.value, INF))
                else:
                    limits.append((0.0, cut.value))
                hit = True
        return hit

    def parameters(self) -> CutParameters:
        """Collect all cuts into limit tables for the kernels."""
        pt_rows = [(0.0, INF)] * len(self.pids)
        eta_rows = [(0.0, INF)] * len(self.pids)
        dr_indices: list = []
        dr_limits: list = []
        mass_indices: list = []
        mass_limits: list = []
        sqrt_s = (0.0, INF)
        has_pt = has_eta = has_dr = has_mass = has_sqrt_s = False

        for cut in self.cut_data:
            if cut.observable is CutObservable.PT:
                has_pt |= self._single(cut, pt_rows)
            elif cut.observable is CutObservable.ETA:
                has_eta |= self._single(cut, eta_rows)
            elif cut.observable is CutObservable.DR:
                has_dr |= self._pairs(cut, dr_indices, dr_limits)
            elif cut.observable is CutObservable.MASS:
                has_mass |= self._pairs(cut, mass_indices, mass_limits)
            elif cut.observable is CutObservable.SQRT_S:
                sqrt_s = _tighten(sqrt_s, cut.limit_type, cut.value)
                has_sqrt_s = True

        params = CutParameters()
        if has_pt:
            params.pt = np.array(pt_rows, dtype=float)
        if has_eta:
            params.eta = np.array(eta_rows, dtype=float)
        if has_dr:
            params.dr_indices = np.array(dr_indices, dtype=np.int64)
            params.dr_limits = np.array(dr_limits, dtype=float)
        if has_mass:
            params.mass_indices = np.array(mass_indices, dtype=np.int64)
            params.mass_limits = np.array(mass_limits, dtype=float)
        if has_sqrt_s and (sqrt_s[0] > 0.0 or sqrt_s[1] < INF):
            params.sqrt_s = np.array(sqrt_s, dtype=float)
        return params

    def evaluate(self, sqrt_s, momenta) -> np.ndarray:
        """Weight 1 for events passing all cuts, 0 otherwise."""
        momenta = np.asarray(momenta, dtype=float)
        params = self.parameters()
        weight = np.ones(momenta.shape[:-2])
        if params.pt is not None:
            weight = weight * cut_kernels.cut_pt(momenta, params.pt)
        if params.eta is not None:
            weight = weight * cut_kernels.cut_eta(momenta, params.eta)
        if params.dr_indices is not None:
            weight = weight * cut_kernels.cut_dr(momenta, params.dr_indices, params.dr_limits)
        if params.mass_indices is not None:
            weight = weight * cut_kernels.cut_m_inv(
                momenta, params.mass_indices, params.mass_limits
            )
        if params.sqrt_s is not None:
            weight = weight * cut_kernels.cut_sqrt_s(sqrt_s, params.sqrt_s)
        return weight