"""Parton-density and running-coupling grids with their interpolation tables.

:class:`PdfGrid` reads grids in the LHAPDF ``lhagrid1`` layout and builds the
bicubic interpolation coefficients in (log x, log Q^2). :class:`AlphaSGrid`
reads the strong-coupling table from an LHAPDF info file and builds cubic
Hermite coefficients in log Q^2. All tables are padded with one extra node
on either side; the padding nodes hold ``-DBL_MAX`` and ``DBL_MAX``.
"""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass, field
from itertools import pairwise
from pathlib import Path
from typing import Sequence

import numpy as np

_MAX = sys.float_info.max
_LEADING_FLOAT = re.compile(
    r"\s*[+-]?(?:inf(?:inity)?|nan|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)",
    re.IGNORECASE,
)


def _read_numbers(line: str, convert) -> list:
    numbers = []
    for token in line.split():
        try:
            numbers.append(convert(token))
        except ValueError:
            break
    return numbers


def _leading_float(text: str) -> float:
    match = _LEADING_FLOAT.match(text)
    if match is None:
        raise ValueError(f"invalid number '{text}'")
    return float(match.group(0))


def _padded_logq2(logq2: np.ndarray, region_sizes: Sequence[int]) -> np.ndarray:
    """Log Q^2 nodes without region-boundary duplicates, padded on both ends."""
    entries = []
    start = 0
    for n, size in enumerate(region_sizes):
        region = logq2[start:start + size + 1]
        if len(region) != size + 1:
            raise ValueError("q regions do not match the q values")
        entries.extend(region if n == 0 else region[1:])
        start += size + 1
    return np.concatenate([[-_MAX], np.asarray(entries, dtype=float), [_MAX]])


@dataclass(eq=False)
class PdfGrid:
    """A PDF grid: values per (q, x, pid) node, split into q regions.

    ``values`` has shape ``(len(q), len(x), len(pids))``; ``q`` repeats the
    boundary value between consecutive regions.
    """

    x: list
    q: list
    pids: list
    values: np.ndarray
    region_sizes: list
    logx: np.ndarray = field(init=False)
    logq2: np.ndarray = field(init=False)

    def __post_init__(self):
        self.x = [float(v) for v in self.x]
        self.q = [float(v) for v in self.q]
        self.pids = [int(p) for p in self.pids]
        self.region_sizes = [int(s) for s in self.region_sizes]
        self.values = np.asarray(self.values, dtype=float).reshape(
            len(self.q), len(self.x), len(self.pids)
        )
        self.logx = np.log(np.asarray(self.x, dtype=float))
        self.logq2 = 2.0 * np.log(np.asarray(self.q, dtype=float))

    @classmethod
    def parse(cls, text):
        """Parse the text of a grid file."""
        x: list = []
        q: list = []
        pids: list = []
        rows: list = []
        region_sizes: list = []
        state = "header"
        expected = x_index = q_index = q_start = 0

        for raw in text.splitlines():
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            if state == "header":
                if line == "---":
                    state = "x"
            elif state == "x":
                new_x = _read_numbers(line, float)
                if x and x != new_x:
                    raise ValueError("x values for different q regions must be equal")
                x = new_x
                state = "q"
            elif state == "q":
                new_q = _read_numbers(line, float)
                if not new_q:
                    raise ValueError("q region must not be empty")
                if q and q[-1] != new_q[0]:
                    raise ValueError("q regions must connect seamlessly")
                q_start = len(q)
                q.extend(new_q)
                region_sizes.append(len(new_q) - 1)
                state = "pids"
            elif state == "pids":
                new_pids = _read_numbers(line, int)
                if pids and pids != new_pids:
                    raise ValueError(
                        "particle ids for different q regions must be equal"
                    )
                pids = new_pids
                expected = len(x) * (region_sizes[-1] + 1)
                rows.extend([None] * expected)
                x_index = 0
                q_index = q_start
                state = "values"
            elif expected == 0:
                if line != "---":
                    raise ValueError("expected end of file or next section")
                state = "x"
            else:
                new_values = _read_numbers(line, float)
                if len(new_values) != len(pids):
                    raise ValueError(
                        "exactly one grid value must be given for every PID"
                    )
                rows[q_index * len(x) + x_index] = new_values
                q_index += 1
                if q_index == len(q):
                    q_index = q_start
                    x_index += 1
                expected -= 1

        if expected != 0:
            raise ValueError("expected more grid values")
        values = (
            np.array(rows, dtype=float)
            if rows
            else np.zeros((len(q), len(x), len(pids)))
        )
        return cls(x, q, pids, values, region_sizes)

    @classmethod
    def load(cls, path):
        """Read and parse a grid file."""
        return cls.parse(Path(path).read_text())

    def q_count(self) -> int:
        """Number of distinct q nodes."""
        return len(self.q) - len(self.region_sizes) + 1

    def grid_point_count(self) -> int:
        """Number of coefficient nodes, including padding in x and q."""
        return (self.q_count() + 1) * (len(self.x) + 1)

    def coefficients_shape(self, batch_dim=False) -> tuple:
        shape = (16, len(self.pids), self.grid_point_count())
        return (1, *shape) if batch_dim else shape

    def logx_shape(self, batch_dim=False) -> tuple:
        shape = (len(self.x) + 2,)
        return (1, *shape) if batch_dim else shape

    def logq2_shape(self, batch_dim=False) -> tuple:
        shape = (self.q_count() + 2,)
        return (1, *shape) if batch_dim else shape

    def logx_table(self) -> np.ndarray:
        """Padded log x nodes."""
        return np.concatenate([[-_MAX], self.logx, [_MAX]])

    def logq2_table(self) -> np.ndarray:
        """Padded log Q^2 nodes, with region-boundary duplicates removed."""
        return _padded_logq2(self.logq2, self.region_sizes)

    def pid_indices(self, pids) -> list:
        """Positions of the given particle ids in the grid."""
        indices = []
        for pid in pids:
            try:
                indices.append(self.pids.index(pid))
            except ValueError:
                raise ValueError(f"PID {pid} not found in pdf grid") from None
        return indices

    def _ddx(self, q_idx: int, x_idx: int) -> np.ndarray:
        v = self.values[q_idx]
        logx = self.logx
        x_max = len(logx) - 1
        if x_idx == 0:
            return (v[1] - v[0]) / (logx[1] - logx[0])
        if x_idx == x_max:
            return (v[x_idx] - v[x_idx - 1]) / (logx[x_idx] - logx[x_idx - 1])
        high = (v[x_idx + 1] - v[x_idx]) / (logx[x_idx + 1] - logx[x_idx])
        low = (v[x_idx] - v[x_idx - 1]) / (logx[x_idx] - logx[x_idx - 1])
        return 0.5 * (high + low)

    def _logx_coeffs(self, q_idx: int, x_idx: int) -> np.ndarray:
        dlogx = self.logx[x_idx + 1] - self.logx[x_idx]
        vl = self.values[q_idx, x_idx]
        vh = self.values[q_idx, x_idx + 1]
        vdl = self._ddx(q_idx, x_idx) * dlogx
        vdh = self._ddx(q_idx, x_idx + 1) * dlogx
        return np.stack([
            vdh + vdl - 2 * vh + 2 * vl,
            3 * vh - 3 * vl - 2 * vdl - vdh,
            vdl,
            vl,
        ])

    def _node_coeffs(self, q_idx: int, x_idx: int, low_q: bool, high_q: bool):
        lq = self.logq2
        vl = self._logx_coeffs(q_idx, x_idx)
        vh = self._logx_coeffs(q_idx + 1, x_idx)
        dlogq_0 = 0.0 if low_q else 1.0 / (lq[q_idx] - lq[q_idx - 1])
        dlogq_1 = lq[q_idx + 1] - lq[q_idx]
        dlogq_2 = 0.0 if high_q else 1.0 / (lq[q_idx + 2] - lq[q_idx + 1])
        if low_q:
            vhh = self._logx_coeffs(q_idx + 2, x_idx)
            vdl = vh - vl
            vdh = 0.5 * (vdl + (vhh - vh) * dlogq_1 * dlogq_2)
        elif high_q:
            vll = self._logx_coeffs(q_idx - 1, x_idx)
            vdh = vh - vl
            vdl = 0.5 * (vdh + (vl - vll) * dlogq_1 * dlogq_0)
        else:
            vll = self._logx_coeffs(q_idx - 1, x_idx)
            vhh = self._logx_coeffs(q_idx + 2, x_idx)
            vdl = 0.5 * (vh - vl + (vl - vll) * dlogq_1 * dlogq_0)
            vdh = 0.5 * (vh - vl + (vhh - vh) * dlogq_1 * dlogq_2)
        return np.concatenate([vl, vh, vdl, vdh])

    def coefficients(self) -> np.ndarray:
        """Interpolation coefficients of shape ``coefficients_shape()``."""
        table = np.zeros(self.coefficients_shape())
        x_count = len(self.x)
        node = x_count + 2
        q_idx = 0
        for size in self.region_sizes:
            for region_idx in range(size):
                for x_idx in range(x_count - 1):
                    table[:, :, node] = self._node_coeffs(
                        q_idx, x_idx, region_idx == 0, region_idx == size - 1
                    )
                    node += 1
                node += 2
                q_idx += 1
            q_idx += 1
        return table


@dataclass(eq=False)
class AlphaSGrid:
    """Strong coupling values at a list of Q nodes, split into regions."""

    q: list
    values: list
    region_sizes: list = field(init=False)
    logq2: np.ndarray = field(init=False)

    def __post_init__(self):
        self.q = [float(v) for v in self.q]
        self.values = [float(v) for v in self.values]
        if self.q:
            self.region_sizes = [0]
            for q1, q2 in pairwise(self.q):
                if q1 == q2:
                    self.region_sizes.append(0)
                else:
                    self.region_sizes[-1] += 1
        else:
            self.region_sizes = []
        self.logq2 = 2.0 * np.log(np.asarray(self.q, dtype=float))

    @classmethod
    def parse(cls, text):
        """Parse the ``AlphaS_Qs`` and ``AlphaS_Vals`` lists of an info file."""
        q: list = []
        values: list = []
        lines = iter(text.splitlines())
        for raw in lines:
            line = raw.strip()
            key, colon, value = line.partition(":")
            if not colon:
                continue
            key = key.strip()
            value = value.strip()
            if key not in ("AlphaS_Qs", "AlphaS_Vals"):
                continue
            list_begin = value.find("[")
            if list_begin < 0:
                raise ValueError("expected list of values")
            chunk = value[list_begin + 1:]
            collected = []
            while True:
                list_end = chunk.find("]")
                if list_end >= 0:
                    collected.append(chunk[:list_end])
                    break
                collected.append(chunk)
                chunk = next(lines, None)
                if chunk is None:
                    break
            parsed = [
                _leading_float(item.strip())
                for item in "".join(collected).split(",")
                if item.strip()
            ]
            if key == "AlphaS_Qs":
                q = parsed
            else:
                values = parsed
        return cls(q, values)

    @classmethod
    def load(cls, path):
        """Read and parse an info file."""
        return cls.parse(Path(path).read_text())

    def q_count(self) -> int:
        """Number of distinct q nodes."""
        return len(self.q) - len(self.region_sizes) + 1

    def coefficients_shape(self, batch_dim=False) -> tuple:
        shape = (4, self.q_count() + 1)
        return (1, *shape) if batch_dim else shape

    def logq2_shape(self, batch_dim=False) -> tuple:
        shape = (self.q_count() + 2,)
        return (1, *shape) if batch_dim else shape

    def logq2_table(self) -> np.ndarray:
        """Padded log Q^2 nodes, with region-boundary duplicates removed."""
        return _padded_logq2(self.logq2, self.region_sizes)

    def _diff(self, i: int) -> float:
        return (self.values[i + 1] - self.values[i]) / (
            self.logq2[i + 1] - self.logq2[i]
        )

    def coefficients(self) -> np.ndarray:
        """Hermite coefficients (value low, value high, slopes) per interval."""
        table = np.zeros(self.coefficients_shape())
        grid_idx = 1
        q_idx = 0
        for size in self.region_sizes:
            for region_idx in range(size):
                if region_idx == 0:
                    diff0 = self._diff(q_idx)
                    diff1 = 0.5 * (self._diff(q_idx + 1) + self._diff(q_idx))
                elif region_idx == size - 1:
                    diff0 = 0.5 * (self._diff(q_idx) + self._diff(q_idx - 1))
                    diff1 = self._diff(q_idx)
                else:
                    diff0 = 0.5 * (self._diff(q_idx) + self._diff(q_idx - 1))
                    diff1 = 0.5 * (self._diff(q_idx + 1) + self._diff(q_idx))
                dlogq2 = self.logq2[q_idx + 1] - self.logq2[q_idx]
                table[:, grid_idx] = (
                    self.values[q_idx],
                    self.values[q_idx + 1],
                    diff0 * dlogq2,
                    diff1 * dlogq2,
                )
                q_idx += 1
                grid_idx += 1
            q_idx += 1
        return table