import math

import numpy as np
import pytest

from phasemap.cut_kernels import (
    ETA_UNDEFINED,
    cut_dr,
    cut_eta,
    cut_m_inv,
    cut_pt,
    cut_sqrt_s,
    cut_unphysical,
    eta,
)


def _event(*outgoing):
    incoming = [[1.0, 0.0, 0.0, 1.0], [1.0, 0.0, 0.0, -1.0]]
    return np.array([incoming + [list(p) for p in outgoing]], dtype=float)


def test_eta_zero_momentum_is_undefined_marker():
    assert eta([1.0, 0.0, 0.0, 0.0]) == ETA_UNDEFINED


def test_eta_transverse_is_zero():
    assert eta([2.0, 1.0, 0.0, 0.0]) == pytest.approx(0.0)


def test_eta_is_odd_in_pz():
    forward = eta([5.0, 1.0, 2.0, 3.0])
    backward = eta([5.0, 1.0, 2.0, -3.0])
    assert forward > 0
    assert forward == pytest.approx(-backward)


def test_cut_unphysical_keeps_good_weights():
    p = _event([1.0, 1.0, 0.0, 0.0], [1.0, -1.0, 0.0, 0.0])
    w = cut_unphysical(np.array([2.5]), p, np.array([0.3]), np.array([0.7]))
    assert w[0] == pytest.approx(2.5)


def test_cut_unphysical_zeroes_nan_and_bad_x():
    p = _event([1.0, 1.0, 0.0, 0.0], [1.0, -1.0, 0.0, 0.0])
    p_nan = p.copy()
    p_nan[0, 3, 2] = math.nan
    assert cut_unphysical(np.array([2.5]), p_nan, np.array([0.3]), np.array([0.7]))[0] == 0.0
    assert cut_unphysical(np.array([2.5]), p, np.array([1.5]), np.array([0.7]))[0] == 0.0
    assert cut_unphysical(np.array([math.nan]), p, np.array([0.3]), np.array([0.7]))[0] == 0.0
    assert cut_unphysical(np.array([2.5]), p, np.array([0.3]), np.array([-0.1]))[0] == 0.0


def test_cut_pt_thresholds():
    p = _event([5.0, 3.0, 4.0, 0.0], [5.0, -3.0, -4.0, 0.0])
    assert cut_pt(p, [[4.9, math.inf], [0.0, math.inf]])[0] == 1.0
    assert cut_pt(p, [[5.1, math.inf], [0.0, math.inf]])[0] == 0.0
    assert cut_pt(p, [[0.0, 4.9], [0.0, math.inf]])[0] == 0.0


def test_cut_eta_uses_absolute_value():
    p = _event([5.0, 1.0, 2.0, -3.0], [5.0, -1.0, -2.0, 3.0])
    value = abs(float(eta(p[0, 2])))
    assert cut_eta(p, [[0.0, value + 0.01], [0.0, value + 0.01]])[0] == 1.0
    assert cut_eta(p, [[0.0, value - 0.01], [0.0, math.inf]])[0] == 0.0


def test_cut_dr_back_to_back_is_pi():
    p = _event([1.0, 1.0, 0.0, 0.0], [1.0, -1.0, 0.0, 0.0])
    assert cut_dr(p, [[0, 1]], [[0.0, math.pi + 0.01]])[0] == 1.0
    assert cut_dr(p, [[0, 1]], [[0.0, math.pi - 0.01]])[0] == 0.0


def test_cut_dr_collinear_fails_min():
    p = _event([1.0, 1.0, 0.0, 0.0], [2.0, 2.0, 0.0, 0.0])
    assert cut_dr(p, [[0, 1]], [[0.4, math.inf]])[0] == 0.0


def test_cut_m_inv_matches_energy_of_back_to_back_pair():
    p = _event([5.0, 5.0, 0.0, 0.0], [5.0, -5.0, 0.0, 0.0])
    assert cut_m_inv(p, [[0, 1]], [[9.9, 10.1]])[0] == 1.0
    assert cut_m_inv(p, [[0, 1]], [[10.1, math.inf]])[0] == 0.0


def test_cut_sqrt_s_batch():
    w = cut_sqrt_s(np.array([50.0, 150.0, 250.0]), [100.0, 200.0])
    assert w.tolist() == [0.0, 1.0, 0.0]