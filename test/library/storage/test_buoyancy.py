# Copyright (C) 2024 Collimator, Inc.
# SPDX-License-Identifier: AGPL-3.0-only
#
# This program is free software: you can redistribute it and/or modify it under
# the terms of the GNU Affero General Public License as published by the Free
# Software Foundation, version 3. This program is distributed in the hope that it
# will be useful, but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the GNU Affero General
# Public License for more details.  You should have received a copy of the GNU
# Affero General Public License along with this program. If not, see
# <https://www.gnu.org/licenses/>.

import numpy as np
import pytest
from scipy.integrate import solve_ivp

from hvacplant.framework import ConfigurationError
from hvacplant.library.storage import (
    Buoyancy,
    StratifiedTank,
    TankConfig,
    buoyancy_heat_flow,
)
from hvacplant.testing import set_backend


@pytest.mark.parametrize("backend", ["numpy", "jax"])
def test_inversion_two_segments(backend):
    set_backend(backend)
    capacitance = 1000.0 * 4184.0
    buoyancy = Buoyancy(tau=1.0, capacitance=capacitance)
    T = np.array([330.0, 345.0])

    Q_pair, Q_seg = buoyancy_heat_flow(T, buoyancy.k)
    np.testing.assert_allclose(Q_pair, [capacitance * 15.0])
    np.testing.assert_allclose(Q_seg, [capacitance * 15.0, -capacitance * 15.0])
    np.testing.assert_allclose(buoyancy(T), Q_seg)
    np.testing.assert_allclose(buoyancy.pair_heat_flow(T), Q_pair)


@pytest.mark.parametrize("backend", ["numpy", "jax"])
@pytest.mark.parametrize(
    "T",
    [
        [350.0, 340.0, 330.0, 320.0],
        [350.0, 350.0, 350.0, 350.0],
        [360.0, 340.0, 340.0, 290.0],
        [300.0, 300.0],
    ],
)
def test_stable_sequence_has_no_mixing(backend, T):
    set_backend(backend)
    Q_pair, Q_seg = buoyancy_heat_flow(np.array(T), 1.0e6)
    assert np.all(np.asarray(Q_pair) == 0.0)
    assert np.all(np.asarray(Q_seg) == 0.0)


def test_mixing_only_at_inversions():
    T = np.array([350.0, 340.0, 345.0, 320.0, 330.0])
    Q_pair, Q_seg = buoyancy_heat_flow(T, 2.0)
    np.testing.assert_allclose(Q_pair, [0.0, 10.0, 0.0, 20.0])
    np.testing.assert_allclose(Q_seg, [0.0, 10.0, -10.0, 20.0, -20.0])
    assert np.isclose(np.sum(Q_seg), 0.0)


def test_continuous_at_threshold():
    for dT in (1e-3, 1e-6, 1e-9):
        Q_pair, _ = buoyancy_heat_flow(np.array([300.0, 300.0 + dT]), 10.0)
        assert np.isclose(Q_pair[0], 10.0 * dT, rtol=1e-6)


@pytest.mark.parametrize("tau", [0.0, -1.0])
def test_invalid_tau(tau):
    with pytest.raises(ConfigurationError) as exc:
        Buoyancy(tau=tau, capacitance=1.0, name="tank")
    assert exc.value.parameter_name == "tau"
    assert exc.value.component_name == "tank"

    with pytest.raises(ConfigurationError):
        TankConfig(volume=0.2, height=1.0, n_seg=2, tau=tau)


def _scenario_tank():
    config = TankConfig(volume=0.2, height=1.0, n_seg=2, tau=1.0, T_start=330.0)
    return StratifiedTank(config, name="tank")


@pytest.mark.parametrize("backend", ["numpy", "jax"])
def test_tank_inversion(backend):
    set_backend(backend)
    tank = _scenario_tank()
    state = tank.State(T=np.array([330.0, 345.0]), C=np.zeros((2, 0)))
    inputs = StratifiedTank.Inputs(m_flow=0.0, T_a_in=350.0, T_b_in=340.0)

    C_seg = tank.segment_mass * 4184.0
    assert np.isclose(tank.buoyancy.k, C_seg / 1.0)
    Q_mix = tank.eval_output("buoyancy_heat_flow", 0.0, state, inputs)
    np.testing.assert_allclose(Q_mix, [C_seg * 15.0])

    # Mixing and conduction move heat from the lower to the upper segment only
    T_der = np.asarray(tank.eval_time_derivatives(0.0, state, inputs).T)
    assert T_der[0] > 15.0
    assert np.isclose(T_der[0], -T_der[1])


def test_tank_inversion_decays():
    set_backend("numpy")
    tank = _scenario_tank()
    state = tank.State(T=np.array([330.0, 345.0]), C=np.zeros((2, 0)))
    y0, f = tank.vector_field(StratifiedTank.Inputs(), state=state)

    t_eval = np.linspace(0.0, 2.0, 21)
    sol = solve_ivp(
        f, (0.0, 2.0), y0, method="BDF", t_eval=t_eval, rtol=1e-8, atol=1e-8
    )
    assert sol.success

    gap = sol.y[1] - sol.y[0]
    assert np.all(np.diff(gap) < 0.0)
    # Pairwise mixing closes the gap at rate 2/tau
    assert np.isclose(gap[10], 15.0 * np.exp(-2.0), rtol=1e-3)
    assert np.all(gap >= -1e-6)
    # Closed and adiabatic: the mean temperature is preserved
    np.testing.assert_allclose(sol.y.mean(axis=0), 337.5, rtol=1e-9)
