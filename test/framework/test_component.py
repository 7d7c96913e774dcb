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

from typing import NamedTuple

import numpy as np
import pytest
from scipy.integrate import solve_ivp

from hvacplant.framework import Component, PlantModelError, SystemDefaults


class Cooling(Component):
    """Newton cooling towards an input temperature."""

    class State(NamedTuple):
        T: np.ndarray
        Q: np.ndarray

    class Inputs(NamedTuple):
        T_amb: float

    def __init__(self, rate=0.5, **kwargs):
        super().__init__(**kwargs)
        self.rate = rate
        self.declare_continuous_state(
            self.State(T=np.array([350.0, 300.0]), Q=np.array(0.0)), self._ode
        )
        self.declare_output_port(lambda t, x, u: x.T.mean(), name="T_mean")

    def _ode(self, time, state, inputs):
        T_der = self.rate * (inputs.T_amb - state.T)
        return self.State(T=T_der, Q=-T_der.sum())


def test_default_name_and_defaults():
    component = Component()
    assert component.name == "Component"
    assert component.system_defaults == SystemDefaults()
    assert not component.has_continuous_state
    assert component.create_state() is None


def test_no_state_derivatives():
    with pytest.raises(PlantModelError, match="no continuous state"):
        Component(name="empty").eval_time_derivatives(0.0, None, Component.Inputs())


def test_create_state_is_a_copy():
    cooling = Cooling()
    state = cooling.create_state()
    assert isinstance(state, Cooling.State)
    np.testing.assert_allclose(state.T, [350.0, 300.0])
    assert state.T is not cooling.create_state().T


def test_outputs():
    cooling = Cooling(name="c")
    state = cooling.create_state()
    inputs = Cooling.Inputs(T_amb=293.15)
    assert np.isclose(cooling.eval_output("T_mean", 0.0, state, inputs), 325.0)
    assert set(cooling.eval_outputs(0.0, state, inputs)) == {"T_mean"}

    with pytest.raises(PlantModelError) as exc:
        cooling.eval_output("T_max", 0.0, state, inputs)
    assert exc.value.port_name == "T_max"


def test_duplicate_output():
    cooling = Cooling()
    with pytest.raises(ValueError, match="already declared"):
        cooling.declare_output_port(lambda t, x, u: x.T, name="T_mean")
    assert cooling.declare_output_port(lambda t, x, u: x.T) == "out_1"


def test_vector_field():
    cooling = Cooling(rate=0.5)
    y0, f = cooling.vector_field(Cooling.Inputs(T_amb=300.0))
    assert y0.shape == (3,)

    sol = solve_ivp(f, (0.0, 2.0), y0, rtol=1e-10, atol=1e-10)
    assert sol.success
    T_expected = 300.0 + np.array([50.0, 0.0]) * np.exp(-0.5 * 2.0)
    np.testing.assert_allclose(sol.y[:2, -1], T_expected, rtol=1e-7)
    # Q accumulates the temperature drop
    np.testing.assert_allclose(sol.y[2, -1], 50.0 - (T_expected[0] - 300.0))
