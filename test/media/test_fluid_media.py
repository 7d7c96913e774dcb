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

from hvacplant import SystemDefaults
from hvacplant.framework import ConfigurationError
from hvacplant.media import ConstantPropertyLiquidWater, IdealGasAir, LinearCpLiquid
from hvacplant.testing import set_backend


@pytest.mark.parametrize("backend", ["numpy", "jax"])
def test_constant_water(backend):
    set_backend(backend)
    water = ConstantPropertyLiquidWater()
    T = np.array([273.15, 323.15])
    np.testing.assert_allclose(water.specific_enthalpy(T), [0.0, 4184.0 * 50.0])
    np.testing.assert_allclose(water.specific_heat_capacity(T), [4184.0, 4184.0])
    np.testing.assert_allclose(water.density(T), [995.586, 995.586])
    np.testing.assert_allclose(water.temperature(water.specific_enthalpy(T)), T)
    assert water.thermal_conductivity == 0.6


@pytest.mark.parametrize("backend", ["numpy", "jax"])
def test_linear_cp(backend):
    set_backend(backend)
    liquid = LinearCpLiquid(dcp_dT=2.0, cp=4000.0)
    T = np.array([273.15, 300.0, 360.0])
    dT = T - 273.15
    np.testing.assert_allclose(liquid.specific_heat_capacity(T), 4000.0 + 2.0 * dT)
    np.testing.assert_allclose(liquid.specific_enthalpy(T), 4000.0 * dT + dT**2)
    np.testing.assert_allclose(liquid.temperature(liquid.specific_enthalpy(T)), T)


def test_linear_cp_reduces_to_constant():
    liquid = LinearCpLiquid()
    water = ConstantPropertyLiquidWater()
    h = np.array([-1000.0, 0.0, 2.0e5])
    np.testing.assert_allclose(liquid.temperature(h), water.temperature(h))


def test_air_density_uses_system_pressure():
    air = IdealGasAir(system_defaults=SystemDefaults(p_ambient=2 * 101325.0))
    rho = air.density(293.15)
    assert np.isclose(rho, 2 * 101325.0 / (287.052874 * 293.15))
    assert np.isclose(air.density(293.15, p=101325.0), rho / 2)


def test_invalid_properties():
    with pytest.raises(ConfigurationError) as exc:
        ConstantPropertyLiquidWater(cp=0.0, d=-1.0)
    assert len(exc.value.errors) == 2
    assert exc.value.component_name == "ConstantPropertyLiquidWater"
