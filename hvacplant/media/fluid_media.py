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

"""
Fluid media property models.

Properties are functions of temperature only (incompressible liquids, ideal
gas at a fixed pressure) and are written with the backend dispatcher so they
can be evaluated inside jit-compiled right-hand sides.

Specific enthalpy is zero at each medium's reference temperature `T_ref`.
"""

from __future__ import annotations
from typing import TYPE_CHECKING

from ..backend import numpy_api as cnp
from ..framework.config import SystemDefaults
from ..framework.error import ErrorCollector

if TYPE_CHECKING:
    from ..backend.typing import Array, Temperature


__all__ = [
    "FluidBase",
    "ConstantPropertyLiquidWater",
    "LinearCpLiquid",
    "IdealGasAir",
]


class FluidBase:
    """Interface of the property models consumed by the components."""

    name = "Fluid"
    T_ref = 273.15  # K, h(T_ref) = 0
    thermal_conductivity = 0.0  # W/(m*K)

    def specific_heat_capacity(self, T: Temperature) -> Array:
        raise NotImplementedError

    def specific_enthalpy(self, T: Temperature) -> Array:
        raise NotImplementedError

    def temperature(self, h) -> Array:
        """Inverse of `specific_enthalpy`."""
        raise NotImplementedError

    def density(self, T: Temperature, p=None) -> Array:
        raise NotImplementedError

    def __repr__(self):
        return f"{type(self).__name__}(name={self.name!r})"


class ConstantPropertyLiquidWater(FluidBase):
    """Liquid water with constant cp, density and thermal conductivity.

    Args:
        cp: specific heat capacity, J/(kg*K).
        d: density, kg/m3.
        thermal_conductivity: W/(m*K).
    """

    def __init__(
        self,
        name="ConstantPropertyLiquidWater",
        cp=4184.0,
        d=995.586,
        thermal_conductivity=0.6,
        T_ref=273.15,
    ):
        ec = ErrorCollector(component_name=name)
        ec.check(cp > 0.0, "cp must be > 0", "cp")
        ec.check(d > 0.0, "density must be > 0", "d")
        ec.check(
            thermal_conductivity >= 0.0,
            "thermal conductivity must be >= 0",
            "thermal_conductivity",
        )
        ec.raise_if_any()

        self.name = name
        self.cp = cp
        self.d = d
        self.thermal_conductivity = thermal_conductivity
        self.T_ref = T_ref

    def specific_heat_capacity(self, T):
        return self.cp * cnp.ones_like(cnp.asarray(T, dtype=cnp.floatx))

    def specific_enthalpy(self, T):
        return self.cp * (cnp.asarray(T) - self.T_ref)

    def temperature(self, h):
        return self.T_ref + cnp.asarray(h) / self.cp

    def density(self, T, p=None):
        return self.d * cnp.ones_like(cnp.asarray(T, dtype=cnp.floatx))


class LinearCpLiquid(ConstantPropertyLiquidWater):
    """Incompressible liquid whose cp varies linearly with temperature.

    cp(T) = cp + dcp_dT * (T - T_ref), and h(T) is its integral from T_ref.
    """

    def __init__(self, name="LinearCpLiquid", dcp_dT=0.0, **kwargs):
        super().__init__(name=name, **kwargs)
        self.dcp_dT = dcp_dT

    def specific_heat_capacity(self, T):
        return self.cp + self.dcp_dT * (cnp.asarray(T) - self.T_ref)

    def specific_enthalpy(self, T):
        dT = cnp.asarray(T) - self.T_ref
        return self.cp * dT + 0.5 * self.dcp_dT * dT**2

    def temperature(self, h):
        # Positive root of 0.5*dcp_dT*x^2 + cp*x - h = 0, written so that
        # dcp_dT == 0 needs no special case.
        h = cnp.asarray(h)
        disc = cnp.sqrt(self.cp**2 + 2.0 * self.dcp_dT * h)
        return self.T_ref + 2.0 * h / (self.cp + disc)


class IdealGasAir(FluidBase):
    """
    Dry air as an ideal gas with constant cp.

    The density uses `p_ambient` of the given system defaults when no pressure
    is passed.
    """

    def __init__(
        self,
        name="IdealGasAir",
        cp=1006.0,
        thermal_conductivity=0.0262,
        T_ref=273.15,
        system_defaults: SystemDefaults = None,
    ):
        ec = ErrorCollector(component_name=name)
        ec.check(cp > 0.0, "cp must be > 0", "cp")
        ec.raise_if_any()

        self.name = name
        self.cp = cp  # J/(kg*K)
        self.Rs_air = 287.052874  # J/(kg*K)
        self.thermal_conductivity = thermal_conductivity
        self.T_ref = T_ref
        self.system_defaults = (
            SystemDefaults() if system_defaults is None else system_defaults
        )

    def specific_heat_capacity(self, T):
        return self.cp * cnp.ones_like(cnp.asarray(T, dtype=cnp.floatx))

    def specific_enthalpy(self, T):
        return self.cp * (cnp.asarray(T) - self.T_ref)

    def temperature(self, h):
        return self.T_ref + cnp.asarray(h) / self.cp

    def density(self, T, p=None):
        if p is None:
            p = self.system_defaults.p_ambient
        return p / (self.Rs_air * cnp.asarray(T))
