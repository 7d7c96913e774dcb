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
Heat exchangers based on the effectiveness-NTU method.

Stream 1 is the water side and stream 2 the air side of a coil. Heat flow is
positive when it leaves the water and enters the air.
"""

from __future__ import annotations

import dataclasses
from enum import Enum
from typing import TYPE_CHECKING, NamedTuple

import numpy as np
from dataclasses_json import dataclass_json

from ..backend import numpy_api as cnp
from ..framework import Component, SystemDefaults
from ..framework.error import (
    ErrorCollector,
    InvalidFlowError,
    UnsupportedRegimeError,
)
from ..logging import logger, logdata
from ..media import ConstantPropertyLiquidWater, FluidBase, IdealGasAir

if TYPE_CHECKING:
    from ..backend.typing import Array, MassFlowRate, Temperature


__all__ = [
    "FlowRegime",
    "HeatExchangerConfiguration",
    "as_flow_regime",
    "flow_regime_for_configuration",
    "epsilon_ntu",
    "DryCoilResult",
    "DryCoilConfig",
    "DryCoil",
    "dry_coil",
]


class FlowRegime(str, Enum):
    """Flow arrangement seen from the minimum capacitance rate stream."""

    PARALLEL_FLOW = "parallel_flow"
    COUNTER_FLOW = "counter_flow"
    CROSS_FLOW_UNMIXED = "cross_flow_unmixed"
    CROSS_FLOW_CMIN_MIXED_CMAX_UNMIXED = "cross_flow_cmin_mixed_cmax_unmixed"
    CROSS_FLOW_CMIN_UNMIXED_CMAX_MIXED = "cross_flow_cmin_unmixed_cmax_mixed"
    CROSS_FLOW_MIXED = "cross_flow_mixed"
    CONSTANT_TEMPERATURE_PHASE_CHANGE = "constant_temperature_phase_change"


class HeatExchangerConfiguration(str, Enum):
    """Flow arrangement described per stream (1 = water, 2 = air).

    For the partially mixed cross flow arrangements the effective flow regime
    depends on which stream has the smaller capacitance rate, see
    `flow_regime_for_configuration`.
    """

    PARALLEL_FLOW = "parallel_flow"
    COUNTER_FLOW = "counter_flow"
    CROSS_FLOW_UNMIXED = "cross_flow_unmixed"
    CROSS_FLOW_STREAM1_MIXED_STREAM2_UNMIXED = (
        "cross_flow_stream1_mixed_stream2_unmixed"
    )
    CROSS_FLOW_STREAM1_UNMIXED_STREAM2_MIXED = (
        "cross_flow_stream1_unmixed_stream2_mixed"
    )
    CROSS_FLOW_MIXED = "cross_flow_mixed"
    CONSTANT_TEMPERATURE_PHASE_CHANGE = "constant_temperature_phase_change"


# Below this, Z or NTU are replaced by their analytic limits
_SMALL = 1e-10

# Counter flow uses NTU/(1+NTU) when |1 - Z| is below this
_BALANCED_TOL = 1e-6


def _one_minus_exp(x):
    """1 - exp(-x), accurate for small x."""
    return -cnp.expm1(-x)


def _parallel_flow(Z, NTU):
    return _one_minus_exp(NTU * (1.0 + Z)) / (1.0 + Z)


def _counter_flow(Z, NTU):
    balanced = cnp.abs(1.0 - Z) < _BALANCED_TOL
    Z_ = cnp.where(balanced, 0.5, Z)
    a = cnp.exp(-NTU * (1.0 - Z_))
    eps = (1.0 - a) / (1.0 - Z_ * a)
    return cnp.where(balanced, NTU / (1.0 + NTU), eps)


def _cross_flow_unmixed(Z, NTU):
    # Approximation for both streams unmixed (Incropera, table 11.3)
    small = Z < _SMALL
    Z_ = cnp.where(small, 1.0, Z)
    eps = 1.0 - cnp.exp(NTU**0.22 / Z_ * (cnp.exp(-Z_ * NTU**0.78) - 1.0))
    return cnp.where(small, _one_minus_exp(NTU), eps)


def _cross_flow_cmin_mixed_cmax_unmixed(Z, NTU):
    small = Z < _SMALL
    Z_ = cnp.where(small, 1.0, Z)
    eps = _one_minus_exp(_one_minus_exp(Z_ * NTU) / Z_)
    return cnp.where(small, _one_minus_exp(NTU), eps)


def _cross_flow_cmin_unmixed_cmax_mixed(Z, NTU):
    small = Z < _SMALL
    Z_ = cnp.where(small, 1.0, Z)
    eps = _one_minus_exp(Z_ * _one_minus_exp(NTU)) / Z_
    return cnp.where(small, _one_minus_exp(NTU), eps)


def _cross_flow_mixed(Z, NTU):
    no_transfer = NTU < _SMALL
    NTU_ = cnp.where(no_transfer, 1.0, NTU)
    ZN = Z * NTU_
    small_ZN = ZN < _SMALL
    ZN_ = cnp.where(small_ZN, 1.0, ZN)
    term_min = 1.0 / _one_minus_exp(NTU_)
    term_max = cnp.where(small_ZN, 1.0 / NTU_, Z / _one_minus_exp(ZN_))
    eps = 1.0 / (term_min + term_max - 1.0 / NTU_)
    return cnp.where(no_transfer, 0.0, eps)


def _constant_temperature_phase_change(Z, NTU):
    return _one_minus_exp(NTU)


_CORRELATIONS = {
    FlowRegime.PARALLEL_FLOW: _parallel_flow,
    FlowRegime.COUNTER_FLOW: _counter_flow,
    FlowRegime.CROSS_FLOW_UNMIXED: _cross_flow_unmixed,
    FlowRegime.CROSS_FLOW_CMIN_MIXED_CMAX_UNMIXED: _cross_flow_cmin_mixed_cmax_unmixed,
    FlowRegime.CROSS_FLOW_CMIN_UNMIXED_CMAX_MIXED: _cross_flow_cmin_unmixed_cmax_mixed,
    FlowRegime.CROSS_FLOW_MIXED: _cross_flow_mixed,
    FlowRegime.CONSTANT_TEMPERATURE_PHASE_CHANGE: _constant_temperature_phase_change,
}

# Configurations that do not depend on which stream has C_min
_SYMMETRIC_CONFIGURATIONS = {
    HeatExchangerConfiguration.PARALLEL_FLOW: FlowRegime.PARALLEL_FLOW,
    HeatExchangerConfiguration.COUNTER_FLOW: FlowRegime.COUNTER_FLOW,
    HeatExchangerConfiguration.CROSS_FLOW_UNMIXED: FlowRegime.CROSS_FLOW_UNMIXED,
    HeatExchangerConfiguration.CROSS_FLOW_MIXED: FlowRegime.CROSS_FLOW_MIXED,
    HeatExchangerConfiguration.CONSTANT_TEMPERATURE_PHASE_CHANGE: (
        FlowRegime.CONSTANT_TEMPERATURE_PHASE_CHANGE
    ),
}

# (regime if stream 1 has C_min, regime if stream 2 has C_min)
_STREAM_CONFIGURATIONS = {
    HeatExchangerConfiguration.CROSS_FLOW_STREAM1_MIXED_STREAM2_UNMIXED: (
        FlowRegime.CROSS_FLOW_CMIN_MIXED_CMAX_UNMIXED,
        FlowRegime.CROSS_FLOW_CMIN_UNMIXED_CMAX_MIXED,
    ),
    HeatExchangerConfiguration.CROSS_FLOW_STREAM1_UNMIXED_STREAM2_MIXED: (
        FlowRegime.CROSS_FLOW_CMIN_UNMIXED_CMAX_MIXED,
        FlowRegime.CROSS_FLOW_CMIN_MIXED_CMAX_UNMIXED,
    ),
}


def as_flow_regime(value) -> FlowRegime | HeatExchangerConfiguration:
    """Parse a flow regime or heat exchanger configuration.

    Strings are matched against the enum values, flow regimes first.

    Raises:
        UnsupportedRegimeError: if the value maps to no correlation.
    """
    if isinstance(value, (FlowRegime, HeatExchangerConfiguration)):
        return value
    for enum_type in (FlowRegime, HeatExchangerConfiguration):
        try:
            return enum_type(value)
        except ValueError:
            continue
    valid = sorted(
        {e.value for e in FlowRegime}
        | {e.value for e in HeatExchangerConfiguration}
    )
    raise UnsupportedRegimeError(
        f"Flow regime {value!r} has no effectiveness correlation, "
        f"expected one of {valid}",
        parameter_name="flow_regime",
    )


def flow_regime_for_configuration(
    configuration: HeatExchangerConfiguration | str,
    C_stream1: float,
    C_stream2: float,
) -> FlowRegime:
    """Select the flow regime of a configuration for given capacitance rates.

    Requires concrete (not traced) capacitance rates.
    """
    configuration = as_flow_regime(configuration)
    if isinstance(configuration, FlowRegime):
        return configuration
    if configuration in _SYMMETRIC_CONFIGURATIONS:
        return _SYMMETRIC_CONFIGURATIONS[configuration]
    if_stream1_min, if_stream2_min = _STREAM_CONFIGURATIONS[configuration]
    return if_stream1_min if C_stream1 < C_stream2 else if_stream2_min


def epsilon_ntu(Z, NTU, flow_regime=FlowRegime.COUNTER_FLOW) -> Array:
    """Heat exchanger effectiveness from capacitance ratio and NTU.

    Args:
        Z: capacitance rate ratio C_min/C_max, in [0, 1].
        NTU: number of transfer units, >= 0.
        flow_regime: a `FlowRegime` or its string value.

    Returns:
        The effectiveness, clipped to [0, 1].

    Raises:
        UnsupportedRegimeError: if `flow_regime` maps to no correlation.
    """
    regime = as_flow_regime(flow_regime)
    if not isinstance(regime, FlowRegime) or regime not in _CORRELATIONS:
        raise UnsupportedRegimeError(
            f"{regime!r} is not a flow regime; use flow_regime_for_configuration "
            "to select one",
            parameter_name="flow_regime",
        )
    Z = cnp.asarray(Z, dtype=cnp.floatx)
    NTU = cnp.asarray(NTU, dtype=cnp.floatx)
    eps = _CORRELATIONS[regime](Z, NTU)
    return cnp.clip(eps, 0.0, 1.0)


def _effectiveness(Z, NTU, flow_regime, stream1_is_cmin) -> Array:
    regime = as_flow_regime(flow_regime)
    if isinstance(regime, FlowRegime):
        return epsilon_ntu(Z, NTU, regime)
    if regime in _SYMMETRIC_CONFIGURATIONS:
        return epsilon_ntu(Z, NTU, _SYMMETRIC_CONFIGURATIONS[regime])
    if regime not in _STREAM_CONFIGURATIONS:
        raise UnsupportedRegimeError(
            f"Configuration {regime!r} has no effectiveness correlation",
            parameter_name="flow_regime",
        )
    # Evaluate both candidates so the selection stays traceable
    if_stream1_min, if_stream2_min = _STREAM_CONFIGURATIONS[regime]
    return cnp.where(
        stream1_is_cmin,
        epsilon_ntu(Z, NTU, if_stream1_min),
        epsilon_ntu(Z, NTU, if_stream2_min),
    )


def _check_parameters(UA_water, UA_air, fraction, component=None):
    values = (UA_water, UA_air, fraction)
    if not all(cnp.is_concrete(v) for v in values):
        return
    UA_water, UA_air, fraction = (np.asarray(v) for v in values)
    ec = ErrorCollector(component_name=getattr(component, "name", None))
    ec.check(np.all(UA_water > 0.0), "UA_water must be > 0", "UA_water")
    ec.check(np.all(UA_air > 0.0), "UA_air must be > 0", "UA_air")
    ec.check(
        np.all((fraction >= 0.0) & (fraction <= 1.0)),
        "fraction must be in [0, 1]",
        "fraction",
    )
    ec.raise_if_any()


def _check_flow(m_flow, name: str, m_flow_epsilon: float, component=None):
    # Traced values can't be inspected; they are checked on the eager path.
    if not cnp.is_concrete(m_flow):
        return
    if not np.all(np.asarray(m_flow) > m_flow_epsilon):
        raise InvalidFlowError(
            f"Mass flow rate {name}={m_flow} kg/s must be > {m_flow_epsilon}",
            component=component,
            parameter_name=name,
        )


class DryCoilResult(NamedTuple):
    Q_flow: Array  # W, positive from water to air
    T_water_out: Array
    T_air_out: Array
    effectiveness: Array
    NTU: Array
    Z: Array
    C_min: Array
    C_max: Array
    UA: Array


def dry_coil(
    UA_water: float,
    UA_air: float,
    fraction: float,
    m_flow_water: MassFlowRate,
    cp_water: float,
    T_water_in: Temperature,
    m_flow_air: MassFlowRate,
    cp_air: float,
    T_air_in: Temperature,
    flow_regime=FlowRegime.COUNTER_FLOW,
    m_flow_epsilon: float = 1e-10,
    _component=None,
) -> DryCoilResult:
    """Sensible heat transfer of a dry coil with the effectiveness-NTU method.

    The overall UA is the series combination of the water and air side UA
    values, scaled by `fraction`, the share of the coil area that is active.

    Raises:
        ConfigurationError: if a UA value is not positive or `fraction` is
            outside [0, 1].
        InvalidFlowError: if either mass flow rate is <= m_flow_epsilon.
        UnsupportedRegimeError: if `flow_regime` maps to no correlation.
    """
    _check_parameters(UA_water, UA_air, fraction, _component)
    _check_flow(m_flow_water, "m_flow_water", m_flow_epsilon, _component)
    _check_flow(m_flow_air, "m_flow_air", m_flow_epsilon, _component)

    C_water = m_flow_water * cp_water
    C_air = m_flow_air * cp_air
    C_min = cnp.minimum(C_water, C_air)
    C_max = cnp.maximum(C_water, C_air)
    Z = C_min / C_max

    UA = 1.0 / (1.0 / UA_air + 1.0 / UA_water)
    NTU = fraction * UA / C_min

    eps = _effectiveness(Z, NTU, flow_regime, stream1_is_cmin=C_water < C_air)

    Q_flow = eps * C_min * (T_water_in - T_air_in)
    T_air_out = T_air_in + Q_flow / C_air
    T_water_out = T_water_in - Q_flow / C_water

    return DryCoilResult(
        Q_flow=Q_flow,
        T_water_out=T_water_out,
        T_air_out=T_air_out,
        effectiveness=eps,
        NTU=NTU,
        Z=Z,
        C_min=C_min,
        C_max=C_max,
        UA=UA,
    )


@dataclass_json
@dataclasses.dataclass(frozen=True)
class DryCoilConfig:
    """Parameters of a dry coil.

    Attributes:
        UA_water: water side UA value (W/K).
        UA_air: air side UA value (W/K).
        fraction: fraction of the coil area that is dry/active, in [0, 1].
        flow_regime: a `FlowRegime` or `HeatExchangerConfiguration` value.
        m_flow_epsilon: mass flow rates at or below this are rejected (kg/s).
    """

    UA_water: float
    UA_air: float
    fraction: float = 1.0
    flow_regime: str = FlowRegime.COUNTER_FLOW.value
    m_flow_epsilon: float = 1e-10

    def __post_init__(self):
        ec = ErrorCollector(component_name="DryCoilConfig")
        ec.check(self.UA_water > 0.0, "UA_water must be > 0", "UA_water")
        ec.check(self.UA_air > 0.0, "UA_air must be > 0", "UA_air")
        ec.check(
            0.0 <= self.fraction <= 1.0, "fraction must be in [0, 1]", "fraction"
        )
        ec.check(
            self.m_flow_epsilon >= 0.0,
            "m_flow_epsilon must be >= 0",
            "m_flow_epsilon",
        )
        with ec:
            as_flow_regime(self.flow_regime)
        ec.raise_if_any()

    @property
    def regime(self) -> FlowRegime | HeatExchangerConfiguration:
        return as_flow_regime(self.flow_regime)


class DryCoil(Component):
    """Dry coil between a water stream and an air stream.

    Specific heat capacities are evaluated at the inlet temperatures.

    Inputs:
        m_flow_water, T_water_in, m_flow_air, T_air_in

    Outputs:
        Q_flow: heat flow from water to air (W).
        T_water_out, T_air_out: outlet temperatures (K).
        effectiveness: dimensionless, in [0, 1].
    """

    class Inputs(NamedTuple):
        m_flow_water: MassFlowRate
        T_water_in: Temperature
        m_flow_air: MassFlowRate
        T_air_in: Temperature

    def __init__(
        self,
        config: DryCoilConfig,
        water: FluidBase = None,
        air: FluidBase = None,
        name: str = None,
        system_defaults: SystemDefaults = None,
    ):
        super().__init__(name=name, system_defaults=system_defaults)
        self.config = config
        self.water = ConstantPropertyLiquidWater() if water is None else water
        self.air = (
            IdealGasAir(system_defaults=self.system_defaults) if air is None else air
        )

        for field in ("Q_flow", "T_water_out", "T_air_out", "effectiveness"):
            self.declare_output_port(self._make_output(field), name=field)

        logger.debug(
            "Dry coil with UA=%s W/K, regime %s",
            1.0 / (1.0 / config.UA_air + 1.0 / config.UA_water),
            config.regime.value,
            **logdata(component=self),
        )

    def _make_output(self, field):
        def _output(_time, _state, inputs):
            return getattr(self.evaluate(inputs), field)

        return _output

    def evaluate(self, inputs: Inputs) -> DryCoilResult:
        config = self.config
        return dry_coil(
            config.UA_water,
            config.UA_air,
            config.fraction,
            inputs.m_flow_water,
            self.water.specific_heat_capacity(inputs.T_water_in),
            inputs.T_water_in,
            inputs.m_flow_air,
            self.air.specific_heat_capacity(inputs.T_air_in),
            inputs.T_air_in,
            flow_regime=config.regime,
            m_flow_epsilon=config.m_flow_epsilon,
            _component=self,
        )
