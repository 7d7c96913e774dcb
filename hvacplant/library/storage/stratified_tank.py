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
Stratified thermal storage tank.

The tank is a vertical stack of fully mixed fluid segments. Each segment
exchanges enthalpy with its neighbors through the flow between ports `a`
(top) and `b` (bottom), heat with its neighbors by conduction and buoyancy
mixing, and heat with the ambient through the side wall and, for the first and
last segment, the top and bottom caps.
"""

from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING, Any, Mapping, NamedTuple, Optional, Tuple

import numpy as np
from dataclasses_json import dataclass_json

from ...backend import numpy_api as cnp
from ...framework import Component, SystemDefaults
from ...framework.error import ConfigurationError, ErrorCollector, EvaluationError
from ...logging import logger, logdata
from ...media import ConstantPropertyLiquidWater, FluidBase
from .buoyancy import Buoyancy
from .conduction import tank_conductive_links
from .segments import AMBIENT_PORTS, SegmentNetwork, TankGeometry, upwind_net_flow

if TYPE_CHECKING:
    from ...backend.typing import Array


__all__ = ["TankConfig", "StratifiedTank"]


@dataclass_json
@dataclasses.dataclass(frozen=True)
class TankConfig:
    """Structural parameters of a stratified tank.

    Attributes:
        volume: tank volume (m3).
        height: tank height (m).
        n_seg: number of segments, at least 2.
        insulation_thickness: thickness of the insulation (m).
        insulation_conductivity: thermal conductivity of the insulation
            (W/(m*K)).
        tau: time constant for mixing due to temperature inversion (s).
        T_start: start temperature of all segments (K). Defaults to the
            ambient temperature of the system defaults.
        C_start: start values of the trace substances, one per substance.
    """

    volume: float
    height: float
    n_seg: int = 4
    insulation_thickness: float = 0.2
    insulation_conductivity: float = 0.04
    tau: float = 1.0
    T_start: Optional[float] = None
    C_start: Tuple[float, ...] = ()

    def __post_init__(self):
        # JSON decoding and plain mappings may hand over a list
        object.__setattr__(self, "C_start", tuple(self.C_start))

        ec = ErrorCollector(component_name="TankConfig")
        ec.check(self.volume > 0.0, "volume must be > 0", "volume")
        ec.check(self.height > 0.0, "height must be > 0", "height")
        ec.check(
            isinstance(self.n_seg, (int, np.integer)) and self.n_seg >= 2,
            f"n_seg must be an integer >= 2, got {self.n_seg!r}",
            "n_seg",
        )
        ec.check(
            self.insulation_thickness > 0.0,
            "insulation_thickness must be > 0",
            "insulation_thickness",
        )
        ec.check(
            self.insulation_conductivity > 0.0,
            "insulation_conductivity must be > 0",
            "insulation_conductivity",
        )
        ec.check(self.tau > 0.0, "tau must be > 0", "tau")
        if self.T_start is not None:
            ec.check(self.T_start > 0.0, "T_start must be > 0 K", "T_start")
        ec.raise_if_any()

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> TankConfig:
        """Build a configuration from named fields, rejecting unknown ones."""
        fields = {f.name: f for f in dataclasses.fields(cls)}
        ec = ErrorCollector(component_name=cls.__name__)
        for key in mapping:
            ec.check(key in fields, f"Unknown configuration field '{key}'", key)
        for name, field in fields.items():
            required = (
                field.default is dataclasses.MISSING
                and field.default_factory is dataclasses.MISSING
            )
            ec.check(
                not required or name in mapping,
                f"Missing configuration field '{name}'",
                name,
            )
        ec.raise_if_any()
        return cls(**mapping)

    @property
    def n_trace(self) -> int:
        return len(self.C_start)


class StratifiedTank(Component):
    """Stratified tank with `n_seg` segments, top segment first.

    Inputs (`StratifiedTank.Inputs`):
        m_flow: mass flow rate from port a (top) to port b (bottom), kg/s.
        T_a_in, T_b_in: temperature of the fluid entering at port a or b. None
            means the port is unconnected and carries the adjoining segment's
            temperature.
        Q_flow_seg: external heat flow into each segment (W), default zero.
        T_side, T_top, T_bottom: ambient temperatures of the heat ports. None
            means the port is unconnected (adiabatic).
        C_a_in, C_b_in: trace substance values entering at port a or b,
            default zero.

    Outputs:
        T: segment temperatures (K).
        T_a_out, T_b_out: temperature of the fluid leaving at port a or b.
        heat_loss: total heat flow from the tank to the ambient (W).
        Q_flow_side, Q_flow_top, Q_flow_bottom: heat flow through each port,
            positive from tank to ambient (W).
        buoyancy_heat_flow: upward mixing heat flow across each of the
            n_seg - 1 interfaces (W).
        energy: stored enthalpy relative to the medium's reference state (J).
    """

    class State(NamedTuple):
        T: Array  # (n_seg,)
        C: Array  # (n_seg, n_trace)

    class Inputs(NamedTuple):
        m_flow: Any = 0.0
        T_a_in: Any = None
        T_b_in: Any = None
        Q_flow_seg: Any = None
        T_side: Any = None
        T_top: Any = None
        T_bottom: Any = None
        C_a_in: Any = None
        C_b_in: Any = None

    def __init__(
        self,
        config: TankConfig,
        medium: FluidBase = None,
        name: str = None,
        system_defaults: SystemDefaults = None,
    ):
        super().__init__(name=name, system_defaults=system_defaults)
        self.config = config
        self.medium = ConstantPropertyLiquidWater() if medium is None else medium

        self.T_start = (
            self.system_defaults.T_ambient
            if config.T_start is None
            else config.T_start
        )
        self.geometry = TankGeometry.from_volume_height(
            config.volume, config.height, config.n_seg
        )
        self.segment_mass = float(
            self.medium.density(self.T_start) * self.geometry.segment_volume
        )
        if not self.segment_mass > 0.0:
            raise ConfigurationError(
                f"Segment mass must be > 0, got {self.segment_mass}",
                component=self,
                parameter_name="medium",
            )

        capacitance = self.segment_mass * float(
            self.medium.specific_heat_capacity(self.T_start)
        )
        self.buoyancy = Buoyancy(config.tau, capacitance, name=self.name)
        self.network = SegmentNetwork(
            config.n_seg,
            tank_conductive_links(
                self.geometry,
                config.insulation_conductivity,
                config.insulation_thickness,
                self.medium.thermal_conductivity,
            ),
            name=self.name,
        )

        n, n_trace = config.n_seg, config.n_trace
        default_state = self.State(
            T=np.full(n, self.T_start, dtype=float),
            C=np.tile(np.asarray(config.C_start, dtype=float), (n, 1)).reshape(
                n, n_trace
            ),
        )
        self.declare_continuous_state(default_state, self._ode)

        self.declare_output_port(lambda t, x, u: x.T, name="T")
        self.declare_output_port(lambda t, x, u: x.T[0], name="T_a_out")
        self.declare_output_port(lambda t, x, u: x.T[-1], name="T_b_out")
        self.declare_output_port(self._heat_loss, name="heat_loss")
        for port in AMBIENT_PORTS:
            self.declare_output_port(
                self._make_port_output(port), name=f"Q_flow_{port}"
            )
        self.declare_output_port(
            lambda t, x, u: self.buoyancy.pair_heat_flow(x.T),
            name="buoyancy_heat_flow",
        )
        self.declare_output_port(lambda t, x, u: self.energy(x), name="energy")

        logger.debug(
            "Stratified tank with %d segments of %.6g m3, segment mass %.6g kg",
            n,
            self.geometry.segment_volume,
            self.segment_mass,
            **logdata(
                component=self,
                G_side=self.network.port_conductance("side")[0],
                G_top=self.network.port_conductance("top")[0],
                k_buoyancy=self.buoyancy.k,
            ),
        )

    @property
    def n_seg(self) -> int:
        return self.config.n_seg

    def _check_inputs(self, inputs: Inputs):
        # Shapes are static, so this also holds while tracing
        Q = None if inputs.Q_flow_seg is None else cnp.asarray(inputs.Q_flow_seg)
        if Q is not None and cnp.shape(Q) not in ((), (self.n_seg,)):
            raise EvaluationError(
                f"Expected a scalar or {self.n_seg} values, got shape "
                f"{cnp.shape(Q)}",
                component=self,
                port_name="Q_flow_seg",
            )
        for port_name in ("C_a_in", "C_b_in"):
            C = getattr(inputs, port_name)
            if C is not None and cnp.shape(C) not in ((), (self.config.n_trace,)):
                raise EvaluationError(
                    f"Expected {self.config.n_trace} trace substance values, "
                    f"got shape {cnp.shape(C)}",
                    component=self,
                    port_name=port_name,
                )

    def _port_heat_flows(self, T, inputs: Inputs) -> dict[str, Array]:
        return {
            port: self.network.port_heat_flow(T, port, getattr(inputs, f"T_{port}"))
            for port in AMBIENT_PORTS
        }

    def _ode(self, time, state: State, inputs: Inputs) -> State:
        self._check_inputs(inputs)
        T, C = state
        medium = self.medium

        T_a_in = T[0] if inputs.T_a_in is None else inputs.T_a_in
        T_b_in = T[-1] if inputs.T_b_in is None else inputs.T_b_in
        H_net = upwind_net_flow(
            inputs.m_flow,
            medium.specific_enthalpy(T),
            medium.specific_enthalpy(T_a_in),
            medium.specific_enthalpy(T_b_in),
        )

        Q = self.network.internal_heat_flow(T) + self.buoyancy(T)
        for Q_port in self._port_heat_flows(T, inputs).values():
            Q = Q - Q_port
        if inputs.Q_flow_seg is not None:
            Q = Q + cnp.asarray(inputs.Q_flow_seg)

        T_der = (H_net + Q) / (self.segment_mass * medium.specific_heat_capacity(T))

        C_a_in = 0.0 if inputs.C_a_in is None else cnp.asarray(inputs.C_a_in)
        C_b_in = 0.0 if inputs.C_b_in is None else cnp.asarray(inputs.C_b_in)
        C_der = upwind_net_flow(inputs.m_flow, C, C_a_in, C_b_in) / self.segment_mass

        return self.State(T=T_der, C=C_der)

    def _make_port_output(self, port):
        def _output(_time, state, inputs):
            T_port = getattr(inputs, f"T_{port}")
            return cnp.sum(self.network.port_heat_flow(state.T, port, T_port))

        return _output

    def _heat_loss(self, _time, state, inputs):
        flows = self._port_heat_flows(state.T, inputs)
        return sum(cnp.sum(Q_port) for Q_port in flows.values())

    def energy(self, state: State) -> Array:
        """Stored enthalpy relative to the medium reference state, J."""
        return self.segment_mass * cnp.sum(self.medium.specific_enthalpy(state.T))

    def state_to_vector(self, state: State) -> Array:
        """Flatten a state into one vector, temperatures first."""
        return cnp.concatenate([cnp.ravel(state.T), cnp.ravel(state.C)])

    def vector_to_state(self, x) -> State:
        """Inverse of `state_to_vector`."""
        n, n_trace = self.n_seg, self.config.n_trace
        x = cnp.asarray(x)
        return self.State(T=x[:n], C=cnp.reshape(x[n:], (n, n_trace)))
