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
Segment geometry and conductive links of a stratified tank.

Segments are numbered from the top (0) to the bottom (n_seg - 1). Fluid port
`a` is above segment 0 and fluid port `b` below the last segment; a positive
mass flow rate enters at `a` and leaves at `b`.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, NamedTuple, Optional, Sequence

import numpy as np

from ...backend import numpy_api as cnp
from ...framework.error import ErrorCollector

if TYPE_CHECKING:
    from ...backend.typing import Array


__all__ = [
    "AMBIENT_PORTS",
    "TankGeometry",
    "ConductiveLink",
    "SegmentNetwork",
    "upwind_net_flow",
]

AMBIENT_PORTS = ("side", "top", "bottom")


class TankGeometry(NamedTuple):
    """Cylindrical tank split in `n_seg` segments of equal height."""

    n_seg: int
    volume: float  # m3
    height: float  # m
    segment_height: float  # m
    segment_volume: float  # m3
    area: float  # cross-section, m2
    radius: float  # m

    @classmethod
    def from_volume_height(cls, volume: float, height: float, n_seg: int):
        area = volume / height
        return cls(
            n_seg=n_seg,
            volume=volume,
            height=height,
            segment_height=height / n_seg,
            segment_volume=volume / n_seg,
            area=area,
            radius=math.sqrt(area / math.pi),
        )


class ConductiveLink(NamedTuple):
    """Thermal conductance between a segment and a neighbor or an ambient port.

    `b` is None for links to an ambient port, which is then named by `port`.
    Heat flows from `a` to `b` (or to the port) when `a` is warmer.
    """

    a: int
    b: Optional[int]
    conductance: float  # W/K
    port: Optional[str] = None


class SegmentNetwork:
    """Linear conduction network over the tank segments.

    Segment-to-segment links are stored as an incidence matrix `B` with one row
    per link (+1 at `a`, -1 at `b`), so the link heat flows are
    `q = G * (B @ T)` and the heat flow into the segments is `-B.T @ q`.
    Ambient links are lumped into one conductance vector per port.
    """

    def __init__(self, n_seg: int, links: Sequence[ConductiveLink], name=None):
        ec = ErrorCollector(component_name=name)
        for link in links:
            ec.check(
                0 <= link.a < n_seg,
                f"Link {link} starts outside the {n_seg} segments",
                "links",
            )
            if link.b is None:
                ec.check(
                    link.port in AMBIENT_PORTS,
                    f"Link {link} must name one of the ports {AMBIENT_PORTS}",
                    "links",
                )
            else:
                ec.check(
                    0 <= link.b < n_seg and link.b != link.a,
                    f"Link {link} must end at another segment",
                    "links",
                )
            ec.check(
                link.conductance >= 0.0,
                f"Link {link} has a negative conductance",
                "links",
            )
        ec.raise_if_any()

        self.n_seg = n_seg
        self.links = tuple(links)

        internal = [link for link in self.links if link.b is not None]
        self._incidence = np.zeros((len(internal), n_seg))
        self._conductance = np.zeros(len(internal))
        for row, link in enumerate(internal):
            self._incidence[row, link.a] = 1.0
            self._incidence[row, link.b] = -1.0
            self._conductance[row] = link.conductance

        self._port_conductance = {port: np.zeros(n_seg) for port in AMBIENT_PORTS}
        for link in self.links:
            if link.b is None:
                self._port_conductance[link.port][link.a] += link.conductance

    @property
    def incidence(self) -> np.ndarray:
        return self._incidence.copy()

    def port_conductance(self, port: str) -> np.ndarray:
        """Per-segment conductance to an ambient port, W/K."""
        return self._port_conductance[port].copy()

    def internal_heat_flow(self, T: Array) -> Array:
        """Heat flow into each segment from its neighbors, W."""
        B = cnp.asarray(self._incidence)
        q = cnp.asarray(self._conductance) * (B @ T)
        return -(B.T @ q)

    def port_heat_flow(self, T: Array, port: str, T_port) -> Array:
        """Heat flow from each segment to an ambient port, W.

        An unconnected port (`T_port` is None) is adiabatic.
        """
        if T_port is None:
            return cnp.zeros_like(T)
        return cnp.asarray(self._port_conductance[port]) * (T - T_port)


def upwind_net_flow(m_flow, x: Array, x_a_in, x_b_in) -> Array:
    """Net advected flow of a segment quantity, inflow minus outflow.

    Each segment receives the value of its upstream neighbor, or of the inlet
    stream for the first segment downstream of a port, and loses its own value
    at the same mass flow rate.

    Args:
        m_flow: mass flow rate from port a to port b, kg/s.
        x: per-segment values, shape (n_seg, ...).
        x_a_in: value of the stream entering at port a.
        x_b_in: value of the stream entering at port b.

    Returns:
        The net flow per segment, same shape as `x`.
    """
    m_pos = cnp.maximum(m_flow, 0.0)
    m_neg = cnp.maximum(-m_flow, 0.0)
    edge_shape = (1,) + tuple(x.shape[1:])
    x_a = cnp.broadcast_to(cnp.asarray(x_a_in, dtype=x.dtype), edge_shape)
    x_b = cnp.broadcast_to(cnp.asarray(x_b_in, dtype=x.dtype), edge_shape)
    x_up = cnp.concatenate([x_a, x[:-1]], axis=0)
    x_down = cnp.concatenate([x[1:], x_b], axis=0)
    return m_pos * (x_up - x) + m_neg * (x_down - x)
