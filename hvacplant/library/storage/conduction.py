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

"""Thermal conductances of the tank insulation and of the stored fluid."""

from __future__ import annotations

import math

from .segments import ConductiveLink, TankGeometry

__all__ = [
    "side_wall_conductance",
    "series_conductance",
    "end_cap_conductance",
    "fluid_conductance",
    "tank_conductive_links",
]


def side_wall_conductance(
    insulation_conductivity: float,
    segment_height: float,
    radius: float,
    insulation_thickness: float,
) -> float:
    """Radial conduction through a cylindrical insulation shell, W/K."""
    return (
        2.0
        * math.pi
        * insulation_conductivity
        * segment_height
        / math.log((radius + insulation_thickness) / radius)
    )


def series_conductance(*conductances: float) -> float:
    return 1.0 / sum(1.0 / G for G in conductances)


def fluid_conductance(area: float, fluid_conductivity: float, segment_height: float):
    """Conduction over one segment height of the stored fluid, W/K."""
    return area * fluid_conductivity / segment_height


def end_cap_conductance(
    area: float,
    fluid_conductivity: float,
    segment_height: float,
    insulation_conductivity: float,
    insulation_thickness: float,
) -> float:
    """Top or bottom cap: fluid layer in series with the flat insulation, W/K."""
    return series_conductance(
        fluid_conductance(area, fluid_conductivity, segment_height),
        area * insulation_conductivity / insulation_thickness,
    )


def tank_conductive_links(
    geometry: TankGeometry,
    insulation_conductivity: float,
    insulation_thickness: float,
    fluid_conductivity: float,
) -> list[ConductiveLink]:
    n = geometry.n_seg
    h = geometry.segment_height
    G_side = side_wall_conductance(
        insulation_conductivity, h, geometry.radius, insulation_thickness
    )
    G_cap = end_cap_conductance(
        geometry.area,
        fluid_conductivity,
        h,
        insulation_conductivity,
        insulation_thickness,
    )
    G_fluid = fluid_conductance(geometry.area, fluid_conductivity, h)

    links = [ConductiveLink(i, i + 1, G_fluid) for i in range(n - 1)]
    links += [ConductiveLink(i, None, G_side, "side") for i in range(n)]
    links.append(ConductiveLink(0, None, G_cap, "top"))
    links.append(ConductiveLink(n - 1, None, G_cap, "bottom"))
    return links
