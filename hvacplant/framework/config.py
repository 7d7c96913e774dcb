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

"""Configuration shared by components, passed to each one at construction."""

from __future__ import annotations

import dataclasses

from dataclasses_json import dataclass_json

from .error import ErrorCollector

__all__ = ["SystemDefaults"]


@dataclass_json
@dataclasses.dataclass(frozen=True)
class SystemDefaults:
    """Ambient conditions and constants shared by the components of a plant.

    Attributes:
        p_ambient: ambient pressure (Pa).
        T_ambient: ambient temperature (K), also the default start temperature
            of components that hold fluid.
    """

    p_ambient: float = 101325.0
    T_ambient: float = 293.15

    def __post_init__(self):
        ec = ErrorCollector(component_name="SystemDefaults")
        ec.check(self.p_ambient > 0.0, "p_ambient must be > 0", "p_ambient")
        ec.check(self.T_ambient > 0.0, "T_ambient must be > 0 K", "T_ambient")
        ec.raise_if_any()
