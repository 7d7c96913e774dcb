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

"""Mixing of unstable temperature layers in a stratified tank."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ...backend import numpy_api as cnp
from ...framework.error import ErrorCollector
from ...logging import logger, logdata

if TYPE_CHECKING:
    from ...backend.typing import Array


__all__ = ["Buoyancy", "buoyancy_heat_flow"]


def buoyancy_heat_flow(T: Array, k) -> tuple[Array, Array]:
    """Heat moved upward between adjacent segments that are inverted.

    Args:
        T: segment temperatures, top first.
        k: mixing conductance, W/K.

    Returns:
        The heat flow across each of the n_seg - 1 interfaces (positive
        upward), and the resulting heat flow into each segment.
    """
    Q_pair = k * cnp.maximum(T[1:] - T[:-1], 0.0)
    zero = cnp.zeros((1,), dtype=Q_pair.dtype)
    Q_seg = cnp.concatenate([Q_pair, zero]) - cnp.concatenate([zero, Q_pair])
    return Q_pair, Q_seg


class Buoyancy:
    """Relaxes temperature inversions with time constant `tau`.

    The mixing conductance is the segment heat capacity divided by `tau`, so a
    single inversion decays on the order of `tau` seconds.
    """

    def __init__(self, tau: float, capacitance: float, name: str = None):
        ec = ErrorCollector(component_name=name)
        ec.check(tau > 0.0, "tau must be > 0", "tau")
        ec.check(capacitance > 0.0, "segment heat capacity must be > 0", "capacitance")
        ec.raise_if_any()

        self.tau = tau
        self.k = capacitance / tau
        logger.debug(
            "Buoyancy mixing conductance %.6g W/K",
            self.k,
            **logdata(component_name=name, tau=tau),
        )

    def __call__(self, T: Array) -> Array:
        return buoyancy_heat_flow(T, self.k)[1]

    def pair_heat_flow(self, T: Array) -> Array:
        return buoyancy_heat_flow(T, self.k)[0]
