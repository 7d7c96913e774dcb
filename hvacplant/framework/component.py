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

from __future__ import annotations
from typing import TYPE_CHECKING, Any, Callable, NamedTuple

import numpy as np
import jax
from jax.flatten_util import ravel_pytree

from ..backend import numpy_api as cnp
from .config import SystemDefaults
from .error import PlantModelError

if TYPE_CHECKING:
    from ..backend.typing import Array, Scalar


__all__ = ["Component"]


class Component:
    """Base class for plant components evaluated by an external integrator.

    A component owns no time-stepping loop. It declares a default continuous
    state and an ODE callback, plus any number of named output callbacks. All
    callbacks have the signature

        `callback(time, state, inputs) -> value`

    where `state` is a pytree (usually a NamedTuple of arrays) and `inputs` is
    the component's `Inputs` NamedTuple. Callbacks must not mutate `state`.
    """

    class Inputs(NamedTuple):
        pass

    def __init__(self, name: str = None, system_defaults: SystemDefaults = None):
        self.name = type(self).__name__ if name is None else name
        self.system_defaults = (
            SystemDefaults() if system_defaults is None else system_defaults
        )
        self.ode_callback: Callable = None
        self.output_ports: dict[str, Callable] = {}
        self._default_state = None

    def __repr__(self):
        return f"{type(self).__name__}(name={self.name!r})"

    def declare_continuous_state(self, default_value: Any, ode: Callable):
        """Declare the continuous state and its time derivative callback."""
        self._default_state = default_value
        self.ode_callback = ode

    def declare_output_port(self, callback: Callable, name: str = None) -> str:
        """Declare an algebraic output of the component.

        Returns:
            str: The name of the declared output.
        """
        if name is None:
            name = f"out_{len(self.output_ports)}"
        if name in self.output_ports:
            raise ValueError(f"Output '{name}' is already declared on {self.name}")
        self.output_ports[name] = callback
        return name

    @property
    def has_continuous_state(self) -> bool:
        return self.ode_callback is not None

    def create_state(self):
        """Returns a fresh copy of the default continuous state."""
        if not self.has_continuous_state:
            return None
        return jax.tree_util.tree_map(cnp.array, self._default_state)

    def eval_time_derivatives(self, time: Scalar, state, inputs):
        """Evaluate the right-hand side of the component's ODE."""
        if not self.has_continuous_state:
            raise PlantModelError("Component has no continuous state", component=self)
        return self.ode_callback(time, state, inputs)

    def eval_output(self, name: str, time: Scalar, state, inputs) -> Array:
        try:
            callback = self.output_ports[name]
        except KeyError:
            raise PlantModelError(
                "Unknown output", component=self, port_name=name
            ) from None
        return callback(time, state, inputs)

    def eval_outputs(self, time: Scalar, state, inputs) -> dict[str, Array]:
        return {
            name: callback(time, state, inputs)
            for name, callback in self.output_ports.items()
        }

    def make_ravel(self, state=None):
        """Flatten a state pytree for integrators that work on plain vectors.

        Returns:
            The flat initial vector and the function restoring the pytree from a
            flat vector.
        """
        if state is None:
            state = self.create_state()
        x, unravel = ravel_pytree(state)
        return np.asarray(x), unravel

    def vector_field(self, inputs, state=None):
        """Returns `(y0, f)` with `f(t, y) -> dy/dt` acting on flat vectors.

        Inputs are held constant. The result plugs directly into eg.
        `scipy.integrate.solve_ivp(f, (t0, tf), y0)`.
        """
        y0, unravel = self.make_ravel(state)

        def f(t, y):
            xdot = self.eval_time_derivatives(t, unravel(y), inputs)
            return np.asarray(ravel_pytree(xdot)[0])

        return y0, f
