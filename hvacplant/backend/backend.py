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
import os
from typing import Callable

import numpy as np
import jax

from ._numpy import numpy_functions, numpy_constants
from ._jax import jax_functions, jax_constants

REQUESTED_BACKEND = os.environ.get("HVACPLANT_BACKEND", None)
DEFAULT_BACKEND = REQUESTED_BACKEND or "jax"


def _make_backend(name, functions, constants):
    # Create a new class with the given name and attributes
    static_functions = {
        name: staticmethod(function) for name, function in functions.items()
    }
    attrs = {**static_functions, **constants}
    return type(name, (), attrs)()


class MathDispatcher:
    """Singleton class for calling out to the appropriate backend."""

    _active_backend = DEFAULT_BACKEND
    _disable_x64 = False

    _backends = {
        "numpy": _make_backend("NumpyBackend", numpy_functions, numpy_constants),
        "jax": _make_backend("JaxBackend", jax_functions, jax_constants),
    }

    def __init__(self) -> None:
        # FIXME can't switch to 32 bits after init
        enable_x64 = os.environ.get("JAX_ENABLE_X64", "true").lower() != "false"
        jax.config.update("jax_enable_x64", enable_x64)
        self._disable_x64 = not enable_x64

    @property
    def active_backend(self) -> str:
        return self._active_backend

    def set_backend(self, backend: str):
        """Change the numerical backend (JAX or numpy)

        Components capture no backend-specific arrays at construction, so the
        backend may be switched between evaluations. Arrays returned by one
        backend are accepted by the other.
        """
        if backend not in self._backends:
            raise ValueError(f"Backend {backend} not supported")
        self._active_backend = backend

    @property
    def floatx(self):
        """Default float type, float64 unless JAX_ENABLE_X64 is "false"."""
        return self.float32 if self._disable_x64 else self.float64

    def __getattr__(self, name):
        backend = self._backends[self.active_backend]
        # First look for the attribute in the backend in case the default is overridden
        if hasattr(backend, name):
            return getattr(self._backends[self.active_backend], name)
        # Else try to get it from the underlying lib
        if hasattr(backend.lib, name):
            return getattr(backend.lib, name)
        raise AttributeError(f"Backend {self.active_backend} has no attribute {name}")

    def function(self, name: str) -> Callable:
        # These seem to have to be wrapped in a function to avoid fixing
        # the backend at the time of definition.
        def _call(*args, **kwargs):
            return getattr(self, name)(*args, **kwargs)

        return _call


dispatcher = MathDispatcher()

inf = np.inf
nan = np.nan

# Alias some core functions for convenience
asarray = dispatcher.function("asarray")
array = dispatcher.function("array")
zeros = dispatcher.function("zeros")
zeros_like = dispatcher.function("zeros_like")
reshape = dispatcher.function("reshape")
is_concrete = dispatcher.function("is_concrete")
