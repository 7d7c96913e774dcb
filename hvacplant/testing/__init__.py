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

"""Helpers for tests that exercise both numerical backends."""

import os

from hvacplant.backend import numpy_api, DEFAULT_BACKEND, REQUESTED_BACKEND

__all__ = ["requires_jax", "set_backend"]


def requires_jax():
    """Custom decorator for tests that must run with JAX backend"""
    import pytest

    def decorator(func):
        if DEFAULT_BACKEND == "jax":
            return func
        return pytest.mark.skip(reason="Test requires JAX backend")(func)

    return decorator


def set_backend(name):
    # With HVACPLANT_BACKEND set explicitly, tests for the other backend are
    # skipped instead of switching.
    if (
        os.environ.get("PYTEST_CURRENT_TEST") is not None
        and REQUESTED_BACKEND is not None
        and name != REQUESTED_BACKEND
    ):
        import pytest

        pytest.skip(f"Requested backend {name} not available for test")

    numpy_api.set_backend(name)
