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

import pytest

from hvacplant.framework import (
    Component,
    ConfigurationError,
    ErrorCollector,
    EvaluationError,
    InvalidFlowError,
    PlantModelError,
    StaticError,
    UnsupportedRegimeError,
)


def test_hierarchy():
    assert issubclass(ConfigurationError, StaticError)
    assert issubclass(StaticError, PlantModelError)
    assert issubclass(InvalidFlowError, EvaluationError)
    assert issubclass(UnsupportedRegimeError, EvaluationError)
    assert issubclass(EvaluationError, PlantModelError)


def test_context_info():
    component = Component(name="tank")
    err = ConfigurationError(
        "tau must be > 0", component=component, parameter_name="tau"
    )
    assert str(err) == "tau must be > 0 in component tank with parameter tau"

    err = EvaluationError(component_name="coil", port_name="m_flow_air")
    assert str(err) == "EvaluationError in component coil at port m_flow_air"


def test_caused_by():
    try:
        try:
            raise ValueError("bad value")
        except ValueError as exc:
            raise ConfigurationError("wrapped", parameter_name="x") from exc
    except ConfigurationError as err:
        assert err.caused_by(ValueError)
        assert not err.caused_by(KeyError)
        assert str(err).endswith(": bad value")


def test_collector_single_error():
    ec = ErrorCollector(component_name="cfg")
    ec.check(True, "never", "a")
    ec.check(False, "b must be > 0", "b")
    with pytest.raises(ConfigurationError) as exc:
        ec.raise_if_any()
    assert exc.value.parameter_name == "b"
    assert exc.value.errors == []


def test_collector_aggregates():
    ec = ErrorCollector(component_name="cfg")
    ec.check(False, "a must be > 0", "a")
    ec.check(False, "b must be > 0", "b")
    with ec:
        raise UnsupportedRegimeError("no such regime")
    with pytest.raises(ConfigurationError) as exc:
        ec.raise_if_any()

    assert len(exc.value.errors) == 3
    message = str(exc.value)
    assert message.startswith("3 configuration errors")
    assert "with parameter a" in message
    assert "no such regime" in message


def test_collector_propagates_other_errors():
    ec = ErrorCollector()
    with pytest.raises(KeyError):
        with ec:
            raise KeyError("x")
    assert ec.errors == []
    ec.raise_if_any()
