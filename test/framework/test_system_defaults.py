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

from hvacplant.framework import ConfigurationError, SystemDefaults


def test_defaults():
    defaults = SystemDefaults()
    assert defaults.p_ambient == 101325.0
    assert defaults.T_ambient == 293.15


def test_json_round_trip():
    defaults = SystemDefaults(T_ambient=283.15)
    assert SystemDefaults.from_json(defaults.to_json()) == defaults


def test_invalid_values_are_all_reported():
    with pytest.raises(ConfigurationError) as exc:
        SystemDefaults(p_ambient=0.0, T_ambient=-1.0)
    params = {err.parameter_name for err in exc.value.errors}
    assert params == {"p_ambient", "T_ambient"}
