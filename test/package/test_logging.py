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

import logging

from hvacplant import logging as hvacplant_logging
from hvacplant.library.storage import StratifiedTank, TankConfig


def test_logdata():
    tank = StratifiedTank(TankConfig(volume=0.3, height=1.5), name="tank")
    data = hvacplant_logging.logdata(component=tank, n_seg=4)
    assert data == {
        "extra": {
            "extras": {
                "n_seg": 4,
                "component": "tank",
                "component_type": "StratifiedTank",
            }
        }
    }
    assert hvacplant_logging.logdata() == {}


def test_construction_is_logged_at_debug(caplog):
    hvacplant_logging.set_log_level(logging.DEBUG)
    with caplog.at_level(logging.DEBUG, logger="hvacplant"):
        StratifiedTank(TankConfig(volume=0.3, height=1.5, n_seg=3), name="tank")

    records = [r for r in caplog.records if r.name.startswith("hvacplant")]
    messages = [r.getMessage() for r in records]
    assert any("Stratified tank with 3 segments" in m for m in messages)
    assert any("Buoyancy mixing conductance" in m for m in messages)
    assert all(r.levelno == logging.DEBUG for r in records)


def test_set_log_level_per_package():
    hvacplant_logging.set_log_level("WARNING", pkg="hvacplant")
    assert logging.getLogger("hvacplant").level == logging.WARNING
    hvacplant_logging.set_log_level("INFO")
    assert logging.getLogger("hvacplant").level == logging.INFO
