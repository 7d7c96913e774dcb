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

from . import _init  # noqa: F401
from .framework import (
    Component,
    SystemDefaults,
    PlantModelError,
    StaticError,
    ConfigurationError,
    EvaluationError,
    InvalidFlowError,
    UnsupportedRegimeError,
)
from .backend import dispatcher as backend
from .media import (
    ConstantPropertyLiquidWater,
    IdealGasAir,
    LinearCpLiquid,
)
from .library import (
    DryCoil,
    DryCoilConfig,
    DryCoilResult,
    FlowRegime,
    HeatExchangerConfiguration,
    StratifiedTank,
    TankConfig,
    dry_coil,
    epsilon_ntu,
    flow_regime_for_configuration,
)
from .version import __version__

set_backend = backend.set_backend

__all__ = [
    "__version__",
    "backend",
    "set_backend",
    "Component",
    "SystemDefaults",
    "PlantModelError",
    "StaticError",
    "ConfigurationError",
    "EvaluationError",
    "InvalidFlowError",
    "UnsupportedRegimeError",
    "ConstantPropertyLiquidWater",
    "IdealGasAir",
    "LinearCpLiquid",
    "StratifiedTank",
    "TankConfig",
    "DryCoil",
    "DryCoilConfig",
    "DryCoilResult",
    "FlowRegime",
    "HeatExchangerConfiguration",
    "dry_coil",
    "epsilon_ntu",
    "flow_regime_for_configuration",
]
