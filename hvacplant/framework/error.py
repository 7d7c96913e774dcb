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
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .component import Component


__all__ = [
    "PlantModelError",
    "StaticError",
    "ConfigurationError",
    "EvaluationError",
    "InvalidFlowError",
    "UnsupportedRegimeError",
    "ErrorCollector",
]


class PlantModelError(Exception):
    """Base class for all custom hvacplant errors."""

    def __init__(
        self,
        message=None,
        *,
        component: "Component" = None,
        component_name: str = None,
        parameter_name: str = None,
        port_name: str = None,
    ):
        """Create a new PlantModelError.

        Only `message` is a positional argument, all others are keyword arguments.

        Args:
            message: A custom error message, defaults to the error class name.
            component: The component that the error occurred in, if available.
            component_name: The name of the component, use if it can't be passed,
                eg. while its configuration is being validated.
            parameter_name: The name of the parameter that the error occurred at.
            port_name: The name of the input or output quantity group involved.
        """
        super().__init__(message)

        if component is not None:
            self.component_name = component_name or component.name
        else:
            self.component_name = component_name

        self.message = message
        self.parameter_name = parameter_name
        self.port_name = port_name

    def __str__(self):
        message = self.message or self.default_message
        return f"{message}{self._context_info()}"

    def _context_info(self) -> str:
        strbuf = []

        if self.component_name:
            strbuf.append(f" in component {self.component_name}")
        if self.port_name:
            strbuf.append(f" at port {self.port_name}")
        if self.parameter_name:
            strbuf.append(f" with parameter {self.parameter_name}")
        if self.__cause__ is not None:
            strbuf.append(f": {self.__cause__}")

        return "".join(strbuf)

    @property
    def default_message(self):
        return type(self).__name__

    def caused_by(self, exc_type: type):
        """Check if this error is or was caused by another error type.

        For instance, if a ConfigurationError is raised because of a ValueError,
        this method will return True when called with ValueError as exc_type.

        Args:
            exc_type: The type of exception to check for (eg. ValueError)

        Returns:
            bool: True if the error is or was caused by the given exception type.
        """

        def _is_or_caused_by(exc, cause_type) -> bool:
            if not exc or not cause_type:
                return False
            if isinstance(exc, cause_type):
                return True
            if not hasattr(exc, "__cause__"):
                return False
            return _is_or_caused_by(exc.__cause__, cause_type)

        return _is_or_caused_by(self, exc_type)


class StaticError(PlantModelError):
    """Errors detected while a component is configured, before any evaluation."""

    pass


class ConfigurationError(StaticError):
    """Structural parameters are missing or have invalid values.

    When several problems are found in one configuration record, they are kept
    in `errors` and all of them are listed in the message.
    """

    def __init__(self, message=None, *, errors: list = None, **kwargs):
        super().__init__(message, **kwargs)
        self.errors = errors or []

    def __str__(self):
        if len(self.errors) > 1:
            details = "\n\t".join(str(e) for e in self.errors)
            return f"{len(self.errors)} configuration errors:\n\t{details}"
        return super().__str__()


class EvaluationError(PlantModelError):
    """Errors detected at an evaluation boundary, eg. invalid input values."""

    pass


class InvalidFlowError(EvaluationError):
    """A mass flow rate is zero, negative or below the configured threshold."""

    pass


class UnsupportedRegimeError(EvaluationError):
    """A flow regime or heat exchanger configuration has no correlation."""

    pass


class ErrorCollector:
    """
    Tool used to collect errors related to a component's configuration.

    Validation code adds every problem it finds, then calls `raise_if_any` so
    that a single ConfigurationError reports all of them.

    Can also be used as a context manager: any PlantModelError raised inside
    the block is collected instead of propagated, other exceptions propagate.
    """

    def __init__(self, component_name: Optional[str] = None):
        self.component_name = component_name
        self.errors: list[PlantModelError] = []

    def add_error(self, error: PlantModelError):
        """Add an error to the collection."""
        self.errors.append(error)

    def check(self, condition: bool, message: str, parameter_name: str = None):
        """Record a ConfigurationError unless `condition` holds."""
        if not condition:
            self.add_error(
                ConfigurationError(
                    message,
                    component_name=self.component_name,
                    parameter_name=parameter_name,
                )
            )

    def raise_if_any(self):
        if not self.errors:
            return
        if len(self.errors) == 1:
            raise self.errors[0]
        raise ConfigurationError(
            component_name=self.component_name, errors=list(self.errors)
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        # Return values: True to suppress the exception, False to propagate it
        if exc_type is not None and issubclass(exc_type, PlantModelError):
            self.add_error(exc_value)
            return True
        return False
