# Copyright (C) 2022 The Etsuko Contributors
#
# This file is part of Etsuko.
#
# Etsuko is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# Etsuko is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with Etsuko.  If not, see <http://www.gnu.org/licenses/>.
"""Exceptions shared by the components of Etsuko.

A missing document is never an exception: storages return `None` for it.

- `ValidationFailure` is shown to the invoking user as-is.
- `StoreFailure` (and anything unexpected) goes to the operator channel, the user sees nothing more.
"""


class EtsukoError(Exception):
    """Base class of the errors raised by Etsuko."""


class ValidationFailure(EtsukoError):
    """The input of a command violates a declared constraint.

    Attributes:
        message: `str`. The text shown to the user.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class StoreFailure(EtsukoError):
    """The storage could not complete an operation."""


class DecodeError(StoreFailure):
    """A stored document does not have the layout expected by the record type."""


class InteractionNotAcknowledged(EtsukoError):
    """An edit was requested before the interaction had been acknowledged."""


class InteractionAlreadyAcknowledged(EtsukoError):
    """The interaction has been acknowledged already, use an edit instead."""
