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
"""All the protocol types for `etsuko.interactions`.
"""
from dataclasses import dataclass, field
from typing import Awaitable, Dict, Optional, Protocol

from .response import Response


@dataclass
class Invocation(object):
    """A command invoked on the platform.

    Attributes:
        name: `str`. The command name, without slash.
        user_id: `str`. The platform identity of the invoker.
        guild_id: `Optional[str]`. The guild the command was invoked in. `None` in direct messages.
        options: `Dict[str, str]`. The parameters by name.
    """

    name: str
    user_id: str
    guild_id: Optional[str] = None
    options: Dict[str, str] = field(default_factory=dict)


class Responder(Protocol):
    """A protocol type for the way back to the platform, for one invocation.

    `respond` is called once to acknowledge the invocation, then `edit` can be called any times to change that answer.
    The order is enforced by `etsuko.interactions.context.CommandContext`, implementations don't check it.
    """

    def respond(self, response: Response) -> Awaitable[None]:
        """Send the first answer."""
        ...

    def edit(self, response: Response) -> Awaitable[None]:
        """Replace the first answer."""
        ...


class ErrorReporter(Protocol):
    """A protocol type for the operator channel, where failures are sent to.

    Related:

    - `etsuko.apigate.rest.WebhookErrorReporter`
    - `etsuko.interactions.dispatcher.LoggingErrorReporter`
    """

    def report(self, error: BaseException) -> Awaitable[None]:
        ...
