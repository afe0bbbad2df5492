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
"""Interactions: how invocations from the platform become command runs.

- `protocols`: `Invocation`, `Responder`, `ErrorReporter`
- `response`: what commands answer with
- `registry`: the table of commands
- `cooldown`: the per-identity cooldown
- `context`: what a command handler gets
- `dispatcher`: putting it all together
"""
from .context import CommandContext
from .cooldown import CooldownGate
from .dispatcher import Dispatcher, LoggingErrorReporter
from .protocols import ErrorReporter, Invocation, Responder
from .registry import AUTH_EXEMPT_COMMANDS, Command, CommandOption, CommandRegistry
from .response import Attachment, Embed, EmbedField, Response
