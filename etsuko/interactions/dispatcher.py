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
"""`Dispatcher`: from an invocation to a running command.
"""
import logging
from datetime import datetime
from typing import Optional

from ..errors import ValidationFailure
from ..storagehub import StorageHub
from ..usrsys.auth import AuthProvider
from .context import CommandContext
from .cooldown import CooldownGate
from .protocols import ErrorReporter, Invocation, Responder
from .registry import CommandRegistry
from .response import Response

COOLDOWN_MESSAGE = "You're on cooldown for `{:g}s`!"
NOT_LOGGED_IN_MESSAGE = "Run `/signup` or `/login` first!"


class LoggingErrorReporter(object):
    """An `ErrorReporter` which only writes the errors into the log."""

    __logger = logging.getLogger("etsuko.interactions.LoggingErrorReporter")

    async def report(self, error: BaseException) -> None:
        self.__logger.error("reported error: %r", error, exc_info=error)


class Dispatcher(object):
    """Run commands for invocations.

    For every invocation:

    1. Invocations out of a guild, from no one or for an unknown command are ignored.
    2. The invoker's account is loaded. If the storage fails, the error is reported and the invoker gets no answer.
    3. An invoker on cooldown is told so.
    4. Without an account, only `signup` and `login` can run.
    5. The command runs, and the invoker stays on cooldown for `CooldownGate.window_seconds` after it.

    `ValidationFailure` from commands are shown to the invoker.
    Any other exception is reported to the operator channel, the invoker is not told about it.

    Invocations run concurrently, the dispatcher does not serialize anything but one identity's invocations (see `CooldownGate`).
    """

    __logger = logging.getLogger("etsuko.interactions.Dispatcher")

    def __init__(
        self,
        *,
        registry: CommandRegistry,
        storage_hub: StorageHub,
        auth_provider: AuthProvider,
        cooldown_gate: Optional[CooldownGate] = None,
        reporter: Optional[ErrorReporter] = None,
        started_at: Optional[datetime] = None,
    ) -> None:
        self.registry = registry
        self.storage_hub = storage_hub
        self.auth_provider = auth_provider
        self.cooldown_gate = cooldown_gate if cooldown_gate else CooldownGate()
        """`CooldownGate`. A new one is created if `None` passed in."""
        self.reporter: ErrorReporter = reporter if reporter else LoggingErrorReporter()
        """`ErrorReporter`. The operator channel, `LoggingErrorReporter` if `None` passed in."""
        self.started_at = started_at if started_at else datetime.now()
        super().__init__()

    async def dispatch(self, invocation: Invocation, responder: Responder) -> None:
        """Handle `invocation`, answering though `responder`."""
        if not invocation.guild_id or not invocation.user_id:
            return
        command = self.registry.get(invocation.name)
        if not command:
            return
        identity = invocation.user_id
        try:
            account = await self.storage_hub.accounts.find_by_identity(identity)
        except Exception as e:
            self.__logger.exception("loading the account of %s failed", identity)
            await self.reporter.report(e)
            return
        if not self.cooldown_gate.try_acquire(identity):
            await responder.respond(
                Response(
                    content=COOLDOWN_MESSAGE.format(self.cooldown_gate.window_seconds),
                    ephemeral=True,
                )
            )
            return
        if account is None and command.requires_account:
            self.cooldown_gate.release(identity)
            await responder.respond(
                Response(content=NOT_LOGGED_IN_MESSAGE, ephemeral=True)
            )
            return
        context = CommandContext(
            command=command,
            invocation=invocation,
            account=account,
            responder=responder,
            storage_hub=self.storage_hub,
            auth_provider=self.auth_provider,
            registry=self.registry,
            reporter=self.reporter,
            started_at=self.started_at,
        )
        self.__logger.debug("running %s for %s", command.name, identity)
        try:
            await command.handler(context)
        except ValidationFailure as e:
            await context.reply(e.message)
        except Exception as e:
            self.__logger.exception("command %s failed", command.name)
            await self.reporter.report(e)
        finally:
            self.cooldown_gate.expire_later(identity)
