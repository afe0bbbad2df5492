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
"""`CommandContext`: everything a command handler gets.
"""
import logging
from datetime import datetime
from typing import Optional, Sequence

from ..errors import InteractionAlreadyAcknowledged, InteractionNotAcknowledged
from ..storagehub import StorageHub
from ..usrsys.auth import AuthProvider
from ..usrsys.storage import AccountRecordStorage
from ..usrsys.usr import AccountRecord
from .protocols import ErrorReporter, Invocation, Responder
from .registry import Command, CommandRegistry
from .response import Attachment, Embed, Response


class CommandContext(object):
    """One invocation of a command, being handled.

    The answer goes though a fixed lifecycle: `respond` exactly once, then `edit` zero or more times.
    Handlers doing slow work after answering should `respond` with a placeholder first.
    """

    __logger = logging.getLogger("etsuko.interactions.CommandContext")

    def __init__(
        self,
        *,
        command: Command,
        invocation: Invocation,
        account: Optional[AccountRecord],
        responder: Responder,
        storage_hub: StorageHub,
        auth_provider: AuthProvider,
        registry: CommandRegistry,
        reporter: ErrorReporter,
        started_at: Optional[datetime] = None,
    ) -> None:
        self.command = command
        self.invocation = invocation
        self.account = account
        """`Optional[AccountRecord]`. The account the invoker is logged into, as loaded before the handler runs."""
        self.responder = responder
        self.storage_hub = storage_hub
        self.auth_provider = auth_provider
        self.registry = registry
        self.reporter = reporter
        self.started_at = started_at
        """`Optional[datetime]`. When the bot started, for uptime display."""
        self.acknowledged = False
        super().__init__()

    @property
    def identity(self) -> str:
        return self.invocation.user_id

    @property
    def accounts(self) -> AccountRecordStorage:
        return self.storage_hub.accounts

    def option(self, name: str, default: str = "") -> str:
        """The parameter `name` of the invocation."""
        return self.invocation.options.get(name, default)

    async def respond(
        self, content: Optional[str] = None, *, embeds: Sequence[Embed] = ()
    ) -> None:
        """Acknowledge the invocation. The visibility is the one declared by the command."""
        if self.acknowledged:
            raise InteractionAlreadyAcknowledged(self.command.name)
        self.acknowledged = True
        await self.responder.respond(
            Response(
                content=content,
                embeds=list(embeds),
                ephemeral=self.command.ephemeral,
            )
        )

    async def edit(
        self,
        content: Optional[str] = None,
        *,
        embeds: Sequence[Embed] = (),
        files: Sequence[Attachment] = (),
    ) -> None:
        """Replace the answer."""
        if not self.acknowledged:
            raise InteractionNotAcknowledged(self.command.name)
        await self.responder.edit(
            Response(
                content=content,
                embeds=list(embeds),
                files=list(files),
                ephemeral=self.command.ephemeral,
            )
        )

    async def reply(self, content: str) -> None:
        """`respond` with `content`, or `edit` if the invocation is acknowledged already."""
        if self.acknowledged:
            await self.edit(content)
        else:
            await self.respond(content)

    async def report(self, error: BaseException) -> None:
        """Send `error` to the operator channel, the invoker is not told."""
        self.__logger.warning(
            "command %s reported: %r", self.command.name, error, exc_info=error
        )
        await self.reporter.report(error)

    def require_account(self) -> AccountRecord:
        """The account of the invoker. Only commands in `AUTH_EXEMPT_COMMANDS` can run without."""
        assert self.account is not None, "dispatcher lets no unlinked identity in"
        return self.account
