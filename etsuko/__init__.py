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
"""Etsuko: a pseudo-email service living in a chat platform.

Users sign up for accounts, log into them from their platform identity,
and send emails to each other with slash commands.
"""
import logging
from datetime import datetime
from typing import List, Optional, Tuple

import httpx
from unqlite import UnQLite

from .apigate import HTTPAPIGateway, PlatformREST, WebhookErrorReporter
from .commands import build_registry
from .interactions import (
    CooldownGate,
    Dispatcher,
    ErrorReporter,
    Invocation,
    LoggingErrorReporter,
    Responder,
)
from .interactions.cooldown import DEFAULT_COOLDOWN_SECONDS
from .storagehub import StorageHub
from .usrsys.auth import (
    AuthProvider,
    CredentialPolicy,
    InsecureLegacyPlaintextCredentials,
)
from .usrsys.usr import AccountRecord, format_date


class Etsuko(object):
    """The entry of Etsuko. This class stores configuration and tools to keep other components running.

    Current components:

    - User System (`etsuko.usrsys`)
    - Interactions (`etsuko.interactions`) and the commands (`etsuko.commands`)
    - HTTP API Gateway (`etsuko.apigate`)

    This class is also provided as a bridge among different components.

    .. caution:: Though many properties could be changed in runtime, be notice on the side effect!
    """

    __logger = logging.getLogger("etsuko.Etsuko")

    def __init__(
        self,
        *,
        database_path: Optional[str] = None,
        application_id: Optional[str] = None,
        public_key: Optional[str] = None,
        bot_token: Optional[str] = None,
        error_webhook_url: Optional[str] = None,
        http_binds: Optional[List[Tuple[Optional[str], int]]] = None,
        cooldown_seconds: float = DEFAULT_COOLDOWN_SECONDS,
        credential_policy: Optional[CredentialPolicy] = None,
        debug: bool = False,
    ) -> None:
        self.debug = debug
        self.database_path = database_path
        """`Optional[str]`. The path to database. It's a file path or ":mem:".
        ":mem:" tells UnQLite open database in memory. `None` keeps everything in plain python objects."""
        self.database = UnQLite(database_path) if database_path else None
        """Database instance. Notice that this property may not be avaliable in future."""
        self.storage_hub = StorageHub(self.database)
        """`etsuko.StorageHub`. The references to all storages in etsuko."""
        self.auth_provider = AuthProvider(
            self.storage_hub.accounts,
            credential_policy
            if credential_policy
            else InsecureLegacyPlaintextCredentials(),
        )
        """`etsuko.usrsys.auth.AuthProvider`. The auth provider for this instance."""
        self.rest = PlatformREST(application_id, bot_token)
        """`etsuko.apigate.PlatformREST`. The client of the platform's HTTP API."""
        self.reporter: ErrorReporter = (
            WebhookErrorReporter(error_webhook_url, self.rest)
            if error_webhook_url
            else LoggingErrorReporter()
        )
        """`etsuko.interactions.ErrorReporter`. Where the errors go."""
        self.registry = build_registry()
        self.started_at = datetime.now()
        self.dispatcher = Dispatcher(
            registry=self.registry,
            storage_hub=self.storage_hub,
            auth_provider=self.auth_provider,
            cooldown_gate=CooldownGate(cooldown_seconds),
            reporter=self.reporter,
            started_at=self.started_at,
        )
        """`etsuko.interactions.Dispatcher`. Runs the commands."""
        self.http_api_gate = HTTPAPIGateway(
            self.dispatcher,
            self.rest,
            http_binds=http_binds if http_binds else [],
            public_key=public_key,
            debug=debug,
        )
        """`etsuko.apigate.HTTPAPIGateway`. Receives the interactions."""
        super().__init__()

    async def start(self) -> None:
        """Start the engine!

        Related:

        - `etsuko.apigate.HTTPAPIGateway.start`
        """
        self.started_at = self.dispatcher.started_at = datetime.now()
        await self.http_api_gate.start()
        self.__logger.info("started with %d commands", len(self.registry))

    async def stop(self) -> None:
        """Stop the etsuko instance."""
        await self.http_api_gate.stop()
        await self.rest.close()
        self.dispatcher.cooldown_gate.clear()

    async def sync_commands(self) -> None:
        """Register all commands on the platform, replacing the registered ones."""
        await self.rest.overwrite_commands(self.registry.application_commands())

    async def dispatch(self, invocation: Invocation, responder: Responder) -> None:
        """Handle an invocation without the HTTP gateway.

        Related:

        - `etsuko.interactions.Dispatcher.dispatch`
        """
        await self.dispatcher.dispatch(invocation, responder)

    async def new_account(
        self, username: str, password: str
    ) -> Optional[AccountRecord]:
        """Create an account. This method is used for programmaic uses from outside, it does access the storage directly
        and skips the checks done by `/signup`, except that the username must be free: `None` if it is taken."""
        return await self.storage_hub.accounts.create_account(
            username,
            await self.auth_provider.policy.encode(password),
            format_date(datetime.now()),
        )

    def http_api_gate_client(self) -> httpx.AsyncClient:
        return self.http_api_gate.http_client()


__all__ = ["Etsuko", "StorageHub"]
