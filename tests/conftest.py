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
from typing import List, Optional

import pytest
from nacl.pwhash import argon2id
from nacl.signing import SigningKey
from unqlite import UnQLite

from etsuko import Etsuko
from etsuko.commands import build_registry
from etsuko.interactions import CooldownGate, Dispatcher, Invocation, Response
from etsuko.storagehub import StorageHub
from etsuko.usrsys.auth import (
    Argon2Credentials,
    AuthProvider,
    CredentialPolicy,
    InsecureLegacyPlaintextCredentials,
)
from etsuko.usrsys.usr import AccountRecord

GUILD = "guild-1"


class RecordingResponder(object):
    def __init__(self) -> None:
        self.responses: List[Response] = []
        self.edits: List[Response] = []

    async def respond(self, response: Response) -> None:
        self.responses.append(response)

    async def edit(self, response: Response) -> None:
        self.edits.append(response)

    @property
    def last(self) -> Optional[Response]:
        if self.edits:
            return self.edits[-1]
        if self.responses:
            return self.responses[-1]
        return None

    @property
    def text(self) -> Optional[str]:
        return self.last.content if self.last else None


class RecordingReporter(object):
    def __init__(self) -> None:
        self.errors: List[BaseException] = []

    async def report(self, error: BaseException) -> None:
        self.errors.append(error)


class Harness(object):
    """A dispatcher over in-memory storages (or `database`), driven like the platform would."""

    def __init__(
        self,
        credential_policy: Optional[CredentialPolicy] = None,
        database: Optional[UnQLite] = None,
    ) -> None:
        self.storage_hub = StorageHub(database)
        self.reporter = RecordingReporter()
        self.auth_provider = AuthProvider(
            self.storage_hub.accounts,
            credential_policy
            if credential_policy
            else InsecureLegacyPlaintextCredentials(),
        )
        self.dispatcher = Dispatcher(
            registry=build_registry(),
            storage_hub=self.storage_hub,
            auth_provider=self.auth_provider,
            cooldown_gate=CooldownGate(3.0),
            reporter=self.reporter,
        )

    async def invoke(
        self,
        user_id: str,
        name: str,
        *,
        guild_id: Optional[str] = GUILD,
        keep_cooldown: bool = False,
        **options: str
    ) -> RecordingResponder:
        responder = RecordingResponder()
        await self.dispatcher.dispatch(
            Invocation(name=name, user_id=user_id, guild_id=guild_id, options=options),
            responder,
        )
        if not keep_cooldown:
            self.dispatcher.cooldown_gate.release(user_id)
        return responder

    async def sign_in(
        self, user_id: str, username: str, password: str = "password1"
    ) -> None:
        await self.invoke(user_id, "signup", username=username, password=password)
        await self.invoke(user_id, "login", username=username, password=password)

    async def account(self, username: str) -> AccountRecord:
        account = await self.storage_hub.accounts.find_by_username(username)
        assert account
        return account


@pytest.fixture
def harness():
    instance = Harness()
    try:
        yield instance
    finally:
        instance.dispatcher.cooldown_gate.clear()


@pytest.fixture
def signing_key() -> SigningKey:
    return SigningKey.generate()


@pytest.fixture
async def etsuko(signing_key: SigningKey):
    instance = Etsuko(
        database_path=":mem:",
        application_id="app-1",
        public_key=signing_key.verify_key.encode().hex(),
    )
    try:
        await instance.start()
        yield instance
    finally:
        await instance.stop()


@pytest.fixture
def responder() -> RecordingResponder:
    return RecordingResponder()


@pytest.fixture
def argon2_harness():
    instance = Harness(Argon2Credentials(argon2id.OPSLIMIT_MIN, argon2id.MEMLIMIT_MIN))
    try:
        yield instance
    finally:
        instance.dispatcher.cooldown_gate.clear()


@pytest.fixture
def unqlite_harness():
    instance = Harness(database=UnQLite(":mem:"))
    try:
        yield instance
    finally:
        instance.dispatcher.cooldown_gate.clear()
