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
from datetime import datetime

import pytest

from etsuko.commands import build_registry
from etsuko.commands.info import format_uptime


class TestRegistry:
    def test_all_commands_are_registered(self):
        registry = build_registry()
        assert len(registry) == 23
        for name in ("signup", "login", "email", "search", "delete", "ping", "terms"):
            assert name in registry

    def test_only_signup_and_login_skip_accounts(self):
        exempt = [c.name for c in build_registry() if not c.requires_account]
        assert sorted(exempt) == ["login", "signup"]

    def test_duplicates_are_refused(self):
        registry = build_registry()
        with pytest.raises(KeyError):
            registry.add(registry.get("ping"))

    def test_application_commands(self):
        commands = {c["name"]: c for c in build_registry().application_commands()}
        email = commands["email"]
        assert email["type"] == 1
        assert [o["name"] for o in email["options"]] == ["usernames", "title", "content"]
        assert all(o["type"] == 3 and o["required"] for o in email["options"])
        assert commands["inbox"]["options"] == []


class TestInfoCommands:
    def test_format_uptime(self):
        assert format_uptime(datetime(2022, 1, 1), datetime(2022, 1, 2, 1, 2, 3)) == "1d 1h 2m 3s"

    @pytest.mark.asyncio
    async def test_ping(self, harness):
        await harness.sign_in("u1", "alice")
        responder = await harness.invoke("u1", "ping")
        assert responder.responses[0].content == "Pinging..."
        assert not responder.responses[0].ephemeral
        assert responder.text.startswith("API Latency: `")
        assert "\nDatabase Latency: `" in responder.text

    @pytest.mark.asyncio
    async def test_commands(self, harness):
        await harness.sign_in("u1", "alice")
        responder = await harness.invoke("u1", "commands")
        value = responder.last.embeds[0].fields[0].value
        assert "`/signup`" in value
        assert "`/deleteall`" in value

    @pytest.mark.asyncio
    async def test_botinfo(self, harness):
        await harness.sign_in("u1", "alice")
        responder = await harness.invoke("u1", "botinfo")
        value = responder.last.embeds[0].fields[0].value
        assert "Commands: `23`" in value
        assert "Uptime: `" in value

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["docs", "policy", "terms"])
    async def test_static_pages_are_broadcast(self, harness, name):
        await harness.sign_in("u1", "alice")
        responder = await harness.invoke("u1", name)
        assert responder.last.embeds
        assert not responder.last.ephemeral
