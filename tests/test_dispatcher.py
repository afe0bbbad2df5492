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
import asyncio

import pytest

from etsuko.errors import (
    InteractionAlreadyAcknowledged,
    InteractionNotAcknowledged,
    StoreFailure,
    ValidationFailure,
)
from etsuko.interactions import (
    Command,
    CommandContext,
    CooldownGate,
    Invocation,
)
from etsuko.interactions.dispatcher import COOLDOWN_MESSAGE, NOT_LOGGED_IN_MESSAGE
from etsuko.utils.storage import MemoryStorage


class BrokenStorage(MemoryStorage):
    async def find_one(self, query):
        raise StoreFailure("database is gone")


class TestCooldownGate:
    def test_try_acquire_once(self):
        gate = CooldownGate(1)
        assert gate.try_acquire("u1")
        assert not gate.try_acquire("u1")
        assert gate.try_acquire("u2")
        gate.release("u1")
        assert gate.try_acquire("u1")

    @pytest.mark.asyncio
    async def test_expire_later(self):
        gate = CooldownGate(0.05)
        assert gate.try_acquire("u1")
        gate.expire_later("u1")
        assert gate.is_cooling("u1")
        await asyncio.sleep(0.2)
        assert not gate.is_cooling("u1")
        assert gate.try_acquire("u1")

    @pytest.mark.asyncio
    async def test_release_cancels_expiration(self):
        gate = CooldownGate(0.05)
        gate.try_acquire("u1")
        gate.expire_later("u1")
        gate.release("u1")
        gate.try_acquire("u1")
        await asyncio.sleep(0.2)
        # the first expiration must not remove the second acquisition
        assert gate.is_cooling("u1")
        gate.clear()


class TestDispatcher:
    @pytest.mark.asyncio
    async def test_ignores_invocations_outside_guilds(self, harness):
        responder = await harness.invoke("u1", "signup", guild_id=None)
        assert not responder.responses

    @pytest.mark.asyncio
    async def test_ignores_unknown_commands(self, harness):
        responder = await harness.invoke("u1", "nothing")
        assert not responder.responses
        assert not harness.dispatcher.cooldown_gate.is_cooling("u1")

    @pytest.mark.asyncio
    async def test_requires_account(self, harness):
        responder = await harness.invoke("u1", "inbox", keep_cooldown=True)
        assert responder.text == NOT_LOGGED_IN_MESSAGE
        assert responder.last.ephemeral
        assert not harness.dispatcher.cooldown_gate.is_cooling("u1")

    @pytest.mark.asyncio
    async def test_cooldown(self, harness):
        await harness.invoke(
            "u1", "signup", username="alice", password="password1", keep_cooldown=True
        )
        responder = await harness.invoke(
            "u1", "signup", username="alice2", password="password1", keep_cooldown=True
        )
        assert responder.text == COOLDOWN_MESSAGE.format(3.0)
        assert responder.text == "You're on cooldown for `3s`!"
        assert await harness.storage_hub.accounts.find_by_username("alice2") is None
        other = await harness.invoke(
            "u2", "signup", username="bob", password="password1"
        )
        assert other.text.startswith("You've signed up")

    @pytest.mark.asyncio
    async def test_store_failure_is_reported(self, harness):
        harness.storage_hub._common_storages["accounts"] = BrokenStorage()
        responder = await harness.invoke("u1", "inbox")
        assert not responder.responses
        assert len(harness.reporter.errors) == 1
        assert isinstance(harness.reporter.errors[0], StoreFailure)

    @pytest.mark.asyncio
    async def test_validation_failure_after_acknowledgement_is_an_edit(self, harness):
        async def handler(ctx: CommandContext):
            await ctx.respond("working")
            raise ValidationFailure("nope")

        harness.dispatcher.registry.add(Command("fail", "Test", "", handler))
        await harness.sign_in("u1", "alice")
        responder = await harness.invoke("u1", "fail")
        assert [r.content for r in responder.responses] == ["working"]
        assert [r.content for r in responder.edits] == ["nope"]
        assert not harness.reporter.errors

    @pytest.mark.asyncio
    async def test_unexpected_errors_are_reported(self, harness):
        async def handler(ctx: CommandContext):
            raise RuntimeError("boom")

        harness.dispatcher.registry.add(Command("boom", "Test", "", handler))
        await harness.sign_in("u1", "alice")
        responder = await harness.invoke("u1", "boom", keep_cooldown=True)
        assert not responder.responses
        assert isinstance(harness.reporter.errors[0], RuntimeError)
        # still on cooldown after a failure
        assert harness.dispatcher.cooldown_gate.is_cooling("u1")


class TestCommandContext:
    def make_context(self, harness, responder):
        async def handler(ctx):
            pass

        return CommandContext(
            command=Command("test", "Test", "", handler, ephemeral=False),
            invocation=Invocation("test", "u1", "g1", {"a": "1"}),
            account=None,
            responder=responder,
            storage_hub=harness.storage_hub,
            auth_provider=harness.auth_provider,
            registry=harness.dispatcher.registry,
            reporter=harness.reporter,
        )

    @pytest.mark.asyncio
    async def test_lifecycle(self, harness, responder):
        ctx = self.make_context(harness, responder)
        assert ctx.option("a") == "1"
        assert ctx.option("b") == ""
        with pytest.raises(InteractionNotAcknowledged):
            await ctx.edit("too early")
        await ctx.respond("first")
        with pytest.raises(InteractionAlreadyAcknowledged):
            await ctx.respond("second")
        await ctx.edit("edited")
        await ctx.reply("replied")
        assert [r.content for r in responder.responses] == ["first"]
        assert [r.content for r in responder.edits] == ["edited", "replied"]
        assert not responder.responses[0].ephemeral


class TestCooldownWindow:
    @pytest.mark.asyncio
    async def test_invocation_after_the_window_succeeds(self, harness):
        harness.dispatcher.cooldown_gate.window_seconds = 0.05
        await harness.invoke(
            "u1", "signup", username="alice", password="password1", keep_cooldown=True
        )
        rejected = await harness.invoke(
            "u1", "signup", username="bob", password="password1", keep_cooldown=True
        )
        assert rejected.text == "You're on cooldown for `0.05s`!"
        await asyncio.sleep(0.2)
        accepted = await harness.invoke(
            "u1", "signup", username="bob", password="password1"
        )
        assert accepted.text == "You've signed up as `@bob`, congrats! Now, run `/login`."

    @pytest.mark.asyncio
    async def test_immediate_second_signup_is_rejected(self, harness):
        await harness.invoke(
            "u1", "signup", username="alice", password="password1", keep_cooldown=True
        )
        responder = await harness.invoke(
            "u1", "signup", username="carol", password="password1", keep_cooldown=True
        )
        assert not responder.text.startswith("You've signed up")
        assert await harness.storage_hub.accounts.find_by_username("carol") is None


class TestConcurrentInvocations:
    @pytest.mark.asyncio
    async def test_only_one_of_simultaneous_invocations_runs(self, unqlite_harness):
        runs = []

        async def handler(ctx: CommandContext):
            runs.append(ctx.identity)
            await asyncio.sleep(0.01)
            await ctx.respond("done")

        unqlite_harness.dispatcher.registry.add(Command("slow", "Test", "", handler))
        await unqlite_harness.sign_in("u1", "alice")
        responders = await asyncio.gather(
            *[
                unqlite_harness.invoke("u1", "slow", keep_cooldown=True)
                for _ in range(5)
            ]
        )
        texts = [r.text for r in responders]
        assert runs == ["u1"]
        assert texts.count("done") == 1
        assert texts.count(COOLDOWN_MESSAGE.format(3.0)) == 4

    @pytest.mark.asyncio
    async def test_simultaneous_signups_with_one_username(self, unqlite_harness):
        responders = await asyncio.gather(
            *[
                unqlite_harness.invoke(
                    "u{}".format(i), "signup", username="alice", password="password1"
                )
                for i in range(5)
            ]
        )
        texts = [r.text for r in responders]
        assert texts.count(
            "You've signed up as `@alice`, congrats! Now, run `/login`."
        ) == 1
        assert texts.count("That username is already under an account!") == 4
        accounts = unqlite_harness.storage_hub.accounts
        assert len([a async for a in accounts.find({"Username": "alice"})]) == 1
