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
import pytest


@pytest.fixture
async def alice_and_bob(harness):
    await harness.sign_in("u1", "alice")
    await harness.sign_in("u2", "bob")
    return harness


class TestContacts:
    @pytest.mark.asyncio
    async def test_add_and_delete_contact(self, alice_and_bob):
        harness = alice_and_bob
        responder = await harness.invoke("u1", "addcontact", username="bob")
        assert responder.text == "`@bob` has been added to the contact list."
        assert (await harness.account("alice")).contact_list == {"bob"}
        assert (await harness.account("bob")).contact_list == set()
        responder = await harness.invoke("u1", "delcontact", username="bob")
        assert responder.text == "`@bob` has been deleted from the contact list."
        assert (await harness.account("alice")).contact_list == set()

    @pytest.mark.asyncio
    async def test_unknown_username(self, alice_and_bob):
        harness = alice_and_bob
        for name in ("addcontact", "delcontact", "block", "unblock"):
            responder = await harness.invoke("u1", name, username="ghost")
            assert responder.text == "That username isn't under any account!"
        alice = await harness.account("alice")
        assert alice.contact_list == set()
        assert alice.block_list == set()

    @pytest.mark.asyncio
    async def test_usernames_with_dots(self, harness):
        await harness.sign_in("u1", "alice")
        await harness.invoke("u2", "signup", username="b.o.b", password="password1")
        await harness.invoke("u1", "addcontact", username="b.o.b")
        assert (await harness.account("alice")).contact_list == {"b.o.b"}

    @pytest.mark.asyncio
    async def test_list_contacts(self, alice_and_bob):
        harness = alice_and_bob
        responder = await harness.invoke("u1", "contacts")
        assert responder.last.embeds[0].fields[0].value == "`...`"
        await harness.invoke("u1", "addcontact", username="bob")
        responder = await harness.invoke("u1", "contacts")
        assert responder.last.embeds[0].fields[0].value == "`@bob`"


class TestBlocks:
    @pytest.mark.asyncio
    async def test_block_removes_contact(self, alice_and_bob):
        harness = alice_and_bob
        await harness.invoke("u1", "addcontact", username="bob")
        responder = await harness.invoke("u1", "block", username="bob")
        assert responder.text == "`@bob` has been blocked."
        alice = await harness.account("alice")
        assert alice.block_list == {"bob"}
        assert alice.contact_list == set()

    @pytest.mark.asyncio
    async def test_blocked_account_cannot_be_added(self, alice_and_bob):
        harness = alice_and_bob
        await harness.invoke("u1", "block", username="bob")
        responder = await harness.invoke("u1", "addcontact", username="bob")
        assert responder.text == "You've blocked that account!"
        assert (await harness.account("alice")).contact_list == set()

    @pytest.mark.asyncio
    async def test_unblock(self, alice_and_bob):
        harness = alice_and_bob
        await harness.invoke("u1", "block", username="bob")
        responder = await harness.invoke("u1", "unblock", username="bob")
        assert responder.text == "`@bob` has been unblocked."
        assert (await harness.account("alice")).block_list == set()
        responder = await harness.invoke("u1", "blocked")
        assert responder.last.embeds[0].fields[0].value == "`...`"
