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
from nacl.pwhash import argon2id

from etsuko.errors import DecodeError
from etsuko.storagehub import StorageHub
from etsuko.usrsys.auth import (
    Argon2Credentials,
    AuthProvider,
    InsecureLegacyPlaintextCredentials,
)
from etsuko.usrsys.storage import AccountDocumentAdapter
from etsuko.usrsys.usr import (
    FOLDER_INBOX,
    AccountRecord,
    MessageRecord,
    format_date,
    ordinal,
)


def new_account(username: str, **kwargs) -> AccountRecord:
    return AccountRecord(
        user_id="", username=username, password="", signup_date="", **kwargs
    )


class TestDates:
    @pytest.mark.parametrize(
        "n,expected",
        [(1, "1st"), (2, "2nd"), (3, "3rd"), (4, "4th"), (11, "11th"), (12, "12th"),
         (13, "13th"), (21, "21st"), (22, "22nd"), (23, "23rd"), (30, "30th"), (31, "31st")],
    )
    def test_ordinal(self, n, expected):
        assert ordinal(n) == expected

    def test_format_date(self):
        assert format_date(datetime(2022, 1, 1)) == "January 1st, 2022"
        assert format_date(datetime(2022, 3, 12)) == "March 12th, 2022"


class TestAcceptsMailFrom:
    def test_protected_inbox_takes_contacts_only(self):
        bob = new_account("bob")
        alice = new_account("alice")
        assert not bob.accepts_mail_from(alice)
        bob.contact_list.add("alice")
        assert bob.accepts_mail_from(alice)

    def test_unprotected_inbox_takes_anyone(self):
        assert new_account("bob", protect_inbox=False).accepts_mail_from(
            new_account("alice")
        )

    def test_blocks_go_both_ways(self):
        alice = new_account("alice")
        bob = new_account("bob", protect_inbox=False, block_list={"alice"})
        assert not bob.accepts_mail_from(alice)
        bob.block_list.clear()
        alice.block_list.add("bob")
        assert not bob.accepts_mail_from(alice)


class TestAccountDocumentAdapter:
    def test_lists_are_stored_as_maps(self):
        adapter = AccountDocumentAdapter()
        account = new_account("alice", contact_list={"bob"})
        doc = adapter.record2dict(account)
        assert doc["ContactList"] == {"bob": True}
        assert doc["BlockList"] == {}
        assert doc["UserID"] == ""
        assert adapter.dict2record(doc) == account

    def test_empty_list_in_place_of_map(self):
        adapter = AccountDocumentAdapter()
        doc = adapter.record2dict(new_account("alice"))
        doc["ContactList"] = []
        assert adapter.dict2record(doc).contact_list == set()

    def test_missing_field_raises(self):
        adapter = AccountDocumentAdapter()
        doc = adapter.record2dict(new_account("alice"))
        del doc["Username"]
        with pytest.raises(DecodeError):
            adapter.dict2record(doc)

    def test_wrong_type_raises(self):
        adapter = AccountDocumentAdapter()
        doc = adapter.record2dict(new_account("alice"))
        doc["ProtectInbox"] = "yes"
        with pytest.raises(DecodeError):
            adapter.dict2record(doc)
        doc["ProtectInbox"] = True
        doc["InboxedEmails"] = [{"title": "no author"}]
        with pytest.raises(DecodeError):
            adapter.dict2record(doc)


class TestAccountRecordStorage:
    @pytest.mark.asyncio
    async def test_create_and_push_message(self):
        accounts = StorageHub().accounts
        created = await accounts.create_account("alice", "pw", "January 1st, 2022")
        assert not created.linked
        message = MessageRecord("bob", "Hi", ["alice"], "Hello", "January 2nd, 2022")
        assert await accounts.push_message({"Username": "alice"}, FOLDER_INBOX, message)
        alice = await accounts.find_by_username("alice")
        assert alice and alice.inboxed_emails == [message]
        assert await accounts.find_by_identity("someone") is None

    @pytest.mark.asyncio
    async def test_storage_hub_shares_collections(self):
        hub = StorageHub()
        await hub.accounts.create_account("alice", "pw", "")
        assert await hub.accounts.find_by_username("alice")


class TestCredentials:
    @pytest.mark.asyncio
    async def test_plaintext(self):
        policy = InsecureLegacyPlaintextCredentials()
        stored = await policy.encode("password1")
        assert stored == "password1"
        assert await policy.verify("password1", stored)
        assert not await policy.verify("password2", stored)
        assert policy.reveal(stored) == "password1"

    @pytest.mark.asyncio
    async def test_argon2(self):
        policy = Argon2Credentials(argon2id.OPSLIMIT_MIN, argon2id.MEMLIMIT_MIN)
        stored = await policy.encode("password1")
        assert stored != "password1"
        assert await policy.verify("password1", stored)
        assert not await policy.verify("password2", stored)
        assert not await policy.verify("password1", "password1")
        assert policy.reveal(stored) is None

    @pytest.mark.asyncio
    async def test_auth_provider_check(self):
        accounts = StorageHub().accounts
        provider = AuthProvider(accounts, InsecureLegacyPlaintextCredentials())
        await accounts.create_account("alice", "password1", "")
        account = await provider.check("alice", "password1")
        assert account and account.username == "alice"
        assert await provider.check("alice", "password2") is None
        assert await provider.check("bob", "password1") is None
