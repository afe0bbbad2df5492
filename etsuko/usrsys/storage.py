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
"""Storages for the user system.

Account documents keep the field names below, handlers use them in queries and field paths:

````
{
    "UserID": "", "Username": "...", "Password": "...",
    "2FA": {"active": false, "question": "", "answer": ""},
    "SignUpDate": "January 1st, 2022",
    "SentEmails": [...], "InboxedEmails": [...], "DraftedEmails": [...],
    "ContactList": {"<username>": true}, "BlockList": {"<username>": true},
    "ProtectInbox": true
}
````

`ContactList` and `BlockList` are maps to `True` so that adding or removing one name is a single "set"/"unset" on `"ContactList.<username>"`.
"""
from typing import Any, Dict, List, Optional, Set, Type

from ..errors import DecodeError
from ..utils.storage import (
    CommonStorage,
    CommonStorageAdapter,
    CommonStorageRecordWrapper,
    UpdateOperation,
)
from .usr import UNLINKED, AccountRecord, MessageRecord, TwoFactorRecord

F_USER_ID = "UserID"
F_USERNAME = "Username"
F_PASSWORD = "Password"
F_TWO_FACTOR = "2FA"
F_SIGNUP_DATE = "SignUpDate"
F_SENT = "SentEmails"
F_INBOX = "InboxedEmails"
F_DRAFTS = "DraftedEmails"
F_CONTACTS = "ContactList"
F_BLOCKS = "BlockList"
F_PROTECT_INBOX = "ProtectInbox"


def _get(d: Dict[str, Any], key: str, typ: Type) -> Any:
    if key not in d:
        raise DecodeError("missing field {!r}".format(key))
    value = d[key]
    if not isinstance(value, typ):
        raise DecodeError(
            "field {!r} should be {}, got {}".format(
                key, typ.__name__, type(value).__name__
            )
        )
    return value


def _name_set(d: Dict[str, Any], key: str) -> Set[str]:
    value = d.get(key)
    if isinstance(value, dict):
        return set(value.keys())
    if value is None or value == []:
        return set()
    raise DecodeError("field {!r} should be a map".format(key))


def message2dict(message: MessageRecord) -> Dict[str, Any]:
    return {
        "author": message.author,
        "title": message.title,
        "recipients": list(message.recipients),
        "content": message.content,
        "date": message.date,
    }


def dict2message(d: Dict[str, Any]) -> MessageRecord:
    if not isinstance(d, dict):
        raise DecodeError("message should be a map")
    recipients = _get(d, "recipients", list)
    return MessageRecord(
        author=_get(d, "author", str),
        title=_get(d, "title", str),
        recipients=[str(r) for r in recipients],
        content=_get(d, "content", str),
        date=_get(d, "date", str),
    )


def _messages(d: Dict[str, Any], key: str) -> List[MessageRecord]:
    return [dict2message(m) for m in d.get(key) or []]


class AccountDocumentAdapter(CommonStorageAdapter[AccountRecord]):
    """Convert between `AccountRecord` and account documents.

    Raise `etsuko.errors.DecodeError` when a document lacks a field or holds the wrong type.
    `DraftedEmails`, `ContactList`, `BlockList` and `2FA` are allowed to be missing.
    """

    def record2dict(self, record: AccountRecord) -> Dict[str, Any]:
        return {
            F_USER_ID: record.user_id,
            F_USERNAME: record.username,
            F_PASSWORD: record.password,
            F_TWO_FACTOR: {
                "active": record.two_factor.active,
                "question": record.two_factor.question,
                "answer": record.two_factor.answer,
            },
            F_SIGNUP_DATE: record.signup_date,
            F_SENT: [message2dict(m) for m in record.sent_emails],
            F_INBOX: [message2dict(m) for m in record.inboxed_emails],
            F_DRAFTS: [message2dict(m) for m in record.drafted_emails],
            F_CONTACTS: {name: True for name in record.contact_list},
            F_BLOCKS: {name: True for name in record.block_list},
            F_PROTECT_INBOX: record.protect_inbox,
        }

    def dict2record(self, d: Dict[str, Any]) -> AccountRecord:
        two_factor = d.get(F_TWO_FACTOR) or {}
        if not isinstance(two_factor, dict):
            raise DecodeError("field {!r} should be a map".format(F_TWO_FACTOR))
        return AccountRecord(
            user_id=_get(d, F_USER_ID, str),
            username=_get(d, F_USERNAME, str),
            password=_get(d, F_PASSWORD, str),
            signup_date=_get(d, F_SIGNUP_DATE, str),
            two_factor=TwoFactorRecord(
                active=bool(two_factor.get("active", False)),
                question=str(two_factor.get("question", "")),
                answer=str(two_factor.get("answer", "")),
            ),
            sent_emails=_messages(d, F_SENT),
            inboxed_emails=_messages(d, F_INBOX),
            drafted_emails=_messages(d, F_DRAFTS),
            contact_list=_name_set(d, F_CONTACTS),
            block_list=_name_set(d, F_BLOCKS),
            protect_inbox=_get(d, F_PROTECT_INBOX, bool),
        )


class AccountRecordStorage(CommonStorageRecordWrapper[AccountRecord]):
    """
    A `etsuko.utils.storage.RecordStorage` for `etsuko.usrsys.usr.AccountRecord`.
    """

    def __init__(self, common_storage: CommonStorage) -> None:
        super().__init__(common_storage, AccountDocumentAdapter())

    async def find_by_identity(self, user_id: str) -> Optional[AccountRecord]:
        """Find the account which the platform identity `user_id` is logged into."""
        return await self.find_one({F_USER_ID: user_id})

    async def find_by_username(self, username: str) -> Optional[AccountRecord]:
        return await self.find_one({F_USERNAME: username})

    async def update(
        self, query: Dict[str, Any], operation: UpdateOperation, fields: Dict[str, Any]
    ) -> bool:
        """Shortcut of `update_fields`."""
        return await self.update_fields(query, operation, fields)

    async def push_message(
        self, query: Dict[str, Any], folder: str, message: MessageRecord
    ) -> bool:
        """Append `message` to the `folder` of the account matching `query`."""
        return await self.update_fields(query, "push", {folder: message2dict(message)})

    async def replace_folder(
        self, query: Dict[str, Any], folder: str, messages: List[MessageRecord]
    ) -> bool:
        """Overwrite the `folder` of the account matching `query` with `messages`."""
        return await self.update_fields(
            query, "set", {folder: [message2dict(m) for m in messages]}
        )

    async def create_account(
        self, username: str, stored_password: str, signup_date: str
    ) -> Optional[AccountRecord]:
        """Create and save a new account. It's not linked to any identity.
        Return `None` if the username is taken, checked atomically with the insertion.
        ..note:: `stored_password` is what `etsuko.usrsys.auth.CredentialPolicy.encode` returned.
        """
        rec = AccountRecord(
            user_id=UNLINKED,
            username=username,
            password=stored_password,
            signup_date=signup_date,
            protect_inbox=True,
        )
        if await self.store_unique(rec, [F_USERNAME]) is None:
            return None
        return rec
