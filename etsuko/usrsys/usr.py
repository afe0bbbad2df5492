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
"""Records of the user system: `AccountRecord`, `MessageRecord` and `TwoFactorRecord`.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Literal, Set, Union

FOLDER_INBOX = "InboxedEmails"
FOLDER_SENT = "SentEmails"
FOLDER_DRAFTS = "DraftedEmails"

Folder = Union[
    Literal["InboxedEmails"], Literal["SentEmails"], Literal["DraftedEmails"]
]
"""Document fields holding lists of messages."""

MAX_USERNAME_LENGTH = 25
MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 32

UNLINKED = ""
"""The `user_id` of an account which no platform identity is logged into."""


@dataclass
class MessageRecord(object):
    """One email. It never changes once stored.

    Attributes:
        author: `str`. The username of the sender.
        title: `str`.
        recipients: `List[str]`. All usernames the email was sent to, as the sender typed them.
        content: `str`. The body.
        date: `str`. See `format_date`.
    """

    author: str
    title: str
    recipients: List[str]
    content: str
    date: str


@dataclass
class TwoFactorRecord(object):
    """Second factor settings. They are stored and shown, but nothing checks them yet."""

    active: bool = False
    question: str = ""
    answer: str = ""


@dataclass
class AccountRecord(object):
    """Infomation about an account.

    Attributes:
        user_id: `str`. The platform identity logged into the account, `UNLINKED` if none.
        username: `str`. Unique, case-sensitive, at most `MAX_USERNAME_LENGTH` characters.
        password: `str`. The stored form of the password, see `etsuko.usrsys.auth.CredentialPolicy`.
        signup_date: `str`. See `format_date`.
        two_factor: `TwoFactorRecord`.
        sent_emails: `List[MessageRecord]`.
        inboxed_emails: `List[MessageRecord]`.
        drafted_emails: `List[MessageRecord]`. Reserved, no command writes it.
        contact_list: `Set[str]`. Usernames.
        block_list: `Set[str]`. Usernames, disjoint from `contact_list` when written by commands.
        protect_inbox: `bool`. Only contacts can send emails to the account when it's `True`.
    """

    user_id: str
    username: str
    password: str
    signup_date: str
    two_factor: TwoFactorRecord = field(default_factory=TwoFactorRecord)
    sent_emails: List[MessageRecord] = field(default_factory=list)
    inboxed_emails: List[MessageRecord] = field(default_factory=list)
    drafted_emails: List[MessageRecord] = field(default_factory=list)
    contact_list: Set[str] = field(default_factory=set)
    block_list: Set[str] = field(default_factory=set)
    protect_inbox: bool = True

    @property
    def linked(self) -> bool:
        return self.user_id != UNLINKED

    def folder(self, name: Folder) -> List[MessageRecord]:
        """Return the message list stored under the document field `name`."""
        if name == FOLDER_SENT:
            return self.sent_emails
        elif name == FOLDER_DRAFTS:
            return self.drafted_emails
        return self.inboxed_emails

    def accepts_mail_from(self, sender: "AccountRecord") -> bool:
        """Check if an email from `sender` should be put into this account's inbox.

        - inbox protection lets contacts only
        - accounts blocked by this one are refused
        - accounts which blocked this one can't send to it
        """
        if self.protect_inbox and sender.username not in self.contact_list:
            return False
        if sender.username in self.block_list:
            return False
        if self.username in sender.block_list:
            return False
        return True


def ordinal(number: int) -> str:
    """`1` -> `"1st"`, `12` -> `"12th"`, `23` -> `"23rd"`."""
    if 10 <= number % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")
    return "{}{}".format(number, suffix)


def format_date(moment: datetime) -> str:
    """Format a date as it's shown to users, like "January 1st, 2022"."""
    return "{} {}, {}".format(moment.strftime("%B"), ordinal(moment.day), moment.year)
