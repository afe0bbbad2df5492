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
"""`CredentialPolicy` and `AuthProvider`: how passwords are kept and checked.

Two policies are provided:

- `InsecureLegacyPlaintextCredentials` keeps passwords as they are typed, and `/account` shows them back.
  This is how the accounts created so far are stored.
- `Argon2Credentials` keeps argon2id hashes. Nothing can be revealed.

The policies are not compatible with each other's stored passwords. Pick one per database.
"""
from typing import Awaitable, Optional, Protocol

from ..utils.asec import MEMLIMIT, OPSLIMIT, password_check, password_hashing
from .storage import AccountRecordStorage
from .usr import AccountRecord


class CredentialPolicy(Protocol):
    """A protocol type for the way passwords are stored."""

    def encode(self, password: str) -> Awaitable[str]:
        """Return the form of `password` to store."""
        ...

    def verify(self, password: str, stored: str) -> Awaitable[bool]:
        """Check `password` against the stored form."""
        ...

    def reveal(self, stored: str) -> Optional[str]:
        """Return the password in plaintext, or `None` if the policy can't."""
        ...


class InsecureLegacyPlaintextCredentials(object):
    """Store passwords in plaintext.

    ..danger:: Anyone reading the database reads the passwords.
        Kept for the accounts created before hashing was available.
    """

    async def encode(self, password: str) -> str:
        return password

    async def verify(self, password: str, stored: str) -> bool:
        return password == stored

    def reveal(self, stored: str) -> Optional[str]:
        return stored


class Argon2Credentials(object):
    """Store argon2id hashes of passwords. See `etsuko.utils.asec`."""

    def __init__(self, opslimit: int = OPSLIMIT, memlimit: int = MEMLIMIT) -> None:
        self.opslimit = opslimit
        self.memlimit = memlimit
        super().__init__()

    def encode(self, password: str) -> Awaitable[str]:
        return password_hashing(password, self.opslimit, self.memlimit)

    def verify(self, password: str, stored: str) -> Awaitable[bool]:
        return password_check(password, stored)

    def reveal(self, stored: str) -> Optional[str]:
        return None


class AuthProvider(object):
    """Check credentials against the stored accounts."""

    def __init__(
        self, account_storage: AccountRecordStorage, policy: CredentialPolicy
    ) -> None:
        self.account_storage = account_storage
        self.policy = policy
        super().__init__()

    async def check(self, username: str, password: str) -> Optional[AccountRecord]:
        """Return the account of `username` if `password` matchs, otherwise `None`."""
        account = await self.account_storage.find_by_username(username)
        if not account:
            return None
        if await self.policy.verify(password, account.password):
            return account
        return None

    def reveal_password(self, account: AccountRecord) -> Optional[str]:
        return self.policy.reveal(account.password)
