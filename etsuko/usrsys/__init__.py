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

"""The user system for Etsuko.

User system process all the things about accounts:

- Account and Message records (`usr`)
- Storing and decoding them (`storage`)
- Credentials (`auth`)

## Accounts and identities
An account is chosen by username and password, it's not the platform account of the person using it.
The platform identity (`AccountRecord.user_id`) is linked to an account by logging in, and one identity is linked to at most one account.
Signing up creates an unlinked account.
"""
