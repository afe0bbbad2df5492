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
"""Password hashing with argon2id, off the event loop.
"""
from asyncio import Future, ensure_future, get_running_loop
from base64 import standard_b64decode, standard_b64encode
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from nacl.exceptions import InvalidkeyError
from nacl.pwhash import argon2id

OPSLIMIT = argon2id.OPSLIMIT_MODERATE
MEMLIMIT = argon2id.MEMLIMIT_MODERATE

_executor: Optional[ThreadPoolExecutor] = None


def get_executor() -> ThreadPoolExecutor:
    """Return the thread pool executor shared by hashing tasks, create it if it does not exists."""
    global _executor
    if not _executor:
        _executor = ThreadPoolExecutor(None, "etsuko.utils.asec.executor")
    return _executor


def password_hashing_sync(
    password: str, opslimit: int = OPSLIMIT, memlimit: int = MEMLIMIT
) -> str:
    """Hash `password` with argon2id.
    The hash is encoded in base64, so the result is an ASCII string.

    ..caution:: This function is synchrounous.
        It may unexecptly block the thread.
    """
    return standard_b64encode(
        argon2id.str(password.encode("utf-8"), opslimit=opslimit, memlimit=memlimit)
    ).decode("ascii")


def password_check_sync(password: str, password_hash: str) -> bool:
    """Check if the `password_hash` matchs `password`.

    ..caution:: This function is synchrounous.
        It may unexecptly block the thread.
    """
    try:
        return argon2id.verify(
            standard_b64decode(password_hash.encode("ascii")), password.encode("utf-8")
        )
    except (InvalidkeyError, ValueError):
        # not an argon2id hash, or not even base64
        return False


def password_hashing(
    password: str, opslimit: int = OPSLIMIT, memlimit: int = MEMLIMIT
) -> "Future[str]":
    """Hash `password` in another thread.

    ..note:: A thread pool executor wrapper for `password_hashing_sync`.
    """
    return ensure_future(
        get_running_loop().run_in_executor(
            get_executor(), password_hashing_sync, password, opslimit, memlimit
        )
    )


def password_check(password: str, password_hash: str) -> "Future[bool]":
    """Check if the `password_hash` matchs `password`, in another thread.

    ..note:: A thread pool executor wrapper for `password_check_sync`.
    """
    return ensure_future(
        get_running_loop().run_in_executor(
            get_executor(), password_check_sync, password, password_hash
        )
    )
