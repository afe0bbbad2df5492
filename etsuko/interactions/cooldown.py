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
"""`CooldownGate`: keeps one identity from running commands back to back.
"""
import asyncio
import threading
from typing import Dict, Optional

DEFAULT_COOLDOWN_SECONDS = 3.0


class CooldownGate(object):
    """A set of identities on cooldown, with expiring entries.

    `try_acquire` checks and inserts in one step, so of two invocations from one identity racing each other only one gets in.
    Different identities never wait for each other.

    Typical usage:

    ````python
    if not gate.try_acquire(identity):
        ...  # rejected
    try:
        ...  # run the command
    finally:
        gate.expire_later(identity)
    ````
    """

    def __init__(self, window_seconds: float = DEFAULT_COOLDOWN_SECONDS) -> None:
        self.window_seconds = window_seconds
        """`float`. How long an identity stays on cooldown after `expire_later`."""
        self._cooling: Dict[str, Optional[asyncio.TimerHandle]] = {}
        self._lock = threading.Lock()
        super().__init__()

    def try_acquire(self, identity: str) -> bool:
        """Put `identity` on cooldown. Return `False` if it's on cooldown already.

        The identity stays until `expire_later` or `release`.
        """
        with self._lock:
            if identity in self._cooling:
                return False
            self._cooling[identity] = None
            return True

    def expire_later(self, identity: str) -> None:
        """Remove `identity` from the cooldown set after `window_seconds`.

        ..caution:: It must be called in the thread running the event loop.
        """
        loop = asyncio.get_running_loop()
        with self._lock:
            if identity not in self._cooling:
                return
            previous = self._cooling[identity]
            if previous:
                previous.cancel()
            self._cooling[identity] = loop.call_later(
                self.window_seconds, self.release, identity
            )

    def release(self, identity: str) -> None:
        """Remove `identity` from the cooldown set now."""
        with self._lock:
            handle = self._cooling.pop(identity, None)
        if handle:
            handle.cancel()

    def is_cooling(self, identity: str) -> bool:
        return identity in self._cooling

    def clear(self) -> None:
        """Remove every identity and cancel the pending expirations."""
        with self._lock:
            handles = list(self._cooling.values())
            self._cooling.clear()
        for handle in handles:
            if handle:
                handle.cancel()
