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
"""`BaseRequestHandler`: the tools used in tornado handlers.
"""
from typing import Optional

from nacl.signing import VerifyKey
from tornado.web import RequestHandler

from ..interactions import Dispatcher
from .rest import PlatformREST


class BaseRequestHandler(RequestHandler):
    """The tools used while handling requests.

    Typical usage:
    Use it instead of `tornado.web.RequestHandler`.
    ````python
    class FooRequestHandler(BaseRequestHandler):
        ...
    ````
    """

    def initialize(self) -> None:
        settings = self.application.settings
        self._dispatcher: Dispatcher = settings["dispatcher"]
        self._rest: PlatformREST = settings["rest"]
        self._verify_key: Optional[VerifyKey] = settings["verify_key"]

    @property
    def dispatcher(self) -> Dispatcher:
        return self._dispatcher

    @property
    def rest(self) -> PlatformREST:
        """The client of the platform's HTTP API."""
        return self._rest

    @property
    def verify_key(self) -> Optional[VerifyKey]:
        """The key requests are signed with. `None` if signatures are not checked."""
        return self._verify_key
