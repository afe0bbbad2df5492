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
"""The HTTP gateway between the platform and Etsuko.

- `interactions`: the endpoint receiving interactions
- `payloads`: JSON payloads of the platform
- `rest`: calls to the platform's HTTP API
"""
import logging
import socket
from typing import List, Optional, Tuple

from httpx import AsyncClient
from nacl.signing import VerifyKey
from tornado.httpserver import HTTPServer
from tornado.web import Application

from ..interactions import Dispatcher
from .interactions import InteractionsHandler
from .rest import PlatformREST, WebhookErrorReporter


class HTTPAPIGateway(object):
    """The HTTP gateway for Etsuko.

    Current handlers:

    - `/interactions`: `interactions.InteractionsHandler`

    Related:

    - [Tornado documentation](https://www.tornadoweb.org)
    """

    __logger = logging.getLogger("etsuko.apigate.HTTPAPIGateway")

    def __init__(
        self,
        dispatcher: Dispatcher,
        rest: PlatformREST,
        http_binds: List[Tuple[Optional[str], int]],
        public_key: Optional[str] = None,
        debug: bool = False,
    ) -> None:
        verify_key = VerifyKey(bytes.fromhex(public_key)) if public_key else None
        self._application = Application(
            [(r"/interactions", InteractionsHandler)],
            dispatcher=dispatcher,
            rest=rest,
            verify_key=verify_key,
            debug=debug,
        )
        self._http_server: Optional[HTTPServer] = None
        self._http_binds = http_binds
        super().__init__()

    @property
    def http_binds(self) -> List[Tuple[Optional[str], int]]:
        """The tcp binds for HTTP server.
        Each element in the list is a tuple of (binding address/hostname/None, port).

        For example:

        - `("127.0.0.1", 8080)` binds the port 8080 on address 127.0.0.1.
        - `(None, 8080)` binds port 8080 on all network interfaces.

        Related:

        - `HTTPAPIGateway.start` the method will automatically binds a random port on 127.0.0.1 if this list is empty.
        """
        return self._http_binds

    @property
    def application(self) -> Application:
        """Application instance for HTTP server."""
        return self._application

    async def start(self) -> None:
        """Listen to the address-port pairs given in `HTTPAPIGateway.http_binds`.

        This method will bind a random port on 127.0.0.1 and put it into `HTTPAPIGateway.http_binds` list if the list is empty.
        """
        if self.application.settings["verify_key"] is None:
            self.__logger.warning("no public key, request signatures are not checked")
        self._http_server = HTTPServer(self.application)
        if not self.http_binds:
            # feed server a socket with a random free port
            sock = socket.socket()
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind(("127.0.0.1", 0))
            free_port = sock.getsockname()[1]
            sock.close()
            self.http_binds.append(("127.0.0.1", free_port))
        for addr, port in self.http_binds:
            self._http_server.listen(port, addr if addr else "")
            self.__logger.info("listening on %s:%d", addr or "*", port)

    async def stop(self) -> None:
        """Prevent new incoming request and wait for all existing connections closed."""
        assert self._http_server
        self._http_server.stop()
        await self._http_server.close_all_connections()
        self._http_server = None

    def http_client(self) -> AsyncClient:
        """Return a http client from httpx which uses the first bind from `HTTPAPIGateway.http_binds` as base url.

        Related:

        - [httpx documentation](https://www.python-httpx.org/)
        """
        assert self._http_server
        address, port = self.http_binds[0]
        if not address:
            address = "localhost"
        base_url = "http://{}:{}".format(address, port)
        return AsyncClient(base_url=base_url)


__all__ = ["HTTPAPIGateway", "PlatformREST", "WebhookErrorReporter"]
