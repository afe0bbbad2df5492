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
"""`InteractionsHandler`: the endpoint the platform posts interactions to.
"""
import asyncio
import logging

from nacl.exceptions import BadSignatureError
from tornado.escape import json_decode

from ..interactions import Response
from .base import BaseRequestHandler
from .payloads import (
    CALLBACK_PONG,
    INTERACTION_APPLICATION_COMMAND,
    INTERACTION_PING,
    callback_message,
    payload2invocation,
)
from .rest import PlatformREST


class WebhookResponder(object):
    """A `Responder` for one interaction received over HTTP.

    The first answer is handed to the request handler, which writes it as the HTTP response.
    Edits are sent with `PlatformREST.edit_original`, but only once the first answer has been flushed,
    before that the platform doesn't know the answer they are editing.
    """

    def __init__(self, rest: PlatformREST, interaction_token: str) -> None:
        self.rest = rest
        self.interaction_token = interaction_token
        self.acknowledgement: "asyncio.Future[Response]" = (
            asyncio.get_running_loop().create_future()
        )
        self.flushed = asyncio.Event()
        super().__init__()

    async def respond(self, response: Response) -> None:
        self.acknowledgement.set_result(response)
        await self.flushed.wait()

    async def edit(self, response: Response) -> None:
        await self.flushed.wait()
        await self.rest.edit_original(self.interaction_token, response)


class InteractionsHandler(BaseRequestHandler):
    """Handle the interactions posted by the platform.

    - Requests without a valid Ed25519 signature are refused with 401.
    - PING is answered with PONG.
    - Application commands are dispatched. The first answer of the command is the HTTP response,
      204 is returned if the command finishes without answering.
    """

    __logger = logging.getLogger("etsuko.apigate.InteractionsHandler")

    def check_signature(self) -> bool:
        if self.verify_key is None:
            return True
        signature = self.request.headers.get("X-Signature-Ed25519")
        timestamp = self.request.headers.get("X-Signature-Timestamp")
        if not signature or not timestamp:
            return False
        try:
            self.verify_key.verify(
                timestamp.encode("utf-8") + self.request.body, bytes.fromhex(signature)
            )
        except (BadSignatureError, ValueError):
            return False
        return True

    async def post(self) -> None:
        if not self.check_signature():
            self.set_status(401)
            self.write("invalid request signature")
            return
        payload = json_decode(self.request.body)
        kind = payload.get("type")
        if kind == INTERACTION_PING:
            self.write({"type": CALLBACK_PONG})
            return
        if kind != INTERACTION_APPLICATION_COMMAND:
            self.set_status(400)
            return
        invocation = payload2invocation(payload)
        responder = WebhookResponder(self.rest, payload.get("token", ""))
        task = asyncio.ensure_future(self.dispatcher.dispatch(invocation, responder))
        task.add_done_callback(self._log_failure)
        try:
            await asyncio.wait(
                {responder.acknowledgement, task},
                return_when=asyncio.FIRST_COMPLETED,
            )
            if responder.acknowledgement.done():
                self.write(callback_message(responder.acknowledgement.result()))
                await self.finish()
            else:
                self.set_status(204)
        finally:
            responder.flushed.set()

    def _log_failure(self, task: "asyncio.Future[None]") -> None:
        if not task.cancelled() and task.exception():
            self.__logger.error("dispatching failed", exc_info=task.exception())
