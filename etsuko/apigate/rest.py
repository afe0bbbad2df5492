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
"""`PlatformREST`: the calls Etsuko makes to the platform's HTTP API, and `WebhookErrorReporter`.

Related:

- [httpx documentation](https://www.python-httpx.org/)
"""
import logging
from typing import Any, Dict, List, Optional

from httpx import AsyncClient

from ..interactions import Embed, EmbedField, Response
from .payloads import embed2dict, multipart_edit, response2dict

API_BASE = "https://discord.com/api/v10"


class PlatformREST(object):
    """A thin client of the platform's HTTP API.

    Failed requests raise `httpx.HTTPStatusError`.
    """

    __logger = logging.getLogger("etsuko.apigate.PlatformREST")

    def __init__(
        self,
        application_id: Optional[str],
        bot_token: Optional[str] = None,
        *,
        api_base: str = API_BASE,
        client: Optional[AsyncClient] = None,
    ) -> None:
        self.application_id = application_id
        self.bot_token = bot_token
        self.api_base = api_base
        self.client = client if client else AsyncClient()
        super().__init__()

    def url(self, path: str) -> str:
        return self.api_base + path

    async def edit_original(self, interaction_token: str, response: Response) -> None:
        """Replace the answer of the interaction of `interaction_token`."""
        url = self.url(
            "/webhooks/{}/{}/messages/@original".format(
                self.application_id, interaction_token
            )
        )
        if response.files:
            data, files = multipart_edit(response)
            resp = await self.client.patch(url, data=data, files=files)
        else:
            resp = await self.client.patch(
                url, json=response2dict(response, with_flags=False)
            )
        resp.raise_for_status()

    async def execute_webhook(self, webhook_url: str, payload: Dict[str, Any]) -> None:
        resp = await self.client.post(webhook_url, json=payload)
        resp.raise_for_status()

    async def overwrite_commands(self, commands: List[Dict[str, Any]]) -> None:
        """Replace all global application commands by `commands`."""
        if not self.bot_token:
            raise ValueError("a bot token is required to register commands")
        resp = await self.client.put(
            self.url("/applications/{}/commands".format(self.application_id)),
            json=commands,
            headers={"Authorization": "Bot {}".format(self.bot_token)},
        )
        resp.raise_for_status()
        self.__logger.info("%d commands registered", len(commands))

    async def close(self) -> None:
        await self.client.aclose()


class WebhookErrorReporter(object):
    """An `ErrorReporter` posting the errors to a webhook.

    If the webhook can't be reached, the failure is only logged.
    """

    __logger = logging.getLogger("etsuko.apigate.WebhookErrorReporter")

    def __init__(self, webhook_url: str, rest: PlatformREST) -> None:
        self.webhook_url = webhook_url
        self.rest = rest
        super().__init__()

    async def report(self, error: BaseException) -> None:
        embed = Embed(
            description="An error has appeared!",
            fields=[EmbedField("Error", "`{}`".format(error))],
        )
        try:
            await self.rest.execute_webhook(
                self.webhook_url, {"embeds": [embed2dict(embed)]}
            )
        except Exception:
            self.__logger.exception("could not report %r", error)
