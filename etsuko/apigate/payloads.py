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
"""Conversions between the platform's JSON payloads and `etsuko.interactions` types.
"""
import json
from typing import Any, Dict, List, Tuple

from ..interactions import Embed, Invocation, Response

INTERACTION_PING = 1
INTERACTION_APPLICATION_COMMAND = 2

CALLBACK_PONG = 1
CALLBACK_CHANNEL_MESSAGE = 4

FLAG_EPHEMERAL = 1 << 6

EMBED_COLOR = 0xF4A7BB

MultipartFile = Tuple[str, Tuple[str, bytes, str]]


def embed2dict(embed: Embed) -> Dict[str, Any]:
    result: Dict[str, Any] = {
        "color": EMBED_COLOR,
        "fields": [
            {"name": f.name, "value": f.value, "inline": f.inline}
            for f in embed.fields
        ],
    }
    if embed.description is not None:
        result["description"] = embed.description
    return result


def response2dict(response: Response, with_flags: bool = True) -> Dict[str, Any]:
    """The message data of `response`. Attachments are not included, see `multipart_edit`."""
    result: Dict[str, Any] = {
        "content": response.content if response.content is not None else "",
        "embeds": [embed2dict(e) for e in response.embeds],
    }
    if with_flags and response.ephemeral:
        result["flags"] = FLAG_EPHEMERAL
    return result


def callback_message(response: Response) -> Dict[str, Any]:
    """The body answering an interaction with `response`."""
    return {"type": CALLBACK_CHANNEL_MESSAGE, "data": response2dict(response)}


def multipart_edit(response: Response) -> Tuple[Dict[str, str], List[MultipartFile]]:
    """Form fields and files for an edit carrying attachments, in the form taken by `httpx`."""
    payload = response2dict(response, with_flags=False)
    payload["attachments"] = [
        {"id": index, "filename": a.filename} for index, a in enumerate(response.files)
    ]
    files = [
        ("files[{}]".format(index), (a.filename, a.content, "text/plain"))
        for index, a in enumerate(response.files)
    ]
    return {"payload_json": json.dumps(payload)}, files


def payload2invocation(payload: Dict[str, Any]) -> Invocation:
    """Read an application command interaction.

    The invoker is `member.user` in guilds and `user` in direct messages.
    Option values are all kept as strings.
    """
    data = payload.get("data") or {}
    member = payload.get("member") or {}
    user = member.get("user") or payload.get("user") or {}
    options = {
        option["name"]: str(option.get("value", ""))
        for option in data.get("options") or []
    }
    return Invocation(
        name=data.get("name", ""),
        user_id=str(user.get("id", "")),
        guild_id=payload.get("guild_id"),
        options=options,
    )
