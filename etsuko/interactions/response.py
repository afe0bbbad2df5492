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
"""What commands answer with: `Response`, `Embed`, `EmbedField` and `Attachment`.

These carry the content only. Turning them into what the platform expects is the job of the gateway (see `etsuko.apigate.payloads`).
"""
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class EmbedField(object):
    name: str
    value: str
    inline: bool = True


@dataclass
class Embed(object):
    """A block of structured fields."""

    description: Optional[str] = None
    fields: List[EmbedField] = field(default_factory=list)


@dataclass
class Attachment(object):
    """A downloadable file.

    Attributes:
        filename: `str`.
        content: `bytes`.
    """

    filename: str
    content: bytes


@dataclass
class Response(object):
    """An answer to an invocation, or an edit to that answer.

    Attributes:
        content: `Optional[str]`. The text.
        embeds: `List[Embed]`.
        files: `List[Attachment]`. Only edits can carry files.
        ephemeral: `bool`. Only the invoker can see the answer. Ignored by edits, they keep the visibility of the answer.
    """

    content: Optional[str] = None
    embeds: List[Embed] = field(default_factory=list)
    files: List[Attachment] = field(default_factory=list)
    ephemeral: bool = False
