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
"""Contact and block list commands.

Both lists are one-way: adding or blocking someone changes nothing on their side.
"""
from typing import Iterable

from ..errors import ValidationFailure
from ..interactions import Command, CommandContext, CommandOption, CommandRegistry
from ..interactions.response import Embed, EmbedField
from ..usrsys.storage import F_BLOCKS, F_CONTACTS, F_USER_ID

UNKNOWN_USERNAME_MESSAGE = "That username isn't under any account!"
EMPTY_LIST = "`...`"


def member_path(list_field: str, username: str) -> str:
    """The field path of `username` in the map field `list_field`."""
    return "{}.{}".format(list_field, username)


def format_names(names: Iterable[str]) -> str:
    entries = ["`@{}`".format(name) for name in sorted(names)]
    return ", ".join(entries) if entries else EMPTY_LIST


async def _require_existing(ctx: CommandContext, username: str) -> None:
    if not await ctx.accounts.find_by_username(username):
        raise ValidationFailure(UNKNOWN_USERNAME_MESSAGE)


async def add_contact(ctx: CommandContext) -> None:
    account = ctx.require_account()
    username = ctx.option("username")
    await _require_existing(ctx, username)
    if username in account.block_list:
        raise ValidationFailure("You've blocked that account!")
    await ctx.accounts.update(
        {F_USER_ID: ctx.identity}, "set", {member_path(F_CONTACTS, username): True}
    )
    await ctx.respond("`@{}` has been added to the contact list.".format(username))


async def del_contact(ctx: CommandContext) -> None:
    username = ctx.option("username")
    await _require_existing(ctx, username)
    await ctx.accounts.update(
        {F_USER_ID: ctx.identity}, "unset", {member_path(F_CONTACTS, username): True}
    )
    await ctx.respond("`@{}` has been deleted from the contact list.".format(username))


async def list_contacts(ctx: CommandContext) -> None:
    account = ctx.require_account()
    await ctx.respond(
        embeds=[
            Embed(
                description="Emails from contacts get inboxed normally.",
                fields=[EmbedField("List", format_names(account.contact_list))],
            )
        ]
    )


async def block(ctx: CommandContext) -> None:
    """Block an account, it also leaves the contact list."""
    username = ctx.option("username")
    await _require_existing(ctx, username)
    await ctx.accounts.update(
        {F_USER_ID: ctx.identity}, "set", {member_path(F_BLOCKS, username): True}
    )
    await ctx.accounts.update(
        {F_USER_ID: ctx.identity}, "unset", {member_path(F_CONTACTS, username): True}
    )
    await ctx.respond("`@{}` has been blocked.".format(username))


async def unblock(ctx: CommandContext) -> None:
    username = ctx.option("username")
    await _require_existing(ctx, username)
    await ctx.accounts.update(
        {F_USER_ID: ctx.identity}, "unset", {member_path(F_BLOCKS, username): True}
    )
    await ctx.respond("`@{}` has been unblocked.".format(username))


async def list_blocked(ctx: CommandContext) -> None:
    account = ctx.require_account()
    await ctx.respond(
        embeds=[
            Embed(
                description="Emails from blocked accounts will not be received.",
                fields=[EmbedField("Blocked", format_names(account.block_list))],
            )
        ]
    )


def register(registry: CommandRegistry) -> None:
    registry.add(
        Command(
            name="addcontact",
            group="Personal",
            description="Adds a contact to the list.",
            handler=add_contact,
            options=[CommandOption("username", "The username for the contact.")],
        )
    )
    registry.add(
        Command(
            name="delcontact",
            group="Personal",
            description="Deletes a contact from the list.",
            handler=del_contact,
            options=[CommandOption("username", "The username for the contact.")],
        )
    )
    registry.add(
        Command(
            name="contacts",
            group="Personal",
            description="Lists the contacts.",
            handler=list_contacts,
        )
    )
    registry.add(
        Command(
            name="block",
            group="Personal",
            description="Blocks an account.",
            handler=block,
            options=[CommandOption("username", "The username to block.")],
        )
    )
    registry.add(
        Command(
            name="unblock",
            group="Personal",
            description="Unblocks an account.",
            handler=unblock,
            options=[CommandOption("username", "The username to unblock.")],
        )
    )
    registry.add(
        Command(
            name="blocked",
            group="Personal",
            description="Lists the blocked accounts.",
            handler=list_blocked,
        )
    )
