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
"""Informational commands: ping, commands, docs, botinfo, policy and terms.

These answer in the channel, everyone can see them.
"""
import platform
import time
from datetime import datetime

from ..interactions import Command, CommandContext, CommandRegistry
from ..interactions.response import Embed, EmbedField

DOCS_FIELDS = [
    EmbedField(
        "Contacts",
        "Emails from contacts get sorted under the `Normal` inbox category. "
        "Contacts can be removed and added as you please, "
        "being a contact means having more access than a normal account.",
    ),
    EmbedField(
        "Blocking",
        "Blocked accounts can't send you any emails, "
        "and blocking an account removes it from the contact list.",
    ),
    EmbedField(
        "Emails",
        "An email contains the recipients, author, date, title and content. "
        'To put new lines in an email, use "`\\n`". '
        "Searching returns the emails as files named after their titles. "
        "Any title or content which is **40%** similar to the search body is pulled.",
    ),
    EmbedField(
        "Slash Commands",
        "Some answers are only visible to the account running the command. "
        "Everything is done through slash commands.",
    ),
    EmbedField(
        "Settings",
        "`Inbox protection` refuses any email **NOT** from contacts. "
        "`2FA` has yet to arrive.",
    ),
    EmbedField(
        "Errors",
        "If the bot doesn't respond, an error has appeared. "
        "Errors are sent to the developers and handled.",
    ),
]

POLICY_TEXT = (
    "The only data stored by Etsuko is `custom data`, as well as your `user ID`. "
    "We do not store your platform account's password, or anything related to it. "
    "Your Etsuko account is only related to Etsuko, nothing else. "
    "If you wish to have your data removed from the database, "
    "you may contact one of the developers of Etsuko."
)

TERMS_TEXT = (
    "Your account can be deleted whenever, for any reason. That is the only term."
)


def _milliseconds(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


def format_uptime(started_at: datetime, now: datetime) -> str:
    """Format the time between `started_at` and `now` like "1d 2h 3m 4s"."""
    seconds = max(0, int((now - started_at).total_seconds()))
    days, seconds = divmod(seconds, 86400)
    hours, seconds = divmod(seconds, 3600)
    minutes, seconds = divmod(seconds, 60)
    return "{}d {}h {}m {}s".format(days, hours, minutes, seconds)


async def ping(ctx: CommandContext) -> None:
    """Measure the round trip of the first answer and of one account lookup."""
    start = time.monotonic()
    await ctx.respond("Pinging...")
    api = _milliseconds(start)
    start = time.monotonic()
    await ctx.accounts.find_by_identity(ctx.identity)
    database = _milliseconds(start)
    await ctx.edit(
        "API Latency: `{}ms`\nDatabase Latency: `{}ms`".format(api, database)
    )


async def list_commands(ctx: CommandContext) -> None:
    names = ", ".join("`/{}`".format(name) for name in ctx.registry.names)
    await ctx.respond(embeds=[Embed(fields=[EmbedField("Slash Commands", names)])])


async def docs(ctx: CommandContext) -> None:
    await ctx.respond(
        embeds=[
            Embed(
                description="These are the docs for my services.",
                fields=list(DOCS_FIELDS),
            )
        ]
    )


async def botinfo(ctx: CommandContext) -> None:
    lines = [
        "Library: **tornado** + **httpx**",
        "Python Version: `{}`".format(platform.python_version()),
        "Commands: `{}`".format(len(ctx.registry)),
    ]
    if ctx.started_at:
        uptime = format_uptime(ctx.started_at, datetime.now())
        lines.append("Uptime: `{}`".format(uptime))
    await ctx.respond(embeds=[Embed(fields=[EmbedField("Info", "\n".join(lines))])])


async def policy(ctx: CommandContext) -> None:
    await ctx.respond(
        embeds=[
            Embed(
                description="The privacy policy describes Etsuko's DOs and DON'Ts.",
                fields=[EmbedField("Policy", POLICY_TEXT)],
            )
        ]
    )


async def terms(ctx: CommandContext) -> None:
    await ctx.respond(embeds=[Embed(description=TERMS_TEXT)])


def register(registry: CommandRegistry) -> None:
    for name, description, handler in [
        ("ping", "Pong!", ping),
        ("commands", "Shows the list of commands.", list_commands),
        ("docs", "Shows the docs/guide.", docs),
        ("botinfo", "Shows info on me.", botinfo),
        ("policy", "Shows the privacy policy.", policy),
        ("terms", "Shows the term(s) of service.", terms),
    ]:
        registry.add(
            Command(
                name=name,
                group="Fun",
                description=description,
                handler=handler,
                ephemeral=False,
            )
        )
