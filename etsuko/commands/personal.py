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
"""Account commands: signup, login, account, settings and protection.
"""
from datetime import datetime

from ..errors import ValidationFailure
from ..interactions import Command, CommandContext, CommandOption, CommandRegistry
from ..interactions.response import Embed, EmbedField
from ..usrsys.storage import F_PROTECT_INBOX, F_USER_ID, F_USERNAME
from ..usrsys.usr import (
    MAX_PASSWORD_LENGTH,
    MAX_USERNAME_LENGTH,
    MIN_PASSWORD_LENGTH,
    UNLINKED,
    format_date,
)

USERNAME_TAKEN = "That username is already under an account!"

USERNAME_OPTION = CommandOption("username", "The username for the account.")
PASSWORD_OPTION = CommandOption("password", "The password for the account.")


async def signup(ctx: CommandContext) -> None:
    """Create an account. It's not linked, the invoker still has to log in.

    Checked in order: the invoker is not logged in, the username is free, the username length, the password length.
    """
    if ctx.account is not None:
        raise ValidationFailure("You've already signed up!")
    username = ctx.option("username")
    password = ctx.option("password")
    if await ctx.accounts.find_by_username(username):
        raise ValidationFailure(USERNAME_TAKEN)
    if len(username) > MAX_USERNAME_LENGTH:
        raise ValidationFailure(
            "The account username cannot be over `{}` letters!".format(
                MAX_USERNAME_LENGTH
            )
        )
    if not MIN_PASSWORD_LENGTH <= len(password) <= MAX_PASSWORD_LENGTH:
        raise ValidationFailure(
            "The account password cannot be under `{}` letters, or over `{}` letters!".format(
                MIN_PASSWORD_LENGTH, MAX_PASSWORD_LENGTH
            )
        )
    created = await ctx.accounts.create_account(
        username,
        await ctx.auth_provider.policy.encode(password),
        format_date(datetime.now()),
    )
    if created is None:
        # another signup took the name in the meantime
        raise ValidationFailure(USERNAME_TAKEN)
    await ctx.respond(
        "You've signed up as `@{}`, congrats! Now, run `/login`.".format(username)
    )


async def login(ctx: CommandContext) -> None:
    """Link the invoker to an account.

    The account the invoker was logged into is unlinked first, then the new one is linked.
    These are two separate updates: if the second fails, the invoker is logged into nothing.
    """
    username = ctx.option("username")
    password = ctx.option("password")
    account = await ctx.auth_provider.check(username, password)
    if not account:
        raise ValidationFailure("Those credentials don't match any account!")
    await ctx.respond("Logging you out of any previous account...")
    await ctx.accounts.update({F_USER_ID: ctx.identity}, "set", {F_USER_ID: UNLINKED})
    await ctx.edit("Logging into the account...")
    await ctx.accounts.update(
        {F_USERNAME: account.username}, "set", {F_USER_ID: ctx.identity}
    )
    await ctx.edit("You are now logged into `@{}`!".format(username))


async def account_info(ctx: CommandContext) -> None:
    account = ctx.require_account()
    password = ctx.auth_provider.reveal_password(account)
    lines = [
        "Username: `@{}`".format(account.username),
        "Sign Up Date: `{}`".format(account.signup_date),
        "Emails Sent: `{}`".format(len(account.sent_emails)),
        "Inbox Size: `{}`".format(len(account.inboxed_emails)),
        "Contact List Size: `{}`".format(len(account.contact_list)),
        "Block List Size: `{}`".format(len(account.block_list)),
    ]
    if password is not None:
        lines.append("Password: `{}`".format(password))
    await ctx.respond(
        embeds=[
            Embed(
                description="This account's info.",
                fields=[EmbedField("Info", "\n".join(lines))],
            )
        ]
    )


async def settings(ctx: CommandContext) -> None:
    account = ctx.require_account()
    two_factor = account.two_factor
    lines = [
        "Inbox Protection: `{}`".format(str(account.protect_inbox).lower()),
        "2FA: `{}`".format(str(two_factor.active).lower()),
        "> Question: `{}`".format(two_factor.question or " "),
        "> Answer: `{}`".format(two_factor.answer or " "),
    ]
    await ctx.respond(
        embeds=[
            Embed(
                description="These are the current account settings.",
                fields=[EmbedField("Settings", "\n".join(lines))],
            )
        ]
    )


async def protection(ctx: CommandContext) -> None:
    """Turn inbox protection off with "off", on with anything else."""
    status = ctx.option("status")
    await ctx.accounts.update(
        {F_USER_ID: ctx.identity}, "set", {F_PROTECT_INBOX: status != "off"}
    )
    await ctx.respond("Inbox protection toggled `{}`.".format(status))


def register(registry: CommandRegistry) -> None:
    registry.add(
        Command(
            name="signup",
            group="Personal",
            description="Signs you up for my services.",
            handler=signup,
            options=[USERNAME_OPTION, PASSWORD_OPTION],
        )
    )
    registry.add(
        Command(
            name="login",
            group="Personal",
            description="Logs you into an account.",
            handler=login,
            options=[USERNAME_OPTION, PASSWORD_OPTION],
        )
    )
    registry.add(
        Command(
            name="account",
            group="Personal",
            description="Shows info on the account you're using.",
            handler=account_info,
        )
    )
    registry.add(
        Command(
            name="settings",
            group="Personal",
            description="Shows all settings.",
            handler=settings,
        )
    )
    registry.add(
        Command(
            name="protection",
            group="Personal",
            description="Turns inbox protection on or off.",
            handler=protection,
            options=[CommandOption("status", "On or off.")],
        )
    )
