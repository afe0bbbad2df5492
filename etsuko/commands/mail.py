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
"""Email commands: email, search, delete, deleteall, inbox and sent.

An email is copied into the inbox of every recipient accepting it and, once per accepted recipient, into the sender's sent folder.
"""
import logging
from datetime import datetime
from typing import List

from ..interactions import Command, CommandContext, CommandOption, CommandRegistry
from ..interactions.response import Attachment, Embed, EmbedField
from ..usrsys.storage import F_USER_ID, F_USERNAME
from ..usrsys.usr import FOLDER_INBOX, FOLDER_SENT, MessageRecord, format_date
from ..utils.similarity import is_similar

MAX_SEARCH_RESULTS = 10

DELETE_SENT_SELECTOR = "sen"
"""The `type` value which makes `delete` work on sent emails, every other value means the inbox.
..caution:: It's not "sent" like in `search` and `deleteall`. Existing users depend on it, don't change it without a decision.
"""

EMPTY_LIST = "`...`"
VIEW_HINT = "To view any email(s), use the `/search` command."

_logger = logging.getLogger("etsuko.commands.mail")


def parse_recipients(usernames: str) -> List[str]:
    """Split a comma-separated list of usernames."""
    return [name.strip() for name in usernames.split(",") if name.strip()]


def unescape_newlines(content: str) -> str:
    """Turn the two characters `\\n` typed by users into newlines."""
    return content.replace("\\n", "\n")


def message_summary(message: MessageRecord) -> str:
    return "`@{}`: {}".format(message.author, message.title)


def message_attachment(message: MessageRecord) -> Attachment:
    """A text file holding the whole email, named after its title."""
    text = 'Title: "{}"\nAuthor: @{}\nDate: {}\nRecipients: {}\nContent:\n\n{}'.format(
        message.title,
        message.author,
        message.date,
        ", ".join("@" + r for r in message.recipients),
        message.content,
    )
    return Attachment(filename=message.title + ".txt", content=text.encode("utf-8"))


async def send_email(ctx: CommandContext) -> None:
    """Deliver an email to each recipient which accepts it.

    Recipients are loaded one by one, failing to load or deliver to one is reported and the others go on.
    The count shown is the number of deliveries attempted.
    """
    sender = ctx.require_account()
    usernames = parse_recipients(ctx.option("usernames"))
    title = ctx.option("title")
    content = unescape_newlines(ctx.option("content"))
    await ctx.respond("Sending emails...")
    sent = 0
    for username in usernames:
        try:
            recipient = await ctx.accounts.find_by_username(username)
        except Exception as e:
            await ctx.report(e)
            continue
        if not recipient or not recipient.accepts_mail_from(sender):
            continue
        message = MessageRecord(
            author=sender.username,
            title=title,
            recipients=usernames,
            content=content,
            date=format_date(datetime.now()),
        )
        sent += 1
        try:
            await ctx.accounts.push_message(
                {F_USERNAME: username}, FOLDER_INBOX, message
            )
            await ctx.accounts.push_message(
                {F_USER_ID: ctx.identity}, FOLDER_SENT, message
            )
        except Exception as e:
            _logger.warning(
                "delivery from %s to %s is partial", sender.username, username
            )
            await ctx.report(e)
    await ctx.edit("`{}` emails were sent, nice!".format(sent))


async def search(ctx: CommandContext) -> None:
    """Pull the emails whose title or content is similar to the query, `MAX_SEARCH_RESULTS` at most."""
    account = ctx.require_account()
    await ctx.respond("Searching through all emails...")
    folder = FOLDER_SENT if ctx.option("type") == "sent" else FOLDER_INBOX
    query = ctx.option("body")
    files: List[Attachment] = []
    for message in account.folder(folder):
        if is_similar(query, message.title) or is_similar(query, message.content):
            files.append(message_attachment(message))
            if len(files) >= MAX_SEARCH_RESULTS:
                break
    await ctx.edit(
        "`{}` emails were searched and pulled.".format(len(files)), files=files
    )


async def delete(ctx: CommandContext) -> None:
    """Remove every email with the given title from a folder."""
    account = ctx.require_account()
    folder = FOLDER_SENT if ctx.option("type") == DELETE_SENT_SELECTOR else FOLDER_INBOX
    title = ctx.option("title")
    kept = [m for m in account.folder(folder) if m.title != title]
    await ctx.accounts.replace_folder({F_USER_ID: ctx.identity}, folder, kept)
    await ctx.respond("The email has been deleted.")


async def delete_all(ctx: CommandContext) -> None:
    folder = FOLDER_SENT if ctx.option("type") == "sent" else FOLDER_INBOX
    await ctx.accounts.replace_folder({F_USER_ID: ctx.identity}, folder, [])
    await ctx.respond("All emails of that type have been deleted.")


async def inbox(ctx: CommandContext) -> None:
    """List the inbox, emails from contacts apart from the others."""
    account = ctx.require_account()
    normal: List[str] = []
    unknown: List[str] = []
    for message in account.inboxed_emails:
        if message.author in account.contact_list:
            normal.append(message_summary(message))
        else:
            unknown.append(message_summary(message))
    await ctx.respond(
        VIEW_HINT,
        embeds=[
            Embed(
                description="Emails from contacts are under `Normal`.",
                fields=[
                    EmbedField("Normal", "\n".join(normal) or EMPTY_LIST),
                    EmbedField("Unknown", "\n".join(unknown) or EMPTY_LIST),
                ],
            )
        ],
    )


async def sent(ctx: CommandContext) -> None:
    account = ctx.require_account()
    entries = [message_summary(m) for m in account.sent_emails]
    await ctx.respond(
        VIEW_HINT,
        embeds=[
            Embed(
                description="These are all emails sent from this account.",
                fields=[EmbedField("Emails", "\n".join(entries) or EMPTY_LIST)],
            )
        ],
    )


def register(registry: CommandRegistry) -> None:
    registry.add(
        Command(
            name="email",
            group="Personal",
            description="Sends an email.",
            handler=send_email,
            options=[
                CommandOption(
                    "usernames",
                    "The usernames to send to (separate them with commas).",
                ),
                CommandOption("title", "The title for the email."),
                CommandOption("content", "The content for the email (the body)."),
            ],
        )
    )
    registry.add(
        Command(
            name="search",
            group="Personal",
            description="Shows similar emails from a search.",
            handler=search,
            options=[
                CommandOption(
                    "type", "The type of email to search for (inboxed or sent)."
                ),
                CommandOption(
                    "body", "The title/content to search through any emails for."
                ),
            ],
        )
    )
    registry.add(
        Command(
            name="delete",
            group="Personal",
            description="Deletes an email of a type.",
            handler=delete,
            options=[
                CommandOption("type", "The type of email to delete (inboxed or sent)."),
                CommandOption("title", "The title of the email to delete."),
            ],
        )
    )
    registry.add(
        Command(
            name="deleteall",
            group="Personal",
            description="Deletes all emails of a type.",
            handler=delete_all,
            options=[
                CommandOption(
                    "type", "The type of emails to delete (inboxed or sent)."
                ),
            ],
        )
    )
    registry.add(
        Command(
            name="inbox",
            group="Personal",
            description="Lists your inboxed emails.",
            handler=inbox,
        )
    )
    registry.add(
        Command(
            name="sent",
            group="Personal",
            description="Shows all emails sent on this account.",
            handler=sent,
        )
    )
