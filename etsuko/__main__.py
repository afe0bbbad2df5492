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
"""Run Etsuko: `python -m etsuko`.

Every option has an environment variable as default, `--database` is `ETSUKO_DATABASE` and so on.
"""
import argparse
import asyncio
import logging
import os
from typing import List, Optional, Sequence, Tuple

from . import Etsuko
from .interactions.cooldown import DEFAULT_COOLDOWN_SECONDS
from .usrsys.auth import (
    Argon2Credentials,
    CredentialPolicy,
    InsecureLegacyPlaintextCredentials,
)

CREDENTIAL_POLICIES = {
    "plaintext": InsecureLegacyPlaintextCredentials,
    "argon2": Argon2Credentials,
}


def parse_bind(text: str) -> Tuple[Optional[str], int]:
    """Parse "address:port" or "port"."""
    address, sep, port = text.rpartition(":")
    try:
        return (address if sep and address else None), int(port)
    except ValueError:
        raise argparse.ArgumentTypeError("invalid bind: {}".format(text))


def build_parser() -> argparse.ArgumentParser:
    env = os.environ.get
    parser = argparse.ArgumentParser(
        prog="etsuko", description="A pseudo-email service for chat platforms."
    )
    parser.add_argument(
        "--database",
        default=env("ETSUKO_DATABASE"),
        help="UnQLite database file, ':mem:' for in-memory. Without it nothing is persisted.",
    )
    parser.add_argument("--application-id", default=env("ETSUKO_APPLICATION_ID"))
    parser.add_argument(
        "--public-key",
        default=env("ETSUKO_PUBLIC_KEY"),
        help="Hex encoded key the platform signs interactions with.",
    )
    parser.add_argument("--bot-token", default=env("ETSUKO_BOT_TOKEN"))
    parser.add_argument(
        "--error-webhook",
        default=env("ETSUKO_ERROR_WEBHOOK"),
        help="Webhook URL errors are reported to. Errors are only logged without it.",
    )
    parser.add_argument(
        "--bind",
        action="append",
        type=parse_bind,
        default=None,
        help="[address:]port to listen on, can be repeated. Default: ETSUKO_BIND or 127.0.0.1:8080.",
    )
    parser.add_argument(
        "--cooldown",
        type=float,
        default=float(env("ETSUKO_COOLDOWN", DEFAULT_COOLDOWN_SECONDS)),
    )
    parser.add_argument(
        "--credential-policy",
        choices=sorted(CREDENTIAL_POLICIES),
        default=env("ETSUKO_CREDENTIAL_POLICY", "plaintext"),
    )
    parser.add_argument(
        "--sync-commands",
        action="store_true",
        help="Register the commands on the platform before starting.",
    )
    parser.add_argument(
        "--debug", action="store_true", default=bool(env("ETSUKO_DEBUG"))
    )
    return parser


async def serve(etsuko: Etsuko, sync_commands: bool) -> None:
    if sync_commands:
        await etsuko.sync_commands()
    await etsuko.start()
    try:
        await asyncio.Event().wait()
    finally:
        await etsuko.stop()


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    binds: List[Tuple[Optional[str], int]] = args.bind or [
        parse_bind(os.environ.get("ETSUKO_BIND", "127.0.0.1:8080"))
    ]
    policy: CredentialPolicy = CREDENTIAL_POLICIES[args.credential_policy]()
    etsuko = Etsuko(
        database_path=args.database,
        application_id=args.application_id,
        public_key=args.public_key,
        bot_token=args.bot_token,
        error_webhook_url=args.error_webhook,
        http_binds=binds,
        cooldown_seconds=args.cooldown,
        credential_policy=policy,
        debug=args.debug,
    )
    try:
        asyncio.run(serve(etsuko, args.sync_commands))
    except KeyboardInterrupt:
        logging.getLogger("etsuko").info("stopped")


if __name__ == "__main__":
    main()
