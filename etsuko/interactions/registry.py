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
"""`Command` and `CommandRegistry`: the table of what users can invoke.
"""
from dataclasses import dataclass, field
from typing import (
    TYPE_CHECKING,
    Any,
    Awaitable,
    Callable,
    Dict,
    Iterator,
    List,
    Optional,
)

if TYPE_CHECKING:
    from .context import CommandContext

CommandHandler = Callable[["CommandContext"], Awaitable[Any]]
"""A type for the function running a command."""

AUTH_EXEMPT_COMMANDS = frozenset({"signup", "login"})
"""Commands which can be invoked without being logged into an account."""

OPTION_TYPE_STRING = 3
COMMAND_TYPE_CHAT_INPUT = 1


@dataclass
class CommandOption(object):
    """A string parameter of a command."""

    name: str
    description: str
    required: bool = True


@dataclass
class Command(object):
    """A command users can invoke.

    Attributes:
        name: `str`. Unique in a registry.
        group: `str`. Only for display.
        description: `str`.
        handler: `CommandHandler`.
        options: `List[CommandOption]`. In the order they are shown to users.
        ephemeral: `bool`. If the answers are only shown to the invoker.
    """

    name: str
    group: str
    description: str
    handler: CommandHandler
    options: List[CommandOption] = field(default_factory=list)
    ephemeral: bool = True

    @property
    def requires_account(self) -> bool:
        return self.name not in AUTH_EXEMPT_COMMANDS

    def application_command(self) -> Dict[str, Any]:
        """The form used to register the command on the platform."""
        return {
            "name": self.name,
            "type": COMMAND_TYPE_CHAT_INPUT,
            "description": self.description,
            "options": [
                {
                    "type": OPTION_TYPE_STRING,
                    "name": option.name,
                    "description": option.description,
                    "required": option.required,
                }
                for option in self.options
            ],
        }


class CommandRegistry(object):
    """A table of `Command` by name."""

    def __init__(self) -> None:
        self._commands: Dict[str, Command] = {}
        super().__init__()

    def add(self, command: Command) -> Command:
        """Add `command`. Raise `KeyError` if the name is taken."""
        if command.name in self._commands:
            raise KeyError("command {} is registered already".format(command.name))
        self._commands[command.name] = command
        return command

    def get(self, name: str) -> Optional[Command]:
        return self._commands.get(name)

    @property
    def names(self) -> List[str]:
        return list(self._commands.keys())

    def __contains__(self, name: object) -> bool:
        return name in self._commands

    def __iter__(self) -> Iterator[Command]:
        return iter(list(self._commands.values()))

    def __len__(self) -> int:
        return len(self._commands)

    def application_commands(self) -> List[Dict[str, Any]]:
        """All commands in the form used to register them on the platform."""
        return [command.application_command() for command in self]
