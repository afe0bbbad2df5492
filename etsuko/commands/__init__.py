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
"""Command handlers.

- `personal`: signup, login and account settings
- `contacts`: contact and block lists
- `mail`: sending, listing, searching and deleting emails
- `info`: informational commands
"""
from ..interactions import CommandRegistry
from . import contacts, info, mail, personal


def build_registry() -> CommandRegistry:
    """Create a `CommandRegistry` holding all commands."""
    registry = CommandRegistry()
    for module in (info, personal, contacts, mail):
        module.register(registry)
    return registry
