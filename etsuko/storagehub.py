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
from typing import Dict, Optional

from unqlite import UnQLite

from .usrsys.storage import AccountRecordStorage
from .utils.storage import CommonStorage, MemoryStorage, UnQLiteStorage


class StorageHub(object):
    """The storage centre for Etsuko. This class stores storages keep Etsuko storing data.

    Common storages are created once per name and shared, so every user of one collection goes though the same write lock.

    ..note:: Typically you use the one from `etsuko.Etsuko`.

    Related:

    - `etsuko.utils.storage` The abstract storage layer of Etsuko.
    """

    def __init__(self, database: Optional[UnQLite] = None) -> None:
        self.database = database
        """The database instance. Storages live in memory when it's `None`.
        .. important:: Don't depends on this property, Etsuko may support more database backend in future."""
        self._common_storages: Dict[str, CommonStorage] = {}
        super().__init__()

    def get_common_storage(self, name: str) -> CommonStorage:
        """Get the common storage with `name`, create it if it does not exists."""
        storage = self._common_storages.get(name)
        if storage is None:
            if self.database is not None:
                storage = UnQLiteStorage(self.database, name)
            else:
                storage = MemoryStorage()
            self._common_storages[name] = storage
        return storage

    @property
    def accounts(self) -> AccountRecordStorage:
        """
        Related:

        - `etsuko.usrsys.usr.AccountRecord` The object being stored.
        """
        return AccountRecordStorage(self.get_common_storage("accounts"))
