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
"""The abstract storage layer of Etsuko.

Everything Etsuko keeps is a document: a `dict` with `str` keys. `CommonStorage` is the protocol of a place holding such documents.
It knows three things: storing a new document (optionally only when no document shares its key fields), finding documents by a filter
and applying one field-level update to one document. Backend errors come out as `etsuko.errors.StoreFailure`.

A filter (the `query` arguments) matches a document when every key of the filter is in the document with an equal value.

Field-level updates are described by `UpdateOperation`:

- `"set"` writes the values into the fields.
- `"unset"` removes the fields.
- `"push"` appends the values to the list fields.

A field path is either a top-level key (`"ProtectInbox"`) or a top-level key and one key inside the map it holds (`"ContactList.alyx"`).
Only the first dot splits the path, the inner key can contain anything.

Code rarely wants raw documents, so `CommonStorageRecordWrapper` turns a `CommonStorage` into a `RecordStorage` of a specific type,
with a `CommonStorageAdapter` doing the conversion. The conversion happens once, here at the boundary.

There are two `CommonStorage` implementations: `UnQLiteStorage` for real databases and `MemoryStorage` which lives in memory.
"""
import asyncio
import copy
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import (
    Any,
    AsyncIterable,
    Awaitable,
    Dict,
    Generic,
    List,
    Literal,
    Optional,
    TypeVar,
    Union,
)

from unqlite import Collection, UnQLite, UnQLiteError

from ..errors import StoreFailure

T = TypeVar("T")

UpdateOperation = Union[Literal["set"], Literal["unset"], Literal["push"]]

UPDATE_OPERATIONS = ("set", "unset", "push")


class RecordStorage(Generic[T]):
    """A protocol type which describes basic database operations on a type.

    There is no transaction across documents. One `update_fields` call is atomic for the document it touches, nothing more.
    """

    def store(self, record: T) -> Awaitable[T]:
        """Save a record as new."""
        ...

    def store_unique(self, record: T, key_fields: List[str]) -> Awaitable[Optional[T]]:
        """Save a record as new if no record has the same values in `key_fields`.
        The check and the insertion are atomic. Return `None` if such a record exists.
        """
        ...

    def find(self, query: Dict[str, Any]) -> AsyncIterable[T]:
        """Find records which completely matchs `query`."""
        ...

    def find_one(self, query: Dict[str, Any]) -> Awaitable[Optional[T]]:
        """Find one record which completely matchs `query`. `None` if nothing matchs."""
        ...

    def update_fields(
        self, query: Dict[str, Any], operation: UpdateOperation, fields: Dict[str, Any]
    ) -> Awaitable[bool]:
        """Apply `operation` with `fields` on one record which matchs `query`.
        Return `False` if no record matchs.
        """
        ...


class CommonStorage(RecordStorage[Dict[str, Any]]):
    """A protocol type which is `RecordStorage` with `Dict[str, Any]` (read/write `dict`) for general purpose."""

    pass


def doc_match(doc: Dict[str, Any], query: Dict[str, Any]) -> bool:
    """Check if `doc` completely matchs `query`."""
    for k, v in query.items():
        if k not in doc or doc[k] != v:
            return False
    return True


def split_field_path(path: str) -> List[str]:
    """Split a field path into the top-level key and, if any, the inner key."""
    return path.split(".", 1)


def apply_update(
    doc: Dict[str, Any], operation: UpdateOperation, fields: Dict[str, Any]
) -> None:
    """Apply one field-level update on `doc` in place.

    Raise `ValueError` on unknown operations or when pushing to a field which is not a list.
    """
    if operation not in UPDATE_OPERATIONS:
        raise ValueError("unknown update operation: {}".format(operation))
    for path, value in fields.items():
        parts = split_field_path(path)
        if len(parts) == 1:
            container, key = doc, parts[0]
        else:
            top, key = parts
            container = doc.get(top)
            if not isinstance(container, dict):
                if operation == "unset":
                    continue
                # documents may come back with an empty list in place of an empty map
                container = {}
                doc[top] = container
        if operation == "set":
            container[key] = value
        elif operation == "unset":
            container.pop(key, None)
        else:
            target = container.setdefault(key, [])
            if not isinstance(target, list):
                raise ValueError("cannot push into non-list field {}".format(path))
            target.append(value)


class CommonStorageAdapter(Generic[T]):
    """Adapter for `CommonStorageRecordWrapper`.
    Implement `record2dict` and `dict2record` to transform the data between record and dict.
    """

    def record2dict(self, record: T) -> Dict[str, Any]:
        """Build a `dict` from `record`."""
        ...

    def dict2record(self, d: Dict[str, Any]) -> T:
        """Build a record from a `d`."""
        ...


class CommonStorageRecordWrapper(RecordStorage[T]):
    """
    A wrapper for `CommonStorage`, convert the common storage to a `RecordStorage` which can read and write a record type directly.

    The typical way to use this class is to extend this class, pass though the common storage and add an implementation of `CommonStorageAdapter`. For example:

    ````python
    class AccountRecordStorage(CommonStorageRecordWrapper[AccountRecord]):
        def __init__(self, common_storage: CommonStorage) -> None:
            super().__init__(common_storage, AccountDocumentAdapter())
    ````

    Updates are passed though as they are: field paths always name document fields, not record attributes.
    """

    def __init__(
        self, common_storage: CommonStorage, adapter: CommonStorageAdapter[T]
    ) -> None:
        self.common_storage = common_storage
        self.adapter = adapter
        super().__init__()

    async def store(self, record: T) -> T:
        d = self.adapter.record2dict(record)
        result = await self.common_storage.store(d)
        return self.adapter.dict2record(result)

    async def store_unique(self, record: T, key_fields: List[str]) -> Optional[T]:
        d = self.adapter.record2dict(record)
        result = await self.common_storage.store_unique(d, key_fields)
        if result is None:
            return None
        return self.adapter.dict2record(result)

    async def find(self, query: Dict[str, Any]) -> AsyncIterable[T]:
        async for doc in self.common_storage.find(query):
            yield self.adapter.dict2record(doc)

    async def find_one(self, query: Dict[str, Any]) -> Optional[T]:
        result = await self.common_storage.find_one(query)
        if result:
            return self.adapter.dict2record(result)
        else:
            return None

    async def update_fields(
        self, query: Dict[str, Any], operation: UpdateOperation, fields: Dict[str, Any]
    ) -> bool:
        return await self.common_storage.update_fields(query, operation, fields)


class MemoryStorage(CommonStorage):
    """An implementation of `CommonStorage` in memory.

    Documents are copied on the way in and out, callers never share state with the storage.
    Every operation finishes without giving up the event loop, so they are all atomic.
    """

    def __init__(self) -> None:
        self.container: Dict[int, Dict[str, Any]] = {}
        self.next_id = 0
        super().__init__()

    async def store(self, record: Dict[str, Any]) -> Dict[str, Any]:
        self.container[self.next_id] = copy.deepcopy(record)
        self.next_id += 1
        return record

    async def store_unique(
        self, record: Dict[str, Any], key_fields: List[str]
    ) -> Optional[Dict[str, Any]]:
        if self._match_ids({k: record[k] for k in key_fields}):
            return None
        return await self.store(record)

    def _match_ids(self, query: Dict[str, Any]) -> List[int]:
        return [i for i, doc in self.container.items() if doc_match(doc, query)]

    async def find(self, query: Dict[str, Any]) -> AsyncIterable[Dict[str, Any]]:
        for i in self._match_ids(query):
            doc = self.container.get(i)
            if doc is not None:
                yield copy.deepcopy(doc)

    async def find_one(self, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        for i in self._match_ids(query):
            return copy.deepcopy(self.container[i])
        return None

    async def update_fields(
        self, query: Dict[str, Any], operation: UpdateOperation, fields: Dict[str, Any]
    ) -> bool:
        for i in self._match_ids(query):
            apply_update(self.container[i], operation, copy.deepcopy(fields))
            return True
        return False


class UnQLiteStorage(CommonStorage):
    """An implementation of `CommonStorage` for `unqlite.UnQLite`.

    .. note:: This implementation using thead pool to avoid main thread blocking
        The API of `unqlite-python` is synchrounous. To prevent main thread blocking It is wrapped with thread pool executor.

    .. caution:: I/O operation may unexceptedly block the main thread in constructing.
        The collection is created in constructor, and it may contains I/O operations.

    Related:

    - [unqlite-python API documentation](https://unqlite-python.readthedocs.io/en/latest/api.html)
    """

    def __init__(self, instance: UnQLite, collection_name: str) -> None:
        self.executor = ThreadPoolExecutor(
            thread_name_prefix="etsuko.utils.storage.UnQLiteStorage.executor"
        )
        self.instance = instance
        self.collection_name = collection_name
        self.write_lock = threading.Lock()
        """Serializes the writes, and the read-modify-write of `update_fields_sync` and `store_unique_sync`."""
        self.new_collection.create()
        super().__init__()

    @property
    def new_collection(self) -> Collection:
        """Return a new collection.

        ..note:: As the unqlite-python documentation, `unqlite.Collection` actually mantains states (seems like `unqlite.Cursor`) in it.
            We create a new collection for every operation to prevent accidents in concurrent environment.
        """
        return self.instance.collection(self.collection_name)

    async def _run(self, fn, *args) -> Any:
        try:
            fut = asyncio.get_running_loop().run_in_executor(self.executor, fn, *args)
        except RuntimeError as e:
            # the executor has been shut down
            raise StoreFailure(
                "storage {} is unavailable".format(self.collection_name)
            ) from e
        return await fut

    def store_sync(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """Store the `record` without thread pool."""
        with self.write_lock:
            try:
                self.new_collection.store(record)
            except UnQLiteError as e:
                raise StoreFailure(
                    "could not store into {}".format(self.collection_name)
                ) from e
        return record

    def store(self, record: Dict[str, Any]) -> Awaitable[Dict[str, Any]]:
        return self._run(self.store_sync, record)

    def store_unique_sync(
        self, record: Dict[str, Any], key_fields: List[str]
    ) -> Optional[Dict[str, Any]]:
        """Store the `record` without thread pool, unless a document has the same `key_fields`."""
        with self.write_lock:
            if self.find_sync({k: record[k] for k in key_fields}):
                return None
            try:
                self.new_collection.store(record)
            except UnQLiteError as e:
                raise StoreFailure(
                    "could not store into {}".format(self.collection_name)
                ) from e
        return record

    def store_unique(
        self, record: Dict[str, Any], key_fields: List[str]
    ) -> Awaitable[Optional[Dict[str, Any]]]:
        return self._run(self.store_unique_sync, record, key_fields)

    def find_sync(self, query: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Find all documents match `query` without thread pool."""
        try:
            return self.new_collection.filter(lambda d: doc_match(d, query))
        except UnQLiteError as e:
            raise StoreFailure("could not search {}".format(self.collection_name)) from e

    async def find(self, query: Dict[str, Any]) -> AsyncIterable[Dict[str, Any]]:
        for doc in await self._run(self.find_sync, query):
            yield doc

    async def find_one(self, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        docs = await self._run(self.find_sync, query)
        if docs:
            return docs[0]
        return None

    def update_fields_sync(
        self, query: Dict[str, Any], operation: UpdateOperation, fields: Dict[str, Any]
    ) -> bool:
        """Apply the update without thread pool."""
        with self.write_lock:
            docs = self.find_sync(query)
            if not docs:
                return False
            doc = docs[0]
            doc_id = doc.pop("__id")
            apply_update(doc, operation, fields)
            try:
                self.new_collection.update(doc_id, doc)
            except UnQLiteError as e:
                raise StoreFailure(
                    "could not update {} in {}".format(doc_id, self.collection_name)
                ) from e
            return True

    def update_fields(
        self, query: Dict[str, Any], operation: UpdateOperation, fields: Dict[str, Any]
    ) -> Awaitable[bool]:
        return self._run(self.update_fields_sync, query, operation, fields)
