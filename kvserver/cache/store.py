"""
Key-Value Store Module

This module implements the core keyspace of the server: typed values,
per-type mutations and lazy key expiration.

Expiration is lazy. A key whose deadline has passed is purged the next
time any operation touches it; nothing scans the keyspace in the
background.
"""

import asyncio
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Dict, Iterable, List, Optional, Union

from ..exceptions import ERR_HASH_NOT_INTEGER, NoSuchKeyError, OutOfRangeError, WrongTypeError
from .value import Value, ValueType, check_int64, to_int64


class KVStore:
    """
    In-memory key-value store with typed values and TTL support.

    Internal Storage:
        _data:    key -> Value
        _expires: key -> absolute deadline on the store clock
                  (sparse: only keys with an active TTL appear)

    Every key in _expires is also a key in _data. The store does no
    locking of its own; callers serialize access through SharedStore.

    Attributes:
        clock: Zero-argument callable returning the current time in seconds
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        """
        Initialize the KV store.

        Args:
            clock: Time source for expiration (default time.monotonic)
        """
        self.clock = clock
        self._data: Dict[str, Value] = {}
        self._expires: Dict[str, float] = {}

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _purge_if_expired(self, key: str) -> None:
        deadline = self._expires.get(key)
        if deadline is not None and deadline <= self.clock():
            # Lazy expiration
            self._data.pop(key, None)
            self._expires.pop(key, None)

    def _lookup(self, key: str) -> Optional[Value]:
        self._purge_if_expired(key)
        return self._data.get(key)

    def _lookup_typed(self, key: str, value_type: ValueType) -> Optional[Value]:
        """Return the live value for key, raising WrongTypeError on a mismatch."""
        value = self._lookup(key)
        if value is not None and value.type is not value_type:
            raise WrongTypeError()
        return value

    def _lookup_or_create(self, key: str, value_type: ValueType) -> Value:
        value = self._lookup_typed(key, value_type)
        if value is None:
            value = {
                ValueType.LIST: Value.list,
                ValueType.HASH: Value.hash,
                ValueType.SET: Value.set,
            }[value_type]()
            self._data[key] = value
        return value

    # ------------------------------------------------------------------
    # Keyspace
    # ------------------------------------------------------------------

    def set(self, key: str, value: Union[str, Value]) -> None:
        """
        Store a value unconditionally, clearing any TTL on the key.

        Args:
            key: The key to store
            value: A Value, or a plain string stored as TEXT
        """
        if not isinstance(value, Value):
            value = Value.text(value)
        self._data[key] = value
        self._expires.pop(key, None)

    def get(self, key: str) -> Optional[Value]:
        """Return the live Value for key, or None if missing or expired."""
        return self._lookup(key)

    def get_text(self, key: str) -> Optional[str]:
        """
        Return the string stored at key.

        Raises:
            WrongTypeError: If the key holds a non-TEXT value
        """
        value = self._lookup_typed(key, ValueType.TEXT)
        return value.as_text() if value is not None else None

    def delete(self, key: str) -> bool:
        """
        Delete a key and its TTL.

        Returns:
            True if the key existed (and was not expired), False otherwise
        """
        existed = self._lookup(key) is not None
        self._data.pop(key, None)
        self._expires.pop(key, None)
        return existed

    def exists(self, key: str) -> bool:
        return self._lookup(key) is not None

    def expire(self, key: str, seconds: int) -> bool:
        """
        Set a key to expire after the given number of seconds.

        Args:
            key: The key to expire
            seconds: Seconds from now; 0 makes the key absent immediately

        Returns:
            True if the TTL was set, False if the key does not exist
        """
        if self._lookup(key) is None:
            return False
        self._expires[key] = self.clock() + seconds
        return True

    def ttl(self, key: str) -> int:
        """
        Get the remaining time to live of a key.

        Returns:
            Remaining whole seconds, -1 if the key has no TTL,
            -2 if the key does not exist
        """
        if self._lookup(key) is None:
            return -2
        deadline = self._expires.get(key)
        if deadline is None:
            return -1
        return int(deadline - self.clock())

    # ------------------------------------------------------------------
    # TEXT
    # ------------------------------------------------------------------

    def strlen(self, key: str) -> int:
        text = self.get_text(key)
        return len(text.encode()) if text is not None else 0

    def increment(self, key: str, delta: int) -> int:
        """
        Add delta to the integer stored at key.

        A missing key counts as 0. The TTL of an existing key is kept.

        Returns:
            The new value

        Raises:
            WrongTypeError: If the key holds a non-TEXT value
            NotIntegerError: If the value is not an integer or the result
                             does not fit in 64 bits
        """
        text = self.get_text(key)
        current = to_int64(text) if text is not None else 0
        result = check_int64(current + delta)
        self._data[key] = Value.text(str(result))
        return result

    # ------------------------------------------------------------------
    # LIST
    # ------------------------------------------------------------------

    def lpush(self, key: str, values: Iterable[str]) -> int:
        """
        Push values to the head of a list, one at a time.

        ``lpush(k, ["a", "b", "c"])`` leaves the list as c, b, a.

        Returns:
            Length of the list after the push
        """
        values = list(values)
        lst = self._lookup_or_create(key, ValueType.LIST)
        for item in values:
            lst.push_front(item)
        return len(lst)

    def rpush(self, key: str, values: Iterable[str]) -> int:
        """Push values to the tail of a list. Returns the new length."""
        values = list(values)
        lst = self._lookup_or_create(key, ValueType.LIST)
        for item in values:
            lst.push_back(item)
        return len(lst)

    def lpop(self, key: str) -> Optional[str]:
        lst = self._lookup_typed(key, ValueType.LIST)
        return lst.pop_front() if lst is not None else None

    def rpop(self, key: str) -> Optional[str]:
        lst = self._lookup_typed(key, ValueType.LIST)
        return lst.pop_back() if lst is not None else None

    def llen(self, key: str) -> int:
        lst = self._lookup_typed(key, ValueType.LIST)
        return len(lst) if lst is not None else 0

    def lindex(self, key: str, index: int) -> Optional[str]:
        lst = self._lookup_typed(key, ValueType.LIST)
        return lst.get_index(index) if lst is not None else None

    def lset(self, key: str, index: int, item: str) -> None:
        """
        Overwrite the list element at index.

        Raises:
            NoSuchKeyError: If the key does not exist
            OutOfRangeError: If index falls outside the list
        """
        lst = self._lookup_typed(key, ValueType.LIST)
        if lst is None:
            raise NoSuchKeyError()
        if not lst.set_index(index, item):
            raise OutOfRangeError()

    def lrange(self, key: str, start: int, end: int) -> List[str]:
        """Return the inclusive range [start, end]; empty for a missing key."""
        lst = self._lookup_typed(key, ValueType.LIST)
        return lst.range(start, end) if lst is not None else []

    def lrem(self, key: str, count: int, item: str) -> int:
        lst = self._lookup_typed(key, ValueType.LIST)
        return lst.remove(count, item) if lst is not None else 0

    # ------------------------------------------------------------------
    # HASH
    # ------------------------------------------------------------------

    def hset(self, key: str, field: str, item: str) -> bool:
        """Set a hash field. Returns True if the field already existed."""
        return self._lookup_or_create(key, ValueType.HASH).hset(field, item)

    def hget(self, key: str, field: str) -> Optional[str]:
        hsh = self._lookup_typed(key, ValueType.HASH)
        return hsh.hget(field) if hsh is not None else None

    def hdel(self, key: str, field: str) -> bool:
        hsh = self._lookup_typed(key, ValueType.HASH)
        return hsh.hdel(field) if hsh is not None else False

    def hlen(self, key: str) -> int:
        hsh = self._lookup_typed(key, ValueType.HASH)
        return len(hsh) if hsh is not None else 0

    def hgetall(self, key: str) -> Dict[str, str]:
        hsh = self._lookup_typed(key, ValueType.HASH)
        return hsh.fields() if hsh is not None else {}

    def hincrby(self, key: str, field: str, delta: int) -> int:
        """
        Add delta to the integer stored in a hash field.

        A missing field is created with the value delta.

        Raises:
            WrongTypeError: If the key holds a non-HASH value
            NotIntegerError: If the field value is not an integer or the
                             result does not fit in 64 bits
        """
        hsh = self._lookup_typed(key, ValueType.HASH)
        current = hsh.hget(field) if hsh is not None else None
        number = to_int64(current, ERR_HASH_NOT_INTEGER) if current is not None else 0
        result = check_int64(number + delta)
        self._lookup_or_create(key, ValueType.HASH).hset(field, str(result))
        return result

    # ------------------------------------------------------------------
    # Housekeeping
    # ------------------------------------------------------------------

    def size(self) -> int:
        """
        Get the current number of keys in the store.

        Note: This may include expired keys that haven't been purged yet.
        """
        return len(self._data)

    def clear(self) -> None:
        """Remove all keys from the store."""
        self._data.clear()
        self._expires.clear()

    def get_stats(self) -> Dict[str, Any]:
        """
        Get statistics about the store.

        Returns:
            Dictionary containing:
            - total_keys: Total keys in store
            - volatile_keys: Keys with a TTL
            - expired_keys: Keys past their deadline but not yet purged
            - keys_by_type: Key count per value variant
        """
        now = self.clock()
        by_type = {value_type.value: 0 for value_type in ValueType}
        for value in self._data.values():
            by_type[value.type.value] += 1

        return {
            "total_keys": len(self._data),
            "volatile_keys": len(self._expires),
            "expired_keys": sum(1 for deadline in self._expires.values() if deadline <= now),
            "keys_by_type": by_type,
        }


class SharedStore:
    """
    Lock-guarded handle to the single KVStore shared by all connections.

    Every command runs while holding one global asyncio.Lock, so command
    executions are atomic and totally ordered across connections.

    Usage:
        shared = SharedStore(KVStore())
        async with shared.acquire() as store:
            store.set("key", "value")
    """

    def __init__(self, store: KVStore = None):
        self.store = store if store is not None else KVStore()
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[KVStore]:
        """Hold the store lock for the duration of the block."""
        async with self._lock:
            yield self.store

    def locked(self) -> bool:
        return self._lock.locked()
