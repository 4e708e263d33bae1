"""
Tests for the KVStore keyspace and string operations

These tests verify the basic KVStore operations:
- set() / get() / get_text(): Store and retrieve values
- delete() / exists(): Remove and check keys
- strlen() / increment(): String and counter operations

Run with: python -m pytest tests/test_store.py -v
"""

import pytest

from kvserver.cache.store import KVStore
from kvserver.cache.value import INT64_MAX, INT64_MIN, Value
from kvserver.exceptions import NotIntegerError, WrongTypeError


class TestKVStoreSet:
    """Test set() method."""

    def test_set_then_get(self, store: KVStore):
        """A stored string reads back as a TEXT value."""
        store.set("key1", "value1")
        assert store.get("key1") == Value.text("value1")
        assert store.get_text("key1") == "value1"
        assert store.size() == 1

    def test_set_overwrites(self, store: KVStore):
        """Setting an existing key replaces its value."""
        store.set("key", "original")
        store.set("key", "updated")
        assert store.get_text("key") == "updated"
        assert store.size() == 1

    def test_set_accepts_value(self, store: KVStore):
        """set() also stores a Value of any variant."""
        store.set("list", Value.list(["a"]))
        assert store.get("list") == Value.list(["a"])

    def test_set_replaces_other_variant(self, store: KVStore):
        """SET overwrites whatever variant was stored before."""
        store.rpush("key", ["a"])
        store.set("key", "text")
        assert store.get_text("key") == "text"


class TestKVStoreGet:
    """Test get() and get_text() methods."""

    def test_get_nonexistent_key(self, store: KVStore):
        """Missing keys read as None."""
        assert store.get("nonexistent") is None
        assert store.get_text("nonexistent") is None

    def test_get_text_on_list(self, store: KVStore):
        """get_text() on a list raises WrongTypeError."""
        store.rpush("key", ["a"])
        with pytest.raises(WrongTypeError):
            store.get_text("key")


class TestKVStoreDelete:
    """Test delete() method."""

    def test_delete_existing_key(self, store: KVStore):
        """Deleting an existing key returns True and removes it."""
        store.set("key1", "value1")
        assert store.delete("key1") is True
        assert store.get("key1") is None
        assert store.size() == 0

    def test_delete_nonexistent_key(self, store: KVStore):
        """Deleting a missing key returns False."""
        assert store.delete("nonexistent") is False

    def test_delete_twice(self, store: KVStore):
        """Only the first delete reports the key existed."""
        store.set("key", "value")
        assert store.delete("key") is True
        assert store.delete("key") is False

    def test_delete_clears_ttl(self, store: KVStore):
        """A re-created key does not inherit the deleted key's TTL."""
        store.set("key", "value")
        store.expire("key", 100)
        store.delete("key")
        store.set("key", "value")
        assert store.ttl("key") == -1

    def test_delete_one_of_many(self, store: KVStore):
        """Deleting one key does not affect others."""
        store.set("key1", "value1")
        store.set("key2", "value2")
        store.delete("key1")
        assert store.get_text("key2") == "value2"


class TestKVStoreExists:
    """Test exists() method."""

    def test_exists(self, store: KVStore):
        """exists() tracks set and delete."""
        assert store.exists("key") is False
        store.set("key", "value")
        assert store.exists("key") is True
        store.delete("key")
        assert store.exists("key") is False

    def test_exists_for_containers(self, store: KVStore):
        """Container keys exist too, even when emptied."""
        store.rpush("list", ["a"])
        store.lpop("list")
        assert store.exists("list") is True


class TestKVStoreStrlen:
    """Test strlen() method."""

    def test_strlen(self, store: KVStore):
        """strlen() is the text length, 0 for a missing key."""
        store.set("key", "hello")
        assert store.strlen("key") == 5
        assert store.strlen("missing") == 0

    def test_strlen_on_hash(self, store: KVStore):
        """strlen() on a hash raises WrongTypeError."""
        store.hset("key", "f", "v")
        with pytest.raises(WrongTypeError):
            store.strlen("key")

    def test_strlen_counts_utf8_bytes(self, store: KVStore):
        """strlen() counts encoded bytes, matching the bulk reply header."""
        store.set("key", "\u00e9t\u00e9")
        assert store.strlen("key") == 5


class TestKVStoreIncrement:
    """Test increment() method."""

    def test_increment_missing_key_starts_at_zero(self, store: KVStore):
        """A missing key counts as 0."""
        assert store.increment("counter", 5) == 5
        assert store.get_text("counter") == "5"

    def test_increment_existing(self, store: KVStore):
        """Deltas accumulate and may be negative."""
        store.set("counter", "10")
        assert store.increment("counter", 1) == 11
        assert store.increment("counter", -20) == -9
        assert store.get_text("counter") == "-9"

    def test_increment_non_numeric_leaves_value(self, store: KVStore):
        """Non-numeric text fails without mutation."""
        store.set("key", "abc")
        with pytest.raises(NotIntegerError):
            store.increment("key", 1)
        assert store.get_text("key") == "abc"

    def test_increment_on_list(self, store: KVStore):
        """Non-text values raise WrongTypeError and are untouched."""
        store.rpush("key", ["1"])
        with pytest.raises(WrongTypeError):
            store.increment("key", 1)
        assert store.lrange("key", 0, -1) == ["1"]

    def test_increment_overflow(self, store: KVStore):
        """Leaving the 64-bit range fails without mutation."""
        store.set("max", str(INT64_MAX))
        with pytest.raises(NotIntegerError):
            store.increment("max", 1)
        assert store.get_text("max") == str(INT64_MAX)

        store.set("min", str(INT64_MIN))
        with pytest.raises(NotIntegerError):
            store.increment("min", -1)

    def test_increment_keeps_ttl(self, store: KVStore):
        """Counters keep their TTL across increments."""
        store.set("counter", "1")
        store.expire("counter", 100)
        store.increment("counter", 1)
        assert store.ttl("counter") > 0


class TestKVStoreHousekeeping:
    """Test size(), clear() and get_stats()."""

    def test_clear(self, store: KVStore):
        """clear() empties the keyspace and TTLs."""
        store.set("a", "1")
        store.expire("a", 10)
        store.rpush("b", ["x"])
        store.clear()
        assert store.size() == 0
        assert store.ttl("a") == -2

    def test_get_stats(self, timed_store: KVStore, clock):
        """Stats count keys per variant and volatile/expired keys."""
        timed_store.set("s", "1")
        timed_store.rpush("l", ["x"])
        timed_store.hset("h", "f", "v")
        timed_store.expire("s", 5)
        clock.advance(10)

        stats = timed_store.get_stats()

        assert stats["total_keys"] == 3
        assert stats["volatile_keys"] == 1
        assert stats["expired_keys"] == 1
        assert stats["keys_by_type"] == {"string": 1, "list": 1, "hash": 1, "set": 0}
