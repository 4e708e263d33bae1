"""
Typed Value Module

Values held by the store are one of four mutually exclusive variants:

- TEXT: a plain string
- LIST: a double-ended sequence of strings
- HASH: a mapping of field name to string
- SET:  an unordered collection of unique strings

A Value never converts between variants. Calling a list operation on a
hash (or any other mismatch) raises WrongTypeError instead of guessing.
"""

import re
from collections import deque
from enum import Enum
from itertools import islice
from typing import Dict, Iterable, List, Optional, Set

from ..exceptions import NotIntegerError, WrongTypeError

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

_INTEGER_RE = re.compile(r"[+-]?[0-9]+")


def to_int64(text: str, error: str = None) -> int:
    """
    Parse a string as a signed 64-bit integer.

    Only an optional sign followed by decimal digits is accepted; Python
    extras such as surrounding whitespace or underscores are rejected.

    Args:
        text: The string to parse
        error: Optional message for the raised NotIntegerError

    Returns:
        The parsed integer

    Raises:
        NotIntegerError: If text is not an integer or does not fit in 64 bits
    """
    if not _INTEGER_RE.fullmatch(text):
        raise NotIntegerError(error)
    number = int(text)
    if not INT64_MIN <= number <= INT64_MAX:
        raise NotIntegerError(error)
    return number


def check_int64(number: int) -> int:
    """Raise NotIntegerError if an arithmetic result left the 64-bit range."""
    if not INT64_MIN <= number <= INT64_MAX:
        raise NotIntegerError("increment or decrement would overflow")
    return number


class ValueType(Enum):
    """Enumeration of value variants."""
    TEXT = "string"
    LIST = "list"
    HASH = "hash"
    SET = "set"


class Value:
    """
    A stored value with exactly one active variant.

    Use the class constructors rather than __init__:

        Value.text("hello")
        Value.list(["a", "b"])
        Value.hash({"field": "1"})
        Value.set({"x", "y"})

    Attributes:
        type: The active ValueType
    """

    __slots__ = ("type", "_data")

    def __init__(self, value_type: ValueType, data):
        self.type = value_type
        self._data = data

    @classmethod
    def text(cls, text: str = "") -> "Value":
        return cls(ValueType.TEXT, str(text))

    @classmethod
    def list(cls, items: Iterable[str] = ()) -> "Value":
        return cls(ValueType.LIST, deque(items))

    @classmethod
    def hash(cls, fields: Optional[Dict[str, str]] = None) -> "Value":
        return cls(ValueType.HASH, dict(fields or {}))

    @classmethod
    def set(cls, members: Iterable[str] = ()) -> "Value":
        return cls(ValueType.SET, set(members))

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        if self.type is not other.type:
            return False
        if self.type is ValueType.LIST:
            return list(self._data) == list(other._data)
        return self._data == other._data

    def __repr__(self) -> str:
        return f"Value({self.type.value}, {self._data!r})"

    def _expect(self, value_type: ValueType) -> None:
        if self.type is not value_type:
            raise WrongTypeError()

    # ------------------------------------------------------------------
    # TEXT
    # ------------------------------------------------------------------

    def as_text(self) -> str:
        """Return the string held by a TEXT value."""
        self._expect(ValueType.TEXT)
        return self._data

    # ------------------------------------------------------------------
    # LIST
    # ------------------------------------------------------------------

    def _normalize_index(self, index: int) -> int:
        return index + len(self._data) if index < 0 else index

    def push_front(self, item: str) -> int:
        self._expect(ValueType.LIST)
        self._data.appendleft(item)
        return len(self._data)

    def push_back(self, item: str) -> int:
        self._expect(ValueType.LIST)
        self._data.append(item)
        return len(self._data)

    def pop_front(self) -> Optional[str]:
        self._expect(ValueType.LIST)
        return self._data.popleft() if self._data else None

    def pop_back(self) -> Optional[str]:
        self._expect(ValueType.LIST)
        return self._data.pop() if self._data else None

    def get_index(self, index: int) -> Optional[str]:
        """Return the element at index (negative counts from the tail), or None."""
        self._expect(ValueType.LIST)
        index = self._normalize_index(index)
        if 0 <= index < len(self._data):
            return self._data[index]
        return None

    def set_index(self, index: int, item: str) -> bool:
        """Overwrite the element at index. Returns False if out of range."""
        self._expect(ValueType.LIST)
        index = self._normalize_index(index)
        if not 0 <= index < len(self._data):
            return False
        self._data[index] = item
        return True

    def range(self, start: int, end: int) -> List[str]:
        """
        Return the inclusive slice [start, end].

        Negative indices count from the tail. Bounds past either end are
        clamped, and an empty list is returned when the range is empty.

        Examples:
            >>> Value.list(["a", "b", "c"]).range(0, -1)
            ['a', 'b', 'c']
            >>> Value.list(["a", "b", "c"]).range(2, 2)
            ['c']
        """
        self._expect(ValueType.LIST)
        size = len(self._data)
        start = max(self._normalize_index(start), 0)
        end = min(self._normalize_index(end), size - 1)
        if start > end:
            return []
        return list(islice(self._data, start, end + 1))

    def remove(self, count: int, item: str) -> int:
        """
        Remove occurrences of item.

        Args:
            count: > 0 removes the first count matches from the head,
                   < 0 removes the last |count| matches from the tail,
                   0 removes every match
            item: The element to remove

        Returns:
            Number of elements removed
        """
        self._expect(ValueType.LIST)
        limit = abs(count) if count else len(self._data)
        source = reversed(self._data) if count < 0 else iter(self._data)

        kept = []
        removed = 0
        for element in source:
            if element == item and removed < limit:
                removed += 1
                continue
            kept.append(element)

        if count < 0:
            kept.reverse()
        self._data = deque(kept)
        return removed

    def items(self) -> List[str]:
        self._expect(ValueType.LIST)
        return list(self._data)

    # ------------------------------------------------------------------
    # HASH
    # ------------------------------------------------------------------

    def hset(self, field: str, item: str) -> bool:
        """Set a field. Returns True if the field already existed."""
        self._expect(ValueType.HASH)
        existed = field in self._data
        self._data[field] = item
        return existed

    def hget(self, field: str) -> Optional[str]:
        self._expect(ValueType.HASH)
        return self._data.get(field)

    def hdel(self, field: str) -> bool:
        self._expect(ValueType.HASH)
        return self._data.pop(field, None) is not None

    def fields(self) -> Dict[str, str]:
        self._expect(ValueType.HASH)
        return dict(self._data)

    # ------------------------------------------------------------------
    # SET
    # ------------------------------------------------------------------

    def add(self, member: str) -> bool:
        """Add a member. Returns True if it was not already present."""
        self._expect(ValueType.SET)
        if member in self._data:
            return False
        self._data.add(member)
        return True

    def discard(self, member: str) -> bool:
        """Remove a member. Returns True if it was present."""
        self._expect(ValueType.SET)
        if member not in self._data:
            return False
        self._data.discard(member)
        return True

    def contains(self, member: str) -> bool:
        self._expect(ValueType.SET)
        return member in self._data

    def members(self) -> Set[str]:
        self._expect(ValueType.SET)
        return set(self._data)
