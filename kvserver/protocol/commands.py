"""
Protocol Command and Response Definitions

This module defines the data structures for protocol commands and responses.
"""

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple


class CommandType(Enum):
    """Enumeration of supported command types (value is the wire verb)."""
    PING = "PING"
    QUIT = "QUIT"
    SET = "SET"
    GET = "GET"
    DEL = "DEL"
    EXISTS = "EXISTS"
    EXPIRE = "EXPIRE"
    TTL = "TTL"
    STRLEN = "STRLEN"
    INCR = "INCR"
    DECR = "DECR"
    INCRBY = "INCRBY"
    DECRBY = "DECRBY"
    LPUSH = "LPUSH"
    RPUSH = "RPUSH"
    LPOP = "LPOP"
    RPOP = "RPOP"
    LLEN = "LLEN"
    LINDEX = "LINDEX"
    LSET = "LSET"
    LRANGE = "LRANGE"
    LREM = "LREM"
    HSET = "HSET"
    HGET = "HGET"
    HDEL = "HDEL"
    HLEN = "HLEN"
    HGETALL = "HGETALL"
    HINCRBY = "HINCRBY"


# Number of arguments after the verb: (minimum, maximum); None = unbounded
ARITY: Dict[CommandType, Tuple[int, Optional[int]]] = {
    CommandType.PING: (0, 0),
    CommandType.QUIT: (0, 0),
    CommandType.SET: (2, 2),
    CommandType.GET: (1, 1),
    CommandType.DEL: (1, 1),
    CommandType.EXISTS: (1, 1),
    CommandType.EXPIRE: (2, 2),
    CommandType.TTL: (1, 1),
    CommandType.STRLEN: (1, 1),
    CommandType.INCR: (1, 1),
    CommandType.DECR: (1, 1),
    CommandType.INCRBY: (2, 2),
    CommandType.DECRBY: (2, 2),
    CommandType.LPUSH: (2, None),
    CommandType.RPUSH: (2, None),
    CommandType.LPOP: (1, 1),
    CommandType.RPOP: (1, 1),
    CommandType.LLEN: (1, 1),
    CommandType.LINDEX: (2, 2),
    CommandType.LSET: (3, 3),
    CommandType.LRANGE: (3, 3),
    CommandType.LREM: (3, 3),
    CommandType.HSET: (3, 3),
    CommandType.HGET: (2, 2),
    CommandType.HDEL: (2, 2),
    CommandType.HLEN: (1, 1),
    CommandType.HGETALL: (1, 1),
    CommandType.HINCRBY: (3, 3),
}


class ResponseType(Enum):
    """Enumeration of reply kinds (value is the wire prefix)."""
    SIMPLE = "+"
    ERROR = "-"
    INTEGER = ":"
    BULK = "$"
    ARRAY = "*"


@dataclass
class Command:
    """
    Represents a parsed protocol command.

    Only the attributes a command type uses are filled in; the rest keep
    their defaults.

    Attributes:
        type: The type of command
        key: The key for the operation (empty for PING and QUIT)
        field: Hash field name (HSET, HGET, HDEL, HINCRBY)
        value: Single value argument (SET, LSET, LREM, HSET)
        values: Values for LPUSH / RPUSH, in argument order
        seconds: TTL seconds for EXPIRE
        delta: Increment for INCRBY / DECRBY / HINCRBY
        index: List index for LINDEX / LSET, range start for LRANGE
        end: Range end for LRANGE (inclusive)
        count: Removal count for LREM
        raw: The original raw command string
    """
    type: CommandType
    key: str = ""
    field: str = ""
    value: str = ""
    values: List[str] = dataclasses.field(default_factory=list)
    seconds: int = 0
    delta: int = 0
    index: int = 0
    end: int = 0
    count: int = 0
    raw: str = ""

    @property
    def is_quit(self) -> bool:
        return self.type == CommandType.QUIT


@dataclass
class Response:
    """
    Represents a protocol reply.

    Attributes:
        type: The reply kind
        message: Text for SIMPLE and ERROR replies
        value: Payload for BULK replies (None encodes the nil bulk string)
        integer: Payload for INTEGER replies
        items: Elements for ARRAY replies
    """
    type: ResponseType
    message: str = ""
    value: Optional[str] = None
    integer: int = 0
    items: List[str] = dataclasses.field(default_factory=list)

    @classmethod
    def ok(cls) -> "Response":
        """Create a '+OK' response."""
        return cls(type=ResponseType.SIMPLE, message="OK")

    @classmethod
    def pong(cls) -> "Response":
        """Create a '+PONG' response."""
        return cls(type=ResponseType.SIMPLE, message="PONG")

    @classmethod
    def error(cls, message: str) -> "Response":
        """Create an error response."""
        return cls(type=ResponseType.ERROR, message=message)

    @classmethod
    def integer_response(cls, number: int) -> "Response":
        return cls(type=ResponseType.INTEGER, integer=int(number))

    @classmethod
    def bulk(cls, value: Optional[str]) -> "Response":
        """Create a bulk string response; None gives the nil reply."""
        return cls(type=ResponseType.BULK, value=value)

    @classmethod
    def array(cls, items: Sequence[str]) -> "Response":
        return cls(type=ResponseType.ARRAY, items=list(items))
