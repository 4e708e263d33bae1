"""
KV-Server Exceptions

Request-level errors raised by the parser, the value model and the store.
Every error here is recoverable: it is rendered as an ``-ERR <message>``
reply and the connection stays open.
"""

ERR_EMPTY_COMMAND = "empty command"
ERR_NOT_INTEGER = "value is not an integer or out of range"
ERR_HASH_NOT_INTEGER = "hash value is not an integer"
ERR_WRONGTYPE = "Operation against a key holding the wrong kind of value"
ERR_NO_SUCH_KEY = "no such key"
ERR_OUT_OF_RANGE = "index out of range"
ERR_LINE_TOO_LONG = "line too long"


class KVError(Exception):
    """
    Base exception for all request-level errors.

    Attributes:
        message: Error text sent to the client (without the ERR prefix)
    """

    default_message = "internal error"

    def __init__(self, message: str = None):
        self.message = message if message is not None else self.default_message
        super().__init__(self.message)


class ParseError(KVError):
    """Raised when a request line cannot be turned into a Command."""


class WrongTypeError(KVError):
    """Raised when an operation targets a value of another variant."""

    default_message = ERR_WRONGTYPE


class NotIntegerError(KVError):
    """Raised when a stored value or a result is not a valid 64-bit integer."""

    default_message = ERR_NOT_INTEGER


class NoSuchKeyError(KVError):
    """Raised when an operation requires an existing key."""

    default_message = ERR_NO_SUCH_KEY


class OutOfRangeError(KVError):
    """Raised when a list index falls outside the list."""

    default_message = ERR_OUT_OF_RANGE
