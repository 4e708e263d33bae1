"""Protocol module for KV-Server."""

from .commands import Command, CommandType, Response, ResponseType
from .executor import CommandExecutor
from .parser import ProtocolParser

__all__ = [
    "Command",
    "CommandType",
    "CommandExecutor",
    "Response",
    "ResponseType",
    "ProtocolParser",
]
