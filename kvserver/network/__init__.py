"""Network module for KV-Server."""

from .tcp_server import KVServer

__all__ = ["KVServer"]
