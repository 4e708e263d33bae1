"""
KV-Server: In-Memory Key-Value Store

An in-memory key-value server with typed values (strings, lists, hashes,
sets) built with Python asyncio, speaking a Redis-style text protocol
over raw TCP sockets.
"""

__version__ = "1.0.0"
