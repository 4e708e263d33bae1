"""
Command Executor Module

Runs a parsed Command against a KVStore and encodes the result as a
protocol reply. The caller must hold exclusive access to the store for
the whole call (see SharedStore).
"""

import logging
from typing import Callable, Dict, Tuple

from ..cache.store import KVStore
from ..exceptions import KVError
from .commands import Command, CommandType, Response
from .parser import ProtocolParser

logger = logging.getLogger(__name__)

Handler = Callable[[Command, KVStore], Response]


class CommandExecutor:
    """
    Dispatches commands to store operations.

    Usage:
        executor = CommandExecutor()
        reply, terminate = executor.execute(command, store)
    """

    def __init__(self, parser: ProtocolParser = None):
        self.parser = parser if parser is not None else ProtocolParser()
        self._handlers: Dict[CommandType, Handler] = {
            CommandType.PING: lambda cmd, store: Response.pong(),
            CommandType.QUIT: lambda cmd, store: Response.ok(),
            CommandType.SET: self._set,
            CommandType.GET: self._get,
            CommandType.DEL: self._del,
            CommandType.EXISTS: self._exists,
            CommandType.EXPIRE: self._expire,
            CommandType.TTL: self._ttl,
            CommandType.STRLEN: self._strlen,
            CommandType.INCR: self._increment,
            CommandType.DECR: self._increment,
            CommandType.INCRBY: self._increment,
            CommandType.DECRBY: self._increment,
            CommandType.LPUSH: self._push,
            CommandType.RPUSH: self._push,
            CommandType.LPOP: self._pop,
            CommandType.RPOP: self._pop,
            CommandType.LLEN: self._llen,
            CommandType.LINDEX: self._lindex,
            CommandType.LSET: self._lset,
            CommandType.LRANGE: self._lrange,
            CommandType.LREM: self._lrem,
            CommandType.HSET: self._hset,
            CommandType.HGET: self._hget,
            CommandType.HDEL: self._hdel,
            CommandType.HLEN: self._hlen,
            CommandType.HGETALL: self._hgetall,
            CommandType.HINCRBY: self._hincrby,
        }

    def execute(self, command: Command, store: KVStore) -> Tuple[bytes, bool]:
        """
        Execute a command and encode its reply.

        Args:
            command: The parsed Command
            store: The store, exclusively held by the caller

        Returns:
            (reply bytes, terminate) where terminate tells the transport
            to close the connection after sending the reply
        """
        response = self.dispatch(command, store)
        return self.parser.format_response(response).encode(), command.is_quit

    def dispatch(self, command: Command, store: KVStore) -> Response:
        """Run a command and return its Response; request errors become error replies."""
        try:
            return self._handlers[command.type](command, store)
        except KVError as exc:
            logger.debug(f"{command.type.value} {command.key!r} failed: {exc.message}")
            return Response.error(exc.message)

    # ------------------------------------------------------------------
    # Keyspace
    # ------------------------------------------------------------------

    def _set(self, command: Command, store: KVStore) -> Response:
        store.set(command.key, command.value)
        return Response.ok()

    def _get(self, command: Command, store: KVStore) -> Response:
        return Response.bulk(store.get_text(command.key))

    def _del(self, command: Command, store: KVStore) -> Response:
        return Response.integer_response(store.delete(command.key))

    def _exists(self, command: Command, store: KVStore) -> Response:
        return Response.integer_response(store.exists(command.key))

    def _expire(self, command: Command, store: KVStore) -> Response:
        return Response.integer_response(store.expire(command.key, command.seconds))

    def _ttl(self, command: Command, store: KVStore) -> Response:
        return Response.integer_response(store.ttl(command.key))

    # ------------------------------------------------------------------
    # TEXT
    # ------------------------------------------------------------------

    def _strlen(self, command: Command, store: KVStore) -> Response:
        return Response.integer_response(store.strlen(command.key))

    def _increment(self, command: Command, store: KVStore) -> Response:
        delta = {
            CommandType.INCR: 1,
            CommandType.DECR: -1,
            CommandType.INCRBY: command.delta,
            CommandType.DECRBY: -command.delta,
        }[command.type]
        return Response.integer_response(store.increment(command.key, delta))

    # ------------------------------------------------------------------
    # LIST
    # ------------------------------------------------------------------

    def _push(self, command: Command, store: KVStore) -> Response:
        if command.type == CommandType.LPUSH:
            return Response.integer_response(store.lpush(command.key, command.values))
        return Response.integer_response(store.rpush(command.key, command.values))

    def _pop(self, command: Command, store: KVStore) -> Response:
        if command.type == CommandType.LPOP:
            return Response.bulk(store.lpop(command.key))
        return Response.bulk(store.rpop(command.key))

    def _llen(self, command: Command, store: KVStore) -> Response:
        return Response.integer_response(store.llen(command.key))

    def _lindex(self, command: Command, store: KVStore) -> Response:
        return Response.bulk(store.lindex(command.key, command.index))

    def _lset(self, command: Command, store: KVStore) -> Response:
        store.lset(command.key, command.index, command.value)
        return Response.ok()

    def _lrange(self, command: Command, store: KVStore) -> Response:
        return Response.array(store.lrange(command.key, command.index, command.end))

    def _lrem(self, command: Command, store: KVStore) -> Response:
        return Response.integer_response(store.lrem(command.key, command.count, command.value))

    # ------------------------------------------------------------------
    # HASH
    # ------------------------------------------------------------------

    def _hset(self, command: Command, store: KVStore) -> Response:
        existed = store.hset(command.key, command.field, command.value)
        return Response.integer_response(0 if existed else 1)

    def _hget(self, command: Command, store: KVStore) -> Response:
        return Response.bulk(store.hget(command.key, command.field))

    def _hdel(self, command: Command, store: KVStore) -> Response:
        return Response.integer_response(store.hdel(command.key, command.field))

    def _hlen(self, command: Command, store: KVStore) -> Response:
        return Response.integer_response(store.hlen(command.key))

    def _hgetall(self, command: Command, store: KVStore) -> Response:
        items = []
        for field, value in store.hgetall(command.key).items():
            items.extend((field, value))
        return Response.array(items)

    def _hincrby(self, command: Command, store: KVStore) -> Response:
        return Response.integer_response(store.hincrby(command.key, command.field, command.delta))
