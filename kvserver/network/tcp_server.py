"""
Async TCP Server Module

This module implements the asynchronous TCP transport for KV-Server.

Each connection gets its own coroutine. A request is one newline
terminated line; the reply is written back before the next line is read.
All connections share one store behind one lock, so commands from
different clients never interleave.
"""

import asyncio
import logging
from asyncio import StreamReader, StreamWriter
from typing import Optional

from ..cache.store import KVStore, SharedStore
from ..config.settings import settings
from ..exceptions import ERR_LINE_TOO_LONG, ParseError
from ..protocol.commands import Response
from ..protocol.executor import CommandExecutor
from ..protocol.parser import ProtocolParser

logger = logging.getLogger(__name__)


class KVServer:
    """
    Asynchronous TCP server for the KV-Server service.

    Features:
    - Non-blocking I/O with asyncio
    - Persistent connections (multiple commands per connection)
    - Request errors answered with an error reply, connection kept open
    - One KVStore shared by all connections behind a global lock

    Usage:
        server = KVServer(host='127.0.0.1', port=6379)
        await server.start()  # Runs forever

    Attributes:
        host: Server bind address
        port: Server port number
        shared: The SharedStore handle used by all connections
        parser: The ProtocolParser for parsing commands
        executor: The CommandExecutor running commands on the store
    """

    def __init__(
            self,
            host: str = None,
            port: int = None,
            store: KVStore = None,
    ):
        """
        Initialize the server.

        Args:
            host: Bind address (default from settings)
            port: Port number (default from settings)
            store: KVStore instance (creates new one if not provided)
        """
        self.host = host if host is not None else settings.HOST
        self.port = port if port is not None else settings.PORT
        self.shared = SharedStore(store)
        self.parser = ProtocolParser()
        self.executor = CommandExecutor(self.parser)

        # Server state
        self._server: Optional[asyncio.Server] = None
        self._running = False
        self._connection_count = 0
        self._active_connections = 0
        self._total_requests = 0

    @property
    def store(self) -> KVStore:
        return self.shared.store

    async def _send(self, writer: StreamWriter, response: Response) -> None:
        writer.write(self.parser.format_response(response).encode())
        await writer.drain()

    async def handle_client(
            self,
            reader: StreamReader,
            writer: StreamWriter
    ) -> None:
        """
        Handle a single client connection.

        Reads request lines until the client disconnects or sends QUIT.
        Parsing happens outside the store lock; execution and reply
        encoding happen while holding it.

        Any unexpected error closes this connection only. The store lock
        is released by its context manager, so other clients keep going.

        Args:
            reader: StreamReader for reading from the client
            writer: StreamWriter for writing to the client
        """
        addr = writer.get_extra_info('peername')
        self._connection_count += 1
        self._active_connections += 1
        logger.debug(f"Client connected: {addr}")

        try:
            while True:
                try:
                    data = await reader.readline()
                except (ValueError, asyncio.LimitOverrunError):
                    # The stream buffer is left unusable past its limit
                    logger.debug(f"Request line over {settings.READ_BUFFER_SIZE} bytes from {addr}")
                    await self._send(writer, Response.error(ERR_LINE_TOO_LONG))
                    break

                if not data:
                    logger.debug(f"Client disconnected: {addr}")
                    break

                try:
                    raw = data.decode().rstrip('\r\n')
                except UnicodeDecodeError:
                    await self._send(writer, Response.error("invalid encoding"))
                    continue

                try:
                    command = self.parser.parse_request(raw)
                except ParseError as exc:
                    await self._send(writer, Response.error(exc.message))
                    continue

                self._total_requests += 1
                async with self.shared.acquire() as store:
                    reply, terminate = self.executor.execute(command, store)

                writer.write(reply)
                await writer.drain()

                if terminate:
                    logger.debug(f"Client requested quit: {addr}")
                    break

        except ConnectionResetError:
            logger.debug(f"Connection reset by client: {addr}")
        except Exception as exc:  # Log unexpected errors but keep server alive
            logger.exception(f"Error handling client {addr}: {exc}")
        finally:
            self._active_connections -= 1
            try:
                writer.close()
                await writer.wait_closed()
            except (ConnectionError, OSError):
                pass

    async def start(self) -> None:
        """
        Start the server and begin accepting connections.

        Runs until cancelled or stop() is called.

        Example:
            server = KVServer(port=6379)
            asyncio.run(server.start())
        """
        if self._running:
            return

        self._server = await asyncio.start_server(
            self.handle_client,
            self.host,
            self.port,
            limit=settings.READ_BUFFER_SIZE,
        )
        self._running = True

        addrs = ', '.join(str(sock.getsockname()) for sock in self._server.sockets or [])
        logger.info(f"Serving on {addrs}")

        try:
            async with self._server:
                await self._server.serve_forever()
        except asyncio.CancelledError:
            # Expected during shutdown/fixture cleanup
            logger.debug("Server start cancelled")
        finally:
            self._running = False

    async def stop(self) -> None:
        """
        Stop the server gracefully.

        Closes the server and waits for it to fully shut down.
        """
        if self._server is None:
            return

        self._server.close()
        try:
            await self._server.wait_closed()
        finally:
            self._server = None
            self._running = False

    def is_running(self) -> bool:
        """Check if the server is currently running."""
        return self._running

    def get_stats(self) -> dict:
        """
        Get server statistics.

        Returns:
            Dictionary with server stats including connection counts,
            request counts, and store statistics.
        """
        return {
            "running": self._running,
            "host": self.host,
            "port": self.port,
            "total_connections": self._connection_count,
            "active_connections": self._active_connections,
            "total_requests": self._total_requests,
            "store_stats": self.store.get_stats(),
        }

