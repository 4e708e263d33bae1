#!/usr/bin/env python3
"""
Interactive Test Client for KV-Server

A simple command-line client for manually testing the KV-Server.

Usage:
    python scripts/client.py                  # Connect to localhost:6379
    python scripts/client.py --host 1.2.3.4   # Connect to specific host
    python scripts/client.py --port 8080      # Connect to specific port

Type any server command (SET, GET, LPUSH, HGETALL, ...). Replies are
printed the way redis-cli prints them.
"""

import argparse
import socket
import sys

# Enable command history with arrow keys (works on Unix systems)
try:
    import readline  # noqa: F401
except ImportError:
    pass  # readline not available on Windows by default


class ServerError(Exception):
    """An -ERR reply from the server."""


class KVClient:
    """Simple TCP client for KV-Server."""

    def __init__(self, host: str, port: int, timeout: float = 5.0):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.socket = None
        self._file = None

    def connect(self) -> bool:
        """Connect to the server."""
        try:
            self.socket = socket.create_connection((self.host, self.port), timeout=self.timeout)
            self._file = self.socket.makefile('rb')
            return True
        except OSError as e:
            print(f"Connection error: {e}")
            return False

    def disconnect(self):
        """Disconnect from the server."""
        if self.socket:
            try:
                self._file.close()
                self.socket.close()
            except OSError:
                pass
            self.socket = None
            self._file = None

    def _read_line(self) -> str:
        line = self._file.readline()
        if not line:
            raise ConnectionError("Connection closed by server")
        return line.decode('utf-8').rstrip('\r\n')

    def read_reply(self):
        """
        Read one reply.

        Returns:
            str for simple and bulk strings, int for integers, None for
            the nil bulk string, list for arrays

        Raises:
            ServerError: For an error reply
        """
        line = self._read_line()
        prefix, body = line[:1], line[1:]

        if prefix == '+':
            return body
        if prefix == '-':
            raise ServerError(body)
        if prefix == ':':
            return int(body)
        if prefix == '$':
            length = int(body)
            if length < 0:
                return None
            data = self._file.read(length + 2)
            return data[:-2].decode('utf-8')
        if prefix == '*':
            return [self.read_reply() for _ in range(int(body))]
        raise ServerError(f"unexpected reply: {line!r}")

    def send_command(self, command: str):
        """Send a command and return its decoded reply."""
        if not self.socket:
            raise ConnectionError("Not connected")

        if not command.endswith('\n'):
            command += '\n'
        self.socket.sendall(command.encode('utf-8'))
        return self.read_reply()

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()


def render(reply, indent: str = "") -> str:
    """Render a decoded reply in redis-cli style."""
    if reply is None:
        return "(nil)"
    if isinstance(reply, int):
        return f"(integer) {reply}"
    if isinstance(reply, list):
        if not reply:
            return "(empty array)"
        return "\n".join(f"{indent}{i}) {render(item)}" for i, item in enumerate(reply, 1))
    return f'"{reply}"' if reply not in ("OK", "PONG") else reply


def print_help():
    """Print help message."""
    print("""
Server Commands:
----------------
  PING | QUIT
  SET <key> <value>          GET <key>          DEL <key>
  EXISTS <key>               STRLEN <key>
  EXPIRE <key> <seconds>     TTL <key>
  INCR <key>                 DECR <key>
  INCRBY <key> <n>           DECRBY <key> <n>
  LPUSH <key> <v> [v ...]    RPUSH <key> <v> [v ...]
  LPOP <key>                 RPOP <key>         LLEN <key>
  LINDEX <key> <i>           LSET <key> <i> <v>
  LRANGE <key> <start> <end> LREM <key> <count> <v>
  HSET <key> <f> <v>         HGET <key> <f>     HDEL <key> <f>
  HLEN <key>                 HGETALL <key>      HINCRBY <key> <f> <n>

Client Commands:
----------------
  help                      Show this help message
  exit                      Exit the client
  reconnect                 Reconnect to the server
  status                    Show connection status
""")


def main():
    parser = argparse.ArgumentParser(
        description="Interactive test client for KV-Server"
    )
    parser.add_argument(
        "--host",
        type=str,
        default="localhost",
        help="Server host (default: localhost)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=6379,
        help="Server port (default: 6379)"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=5.0,
        help="Socket timeout in seconds (default: 5.0)"
    )

    args = parser.parse_args()

    print("KV-Server Client")
    print("================")
    print(f"Connecting to {args.host}:{args.port}...")

    client = KVClient(args.host, args.port, args.timeout)

    if not client.connect():
        print("Failed to connect. Is the server running?")
        print(f"  Try: kv-server --port {args.port}")
        sys.exit(1)

    print("Connected! Type 'help' for commands.\n")

    try:
        while True:
            try:
                command = input(">>> ").strip()

                if not command:
                    continue

                lower_cmd = command.lower()

                if lower_cmd == "help":
                    print_help()
                    continue

                if lower_cmd == "exit":
                    print("Goodbye!")
                    break

                if lower_cmd == "reconnect":
                    client.disconnect()
                    if client.connect():
                        print("Reconnected!")
                    else:
                        print("Reconnection failed.")
                    continue

                if lower_cmd == "status":
                    status = "Connected" if client.socket else "Disconnected"
                    print(f"Status: {status}")
                    print(f"Server: {args.host}:{args.port}")
                    continue

                try:
                    print(render(client.send_command(command)))
                except ServerError as e:
                    print(f"(error) {e}")
                except (ConnectionError, socket.timeout) as e:
                    print(f"ERROR: {e}")
                    client.disconnect()
                    break

                if lower_cmd == "quit":
                    print("Goodbye!")
                    break

            except EOFError:
                print("\nGoodbye!")
                break

    except KeyboardInterrupt:
        print("\n\nInterrupted. Goodbye!")
    finally:
        client.disconnect()


if __name__ == "__main__":
    main()
