"""
Protocol Parser Module

This module handles parsing of raw protocol commands and formatting of responses.
"""

from typing import List, Optional

from ..cache.value import to_int64
from ..exceptions import ERR_EMPTY_COMMAND, ERR_NOT_INTEGER, NotIntegerError, ParseError
from .commands import ARITY, Command, CommandType, Response, ResponseType

CRLF = "\r\n"

# Commands whose only argument is the key
_KEY_ONLY = {
    CommandType.GET,
    CommandType.DEL,
    CommandType.EXISTS,
    CommandType.TTL,
    CommandType.STRLEN,
    CommandType.INCR,
    CommandType.DECR,
    CommandType.LPOP,
    CommandType.RPOP,
    CommandType.LLEN,
    CommandType.HLEN,
    CommandType.HGETALL,
}


class ProtocolParser:
    """
    Parser for the KV-Server text protocol.

    Protocol Format:
        Request:  <COMMAND> [ARGS...]\\n     (whitespace separated)
        Response: one Redis-style reply

    Replies:
        +OK\\r\\n                 simple string
        -ERR <message>\\r\\n      error
        :<n>\\r\\n                integer
        $<len>\\r\\n<data>\\r\\n    bulk string ($-1\\r\\n when absent)
        *<count>\\r\\n...         array of bulk strings

    The verb is case-insensitive. Arguments cannot contain whitespace.
    """

    def parse_request(self, data: str) -> Command:
        """
        Parse a raw request string into a Command object.

        Args:
            data: Raw request string (may include trailing newline)

        Returns:
            Command object representing the parsed request.

        Raises:
            ParseError: For an empty line, an unknown verb, a wrong number
                        of arguments or a non-integer numeric argument

        Examples:
            >>> parser = ProtocolParser()
            >>> cmd = parser.parse_request("expire mykey 60")
            >>> cmd.type == CommandType.EXPIRE
            True
            >>> cmd.key, cmd.seconds
            ('mykey', 60)
        """
        raw = data.strip()
        if not raw:
            raise ParseError(ERR_EMPTY_COMMAND)

        parts = raw.split()
        verb = parts[0].upper()
        args = parts[1:]

        try:
            command_type = CommandType(verb)
        except ValueError:
            raise ParseError(f"unknown command '{verb}'") from None

        self._check_arity(command_type, args)

        if command_type in (CommandType.PING, CommandType.QUIT):
            return Command(type=command_type, raw=raw)
        if command_type in _KEY_ONLY:
            return Command(type=command_type, key=args[0], raw=raw)
        if command_type == CommandType.SET:
            return Command(type=command_type, key=args[0], value=args[1], raw=raw)
        if command_type == CommandType.EXPIRE:
            return self._parse_expire(args, raw)
        if command_type in (CommandType.INCRBY, CommandType.DECRBY):
            return Command(
                type=command_type,
                key=args[0],
                delta=self._parse_integer(args[1]),
                raw=raw,
            )
        if command_type in (CommandType.LPUSH, CommandType.RPUSH):
            return Command(type=command_type, key=args[0], values=args[1:], raw=raw)
        if command_type in (CommandType.LINDEX, CommandType.LSET, CommandType.LRANGE, CommandType.LREM):
            return self._parse_list_command(command_type, args, raw)
        return self._parse_hash_command(command_type, args, raw)

    def _check_arity(self, command_type: CommandType, args: List[str]) -> None:
        minimum, maximum = ARITY[command_type]
        if len(args) < minimum or (maximum is not None and len(args) > maximum):
            raise ParseError(f"wrong number of arguments for '{command_type.value.lower()}'")

    def _parse_integer(self, text: str) -> int:
        try:
            return to_int64(text)
        except NotIntegerError:
            raise ParseError(ERR_NOT_INTEGER) from None

    def _parse_expire(self, args: List[str], raw: str) -> Command:
        """
        Parse an EXPIRE command.

        Format: EXPIRE <key> <seconds>
        """
        seconds = self._parse_integer(args[1])
        if seconds < 0:
            raise ParseError(ERR_NOT_INTEGER)
        return Command(type=CommandType.EXPIRE, key=args[0], seconds=seconds, raw=raw)

    def _parse_list_command(self, command_type: CommandType, args: List[str], raw: str) -> Command:
        """
        Parse the index-taking list commands.

        Formats:
            LINDEX <key> <index>
            LSET <key> <index> <value>
            LRANGE <key> <start> <end>
            LREM <key> <count> <value>
        """
        key = args[0]
        number = self._parse_integer(args[1])

        if command_type == CommandType.LINDEX:
            return Command(type=command_type, key=key, index=number, raw=raw)
        if command_type == CommandType.LSET:
            return Command(type=command_type, key=key, index=number, value=args[2], raw=raw)
        if command_type == CommandType.LRANGE:
            return Command(
                type=command_type,
                key=key,
                index=number,
                end=self._parse_integer(args[2]),
                raw=raw,
            )
        return Command(type=command_type, key=key, count=number, value=args[2], raw=raw)

    def _parse_hash_command(self, command_type: CommandType, args: List[str], raw: str) -> Command:
        """
        Parse the field-taking hash commands.

        Formats:
            HSET <key> <field> <value>
            HGET <key> <field>
            HDEL <key> <field>
            HINCRBY <key> <field> <delta>
        """
        command = Command(type=command_type, key=args[0], field=args[1], raw=raw)
        if command_type == CommandType.HSET:
            command.value = args[2]
        elif command_type == CommandType.HINCRBY:
            command.delta = self._parse_integer(args[2])
        return command

    def format_response(self, response: Response) -> str:
        """
        Format a Response object into a protocol string.

        Args:
            response: Response object to format

        Returns:
            Formatted reply string terminated by CRLF.

        Examples:
            >>> parser = ProtocolParser()
            >>> parser.format_response(Response.ok())
            '+OK\\r\\n'
            >>> parser.format_response(Response.bulk("hello"))
            '$5\\r\\nhello\\r\\n'
            >>> parser.format_response(Response.error("no such key"))
            '-ERR no such key\\r\\n'
        """
        if response.type == ResponseType.SIMPLE:
            return f"+{response.message}{CRLF}"
        if response.type == ResponseType.ERROR:
            return f"-ERR {response.message}{CRLF}"
        if response.type == ResponseType.INTEGER:
            return f":{response.integer}{CRLF}"
        if response.type == ResponseType.BULK:
            return self._format_bulk(response.value)

        body = "".join(self._format_bulk(item) for item in response.items)
        return f"*{len(response.items)}{CRLF}{body}"

    def _format_bulk(self, value: Optional[str]) -> str:
        if value is None:
            return f"$-1{CRLF}"
        # Length prefix counts encoded bytes, not characters
        return f"${len(value.encode())}{CRLF}{value}{CRLF}"
