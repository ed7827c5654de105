"""
Session on the OpenVPN management interface (unix socket, one per server).
One session runs one command: connect, discard banner, write command, scan reply lines.
"""
import asyncio
import logging
import os
import re
from typing import Any, Callable, NamedTuple

from vpnstate.openvpn.errors import ConnectFailed, InvalidName, OpenVPNError, UnexpectedEof
from vpnstate.openvpn.lines import LineReader

logger = logging.getLogger(__name__)

DEFAULT_SOCKET_DIR = "/var/etc/openvpn"
SERVER_NAME_RE = re.compile(r"[a-z0-9]+")


class Stop(NamedTuple):
    """Returned by a line handler to end the scan with `value`."""
    value: Any


LineHandler = Callable[[str], "Stop | None"]


def validate_server_name(server_name: str) -> str:
    if not SERVER_NAME_RE.fullmatch(server_name or ""):
        raise InvalidName(server_name)
    return server_name


def socket_path(socket_dir: str, server_name: str) -> str:
    return os.path.join(socket_dir, validate_server_name(server_name), "sock")


class ManagementSession:
    def __init__(self, server_name: str, reader: LineReader, writer: asyncio.StreamWriter):
        self.server_name = server_name
        self._reader = reader
        self._writer = writer

    @classmethod
    async def open(
        cls,
        server_name: str,
        socket_dir: str = DEFAULT_SOCKET_DIR,
        read_timeout: float | None = 5.0,
        connect_timeout: float | None = 5.0,
    ) -> "ManagementSession":
        """Connect to `<socket_dir>/<server_name>/sock` and discard the welcome banner."""
        path = socket_path(socket_dir, server_name)
        try:
            reader, writer = await asyncio.wait_for(
                asyncio.open_unix_connection(path), connect_timeout
            )
        except asyncio.TimeoutError as e:
            raise ConnectFailed(f"timed out connecting to openvpn socket {path}") from e
        except OSError as e:
            raise ConnectFailed(f"couldn't connect to openvpn socket {path}: {e.strerror or e}") from e

        session = cls(server_name, LineReader(reader, read_timeout), writer)
        try:
            banner = await session._reader.next_line()
        except OpenVPNError:
            await session.close()
            raise
        logger.debug("Connected to %s: %s", path, banner)
        return session

    async def _write_command(self, command: str) -> None:
        try:
            self._writer.write(command.encode() + b"\n")
            await self._writer.drain()
        except OSError as e:
            raise UnexpectedEof(f"openvpn socket closed while writing command: {e}") from e

    async def execute(self, command: str, handler: LineHandler) -> Any:
        """
        Write `command`, then feed reply lines to `handler` until it returns Stop(value).
        Returns value. A closed stream raises UnexpectedEof, a stalled one ReadTimeout.
        """
        logger.debug("Executing `%s` on %s", command, self.server_name)
        await self._write_command(command)
        while True:
            line = await self._reader.next_line()
            result = handler(line)
            if result is not None:
                return result.value

    async def close(self) -> None:
        self._writer.close()
        try:
            await self._writer.wait_closed()
        except OSError:
            # peer already gone; nothing left to release
            pass

    async def __aenter__(self) -> "ManagementSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
