"""
Line readers used by the management session (socket) and the log scanner (file).
Lines come back with surrounding whitespace (including the CRLF OpenVPN sends) trimmed.
"""
import asyncio
from typing import Iterator

from vpnstate.openvpn.errors import LogUnavailable, ProtocolError, ReadTimeout, UnexpectedEof


class LineReader:
    """Reads one trimmed line at a time from an asyncio StreamReader, bounded by a timeout."""

    def __init__(self, reader: asyncio.StreamReader, timeout: float | None = None):
        self._reader = reader
        self._timeout = timeout

    async def next_line(self) -> str:
        try:
            raw = await asyncio.wait_for(self._reader.readline(), self._timeout)
        except asyncio.TimeoutError as e:
            raise ReadTimeout(f"no line from management socket within {self._timeout}s") from e
        except ValueError as e:
            # line longer than the StreamReader limit, peer still connected
            raise ProtocolError(f"line exceeds the read buffer limit: {e}") from e
        except OSError as e:
            raise UnexpectedEof(f"couldn't read next line from socket: {e}") from e
        if not raw:
            raise UnexpectedEof("management socket closed before the reply was complete")
        return raw.decode(errors="replace").strip()


def read_lines(path: str) -> Iterator[str]:
    """
    Yield trimmed lines of a text file in order, split on LF only (a stray CR stays in its line).
    Raises LogUnavailable if the file can't be opened.
    """
    try:
        f = open(path, "r", encoding="utf-8", errors="replace", newline="\n")
    except OSError as e:
        raise LogUnavailable(f"couldn't open openvpn log file {path}: {e.strerror or e}") from e
    with f:
        for line in f:
            yield line.strip()
