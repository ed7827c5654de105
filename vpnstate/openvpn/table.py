"""
Decode the CSV tables OpenVPN prints for `status 2` (and similar commands).

The reply mixes several logical tables and sentinel lines in one stream, e.g.:

    TITLE,OpenVPN 2.6.8 ...
    TIME,2024-01-15 10:00:00,1705312800
    HEADER,CLIENT_LIST,Common Name,Real Address,Virtual Address,...
    CLIENT_LIST,alice,10.0.0.5:55555,10.8.0.2,...
    HEADER,ROUTING_TABLE,Virtual Address,Common Name,...
    ...
    END

Rows of one table are contiguous, so a table ends at the first line that does
not carry its row key.
"""
import enum
import logging

from vpnstate.openvpn.errors import OpenVPNError, ProtocolError, UnexpectedEof
from vpnstate.openvpn.management import ManagementSession, Stop

logger = logging.getLogger(__name__)

Record = dict[str, str]


class TableState(str, enum.Enum):
    AWAIT_HEADER = "AWAIT_HEADER"
    READ_ROWS = "READ_ROWS"
    DONE = "DONE"
    FAILED = "FAILED"


def is_bad_line(line: str) -> bool:
    return "END" in line or "ERROR" in line


class TableDecoder:
    """
    Line-fed state machine: AWAIT_HEADER -> READ_ROWS -> DONE, any step may go to FAILED.
    `feed` is passed to ManagementSession.execute as the line handler.
    """

    def __init__(self, row_key: str):
        self.row_key = row_key
        self.state = TableState.AWAIT_HEADER
        self.header: list[str] = []
        self.rows: list[Record] = []

    def feed(self, line: str) -> Stop | None:
        if self.state == TableState.AWAIT_HEADER:
            return self._await_header(line)
        if self.state == TableState.READ_ROWS:
            return self._read_rows(line)
        raise ProtocolError(f"table decoder fed after reaching {self.state.value}")

    def _fail(self, message: str) -> ProtocolError:
        self.state = TableState.FAILED
        return ProtocolError(message)

    def fail_eof(self) -> UnexpectedEof:
        """Transition for a stream that ended before the table did."""
        state = self.state
        self.state = TableState.FAILED
        if state == TableState.AWAIT_HEADER:
            return UnexpectedEof(f"stream ended before {self.row_key} header")
        return UnexpectedEof(f"stream ended after {len(self.rows)} {self.row_key} rows")

    def _await_header(self, line: str) -> None:
        if is_bad_line(line):
            raise self._fail(f"unexpected line `{line}`")

        # header names each field; skip `HEADER` and the row key
        if "HEADER" in line and self.row_key in line:
            header = line.split(",")[2:]
            if not header:
                raise self._fail(f"empty {self.row_key} header `{line}`")
            self.header = header
            self.state = TableState.READ_ROWS
        return None

    def _read_rows(self, line: str) -> Stop | None:
        if is_bad_line(line):
            raise self._fail(f"unexpected line `{line}`")

        # lines are contiguous, the first one without the key ends the table
        if self.row_key not in line:
            self.state = TableState.DONE
            return Stop(self.rows)

        # skip the line-type column
        values = line.split(",")[1:]
        if len(values) != len(self.header):
            raise self._fail(
                f"length mismatch: got {len(values)}, expected {len(self.header)}"
            )
        self.rows.append(dict(zip(self.header, values)))
        return None

    async def run(self, session: ManagementSession, command: str) -> list[Record]:
        """Feed the reply of `command` through the decoder. Any session failure leaves it FAILED."""
        try:
            return await session.execute(command, self.feed)
        except UnexpectedEof as e:
            raise self.fail_eof() from e
        except OpenVPNError:
            self.state = TableState.FAILED
            raise


async def decode_table(session: ManagementSession, command: str, row_key: str) -> list[Record]:
    """Run `command` and collect the rows of the `row_key` table as field -> value dicts."""
    rows = await TableDecoder(row_key).run(session, command)
    logger.debug("Decoded %d %s rows from %s", len(rows), row_key, session.server_name)
    return rows
