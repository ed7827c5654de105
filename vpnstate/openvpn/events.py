"""
Connection events from the OpenVPN log. Exactly one message shape is understood:

    openvpn server 'ovpns1' user 'alice' address '10.0.0.5:55555' - connected

Anything else is rejected rather than guessed at.
"""
import enum
import ipaddress
from datetime import datetime

from pydantic import BaseModel

from vpnstate.openvpn.errors import BadAddress, BadTimestamp, MalformedMessage, UnknownEvent

# token positions in the message body
TOKEN_COUNT = 9
SERVER_TOKEN = 2
USER_TOKEN = 4
ADDRESS_TOKEN = 6
EVENT_TOKEN = 8


class ConnectionEvent(str, enum.Enum):
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"

    @classmethod
    def from_word(cls, word: str) -> "ConnectionEvent":
        try:
            return cls(word)
        except ValueError:
            raise UnknownEvent(word) from None


EVENT_WORDS = tuple(e.value for e in ConnectionEvent)


class LogEntry(BaseModel):
    """One decoded connection event. Time is local."""
    event: ConnectionEvent
    time: datetime
    ip: ipaddress.IPv4Address | ipaddress.IPv6Address
    port: int
    user: str
    server: str

    class Config:
        frozen = True


def _unquote(token: str) -> str:
    return token.strip("'")


def parse_socket_addr(value: str) -> tuple[ipaddress.IPv4Address | ipaddress.IPv6Address, int]:
    """`1.2.3.4:1194` or `[2001:db8::1]:1194` -> (ip, port)."""
    if value.startswith("["):
        host, sep, port = value[1:].partition("]:")
        version = 6
    else:
        host, sep, port = value.rpartition(":")
        version = 4
    if not sep or not (port.isascii() and port.isdigit()):
        raise BadAddress(f"invalid socket address `{value}` in message")
    try:
        ip = ipaddress.ip_address(host)
    except ValueError as e:
        raise BadAddress(f"invalid socket address `{value}` in message") from e
    if ip.version != version or int(port) > 65535:
        raise BadAddress(f"invalid socket address `{value}` in message")
    return ip, int(port)


def parse_event(message: str, timestamp: datetime | None) -> LogEntry:
    """Decode a message body; `timestamp` is the aware instant from the syslog envelope."""
    if timestamp is None:
        raise BadTimestamp("syslog message missing timestamp")
    if timestamp.tzinfo is None:
        raise BadTimestamp("syslog timestamp has no UTC offset")

    tokens = message.split(" ")
    if len(tokens) != TOKEN_COUNT:
        raise MalformedMessage(
            f"msg splits into {len(tokens)} parts, expected {TOKEN_COUNT}: `{message}`"
        )

    ip, port = parse_socket_addr(_unquote(tokens[ADDRESS_TOKEN]))
    return LogEntry(
        event=ConnectionEvent.from_word(tokens[EVENT_TOKEN]),
        time=timestamp.astimezone(),
        ip=ip,
        port=port,
        user=_unquote(tokens[USER_TOKEN]),
        server=_unquote(tokens[SERVER_TOKEN]),
    )
