"""
Errors raised by the OpenVPN management session, the status table decoder
and the connection log parser. Routers catch OpenVPNError and map it to 500.
"""


class OpenVPNError(Exception):
    """Base class for every failure of the OpenVPN core."""


class InvalidName(OpenVPNError):
    """Server name contains something other than lowercase letters and digits."""

    def __init__(self, name: str):
        super().__init__(
            f"invalid server name `{name}`: only lowercase letters and numbers are allowed"
        )
        self.name = name


class ConnectFailed(OpenVPNError):
    """Management socket could not be reached."""


class UnexpectedEof(OpenVPNError):
    """Daemon closed the management connection before the reply was complete."""


class ReadTimeout(OpenVPNError):
    """No line arrived from the management socket within the read timeout."""


class ProtocolError(OpenVPNError):
    """Sentinel line, missing header or row/header length mismatch."""


class MalformedEnvelope(OpenVPNError):
    """Log line is not an RFC 5424 syslog message."""


class BadTimestamp(OpenVPNError):
    """Envelope timestamp is missing or not a valid instant."""


class MalformedMessage(OpenVPNError):
    """Message body does not have the connection-event shape."""


class BadAddress(OpenVPNError):
    """Peer address in the message is not a valid ip:port pair."""


class UnknownEvent(OpenVPNError):
    """Event word is not connecting, connected or disconnected."""

    def __init__(self, word: str):
        super().__init__(f"unknown event `{word}`")
        self.word = word


class LogUnavailable(OpenVPNError):
    """OpenVPN log file could not be opened."""
