"""Scan the OpenVPN syslog file for connection events."""
import logging

from vpnstate.openvpn.events import EVENT_WORDS, ConnectionEvent, LogEntry, parse_event
from vpnstate.openvpn.lines import read_lines
from vpnstate.openvpn.syslog import parse_syslog

logger = logging.getLogger(__name__)

DEFAULT_LOG_PATH = "/var/log/openvpn.log"


def is_candidate(line: str) -> bool:
    """Cheap check before the full parse: the line must end with an event word."""
    return line.endswith(EVENT_WORDS)


def scan(log_path: str = DEFAULT_LOG_PATH) -> list[LogEntry]:
    """
    All connection events in `log_path`, in file order.
    Any candidate line that fails to parse aborts the whole scan.
    """
    relevant: list[LogEntry] = []
    scanned = 0
    for line in read_lines(log_path):
        scanned += 1
        if not is_candidate(line):
            continue
        syslog = parse_syslog(line)
        relevant.append(parse_event(syslog.msg, syslog.timestamp))
    logger.debug("Scanned %d lines of %s, %d connection events", scanned, log_path, len(relevant))
    return relevant


def filter_entries(
    entries: list[LogEntry],
    server: str | None = None,
    user: str | None = None,
    event: ConnectionEvent | None = None,
) -> list[LogEntry]:
    """Keep entries matching every filter that is set. Order is preserved."""
    return [
        e for e in entries
        if (server is None or e.server == server)
        and (user is None or e.user == user)
        and (event is None or e.event == event)
    ]
