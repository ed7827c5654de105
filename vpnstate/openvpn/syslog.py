"""
Minimal RFC 5424 envelope parser for the OpenVPN log file.

    <37>1 2024-01-15T10:00:00.123456+01:00 fw.local openvpn 1234 - - openvpn server 'ovpns1' ...

Only what the connection log needs is decoded: priority, header fields, timestamp
and message body. Structured data is matched but not interpreted.
"""
import re
from datetime import datetime, timedelta, timezone
from typing import NamedTuple

from vpnstate.openvpn.errors import BadTimestamp, MalformedEnvelope

NILVALUE = "-"
BOM = "\ufeff"

SYSLOG_RE = re.compile(
    r"<(?P<pri>\d{1,3})>(?P<version>[1-9]\d?) "
    r"(?P<timestamp>\S+) (?P<hostname>\S+) (?P<appname>\S+) (?P<procid>\S+) (?P<msgid>\S+) "
    r"(?P<sd>-|(?:\[(?:[^\]\\]|\\.)*\])+)"
    r"(?: (?P<msg>.*))?",
    re.DOTALL,
)

TIMESTAMP_RE = re.compile(
    r"(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})"
    r"T(?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2})"
    r"(?:\.(?P<frac>\d{1,9}))?"
    r"(?P<offset>Z|[+-]\d{2}:\d{2})"
)


class SyslogMessage(NamedTuple):
    facility: int
    severity: int
    timestamp: datetime | None
    hostname: str | None
    appname: str | None
    procid: str | None
    msgid: str | None
    msg: str


def _nil(value: str) -> str | None:
    return None if value == NILVALUE else value


def parse_timestamp(value: str) -> datetime | None:
    """RFC 3339 timestamp -> aware UTC datetime. `-` means no timestamp (None)."""
    if value == NILVALUE:
        return None
    m = TIMESTAMP_RE.fullmatch(value)
    if not m:
        raise BadTimestamp(f"invalid syslog timestamp `{value}`")

    if m["offset"] == "Z":
        tz = timezone.utc
    else:
        sign = -1 if m["offset"][0] == "-" else 1
        hours, minutes = m["offset"][1:].split(":")
        try:
            tz = timezone(sign * timedelta(hours=int(hours), minutes=int(minutes)))
        except ValueError as e:
            raise BadTimestamp(f"invalid offset in syslog timestamp `{value}`") from e

    # nanoseconds are truncated to what datetime can hold
    micros = int((m["frac"] or "0")[:6].ljust(6, "0"))
    try:
        ts = datetime(
            int(m["year"]), int(m["month"]), int(m["day"]),
            int(m["hour"]), int(m["minute"]), int(m["second"]),
            micros, tzinfo=tz,
        )
    except ValueError as e:
        raise BadTimestamp(f"invalid syslog timestamp `{value}`: {e}") from e
    return ts.astimezone(timezone.utc)


def parse_syslog(line: str) -> SyslogMessage:
    m = SYSLOG_RE.fullmatch(line)
    if not m:
        raise MalformedEnvelope(f"couldn't parse syslog msg `{line}`")

    pri = int(m["pri"])
    if pri > 191:
        raise MalformedEnvelope(f"syslog priority out of range in `{line}`")

    msg = m["msg"] or ""
    if msg.startswith(BOM):
        msg = msg[len(BOM):]

    return SyslogMessage(
        facility=pri // 8,
        severity=pri % 8,
        timestamp=parse_timestamp(m["timestamp"]),
        hostname=_nil(m["hostname"]),
        appname=_nil(m["appname"]),
        procid=_nil(m["procid"]),
        msgid=_nil(m["msgid"]),
        msg=msg,
    )
