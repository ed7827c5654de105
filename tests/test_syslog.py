from datetime import datetime, timezone

import pytest

from vpnstate.openvpn.errors import BadTimestamp, MalformedEnvelope
from vpnstate.openvpn.syslog import parse_syslog, parse_timestamp

LINE = (
    "<37>1 2024-01-15T10:00:00.123456+01:00 fw.local openvpn 1234 - - "
    "openvpn server 'ovpns1' user 'alice' address '10.0.0.5:55555' - connected"
)


def test_parse_envelope():
    msg = parse_syslog(LINE)
    assert msg.facility == 4
    assert msg.severity == 5
    assert msg.hostname == "fw.local"
    assert msg.appname == "openvpn"
    assert msg.procid == "1234"
    assert msg.msgid is None
    assert msg.timestamp == datetime(2024, 1, 15, 9, 0, 0, 123456, tzinfo=timezone.utc)
    assert msg.msg.startswith("openvpn server 'ovpns1'")
    assert msg.msg.endswith("connected")


def test_structured_data_is_skipped():
    line = LINE.replace(" - - openvpn", ' ID47 [exampleSDID@32473 iut="3" eventSource="App\\]"][x@1 a="b"] openvpn')
    msg = parse_syslog(line)
    assert msg.msgid == "ID47"
    assert msg.msg.startswith("openvpn server")


def test_bom_is_dropped():
    msg = parse_syslog(LINE.replace(" - - ", " - - \ufeff"))
    assert msg.msg.startswith("openvpn")


def test_empty_message():
    assert parse_syslog("<13>1 2024-01-15T10:00:00Z host app - - -").msg == ""


def test_nil_timestamp():
    assert parse_syslog(LINE.replace("2024-01-15T10:00:00.123456+01:00", "-")).timestamp is None


@pytest.mark.parametrize("value,expected", [
    ("2024-01-15T10:00:00Z", datetime(2024, 1, 15, 10, tzinfo=timezone.utc)),
    ("2024-01-15T10:00:00.5Z", datetime(2024, 1, 15, 10, 0, 0, 500000, tzinfo=timezone.utc)),
    ("2024-01-15T10:00:00.123456789Z", datetime(2024, 1, 15, 10, 0, 0, 123456, tzinfo=timezone.utc)),
    ("2024-01-15T05:30:00-04:30", datetime(2024, 1, 15, 10, tzinfo=timezone.utc)),
])
def test_timestamps(value, expected):
    assert parse_timestamp(value) == expected


@pytest.mark.parametrize("value", [
    "2024-02-30T10:00:00Z",
    "2024-01-15T25:00:00Z",
    "2024-01-15T10:00:00",
    "2024-01-15 10:00:00Z",
    "Jan 15 10:00:00",
])
def test_bad_timestamps(value):
    with pytest.raises(BadTimestamp):
        parse_timestamp(value)


@pytest.mark.parametrize("line", [
    "Jan 15 10:00:00 fw openvpn[1234]: something connected",
    "<37> 2024-01-15T10:00:00Z host app - - - msg",
    "<999>1 2024-01-15T10:00:00Z host app - - - msg",
    "<37>1 2024-01-15T10:00:00Z host app - -",
    "",
])
def test_malformed_envelope(line):
    with pytest.raises(MalformedEnvelope):
        parse_syslog(line)
