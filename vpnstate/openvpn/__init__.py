from vpnstate.openvpn.errors import OpenVPNError
from vpnstate.openvpn.events import ConnectionEvent, LogEntry, parse_event
from vpnstate.openvpn.logscan import filter_entries, scan
from vpnstate.openvpn.management import ManagementSession
from vpnstate.openvpn.table import decode_table

__all__ = [
    "OpenVPNError", "ConnectionEvent", "LogEntry", "parse_event",
    "filter_entries", "scan", "ManagementSession", "decode_table",
]
