from pydantic import BaseModel
from vpnstate.openvpn.events import LogEntry


class StatusResponse(BaseModel):
    """Connected clients of one server, one dict per CLIENT_LIST row (field name -> value)."""
    elapsed_ms: float
    data: list[dict[str, str]]


class AuthLogResponse(BaseModel):
    """Connection history from the OpenVPN log, file order."""
    elapsed_ms: float
    data: list[LogEntry]
