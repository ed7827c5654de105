import logging
import time
from fastapi import APIRouter, Depends, HTTPException, status
from vpnstate.config import Settings, get_settings
from vpnstate.openvpn import (
    ConnectionEvent,
    ManagementSession,
    OpenVPNError,
    decode_table,
    filter_entries,
    scan,
)
from vpnstate.openvpn.management import validate_server_name
from vpnstate.schemas.openvpn import AuthLogResponse, StatusResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/openvpn", tags=["openvpn"])


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1e3


@router.get("/status/{server}", response_model=StatusResponse)
async def get_server_status(server: str, settings: Settings = Depends(get_settings)):
    """
    Clients currently connected to `server`, read live from its management socket
    (`status 2`, CLIENT_LIST table). One row dict per client, keys from the table header.
    """
    start = time.perf_counter()
    try:
        session = await ManagementSession.open(
            server,
            socket_dir=settings.openvpn_socket_dir,
            read_timeout=settings.openvpn_read_timeout,
            connect_timeout=settings.openvpn_connect_timeout,
        )
        async with session:
            rows = await decode_table(
                session, settings.openvpn_status_command, settings.openvpn_status_row_key
            )
    except OpenVPNError as e:
        logger.error("OpenVPN status for %r failed: %s", server, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to read OpenVPN status.",
        )
    return {"elapsed_ms": _elapsed_ms(start), "data": rows}


def _auth_log(
    settings: Settings,
    server: str | None,
    user: str | None,
    event: ConnectionEvent | None,
) -> dict:
    start = time.perf_counter()
    try:
        entries = scan(settings.openvpn_log_path)
    except OpenVPNError as e:
        logger.error("OpenVPN log scan of %s failed: %s", settings.openvpn_log_path, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to read OpenVPN log.",
        )
    entries = filter_entries(entries, server=server, user=user, event=event)
    return {"elapsed_ms": _elapsed_ms(start), "data": entries}


@router.get("/auth", response_model=AuthLogResponse)
def get_auth_log(
    server: str | None = None,
    user: str | None = None,
    event: ConnectionEvent | None = None,
    settings: Settings = Depends(get_settings),
):
    """Connection history from the OpenVPN log, optionally filtered by server, user and event."""
    return _auth_log(settings, server, user, event)


@router.get("/auth/{server}", response_model=AuthLogResponse)
def get_server_auth_log(
    server: str,
    user: str | None = None,
    event: ConnectionEvent | None = None,
    settings: Settings = Depends(get_settings),
):
    """Connection history of one server."""
    try:
        validate_server_name(server)
    except OpenVPNError as e:
        logger.error("%s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Invalid server name.",
        )
    return _auth_log(settings, server, user, event)
