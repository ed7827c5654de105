import asyncio
import contextlib
import os
import shutil
import tempfile

import pytest

BANNER = ">INFO:OpenVPN Management Interface Version 5 -- type 'help' for more info"

STATUS_2_REPLY = [
    "TITLE,OpenVPN 2.6.8 x86_64-portbld-freebsd14.0",
    "TIME,2024-01-15 10:00:00,1705312800",
    "HEADER,CLIENT_LIST,Common Name,Real Address,Virtual Address,Virtual IPv6 Address,"
    "Bytes Received,Bytes Sent,Connected Since,Connected Since (time_t),Username,"
    "Client ID,Peer ID,Data Channel Cipher",
    "CLIENT_LIST,alice,10.0.0.5:55555,10.8.0.2,,1234,5678,2024-01-15 09:00:00,1705309200,"
    "alice,0,0,AES-256-GCM",
    "CLIENT_LIST,bob,10.0.0.6:40000,10.8.0.3,,10,20,2024-01-15 09:30:00,1705311000,"
    "bob,1,1,AES-256-GCM",
    "HEADER,ROUTING_TABLE,Virtual Address,Common Name,Real Address,Last Ref,Last Ref (time_t)",
    "ROUTING_TABLE,10.8.0.2,alice,10.0.0.5:55555,2024-01-15 10:00:00,1705312800",
    "GLOBAL_STATS,Max bcast/mcast queue length,0",
    "END",
]

CONNECTION_LOG = [
    "<37>1 2024-01-15T09:00:00.000000+00:00 fw.local openvpn 1234 - - "
    "openvpn server 'ovpns1' user 'alice' address '10.0.0.5:55555' - connecting",
    "<37>1 2024-01-15T09:00:01.000000+00:00 fw.local openvpn 1234 - - "
    "openvpn server 'ovpns1' user 'alice' address '10.0.0.5:55555' - connected",
    "<29>1 2024-01-15T09:10:00.000000+00:00 fw.local openvpn 1234 - - "
    "ovpns1/10.0.0.5:55555 MULTI: Learn: 10.8.0.2 -> alice/10.0.0.5:55555",
    "<37>1 2024-01-15T09:20:00.000000+00:00 fw.local openvpn 1234 - - "
    "openvpn server 'ovpns2' user 'bob' address '10.0.0.6:40000' - connected",
    "<37>1 2024-01-15T10:00:00.000000+00:00 fw.local openvpn 1234 - - "
    "openvpn server 'ovpns1' user 'alice' address '10.0.0.5:55555' - disconnected",
]


@pytest.fixture
def socket_dir():
    # unix socket paths are limited to ~107 bytes, keep it short
    path = tempfile.mkdtemp(prefix="ovpn", dir="/tmp")
    yield path
    shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def write_log(tmp_path):
    def _write(lines: list[str]) -> str:
        path = tmp_path / "openvpn.log"
        path.write_text("".join(line + "\n" for line in lines))
        return str(path)
    return _write


@contextlib.asynccontextmanager
async def fake_daemon(socket_dir: str, server_name: str, reply: list[str], hang: bool = False):
    """
    Serve one management socket: send banner, read a command, send `reply` (CRLF lines).
    Closes the connection afterwards unless `hang`, in which case it stays silent until exit.
    Yields the list of received commands.
    """
    os.makedirs(os.path.join(socket_dir, server_name), exist_ok=True)
    path = os.path.join(socket_dir, server_name, "sock")
    commands: list[str] = []
    release = asyncio.Event()

    async def handle(reader, writer):
        writer.write(BANNER.encode() + b"\r\n")
        await writer.drain()
        commands.append((await reader.readline()).decode())
        try:
            for line in reply:
                writer.write(line.encode() + b"\r\n")
            await writer.drain()
        except ConnectionError:
            # client gave up mid-reply
            return
        if hang:
            await release.wait()
        writer.close()

    server = await asyncio.start_unix_server(handle, path=path)
    try:
        yield commands
    finally:
        release.set()
        server.close()
        await server.wait_closed()
