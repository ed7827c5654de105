from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # OpenVPN management: one unix socket per server at <dir>/<server>/sock
    openvpn_socket_dir: str = "/var/etc/openvpn"
    openvpn_read_timeout: float = 5.0  # seconds per reply line
    openvpn_connect_timeout: float = 5.0
    openvpn_status_command: str = "status 2"
    openvpn_status_row_key: str = "CLIENT_LIST"

    # Syslog file with connect/disconnect messages
    openvpn_log_path: str = "/var/log/openvpn.log"

    # HTTP server
    bind_host: str = "0.0.0.0"
    bind_port: int = 7505
    gzip_minimum_size: int = 500  # bytes; smaller responses are sent uncompressed

    log_level: str = "INFO"

    class Config:
        env_file = ".env"


@lru_cache
def get_settings() -> Settings:
    return Settings()
