# server_config.py
import configparser
import logging
import os
from dataclasses import dataclass, fields
from typing import Mapping, Optional

DEFAULT_CONFIG_FILE = "server.ini"

# environment variable -> ServerConfig attribute
ENV_OVERRIDES = {
    "HOST": "host",
    "PORT": "port",
    "TCP_PORT": "tcp_port",
    "STATUS_PORT": "status_port",
    "DATABASE_URL": "database_url",
    "DB_TIMEOUT": "db_timeout",
    "SEND_TIMEOUT": "send_timeout",
    "OUTBOX_LIMIT": "outbox_limit",
    "WS_PING_INTERVAL": "ws_ping_interval",
    "NOTIFY_REJECTIONS": "notify_rejections",
    "LOG_LEVEL": "log_level",
}


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 3000  # WebSocket listener (browsers)
    tcp_port: Optional[int] = 5000  # newline-delimited JSON listener (tools)
    status_port: Optional[int] = 6000  # gRPC WorldStatus service
    database_url: Optional[str] = None  # absent -> in-memory world
    db_timeout: float = 5.0
    send_timeout: float = 5.0
    outbox_limit: int = 256
    ws_ping_interval: Optional[float] = 20.0
    notify_rejections: bool = False
    log_level: str = "INFO"


def _convert(name, raw: str):
    raw = raw.strip()
    if name in ("tcp_port", "status_port", "database_url", "ws_ping_interval"):
        # empty or zero disables an optional setting
        if raw in ("", "0", "none", "None"):
            return None
    if name in ("port", "tcp_port", "status_port", "outbox_limit"):
        return int(raw)
    if name in ("db_timeout", "send_timeout", "ws_ping_interval"):
        return float(raw)
    if name == "notify_rejections":
        return raw.lower() in ("1", "true", "yes", "on")
    return raw


def load_config(path: Optional[str] = None, environ: Optional[Mapping[str, str]] = None) -> ServerConfig:
    """Read [server] from an INI file (if present), then apply environment overrides."""
    environ = os.environ if environ is None else environ
    path = path or environ.get("WORLD_SERVER_CONFIG", DEFAULT_CONFIG_FILE)
    config = ServerConfig()
    known = {f.name for f in fields(ServerConfig)}

    parser = configparser.ConfigParser()
    parser.read(path)
    if "server" in parser:
        for key, raw in parser["server"].items():
            if key not in known:
                logging.getLogger(__name__).warning("[CONFIG] Ignoring unknown setting %r in %s", key, path)
                continue
            setattr(config, key, _convert(key, raw))

    for env_name, attr in ENV_OVERRIDES.items():
        if env_name in environ:
            setattr(config, attr, _convert(attr, environ[env_name]))
    return config


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(
            fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s"
        ))
        root.addHandler(handler)
    root.setLevel(level.upper())
