"""
Client Configuration

Command-line flags and an optional TOML file are merged once at startup into
an immutable ClientConfig that is passed explicitly to both the time-display
and the command-dispatch paths.

Example config.toml:

    servers = ["pool.ntp.org", "time.google.com"]

    [display]
    loop = 5
    cls = true

    [ntp]
    version = 4
    timeout = 5.0

    [device]
    secret_key = "MySecretKey123"
    port = 123
    timeout = 2.0
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import toml

logger = logging.getLogger(__name__)

DEFAULT_SERVER = 'pool.ntp.org'

# Shared with the esp32NTP firmware. Known weak default, override with -p.
DEFAULT_SECRET_KEY = 'MySecretKey123'

DEVICE_PORT = 123
DEVICE_TIMEOUT_S = 2.0
NTP_VERSION = 4
NTP_TIMEOUT_S = 5.0


class ConfigError(ValueError):
    """Raised for malformed configuration values."""


@dataclass(frozen=True)
class ClientConfig:
    """
    Immutable run configuration.

    command is None for the time-display path; any other value selects the
    command-dispatch path.
    """
    servers: Tuple[str, ...] = (DEFAULT_SERVER,)
    loop: int = 0
    cls: bool = False
    command: Optional[str] = None
    secret_key: str = DEFAULT_SECRET_KEY
    ntp_version: int = NTP_VERSION
    ntp_timeout: float = NTP_TIMEOUT_S
    device_port: int = DEVICE_PORT
    device_timeout: float = DEVICE_TIMEOUT_S

    @property
    def looping(self) -> bool:
        return self.loop > 0


def default_config() -> Dict[str, Any]:
    """Configuration dictionary used when no file is given."""
    return {
        'servers': [DEFAULT_SERVER],
        'display': {
            'loop': 0,
            'cls': False,
        },
        'ntp': {
            'version': NTP_VERSION,
            'timeout': NTP_TIMEOUT_S,
        },
        'device': {
            'secret_key': DEFAULT_SECRET_KEY,
            'port': DEVICE_PORT,
            'timeout': DEVICE_TIMEOUT_S,
        },
    }


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from TOML file."""
    if config_path and Path(config_path).exists():
        try:
            with open(config_path, 'r') as f:
                return toml.load(f)
        except (toml.TomlDecodeError, OSError) as e:
            raise ConfigError(f"Cannot read config file {config_path}: {e}") from e

    if config_path:
        logger.warning(f"Config file {config_path} not found, using defaults")
    return default_config()


def _as_int(section: str, key: str, value: Any, minimum: int = 0) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{section}.{key} must be an integer, got {value!r}")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{section}.{key} must be an integer, got {value!r}")
    if number < minimum:
        raise ConfigError(f"{section}.{key} must be >= {minimum}, got {number}")
    return number


def _as_bool(section: str, key: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"{section}.{key} must be true or false, got {value!r}")
    return value


def _as_float(section: str, key: str, value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{section}.{key} must be a number, got {value!r}")
    if number <= 0:
        raise ConfigError(f"{section}.{key} must be positive, got {number}")
    return number


def build_config(
    file_config: Dict[str, Any],
    servers: Optional[list] = None,
    loop: Optional[int] = None,
    cls: bool = False,
    command: Optional[str] = None,
    secret_key: Optional[str] = None,
) -> ClientConfig:
    """
    Merge file configuration with command-line values.

    Command-line values win whenever they are given. An empty server list
    from both sources falls back to the public pool.

    Args:
        file_config: Dictionary from load_config()
        servers: Positional server arguments
        loop: -loop value, or None when not given
        cls: -cls flag (ORed with the file setting)
        command: -c value, or None
        secret_key: -p value, or None

    Returns:
        Frozen ClientConfig
    """
    display = file_config.get('display', {})
    ntp = file_config.get('ntp', {})
    device = file_config.get('device', {})

    if servers:
        server_list = tuple(servers)
    else:
        configured = file_config.get('servers') or []
        if isinstance(configured, str):
            configured = [configured]
        server_list = tuple(str(s) for s in configured) or (DEFAULT_SERVER,)

    if loop is None:
        loop = display.get('loop', 0)

    if secret_key is None:
        secret_key = device.get('secret_key', DEFAULT_SECRET_KEY)

    return ClientConfig(
        servers=server_list,
        loop=_as_int('display', 'loop', loop),
        cls=_as_bool('display', 'cls', display.get('cls', False)) or cls,
        command=command,
        secret_key=str(secret_key),
        ntp_version=_as_int('ntp', 'version', ntp.get('version', NTP_VERSION), minimum=1),
        ntp_timeout=_as_float('ntp', 'timeout', ntp.get('timeout', NTP_TIMEOUT_S)),
        device_port=_as_int('device', 'port', device.get('port', DEVICE_PORT), minimum=1),
        device_timeout=_as_float('device', 'timeout', device.get('timeout', DEVICE_TIMEOUT_S)),
    )
