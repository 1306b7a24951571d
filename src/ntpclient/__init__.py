"""
ntpclient: NTP server display and esp32NTP command tool

Two independent modes, chosen per invocation:
    1. Display: query NTP servers and print stratum, server time, local
       time, clock offset and round-trip time, once or on a fixed interval
    2. Command: send an HMAC-SHA256 signed command (reboot, reset wifi,
       stats, display) to an esp32NTP device over UDP port 123 and print
       its reply

Version: 1.0.0
"""

__version__ = "1.0.0"

from .config import ClientConfig, ConfigError
from .interfaces.query_result import TimeQueryResult

__all__ = [
    "ClientConfig",
    "ConfigError",
    "TimeQueryResult",
    "__version__",
]
