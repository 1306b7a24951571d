"""
NTP Time Display

Queries each configured server through ntplib and prints stratum, remote
time, local time, clock offset and round-trip time. Runs a single pass, or
repeats forever with a fixed sleep between passes.

Output for one server:

    NTP server: pool.ntp.org
    NTP Stratum: 2
    NTP Time: 2025-10-30T13:20:46-05:00
    Local Time: 2025-10-30T13:20:46-05:00
    Offset from local time: -1.52003ms
    Round trip time: 24.117ms

A failing server is logged and skipped; it never ends the pass.
"""

import logging
import sys
import time
from datetime import datetime, timezone
from typing import Callable, List, Optional, TextIO

import ntplib

from ..config import ClientConfig
from ..interfaces.query_result import TimeQueryResult

logger = logging.getLogger(__name__)

ANSI_CLEAR = "\033[H\033[2J"
SEPARATOR = "-" * 50

_NS_PER_US = 1_000
_NS_PER_MS = 1_000_000
_NS_PER_S = 1_000_000_000
_NS_PER_MIN = 60 * _NS_PER_S
_NS_PER_HOUR = 60 * _NS_PER_MIN


def local_now() -> datetime:
    """Current local wall-clock time, timezone-aware."""
    return datetime.now(timezone.utc).astimezone()


def _fraction(value: int, unit: int) -> str:
    """Render value/unit with trailing zeros of the fraction trimmed."""
    whole, frac = divmod(value, unit)
    if frac == 0:
        return str(whole)
    digits = len(str(unit)) - 1
    return f"{whole}.{str(frac).zfill(digits).rstrip('0')}"


def format_duration(seconds: float) -> str:
    """
    Format a signed duration compactly with a unit suffix.

    Examples:
        0.0          -> "0s"
        0.000000512  -> "512ns"
        -0.00085     -> "-850µs"
        0.001234567  -> "1.234567ms"
        63.25        -> "1m3.25s"
        3600         -> "1h0m0s"
    """
    ns = int(round(seconds * _NS_PER_S))
    if ns == 0:
        return "0s"

    sign = "-" if ns < 0 else ""
    ns = abs(ns)

    if ns < _NS_PER_US:
        return f"{sign}{ns}ns"
    if ns < _NS_PER_MS:
        return f"{sign}{_fraction(ns, _NS_PER_US)}µs"
    if ns < _NS_PER_S:
        return f"{sign}{_fraction(ns, _NS_PER_MS)}ms"

    hours, rem = divmod(ns, _NS_PER_HOUR)
    minutes, rem = divmod(rem, _NS_PER_MIN)
    text = f"{_fraction(rem, _NS_PER_S)}s"
    if hours:
        return f"{sign}{hours}h{minutes}m{text}"
    if minutes:
        return f"{sign}{minutes}m{text}"
    return f"{sign}{text}"


def format_timestamp(dt: datetime) -> str:
    """ISO-8601 with UTC offset, whole seconds."""
    return dt.isoformat(timespec='seconds')


def _ansi_clear(out: TextIO):
    out.write(ANSI_CLEAR)
    out.flush()


def _no_clear(out: TextIO):
    pass


def select_screen_clearer(platform: Optional[str] = None) -> Callable[[TextIO], None]:
    """
    Pick the screen clear strategy for a platform.

    Windows consoles get a no-op: the esp32NTP client has never actually
    cleared the screen there. Everything else gets the ANSI sequence.

    Args:
        platform: sys.platform style name (default: current platform)
    """
    platform = platform or sys.platform
    if platform.startswith('win'):
        return _no_clear
    return _ansi_clear


def query_server(
    client: ntplib.NTPClient,
    server: str,
    version: int = 4,
    timeout: float = 5.0,
    clock: Callable[[], datetime] = local_now
) -> TimeQueryResult:
    """
    Query one NTP server.

    Raises:
        ntplib.NTPException: no reply within the timeout
        OSError: name resolution or socket failure
        UnicodeError: host name that cannot be IDNA-encoded
    """
    stats = client.request(server, version=version, timeout=timeout)
    local_time = clock()
    return TimeQueryResult.from_stats(server, stats, local_time=local_time)


def print_result(result: TimeQueryResult, out: TextIO):
    """Print one query result block, followed by a blank line."""
    print(f"NTP server: {result.server}", file=out)
    print(f"NTP Stratum: {result.stratum}", file=out)
    print(f"NTP Time: {format_timestamp(result.remote_time)}", file=out)
    print(f"Local Time: {format_timestamp(result.local_time)}", file=out)
    print(f"Offset from local time: {format_duration(result.offset)}", file=out)
    print(f"Round trip time: {format_duration(result.round_trip)}", file=out)
    print("", file=out)


def display_pass(
    config: ClientConfig,
    client: ntplib.NTPClient,
    out: TextIO,
    clearer: Callable[[TextIO], None],
    clock: Callable[[], datetime] = local_now
) -> List[TimeQueryResult]:
    """
    Query every server once, in order, printing each result.

    Returns:
        Results of the servers that answered
    """
    results: List[TimeQueryResult] = []

    for server in config.servers:
        try:
            result = query_server(
                client, server,
                version=config.ntp_version,
                timeout=config.ntp_timeout,
                clock=clock
            )
        except (ntplib.NTPException, OSError, UnicodeError) as e:
            logger.error(f"Error querying NTP server {server}: {e}")
            continue

        # Clear only before the first server that answered
        if config.cls and not results:
            clearer(out)

        logger.debug(f"{server}: {result.to_json()}")
        print_result(result, out)
        results.append(result)

    if not config.cls and config.looping:
        print(SEPARATOR, file=out)
        print("", file=out)

    return results


def run_display(
    config: ClientConfig,
    client: Optional[ntplib.NTPClient] = None,
    out: Optional[TextIO] = None,
    sleep: Callable[[float], None] = time.sleep,
    clearer: Optional[Callable[[TextIO], None]] = None,
    clock: Callable[[], datetime] = local_now
):
    """
    Run the time display.

    With config.loop == 0 a single pass is made. Otherwise passes repeat
    every config.loop seconds until the process is interrupted.

    Args:
        config: Run configuration
        client: NTP client (default: new ntplib.NTPClient)
        out: Output stream (default: sys.stdout)
        sleep: Sleep function between passes
        clearer: Screen clear strategy (default: select_screen_clearer())
        clock: Local time source
    """
    client = client or ntplib.NTPClient()
    out = out or sys.stdout
    clearer = clearer or select_screen_clearer()

    logger.debug(
        f"Display: servers={list(config.servers)}, loop={config.loop}s, cls={config.cls}"
    )

    passes = 0
    while True:
        results = display_pass(config, client, out, clearer, clock=clock)
        passes += 1
        logger.debug(f"Pass {passes}: {len(results)}/{len(config.servers)} servers answered")

        if not config.looping:
            break
        sleep(config.loop)
