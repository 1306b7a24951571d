"""
Time Query Result

One record per successful NTP query. Produced fresh by the display path on
every query and discarded once printed.
"""

from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Optional
import json


@dataclass(frozen=True)
class TimeQueryResult:
    """
    Metrics reported by (or measured against) a single NTP server.

    Times are timezone-aware datetimes in the local zone; offset and
    round_trip are in seconds.
    """
    server: str
    stratum: int
    remote_time: datetime      # Server transmit timestamp
    local_time: datetime       # Local clock right after the reply arrived
    offset: float              # Remote minus local, signed
    round_trip: float          # Request + response delay

    @classmethod
    def from_stats(
        cls,
        server: str,
        stats,
        local_time: Optional[datetime] = None
    ) -> 'TimeQueryResult':
        """
        Build from an ntplib.NTPStats response.

        Args:
            server: Host that was queried
            stats: ntplib.NTPStats (stratum, tx_time, offset, delay)
            local_time: Local time recorded after the query (default: now)
        """
        if local_time is None:
            local_time = datetime.now(timezone.utc).astimezone()
        remote_time = datetime.fromtimestamp(stats.tx_time, tz=timezone.utc).astimezone()
        return cls(
            server=server,
            stratum=int(stats.stratum),
            remote_time=remote_time,
            local_time=local_time,
            offset=float(stats.offset),
            round_trip=float(stats.delay),
        )

    def to_dict(self) -> dict:
        result = asdict(self)
        result['remote_time'] = self.remote_time.isoformat()
        result['local_time'] = self.local_time.isoformat()
        return result

    def to_json(self) -> str:
        return json.dumps(self.to_dict())
