"""NTP time display - query servers and print their time, offset and delay."""

from .time_display import (
    run_display,
    display_pass,
    query_server,
    format_duration,
    select_screen_clearer,
)

__all__ = [
    'run_display',
    'display_pass',
    'query_server',
    'format_duration',
    'select_screen_clearer',
]
