"""Authenticated UDP commands for the esp32NTP device."""

from .device_command import (
    VALID_COMMANDS,
    CommandError,
    InvalidCommandError,
    validate_command,
    sign_command,
    build_packet,
    send_command,
    dispatch_command,
)

__all__ = [
    'VALID_COMMANDS',
    'CommandError',
    'InvalidCommandError',
    'validate_command',
    'sign_command',
    'build_packet',
    'send_command',
    'dispatch_command',
]
