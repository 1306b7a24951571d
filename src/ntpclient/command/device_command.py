"""
esp32NTP Device Commands

Sends one HMAC-authenticated command to the esp32NTP device over UDP port 123
and prints whatever it answers within the reply timeout.

Packet format (ASCII):

    <command>:<hex HMAC-SHA256 of command, keyed with the shared secret>

e.g. "reboot:3f1c...9a" (64 lowercase hex digits after the colon).

Resolution, socket, send and read failures raise CommandError and end the
whole run. A reply timeout only means the device stayed silent.
"""

import hashlib
import hmac
import logging
import socket
import sys
from typing import Optional, TextIO

from ..config import ClientConfig, DEVICE_PORT, DEVICE_TIMEOUT_S

logger = logging.getLogger(__name__)

VALID_COMMANDS = ('reboot', 'reset wifi', 'stats', 'display')

REPLY_BUFFER_SIZE = 1024

# Characters of the packet echoed in the confirmation line
PACKET_PREVIEW_LEN = 7


class CommandError(RuntimeError):
    """Fatal failure while sending a device command."""


class InvalidCommandError(CommandError):
    """Command is not one the device accepts."""


def validate_command(command: str):
    """Raise InvalidCommandError unless command is in VALID_COMMANDS."""
    if command not in VALID_COMMANDS:
        raise InvalidCommandError(
            f"Invalid ESP32 command: {command}. "
            f"Must be 'reboot', 'reset wifi', 'stats', or 'display'"
        )


def sign_command(command: str, secret_key: str) -> str:
    """Lowercase hex HMAC-SHA256 of command keyed with secret_key."""
    mac = hmac.new(secret_key.encode('utf-8'), command.encode('utf-8'), hashlib.sha256)
    return mac.hexdigest()


def build_packet(command: str, secret_key: str) -> str:
    return f"{command}:{sign_command(command, secret_key)}"


def send_command(
    server: str,
    command: str,
    secret_key: str,
    port: int = DEVICE_PORT,
    timeout: float = DEVICE_TIMEOUT_S,
    out: Optional[TextIO] = None
) -> Optional[bytes]:
    """
    Send a signed command to one device and wait for a single reply.

    Args:
        server: Device host name or address
        command: Command text (already validated)
        secret_key: HMAC key shared with the device
        port: Device UDP port
        timeout: Seconds to wait for the reply
        out: Output stream (default: sys.stdout)

    Returns:
        Reply payload, or None if the device did not answer in time

    Raises:
        CommandError: resolution, socket, send or read failure
    """
    out = out or sys.stdout
    packet = build_packet(command, secret_key)

    try:
        addrinfo = socket.getaddrinfo(server, port, type=socket.SOCK_DGRAM)
    except (socket.gaierror, UnicodeError) as e:
        raise CommandError(f"failed to resolve UDP address: {e}") from e
    family, socktype, proto, _, sockaddr = addrinfo[0]
    logger.debug(f"Resolved {server}:{port} -> {sockaddr}")

    try:
        sock = socket.socket(family, socktype, proto)
    except OSError as e:
        raise CommandError(f"failed to dial UDP: {e}") from e

    with sock:
        try:
            sock.connect(sockaddr)
        except OSError as e:
            raise CommandError(f"failed to dial UDP: {e}") from e

        try:
            sock.send(packet.encode('utf-8'))
        except OSError as e:
            raise CommandError(f"failed to send UDP packet: {e}") from e
        print(f"Sent packet to {server}:{port}: {packet[:PACKET_PREVIEW_LEN]}...", file=out)

        sock.settimeout(timeout)
        try:
            reply = sock.recv(REPLY_BUFFER_SIZE)
        except socket.timeout:
            print("No response received from ESP32", file=out)
            return None
        except OSError as e:
            raise CommandError(f"failed to read response: {e}") from e

    print(f"Response from ESP32: {reply.decode('utf-8', errors='replace')}", file=out)
    return reply


def dispatch_command(config: ClientConfig, out: Optional[TextIO] = None):
    """
    Send config.command to every configured server, in order.

    The command is validated once before any network activity. The first
    CommandError stops the run; remaining servers are not contacted.
    """
    validate_command(config.command)

    for server in config.servers:
        logger.debug(f"Sending '{config.command}' to {server}:{config.device_port}")
        send_command(
            server,
            config.command,
            config.secret_key,
            port=config.device_port,
            timeout=config.device_timeout,
            out=out
        )
