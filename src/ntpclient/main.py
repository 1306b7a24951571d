#!/usr/bin/env python3
"""
ntpclient: NTP server display and esp32NTP command tool

Main entry point. Flags are captured once into a ClientConfig, then exactly
one of two paths runs:

1. Display (default): query each server with ntplib and print stratum,
   server time, local time, offset and round-trip time; optionally repeat
   every -loop seconds, clearing the screen with -cls
2. Command (-c): send a signed command to each esp32NTP device on UDP port
   123 and print the reply

Usage:
    # One pass against the public pool
    ntpclient

    # Refresh two servers every second
    ntpclient -loop 1 -cls pool.ntp.org time.google.com

    # Ask a device for its statistics
    ntpclient -c stats -p MySecretKey123 192.168.1.50

Exit status:
    0  normal completion, including unreachable NTP servers and devices
       that did not answer
    1  invalid command or configuration, or a fatal network error while
       sending a device command
"""

import argparse
import logging
import sys

# Set up logging before imports that use it
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger('ntpclient')

from . import __version__
from .config import ConfigError, build_config, load_config
from .command.device_command import (
    VALID_COMMANDS,
    CommandError,
    InvalidCommandError,
    dispatch_command,
    validate_command,
)
from .display.time_display import run_display


def non_negative_int(value: str) -> int:
    """argparse type for -loop."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}")
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='ntpclient',
        description=(
            'Welcome to ntpclient!\n\n'
            'This program displays ntp server values as well as sending '
            'command to esp32NTP.'
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    ntpclient -loop 1 -cls pool.ntp.org
    ntpclient -c "reset wifi" -p MySecretKey123 esp32ntp.local
        """
    )

    parser.add_argument(
        'servers',
        nargs='*',
        metavar='server',
        help='NTP server or esp32NTP device (default: pool.ntp.org)'
    )
    parser.add_argument(
        '-loop', '--loop',
        type=non_negative_int,
        default=None,
        help='Loop every LOOP seconds (default: 0, run once)'
    )
    parser.add_argument(
        '-cls', '--cls',
        action='store_true',
        help='Clear screen between updates'
    )
    parser.add_argument(
        '-c', '--command',
        help=f"esp32NTP command ({', '.join(VALID_COMMANDS)})"
    )
    parser.add_argument(
        '-p', '--password',
        dest='secret_key',
        help='Password for HMAC (default: MySecretKey123)'
    )
    parser.add_argument(
        '--config',
        help='Path to TOML configuration file'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Enable debug logging'
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )
    return parser


def main(argv=None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        file_config = load_config(args.config)
        config = build_config(
            file_config,
            servers=args.servers,
            loop=args.loop,
            cls=args.cls,
            command=args.command or None,
            secret_key=args.secret_key,
        )
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    if config.command is not None:
        # Command mode: checked once, before any packet leaves
        try:
            validate_command(config.command)
        except InvalidCommandError as e:
            logger.error(str(e))
            sys.exit(1)

        try:
            dispatch_command(config)
        except CommandError as e:
            logger.error(f"Error sending ESP32 command: {e}")
            sys.exit(1)
        return

    # Display mode
    try:
        run_display(config)
    except KeyboardInterrupt:
        logger.debug("Interrupted, exiting")


if __name__ == '__main__':
    main()
