"""
Pytest configuration and fixtures for ntpclient tests.
"""

import pytest
import socket
import sys
import threading
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))


@pytest.fixture
def secret_key():
    """Default esp32NTP HMAC key."""
    return 'MySecretKey123'


@pytest.fixture
def ntp_stats():
    """Factory for fake ntplib.NTPStats responses."""
    def make(stratum=2, tx_time=1735732800.0, offset=-0.0015, delay=0.024):
        return SimpleNamespace(
            stratum=stratum,
            tx_time=tx_time,
            offset=offset,
            delay=delay
        )
    return make


@pytest.fixture
def ntp_client(ntp_stats):
    """Mock NTP client answering every request with the same stats."""
    client = MagicMock()
    client.request.return_value = ntp_stats()
    return client


@pytest.fixture
def silent_device():
    """UDP socket bound on 127.0.0.1 that never answers."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(('127.0.0.1', 0))
    yield sock
    sock.close()


@pytest.fixture
def echo_device():
    """
    UDP responder on 127.0.0.1 that records the first packet and answers it.

    Yields (socket, received) where received is filled with the packet bytes.
    """
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(('127.0.0.1', 0))
    sock.settimeout(5)
    received = []

    def serve():
        try:
            data, addr = sock.recvfrom(1024)
        except OSError:
            return
        received.append(data)
        sock.sendto(b'OK uptime=42s', addr)

    thread = threading.Thread(target=serve, daemon=True)
    thread.start()

    yield sock, received

    thread.join(timeout=5)
    sock.close()
