"""Tests for the TCP port probe."""

import asyncio
import os
import socket
import sys
import time
from unittest import mock

project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from svcmonitor.models import ServiceState
from svcmonitor.probe import probe_port


def _free_port():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def test_probe_open_port_is_running():
    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server.bind(("127.0.0.1", 0))
    server.listen(1)
    try:
        port = server.getsockname()[1]
        state = asyncio.run(probe_port("127.0.0.1", port, 1.0))
    finally:
        server.close()
    assert state is ServiceState.RUNNING


def test_probe_closed_port_is_stopped():
    port = _free_port()
    assert asyncio.run(probe_port("127.0.0.1", port, 1.0)) is ServiceState.STOPPED


def test_probe_times_out_when_connect_hangs():
    """A connection attempt that never completes is cut off at the timeout."""

    async def hang(*args, **kwargs):
        await asyncio.sleep(10)

    with mock.patch("svcmonitor.probe.asyncio.open_connection", hang):
        start = time.monotonic()
        state = asyncio.run(probe_port("10.255.255.1", 9, 0.1))
        elapsed = time.monotonic() - start

    assert state is ServiceState.STOPPED
    assert elapsed < 1.0


def test_probe_dns_failure_is_stopped():
    error = socket.gaierror(-2, "Name or service not known")
    with mock.patch(
        "svcmonitor.probe.asyncio.open_connection", side_effect=error
    ):
        state = asyncio.run(probe_port("no-such-host.invalid", 80, 0.5))
    assert state is ServiceState.STOPPED


def test_probe_closes_connection_after_success():
    writer = mock.Mock()

    async def wait_closed():
        return None

    writer.wait_closed = wait_closed

    async def connect(*args, **kwargs):
        return mock.Mock(), writer

    with mock.patch("svcmonitor.probe.asyncio.open_connection", connect):
        state = asyncio.run(probe_port("localhost", 8080, 0.5))

    assert state is ServiceState.RUNNING
    writer.close.assert_called_once()
    writer.write.assert_not_called()


def test_probe_unencodable_host_is_stopped():
    """A hostname label longer than 63 characters cannot be IDNA encoded."""

    host = "a" * 64 + ".example.com"
    assert asyncio.run(probe_port(host, 80, 0.5)) is ServiceState.STOPPED
