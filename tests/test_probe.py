import logging
import socket

import pytest

from core.models import PortStatus
from probers import l4_tcp


@pytest.fixture
def listener():
    srv = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    srv.bind(("127.0.0.1", 0))
    srv.listen(8)
    yield srv.getsockname()[1]
    srv.close()


@pytest.fixture
def free_port():
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.bind(("127.0.0.1", 0))
    port = s.getsockname()[1]
    s.close()
    return port


def test_listening_port_is_open(listener):
    assert l4_tcp.probe("127.0.0.1", listener, timeout=1.0) is PortStatus.OPEN


def test_unused_port_is_closed(free_port):
    assert l4_tcp.probe("127.0.0.1", free_port, timeout=1.0) is PortStatus.CLOSED


def test_resolution_failure_is_closed(monkeypatch):
    def boom(*args, **kwargs):
        raise socket.gaierror("name does not resolve")

    monkeypatch.setattr(socket, "getaddrinfo", boom)
    assert l4_tcp.probe("no-such-host.invalid", 80, timeout=0.1) is PortStatus.CLOSED


def test_connect_timeout_is_closed(monkeypatch):
    def slow_connect(self, addr):
        raise socket.timeout("timed out")

    monkeypatch.setattr(socket.socket, "connect", slow_connect)
    assert l4_tcp.probe("127.0.0.1", 9, timeout=0.01) is PortStatus.CLOSED


def test_release_failure_is_logged_but_still_open(listener, monkeypatch, caplog):
    def bad_shutdown(self, how):
        raise OSError("shutdown failed")

    monkeypatch.setattr(socket.socket, "shutdown", bad_shutdown)
    with caplog.at_level(logging.WARNING, logger="probers.l4_tcp"):
        status = l4_tcp.probe("127.0.0.1", listener, timeout=1.0)
    assert status is PortStatus.OPEN
    assert "failed to shut down connection" in caplog.text


def test_oversized_timeout_is_closed_not_fatal(listener, caplog):
    with caplog.at_level(logging.WARNING, logger="probers.l4_tcp"):
        status = l4_tcp.probe("127.0.0.1", listener, timeout=float(2**63))
    assert status is PortStatus.CLOSED
    assert "unusable timeout" in caplog.text
