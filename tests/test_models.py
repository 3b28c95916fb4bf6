import threading

import pytest
from pydantic import ValidationError

from core.models import PortStatus, ResultSet, ScanRange, ScanResult, ScanTarget


def _r(port, status=PortStatus.CLOSED):
    return ScanResult(host="localhost", port=port, status=status)


def test_scan_range_rejects_reversed_bounds():
    with pytest.raises(ValidationError):
        ScanRange(start=10, end=9)


def test_scan_result_is_immutable():
    r = _r(80, PortStatus.OPEN)
    with pytest.raises(ValidationError):
        r.port = 81


def test_sort_is_idempotent():
    rs = ResultSet()
    rs.extend([_r(5), _r(1), _r(3, PortStatus.OPEN)])
    once = rs.sorted_by_port()
    assert [r.port for r in once] == [1, 3, 5]
    again = sorted(once, key=lambda r: r.port)
    assert again == once


def test_without_closed_and_open_count():
    rs = ResultSet()
    rs.extend([_r(1), _r(2, PortStatus.OPEN), _r(3)])
    assert [r.port for r in rs.without_closed()] == [2]
    assert rs.open_count() == 1


def test_frozen_set_rejects_writes():
    rs = ResultSet()
    rs.freeze()
    with pytest.raises(RuntimeError):
        rs.extend([_r(1)])


def test_concurrent_extends_lose_nothing():
    rs = ResultSet()

    def writer(base):
        for i in range(200):
            rs.extend([_r(base + i)])

    threads = [threading.Thread(target=writer, args=(n * 1000,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(rs) == 1600
    assert len({r.port for r in rs}) == 1600


def test_scan_target_port_bounds():
    ScanTarget(host="localhost", port=65535)
    with pytest.raises(ValidationError):
        ScanTarget(host="localhost", port=65536)
