"""
Worker: scans one contiguous port range sequentially.
"""

import logging
from typing import Callable, List, Optional

from core.models import PortStatus, ScanRange, ScanResult
from probers import l4_tcp

log = logging.getLogger(__name__)

ProbeFn = Callable[[str, int, float], PortStatus]
ResultCallback = Callable[[ScanResult], None]


def scan_range(
    host: str,
    scan_range: ScanRange,
    timeout: float,
    interactive: bool = False,
    suppress_closed: bool = False,
    on_result: Optional[ResultCallback] = None,
    probe: ProbeFn = l4_tcp.probe,
) -> List[ScanResult]:
    """
    Probe every port of scan_range in ascending order.

    Closed ports are dropped before a result is built when suppress_closed is
    set. In interactive mode each surviving result goes to on_result before the
    next port is probed. The full list comes back only once the range is done.
    """
    results: List[ScanResult] = []
    log.debug("worker scanning %s ports %d-%d", host, scan_range.start, scan_range.end)
    for port in scan_range.ports():
        status = probe(host, port, timeout)
        if suppress_closed and status is not PortStatus.OPEN:
            continue
        result = ScanResult(host=host, port=port, status=status)
        if interactive and on_result is not None:
            on_result(result)
        results.append(result)
    return results
