"""
Range partitioning: split N ports into at most N contiguous worker shares.

The first W-1 shares get N // W ports each, the last share also absorbs the
remainder. Offsets are checked against the highest port so a range ending at
65535 never runs past it.
"""

import logging
from typing import List

from core.config import MAX_PORT
from core.errors import InvalidArgument
from core.models import ScanRange

log = logging.getLogger(__name__)


def effective_workers(total_ports: int, requested_workers: int) -> int:
    return min(requested_workers, total_ports)


def partition(total_ports: int, requested_workers: int, start_port: int = 0) -> List[ScanRange]:
    if total_ports < 1:
        raise InvalidArgument("total port count must be at least 1")
    if requested_workers < 1:
        raise InvalidArgument("worker count must be at least 1")
    if start_port < 0 or start_port + total_ports - 1 > MAX_PORT:
        raise InvalidArgument(
            f"ports {start_port}..{start_port + total_ports - 1} exceed the highest port {MAX_PORT}"
        )

    workers = effective_workers(total_ports, requested_workers)
    base, remainder = divmod(total_ports, workers)

    plan: List[ScanRange] = []
    offset = start_port
    for i in range(workers):
        size = base + remainder if i == workers - 1 else base
        end = offset + size - 1
        if end > MAX_PORT:
            raise InvalidArgument(f"partition end {end} exceeds the highest port {MAX_PORT}")
        plan.append(ScanRange(start=offset, end=end))
        offset = end + 1

    log.debug("partitioned %d ports into %d ranges (base=%d, remainder=%d)", total_ports, workers, base, remainder)
    return plan
