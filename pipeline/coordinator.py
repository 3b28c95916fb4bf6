"""
Scan coordinator: partition, fan out, join, merge, then sort/filter/report.

State machine (single run):
CONFIGURED -> DISPATCHED -> JOINING -> MERGED -> (SORTED) -> (FILTERED) -> REPORTED

Workers keep private result buffers; the coordinator thread merges each
buffer into the shared ResultSet as the worker completes. A worker that
raises aborts the whole scan since its range would silently go missing.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from core.config import ScanConfig
from core.errors import ScanAborted
from core.models import ResultSet, ScanRange, ScanResult
from core.partition import effective_workers, partition
from core.targets import resolve_host
from pipeline.worker import ProbeFn, ResultCallback, scan_range
from probers import l4_tcp

log = logging.getLogger(__name__)

BatchCallback = Callable[[List[ScanResult]], None]


class ScanPhase(str, Enum):
    CONFIGURED = "configured"
    DISPATCHED = "dispatched"
    JOINING = "joining"
    MERGED = "merged"
    SORTED = "sorted"
    FILTERED = "filtered"
    REPORTED = "reported"


@dataclass
class ScanSummary:
    host: str
    total_ports: int
    workers: int
    open_ports: int
    closed_ports: int
    reported: int
    elapsed_s: float


class ScanCoordinator:
    def __init__(
        self,
        config: ScanConfig,
        on_result: Optional[ResultCallback] = None,
        on_complete: Optional[BatchCallback] = None,
        probe: ProbeFn = l4_tcp.probe,
        resolver: Callable[[str], str] = resolve_host,
    ) -> None:
        self.config = config
        self.on_result = on_result
        self.on_complete = on_complete
        self.probe = probe
        self.resolver = resolver
        self.phase = ScanPhase.CONFIGURED
        self.history: List[ScanPhase] = [ScanPhase.CONFIGURED]
        self.workers_used = 0
        self.summary: Optional[ScanSummary] = None

    def _advance(self, phase: ScanPhase) -> None:
        log.debug("scan %s: %s -> %s", self.config.host, self.phase.value, phase.value)
        self.phase = phase
        self.history.append(phase)

    def _worker(self, rng: ScanRange) -> List[ScanResult]:
        cfg = self.config
        return scan_range(
            cfg.host,
            rng,
            cfg.timeout_s,
            interactive=cfg.interactive,
            suppress_closed=cfg.suppress_closed,
            on_result=self.on_result,
            probe=self.probe,
        )

    def _dispatch_single(self, results: ResultSet) -> None:
        cfg = self.config
        self._advance(ScanPhase.DISPATCHED)
        try:
            batch = self._worker(ScanRange(start=cfg.start_port, end=cfg.end_port))
        except Exception as exc:  # noqa: BLE001
            log.exception("single-pass scan of %s failed", cfg.host)
            raise ScanAborted(f"scan of {cfg.host} aborted: {exc}") from exc
        self._advance(ScanPhase.JOINING)
        results.extend(batch)

    def _dispatch_parallel(self, plan: List[ScanRange], results: ResultSet) -> None:
        cfg = self.config
        failure: Optional[BaseException] = None
        failed_range: Optional[ScanRange] = None

        with ThreadPoolExecutor(max_workers=len(plan), thread_name_prefix="rscan-worker") as pool:
            futures = {pool.submit(self._worker, rng): rng for rng in plan}
            self._advance(ScanPhase.DISPATCHED)
            self._advance(ScanPhase.JOINING)
            for fut in as_completed(futures):
                rng = futures[fut]
                try:
                    batch = fut.result()
                except Exception as exc:  # noqa: BLE001
                    log.exception("worker for %s ports %d-%d failed", cfg.host, rng.start, rng.end)
                    if failure is None:
                        failure, failed_range = exc, rng
                    continue
                results.extend(batch)

        if failure is not None:
            raise ScanAborted(
                f"scan of {cfg.host} aborted: worker for ports {failed_range.start}-{failed_range.end} failed: {failure}"
            ) from failure

    def run(self) -> List[ScanResult]:
        if self.phase is not ScanPhase.CONFIGURED:
            raise RuntimeError("a ScanCoordinator runs exactly once")

        cfg = self.config
        started = time.monotonic()
        self.resolver(cfg.host)

        results = ResultSet()
        workers = effective_workers(cfg.total_ports, cfg.threads)
        self.workers_used = workers
        log.info("scanning %s ports %d-%d with %d worker(s)", cfg.host, cfg.start_port, cfg.end_port, workers)

        if workers <= 1:
            self._dispatch_single(results)
        else:
            self._dispatch_parallel(partition(cfg.total_ports, workers, cfg.start_port), results)

        results.freeze()
        self._advance(ScanPhase.MERGED)

        final = results.results()
        if cfg.sort:
            final = results.sorted_by_port()
            self._advance(ScanPhase.SORTED)
        if cfg.suppress_closed:
            final = results.without_closed(final)
            self._advance(ScanPhase.FILTERED)

        if not cfg.interactive and self.on_complete is not None:
            self.on_complete(final)
        self._advance(ScanPhase.REPORTED)

        open_count = results.open_count()
        self.summary = ScanSummary(
            host=cfg.host,
            total_ports=cfg.total_ports,
            workers=workers,
            open_ports=open_count,
            closed_ports=cfg.total_ports - open_count,
            reported=len(final),
            elapsed_s=round(time.monotonic() - started, 4),
        )
        log.info(
            "scan of %s finished: %d open / %d ports in %.2fs",
            cfg.host,
            open_count,
            cfg.total_ports,
            self.summary.elapsed_s,
        )
        return final


def run_scan(
    config: ScanConfig,
    on_result: Optional[ResultCallback] = None,
    on_complete: Optional[BatchCallback] = None,
) -> List[ScanResult]:
    return ScanCoordinator(config, on_result=on_result, on_complete=on_complete).run()
