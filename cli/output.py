"""
Console rendering of scan results. print_result may be called from several
worker threads at once, so writes are serialized.
"""

from __future__ import annotations

import sys
import threading
from typing import List, Optional, TextIO

from core.models import ScanResult
from pipeline.coordinator import ScanSummary

_print_lock = threading.Lock()


def format_row(r: ScanResult) -> str:
    return f"{r.host}:{r.port} {r.status.value}"


def print_result(r: ScanResult, stream: Optional[TextIO] = None) -> None:
    out = stream or sys.stdout
    with _print_lock:
        out.write(format_row(r) + "\n")
        out.flush()


def print_results(results: List[ScanResult], stream: Optional[TextIO] = None) -> None:
    out = stream or sys.stdout
    with _print_lock:
        for r in results:
            out.write(format_row(r) + "\n")
        out.flush()


def print_summary(summary: ScanSummary, stream: Optional[TextIO] = None) -> None:
    out = stream or sys.stderr
    out.write(
        f"[*] {summary.host}: {summary.open_ports} open / {summary.total_ports} scanned "
        f"| workers={summary.workers} | {summary.elapsed_s:.2f}s\n"
    )
