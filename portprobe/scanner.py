from __future__ import annotations

import logging
import threading
import time
from typing import List, Optional

from .aggregator import aggregate
from .generator import count_tasks, generate
from .logs import log_event
from .models import ScanConfig, ScanReport, ScanResult, check_port
from .pool import ProbeFn, TaskQueue, WorkerPool
from .prober import probe

log = logging.getLogger(__name__)


def scan(
    targets: List[str],
    start_port: int,
    end_port: int,
    config: ScanConfig,
    progress_every: int = 0,
    prober: ProbeFn = probe,
) -> ScanReport:
    """
    Scan every target over the inclusive port range and wait for all results.

    Ports outside 0-65535 are rejected before any worker starts. The report
    carries every open result, the number of results processed and the wall
    time from the first enqueue to the last result.
    """
    check_port(start_port)
    check_port(end_port)

    total = count_tasks(targets, start_port, end_port)
    log_event(log, "scan_start", targets=len(targets), total=total, workers=config.worker_count)

    tasks = TaskQueue(maxsize=config.worker_count)
    sink = WorkerPool(prober).run(tasks, config)

    errors: List[BaseException] = []

    def feed() -> None:
        try:
            generate(targets, start_port, end_port, tasks, delay=config.inter_task_delay)
        except BaseException as e:  # noqa: BLE001 - re-raised on the caller's thread
            errors.append(e)

    start_all = time.perf_counter()
    feeder = threading.Thread(target=feed, name="portprobe-generator", daemon=True)
    feeder.start()

    seen = 0
    open_count = 0

    def progress(r: ScanResult) -> None:
        nonlocal seen, open_count
        seen += 1
        if r.open:
            open_count += 1
        if progress_every > 0 and (seen % progress_every == 0 or seen == total):
            elapsed = time.perf_counter() - start_all
            rate = seen / elapsed if elapsed > 0 else 0.0
            log.info("scanned %d/%d | open=%d | %.0f scans/s", seen, total, open_count, rate)

    try:
        processed, open_results = aggregate(sink, on_result=progress)
    except BaseException:
        # Stop feeding and wait for in-flight probes before re-raising.
        dropped = tasks.close(discard=True)
        log.warning("scan interrupted, %d queued tasks dropped; waiting for in-flight probes", dropped)
        sink.wait_closed()
        feeder.join()
        raise
    feeder.join()
    elapsed = time.perf_counter() - start_all

    if errors:
        raise errors[0]

    log_event(log, "scan_done", total=processed, open=len(open_results), elapsed_s=round(elapsed, 3))
    return ScanReport(total=processed, elapsed_s=elapsed, open_results=open_results)
