from __future__ import annotations

import logging
import time
from typing import Callable, Iterator, List

from .models import ScanTask
from .pool import QueueClosed, TaskQueue

log = logging.getLogger(__name__)


def iter_tasks(targets: List[str], start_port: int, end_port: int) -> Iterator[ScanTask]:
    for t in targets:
        for p in range(start_port, end_port + 1):
            yield ScanTask(host=t, port=p)


def count_tasks(targets: List[str], start_port: int, end_port: int) -> int:
    return len(targets) * max(0, end_port - start_port + 1)


def generate(
    targets: List[str],
    start_port: int,
    end_port: int,
    tasks: TaskQueue,
    delay: float = 0.0,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """
    Feed every (target, port) pair into the queue, host by host, pausing
    `delay` seconds between enqueues. The queue is closed on the way out.
    Returns the number of tasks enqueued.
    """
    total = count_tasks(targets, start_port, end_port)
    submitted = 0
    try:
        for task in iter_tasks(targets, start_port, end_port):
            if submitted and delay > 0:
                sleep(delay)
            try:
                tasks.put(task)
            except QueueClosed:
                log.info("task queue closed early after %d/%d tasks", submitted, total)
                break
            submitted += 1
            log.debug("queued %s (%d/%d)", task.address, submitted, total)
    finally:
        tasks.close()
    return submitted
