"""
Fixed-size thread pool that drains a shared task queue through the prober
and publishes one result per task to a shared sink.

TaskQueue is bounded (producers block when it is full) and closable; once it
is closed and drained every worker sees None and exits. The sink is closed by
a separate closer thread only after all workers have returned, so a consumer
iterating the sink never misses a result and never waits forever.
"""

from __future__ import annotations

import logging
import queue
import threading
from collections import deque
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Callable, Deque, Iterator, List, Optional

from .models import ScanConfig, ScanResult, ScanTask
from .prober import probe

log = logging.getLogger(__name__)

ProbeFn = Callable[[ScanTask, ScanConfig], ScanResult]

_SINK_CLOSED = object()


class QueueClosed(RuntimeError):
    pass


class TaskQueue:
    """
    Bounded many-producer/many-consumer queue that can be closed.

    put() blocks while full and raises QueueClosed once the queue is closed;
    get() blocks while empty and returns None once closed and drained.
    """

    def __init__(self, maxsize: int = 0):
        self.maxsize = maxsize
        self._items: Deque[ScanTask] = deque()
        self._closed = False
        self._mutex = threading.Lock()
        self._not_empty = threading.Condition(self._mutex)
        self._not_full = threading.Condition(self._mutex)

    @property
    def closed(self) -> bool:
        with self._mutex:
            return self._closed

    def put(self, task: ScanTask) -> None:
        with self._not_full:
            while not self._closed and 0 < self.maxsize <= len(self._items):
                self._not_full.wait()
            if self._closed:
                raise QueueClosed("task queue is closed")
            self._items.append(task)
            self._not_empty.notify()

    def close(self, discard: bool = False) -> int:
        """
        Stop accepting tasks. With discard=True, tasks still waiting in the
        queue are dropped as well; returns how many were dropped.
        """
        with self._mutex:
            self._closed = True
            dropped = 0
            if discard:
                dropped = len(self._items)
                self._items.clear()
            self._not_empty.notify_all()
            self._not_full.notify_all()
            return dropped

    def get(self) -> Optional[ScanTask]:
        """Next task, or None once the queue is closed and drained."""
        with self._not_empty:
            while not self._items:
                if self._closed:
                    return None
                self._not_empty.wait()
            task = self._items.popleft()
            self._not_full.notify()
            return task


class ResultSink:
    def __init__(self):
        self._q: "queue.Queue[object]" = queue.Queue()
        self._closed = threading.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def publish(self, result: ScanResult) -> None:
        if self._closed.is_set():
            raise QueueClosed("result sink is closed")
        self._q.put(result)

    def close(self) -> None:
        if self._closed.is_set():
            return
        self._closed.set()
        self._q.put(_SINK_CLOSED)

    def wait_closed(self, timeout: Optional[float] = None) -> bool:
        return self._closed.wait(timeout)

    def __iter__(self) -> Iterator[ScanResult]:
        while True:
            item = self._q.get()
            if item is _SINK_CLOSED:
                # leave the marker for any other consumer
                self._q.put(item)
                return
            yield item


class WorkerPool:
    def __init__(self, prober: ProbeFn = probe):
        self._probe = prober

    def run(self, tasks: TaskQueue, config: ScanConfig) -> ResultSink:
        sink = ResultSink()
        executor = ThreadPoolExecutor(
            max_workers=config.worker_count,
            thread_name_prefix="portprobe-worker",
        )
        futures = [
            executor.submit(self._work, tasks, config, sink)
            for _ in range(config.worker_count)
        ]
        log.debug("started %d workers", config.worker_count)

        closer = threading.Thread(
            target=self._close_when_done,
            args=(executor, futures, sink),
            name="portprobe-closer",
            daemon=True,
        )
        closer.start()
        return sink

    def _work(self, tasks: TaskQueue, config: ScanConfig, sink: ResultSink) -> int:
        done = 0
        while True:
            task = tasks.get()
            if task is None:
                return done
            sink.publish(self._probe_one(task, config))
            done += 1

    def _probe_one(self, task: ScanTask, config: ScanConfig) -> ScanResult:
        try:
            return self._probe(task, config)
        except Exception:
            # A bug in the probe path must cost this task only, not the pool.
            log.exception("probe of %s raised; recording it as closed", task.address)
            return ScanResult(host=task.host, port=task.port, open=False, banner=None, attempts=0)

    @staticmethod
    def _close_when_done(executor: ThreadPoolExecutor, futures: List, sink: ResultSink) -> None:
        try:
            wait(futures)
            for fut in futures:
                exc = fut.exception()
                if exc is not None:
                    log.error("worker exited with error: %r", exc)
            log.debug("workers finished, %d tasks processed",
                      sum(f.result() for f in futures if f.exception() is None))
        finally:
            executor.shutdown(wait=True)
            sink.close()
