from __future__ import annotations

import logging
import socket
import time
from typing import Callable

from .banner import banner_text, read_banner
from .models import ScanConfig, ScanResult, ScanTask

log = logging.getLogger(__name__)


def backoff_delay(attempt: int, unit: float = 1.0) -> float:
    """Attempt 0 waits one unit, attempt 1 two units, attempt 2 four, ..."""
    return (2 ** attempt) * unit


def probe(
    task: ScanTask,
    config: ScanConfig,
    sleep: Callable[[float], None] = time.sleep,
) -> ScanResult:
    """
    Connect to task.host:task.port up to config.max_retries times and grab a
    banner from the first connection that succeeds.
    Network failures are reported as a closed result, never raised. A host
    name that cannot even be encoded (e.g. an over-long IDNA label) fails
    the same way on every attempt, so it is not retried.
    """
    for attempt in range(config.max_retries):
        try:
            sock = socket.create_connection((task.host, task.port), timeout=config.connect_timeout)
        except ValueError as e:
            # UnicodeError from the idna codec lands here
            log.warning("invalid host %r for %s: %s", task.host, task.address, e)
            return ScanResult(host=task.host, port=task.port, open=False, banner=None, attempts=attempt + 1)
        except OSError as e:
            log.debug("connect %s failed (attempt %d/%d): %s",
                      task.address, attempt + 1, config.max_retries, e)
            if attempt + 1 < config.max_retries:
                sleep(backoff_delay(attempt, config.backoff_unit))
            continue

        with sock:
            data = read_banner(sock, size=config.banner_size, timeout=config.connect_timeout)
        return ScanResult(
            host=task.host,
            port=task.port,
            open=True,
            banner=banner_text(data),
            attempts=attempt + 1,
            banner_bytes=data,
        )

    return ScanResult(
        host=task.host,
        port=task.port,
        open=False,
        banner=None,
        attempts=config.max_retries,
    )
