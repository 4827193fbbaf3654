from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


# Banner recorded for an open port that sent nothing before the read deadline.
NO_RESPONSE = "No response"

MIN_PORT = 0
MAX_PORT = 65535


def check_port(port: int) -> int:
    if isinstance(port, bool) or not isinstance(port, int):
        raise ValueError(f"Invalid port: {port!r}")
    if port < MIN_PORT or port > MAX_PORT:
        raise ValueError(f"Invalid port: {port}")
    return port


@dataclass(frozen=True)
class ScanTask:
    host: str
    port: int

    def __post_init__(self) -> None:
        check_port(self.port)

    @property
    def address(self) -> str:
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


@dataclass(frozen=True)
class ScanResult:
    """
    Outcome of one task.

    banner_bytes holds exactly what was read after connect (b"" when the
    port stayed silent, None when closed); banner is its text form, or
    NO_RESPONSE for a silent port.
    attempts is the number of connects tried. A closed result with
    attempts=0 was recorded because the probe itself failed on a local
    error, not because the port refused every attempt.
    """
    host: str
    port: int
    open: bool
    banner: Optional[str] = None
    attempts: int = 1
    banner_bytes: Optional[bytes] = None

    @property
    def local_error(self) -> bool:
        return not self.open and self.attempts == 0


@dataclass(frozen=True)
class ScanConfig:
    """
    Immutable settings shared by every worker of one scan.
    Times are in seconds.
    """
    connect_timeout: float = 1.0
    max_retries: int = 2
    worker_count: int = 100
    inter_task_delay: float = 0.1
    backoff_unit: float = 1.0
    banner_size: int = 1024

    def __post_init__(self) -> None:
        if self.connect_timeout <= 0:
            raise ValueError("connect_timeout must be > 0")
        if self.max_retries < 1:
            raise ValueError("max_retries must be >= 1")
        if self.worker_count < 1:
            raise ValueError("worker_count must be >= 1")
        if self.inter_task_delay < 0:
            raise ValueError("inter_task_delay must be >= 0")
        if self.backoff_unit < 0:
            raise ValueError("backoff_unit must be >= 0")
        if self.banner_size < 1:
            raise ValueError("banner_size must be >= 1")


@dataclass(frozen=True)
class ScanReport:
    total: int
    elapsed_s: float
    open_results: List[ScanResult] = field(default_factory=list)

    @property
    def open_count(self) -> int:
        return len(self.open_results)
