from __future__ import annotations

from typing import Callable, Iterable, List, Optional, Tuple

from .models import ScanResult


def aggregate(
    sink: Iterable[ScanResult],
    on_result: Optional[Callable[[ScanResult], None]] = None,
) -> Tuple[int, List[ScanResult]]:
    """
    Block until the sink is exhausted.
    Returns (number of results seen, open results in arrival order).
    """
    total = 0
    open_results: List[ScanResult] = []
    for r in sink:
        total += 1
        if r.open:
            open_results.append(r)
        if on_result is not None:
            on_result(r)
    return total, open_results
