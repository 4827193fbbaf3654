from __future__ import annotations

import json
from typing import Any, Dict, List, TextIO

from .banner import preview
from .models import ScanReport, ScanResult


def to_record(r: ScanResult) -> Dict[str, Any]:
    rec: Dict[str, Any] = {"target": r.host, "port": r.port, "success": r.open}
    if r.banner is not None:
        rec["banner"] = r.banner
    return rec


def render_json(report: ScanReport) -> str:
    """Open results as an indented JSON array. Raises on unserializable data."""
    payload: List[Dict[str, Any]] = [to_record(r) for r in report.open_results]
    return json.dumps(payload, indent=2, ensure_ascii=False, allow_nan=False)


def format_row(r: ScanResult) -> str:
    if r.local_error:
        status = "error"
    else:
        status = "open" if r.open else "closed"
    banner = preview(r.banner) if r.banner is not None else "null"
    return f"Target: {r.host} | Port {r.port}: {status} | Banner: {banner}"


def print_summary(report: ScanReport, targets: str, out: TextIO) -> None:
    print("", file=out)
    print("Scan Summary:", file=out)
    print(f"Targets: {targets}", file=out)
    print(f"Total ports scanned: {report.total}", file=out)
    print(f"Open ports: {report.open_count}", file=out)
    print(f"Scan completed in: {report.elapsed_s:.3f}s", file=out)

    for r in sorted(report.open_results, key=lambda x: (x.host, x.port)):
        print(format_row(r), file=out)
