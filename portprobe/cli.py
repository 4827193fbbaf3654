from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, TextIO

from pydantic import ValidationError

from .config import Settings, get_settings
from .logs import setup_logging
from .models import ScanConfig
from .output import print_summary, render_json
from .scanner import scan
from .targets import parse_targets

log = logging.getLogger(__name__)


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="portprobe", description="Concurrent TCP port scanner with banner grabbing")
    p.add_argument("--target", default=settings.target,
                   help=f"Comma-separated hosts, IPs or CIDRs (default: {settings.target})")
    p.add_argument("--start-port", type=int, default=settings.start_port,
                   help=f"First port to scan (default: {settings.start_port})")
    p.add_argument("--end-port", type=int, default=settings.end_port,
                   help=f"Last port to scan, inclusive (default: {settings.end_port})")
    p.add_argument("--workers", type=int, default=settings.workers,
                   help=f"Number of concurrent workers (default: {settings.workers})")
    p.add_argument("--timeout", type=float, default=settings.timeout,
                   help=f"Connect/read timeout in seconds (default: {settings.timeout})")
    p.add_argument("--retries", type=int, default=settings.retries,
                   help=f"Connection attempts per port (default: {settings.retries})")
    p.add_argument("--delay", type=float, default=settings.delay,
                   help=f"Seconds between task submissions (default: {settings.delay})")
    p.add_argument("--json", action="store_true", help="Output open ports as JSON")
    p.add_argument("-v", "--verbose", action="count", default=0,
                   help="Progress logging on stderr (-vv for debug)")
    return p


def _log_level(settings: Settings, verbose: int) -> str:
    if verbose >= 2:
        return "DEBUG"
    if verbose == 1:
        return "INFO"
    return settings.log_level


def main(argv=None, out: Optional[TextIO] = None) -> int:
    out = out or sys.stdout
    try:
        settings = get_settings()
    except ValidationError as e:
        print(f"portprobe: invalid PORTPROBE_* environment: {e}", file=sys.stderr)
        return 2

    parser = build_parser(settings)
    args = parser.parse_args(argv)
    setup_logging(_log_level(settings, args.verbose))

    try:
        targets = parse_targets(args.target)
        config = ScanConfig(
            connect_timeout=args.timeout,
            max_retries=args.retries,
            worker_count=args.workers,
            inter_task_delay=args.delay,
            backoff_unit=settings.backoff_unit,
            banner_size=settings.banner_size,
        )
    except ValueError as e:
        parser.error(str(e))

    try:
        report = scan(
            targets=targets,
            start_port=args.start_port,
            end_port=args.end_port,
            config=config,
            progress_every=100 if args.verbose else 0,
        )
    except ValueError as e:
        parser.error(str(e))
    except KeyboardInterrupt:
        log.warning("scan interrupted")
        print("Interrupted", file=sys.stderr)
        return 130

    if args.json:
        try:
            rendered = render_json(report)
        except (TypeError, ValueError) as e:
            print(f"Error marshalling JSON: {e}", file=sys.stderr)
            return 1
        print(rendered, file=out)
    else:
        print_summary(report, targets=args.target, out=out)

    return 0
