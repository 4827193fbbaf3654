from __future__ import annotations

import ipaddress
from typing import List


def expand_target(target: str) -> List[str]:
    """
    Supports:
      - Single IP: "172.20.0.10"
      - CIDR: "172.20.0.0/24" (network and broadcast skipped)
      - Hostname: "scanme.nmap.org" (kept as-is, resolved at connect time)
    """
    target = target.strip()
    if not target:
        return []

    try:
        ip = ipaddress.ip_address(target)
        return [str(ip)]
    except ValueError:
        pass

    if "/" in target:
        try:
            net = ipaddress.ip_network(target, strict=False)
        except ValueError as e:
            raise ValueError(f"Invalid network '{target}': {e}") from e
        hosts = [str(ip) for ip in net.hosts()]
        # /32 and /128 have no usable hosts() range
        if not hosts and net.num_addresses == 1:
            hosts = [str(net.network_address)]
        return hosts

    return [target]


def parse_targets(raw: str) -> List[str]:
    """
    Comma-separated target list, order preserved. Duplicates are kept: each
    occurrence is scanned on its own.
    """
    targets: List[str] = []
    for part in raw.split(","):
        targets.extend(expand_target(part))
    if not targets:
        raise ValueError("Empty target list")
    return targets
