from __future__ import annotations

import re
import socket

from .models import NO_RESPONSE


_PRINTABLE = re.compile(r"[^\x09\x0a\x0d\x20-\x7e]")


def read_banner(sock: socket.socket, size: int = 1024, timeout: float = 1.0) -> bytes:
    """
    Single bounded read right after connect().
    Returns whatever arrived before the deadline, b"" on timeout, reset or
    EOF. A connect that succeeded stays authoritative, so read errors never
    bubble up.
    """
    sock.settimeout(timeout)
    try:
        return sock.recv(size)
    except OSError:
        return b""


def banner_text(data: bytes) -> str:
    """
    Text form of raw banner bytes. Bytes that are not valid UTF-8 come out
    as \\xNN escapes, so nothing is lost.
    """
    if not data:
        return NO_RESPONSE
    return data.decode("utf-8", errors="backslashreplace")


def preview(banner: str, max_len: int = 120) -> str:
    """Single-line printable rendering of a banner for console output."""
    s = _PRINTABLE.sub("", banner)
    s = " ".join(s.split())
    if len(s) > max_len:
        return s[:max_len] + "..."
    return s
