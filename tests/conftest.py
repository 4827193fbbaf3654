import socket
import threading

import pytest

from portprobe.config import get_settings
from portprobe.models import ScanConfig


class FakeListener:
    """
    Loopback TCP server for scanner tests.
    Sends `greeting` to every client it accepts (nothing if empty) and keeps
    the connection open until close().
    """

    def __init__(self, greeting: bytes = b""):
        self.greeting = greeting
        self.accepted = 0
        self._clients = []
        self._lock = threading.Lock()
        self._stop = threading.Event()

        self.sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self.sock.bind(("127.0.0.1", 0))
        self.sock.listen(200)
        self.sock.settimeout(0.1)
        self.host, self.port = self.sock.getsockname()

        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    def _serve(self):
        while not self._stop.is_set():
            try:
                client, _ = self.sock.accept()
            except socket.timeout:
                continue
            except OSError:
                return
            with self._lock:
                self.accepted += 1
                self._clients.append(client)
            if self.greeting:
                try:
                    client.sendall(self.greeting)
                except OSError:
                    pass

    def close(self):
        self._stop.set()
        self._thread.join(timeout=2)
        self.sock.close()
        with self._lock:
            for c in self._clients:
                c.close()
            self._clients.clear()


@pytest.fixture
def banner_listener():
    srv = FakeListener(greeting=b"SSH-2.0-FakeServer_1.0\r\n")
    yield srv
    srv.close()


@pytest.fixture
def silent_listener():
    srv = FakeListener()
    yield srv
    srv.close()


@pytest.fixture
def closed_port():
    # Bind an ephemeral port and release it so nothing is listening there.
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.bind(("127.0.0.1", 0))
    port = s.getsockname()[1]
    s.close()
    return port


@pytest.fixture
def fast_config():
    def make(**overrides):
        params = dict(
            connect_timeout=0.3,
            max_retries=2,
            worker_count=4,
            inter_task_delay=0.0,
            backoff_unit=0.01,
        )
        params.update(overrides)
        return ScanConfig(**params)

    return make


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    for var in ("PORTPROBE_WORKERS", "PORTPROBE_TIMEOUT", "PORTPROBE_LOG_LEVEL", "PORTPROBE_TARGET"):
        monkeypatch.delenv(var, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_listener():
    servers = []

    def make(greeting: bytes = b""):
        srv = FakeListener(greeting=greeting)
        servers.append(srv)
        return srv

    yield make
    for srv in servers:
        srv.close()
