"""Shared fixtures: loopback sockets standing in for label printers."""

import queue
import socket
import threading

import pytest

from badge_print_bridge.bridge import PrintBridge
from badge_print_bridge.config import BridgeConfig


class MockPrinter:
    """
    TCP listener on 127.0.0.1.

    ``read`` mode reads every connection to EOF and keeps the bytes.
    ``hold`` mode accepts and never reads; held sockets go to ``accepted``.
    """

    def __init__(self, mode='read', rcvbuf=None):
        self.mode = mode
        self.connections = 0
        self.received = []
        self.accepted = queue.Queue()
        self.done = threading.Event()

        self.sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        if rcvbuf:
            self.sock.setsockopt(socket.SOL_SOCKET, socket.SO_RCVBUF, rcvbuf)
        self.sock.bind(('127.0.0.1', 0))
        self.sock.listen(8)
        self.sock.settimeout(0.1)
        self.host, self.port = self.sock.getsockname()

        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    def _serve(self):
        while not self._stop.is_set():
            try:
                conn, _ = self.sock.accept()
            except socket.timeout:
                continue
            except OSError:
                return
            self.connections += 1

            if self.mode == 'hold':
                self.accepted.put(conn)
                continue

            conn.settimeout(5)
            chunks = []
            with conn:
                while True:
                    chunk = conn.recv(65536)
                    if not chunk:
                        break
                    chunks.append(chunk)
            self.received.append(b''.join(chunks))
            self.done.set()

    def wait(self, timeout=5):
        return self.done.wait(timeout)

    def close(self):
        self._stop.set()
        self._thread.join(timeout=2)
        self.sock.close()
        while not self.accepted.empty():
            self.accepted.get_nowait().close()


@pytest.fixture
def mock_printer():
    printer = MockPrinter()
    yield printer
    printer.close()


@pytest.fixture
def printer_factory():
    printers = []

    def make(**kwargs):
        printer = MockPrinter(**kwargs)
        printers.append(printer)
        return printer

    yield make
    for printer in printers:
        printer.close()


@pytest.fixture
def closed_port():
    """A loopback port with nothing listening."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


@pytest.fixture
def config():
    return BridgeConfig(default_printer_host='', default_timeout_ms=2000)


@pytest.fixture
def bridge(config):
    return PrintBridge(config)
