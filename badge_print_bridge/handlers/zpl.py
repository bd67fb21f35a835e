"""
ZPL Handler
===========

Raw socket transport for ZPL printers (Zebra and compatibles on port 9100).

The printer protocol is send-only: a delivery is complete once every byte
has been written and the write side shut down cleanly. Nothing is read back.
"""

import socket
import struct
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from contextlib import suppress
from typing import Dict, Any

from .base import BaseHandler

# SO_LINGER on, zero seconds: close() sends RST instead of draining
_ABORT_LINGER = struct.pack('ii', 1, 0)

# getaddrinfo cannot be interrupted; lookups past their deadline finish here
_RESOLVER = ThreadPoolExecutor(max_workers=8, thread_name_prefix='printer-dns')


class ZPLHandler(BaseHandler):
    """Handler for ZPL-compatible network printers."""

    @staticmethod
    def _remaining(deadline: float) -> float:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise socket.timeout('deadline exceeded')
        return remaining

    @staticmethod
    def _abort(sock: socket.socket):
        """Tear the connection down without waiting for queued data."""
        with suppress(OSError):
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_LINGER, _ABORT_LINGER)

    def _resolve(self, deadline: float) -> list:
        future = _RESOLVER.submit(socket.getaddrinfo, self.host, self.port,
                                  0, socket.SOCK_STREAM)
        try:
            return future.result(timeout=self._remaining(deadline))
        except FutureTimeout:
            future.cancel()
            raise socket.timeout(f'lookup of {self.host} timed out') from None

    def _connect(self, addresses: list, deadline: float) -> socket.socket:
        """Try each resolved address until one connects or time runs out."""
        error = None
        for family, sock_type, proto, _, address in addresses:
            sock = socket.socket(family, sock_type, proto)
            try:
                sock.settimeout(self._remaining(deadline))
                sock.connect(address)
                return sock
            except OSError as e:
                sock.close()
                error = e
        raise error or OSError(f'No addresses found for {self.host}')

    def send(self, data: bytes, timeout: float) -> Dict[str, Any]:
        """
        Connect, write and half-close within a single deadline.

        Args:
            data: Document bytes
            timeout: Seconds allowed for lookup + connect + write + close

        Returns:
            Dict with success status. On failure, ``stage`` names the step
            that failed (resolve, connect, write, close).
        """
        deadline = time.monotonic() + timeout
        stage = 'resolve'
        sock = None
        completed = False

        try:
            addresses = self._resolve(deadline)

            stage = 'connect'
            sock = self._connect(addresses, deadline)

            stage = 'write'
            sock.settimeout(self._remaining(deadline))
            sock.sendall(data)

            stage = 'close'
            sock.shutdown(socket.SHUT_WR)
            completed = True

            return {
                'success': True,
                'host': self.host,
                'port': self.port,
                'bytes_sent': len(data),
            }

        except socket.timeout:
            return {
                'success': False,
                'error': (f'Connection to printer {self.address} timed out '
                          f'during {stage} after {int(timeout * 1000)}ms'),
                'stage': stage,
                'timeout': True,
            }
        except ConnectionRefusedError as e:
            return {
                'success': False,
                'error': f'Connection refused by {self.address}: {e}',
                'stage': stage,
            }
        except OSError as e:
            return {
                'success': False,
                'error': f'Printer {self.address} failed during {stage}: {e}',
                'stage': stage,
            }
        finally:
            if sock is not None:
                if not completed:
                    self._abort(sock)
                sock.close()
