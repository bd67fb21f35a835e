"""
Badge Print Bridge Client
=========================

Python SDK for the badge print bridge.

Usage:
    from badge_print_bridge.client import PrintClient

    client = PrintClient('http://localhost:3002', printer_ip='192.168.1.50')

    # Raw document
    result = client.print_label('^XA^FO50,50^FDHello^FS^XZ')

    # Attendee badge
    result = client.print_badge(attendee, copies=2)
"""

import requests
from typing import Dict, Any, Optional

from .labels import LabelLayout, build_badge_zpl
from .models import Attendee

# Must outlast the bridge's own printer timeout
DEFAULT_HTTP_TIMEOUT = 30


class PrintClient:
    """Client for the badge print bridge."""

    def __init__(self, base_url: str = 'http://localhost:3002',
                 printer_ip: Optional[str] = None, printer_port: Optional[int] = None,
                 timeout: float = DEFAULT_HTTP_TIMEOUT):
        """
        Initialize client.

        Args:
            base_url: Base URL of the bridge service
            printer_ip: Printer host sent with every job (bridge default if None)
            printer_port: Printer port sent with every job (bridge default if None)
            timeout: HTTP timeout in seconds
        """
        self.base_url = base_url.rstrip('/')
        self.printer_ip = printer_ip
        self.printer_port = printer_port
        self.timeout = timeout

    def _request(self, method: str, endpoint: str, data: Dict = None) -> Dict[str, Any]:
        """Make API request."""
        url = f'{self.base_url}{endpoint}'

        try:
            response = requests.request(method, url, json=data, timeout=self.timeout)
            return response.json()

        except requests.exceptions.Timeout:
            return {'success': False, 'error': 'Request timeout'}
        except requests.exceptions.ConnectionError:
            return {'success': False, 'error': f'Cannot connect to {self.base_url}'}
        except ValueError:
            return {'success': False, 'error': f'Invalid response from {url}'}

    # =========================================================================
    # Health
    # =========================================================================

    def health(self) -> Dict[str, Any]:
        """Check service health."""
        return self._request('GET', '/health')

    def is_online(self) -> bool:
        """Check if service is online."""
        return self.health().get('status') == 'ok'

    # =========================================================================
    # Printing
    # =========================================================================

    def print_label(self, document: str, printer_ip: Optional[str] = None,
                    printer_port: Optional[int] = None,
                    timeout_ms: Optional[int] = None) -> Dict[str, Any]:
        """
        Send a rendered label document.

        Args:
            document: ZPL document
            printer_ip: Overrides the client's printer host
            printer_port: Overrides the client's printer port
            timeout_ms: Printer timeout enforced by the bridge
        """
        data = {'document': document}

        host = printer_ip or self.printer_ip
        port = printer_port or self.printer_port
        if host:
            data['targetHost'] = host
        if port:
            data['targetPort'] = port
        if timeout_ms:
            data['timeoutMs'] = timeout_ms

        return self._request('POST', '/print', data)

    def print_badge(self, attendee: Attendee, copies: int = 1,
                    layout: Optional[LabelLayout] = None, **kwargs) -> Dict[str, Any]:
        """Render an attendee badge and print it."""
        return self.print_label(build_badge_zpl(attendee, copies, layout), **kwargs)
