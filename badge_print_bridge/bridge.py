"""
Printer Bridge
==============

Turns a bounded request/response call into a single raw-socket delivery.

Each submit call validates its input, makes exactly one connection attempt
to the target printer and resolves to a LabelResult. Errors never escape
``submit``; they are classified as client, device or internal failures.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .config import BridgeConfig, MAX_TIMEOUT_MS
from .handlers import ZPLHandler
from .models import ErrorType, LabelRequest, LabelResult

logger = logging.getLogger(__name__)

MAX_PORT = 65535


class BridgeError(Exception):
    """Base class for submit failures."""

    error_type = ErrorType.INTERNAL
    status_code = 500


class ClientError(BridgeError, ValueError):
    """Submit request rejected before any connection attempt."""

    error_type = ErrorType.CLIENT
    status_code = 400


class DeviceError(BridgeError):
    """Printer refused, reset or timed out."""

    error_type = ErrorType.DEVICE
    status_code = 502


def new_request_id() -> str:
    """Correlation token for one submit call."""
    return str(uuid.uuid4())


def _first(payload: Dict[str, Any], *keys: str):
    """Value of the first key present and not None."""
    for key in keys:
        if payload.get(key) is not None:
            return payload[key]
    return None


def _to_int(value, name: str, minimum: int = 1, maximum: Optional[int] = None) -> int:
    if isinstance(value, bool):
        raise ClientError(f'{name} must be an integer')
    try:
        number = float(value) if isinstance(value, str) else value
        if not isinstance(number, (int, float)) or number != int(number):
            raise ValueError
        number = int(number)
    except (TypeError, ValueError, OverflowError):
        raise ClientError(f'{name} must be an integer') from None

    if number < minimum or (maximum is not None and number > maximum):
        bounds = f'between {minimum} and {maximum}' if maximum else f'at least {minimum}'
        raise ClientError(f'{name} must be {bounds}')
    return number


class PrintBridge:
    """Relays label documents from HTTP callers to raw-socket printers."""

    def __init__(self, config: BridgeConfig, handler_class: type = ZPLHandler):
        self.config = config
        self.handler_class = handler_class

    def health(self) -> Dict[str, Any]:
        return {
            'status': 'ok',
            'defaultPrinterHost': self.config.default_printer_host or None,
            'defaultPrinterPort': self.config.default_printer_port,
            'timestamp': datetime.now(timezone.utc).isoformat(),
        }

    def parse_request(self, payload: Optional[Dict[str, Any]]) -> LabelRequest:
        """
        Validate a submit payload.

        Accepts ``document``/``targetHost``/``targetPort``/``timeoutMs`` and
        the older ``zpl``/``printerIp``/``printerPort``/``timeout`` names.

        Raises:
            ClientError: on missing document, missing host or bad numbers
        """
        payload = payload if isinstance(payload, dict) else {}

        document = _first(payload, 'document', 'zpl')
        document = document.strip() if isinstance(document, str) else ''
        if not document:
            raise ClientError('Label document is required')

        host = _first(payload, 'targetHost', 'printerIp')
        host = host.strip() if isinstance(host, str) else ''
        host = host or self.config.default_printer_host
        if not host:
            raise ClientError('Printer host is required (send targetHost or set PRINTER_HOST)')

        port = _first(payload, 'targetPort', 'printerPort')
        port = (self.config.default_printer_port if port is None
                else _to_int(port, 'targetPort', maximum=MAX_PORT))

        timeout_ms = _first(payload, 'timeoutMs', 'timeout')
        timeout_ms = (self.config.default_timeout_ms if timeout_ms is None
                      else _to_int(timeout_ms, 'timeoutMs', maximum=MAX_TIMEOUT_MS))

        return LabelRequest(
            document=document,
            target_host=host,
            target_port=port,
            timeout_ms=timeout_ms,
        )

    def deliver(self, request: LabelRequest, request_id: str) -> LabelResult:
        """
        Make one connection attempt.

        Raises:
            DeviceError: when the printer could not take the document
        """
        handler = self.handler_class(request.target_host, request.target_port)
        result = handler.send(request.payload, request.timeout)

        if result['success']:
            logger.info('[%s] Sent %d bytes to %s', request_id,
                        result['bytes_sent'], handler.address)
            return LabelResult.ok(request, request_id, result['bytes_sent'])

        raise DeviceError(result['error'])

    def submit(self, payload: Optional[Dict[str, Any]],
               request_id: Optional[str] = None) -> LabelResult:
        """
        Validate and deliver one label.

        Args:
            payload: Decoded request body
            request_id: Correlation token, minted when not given

        Returns:
            LabelResult; ``error_type`` is set on failure
        """
        request_id = request_id or new_request_id()

        try:
            request = self.parse_request(payload)
        except ClientError as e:
            logger.warning('[%s] Rejected label: %s', request_id, e)
            return LabelResult.failed(request_id, str(e), e.error_type)

        logger.info('[%s] Submitting %d byte label to %s:%s (timeout %dms)', request_id,
                    len(request.payload), request.target_host, request.target_port,
                    request.timeout_ms)

        try:
            return self.deliver(request, request_id)
        except DeviceError as e:
            logger.error('[%s] Printer send failed: %s', request_id, e)
            return LabelResult.failed(request_id, str(e), e.error_type, request)
        except Exception as e:
            logger.exception('[%s] Unexpected error sending label', request_id)
            return LabelResult.failed(request_id, str(e) or type(e).__name__,
                                      ErrorType.INTERNAL, request)
