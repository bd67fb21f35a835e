"""
Label Models
============

Transient request/result values for a single submit call.
"""

from dataclasses import dataclass
from typing import Optional, Dict, Any

from ..config import ZPL_PORT, DEFAULT_TIMEOUT_MS


class ErrorType:
    """Failure classification reported to callers."""

    CLIENT = 'client'      # bad input, no connection attempted
    DEVICE = 'device'      # printer unreachable / write failed / timeout
    INTERNAL = 'internal'  # anything else


@dataclass(frozen=True)
class LabelRequest:
    """A validated label submit request."""

    document: str
    target_host: str
    target_port: int = ZPL_PORT
    timeout_ms: int = DEFAULT_TIMEOUT_MS

    @property
    def payload(self) -> bytes:
        return self.document.encode('utf-8')

    @property
    def timeout(self) -> float:
        """Timeout in seconds."""
        return self.timeout_ms / 1000.0


@dataclass
class LabelResult:
    """Outcome of one submit call."""

    success: bool
    request_id: str
    target_host: Optional[str] = None
    target_port: Optional[int] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    bytes_sent: int = 0

    @classmethod
    def ok(cls, request: LabelRequest, request_id: str, bytes_sent: int) -> 'LabelResult':
        return cls(
            success=True,
            request_id=request_id,
            target_host=request.target_host,
            target_port=request.target_port,
            bytes_sent=bytes_sent,
        )

    @classmethod
    def failed(cls, request_id: str, error: str, error_type: str,
               request: Optional[LabelRequest] = None) -> 'LabelResult':
        return cls(
            success=False,
            request_id=request_id,
            target_host=request.target_host if request else None,
            target_port=request.target_port if request else None,
            error=error,
            error_type=error_type,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON response shape."""
        data: Dict[str, Any] = {'success': self.success}
        if self.target_host is not None:
            data['targetHost'] = self.target_host
            data['targetPort'] = self.target_port
        if not self.success:
            data['error'] = self.error
        data['requestId'] = self.request_id
        return data
