"""
Base Handler
============

Abstract base class for printer transports.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any


class BaseHandler(ABC):
    """Abstract base class for printer handlers."""

    def __init__(self, host: str, port: int):
        """Initialize handler with the target device address."""
        self.host = host
        self.port = port

    @property
    def address(self) -> str:
        return f'{self.host}:{self.port}'

    @abstractmethod
    def send(self, data: bytes, timeout: float) -> Dict[str, Any]:
        """
        Deliver a document to the printer.

        Args:
            data: Document bytes
            timeout: Hard deadline in seconds for the whole delivery

        Returns:
            Dict with success status and details
        """
        pass
