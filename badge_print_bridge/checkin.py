"""
Check-in
========

Prints an attendee's badge and records their attendance at an event.

Attendance is written only after the bridge reports a successful print.
The (event, attendee) pair is unique; finding an existing record is not
an error.
"""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Set, Tuple

from .client import PrintClient
from .models import Attendee

logger = logging.getLogger(__name__)


class AttendanceStore(ABC):
    """Datastore boundary for attendance records."""

    @abstractmethod
    def has_attended(self, event_id: int, attendee_id: str) -> bool:
        pass

    @abstractmethod
    def record_attendance(self, event_id: int, attendee_id: str) -> None:
        pass


class InMemoryAttendanceStore(AttendanceStore):
    """Process-local attendance records."""

    def __init__(self):
        self._records: Set[Tuple[int, str]] = set()
        self._lock = threading.Lock()

    def has_attended(self, event_id: int, attendee_id: str) -> bool:
        with self._lock:
            return (event_id, attendee_id) in self._records

    def record_attendance(self, event_id: int, attendee_id: str) -> None:
        with self._lock:
            self._records.add((event_id, attendee_id))


@dataclass
class CheckInResult:
    success: bool
    message: str
    already_logged: bool = False
    print_result: Dict[str, Any] = field(default_factory=dict)


class CheckInService:
    """Badge printing followed by attendance logging."""

    def __init__(self, client: PrintClient, store: AttendanceStore):
        self.client = client
        self.store = store

    def check_in(self, event_id: Optional[int], attendee: Attendee,
                 copies: int = 1) -> CheckInResult:
        if event_id is None:
            return CheckInResult(False, 'Select an event before printing.')

        print_result = self.client.print_badge(attendee, copies)
        if not print_result.get('success'):
            error = print_result.get('error') or 'Unable to print badge.'
            logger.error('Badge print failed for attendee %s: %s', attendee.id, error)
            return CheckInResult(False, error, print_result=print_result)

        already_logged = self.store.has_attended(event_id, attendee.id)
        if already_logged:
            logger.info('Attendance already logged for %s at event %s', attendee.id, event_id)
            message = f'Printed badge for {attendee.full_name} (already marked attended).'
        else:
            self.store.record_attendance(event_id, attendee.id)
            message = f'Printed badge for {attendee.full_name}'

        return CheckInResult(True, message, already_logged, print_result)
