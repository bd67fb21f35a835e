"""
Attendee Model
==============

Attendee record as read from the event datastore.
"""

from dataclasses import dataclass, fields
from typing import Optional, Dict, Any


@dataclass
class Attendee:
    """Attendee fields used for badge rendering."""

    id: str = ""
    first_name: str = ""
    last_name: str = ""
    company: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    @property
    def full_name(self) -> str:
        return ' '.join(p for p in (self.first_name, self.last_name) if p)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Attendee':
        """Create from a datastore row, ignoring unknown columns."""
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        # Datastore ids may be numeric
        if values.get('id') is not None:
            values['id'] = str(values['id'])
        for key in ('first_name', 'last_name'):
            if values.get(key) is None:
                values[key] = ""
        return cls(**values)
