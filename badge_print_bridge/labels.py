"""
Badge Labels
============

Renders attendee badges as ZPL documents.
"""

import re
from dataclasses import dataclass
from typing import Optional

from .config import LABEL_WIDTH_DOTS, LABEL_HEIGHT_DOTS
from .models import Attendee

PLACEHOLDER_NAME = 'ATTENDEE'

# Anything outside printable ASCII, plus the ZPL command prefixes
_UNSAFE_CHARS = re.compile(r'[^\x20-\x7E]|[\^~]')


@dataclass(frozen=True)
class LabelLayout:
    """Physical label area in device dots."""

    width_dots: int = LABEL_WIDTH_DOTS
    height_dots: int = LABEL_HEIGHT_DOTS


def sanitize_field(value: Optional[str]) -> str:
    """Replace non-printable characters with spaces and trim."""
    return _UNSAFE_CHARS.sub(' ', value or '').strip()


def build_badge_zpl(attendee: Attendee, copies: int = 1,
                    layout: Optional[LabelLayout] = None) -> str:
    """
    Build an 80x50mm name badge.

    Args:
        attendee: Attendee record
        copies: Number of copies (values below 1 print one)
        layout: Label size, defaults to 640x400 dots

    Returns:
        ZPL document
    """
    layout = layout or LabelLayout()
    name = sanitize_field(attendee.first_name) or PLACEHOLDER_NAME
    # Keep the second line even without a company
    company = sanitize_field(attendee.company) or ' '

    return '\n'.join([
        '^XA',
        f'^PW{layout.width_dots}',
        f'^LL{layout.height_dots}',
        '^CF0,100',
        f'^FO75,40^FD{name}^FS',
        '^CF0,60',
        f'^FO75,200^FD{company}^FS',
        f'^PQ{max(1, int(copies))}',
        '^XZ',
    ])
