"""
Badge Print Bridge Models
"""

from .attendee import Attendee
from .label import LabelRequest, LabelResult, ErrorType

__all__ = ['Attendee', 'LabelRequest', 'LabelResult', 'ErrorType']
