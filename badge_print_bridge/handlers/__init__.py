"""
Badge Print Bridge Handlers
===========================

Transport handlers for delivering label documents to printers.
"""

from .base import BaseHandler
from .zpl import ZPLHandler

__all__ = ['BaseHandler', 'ZPLHandler']
