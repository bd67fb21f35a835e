"""
Badge Print Bridge
==================

Check-in badge printing: renders attendee badges as ZPL and relays them
from HTTP to raw-socket (port 9100) label printers.

Usage:
    python -m badge_print_bridge

API Endpoints:
    GET  /health  - Liveness and default printer address
    POST /print   - Send a label document to a printer
    GET  /api     - Service info
"""

__version__ = '1.0.0'
__author__ = 'Badge Print Bridge Contributors'
