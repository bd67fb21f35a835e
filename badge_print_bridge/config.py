"""
Badge Print Bridge Configuration
"""

import os
import re
from dataclasses import dataclass

# =============================================================================
# Server Configuration
# =============================================================================

DEFAULT_PORT = 3002
DEFAULT_LOG_LEVEL = 'INFO'

# =============================================================================
# Printer Defaults
# =============================================================================

# Raw socket print port (Zebra "JetDirect" style)
ZPL_PORT = 9100

DEFAULT_TIMEOUT_MS = 10_000
MAX_TIMEOUT_MS = 10 * 60 * 1000

# Limit on the /print request body
DEFAULT_MAX_LABEL_SIZE = '256kb'

# =============================================================================
# Label Defaults
# =============================================================================

# 80mm x 50mm at ~203dpi (8 dots/mm)
LABEL_WIDTH_DOTS = 640
LABEL_HEIGHT_DOTS = 400

_SIZE_UNITS = {
    '': 1,
    'b': 1,
    'kb': 1024,
    'mb': 1024 ** 2,
    'gb': 1024 ** 3,
}

_SIZE_RE = re.compile(r'^\s*(\d+(?:\.\d+)?)\s*([a-z]*)\s*$')


def parse_size(value) -> int:
    """
    Parse a byte limit such as ``256kb``, ``1mb`` or ``4096``.

    Raises:
        ValueError: if the value is not a recognised size
    """
    if isinstance(value, int):
        if value <= 0:
            raise ValueError(f'Size must be positive: {value}')
        return value

    match = _SIZE_RE.match(str(value).lower())
    if not match or match.group(2) not in _SIZE_UNITS:
        raise ValueError(f'Invalid size: {value!r}')

    size = int(float(match.group(1)) * _SIZE_UNITS[match.group(2)])
    if size <= 0:
        raise ValueError(f'Size must be positive: {value!r}')
    return size


@dataclass(frozen=True)
class BridgeConfig:
    """Process-wide settings, loaded once at startup."""

    host: str = '0.0.0.0'
    port: int = DEFAULT_PORT
    debug: bool = False
    default_printer_host: str = ''
    default_printer_port: int = ZPL_PORT
    default_timeout_ms: int = DEFAULT_TIMEOUT_MS
    max_label_bytes: int = 256 * 1024
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls, environ=None) -> 'BridgeConfig':
        """Build configuration from environment variables."""
        env = os.environ if environ is None else environ

        return cls(
            host=env.get('BRIDGE_HOST', '0.0.0.0'),
            port=int(env.get('PORT', env.get('BRIDGE_PORT', DEFAULT_PORT))),
            debug=env.get('BRIDGE_DEBUG', 'false').lower() == 'true',
            default_printer_host=env.get('PRINTER_HOST', '').strip(),
            default_printer_port=int(env.get('PRINTER_PORT', ZPL_PORT)),
            default_timeout_ms=int(env.get('PRINT_TIMEOUT_MS', DEFAULT_TIMEOUT_MS)),
            max_label_bytes=parse_size(env.get('MAX_LABEL_SIZE', DEFAULT_MAX_LABEL_SIZE)),
            log_level=env.get('LOG_LEVEL', DEFAULT_LOG_LEVEL).upper(),
        )
