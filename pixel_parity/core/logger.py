"""Logger factory for pixel-parity.

Library modules only create loggers under the pixel_parity hierarchy; their
records propagate to whatever the host application configured. The CLI calls
set_level, which attaches the stderr handler and takes over output.
"""

import logging
import sys

LOG_LEVEL_MAP = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'ERROR': logging.ERROR,
    'CRITICAL': logging.CRITICAL,
}

_ROOT = 'pixel_parity'

console_handler = logging.StreamHandler(sys.stderr)
console_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))

logging.getLogger(_ROOT).addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the pixel_parity hierarchy."""
    if not name.startswith(_ROOT):
        name = f'{_ROOT}.{name}'
    return logging.getLogger(name)


def set_level(level: str) -> None:
    """Log pixel_parity records to stderr at level. Unknown names fall back to WARNING."""
    root = logging.getLogger(_ROOT)
    if console_handler not in root.handlers:
        root.addHandler(console_handler)
        root.propagate = False
    root.setLevel(LOG_LEVEL_MAP.get(level.upper(), logging.WARNING))
