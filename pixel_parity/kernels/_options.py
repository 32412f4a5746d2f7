"""Option parsing shared by the kernel subcommands."""

import argparse
from pathlib import Path

import numpy as np

from pixel_parity.core.errors import InvalidArgument


def float_list(text: str) -> list[float]:
    """Parse '0.1,0.2 0.3' into floats. Commas and whitespace both separate."""
    parts = text.replace(',', ' ').split()
    try:
        return [float(p) for p in parts]
    except ValueError as e:
        raise argparse.ArgumentTypeError(f'not a list of numbers: {text!r}') from e


def read_bytes(path: str, expected: int | None = None) -> np.ndarray:
    """Read a raw byte file, optionally requiring an exact length."""
    if not Path(path).is_file():
        raise InvalidArgument(f'file not found: {path}')
    data = np.frombuffer(Path(path).read_bytes(), dtype=np.uint8)
    if expected is not None and len(data) != expected:
        raise InvalidArgument(f'{path}: expected {expected} bytes, found {len(data)}')
    return data
