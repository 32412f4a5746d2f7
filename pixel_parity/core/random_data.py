"""Seeded test data: random buffers, cubes and YUV frames, plus the identity cube.

Byte generators draw from the signed range -128..126 and reinterpret the
result as unsigned, so 127 never appears and 128..254 do. Cross-validation
runs compare against buffers produced that way, so the gap is kept.
"""

from dataclasses import dataclass

import numpy as np

from pixel_parity.core.arrays import Rgba3dArray, check_dimensions, yuv_buffer_size
from pixel_parity.core.errors import InvalidArgument
from pixel_parity.core.types import Dimension, Restriction, YuvFormat


def _signed_bytes(rng: np.random.Generator, count: int) -> np.ndarray:
    return (rng.integers(0, 255, size=count) - 128).astype(np.int8).view(np.uint8)


def random_byte_array(seed: int, size_x: int, size_y: int, element_size: int) -> np.ndarray:
    """size_x * size_y * element_size random bytes."""
    rng = np.random.default_rng(seed)
    return _signed_bytes(rng, size_x * size_y * element_size)


def random_float_array(seed: int, size_x: int, size_y: int, element_size: int, factor: float = 1.0) -> np.ndarray:
    """float32 values in [0, factor)."""
    rng = np.random.default_rng(seed)
    return (rng.random(size_x * size_y * element_size, dtype=np.float32) * np.float32(factor)).astype(np.float32)


def random_cube(seed: int, dimension: Dimension) -> Rgba3dArray:
    rng = np.random.default_rng(seed)
    count = dimension.size_x * dimension.size_y * dimension.size_z * 4
    return Rgba3dArray.from_dimension(_signed_bytes(rng, count), dimension)


def identity_cube(dimension: Dimension) -> Rgba3dArray:
    """A cube that maps every RGB value to itself (within rounding), alpha 255."""
    if min(dimension.size_x, dimension.size_y, dimension.size_z) < 2:
        raise InvalidArgument(f'Identity cube needs at least 2 entries per axis, got {dimension}')
    z, y, x = np.meshgrid(
        np.arange(dimension.size_z),
        np.arange(dimension.size_y),
        np.arange(dimension.size_x),
        indexing='ij',
    )
    values = np.stack(
        [
            x * 255 // (dimension.size_x - 1),
            y * 255 // (dimension.size_y - 1),
            z * 255 // (dimension.size_z - 1),
            np.full_like(x, 255),
        ],
        axis=-1,
    )
    return Rgba3dArray.from_dimension(values.astype(np.uint8).reshape(-1), dimension)


def random_yuv_array(seed: int, size_x: int, size_y: int, yuv_format: YuvFormat) -> np.ndarray:
    """A random YUV frame of exactly the layout's size. Both dimensions must be even."""
    check_dimensions(size_x, size_y)
    if size_x % 2 != 0 or size_y % 2 != 0:
        raise InvalidArgument(f'YUV frames need even dimensions. {size_x}x{size_y} provided.')
    return random_byte_array(seed, yuv_buffer_size(size_x, size_y, yuv_format), 1, 1)


@dataclass(frozen=True)
class Layout:
    """An input size plus an optional restriction to run a kernel over."""

    size_x: int
    size_y: int
    restriction: Restriction | None = None


COMMON_LAYOUTS = [
    Layout(3, 4),
    Layout(3, 4, Restriction(0, 1, 0, 3)),
    Layout(3, 4, Restriction(2, 3, 1, 4)),
    Layout(160, 100),
]
