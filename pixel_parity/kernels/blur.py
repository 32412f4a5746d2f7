"""Separable Gaussian blur with border-replicated reads.

Builds a normalized 1D Gaussian of 2*radius+1 taps with
sigma = 0.4 * radius + 0.6, then convolves horizontally and vertically.
Work happens in float32 on 0.0..1.0 values; results are rounded half up
back to bytes.

With a restriction, the horizontal pass covers the restricted columns over
the restricted rows plus `radius` rows above and below (clamped to the
image), so the vertical pass has every intermediate value it reads.

Radius must be 1..25. Vector sizes 1..4; for size 3 the padding byte of the
output is always 0.

Example:
    pixel-parity blur ./photo.png --radius 8 --out ref.bin
    pixel-parity blur ./raw.bin --size 160 100 --vector-size 1 --radius 3 --toolkit tk.bin
"""

import numpy as np

from pixel_parity.core.arrays import (
    FloatVector2dArray,
    as_ubyte_array,
    check_buffer_length,
    check_dimensions,
    check_vector_size,
)
from pixel_parity.core.errors import InvalidArgument
from pixel_parity.core.logger import get_logger
from pixel_parity.core.types import Kernel, PixelBuffer, Restriction
from pixel_parity.core.vectors import byte_to_unit_float, unit_float_clamped_to_ubyte

logger = get_logger(__name__)

kernel = Kernel(
    name='blur',
    help='Separable Gaussian blur, radius 1..25, border-replicated.',
)

MAX_RADIUS = 25


def build_gaussian(radius: int) -> np.ndarray:
    """Normalized float32 Gaussian weights for offsets -radius..radius."""
    sigma = np.float32(0.4) * np.float32(radius) + np.float32(0.6)
    coefficient1 = np.float32(1.0) / (np.sqrt(np.float32(2.0) * np.float32(np.pi)) * sigma)
    coefficient2 = np.float32(-1.0) / (np.float32(2.0) * sigma * sigma)

    r = np.arange(-radius, radius + 1, dtype=np.float32)
    gaussian = (coefficient1 * np.power(np.float32(np.e), r * r * coefficient2)).astype(np.float32)

    normalize_factor = np.float32(1.0) / gaussian.sum(dtype=np.float32)
    return gaussian * normalize_factor


def _horizontal_blur(
    source: FloatVector2dArray,
    gaussian: np.ndarray,
    radius: int,
    restriction: Restriction | None,
) -> FloatVector2dArray:
    expanded = None
    if restriction is not None:
        expanded = Restriction(
            restriction.start_x,
            restriction.end_x,
            max(restriction.start_y - radius, 0),
            min(restriction.end_y + radius, source.size_y),
        )

    out = source.create_same_sized()
    for x, y in out.cells(expanded):
        total = np.zeros(source.vector_size, dtype=np.float32)
        for weight, delta in zip(gaussian, range(-radius, radius + 1)):
            total = total + source.get_clamped(x + delta, y) * weight
        out.set(x, y, total)
    return out


def _vertical_blur(
    source: FloatVector2dArray,
    gaussian: np.ndarray,
    radius: int,
    restriction: Restriction | None,
) -> FloatVector2dArray:
    out = source.create_same_sized()
    for x, y in out.cells(restriction):
        total = np.zeros(source.vector_size, dtype=np.float32)
        for weight, delta in zip(gaussian, range(-radius, radius + 1)):
            total = total + source.get_clamped(x, y + delta) * weight
        out.set(x, y, total)
    return out


def blur(
    input_array,
    vector_size: int,
    size_x: int,
    size_y: int,
    radius: int = 5,
    restriction: Restriction | None = None,
) -> np.ndarray:
    """Blur a buffer of vectors. Returns a new uint8 buffer of the same shape."""
    check_vector_size(vector_size)
    check_dimensions(size_x, size_y)
    if not 1 <= radius <= MAX_RADIUS:
        raise InvalidArgument(f'Blur radius should be between 1 and {MAX_RADIUS}. {radius} provided.')
    if restriction is not None:
        restriction.check(size_x, size_y)
    data = as_ubyte_array(input_array)
    check_buffer_length(data, vector_size, size_x, size_y)
    logger.debug('blur %dx%d vector %d radius %d %s', size_x, size_y, vector_size, radius, restriction)

    gaussian = build_gaussian(radius)
    source = FloatVector2dArray(byte_to_unit_float(data), vector_size, size_x, size_y)
    scratch = _horizontal_blur(source, gaussian, radius, restriction)
    out = _vertical_blur(scratch, gaussian, radius, restriction)
    return unit_float_clamped_to_ubyte(out.values)


@kernel.arguments
def _arguments(parser) -> None:
    parser.add_argument('--radius', type=int, default=5, help='Blur radius 1..25 (default: 5)')


@kernel.run
def run(buffer: PixelBuffer, restriction: Restriction | None, args) -> PixelBuffer:
    result = blur(buffer.data, buffer.vector_size, buffer.size_x, buffer.size_y, args.radius, restriction)
    return buffer.with_data(result)
