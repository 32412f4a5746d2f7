"""Per-channel histograms, and a histogram of a weighted channel sum.

histogram counts each channel separately. The result has 256 * padded
entries, where padded is 4 for 3-vectors and the vector size otherwise.
Entry value * padded + channel counts the cells whose channel holds value.
The padding channel of a 3-vector is never counted.

histogram_dot collapses each vector to one byte first:
    index = (sum of c_i * v_i + 0x7f) >> 8,  c_i = trunc(coefficient_i * 256 + 0.5)
and counts those indices in 256 buckets. Coefficients default to the BT.601
luma weights (0.299, 0.587, 0.114, 0); given ones must match the vector size,
be non-negative and add up to at most 1.0.

Both return int32 arrays.

Example:
    pixel-parity histogram ./photo.png --json
    pixel-parity histogram ./photo.png --dot --coefficients "0.2 0.7 0.1 0" --intrinsic dot.bin
"""

import numpy as np

from pixel_parity.core.arrays import (
    Vector2dArray,
    as_ubyte_array,
    check_buffer_length,
    check_dimensions,
    check_vector_size,
    padded_size,
)
from pixel_parity.core.errors import InvalidArgument
from pixel_parity.core.logger import get_logger
from pixel_parity.core.types import Kernel, PixelBuffer, Restriction
from pixel_parity.kernels._options import float_list

logger = get_logger(__name__)

kernel = Kernel(
    name='histogram',
    help='Per-channel histogram, or with --dot a histogram of weighted channel sums.',
)

DEFAULT_DOT_COEFFICIENTS = (0.299, 0.587, 0.114, 0.0)


def _prepare(input_array, vector_size: int, size_x: int, size_y: int, restriction: Restriction | None) -> Vector2dArray:
    check_vector_size(vector_size)
    check_dimensions(size_x, size_y)
    if restriction is not None:
        restriction.check(size_x, size_y)
    data = as_ubyte_array(input_array)
    check_buffer_length(data, vector_size, size_x, size_y)
    return Vector2dArray(data, vector_size, size_x, size_y)


def histogram(
    input_array,
    vector_size: int,
    size_x: int,
    size_y: int,
    restriction: Restriction | None = None,
) -> np.ndarray:
    """Count channel values. Returns 256 * padded_size(vector_size) int32 counts."""
    source = _prepare(input_array, vector_size, size_x, size_y, restriction)
    logger.debug('histogram %dx%d vector %d %s', size_x, size_y, vector_size, restriction)

    stride = padded_size(vector_size)
    counts = np.zeros(256 * stride, dtype=np.int32)
    for x, y in source.cells(restriction):
        value = source.get_strict(x, y)
        for channel in range(vector_size):
            counts[int(value[channel]) * stride + channel] += 1
    return counts


def dot_coefficients(coefficients, vector_size: int) -> np.ndarray:
    """Check float coefficients and convert them to the 8.8 fixed point weights used per pixel."""
    if coefficients is None:
        floats = np.asarray(DEFAULT_DOT_COEFFICIENTS, dtype=np.float32)
    else:
        floats = np.asarray(coefficients, dtype=np.float32).reshape(-1)
        if len(floats) != vector_size:
            raise InvalidArgument(
                f'Expected {vector_size} coefficients for vector size {vector_size}. {len(floats)} provided.'
            )

    total = np.float32(0.0)
    for c in floats:
        if c < 0:
            raise InvalidArgument(f'Coefficients must be positive. {c} provided.')
        total = np.float32(total + c)
    if total > np.float32(1.0):
        raise InvalidArgument(f'Coefficients should add to 1.0 or less. {total} provided.')

    return np.trunc(floats[:vector_size] * np.float32(256.0) + np.float32(0.5)).astype(np.int64)


def histogram_dot(
    input_array,
    vector_size: int,
    size_x: int,
    size_y: int,
    coefficients=None,
    restriction: Restriction | None = None,
) -> np.ndarray:
    """Histogram of the rounded weighted channel sum. Returns 256 int32 counts."""
    weights = dot_coefficients(coefficients, vector_size)
    source = _prepare(input_array, vector_size, size_x, size_y, restriction)
    logger.debug('histogram_dot %dx%d vector %d weights %s %s', size_x, size_y, vector_size, weights, restriction)

    counts = np.zeros(256, dtype=np.int32)
    for x, y in source.cells(restriction):
        value = source.get_strict(x, y)
        total = sum(int(weights[i]) * int(value[i]) for i in range(vector_size))
        # Rounded-up weights can push a full-white pixel to 256
        counts[min((total + 0x7F) >> 8, 255)] += 1
    return counts


@kernel.arguments
def _arguments(parser) -> None:
    parser.add_argument('--dot', action='store_true', help='Histogram of the weighted channel sum')
    parser.add_argument(
        '--coefficients',
        type=float_list,
        help='With --dot: one weight per channel (default: 0.299 0.587 0.114 0)',
    )


@kernel.run
def run(buffer: PixelBuffer, restriction: Restriction | None, args) -> PixelBuffer:
    if args.dot:
        counts = histogram_dot(
            buffer.data, buffer.vector_size, buffer.size_x, buffer.size_y, args.coefficients, restriction
        )
        return PixelBuffer(data=counts, vector_size=1, size_x=256, size_y=1)
    if args.coefficients is not None:
        raise InvalidArgument('--coefficients only applies with --dot')
    counts = histogram(buffer.data, buffer.vector_size, buffer.size_x, buffer.size_y, restriction)
    return PixelBuffer(data=counts, vector_size=buffer.vector_size, size_x=256, size_y=1)
