"""3x3 or 5x5 convolution with border-replicated reads.

Coefficients are given row-major, top-left first: 9 for a 3x3 kernel, 25 for
5x5. Sums are taken in float32 on raw 0..255 values over the full padded
vector, and each component is rounded half up and clamped independently.

Example:
    pixel-parity convolve ./photo.png --coefficients "0 -1 0 -1 5 -1 0 -1 0" --out sharpen.bin
"""

import numpy as np

from pixel_parity.core.arrays import (
    Vector2dArray,
    as_ubyte_array,
    check_buffer_length,
    check_dimensions,
    check_vector_size,
)
from pixel_parity.core.errors import InvalidArgument
from pixel_parity.core.logger import get_logger
from pixel_parity.core.types import Kernel, PixelBuffer, Restriction
from pixel_parity.core.vectors import float_clamped_to_ubyte
from pixel_parity.kernels._options import float_list

logger = get_logger(__name__)

kernel = Kernel(
    name='convolve',
    help='3x3 or 5x5 convolution, border-replicated.',
)

_RADIUS_FOR_COUNT = {9: 1, 25: 2}


def convolve(
    input_array,
    vector_size: int,
    size_x: int,
    size_y: int,
    coefficients,
    restriction: Restriction | None = None,
) -> np.ndarray:
    """Convolve every cell in the restriction. Returns a new buffer of the same shape."""
    check_vector_size(vector_size)
    check_dimensions(size_x, size_y)
    coefficients = np.asarray(coefficients, dtype=np.float32).reshape(-1)
    radius = _RADIUS_FOR_COUNT.get(len(coefficients))
    if radius is None:
        raise InvalidArgument(
            f'Only 3x3 and 5x5 convolutions are supported. {len(coefficients)} coefficients provided.'
        )
    if restriction is not None:
        restriction.check(size_x, size_y)
    data = as_ubyte_array(input_array)
    check_buffer_length(data, vector_size, size_x, size_y)
    logger.debug('convolve %dx%d vector %d radius %d %s', size_x, size_y, vector_size, radius, restriction)

    source = Vector2dArray(data, vector_size, size_x, size_y)
    output = source.create_same_sized()
    offsets = [(dx, dy) for dy in range(-radius, radius + 1) for dx in range(-radius, radius + 1)]

    for x, y in output.cells(restriction):
        total = np.zeros(len(source.get_strict(x, y)), dtype=np.float32)
        for coefficient, (dx, dy) in zip(coefficients, offsets):
            total = total + source.get_clamped(x + dx, y + dy).astype(np.float32) * coefficient
        output.set(x, y, float_clamped_to_ubyte(total))
    return output.values


@kernel.arguments
def _arguments(parser) -> None:
    parser.add_argument(
        '--coefficients',
        type=float_list,
        required=True,
        help='9 or 25 floats, row-major, commas or spaces',
    )


@kernel.run
def run(buffer: PixelBuffer, restriction: Restriction | None, args) -> PixelBuffer:
    result = convolve(buffer.data, buffer.vector_size, buffer.size_x, buffer.size_y, args.coefficients, restriction)
    return buffer.with_data(result)
