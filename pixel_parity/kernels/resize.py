"""Bicubic resize.

Output cell (x, y) samples the input at
    ((x + 0.5) * in_x / out_x - 0.5, (y + 0.5) * in_y / out_y - 0.5)
from the 4x4 neighbourhood starting one cell up and to the left of that point.
Neighbour indices are clamped to the input extent. Rows are interpolated
first, then the four row results along Y, in float32 over the whole padded
vector:

    p1 + 0.5 * t * (p2 - p0 + t * (2*p0 - 5*p1 + 4*p2 - p3 + t * (3*(p1 - p2) + p3 - p0)))

The restriction applies to the output extent.

Example:
    pixel-parity resize ./photo.png --out-size 320 200 --out big.bin
"""

import math
from collections.abc import Callable

import numpy as np

from pixel_parity.core.arrays import (
    Vector2dArray,
    as_ubyte_array,
    check_buffer_length,
    check_dimensions,
    check_vector_size,
    padded_size,
)
from pixel_parity.core.logger import get_logger
from pixel_parity.core.types import Kernel, PixelBuffer, Restriction
from pixel_parity.core.vectors import float_clamped_to_ubyte

logger = get_logger(__name__)

kernel = Kernel(
    name='resize',
    help='Bicubic resize to --out-size, edges clamped.',
)

_HALF = np.float32(0.5)


def cubic_interpolate(p0: np.ndarray, p1: np.ndarray, p2: np.ndarray, p3: np.ndarray, t) -> np.ndarray:
    t = np.float32(t)
    return p1 + (p2 - p0 + (p0 * 2 - p1 * 5 + p2 * 4 - p3 + ((p1 - p2) * 3 + p3 - p0) * t) * t) * t * _HALF


def _taps(start: int, max_index: int) -> tuple[int, int, int, int]:
    return max(0, start), max(0, start + 1), min(max_index, start + 2), min(max_index, start + 3)


def _bicubic(x: int, y: int, source: Vector2dArray, scale_x: np.float32, scale_y: np.float32) -> np.ndarray:
    xf = (np.float32(x) + _HALF) * scale_x - _HALF
    yf = (np.float32(y) + _HALF) * scale_y - _HALF
    xs = _taps(math.floor(xf - 1), source.size_x - 1)
    ys = _taps(math.floor(yf - 1), source.size_y - 1)
    xf = xf - np.floor(xf)
    yf = yf - np.floor(yf)

    rows = []
    for row in ys:
        p = [source.get_strict(column, row).astype(np.float32) for column in xs]
        rows.append(cubic_interpolate(p[0], p[1], p[2], p[3], xf))
    return cubic_interpolate(rows[0], rows[1], rows[2], rows[3], yf)


def resize(
    input_array,
    vector_size: int,
    in_size_x: int,
    in_size_y: int,
    out_size_x: int,
    out_size_y: int,
    restriction: Restriction | None = None,
    trace: Callable[[int, int, np.ndarray], None] | None = None,
) -> np.ndarray:
    """Resize to out_size_x x out_size_y. Returns a new buffer.

    trace, when given, is called with (x, y, value) for every computed output
    cell, value being the float32 vector before rounding.
    """
    check_vector_size(vector_size)
    check_dimensions(in_size_x, in_size_y)
    check_dimensions(out_size_x, out_size_y)
    if restriction is not None:
        restriction.check(out_size_x, out_size_y)
    data = as_ubyte_array(input_array)
    check_buffer_length(data, vector_size, in_size_x, in_size_y)
    logger.debug(
        'resize %dx%d -> %dx%d vector %d %s', in_size_x, in_size_y, out_size_x, out_size_y, vector_size, restriction
    )

    source = Vector2dArray(data, vector_size, in_size_x, in_size_y)
    scale_x = np.float32(in_size_x) / np.float32(out_size_x)
    scale_y = np.float32(in_size_y) / np.float32(out_size_y)
    output_values = np.zeros(out_size_x * out_size_y * padded_size(vector_size), dtype=np.uint8)
    output = Vector2dArray(output_values, vector_size, out_size_x, out_size_y)

    for x, y in output.cells(restriction):
        value = _bicubic(x, y, source, scale_x, scale_y)
        if trace is not None:
            trace(x, y, value)
        output.set(x, y, float_clamped_to_ubyte(value))
    return output_values


@kernel.arguments
def _arguments(parser) -> None:
    parser.add_argument(
        '--out-size',
        type=int,
        nargs=2,
        required=True,
        metavar=('WIDTH', 'HEIGHT'),
        help='Output dimensions; --restriction applies to these',
    )


@kernel.run
def run(buffer: PixelBuffer, restriction: Restriction | None, args) -> PixelBuffer:
    out_x, out_y = args.out_size
    result = resize(buffer.data, buffer.vector_size, buffer.size_x, buffer.size_y, out_x, out_y, restriction)
    return PixelBuffer(data=result, vector_size=buffer.vector_size, size_x=out_x, size_y=out_y)
