"""Multiply every vector by a 4x4 matrix and add a constant vector.

The matrix is 16 floats in column-major order, as RenderScript sets it:
out[i] = add[i] + sum over j of matrix[j * 4 + i] * in[j]. Input channels
beyond the input vector size read as 0. Input and output vector sizes are
independent. With a 3-wide output the padding byte holds the fourth matrix
row's result, so comparisons against other implementations skip it.

Named conversions:
  greyscale    luminance into R, G and B; alpha kept
  rgb_to_yuv   RGB to YUV (BT.601)
  yuv_to_rgb   YUV to RGB (BT.601)
  identity     copy

Example:
    pixel-parity color_matrix ./photo.png --conversion greyscale --out ref.bin
    pixel-parity color_matrix ./photo.png --matrix "1 0 0 0 0 1 0 0 0 0 1 0 0 0 0 1" --add "0.1 0 0 0"
"""

import enum

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
from pixel_parity.core.vectors import byte_to_unit_float, unit_float_clamped_to_ubyte
from pixel_parity.kernels._options import float_list

logger = get_logger(__name__)

kernel = Kernel(
    name='color_matrix',
    help='Multiply each vector by a 4x4 column-major matrix and add a vector.',
)

IDENTITY_MATRIX = np.array(
    [1.0, 0.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 0.0, 1.0],
    dtype=np.float32,
)

GREYSCALE_MATRIX = np.array(
    [0.299, 0.299, 0.299, 0.0, 0.587, 0.587, 0.587, 0.0, 0.114, 0.114, 0.114, 0.0, 0.0, 0.0, 0.0, 1.0],
    dtype=np.float32,
)

RGB_TO_YUV_MATRIX = np.array(
    [0.299, -0.14713, 0.615, 0.0, 0.587, -0.28886, -0.51499, 0.0, 0.114, 0.436, -0.10001, 0.0, 0.0, 0.0, 0.0, 1.0],
    dtype=np.float32,
)

YUV_TO_RGB_MATRIX = np.array(
    [1.0, 1.0, 1.0, 0.0, 0.0, -0.39465, 2.03211, 0.0, 1.13983, -0.5806, 0.0, 0.0, 0.0, 0.0, 0.0, 1.0],
    dtype=np.float32,
)


class ColorMatrixConversion(enum.Enum):
    IDENTITY = 'identity'
    GREYSCALE = 'greyscale'
    RGB_TO_YUV = 'rgb_to_yuv'
    YUV_TO_RGB = 'yuv_to_rgb'

    @property
    def matrix(self) -> np.ndarray:
        return _CONVERSION_MATRICES[self]


_CONVERSION_MATRICES = {
    ColorMatrixConversion.IDENTITY: IDENTITY_MATRIX,
    ColorMatrixConversion.GREYSCALE: GREYSCALE_MATRIX,
    ColorMatrixConversion.RGB_TO_YUV: RGB_TO_YUV_MATRIX,
    ColorMatrixConversion.YUV_TO_RGB: YUV_TO_RGB_MATRIX,
}


def multiply_and_add(matrix: np.ndarray, in_vector: np.ndarray, add_vector: np.ndarray) -> np.ndarray:
    """add + matrix * in, matrix column-major, accumulated in float32 in index order."""
    result = add_vector.astype(np.float32)
    for i in range(4):
        for j in range(4):
            result[i] += matrix[j * 4 + i] * in_vector[j]
    return result


def color_matrix(
    input_array,
    input_vector_size: int,
    size_x: int,
    size_y: int,
    output_vector_size: int,
    matrix,
    add_vector=(0.0, 0.0, 0.0, 0.0),
    restriction: Restriction | None = None,
) -> np.ndarray:
    """Apply the matrix to every cell in the restriction. Returns a new buffer of output_vector_size vectors."""
    check_vector_size(input_vector_size, 'Input vector size')
    check_vector_size(output_vector_size, 'Output vector size')
    check_dimensions(size_x, size_y)
    matrix = np.asarray(matrix, dtype=np.float32).reshape(-1)
    add_vector = np.asarray(add_vector, dtype=np.float32).reshape(-1)
    if len(matrix) != 16:
        raise InvalidArgument(f'Matrix should have 16 values. {len(matrix)} provided.')
    if len(add_vector) != 4:
        raise InvalidArgument(f'Add vector should have 4 values. {len(add_vector)} provided.')
    if restriction is not None:
        restriction.check(size_x, size_y)
    data = as_ubyte_array(input_array)
    check_buffer_length(data, input_vector_size, size_x, size_y)
    logger.debug(
        'color_matrix %dx%d vector %d -> %d %s', size_x, size_y, input_vector_size, output_vector_size, restriction
    )

    source = Vector2dArray(data, input_vector_size, size_x, size_y)
    output_values = np.zeros(size_x * size_y * padded_size(output_vector_size), dtype=np.uint8)
    output = Vector2dArray(output_values, output_vector_size, size_x, size_y)
    out_width = padded_size(output_vector_size)

    for x, y in output.cells(restriction):
        in_float = np.zeros(4, dtype=np.float32)
        in_float[:input_vector_size] = byte_to_unit_float(source.get_strict(x, y)[:input_vector_size])
        out_float = multiply_and_add(matrix, in_float, add_vector)
        output.set(x, y, unit_float_clamped_to_ubyte(out_float[:out_width]))
    return output_values


@kernel.arguments
def _arguments(parser) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        '--conversion',
        choices=[c.value for c in ColorMatrixConversion],
        help='Named conversion matrix (default: identity)',
    )
    group.add_argument('--matrix', type=float_list, help='16 floats, column-major')
    parser.add_argument('--add', type=float_list, default=[0.0, 0.0, 0.0, 0.0], help='4 floats added after multiply')
    parser.add_argument('--output-vector-size', type=int, help='Output vector size 1..4 (default: input vector size)')


@kernel.run
def run(buffer: PixelBuffer, restriction: Restriction | None, args) -> PixelBuffer:
    if args.matrix is not None:
        matrix = args.matrix
    else:
        matrix = ColorMatrixConversion(args.conversion or 'identity').matrix
    output_vector_size = args.output_vector_size or buffer.vector_size
    result = color_matrix(
        buffer.data,
        buffer.vector_size,
        buffer.size_x,
        buffer.size_y,
        output_vector_size,
        matrix,
        args.add,
        restriction,
    )
    return buffer.with_data(result, output_vector_size)
