"""YUV 4:2:0 to RGBA conversion, BT.601 integer math.

Supported layouts:
  nv21  Y plane, then interleaved V/U pairs at full width, one row per two luma rows
  yv12  Y plane with rows padded to a multiple of 16, then the U plane and
        the V plane, their rows padded to a multiple of 16 of half that stride

Per pixel, with Y' = Y - 16, U' = U - 128, V' = V - 128:
  R = (298 Y' + 409 V' + 128) >> 8
  G = (298 Y' - 100 U' - 208 V' + 128) >> 8
  B = (298 Y' + 516 U' + 128) >> 8
each clamped to 0..255; alpha is always 255.

The width must be even. YV12 luma is read at y * width + x, ignoring the
padded stride, which is how the intrinsic reads it too. For widths that are
not a multiple of 32 the intrinsic disagrees anyway.

Output is always RGBA, vector size 4.

Example:
    pixel-parity yuv_to_rgb ./frame.yuv --size 640 480 --format nv21 --intrinsic device.bin
"""

import numpy as np

from pixel_parity.core.arrays import (
    Vector2dArray,
    as_ubyte_array,
    check_dimensions,
    round_up_to_16,
    yuv_buffer_size,
)
from pixel_parity.core.errors import InvalidArgument, SizeMismatch
from pixel_parity.core.logger import get_logger
from pixel_parity.core.types import Kernel, PixelBuffer, Restriction, YuvFormat
from pixel_parity.core.vectors import clamp_to_ubyte_range

logger = get_logger(__name__)

kernel = Kernel(
    name='yuv_to_rgb',
    help='Convert an NV21 or YV12 buffer to RGBA. The input is a raw file and needs --size.',
    raw_input=True,
)


def yuv_to_rgba(y: int, u: int, v: int) -> np.ndarray:
    """One pixel's RGBA from its Y, U and V bytes."""
    int_y = y - 16
    int_u = u - 128
    int_v = v - 128
    return np.array(
        [
            clamp_to_ubyte_range((int_y * 298 + int_v * 409 + 128) >> 8),
            clamp_to_ubyte_range((int_y * 298 - int_u * 100 - int_v * 208 + 128) >> 8),
            clamp_to_ubyte_range((int_y * 298 + int_u * 516 + 128) >> 8),
            255,
        ],
        dtype=np.uint8,
    )


def _plane_offsets(size_x: int, size_y: int, yuv_format: YuvFormat):
    """(start_u, start_v, chroma offset function) for the layout."""
    if yuv_format is YuvFormat.NV21:
        start_v = size_x * size_y

        def chroma_offset(x: int, y: int) -> int:
            return (y >> 1) * size_x + (x >> 1) * 2

        return start_v + 1, start_v, chroma_offset

    stride_x = round_up_to_16(size_x)
    stride_uv = round_up_to_16(stride_x // 2)
    start_u = stride_x * size_y
    start_v = start_u + stride_uv * size_y // 2

    def chroma_offset(x: int, y: int) -> int:
        return (y >> 1) * stride_uv + (x >> 1)

    return start_u, start_v, chroma_offset


def yuv_to_rgb(input_array, size_x: int, size_y: int, yuv_format: YuvFormat | str) -> np.ndarray:
    """Convert a whole YUV buffer. Returns a new RGBA buffer of size_x * size_y * 4 bytes."""
    yuv_format = YuvFormat(yuv_format)
    check_dimensions(size_x, size_y)
    if size_x % 2 != 0:
        raise InvalidArgument(f'The width of the input should be even. {size_x} provided.')
    data = as_ubyte_array(input_array)
    needed = yuv_buffer_size(size_x, size_y, yuv_format)
    if len(data) < needed:
        raise SizeMismatch(
            f'{yuv_format.name} input has {len(data)} bytes, {size_x}x{size_y} needs {needed}',
            expected=needed,
            actual=len(data),
        )
    logger.debug('yuv_to_rgb %s %dx%d', yuv_format.name, size_x, size_y)

    start_u, start_v, chroma_offset = _plane_offsets(size_x, size_y, yuv_format)
    output_values = np.zeros(size_x * size_y * 4, dtype=np.uint8)
    output = Vector2dArray(output_values, 4, size_x, size_y)
    for x, y in output.cells(None):
        offset_uv = chroma_offset(x, y)
        output.set(
            x,
            y,
            yuv_to_rgba(int(data[y * size_x + x]), int(data[start_u + offset_uv]), int(data[start_v + offset_uv])),
        )
    return output_values


@kernel.arguments
def _arguments(parser) -> None:
    parser.add_argument(
        '--format',
        dest='yuv_format',
        choices=[f.value for f in YuvFormat],
        default=YuvFormat.NV21.value,
        help='YUV layout (default: nv21)',
    )


@kernel.run
def run(buffer: PixelBuffer, restriction: Restriction | None, args) -> PixelBuffer:
    if restriction is not None:
        raise InvalidArgument('yuv_to_rgb always converts the whole frame; drop --restriction')
    result = yuv_to_rgb(buffer.data, buffer.size_x, buffer.size_y, args.yuv_format)
    return buffer.with_data(result, 4)
