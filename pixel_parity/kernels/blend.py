"""Blend a source RGBA buffer into a destination buffer, Porter-Duff style.

Both buffers are RGBA (vector size 4) and the same size. The destination is
modified in place, inside the restriction only, and also returned. Channel
arithmetic treats 0..255 as 0.0..1.0: sums clamp, products shift right by 8.

Modes (s = source, d = destination):
  clear      0
  src        s
  dst        d (the destination is left untouched)
  src_over   s + d * (255 - s.a)          dst_over   operands swapped
  src_in     s * d.a                      dst_in     operands swapped
  src_out    s * (255 - d.a)              dst_out    operands swapped
  src_atop   s * d.a + d * (255 - s.a),   alpha = d.a
  dst_atop   operands swapped
  xor        s ^ d
  multiply   s * d
  add        d + s
  subtract   d - s

Example:
    pixel-parity blend ./dst.png --source ./src.png --mode src_over --out ref.bin
"""

from collections.abc import Callable

import numpy as np

from pixel_parity.core.arrays import Rgba2dArray, as_ubyte_array, check_buffer_length, check_dimensions
from pixel_parity.core.imaging import load_buffer
from pixel_parity.core.logger import get_logger
from pixel_parity.core.types import BlendingMode, Kernel, PixelBuffer, Restriction
from pixel_parity.core.vectors import Rgba

logger = get_logger(__name__)

kernel = Kernel(
    name='blend',
    help='Blend a source RGBA image into the input (the destination) with one of 15 modes.',
)


def _over(src: Rgba, dst: Rgba) -> Rgba:
    return src + dst * (255 - src.a)


def _in(src: Rgba, dst: Rgba) -> Rgba:
    return src * dst.a


def _out(src: Rgba, dst: Rgba) -> Rgba:
    return src * (255 - dst.a)


def _atop(src: Rgba, dst: Rgba) -> Rgba:
    return (src * dst.a + dst * (255 - src.a)).with_alpha(dst.a)


# None means the destination already holds the result
_BLEND_FUNCTIONS: dict[BlendingMode, Callable[[Rgba, Rgba], Rgba] | None] = {
    BlendingMode.CLEAR: lambda src, dst: Rgba(0, 0, 0, 0),
    BlendingMode.SRC: lambda src, dst: src,
    BlendingMode.DST: None,
    BlendingMode.SRC_OVER: _over,
    BlendingMode.DST_OVER: lambda src, dst: _over(dst, src),
    BlendingMode.SRC_IN: _in,
    BlendingMode.DST_IN: lambda src, dst: _in(dst, src),
    BlendingMode.SRC_OUT: _out,
    BlendingMode.DST_OUT: lambda src, dst: _out(dst, src),
    BlendingMode.SRC_ATOP: _atop,
    BlendingMode.DST_ATOP: lambda src, dst: _atop(dst, src),
    BlendingMode.XOR: lambda src, dst: src ^ dst,
    BlendingMode.MULTIPLY: lambda src, dst: src * dst,
    BlendingMode.ADD: lambda src, dst: dst + src,
    BlendingMode.SUBTRACT: lambda src, dst: dst - src,
}


def blend(
    mode: BlendingMode | str,
    source,
    dest,
    size_x: int,
    size_y: int,
    restriction: Restriction | None = None,
) -> np.ndarray:
    """Blend source into dest. Returns the result; a writable numpy array or bytearray dest also holds it."""
    mode = BlendingMode(mode)
    check_dimensions(size_x, size_y)
    if restriction is not None:
        restriction.check(size_x, size_y)
    src_values = as_ubyte_array(source)
    dst_values = as_ubyte_array(dest)
    check_buffer_length(src_values, 4, size_x, size_y, 'Source')
    check_buffer_length(dst_values, 4, size_x, size_y, 'Destination')
    logger.debug('blend %s %dx%d %s', mode.name, size_x, size_y, restriction)

    if not dst_values.flags.writeable:
        dst_values = dst_values.copy()
    blend_function = _BLEND_FUNCTIONS[mode]
    if blend_function is None:
        return dst_values
    # A strided view or a wider dtype came back as a copy; the result is written back at the end
    write_back = isinstance(dest, np.ndarray) and dest.flags.writeable and not np.shares_memory(dest, dst_values)

    src = Rgba2dArray(src_values, size_x, size_y)
    dst = Rgba2dArray(dst_values, size_x, size_y)

    def blend_one(x: int, y: int) -> None:
        dst.set(x, y, blend_function(src.get(x, y), dst.get(x, y)))

    dst.for_each(restriction, blend_one)
    if write_back:
        dest[...] = dst_values.reshape(dest.shape)
    return dst_values


@kernel.arguments
def _arguments(parser) -> None:
    parser.add_argument('--source', required=True, help='Source image or raw RGBA file (same size as input)')
    parser.add_argument(
        '--mode',
        choices=[m.value for m in BlendingMode],
        default=BlendingMode.SRC_OVER.value,
        help='Blending mode (default: src_over)',
    )


@kernel.run
def run(buffer: PixelBuffer, restriction: Restriction | None, args) -> PixelBuffer:
    source = load_buffer(args.source, size=(buffer.size_x, buffer.size_y), vector_size=4)
    # blend writes into dest
    dest = buffer.data.copy()
    return buffer.with_data(blend(args.mode, source.data, dest, buffer.size_x, buffer.size_y, restriction))
