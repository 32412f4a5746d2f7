"""Per-channel lookup table on RGBA buffers.

Each output channel is its own 256-entry table indexed by the same input
channel: out.r = red[in.r], out.g = green[in.g] and so on.

Tables for the CLI come from a 1024-byte file laid out red, green, blue,
alpha; without one the identity table is used. --invert swaps in a
table that inverts R, G and B and keeps alpha.

Example:
    pixel-parity lut ./photo.png --invert --out inverted.bin
    pixel-parity lut ./photo.png --table curves.bin --intrinsic device.bin
"""

import numpy as np

from pixel_parity.core.arrays import Vector2dArray, as_ubyte_array, check_buffer_length, check_dimensions
from pixel_parity.core.errors import InvalidArgument
from pixel_parity.core.logger import get_logger
from pixel_parity.core.types import Kernel, LookupTable, PixelBuffer, Restriction
from pixel_parity.kernels._options import read_bytes

logger = get_logger(__name__)

kernel = Kernel(
    name='lut',
    help='Per-channel 256-entry lookup table on RGBA buffers.',
)


def _channel_tables(table: LookupTable) -> list[np.ndarray]:
    tables = []
    for name in ('red', 'green', 'blue', 'alpha'):
        channel = as_ubyte_array(getattr(table, name))
        if len(channel) != 256:
            raise InvalidArgument(f'The {name} table should have 256 entries. {len(channel)} provided.')
        tables.append(channel)
    return tables


def lut(
    input_array,
    size_x: int,
    size_y: int,
    table: LookupTable,
    restriction: Restriction | None = None,
) -> np.ndarray:
    """Map every RGBA cell in the restriction through the table. Returns a new buffer."""
    check_dimensions(size_x, size_y)
    tables = _channel_tables(table)
    if restriction is not None:
        restriction.check(size_x, size_y)
    data = as_ubyte_array(input_array)
    check_buffer_length(data, 4, size_x, size_y)
    logger.debug('lut %dx%d %s', size_x, size_y, restriction)

    source = Vector2dArray(data, 4, size_x, size_y)
    output = source.create_same_sized()
    for x, y in output.cells(restriction):
        old = source.get_strict(x, y)
        output.set(x, y, np.array([tables[k][old[k]] for k in range(4)], dtype=np.uint8))
    return output.values


def inverting_table() -> LookupTable:
    inverted = np.arange(255, -1, -1, dtype=np.uint8)
    return LookupTable(red=inverted, green=inverted.copy(), blue=inverted.copy())


def load_table(path: str) -> LookupTable:
    """Read a 1024-byte red, green, blue, alpha table file."""
    data = read_bytes(path, expected=1024)
    return LookupTable(
        red=data[0:256].copy(),
        green=data[256:512].copy(),
        blue=data[512:768].copy(),
        alpha=data[768:1024].copy(),
    )


@kernel.arguments
def _arguments(parser) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--table', help='1024-byte table file: red, green, blue, alpha')
    group.add_argument('--invert', action='store_true', help='Invert R, G and B, keep alpha')


@kernel.run
def run(buffer: PixelBuffer, restriction: Restriction | None, args) -> PixelBuffer:
    if buffer.vector_size != 4:
        raise InvalidArgument(f'lut needs vector size 4. {buffer.vector_size} provided.')
    if args.table:
        table = load_table(args.table)
    elif args.invert:
        table = inverting_table()
    else:
        table = LookupTable()
    return buffer.with_data(lut(buffer.data, buffer.size_x, buffer.size_y, table, restriction))
