"""3D lookup cube on RGBA buffers, with trilinear interpolation.

Each pixel's R, G and B select a point inside the cube:
base = in * (size - 1) / 255 per axis. The eight surrounding entries are
mixed along X, then Y, then Z. R, G and B of the result are rounded half up;
alpha is copied from the input pixel. Every axis of the cube needs at least
two entries.

Cubes for the CLI come from a raw RGBA file with --cube-size X Y Z, x
varying fastest. Without one an identity cube of --cube-size (default
16 16 16) is used.

Example:
    pixel-parity lut3d ./photo.png --cube grade.bin --cube-size 17 17 17 --toolkit tk.bin
"""

import numpy as np

from pixel_parity.core.arrays import Rgba3dArray, Vector2dArray, as_ubyte_array, check_buffer_length, check_dimensions
from pixel_parity.core.errors import InvalidArgument
from pixel_parity.core.logger import get_logger
from pixel_parity.core.random_data import identity_cube
from pixel_parity.core.types import Dimension, Kernel, PixelBuffer, Restriction
from pixel_parity.core.vectors import float_clamped_to_ubyte, int_floor, mix, vector_min
from pixel_parity.kernels._options import read_bytes

logger = get_logger(__name__)

kernel = Kernel(
    name='lut3d',
    help='3D lookup cube on RGBA buffers, trilinear, alpha kept.',
)


def _lookup(value: np.ndarray, cube: Rgba3dArray, max_index: np.ndarray) -> np.ndarray:
    base = value.astype(np.float32) * max_index.astype(np.float32) / np.float32(255.0)
    p1 = int_floor(base)
    p2 = vector_min(p1 + 1, max_index)
    fraction = (base - p1.astype(np.float32)).astype(np.float32)

    def corner(x: int, y: int, z: int) -> np.ndarray:
        return cube.get(x, y, z).astype(np.float32)

    yz00 = mix(corner(p1[0], p1[1], p1[2]), corner(p2[0], p1[1], p1[2]), fraction[0])
    yz10 = mix(corner(p1[0], p2[1], p1[2]), corner(p2[0], p2[1], p1[2]), fraction[0])
    yz01 = mix(corner(p1[0], p1[1], p2[2]), corner(p2[0], p1[1], p2[2]), fraction[0])
    yz11 = mix(corner(p1[0], p2[1], p2[2]), corner(p2[0], p2[1], p2[2]), fraction[0])

    z0 = mix(yz00, yz10, fraction[1])
    z1 = mix(yz01, yz11, fraction[1])
    v = mix(z0, z1, fraction[2])

    out = float_clamped_to_ubyte(v)
    out[3] = value[3]
    return out


def lut3d(
    input_array,
    size_x: int,
    size_y: int,
    cube: Rgba3dArray,
    restriction: Restriction | None = None,
) -> np.ndarray:
    """Map every RGBA cell in the restriction through the cube. Returns a new buffer."""
    check_dimensions(size_x, size_y)
    dimension = cube.dimension
    if min(dimension.size_x, dimension.size_y, dimension.size_z) < 2:
        raise InvalidArgument(
            f'Each cube dimension should be at least 2. '
            f'{dimension.size_x}x{dimension.size_y}x{dimension.size_z} provided.'
        )
    if restriction is not None:
        restriction.check(size_x, size_y)
    data = as_ubyte_array(input_array)
    check_buffer_length(data, 4, size_x, size_y)
    logger.debug(
        'lut3d %dx%d cube %dx%dx%d %s',
        size_x,
        size_y,
        dimension.size_x,
        dimension.size_y,
        dimension.size_z,
        restriction,
    )

    max_index = np.array([dimension.size_x - 1, dimension.size_y - 1, dimension.size_z - 1, 0], dtype=np.int64)
    source = Vector2dArray(data, 4, size_x, size_y)
    output = source.create_same_sized()
    for x, y in output.cells(restriction):
        output.set(x, y, _lookup(source.get_strict(x, y), cube, max_index))
    return output.values


@kernel.arguments
def _arguments(parser) -> None:
    parser.add_argument('--cube', help='Raw RGBA cube file, x varying fastest')
    parser.add_argument(
        '--cube-size',
        type=int,
        nargs=3,
        metavar=('X', 'Y', 'Z'),
        default=[16, 16, 16],
        help='Cube dimensions (default: 16 16 16)',
    )


@kernel.run
def run(buffer: PixelBuffer, restriction: Restriction | None, args) -> PixelBuffer:
    if buffer.vector_size != 4:
        raise InvalidArgument(f'lut3d needs vector size 4. {buffer.vector_size} provided.')
    dimension = Dimension(*args.cube_size)
    if args.cube:
        expected = dimension.size_x * dimension.size_y * dimension.size_z * 4
        cube = Rgba3dArray.from_dimension(read_bytes(args.cube, expected).copy(), dimension)
    else:
        cube = identity_cube(dimension)
    return buffer.with_data(lut3d(buffer.data, buffer.size_x, buffer.size_y, cube, restriction))
