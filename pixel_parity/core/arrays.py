"""Strided 2D arrays of small vectors, and the 3D RGBA lookup cube.

All arrays are row-major views over a flat numpy buffer. Vectors of size 3
occupy 4 components: the RenderScript intrinsics never dropped the padding,
and buffers produced by them must line up with ours byte for byte.

Each array offers two read contracts, picked per call:
  get_strict(x, y)   raises OutOfBounds outside the extent
  get_clamped(x, y)  replicates the nearest border cell
"""

from __future__ import annotations

from collections.abc import Callable, Iterator

import numpy as np

from pixel_parity.core.errors import InvalidArgument, OutOfBounds, SizeMismatch
from pixel_parity.core.types import Dimension, Restriction, YuvFormat
from pixel_parity.core.vectors import Rgba


def padded_size(vector_size: int) -> int:
    """Stored component count for a vector: 3 is stored as 4."""
    return 4 if vector_size == 3 else vector_size


def check_vector_size(vector_size: int, what: str = 'Vector size') -> None:
    if vector_size not in (1, 2, 3, 4):
        raise InvalidArgument(f'{what} should be between 1 and 4. {vector_size} provided.')


def check_dimensions(size_x: int, size_y: int) -> None:
    if size_x < 1 or size_y < 1:
        raise InvalidArgument(f'Dimensions should be at least 1x1. {size_x}x{size_y} provided.')


def as_ubyte_array(data) -> np.ndarray:
    """View (or convert) any byte-like input as a flat uint8 array.

    int8 arrays are reinterpreted, so -1 reads as 255. Writable inputs stay
    writable views; bytes become a read-only view.
    """
    if isinstance(data, (bytes, bytearray, memoryview)):
        return np.frombuffer(data, dtype=np.uint8)
    arr = np.asarray(data)
    if arr.dtype == np.uint8:
        return arr.reshape(-1)
    if arr.dtype == np.int8:
        return arr.reshape(-1).view(np.uint8)
    if arr.size and (not np.issubdtype(arr.dtype, np.integer) or arr.min() < 0 or arr.max() > 255):
        raise InvalidArgument('Byte buffers must hold integers in 0..255')
    return arr.astype(np.uint8).reshape(-1)


def check_buffer_length(data: np.ndarray, vector_size: int, size_x: int, size_y: int, what: str = 'Input') -> None:
    expected = size_x * size_y * padded_size(vector_size)
    if len(data) != expected:
        raise SizeMismatch(
            f'{what} has {len(data)} bytes, expected {expected} for {size_x}x{size_y} vectors of size {vector_size}',
            expected=expected,
            actual=len(data),
        )


def cells(size_x: int, size_y: int, restriction: Restriction | None) -> Iterator[tuple[int, int]]:
    """Yield (x, y) row-major inside the restriction, or the full extent when there is none."""
    start_x = restriction.start_x if restriction else 0
    start_y = restriction.start_y if restriction else 0
    end_x = restriction.end_x if restriction else size_x
    end_y = restriction.end_y if restriction else size_y
    for y in range(start_y, end_y):
        for x in range(start_x, end_x):
            yield x, y


def for_each_cell(size_x: int, size_y: int, restriction: Restriction | None, work: Callable[[int, int], None]) -> None:
    for x, y in cells(size_x, size_y, restriction):
        work(x, y)


class _Strided2d:
    values: np.ndarray
    vector_size: int
    size_x: int
    size_y: int

    def _index(self, x: int, y: int) -> int:
        if not (0 <= x < self.size_x and 0 <= y < self.size_y):
            raise OutOfBounds(x, y, self.size_x, self.size_y)
        return (y * self.size_x + x) * padded_size(self.vector_size)

    def _clamp(self, x: int, y: int) -> tuple[int, int]:
        return min(max(x, 0), self.size_x - 1), min(max(y, 0), self.size_y - 1)

    def cells(self, restriction: Restriction | None) -> Iterator[tuple[int, int]]:
        return cells(self.size_x, self.size_y, restriction)

    def for_each(self, restriction: Restriction | None, work: Callable[[int, int], None]) -> None:
        for_each_cell(self.size_x, self.size_y, restriction, work)


class Vector2dArray(_Strided2d):
    """A 2D array of uint8 vectors."""

    def __init__(self, values: np.ndarray, vector_size: int, size_x: int, size_y: int):
        check_buffer_length(values, vector_size, size_x, size_y)
        self.values = values
        self.vector_size = vector_size
        self.size_x = size_x
        self.size_y = size_y

    def get_strict(self, x: int, y: int) -> np.ndarray:
        start = self._index(x, y)
        return self.values[start : start + padded_size(self.vector_size)].copy()

    def get_clamped(self, x: int, y: int) -> np.ndarray:
        return self.get_strict(*self._clamp(x, y))

    def set(self, x: int, y: int, value: np.ndarray) -> None:
        width = padded_size(self.vector_size)
        if len(value) != width:
            raise InvalidArgument(f'Not the expected vector size: {len(value)} != {width}')
        start = self._index(x, y)
        self.values[start : start + width] = value

    def create_same_sized(self) -> Vector2dArray:
        return Vector2dArray(np.zeros_like(self.values), self.vector_size, self.size_x, self.size_y)


class FloatVector2dArray(_Strided2d):
    """A 2D array of float32 vectors.

    Reads return vector_size components, not the padded width, so the padding
    slot of a 3-vector is never written.
    """

    def __init__(self, values: np.ndarray, vector_size: int, size_x: int, size_y: int):
        check_buffer_length(values, vector_size, size_x, size_y)
        self.values = values
        self.vector_size = vector_size
        self.size_x = size_x
        self.size_y = size_y

    def get_strict(self, x: int, y: int) -> np.ndarray:
        start = self._index(x, y)
        return self.values[start : start + self.vector_size].copy()

    def get_clamped(self, x: int, y: int) -> np.ndarray:
        return self.get_strict(*self._clamp(x, y))

    def set(self, x: int, y: int, value: np.ndarray) -> None:
        start = self._index(x, y)
        self.values[start : start + len(value)] = value

    def create_same_sized(self) -> FloatVector2dArray:
        return FloatVector2dArray(np.zeros_like(self.values), self.vector_size, self.size_x, self.size_y)


class Rgba2dArray(_Strided2d):
    """A 2D array of RGBA pixels read and written as Rgba values."""

    vector_size = 4

    def __init__(self, values: np.ndarray, size_x: int, size_y: int):
        check_buffer_length(values, 4, size_x, size_y)
        self.values = values
        self.size_x = size_x
        self.size_y = size_y

    def get(self, x: int, y: int) -> Rgba:
        i = self._index(x, y)
        r, g, b, a = (int(v) for v in self.values[i : i + 4])
        return Rgba(r, g, b, a)

    def set(self, x: int, y: int, value: Rgba) -> None:
        channels = value.as_tuple()
        if any(c < 0 or c > 255 for c in channels):
            raise InvalidArgument(f'RGBA channels must be in 0..255, got {channels}')
        i = self._index(x, y)
        self.values[i : i + 4] = channels


class Rgba3dArray:
    """A lookup cube of RGBA bytes addressed by (x, y, z), x varying fastest."""

    def __init__(self, values, size_x: int, size_y: int, size_z: int):
        values = as_ubyte_array(values)
        expected = size_x * size_y * size_z * 4
        if len(values) != expected:
            raise SizeMismatch(
                f'Cube has {len(values)} bytes, expected {expected} for {size_x}x{size_y}x{size_z}',
                expected=expected,
                actual=len(values),
            )
        self.values = values
        self.size_x = size_x
        self.size_y = size_y
        self.size_z = size_z

    @classmethod
    def from_dimension(cls, values, dimension: Dimension) -> Rgba3dArray:
        return cls(values, dimension.size_x, dimension.size_y, dimension.size_z)

    @property
    def dimension(self) -> Dimension:
        return Dimension(self.size_x, self.size_y, self.size_z)

    def _index(self, x: int, y: int, z: int) -> int:
        if not (0 <= x < self.size_x and 0 <= y < self.size_y and 0 <= z < self.size_z):
            raise OutOfBounds(x, y, self.size_x, self.size_y)
        return ((z * self.size_y + y) * self.size_x + x) * 4

    def get(self, x: int, y: int, z: int) -> np.ndarray:
        i = self._index(x, y, z)
        return self.values[i : i + 4].copy()

    def set(self, x: int, y: int, z: int, value) -> None:
        i = self._index(x, y, z)
        self.values[i : i + 4] = value


def round_up_to_16(value: int) -> int:
    if value < 0:
        raise InvalidArgument(f'Cannot round up a negative value: {value}')
    return (value + 15) & ~15


def yuv_buffer_size(size_x: int, size_y: int, yuv_format: YuvFormat) -> int:
    """Bytes a YUV buffer of this size needs: the luma plane plus both chroma planes.

    NV21 interleaves V and U at full width below the luma plane. YV12 pads the
    luma rows to a multiple of 16 and each chroma row to a multiple of 16 of
    half that stride, V plane after U.
    """
    yuv_format = YuvFormat(yuv_format)
    check_dimensions(size_x, size_y)
    chroma_rows = (size_y + 1) // 2
    if yuv_format is YuvFormat.NV21:
        return size_x * size_y + size_x * chroma_rows
    stride_x = round_up_to_16(size_x)
    stride_uv = round_up_to_16(stride_x // 2)
    return stride_x * size_y + stride_uv * size_y // 2 + stride_uv * chroma_rows
