"""Tests for pixel_parity.kernels.lut and pixel_parity.kernels.lut3d."""

from pathlib import Path

import numpy as np
import pytest

from pixel_parity.core.arrays import Rgba3dArray
from pixel_parity.core.errors import InvalidArgument, SizeMismatch
from pixel_parity.core.random_data import identity_cube, random_byte_array, random_cube
from pixel_parity.core.types import Dimension, LookupTable, Restriction
from pixel_parity.kernels.lut import inverting_table, load_table, lut
from pixel_parity.kernels.lut3d import lut3d


class TestLut:
    def test_identity_is_exact(self):
        data = random_byte_array(11, 16, 10, 4)
        assert np.array_equal(lut(data, 16, 10, LookupTable()), data)

    def test_each_channel_uses_its_own_table(self):
        table = LookupTable(
            red=np.full(256, 1, dtype=np.uint8),
            green=np.full(256, 2, dtype=np.uint8),
            blue=np.full(256, 3, dtype=np.uint8),
            alpha=np.full(256, 4, dtype=np.uint8),
        )
        out = lut(np.array([10, 20, 30, 40], dtype=np.uint8), 1, 1, table)
        assert out.tolist() == [1, 2, 3, 4]

    def test_inverting_table(self):
        out = lut(np.array([0, 100, 255, 77], dtype=np.uint8), 1, 1, inverting_table())
        assert out.tolist() == [255, 155, 0, 77]

    def test_restriction(self):
        data = np.full(2 * 1 * 4, 9, dtype=np.uint8)
        out = lut(data, 2, 1, LookupTable(), Restriction(1, 2, 0, 1))
        assert out.tolist() == [0, 0, 0, 0, 9, 9, 9, 9]

    def test_short_table(self):
        with pytest.raises(InvalidArgument, match='256 entries'):
            lut(np.zeros(4, dtype=np.uint8), 1, 1, LookupTable(red=np.arange(10, dtype=np.uint8)))

    def test_load_table(self, tmp_path: Path):
        path = tmp_path / 'table.bin'
        path.write_bytes(bytes(range(256)) * 3 + bytes([7]) * 256)
        table = load_table(str(path))
        assert table.red.tolist() == list(range(256))
        assert set(table.alpha.tolist()) == {7}

    def test_load_table_wrong_size(self, tmp_path: Path):
        path = tmp_path / 'table.bin'
        path.write_bytes(bytes(100))
        with pytest.raises(InvalidArgument):
            load_table(str(path))


class TestLut3d:
    def test_identity_cube_within_one(self):
        data = random_byte_array(12, 16, 10, 4)
        out = lut3d(data, 16, 10, identity_cube(Dimension(16, 16, 16)))
        deltas = np.abs(out.astype(int) - data.astype(int))
        assert deltas.max() <= 1
        assert np.array_equal(out[3::4], data[3::4])

    def test_constant_cube(self):
        values = np.tile(np.array([10, 20, 30, 40], dtype=np.uint8), 2 * 2 * 2)
        cube = Rgba3dArray(values, 2, 2, 2)
        out = lut3d(np.array([1, 128, 250, 99], dtype=np.uint8), 1, 1, cube)
        assert out.tolist() == [10, 20, 30, 99]

    def test_corner_lookup_is_exact(self):
        cube = random_cube(5, Dimension(3, 4, 5))
        out = lut3d(np.array([255, 255, 255, 1], dtype=np.uint8), 1, 1, cube)
        assert out[:3].tolist() == cube.get(2, 3, 4)[:3].tolist()
        assert out[3] == 1

    def test_halfway_mixes(self):
        values = np.zeros(2 * 2 * 2 * 4, dtype=np.uint8)
        cube = Rgba3dArray(values, 2, 2, 2)
        cube.set(1, 0, 0, [200, 0, 0, 0])
        # base.x = 102 / 255 = 0.4 along X, nothing along Y and Z
        out = lut3d(np.array([102, 0, 0, 0], dtype=np.uint8), 1, 1, cube)
        assert out.tolist() == [80, 0, 0, 0]

    def test_restriction(self):
        data = random_byte_array(1, 3, 4, 4)
        out = lut3d(data, 3, 4, identity_cube(Dimension(2, 2, 2)), Restriction(0, 1, 0, 3))
        cells = out.reshape(4, 3, 4)
        assert not cells[:, 1:].any()
        assert not cells[3].any()

    def test_axis_too_small(self):
        cube = Rgba3dArray(np.zeros(1 * 2 * 2 * 4, dtype=np.uint8), 1, 2, 2)
        with pytest.raises(InvalidArgument, match='at least 2'):
            lut3d(np.zeros(4, dtype=np.uint8), 1, 1, cube)

    def test_cube_length(self):
        with pytest.raises(SizeMismatch):
            Rgba3dArray(np.zeros(31, dtype=np.uint8), 2, 2, 2)
