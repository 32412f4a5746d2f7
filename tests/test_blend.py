"""Tests for pixel_parity.kernels.blend."""

import numpy as np
import pytest

from pixel_parity.core.errors import InvalidArgument, SizeMismatch
from pixel_parity.core.random_data import random_byte_array
from pixel_parity.core.types import BlendingMode, Restriction
from pixel_parity.kernels.blend import blend


def _pixel(r, g, b, a):
    return np.array([r, g, b, a], dtype=np.uint8)


class TestModes:
    def test_dst_leaves_destination(self):
        src = random_byte_array(1, 3, 4, 4)
        dst = random_byte_array(2, 3, 4, 4)
        before = dst.copy()
        out = blend(BlendingMode.DST, src, dst, 3, 4)
        assert np.array_equal(out, before)
        assert np.array_equal(dst, before)

    def test_clear_zeroes(self):
        dst = random_byte_array(2, 3, 4, 4)
        blend(BlendingMode.CLEAR, random_byte_array(1, 3, 4, 4), dst, 3, 4)
        assert not dst.any()

    def test_src_copies_source(self):
        src = random_byte_array(1, 3, 4, 4)
        dst = random_byte_array(2, 3, 4, 4)
        blend('src', src, dst, 3, 4)
        assert np.array_equal(dst, src)

    def test_src_over(self):
        dst = _pixel(0, 200, 0, 255)
        blend(BlendingMode.SRC_OVER, _pixel(100, 0, 0, 128), dst, 1, 1)
        # dst * (255 - 128) >> 8 = (0, 99, 0, 126), plus src, clamped
        assert dst.tolist() == [100, 99, 0, 254]

    def test_dst_over_swaps_operands(self):
        dst = _pixel(100, 0, 0, 128)
        blend(BlendingMode.DST_OVER, _pixel(0, 200, 0, 255), dst, 1, 1)
        assert dst.tolist() == [100, 99, 0, 254]

    def test_opaque_src_over_is_source(self):
        dst = _pixel(7, 8, 9, 10)
        blend(BlendingMode.SRC_OVER, _pixel(50, 60, 70, 255), dst, 1, 1)
        assert dst.tolist() == [50, 60, 70, 255]

    def test_src_in(self):
        dst = _pixel(0, 0, 0, 128)
        blend(BlendingMode.SRC_IN, _pixel(200, 100, 255, 255), dst, 1, 1)
        assert dst.tolist() == [100, 50, 127, 127]

    def test_src_out(self):
        dst = _pixel(0, 0, 0, 255)
        blend(BlendingMode.SRC_OUT, _pixel(200, 100, 255, 255), dst, 1, 1)
        assert dst.tolist() == [0, 0, 0, 0]

    def test_src_atop_keeps_dst_alpha(self):
        dst = _pixel(10, 20, 30, 77)
        blend(BlendingMode.SRC_ATOP, _pixel(200, 100, 50, 0), dst, 1, 1)
        assert dst[3] == 77

    def test_xor(self):
        dst = _pixel(3, 2, 1, 0)
        blend(BlendingMode.XOR, _pixel(1, 2, 3, 4), dst, 1, 1)
        assert dst.tolist() == [2, 0, 2, 4]

    def test_multiply(self):
        dst = _pixel(255, 128, 0, 255)
        blend(BlendingMode.MULTIPLY, _pixel(255, 255, 255, 128), dst, 1, 1)
        assert dst.tolist() == [254, 127, 0, 127]

    def test_add_clamps(self):
        dst = _pixel(200, 1, 0, 0)
        blend(BlendingMode.ADD, _pixel(100, 1, 0, 0), dst, 1, 1)
        assert dst.tolist() == [255, 2, 0, 0]

    def test_subtract_is_dst_minus_src(self):
        dst = _pixel(50, 10, 0, 0)
        blend(BlendingMode.SUBTRACT, _pixel(20, 30, 0, 0), dst, 1, 1)
        assert dst.tolist() == [30, 0, 0, 0]

    def test_every_mode_runs(self):
        for mode in BlendingMode:
            dst = random_byte_array(2, 3, 4, 4)
            out = blend(mode, random_byte_array(1, 3, 4, 4), dst, 3, 4)
            assert out.shape == (48,)


class TestRestrictionAndBuffers:
    def test_outside_restriction_untouched(self):
        src = np.full(3 * 4 * 4, 200, dtype=np.uint8)
        dst = random_byte_array(2, 3, 4, 4)
        before = dst.copy()
        restriction = Restriction(2, 3, 1, 4)
        blend(BlendingMode.CLEAR, src, dst, 3, 4, restriction)
        for y in range(4):
            for x in range(3):
                i = (y * 3 + x) * 4
                if 2 <= x < 3 and 1 <= y < 4:
                    assert not dst[i : i + 4].any()
                else:
                    assert dst[i : i + 4].tolist() == before[i : i + 4].tolist()

    def test_read_only_destination_is_copied(self):
        dst = bytes(4)
        out = blend(BlendingMode.SRC, _pixel(1, 2, 3, 4), dst, 1, 1)
        assert out.tolist() == [1, 2, 3, 4]
        assert dst == bytes(4)

    def test_strided_destination_written_in_place(self):
        dst = np.zeros((2, 8), dtype=np.uint8)[:, :4]
        out = blend(BlendingMode.SRC, np.full(8, 200, dtype=np.uint8), dst, 2, 1)
        assert out.tolist() == [200] * 8
        assert dst.tolist() == [[200] * 4, [200] * 4]

    def test_wide_dtype_destination_written_in_place(self):
        dst = np.array([10, 20, 30, 255], dtype=np.int64)
        blend(BlendingMode.SRC_OVER, _pixel(0, 0, 0, 0), dst, 1, 1)
        assert dst.dtype == np.int64
        assert dst.tolist() == [9, 19, 29, 254]

    def test_restricted_write_back_keeps_other_cells(self):
        dst = np.zeros((2, 8), dtype=np.uint8)[:, :4]
        blend(BlendingMode.SRC, np.full(8, 7, dtype=np.uint8), dst, 2, 1, Restriction(1, 2, 0, 1))
        assert dst.tolist() == [[0] * 4, [7] * 4]

    def test_bytearray_destination_written_in_place(self):
        dst = bytearray(4)
        blend(BlendingMode.SRC, _pixel(5, 6, 7, 8), dst, 1, 1)
        assert dst == bytearray([5, 6, 7, 8])

    def test_size_mismatch(self):
        with pytest.raises(SizeMismatch):
            blend(BlendingMode.SRC, np.zeros(8, dtype=np.uint8), np.zeros(4, dtype=np.uint8), 1, 1)

    def test_bad_restriction(self):
        with pytest.raises(InvalidArgument):
            blend(BlendingMode.SRC, _pixel(0, 0, 0, 0), _pixel(0, 0, 0, 0), 1, 1, Restriction(0, 2, 0, 1))

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            blend('burn', _pixel(0, 0, 0, 0), _pixel(0, 0, 0, 0), 1, 1)
