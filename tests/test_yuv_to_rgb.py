"""Tests for pixel_parity.kernels.yuv_to_rgb."""

import numpy as np
import pytest

from pixel_parity.core.arrays import yuv_buffer_size
from pixel_parity.core.errors import InvalidArgument, SizeMismatch
from pixel_parity.core.random_data import random_yuv_array
from pixel_parity.core.types import YuvFormat
from pixel_parity.kernels.yuv_to_rgb import yuv_to_rgb, yuv_to_rgba


def _nv21(size_x, size_y, y, u, v):
    data = np.full(yuv_buffer_size(size_x, size_y, YuvFormat.NV21), y, dtype=np.uint8)
    chroma = data[size_x * size_y :]
    chroma[0::2] = v
    chroma[1::2] = u
    return data


class TestYuvToRgba:
    def test_white(self):
        assert yuv_to_rgba(235, 128, 128).tolist() == [255, 255, 255, 255]

    def test_black(self):
        assert yuv_to_rgba(16, 128, 128).tolist() == [0, 0, 0, 255]

    def test_strong_v(self):
        # R = (409 * 127 + 128) >> 8 = 203; G goes negative and clamps
        assert yuv_to_rgba(16, 128, 255).tolist() == [203, 0, 0, 255]

    def test_strong_u(self):
        # B = (516 * 127 + 128) >> 8 = 256, clamped
        assert yuv_to_rgba(16, 255, 128).tolist() == [0, 0, 255, 255]


class TestNv21:
    def test_white_frame(self):
        out = yuv_to_rgb(_nv21(4, 2, 235, 128, 128), 4, 2, YuvFormat.NV21)
        assert out.tolist() == [255] * 32

    def test_v_comes_before_u(self):
        out = yuv_to_rgb(_nv21(2, 2, 16, 128, 255), 2, 2, 'nv21')
        assert out.reshape(4, 4).tolist() == [[203, 0, 0, 255]] * 4

    def test_chroma_shared_by_2x2_blocks(self):
        data = _nv21(4, 2, 16, 128, 128)
        # Second V/U pair covers columns 2 and 3
        data[8 + 2] = 255
        out = yuv_to_rgb(data, 4, 2, YuvFormat.NV21).reshape(2, 4, 4)
        assert out[:, :2, 0].tolist() == [[0, 0], [0, 0]]
        assert out[:, 2:, 0].tolist() == [[203, 203], [203, 203]]


class TestYv12:
    def test_planes(self):
        data = np.zeros(yuv_buffer_size(4, 2, YuvFormat.YV12), dtype=np.uint8)
        data[:32] = 16
        data[32:48] = 128
        data[48:] = 255
        out = yuv_to_rgb(data, 4, 2, YuvFormat.YV12)
        assert out.reshape(8, 4).tolist() == [[203, 0, 0, 255]] * 8

    def test_luma_read_without_stride(self):
        data = np.zeros(yuv_buffer_size(4, 2, YuvFormat.YV12), dtype=np.uint8)
        data[32:] = 128
        # Row 1 luma is read at offset 4, not at the padded stride of 16
        data[4:8] = 235
        out = yuv_to_rgb(data, 4, 2, YuvFormat.YV12).reshape(2, 4, 4)
        assert out[1, :, 0].tolist() == [255] * 4
        assert out[0, :, 0].tolist() == [0] * 4


class TestErrors:
    def test_odd_width(self):
        with pytest.raises(InvalidArgument, match='even'):
            yuv_to_rgb(np.zeros(100, dtype=np.uint8), 3, 2, YuvFormat.NV21)

    def test_short_input(self):
        with pytest.raises(SizeMismatch):
            yuv_to_rgb(np.zeros(11, dtype=np.uint8), 4, 2, YuvFormat.NV21)

    def test_random_frames_convert(self):
        for yuv_format in YuvFormat:
            data = random_yuv_array(3, 160, 100, yuv_format)
            out = yuv_to_rgb(data, 160, 100, yuv_format)
            assert out.shape == (160 * 100 * 4,)
            assert set(out[3::4].tolist()) == {255}
