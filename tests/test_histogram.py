"""Tests for pixel_parity.kernels.histogram: histogram and histogram_dot."""

import numpy as np
import pytest

from pixel_parity.core.arrays import padded_size
from pixel_parity.core.errors import InvalidArgument
from pixel_parity.core.random_data import random_byte_array
from pixel_parity.core.types import Restriction
from pixel_parity.kernels.histogram import dot_coefficients, histogram, histogram_dot


class TestHistogram:
    def test_counts_values(self):
        counts = histogram(np.array([0, 0, 5, 255], dtype=np.uint8), 1, 2, 2)
        assert counts.dtype == np.int32
        assert len(counts) == 256
        assert counts[0] == 2
        assert counts[5] == 1
        assert counts[255] == 1
        assert counts.sum() == 4

    @pytest.mark.parametrize('vector_size', [1, 2, 3, 4])
    def test_each_channel_sums_to_cell_count(self, vector_size):
        stride = padded_size(vector_size)
        counts = histogram(random_byte_array(3, 16, 10, stride), vector_size, 16, 10)
        assert len(counts) == 256 * stride
        for channel in range(vector_size):
            assert counts[channel::stride].sum() == 160

    def test_padding_channel_never_counted(self):
        counts = histogram(random_byte_array(3, 16, 10, 4), 3, 16, 10)
        assert not counts[3::4].any()

    def test_interleaved_layout(self):
        counts = histogram(np.array([7, 9], dtype=np.uint8), 2, 1, 1)
        assert counts[7 * 2 + 0] == 1
        assert counts[9 * 2 + 1] == 1
        assert counts.sum() == 2

    def test_restriction(self):
        data = np.arange(6, dtype=np.uint8)
        counts = histogram(data, 1, 3, 2, Restriction(1, 3, 1, 2))
        assert counts.sum() == 2
        assert counts[4] == 1
        assert counts[5] == 1


class TestDotCoefficients:
    def test_default_weights(self):
        assert dot_coefficients(None, 4).tolist() == [77, 150, 29, 0]

    def test_default_weights_truncated_to_vector_size(self):
        assert dot_coefficients(None, 2).tolist() == [77, 150]

    def test_count_must_match_vector_size(self):
        with pytest.raises(InvalidArgument):
            dot_coefficients([0.5, 0.5], 3)

    def test_negative(self):
        with pytest.raises(InvalidArgument, match='positive'):
            dot_coefficients([-0.1, 0.5], 2)

    def test_sum_above_one(self):
        with pytest.raises(InvalidArgument, match='1.0 or less'):
            dot_coefficients([0.6, 0.6], 2)


class TestHistogramDot:
    def test_white_and_black(self):
        data = np.array([255, 255, 255, 255, 0, 0, 0, 0], dtype=np.uint8)
        counts = histogram_dot(data, 4, 2, 1)
        assert counts.dtype == np.int32
        assert len(counts) == 256
        assert counts[255] == 1
        assert counts[0] == 1

    def test_unit_weight_matches_histogram(self):
        data = random_byte_array(8, 12, 7, 1)
        assert np.array_equal(histogram_dot(data, 1, 12, 7, [1.0]), histogram(data, 1, 12, 7))

    def test_rounded_up_weights_clamp_to_last_bucket(self):
        # 127.5 and 128.5 round to 128 + 129 = 257, so white lands past 255
        coefficients = [127.5 / 256, 128.5 / 256]
        counts = histogram_dot(np.array([255, 255], dtype=np.uint8), 2, 1, 1, coefficients)
        assert counts[255] == 1

    def test_total_is_cell_count(self):
        counts = histogram_dot(random_byte_array(2, 9, 9, 4), 3, 9, 9)
        assert counts.sum() == 81

    def test_restriction(self):
        counts = histogram_dot(random_byte_array(2, 4, 4, 4), 4, 4, 4, restriction=Restriction(0, 2, 0, 2))
        assert counts.sum() == 4
