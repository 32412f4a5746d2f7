"""pixel-parity: reference image kernels and a cross-validator for their ports.

Each kernel takes flat byte buffers plus their shape and returns a new numpy
buffer; blend is the one that writes into its destination.
"""

from pixel_parity.core.arrays import Rgba3dArray, padded_size, round_up_to_16, yuv_buffer_size
from pixel_parity.core.errors import ConfigurationError, InvalidArgument, OutOfBounds, PixelParityError, SizeMismatch
from pixel_parity.core.types import BlendingMode, Dimension, LookupTable, Restriction, YuvFormat
from pixel_parity.kernels.blend import blend
from pixel_parity.kernels.blur import blur
from pixel_parity.kernels.color_matrix import ColorMatrixConversion, color_matrix
from pixel_parity.kernels.convolve import convolve
from pixel_parity.kernels.histogram import histogram, histogram_dot
from pixel_parity.kernels.lut import lut
from pixel_parity.kernels.lut3d import lut3d
from pixel_parity.kernels.resize import resize
from pixel_parity.kernels.yuv_to_rgb import yuv_to_rgb
from pixel_parity.validator import compare_to_reference, validate_same

__all__ = [
    'BlendingMode',
    'ColorMatrixConversion',
    'ConfigurationError',
    'Dimension',
    'InvalidArgument',
    'LookupTable',
    'OutOfBounds',
    'PixelParityError',
    'Restriction',
    'Rgba3dArray',
    'SizeMismatch',
    'YuvFormat',
    'blend',
    'blur',
    'color_matrix',
    'compare_to_reference',
    'convolve',
    'histogram',
    'histogram_dot',
    'lut',
    'lut3d',
    'padded_size',
    'resize',
    'round_up_to_16',
    'validate_same',
    'yuv_buffer_size',
    'yuv_to_rgb',
]
