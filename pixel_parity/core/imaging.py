"""Buffer <-> image conversion and diff strip rendering, via Pillow.

Images load as RGBA (vector size 4) or L (vector size 1). Anything else is
read as a raw byte file, which needs an explicit size.
"""

import os
from pathlib import Path

import numpy as np
from PIL import Image

from pixel_parity.core.arrays import check_buffer_length, check_vector_size
from pixel_parity.core.errors import InvalidArgument, SizeMismatch
from pixel_parity.core.types import Comparison, PixelBuffer

IMAGE_SUFFIXES = {'.png', '.jpg', '.jpeg', '.bmp', '.gif', '.tif', '.tiff', '.webp'}

_MODES = {1: 'L', 4: 'RGBA'}

MATCH_COLOUR = (0, 200, 0)
MISMATCH_COLOUR = (200, 0, 0)
SKIPPED_COLOUR = (128, 128, 128)


def is_image_path(path: str) -> bool:
    return Path(path).suffix.lower() in IMAGE_SUFFIXES


def load_buffer(path: str, size: tuple[int, int] | None = None, vector_size: int = 4) -> PixelBuffer:
    """Load an image or raw byte file as a pixel buffer."""
    check_vector_size(vector_size)
    if not os.path.isfile(path):
        raise InvalidArgument(f'file not found: {path}')
    if is_image_path(path):
        if vector_size not in _MODES:
            raise InvalidArgument(f'Images load with vector size 1 or 4, not {vector_size}')
        with Image.open(path) as img:
            converted = img.convert(_MODES[vector_size])
            data = np.array(converted, dtype=np.uint8).reshape(-1)
            width, height = converted.size
        if size is not None and size != (width, height):
            raise SizeMismatch(f'{path} is {width}x{height}, expected {size[0]}x{size[1]}')
        return PixelBuffer(data=data, vector_size=vector_size, size_x=width, size_y=height, source=path)

    if size is None:
        raise InvalidArgument(f'{path}: raw buffers need --size WIDTH HEIGHT')
    data = np.frombuffer(Path(path).read_bytes(), dtype=np.uint8).copy()
    check_buffer_length(data, vector_size, size[0], size[1], os.path.basename(path))
    return PixelBuffer(data=data, vector_size=vector_size, size_x=size[0], size_y=size[1], source=path)


def buffer_to_image(data: np.ndarray, vector_size: int, size_x: int, size_y: int) -> Image.Image:
    """Wrap a vector size 1 or 4 buffer as a Pillow image."""
    if vector_size not in _MODES:
        raise InvalidArgument(f'Only vector size 1 or 4 buffers convert to images, not {vector_size}')
    values = np.asarray(data)
    if values.dtype != np.uint8:
        raise InvalidArgument(f'Only byte buffers convert to images, not {values.dtype}; write a raw file instead')
    shape = (size_y, size_x) if vector_size == 1 else (size_y, size_x, 4)
    # uint8 (h, w) arrays become L images, (h, w, 4) become RGBA
    return Image.fromarray(values.reshape(shape))


def diff_strip_image(comparison: Comparison, cell: int = 4) -> Image.Image:
    """Render the comparison markers as a strip: green = match, red = mismatch, grey = skipped alpha."""
    n = max(len(comparison.markers), 1)
    strip = np.zeros((cell, n * cell, 3), dtype=np.uint8)
    for i, mark in enumerate(comparison.markers):
        if mark == 'X':
            colour = MISMATCH_COLOUR
        elif comparison.skip_fourth and i % 4 == 3:
            colour = SKIPPED_COLOUR
        else:
            colour = MATCH_COLOUR
        strip[:, i * cell : (i + 1) * cell] = colour
    return Image.fromarray(strip)


def save_diff_strip(comparison: Comparison, directory: str) -> str:
    """Save the diff strip as <directory>/<task>_<name>_diff.png and return its path."""
    os.makedirs(directory, exist_ok=True)
    safe_task = ''.join(c if c.isalnum() or c in '-_' else '_' for c in comparison.task)
    path = os.path.join(directory, f'{safe_task}_{comparison.name.lower()}_diff.png')
    diff_strip_image(comparison).save(path)
    return path
