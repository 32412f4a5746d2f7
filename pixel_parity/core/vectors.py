"""Vector math primitives.

Float vectors are float32 numpy arrays and int vectors are int64 numpy arrays,
so the componentwise operators come from numpy. The free functions here cover
what numpy does not spell the same way: RenderScript-style rounding back to
bytes, the byte <-> unit float conversions and linear interpolation.

Rgba is the one value type with its own arithmetic: a 0..255 channel stands
for 0.0..1.0, so addition and subtraction clamp and multiplication rescales
with >> 8. Blend is written entirely in terms of it.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

import numpy as np

# 1/255 as RenderScript spells it, in float32
UNIT_FLOAT_PER_BYTE = np.float32(0.003921569)


def vector_min(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return np.minimum(a, b)


def int_floor(v: np.ndarray) -> np.ndarray:
    return np.floor(v).astype(np.int64)


def mix(start, end, fraction):
    """Value between start and end, fraction of the way along. Works on scalars and vectors."""
    return start + (end - start) * fraction


def clamp_to_ubyte_range(value: int) -> int:
    return min(255, max(0, value))


def float_clamped_to_ubyte(values) -> np.ndarray:
    """Round half up (truncating toward zero after +0.5) and clamp to 0..255."""
    v = np.asarray(values, dtype=np.float32)
    return np.clip(np.trunc(v + np.float32(0.5)), 0, 255).astype(np.uint8)


def unit_float_clamped_to_ubyte(values) -> np.ndarray:
    """Convert 0.0..1.0 floats to 0..255 bytes."""
    return float_clamped_to_ubyte(np.asarray(values, dtype=np.float32) * np.float32(255.0))


def byte_to_unit_float(values) -> np.ndarray:
    """Convert 0..255 bytes to 0.0..1.0 float32."""
    return np.asarray(values, dtype=np.float32) * UNIT_FLOAT_PER_BYTE


@dataclass(frozen=True)
class Rgba:
    """An RGBA value with 0..255-as-unit-range arithmetic."""

    r: int = 0
    g: int = 0
    b: int = 0
    a: int = 0

    def __add__(self, other: Rgba) -> Rgba:
        return Rgba(self.r + other.r, self.g + other.g, self.b + other.b, self.a + other.a).clamped()

    def __sub__(self, other: Rgba) -> Rgba:
        return Rgba(self.r - other.r, self.g - other.g, self.b - other.b, self.a - other.a).clamped()

    def __mul__(self, other: Rgba | int) -> Rgba:
        if isinstance(other, Rgba):
            return Rgba(self.r * other.r, self.g * other.g, self.b * other.b, self.a * other.a) >> 8
        return Rgba(self.r * other, self.g * other, self.b * other, self.a * other) >> 8

    def __xor__(self, other: Rgba) -> Rgba:
        return Rgba(self.r ^ other.r, self.g ^ other.g, self.b ^ other.b, self.a ^ other.a)

    def __rshift__(self, bits: int) -> Rgba:
        return Rgba(self.r >> bits, self.g >> bits, self.b >> bits, self.a >> bits)

    def clamped(self) -> Rgba:
        return Rgba(
            clamp_to_ubyte_range(self.r),
            clamp_to_ubyte_range(self.g),
            clamp_to_ubyte_range(self.b),
            clamp_to_ubyte_range(self.a),
        )

    def with_alpha(self, a: int) -> Rgba:
        return replace(self, a=a)

    def as_tuple(self) -> tuple[int, int, int, int]:
        return (self.r, self.g, self.b, self.a)
