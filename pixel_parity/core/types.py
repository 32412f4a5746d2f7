"""Shared types for pixel-parity: Restriction, Dimension, Kernel, Comparison, Validation, Report."""

from __future__ import annotations

import argparse
import enum
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from pixel_parity.core.errors import InvalidArgument


@dataclass(frozen=True)
class Restriction:
    """Half-open rectangle [start_x, end_x) x [start_y, end_y) limiting which cells a kernel computes."""

    start_x: int
    end_x: int
    start_y: int
    end_y: int

    def check(self, size_x: int, size_y: int) -> None:
        """Raise InvalidArgument unless the rectangle is non-empty and inside size_x x size_y."""
        if not (0 <= self.start_x < self.end_x <= size_x):
            raise InvalidArgument(f'Restriction x range [{self.start_x}, {self.end_x}) invalid for width {size_x}')
        if not (0 <= self.start_y < self.end_y <= size_y):
            raise InvalidArgument(f'Restriction y range [{self.start_y}, {self.end_y}) invalid for height {size_y}')

    def __str__(self) -> str:
        return f'Restriction(x={self.start_x}..{self.end_x}, y={self.start_y}..{self.end_y})'


@dataclass(frozen=True)
class Dimension:
    """Shape of a 3D lookup cube."""

    size_x: int
    size_y: int
    size_z: int


class BlendingMode(enum.Enum):
    CLEAR = 'clear'
    SRC = 'src'
    DST = 'dst'
    SRC_OVER = 'src_over'
    DST_OVER = 'dst_over'
    SRC_IN = 'src_in'
    DST_IN = 'dst_in'
    SRC_OUT = 'src_out'
    DST_OUT = 'dst_out'
    SRC_ATOP = 'src_atop'
    DST_ATOP = 'dst_atop'
    XOR = 'xor'
    MULTIPLY = 'multiply'
    ADD = 'add'
    SUBTRACT = 'subtract'


class YuvFormat(enum.Enum):
    NV21 = 'nv21'
    YV12 = 'yv12'


@dataclass
class LookupTable:
    """Four independent 256-entry byte tables. Defaults to the identity mapping."""

    red: np.ndarray = field(default_factory=lambda: np.arange(256, dtype=np.uint8))
    green: np.ndarray = field(default_factory=lambda: np.arange(256, dtype=np.uint8))
    blue: np.ndarray = field(default_factory=lambda: np.arange(256, dtype=np.uint8))
    alpha: np.ndarray = field(default_factory=lambda: np.arange(256, dtype=np.uint8))


@dataclass
class PixelBuffer:
    """A pixel buffer plus the shape needed to interpret it."""

    data: np.ndarray
    vector_size: int
    size_x: int
    size_y: int
    source: str = ''

    def with_data(self, data: np.ndarray, vector_size: int | None = None) -> PixelBuffer:
        """Same extent, new contents, optionally a new vector size."""
        return PixelBuffer(
            data=data,
            vector_size=self.vector_size if vector_size is None else vector_size,
            size_x=self.size_x,
            size_y=self.size_y,
        )


class Kernel:
    """A self-registering reference kernel, exposed as a CLI subcommand.

    Usage in a kernel module:

        kernel = Kernel(name='blur', help='Separable Gaussian blur')

        @kernel.arguments
        def _arguments(parser):
            parser.add_argument('--radius', type=int, default=5)

        @kernel.run
        def run(buffer, restriction, args):
            return buffer.with_data(blur(buffer.data, ...))
    """

    def __init__(self, name: str, help: str = '', raw_input: bool = False):
        self.name = name
        self.help = help
        # Input is an opaque byte file whose length is not size_x * size_y * vector
        self.raw_input = raw_input
        self._run_fn: Callable | None = None
        self._arguments_fn: Callable | None = None

    def run(self, fn: Callable) -> Callable:
        """Decorator to register the run function."""
        self._run_fn = fn
        return fn

    def arguments(self, fn: Callable) -> Callable:
        """Decorator to register a function adding kernel-specific CLI options."""
        self._arguments_fn = fn
        return fn

    def add_arguments(self, parser: argparse.ArgumentParser) -> None:
        if self._arguments_fn is not None:
            self._arguments_fn(parser)

    def execute(self, buffer: PixelBuffer, restriction: Restriction | None, args: Any) -> PixelBuffer:
        """Execute the kernel's run function. The result carries the output shape."""
        if self._run_fn is None:
            raise RuntimeError(f'Kernel {self.name} has no run function')
        return self._run_fn(buffer, restriction, args)


class Outcome(enum.Enum):
    MATCH = 'match'
    VALUE_MISMATCH = 'value_mismatch'
    SIZE_MISMATCH = 'size_mismatch'


@dataclass
class Mismatch:
    """The first element where a candidate differs from the reference by more than allowed."""

    index: int
    reference: int
    candidate: int


@dataclass
class Comparison:
    """Result of comparing one candidate buffer against the reference."""

    task: str
    name: str
    outcome: Outcome
    reference_size: int
    candidate_size: int
    allowed_int_delta: int
    skip_fourth: bool = False
    first_mismatch: Mismatch | None = None
    mismatch_count: int = 0
    # '.' = match, 'X' = mismatch, one char per element up to the details cap
    markers: str = ''

    @property
    def passed(self) -> bool:
        return self.outcome is Outcome.MATCH

    def describe(self) -> str:
        """One-line summary in the style of the device test logs."""
        if self.outcome is Outcome.SIZE_MISMATCH:
            return f"{self.task}. Sizes don't match: Reference {self.reference_size}, {self.name} {self.candidate_size}"
        if self.first_mismatch is None:
            return f'{self.task}. {self.name} matches reference ({self.reference_size} elements)'
        m = self.first_mismatch
        return f'{self.task}. At {m.index}, Reference is {m.reference}, {self.name} is {m.candidate}'


@dataclass
class Validation:
    """All candidate comparisons for one task. Passes only if every candidate passes."""

    task: str
    comparisons: list[Comparison] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(c.passed for c in self.comparisons)

    def get(self, name: str) -> Comparison | None:
        return next((c for c in self.comparisons if c.name == name), None)


@dataclass
class Report:
    """Accumulates validations for text/JSON output."""

    kernel: str = ''
    input_path: str = ''
    size_x: int = 0
    size_y: int = 0
    vector_size: int = 0
    restriction: Restriction | None = None
    output_path: str | None = None
    validations: list[Validation] = field(default_factory=list)
    diff_images: dict[str, str] = field(default_factory=dict)

    def add(self, validation: Validation) -> None:
        self.validations.append(validation)

    @property
    def pass_count(self) -> int:
        return sum(1 for v in self.validations if v.passed)

    @property
    def fail_count(self) -> int:
        return sum(1 for v in self.validations if not v.passed)
