"""Error taxonomy for pixel-parity.

Every kernel validates its arguments before allocating any output, so a
raised error never leaves a partial result behind. Value mismatches found by
the validator are data, not errors: they never raise.
"""


class PixelParityError(Exception):
    """Base exception for pixel-parity errors."""


class InvalidArgument(PixelParityError, ValueError):
    """A kernel parameter is outside what the operation supports."""


class OutOfBounds(PixelParityError, IndexError):
    """Strict access to a cell outside the array extent."""

    def __init__(self, x: int, y: int, size_x: int, size_y: int):
        super().__init__(f'Out of bounds: ({x}, {y}) not in {size_x}x{size_y}')
        self.x = x
        self.y = y


class SizeMismatch(PixelParityError, ValueError):
    """A buffer does not have the length its declared shape requires."""

    def __init__(self, message: str, expected: int | None = None, actual: int | None = None):
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class ConfigurationError(PixelParityError):
    """A setting from the environment or .env file is unusable."""

    def __init__(self, message: str, setting_name: str | None = None):
        super().__init__(message)
        self.setting_name = setting_name
