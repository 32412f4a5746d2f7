"""pixel-parity: reference image kernels and cross-validation of their ports.

Usage: pixel-parity <kernel> <input> [options]

Runs the reference implementation of <kernel> on <input> (an image, or a raw
byte file with --size), optionally writes the result with --out, and compares
it against the outputs of other implementations given with --intrinsic and
--toolkit. Exits 1 when a comparison fails, 2 on bad arguments or inputs.

Kernels are auto-discovered from pixel_parity/kernels/.
Each kernel module's docstring is its documentation.
Run `pixel-parity help <kernel>` for full module docs.

Environment variables / .env loading:
  OS environment variables are always used first.
  If a variable is not set, pixel-parity looks for a .env file starting from
  the current directory and walking up, stopping at the nearest .git boundary.
  Use --env-file to override the .env location explicitly.
"""

import argparse
import importlib
import os
import sys
from pathlib import Path

import numpy as np

from pixel_parity import registry
from pixel_parity.core.config import load_settings
from pixel_parity.core.errors import InvalidArgument, PixelParityError, SizeMismatch
from pixel_parity.core.imaging import buffer_to_image, is_image_path, load_buffer, save_diff_strip
from pixel_parity.core.logger import get_logger, set_level
from pixel_parity.core.report import format_json, format_text
from pixel_parity.core.types import Kernel, PixelBuffer, Report, Restriction
from pixel_parity.validator import validate_same

logger = get_logger(__name__)


def _load_kernel_module(name: str) -> object:
    """Load the raw module for a kernel (for docstring access)."""
    return importlib.import_module(f'pixel_parity.kernels.{name}')


def _short_help(name: str, kernel: Kernel) -> str:
    doc = (_load_kernel_module(name).__doc__ or '').strip()
    return doc.splitlines()[0] if doc else kernel.help


def _build_parser() -> argparse.ArgumentParser:
    kernels = registry.all_kernels()

    epilog = (
        'Examples:\n'
        '  pixel-parity blur ./photo.png --radius 8 --out ref.bin\n'
        '  pixel-parity blur ./photo.png --radius 8 --intrinsic device.bin --toolkit toolkit.bin\n'
        '  pixel-parity convolve ./raw.bin --size 160 100 --vector-size 1 --coefficients "0 -1 0 -1 5 -1 0 -1 0"\n'
        '  pixel-parity histogram ./photo.png --dot --intrinsic dot.bin --json\n'
        '  pixel-parity yuv_to_rgb ./frame.yuv --size 640 480 --format yv12 --diff-dir ./diffs\n'
        '  pixel-parity help resize\n'
        '\n'
        'Settings (set in .env or environment):\n'
        '  PIXEL_PARITY_LOG_LEVEL=DEBUG\n'
        '  PIXEL_PARITY_ALLOWED_DELTA=3\n'
        '  PIXEL_PARITY_MAX_DETAILS=80\n'
    )
    parser = argparse.ArgumentParser(
        prog='pixel-parity',
        description='Reference image kernels and cross-validation of their ports.',
        epilog=epilog,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    # Global --env-file option before subcommand
    parser.add_argument(
        '--env-file',
        metavar='PATH',
        default=None,
        help='Path to .env file (default: walk up from cwd to .git boundary)',
    )
    sub = parser.add_subparsers(dest='kernel', help='Kernel to run')

    # Auto-register each kernel as a subcommand using module docstring
    for name, kernel in sorted(kernels.items()):
        p = sub.add_parser(name, help=_short_help(name, kernel))
        p.add_argument('input', help='Input image, or raw byte file with --size')
        p.add_argument('-s', '--size', type=int, nargs=2, metavar=('WIDTH', 'HEIGHT'), help='Size of a raw input')
        p.add_argument(
            '-v',
            '--vector-size',
            type=int,
            default=4,
            help='Channels per cell, 1..4 (default: 4; images load as 4 or, with 1, greyscale)',
        )
        p.add_argument(
            '-r',
            '--restriction',
            type=int,
            nargs=4,
            metavar=('START_X', 'END_X', 'START_Y', 'END_Y'),
            help='Only compute cells in [START_X, END_X) x [START_Y, END_Y)',
        )
        p.add_argument('-o', '--out', help='Write the reference output (.png for an image, else raw bytes)')
        p.add_argument('-i', '--intrinsic', help='Intrinsic output to validate (image or raw file)')
        p.add_argument('-t', '--toolkit', help='Toolkit output to validate (image or raw file)')
        p.add_argument(
            '-d',
            '--allowed-delta',
            type=int,
            default=None,
            metavar='N',
            help='Per-element tolerance (default: 3 for bytes, 0 for counts)',
        )
        p.add_argument('--skip-fourth', action='store_true', help='Ignore every 4th element when comparing')
        p.add_argument('-j', '--json', action='store_true', help='Output JSON instead of text')
        p.add_argument('--diff-dir', metavar='DIR', help='Save a diff strip PNG per failing comparison')
        kernel.add_arguments(p)

    # `help` subcommand prints the full module docstring for a kernel
    help_parser = sub.add_parser('help', help='Print full docs for a kernel')
    help_parser.add_argument('command', nargs='?', help='Kernel name')

    return parser


def _print_help(command: str | None) -> None:
    """Print full module docstring for a kernel."""
    kernels = registry.all_kernels()

    if command is None:
        print('Available kernels:\n')
        for name, kernel in sorted(kernels.items()):
            print(f'  {name:<14} {_short_help(name, kernel)}')
        print('\nRun: pixel-parity help <kernel> for full docs.')
        return

    if command not in kernels:
        print(f'Unknown kernel: {command}', file=sys.stderr)
        print(f'Available: {", ".join(sorted(kernels))}', file=sys.stderr)
        sys.exit(1)

    doc = (_load_kernel_module(command).__doc__ or '').strip()
    if not doc:
        print(f'(No module docs for {command!r})')
        return
    print(doc)


def _load_input(kernel: Kernel, args: argparse.Namespace) -> PixelBuffer:
    size = tuple(args.size) if args.size else None
    if not kernel.raw_input:
        return load_buffer(args.input, size=size, vector_size=args.vector_size)
    if size is None:
        raise InvalidArgument(f'{kernel.name} reads a raw file: pass --size WIDTH HEIGHT')
    data = np.frombuffer(Path(args.input).read_bytes(), dtype=np.uint8).copy()
    return PixelBuffer(data=data, vector_size=1, size_x=size[0], size_y=size[1], source=args.input)


def _load_candidate(path: str, output: PixelBuffer) -> np.ndarray:
    """Read another implementation's output in the same element type as ours."""
    if is_image_path(path):
        return load_buffer(path, size=(output.size_x, output.size_y), vector_size=output.vector_size).data
    raw = Path(path).read_bytes()
    itemsize = output.data.dtype.itemsize
    if len(raw) % itemsize:
        raise SizeMismatch(
            f'{path} has {len(raw)} bytes, not a whole number of {itemsize}-byte {output.data.dtype} elements',
            expected=output.data.nbytes,
            actual=len(raw),
        )
    return np.frombuffer(raw, dtype=output.data.dtype)


def _write_output(path: str, output: PixelBuffer) -> None:
    if is_image_path(path):
        buffer_to_image(output.data, output.vector_size, output.size_x, output.size_y).save(path)
    else:
        Path(path).write_bytes(output.data.tobytes())


def _run(args: argparse.Namespace) -> Report:
    settings = load_settings(env_file=args.env_file)
    set_level(settings.log_level)
    if settings.env_path:
        logger.info('loaded %s', settings.env_path)

    for path in (args.input, args.intrinsic, args.toolkit):
        if path and not os.path.isfile(path):
            raise InvalidArgument(f'file not found: {path}')

    kernel = registry.get(args.kernel)
    restriction = Restriction(*args.restriction) if args.restriction else None
    buffer = _load_input(kernel, args)
    output = kernel.execute(buffer, restriction, args)

    report = Report(
        kernel=kernel.name,
        input_path=args.input,
        size_x=buffer.size_x,
        size_y=buffer.size_y,
        vector_size=buffer.vector_size,
        restriction=restriction,
    )
    if args.out:
        _write_output(args.out, output)
        report.output_path = args.out

    intrinsic = _load_candidate(args.intrinsic, output) if args.intrinsic else None
    toolkit = _load_candidate(args.toolkit, output) if args.toolkit else None
    if intrinsic is None and toolkit is None:
        return report

    allowed_delta = args.allowed_delta if args.allowed_delta is not None else settings.allowed_int_delta
    validation = validate_same(
        f'{kernel.name} {output.size_x}x{output.size_y} vector {output.vector_size}',
        output.data,
        intrinsic=intrinsic,
        toolkit=toolkit,
        # 3-wide outputs are padded to 4 and the padding is not compared
        skip_fourth=args.skip_fourth or output.vector_size == 3,
        allowed_int_delta=allowed_delta,
        max_details=settings.max_details,
    )
    report.add(validation)

    if args.diff_dir:
        for comparison in validation.comparisons:
            if not comparison.passed and comparison.markers:
                report.diff_images[comparison.name] = save_diff_strip(comparison, args.diff_dir)
    return report


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not args.kernel:
        parser.print_help()
        sys.exit(1)

    # Handle `help` subcommand
    if args.kernel == 'help':
        _print_help(getattr(args, 'command', None))
        return

    try:
        report = _run(args)
    except PixelParityError as e:
        print(f'pixel-parity: {e}', file=sys.stderr)
        sys.exit(2)

    if args.json:
        print(format_json(report))
    else:
        print(format_text(report))

    # Must happen after output so the report is visible even on failure
    if report.fail_count:
        sys.exit(1)


if __name__ == '__main__':
    main()
