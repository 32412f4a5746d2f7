"""Cross-validation of kernel outputs against the reference.

compare_to_reference checks one candidate; validate_same checks every
supplied candidate (the intrinsic's output, the toolkit's output, or both)
and passes only if all of them match. Differences are reported as data on
the returned Comparison; nothing here raises for a mismatch.

A byte buffer element matches when it is within allowed_int_delta of the
reference (3 unless told otherwise: the intrinsics round differently). Wider
integer buffers such as histograms must match exactly by default.
"""

import numpy as np

from pixel_parity.core.errors import InvalidArgument
from pixel_parity.core.logger import get_logger
from pixel_parity.core.types import Comparison, Mismatch, Outcome, Validation

logger = get_logger(__name__)

DEFAULT_BYTE_DELTA = 3
DEFAULT_MAX_DETAILS = 80


def _as_values(buffer) -> np.ndarray:
    if isinstance(buffer, (bytes, bytearray, memoryview)):
        return np.frombuffer(buffer, dtype=np.uint8)
    values = np.asarray(buffer).reshape(-1)
    # Signed bytes from a device dump compare as unsigned
    if values.dtype == np.int8:
        return values.view(np.uint8)
    return values


def default_delta(reference) -> int:
    return DEFAULT_BYTE_DELTA if _as_values(reference).dtype == np.uint8 else 0


def compare_to_reference(
    task: str,
    reference,
    name: str,
    candidate,
    skip_fourth: bool = False,
    allowed_int_delta: int | None = None,
    max_details: int = DEFAULT_MAX_DETAILS,
) -> Comparison:
    """Compare candidate to reference element by element.

    With skip_fourth, every element at index % 4 == 3 is ignored, for 3-wide
    vectors stored padded to 4. Markers cover the first max_details elements.
    """
    expected = _as_values(reference)
    actual = _as_values(candidate)
    delta_limit = default_delta(expected) if allowed_int_delta is None else allowed_int_delta

    if len(expected) != len(actual):
        return Comparison(
            task=task,
            name=name,
            outcome=Outcome.SIZE_MISMATCH,
            reference_size=len(expected),
            candidate_size=len(actual),
            allowed_int_delta=delta_limit,
            skip_fourth=skip_fourth,
        )

    deltas = np.abs(expected.astype(np.int64) - actual.astype(np.int64))
    differs = deltas > delta_limit
    if skip_fourth:
        differs[3::4] = False

    detail_count = min(len(expected), max_details)
    markers = ''.join('X' if d else '.' for d in differs[:detail_count])
    mismatch_indices = np.flatnonzero(differs)
    comparison = Comparison(
        task=task,
        name=name,
        outcome=Outcome.VALUE_MISMATCH if len(mismatch_indices) else Outcome.MATCH,
        reference_size=len(expected),
        candidate_size=len(actual),
        allowed_int_delta=delta_limit,
        skip_fourth=skip_fourth,
        mismatch_count=len(mismatch_indices),
        markers=markers,
    )
    if len(mismatch_indices):
        first = int(mismatch_indices[0])
        comparison.first_mismatch = Mismatch(index=first, reference=int(expected[first]), candidate=int(actual[first]))
    return comparison


def validate_same(
    task: str,
    reference,
    intrinsic=None,
    toolkit=None,
    skip_fourth: bool = False,
    allowed_int_delta: int | None = None,
    max_details: int = DEFAULT_MAX_DETAILS,
) -> Validation:
    """Compare each supplied candidate to the reference. At least one is required."""
    candidates = [
        (label, buffer) for label, buffer in (('Intrinsic', intrinsic), ('Toolkit', toolkit)) if buffer is not None
    ]
    if not candidates:
        raise InvalidArgument(f'{task}: nothing to validate, supply an intrinsic or a toolkit output')

    validation = Validation(task=task)
    for label, buffer in candidates:
        comparison = compare_to_reference(task, reference, label, buffer, skip_fourth, allowed_int_delta, max_details)
        validation.comparisons.append(comparison)
        if comparison.passed:
            continue
        logger.warning(comparison.describe())
        # Excerpts start a little before the first mismatch
        start = max(comparison.first_mismatch.index - 4, 0) if comparison.first_mismatch else 0
        logger.debug(format_array('Reference', reference, start=start))
        logger.debug(format_array(label, buffer, start=start))

    if not validation.passed:
        logger.warning('%s FAIL', task)
    return validation


def format_array(prefix: str, array, limit: int = 20, start: int = 0) -> str:
    """'prefix[size] v0, v1, ...' with at most limit values, bytes shown unsigned.

    A non-zero start skips ahead: 'prefix[size] @start ...'.
    """
    values = _as_values(array)
    window = values[start : start + limit]
    if np.issubdtype(values.dtype, np.floating):
        shown = [f'{v:.2f}' for v in window]
    else:
        shown = [str(int(v)) for v in window]
    if len(values) > start + limit:
        shown.append('...')
    at = f' @{start}' if start else ''
    return f'{prefix}[{len(values)}]{at} {", ".join(shown)}'
