"""Report builder: text and JSON output for pixel-parity runs."""

import json
from typing import Any

from pixel_parity.core.types import Comparison, Report


def _index_header(marker_count: int) -> str:
    # One '%-3d|' column per 4-element vector
    return ''.join(f'{i:<3d}|' for i in range(marker_count // 4))


def _format_comparison(comparison: Comparison) -> list[str]:
    mark = '✓' if comparison.passed else '✗'
    lines = [f'  {comparison.name}: {mark} {comparison.describe()}']
    if comparison.passed:
        return lines
    if comparison.mismatch_count:
        lines.append(
            f'    {comparison.mismatch_count} element(s) off by more than {comparison.allowed_int_delta}'
            + (', every 4th skipped' if comparison.skip_fourth else '')
        )
    if comparison.markers:
        lines.append(f'    {_index_header(len(comparison.markers))}')
        lines.append(f'    {comparison.markers}')
    return lines


def format_text(report: Report) -> str:
    """Format report as human-readable text."""
    lines = []
    header = f'pixel-parity: {report.kernel} {report.input_path} ({report.size_x}x{report.size_y}'
    header += f', vector size {report.vector_size})'
    if report.restriction is not None:
        header += f' {report.restriction}'
    lines.append(header)
    if report.output_path:
        lines.append(f'reference written to {report.output_path}')
    lines.append('')

    for validation in report.validations:
        lines.append(f'── {validation.task}')
        for comparison in validation.comparisons:
            lines.extend(_format_comparison(comparison))
            diff_image = report.diff_images.get(comparison.name)
            if diff_image:
                lines.append(f'    diff strip: {diff_image}')
        lines.append('')

    total = report.pass_count + report.fail_count
    if total > 0:
        lines.append(f'PASS {report.pass_count}/{total}  FAIL {report.fail_count}/{total}')
    return '\n'.join(lines)


def _comparison_dict(comparison: Comparison) -> dict[str, Any]:
    obj: dict[str, Any] = {
        'name': comparison.name,
        'outcome': comparison.outcome.value,
        'pass': comparison.passed,
        'reference_size': comparison.reference_size,
        'candidate_size': comparison.candidate_size,
        'allowed_int_delta': comparison.allowed_int_delta,
        'skip_fourth': comparison.skip_fourth,
        'mismatch_count': comparison.mismatch_count,
        'markers': comparison.markers,
    }
    if comparison.first_mismatch is not None:
        m = comparison.first_mismatch
        obj['first_mismatch'] = {'index': m.index, 'reference': m.reference, 'candidate': m.candidate}
    return obj


def format_json(report: Report) -> str:
    """Format report as JSON."""
    obj: dict[str, Any] = {
        'kernel': report.kernel,
        'input': report.input_path,
        'dimensions': {'width': report.size_x, 'height': report.size_y},
        'vector_size': report.vector_size,
    }
    if report.restriction is not None:
        r = report.restriction
        obj['restriction'] = {'start_x': r.start_x, 'end_x': r.end_x, 'start_y': r.start_y, 'end_y': r.end_y}
    if report.output_path:
        obj['output'] = report.output_path

    obj['validations'] = [
        {
            'task': v.task,
            'pass': v.passed,
            'comparisons': [_comparison_dict(c) for c in v.comparisons],
        }
        for v in report.validations
    ]
    if report.diff_images:
        obj['diff_images'] = report.diff_images

    obj['summary'] = {
        'total': report.pass_count + report.fail_count,
        'pass': report.pass_count,
        'fail': report.fail_count,
    }
    return json.dumps(obj, indent=2)
