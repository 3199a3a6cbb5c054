"""
Command-line entry point.

    python -m block_compare old.html new.html
    python -m block_compare old.html new.html --format html --output review.html
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from config_logging import (
    get_config, handle_errors, get_logger, BlockCompareError, ValidationError
)
from .differ import BlockDiffer
from .render import render_page, render_result
from .tree import parse_html

logger = get_logger('block_compare.cli')


@handle_errors(logger)
def _read(path: str) -> str:
    return Path(path).read_text(encoding='utf-8')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='block_compare',
        description='Block-level comparison of two HTML documents')
    parser.add_argument('left', help='Original document (HTML)')
    parser.add_argument('right', help='Revised document (HTML)')
    parser.add_argument('--format', choices=['json', 'html'], default='json',
                        help='Output format')
    parser.add_argument('--output', type=str, help='Output file path (default: stdout)')
    parser.add_argument('--threshold', type=float,
                        help='Fuzzy match threshold (default from BC_SIMILARITY_THRESHOLD)')
    parser.add_argument('--strict', action='store_true',
                        help='Fail on internal invariant violations instead of degrading')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.threshold is not None and not 0.0 <= args.threshold <= 1.0:
        parser.error('--threshold must be between 0 and 1')

    try:
        left_html = _read(args.left)
        right_html = _read(args.right)
    except BlockCompareError as e:
        parser.exit(2, f"block_compare: error: {e.message}\n")

    differ = BlockDiffer(threshold=args.threshold,
                         strict=args.strict or get_config().strict)
    result = differ.compare(parse_html(left_html), parse_html(right_html))

    if args.format == 'html':
        output = render_page(result, title=f"{Path(args.left).name} vs {Path(args.right).name}")
    else:
        rendered_left, rendered_right = render_result(result)
        output = json.dumps({
            'summary': result.summary.to_dict(),
            'degraded': result.degraded,
            'left_html': rendered_left,
            'right_html': rendered_right
        }, indent=2)

    if args.output:
        try:
            Path(args.output).write_text(output, encoding='utf-8')
        except OSError as e:
            raise ValidationError(f"Cannot write {args.output}: {e}", field='output')
        logger.info(f"Comparison written to {args.output}")
    else:
        sys.stdout.write(output + '\n')
    return 0


if __name__ == '__main__':
    try:
        sys.exit(main())
    except ValidationError as e:
        sys.stderr.write(f"block_compare: error: {e.message}\n")
        sys.exit(2)
