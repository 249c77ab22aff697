#!/usr/bin/env python3
"""
Image Optimization CLI

Optimize uploaded images to a byte budget, or generate the full set of
responsive variants (mobile/tablet/desktop JPEG + WebP) for each one.

Examples:
    # Optimize one image to 1920px wide JPEG, at most 800KB
    python compress.py photo.jpg --width 1920

    # Optimize a folder to WebP with a 300KB budget
    python compress.py ./images/ -o ./optimized/ --format webp --max-size 300KB

    # Generate responsive variants for every upload
    python compress.py ./uploads/ --responsive --mobile-webp
"""

import argparse
import sys
from pathlib import Path

from respimg.codec import avif_available
from respimg.batch import BatchOptimizer
from respimg.compressor import AdaptiveCompressor
from respimg.models import OptimizationRequest
from respimg.utils import parse_size_string


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Optimize images to a size budget and build responsive variants',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s photo.jpg --width 1920
  %(prog)s ./images/ -o ./optimized/ --format webp --max-size 300KB
  %(prog)s ./uploads/ --responsive --mobile-webp
        """
    )

    parser.add_argument(
        'input',
        type=str,
        help='Input image file or directory'
    )

    parser.add_argument(
        '-o', '--output',
        type=str,
        default=None,
        help='Output directory (default: <input dir>/optimized)'
    )

    parser.add_argument(
        '--responsive',
        action='store_true',
        help='Write the mobile/tablet/desktop/webp bundle plus -optimized.jpg per image'
    )

    parser.add_argument(
        '--mobile-webp',
        action='store_true',
        help='With --responsive, also write <name>-mobile.webp'
    )

    # Single-target options
    parser.add_argument(
        '--width',
        type=int,
        default=None,
        help='Maximum output width in pixels (never upscales)'
    )

    parser.add_argument(
        '--height',
        type=int,
        default=None,
        help='Maximum output height in pixels (never upscales)'
    )

    parser.add_argument(
        '--format',
        type=str,
        choices=['jpeg', 'jpg', 'webp', 'avif'],
        default='jpeg',
        help='Output format (default: jpeg)'
    )

    parser.add_argument(
        '--quality',
        type=int,
        default=AdaptiveCompressor.DEFAULT_QUALITY,
        help=f'Starting encode quality 1-100 (default: {AdaptiveCompressor.DEFAULT_QUALITY})'
    )

    parser.add_argument(
        '--no-progressive',
        action='store_true',
        help='Write baseline instead of progressive JPEG'
    )

    # Search options
    parser.add_argument(
        '--max-size',
        type=parse_size_string,
        default='800KB',
        help='Byte budget per output (e.g. "800KB", "1MB"; default: 800KB)'
    )

    parser.add_argument(
        '--min-quality',
        type=int,
        default=AdaptiveCompressor.MIN_QUALITY,
        help=f'Quality floor (default: {AdaptiveCompressor.MIN_QUALITY})'
    )

    # General options
    parser.add_argument(
        '-r', '--recursive',
        action='store_true',
        help='Descend into sub-directories'
    )

    parser.add_argument(
        '--compare',
        action='store_true',
        help='Show a quality comparison for every file written'
    )

    parser.add_argument(
        '-q', '--quiet',
        action='store_true',
        help='Suppress progress output'
    )

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Error: Input path '{input_path}' does not exist")
        return 1

    fmt = 'jpeg' if args.format == 'jpg' else args.format
    if fmt == 'avif' and not avif_available():
        print("Error: AVIF output needs Pillow >= 11.3 or 'pillow-avif-plugin'")
        return 1

    if args.output:
        output_dir = Path(args.output)
    elif input_path.is_dir():
        output_dir = input_path / 'optimized'
    else:
        output_dir = input_path.parent / 'optimized'

    verbose = not args.quiet
    compressor = AdaptiveCompressor(
        max_size_bytes=args.max_size,
        min_quality=args.min_quality,
        verbose=verbose,
    )
    request = OptimizationRequest(
        width=args.width,
        height=args.height,
        format=fmt,
        quality=args.quality,
        progressive=not args.no_progressive,
    )
    batch = BatchOptimizer(
        request=request,
        compressor=compressor,
        responsive=args.responsive,
        mobile_webp=args.mobile_webp,
        compare=args.compare,
        verbose=verbose,
    )

    results = batch.run(input_path, output_dir, recursive=args.recursive)
    return 0 if all(r.success for r in results) else 1


if __name__ == '__main__':
    sys.exit(main())
