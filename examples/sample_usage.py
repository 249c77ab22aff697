"""
Sample usage of the responsive image pipeline.

Demonstrates single-target optimization, responsive bundles and
picture-source lookup. Replace file paths with your own images before running.
"""

from pathlib import Path
import sys

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from respimg import (
    AdaptiveCompressor,
    OptimizationFailed,
    OptimizationRequest,
    ResponsiveVariantGenerator,
    choose_smaller,
    picture_sources,
)
from respimg.quality import QualityAnalyzer
from respimg.utils import format_size


def example_budgeted_jpeg():
    """Optimize one photo to 1920px wide within 800KB."""
    print("\n" + "=" * 60)
    print("EXAMPLE 1: Budgeted JPEG")
    print("=" * 60)

    data = Path("sample_image.jpg").read_bytes()
    compressor = AdaptiveCompressor(verbose=True)

    result = compressor.compress(data, OptimizationRequest(width=1920))

    print(f"{result.width}x{result.height} at q={result.quality} ({result.state.value})")
    print(f"{format_size(result.original_size)} -> {format_size(result.size)} "
          f"({result.compression_ratio}% smaller)")

    keep = choose_smaller(data, result.buffer)
    if keep is data:
        print("Original is already smaller; leaving it untouched")


def example_responsive_bundle():
    """Generate the mobile/tablet/desktop/webp bundle for an upload."""
    print("\n" + "=" * 60)
    print("EXAMPLE 2: Responsive Bundle")
    print("=" * 60)

    data = Path("sample_image.jpg").read_bytes()
    uploads = Path("uploads")
    uploads.mkdir(exist_ok=True)

    generator = ResponsiveVariantGenerator(verbose=True)
    try:
        bundle = generator.create_responsive_versions(data, "hero")
    except OptimizationFailed as e:
        print(f"Not publishing any variant: {e}")
        return

    for name, variant in bundle.items():
        (uploads / variant.filename).write_bytes(variant.buffer)
        print(f"{name:<8} {variant.filename:<20} {format_size(len(variant.buffer))}")


def example_picture_sources():
    """Candidate sources a page renderer would emit for a stored path."""
    print("\n" + "=" * 60)
    print("EXAMPLE 3: Picture Sources")
    print("=" * 60)

    for src in picture_sources("/uploads/hero-optimized.jpg"):
        print(src)


def example_quality_analysis():
    """Compare a variant against its source."""
    print("\n" + "=" * 60)
    print("EXAMPLE 4: Quality Analysis")
    print("=" * 60)

    data = Path("sample_image.jpg").read_bytes()
    result = AdaptiveCompressor().compress(data, OptimizationRequest(width=768, format="webp"))

    QualityAnalyzer().print_comparison(data, result, "tablet webp")


if __name__ == "__main__":
    print("Responsive Image Pipeline Examples")
    print("=" * 60)
    print("Note: These examples require actual image files to run.")
    print("Replace file paths with your own images.")
    print("=" * 60)

    example_picture_sources()

    # Uncomment to run:
    # example_budgeted_jpeg()
    # example_responsive_bundle()
    # example_quality_analysis()
