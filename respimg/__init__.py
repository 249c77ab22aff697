"""
Responsive Image Pipeline

Byte-budgeted JPEG/WebP/AVIF encoding and responsive variant bundles
for uploaded images.
"""

from .codec import encode, avif_available
from .compressor import AdaptiveCompressor, choose_smaller, optimize_image
from .errors import DecodeError, EncodeError, ImagePipelineError, OptimizationFailed
from .models import (
    OptimizationRequest,
    OptimizationResult,
    SearchState,
    SourceImage,
    Variant,
    VariantBundle,
    compression_ratio,
)
from .naming import picture_sources, variant_filenames
from .responsive import ResponsiveVariantGenerator, create_responsive_versions

__version__ = "1.0.0"
__all__ = [
    "AdaptiveCompressor",
    "DecodeError",
    "EncodeError",
    "ImagePipelineError",
    "OptimizationFailed",
    "OptimizationRequest",
    "OptimizationResult",
    "ResponsiveVariantGenerator",
    "SearchState",
    "SourceImage",
    "Variant",
    "VariantBundle",
    "avif_available",
    "choose_smaller",
    "compression_ratio",
    "create_responsive_versions",
    "encode",
    "optimize_image",
    "picture_sources",
    "variant_filenames",
]
