"""
Responsive Variant Generator

Fans one source image out to the fixed breakpoint table, runs each job
through the AdaptiveCompressor on its own worker thread, and joins them
into a VariantBundle.

A bundle is all-or-nothing: if any job fails the call raises
OptimizationFailed and every other job's output is discarded.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, Optional, Union

from .compressor import AdaptiveCompressor
from .errors import ImagePipelineError, OptimizationFailed
from .models import (
    OptimizationRequest,
    OptimizationResult,
    SourceImage,
    Variant,
    VariantBundle,
)
from .naming import main_filename, mobile_webp_filename, variant_filenames
from .utils import format_size


class ResponsiveVariantGenerator:
    """
    Produces the mobile/tablet/desktop/webp bundle for one upload.

    Example:
        generator = ResponsiveVariantGenerator()
        bundle = generator.create_responsive_versions(data, "hero")
        for name, variant in bundle.items():
            (uploads / variant.filename).write_bytes(variant.buffer)
    """

    BREAKPOINTS = {
        'mobile': OptimizationRequest(width=480, format='jpeg', quality=80),
        'tablet': OptimizationRequest(width=768, format='jpeg', quality=85),
        'desktop': OptimizationRequest(width=1200, format='jpeg', quality=90),
        'webp': OptimizationRequest(width=1200, format='webp', quality=85),
    }

    # Backwards-compatible single copy written next to the bundle
    MAIN_REQUEST = OptimizationRequest(width=1200, format='jpeg', quality=85)

    MOBILE_WEBP_QUALITY = 70

    def __init__(
        self,
        compressor: Optional[AdaptiveCompressor] = None,
        max_workers: Optional[int] = None,
        verbose: bool = False
    ):
        self.compressor = compressor or AdaptiveCompressor(verbose=verbose)
        self.max_workers = max_workers or len(self.BREAKPOINTS)
        self.verbose = verbose

    def _log(self, message: str) -> None:
        """Print message if verbose mode enabled."""
        if self.verbose:
            print(message)

    @staticmethod
    def _source_bytes(source: Union[bytes, SourceImage]) -> bytes:
        if isinstance(source, SourceImage):
            return source.data
        return source

    def create_responsive_versions(
        self,
        source: Union[bytes, SourceImage],
        base_name: str
    ) -> VariantBundle:
        """
        Build every breakpoint variant of ``source``.

        Args:
            source: Original image bytes (or a SourceImage)
            base_name: Filename stem shared by all variants

        Returns:
            VariantBundle with exactly the four named variants

        Raises:
            OptimizationFailed: if any job fails; wraps the first error observed
        """
        data = self._source_bytes(source)
        filenames = variant_filenames(base_name)
        results: Dict[str, OptimizationResult] = {}
        first_failure: Optional[OptimizationFailed] = None

        # Leaving the with-block joins every worker, so no job outlives the call
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = {
                pool.submit(self.compressor.compress, data, request): name
                for name, request in self.BREAKPOINTS.items()
            }
            for future in as_completed(futures):
                name = futures[future]
                try:
                    results[name] = future.result()
                except ImagePipelineError as e:
                    self._log(f"  {name}: FAILED ({e})")
                    if first_failure is None:
                        first_failure = OptimizationFailed(name, e)
                    continue
                self._log(
                    f"  {name}: {filenames[name]} {format_size(results[name].size)} "
                    f"({results[name].width}x{results[name].height}, q={results[name].quality})"
                )

        if first_failure is not None:
            raise first_failure from first_failure.cause

        return VariantBundle(**{
            name: Variant(
                buffer=result.buffer,
                filename=filenames[name],
                result=result,
            )
            for name, result in results.items()
        })

    def create_main_version(
        self,
        source: Union[bytes, SourceImage],
        base_name: str
    ) -> Variant:
        """The ``<base>-optimized.jpg`` copy older pages still link to."""
        result = self.compressor.compress(self._source_bytes(source), self.MAIN_REQUEST)
        return Variant(buffer=result.buffer, filename=main_filename(base_name), result=result)

    def create_mobile_webp(self, mobile_jpeg: bytes, base_name: str) -> Variant:
        """
        Re-encode an existing ``-mobile.jpg`` as ``-mobile.webp``.

        No resize: the mobile JPEG is already at its breakpoint width.
        """
        request = OptimizationRequest(format='webp', quality=self.MOBILE_WEBP_QUALITY)
        result = self.compressor.codec(mobile_jpeg, request)
        return Variant(buffer=result.buffer, filename=mobile_webp_filename(base_name), result=result)


def create_responsive_versions(
    source: Union[bytes, SourceImage],
    base_name: str,
    verbose: bool = False
) -> VariantBundle:
    """Module-level shortcut for ResponsiveVariantGenerator().create_responsive_versions."""
    return ResponsiveVariantGenerator(verbose=verbose).create_responsive_versions(source, base_name)
