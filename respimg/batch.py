"""
Batch driver: run the pipeline over a file or a directory of images.

Every asset is processed independently. A failure is logged and recorded,
and the run moves on to the next asset.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from .codec import FORMAT_CONFIG
from .compressor import AdaptiveCompressor, choose_smaller
from .errors import ImagePipelineError
from .models import OptimizationRequest, OptimizationResult
from .naming import is_derived_name
from .quality import QualityAnalyzer
from .responsive import ResponsiveVariantGenerator
from .utils import ensure_directory, format_size, is_supported_image


# Formats for which leaving the source untouched is an acceptable outcome
KEEP_SMALLER_FORMATS = ('jpeg', 'webp')

# Bundle files are written under this suffix, then renamed into place
STAGING_SUFFIX = '.partial'


@dataclass
class AssetResult:
    """Outcome of processing one input file."""
    input_path: Path
    success: bool
    original_size: int
    written: List[Path] = field(default_factory=list)
    written_size: int = 0
    kept_original: bool = False
    message: str = ''


class BatchOptimizer:
    """
    Optimize files one by one, either to a single target or to a full
    responsive bundle.

    Example:
        batch = BatchOptimizer(request=OptimizationRequest(width=1920), verbose=True)
        results = batch.run("./photos", "./photos/optimized")
    """

    def __init__(
        self,
        request: Optional[OptimizationRequest] = None,
        compressor: Optional[AdaptiveCompressor] = None,
        responsive: bool = False,
        mobile_webp: bool = False,
        compare: bool = False,
        verbose: bool = True
    ):
        self.request = request or OptimizationRequest()
        self.compressor = compressor or AdaptiveCompressor(verbose=verbose)
        self.generator = ResponsiveVariantGenerator(compressor=self.compressor, verbose=verbose)
        self.responsive = responsive
        self.mobile_webp = mobile_webp
        self.analyzer = QualityAnalyzer() if compare else None
        self.verbose = verbose

    def _log(self, message: str) -> None:
        """Print message if verbose mode enabled."""
        if self.verbose:
            print(message)

    def find_images(self, input_path: Union[str, Path], recursive: bool = False) -> List[Path]:
        """Supported source images under ``input_path``, skipping derived files."""
        input_path = Path(input_path)
        if input_path.is_file():
            return [input_path]

        candidates = input_path.rglob('*') if recursive else input_path.glob('*')
        files = [f for f in candidates if f.is_file()]
        siblings: Dict[Path, List[str]] = {}
        for f in files:
            siblings.setdefault(f.parent, []).append(f.name)

        images = [
            f for f in files
            if is_supported_image(f) and not is_derived_name(f.name, siblings[f.parent])
        ]
        return sorted(images, key=lambda p: p.name)

    def _write(self, path: Path, data: bytes, asset: AssetResult) -> None:
        ensure_directory(path)
        path.write_bytes(data)
        asset.written.append(path)
        asset.written_size += len(data)

    def _compare(self, original: bytes, result: OptimizationResult, label: str) -> None:
        if self.analyzer is not None:
            self.analyzer.print_comparison(original, result, label)

    def optimize_file(self, input_path: Path, output_dir: Path) -> AssetResult:
        """Single-shot optimize ``input_path`` into ``output_dir``."""
        data = input_path.read_bytes()
        asset = AssetResult(input_path=input_path, success=True, original_size=len(data))

        result = self.compressor.compress(data, self.request)
        extension = FORMAT_CONFIG[self.request.format]['extension']
        output_path = output_dir / f"{input_path.stem}-optimized{extension}"

        if self.request.format in KEEP_SMALLER_FORMATS and choose_smaller(data, result.buffer) is data:
            asset.kept_original = True
            asset.written_size = len(data)
            asset.message = "original is already smaller, left untouched"
            self._log(f"  Kept original: {format_size(len(data))} <= {format_size(result.size)}")
            return asset

        self._write(output_path, result.buffer, asset)
        asset.message = f"{result.compression_ratio}% smaller"
        self._log(
            f"  {output_path.name}: {format_size(len(data))} -> {format_size(result.size)} "
            f"({asset.message}, q={result.quality})"
        )
        self._compare(data, result, output_path.name)
        return asset

    def _publish(self, files: List[Tuple[str, bytes]], output_dir: Path, asset: AssetResult) -> None:
        """
        Write ``files`` into ``output_dir`` as one unit.

        Every file is staged under a hidden temporary name first and renamed
        into place only once all of them are on disk. If any write or rename
        fails, the staged files and the ones already renamed are removed
        before the error propagates.
        """
        output_dir.mkdir(parents=True, exist_ok=True)
        staged: List[Tuple[Path, Path]] = []
        published: List[Path] = []
        try:
            for filename, data in files:
                tmp_path = output_dir / f".{filename}{STAGING_SUFFIX}"
                staged.append((tmp_path, output_dir / filename))
                tmp_path.write_bytes(data)
            for tmp_path, final_path in staged:
                tmp_path.replace(final_path)
                published.append(final_path)
        except OSError:
            for tmp_path, _ in staged:
                tmp_path.unlink(missing_ok=True)
            for final_path in published:
                final_path.unlink(missing_ok=True)
            raise

        for (_, data), final_path in zip(files, published):
            asset.written.append(final_path)
            asset.written_size += len(data)

    def bundle_file(self, input_path: Path, output_dir: Path) -> AssetResult:
        """Write the responsive bundle (plus main copy) for ``input_path``."""
        data = input_path.read_bytes()
        asset = AssetResult(input_path=input_path, success=True, original_size=len(data))
        base_name = input_path.stem

        bundle = self.generator.create_responsive_versions(data, base_name)
        variants = [variant for _, variant in bundle.items()]
        variants.append(self.generator.create_main_version(data, base_name))
        if self.mobile_webp:
            variants.append(self.generator.create_mobile_webp(bundle.mobile.buffer, base_name))

        self._publish([(v.filename, v.buffer) for v in variants], output_dir, asset)
        for _, variant in bundle.items():
            self._compare(data, variant.result, variant.filename)

        asset.message = f"{len(asset.written)} files"
        self._log(f"  {base_name}: {asset.message}, {format_size(asset.written_size)} total")
        return asset

    def process(self, input_path: Path, output_dir: Path) -> AssetResult:
        """Process one asset; pipeline errors become a failed AssetResult."""
        self._log(f"\nProcessing {input_path.name}...")
        try:
            if self.responsive:
                return self.bundle_file(input_path, output_dir)
            return self.optimize_file(input_path, output_dir)
        except (ImagePipelineError, OSError) as e:
            self._log(f"  Failed: {e}")
            return AssetResult(
                input_path=input_path,
                success=False,
                original_size=input_path.stat().st_size if input_path.exists() else 0,
                message=str(e),
            )

    def run(
        self,
        input_path: Union[str, Path],
        output_dir: Union[str, Path],
        recursive: bool = False
    ) -> List[AssetResult]:
        """Process every image found under ``input_path``."""
        input_path = Path(input_path)
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        images = self.find_images(input_path, recursive=recursive)
        self._log(f"Found {len(images)} images to optimize")

        results = []
        for img_path in images:
            if input_path.is_dir():
                target_dir = output_dir / img_path.parent.relative_to(input_path)
            else:
                target_dir = output_dir
            results.append(self.process(img_path, target_dir))

        self.print_summary(results)
        return results

    def print_summary(self, results: List[AssetResult]) -> None:
        success_count = sum(1 for r in results if r.success)
        total_original = sum(r.original_size for r in results if r.success)
        total_written = sum(r.written_size for r in results if r.success)

        self._log(f"\n{'='*60}")
        self._log("BATCH OPTIMIZATION COMPLETE")
        self._log(f"{'='*60}")
        self._log(f"Successful: {success_count}/{len(results)} images")
        self._log(f"Total size: {format_size(total_original)} -> {format_size(total_written)}")
        for r in results:
            if not r.success:
                self._log(f"  FAILED {r.input_path.name}: {r.message}")
        self._log(f"{'='*60}")
