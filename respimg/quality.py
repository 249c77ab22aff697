"""
Quality analysis utilities for comparing a source image with a derived variant.
"""

import io
import math
from typing import Dict

import numpy as np
from PIL import Image

from .codec import decode
from .models import OptimizationResult, compression_ratio
from .utils import format_size


class QualityAnalyzer:
    """Measure how much a variant degrades its source."""

    @staticmethod
    def calculate_mse(original: np.ndarray, compressed: np.ndarray) -> float:
        """
        Calculate Mean Squared Error between two images.

        Lower MSE = more similar images.
        """
        if original.shape != compressed.shape:
            raise ValueError("Images must have the same dimensions")

        return float(np.mean((original.astype(float) - compressed.astype(float)) ** 2))

    @staticmethod
    def calculate_psnr(original: np.ndarray, compressed: np.ndarray) -> float:
        """
        Calculate Peak Signal-to-Noise Ratio (PSNR) in dB.

        Higher PSNR = better quality; infinite for identical images.
        """
        mse = QualityAnalyzer.calculate_mse(original, compressed)
        if mse == 0:
            return float('inf')
        return 10 * math.log10((255.0 ** 2) / mse)

    @staticmethod
    def calculate_ssim(original: np.ndarray, compressed: np.ndarray) -> float:
        """
        Global Structural Similarity Index, between 0 and 1.

        Computed over the whole frame rather than a sliding window, which is
        enough to rank encodes of the same picture.
        """
        if original.shape != compressed.shape:
            raise ValueError("Images must have the same dimensions")

        img1 = original.astype(float)
        img2 = compressed.astype(float)

        c1 = (0.01 * 255) ** 2
        c2 = (0.03 * 255) ** 2

        mu1 = img1.mean()
        mu2 = img2.mean()
        sigma1_sq = img1.var()
        sigma2_sq = img2.var()
        sigma12 = np.mean((img1 - mu1) * (img2 - mu2))

        numerator = (2 * mu1 * mu2 + c1) * (2 * sigma12 + c2)
        denominator = (mu1 ** 2 + mu2 ** 2 + c1) * (sigma1_sq + sigma2_sq + c2)
        return float(numerator / denominator)

    def compare_bytes(self, original: bytes, derived: bytes) -> Dict[str, float]:
        """
        Compare a source image with a variant made from it.

        The source is resampled to the variant's dimensions first, so a
        480px mobile variant is judged against a 480px rendition of the source.

        Returns:
            Dictionary with MSE, PSNR and SSIM values
        """
        derived_img = Image.open(io.BytesIO(derived)).convert('RGB')
        original_img = decode(original).convert('RGB')
        if original_img.size != derived_img.size:
            original_img = original_img.resize(derived_img.size, Image.Resampling.LANCZOS)

        a = np.asarray(original_img)
        b = np.asarray(derived_img)
        return {
            'mse': self.calculate_mse(a, b),
            'psnr': self.calculate_psnr(a, b),
            'ssim': self.calculate_ssim(a, b),
        }

    def get_quality_rating(self, metrics: Dict[str, float]) -> str:
        """Human-readable quality rating based on metrics."""
        psnr = metrics.get('psnr', 0)
        ssim = metrics.get('ssim', 0)

        if psnr > 40 and ssim > 0.95:
            return "Excellent - Nearly indistinguishable from original"
        elif psnr > 35 and ssim > 0.90:
            return "Good - Minor differences, acceptable for most uses"
        elif psnr > 30 and ssim > 0.80:
            return "Fair - Noticeable compression but still usable"
        else:
            return "Poor - Significant quality loss"

    def print_comparison(self, original: bytes, result: OptimizationResult, label: str = '') -> None:
        """Print a formatted comparison report for one variant."""
        metrics = self.compare_bytes(original, result.buffer)

        print("\n" + "=" * 50)
        print(f"QUALITY COMPARISON {label}".rstrip())
        print("=" * 50)
        print(f"Format:     {result.format.upper()} q={result.quality} ({result.width}x{result.height})")
        print(f"Original:   {format_size(len(original))}")
        print(f"Optimized:  {format_size(result.size)} "
              f"({compression_ratio(len(original), result.size)}% smaller)")
        print("-" * 50)
        print(f"MSE:  {metrics['mse']:.2f}")
        print(f"PSNR: {metrics['psnr']:.2f} dB")
        print(f"SSIM: {metrics['ssim']:.4f}")
        print("-" * 50)
        print(f"Quality Rating: {self.get_quality_rating(metrics)}")
        print("=" * 50 + "\n")
