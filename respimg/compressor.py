"""
Adaptive Compressor

Drives the codec through a bounded quality-reduction search until the
output fits a byte budget or the quality floor is reached.

Search Strategy:
1. Encode at the starting quality (85 unless the request says otherwise)
2. Stop if the output fits the budget, quality is at the floor, or the
   attempt budget is spent
3. Otherwise drop quality by 15 (never below the floor) and try again

The search never fails because the budget was missed; it returns the
last attempt. Codec errors propagate unchanged and are never retried.
"""

from typing import Callable, Optional

from .codec import encode
from .models import (
    OptimizationRequest,
    OptimizationResult,
    SearchState,
)
from .utils import format_size


Codec = Callable[[bytes, OptimizationRequest], OptimizationResult]


def choose_smaller(original: bytes, optimized: bytes) -> bytes:
    """
    Keep whichever of the two buffers is smaller.

    Ties keep the original; re-writing an equal-size file gains nothing.
    """
    if len(optimized) < len(original):
        return optimized
    return original


class AdaptiveCompressor:
    """
    Byte-budgeted encoder on top of a codec.

    Example:
        compressor = AdaptiveCompressor(max_size_bytes=500 * 1024)
        result = compressor.compress(data, OptimizationRequest(width=1920))
        print(f"{result.size} bytes at q={result.quality} after {result.attempts} attempts")
    """

    DEFAULT_QUALITY = 85
    MAX_SIZE_BYTES = 800 * 1024
    MIN_QUALITY = 60
    MAX_ATTEMPTS = 4
    QUALITY_STEP = 15

    def __init__(
        self,
        max_size_bytes: Optional[int] = None,
        min_quality: Optional[int] = None,
        max_attempts: Optional[int] = None,
        quality_step: Optional[int] = None,
        codec: Optional[Codec] = None,
        verbose: bool = False
    ):
        """
        Initialize compressor.

        Args:
            max_size_bytes: Byte budget for one output (default 800 KB)
            min_quality: Quality floor (default 60)
            max_attempts: Maximum codec invocations per call (default 4)
            quality_step: Quality decrement between attempts (default 15)
            codec: Callable with the signature of ``codec.encode``
            verbose: Print progress messages
        """
        self.max_size_bytes = max_size_bytes if max_size_bytes is not None else self.MAX_SIZE_BYTES
        self.min_quality = min_quality if min_quality is not None else self.MIN_QUALITY
        self.max_attempts = max_attempts if max_attempts is not None else self.MAX_ATTEMPTS
        self.quality_step = quality_step if quality_step is not None else self.QUALITY_STEP
        self.codec = codec or encode
        self.verbose = verbose

        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.quality_step < 1:
            raise ValueError("quality_step must be at least 1")

    def _log(self, message: str) -> None:
        """Print message if verbose mode enabled."""
        if self.verbose:
            print(message)

    def _next_state(self, result: OptimizationResult, quality: int, attempts: int) -> SearchState:
        if result.size <= self.max_size_bytes:
            return SearchState.CONVERGED
        if quality <= self.min_quality:
            return SearchState.QUALITY_FLOOR
        if attempts >= self.max_attempts:
            return SearchState.ATTEMPTS_EXHAUSTED
        return SearchState.SEARCHING

    def compress(self, data: bytes, request: OptimizationRequest) -> OptimizationResult:
        """
        Encode ``data`` within the byte budget, lowering quality as needed.

        Args:
            data: Raw input image bytes
            request: Output description; ``request.quality`` is the starting quality

        Returns:
            The last OptimizationResult produced, annotated with the final
            quality, the number of attempts and the terminal SearchState

        Raises:
            DecodeError, EncodeError: straight from the codec, on the first attempt
            that hits them
        """
        quality = request.quality
        attempts = 0
        state = SearchState.SEARCHING
        result = None

        # TODO: track the smallest candidate instead of the latest if an encoder
        # ever produces larger output at lower quality for real inputs.
        while state is SearchState.SEARCHING:
            result = self.codec(data, request.with_quality(quality))
            attempts += 1
            state = self._next_state(result, quality, attempts)

            self._log(
                f"  {request.format.upper()} q={quality}: {format_size(result.size)} "
                f"({result.width}x{result.height}) -> {state.value}"
            )

            if state is SearchState.SEARCHING:
                quality = max(quality - self.quality_step, self.min_quality)

        return OptimizationResult(
            buffer=result.buffer,
            width=result.width,
            height=result.height,
            format=result.format,
            quality=quality,
            original_size=len(data),
            attempts=attempts,
            state=state,
        )


def optimize_image(
    data: bytes,
    width: Optional[int] = None,
    height: Optional[int] = None,
    quality: int = AdaptiveCompressor.DEFAULT_QUALITY,
    format: str = 'jpeg',
    progressive: bool = True,
    compressor: Optional[AdaptiveCompressor] = None
) -> OptimizationResult:
    """
    Optimize one image to one target, for ad hoc and batch tooling.

    Same size/quality policy as AdaptiveCompressor.compress; pair with
    ``choose_smaller`` to decide whether the output is worth writing.
    """
    request = OptimizationRequest(
        width=width,
        height=height,
        format=format,
        quality=quality,
        progressive=progressive,
    )
    return (compressor or AdaptiveCompressor()).compress(data, request)
