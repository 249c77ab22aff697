"""
Value objects passed between the codec, the compressor and the variant generator.

All of them are immutable and live only for one pipeline call.
"""

import io
import math
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, Optional, Tuple, Union

from PIL import Image

from .errors import DecodeError


def compression_ratio(original_size: int, optimized_size: int) -> int:
    """
    Percentage saved by the optimized output, rounded half up.

    Negative when the output grew. Returns 0 for an empty original.
    """
    if original_size <= 0:
        return 0
    return int(math.floor((1 - optimized_size / original_size) * 100 + 0.5))


class SearchState(str, Enum):
    """How a quality search ended. Every state carries a usable result."""
    SEARCHING = 'searching'
    CONVERGED = 'converged'
    QUALITY_FLOOR = 'quality_floor'
    ATTEMPTS_EXHAUSTED = 'attempts_exhausted'


@dataclass(frozen=True)
class SourceImage:
    """Caller-owned original bytes plus the container format Pillow detected."""
    data: bytes
    format: Optional[str]

    @classmethod
    def from_bytes(cls, data: bytes) -> 'SourceImage':
        try:
            with Image.open(io.BytesIO(data)) as img:
                fmt = img.format
        except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
            raise DecodeError(f"Not a decodable image: {e}") from e
        return cls(data=bytes(data), format=fmt)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> 'SourceImage':
        return cls.from_bytes(Path(path).read_bytes())

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class OptimizationRequest:
    """
    One desired output.

    Fields:
        width: Bounding box width, px. ``None`` leaves the width unconstrained.
        height: Bounding box height, px. ``None`` leaves the height unconstrained.
        format: 'jpeg', 'webp' or 'avif'.
        quality: Starting encode quality, 1-100.
        progressive: Progressive scan for JPEG output.
    """
    width: Optional[int] = None
    height: Optional[int] = None
    format: str = 'jpeg'
    quality: int = 85
    progressive: bool = True

    def with_quality(self, quality: int) -> 'OptimizationRequest':
        return OptimizationRequest(
            width=self.width,
            height=self.height,
            format=self.format,
            quality=quality,
            progressive=self.progressive,
        )


@dataclass(frozen=True)
class OptimizationResult:
    """Result of encoding one request."""
    buffer: bytes
    width: int
    height: int
    format: str
    quality: int
    original_size: int
    attempts: int = 1
    state: Optional[SearchState] = None

    @property
    def size(self) -> int:
        return len(self.buffer)

    @property
    def dimensions(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def compression_ratio(self) -> int:
        return compression_ratio(self.original_size, self.size)


@dataclass(frozen=True)
class Variant:
    """One derived file of a bundle."""
    buffer: bytes
    filename: str
    result: Optional[OptimizationResult] = None


@dataclass(frozen=True)
class VariantBundle:
    """
    The complete set of derived files for one source image.

    Only ever built with all four variants present.
    """
    mobile: Variant
    tablet: Variant
    desktop: Variant
    webp: Variant

    NAMES = ('mobile', 'tablet', 'desktop', 'webp')

    def __getitem__(self, name: str) -> Variant:
        if name not in self.NAMES:
            raise KeyError(name)
        return getattr(self, name)

    def __iter__(self) -> Iterator[str]:
        return iter(self.NAMES)

    def __len__(self) -> int:
        return len(self.NAMES)

    def items(self) -> Iterator[Tuple[str, Variant]]:
        for name in self.NAMES:
            yield name, getattr(self, name)

    def as_dict(self) -> Dict[str, Dict[str, object]]:
        """Plain ``{name: {'buffer': ..., 'filename': ...}}`` mapping."""
        return {
            name: {'buffer': variant.buffer, 'filename': variant.filename}
            for name, variant in self.items()
        }
