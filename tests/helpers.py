"""
Shared fixtures: synthetic images and a scriptable fake codec.
"""

import io
from typing import Callable, List, Optional, Tuple

import numpy as np
from PIL import Image

from respimg.models import OptimizationRequest, OptimizationResult


def make_image(size: Tuple[int, int] = (400, 300), noise: int = 10, mode: str = 'RGB', seed: int = 0) -> Image.Image:
    """Gradient with some random variation (not just noise)."""
    width, height = size
    rng = np.random.default_rng(seed)

    img_array = np.zeros((height, width, 3), dtype=np.uint8)
    img_array[:, :, 0] = np.linspace(0, 255, height, dtype=np.uint8)[:, None]
    img_array[:, :, 1] = np.linspace(0, 255, width, dtype=np.uint8)[None, :]

    if noise:
        jitter = rng.integers(0, noise, (height, width, 3))
        img_array = np.clip(img_array.astype(int) + jitter, 0, 255).astype(np.uint8)

    img = Image.fromarray(img_array)
    if mode != 'RGB':
        img = img.convert(mode)
    return img


def make_image_bytes(size: Tuple[int, int] = (400, 300), fmt: str = 'PNG', noise: int = 10,
                     mode: str = 'RGB', **save_kwargs) -> bytes:
    buffer = io.BytesIO()
    make_image(size, noise=noise, mode=mode).save(buffer, format=fmt, **save_kwargs)
    return buffer.getvalue()


def open_bytes(data: bytes) -> Image.Image:
    img = Image.open(io.BytesIO(data))
    img.load()
    return img


class FakeCodec:
    """
    Codec stand-in whose output size is a function of quality.

    Records the quality of every call in ``calls``.
    """

    def __init__(self, size_for_quality: Optional[Callable[[int], int]] = None,
                 error: Optional[Exception] = None):
        self.size_for_quality = size_for_quality or (lambda q: 10 * 1024 * 1024)
        self.error = error
        self.calls: List[int] = []

    def __call__(self, data: bytes, request: OptimizationRequest) -> OptimizationResult:
        self.calls.append(request.quality)
        if self.error is not None:
            raise self.error
        return OptimizationResult(
            buffer=b'\0' * self.size_for_quality(request.quality),
            width=request.width or 100,
            height=request.height or 100,
            format=request.format,
            quality=request.quality,
            original_size=len(data),
        )
