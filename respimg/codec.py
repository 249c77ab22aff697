"""
Codec Adapter

Wraps one transcode (fit-inside resize + encode to JPEG, WebP or AVIF)
behind a single call: ``encode(data, request) -> OptimizationResult``.

The adapter is stateless and never retries. Undecodable input raises
DecodeError; a request the encoder cannot honour raises EncodeError.
"""

import io
from typing import Dict, Optional, Tuple

from PIL import Image

# Registers the AVIF plugin on Pillow releases without a built-in AVIF codec
try:
    import pillow_avif  # noqa: F401
except ImportError:
    pillow_avif = None

from .errors import DecodeError, EncodeError
from .models import OptimizationRequest, OptimizationResult


# AVIF encoder speed (0 = slowest/best, 10 = fastest)
AVIF_SPEED = 2

# Format-specific settings
FORMAT_CONFIG = {
    'jpeg': {
        'extension': '.jpg',
        'pil_format': 'JPEG',
        # optimize=True builds optimized Huffman tables; trellis quantisation
        # and overshoot deringing come for free when Pillow links mozjpeg.
        'save_kwargs': lambda q, progressive: {
            'quality': q, 'optimize': True, 'progressive': progressive,
        },
    },
    'webp': {
        'extension': '.webp',
        'pil_format': 'WEBP',
        'save_kwargs': lambda q, progressive: {'quality': q, 'method': 6},
    },
    'avif': {
        'extension': '.avif',
        'pil_format': 'AVIF',
        'save_kwargs': lambda q, progressive: {
            'quality': q, 'speed': AVIF_SPEED, 'subsampling': '4:2:0',
        },
    },
}


def avif_available() -> bool:
    """True when some installed plugin can write AVIF."""
    Image.init()
    return 'AVIF' in Image.SAVE


def extension_for(fmt: str) -> str:
    return FORMAT_CONFIG[fmt]['extension']


def fit_inside(
    size: Tuple[int, int],
    width: Optional[int] = None,
    height: Optional[int] = None
) -> Tuple[int, int]:
    """
    Dimensions of ``size`` scaled to fit inside ``width`` x ``height``.

    A missing side is unconstrained. Never upscales, never crops.
    """
    src_w, src_h = size
    scales = []
    if width:
        scales.append(width / src_w)
    if height:
        scales.append(height / src_h)
    if not scales:
        return src_w, src_h

    scale = min(scales)
    if scale >= 1:
        return src_w, src_h

    return max(1, round(src_w * scale)), max(1, round(src_h * scale))


def validate_request(request: OptimizationRequest) -> None:
    """Raise EncodeError for requests no encoder should be handed."""
    if request.format not in FORMAT_CONFIG:
        raise EncodeError(
            f"Unsupported format '{request.format}' "
            f"(expected one of {', '.join(FORMAT_CONFIG)})"
        )
    quality = request.quality
    if isinstance(quality, bool) or not isinstance(quality, int) or not 1 <= quality <= 100:
        raise EncodeError(f"Quality must be an integer between 1 and 100, got {quality!r}")
    for name in ('width', 'height'):
        value = getattr(request, name)
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise EncodeError(f"{name.capitalize()} must be a positive integer, got {value!r}")


def decode(data: bytes) -> Image.Image:
    """Open and fully load ``data``; truncated or foreign bytes raise DecodeError."""
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
        raise DecodeError(f"Not a decodable image: {e}") from e
    return img


def _prepare_mode(image: Image.Image, fmt: str) -> Image.Image:
    """Convert to a pixel mode the target encoder accepts."""
    if fmt == 'jpeg':
        # JPEG has no alpha channel
        if image.mode in ('RGB', 'L'):
            return image
        return image.convert('RGB')

    if image.mode in ('RGB', 'RGBA'):
        return image
    has_alpha = image.mode in ('LA', 'PA', 'RGBa', 'La') or 'transparency' in image.info
    return image.convert('RGBA' if has_alpha else 'RGB')


def encode(data: bytes, request: OptimizationRequest) -> OptimizationResult:
    """
    Resize and encode ``data`` according to ``request``.

    Args:
        data: Raw bytes of any raster format Pillow can read
        request: Target box, format, quality and progressive flag

    Returns:
        OptimizationResult with the encoded bytes and their dimensions

    Raises:
        DecodeError: if ``data`` is not a decodable image
        EncodeError: if the request is invalid or the encoder fails
    """
    validate_request(request)
    image = decode(data)

    config = FORMAT_CONFIG[request.format]
    save_kwargs: Dict[str, object] = config['save_kwargs'](request.quality, request.progressive)

    buffer = io.BytesIO()
    try:
        # Convert before resizing: Pillow falls back to NEAREST for P and 1 modes
        img = _prepare_mode(image, request.format)
        target = fit_inside(img.size, request.width, request.height)
        if target != img.size:
            img = img.resize(target, Image.Resampling.LANCZOS)
        img.save(buffer, format=config['pil_format'], **save_kwargs)
    except KeyError as e:
        raise EncodeError(f"No {config['pil_format']} encoder is registered") from e
    except (OSError, ValueError, MemoryError) as e:
        raise EncodeError(f"{config['pil_format']} encoder failed: {e}") from e

    return OptimizationResult(
        buffer=buffer.getvalue(),
        width=img.width,
        height=img.height,
        format=request.format,
        quality=request.quality,
        original_size=len(data),
    )
