"""
Exceptions raised by the image pipeline.
"""

from typing import Optional


class ImagePipelineError(Exception):
    """Base class for every pipeline failure."""


class DecodeError(ImagePipelineError):
    """Input bytes are not a decodable raster image."""


class EncodeError(ImagePipelineError):
    """The target encoder rejected the request or ran out of resources."""


class OptimizationFailed(ImagePipelineError):
    """
    One job of a variant bundle failed, so the whole bundle failed.

    The original DecodeError/EncodeError is available as ``cause`` and is
    also chained as ``__cause__``.
    """

    def __init__(self, variant: str, cause: Optional[BaseException] = None):
        self.variant = variant
        self.cause = cause
        message = f"Variant '{variant}' failed"
        if cause is not None:
            message += f": {cause}"
        super().__init__(message)
