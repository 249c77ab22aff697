"""
Utility functions for sizes and file handling.
"""

import re
from pathlib import Path
from typing import Union


SUPPORTED_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.webp', '.bmp', '.tiff', '.tif', '.gif')


# Largest unit first; sizes use binary multiples throughout
SIZE_UNITS = (('GB', 1 << 30), ('MB', 1 << 20), ('KB', 1 << 10))

_SIZE_PATTERN = re.compile(r'^\s*(\d+(?:\.\d+)?|\.\d+)\s*([KMG]?B)?\s*$', re.IGNORECASE)


def format_size(size_bytes: int) -> str:
    """'512 B', '800.00 KB', '1.50 MB' and so on, as printed in progress lines."""
    for unit, factor in SIZE_UNITS:
        if size_bytes >= factor:
            return f"{size_bytes / factor:.2f} {unit}"
    return f"{size_bytes} B"


def parse_size_string(size_str: str) -> int:
    """
    Byte count for a budget given on the command line.

    Accepts a bare number of bytes or a number followed by B, KB, MB or GB
    in any case ('800KB', '1.5mb', '819200'). Anything else raises ValueError.
    """
    match = _SIZE_PATTERN.match(size_str)
    if match is None:
        raise ValueError(f"Invalid size: {size_str!r} (expected e.g. 800KB, 1.5MB)")
    number, unit = match.groups()
    factor = dict(SIZE_UNITS).get((unit or 'B').upper(), 1)
    return int(float(number) * factor)


def is_supported_image(file_path: Union[str, Path]) -> bool:
    """Check if a file has an extension the pipeline can decode."""
    return Path(file_path).suffix.lower() in SUPPORTED_EXTENSIONS


def ensure_directory(path: Union[str, Path]) -> Path:
    """Ensure directory exists, create if not."""
    path = Path(path)
    if path.suffix:  # It's a file path
        path = path.parent
    path.mkdir(parents=True, exist_ok=True)
    return path
