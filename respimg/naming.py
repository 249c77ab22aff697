"""
Filename conventions shared by the variant generator and the page renderer.

The generator writes ``<base>-mobile.jpg``, ``<base>-tablet.jpg``,
``<base>-desktop.jpg`` and ``<base>.webp``; renderers strip those suffixes
back off a stored path to find every candidate source for ``<picture>``.
"""

import os
from typing import Dict, Iterable, List

MANAGED_PREFIX = '/uploads/'

VARIANT_SUFFIXES = ('-optimized', '-desktop', '-tablet', '-mobile')
KNOWN_EXTENSIONS = ('.jpg', '.jpeg', '.png', '.webp', '.avif', '.gif')

# Unsuffixed bundle outputs: <base>.webp, <base>.avif
BUNDLE_EXTENSIONS = ('.webp', '.avif')

# Order matters: renderers emit <source> elements in this order
CANDIDATE_SUFFIXES = (
    '-mobile.webp',
    '-mobile.jpg',
    '.avif',
    '.webp',
    '-desktop.jpg',
    '-tablet.jpg',
    '-optimized.jpg',
)


def variant_filenames(base_name: str) -> Dict[str, str]:
    """Bundle filenames keyed by variant name."""
    return {
        'mobile': f"{base_name}-mobile.jpg",
        'tablet': f"{base_name}-tablet.jpg",
        'desktop': f"{base_name}-desktop.jpg",
        'webp': f"{base_name}.webp",
    }


def main_filename(base_name: str) -> str:
    return f"{base_name}-optimized.jpg"


def mobile_webp_filename(base_name: str) -> str:
    return f"{base_name}-mobile.webp"


def strip_variant_suffix(path: str) -> str:
    """
    Base path of a derived file.

    ``/uploads/hero-desktop.jpg`` and ``/uploads/hero.webp`` both give
    ``/uploads/hero``. Only one extension and one variant suffix are removed.
    """
    base = path
    lowered = base.lower()
    for ext in KNOWN_EXTENSIONS:
        if lowered.endswith(ext):
            base = base[:-len(ext)]
            break
    for suffix in VARIANT_SUFFIXES:
        if base.endswith(suffix):
            base = base[:-len(suffix)]
            break
    return base


def is_managed(src: str, managed_prefix: str = MANAGED_PREFIX) -> bool:
    return src.startswith(managed_prefix)


def is_derived_name(filename: str, siblings: Iterable[str] = ()) -> bool:
    """
    True for files the pipeline itself writes.

    Suffixed variants (``-mobile``, ``-optimized``, ...) are recognised from
    the name alone. ``<base>.webp`` and ``<base>.avif`` look like ordinary
    uploads, so they count as derived only when ``siblings`` (the other
    filenames in the same directory) holds the source they were made from or
    one of their suffixed variants.
    """
    stem, ext = os.path.splitext(filename.lower())
    if stem.endswith(VARIANT_SUFFIXES):
        return True
    if ext not in BUNDLE_EXTENSIONS:
        return False

    for other in siblings:
        other_stem, other_ext = os.path.splitext(other.lower())
        if other_stem == stem:
            if other_ext not in BUNDLE_EXTENSIONS:
                return True
        elif strip_variant_suffix(other_stem) == stem:
            return True
    return False


def picture_sources(src: str, managed_prefix: str = MANAGED_PREFIX) -> List[str]:
    """
    Ordered candidate sources for ``src``.

    Paths outside ``managed_prefix`` were never run through the pipeline,
    so they come back unmodified as the only candidate.
    """
    if not is_managed(src, managed_prefix):
        return [src]
    base = strip_variant_suffix(src)
    return [base + suffix for suffix in CANDIDATE_SUFFIXES]
