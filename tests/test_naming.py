"""
Tests for the filename conventions shared with the page renderer.
"""

import unittest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from respimg.naming import (
    is_derived_name,
    picture_sources,
    strip_variant_suffix,
    variant_filenames,
)


class TestVariantFilenames(unittest.TestCase):

    def test_bundle_names(self):
        self.assertEqual(variant_filenames('hero'), {
            'mobile': 'hero-mobile.jpg',
            'tablet': 'hero-tablet.jpg',
            'desktop': 'hero-desktop.jpg',
            'webp': 'hero.webp',
        })

    def test_names_strip_back_to_base(self):
        for filename in variant_filenames('image-1700000000-42').values():
            self.assertEqual(strip_variant_suffix('/uploads/' + filename), '/uploads/image-1700000000-42')


class TestStripVariantSuffix(unittest.TestCase):

    def test_strips_extension_and_suffix(self):
        self.assertEqual(strip_variant_suffix('/uploads/hero-desktop.jpg'), '/uploads/hero')
        self.assertEqual(strip_variant_suffix('/uploads/hero-optimized.jpg'), '/uploads/hero')
        self.assertEqual(strip_variant_suffix('/uploads/hero.webp'), '/uploads/hero')

    def test_extension_case_insensitive(self):
        self.assertEqual(strip_variant_suffix('/uploads/IMG_0001.JPEG'), '/uploads/IMG_0001')

    def test_only_one_suffix_removed(self):
        self.assertEqual(strip_variant_suffix('/uploads/a-mobile-tablet.jpg'), '/uploads/a-mobile')

    def test_hyphenated_names_kept(self):
        self.assertEqual(strip_variant_suffix('/uploads/show-jumping.png'), '/uploads/show-jumping')


class TestPictureSources(unittest.TestCase):

    def test_candidates_in_order(self):
        self.assertEqual(picture_sources('/uploads/hero-optimized.jpg'), [
            '/uploads/hero-mobile.webp',
            '/uploads/hero-mobile.jpg',
            '/uploads/hero.avif',
            '/uploads/hero.webp',
            '/uploads/hero-desktop.jpg',
            '/uploads/hero-tablet.jpg',
            '/uploads/hero-optimized.jpg',
        ])

    def test_any_variant_gives_same_candidates(self):
        expected = picture_sources('/uploads/hero.jpg')
        for src in ('/uploads/hero-mobile.jpg', '/uploads/hero-tablet.jpg', '/uploads/hero.webp'):
            self.assertEqual(picture_sources(src), expected)

    def test_unmanaged_path_passes_through(self):
        self.assertEqual(picture_sources('/assets/logo-desktop.png'), ['/assets/logo-desktop.png'])
        self.assertEqual(
            picture_sources('https://cdn.example.com/uploads/a.jpg'),
            ['https://cdn.example.com/uploads/a.jpg'],
        )

    def test_custom_managed_prefix(self):
        sources = picture_sources('/media/hero.jpg', managed_prefix='/media/')
        self.assertEqual(sources[0], '/media/hero-mobile.webp')


class TestDerivedNames(unittest.TestCase):

    def test_derived(self):
        for name in ('hero-mobile.jpg', 'hero-tablet.jpg', 'hero-desktop.jpg',
                     'hero-optimized.jpg', 'hero-mobile.webp'):
            self.assertTrue(is_derived_name(name), name)

    def test_sources(self):
        for name in ('hero.jpg', 'mobile.png', 'DBCLINIC-56.JPG'):
            self.assertFalse(is_derived_name(name), name)

    def test_bundle_webp_and_avif_next_to_source(self):
        siblings = ['hero.png', 'hero.webp', 'hero.avif']
        self.assertTrue(is_derived_name('hero.webp', siblings))
        self.assertTrue(is_derived_name('hero.avif', siblings))
        self.assertFalse(is_derived_name('hero.png', siblings))

    def test_bundle_webp_next_to_variants(self):
        siblings = ['hero.webp', 'hero-mobile.jpg', 'hero-desktop.jpg']
        self.assertTrue(is_derived_name('hero.webp', siblings))

    def test_standalone_webp_is_a_source(self):
        self.assertFalse(is_derived_name('hero.webp'))
        self.assertFalse(is_derived_name('hero.webp', ['hero.webp', 'hero.avif', 'other.png']))
        self.assertFalse(is_derived_name('hero.webp', ['hero-shot.jpg']))


if __name__ == '__main__':
    unittest.main()
