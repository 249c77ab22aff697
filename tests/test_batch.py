"""
Tests for the batch driver and the CLI.
"""

import shutil
import tempfile
import unittest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

import compress
from respimg.batch import BatchOptimizer
from respimg.models import OptimizationRequest
from tests.helpers import make_image_bytes, open_bytes


class BatchTestCase(unittest.TestCase):

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.input_dir = self.temp_dir / 'uploads'
        self.output_dir = self.temp_dir / 'out'
        self.input_dir.mkdir()

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def write(self, name: str, data: bytes) -> Path:
        path = self.input_dir / name
        path.write_bytes(data)
        return path


class TestBatchOptimizer(BatchTestCase):

    def test_failure_does_not_stop_run(self):
        self.write('a.png', make_image_bytes((640, 480), fmt='PNG'))
        self.write('b.jpg', b'this is not a jpeg')
        self.write('c.png', make_image_bytes((320, 240), fmt='PNG'))

        batch = BatchOptimizer(request=OptimizationRequest(width=400), verbose=False)
        results = batch.run(self.input_dir, self.output_dir)

        by_name = {r.input_path.name: r for r in results}
        self.assertEqual(len(results), 3)
        self.assertTrue(by_name['a.png'].success)
        self.assertFalse(by_name['b.jpg'].success)
        self.assertTrue(by_name['c.png'].success)

        self.assertEqual(open_bytes((self.output_dir / 'a-optimized.jpg').read_bytes()).size, (400, 300))
        self.assertEqual(open_bytes((self.output_dir / 'c-optimized.jpg').read_bytes()).size, (320, 240))

    def test_smaller_original_left_untouched(self):
        tiny = make_image_bytes((64, 64), fmt='JPEG', noise=60, quality=5)
        self.write('tiny.jpg', tiny)

        batch = BatchOptimizer(request=OptimizationRequest(quality=85), verbose=False)
        [result] = batch.run(self.input_dir, self.output_dir)

        self.assertTrue(result.success)
        self.assertTrue(result.kept_original)
        self.assertEqual(result.written, [])
        self.assertFalse((self.output_dir / 'tiny-optimized.jpg').exists())
        self.assertEqual((self.input_dir / 'tiny.jpg').read_bytes(), tiny)

    def test_derived_files_skipped(self):
        self.write('hero.png', make_image_bytes((100, 100), fmt='PNG'))
        self.write('hero-mobile.jpg', make_image_bytes((100, 100), fmt='JPEG'))
        self.write('notes.txt', b'hello')

        images = BatchOptimizer(verbose=False).find_images(self.input_dir)

        self.assertEqual([p.name for p in images], ['hero.png'])

    def test_rerun_in_place_skips_own_outputs(self):
        self.write('hero.png', make_image_bytes((1500, 1000), fmt='PNG'))
        self.write('banner.jpg', make_image_bytes((900, 300), fmt='JPEG'))

        batch = BatchOptimizer(responsive=True, verbose=False)
        batch.run(self.input_dir, self.input_dir)

        images = batch.find_images(self.input_dir)
        self.assertEqual([p.name for p in images], ['banner.jpg', 'hero.png'])

    def test_responsive_bundle_written(self):
        self.write('hero.png', make_image_bytes((1500, 1000), fmt='PNG'))

        batch = BatchOptimizer(responsive=True, mobile_webp=True, verbose=False)
        [result] = batch.run(self.input_dir, self.output_dir)

        self.assertTrue(result.success)
        self.assertEqual(sorted(p.name for p in self.output_dir.iterdir()), [
            'hero-desktop.jpg',
            'hero-mobile.jpg',
            'hero-mobile.webp',
            'hero-optimized.jpg',
            'hero-tablet.jpg',
            'hero.webp',
        ])

    def test_failed_bundle_writes_nothing(self):
        self.write('broken.png', b'\x89PNG\r\n\x1a\n garbage')

        batch = BatchOptimizer(responsive=True, verbose=False)
        [result] = batch.run(self.input_dir, self.output_dir)

        self.assertFalse(result.success)
        self.assertEqual(list(self.output_dir.iterdir()), [])

    def test_write_error_leaves_no_partial_bundle(self):
        self.write('hero.png', make_image_bytes((1500, 1000), fmt='PNG'))
        # A directory squatting on one output name makes that rename fail
        (self.output_dir / 'hero-desktop.jpg').mkdir(parents=True)

        batch = BatchOptimizer(responsive=True, mobile_webp=True, verbose=False)
        [result] = batch.run(self.input_dir, self.output_dir)

        self.assertFalse(result.success)
        self.assertEqual(result.written, [])
        self.assertEqual([p.name for p in self.output_dir.iterdir()], ['hero-desktop.jpg'])
        self.assertTrue((self.output_dir / 'hero-desktop.jpg').is_dir())

    def test_bundle_replaces_previous_outputs(self):
        self.write('hero.png', make_image_bytes((1500, 1000), fmt='PNG'))
        self.output_dir.mkdir()
        (self.output_dir / 'hero-mobile.jpg').write_bytes(b'stale')

        batch = BatchOptimizer(responsive=True, verbose=False)
        [result] = batch.run(self.input_dir, self.output_dir)

        self.assertTrue(result.success)
        self.assertEqual(open_bytes((self.output_dir / 'hero-mobile.jpg').read_bytes()).size, (480, 320))
        self.assertFalse(any(p.name.endswith('.partial') for p in self.output_dir.iterdir()))


class TestCli(BatchTestCase):

    def test_directory_run(self):
        self.write('a.png', make_image_bytes((640, 480), fmt='PNG'))

        code = compress.main([str(self.input_dir), '-o', str(self.output_dir),
                              '--format', 'webp', '--width', '320', '-q'])

        self.assertEqual(code, 0)
        img = open_bytes((self.output_dir / 'a-optimized.webp').read_bytes())
        self.assertEqual(img.format, 'WEBP')
        self.assertEqual(img.size, (320, 240))

    def test_failure_exit_code(self):
        self.write('bad.jpg', b'nope')

        code = compress.main([str(self.input_dir), '-o', str(self.output_dir), '-q'])

        self.assertEqual(code, 1)

    def test_missing_input(self):
        self.assertEqual(compress.main([str(self.temp_dir / 'missing'), '-q']), 1)

    def test_invalid_max_size_is_usage_error(self):
        self.write('a.png', make_image_bytes((64, 64), fmt='PNG'))

        with self.assertRaises(SystemExit) as cm:
            compress.main([str(self.input_dir), '--max-size', 'lots', '-q'])

        self.assertEqual(cm.exception.code, 2)


if __name__ == '__main__':
    unittest.main()
