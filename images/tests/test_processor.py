import io
import os
import tempfile

from django.test import SimpleTestCase
from PIL import Image

from images import DecoderError, ImageProcessor, ProcessingError


def make_image(size=(300, 200), mode='RGB', image_format='PNG'):
    buffer = io.BytesIO()
    Image.new(mode, size, color='red' if mode == 'RGB' else None).save(buffer, format=image_format)
    buffer.seek(0)
    return buffer


class ImageProcessorTest(SimpleTestCase):
    """Tests for the Pillow backed image pipeline."""

    def test_read_reports_format_and_size(self):
        processor = ImageProcessor().read(make_image())
        self.assertEqual(processor.format, 'PNG')
        self.assertEqual(processor.size, (300, 200))

    def test_read_accepts_bytes(self):
        processor = ImageProcessor().read(make_image().getvalue())
        self.assertEqual(processor.size, (300, 200))

    def test_read_rejects_non_image(self):
        with self.assertRaises(DecoderError):
            ImageProcessor().read(io.BytesIO(b'definitely not an image'))

    def test_operations_require_an_image(self):
        with self.assertRaises(ProcessingError):
            ImageProcessor().cover(10, 10)

    def test_cover_produces_exact_dimensions(self):
        processor = ImageProcessor().read(make_image((300, 200))).cover(128, 128)
        self.assertEqual(processor.size, (128, 128))

    def test_save_webp_returns_bytes(self):
        data = ImageProcessor().read(make_image()).cover(64, 64).to_webp().optimize().save()

        image = Image.open(io.BytesIO(data))
        self.assertEqual(image.format, 'WEBP')
        self.assertEqual(image.size, (64, 64))

    def test_save_converts_palette_images(self):
        data = ImageProcessor().read(make_image(mode='P')).to_webp().save()
        self.assertEqual(Image.open(io.BytesIO(data)).format, 'WEBP')

    def test_save_to_path(self):
        with tempfile.TemporaryDirectory() as directory:
            path = os.path.join(directory, 'avatar.webp')
            result = ImageProcessor().read(make_image()).cover(32, 32).to_webp().save(path)

            self.assertIsNone(result)
            with Image.open(path) as image:
                self.assertEqual(image.size, (32, 32))
