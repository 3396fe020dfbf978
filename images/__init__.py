"""
Image decoding, resizing and WebP encoding built on Pillow.
"""
from .exceptions import DecoderError, EncoderError, ImageProcessorError, ProcessingError
from .processor import ImageProcessor

__all__ = [
    'ImageProcessor',
    'ImageProcessorError',
    'DecoderError',
    'EncoderError',
    'ProcessingError',
]
