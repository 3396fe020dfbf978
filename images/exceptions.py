class ImageProcessorError(Exception):
    """Base exception for image processing failures."""
    pass


class DecoderError(ImageProcessorError):
    """The input could not be read as an image."""
    pass


class EncoderError(ImageProcessorError):
    """The image could not be encoded or written."""
    pass


class ProcessingError(ImageProcessorError):
    """An operation was attempted in the wrong state."""
    pass
