from .archive import ArchiveConverter
from .audio import AudioConverter
from .base import Converter
from .document import DocumentConverter
from .image import ImageConverter
from .video import VideoConverter

__all__ = [
    "ArchiveConverter",
    "AudioConverter",
    "Converter",
    "DocumentConverter",
    "ImageConverter",
    "VideoConverter",
    "default_converters",
]


def default_converters() -> list[Converter]:
    return [ImageConverter(), AudioConverter(), VideoConverter(), DocumentConverter(), ArchiveConverter()]
