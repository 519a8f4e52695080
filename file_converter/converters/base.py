"""Common shape of the per-category converter collaborators."""
from pathlib import Path

from file_converter.conversion.models import FileCategory, FileFormat


class Converter:
    """Converts one staged file into one output file for a single category.

    ``targets`` lists every format the converter can encode; the router checks
    it against the conversion graph at startup. ``convert`` raises on failure
    (``ConversionFailedError`` for known gaps, anything else for codec errors).
    """

    category: FileCategory
    targets: frozenset[FileFormat] = frozenset()

    def convert(self, input_path: Path, output_path: Path, source: FileFormat, target: FileFormat) -> None:
        raise NotImplementedError
